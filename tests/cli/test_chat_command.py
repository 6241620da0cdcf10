from unittest.mock import MagicMock, patch

import pytest
import typer
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from reconcile.cli.commands.chat import clear_chat
from reconcile.core.exceptions import TeardownStepError
from reconcile.models import ChatRoom, Message
from reconcile.schemas.teardown import TeardownStepResult


def _count(session, model) -> int:
    return session.exec(select(func.count()).select_from(model)).one()


def test_clear_chat_dry_run(test_db, chat_graph):
    with patch("reconcile.cli.commands.chat.Session") as mock_session, \
         patch("reconcile.cli.commands.chat.confirm_action") as mock_confirm, \
         patch("reconcile.cli.commands.chat.setup_cli_logging"), \
         patch("reconcile.cli.commands.chat.engine"):
        mock_session.return_value.__enter__.return_value = test_db

        with pytest.raises(typer.Exit) as exc_info:
            clear_chat(dry_run=True, force=False, verbose=False)

    assert exc_info.value.exit_code == 0
    mock_confirm.assert_not_called()
    assert _count(test_db, Message) == 2


def test_clear_chat_cancelled(test_db, chat_graph):
    with patch("reconcile.cli.commands.chat.Session") as mock_session, \
         patch("reconcile.cli.commands.chat.confirm_action", return_value=False), \
         patch("reconcile.cli.commands.chat.setup_cli_logging"), \
         patch("reconcile.cli.commands.chat.engine"):
        mock_session.return_value.__enter__.return_value = test_db

        with pytest.raises(typer.Exit) as exc_info:
            clear_chat(dry_run=False, force=False, verbose=False)

    assert exc_info.value.exit_code == 0
    assert _count(test_db, ChatRoom) == 1


def test_clear_chat_confirmed(test_db, chat_graph):
    with patch("reconcile.cli.commands.chat.Session") as mock_session, \
         patch("reconcile.cli.commands.chat.confirm_action", return_value=True), \
         patch("reconcile.cli.commands.chat.setup_cli_logging"), \
         patch("reconcile.cli.commands.chat.engine"):
        mock_session.return_value.__enter__.return_value = test_db

        report = clear_chat(dry_run=False, force=False, verbose=False)

    assert report.total_deleted == 6
    assert _count(test_db, ChatRoom) == 0


def test_clear_chat_failure_exits_with_error():
    failure = TeardownStepError(
        "Message",
        Exception("database is locked"),
        [TeardownStepResult(table="Notification", deleted=1), TeardownStepResult(table="Reaction", deleted=0)],
    )

    with patch("reconcile.cli.commands.chat.Session") as mock_session, \
         patch("reconcile.cli.commands.chat.TeardownService") as mock_service, \
         patch("reconcile.cli.commands.chat.setup_cli_logging"), \
         patch("reconcile.cli.commands.chat.engine"):
        mock_session.return_value.__enter__.return_value = MagicMock()
        mock_service.return_value.counts.return_value = []
        mock_service.return_value.run.side_effect = failure

        with pytest.raises(typer.Exit) as exc_info:
            clear_chat(dry_run=False, force=True, verbose=False)

    assert exc_info.value.exit_code == 1


def test_clear_chat_count_failure_is_reported():
    session = MagicMock()
    session.exec.side_effect = OperationalError("SELECT count(*)", {}, Exception("no such table: Notification"))

    with patch("reconcile.cli.commands.chat.Session") as mock_session, \
         patch("reconcile.cli.commands.chat.confirm_action") as mock_confirm, \
         patch("reconcile.cli.commands.chat.setup_cli_logging"), \
         patch("reconcile.cli.commands.chat.engine"):
        mock_session.return_value.__enter__.return_value = session

        with pytest.raises(typer.Exit) as exc_info:
            clear_chat(dry_run=True, force=False, verbose=False)

    assert exc_info.value.exit_code == 1
    session.rollback.assert_called_once()
    mock_confirm.assert_not_called()
