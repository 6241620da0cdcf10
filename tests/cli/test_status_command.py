from unittest.mock import patch

import pytest
import typer

from reconcile.cli.commands.status import migration_status

EXTERNAL_URL = "https://xyz.supabase.co/storage/v1/object/public/assets/x.png"


def _run_status(session, probe=None):
    with patch("reconcile.cli.commands.status.Session") as mock_session, \
         patch("reconcile.cli.commands.status.setup_cli_logging"), \
         patch("reconcile.cli.commands.status.engine"):
        mock_session.return_value.__enter__.return_value = session
        return migration_status(probe=probe, verbose=False)


def test_status_reports_remaining_external_references(test_db, asset_factory):
    asset_factory(path=EXTERNAL_URL, thumbnail_path="/uploads/thumb.png")

    report = _run_status(test_db)

    assert report.fully_migrated is False
    assert report.get("asset_path").external == 1
    assert report.get("asset_thumbnail").local == 1


def test_status_on_empty_database(test_db):
    report = _run_status(test_db)

    assert report.fully_migrated is True
    assert all(probe.completion_percent == 100.0 for probe in report.probes)


def test_status_single_probe(test_db, asset_factory):
    asset_factory(path=EXTERNAL_URL)

    report = _run_status(test_db, probe=["asset_thumbnail"])

    assert [probe.name for probe in report.probes] == ["asset_thumbnail"]
    assert report.fully_migrated is True


def test_status_unknown_probe_exits_with_usage_error(test_db):
    with pytest.raises(typer.Exit) as exc_info:
        _run_status(test_db, probe=["does_not_exist"])

    assert exc_info.value.exit_code == 2
