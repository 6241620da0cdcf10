import json
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from reconcile.cli.commands import audit
from reconcile.schemas.audit import MetadataBlobStatus


@contextmanager
def _patched(session):
    with patch("reconcile.cli.commands.audit.Session") as mock_session, \
         patch("reconcile.cli.commands.audit.setup_cli_logging"), \
         patch("reconcile.cli.commands.audit.engine"):
        mock_session.return_value.__enter__.return_value = session
        yield


def test_audit_thumbnails(test_db, asset_factory):
    for _ in range(10):
        asset_factory(thumbnail_path=None)

    with _patched(test_db):
        report = audit.audit_thumbnails(verbose=False)

    assert report.missing == 10
    assert len(report.offenders) == 5


def test_audit_thumbnails_database_error_is_shown_inline():
    session = MagicMock()
    session.exec.side_effect = OperationalError("SELECT", {}, Exception("no such table: Asset"))

    with _patched(session):
        report = audit.audit_thumbnails(verbose=False)

    assert report.error
    assert report.total == 0


def test_audit_descriptions(test_db, asset_factory):
    asset_factory(filename="migration/1_a.jpg", ai_data=json.dumps({"caption": "Barn"}))
    asset_factory(filename="migration/2_b.jpg", ai_data="not json")

    with _patched(test_db):
        report = audit.audit_descriptions(prefix="migration/", verbose=False)

    assert [row.status for row in report.rows] == [
        MetadataBlobStatus.PARSED,
        MetadataBlobStatus.UNPARSABLE,
    ]


def test_audit_descriptions_without_matches(test_db):
    with _patched(test_db):
        report = audit.audit_descriptions(prefix="migration/", verbose=False)

    assert report.rows == []


def test_audit_previews(test_db, asset_factory):
    asset_factory(mime_type="video/mp4", preview_frames=["https://storage.capy-dev.com/1.jpg"])

    with _patched(test_db):
        report = audit.audit_previews(target_marker="capy-dev.com", verbose=False)

    assert report.migrated == 1
    assert len(report.samples) == 1


def test_audit_thumbnail_integrity(test_db, asset_factory):
    asset_factory(path="uploads/a.jpg", thumbnail_path="uploads/a.jpg")

    with _patched(test_db):
        report = audit.audit_thumbnail_integrity(verbose=False)

    assert report.suspicious == 1


def test_audit_chat_attachments(test_db, chat_graph):
    with _patched(test_db):
        report = audit.audit_chat_attachments(limit=20, verbose=False)

    assert report.with_attachment == 1


def test_list_filenames(test_db, asset_factory):
    asset_factory(filename="migration/1_a.jpg", original_name="a.jpg")

    with _patched(test_db):
        listing = audit.list_filenames(limit=10, verbose=False)

    assert listing.rows[0].filename == "migration/1_a.jpg"
