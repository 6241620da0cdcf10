"""
Unit tests for CompletenessAuditor and metadata blob parsing.
"""
import json
from unittest.mock import MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from reconcile.schemas.audit import KeyState, MetadataBlobStatus
from reconcile.services.completeness_auditor import CompletenessAuditor, parse_metadata_blob
from reconcile.services.reference_classifier import ReferenceState

EXTERNAL_URL = "https://xyz.supabase.co/storage/v1/object/public/previews/1.jpg"


def make_auditor(session: Session) -> CompletenessAuditor:
    return CompletenessAuditor(
        session,
        thumbnail_sample_size=5,
        description_sample_size=10,
        preview_length=20,
    )


class TestParseMetadataBlob:
    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_blob(self, raw):
        status, keys, error = parse_metadata_blob(raw, 100)
        assert status == MetadataBlobStatus.MISSING
        assert keys == {}
        assert error is None

    def test_whitespace_blob_is_unparsable(self):
        status, keys, error = parse_metadata_blob("   ", 100)
        assert status == MetadataBlobStatus.UNPARSABLE
        assert keys == {}
        assert error

    def test_unparsable_blob_is_not_treated_as_absent_keys(self):
        status, keys, error = parse_metadata_blob('{"caption": "cut off', 100)
        assert status == MetadataBlobStatus.UNPARSABLE
        assert keys == {}
        assert error

    def test_json_that_is_not_an_object(self):
        status, _, error = parse_metadata_blob('["caption"]', 100)
        assert status == MetadataBlobStatus.UNPARSABLE
        assert "list" in error

    def test_summary_only(self):
        status, keys, _ = parse_metadata_blob(json.dumps({"summary": "A red barn in snow"}), 100)
        assert status == MetadataBlobStatus.PARSED
        assert keys["summary"].state == KeyState.PRESENT
        assert keys["summary"].preview == "A red barn in snow"
        assert keys["caption"].state == KeyState.ABSENT
        assert keys["description"].state == KeyState.ABSENT

    def test_empty_value_is_distinct_from_absent(self):
        _, keys, _ = parse_metadata_blob(json.dumps({"caption": "", "description": None}), 100)
        assert keys["caption"].state == KeyState.EMPTY
        assert keys["description"].state == KeyState.EMPTY
        assert keys["summary"].state == KeyState.ABSENT

    def test_preview_is_truncated(self):
        _, keys, _ = parse_metadata_blob(json.dumps({"description": "x" * 50}), 10)
        assert keys["description"].preview == "x" * 10

    def test_empty_containers_are_empty_values(self):
        _, keys, _ = parse_metadata_blob(json.dumps({"caption": [], "summary": {}, "description": ["x"]}), 100)
        assert keys["caption"].state == KeyState.EMPTY
        assert keys["summary"].state == KeyState.EMPTY
        assert keys["description"].state == KeyState.PRESENT


class TestThumbnailAudit:
    def test_ten_missing_thumbnails_sample_five(self, test_db: Session, asset_factory):
        assets = [asset_factory(thumbnail_path=None) for _ in range(10)]

        report = make_auditor(test_db).audit_thumbnails()

        assert report.total == 10
        assert report.missing == 10
        assert report.present == 0
        assert len(report.offenders) == 5
        assert [offender.id for offender in report.offenders] == [asset.id for asset in assets[:5]]
        assert report.offenders[0].mime_type == "image/jpeg"
        assert report.complete is False

    def test_empty_string_counts_as_missing(self, test_db: Session, asset_factory):
        asset_factory(thumbnail_path="")
        asset_factory(thumbnail_path="thumbnails/a.jpg")

        report = make_auditor(test_db).audit_thumbnails()

        assert report.missing == 1
        assert report.present == 1

    def test_all_present(self, test_db: Session, asset_factory):
        asset_factory(thumbnail_path="thumbnails/a.jpg")

        report = make_auditor(test_db).audit_thumbnails()

        assert report.complete is True
        assert report.offenders == []

    def test_database_failure_is_reported_inline(self):
        session = MagicMock()
        session.exec.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        report = CompletenessAuditor(session).audit_thumbnails()

        assert report.error
        session.rollback.assert_called_once()


class TestDescriptionAudit:
    def test_samples_only_migrated_assets(self, test_db: Session, asset_factory):
        asset_factory(filename="migration/1_a.jpg", ai_data=json.dumps({"summary": "Barn"}))
        asset_factory(filename="migration/2_b.jpg", ai_data="{not json")
        asset_factory(filename="migration/3_c.jpg", ai_data=None)
        asset_factory(filename="upload.jpg", ai_data=json.dumps({"caption": "Other"}))

        report = make_auditor(test_db).audit_descriptions(prefix="migration/")

        assert [row.filename for row in report.rows] == [
            "migration/1_a.jpg",
            "migration/2_b.jpg",
            "migration/3_c.jpg",
        ]
        parsed, unparsable, missing = report.rows
        assert parsed.state_of("summary") == KeyState.PRESENT
        assert parsed.state_of("caption") == KeyState.ABSENT
        assert unparsable.status == MetadataBlobStatus.UNPARSABLE
        assert unparsable.raw_preview == "{not json"
        assert unparsable.state_of("caption") is None
        assert missing.status == MetadataBlobStatus.MISSING
        assert report.unparsable == 1
        assert report.missing_blob == 1

    def test_sample_is_bounded(self, test_db: Session, asset_factory):
        for index in range(12):
            asset_factory(filename=f"migration/{index}_a.jpg")

        report = make_auditor(test_db).audit_descriptions(prefix="migration/")

        assert len(report.rows) == 10

    def test_prefix_wildcards_are_literal(self, test_db: Session, asset_factory):
        asset_factory(filename="legacy_import/1_a.jpg")
        asset_factory(filename="legacyXimport/2_b.jpg")

        report = make_auditor(test_db).audit_descriptions(prefix="legacy_import/")

        assert [row.filename for row in report.rows] == ["legacy_import/1_a.jpg"]


class TestPreviewFrameAudit:
    def test_first_frame_decides(self, test_db: Session, asset_factory):
        migrated = asset_factory(
            mime_type="video/mp4",
            preview_frames=["https://storage.capy-dev.com/p/1.jpg", EXTERNAL_URL],
        )
        asset_factory(mime_type="video/mp4", preview_frames=[EXTERNAL_URL])
        asset_factory(mime_type="video/mp4", preview_frames=[])
        asset_factory(mime_type="video/mp4", preview_frames=["/tmp/frame.jpg"])
        asset_factory(mime_type="image/png", preview_frames=[EXTERNAL_URL])

        report = make_auditor(test_db).audit_preview_frames(target_marker="capy-dev.com", batch_size=2)

        assert report.total == 4
        assert report.migrated == 1
        assert report.pending == 1
        assert report.empty == 1
        assert report.unrecognized == 1
        assert [sample.id for sample in report.samples] == [migrated.id]

    def test_undecodable_frames_are_reported_inline(self, test_db: Session, asset_factory):
        video = asset_factory(mime_type="video/mp4", preview_frames=None)
        test_db.exec(
            text('UPDATE "Asset" SET "previewFrames" = \'not json\' WHERE id = :id').bindparams(id=video.id)
        )
        test_db.commit()

        report = make_auditor(test_db).audit_preview_frames(target_marker="capy-dev.com")

        assert report.error
        assert report.total == 0


class TestThumbnailIntegrity:
    def test_flags_thumbnails_that_are_the_original(self, test_db: Session, asset_factory):
        asset_factory(path="uploads/a.jpg", thumbnail_path="uploads/a.jpg")
        asset_factory(path="uploads/b.jpg", thumbnail_path="uploads/thumbnails/b.jpg")
        asset_factory(path="uploads/c.jpg", thumbnail_path="uploads/c_small.jpg")

        report = make_auditor(test_db).audit_thumbnail_integrity()

        assert [row.suspicious for row in report.rows] == [True, False, True]
        assert report.suspicious == 2
        assert report.rows[0].reason == "thumbnail is the original file"


class TestChatAttachments:
    def test_newest_first_with_attachment_state(self, test_db: Session, chat_graph):
        report = make_auditor(test_db).audit_chat_attachments(limit=20)

        assert [row.content for row in report.rows] == ["See attached", "Hello"]
        assert report.rows[0].reference_state == ReferenceState.EXTERNAL
        assert report.rows[0].has_attachment is True
        assert report.rows[1].has_attachment is False
        assert report.with_attachment == 1


def test_list_filenames(test_db: Session, asset_factory):
    asset_factory(filename="migration/1_a.jpg", original_name="a.jpg")
    asset_factory(filename="migration/2_b.jpg", original_name="b.jpg")

    listing = make_auditor(test_db).list_filenames(limit=1)

    assert len(listing.rows) == 1
    assert listing.rows[0].original_name == "a.jpg"
