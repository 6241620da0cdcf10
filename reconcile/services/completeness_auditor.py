"""
Completeness audits for derived artifacts.

These checks look at whether thumbnails and AI-derived descriptive text
exist at all, independently of where the references point. Each check
isolates its own database failure and reports it inline.
"""
import json
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from reconcile.core.config import settings
from reconcile.core.exceptions import describe_error
from reconcile.core.logging_config import LogCategory, log_error, log_info
from reconcile.models import Asset, Message
from reconcile.schemas.audit import (
    DESCRIPTIVE_TEXT_KEYS,
    ChatAttachmentReport,
    ChatAttachmentRow,
    DescriptionAuditReport,
    DescriptionRow,
    FilenameListing,
    FilenameRow,
    KeyPresence,
    KeyState,
    MetadataBlobStatus,
    PreviewFrameAuditReport,
    PreviewSample,
    ThumbnailAuditReport,
    ThumbnailIntegrityReport,
    ThumbnailIntegrityRow,
    ThumbnailOffender,
)
from reconcile.services.migration_probes import PREVIEW_FRAMES_PROBE, STREAM_ERRORS
from reconcile.services.reference_classifier import (
    DestinationState,
    classify_destination,
    classify_reference,
)

PREVIEW_SAMPLE_SIZE = 5
RECENT_MESSAGES_LIMIT = 20
FILENAME_LISTING_LIMIT = 10
THUMBNAIL_FOLDER = "thumbnails/"
RAW_BLOB_PREVIEW = 80


def _key_presence(data: Dict[str, Any], key: str, preview_length: int) -> KeyPresence:
    if key not in data:
        return KeyPresence(state=KeyState.ABSENT)

    value = data[key]
    # Empty containers count as empty values, like blank strings
    if value in (None, [], {}) or (isinstance(value, str) and not value.strip()):
        return KeyPresence(state=KeyState.EMPTY)

    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
    return KeyPresence(state=KeyState.PRESENT, preview=text[:preview_length])


def parse_metadata_blob(
    raw: Any, preview_length: int
) -> Tuple[MetadataBlobStatus, Dict[str, KeyPresence], Optional[str]]:
    """
    Decode an asset's metadata blob.

    Returns:
        (status, key presences, error). Key presences are only filled for
        PARSED blobs; each of the three text keys is reported on its own.
    """
    if raw is None or raw == "":
        return MetadataBlobStatus.MISSING, {}, None

    if isinstance(raw, dict):
        data = raw
    else:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            return MetadataBlobStatus.UNPARSABLE, {}, str(exc)

    if not isinstance(data, dict):
        return (
            MetadataBlobStatus.UNPARSABLE,
            {},
            f"Expected a JSON object, got {type(data).__name__}",
        )

    keys = {key: _key_presence(data, key, preview_length) for key in DESCRIPTIVE_TEXT_KEYS}
    return MetadataBlobStatus.PARSED, keys, None


class CompletenessAuditor:
    """Presence checks with bounded, stable offender samples."""

    def __init__(
        self,
        session: Session,
        thumbnail_sample_size: Optional[int] = None,
        description_sample_size: Optional[int] = None,
        preview_length: Optional[int] = None,
    ):
        self.session = session
        self.thumbnail_sample_size = thumbnail_sample_size or settings.thumbnail_sample_size
        self.description_sample_size = description_sample_size or settings.description_sample_size
        self.preview_length = preview_length or settings.description_preview_length

    def _fail(self, exc: Exception, check: str) -> str:
        self.session.rollback()
        log_error(exc, check=check)
        return describe_error(exc)

    def audit_thumbnails(self) -> ThumbnailAuditReport:
        """Count assets with and without a thumbnail and sample the offenders."""
        missing_clause = or_(Asset.thumbnail_path.is_(None), Asset.thumbnail_path == "")
        try:
            total = self.session.exec(select(func.count(Asset.id))).one()
            missing = self.session.exec(
                select(func.count(Asset.id)).where(missing_clause)
            ).one()

            offenders = []
            if missing > 0:
                rows = self.session.exec(
                    select(Asset.id, Asset.filename, Asset.mime_type)
                    .where(missing_clause)
                    .order_by(Asset.created_at, Asset.id)
                    .limit(self.thumbnail_sample_size)
                ).all()
                offenders = [
                    ThumbnailOffender(id=row_id, filename=filename, mime_type=mime_type)
                    for row_id, filename, mime_type in rows
                ]
        except SQLAlchemyError as exc:
            return ThumbnailAuditReport(error=self._fail(exc, "thumbnails"))

        log_info(
            f"Thumbnail audit: total={total} missing={missing}",
            category=LogCategory.AUDIT,
        )
        return ThumbnailAuditReport(
            total=total,
            present=total - missing,
            missing=missing,
            offenders=offenders,
        )

    def audit_descriptions(self, prefix: Optional[str] = None) -> DescriptionAuditReport:
        """Check caption/summary/description on a sample of migrated assets."""
        prefix = prefix if prefix is not None else settings.migrated_filename_prefix
        try:
            rows = self.session.exec(
                select(Asset.id, Asset.filename, Asset.ai_data)
                .where(Asset.filename.startswith(prefix, autoescape=True))
                .order_by(Asset.created_at, Asset.id)
                .limit(self.description_sample_size)
            ).all()
        except SQLAlchemyError as exc:
            return DescriptionAuditReport(prefix=prefix, error=self._fail(exc, "descriptions"))

        report_rows = []
        for row_id, filename, raw in rows:
            status, keys, error = parse_metadata_blob(raw, self.preview_length)
            report_rows.append(
                DescriptionRow(
                    id=row_id,
                    filename=filename,
                    status=status,
                    keys=keys,
                    error=error,
                    raw_preview=str(raw)[:RAW_BLOB_PREVIEW] if status == MetadataBlobStatus.UNPARSABLE else None,
                )
            )

        report = DescriptionAuditReport(prefix=prefix, rows=report_rows)
        log_info(
            f"Description audit: sampled={len(report_rows)} unparsable={report.unparsable}",
            category=LogCategory.AUDIT,
        )
        return report

    def audit_preview_frames(
        self,
        target_marker: Optional[str] = None,
        batch_size: Optional[int] = None,
    ) -> PreviewFrameAuditReport:
        """Deep verification of scrub frames, judged by the first frame of each video."""
        target_marker = target_marker if target_marker is not None else settings.target_marker
        counts = {state: 0 for state in DestinationState}
        samples = []

        try:
            for row_id, frames in PREVIEW_FRAMES_PROBE.stream(
                self.session, batch_size or settings.scan_batch_size
            ):
                head = PREVIEW_FRAMES_PROBE.extract(frames)
                state = classify_destination(head, settings.external_marker, target_marker)
                counts[state] += 1
                if state == DestinationState.MIGRATED and len(samples) < PREVIEW_SAMPLE_SIZE:
                    samples.append(PreviewSample(id=row_id, url=str(head)))
        except STREAM_ERRORS as exc:
            return PreviewFrameAuditReport(
                target_marker=target_marker,
                error=self._fail(exc, "preview_frames"),
            )

        return PreviewFrameAuditReport(
            total=sum(counts.values()),
            migrated=counts[DestinationState.MIGRATED],
            pending=counts[DestinationState.PENDING],
            empty=counts[DestinationState.EMPTY],
            unrecognized=counts[DestinationState.UNRECOGNIZED],
            samples=samples,
            target_marker=target_marker,
        )

    def audit_thumbnail_integrity(self) -> ThumbnailIntegrityReport:
        """Flag thumbnails that look like the original file rather than a real thumbnail."""
        try:
            rows = self.session.exec(
                select(Asset.id, Asset.filename, Asset.path, Asset.thumbnail_path)
                .where(Asset.thumbnail_path.is_not(None), Asset.thumbnail_path != "")
                .order_by(Asset.created_at, Asset.id)
                .limit(self.thumbnail_sample_size)
            ).all()
        except SQLAlchemyError as exc:
            return ThumbnailIntegrityReport(error=self._fail(exc, "thumbnail_integrity"))

        report_rows = []
        for row_id, filename, path, thumbnail_path in rows:
            reason = None
            if thumbnail_path == path:
                reason = "thumbnail is the original file"
            elif THUMBNAIL_FOLDER not in thumbnail_path:
                reason = f"thumbnail is not under '{THUMBNAIL_FOLDER}'"
            report_rows.append(
                ThumbnailIntegrityRow(
                    id=row_id,
                    filename=filename,
                    path=path,
                    thumbnail_path=thumbnail_path,
                    suspicious=reason is not None,
                    reason=reason,
                )
            )
        return ThumbnailIntegrityReport(rows=report_rows)

    def audit_chat_attachments(self, limit: int = RECENT_MESSAGES_LIMIT) -> ChatAttachmentReport:
        """Most recent chat messages and whether they carry an attachment."""
        try:
            rows = self.session.exec(
                select(
                    Message.id,
                    Message.created_at,
                    Message.content,
                    Message.attachment_name,
                    Message.attachment_type,
                    Message.attachment_url,
                )
                .order_by(Message.created_at.desc(), Message.id.desc())
                .limit(limit)
            ).all()
        except SQLAlchemyError as exc:
            return ChatAttachmentReport(error=self._fail(exc, "chat_attachments"))

        return ChatAttachmentReport(
            rows=[
                ChatAttachmentRow(
                    id=row_id,
                    created_at=created_at,
                    content=content,
                    attachment_name=attachment_name,
                    attachment_type=attachment_type,
                    attachment_url=attachment_url,
                    reference_state=classify_reference(attachment_url, settings.external_marker),
                )
                for row_id, created_at, content, attachment_name, attachment_type, attachment_url in rows
            ]
        )

    def list_filenames(self, limit: int = FILENAME_LISTING_LIMIT) -> FilenameListing:
        """First assets in stable order, to eyeball stored vs. original names."""
        try:
            rows = self.session.exec(
                select(Asset.id, Asset.filename, Asset.original_name)
                .order_by(Asset.created_at, Asset.id)
                .limit(limit)
            ).all()
        except SQLAlchemyError as exc:
            return FilenameListing(error=self._fail(exc, "filenames"))

        return FilenameListing(
            rows=[
                FilenameRow(id=row_id, filename=filename, original_name=original_name)
                for row_id, filename, original_name in rows
            ]
        )
