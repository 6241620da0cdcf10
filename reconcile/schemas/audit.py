"""
Completeness audit schemas.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from reconcile.services.reference_classifier import ReferenceState

DESCRIPTIVE_TEXT_KEYS = ("description", "summary", "caption")


class ThumbnailOffender(BaseModel):
    id: str
    filename: str
    mime_type: str


class ThumbnailAuditReport(BaseModel):
    """Presence of thumbnail paths across all assets."""
    total: int = 0
    present: int = 0
    missing: int = 0
    offenders: List[ThumbnailOffender] = Field(default_factory=list)
    error: Optional[str] = None

    @computed_field
    def complete(self) -> bool:
        return self.error is None and self.missing == 0


class MetadataBlobStatus(str, Enum):
    """Outcome of decoding an asset's descriptive metadata blob."""
    MISSING = "missing"
    UNPARSABLE = "unparsable"
    PARSED = "parsed"


class KeyState(str, Enum):
    PRESENT = "present"
    EMPTY = "empty"
    ABSENT = "absent"


class KeyPresence(BaseModel):
    state: KeyState
    preview: Optional[str] = None


class DescriptionRow(BaseModel):
    """
    Per-asset result. ``keys`` is only filled for PARSED blobs, so an
    unparsable blob is never read as "all keys absent".
    """
    id: str
    filename: str
    status: MetadataBlobStatus
    keys: Dict[str, KeyPresence] = Field(default_factory=dict)
    error: Optional[str] = None
    raw_preview: Optional[str] = None

    def state_of(self, key: str) -> Optional[KeyState]:
        presence = self.keys.get(key)
        return presence.state if presence else None


class DescriptionAuditReport(BaseModel):
    prefix: str
    rows: List[DescriptionRow] = Field(default_factory=list)
    error: Optional[str] = None

    @computed_field
    def unparsable(self) -> int:
        return sum(1 for row in self.rows if row.status == MetadataBlobStatus.UNPARSABLE)

    @computed_field
    def missing_blob(self) -> int:
        return sum(1 for row in self.rows if row.status == MetadataBlobStatus.MISSING)


class PreviewSample(BaseModel):
    id: str
    url: str


class PreviewFrameAuditReport(BaseModel):
    """Deep verification of video scrub frames, judged by the first frame."""
    total: int = 0
    migrated: int = 0
    pending: int = 0
    empty: int = 0
    unrecognized: int = 0
    samples: List[PreviewSample] = Field(default_factory=list)
    target_marker: Optional[str] = None
    error: Optional[str] = None


class ThumbnailIntegrityRow(BaseModel):
    id: str
    filename: str
    path: Optional[str] = None
    thumbnail_path: str
    suspicious: bool
    reason: Optional[str] = None


class ThumbnailIntegrityReport(BaseModel):
    rows: List[ThumbnailIntegrityRow] = Field(default_factory=list)
    error: Optional[str] = None

    @computed_field
    def suspicious(self) -> int:
        return sum(1 for row in self.rows if row.suspicious)


class ChatAttachmentRow(BaseModel):
    id: str
    created_at: datetime
    content: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_type: Optional[str] = None
    attachment_url: Optional[str] = None
    reference_state: ReferenceState

    @computed_field
    def has_attachment(self) -> bool:
        return self.reference_state != ReferenceState.EMPTY


class ChatAttachmentReport(BaseModel):
    rows: List[ChatAttachmentRow] = Field(default_factory=list)
    error: Optional[str] = None

    @computed_field
    def with_attachment(self) -> int:
        return sum(1 for row in self.rows if row.has_attachment)


class FilenameRow(BaseModel):
    id: str
    filename: str
    original_name: str


class FilenameListing(BaseModel):
    rows: List[FilenameRow] = Field(default_factory=list)
    error: Optional[str] = None
