"""
Probe descriptors: which column holds a reference on each entity kind and
how to read it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, SQLModel, select

from reconcile.core.exceptions import ProbeNotFoundError
from reconcile.models import Asset, Category, Collection, Feedback, Message, User
from reconcile.services.reference_classifier import first_of_sequence

# Raised while streaming one probe: database errors, and cells the column type
# cannot decode (e.g. a malformed JSON previewFrames value on SQLite).
STREAM_ERRORS = (SQLAlchemyError, ValueError, TypeError)


class FieldShape(str, Enum):
    SCALAR = "scalar"
    FIRST_OF_SEQUENCE = "first_of_sequence"


@dataclass(frozen=True, eq=False)
class MigrationProbe:
    """
    Descriptor for one reference field on one entity kind.

    Streams ``(id, raw_value)`` pairs with keyset pagination on the primary
    key, projecting only those two columns.
    """
    name: str
    entity: str
    label: str
    model: type[SQLModel]
    column: str
    shape: FieldShape = FieldShape.SCALAR
    where: Optional[Callable[[], ColumnElement]] = None

    def stream(self, session: Session, batch_size: int) -> Iterator[Tuple[str, Any]]:
        id_column = self.model.id
        ref_column = getattr(self.model, self.column)
        last_id = None

        while True:
            statement = select(id_column, ref_column)
            if self.where is not None:
                statement = statement.where(self.where())
            if last_id is not None:
                statement = statement.where(id_column > last_id)
            statement = statement.order_by(id_column).limit(batch_size)

            rows = session.exec(statement).all()
            # End the read transaction between batches to avoid long-running transactions
            session.commit()

            for row_id, value in rows:
                yield row_id, value

            if len(rows) < batch_size:
                break
            last_id = rows[-1][0]

    def extract(self, raw_value: Any) -> Any:
        """Return the value to classify; sequences are judged by their head only."""
        if self.shape == FieldShape.FIRST_OF_SEQUENCE:
            return first_of_sequence(raw_value)
        return raw_value


PREVIEW_FRAMES_PROBE = MigrationProbe(
    name="asset_preview_frames",
    entity="PrimaryAsset",
    label="Assets (Preview Frames)",
    model=Asset,
    column="preview_frames",
    shape=FieldShape.FIRST_OF_SEQUENCE,
    where=lambda: Asset.mime_type.startswith("video/"),
)

DEFAULT_PROBES: List[MigrationProbe] = [
    MigrationProbe(
        name="asset_path",
        entity="PrimaryAsset",
        label="Assets (Main)",
        model=Asset,
        column="path",
    ),
    MigrationProbe(
        name="asset_thumbnail",
        entity="PrimaryAsset",
        label="Assets (Thumbnails)",
        model=Asset,
        column="thumbnail_path",
    ),
    PREVIEW_FRAMES_PROBE,
    MigrationProbe(
        name="user_avatar",
        entity="Account",
        label="Users (Avatars)",
        model=User,
        column="avatar",
    ),
    MigrationProbe(
        name="collection_cover",
        entity="Collection",
        label="Collections (Covers)",
        model=Collection,
        column="cover_image",
    ),
    MigrationProbe(
        name="category_cover",
        entity="Category",
        label="Categories (Covers)",
        model=Category,
        column="cover_image",
    ),
    MigrationProbe(
        name="feedback_attachment",
        entity="FeedbackRecord",
        label="Feedback (Attachments)",
        model=Feedback,
        column="attachment",
    ),
    MigrationProbe(
        name="message_attachment",
        entity="ChatMessage",
        label="Chat Messages (Attachments)",
        model=Message,
        column="attachment_url",
    ),
]


def probe_names(probes: Iterable[MigrationProbe] = DEFAULT_PROBES) -> List[str]:
    return [probe.name for probe in probes]


def select_probes(
    names: Optional[Sequence[str]],
    probes: Sequence[MigrationProbe] = DEFAULT_PROBES,
) -> List[MigrationProbe]:
    """Pick probes by name, keeping registry order. No names means all probes."""
    if not names:
        return list(probes)

    known = {probe.name: probe for probe in probes}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise ProbeNotFoundError(
            f"Unknown probe(s): {', '.join(unknown)}. Available: {', '.join(known)}"
        )
    wanted = set(names)
    return [probe for probe in probes if probe.name in wanted]
