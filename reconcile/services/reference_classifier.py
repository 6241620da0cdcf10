"""
Classification of stored media references.

A reference is either empty, still pointing at the old storage provider
(its value embeds the provider's host fragment), or local.
"""
from enum import Enum
from typing import Any, Optional


class ReferenceState(str, Enum):
    """Migration state of a single reference value."""
    EMPTY = "empty"
    EXTERNAL = "external"
    LOCAL = "local"


class DestinationState(str, Enum):
    """Where a reference points once the new storage host is known."""
    EMPTY = "empty"
    PENDING = "pending"
    MIGRATED = "migrated"
    UNRECOGNIZED = "unrecognized"


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value if isinstance(value, str) else str(value)


def classify_reference(value: Any, marker: str) -> ReferenceState:
    """
    Classify a reference value against the external storage marker.

    Matching is a case-sensitive substring test; no URL parsing is done.
    Anything that is neither empty nor contains the marker is LOCAL, so the
    function is total and never raises for odd input.

    Args:
        value: Stored reference (string, None, or anything stringifiable)
        marker: Host fragment identifying the old provider, e.g. "supabase.co"

    Returns:
        ReferenceState
    """
    text = _as_text(value)
    if not text:
        return ReferenceState.EMPTY
    if marker and marker in text:
        return ReferenceState.EXTERNAL
    return ReferenceState.LOCAL


def classify_destination(value: Any, external_marker: str, target_marker: Optional[str] = None) -> DestinationState:
    """
    Finer classification used by deep verification.

    With a target marker configured, a non-external value that does not
    contain it is UNRECOGNIZED (broken link or bare relative path). Without
    one every non-external value counts as MIGRATED.
    """
    state = classify_reference(value, external_marker)
    if state is ReferenceState.EMPTY:
        return DestinationState.EMPTY
    if state is ReferenceState.EXTERNAL:
        return DestinationState.PENDING
    if not target_marker or target_marker in _as_text(value):
        return DestinationState.MIGRATED
    return DestinationState.UNRECOGNIZED


def first_of_sequence(value: Any) -> Optional[Any]:
    """Return the head of a stored sequence, or None when there is none."""
    if isinstance(value, (list, tuple)) and value:
        return value[0]
    return None
