"""
Legacy metadata introspection schemas.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class LegacyStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class LegacyFieldRecord(BaseModel):
    """One joined node row: which field it belongs to and its value."""
    field_id: int
    field_title: str
    value: Optional[str] = None


class LegacyLookup(BaseModel):
    """
    Result of introspecting one legacy resource.

    The set of fields is open per resource; nothing here assumes a fixed
    schema.
    """
    resource_id: int
    status: LegacyStatus
    records: List[LegacyFieldRecord] = Field(default_factory=list)
    error: Optional[str] = None

    @computed_field
    def message(self) -> str:
        if self.status == LegacyStatus.FOUND:
            return f"{len(self.records)} legacy field values found"
        if self.status == LegacyStatus.NOT_FOUND:
            return "No legacy data found"
        return f"Introspection failed: {self.error}"

    def fields_by_title(self) -> Dict[str, List[Optional[str]]]:
        """Field title -> values, in query order. Multi-node fields keep every value."""
        mapping: Dict[str, List[Optional[str]]] = {}
        for record in self.records:
            mapping.setdefault(record.field_title, []).append(record.value)
        return mapping
