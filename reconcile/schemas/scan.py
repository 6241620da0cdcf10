"""
Migration status scan schemas.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class ProbeResult(BaseModel):
    """Counts produced by one probe. Built per probe and merged by the caller."""
    name: str
    entity: str
    label: str
    total: int = 0
    external: int = 0
    local: int = 0
    empty: int = 0
    error: Optional[str] = None
    empty_counts_as_migrated: bool = True

    @computed_field
    def migrated(self) -> int:
        """Rows that no longer point at the old provider."""
        if self.empty_counts_as_migrated:
            return self.local + self.empty
        return self.local

    @computed_field
    def completion_percent(self) -> float:
        """
        Share of migrated rows; 100% when there is nothing to migrate.

        Under the default policy an entity without a reference is vacuously
        complete. With the policy off, empty rows are left out of the ratio.
        """
        denominator = self.total if self.empty_counts_as_migrated else self.local + self.external
        if denominator == 0:
            return 100.0
        return (self.migrated / denominator) * 100

    @computed_field
    def ok(self) -> bool:
        return self.error is None


class ScanReport(BaseModel):
    """System-wide migration status."""
    probes: List[ProbeResult] = Field(default_factory=list)

    @computed_field
    def fully_migrated(self) -> bool:
        """True only if every probe ran and none found an external reference."""
        return all(probe.ok and probe.external == 0 for probe in self.probes)

    @computed_field
    def total_scanned(self) -> int:
        return sum(probe.total for probe in self.probes)

    @computed_field
    def total_external(self) -> int:
        return sum(probe.external for probe in self.probes)

    @computed_field
    def failed_probes(self) -> List[str]:
        return [probe.name for probe in self.probes if not probe.ok]

    def get(self, name: str) -> Optional[ProbeResult]:
        for probe in self.probes:
            if probe.name == name:
                return probe
        return None

    def by_entity(self) -> Dict[str, List[ProbeResult]]:
        grouped: Dict[str, List[ProbeResult]] = {}
        for probe in self.probes:
            grouped.setdefault(probe.entity, []).append(probe)
        return grouped
