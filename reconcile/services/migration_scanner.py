"""
Migration status scanner.

Runs every probe over its entity kind, classifies each reference and merges
the per-probe counts into one report. Read-only.
"""
from typing import Optional, Sequence

from sqlmodel import Session

from reconcile.core.config import settings
from reconcile.core.exceptions import describe_error
from reconcile.core.logging_config import LogCategory, log_error, log_info
from reconcile.schemas.scan import ProbeResult, ScanReport
from reconcile.services.migration_probes import (
    DEFAULT_PROBES,
    STREAM_ERRORS,
    MigrationProbe,
    select_probes,
)
from reconcile.services.reference_classifier import ReferenceState, classify_reference


class MigrationScanner:
    """Aggregate migration state across all registered probes."""

    def __init__(
        self,
        session: Session,
        probes: Sequence[MigrationProbe] = DEFAULT_PROBES,
        marker: Optional[str] = None,
        batch_size: Optional[int] = None,
        empty_counts_as_migrated: Optional[bool] = None,
    ):
        self.session = session
        self.probes = list(probes)
        self.marker = marker or settings.external_marker
        self.batch_size = batch_size or settings.scan_batch_size
        self.empty_counts_as_migrated = (
            settings.empty_counts_as_migrated
            if empty_counts_as_migrated is None
            else empty_counts_as_migrated
        )

    def scan(self, probe_names: Optional[Sequence[str]] = None) -> ScanReport:
        """
        Run the selected probes (all by default) and merge their results.

        A probe that fails is reported with its error; the others still run.

        Raises:
            ProbeNotFoundError: if a requested probe name is not registered
        """
        selected = select_probes(probe_names, self.probes)
        log_info(
            f"Scanning {len(selected)} probe(s) for references containing '{self.marker}'",
            category=LogCategory.SCAN,
        )

        report = ScanReport(probes=[self.run_probe(probe) for probe in selected])

        log_info(
            f"Scan complete: scanned={report.total_scanned} external={report.total_external} "
            f"fully_migrated={report.fully_migrated}",
            category=LogCategory.SCAN,
        )
        return report

    def run_probe(self, probe: MigrationProbe) -> ProbeResult:
        counts = {
            ReferenceState.EXTERNAL: 0,
            ReferenceState.LOCAL: 0,
            ReferenceState.EMPTY: 0,
        }
        try:
            for _row_id, raw_value in probe.stream(self.session, self.batch_size):
                counts[classify_reference(probe.extract(raw_value), self.marker)] += 1
        except STREAM_ERRORS as exc:
            self.session.rollback()
            log_error(exc, probe=probe.name)
            return ProbeResult(
                name=probe.name,
                entity=probe.entity,
                label=probe.label,
                error=describe_error(exc),
                empty_counts_as_migrated=self.empty_counts_as_migrated,
            )

        result = ProbeResult(
            name=probe.name,
            entity=probe.entity,
            label=probe.label,
            total=sum(counts.values()),
            external=counts[ReferenceState.EXTERNAL],
            local=counts[ReferenceState.LOCAL],
            empty=counts[ReferenceState.EMPTY],
            empty_counts_as_migrated=self.empty_counts_as_migrated,
        )
        log_info(
            f"Probe {probe.name}: total={result.total} external={result.external} "
            f"local={result.local} empty={result.empty}",
            category=LogCategory.SCAN,
        )
        return result
