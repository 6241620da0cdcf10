"""
Custom application exceptions.
"""
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from reconcile.schemas.teardown import TeardownStepResult


class ReconcileException(Exception):
    """Base exception for the reconciliation engine."""
    pass


class ProbeNotFoundError(ReconcileException):
    """Raised when a requested probe name is not registered."""
    pass


class LegacyConfigurationError(ReconcileException):
    """Raised when the legacy database connection settings are incomplete."""
    pass


class TeardownStepError(ReconcileException):
    """Raised when a teardown delete step fails; remaining steps are not attempted."""

    def __init__(self, table: str, original: Exception, completed: "List[TeardownStepResult]"):
        super().__init__(f"Delete from '{table}' failed: {original}")
        self.table = table
        self.original = original
        self.completed = completed


def describe_error(exc: Exception) -> str:
    """First line of an exception message, for inline report annotations."""
    lines = str(exc).strip().splitlines()
    return lines[0] if lines else exc.__class__.__name__
