"""Tri-state result of a host state query."""

from enum import Enum


class ProbeResult(str, Enum):
    """Outcome of a read-only host query.

    UNKNOWN means the query could not determine state (permission denied,
    missing tool, timeout). Callers must treat it as "not satisfied".
    """

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, value: bool) -> "ProbeResult":
        return cls.TRUE if value else cls.FALSE

    @property
    def satisfied(self) -> bool:
        return self is ProbeResult.TRUE
