"""
Enumerations for the portfolio aggregation engine.

This module defines type-safe enumerations for deal lifecycle states and
report output formats.
"""

from enum import Enum


class DealStatus(str, Enum):
    """
    Lifecycle state of a deal at observation time.

    Inherits from str so values serialize directly into JSON reports.

    Attributes:
        STARTED: Still open when the backtest stopped observing it. Its end
            time is the last observation, not a real close.
        FINISHED: Closed normally; contributes realized profit.
        CANCELLED: Closed by cancellation; contributes realized profit.

    Examples:
        >>> DealStatus.from_raw("CANCELED")
        <DealStatus.CANCELLED: 'CANCELLED'>
        >>> DealStatus.STARTED == "STARTED"
        True
    """

    STARTED = "STARTED"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"

    @classmethod
    def from_raw(cls, value: str | None) -> "DealStatus":
        """Map a remote cycle status onto a DealStatus.

        The remote service spells cancellation ``CANCELED``. Any status other
        than ``STARTED`` describes a completed cycle and maps to FINISHED when
        it is not a known value.

        Args:
            value: Raw status string from a cycle record.

        Returns:
            Matching DealStatus.
        """
        normalized = (value or "").strip().upper()
        if normalized == "STARTED":
            return cls.STARTED
        if normalized in ("CANCELED", "CANCELLED"):
            return cls.CANCELLED
        return cls.FINISHED

    @property
    def is_closed(self) -> bool:
        """Return True when the status carries realized profit."""
        return self is not DealStatus.STARTED


class OutputFormat(str, Enum):
    """
    Report output format enumeration.

    Attributes:
        TEXT: Human-readable text report (default).
        JSON: Machine-readable JSON report.

    Examples:
        >>> OutputFormat.JSON.value
        'json'
        >>> OutputFormat.TEXT == "text"
        True
    """

    TEXT = "text"
    JSON = "json"
