"""
Custom exception classes for the portfolio aggregation engine.

The aggregation itself never raises on well-formed deals. These exceptions
mark the boundaries where input is rejected: unusable raw records and
unreadable input files.
"""


class BacktestPortfolioError(Exception):
    """Base exception for backtest portfolio operations."""


class DataIntegrityError(BacktestPortfolioError):
    """
    Raised when a raw backtest record cannot be turned into a deal.

    Typical causes:
    - Cycle without any order (no start time)
    - Unparseable start or completion timestamp
    - Non-finite net or excursion values
    - Record that does not match the expected schema

    Attributes:
        message: Human-readable error description.
        context: Optional dictionary with additional error context.

    Examples:
        >>> raise DataIntegrityError(
        ...     "Unparseable cycle timestamp",
        ...     context={"cycle_id": 42, "field": "date"}
        ... )
        Traceback (most recent call last):
        ...
        backtest_portfolio.models.exceptions.DataIntegrityError: Unparseable cycle timestamp (cycle_id=42, field=date)
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize DataIntegrityError.

        Args:
            message: Error description.
            context: Optional dictionary with error details.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class InputFileError(BacktestPortfolioError):
    """Raised when an input file is missing or is not valid JSON."""
