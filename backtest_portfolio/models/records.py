"""Raw backtest record models.

These pydantic models mirror the JSON shapes returned by the remote backtest
service (statistics, config, cycles and orders). Field names follow the
service's camelCase through aliases. Only the fields the engine reads are
declared; everything else in a payload is ignored, so unexpected values in
unrelated fields never reject a backtest.

Timestamp fields are kept as raw values (string, number or None) so that a
malformed timestamp reaches the deal normalizer, which decides whether to skip
or reject the record.
"""
from pydantic import BaseModel, ConfigDict, Field


RawTimestamp = str | int | float | None
RawNumber = float | str | None


class _RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class BacktestDeposit(_RecordModel):
    """Deposit settings of a backtest; only the currency is used."""

    currency: str | None = None


class BacktestConfig(_RecordModel):
    """Subset of the backtest configuration endpoint used by the engine."""

    symbol: str | None = None
    algorithm: str | None = None
    deposit: BacktestDeposit | None = None


class BacktestOrder(_RecordModel):
    """One order placed inside a cycle."""

    created_at: RawTimestamp = Field(default=None, alias="createdAt")
    executed_at: RawTimestamp = Field(default=None, alias="executedAt")


class BacktestCycle(_RecordModel):
    """One trade cycle (deal) of a backtest as reported by the service.

    Attributes:
        id: Cycle identifier, unique within the backtest
        status: STARTED, FINISHED, CANCELED or another completed state
        date: Completion time (last observation time while STARTED)
        net_quote: Realized net in quote currency
        profit_quote: Realized profit, used when ``net_quote`` is absent
        mae_absolute: Signed maximum adverse excursion
        mfe_absolute: Signed maximum favorable excursion
        orders: Orders of the cycle; the first one marks the open time
    """

    id: int | str
    status: str | None = None
    date: RawTimestamp = None
    net_quote: RawNumber = Field(default=None, alias="netQuote")
    profit_quote: RawNumber = Field(default=None, alias="profitQuote")
    mae_absolute: RawNumber = Field(default=None, alias="maeAbsolute")
    mfe_absolute: RawNumber = Field(default=None, alias="mfeAbsolute")
    orders: list[BacktestOrder] | None = None


class BacktestStatistics(_RecordModel):
    """Backtest statistics record (core or detail endpoint).

    Most fields are optional because the core listing endpoint and the detail
    endpoint each populate a different subset; see
    ``backtest.enrichment.enrich_statistics`` for the merge rule.
    """

    id: int | str
    name: str | None = None
    period_from: RawTimestamp = Field(default=None, alias="from")
    period_to: RawTimestamp = Field(default=None, alias="to")
    algorithm: str | None = None
    symbol: str | None = None
    base: str | None = None
    quote: str | None = None
    deposit: BacktestDeposit | None = None


class BacktestRecord(_RecordModel):
    """One entry of an exported aggregation input file.

    Attributes:
        statistics: Core statistics record
        detail: Optional detail-endpoint statistics preferred over the core ones
        config: Optional configuration record supplying the deposit
        cycles: Cycle records of the backtest
    """

    statistics: BacktestStatistics
    detail: BacktestStatistics | None = None
    config: BacktestConfig | None = None
    cycles: list[BacktestCycle] = Field(default_factory=list)
