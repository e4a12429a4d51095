"""Read-only aggregation package."""

from lendledger.queries.aggregator import BalanceAggregator

__all__ = ["BalanceAggregator"]
