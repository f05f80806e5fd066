from .jobs import JobsService
from .ledger import LedgerService
from .repository import LedgerRepository
from .summary import (
    BalanceLine,
    SummaryMetrics,
    TransactionCategory,
    TransactionRecord,
    TransactionSummary,
    running_balances,
    summarize,
    summary_metrics,
)

__all__ = [
    "BalanceLine",
    "JobsService",
    "LedgerRepository",
    "LedgerService",
    "SummaryMetrics",
    "TransactionCategory",
    "TransactionRecord",
    "TransactionSummary",
    "running_balances",
    "summarize",
    "summary_metrics",
]
