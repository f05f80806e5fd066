from .db import Account as AccountModel
from .db import IdempotencyRecord as IdempotencyRecordModel
from .db import LedgerEntry as LedgerEntryModel
from .schemas import (
    AccountCreate,
    AccountResponse,
    HistoryItem,
    HistoryResponse,
    InterestJobRequest,
    InterestJobResponse,
    InterestPayment,
    MetricsResponse,
    MonthlyStatementResponse,
    StatementJobRequest,
    StatementJobResponse,
    SummaryResponse,
    SummaryTotals,
    TransactionCreate,
    TransactionResponse,
)

__all__ = [
    "AccountCreate",
    "AccountResponse",
    "HistoryItem",
    "HistoryResponse",
    "InterestJobRequest",
    "InterestJobResponse",
    "InterestPayment",
    "MetricsResponse",
    "MonthlyStatementResponse",
    "StatementJobRequest",
    "StatementJobResponse",
    "SummaryResponse",
    "SummaryTotals",
    "TransactionCreate",
    "TransactionResponse",
    "AccountModel",
    "LedgerEntryModel",
    "IdempotencyRecordModel",
]
