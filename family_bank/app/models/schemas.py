from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

CategoryName = Literal["Deposit", "Withdrawal", "ServiceCharge", "Interest"]

class AccountCreate(BaseModel):
    owner_name: str = Field(..., min_length=1, description="Name of the account holder")
    email: Optional[str] = Field(default=None, min_length=3, max_length=254)

class AccountResponse(BaseModel):
    id: UUID
    owner_name: str
    email: Optional[str] = None
    created_at: datetime
    balance: Decimal = Field(..., description="Derived from the account's transactions")

class TransactionCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    category: CategoryName
    description: Optional[str] = Field(default=None, max_length=500)
    timestamp: Optional[datetime] = Field(
        default=None, description="Defaults to now; set for backdated entries"
    )

class TransactionResponse(BaseModel):
    id: UUID
    account_id: UUID
    timestamp: datetime
    amount: Decimal
    category: str
    description: Optional[str] = None

class HistoryItem(TransactionResponse):
    balance_after: Decimal

class HistoryResponse(BaseModel):
    items: list[HistoryItem]
    next_cursor: Optional[str] = None

class SummaryTotals(BaseModel):
    deposits: Decimal
    withdrawals: Decimal
    service_charges: Decimal
    interests: Decimal
    balance: Decimal
    transaction_count: int
    skipped_count: int
    last_transaction_at: Optional[datetime] = None

class MetricsResponse(BaseModel):
    average_transaction_amount: Decimal
    deposit_withdrawal_ratio: Optional[Decimal] = Field(
        default=None, description="Null when there are deposits but no withdrawals"
    )
    is_positive_balance: bool
    has_recent_activity: bool
    monthly_average: Decimal

class SummaryResponse(BaseModel):
    account_id: UUID
    summary: SummaryTotals
    metrics: MetricsResponse

class MonthlyStatementResponse(BaseModel):
    account_id: UUID
    owner_name: str
    period_start: date
    period_end: date
    opening_balance: Decimal
    closing_balance: Decimal
    summary: SummaryTotals
    lines: list[HistoryItem]

class InterestJobRequest(BaseModel):
    rate_percent: Optional[Decimal] = Field(
        default=None, description="Overrides the configured interest rate"
    )
    as_of: Optional[datetime] = None

class InterestPayment(BaseModel):
    account_id: UUID
    balance: Decimal
    amount: Decimal
    transaction_id: UUID

class InterestJobResponse(BaseModel):
    job_id: str
    rate_percent: Decimal
    processed: int
    paid: int
    skipped: int
    total_interest_paid: Decimal
    payments: list[InterestPayment]

class StatementJobRequest(BaseModel):
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)
    account_id: Optional[UUID] = None

class StatementJobResponse(BaseModel):
    year: int
    month: int
    generated: int
    statements: list[MonthlyStatementResponse]
