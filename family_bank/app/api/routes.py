from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, Query, status

from ..core.dependencies import get_jobs_service, get_ledger_service
from ..models import (
    AccountCreate,
    AccountResponse,
    HistoryResponse,
    InterestJobRequest,
    InterestJobResponse,
    MonthlyStatementResponse,
    StatementJobRequest,
    StatementJobResponse,
    SummaryResponse,
    TransactionCreate,
    TransactionResponse,
)
from ..services import JobsService, LedgerService


router = APIRouter(prefix="/accounts", tags=["accounts"])

@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountCreate,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    return service.create_account(payload)

@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: UUID,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    return service.get_account(account_id)

@router.post(
    "/{account_id}/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_transaction(
    account_id: UUID,
    payload: TransactionCreate,
    service: LedgerService = Depends(get_ledger_service),
    idempotency_key: str = Header(..., convert_underscores=False, alias="Idempotency-Key"),
) -> TransactionResponse:
    return service.record_transaction(account_id, payload, idempotency_key)

@router.get("/{account_id}/transactions", response_model=HistoryResponse)
def get_history(
    account_id: UUID,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    cursor: Optional[str] = None,
    service: LedgerService = Depends(get_ledger_service),
) -> HistoryResponse:
    return service.get_history(account_id, limit=limit, cursor=cursor)

@router.get("/{account_id}/summary", response_model=SummaryResponse)
def get_summary(
    account_id: UUID,
    as_of: Optional[datetime] = None,
    service: LedgerService = Depends(get_ledger_service),
) -> SummaryResponse:
    return service.get_summary(account_id, as_of=as_of)

@router.get(
    "/{account_id}/statements/{year}/{month}",
    response_model=MonthlyStatementResponse,
)
def get_monthly_statement(
    account_id: UUID,
    year: int,
    month: int,
    service: LedgerService = Depends(get_ledger_service),
) -> MonthlyStatementResponse:
    return service.get_monthly_statement(account_id, year, month)

jobs_router = APIRouter(prefix="/jobs", tags=["jobs"])

@jobs_router.post("/interest", response_model=InterestJobResponse)
def accrue_interest(
    payload: Optional[InterestJobRequest] = Body(default=None),
    service: JobsService = Depends(get_jobs_service),
) -> InterestJobResponse:
    payload = payload or InterestJobRequest()
    return service.accrue_interest(payload.rate_percent, payload.as_of)

@jobs_router.post("/statements", response_model=StatementJobResponse)
def generate_statements(
    payload: StatementJobRequest,
    service: JobsService = Depends(get_jobs_service),
) -> StatementJobResponse:
    return service.generate_statements(payload.year, payload.month, payload.account_id)

__all__ = ["router", "jobs_router"]
