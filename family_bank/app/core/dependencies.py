from fastapi import Depends
from sqlmodel import Session

from ..services import JobsService, LedgerRepository, LedgerService
from .config import get_settings
from .db import get_session

def get_ledger_service(session: Session = Depends(get_session)) -> LedgerService:
    repository = LedgerRepository(session)
    return LedgerService(session, repository, get_settings())

def get_jobs_service(
    ledger: LedgerService = Depends(get_ledger_service),
) -> JobsService:
    return JobsService(ledger.session, ledger.repository, ledger.settings, ledger)
