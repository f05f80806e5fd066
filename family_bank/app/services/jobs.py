from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import UUID

from sqlmodel import Session

from ..core.config import Settings, get_settings
from ..models import (
    InterestJobResponse,
    InterestPayment,
    StatementJobResponse,
)
from .adapter import parse_timestamp, to_minor_units
from .ledger import LedgerService
from .repository import LedgerRepository
from .summary import CENT, ZERO, TransactionCategory, TransactionRecord, summarize


logger = logging.getLogger(__name__)


def interest_paid_in_month(records: list[TransactionRecord], as_of: datetime) -> bool:
    return any(
        r.category is TransactionCategory.INTEREST
        and r.timestamp is not None
        and (r.timestamp.year, r.timestamp.month) == (as_of.year, as_of.month)
        for r in records
    )


def interest_due(balance: Decimal, rate_percent: Decimal) -> Decimal:
    """Interest on ``balance`` at ``rate_percent``, rounded half-up to cents."""
    if balance <= 0:
        return ZERO
    return (balance * rate_percent / 100).quantize(CENT, rounding=ROUND_HALF_UP)


class JobsService:
    """Administrative batch jobs run periodically across all accounts."""

    def __init__(
        self,
        session: Session,
        repository: Optional[LedgerRepository] = None,
        settings: Optional[Settings] = None,
        ledger: Optional[LedgerService] = None,
    ) -> None:
        self.session = session
        self.repository = repository or LedgerRepository(session)
        self.settings = settings or get_settings()
        self.ledger = ledger or LedgerService(session, self.repository, self.settings)

    def accrue_interest(
        self,
        rate_percent: Optional[Decimal] = None,
        as_of: Optional[datetime] = None,
    ) -> InterestJobResponse:
        """Pay one month of interest into every account with a positive balance.

        An account is skipped when it already received interest in the calendar
        month of ``as_of``, when its balance is not positive, or when the
        interest would not exceed one cent. All payments are committed together.
        """
        rate = self.settings.interest_rate if rate_percent is None else rate_percent
        if rate is None or rate <= 0:
            raise ValueError("Interest rate is 0% or invalid")

        as_of = parse_timestamp(as_of) if as_of is not None else datetime.now(UTC)
        job_id = f"interest_{int(as_of.timestamp() * 1000)}"

        processed = 0
        skipped = 0
        total = ZERO
        payments: list[InterestPayment] = []

        for account in self.repository.list_accounts():
            processed += 1
            records = self.ledger.records_for(account.id)

            if interest_paid_in_month(records, as_of):
                skipped += 1
                logger.info(
                    "jobs.interest.already_paid",
                    extra={"account_id": str(account.id), "job_id": job_id},
                )
                continue

            balance = summarize(
                [r for r in records if r.timestamp is None or r.timestamp <= as_of]
            ).balance
            amount = interest_due(balance, rate)
            if amount <= CENT:
                skipped += 1
                logger.info(
                    "jobs.interest.skipped",
                    extra={
                        "account_id": str(account.id),
                        "balance": str(balance),
                        "amount": str(amount),
                    },
                )
                continue

            entry = self.repository.add_entry(
                account_id=account.id,
                amount=to_minor_units(amount),
                category=TransactionCategory.INTEREST.value,
                description=f"Monthly Interest Payment - {rate:.2f}% on ${balance:.2f}",
                ts=as_of,
                job_id=job_id,
            )
            payments.append(
                InterestPayment(
                    account_id=account.id,
                    balance=balance,
                    amount=amount,
                    transaction_id=entry.id,
                )
            )
            total += amount
            logger.info(
                "jobs.interest.paid",
                extra={
                    "account_id": str(account.id),
                    "amount": str(amount),
                    "balance_after": str(balance + amount),
                    "job_id": job_id,
                },
            )

        self.session.commit()
        logger.info(
            "jobs.interest.completed",
            extra={
                "job_id": job_id,
                "processed": processed,
                "paid": len(payments),
                "total_interest_paid": str(total),
            },
        )
        return InterestJobResponse(
            job_id=job_id,
            rate_percent=rate,
            processed=processed,
            paid=len(payments),
            skipped=skipped,
            total_interest_paid=total,
            payments=payments,
        )

    def generate_statements(
        self,
        year: int,
        month: int,
        account_id: Optional[UUID] = None,
    ) -> StatementJobResponse:
        if account_id is not None:
            statements = [self.ledger.get_monthly_statement(account_id, year, month)]
        else:
            statements = [
                self.ledger.statement_for(account, year, month)
                for account in self.repository.list_accounts()
            ]

        logger.info(
            "jobs.statements.completed",
            extra={"year": year, "month": month, "generated": len(statements)},
        )
        return StatementJobResponse(
            year=year,
            month=month,
            generated=len(statements),
            statements=statements,
        )
