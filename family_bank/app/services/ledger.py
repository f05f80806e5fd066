from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional, Tuple
from uuid import UUID

from sqlmodel import Session

from ..core.config import Settings, get_settings
from ..core.errors import (
    AccountNotFoundError,
    DuplicateIdempotencyKeyError,
    InsufficientFundsError,
)
from ..models import (
    AccountCreate,
    AccountModel,
    AccountResponse,
    HistoryItem,
    HistoryResponse,
    LedgerEntryModel,
    MetricsResponse,
    MonthlyStatementResponse,
    SummaryResponse,
    SummaryTotals,
    TransactionCreate,
    TransactionResponse,
)
from .adapter import parse_timestamp, record_from_entry, to_minor_units
from .repository import LedgerRepository
from .summary import (
    ZERO,
    BalanceLine,
    TransactionCategory,
    TransactionRecord,
    TransactionSummary,
    running_balances,
    summarize,
    summary_metrics,
)


logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Return the half-open UTC interval covering a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError("Invalid statement month")
    try:
        start = datetime(year, month, 1, tzinfo=UTC)
        if month == 12:
            end = datetime(year + 1, 1, 1, tzinfo=UTC)
        else:
            end = datetime(year, month + 1, 1, tzinfo=UTC)
    except (ValueError, OverflowError) as exc:
        raise ValueError("Invalid statement period") from exc
    return start, end


class LedgerService:
    def __init__(
        self,
        session: Session,
        repository: Optional[LedgerRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.session = session
        self.repository = repository or LedgerRepository(session)
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _json_default(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, (UUID, Decimal)):
            return str(value)
        return value

    def _serialize(self, payload: Any) -> str:
        if hasattr(payload, "model_dump"):
            data = payload.model_dump(mode="json")
        else:
            data = payload
        return json.dumps(data, default=self._json_default, sort_keys=True)

    def _encode_signature(self, signature: Tuple[Any, ...]) -> str:
        return json.dumps(signature, default=self._json_default, sort_keys=True)

    def _get_account(self, account_id: UUID) -> AccountModel:
        account = self.repository.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def _check_idempotency(
        self,
        route: str,
        idempotency_key: str,
        request_signature: Tuple[Any, ...],
    ) -> Optional[str]:
        record = self.repository.fetch_idempotency(route, idempotency_key)
        if record is None:
            return None

        signature = self._encode_signature(request_signature)
        if record.request_signature != signature:
            raise DuplicateIdempotencyKeyError(
                "Idempotency key was previously used with different parameters"
            )

        return record.response_payload

    def _record_idempotent(
        self,
        route: str,
        idempotency_key: str,
        request_signature: Tuple[Any, ...],
        response_payload: Any,
    ) -> None:
        signature = self._encode_signature(request_signature)
        serialized_payload = self._serialize(response_payload)
        self.repository.save_idempotency(
            route=route,
            key=idempotency_key,
            signature=signature,
            payload=serialized_payload,
        )

    def _account_to_response(
        self, account: AccountModel, summary: TransactionSummary
    ) -> AccountResponse:
        return AccountResponse(
            id=account.id,
            owner_name=account.owner_name,
            email=account.email,
            created_at=account.created_at,
            balance=summary.balance,
        )

    def _entry_to_response(self, entry: LedgerEntryModel) -> TransactionResponse:
        record = record_from_entry(entry)
        return TransactionResponse(
            id=entry.id,
            account_id=entry.account_id,
            timestamp=record.timestamp,
            amount=record.amount,
            category=entry.category,
            description=entry.description,
        )

    def _history_item(self, line: BalanceLine, opening: Decimal = ZERO) -> HistoryItem:
        record = line.record
        return HistoryItem(
            id=UUID(record.id),
            account_id=UUID(record.account_id),
            timestamp=record.timestamp,
            amount=record.amount if record.amount is not None else ZERO,
            category=record.raw_category or record.category.value,
            description=record.description,
            balance_after=opening + line.balance,
        )

    @staticmethod
    def summary_totals(summary: TransactionSummary) -> SummaryTotals:
        return SummaryTotals(
            deposits=summary.deposits,
            withdrawals=summary.withdrawals,
            service_charges=summary.service_charges,
            interests=summary.interests,
            balance=summary.balance,
            transaction_count=summary.transaction_count,
            skipped_count=summary.skipped_count,
            last_transaction_at=summary.last_transaction_at,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def records_for(self, account_id: UUID) -> list[TransactionRecord]:
        return [record_from_entry(entry) for entry in self.repository.list_entries(account_id)]

    def create_account(self, payload: AccountCreate) -> AccountResponse:
        if payload.email and self.repository.get_account_by_email(payload.email):
            raise ValueError(f"An account for {payload.email} already exists")

        account = self.repository.add_account(payload.owner_name, payload.email)
        self.session.commit()
        logger.info(
            "account.created",
            extra={"account_id": str(account.id), "owner_name": account.owner_name},
        )
        return self._account_to_response(account, summarize([]))

    def get_account(self, account_id: UUID) -> AccountResponse:
        account = self._get_account(account_id)
        return self._account_to_response(account, summarize(self.records_for(account_id)))

    def record_transaction(
        self,
        account_id: UUID,
        payload: TransactionCreate,
        idempotency_key: str,
    ) -> TransactionResponse:
        timestamp = parse_timestamp(payload.timestamp) if payload.timestamp else None
        request_signature = (
            "transaction",
            str(account_id),
            payload.amount,
            payload.category,
            payload.description,
            timestamp,
        )
        cached = self._check_idempotency("transaction", idempotency_key, request_signature)
        if cached is not None:
            logger.info(
                "idempotent.transaction.hit",
                extra={"account_id": str(account_id), "idempotency_key": idempotency_key},
            )
            return TransactionResponse.model_validate(json.loads(cached))

        self._get_account(account_id)
        category = TransactionCategory.parse(payload.category)
        if category.is_debit:
            balance = summarize(self.records_for(account_id)).balance
            if payload.amount > balance:
                raise InsufficientFundsError(
                    f"Insufficient funds for {category.value}: balance is {balance}"
                )

        entry = self.repository.add_entry(
            account_id=account_id,
            amount=to_minor_units(payload.amount),
            category=category.value,
            description=payload.description,
            ts=timestamp,
        )

        response = self._entry_to_response(entry)
        self._record_idempotent("transaction", idempotency_key, request_signature, response)
        self.session.commit()
        logger.info(
            "transaction.recorded",
            extra={
                "account_id": str(account_id),
                "transaction_id": str(entry.id),
                "category": category.value,
                "amount": str(payload.amount),
            },
        )
        return response

    def get_history(
        self,
        account_id: UUID,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> HistoryResponse:
        self._get_account(account_id)
        if limit is None:
            limit = self.settings.history_page_size
        if limit < 1:
            raise ValueError("limit must be at least 1")

        lines = running_balances(self.records_for(account_id))
        lines.reverse()

        start_index = 0
        if cursor:
            ids = [line.record.id for line in lines]
            try:
                start_index = ids.index(cursor) + 1
            except ValueError as exc:
                raise ValueError("Invalid cursor") from exc

        page = lines[start_index : start_index + limit]
        next_cursor = None
        if start_index + limit < len(lines):
            next_cursor = page[-1].record.id

        return HistoryResponse(
            items=[self._history_item(line) for line in page],
            next_cursor=next_cursor,
        )

    def get_summary(
        self, account_id: UUID, as_of: Optional[datetime] = None
    ) -> SummaryResponse:
        self._get_account(account_id)
        records = self.records_for(account_id)
        summary = summarize(records)
        metrics = summary_metrics(
            summary,
            records,
            as_of or datetime.now(UTC),
            recent_days=self.settings.recent_activity_days,
        )
        return SummaryResponse(
            account_id=account_id,
            summary=self.summary_totals(summary),
            metrics=MetricsResponse(
                average_transaction_amount=metrics.average_transaction_amount,
                deposit_withdrawal_ratio=metrics.deposit_withdrawal_ratio,
                is_positive_balance=metrics.is_positive_balance,
                has_recent_activity=metrics.has_recent_activity,
                monthly_average=metrics.monthly_average,
            ),
        )

    def statement_for(
        self, account: AccountModel, year: int, month: int
    ) -> MonthlyStatementResponse:
        start, end = month_bounds(year, month)
        records = self.records_for(account.id)

        before = [r for r in records if r.timestamp is not None and r.timestamp < start]
        during = [
            r for r in records if r.timestamp is not None and start <= r.timestamp < end
        ]

        opening = summarize(before).balance
        period = summarize(during)
        lines = [self._history_item(line, opening) for line in running_balances(during)]

        return MonthlyStatementResponse(
            account_id=account.id,
            owner_name=account.owner_name,
            period_start=start.date(),
            period_end=(end - timedelta(days=1)).date(),
            opening_balance=opening,
            closing_balance=opening + period.balance,
            summary=self.summary_totals(period),
            lines=lines,
        )

    def get_monthly_statement(
        self, account_id: UUID, year: int, month: int
    ) -> MonthlyStatementResponse:
        account = self._get_account(account_id)
        return self.statement_for(account, year, month)
