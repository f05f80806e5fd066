"""Transaction summary engine.

Folds the transaction records of a single account into per-category totals and
a derived balance. Nothing in this module performs I/O, mutates its input or
keeps state between calls, so it is safe to call once per account from any
number of callers at the same time.

Callers are expected to pre-filter records by account; the engine never looks
at ``account_id``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional


logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")

_MONTH = timedelta(days=30)


class TransactionCategory(str, Enum):
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    SERVICE_CHARGE = "ServiceCharge"
    INTEREST = "Interest"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> TransactionCategory:
        """Map a stored category spelling onto the closed enumeration.

        Matching ignores case, whitespace, ``_`` and ``-``. Anything that does
        not name one of the four known categories becomes ``UNKNOWN``.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = "".join(ch for ch in value.lower() if ch.isalnum())
        return _CATEGORY_ALIASES.get(key, cls.UNKNOWN)

    @property
    def is_credit(self) -> bool:
        return self in (TransactionCategory.DEPOSIT, TransactionCategory.INTEREST)

    @property
    def is_debit(self) -> bool:
        return self in (
            TransactionCategory.WITHDRAWAL,
            TransactionCategory.SERVICE_CHARGE,
        )


_CATEGORY_ALIASES = {
    "deposit": TransactionCategory.DEPOSIT,
    "withdrawal": TransactionCategory.WITHDRAWAL,
    "servicecharge": TransactionCategory.SERVICE_CHARGE,
    "bankfee": TransactionCategory.SERVICE_CHARGE,
    "fee": TransactionCategory.SERVICE_CHARGE,
    "interest": TransactionCategory.INTEREST,
}


@dataclass(frozen=True)
class TransactionRecord:
    """One immutable ledger entry in its canonical shape."""

    id: str
    account_id: str
    amount: Optional[Decimal]
    category: TransactionCategory
    timestamp: Optional[datetime] = None
    description: Optional[str] = None
    raw_category: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.category, TransactionCategory):
            if self.raw_category is None and self.category is not None:
                object.__setattr__(self, "raw_category", str(self.category))
            object.__setattr__(
                self, "category", TransactionCategory.parse(self.category)
            )
        if self.timestamp is not None and self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=UTC))


@dataclass(frozen=True)
class TransactionSummary:
    deposits: Decimal = ZERO
    withdrawals: Decimal = ZERO
    service_charges: Decimal = ZERO
    interests: Decimal = ZERO
    transaction_count: int = 0
    skipped_count: int = 0
    last_transaction_at: Optional[datetime] = None

    @property
    def balance(self) -> Decimal:
        # Always derived from the buckets, never stored.
        return self.deposits + self.interests - self.withdrawals - self.service_charges


@dataclass(frozen=True)
class BalanceLine:
    record: TransactionRecord
    delta: Decimal
    balance: Decimal


@dataclass(frozen=True)
class SummaryMetrics:
    average_transaction_amount: Decimal
    deposit_withdrawal_ratio: Optional[Decimal]
    is_positive_balance: bool
    has_recent_activity: bool
    monthly_average: Decimal


def _check_records(records: Any) -> None:
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
        raise TypeError(
            "records must be a sequence of TransactionRecord, "
            f"got {type(records).__name__}"
        )


def _amount_of(record: TransactionRecord) -> Optional[Decimal]:
    amount = record.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return None
    amount = Decimal(repr(amount)) if isinstance(amount, float) else Decimal(amount)
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def _log_malformed(record: Any, reason: str) -> None:
    logger.warning(
        "summary.record.malformed",
        extra={"record_id": getattr(record, "id", None), "reason": reason},
    )


def signed_amount(record: TransactionRecord) -> Decimal:
    """Return the record's effect on the balance; zero when it has none."""
    amount = _amount_of(record)
    if amount is None:
        return ZERO
    if record.category.is_credit:
        return amount
    if record.category.is_debit:
        return -amount
    return ZERO


def summarize(records: Iterable[TransactionRecord]) -> TransactionSummary:
    """Fold ``records`` into per-category totals.

    The result does not depend on the order of ``records``. Malformed records
    (missing or invalid amount, unknown category) contribute nothing, are
    counted in ``skipped_count`` and logged as warnings; they never abort the
    fold. Only an argument that is not a sequence at all raises ``TypeError``.
    """
    _check_records(records)

    deposits = withdrawals = service_charges = interests = ZERO
    count = 0
    skipped = 0
    last_at: Optional[datetime] = None

    for record in records:
        count += 1
        if not isinstance(record, TransactionRecord):
            skipped += 1
            _log_malformed(record, "not a transaction record")
            continue

        if record.timestamp is not None and (last_at is None or record.timestamp > last_at):
            last_at = record.timestamp

        amount = _amount_of(record)
        if amount is None:
            skipped += 1
            _log_malformed(record, "missing or invalid amount")
            continue

        category = record.category
        if category is TransactionCategory.DEPOSIT:
            deposits += amount
        elif category is TransactionCategory.INTEREST:
            interests += amount
        elif category is TransactionCategory.WITHDRAWAL:
            withdrawals += amount
        elif category is TransactionCategory.SERVICE_CHARGE:
            service_charges += amount
        elif category is TransactionCategory.UNKNOWN:
            skipped += 1
            logger.warning(
                "summary.category.unknown",
                extra={"record_id": record.id, "category": record.raw_category},
            )
        else:  # pragma: no cover
            raise AssertionError(f"unhandled category {category!r}")

    return TransactionSummary(
        deposits=deposits,
        withdrawals=withdrawals,
        service_charges=service_charges,
        interests=interests,
        transaction_count=count,
        skipped_count=skipped,
        last_transaction_at=last_at,
    )


def running_balances(records: Iterable[TransactionRecord]) -> list[BalanceLine]:
    """Return records in chronological order with the balance after each one.

    Ordering is by ``timestamp`` with ties broken by ``id``, so the result is
    deterministic for any input order. Records without a timestamp cannot be
    placed and are left out.
    """
    _check_records(records)

    ordered: list[TransactionRecord] = []
    for record in records:
        if not isinstance(record, TransactionRecord):
            _log_malformed(record, "not a transaction record")
            continue
        if record.timestamp is None:
            logger.warning("summary.record.unordered", extra={"record_id": record.id})
            continue
        ordered.append(record)

    ordered.sort(key=lambda r: (r.timestamp, r.id))

    balance = ZERO
    lines: list[BalanceLine] = []
    for record in ordered:
        delta = signed_amount(record)
        balance += delta
        lines.append(BalanceLine(record=record, delta=delta, balance=balance))
    return lines


def summary_metrics(
    summary: TransactionSummary,
    records: Iterable[TransactionRecord],
    as_of: datetime,
    recent_days: int = 7,
) -> SummaryMetrics:
    """Dashboard figures derived from a summary and the records behind it."""
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=UTC)

    count = summary.transaction_count
    if count:
        average = ((summary.deposits + summary.withdrawals) / count).quantize(
            CENT, rounding=ROUND_HALF_UP
        )
    else:
        average = ZERO

    ratio: Optional[Decimal]
    if summary.withdrawals > 0:
        ratio = (summary.deposits / summary.withdrawals).quantize(
            Decimal("0.0001"), rounding=ROUND_HALF_UP
        )
    elif summary.deposits > 0:
        ratio = None  # deposits with no withdrawals: unbounded
    else:
        ratio = ZERO

    last = summary.last_transaction_at
    recent = last is not None and timedelta(0) <= as_of - last < timedelta(days=recent_days)

    timestamps = [
        r.timestamp
        for r in records
        if isinstance(r, TransactionRecord) and r.timestamp is not None
    ]
    monthly = ZERO
    if count and timestamps:
        span = Decimal((max(timestamps) - min(timestamps)) // timedelta(seconds=1))
        months = max(Decimal(1), span / Decimal(int(_MONTH.total_seconds())))
        monthly = (Decimal(count) / months).quantize(CENT, rounding=ROUND_HALF_UP)

    return SummaryMetrics(
        average_transaction_amount=average,
        deposit_withdrawal_ratio=ratio,
        is_positive_balance=summary.balance > 0,
        has_recent_activity=recent,
        monthly_average=monthly,
    )
