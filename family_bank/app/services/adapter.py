"""Ledger-store adapter.

Turns stored documents and rows into canonical ``TransactionRecord`` values.
Every legacy field spelling and every accepted timestamp representation is
handled here so the summary engine only ever sees one record shape.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..models import LedgerEntryModel
from .summary import TransactionCategory, TransactionRecord


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_ID_FIELDS = ("id", "transaction_id", "transactionId")
_ACCOUNT_FIELDS = ("account_id", "accountId", "user_id", "userId")
_CATEGORY_FIELDS = ("category", "transaction_type", "transactionType", "type")
_TIMESTAMP_FIELDS = ("timestamp", "created_at", "createdAt", "date")
_DESCRIPTION_FIELDS = ("description", "comment")


def _first(doc: Mapping[str, Any], fields: tuple[str, ...]) -> Any:
    for field in fields:
        value = doc.get(field)
        if value is not None and value != "":
            return value
    return None


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a stored amount into a Decimal, or None if it is unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        cleaned = re.sub(r"[$,\s]", "", value)
        if not cleaned:
            return None
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def _from_epoch_millis(value: int | float) -> Optional[datetime]:
    try:
        return _EPOCH + timedelta(milliseconds=value)
    except OverflowError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Normalize any accepted timestamp representation to an aware UTC instant.

    Accepted: ``datetime`` (naive values are taken as UTC), ``date``, integer or
    float epoch milliseconds, ISO-8601 strings and document-store timestamp
    mappings carrying ``seconds``/``nanoseconds``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value != value:
            return None
        return _from_epoch_millis(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return _from_epoch_millis(int(text))
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parse_timestamp(parsed)
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            return None
        try:
            return _EPOCH + timedelta(seconds=seconds, microseconds=nanos // 1000)
        except (OverflowError, TypeError):
            return None
    return None


def record_from_document(doc: Mapping[str, Any]) -> TransactionRecord:
    """Build a record from a stored transaction document.

    Unusable values are kept as ``None`` (or ``UNKNOWN`` for the category) so
    the summary engine can report them instead of this function raising.
    """
    raw_category = _first(doc, _CATEGORY_FIELDS)
    description = _first(doc, _DESCRIPTION_FIELDS)
    record_id = _first(doc, _ID_FIELDS)
    account_id = _first(doc, _ACCOUNT_FIELDS)
    return TransactionRecord(
        id="" if record_id is None else str(record_id),
        account_id="" if account_id is None else str(account_id),
        amount=parse_amount(doc.get("amount")),
        category=TransactionCategory.parse(raw_category),
        timestamp=parse_timestamp(_first(doc, _TIMESTAMP_FIELDS)),
        description=None if description is None else str(description),
        raw_category=None if raw_category is None else str(raw_category),
    )


def record_from_entry(entry: LedgerEntryModel) -> TransactionRecord:
    return TransactionRecord(
        id=str(entry.id),
        account_id=str(entry.account_id),
        amount=Decimal(entry.amount).scaleb(-2),
        category=TransactionCategory.parse(entry.category),
        timestamp=parse_timestamp(entry.ts),
        description=entry.description,
        raw_category=entry.category,
    )


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())
