from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional
from uuid import UUID, uuid4
from sqlmodel import Field, SQLModel

class Account(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    owner_name: str
    email: Optional[str] = Field(default=None, unique=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

class LedgerEntry(SQLModel, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    account_id: UUID = Field(foreign_key="account.id", index=True)
    # minor units (cents); the sign comes from the category
    amount: int = Field(ge=1)
    category: str = Field(index=True)
    description: Optional[str] = None
    job_id: Optional[str] = Field(default=None, index=True)

class IdempotencyRecord(SQLModel, table=True):
    route: str = Field(primary_key=True)
    key: str = Field(primary_key=True)
    request_signature: str
    response_payload: str
