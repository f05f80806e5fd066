class AccountNotFoundError(Exception):
    """Raised when an account id is missing from the ledger store."""


class InsufficientFundsError(Exception):
    """Raised when a debit would take the derived balance below zero."""


class DuplicateIdempotencyKeyError(Exception):
    """Raised when the same idempotency key is reused with different input."""
