"""Family banking ledger service."""
