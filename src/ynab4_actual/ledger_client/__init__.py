"""
Actual ledger access.

Provides:
- LedgerService: the interface the importer writes through
- LedgerClient: HTTP implementation against the Actual REST bridge
- Target-side records (accounts, categories, payees, new transactions)

Treats ledger errors as loud failures with actionable messages.
"""

from .base import (
    LedgerAccount,
    LedgerCategory,
    LedgerPayee,
    LedgerService,
    NewSplitLine,
    NewTransaction,
)
from .client import LedgerAPIError, LedgerClient, LedgerConnectionError, LedgerError

__all__ = [
    "LedgerService",
    "LedgerClient",
    "LedgerError",
    "LedgerAPIError",
    "LedgerConnectionError",
    "LedgerAccount",
    "LedgerCategory",
    "LedgerPayee",
    "NewSplitLine",
    "NewTransaction",
]
