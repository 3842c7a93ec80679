"""Account import stage."""

import logging

from ..ledger_client.base import LedgerService
from ..schemas.legacy_document import Account, LegacyDocument
from .concurrency import fan_out
from .registry import IdentifierRegistry

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = {
    "Cash": "checking",
    "Checking": "checking",
    "CreditCard": "credit",
    "Savings": "savings",
    "InvestmentAccount": "investment",
    "Mortgage": "mortgage",
}


def map_account_type(account_type: str | None) -> str:
    """Map a YNAB4 account type to an Actual account type."""
    return ACCOUNT_TYPES.get(account_type, "other")


def import_accounts(
    document: LegacyDocument,
    ledger: LedgerService,
    registry: IdentifierRegistry,
    max_workers: int = 4,
) -> int:
    """Create every live account and register its id.

    Returns:
        Number of accounts created
    """

    def create(account: Account) -> None:
        account_id = ledger.create_account(
            name=account.name,
            type=map_account_type(account.account_type),
            offbudget=not account.on_budget,
            closed=account.hidden,
        )
        registry.set(account.entity_id, account_id)
        logger.debug("Account '%s' -> %s", account.name, account_id)

    live = [a for a in document.accounts if not a.is_tombstone]
    fan_out(create, live, max_workers)
    return len(live)
