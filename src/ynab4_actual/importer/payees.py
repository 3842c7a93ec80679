"""Payee import stage."""

import logging

from ..ledger_client.base import LedgerService
from ..schemas.legacy_document import LegacyDocument
from .registry import IdentifierRegistry

logger = logging.getLogger(__name__)


def import_payees(
    document: LegacyDocument,
    ledger: LedgerService,
    registry: IdentifierRegistry,
) -> tuple[int, int]:
    """Create every live payee and register its id.

    Must run after accounts and categories: the default category and the
    transfer account are resolved through the registry.

    YNAB4 rename rules are not imported; payees carrying them are counted so
    the run can report them.

    Returns:
        (payees created, payees whose rules were not imported)
    """
    created = 0
    with_rules = 0

    for payee in document.payees:
        if payee.is_tombstone:
            continue

        payee_id = ledger.create_payee(
            name=payee.name,
            category=registry.get(payee.auto_fill_category_id),
            transfer_acct=registry.get(payee.target_account_id),
        )
        registry.set(payee.entity_id, payee_id)
        created += 1

        if payee.has_rules:
            with_rules += 1
            logger.debug("Payee '%s' has rename rules that were not imported", payee.name)

    if with_rules:
        logger.warning("%d payee(s) have rename rules that were not imported", with_rules)

    return created, with_rules
