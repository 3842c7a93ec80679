"""
Import pipeline.

Runs the five stages in dependency order against one ledger, threading a
single IdentifierRegistry through them:

    accounts -> categories -> payees -> transactions -> budgets

A fatal error aborts the remaining stages. Writes already accepted by the
ledger are not rolled back.

The import is NOT idempotent: there is no dedup key, so importing the same
snapshot twice into one budget creates every entity twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from .accounts import import_accounts
from .budgets import replay_budgets
from .categories import import_categories
from .payees import import_payees
from .registry import IdentifierRegistry
from .transactions import import_transactions

if TYPE_CHECKING:
    from ..config import ImporterConfig
    from ..ledger_client.base import LedgerService
    from ..schemas.legacy_document import LegacyDocument

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Result of an import run."""

    accounts: int = 0
    category_groups: int = 0
    categories: int = 0
    payees: int = 0
    transactions: int = 0
    budget_months: int = 0
    warnings: list[str] = field(default_factory=list)
    duration_ms: int = 0


def run_import(
    document: LegacyDocument,
    ledger: LedgerService,
    settings: ImporterConfig | None = None,
) -> ImportResult:
    """Import a legacy document into the ledger.

    Args:
        document: Authoritative snapshot contents
        ledger: Target ledger (should hold an empty budget)
        settings: Importer settings (defaults if omitted)

    Returns:
        ImportResult with per-stage counts
    """
    if settings is None:
        from ..config import ImporterConfig

        settings = ImporterConfig()

    start_time = datetime.now()
    registry = IdentifierRegistry()
    result = ImportResult()
    workers = settings.max_workers

    logger.info("Importing accounts...")
    result.accounts = import_accounts(document, ledger, registry, workers)

    logger.info("Importing categories...")
    result.category_groups, result.categories = import_categories(
        document, ledger, registry, workers
    )

    logger.info("Importing payees...")
    result.payees, payees_with_rules = import_payees(document, ledger, registry)
    if payees_with_rules:
        result.warnings.append(
            f"{payees_with_rules} payee rename rule set(s) were not imported"
        )

    logger.info("Importing transactions...")
    result.transactions = import_transactions(
        document,
        ledger,
        registry,
        workers,
        suppress_split_categories_off_budget=settings.suppress_split_categories_off_budget,
    )

    logger.info("Importing budgets...")
    result.budget_months = replay_budgets(document, ledger, registry, workers)

    result.duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)

    logger.info(
        "Import completed: %d accounts, %d groups, %d categories, %d payees, "
        "%d transactions, %d budget months in %dms",
        result.accounts,
        result.category_groups,
        result.categories,
        result.payees,
        result.transactions,
        result.budget_months,
        result.duration_ms,
    )

    return result
