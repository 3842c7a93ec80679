"""
Monthly budget replay.

YNAB4 records overspending handling per category per month: "Confined"
rolls overspending into the next month, "AffectsBuffer" takes it from the
next month's available-to-budget. A month without a marker inherits the
previous behaviour. Actual models this with a per-month carryover flag, so
the flag has to be replayed month by month:

    marker          flag after   pushed to ledger
    AffectsBuffer   off          no
    Confined        on           yes
    (other/none)    unchanged    yes, if the flag is on

The flag map lives for one replay call. Months are processed strictly in
order; categories within a month are independent.
"""

import logging

from ..ledger_client.base import LedgerService
from ..schemas.amounts import amount_to_integer, month_from_date
from ..schemas.legacy_document import (
    AFFECTS_BUFFER,
    CONFINED,
    LegacyDocument,
    MonthlyCategoryBudget,
)
from .concurrency import fan_out
from .registry import IdentifierRegistry

logger = logging.getLogger(__name__)


def fill_in_budgets(
    document: LegacyDocument, category_budgets: list[MonthlyCategoryBudget]
) -> list[MonthlyCategoryBudget]:
    """Add a zero budget for every live category missing from a month.

    YNAB4 only stores categories that were actually budgeted, but the
    carryover flag must be set on every month it applies to.
    """
    budgets = list(category_budgets)
    present = {b.category_id for b in budgets if not b.is_tombstone}

    for master in document.master_categories:
        for category in master.active_sub_categories:
            if category.entity_id not in present:
                budgets.append(MonthlyCategoryBudget(category_id=category.entity_id))
                present.add(category.entity_id)

    return budgets


def replay_budgets(
    document: LegacyDocument,
    ledger: LedgerService,
    registry: IdentifierRegistry,
    max_workers: int = 4,
) -> int:
    """Replay budgeted amounts and carryover flags month by month.

    Returns:
        Number of months replayed
    """
    months = sorted(document.monthly_budgets, key=lambda b: b.month)
    if not months:
        logger.info("No monthly budgets to replay")
        return 0

    carryover: dict[str, bool] = {}

    with ledger.batch_budget_updates():
        for monthly in months:
            month = month_from_date(monthly.month)

            def apply(entry: MonthlyCategoryBudget) -> None:
                if entry.is_tombstone:
                    return
                category_id = registry.get(entry.category_id)
                if not category_id:
                    return

                ledger.set_budget_amount(month, category_id, amount_to_integer(entry.budgeted))

                if entry.overspending_handling == AFFECTS_BUFFER:
                    carryover[category_id] = False
                elif entry.overspending_handling == CONFINED or carryover.get(category_id):
                    carryover[category_id] = True
                    ledger.set_budget_carryover(month, category_id, True)

            fan_out(apply, fill_in_budgets(document, monthly.category_budgets), max_workers)
            logger.debug("Replayed budget month %s", month)

    logger.info("Replayed %d budget month(s)", len(months))
    return len(months)
