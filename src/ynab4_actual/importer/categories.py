"""
Category import stage.

Actual inserts a new category at the top of its group. To reproduce the YNAB4
display order (ascending sortableIndex), subcategories are created in
descending sortableIndex order, one at a time: each insert's position depends
on the categories already in the group.
"""

import logging

from ..ledger_client.base import LedgerService
from ..schemas.legacy_document import OUTFLOW, LegacyDocument, MasterCategory
from .concurrency import fan_out
from .registry import IdentifierRegistry

logger = logging.getLogger(__name__)


def is_importable_group(master: MasterCategory) -> bool:
    """Only live outflow groups with at least one live subcategory are imported."""
    return master.type == OUTFLOW and not master.is_tombstone and bool(master.active_sub_categories)


def import_categories(
    document: LegacyDocument,
    ledger: LedgerService,
    registry: IdentifierRegistry,
    max_workers: int = 4,
) -> tuple[int, int]:
    """Create category groups and their categories.

    Returns:
        (groups created, categories created)
    """

    def create_group(master: MasterCategory) -> int:
        group_id = ledger.create_category_group(name=master.name, is_income=False)
        registry.set(master.entity_id, group_id)

        ordered = sorted(master.sub_categories, key=lambda c: c.sortable_index)
        ordered.reverse()

        created = 0
        for category in ordered:
            if category.is_tombstone:
                continue
            parent_id = registry.get(category.master_category_id or master.entity_id)
            category_id = ledger.create_category(name=category.name, group_id=parent_id)
            registry.set(category.entity_id, category_id)
            created += 1

        logger.debug("Group '%s' -> %s with %d categories", master.name, group_id, created)
        return created

    masters = sorted(document.master_categories, key=lambda m: m.sortable_index)
    groups = [m for m in masters if is_importable_group(m)]
    skipped = len(masters) - len(groups)
    if skipped:
        logger.info("Skipping %d master categories (non-outflow, deleted or empty)", skipped)

    counts = fan_out(create_group, groups, max_workers)
    return len(groups), sum(counts)
