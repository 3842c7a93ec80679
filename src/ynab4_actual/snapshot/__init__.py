"""
YNAB4 snapshot access.

Finds budget packages, scores device copies and loads the authoritative
Budget.yfull as a LegacyDocument.
"""

from .device_selector import DeviceRecord, estimate_recentness, select_device
from .loader import (
    BudgetPackage,
    Snapshot,
    budget_name_from_path,
    find_budgets,
    load_device_records,
    load_snapshot,
)

__all__ = [
    "DeviceRecord",
    "estimate_recentness",
    "select_device",
    "BudgetPackage",
    "Snapshot",
    "budget_name_from_path",
    "find_budgets",
    "load_device_records",
    "load_snapshot",
]
