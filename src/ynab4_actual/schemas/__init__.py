"""
SSOT schemas for the importer.

The legacy snapshot model and the amount/month conversions are defined here
and nowhere else.
"""

from .amounts import amount_to_integer, month_from_date
from .legacy_document import (
    AFFECTS_BUFFER,
    CONFINED,
    DEFERRED_INCOME_CATEGORY,
    IMMEDIATE_INCOME_CATEGORY,
    INCOME_CATEGORIES,
    OUTFLOW,
    SPLIT_CATEGORY,
    Account,
    LegacyDocument,
    MasterCategory,
    MonthlyBudget,
    MonthlyCategoryBudget,
    Payee,
    SubCategory,
    SubTransaction,
    Transaction,
)

__all__ = [
    "amount_to_integer",
    "month_from_date",
    "AFFECTS_BUFFER",
    "CONFINED",
    "DEFERRED_INCOME_CATEGORY",
    "IMMEDIATE_INCOME_CATEGORY",
    "INCOME_CATEGORIES",
    "OUTFLOW",
    "SPLIT_CATEGORY",
    "Account",
    "LegacyDocument",
    "MasterCategory",
    "MonthlyBudget",
    "MonthlyCategoryBudget",
    "Payee",
    "SubCategory",
    "SubTransaction",
    "Transaction",
]
