"""
Import stages and the pipeline that sequences them.
"""

from .accounts import import_accounts, map_account_type
from .budgets import fill_in_budgets, replay_budgets
from .categories import import_categories
from .payees import import_payees
from .pipeline import ImportResult, run_import
from .registry import IdentifierRegistry
from .transactions import TransactionMapper, import_transactions

__all__ = [
    "IdentifierRegistry",
    "ImportResult",
    "TransactionMapper",
    "fill_in_budgets",
    "import_accounts",
    "import_categories",
    "import_payees",
    "import_transactions",
    "map_account_type",
    "replay_budgets",
    "run_import",
]
