"""
YNAB4 → Actual budget migration.

Reads the authoritative device snapshot of a YNAB4 budget package and replays
its accounts, categories, payees, transactions and monthly budgets into an
Actual budget, remapping every legacy identifier along the way.
"""

__version__ = "0.1.0"
