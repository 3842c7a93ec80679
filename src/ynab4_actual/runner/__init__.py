"""
CLI runner module.

Provides commands:
- init: Write a default config file
- find: List YNAB4 budgets on disk
- devices: Show device copies of a budget
- import: Import a budget into Actual
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
