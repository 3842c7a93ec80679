"""Test fixtures and utilities."""

import json
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path

import pytest

from ynab4_actual.ledger_client.base import (
    LedgerAccount,
    LedgerCategory,
    LedgerPayee,
    LedgerService,
    NewTransaction,
)
from ynab4_actual.schemas.legacy_document import LegacyDocument


class FakeLedger(LedgerService):
    """In-memory ledger mimicking Actual's observable behaviour.

    - every account gets a synthesized transfer payee
    - new categories are inserted at the top of their group
    - the budget starts with an "Income" group holding an "Income" category
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.accounts: list[LedgerAccount] = []
        self.groups: dict[str, dict] = {}
        self.categories: list[LedgerCategory] = []
        self.group_order: dict[str, list[str]] = {}
        self.payees: list[LedgerPayee] = []
        self.transactions: dict[str, list[NewTransaction]] = {}
        self.budget_amounts: dict[tuple[str, str], int] = {}
        self.carryover_calls: list[tuple[str, str, bool]] = []
        self.calls: list[tuple] = []
        self.batches_opened = 0

        income_group = self.create_category_group("Income", is_income=True)
        income_id = self.create_category("Income", income_group)
        for category in self.categories:
            if category.id == income_id:
                category.is_income = True
        self.calls.clear()

    def _new_id(self) -> str:
        return str(uuid.uuid4())

    def create_account(self, name, type, offbudget, closed):
        account_id = self._new_id()
        with self._lock:
            self.accounts.append(
                LedgerAccount(id=account_id, name=name, type=type, offbudget=offbudget, closed=closed)
            )
            self.payees.append(LedgerPayee(id=self._new_id(), name="", transfer_acct=account_id))
            self.calls.append(("create_account", name))
        return account_id

    def create_category_group(self, name, is_income=False):
        group_id = self._new_id()
        with self._lock:
            self.groups[group_id] = {"name": name, "is_income": is_income}
            self.group_order[group_id] = []
            self.calls.append(("create_category_group", name))
        return group_id

    def create_category(self, name, group_id):
        category_id = self._new_id()
        with self._lock:
            if group_id not in self.groups:
                raise KeyError(f"Unknown group {group_id}")
            self.categories.append(LedgerCategory(id=category_id, name=name, group_id=group_id))
            self.group_order[group_id].insert(0, category_id)
            self.calls.append(("create_category", name))
        return category_id

    def create_payee(self, name, category=None, transfer_acct=None):
        payee_id = self._new_id()
        with self._lock:
            self.payees.append(
                LedgerPayee(id=payee_id, name=name, category=category, transfer_acct=transfer_acct)
            )
            self.calls.append(("create_payee", name))
        return payee_id

    def get_accounts(self):
        return list(self.accounts)

    def get_categories(self):
        return list(self.categories)

    def get_payees(self):
        return list(self.payees)

    def add_transactions(self, account_id, transactions):
        with self._lock:
            self.transactions.setdefault(account_id, []).extend(transactions)
            self.calls.append(("add_transactions", account_id, len(transactions)))

    @contextmanager
    def batch_budget_updates(self):
        self.batches_opened += 1
        yield

    def set_budget_amount(self, month, category_id, amount):
        with self._lock:
            self.budget_amounts[(month, category_id)] = amount

    def set_budget_carryover(self, month, category_id, flag):
        with self._lock:
            self.carryover_calls.append((month, category_id, flag))

    # --- helpers for assertions ---

    def category_names_in_group(self, group_id: str) -> list[str]:
        names = {c.id: c.name for c in self.categories}
        return [names[c] for c in self.group_order[group_id]]

    def all_transactions(self) -> list[NewTransaction]:
        return [t for batch in self.transactions.values() for t in batch]


def sample_budget() -> dict:
    """A small Budget.yfull covering transfers, splits, off-budget and carryover."""
    return {
        "accounts": [
            {
                "entityId": "A-checking",
                "accountName": "Checking",
                "accountType": "Checking",
                "onBudget": True,
                "hidden": False,
            },
            {
                "entityId": "A-savings",
                "accountName": "Savings",
                "accountType": "Savings",
                "onBudget": True,
                "hidden": True,
            },
            {
                "entityId": "A-brokerage",
                "accountName": "Brokerage",
                "accountType": "InvestmentAccount",
                "onBudget": False,
            },
            {
                "entityId": "A-deleted",
                "accountName": "Old Card",
                "accountType": "CreditCard",
                "onBudget": True,
                "isTombstone": True,
            },
        ],
        "masterCategories": [
            {
                "entityId": "MC-bills",
                "name": "Monthly Bills",
                "type": "OUTFLOW",
                "sortableIndex": 20,
                "subCategories": [
                    {
                        "entityId": "C-rent",
                        "name": "Rent",
                        "masterCategoryId": "MC-bills",
                        "sortableIndex": 1,
                    },
                    {
                        "entityId": "C-phone",
                        "name": "Phone",
                        "masterCategoryId": "MC-bills",
                        "sortableIndex": 2,
                    },
                    {
                        "entityId": "C-old",
                        "name": "Old Bill",
                        "masterCategoryId": "MC-bills",
                        "sortableIndex": 3,
                        "isTombstone": True,
                    },
                ],
            },
            {
                "entityId": "MC-everyday",
                "name": "Everyday",
                "type": "OUTFLOW",
                "sortableIndex": 10,
                "subCategories": [
                    {
                        "entityId": "C-groceries",
                        "name": "Groceries",
                        "masterCategoryId": "MC-everyday",
                        "sortableIndex": 1,
                    },
                ],
            },
            {
                "entityId": "MC-hidden",
                "name": "Hidden Categories",
                "type": "INFLOW",
                "sortableIndex": 0,
                "subCategories": [
                    {
                        "entityId": "C-hidden",
                        "name": "Hidden",
                        "masterCategoryId": "MC-hidden",
                        "sortableIndex": 1,
                    },
                ],
            },
            {
                "entityId": "MC-empty",
                "name": "Empty",
                "type": "OUTFLOW",
                "sortableIndex": 30,
                "subCategories": [
                    {
                        "entityId": "C-gone",
                        "name": "Gone",
                        "masterCategoryId": "MC-empty",
                        "sortableIndex": 1,
                        "isTombstone": True,
                    },
                ],
            },
        ],
        "payees": [
            {"entityId": "P-landlord", "name": "Landlord", "autoFillCategoryId": "C-rent"},
            {
                "entityId": "P-market",
                "name": "Market",
                "renameConditions": [{"operator": "Contains", "operand": "MKT"}],
            },
            {
                "entityId": "P-transfer-savings",
                "name": "Transfer : Savings",
                "targetAccountId": "A-savings",
            },
            {"entityId": "P-deleted", "name": "Gone", "isTombstone": True},
        ],
        "transactions": [
            {
                "entityId": "T-rent",
                "accountId": "A-checking",
                "date": "2015-01-03",
                "amount": -950.0,
                "payeeId": "P-landlord",
                "categoryId": "C-rent",
                "memo": "January rent",
            },
            {
                "entityId": "T-salary",
                "accountId": "A-checking",
                "date": "2015-01-01",
                "amount": 2500.5,
                "categoryId": "Category/__ImmediateIncome__",
            },
            {
                "entityId": "T-split",
                "accountId": "A-checking",
                "date": "2015-01-10",
                "amount": -60.0,
                "payeeId": "P-market",
                "categoryId": "Category/__Split__",
                "subTransactions": [
                    {"entityId": "S-1", "amount": -45.25, "categoryId": "C-groceries"},
                    {
                        "entityId": "S-2",
                        "amount": -14.75,
                        "categoryId": "C-phone",
                        "memo": "top-up",
                    },
                    {
                        "entityId": "S-3",
                        "amount": -5.0,
                        "categoryId": "C-phone",
                        "isTombstone": True,
                    },
                ],
            },
            {
                "entityId": "T-to-savings",
                "accountId": "A-checking",
                "date": "2015-01-15",
                "amount": -200.0,
                "payeeId": "P-transfer-savings",
                "transferTransactionId": "T-from-checking",
                "targetAccountId": "A-savings",
            },
            {
                "entityId": "T-from-checking",
                "accountId": "A-savings",
                "date": "2015-01-15",
                "amount": 200.0,
                "transferTransactionId": "T-to-savings",
                "targetAccountId": "A-checking",
            },
            {
                "entityId": "T-dividend",
                "accountId": "A-brokerage",
                "date": "2015-02-01",
                "amount": 12.34,
                "categoryId": "Category/__DeferredIncome__",
            },
            {
                "entityId": "T-deleted",
                "accountId": "A-checking",
                "date": "2015-01-20",
                "amount": -1.0,
                "isTombstone": True,
            },
        ],
        "monthlyBudgets": [
            {
                "month": "2015-02-01",
                "monthlySubCategoryBudgets": [
                    {"categoryId": "C-rent", "budgeted": 950.0},
                    {"categoryId": "C-groceries", "budgeted": 300.0},
                ],
            },
            {
                "month": "2015-01-01",
                "monthlySubCategoryBudgets": [
                    {
                        "categoryId": "C-rent",
                        "budgeted": 950.0,
                        "overspendingHandling": "Confined",
                    },
                    {"categoryId": "C-hidden", "budgeted": 10.0},
                ],
            },
        ],
    }


@pytest.fixture
def ledger() -> FakeLedger:
    """Fresh in-memory ledger."""
    return FakeLedger()


@pytest.fixture
def budget_dict() -> dict:
    """Raw Budget.yfull contents."""
    return sample_budget()


@pytest.fixture
def document(budget_dict) -> LegacyDocument:
    """Parsed sample snapshot."""
    return LegacyDocument.from_dict(budget_dict)


def write_package(
    root: Path,
    name: str = "My Budget",
    devices: list[dict] | None = None,
    budget: dict | None = None,
) -> Path:
    """Write a YNAB4 package layout under root and return its path."""
    package = root / f"{name}~1A2B3C4D.ynab4"
    data_dir = package / "data1~5E6F"
    (data_dir / "devices").mkdir(parents=True)
    (package / "Budget.ymeta").write_text(
        json.dumps({"relativeDataFolderName": "data1~5E6F", "formatVersion": "1.2"})
    )

    if devices is None:
        devices = [
            {
                "deviceGUID": "DEVICE-A",
                "shortDeviceId": "A",
                "hasFullKnowledge": True,
                "knowledge": "A-10,B-3",
            }
        ]

    for index, device in enumerate(devices):
        (data_dir / "devices" / f"{chr(65 + index)}.ydevice").write_text(json.dumps(device))
        device_dir = data_dir / device["deviceGUID"]
        device_dir.mkdir(exist_ok=True)
        (device_dir / "Budget.yfull").write_text(json.dumps(budget or sample_budget()))

    return package
