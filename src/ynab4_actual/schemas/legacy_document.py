"""
Canonical YNAB4 snapshot model (SSOT).

Typed, read-only view of a parsed Budget.yfull document. Only the fields the
importer consumes are modelled; everything else in the JSON is ignored.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..errors import SnapshotError

# Master category types
OUTFLOW = "OUTFLOW"

# Pseudo-category markers used by YNAB4 transactions
SPLIT_CATEGORY = "Category/__Split__"
IMMEDIATE_INCOME_CATEGORY = "Category/__ImmediateIncome__"
DEFERRED_INCOME_CATEGORY = "Category/__DeferredIncome__"
INCOME_CATEGORIES = frozenset({IMMEDIATE_INCOME_CATEGORY, DEFERRED_INCOME_CATEGORY})

# Overspending handling markers on monthly category budgets
AFFECTS_BUFFER = "AffectsBuffer"
CONFINED = "Confined"


def _entity_id(data: dict, kind: str) -> str:
    try:
        return data["entityId"]
    except KeyError:
        raise SnapshotError(f"{kind} entry without entityId: {data!r:.200}") from None


def _amount(value) -> Decimal:
    if value is None:
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise SnapshotError(f"Invalid amount: {value!r:.50}") from None


@dataclass
class Account:
    """A YNAB4 account."""

    entity_id: str
    name: str
    account_type: Optional[str] = None
    on_budget: bool = True
    hidden: bool = False
    is_tombstone: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            entity_id=_entity_id(data, "account"),
            name=data.get("accountName", ""),
            account_type=data.get("accountType"),
            on_budget=bool(data.get("onBudget", False)),
            hidden=bool(data.get("hidden", False)),
            is_tombstone=bool(data.get("isTombstone", False)),
        )


@dataclass
class SubCategory:
    """A budget category inside a master category."""

    entity_id: str
    name: str
    master_category_id: Optional[str] = None
    sortable_index: float = 0
    is_tombstone: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "SubCategory":
        return cls(
            entity_id=_entity_id(data, "subCategory"),
            name=data.get("name", ""),
            master_category_id=data.get("masterCategoryId"),
            sortable_index=data.get("sortableIndex", 0),
            is_tombstone=bool(data.get("isTombstone", False)),
        )


@dataclass
class MasterCategory:
    """A category group with its ordered subcategories."""

    entity_id: str
    name: str
    type: Optional[str] = None
    sortable_index: float = 0
    is_tombstone: bool = False
    sub_categories: list[SubCategory] = field(default_factory=list)

    @property
    def active_sub_categories(self) -> list[SubCategory]:
        return [c for c in self.sub_categories if not c.is_tombstone]

    @classmethod
    def from_dict(cls, data: dict) -> "MasterCategory":
        return cls(
            entity_id=_entity_id(data, "masterCategory"),
            name=data.get("name", ""),
            type=data.get("type"),
            sortable_index=data.get("sortableIndex", 0),
            is_tombstone=bool(data.get("isTombstone", False)),
            sub_categories=[SubCategory.from_dict(c) for c in data.get("subCategories") or []],
        )


@dataclass
class Payee:
    """A YNAB4 payee. Transfer payees carry a target account."""

    entity_id: str
    name: str
    auto_fill_category_id: Optional[str] = None
    target_account_id: Optional[str] = None
    rename_conditions: list[dict] = field(default_factory=list)
    is_tombstone: bool = False

    @property
    def has_rules(self) -> bool:
        """True if the payee carries rename rules (not imported)."""
        return bool(self.rename_conditions)

    @classmethod
    def from_dict(cls, data: dict) -> "Payee":
        return cls(
            entity_id=_entity_id(data, "payee"),
            name=data.get("name", ""),
            auto_fill_category_id=data.get("autoFillCategoryId"),
            target_account_id=data.get("targetAccountId"),
            rename_conditions=data.get("renameConditions") or [],
            is_tombstone=bool(data.get("isTombstone", False)),
        )


@dataclass
class SubTransaction:
    """One line of a split transaction."""

    entity_id: str
    amount: Decimal
    category_id: Optional[str] = None
    memo: Optional[str] = None
    is_tombstone: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "SubTransaction":
        return cls(
            entity_id=_entity_id(data, "subTransaction"),
            amount=_amount(data.get("amount")),
            category_id=data.get("categoryId"),
            memo=data.get("memo"),
            is_tombstone=bool(data.get("isTombstone", False)),
        )


@dataclass
class Transaction:
    """A YNAB4 transaction, possibly one leg of a transfer or a split."""

    entity_id: str
    account_id: str
    date: str
    amount: Decimal
    payee_id: Optional[str] = None
    category_id: Optional[str] = None
    memo: Optional[str] = None
    transfer_transaction_id: Optional[str] = None
    target_account_id: Optional[str] = None
    is_tombstone: bool = False
    sub_transactions: list[SubTransaction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            entity_id=_entity_id(data, "transaction"),
            account_id=data.get("accountId", ""),
            date=data.get("date", ""),
            amount=_amount(data.get("amount")),
            payee_id=data.get("payeeId"),
            category_id=data.get("categoryId"),
            memo=data.get("memo"),
            transfer_transaction_id=data.get("transferTransactionId"),
            target_account_id=data.get("targetAccountId"),
            is_tombstone=bool(data.get("isTombstone", False)),
            sub_transactions=[
                SubTransaction.from_dict(s) for s in data.get("subTransactions") or []
            ],
        )


@dataclass
class MonthlyCategoryBudget:
    """Budgeted amount of one category in one month."""

    category_id: str
    budgeted: Decimal = Decimal(0)
    overspending_handling: Optional[str] = None
    is_tombstone: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyCategoryBudget":
        return cls(
            category_id=data.get("categoryId", ""),
            budgeted=_amount(data.get("budgeted")),
            overspending_handling=data.get("overspendingHandling"),
            is_tombstone=bool(data.get("isTombstone", False)),
        )


@dataclass
class MonthlyBudget:
    """All category budgets of one month."""

    month: str  # ISO date of the first day, e.g. "2015-03-01"
    category_budgets: list[MonthlyCategoryBudget] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyBudget":
        return cls(
            month=data.get("month", ""),
            category_budgets=[
                MonthlyCategoryBudget.from_dict(b)
                for b in data.get("monthlySubCategoryBudgets") or []
            ],
        )


@dataclass
class LegacyDocument:
    """
    A parsed YNAB4 Budget.yfull snapshot.

    Entities keep their source order; importers sort where order matters.
    """

    accounts: list[Account] = field(default_factory=list)
    master_categories: list[MasterCategory] = field(default_factory=list)
    payees: list[Payee] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    monthly_budgets: list[MonthlyBudget] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "LegacyDocument":
        """Build the document from the raw Budget.yfull JSON object."""
        if not isinstance(data, dict):
            raise SnapshotError(f"Expected a JSON object, got {type(data).__name__}")

        return cls(
            accounts=[Account.from_dict(a) for a in data.get("accounts") or []],
            master_categories=[
                MasterCategory.from_dict(m) for m in data.get("masterCategories") or []
            ],
            payees=[Payee.from_dict(p) for p in data.get("payees") or []],
            transactions=[Transaction.from_dict(t) for t in data.get("transactions") or []],
            monthly_budgets=[MonthlyBudget.from_dict(b) for b in data.get("monthlyBudgets") or []],
        )
