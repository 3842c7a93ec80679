"""
Ledger Service interface.

Everything the importer needs from the target Actual budget, expressed as an
abstract class so the pipeline can run against the HTTP client or any other
implementation (tests use an in-memory one).
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class LedgerAccount:
    """Account as reported by the ledger."""

    id: str
    name: str
    type: Optional[str] = None
    offbudget: bool = False
    closed: bool = False


@dataclass
class LedgerCategory:
    """Category as reported by the ledger."""

    id: str
    name: str
    group_id: Optional[str] = None
    is_income: bool = False


@dataclass
class LedgerPayee:
    """Payee as reported by the ledger.

    The ledger synthesizes one payee per account with transfer_acct set to
    that account's id; transfers are expressed through these payees.
    """

    id: str
    name: str
    category: Optional[str] = None
    transfer_acct: Optional[str] = None


@dataclass
class NewSplitLine:
    """One line of a split transaction to insert."""

    amount: int
    category_id: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "category": self.category_id,
            "notes": self.notes,
        }


@dataclass
class NewTransaction:
    """Transaction to insert. Amounts are integer minor units."""

    id: str
    amount: int
    date: str
    category_id: Optional[str] = None
    payee_id: Optional[str] = None
    notes: Optional[str] = None
    transfer_id: Optional[str] = None
    subtransactions: list[NewSplitLine] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to the ledger's transaction shape."""
        data = {
            "id": self.id,
            "amount": self.amount,
            "date": self.date,
            "category": self.category_id,
            "payee": self.payee_id,
            "notes": self.notes,
            "transfer_id": self.transfer_id,
        }
        if self.subtransactions:
            data["subtransactions"] = [s.to_dict() for s in self.subtransactions]
        return data


class LedgerService(ABC):
    """
    Abstract target ledger.

    Create operations return the new entity's id. Implementations must be
    safe to call from several threads at once.
    """

    @abstractmethod
    def create_account(self, name: str, type: str, offbudget: bool, closed: bool) -> str:
        """Create an account and return its id."""

    @abstractmethod
    def create_category_group(self, name: str, is_income: bool = False) -> str:
        """Create a category group and return its id."""

    @abstractmethod
    def create_category(self, name: str, group_id: str) -> str:
        """Create a category at the top of its group and return its id."""

    @abstractmethod
    def create_payee(
        self, name: str, category: str | None = None, transfer_acct: str | None = None
    ) -> str:
        """Create a payee and return its id."""

    @abstractmethod
    def get_accounts(self) -> list[LedgerAccount]:
        """List all accounts."""

    @abstractmethod
    def get_categories(self) -> list[LedgerCategory]:
        """List all categories as a flat list."""

    @abstractmethod
    def get_payees(self) -> list[LedgerPayee]:
        """List all payees, including synthesized transfer payees."""

    @abstractmethod
    def add_transactions(self, account_id: str, transactions: list[NewTransaction]) -> None:
        """Insert a batch of transactions into one account."""

    @abstractmethod
    def batch_budget_updates(self) -> AbstractContextManager:
        """Context manager grouping budget writes into one batch."""

    @abstractmethod
    def set_budget_amount(self, month: str, category_id: str, amount: int) -> None:
        """Set the budgeted amount of a category for a "YYYY-MM" month."""

    @abstractmethod
    def set_budget_carryover(self, month: str, category_id: str, flag: bool) -> None:
        """Set the carryover flag of a category for a "YYYY-MM" month."""
