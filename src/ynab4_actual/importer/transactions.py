"""
Transaction import stage.

Core Invariants:
- Every source transaction (deleted or not) gets a target id before anything
  is written, so a transfer leg can point at its counterpart regardless of
  which account is processed first
- Transactions of an off-budget account never carry a category
- A transfer leg's payee is the ledger's transfer payee of the counterpart
  account (a join on transfer_acct, not an id copy)
- One batched insert per account
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from ..errors import (
    MissingAccountReferenceError,
    MissingIncomeCategoryError,
    UnresolvedTransferPayeeError,
)
from ..ledger_client.base import (
    LedgerAccount,
    LedgerCategory,
    LedgerPayee,
    LedgerService,
    NewSplitLine,
    NewTransaction,
)
from ..schemas.amounts import amount_to_integer
from ..schemas.legacy_document import (
    INCOME_CATEGORIES,
    SPLIT_CATEGORY,
    LegacyDocument,
    SubTransaction,
    Transaction,
)
from .concurrency import fan_out
from .registry import IdentifierRegistry

logger = logging.getLogger(__name__)

INCOME_CATEGORY_NAME = "Income"


def find_income_category(categories: list[LedgerCategory]) -> str:
    """Return the id of the ledger's single 'Income' category.

    Raises:
        MissingIncomeCategoryError: If there is not exactly one candidate
    """
    candidates = [c for c in categories if c.name == INCOME_CATEGORY_NAME]
    if len(candidates) > 1:
        candidates = [c for c in candidates if c.is_income]
    if len(candidates) != 1:
        raise MissingIncomeCategoryError(len(candidates))
    return candidates[0].id


@dataclass
class TransactionMapper:
    """Maps source transactions to ledger transactions for one run."""

    registry: IdentifierRegistry
    income_category_id: str
    accounts: dict[str, LedgerAccount]
    payees: list[LedgerPayee]
    suppress_split_categories_off_budget: bool = False

    @classmethod
    def from_ledger(
        cls,
        ledger: LedgerService,
        registry: IdentifierRegistry,
        suppress_split_categories_off_budget: bool = False,
    ) -> "TransactionMapper":
        return cls(
            registry=registry,
            income_category_id=find_income_category(ledger.get_categories()),
            accounts={a.id: a for a in ledger.get_accounts()},
            payees=ledger.get_payees(),
            suppress_split_categories_off_budget=suppress_split_categories_off_budget,
        )

    def resolve_category(self, category_id: Optional[str]) -> Optional[str]:
        if category_id is None or category_id == SPLIT_CATEGORY:
            return None
        if category_id in INCOME_CATEGORIES:
            return self.income_category_id
        return self.registry.get(category_id)

    def resolve_account(self, legacy_account_id: str) -> LedgerAccount:
        target_id = self.registry.get(legacy_account_id)
        account = self.accounts.get(target_id) if target_id else None
        if account is None:
            raise MissingAccountReferenceError(legacy_account_id, target_id)
        return account

    def transfer_payee(self, transaction: Transaction) -> str:
        target_account = self.registry.get(transaction.target_account_id)
        for payee in self.payees:
            if target_account is not None and payee.transfer_acct == target_account:
                return payee.id
        raise UnresolvedTransferPayeeError(transaction.entity_id, target_account)

    def map_split(self, sub: SubTransaction, offbudget: bool) -> NewSplitLine:
        if offbudget and self.suppress_split_categories_off_budget:
            category_id = None
        else:
            category_id = self.resolve_category(sub.category_id)
        return NewSplitLine(
            amount=amount_to_integer(sub.amount),
            category_id=category_id,
            notes=sub.memo or None,
        )

    def map_transaction(self, transaction: Transaction, account: LedgerAccount) -> NewTransaction:
        transfer_id = self.registry.get(transaction.transfer_transaction_id)
        if transfer_id:
            payee_id = self.transfer_payee(transaction)
        else:
            payee_id = self.registry.get(transaction.payee_id)

        return NewTransaction(
            id=self.registry.get(transaction.entity_id),
            amount=amount_to_integer(transaction.amount),
            date=transaction.date,
            category_id=None if account.offbudget else self.resolve_category(transaction.category_id),
            payee_id=payee_id,
            notes=transaction.memo or None,
            transfer_id=transfer_id,
            subtransactions=[
                self.map_split(sub, account.offbudget)
                for sub in transaction.sub_transactions
                if not sub.is_tombstone
            ],
        )


def import_transactions(
    document: LegacyDocument,
    ledger: LedgerService,
    registry: IdentifierRegistry,
    max_workers: int = 4,
    suppress_split_categories_off_budget: bool = False,
) -> int:
    """Insert all live transactions, one batch per account.

    Returns:
        Number of transactions inserted

    Raises:
        MissingIncomeCategoryError: If the ledger has no unique Income category
        MissingAccountReferenceError: If a transaction's account is unknown
        UnresolvedTransferPayeeError: If a transfer leg has no transfer payee
    """
    mapper = TransactionMapper.from_ledger(ledger, registry, suppress_split_categories_off_budget)

    for transaction in document.transactions:
        registry.allocate(transaction.entity_id)

    by_account: dict[str, list[Transaction]] = defaultdict(list)
    for transaction in document.transactions:
        by_account[transaction.account_id].append(transaction)

    def import_account(item: tuple[str, list[Transaction]]) -> int:
        legacy_account_id, transactions = item
        live = [t for t in transactions if not t.is_tombstone]
        if not live:
            return 0

        account = mapper.resolve_account(legacy_account_id)
        batch = [mapper.map_transaction(t, account) for t in live]
        ledger.add_transactions(account.id, batch)
        logger.debug("Account %s: %d transaction(s)", account.name, len(batch))
        return len(batch)

    counts = fan_out(import_account, list(by_account.items()), max_workers)
    return sum(counts)
