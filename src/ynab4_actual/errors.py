"""
Migration error taxonomy.

Every condition that aborts an import run derives from MigrationError so the
runner can report it in one place. Ledger transport failures are defined
beside the client (see ledger_client.client).
"""


class MigrationError(Exception):
    """Base exception for fatal import conditions."""

    pass


class SnapshotError(MigrationError):
    """A budget package or one of its files could not be read or parsed."""

    pass


class NoAuthoritativeSnapshotError(SnapshotError):
    """No device in the package claims full knowledge of the budget history."""

    def __init__(self, candidates: int = 0):
        self.candidates = candidates
        super().__init__(
            f"No device with full knowledge found ({candidates} device file(s) examined)"
        )


class MissingAccountReferenceError(MigrationError):
    """A transaction references an account unknown to the registry or the ledger."""

    def __init__(self, legacy_account_id: str, target_account_id: str | None = None):
        self.legacy_account_id = legacy_account_id
        self.target_account_id = target_account_id
        super().__init__(
            f"Could not find account for transaction when importing "
            f"(legacy={legacy_account_id}, target={target_account_id})"
        )


class UnresolvedTransferPayeeError(MigrationError):
    """A transfer leg has no synthesized transfer payee for its counterpart account."""

    def __init__(self, transaction_id: str, target_account_id: str | None):
        self.transaction_id = transaction_id
        self.target_account_id = target_account_id
        super().__init__(
            f"No transfer payee for account {target_account_id} "
            f"(transaction {transaction_id})"
        )


class MissingIncomeCategoryError(MigrationError):
    """The ledger does not expose exactly one category named 'Income'."""

    def __init__(self, found: int):
        self.found = found
        super().__init__(f"Expected exactly one 'Income' category in the ledger, found {found}")
