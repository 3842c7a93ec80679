"""
Actual ledger HTTP client implementation.

Talks to an Actual server through its REST bridge
(``/v1/budgets/{budget_sync_id}/...``). Every response wraps its payload in
a ``{"data": ...}`` envelope.
"""

import json
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .base import (
    LedgerAccount,
    LedgerCategory,
    LedgerPayee,
    LedgerService,
    NewTransaction,
)

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base exception for ledger client errors."""

    pass


class LedgerAPIError(LedgerError):
    """API returned an error response."""

    def __init__(self, status_code: int, message: str, response_body: str | None = None):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        super().__init__(f"Ledger API error {status_code}: {message}")


class LedgerConnectionError(LedgerError):
    """Failed to connect to the ledger server."""

    pass


class LedgerClient(LedgerService):
    """
    Client for the Actual REST bridge.

    Features:
    - Entity creation and listing
    - Batched transaction inserts per account
    - Buffered budget writes inside batch_budget_updates()
    - Automatic retry with backoff
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        api_key: str,
        budget_sync_id: str,
        encryption_password: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ):
        """
        Initialize the ledger client.

        Args:
            base_url: REST bridge URL (e.g., "http://localhost:5007")
            api_key: API key for the bridge
            budget_sync_id: Sync id of the target budget
            encryption_password: Password for end-to-end encrypted budgets
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts
            backoff_factor: Backoff factor for retries
        """
        self.base_url = base_url.rstrip("/")
        self.budget_sync_id = budget_sync_id
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update(
            {
                "x-api-key": api_key,
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        if encryption_password:
            self.session.headers["budget-encryption-password"] = encryption_password

        # Creates are not idempotent, so only reads are retried
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self._batch_lock = threading.Lock()
        self._batch_depth = 0
        self._budget_buffer: dict[tuple[str, str], dict] = {}

    @property
    def budget_url(self) -> str:
        return f"/v1/budgets/{self.budget_sync_id}"

    def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict | None = None,
    ) -> requests.Response:
        """Make an API request with error handling."""
        url = f"{self.base_url}{endpoint}"

        logger.debug(f"API Request: {method} {url}")
        if json_data:
            logger.debug(f"Request body: {json.dumps(json_data)[:2000]}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise LedgerConnectionError(
                f"Failed to connect to ledger at {self.base_url}: {e}"
            ) from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise LedgerConnectionError(f"Request to ledger timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise LedgerError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            error_body = response.text
            try:
                message = response.json().get("error", response.reason)
            except ValueError:
                message = response.reason

            logger.error(f"API Error {response.status_code}: {message}")
            raise LedgerAPIError(
                status_code=response.status_code,
                message=message,
                response_body=error_body,
            )

        return response

    def _data(self, response: requests.Response):
        return response.json().get("data")

    def test_connection(self) -> bool:
        """Test that the bridge is reachable and the budget can be opened."""
        try:
            self._request("GET", f"{self.budget_url}/accounts")
            return True
        except LedgerError:
            return False

    # --- creates ---

    def create_account(self, name: str, type: str, offbudget: bool, closed: bool) -> str:
        response = self._request(
            "POST",
            f"{self.budget_url}/accounts",
            json_data={
                "account": {
                    "name": name,
                    "type": type,
                    "offbudget": offbudget,
                    "closed": closed,
                },
                "initialBalance": 0,
            },
        )
        account_id = self._data(response)
        logger.debug(f"Created account '{name}' id={account_id}")
        return account_id

    def create_category_group(self, name: str, is_income: bool = False) -> str:
        response = self._request(
            "POST",
            f"{self.budget_url}/categorygroups",
            json_data={"category_group": {"name": name, "is_income": is_income}},
        )
        return self._data(response)

    def create_category(self, name: str, group_id: str) -> str:
        response = self._request(
            "POST",
            f"{self.budget_url}/categories",
            json_data={"category": {"name": name, "group_id": group_id}},
        )
        return self._data(response)

    def create_payee(
        self, name: str, category: str | None = None, transfer_acct: str | None = None
    ) -> str:
        response = self._request(
            "POST",
            f"{self.budget_url}/payees",
            json_data={
                "payee": {"name": name, "category": category, "transfer_acct": transfer_acct}
            },
        )
        return self._data(response)

    # --- listings ---

    def get_accounts(self) -> list[LedgerAccount]:
        response = self._request("GET", f"{self.budget_url}/accounts")
        return [
            LedgerAccount(
                id=item["id"],
                name=item.get("name", ""),
                type=item.get("type"),
                offbudget=bool(item.get("offbudget", False)),
                closed=bool(item.get("closed", False)),
            )
            for item in self._data(response) or []
        ]

    def get_categories(self) -> list[LedgerCategory]:
        response = self._request("GET", f"{self.budget_url}/categories")
        return [
            LedgerCategory(
                id=item["id"],
                name=item.get("name", ""),
                group_id=item.get("group_id"),
                is_income=bool(item.get("is_income", False)),
            )
            for item in self._data(response) or []
        ]

    def get_payees(self) -> list[LedgerPayee]:
        response = self._request("GET", f"{self.budget_url}/payees")
        return [
            LedgerPayee(
                id=item["id"],
                name=item.get("name", ""),
                category=item.get("category"),
                transfer_acct=item.get("transfer_acct"),
            )
            for item in self._data(response) or []
        ]

    # --- transactions ---

    def add_transactions(self, account_id: str, transactions: list[NewTransaction]) -> None:
        if not transactions:
            return

        self._request(
            "POST",
            f"{self.budget_url}/accounts/{account_id}/transactions/batch",
            json_data={
                "transactions": [t.to_dict() for t in transactions],
                "runTransfers": False,
            },
        )
        logger.info(f"Inserted {len(transactions)} transaction(s) into account {account_id}")

    # --- budgets ---

    @contextmanager
    def batch_budget_updates(self) -> Iterator[None]:
        """
        Buffer budget writes and flush them when the outermost block exits.

        Writes to the same (month, category) are merged into one request and
        flushed in first-write order. If the block raises, the buffer is
        discarded and nothing is sent.
        """
        with self._batch_lock:
            self._batch_depth += 1

        try:
            yield
        except BaseException:
            with self._batch_lock:
                self._batch_depth -= 1
                if self._batch_depth == 0:
                    dropped = len(self._budget_buffer)
                    self._budget_buffer.clear()
                    logger.warning(f"Budget batch aborted, discarded {dropped} pending update(s)")
            raise

        with self._batch_lock:
            self._batch_depth -= 1
            if self._batch_depth > 0:
                return
            pending = list(self._budget_buffer.items())
            self._budget_buffer.clear()

        logger.info(f"Flushing {len(pending)} budget update(s)")
        for (month, category_id), fields in pending:
            self._patch_month_category(month, category_id, fields)

    def _queue_or_send(self, month: str, category_id: str, fields: dict) -> None:
        with self._batch_lock:
            if self._batch_depth > 0:
                self._budget_buffer.setdefault((month, category_id), {}).update(fields)
                return

        self._patch_month_category(month, category_id, fields)

    def _patch_month_category(self, month: str, category_id: str, fields: dict) -> None:
        self._request(
            "PATCH",
            f"{self.budget_url}/months/{month}/categories/{category_id}",
            json_data={"category": fields},
        )

    def set_budget_amount(self, month: str, category_id: str, amount: int) -> None:
        self._queue_or_send(month, category_id, {"budgeted": amount})

    def set_budget_carryover(self, month: str, category_id: str, flag: bool) -> None:
        self._queue_or_send(month, category_id, {"carryover": flag})
