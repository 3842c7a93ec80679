"""
Identifier registry.

One registry is created per import run and passed by reference through every
stage. It maps YNAB4 entity ids to Actual ids and is append-only.

There is no locking: a key is always written by an earlier stage than the
one that reads it, so stage ordering provides the happens-before edge.
"""

import uuid
from typing import Optional


class IdentifierRegistry:
    """Maps legacy entity ids to target ids."""

    def __init__(self) -> None:
        self._ids: dict[str, str] = {}

    def allocate(self, legacy_id: str) -> str:
        """Record a freshly generated target id for a legacy id."""
        target_id = str(uuid.uuid4())
        self._ids[legacy_id] = target_id
        return target_id

    def set(self, legacy_id: str, target_id: str) -> None:
        """Record the id returned by a ledger create call."""
        self._ids[legacy_id] = target_id

    def get(self, legacy_id: Optional[str]) -> Optional[str]:
        """Return the target id, or None for unknown (or None) legacy ids."""
        if legacy_id is None:
            return None
        return self._ids.get(legacy_id)

    def __contains__(self, legacy_id: object) -> bool:
        return legacy_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)
