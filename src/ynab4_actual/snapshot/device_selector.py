"""
Authoritative device selection.

Every device that synced a YNAB4 budget keeps its own copy of the data plus a
knowledge string such as ``"A-120,B-87,C-4"``: for each device short id, the
latest version number it has seen. Version numbers only ever increase, so the
sum of a knowledge string estimates how many edits that device is aware of.
The device with the largest sum holds the most complete snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import NoAuthoritativeSnapshotError

logger = logging.getLogger(__name__)


@dataclass
class DeviceRecord:
    """Contents of one ``devices/*.ydevice`` metadata file."""

    device_guid: str
    has_full_knowledge: bool
    knowledge: str
    short_device_id: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict, path: str | None = None) -> "DeviceRecord":
        knowledge = data.get("knowledge") or ""
        if not isinstance(knowledge, str):
            raise TypeError(f"knowledge must be a string, got {type(knowledge).__name__}")
        return cls(
            device_guid=data["deviceGUID"],
            has_full_knowledge=bool(data.get("hasFullKnowledge", False)),
            knowledge=knowledge,
            short_device_id=data.get("shortDeviceId"),
            path=path,
        )


def estimate_recentness(knowledge: str) -> int:
    """
    Sum the version numbers of a knowledge string.

    Args:
        knowledge: Comma-separated ``deviceShortId-versionNumber`` tokens

    Returns:
        Total of all version numbers

    Raises:
        ValueError: If a token has no numeric version part

    Examples:
        >>> estimate_recentness("A-3,B-5")
        8
    """
    total = 0
    for token in knowledge.split(","):
        _, sep, number = token.strip().rpartition("-")
        if not sep:
            raise ValueError(f"Malformed knowledge token: {token!r}")
        total += int(number)
    return total


def select_device(records: Iterable[DeviceRecord]) -> DeviceRecord:
    """
    Pick the device holding the most complete snapshot.

    Only devices claiming full knowledge are eligible. Among those, the
    highest recentness wins; equal scores go to the record seen first.

    Raises:
        NoAuthoritativeSnapshotError: If no record is eligible
    """
    best: DeviceRecord | None = None
    best_score = -1
    examined = 0

    for record in records:
        examined += 1
        if not record.has_full_knowledge:
            logger.debug("Device %s lacks full knowledge, skipping", record.device_guid)
            continue

        try:
            score = estimate_recentness(record.knowledge)
        except ValueError as e:
            logger.warning("Ignoring device %s: %s", record.device_guid, e)
            continue

        logger.debug("Device %s recentness=%d", record.device_guid, score)
        if score > best_score:
            best, best_score = record, score

    if best is None:
        raise NoAuthoritativeSnapshotError(examined)

    logger.info("Selected device %s (recentness %d)", best.device_guid, best_score)
    return best
