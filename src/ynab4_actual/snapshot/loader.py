"""
YNAB4 package loader.

A ``.ynab4`` package is a directory named ``<budget name>~<id>.ynab4``::

    Budget.ymeta                  -> {"relativeDataFolderName": "data1~XXXX"}
    data1~XXXX/devices/*.ydevice  -> one metadata file per synced device
    data1~XXXX/<deviceGUID>/Budget.yfull

The loader finds packages, reads the device metadata, asks the device
selector which copy is authoritative and parses that copy's Budget.yfull.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..errors import SnapshotError
from ..schemas.legacy_document import LegacyDocument
from .device_selector import DeviceRecord, select_device

logger = logging.getLogger(__name__)

PACKAGE_PATTERN = re.compile(r"^([^~]*)~.*\.ynab4")
PACKAGE_PATH_PATTERN = re.compile(r"/([^/~]*)~.*\.ynab4")


@dataclass
class BudgetPackage:
    """A YNAB4 package found on disk."""

    name: str
    path: Path


@dataclass
class Snapshot:
    """The authoritative contents of a package."""

    name: str
    device: DeviceRecord
    document: LegacyDocument


def find_budgets(search_dirs: Iterable[Path]) -> list[BudgetPackage]:
    """List YNAB4 packages directly inside the given directories.

    Missing directories are ignored.
    """
    found: list[BudgetPackage] = []
    for directory in search_dirs:
        directory = Path(directory)
        if not directory.is_dir():
            logger.debug("Search directory %s does not exist", directory)
            continue

        for entry in sorted(directory.iterdir()):
            match = PACKAGE_PATTERN.match(entry.name)
            if match:
                found.append(BudgetPackage(name=match.group(1), path=entry))

    return found


def budget_name_from_path(path: Path) -> str:
    """Extract the budget name from a package path.

    Raises:
        SnapshotError: If the path is not a ``<name>~<id>.ynab4`` package
    """
    match = PACKAGE_PATH_PATTERN.search(Path(path).resolve().as_posix())
    if not match:
        raise SnapshotError(f"Not a YNAB4 file: {path}")
    return match.group(1)


def _read_json(path: Path, what: str):
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Error reading {what} file {path}: {e}") from e

    try:
        return json.loads(contents)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Error parsing {what} file {path}: {e}") from e


def data_folder(package_path: Path) -> Path:
    """Resolve the data folder named in Budget.ymeta."""
    meta = _read_json(Path(package_path) / "Budget.ymeta", "Budget.ymeta")
    try:
        return Path(package_path) / meta["relativeDataFolderName"]
    except (KeyError, TypeError) as e:
        raise SnapshotError(f"Budget.ymeta has no relativeDataFolderName: {package_path}") from e


def load_device_records(package_path: Path) -> list[DeviceRecord]:
    """Read every device metadata file of a package.

    Files that cannot be read or parsed are skipped with a warning.
    """
    devices_dir = data_folder(package_path) / "devices"
    if not devices_dir.is_dir():
        raise SnapshotError(f"No devices folder in {package_path}")

    records: list[DeviceRecord] = []
    for device_file in sorted(devices_dir.iterdir()):
        if not device_file.is_file():
            continue
        try:
            data = json.loads(device_file.read_text(encoding="utf-8"))
            records.append(DeviceRecord.from_dict(data, path=str(device_file)))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Skipping unreadable device file %s: %s", device_file.name, e)

    return records


def load_snapshot(package_path: Path) -> Snapshot:
    """Load the authoritative snapshot of a package.

    Raises:
        SnapshotError: If the package layout or Budget.yfull is unreadable
        NoAuthoritativeSnapshotError: If no device has full knowledge
    """
    package_path = Path(package_path)
    name = budget_name_from_path(package_path)

    device = select_device(load_device_records(package_path))

    yfull_path = data_folder(package_path) / device.device_guid / "Budget.yfull"
    logger.info("Loading %s", yfull_path)
    document = LegacyDocument.from_dict(_read_json(yfull_path, "Budget.yfull"))

    return Snapshot(name=name, device=device, document=document)
