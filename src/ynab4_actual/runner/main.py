"""
CLI main entry point.
"""

import argparse
import logging
import sys
from pathlib import Path

from ..config import Config, ConfigValidationError, create_default_config, load_config
from ..errors import MigrationError
from ..importer import run_import
from ..ledger_client import LedgerClient, LedgerError
from ..snapshot import (
    estimate_recentness,
    find_budgets,
    load_device_records,
    load_snapshot,
    select_device,
)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ynab4-actual",
        description="Import a YNAB4 budget into Actual",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init", help="Write a default config file")

    subparsers.add_parser("find", help="List YNAB4 budgets in the configured directories")

    devices_parser = subparsers.add_parser(
        "devices", help="Show the device copies of a budget and which one is used"
    )
    devices_parser.add_argument("path", type=Path, help="Path to the .ynab4 package")

    import_parser = subparsers.add_parser("import", help="Import a YNAB4 budget into Actual")
    import_parser.add_argument("path", type=Path, help="Path to the .ynab4 package")
    import_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and summarize the snapshot without writing to Actual",
    )

    return parser


def cmd_init(config_path: Path) -> int:
    """Write a default config file."""
    if config_path.exists():
        print(f"❌ {config_path} already exists")
        return 1

    create_default_config(config_path)
    print(f"✓ Wrote {config_path}")
    return 0


def cmd_find(config: Config) -> int:
    """List budgets found in the search directories."""
    budgets = find_budgets(config.snapshot_dirs)

    if not budgets:
        print("No YNAB4 budgets found in:")
        for directory in config.snapshot_dirs:
            print(f"  {directory}")
        return 0

    for budget in budgets:
        print(f"  📁 {budget.name}  ({budget.path})")

    print(f"\n✓ Found {len(budgets)} budget(s)")
    return 0


def cmd_devices(path: Path) -> int:
    """Show device copies and the selected one."""
    records = load_device_records(path)
    selected = select_device(records)

    for record in records:
        marker = "→" if record is selected else " "
        try:
            score = str(estimate_recentness(record.knowledge))
        except ValueError:
            score = "?"
        knowledge = "full" if record.has_full_knowledge else "partial"
        print(f"  {marker} {record.device_guid}  {knowledge:<8} recentness={score}")

    return 0


def cmd_import(config: Config, path: Path, dry_run: bool) -> int:
    """Import a budget into Actual."""
    print(f"📥 Loading {path}...")
    snapshot = load_snapshot(path)
    document = snapshot.document

    print(f"  → Budget: {snapshot.name}")
    print(f"  → Device: {snapshot.device.device_guid}")
    print(
        f"  → {len(document.accounts)} accounts, "
        f"{len(document.master_categories)} master categories, "
        f"{len(document.payees)} payees, "
        f"{len(document.transactions)} transactions, "
        f"{len(document.monthly_budgets)} budget months"
    )

    if dry_run:
        print("\n  ℹ️  DRY RUN - nothing was written to Actual")
        return 0

    errors = config.validate()
    if errors:
        raise ConfigValidationError("; ".join(errors))

    ledger = LedgerClient(
        base_url=config.ledger.base_url,
        api_key=config.ledger.api_key,
        budget_sync_id=config.ledger.budget_sync_id,
        encryption_password=config.ledger.encryption_password,
        timeout=config.ledger.timeout_seconds,
        max_retries=config.ledger.max_retries,
    )

    print(f"  → Connecting to Actual: {config.ledger.base_url}")
    if not ledger.test_connection():
        print("❌ Failed to connect to Actual")
        print("   Check ACTUAL_URL, ACTUAL_API_KEY and ACTUAL_BUDGET_SYNC_ID")
        return 1

    result = run_import(document, ledger, config.importer)

    print()
    print("📊 Import Results")
    print("=" * 40)
    print(f"  Accounts:        {result.accounts}")
    print(f"  Category groups: {result.category_groups}")
    print(f"  Categories:      {result.categories}")
    print(f"  Payees:          {result.payees}")
    print(f"  Transactions:    {result.transactions}")
    print(f"  Budget months:   {result.budget_months}")
    print(f"  Duration:        {result.duration_ms}ms")
    print()

    if result.warnings:
        print("⚠️  Warnings:")
        for warning in result.warnings:
            print(f"   - {warning}")

    print("✓ Import completed")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init":
        return cmd_init(parsed.config)

    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    try:
        if parsed.command == "find":
            return cmd_find(config)
        elif parsed.command == "devices":
            return cmd_devices(parsed.path)
        elif parsed.command == "import":
            return cmd_import(config, parsed.path, parsed.dry_run)
    except (MigrationError, LedgerError, ConfigValidationError) as e:
        logger.exception(f"{parsed.command} failed")
        print(f"❌ Error: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
