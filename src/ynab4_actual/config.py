"""
Configuration management (SSOT).

This module defines ALL configuration for the YNAB4 → Actual importer.
All config keys are defined here; no other module should invent config keys.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


def _default_snapshot_dirs() -> list[Path]:
    home = Path.home()
    return [home / "Documents" / "YNAB", home / "Dropbox" / "YNAB"]


@dataclass
class LedgerConfig:
    """Actual server (REST bridge) configuration.

    - base_url: URL of the HTTP bridge in front of the Actual server
    - api_key: Key sent as the x-api-key header
    - budget_sync_id: Sync id of the (empty) target budget
    - encryption_password: Only needed for end-to-end encrypted budgets
    """

    base_url: str
    api_key: str
    budget_sync_id: str
    encryption_password: str | None = None
    timeout_seconds: int = 30
    max_retries: int = 3


@dataclass
class ImporterConfig:
    """Import pipeline settings."""

    # Thread pool size for fan-out stages (accounts, groups, per-account batches)
    max_workers: int = 4
    # Also strip split-line categories for off-budget accounts
    suppress_split_categories_off_budget: bool = False


@dataclass
class Config:
    """Application configuration (SSOT)."""

    ledger: LedgerConfig
    importer: ImporterConfig = field(default_factory=ImporterConfig)
    snapshot_dirs: list[Path] = field(default_factory=_default_snapshot_dirs)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.ledger.base_url:
            errors.append("ledger.base_url is required")
        if not self.ledger.budget_sync_id:
            errors.append("ledger.budget_sync_id is required")
        if self.importer.max_workers < 1:
            errors.append("importer.max_workers must be >= 1")

        return errors


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - ACTUAL_URL
    - ACTUAL_API_KEY
    - ACTUAL_BUDGET_SYNC_ID
    - ACTUAL_ENCRYPTION_PASSWORD
    - YNAB4_IMPORT_MAX_WORKERS
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    ledger_data = data.get("ledger", {})
    ledger = LedgerConfig(
        base_url=os.environ.get("ACTUAL_URL", ledger_data.get("base_url", "http://localhost:5007")),
        api_key=os.environ.get("ACTUAL_API_KEY", ledger_data.get("api_key", "")),
        budget_sync_id=os.environ.get(
            "ACTUAL_BUDGET_SYNC_ID", ledger_data.get("budget_sync_id", "")
        ),
        encryption_password=os.environ.get(
            "ACTUAL_ENCRYPTION_PASSWORD", ledger_data.get("encryption_password")
        ),
        timeout_seconds=ledger_data.get("timeout_seconds", 30),
        max_retries=ledger_data.get("max_retries", 3),
    )

    importer_data = data.get("importer", {})
    max_workers = importer_data.get("max_workers", 4)
    max_workers_env = os.environ.get("YNAB4_IMPORT_MAX_WORKERS", "")
    if max_workers_env:
        try:
            max_workers = int(max_workers_env)
        except ValueError:
            pass  # Keep configured value

    importer = ImporterConfig(
        max_workers=max_workers,
        suppress_split_categories_off_budget=importer_data.get(
            "suppress_split_categories_off_budget", False
        ),
    )

    snapshot_dirs = data.get("snapshot_dirs")
    if snapshot_dirs:
        dirs = [Path(d).expanduser() for d in snapshot_dirs]
    else:
        dirs = _default_snapshot_dirs()

    return Config(ledger=ledger, importer=importer, snapshot_dirs=dirs)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# YNAB4 → Actual importer configuration
#
# The target budget must already exist on the Actual server and should be
# empty: the import is NOT idempotent, re-running it duplicates everything.

ledger:
  base_url: "http://localhost:5007"   # Actual REST bridge URL
  api_key: "YOUR_API_KEY"
  budget_sync_id: "YOUR_BUDGET_SYNC_ID"
  encryption_password: null           # Only for end-to-end encrypted budgets
  timeout_seconds: 30
  max_retries: 3

importer:
  max_workers: 4                      # Parallel requests for independent entities
  suppress_split_categories_off_budget: false

# Directories searched by `ynab4-actual find` (defaults shown)
snapshot_dirs:
  - "~/Documents/YNAB"
  - "~/Dropbox/YNAB"
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
