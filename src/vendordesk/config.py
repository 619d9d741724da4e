# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Vendor Desk.

This module is responsible for:
- loading the application configuration from a TOML file,
- applying defaults for every optional setting,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .db import DatabaseConfig

DEFAULT_PAYMENT_METHODS: tuple[str, ...] = (
    "Bank transfer",
    "Pix",
    "Cash",
    "Credit card",
    "Debit card",
    "Mercado Pago",
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    """
    Ledger rules.

    The two ``require_*`` switches select the financial-entry validation
    variant: due date mandatory for every entry, and/or supplier mandatory
    for expenses.
    """

    license_sale_category: str = "Software Sale"
    require_due_date: bool = True
    require_supplier_for_expenses: bool = False
    payment_methods: tuple[str, ...] = DEFAULT_PAYMENT_METHODS


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Vendor Desk.

    This aggregates:
    - the database configuration (where every table lives),
    - the corporate identity rules used at sign-in and for user emails,
    - ledger rules (category of license sales, validation variant,
      accepted payment methods),
    - dashboard options,
    - display and logging options for the CLI.
    """

    database: DatabaseConfig
    email_domain: str = "@example.com"
    admin_email: Optional[str] = None
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    default_catalog_names: tuple[str, ...] = ("ERP", "CRM")
    trailing_months: int = 6
    display_mode: str = "table"
    currency: str = "BRL"
    log_level: str = "WARNING"


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a top-level table, or an empty mapping if absent or invalid."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_string_list(value: Any, key: str) -> tuple[str, ...]:
    """Validate a TOML array of non-empty strings."""
    if not isinstance(value, list) or not value:
        raise ValueError(f"'{key}' must be a non-empty array of strings.")
    items = tuple(str(v).strip() for v in value)
    if any(not item for item in items):
        raise ValueError(f"'{key}' must not contain empty strings.")
    return items


def _parse_ledger(section: Mapping[str, Any]) -> LedgerConfig:
    """
    Extract ledger options from the [ledger] table.

    Args:
        section: Parsed [ledger] table (possibly empty).

    Returns:
        A LedgerConfig instance with defaults for missing keys.
    """
    defaults = LedgerConfig()

    category = str(section.get("license_sale_category") or defaults.license_sale_category)

    raw_methods = section.get("payment_methods")
    if raw_methods is None:
        payment_methods = defaults.payment_methods
    else:
        payment_methods = _parse_string_list(raw_methods, "ledger.payment_methods")

    return LedgerConfig(
        license_sale_category=category,
        require_due_date=bool(section.get("require_due_date", defaults.require_due_date)),
        require_supplier_for_expenses=bool(
            section.get(
                "require_supplier_for_expenses",
                defaults.require_supplier_for_expenses,
            )
        ),
        payment_methods=payment_methods,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Vendor Desk application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        Database engine and SQLite file path.

    [company]
        ``email_domain``: suffix every user email must end with
        (e.g. "@example.com"); ``admin_email``: the account that is always
        treated as administrator when signing in.

    [ledger]
        ``license_sale_category``, ``require_due_date``,
        ``require_supplier_for_expenses``, ``payment_methods``.

    [dashboard]
        ``default_catalog_names``: names shown with zero sales when no
        license was sold in the period; ``trailing_months``: length of the
        revenue/expense series.

    [display]
        ``mode`` ("table", "csv" or "both") and ``currency``.

    [logging]
        ``level``: standard logging level name.

    Notes
    -----
    - Every section is optional; missing keys fall back to defaults.
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        ``vendordesk_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path("vendordesk_config.toml").resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or "data/db/vendordesk.sqlite"
    db_path = (base_dir / str(db_path_raw)).resolve()

    # 2) Company identity
    company_section = _section(raw, "company")
    email_domain = str(company_section.get("email_domain") or "@example.com").strip()
    if not email_domain.startswith("@"):
        email_domain = "@" + email_domain
    admin_email_raw = company_section.get("admin_email")
    admin_email = str(admin_email_raw).strip().lower() if admin_email_raw else None

    # 3) Ledger rules
    ledger = _parse_ledger(_section(raw, "ledger"))

    # 4) Dashboard options
    dashboard_section = _section(raw, "dashboard")
    raw_names = dashboard_section.get("default_catalog_names")
    if raw_names is None:
        default_catalog_names: tuple[str, ...] = ("ERP", "CRM")
    else:
        default_catalog_names = _parse_string_list(
            raw_names, "dashboard.default_catalog_names"
        )

    try:
        trailing_months = int(dashboard_section.get("trailing_months", 6))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'dashboard.trailing_months' in the configuration. "
            "Expected an integer."
        ) from exc
    if trailing_months < 1:
        raise ValueError("'dashboard.trailing_months' must be at least 1.")

    # 5) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in {"table", "csv", "both"}:
        raise ValueError(
            f"Invalid display.mode {display_mode!r}, expected table, csv or both."
        )
    currency = str(display_section.get("currency", "BRL"))

    # 6) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid logging.level {log_level!r}.")

    return AppConfig(
        database=DatabaseConfig(engine=db_engine, path=db_path),
        email_domain=email_domain.lower(),
        admin_email=admin_email,
        ledger=ledger,
        default_catalog_names=default_catalog_names,
        trailing_months=trailing_months,
        display_mode=display_mode,
        currency=currency,
        log_level=log_level,
    )
