# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Vendor Desk.

The CLI is intentionally thin: it loads the configuration, opens the store
and renders what the reporting and store layers compute. It does not
implement business rules itself.

Configuration
-------------
The main configuration is read from ``vendordesk_config.toml`` in the
current working directory, or from the file given with ``--config``.

Commands
--------
    dashboard                        KPIs and charts data for a month
    clients list|show                clients and everything recorded on one
    licenses list|sell|return        licenses and license sales
    fees list                        monthly fees
    occurrences list|status          support tickets and status changes
    ledger list|totals|import        financial entries
    catalog                          software and service catalog
    users list                       application users
    check                            license / ledger consistency

Display modes
-------------
``--display-mode`` (or ``[display].mode`` in the configuration) selects:

- ``table``: print console tables (default),
- ``csv``:   write one CSV file per table into ``--output-dir``,
- ``both``:  do both.

Sessions
--------
``--as EMAIL`` signs in with a corporate address before running the
command. The session identity is used for role checks and is recorded as
the closing user when an occurrence is resolved.

Exit status
-----------
0 on success, 1 when the command is rejected (validation, business rule or
database error) or when ``check`` finds discrepancies.

Examples
--------
    python -m vendordesk.cli dashboard --period 2026-10
    python -m vendordesk.cli licenses sell 1 2 Network --price 3000
    python -m vendordesk.cli --as support@example.com occurrences status 4 resolved
    python -m vendordesk.cli ledger import data/input/bank_export.csv
"""

import argparse
import logging
import sys
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__, periods
from .config import AppConfig, load_app_config
from .db import has_rows
from .errors import DomainRuleError, GatewayError, ValidationError
from .ledger import check_license_ledger
from .models import LICENSE_CATEGORIES, OCCURRENCE_STATUSES, NewLicense
from .occurrences import is_overdue
from .periods import determine_period_from_args
from .reporting import client_overview, dashboard_summary, entries_frame, ledger_totals
from .store import Store

logger = logging.getLogger("vendordesk")


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--period",
        help="Reporting month as YYYY-MM (default: current month).",
    )
    group.add_argument(
        "--last-month",
        action="store_true",
        help="Use the previous calendar month.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m vendordesk.cli",
        description=(
            "Vendor Desk - Business management back office for software vendors. "
            "Tracks clients, licenses, monthly fees, support tickets and the "
            "financial ledger."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of vendordesk and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. "
            "If omitted, 'vendordesk_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--as",
        dest="sign_in_email",
        metavar="EMAIL",
        help="Sign in with this corporate email before running the command.",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help="Override the display mode defined in the configuration.",
    )
    ap.add_argument(
        "--output-dir",
        dest="output_dir",
        help=(
            "Directory where CSV outputs are written when the display mode "
            "includes 'csv'. If omitted, 'data/output' is used."
        ),
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # dashboard
    dashboard = subparsers.add_parser("dashboard", help="Show the dashboard KPIs.")
    _add_period_arguments(dashboard)

    # clients
    clients = subparsers.add_parser("clients", help="List or inspect clients.")
    clients_sub = clients.add_subparsers(dest="action", metavar="action")
    clients.set_defaults(action="list", inactive=False, search=None)
    clients_list = clients_sub.add_parser("list", help="List clients.")
    clients_list.add_argument(
        "--inactive", action="store_true", help="Include inactive clients."
    )
    clients_list.add_argument(
        "--search",
        metavar="TEXT",
        help="Only clients whose name or email contains TEXT (case-insensitive).",
    )
    clients_show = clients_sub.add_parser("show", help="Show one client in detail.")
    clients_show.add_argument("client_id", type=int)

    # licenses
    licenses = subparsers.add_parser("licenses", help="List, sell or return licenses.")
    licenses_sub = licenses.add_subparsers(dest="action", metavar="action")
    licenses.set_defaults(action="list", client_id=None, include_returned=False)
    licenses_list = licenses_sub.add_parser("list", help="List licenses.")
    licenses_list.add_argument("--client", dest="client_id", type=int)
    licenses_list.add_argument(
        "--include-returned", action="store_true", help="Include returned licenses."
    )
    licenses_sell = licenses_sub.add_parser(
        "sell", help="Sell a license and post its revenue entry."
    )
    licenses_sell.add_argument("client_id", type=int)
    licenses_sell.add_argument("software_id", type=int)
    licenses_sell.add_argument("category", choices=LICENSE_CATEGORIES)
    licenses_sell.add_argument(
        "--price",
        type=float,
        help="Sale price (default: catalog price; required for Web licenses).",
    )
    licenses_return = licenses_sub.add_parser(
        "return", help="Mark a license as returned and remove its revenue entry."
    )
    licenses_return.add_argument("license_id", type=int)

    # fees
    fees = subparsers.add_parser("fees", help="List monthly fees.")
    fees_sub = fees.add_subparsers(dest="action", metavar="action")
    fees.set_defaults(action="list", client_id=None)
    fees_list = fees_sub.add_parser("list", help="List monthly fees.")
    fees_list.add_argument("--client", dest="client_id", type=int)

    # occurrences
    occurrences = subparsers.add_parser("occurrences", help="Support tickets.")
    occ_sub = occurrences.add_subparsers(dest="action", metavar="action")
    occurrences.set_defaults(action="list", status=None, overdue=False)
    occ_list = occ_sub.add_parser("list", help="List occurrences.")
    occ_list.add_argument("--status", choices=OCCURRENCE_STATUSES)
    occ_list.add_argument(
        "--overdue", action="store_true", help="Only pending occurrences past deadline."
    )
    occ_status = occ_sub.add_parser("status", help="Change the status of an occurrence.")
    occ_status.add_argument("occurrence_id", type=int)
    occ_status.add_argument("status", choices=OCCURRENCE_STATUSES)

    # ledger
    ledger = subparsers.add_parser("ledger", help="Financial entries.")
    ledger_sub = ledger.add_subparsers(dest="action", metavar="action")
    ledger.set_defaults(action="list", period=None, last_month=False, entry_type=None)
    ledger_list = ledger_sub.add_parser("list", help="List entries of a month.")
    _add_period_arguments(ledger_list)
    ledger_list.add_argument("--type", dest="entry_type", choices=["revenue", "expense"])
    ledger_totals_parser = ledger_sub.add_parser("totals", help="Totals over all entries.")
    ledger_totals_parser.add_argument(
        "--type", dest="entry_type", choices=["revenue", "expense"]
    )
    ledger_import = ledger_sub.add_parser("import", help="Import entries from a CSV file.")
    ledger_import.add_argument("csv_path")

    # catalog, users, check
    subparsers.add_parser("catalog", help="Show the software and service catalog.")
    users = subparsers.add_parser("users", help="Application users.")
    users_sub = users.add_subparsers(dest="action", metavar="action")
    users.set_defaults(action="list")
    users_sub.add_parser("list", help="List users.")
    subparsers.add_parser("check", help="Check that licenses and the ledger agree.")

    return ap


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _frame(records: Iterable[object], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame from dataclass records, keeping ``columns`` only."""
    return pd.DataFrame(
        [{c: getattr(r, c) for c in columns} for r in records],
        columns=list(columns),
    )


class _Renderer:
    """Print tables and/or write them as CSV files according to the display mode."""

    def __init__(self, display_mode: str, output_dir: Optional[str]):
        self.display_mode = display_mode
        self.output_dir = Path(output_dir) if output_dir else Path("data/output")
        self.timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

    def table(self, title: str, name: str, df: pd.DataFrame) -> None:
        if self.display_mode in {"table", "both"}:
            print()
            print(f"=== {title} ===")
            if df.empty:
                print("(none)")
            else:
                print(df.to_string(index=False))

        if self.display_mode in {"csv", "both"}:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / f"{name}_{self.timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_dashboard(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    period = determine_period_from_args(args)
    summary = dashboard_summary(
        store.state,
        period,
        default_names=config.default_catalog_names,
        months=config.trailing_months,
    )

    kpis = pd.DataFrame(
        [
            ("Revenue", f"{summary.revenue:.2f} {config.currency}"),
            ("Expense", f"{summary.expense:.2f} {config.currency}"),
            ("Balance", f"{summary.balance:.2f} {config.currency}"),
            ("New clients", summary.new_clients),
            ("Open occurrences", summary.open_occurrences),
            ("Overdue occurrences", summary.overdue_occurrences),
        ],
        columns=["kpi", "value"],
    )

    print(f"Applied period: {summary.period.label} ({summary.period.key})")
    out.table("Dashboard", "dashboard", kpis)
    out.table("Sales by software", "sales_by_software", summary.sales)
    out.table(
        f"Revenue / expense, last {config.trailing_months} months",
        "revenue_expense_series",
        summary.series,
    )
    return 0


def _handle_clients(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    if args.action == "show":
        overview = client_overview(store.state, args.client_id)
        client = overview.client
        print(f"Client #{client.id}: {client.name} ({'active' if client.active else 'inactive'})")
        print(f"  cnpj:     {client.cnpj}")
        print(f"  contact:  {client.contact_name} <{client.email}> {client.whatsapp}")
        print(f"  address:  {client.address}")
        print(f"  since:    {client.created_at}")
        print(f"  fees:     {overview.monthly_fees_total:.2f} {config.currency} / month")
        print(f"  revenue:  {overview.revenue_total:.2f} {config.currency}")
        out.table(
            "Licenses",
            f"client_{client.id}_licenses",
            _frame(
                overview.licenses,
                ["id", "software_name", "category", "acquisition_date", "price", "returned"],
            ),
        )
        out.table(
            "Monthly fees",
            f"client_{client.id}_fees",
            _frame(overview.monthly_fees, ["id", "description", "value", "due_date", "active"]),
        )
        out.table(
            "Occurrences",
            f"client_{client.id}_occurrences",
            _frame(overview.occurrences, ["id", "title", "status", "opening_date", "deadline"]),
        )
        out.table(
            "Ledger entries",
            f"client_{client.id}_entries",
            _frame(overview.entries, ["id", "type", "description", "value", "date"]),
        )
        return 0

    clients = [c for c in store.state.clients if args.inactive or c.active]
    if args.search:
        needle = args.search.strip().lower()
        clients = [
            c
            for c in clients
            if needle in c.name.lower() or needle in (c.email or "").lower()
        ]
    df = _frame(clients, ["id", "name", "cnpj", "contact_name", "email", "active", "created_at"])
    df["licenses"] = [sum(1 for lic in c.licenses if not lic.returned) for c in clients]
    out.table("Clients", "clients", df)
    return 0


def _handle_licenses(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    if args.action == "sell":
        lic = store.add_license(
            args.client_id,
            NewLicense(software_id=args.software_id, category=args.category, price=args.price),
        )
        print(
            f"License #{lic.id} sold: {lic.software_name} ({lic.category}) "
            f"for {lic.price:.2f} {config.currency}"
        )
        return 0

    if args.action == "return":
        lic = store.return_license(args.license_id)
        print(f"License #{lic.id} ({lic.software_name}) marked as returned.")
        return 0

    licenses = [
        lic
        for lic in store.state.licenses
        if (args.client_id is None or lic.client_id == args.client_id)
        and (args.include_returned or not lic.returned)
    ]
    out.table(
        "Licenses",
        "licenses",
        _frame(
            licenses,
            [
                "id",
                "client_id",
                "software_name",
                "category",
                "acquisition_date",
                "price",
                "returned",
            ],
        ),
    )
    return 0


def _handle_fees(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    fees = [
        fee
        for client in store.state.clients
        for fee in client.monthly_fees
        if args.client_id is None or fee.client_id == args.client_id
    ]
    df = _frame(fees, ["id", "client_id", "description", "value", "due_date", "active"])
    out.table("Monthly fees", "monthly_fees", df)
    if not df.empty:
        print()
        print(f"Active total: {df.loc[df['active'], 'value'].sum():.2f} {config.currency}")
    return 0


def _handle_occurrences(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    if args.action == "status":
        occ = store.change_occurrence_status(args.occurrence_id, args.status)
        print(f"Occurrence #{occ.id} is now {occ.status}.")
        if occ.closing_date:
            print(f"  closed at {occ.closing_date} by user #{occ.closed_by}")
        return 0

    now = periods._now()
    occurrences = [
        o
        for o in store.state.occurrences
        if (args.status is None or o.status == args.status)
        and (not args.overdue or is_overdue(o, now))
    ]
    df = _frame(
        occurrences,
        ["id", "client_name", "title", "status", "opening_date", "deadline", "closing_date"],
    )
    df["overdue"] = [is_overdue(o, now) for o in occurrences]
    out.table("Occurrences", "occurrences", df)
    return 0


def _handle_ledger(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    if args.action == "import":
        csv_path = Path(args.csv_path)
        if not csv_path.is_file():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")
        print(f"Importing financial entries from {csv_path}...")
        count = store.import_financial_entries(csv_path)
        print(f"Imported {count} entries.")
        return 0

    if args.action == "totals":
        totals = ledger_totals(store.state.financial_entries, args.entry_type)
        print(f"Revenue: {totals.revenue:.2f} {config.currency}")
        print(f"Expense: {totals.expense:.2f} {config.currency}")
        print(f"Balance: {totals.balance:.2f} {config.currency}")
        return 0

    period = determine_period_from_args(args)
    df = entries_frame(store.state.financial_entries)
    df = df[df["date"].str.startswith(period.key)]
    if args.entry_type:
        df = df[df["type"] == args.entry_type]
    print(f"Applied period: {period.label} ({period.key})")
    out.table("Financial entries", f"ledger_{period.key}", df.reset_index(drop=True))
    if not df.empty:
        print()
        print(f"Total entries: {len(df)} | Total value: {df['value'].sum():.2f} {config.currency}")
    return 0


def _handle_catalog(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    out.table(
        "Software",
        "softwares",
        _frame(
            store.state.softwares,
            [
                "id",
                "name",
                "version",
                "price_unitary",
                "price_network",
                "price_cloud",
                "monthly_fee",
            ],
        ),
    )
    out.table(
        "Services",
        "services",
        _frame(
            store.state.services,
            ["id", "name", "description", "price_client", "price_non_client"],
        ),
    )
    return 0


def _handle_users(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    out.table(
        "Users",
        "users",
        _frame(store.state.users, ["id", "name", "email", "role", "active"]),
    )
    return 0


def _handle_check(args, store: Store, config: AppConfig, out: _Renderer) -> int:
    issues = check_license_ledger(store.state.clients, store.state.financial_entries)
    if not issues:
        print(f"OK: {len(store.state.licenses)} license(s) checked, ledger is consistent.")
        return 0
    out.table(
        "License / ledger discrepancies",
        "ledger_check",
        _frame(issues, ["kind", "license_id", "client_id", "entry_ids", "message"]),
    )
    return 1


_HANDLERS = {
    "dashboard": _handle_dashboard,
    "clients": _handle_clients,
    "licenses": _handle_licenses,
    "fees": _handle_fees,
    "occurrences": _handle_occurrences,
    "ledger": _handle_ledger,
    "catalog": _handle_catalog,
    "users": _handle_users,
    "check": _handle_check,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Entry point for the Vendor Desk CLI.

    Parses command-line arguments, loads the configuration, configures
    logging, opens the store (creating the database if needed), optionally
    signs in, then runs the requested command.

    Returns the process exit status.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"vendordesk version {__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    display_mode = args.display_mode or config.display_mode
    out = _Renderer(display_mode, args.output_dir)

    try:
        store = Store(config)
        if args.sign_in_email:
            store.sign_in(args.sign_in_email)
        needs_clients = args.command not in {"catalog", "users", "ledger"}
        if needs_clients and not has_rows(config.database, "clients"):
            print("Warning: no clients recorded yet.")
        return _HANDLERS[args.command](args, store, config, out)
    except ValidationError as exc:
        print("Error: invalid data", file=sys.stderr)
        for name, message in exc.errors.items():
            print(f"  {name}: {message}", file=sys.stderr)
        return 1
    except (DomainRuleError, GatewayError, FileNotFoundError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
