# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
License to ledger reconciliation.

Selling a license posts a revenue entry to the financial ledger; returning or
deleting the license removes it. The rule maintained by this module is:

    for every license that is not returned, exactly one financial entry of
    type "revenue" carries ``license_id == license.id``; once the license is
    returned or deleted, no entry carries it.

The write helpers take an open connection from ``db.transaction()`` so that
the license write and the ledger write commit or roll back together.

``check_license_ledger`` verifies the rule over already loaded data and
reports every discrepancy found, without fixing anything.
"""

from __future__ import annotations

import logging
import sqlite3
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from .config import LedgerConfig
from .db import DatabaseConfig, delete_where, insert_row
from .models import Client, FinancialEntry, SoftwareLicense

logger = logging.getLogger(__name__)

LICENSE_ENTRIES_TABLE = "financial_entries"


def license_sale_description(software_name: str, category: str) -> str:
    return f"License acquisition: {software_name} ({category})"


def build_license_revenue_row(
    license_row: dict[str, Any],
    client: Client,
    ledger: LedgerConfig,
    date: str,
) -> dict[str, Any]:
    """
    Build the revenue entry posted by the sale of a license.

    Parameters
    ----------
    license_row:
        The license as stored (must include its id).
    client:
        The client who bought the license; its id and name are copied on
        the entry.
    ledger:
        Ledger rules, used for the revenue category.
    date:
        ISO timestamp of the sale.
    """
    return {
        "type": "revenue",
        "description": license_sale_description(
            license_row["software_name"], license_row["type"]
        ),
        "category": ledger.license_sale_category,
        "value_cents": license_row["price_cents"],
        "date": date,
        "client_id": client.id,
        "client_name": client.name,
        "license_id": license_row["id"],
    }


def post_license_sale(
    cfg: DatabaseConfig,
    conn: sqlite3.Connection,
    license_row: dict[str, Any],
    client: Client,
    ledger: LedgerConfig,
    date: str,
) -> dict[str, Any]:
    """Insert the revenue entry of a freshly inserted license."""
    entry = insert_row(
        cfg,
        LICENSE_ENTRIES_TABLE,
        build_license_revenue_row(license_row, client, ledger, date),
        conn=conn,
    )
    logger.info(
        "Posted revenue entry #%s for license #%s (%s)",
        entry["id"],
        license_row["id"],
        entry["description"],
    )
    return entry


def remove_license_entries(
    cfg: DatabaseConfig,
    license_id: int,
    *,
    conn: Optional[sqlite3.Connection] = None,
) -> int:
    """
    Delete every ledger entry posted for a license.

    Returns the number of removed entries. Removing entries of a license
    that has none left is a no-op.
    """
    removed = delete_where(cfg, LICENSE_ENTRIES_TABLE, "license_id", license_id, conn=conn)
    if removed:
        logger.info("Removed %d ledger entr(y/ies) of license #%s", removed, license_id)
    return removed


# ---------------------------------------------------------------------------
# Consistency check
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerIssue:
    """
    A discrepancy between licenses and the ledger.

    kind:
        "missing"   - a non-returned license has no revenue entry;
        "duplicate" - a license has more than one revenue entry;
        "returned"  - a returned license still has entries;
        "orphan"    - an entry points at a license that does not exist.
    """

    kind: str
    license_id: int
    client_id: Optional[int]
    entry_ids: tuple[int, ...]
    message: str


def _all_licenses(clients: Iterable[Client]) -> dict[int, SoftwareLicense]:
    return {lic.id: lic for client in clients for lic in client.licenses}


def check_license_ledger(
    clients: Iterable[Client],
    entries: Iterable[FinancialEntry],
) -> list[LedgerIssue]:
    """
    Verify that licenses and ledger entries agree.

    Returns an empty list when every non-returned license has exactly one
    revenue entry and nothing else references a license.
    """
    licenses = _all_licenses(clients)

    linked: dict[int, list[FinancialEntry]] = {}
    for entry in entries:
        if entry.license_id is not None:
            linked.setdefault(entry.license_id, []).append(entry)

    issues: list[LedgerIssue] = []

    for lic_id, lic in sorted(licenses.items()):
        posted = linked.get(lic_id, [])
        revenue = [e for e in posted if e.type == "revenue"]
        ids = tuple(e.id for e in posted)

        if lic.returned:
            if posted:
                issues.append(
                    LedgerIssue(
                        kind="returned",
                        license_id=lic_id,
                        client_id=lic.client_id,
                        entry_ids=ids,
                        message=(
                            f"Returned license {lic.software_name} still has "
                            f"{len(posted)} entr(y/ies)."
                        ),
                    )
                )
            continue

        if not revenue:
            issues.append(
                LedgerIssue(
                    kind="missing",
                    license_id=lic_id,
                    client_id=lic.client_id,
                    entry_ids=ids,
                    message=f"License {lic.software_name} ({lic.category}) has no revenue entry.",
                )
            )
        elif len(revenue) > 1:
            issues.append(
                LedgerIssue(
                    kind="duplicate",
                    license_id=lic_id,
                    client_id=lic.client_id,
                    entry_ids=tuple(e.id for e in revenue),
                    message=(
                        f"License {lic.software_name} ({lic.category}) has "
                        f"{len(revenue)} revenue entries."
                    ),
                )
            )

    for lic_id in sorted(set(linked) - set(licenses)):
        posted = linked[lic_id]
        issues.append(
            LedgerIssue(
                kind="orphan",
                license_id=lic_id,
                client_id=posted[0].client_id,
                entry_ids=tuple(e.id for e in posted),
                message=f"Ledger entries reference unknown license #{lic_id}.",
            )
        )

    if issues:
        counts = Counter(issue.kind for issue in issues)
        logger.warning("License ledger check found issues: %s", dict(counts))
    return issues
