# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Vendor Desk
-----------

A Python back office for software vendors: it tracks clients, the software
licenses and monthly fees sold to them, support tickets ("occurrences") and
a financial ledger of revenue and expense entries, together with light
registries (software and service catalog, expense categories, suppliers,
users and company identity).

Main capabilities:
- a SQLite table store with atomic multi-step writes,
- automatic ledger posting of license sales, removed on return or deletion,
- occurrence lifecycle with closure stamping and overdue detection,
- dashboard KPIs and trailing revenue/expense series (pandas),
- form-level validation of every record before it is written,
- CSV import of ledger entries,
- a command-line interface for reports and day-to-day operations.

Usage:
    python -m vendordesk.cli --help
"""

__all__ = ["store", "reporting", "ledger", "occurrences", "io"]

__version__ = "0.1.0"
