# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Form-level validation rules.

Every ``validate_*`` function accepts either a ``New*`` record (all rules
apply, missing values are errors) or a ``*Update`` record (only the fields
it carries are checked). Failures are collected per field and raised at once
as a ``ValidationError``; nothing is written when validation fails.
"""

import math
import re
from datetime import date
from typing import Any, Optional

from .config import LedgerConfig
from .errors import ValidationError
from .models import (
    ENTRY_TYPES,
    LICENSE_CATEGORIES,
    MAX_CENTS,
    OCCURRENCE_STATUSES,
    USER_ROLES,
    ClientUpdate,
    CompanyInfo,
    FinancialEntryUpdate,
    LicenseUpdate,
    MonthlyFeeUpdate,
    NewClient,
    NewFinancialEntry,
    NewLicense,
    NewMonthlyFee,
    NewOccurrence,
    NewService,
    NewSoftware,
    NewSupplier,
    NewUser,
    OccurrenceUpdate,
    ServiceUpdate,
    SoftwareUpdate,
    SupplierUpdate,
    UserUpdate,
)
from .periods import parse_timestamp, today

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _Checker:
    """Accumulates field errors; ``partial`` skips fields that are None."""

    def __init__(self, partial: bool):
        self.partial = partial
        self.errors: dict[str, str] = {}

    def present(self, field: str, value: Any) -> bool:
        if value is None:
            if not self.partial:
                self.errors.setdefault(field, "Required")
            return False
        return True

    def min_length(self, field: str, value: Optional[str], size: int, message: str) -> None:
        if self.present(field, value) and len(str(value).strip()) < size:
            self.errors.setdefault(field, message)

    def email(self, field: str, value: Optional[str], *, optional: bool = False) -> None:
        if optional and not value:
            return
        if self.present(field, value) and not _EMAIL_RE.match(str(value).strip()):
            self.errors.setdefault(field, "Invalid email")

    def choice(self, field: str, value: Optional[str], allowed: tuple[str, ...]) -> None:
        if self.present(field, value) and value not in allowed:
            self.errors.setdefault(field, f"Must be one of: {', '.join(allowed)}")

    def amount(self, field: str, value: Optional[float]) -> bool:
        """Check that ``value`` is a finite amount that can be stored in cents."""
        if not self.present(field, value):
            return False
        number = float(value)
        if not math.isfinite(number) or abs(number) * 100 >= float(MAX_CENTS):
            self.errors.setdefault(field, "Invalid amount")
            return False
        return True

    def non_negative(self, field: str, value: Optional[float]) -> None:
        if self.amount(field, value) and float(value) < 0:
            self.errors.setdefault(field, "Must not be negative")

    def date_text(self, field: str, value: Optional[str]) -> Optional[date]:
        if not self.present(field, value):
            return None
        parsed = parse_timestamp(value)
        if parsed is None:
            self.errors.setdefault(field, "Invalid date, expected YYYY-MM-DD")
            return None
        return parsed.date()

    def check(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def validate_client(data: NewClient | ClientUpdate) -> None:
    c = _Checker(partial=isinstance(data, ClientUpdate))
    c.min_length("name", data.name, 2, "Name too short")
    c.min_length("cnpj", data.cnpj, 14, "Invalid CNPJ")
    c.min_length("contact_name", data.contact_name, 2, "Contact name required")
    c.email("email", data.email)
    c.min_length("whatsapp", data.whatsapp, 10, "Invalid WhatsApp number")
    c.min_length("address", data.address, 5, "Address required")
    c.check()


def validate_user(data: NewUser | UserUpdate, email_domain: str) -> None:
    """
    Validate a user record.

    The email must be a valid address ending with the corporate domain
    suffix (e.g. "@example.com").
    """
    c = _Checker(partial=isinstance(data, UserUpdate))
    c.min_length("name", data.name, 2, "Name too short")
    c.email("email", data.email)
    if data.email is not None and "email" not in c.errors:
        if not data.email.strip().lower().endswith(email_domain.lower()):
            c.errors["email"] = f"Email must end with {email_domain}"
    c.choice("role", data.role, USER_ROLES)
    c.check()


def validate_financial_entry(
    data: NewFinancialEntry | FinancialEntryUpdate,
    ledger: LedgerConfig,
    *,
    entry_type: Optional[str] = None,
    reference_date: Optional[date] = None,
) -> None:
    """
    Validate a ledger entry.

    Parameters
    ----------
    data:
        New entry or partial update.
    ledger:
        Ledger rules: accepted payment methods and the validation variant
        (due date required, supplier required for expenses).
    entry_type:
        Type of the entry being updated; for new entries ``data.type`` is
        used instead.
    reference_date:
        Date after which an entry date is "in the future" (defaults to
        today).
    """
    partial = isinstance(data, FinancialEntryUpdate)
    c = _Checker(partial=partial)

    kind = entry_type
    if isinstance(data, NewFinancialEntry):
        kind = data.type
        c.choice("type", data.type, ENTRY_TYPES)

    c.min_length("description", data.description, 3, "Description required")
    c.min_length("category", data.category, 1, "Category required")

    if c.amount("value", data.value) and float(data.value) <= 0:
        c.errors["value"] = "Value must be greater than zero"

    entry_date = c.date_text("date", data.date)
    if entry_date is not None and entry_date > (reference_date or today()):
        c.errors["date"] = "Date cannot be in the future"

    if ledger.require_due_date:
        if not partial or data.due_date is not None:
            if not data.due_date:
                c.errors["due_date"] = "Due date required"
            else:
                c.date_text("due_date", data.due_date)
    elif data.due_date:
        c.date_text("due_date", data.due_date)

    if ledger.require_supplier_for_expenses and kind == "expense" and not partial:
        if data.supplier_id is None:
            c.errors["supplier_id"] = "Supplier required for expenses"

    c.choice("payment_method", data.payment_method, ledger.payment_methods)
    c.check()


def validate_occurrence(data: NewOccurrence | OccurrenceUpdate) -> None:
    partial = isinstance(data, OccurrenceUpdate)
    c = _Checker(partial=partial)
    if isinstance(data, NewOccurrence) and data.client_id is None:
        c.errors["client_id"] = "Select a client"
    c.min_length("solicitor", data.solicitor, 2, "Solicitor required")
    c.min_length("title", data.title, 5, "Title too short")
    c.min_length("description", data.description, 10, "Detailed description required")
    c.min_length("deadline", data.deadline, 1, "Deadline required")
    if data.deadline and "deadline" not in c.errors:
        c.date_text("deadline", data.deadline)
    if partial:
        c.choice("status", data.status, OCCURRENCE_STATUSES)
    c.check()


def validate_license(data: NewLicense | LicenseUpdate) -> None:
    c = _Checker(partial=True)
    c.choice("category", data.category, LICENSE_CATEGORIES)
    c.non_negative("price", data.price)
    if data.acquisition_date is not None:
        c.date_text("acquisition_date", data.acquisition_date)
    c.check()


def validate_monthly_fee(data: NewMonthlyFee | MonthlyFeeUpdate) -> None:
    c = _Checker(partial=isinstance(data, MonthlyFeeUpdate))
    c.min_length("description", data.description, 2, "Description required")
    c.non_negative("value", data.value)
    if data.due_date:
        c.date_text("due_date", data.due_date)
    c.check()


def validate_software(data: NewSoftware | SoftwareUpdate) -> None:
    c = _Checker(partial=isinstance(data, SoftwareUpdate))
    c.min_length("name", data.name, 2, "Name too short")
    c.min_length("version", data.version, 1, "Version required")
    for field in (
        "price_unitary",
        "price_network",
        "price_cloud",
        "update_price",
        "cloud_update_price",
        "monthly_fee",
    ):
        c.non_negative(field, getattr(data, field))
    c.check()


def validate_service(data: NewService | ServiceUpdate) -> None:
    c = _Checker(partial=isinstance(data, ServiceUpdate))
    c.min_length("name", data.name, 2, "Name too short")
    c.min_length("description", data.description, 2, "Description too short")
    c.non_negative("price_client", data.price_client)
    c.non_negative("price_non_client", data.price_non_client)
    c.check()


def validate_supplier(data: NewSupplier | SupplierUpdate) -> None:
    c = _Checker(partial=isinstance(data, SupplierUpdate))
    c.min_length("name", data.name, 2, "Name too short")
    c.email("email", data.email, optional=True)
    c.check()


def validate_expense_category(name: Optional[str]) -> None:
    c = _Checker(partial=False)
    c.min_length("name", name, 2, "Name too short")
    c.check()


def validate_company_info(info: CompanyInfo) -> None:
    c = _Checker(partial=False)
    c.min_length("name", info.name, 2, "Name too short")
    c.min_length("cnpj", info.cnpj, 14, "Invalid CNPJ")
    c.min_length("address", info.address, 5, "Address required")
    c.min_length("phone", info.phone, 8, "Invalid phone number")
    c.email("email", info.email)
    c.check()
