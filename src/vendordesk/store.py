# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Application state and mutation services for Vendor Desk.

This module sits between:
- the table gateway in `db.py`, and
- user-facing layers such as the CLI.

State model
-----------
``AppState`` is an immutable snapshot of every table, loaded at once by
``Store.refresh()``. Clients carry their licenses and monthly fees.
Reporting functions (see ``reporting.py``) read from this snapshot only.

Mutations
---------
Every ``Store`` mutation follows the same sequence:

1) validate the input (``validation.py``), raising ``ValidationError``;
2) check local rules against the current snapshot (unknown references,
   sole administrator, session role...), raising ``DomainRuleError``;
3) write through the gateway, inside one transaction when several rows are
   involved (license sale + ledger entry, license return + ledger cleanup);
4) reload the whole snapshot.

When any step fails, the exception propagates and the snapshot is left as
it was: there is no refresh after a failed write.

Session
-------
``sign_in`` opens a session for a corporate email address. There are no
passwords: the session only carries the identity used for role checks and
for the ``closed_by`` stamp of resolved occurrences. Without a session
(scripts, CLI) role checks are skipped.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .config import AppConfig
from .db import (
    delete_row,
    fetch_all,
    init_database,
    insert_row,
    transaction,
    update_row,
)
from .errors import DomainRuleError, ValidationError
from .io import read_financial_entries
from .ledger import post_license_sale, remove_license_entries
from .models import (
    Client,
    ClientUpdate,
    CompanyInfo,
    ExpenseCategory,
    FinancialEntry,
    FinancialEntryUpdate,
    LicenseUpdate,
    MonthlyFee,
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
    Occurrence,
    OccurrenceUpdate,
    Service,
    ServiceUpdate,
    Software,
    SoftwareLicense,
    SoftwareUpdate,
    Supplier,
    SupplierUpdate,
    User,
    UserUpdate,
    to_cents,
)
from .occurrences import new_occurrence_row, occurrence_patch
from .periods import now_iso
from .validation import (
    validate_client,
    validate_company_info,
    validate_expense_category,
    validate_financial_entry,
    validate_license,
    validate_monthly_fee,
    validate_occurrence,
    validate_service,
    validate_software,
    validate_supplier,
    validate_user,
)

logger = logging.getLogger(__name__)


def _find(items, item_id):
    return next((item for item in items if item.id == item_id), None)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of every entity collection."""

    clients: tuple[Client, ...] = ()
    occurrences: tuple[Occurrence, ...] = ()
    financial_entries: tuple[FinancialEntry, ...] = ()
    softwares: tuple[Software, ...] = ()
    services: tuple[Service, ...] = ()
    expense_categories: tuple[ExpenseCategory, ...] = ()
    suppliers: tuple[Supplier, ...] = ()
    users: tuple[User, ...] = ()
    company_info: Optional[CompanyInfo] = None

    @classmethod
    def from_tables(cls, tables: Mapping[str, list[dict[str, Any]]]) -> "AppState":
        """Build a snapshot from the rows returned by ``db.fetch_all``."""
        licenses: dict[int, list[SoftwareLicense]] = {}
        for row in tables.get("client_software_licenses", []):
            lic = SoftwareLicense.from_row(row)
            licenses.setdefault(lic.client_id, []).append(lic)

        fees: dict[int, list[MonthlyFee]] = {}
        for row in tables.get("client_monthly_fees", []):
            fee = MonthlyFee.from_row(row)
            fees.setdefault(fee.client_id, []).append(fee)

        clients = tuple(
            Client.from_row(
                row,
                licenses=tuple(licenses.get(row["id"], [])),
                monthly_fees=tuple(fees.get(row["id"], [])),
            )
            for row in tables.get("clients", [])
        )

        company_rows = tables.get("company_info", [])

        return cls(
            clients=clients,
            occurrences=tuple(Occurrence.from_row(r) for r in tables.get("occurrences", [])),
            financial_entries=tuple(
                FinancialEntry.from_row(r) for r in tables.get("financial_entries", [])
            ),
            softwares=tuple(Software.from_row(r) for r in tables.get("softwares", [])),
            services=tuple(Service.from_row(r) for r in tables.get("services", [])),
            expense_categories=tuple(
                ExpenseCategory.from_row(r) for r in tables.get("expense_categories", [])
            ),
            suppliers=tuple(Supplier.from_row(r) for r in tables.get("suppliers", [])),
            users=tuple(User.from_row(r) for r in tables.get("profiles", [])),
            company_info=CompanyInfo.from_row(company_rows[0]) if company_rows else None,
        )

    # -- lookups ------------------------------------------------------------

    def client(self, client_id: int) -> Optional[Client]:
        return _find(self.clients, client_id)

    def license(self, license_id: int) -> Optional[SoftwareLicense]:
        for client in self.clients:
            found = _find(client.licenses, license_id)
            if found is not None:
                return found
        return None

    def monthly_fee(self, fee_id: int) -> Optional[MonthlyFee]:
        for client in self.clients:
            found = _find(client.monthly_fees, fee_id)
            if found is not None:
                return found
        return None

    def occurrence(self, occurrence_id: int) -> Optional[Occurrence]:
        return _find(self.occurrences, occurrence_id)

    def financial_entry(self, entry_id: int) -> Optional[FinancialEntry]:
        return _find(self.financial_entries, entry_id)

    def software(self, software_id: int) -> Optional[Software]:
        return _find(self.softwares, software_id)

    def service(self, service_id: int) -> Optional[Service]:
        return _find(self.services, service_id)

    def expense_category(self, category_id: int) -> Optional[ExpenseCategory]:
        return _find(self.expense_categories, category_id)

    def supplier(self, supplier_id: int) -> Optional[Supplier]:
        return _find(self.suppliers, supplier_id)

    def user(self, user_id: int) -> Optional[User]:
        return _find(self.users, user_id)

    def user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return next((u for u in self.users if u.email.strip().lower() == wanted), None)

    @property
    def licenses(self) -> tuple[SoftwareLicense, ...]:
        return tuple(lic for client in self.clients for lic in client.licenses)

    @property
    def admins(self) -> tuple[User, ...]:
        return tuple(u for u in self.users if u.is_admin)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@dataclass
class Store:
    """
    Owner of the application snapshot and of every mutation.

    Parameters
    ----------
    config:
        Application configuration (database location, corporate domain,
        ledger rules).
    autoload:
        Load the snapshot immediately (default). Set to False to start from
        an empty snapshot and call ``refresh()`` later.
    """

    config: AppConfig
    autoload: bool = True
    state: AppState = field(default_factory=AppState, init=False)
    current_user: Optional[User] = field(default=None, init=False)
    is_loading: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        init_database(self.config.database)
        if self.autoload:
            self.refresh()

    @property
    def _db(self):
        return self.config.database

    # -- loading ------------------------------------------------------------

    def refresh(self) -> AppState:
        """Reload every table into a new snapshot."""
        self.is_loading = True
        try:
            self.state = AppState.from_tables(fetch_all(self._db))
        finally:
            self.is_loading = False
        logger.debug(
            "Snapshot reloaded: %d client(s), %d occurrence(s), %d ledger entr(y/ies)",
            len(self.state.clients),
            len(self.state.occurrences),
            len(self.state.financial_entries),
        )
        return self.state

    def _written(self, message: str, *args: Any) -> None:
        logger.info(message, *args)
        self.refresh()

    # -- session ------------------------------------------------------------

    def sign_in(self, email: str) -> User:
        """
        Open a session for ``email``.

        The address must belong to the corporate domain. The stored profile
        with the same email is used when it exists (inactive profiles are
        refused); the configured administrator address is always granted
        the admin role.
        """
        address = (email or "").strip().lower()
        if not address.endswith(self.config.email_domain):
            raise DomainRuleError(f"Access restricted to {self.config.email_domain} accounts.")

        is_admin = self.config.admin_email is not None and address == self.config.admin_email
        profile = self.state.user_by_email(address)

        if profile is not None:
            if not profile.active:
                raise DomainRuleError(f"User {address} is inactive.")
            user = User(
                id=profile.id,
                name=profile.name,
                email=profile.email,
                role="admin" if is_admin else profile.role,
                active=True,
                avatar=profile.avatar,
            )
        else:
            user = User(
                id=None,
                name=address.split("@", 1)[0],
                email=address,
                role="admin" if is_admin else "user",
            )

        self.current_user = user
        logger.info("Signed in as %s (%s)", user.email, user.role)
        return user

    def sign_out(self) -> None:
        if self.current_user is not None:
            logger.info("Signed out %s", self.current_user.email)
        self.current_user = None

    def _require_admin(self) -> None:
        if self.current_user is not None and not self.current_user.is_admin:
            raise DomainRuleError("Administrator access required.")

    def _current_user_id(self) -> Optional[int]:
        return self.current_user.id if self.current_user is not None else None

    # -- lookups raising DomainRuleError ------------------------------------

    def _require(self, kind: str, record: Any, record_id: int) -> Any:
        if record is None:
            raise DomainRuleError(f"Unknown {kind} #{record_id}.")
        return record

    # -- clients ------------------------------------------------------------

    def add_client(self, data: NewClient) -> Client:
        validate_client(data)
        row = data.to_row()
        row["created_at"] = now_iso()
        stored = insert_row(self._db, "clients", row)
        self._written("Added client #%s (%s)", stored["id"], stored["name"])
        return self.state.client(stored["id"])

    def update_client(self, client_id: int, update: ClientUpdate) -> Client:
        validate_client(update)
        current = self._require("client", self.state.client(client_id), client_id)
        if update.is_empty():
            return current
        update_row(self._db, "clients", client_id, update.to_patch())
        self._written("Updated client #%s", client_id)
        return self.state.client(client_id)

    # -- licenses -----------------------------------------------------------

    def add_license(self, client_id: int, data: NewLicense) -> SoftwareLicense:
        """
        Sell a license to a client and post its revenue entry.

        The price defaults to the catalog price of the software for the
        category; Web licenses have no catalog price and need an explicit
        one. The license and its ledger entry are written in one
        transaction.
        """
        validate_license(data)
        client = self._require("client", self.state.client(client_id), client_id)
        software = self._require(
            "software", self.state.software(data.software_id), data.software_id
        )

        price = data.price if data.price is not None else software.price_for(data.category)
        if price is None:
            raise ValidationError({"price": f"Price required for {data.category} licenses"})

        now = now_iso()
        row = {
            "client_id": client.id,
            "software_id": software.id,
            "software_name": software.name,
            "type": data.category,
            "acquisition_date": data.acquisition_date or now,
            "price_cents": to_cents(price),
            "returned": 0,
        }

        with transaction(self._db) as conn:
            stored = insert_row(self._db, "client_software_licenses", row, conn=conn)
            post_license_sale(self._db, conn, stored, client, self.config.ledger, now)

        self._written(
            "Sold license #%s (%s, %s) to client #%s",
            stored["id"],
            software.name,
            data.category,
            client.id,
        )
        return self.state.license(stored["id"])

    def update_license(self, license_id: int, update: LicenseUpdate) -> SoftwareLicense:
        """
        Edit a license.

        Setting ``returned=True`` removes the ledger entries of the license;
        setting it back to False posts a new revenue entry. Other edits,
        price included, leave the ledger untouched.
        """
        validate_license(update)
        current = self._require("license", self.state.license(license_id), license_id)
        if update.is_empty():
            return current

        patch = update.to_patch()
        if update.software_id is not None and update.software_name is None:
            software = self._require(
                "software", self.state.software(update.software_id), update.software_id
            )
            patch["software_name"] = software.name

        client = self.state.client(current.client_id)
        with transaction(self._db) as conn:
            stored = update_row(self._db, "client_software_licenses", license_id, patch, conn=conn)
            if update.returned is True:
                remove_license_entries(self._db, license_id, conn=conn)
            elif update.returned is False and current.returned:
                post_license_sale(self._db, conn, stored, client, self.config.ledger, now_iso())

        self._written("Updated license #%s (%s)", license_id, ", ".join(sorted(patch)))
        return self.state.license(license_id)

    def return_license(self, license_id: int) -> SoftwareLicense:
        """Mark a license as returned and remove its revenue entry."""
        return self.update_license(license_id, LicenseUpdate(returned=True))

    def delete_license(self, license_id: int) -> None:
        self._require("license", self.state.license(license_id), license_id)
        with transaction(self._db) as conn:
            remove_license_entries(self._db, license_id, conn=conn)
            delete_row(self._db, "client_software_licenses", license_id, conn=conn)
        self._written("Deleted license #%s", license_id)

    # -- monthly fees -------------------------------------------------------

    def add_monthly_fee(self, client_id: int, data: NewMonthlyFee) -> MonthlyFee:
        validate_monthly_fee(data)
        self._require("client", self.state.client(client_id), client_id)
        row = data.to_row()
        row["client_id"] = client_id
        stored = insert_row(self._db, "client_monthly_fees", row)
        self._written("Added monthly fee #%s to client #%s", stored["id"], client_id)
        return self.state.monthly_fee(stored["id"])

    def update_monthly_fee(self, fee_id: int, update: MonthlyFeeUpdate) -> MonthlyFee:
        validate_monthly_fee(update)
        current = self._require("monthly fee", self.state.monthly_fee(fee_id), fee_id)
        if update.is_empty():
            return current
        update_row(self._db, "client_monthly_fees", fee_id, update.to_patch())
        self._written("Updated monthly fee #%s", fee_id)
        return self.state.monthly_fee(fee_id)

    def delete_monthly_fee(self, fee_id: int) -> None:
        self._require("monthly fee", self.state.monthly_fee(fee_id), fee_id)
        delete_row(self._db, "client_monthly_fees", fee_id)
        self._written("Deleted monthly fee #%s", fee_id)

    # -- occurrences --------------------------------------------------------

    def add_occurrence(self, data: NewOccurrence) -> Occurrence:
        validate_occurrence(data)
        client = self._require("client", self.state.client(data.client_id), data.client_id)
        stored = insert_row(self._db, "occurrences", new_occurrence_row(data, client.name))
        self._written("Opened occurrence #%s for client #%s", stored["id"], client.id)
        return self.state.occurrence(stored["id"])

    def update_occurrence(self, occurrence_id: int, update: OccurrenceUpdate) -> Occurrence:
        validate_occurrence(update)
        current = self._require("occurrence", self.state.occurrence(occurrence_id), occurrence_id)
        if update.is_empty():
            return current
        patch = occurrence_patch(current, update, self._current_user_id())
        update_row(self._db, "occurrences", occurrence_id, patch)
        self._written("Updated occurrence #%s (%s)", occurrence_id, ", ".join(sorted(patch)))
        return self.state.occurrence(occurrence_id)

    def change_occurrence_status(self, occurrence_id: int, status: str) -> Occurrence:
        return self.update_occurrence(occurrence_id, OccurrenceUpdate(status=status))

    def delete_occurrence(self, occurrence_id: int) -> None:
        self._require("occurrence", self.state.occurrence(occurrence_id), occurrence_id)
        delete_row(self._db, "occurrences", occurrence_id)
        self._written("Deleted occurrence #%s", occurrence_id)

    # -- ledger -------------------------------------------------------------

    def _entry_row(self, data: NewFinancialEntry) -> dict[str, Any]:
        """Encode a new entry, filling the denormalized counterpart names."""
        row = data.to_row()
        if data.client_id is not None:
            client = self._require("client", self.state.client(data.client_id), data.client_id)
            row["client_name"] = client.name
        if data.supplier_id is not None:
            supplier = self._require(
                "supplier", self.state.supplier(data.supplier_id), data.supplier_id
            )
            row["supplier_name"] = supplier.name
        if data.license_id is not None:
            raise DomainRuleError("License revenue entries are posted by license sales only.")
        return row

    def add_financial_entry(self, data: NewFinancialEntry) -> FinancialEntry:
        validate_financial_entry(data, self.config.ledger)
        stored = insert_row(self._db, "financial_entries", self._entry_row(data))
        self._written(
            "Added %s entry #%s (%s)", stored["type"], stored["id"], stored["description"]
        )
        return self.state.financial_entry(stored["id"])

    def update_financial_entry(
        self, entry_id: int, update: FinancialEntryUpdate
    ) -> FinancialEntry:
        current = self._require("financial entry", self.state.financial_entry(entry_id), entry_id)
        validate_financial_entry(update, self.config.ledger, entry_type=current.type)
        if update.is_empty():
            return current
        patch = update.to_patch()
        if update.supplier_id is not None:
            supplier = self._require(
                "supplier", self.state.supplier(update.supplier_id), update.supplier_id
            )
            patch["supplier_name"] = supplier.name
        update_row(self._db, "financial_entries", entry_id, patch)
        self._written("Updated financial entry #%s", entry_id)
        return self.state.financial_entry(entry_id)

    def delete_financial_entry(self, entry_id: int) -> None:
        """
        Delete a ledger entry.

        The revenue entry of a license that is still sold cannot be deleted
        on its own: return or delete the license instead.
        """
        entry = self._require("financial entry", self.state.financial_entry(entry_id), entry_id)
        if entry.license_id is not None:
            lic = self.state.license(entry.license_id)
            if lic is not None and not lic.returned:
                raise DomainRuleError(
                    f"Entry #{entry_id} records the sale of license #{lic.id}; "
                    "return or delete the license instead."
                )
        delete_row(self._db, "financial_entries", entry_id)
        self._written("Deleted financial entry #%s", entry_id)

    def import_financial_entries(self, path: Union[str, "os.PathLike[str]"]) -> int:
        """
        Import ledger entries from a CSV file (see ``io.read_financial_entries``).

        Every row is validated first; when any row is invalid, nothing is
        written and the ValidationError lists the failing fields per row
        (keys such as ``"row 3: value"``, counting the header as row 1).
        Valid files are inserted in one transaction.

        Returns
        -------
        int
            Number of inserted entries.
        """
        frame = read_financial_entries(path)

        rows: list[dict[str, Any]] = []
        errors: dict[str, str] = {}
        for index, record in enumerate(frame.to_dict(orient="records"), start=2):
            data = NewFinancialEntry(
                type=record["type"],
                description=record["description"],
                category=record["category"],
                value=float(record["value"]),
                date=record["date"],
                due_date=record["due_date"],
                payment_method=record["payment_method"],
                observation=record["observation"],
            )
            try:
                validate_financial_entry(data, self.config.ledger)
            except ValidationError as exc:
                for name, message in exc.errors.items():
                    errors[f"row {index}: {name}"] = message
                continue
            rows.append(self._entry_row(data))

        if errors:
            raise ValidationError(errors)
        if not rows:
            return 0

        with transaction(self._db) as conn:
            for row in rows:
                insert_row(self._db, "financial_entries", row, conn=conn)

        self._written("Imported %d financial entr(y/ies) from %s", len(rows), path)
        return len(rows)

    # -- catalog ------------------------------------------------------------

    def add_software(self, data: NewSoftware) -> Software:
        validate_software(data)
        stored = insert_row(self._db, "softwares", data.to_row())
        self._written("Added software #%s (%s)", stored["id"], stored["name"])
        return self.state.software(stored["id"])

    def update_software(self, software_id: int, update: SoftwareUpdate) -> Software:
        validate_software(update)
        current = self._require("software", self.state.software(software_id), software_id)
        if update.is_empty():
            return current
        update_row(self._db, "softwares", software_id, update.to_patch())
        self._written("Updated software #%s", software_id)
        return self.state.software(software_id)

    def add_service(self, data: NewService) -> Service:
        validate_service(data)
        stored = insert_row(self._db, "services", data.to_row())
        self._written("Added service #%s (%s)", stored["id"], stored["name"])
        return self.state.service(stored["id"])

    def update_service(self, service_id: int, update: ServiceUpdate) -> Service:
        validate_service(update)
        current = self._require("service", self.state.service(service_id), service_id)
        if update.is_empty():
            return current
        update_row(self._db, "services", service_id, update.to_patch())
        self._written("Updated service #%s", service_id)
        return self.state.service(service_id)

    def delete_service(self, service_id: int) -> None:
        self._require("service", self.state.service(service_id), service_id)
        delete_row(self._db, "services", service_id)
        self._written("Deleted service #%s", service_id)

    # -- registries ---------------------------------------------------------

    def update_company_info(self, info: CompanyInfo) -> CompanyInfo:
        """Create or replace the single company identity record."""
        self._require_admin()
        validate_company_info(info)
        current = self.state.company_info
        if current is None:
            insert_row(self._db, "company_info", info.to_row())
        else:
            update_row(self._db, "company_info", current.id, info.to_row())
        self._written("Updated company info (%s)", info.name)
        return self.state.company_info

    def add_expense_category(self, name: str) -> ExpenseCategory:
        validate_expense_category(name)
        stored = insert_row(self._db, "expense_categories", {"name": name.strip()})
        self._written("Added expense category #%s (%s)", stored["id"], stored["name"])
        return self.state.expense_category(stored["id"])

    def update_expense_category(self, category_id: int, name: str) -> ExpenseCategory:
        validate_expense_category(name)
        self._require(
            "expense category", self.state.expense_category(category_id), category_id
        )
        update_row(self._db, "expense_categories", category_id, {"name": name.strip()})
        self._written("Renamed expense category #%s", category_id)
        return self.state.expense_category(category_id)

    def delete_expense_category(self, category_id: int) -> None:
        self._require(
            "expense category", self.state.expense_category(category_id), category_id
        )
        delete_row(self._db, "expense_categories", category_id)
        self._written("Deleted expense category #%s", category_id)

    def add_supplier(self, data: NewSupplier) -> Supplier:
        validate_supplier(data)
        stored = insert_row(self._db, "suppliers", data.to_row())
        self._written("Added supplier #%s (%s)", stored["id"], stored["name"])
        return self.state.supplier(stored["id"])

    def update_supplier(self, supplier_id: int, update: SupplierUpdate) -> Supplier:
        validate_supplier(update)
        current = self._require("supplier", self.state.supplier(supplier_id), supplier_id)
        if update.is_empty():
            return current
        update_row(self._db, "suppliers", supplier_id, update.to_patch())
        self._written("Updated supplier #%s", supplier_id)
        return self.state.supplier(supplier_id)

    def delete_supplier(self, supplier_id: int) -> None:
        self._require("supplier", self.state.supplier(supplier_id), supplier_id)
        delete_row(self._db, "suppliers", supplier_id)
        self._written("Deleted supplier #%s", supplier_id)

    # -- users --------------------------------------------------------------

    def _check_email_free(self, email: str, user_id: Optional[int] = None) -> None:
        other = self.state.user_by_email(email)
        if other is not None and other.id != user_id:
            raise DomainRuleError(f"Email {email} is already used by user #{other.id}.")

    def _check_not_sole_admin(self, user: User, action: str) -> None:
        if user.is_admin and len(self.state.admins) <= 1:
            raise DomainRuleError(f"Cannot {action} the only administrator.")

    def add_user(self, data: NewUser) -> User:
        self._require_admin()
        validate_user(data, self.config.email_domain)
        self._check_email_free(data.email)
        row = data.to_row()
        row["email"] = data.email.strip().lower()
        stored = insert_row(self._db, "profiles", row)
        self._written("Added user #%s (%s, %s)", stored["id"], stored["email"], stored["role"])
        return self.state.user(stored["id"])

    def update_user(self, user_id: int, update: UserUpdate) -> User:
        self._require_admin()
        validate_user(update, self.config.email_domain)
        current = self._require("user", self.state.user(user_id), user_id)
        if update.is_empty():
            return current
        if update.role is not None and update.role != "admin":
            self._check_not_sole_admin(current, "demote")
        patch = update.to_patch()
        if update.email is not None:
            self._check_email_free(update.email, user_id)
            patch["email"] = update.email.strip().lower()
        update_row(self._db, "profiles", user_id, patch)
        self._written("Updated user #%s", user_id)
        return self.state.user(user_id)

    def delete_user(self, user_id: int) -> None:
        """Delete a user profile. The only administrator cannot be deleted."""
        self._require_admin()
        user = self._require("user", self.state.user(user_id), user_id)
        self._check_not_sole_admin(user, "delete")
        delete_row(self._db, "profiles", user_id)
        self._written("Deleted user #%s (%s)", user_id, user.email)

    def toggle_user_status(self, user_id: int) -> User:
        self._require_admin()
        user = self._require("user", self.state.user(user_id), user_id)
        update_row(self._db, "profiles", user_id, {"active": 0 if user.active else 1})
        self._written(
            "%s user #%s", "Deactivated" if user.active else "Activated", user_id
        )
        return self.state.user(user_id)
