# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain model for Vendor Desk.

For every entity this module defines up to three dataclasses:

- the entity itself (e.g. ``Client``), materialized from a table row with
  ``from_row()``;
- a ``New*`` record holding the fields required to create it, encoded with
  ``to_row()``;
- a ``*Update`` record for partial edits, encoded with ``to_patch()``.

Each attribute of an update is optional and only non-None values are
written. Falsy values (0, False, "") are real values and are written as
such.

Money is exposed as ``float`` in monetary units and stored as integer cents;
the conversion happens in ``to_row()`` / ``to_patch()`` / ``from_row()``
only. Dates and timestamps are kept as the ISO-8601 text stored in the
database.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Literal, Optional

LicenseCategory = Literal["Unitary", "Network", "Cloud", "Web"]
LICENSE_CATEGORIES: tuple[str, ...] = ("Unitary", "Network", "Cloud", "Web")

OccurrenceStatus = Literal[
    "open", "in-progress", "awaiting-client", "resolved", "cancelled"
]
OCCURRENCE_STATUSES: tuple[str, ...] = (
    "open",
    "in-progress",
    "awaiting-client",
    "resolved",
    "cancelled",
)

EntryType = Literal["revenue", "expense"]
ENTRY_TYPES: tuple[str, ...] = ("revenue", "expense")

UserRole = Literal["admin", "user"]
USER_ROLES: tuple[str, ...] = ("admin", "user")


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------


MAX_CENTS = 2**63 - 1
"""Largest amount, in cents, that fits an SQLite INTEGER column."""


def to_cents(value: float) -> int:
    """Convert a monetary amount to integer cents."""
    return int(round(float(value) * 100))


def from_cents(value: Optional[int]) -> float:
    """Convert integer cents to a monetary amount (None counts as 0)."""
    if value is None:
        return 0.0
    return float(value) / 100.0


def _encode(
    values: Mapping[str, Any],
    columns: Mapping[str, str],
    *,
    skip_none: bool,
) -> dict[str, Any]:
    """
    Turn dataclass values into table columns.

    ``columns`` maps attribute names to column names when they differ.
    Columns ending in ``_cents`` receive amounts converted to cents and
    booleans are stored as 0/1.
    """
    row: dict[str, Any] = {}
    for name, value in values.items():
        if skip_none and value is None:
            continue
        column = columns.get(name, name)
        if column.endswith("_cents") and value is not None:
            value = to_cents(value)
        elif isinstance(value, bool):
            value = int(value)
        row[column] = value
    return row


def _values(record: Any) -> dict[str, Any]:
    return {f.name: getattr(record, f.name) for f in fields(record)}


class _RowRecord:
    """Mixin for ``New*`` records: encode every field."""

    _columns: Mapping[str, str] = {}

    def to_row(self) -> dict[str, Any]:
        return _encode(_values(self), self._columns, skip_none=False)


class _PatchRecord:
    """Mixin for ``*Update`` records: encode non-None fields only."""

    _columns: Mapping[str, str] = {}

    def to_patch(self) -> dict[str, Any]:
        return _encode(_values(self), self._columns, skip_none=True)

    def is_empty(self) -> bool:
        return all(value is None for value in _values(self).values())


def _flag(value: Any, default: bool = False) -> bool:
    return default if value is None else bool(value)


# ---------------------------------------------------------------------------
# Clients, licenses and monthly fees
# ---------------------------------------------------------------------------

_LICENSE_COLUMNS = {"category": "type", "price": "price_cents"}
_FEE_COLUMNS = {"value": "value_cents"}


@dataclass(frozen=True)
class SoftwareLicense:
    """A catalog software sold to a client."""

    id: int
    client_id: int
    software_id: Optional[int]
    software_name: str
    category: str
    acquisition_date: Optional[str]
    price: float
    returned: bool

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SoftwareLicense":
        return cls(
            id=row["id"],
            client_id=row["client_id"],
            software_id=row.get("software_id"),
            software_name=row.get("software_name") or "",
            category=row.get("type") or "",
            acquisition_date=row.get("acquisition_date"),
            price=from_cents(row.get("price_cents")),
            returned=_flag(row.get("returned")),
        )


@dataclass(frozen=True)
class NewLicense:
    """
    Data required to sell a license to a client.

    When ``price`` is None, the catalog price of the software for the
    category is used. When ``acquisition_date`` is None, the current
    timestamp is used.
    """

    software_id: int
    category: str
    price: Optional[float] = None
    acquisition_date: Optional[str] = None


@dataclass(frozen=True)
class LicenseUpdate(_PatchRecord):
    """Fields that can be updated on an existing license."""

    _columns = _LICENSE_COLUMNS

    software_id: Optional[int] = None
    software_name: Optional[str] = None
    category: Optional[str] = None
    acquisition_date: Optional[str] = None
    price: Optional[float] = None
    returned: Optional[bool] = None


@dataclass(frozen=True)
class MonthlyFee:
    """A recurring billing line of a client. Never posted to the ledger."""

    id: int
    client_id: int
    description: str
    value: float
    due_date: Optional[str]
    active: bool

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MonthlyFee":
        return cls(
            id=row["id"],
            client_id=row["client_id"],
            description=row.get("description") or "",
            value=from_cents(row.get("value_cents")),
            due_date=row.get("due_date"),
            active=_flag(row.get("active"), default=True),
        )


@dataclass(frozen=True)
class NewMonthlyFee(_RowRecord):
    _columns = _FEE_COLUMNS

    description: str
    value: float
    due_date: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class MonthlyFeeUpdate(_PatchRecord):
    _columns = _FEE_COLUMNS

    description: Optional[str] = None
    value: Optional[float] = None
    due_date: Optional[str] = None
    active: Optional[bool] = None


@dataclass(frozen=True)
class Client:
    """
    A customer of the vendor.

    ``licenses`` and ``monthly_fees`` are the records owned by the client,
    attached when the state is loaded.
    """

    id: int
    name: str
    cnpj: Optional[str]
    contact_name: Optional[str]
    email: Optional[str]
    whatsapp: Optional[str]
    address: Optional[str]
    active: bool
    created_at: Optional[str]
    licenses: tuple[SoftwareLicense, ...] = ()
    monthly_fees: tuple[MonthlyFee, ...] = ()

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        licenses: tuple[SoftwareLicense, ...] = (),
        monthly_fees: tuple[MonthlyFee, ...] = (),
    ) -> "Client":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            cnpj=row.get("cnpj"),
            contact_name=row.get("contact_name"),
            email=row.get("email"),
            whatsapp=row.get("whatsapp"),
            address=row.get("address"),
            active=_flag(row.get("active"), default=True),
            created_at=row.get("created_at"),
            licenses=licenses,
            monthly_fees=monthly_fees,
        )


@dataclass(frozen=True)
class NewClient(_RowRecord):
    name: str
    cnpj: str
    contact_name: str
    email: str
    whatsapp: str
    address: str
    active: bool = True


@dataclass(frozen=True)
class ClientUpdate(_PatchRecord):
    name: Optional[str] = None
    cnpj: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[str] = None
    active: Optional[bool] = None


# ---------------------------------------------------------------------------
# Occurrences
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Occurrence:
    """
    A support ticket tracked against a client.

    ``closing_date`` and ``closed_by`` are stamped when the ticket enters
    the "resolved" status (see ``occurrences.py``).
    """

    id: int
    client_id: int
    client_name: Optional[str]
    solicitor: Optional[str]
    title: str
    description: Optional[str]
    status: str
    opening_date: Optional[str]
    deadline: Optional[str]
    closing_date: Optional[str] = None
    closed_by: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Occurrence":
        return cls(
            id=row["id"],
            client_id=row["client_id"],
            client_name=row.get("client_name"),
            solicitor=row.get("solicitor"),
            title=row.get("title") or "",
            description=row.get("description"),
            status=row.get("status") or "open",
            opening_date=row.get("opening_date"),
            deadline=row.get("deadline"),
            closing_date=row.get("closing_date"),
            closed_by=row.get("closed_by"),
        )


@dataclass(frozen=True)
class NewOccurrence(_RowRecord):
    client_id: int
    solicitor: str
    title: str
    description: str
    deadline: str


@dataclass(frozen=True)
class OccurrenceUpdate(_PatchRecord):
    """
    Editable fields of an occurrence.

    Closure metadata is not part of the update: it is derived from the
    status transition.
    """

    solicitor: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[str] = None


# ---------------------------------------------------------------------------
# Financial ledger
# ---------------------------------------------------------------------------

_ENTRY_COLUMNS = {"value": "value_cents"}


@dataclass(frozen=True)
class FinancialEntry:
    """
    A single ledger line, either revenue or expense.

    ``license_id`` is set on the revenue entry posted by a license sale.
    """

    id: int
    type: str
    description: Optional[str]
    category: Optional[str]
    value: float
    date: Optional[str]
    due_date: Optional[str] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    payment_method: Optional[str] = None
    observation: Optional[str] = None
    license_id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FinancialEntry":
        return cls(
            id=row["id"],
            type=row.get("type") or "",
            description=row.get("description"),
            category=row.get("category"),
            value=from_cents(row.get("value_cents")),
            date=row.get("date"),
            due_date=row.get("due_date"),
            client_id=row.get("client_id"),
            client_name=row.get("client_name"),
            supplier_id=row.get("supplier_id"),
            supplier_name=row.get("supplier_name"),
            payment_method=row.get("payment_method"),
            observation=row.get("observation"),
            license_id=row.get("license_id"),
        )


@dataclass(frozen=True)
class NewFinancialEntry(_RowRecord):
    """
    Data required to create a ledger entry manually.

    Denormalized names (client, supplier) are filled in by the store.
    """

    _columns = _ENTRY_COLUMNS

    type: str
    description: str
    category: str
    value: float
    date: str
    due_date: Optional[str] = None
    client_id: Optional[int] = None
    supplier_id: Optional[int] = None
    payment_method: Optional[str] = None
    observation: Optional[str] = None
    license_id: Optional[int] = None


@dataclass(frozen=True)
class FinancialEntryUpdate(_PatchRecord):
    """
    Editable fields of a ledger entry.

    The entry type and its client/license back-references are fixed at
    creation.
    """

    _columns = _ENTRY_COLUMNS

    description: Optional[str] = None
    category: Optional[str] = None
    value: Optional[float] = None
    date: Optional[str] = None
    due_date: Optional[str] = None
    supplier_id: Optional[int] = None
    payment_method: Optional[str] = None
    observation: Optional[str] = None


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_SOFTWARE_COLUMNS = {
    "price_unitary": "price_unitary_cents",
    "price_network": "price_network_cents",
    "price_cloud": "price_cloud_cents",
    "update_price": "update_price_cents",
    "cloud_update_price": "cloud_update_price_cents",
    "monthly_fee": "monthly_fee_cents",
}
_SERVICE_COLUMNS = {
    "price_client": "price_client_cents",
    "price_non_client": "price_non_client_cents",
}


@dataclass(frozen=True)
class Software:
    """A sellable software product and its price tiers."""

    id: int
    name: str
    version: Optional[str]
    price_unitary: float
    price_network: float
    price_cloud: float
    update_price: float = 0.0
    cloud_update_price: float = 0.0
    monthly_fee: float = 0.0

    def price_for(self, category: str) -> Optional[float]:
        """Catalog price of a license category (None for Web licenses)."""
        return {
            "Unitary": self.price_unitary,
            "Network": self.price_network,
            "Cloud": self.price_cloud,
        }.get(category)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Software":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            version=row.get("version"),
            price_unitary=from_cents(row.get("price_unitary_cents")),
            price_network=from_cents(row.get("price_network_cents")),
            price_cloud=from_cents(row.get("price_cloud_cents")),
            update_price=from_cents(row.get("update_price_cents")),
            cloud_update_price=from_cents(row.get("cloud_update_price_cents")),
            monthly_fee=from_cents(row.get("monthly_fee_cents")),
        )


@dataclass(frozen=True)
class NewSoftware(_RowRecord):
    _columns = _SOFTWARE_COLUMNS

    name: str
    version: str
    price_unitary: float = 0.0
    price_network: float = 0.0
    price_cloud: float = 0.0
    update_price: float = 0.0
    cloud_update_price: float = 0.0
    monthly_fee: float = 0.0


@dataclass(frozen=True)
class SoftwareUpdate(_PatchRecord):
    _columns = _SOFTWARE_COLUMNS

    name: Optional[str] = None
    version: Optional[str] = None
    price_unitary: Optional[float] = None
    price_network: Optional[float] = None
    price_cloud: Optional[float] = None
    update_price: Optional[float] = None
    cloud_update_price: Optional[float] = None
    monthly_fee: Optional[float] = None


@dataclass(frozen=True)
class Service:
    """A sellable service, priced differently for clients and non-clients."""

    id: int
    name: str
    description: Optional[str]
    price_client: float
    price_non_client: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Service":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            description=row.get("description"),
            price_client=from_cents(row.get("price_client_cents")),
            price_non_client=from_cents(row.get("price_non_client_cents")),
        )


@dataclass(frozen=True)
class NewService(_RowRecord):
    _columns = _SERVICE_COLUMNS

    name: str
    description: str
    price_client: float = 0.0
    price_non_client: float = 0.0


@dataclass(frozen=True)
class ServiceUpdate(_PatchRecord):
    _columns = _SERVICE_COLUMNS

    name: Optional[str] = None
    description: Optional[str] = None
    price_client: Optional[float] = None
    price_non_client: Optional[float] = None


# ---------------------------------------------------------------------------
# Registries: expense categories, suppliers, users, company info
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExpenseCategory:
    id: int
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ExpenseCategory":
        return cls(id=row["id"], name=row.get("name") or "")


@dataclass(frozen=True)
class Supplier:
    id: int
    name: str
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Supplier":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            contact=row.get("contact"),
            phone=row.get("phone"),
            email=row.get("email"),
        )


@dataclass(frozen=True)
class NewSupplier(_RowRecord):
    name: str
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class SupplierUpdate(_PatchRecord):
    name: Optional[str] = None
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class User:
    """
    An application user.

    ``id`` is None for a signed-in session that has no stored profile.
    """

    id: Optional[int]
    name: str
    email: str
    role: str
    active: bool = True
    avatar: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            email=row.get("email") or "",
            role=row.get("role") or "user",
            active=_flag(row.get("active"), default=True),
            avatar=row.get("avatar"),
        )


@dataclass(frozen=True)
class NewUser(_RowRecord):
    name: str
    email: str
    role: str = "user"
    active: bool = True
    avatar: Optional[str] = None


@dataclass(frozen=True)
class UserUpdate(_PatchRecord):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    active: Optional[bool] = None
    avatar: Optional[str] = None


@dataclass(frozen=True)
class CompanyInfo(_RowRecord):
    """Identity of the vendor itself (single record)."""

    name: str
    cnpj: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_url: Optional[str] = None
    id: Optional[int] = None

    def to_row(self) -> dict[str, Any]:
        row = super().to_row()
        row.pop("id", None)
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CompanyInfo":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            cnpj=row.get("cnpj") or "",
            address=row.get("address") or "",
            phone=row.get("phone") or "",
            email=row.get("email") or "",
            logo_url=row.get("logo_url"),
        )
