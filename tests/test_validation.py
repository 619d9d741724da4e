from datetime import date

import pytest

from vendordesk.config import LedgerConfig
from vendordesk.errors import ValidationError
from vendordesk.models import (
    ClientUpdate,
    CompanyInfo,
    FinancialEntryUpdate,
    LicenseUpdate,
    NewClient,
    NewFinancialEntry,
    NewLicense,
    NewMonthlyFee,
    NewOccurrence,
    NewSoftware,
    NewSupplier,
    NewUser,
    OccurrenceUpdate,
    UserUpdate,
)
from vendordesk.validation import (
    validate_client,
    validate_company_info,
    validate_expense_category,
    validate_financial_entry,
    validate_license,
    validate_monthly_fee,
    validate_occurrence,
    validate_software,
    validate_supplier,
    validate_user,
)

TODAY = date(2026, 10, 19)


def valid_client(**overrides) -> NewClient:
    data = dict(
        name="Acme Tools",
        cnpj="12.345.678/0001-90",
        contact_name="Jane Roe",
        email="jane@acme.test",
        whatsapp="+55 11 91234-5678",
        address="1 Main Street",
    )
    data.update(overrides)
    return NewClient(**data)


def valid_entry(**overrides) -> NewFinancialEntry:
    data = dict(
        type="expense",
        description="Office rent",
        category="Rent",
        value=1200.0,
        date="2026-10-05",
        due_date="2026-10-10",
        payment_method="Pix",
    )
    data.update(overrides)
    return NewFinancialEntry(**data)


def errors_of(func, *args, **kwargs) -> dict:
    with pytest.raises(ValidationError) as exc_info:
        func(*args, **kwargs)
    return exc_info.value.errors


def test_valid_client_passes():
    validate_client(valid_client())


def test_client_errors_are_collected_per_field():
    errors = errors_of(
        validate_client,
        valid_client(name="A", cnpj="123", email="not-an-email", whatsapp="123", address="x"),
    )

    assert set(errors) == {"name", "cnpj", "email", "whatsapp", "address"}


def test_partial_client_update_only_checks_given_fields():
    validate_client(ClientUpdate(active=False))
    validate_client(ClientUpdate(name="Globex"))

    errors = errors_of(validate_client, ClientUpdate(email="bad"))
    assert set(errors) == {"email"}


def test_user_email_must_match_corporate_domain():
    validate_user(NewUser(name="Ana", email="ana@example.com"), "@example.com")
    validate_user(UserUpdate(role="admin"), "@example.com")

    errors = errors_of(
        validate_user, NewUser(name="Ana", email="ana@gmail.com", role="owner"), "@example.com"
    )
    assert set(errors) == {"email", "role"}


def test_valid_financial_entry_passes():
    validate_financial_entry(valid_entry(), LedgerConfig(), reference_date=TODAY)


def test_financial_entry_rules():
    errors = errors_of(
        validate_financial_entry,
        valid_entry(
            description="ab",
            category="",
            value=0,
            date="2026-10-20",
            payment_method="Cheque",
        ),
        LedgerConfig(),
        reference_date=TODAY,
    )

    assert errors["value"] == "Value must be greater than zero"
    assert errors["date"] == "Date cannot be in the future"
    assert set(errors) == {"description", "category", "value", "date", "payment_method"}


def test_due_date_variant():
    entry = valid_entry(due_date=None)

    errors = errors_of(validate_financial_entry, entry, LedgerConfig(), reference_date=TODAY)
    assert set(errors) == {"due_date"}

    validate_financial_entry(
        entry, LedgerConfig(require_due_date=False), reference_date=TODAY
    )


def test_supplier_variant_applies_to_expenses_only():
    ledger = LedgerConfig(require_supplier_for_expenses=True)

    errors = errors_of(validate_financial_entry, valid_entry(), ledger, reference_date=TODAY)
    assert set(errors) == {"supplier_id"}

    validate_financial_entry(valid_entry(supplier_id=3), ledger, reference_date=TODAY)
    validate_financial_entry(valid_entry(type="revenue"), ledger, reference_date=TODAY)


def test_financial_entry_update_checks_only_given_fields():
    ledger = LedgerConfig()

    validate_financial_entry(
        FinancialEntryUpdate(observation="paid late"),
        ledger,
        entry_type="expense",
        reference_date=TODAY,
    )
    errors = errors_of(
        validate_financial_entry,
        FinancialEntryUpdate(value=-5),
        ledger,
        entry_type="expense",
        reference_date=TODAY,
    )
    assert set(errors) == {"value"}


def test_occurrence_rules():
    validate_occurrence(
        NewOccurrence(
            client_id=1,
            solicitor="John",
            title="Printer error",
            description="Invoice printing fails on save",
            deadline="2026-10-25",
        )
    )

    errors = errors_of(
        validate_occurrence,
        NewOccurrence(
            client_id=None,
            solicitor="J",
            title="Bug",
            description="Broken",
            deadline="",
        ),
    )
    assert set(errors) == {"client_id", "solicitor", "title", "description", "deadline"}


def test_occurrence_update_rejects_unknown_status():
    validate_occurrence(OccurrenceUpdate(status="awaiting-client"))

    errors = errors_of(validate_occurrence, OccurrenceUpdate(status="closed"))
    assert set(errors) == {"status"}


def test_license_rules():
    validate_license(NewLicense(software_id=1, category="Web", price=99.0))
    validate_license(LicenseUpdate(returned=True))

    errors = errors_of(validate_license, NewLicense(software_id=1, category="Site", price=-1))
    assert set(errors) == {"category", "price"}


@pytest.mark.parametrize("amount", [float("inf"), float("-inf"), float("nan"), 1e20])
def test_amounts_must_fit_in_cents(amount):
    ledger = LedgerConfig()

    entry_errors = errors_of(
        validate_financial_entry, valid_entry(value=amount), ledger, reference_date=TODAY
    )
    assert entry_errors == {"value": "Invalid amount"}

    update_errors = errors_of(
        validate_financial_entry,
        FinancialEntryUpdate(value=amount),
        ledger,
        entry_type="expense",
        reference_date=TODAY,
    )
    assert update_errors == {"value": "Invalid amount"}

    license_errors = errors_of(
        validate_license, NewLicense(software_id=1, category="Web", price=amount)
    )
    assert license_errors == {"price": "Invalid amount"}

    fee_errors = errors_of(validate_monthly_fee, NewMonthlyFee(description="Support", value=amount))
    assert fee_errors == {"value": "Invalid amount"}

    software_errors = errors_of(
        validate_software, NewSoftware(name="ERP", version="5", price_network=amount)
    )
    assert software_errors == {"price_network": "Invalid amount"}


def test_large_but_storable_amount_passes():
    validate_financial_entry(valid_entry(value=9e15), LedgerConfig(), reference_date=TODAY)


def test_registry_rules():
    validate_software(NewSoftware(name="ERP", version="5"))
    validate_supplier(NewSupplier(name="Cloud Host"))
    validate_expense_category("Rent")
    validate_company_info(
        CompanyInfo(
            name="Vendor Ltd",
            cnpj="12.345.678/0001-90",
            address="10 Market Street",
            phone="+55 11 3333-4444",
            email="contact@vendor.test",
        )
    )

    assert set(errors_of(validate_software, NewSoftware(name="E", version="", price_cloud=-1))) == {
        "name",
        "version",
        "price_cloud",
    }
    assert set(errors_of(validate_supplier, NewSupplier(name="Cloud", email="nope"))) == {"email"}
    assert set(errors_of(validate_expense_category, " ")) == {"name"}
    assert set(errors_of(validate_company_info, CompanyInfo(name="Vendor Ltd"))) == {
        "cnpj",
        "address",
        "phone",
        "email",
    }
