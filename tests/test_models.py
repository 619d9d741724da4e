from vendordesk.models import (
    Client,
    CompanyInfo,
    FinancialEntry,
    LicenseUpdate,
    MonthlyFeeUpdate,
    NewFinancialEntry,
    NewSoftware,
    Software,
    SoftwareLicense,
    from_cents,
    to_cents,
)


def test_cents_conversion():
    assert to_cents(3000) == 300000
    assert to_cents(19.99) == 1999
    assert to_cents(0.1 + 0.2) == 30
    assert from_cents(1999) == 19.99
    assert from_cents(None) == 0.0


def test_patch_keeps_falsy_values_and_skips_none():
    patch = MonthlyFeeUpdate(value=0, active=False, description="").to_patch()

    assert patch == {"value_cents": 0, "active": 0, "description": ""}


def test_license_update_maps_attribute_names_to_columns():
    patch = LicenseUpdate(category="Cloud", price=120.5, returned=True).to_patch()

    assert patch == {"type": "Cloud", "price_cents": 12050, "returned": 1}
    assert LicenseUpdate().is_empty()
    assert not LicenseUpdate(returned=False).is_empty()


def test_new_records_encode_every_field():
    row = NewFinancialEntry(
        type="expense",
        description="Hosting",
        category="Infrastructure",
        value=89.9,
        date="2026-10-02",
    ).to_row()

    assert row["value_cents"] == 8990
    assert row["due_date"] is None
    assert row["license_id"] is None
    assert "value" not in row


def test_software_rows_and_catalog_prices():
    row = NewSoftware(name="ERP", version="5.2", price_unitary=1000, price_network=3000).to_row()
    assert row["price_network_cents"] == 300000
    assert row["price_cloud_cents"] == 0

    software = Software.from_row({"id": 1, **row})
    assert software.price_for("Unitary") == 1000.0
    assert software.price_for("Network") == 3000.0
    assert software.price_for("Cloud") == 0.0
    assert software.price_for("Web") is None


def test_from_row_converts_flags_and_amounts():
    lic = SoftwareLicense.from_row(
        {
            "id": 7,
            "client_id": 1,
            "software_id": 2,
            "software_name": "CRM",
            "type": "Web",
            "acquisition_date": "2026-10-01",
            "price_cents": 45000,
            "returned": 0,
        }
    )
    client = Client.from_row(
        {"id": 1, "name": "Acme", "active": 1, "created_at": "2026-01-01"}, licenses=(lic,)
    )
    entry = FinancialEntry.from_row({"id": 3, "type": "revenue", "value_cents": None})

    assert lic.category == "Web"
    assert lic.price == 450.0
    assert lic.returned is False
    assert client.active is True
    assert client.licenses == (lic,)
    assert entry.value == 0.0
    assert entry.date is None


def test_company_info_row_has_no_id():
    info = CompanyInfo(name="Vendor Ltd", cnpj="12345678000190", id=4)

    assert "id" not in info.to_row()
    assert info.to_row()["name"] == "Vendor Ltd"
