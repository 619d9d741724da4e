import pytest

from vendordesk.config import DEFAULT_PAYMENT_METHODS, load_app_config


def write_config(tmp_path, text: str):
    path = tmp_path / "vendordesk_config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_minimal_config_uses_defaults(tmp_path):
    path = write_config(tmp_path, "")

    cfg = load_app_config(str(path))

    assert cfg.database.engine == "sqlite"
    assert cfg.database.path == (tmp_path / "data/db/vendordesk.sqlite").resolve()
    assert cfg.email_domain == "@example.com"
    assert cfg.admin_email is None
    assert cfg.ledger.license_sale_category == "Software Sale"
    assert cfg.ledger.require_due_date is True
    assert cfg.ledger.require_supplier_for_expenses is False
    assert cfg.ledger.payment_methods == DEFAULT_PAYMENT_METHODS
    assert cfg.default_catalog_names == ("ERP", "CRM")
    assert cfg.trailing_months == 6
    assert cfg.display_mode == "table"
    assert cfg.log_level == "WARNING"


def test_full_config_is_parsed(tmp_path):
    path = write_config(
        tmp_path,
        """
[database]
path = "store/app.sqlite"

[company]
email_domain = "Vendor.COM"
admin_email = "Support@Vendor.com"

[ledger]
license_sale_category = "Licenses"
require_due_date = false
require_supplier_for_expenses = true
payment_methods = ["Pix", "Cash"]

[dashboard]
default_catalog_names = ["Desk", "Books"]
trailing_months = 12

[display]
mode = "both"
currency = "EUR"

[logging]
level = "info"
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.database.path == (tmp_path / "store/app.sqlite").resolve()
    assert cfg.email_domain == "@vendor.com"
    assert cfg.admin_email == "support@vendor.com"
    assert cfg.ledger.license_sale_category == "Licenses"
    assert cfg.ledger.require_due_date is False
    assert cfg.ledger.require_supplier_for_expenses is True
    assert cfg.ledger.payment_methods == ("Pix", "Cash")
    assert cfg.default_catalog_names == ("Desk", "Books")
    assert cfg.trailing_months == 12
    assert cfg.display_mode == "both"
    assert cfg.currency == "EUR"
    assert cfg.log_level == "INFO"


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


@pytest.mark.parametrize(
    "text",
    [
        "[display]\nmode = 'html'\n",
        "[logging]\nlevel = 'LOUD'\n",
        "[dashboard]\ntrailing_months = 0\n",
        "[dashboard]\ntrailing_months = 'six'\n",
        "[ledger]\npayment_methods = []\n",
        "this is not toml",
    ],
)
def test_invalid_values_are_rejected(tmp_path, text):
    path = write_config(tmp_path, text)

    with pytest.raises(ValueError):
        load_app_config(str(path))
