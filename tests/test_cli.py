from datetime import datetime, timezone

import pytest

import vendordesk.periods as periods
from vendordesk.cli import main
from vendordesk.config import load_app_config
from vendordesk.db import insert_row
from vendordesk.models import NewClient, NewLicense, NewSoftware
from vendordesk.store import Store

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

CONFIG = """
[database]
engine = "sqlite"
path = "vendordesk.sqlite"

[company]
email_domain = "@example.com"
admin_email = "support@example.com"

[dashboard]
default_catalog_names = ["ERP", "CRM"]
trailing_months = 3
"""


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Configuration file with a database holding one client and one license sale."""
    monkeypatch.setattr(periods, "_now", lambda: NOW)
    path = tmp_path / "vendordesk_config.toml"
    path.write_text(CONFIG, encoding="utf-8")

    store = Store(load_app_config(str(path)))
    acme = store.add_client(
        NewClient(
            name="Acme",
            cnpj="12.345.678/0001-90",
            contact_name="Jane Roe",
            email="jane@acme.test",
            whatsapp="+55 11 91234-5678",
            address="1 Main Street",
        )
    )
    erp = store.add_software(
        NewSoftware(name="ERP", version="5.2", price_unitary=1000, price_network=3000)
    )
    store.add_license(acme.id, NewLicense(software_id=erp.id, category="Network"))
    return path


def run(config_path, *argv):
    return main(["--config", str(config_path), *argv])


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_version(capsys):
    assert main(["--version"]) == 0
    assert "vendordesk version" in capsys.readouterr().out


def test_missing_config_file_is_an_error(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "nope.toml"), "dashboard"]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_dashboard(config_path, capsys):
    assert run(config_path, "dashboard") == 0

    out = capsys.readouterr().out
    assert "Applied period: Oct 2026 (2026-10)" in out
    assert "3000.00 BRL" in out
    assert "Sales by software" in out
    assert "Aug 2026" in out


def test_ledger_list_and_totals(config_path, capsys):
    assert run(config_path, "ledger", "list", "--period", "2026-10") == 0
    out = capsys.readouterr().out
    assert "License acquisition: ERP (Network)" in out
    assert "Total entries: 1" in out

    assert run(config_path, "ledger", "totals") == 0
    assert "Balance: 3000.00 BRL" in capsys.readouterr().out


def test_sell_then_return_keeps_ledger_consistent(config_path, capsys):
    assert run(config_path, "licenses", "sell", "1", "1", "Unitary") == 0
    assert "for 1000.00 BRL" in capsys.readouterr().out

    assert run(config_path, "licenses", "return", "2") == 0
    assert run(config_path, "check") == 0
    assert "ledger is consistent" in capsys.readouterr().out

    assert run(config_path, "ledger", "totals") == 0
    assert "Revenue: 3000.00 BRL" in capsys.readouterr().out


def test_check_reports_license_without_entry(config_path, capsys):
    config = load_app_config(str(config_path))
    insert_row(
        config.database,
        "client_software_licenses",
        {
            "client_id": 1,
            "software_id": 1,
            "software_name": "ERP",
            "type": "Unitary",
            "acquisition_date": "2026-10-02",
            "price_cents": 100000,
            "returned": 0,
        },
    )

    assert run(config_path, "check") == 1
    assert "has no revenue entry" in capsys.readouterr().out


def test_rejected_commands_exit_with_status_1(config_path, capsys):
    assert run(config_path, "licenses", "sell", "1", "1", "Web") == 1
    assert "price" in capsys.readouterr().err

    assert run(config_path, "occurrences", "status", "999", "resolved") == 1
    assert "Unknown occurrence #999" in capsys.readouterr().err

    assert run(config_path, "--as", "someone@gmail.com", "users") == 1
    assert "Access restricted" in capsys.readouterr().err


def test_csv_display_mode_writes_files(config_path, tmp_path, capsys):
    output_dir = tmp_path / "out"

    code = run(
        config_path, "--display-mode", "csv", "--output-dir", str(output_dir), "catalog"
    )

    assert code == 0
    assert len(list(output_dir.glob("softwares_*.csv"))) == 1
    assert len(list(output_dir.glob("services_*.csv"))) == 1
    assert "Wrote" in capsys.readouterr().out


def test_ledger_import(config_path, tmp_path, capsys):
    csv_path = tmp_path / "bank.csv"
    csv_path.write_text(
        "type,description,category,value,date,due_date,payment_method\n"
        "expense,Office rent,Rent,1200,2026-10-05,2026-10-05,Pix\n",
        encoding="utf-8",
    )

    assert run(config_path, "ledger", "import", str(csv_path)) == 0
    assert "Imported 1 entries." in capsys.readouterr().out

    assert run(config_path, "ledger", "import", str(tmp_path / "missing.csv")) == 1


def test_clients_search_matches_name_or_email(config_path, capsys):
    assert run(config_path, "clients", "list", "--search", "ACME.TEST") == 0
    assert "Acme" in capsys.readouterr().out

    assert run(config_path, "clients", "list", "--search", "  acm ") == 0
    assert "Acme" in capsys.readouterr().out

    assert run(config_path, "clients", "list", "--search", "globex") == 0
    assert "(none)" in capsys.readouterr().out


def test_unknown_client_is_reported_without_quotes(config_path, capsys):
    assert run(config_path, "clients", "show", "999") == 1
    assert "Error: Unknown client #999." in capsys.readouterr().err


def test_ledger_import_rejects_unstorable_values(config_path, tmp_path, capsys):
    csv_path = tmp_path / "bank.csv"
    csv_path.write_text(
        "type,description,category,value,date,due_date,payment_method\n"
        "expense,Office rent,Rent,inf,2026-10-05,2026-10-05,Pix\n",
        encoding="utf-8",
    )

    assert run(config_path, "ledger", "import", str(csv_path)) == 1
    assert "Non-finite" in capsys.readouterr().err


def test_warning_when_no_client_is_recorded(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(periods, "_now", lambda: NOW)
    path = tmp_path / "vendordesk_config.toml"
    path.write_text(CONFIG, encoding="utf-8")

    assert run(path, "dashboard") == 0
    assert "Warning: no clients recorded yet." in capsys.readouterr().out

    assert run(path, "catalog") == 0
    assert "Warning" not in capsys.readouterr().out
