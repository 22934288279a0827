"""
Tests for the command line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from home_purchase.cli import app
from home_purchase.store import ScenarioStore

runner = CliRunner()


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "scenarios.json")


def test_payment_reports_affordability():
    result = runner.invoke(
        app,
        [
            "payment",
            "--purchase-price", "400000",
            "--interest-rate", "6.5",
            "--property-tax", "400",
            "--insurance", "150",
            "--annual-income", "120000",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Loan amount: $320,000" in result.output
    assert "PMI: $0.00" in result.output
    assert "Affordability: excellent" in result.output


def test_payment_rejects_invalid_inputs():
    result = runner.invoke(
        app,
        ["payment", "--purchase-price", "0", "--interest-rate", "6.5", "--annual-income", "0"],
    )

    assert result.exit_code == 1


def test_payment_can_save_scenario(store_path):
    result = runner.invoke(
        app,
        [
            "payment",
            "--purchase-price", "350000",
            "--interest-rate", "6",
            "--annual-income", "95000",
            "--save-as", "Oak Avenue",
            "--store-path", store_path,
        ],
    )

    assert result.exit_code == 0, result.output
    records = ScenarioStore(store_path).list_scenarios()
    assert [record.name for record in records] == ["Oak Avenue"]
    assert records[0].calculations is not None


def test_schedule_json():
    result = runner.invoke(app, ["schedule", "120000", "0", "--loan-term", "10", "--json"])

    assert result.exit_code == 0, result.output
    rows = json.loads(result.output)
    assert len(rows) == 10
    assert rows[-1]["balance"] == 0


def test_goal_never():
    result = runner.invoke(app, ["goal", "100000", "--starting-amount", "5000"])

    assert result.exit_code == 0
    assert "never" in result.output


def test_compare_and_rent_vs_buy(store_path, make_scenario):
    store = ScenarioStore(store_path)
    first = store.save_scenario(make_scenario(name="Cheaper", purchase_price=300_000))
    second = store.save_scenario(make_scenario(name="Pricier", purchase_price=450_000))

    compared = runner.invoke(
        app,
        [
            "compare", first, second,
            "--timeframe", "10",
            "--event", "5:one-time:10000:Roof",
            "--income", "3:130000",
            "--store-path", store_path,
        ],
    )
    assert compared.exit_code == 0, compared.output
    assert "Better outcome:" in compared.output

    rented = runner.invoke(
        app,
        ["rent-vs-buy", first, "--monthly-rent", "2200", "--timeframe", "5", "--store-path", store_path],
    )
    assert rented.exit_code == 0, rented.output
    assert "Rent" in rented.output


def test_compare_rejects_bad_event(store_path, make_scenario):
    store = ScenarioStore(store_path)
    scenario_id = store.save_scenario(make_scenario())

    result = runner.invoke(
        app,
        ["compare", scenario_id, scenario_id, "--event", "5:vacation", "--store-path", store_path],
    )

    assert result.exit_code != 0


def test_scenarios_lifecycle(tmp_path, store_path, make_scenario):
    export_file = tmp_path / "export.json"
    export_file.write_text(json.dumps([make_scenario(name="Imported").to_dict()]))

    imported = runner.invoke(app, ["scenarios", "import", str(export_file), "--store-path", store_path])
    assert imported.exit_code == 0, imported.output
    assert "1 new scenarios added" in imported.output

    listed = runner.invoke(app, ["scenarios", "list", "--store-path", store_path])
    assert "Imported" in listed.output

    scenario_id = ScenarioStore(store_path).list_scenarios()[0].id
    shown = runner.invoke(app, ["scenarios", "show", scenario_id, "--csv", "--store-path", store_path])
    assert shown.output.startswith("Property Name,")

    deleted = runner.invoke(app, ["scenarios", "delete", scenario_id, "--store-path", store_path])
    assert deleted.exit_code == 0
    missing = runner.invoke(app, ["scenarios", "delete", scenario_id, "--store-path", store_path])
    assert missing.exit_code == 1


def test_scenarios_add(store_path):
    result = runner.invoke(
        app,
        [
            "scenarios", "add", "Birch Lane",
            "--purchase-price", "380000",
            "--interest-rate", "6.25",
            "--property-tax", "350",
            "--annual-income", "110000",
            "--store-path", store_path,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Saved scenario 'Birch Lane'" in result.output
    [record] = ScenarioStore(store_path).list_scenarios()
    assert record.name == "Birch Lane"
    assert record.property.down_payment_percent == 20.0
    assert record.property.loan_term_years == 30
    assert record.calculations.loan_amount == pytest.approx(304_000)


def test_scenarios_add_rejects_invalid(store_path):
    result = runner.invoke(
        app,
        [
            "scenarios", "add", "Nowhere",
            "--purchase-price", "0",
            "--interest-rate", "6",
            "--annual-income", "90000",
            "--store-path", store_path,
        ],
    )

    assert result.exit_code == 1
    assert ScenarioStore(store_path).list_scenarios() == []


def test_scenarios_table_marks_lowest_cost(store_path, make_scenario):
    store = ScenarioStore(store_path)
    pricey = store.save_scenario(make_scenario(name="Pricey", purchase_price=500_000))
    modest = store.save_scenario(make_scenario(name="Modest", purchase_price=300_000))

    result = runner.invoke(app, ["scenarios", "table", pricey, modest, "--store-path", store_path])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].split() == ["Scenario", "Pricey", "Modest"]
    cost_line = next(line for line in lines if line.startswith("Total monthly cost"))
    assert cost_line.rstrip().endswith("*")
    assert cost_line.count("*") == 1
    assert "Housing ratio" in result.output
    assert "* lowest total monthly cost: Modest" in result.output


def test_house_prices(store_path, make_scenario):
    store = ScenarioStore(store_path)
    expensive = store.save_scenario(make_scenario(name="Big", purchase_price=600_000))
    cheaper = store.save_scenario(make_scenario(name="Small", purchase_price=350_000))

    result = runner.invoke(
        app, ["house-prices", expensive, cheaper, "--years", "10", "--store-path", store_path]
    )

    assert result.exit_code == 0, result.output
    assert "Monthly savings with the cheaper house:" in result.output
    assert "Break-even year:" in result.output
    assert "Better outcome:" in result.output
    year_rows = [line for line in result.output.splitlines() if line.strip()[:2].strip().isdigit()]
    assert len(year_rows) == 10


def test_analysis(store_path, make_scenario):
    store = ScenarioStore(store_path)
    scenario_id = store.save_scenario(
        make_scenario(purchase_price=400_000, current_portfolio=80_000, loan_term_years=15)
    )

    result = runner.invoke(
        app, ["analysis", scenario_id, "--timeframe", "20", "--store-path", store_path]
    )

    assert result.exit_code == 0, result.output
    assert "Final equity:" in result.output
    # the down payment uses the whole portfolio, so equity leads from year 1
    assert "Equity overtakes the portfolio in year 1" in result.output
    assert result.output.count("\n  15  ") == 1
    assert "\n  16  " not in result.output


def test_settings_feed_option_defaults(isolated_settings, store_path):
    saved = runner.invoke(
        app, ["settings", "set", "--loan-term", "15", "--down-payment-percent", "25"]
    )
    assert saved.exit_code == 0, saved.output
    assert isolated_settings.exists()

    shown = runner.invoke(app, ["settings", "show"])
    assert "Loan term: 15 years" in shown.output
    assert "Down payment: 25.0%" in shown.output

    added = runner.invoke(
        app,
        [
            "scenarios", "add", "Cedar Court",
            "--purchase-price", "400000",
            "--interest-rate", "6",
            "--annual-income", "120000",
            "--store-path", store_path,
        ],
    )
    assert added.exit_code == 0, added.output
    [record] = ScenarioStore(store_path).list_scenarios()
    assert record.property.loan_term_years == 15
    assert record.property.down_payment_percent == 25.0

    reset = runner.invoke(app, ["settings", "reset"])
    assert reset.exit_code == 0
    assert not isolated_settings.exists()


def test_settings_rejects_bad_value():
    result = runner.invoke(app, ["settings", "set", "--loan-term", "0"])

    assert result.exit_code != 0


def test_environment_overrides_saved_settings(monkeypatch):
    runner.invoke(app, ["settings", "set", "--down-payment-percent", "10"])
    monkeypatch.setenv("HOME_PURCHASE_DOWN_PAYMENT", "20")

    result = runner.invoke(
        app,
        ["payment", "--purchase-price", "400000", "--interest-rate", "6.5", "--annual-income", "120000"],
    )

    assert "Loan amount: $320,000" in result.output
    assert "PMI: $0.00" in result.output
