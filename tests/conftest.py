from __future__ import annotations

import pytest

from home_purchase.schemas import HouseholdFinancials, PropertyTerms, ScenarioRecord


def build_scenario(
    name: str = "Maple Street",
    purchase_price: float = 400_000,
    down_payment_percent: float = 20,
    interest_rate: float = 6.5,
    loan_term_years: int = 30,
    annual_income: float = 120_000,
    current_portfolio: float = 100_000,
    **extra,
) -> ScenarioRecord:
    return ScenarioRecord(
        name=name,
        property=PropertyTerms(
            purchase_price=purchase_price,
            down_payment_percent=down_payment_percent,
            interest_rate=interest_rate,
            loan_term_years=loan_term_years,
            property_tax=extra.pop("property_tax", 400),
            insurance=extra.pop("insurance", 150),
            hoa=extra.pop("hoa", 0),
            utilities=extra.pop("utilities", 0),
            maintenance=extra.pop("maintenance", 0),
        ),
        income=HouseholdFinancials(
            annual_income=annual_income,
            monthly_debts=extra.pop("monthly_debts", 0),
            investment_return=extra.pop("investment_return", 8.0),
            current_portfolio=current_portfolio,
        ),
    )


@pytest.fixture
def scenario() -> ScenarioRecord:
    return build_scenario()


@pytest.fixture
def make_scenario():
    return build_scenario


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep CLI defaults away from the user's real settings file."""
    path = tmp_path / "settings.json"
    monkeypatch.setenv("HOME_PURCHASE_SETTINGS", str(path))
    for name in (
        "HOME_PURCHASE_INVESTMENT_RETURN",
        "HOME_PURCHASE_APPRECIATION",
        "HOME_PURCHASE_LOAN_TERM",
        "HOME_PURCHASE_DOWN_PAYMENT",
    ):
        monkeypatch.delenv(name, raising=False)
    return path
