from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import List, Optional

import typer

from .comparison import (
    HouseOption,
    compare_buy_vs_rent,
    compare_house_prices,
    compare_investment_vs_equity,
    run_comprehensive_comparison,
)
from .model import (
    amortize,
    analyze_scenario,
    is_never,
    project_equity,
    project_investment_growth,
    recommended_price,
    years_to_goal,
)
from .schemas import (
    ComparisonResult,
    HouseholdFinancials,
    IncomeAdjustment,
    LifeEvent,
    LifeEventType,
    PlannerSettings,
    ProjectionSettings,
    PropertyTerms,
    ScenarioRecord,
)
from .store import ScenarioStore, SettingsStore, export_csv
from .validation import ScenarioValidationError, validate_scenario

app = typer.Typer(help="Mortgage, equity and buy-vs-rent projections for a home purchase.")
scenarios_app = typer.Typer(help="Manage saved scenarios.")
settings_app = typer.Typer(help="Defaults for new scenarios and projections.")
app.add_typer(scenarios_app, name="scenarios")
app.add_typer(settings_app, name="settings")


def _default_store_path() -> str:
    return os.environ.get(
        "HOME_PURCHASE_STORE", str(Path("~/.home_purchase/scenarios.json"))
    )


def _default_settings_path() -> str:
    return os.environ.get(
        "HOME_PURCHASE_SETTINGS", str(Path("~/.home_purchase/settings.json"))
    )


def _saved_settings() -> PlannerSettings:
    return SettingsStore(_default_settings_path()).load()


def _default_investment_return() -> float:
    value = os.environ.get("HOME_PURCHASE_INVESTMENT_RETURN")
    return float(value) if value else _saved_settings().investment_return


def _default_appreciation() -> float:
    value = os.environ.get("HOME_PURCHASE_APPRECIATION")
    return float(value) if value else _saved_settings().appreciation_rate


def _default_loan_term() -> int:
    value = os.environ.get("HOME_PURCHASE_LOAN_TERM")
    return int(value) if value else _saved_settings().loan_term


def _default_down_payment() -> float:
    value = os.environ.get("HOME_PURCHASE_DOWN_PAYMENT")
    return float(value) if value else _saved_settings().down_payment_percent


StoreOption = typer.Option(
    default_factory=_default_store_path,
    help="Scenario store file (env HOME_PURCHASE_STORE if omitted).",
)
SettingsOption = typer.Option(
    default_factory=_default_settings_path,
    help="Settings file (env HOME_PURCHASE_SETTINGS if omitted).",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def payment(
    purchase_price: float = typer.Option(..., help="Purchase price of the home."),
    down_payment_percent: float = typer.Option(
        default_factory=_default_down_payment, help="Down payment in percent."
    ),
    interest_rate: float = typer.Option(..., help="Annual mortgage rate in percent."),
    loan_term: int = typer.Option(default_factory=_default_loan_term, help="Loan term in years."),
    property_tax: float = typer.Option(0.0, help="Monthly property tax."),
    insurance: float = typer.Option(0.0, help="Monthly homeowners insurance."),
    hoa: float = typer.Option(0.0, help="Monthly HOA/condo fees."),
    utilities: float = typer.Option(0.0, help="Monthly utilities."),
    maintenance: float = typer.Option(0.0, help="Monthly maintenance allowance."),
    annual_income: float = typer.Option(..., help="Gross annual household income."),
    monthly_debts: float = typer.Option(0.0, help="Other monthly debt payments."),
    investment_return: float = typer.Option(
        default_factory=_default_investment_return,
        help="Expected annual investment return in percent.",
    ),
    current_portfolio: float = typer.Option(0.0, help="Current investment portfolio."),
    save_as: Optional[str] = typer.Option(
        None, help="Save the inputs as a scenario with this name."
    ),
    store_path: str = StoreOption,
) -> None:
    """
    Monthly payment breakdown, affordability ratios and the opportunity cost
    of the down payment.
    """
    record = _build_record(
        save_as or "Current calculation",
        purchase_price,
        down_payment_percent,
        interest_rate,
        loan_term,
        property_tax,
        insurance,
        hoa,
        utilities,
        maintenance,
        annual_income,
        monthly_debts,
        investment_return,
        current_portfolio,
    )
    calc = record.calculations

    breakdown = calc.payment
    typer.echo(f"Loan amount: {_money(calc.loan_amount)}")
    typer.echo(f"Principal & interest: {_money(breakdown.principal_and_interest, 2)}")
    typer.echo(f"PMI: {_money(breakdown.pmi, 2)}")
    typer.echo(f"Property tax: {_money(breakdown.property_tax, 2)}")
    typer.echo(f"Insurance: {_money(breakdown.insurance, 2)}")
    typer.echo(f"HOA: {_money(breakdown.hoa, 2)}")
    typer.echo(f"Total monthly payment: {_money(breakdown.total_payment, 2)}")
    typer.echo(f"Total monthly cost (with utilities and maintenance): {_money(calc.total_monthly_cost, 2)}")
    typer.echo("")
    ratios = calc.affordability
    typer.echo(f"Housing ratio: {_percent(ratios.housing_ratio)}")
    typer.echo(f"Debt-to-income ratio: {_percent(ratios.dti_ratio)}")
    typer.echo(f"Affordability: {ratios.status}")
    if calc.opportunity_cost is not None:
        snap = calc.opportunity_cost
        typer.echo(
            f"Down payment invested for {snap.year} years instead: {_money(snap.value)}"
        )

    if save_as:
        scenario_id = ScenarioStore(store_path).save_scenario(record)
        typer.echo(f"Saved scenario {save_as!r} as {scenario_id}")


@app.command()
def schedule(
    principal: float = typer.Argument(..., help="Loan amount."),
    interest_rate: float = typer.Argument(..., help="Annual rate in percent."),
    loan_term: int = typer.Option(30, help="Loan term in years."),
    monthly: bool = typer.Option(False, help="Show every month instead of year ends."),
    as_json: bool = typer.Option(False, "--json", help="Dump the rows as JSON."),
) -> None:
    """Amortization schedule for a fixed-rate loan."""
    rows = amortize(principal, interest_rate, loan_term)
    if not monthly:
        rows = [row for row in rows if row.month % 12 == 0]
    if as_json:
        payload = [
            {
                "month": row.month,
                "payment": row.payment,
                "principal": row.principal,
                "interest": row.interest,
                "balance": row.balance,
            }
            for row in rows
        ]
        typer.echo(json.dumps(payload, indent=2))
        return
    for row in rows:
        typer.echo(
            f"{row.month:>4}  payment {_money(row.payment, 2):>12}  "
            f"principal {_money(row.principal, 2):>12}  "
            f"interest {_money(row.interest, 2):>12}  "
            f"balance {_money(row.balance, 2):>14}"
        )


@app.command()
def equity(
    purchase_price: float = typer.Argument(..., help="Purchase price of the home."),
    loan_amount: float = typer.Argument(..., help="Initial loan amount."),
    interest_rate: float = typer.Argument(..., help="Annual rate in percent."),
    years: int = typer.Option(30, help="Years to project."),
    loan_term: int = typer.Option(30, help="Loan term in years."),
    appreciation_rate: float = typer.Option(
        default_factory=_default_appreciation,
        help="Annual home appreciation in percent.",
    ),
) -> None:
    """Yearly home value, loan balance and equity."""
    for snap in project_equity(
        purchase_price,
        loan_amount,
        interest_rate,
        years,
        appreciation_rate,
        loan_term_years=loan_term,
    ):
        typer.echo(
            f"Year {snap.year:>3}: value {_money(snap.home_value)}, "
            f"balance {_money(snap.loan_balance)}, equity {_money(snap.equity)}"
        )


@app.command()
def growth(
    initial: float = typer.Argument(..., help="Starting balance."),
    monthly_contribution: float = typer.Option(0.0, help="Contribution each month."),
    annual_return: float = typer.Option(
        default_factory=_default_investment_return,
        help="Annual return in percent.",
    ),
    years: int = typer.Option(10, help="Years to project."),
) -> None:
    """Investment balance with monthly contributions."""
    for snap in project_investment_growth(initial, monthly_contribution, annual_return, years):
        typer.echo(
            f"Year {snap.year:>3}: invested {_money(snap.invested)}, "
            f"value {_money(snap.value)}, gains {_money(snap.gains)}"
        )


@app.command()
def goal(
    goal_amount: float = typer.Argument(..., help="Target balance."),
    starting_amount: float = typer.Option(0.0, help="Current balance."),
    monthly_contribution: float = typer.Option(0.0, help="Contribution each month."),
    annual_return: float = typer.Option(
        default_factory=_default_investment_return,
        help="Annual return in percent.",
    ),
) -> None:
    """Years until a contributing balance reaches a goal."""
    years = years_to_goal(starting_amount, monthly_contribution, annual_return, goal_amount)
    typer.echo(f"Years to {_money(goal_amount)}: {_years(years)}")


@app.command()
def recommend(
    annual_income: float = typer.Argument(..., help="Gross annual household income."),
    interest_rate: float = typer.Argument(..., help="Annual rate in percent."),
    down_payment_percent: float = typer.Option(
        default_factory=_default_down_payment, help="Down payment in percent."
    ),
    loan_term: int = typer.Option(default_factory=_default_loan_term, help="Loan term in years."),
) -> None:
    """Highest purchase price that fits the 28% housing guideline."""
    price = recommended_price(
        annual_income, down_payment_percent, interest_rate, loan_term
    )
    typer.echo(f"Recommended maximum price: {_money(price)}")


@app.command()
def compare(
    scenario_a: str = typer.Argument(..., help="Id of scenario A."),
    scenario_b: str = typer.Argument(..., help="Id of scenario B."),
    timeframe: int = typer.Option(30, help="Years to project."),
    other_expenses: float = typer.Option(0.0, help="Other monthly living expenses."),
    savings_rate: float = typer.Option(
        50.0, help="Percent of discretionary income invested."
    ),
    annual_raise: float = typer.Option(0.0, help="Annual raise in percent."),
    current_age: int = typer.Option(30),
    retirement_age: int = typer.Option(65),
    savings_milestone: float = typer.Option(500_000.0),
    investment_return: float = typer.Option(default_factory=_default_investment_return),
    appreciation_rate: float = typer.Option(default_factory=_default_appreciation),
    event: List[str] = typer.Option(
        [], help="Life event as YEAR:TYPE:AMOUNT[:DESCRIPTION], TYPE one-time|ongoing|income."
    ),
    income: List[str] = typer.Option([], help="Income override as YEAR:INCOME."),
    store_path: str = StoreOption,
) -> None:
    """Compare two saved purchase scenarios year by year."""
    store = ScenarioStore(store_path)
    record_a = _load(store, scenario_a)
    record_b = _load(store, scenario_b)
    settings = _settings(
        timeframe,
        other_expenses,
        savings_rate,
        annual_raise,
        current_age,
        retirement_age,
        savings_milestone,
        investment_return,
        appreciation_rate,
        event,
        income,
    )
    result = run_comprehensive_comparison(record_a, record_b, settings)
    _show_comparison(result, record_a.name, record_b.name)


@app.command("rent-vs-buy")
def rent_vs_buy(
    scenario_id: str = typer.Argument(..., help="Id of the purchase scenario."),
    monthly_rent: float = typer.Option(..., help="Current monthly rent."),
    rent_increase: float = typer.Option(3.0, help="Annual rent increase in percent."),
    timeframe: int = typer.Option(30, help="Years to project."),
    other_expenses: float = typer.Option(0.0, help="Other monthly living expenses."),
    savings_rate: float = typer.Option(
        50.0, help="Percent of discretionary income invested."
    ),
    annual_raise: float = typer.Option(0.0, help="Annual raise in percent."),
    current_age: int = typer.Option(30),
    retirement_age: int = typer.Option(65),
    savings_milestone: float = typer.Option(500_000.0),
    investment_return: float = typer.Option(default_factory=_default_investment_return),
    appreciation_rate: float = typer.Option(default_factory=_default_appreciation),
    event: List[str] = typer.Option(
        [], help="Life event as YEAR:TYPE:AMOUNT[:DESCRIPTION], TYPE one-time|ongoing|income."
    ),
    income: List[str] = typer.Option([], help="Income override as YEAR:INCOME."),
    store_path: str = StoreOption,
) -> None:
    """Compare buying a saved scenario against renting."""
    record = _load(ScenarioStore(store_path), scenario_id)
    settings = _settings(
        timeframe,
        other_expenses,
        savings_rate,
        annual_raise,
        current_age,
        retirement_age,
        savings_milestone,
        investment_return,
        appreciation_rate,
        event,
        income,
    )
    result = compare_buy_vs_rent(record, settings, monthly_rent, rent_increase)
    _show_comparison(result, "Buy", "Rent")


@app.command("house-prices")
def house_prices(
    expensive_id: str = typer.Argument(..., help="Id of the more expensive scenario."),
    cheaper_id: str = typer.Argument(..., help="Id of the cheaper scenario."),
    years: int = typer.Option(30, min=1, help="Years to project."),
    investment_return: float = typer.Option(default_factory=_default_investment_return),
    appreciation_rate: float = typer.Option(default_factory=_default_appreciation),
    store_path: str = StoreOption,
) -> None:
    """Expensive house against a cheaper one with the difference invested."""
    store = ScenarioStore(store_path)
    expensive = _load(store, expensive_id)
    cheaper = _load(store, cheaper_id)
    result = compare_house_prices(
        HouseOption.from_scenario(expensive),
        HouseOption.from_scenario(cheaper),
        investment_return,
        appreciation_rate,
        years,
    )

    typer.echo(f"{'Year':>4}  {expensive.name:>16}  {cheaper.name:>16}")
    for i, combined in enumerate(result.cheaper_house_wealth):
        snapshots = result.expensive_house_wealth
        equity_value = snapshots[i].equity if i < len(snapshots) else 0.0
        typer.echo(
            f"{combined.year:>4}  {_money(equity_value):>16}  "
            f"{_money(combined.total_wealth):>16}"
        )
    typer.echo("")
    typer.echo(f"Monthly savings with the cheaper house: {_money(result.monthly_savings, 2)}")
    if result.break_even_year is None:
        typer.echo("Break-even year: never")
    else:
        typer.echo(f"Break-even year: {result.break_even_year}")
    name = cheaper.name if result.winner == "cheaper" else expensive.name
    typer.echo(f"Better outcome: {name} by {_money(result.wealth_difference)}")


@app.command()
def analysis(
    scenario_id: str = typer.Argument(..., help="Id of the purchase scenario."),
    timeframe: int = typer.Option(30, min=1, help="Years to project."),
    appreciation_rate: float = typer.Option(default_factory=_default_appreciation),
    store_path: str = StoreOption,
) -> None:
    """Home equity against the portfolio left after the down payment."""
    record = _load(ScenarioStore(store_path), scenario_id)
    prop = record.property
    equity_schedule = project_equity(
        prop.purchase_price,
        prop.loan_amount,
        prop.interest_rate,
        min(timeframe, prop.loan_term_years),
        appreciation_rate,
        loan_term_years=prop.loan_term_years,
    )
    portfolio = max(0.0, record.income.current_portfolio - prop.down_payment_amount)
    result = compare_investment_vs_equity(
        portfolio, equity_schedule, record.income.investment_return
    )

    typer.echo(f"{'Year':>4}  {'Equity':>16}  {'Investments':>16}")
    for snap, invested in zip(result.equity, result.investment):
        typer.echo(f"{snap.year:>4}  {_money(snap.equity):>16}  {_money(invested.value):>16}")
    typer.echo("")
    typer.echo(f"Final equity: {_money(result.final_equity)}")
    typer.echo(f"Final investments: {_money(result.final_investment)}")
    if result.crossover_year is None:
        typer.echo("Equity does not overtake the portfolio.")
    else:
        typer.echo(f"Equity overtakes the portfolio in year {result.crossover_year}")


@scenarios_app.command("list")
def list_scenarios(store_path: str = StoreOption) -> None:
    records = ScenarioStore(store_path).list_scenarios()
    if not records:
        typer.echo("No saved scenarios.")
        return
    for record in records:
        typer.echo(
            f"{record.id}  {record.name}  {_money(record.property.purchase_price)}  "
            f"{record.property.interest_rate:.2f}%  {record.timestamp or ''}"
        )


@scenarios_app.command("add")
def add_scenario(
    name: str = typer.Argument(..., help="Name for the scenario."),
    purchase_price: float = typer.Option(..., help="Purchase price of the home."),
    down_payment_percent: float = typer.Option(
        default_factory=_default_down_payment, help="Down payment in percent."
    ),
    interest_rate: float = typer.Option(..., help="Annual mortgage rate in percent."),
    loan_term: int = typer.Option(default_factory=_default_loan_term, help="Loan term in years."),
    property_tax: float = typer.Option(0.0, help="Monthly property tax."),
    insurance: float = typer.Option(0.0, help="Monthly homeowners insurance."),
    hoa: float = typer.Option(0.0, help="Monthly HOA/condo fees."),
    utilities: float = typer.Option(0.0, help="Monthly utilities."),
    maintenance: float = typer.Option(0.0, help="Monthly maintenance allowance."),
    annual_income: float = typer.Option(..., help="Gross annual household income."),
    monthly_debts: float = typer.Option(0.0, help="Other monthly debt payments."),
    investment_return: float = typer.Option(
        default_factory=_default_investment_return,
        help="Expected annual investment return in percent.",
    ),
    current_portfolio: float = typer.Option(0.0, help="Current investment portfolio."),
    store_path: str = StoreOption,
) -> None:
    """Analyze a purchase and save it as a scenario."""
    record = _build_record(
        name,
        purchase_price,
        down_payment_percent,
        interest_rate,
        loan_term,
        property_tax,
        insurance,
        hoa,
        utilities,
        maintenance,
        annual_income,
        monthly_debts,
        investment_return,
        current_portfolio,
    )
    scenario_id = ScenarioStore(store_path).save_scenario(record)
    typer.echo(f"Saved scenario {name!r} as {scenario_id}")


@scenarios_app.command("table")
def scenarios_table(
    scenario_ids: List[str] = typer.Argument(..., help="Ids of the scenarios to line up."),
    store_path: str = StoreOption,
) -> None:
    """Side-by-side costs of saved scenarios; * marks the lowest monthly cost."""
    store = ScenarioStore(store_path)
    records = [_load(store, scenario_id) for scenario_id in scenario_ids]
    analyses = [analyze_scenario(record.property, record.income) for record in records]
    cheapest = min(range(len(analyses)), key=lambda i: analyses[i].total_monthly_cost)

    rows = [
        ("Scenario", [record.name for record in records]),
        ("Price", [_money(record.property.purchase_price) for record in records]),
        (
            "Down payment",
            [f"{record.property.down_payment_percent:.1f}%" for record in records],
        ),
        ("Rate", [f"{record.property.interest_rate:.2f}%" for record in records]),
        ("Total payment", [_money(calc.payment.total_payment, 2) for calc in analyses]),
        (
            "Total monthly cost",
            [
                _money(calc.total_monthly_cost, 2) + ("*" if i == cheapest else " ")
                for i, calc in enumerate(analyses)
            ],
        ),
        (
            "Housing ratio",
            [_percent(calc.affordability.housing_ratio) for calc in analyses],
        ),
    ]
    for label, cells in rows:
        typer.echo(f"{label:<20}" + "".join(f"{cell:>18}" for cell in cells))
    typer.echo("")
    typer.echo(f"* lowest total monthly cost: {records[cheapest].name}")


@scenarios_app.command("show")
def show_scenario(
    scenario_id: str = typer.Argument(...),
    as_csv: bool = typer.Option(False, "--csv", help="Print as CSV."),
    store_path: str = StoreOption,
) -> None:
    record = _load(ScenarioStore(store_path), scenario_id)
    if as_csv:
        typer.echo(export_csv(record))
    else:
        typer.echo(json.dumps(record.to_dict(), indent=2))


@scenarios_app.command("delete")
def delete_scenario(
    scenario_id: str = typer.Argument(...),
    store_path: str = StoreOption,
) -> None:
    if not ScenarioStore(store_path).delete_scenario(scenario_id):
        typer.echo(f"Scenario {scenario_id} not found", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Deleted scenario {scenario_id}")


@scenarios_app.command("import")
def import_scenarios(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON export."),
    store_path: str = StoreOption,
) -> None:
    result = ScenarioStore(store_path).import_json(path.read_text(encoding="utf-8"))
    typer.echo(result.message, err=not result.success)
    if not result.success:
        raise typer.Exit(code=1)


@scenarios_app.command("export")
def export_scenarios(
    scenario_id: List[str] = typer.Option([], "--id", help="Limit to these ids."),
    store_path: str = StoreOption,
) -> None:
    store = ScenarioStore(store_path)
    typer.echo(store.export_json(scenario_id or None))


@settings_app.command("show")
def show_settings(settings_path: str = SettingsOption) -> None:
    settings = SettingsStore(settings_path).load()
    typer.echo(f"Investment return: {settings.investment_return:.2f}%")
    typer.echo(f"Appreciation rate: {settings.appreciation_rate:.2f}%")
    typer.echo(f"Loan term: {settings.loan_term} years")
    typer.echo(f"Down payment: {settings.down_payment_percent:.1f}%")


@settings_app.command("set")
def set_settings(
    investment_return: Optional[float] = typer.Option(None),
    appreciation_rate: Optional[float] = typer.Option(None),
    loan_term: Optional[int] = typer.Option(None),
    down_payment_percent: Optional[float] = typer.Option(None),
    settings_path: str = SettingsOption,
) -> None:
    """Change the defaults used when an option is omitted."""
    changes = {
        "investment_return": investment_return,
        "appreciation_rate": appreciation_rate,
        "loan_term": loan_term,
        "down_payment_percent": down_payment_percent,
    }
    changes = {key: value for key, value in changes.items() if value is not None}
    try:
        SettingsStore(settings_path).save(**changes)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Saved settings to {settings_path}")


@settings_app.command("reset")
def reset_settings(settings_path: str = SettingsOption) -> None:
    SettingsStore(settings_path).reset()
    typer.echo("Settings reset to defaults.")


def _build_record(
    name: str,
    purchase_price: float,
    down_payment_percent: float,
    interest_rate: float,
    loan_term: int,
    property_tax: float,
    insurance: float,
    hoa: float,
    utilities: float,
    maintenance: float,
    annual_income: float,
    monthly_debts: float,
    investment_return: float,
    current_portfolio: float,
) -> ScenarioRecord:
    record = ScenarioRecord(
        name=name,
        property=PropertyTerms(
            purchase_price=purchase_price,
            down_payment_percent=down_payment_percent,
            interest_rate=interest_rate,
            loan_term_years=loan_term,
            property_tax=property_tax,
            insurance=insurance,
            hoa=hoa,
            utilities=utilities,
            maintenance=maintenance,
        ),
        income=HouseholdFinancials(
            annual_income=annual_income,
            monthly_debts=monthly_debts,
            investment_return=investment_return,
            current_portfolio=current_portfolio,
        ),
    )
    _require_valid(record)
    record.calculations = analyze_scenario(record.property, record.income)
    return record


def _load(store: ScenarioStore, scenario_id: str) -> ScenarioRecord:
    record = store.load_scenario(scenario_id)
    if record is None:
        raise typer.BadParameter(f"no scenario with id {scenario_id}")
    _require_valid(record)
    return record


def _require_valid(record: ScenarioRecord) -> None:
    try:
        validate_scenario(record).raise_for_errors()
    except ScenarioValidationError as exc:
        for error in exc.errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=1) from exc


def _settings(
    timeframe: int,
    other_expenses: float,
    savings_rate: float,
    annual_raise: float,
    current_age: int,
    retirement_age: int,
    savings_milestone: float,
    investment_return: float,
    appreciation_rate: float,
    events: List[str],
    incomes: List[str],
) -> ProjectionSettings:
    try:
        return ProjectionSettings(
            timeframe=timeframe,
            other_monthly_expenses=other_expenses,
            savings_rate=savings_rate,
            current_age=current_age,
            retirement_age=retirement_age,
            savings_milestone=savings_milestone,
            investment_return=investment_return,
            appreciation_rate=appreciation_rate,
            annual_raise=annual_raise,
            income_adjustments=[_parse_income(value) for value in incomes],
            life_events=[_parse_event(value) for value in events],
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_event(value: str) -> LifeEvent:
    parts = value.split(":", 3)
    if len(parts) < 3:
        raise ValueError(f"life event {value!r} must be YEAR:TYPE:AMOUNT[:DESCRIPTION]")
    year, kind, amount = parts[:3]
    description = parts[3] if len(parts) > 3 else kind
    return LifeEvent(
        year=int(year),
        description=description,
        type=LifeEventType(kind),
        amount=float(amount),
    )


def _parse_income(value: str) -> IncomeAdjustment:
    year, sep, amount = value.partition(":")
    if not sep:
        raise ValueError(f"income override {value!r} must be YEAR:INCOME")
    return IncomeAdjustment(year=int(year), income=float(amount))


def _show_comparison(result: ComparisonResult, label_a: str, label_b: str) -> None:
    a, b = result.scenario_a, result.scenario_b
    typer.echo(f"{'Year':>4}  {label_a:>16}  {label_b:>16}")
    for rec_a, rec_b in zip(a.yearly_data, b.yearly_data):
        typer.echo(
            f"{rec_a.year:>4}  {_money(rec_a.net_worth):>16}  {_money(rec_b.net_worth):>16}"
        )
    typer.echo("")
    diff = result.differences
    typer.echo(f"Annual housing cost difference: {_money(diff.annual_cost)}")
    typer.echo(f"Monthly discretionary difference: {_money(diff.discretionary)}")
    typer.echo(f"Monthly investment difference: {_money(diff.investments)}")
    typer.echo(f"Retirement portfolio difference: {_money(diff.retirement_portfolio)}")
    typer.echo(f"Years to FI: {_years(a.years_to_fi)} vs {_years(b.years_to_fi)}")
    typer.echo(
        f"Years to {_money(a.milestone_amount)}: "
        f"{_years(a.years_to_milestone)} vs {_years(b.years_to_milestone)}"
    )
    typer.echo("")
    winner = result.winner
    name = label_a if winner.label == "A" else label_b
    typer.echo(f"Better outcome: {name} by {_money(winner.difference_amount)}")
    if winner.break_even_year is not None:
        typer.echo(f"Break-even year: {winner.break_even_year}")


def _money(amount: float, decimals: int = 0) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.{decimals}f}"


def _percent(value: float) -> str:
    if not math.isfinite(value):
        return "n/a"
    return f"{value:.2f}%"


def _years(value: float) -> str:
    if is_never(value):
        return "never"
    return f"{value} years"


if __name__ == "__main__":
    app()
