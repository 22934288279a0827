from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional

from .model import (
    analyze_scenario,
    final_value,
    project_equity,
    project_investment_growth,
    years_to_goal,
)
from .schemas import (
    EquitySnapshot,
    IncomeAdjustment,
    LifeEvent,
    LifeEventType,
    ProjectionSettings,
    ScenarioFinancials,
    ScenarioRecord,
    YearlyProjection,
    YearlyRecord,
)

logger = logging.getLogger(__name__)

FI_MULTIPLE = 25  # 4% withdrawal rule


def simulate_years(
    scenario: ScenarioRecord,
    years: int,
    annual_raise_pct: float,
    base_monthly_expenses: float,
    savings_rate_pct: float,
    income_adjustments: Iterable[IncomeAdjustment] = (),
    life_events: Iterable[LifeEvent] = (),
    investment_return_pct: float = 8.0,
    appreciation_rate_pct: float = 3.0,
) -> YearlyProjection:
    """
    Project a buyer's household year by year.

    The down payment leaves the portfolio up front; net worth each year is the
    remaining portfolio plus home equity.
    """
    terms = scenario.property
    housing_cost = analyze_scenario(terms, scenario.income).total_monthly_cost
    equity_data = project_equity(
        terms.purchase_price,
        terms.loan_amount,
        terms.interest_rate,
        min(years, terms.loan_term_years),
        appreciation_rate_pct,
        loan_term_years=terms.loan_term_years,
    )
    by_year = {snap.year: snap for snap in equity_data}

    def equity_for_year(year: int) -> float:
        snapshot: Optional[EquitySnapshot] = by_year.get(year)
        if snapshot is not None:
            return snapshot.equity
        # loan paid off: equity is the whole appreciated home value
        return terms.purchase_price * (1 + appreciation_rate_pct / 100.0) ** year

    starting_portfolio = max(
        0.0, scenario.income.current_portfolio - terms.down_payment_amount
    )
    logger.debug(
        "simulating %s for %d years: housing %.2f/month, portfolio %.2f",
        scenario.name,
        years,
        housing_cost,
        starting_portfolio,
    )
    yearly = _run_years(
        starting_income=scenario.income.annual_income,
        starting_portfolio=starting_portfolio,
        years=years,
        annual_raise_pct=annual_raise_pct,
        housing_cost=lambda year: housing_cost,
        base_monthly_expenses=base_monthly_expenses,
        savings_rate_pct=savings_rate_pct,
        income_adjustments=income_adjustments,
        life_events=life_events,
        investment_return_pct=investment_return_pct,
        equity_for_year=equity_for_year,
    )
    return YearlyProjection(yearly_data=yearly, equity_data=equity_data)


def simulate_rent(
    scenario: ScenarioRecord,
    years: int,
    annual_raise_pct: float,
    base_monthly_expenses: float,
    savings_rate_pct: float,
    income_adjustments: Iterable[IncomeAdjustment] = (),
    life_events: Iterable[LifeEvent] = (),
    investment_return_pct: float = 8.0,
    monthly_rent: float = 0.0,
    rent_increase_pct: float = 3.0,
) -> YearlyProjection:
    """
    Project the same household renting instead of buying.

    The whole portfolio stays invested and net worth is the portfolio alone.
    Rent grows by ``rent_increase_pct`` each year after the first.
    """
    logger.debug(
        "simulating rent for %s over %d years at %.2f/month",
        scenario.name,
        years,
        monthly_rent,
    )
    yearly = _run_years(
        starting_income=scenario.income.annual_income,
        starting_portfolio=max(0.0, scenario.income.current_portfolio),
        years=years,
        annual_raise_pct=annual_raise_pct,
        housing_cost=lambda year: rent_for_year(monthly_rent, rent_increase_pct, year),
        base_monthly_expenses=base_monthly_expenses,
        savings_rate_pct=savings_rate_pct,
        income_adjustments=income_adjustments,
        life_events=life_events,
        investment_return_pct=investment_return_pct,
        equity_for_year=lambda year: 0.0,
    )
    return YearlyProjection(yearly_data=yearly)


def rent_for_year(monthly_rent: float, rent_increase_pct: float, year: int) -> float:
    return monthly_rent * (1 + rent_increase_pct / 100.0) ** (year - 1)


def scenario_financials(
    scenario: ScenarioRecord,
    settings: ProjectionSettings,
    label: Optional[str] = None,
) -> ScenarioFinancials:
    """Run the buyer simulation and derive the headline comparison metrics."""
    projection = simulate_years(
        scenario,
        settings.timeframe,
        settings.annual_raise,
        settings.other_monthly_expenses,
        settings.savings_rate,
        settings.income_adjustments,
        settings.life_events,
        settings.investment_return,
        settings.appreciation_rate,
    )
    housing_cost = analyze_scenario(scenario.property, scenario.income).total_monthly_cost
    starting_portfolio = max(
        0.0, scenario.income.current_portfolio - scenario.property.down_payment_amount
    )
    return _summarize(
        label or scenario.name,
        projection,
        housing_cost * 12,
        starting_portfolio,
        settings,
    )


def rent_financials(
    scenario: ScenarioRecord,
    settings: ProjectionSettings,
    monthly_rent: float,
    rent_increase_pct: float = 3.0,
    label: str = "Rent",
) -> ScenarioFinancials:
    projection = simulate_rent(
        scenario,
        settings.timeframe,
        settings.annual_raise,
        settings.other_monthly_expenses,
        settings.savings_rate,
        settings.income_adjustments,
        settings.life_events,
        settings.investment_return,
        monthly_rent,
        rent_increase_pct,
    )
    return _summarize(
        label,
        projection,
        monthly_rent * 12,
        max(0.0, scenario.income.current_portfolio),
        settings,
    )


def final_net_worth(series: List[float], timeframe: int) -> float:
    window = series[:timeframe]
    return window[-1] if window else 0.0


def _run_years(
    *,
    starting_income: float,
    starting_portfolio: float,
    years: int,
    annual_raise_pct: float,
    housing_cost: Callable[[int], float],
    base_monthly_expenses: float,
    savings_rate_pct: float,
    income_adjustments: Iterable[IncomeAdjustment],
    life_events: Iterable[LifeEvent],
    investment_return_pct: float,
    equity_for_year: Callable[[int], float],
) -> List[YearlyRecord]:
    overrides: Dict[int, float] = {adj.year: adj.income for adj in income_adjustments}
    events_by_year: Dict[int, List[LifeEvent]] = defaultdict(list)
    for event in life_events:
        events_by_year[event.year].append(event)

    current_income = starting_income
    portfolio = starting_portfolio
    ongoing_adjustment = 0.0
    records: List[YearlyRecord] = []

    for year in range(1, years + 1):
        current_income *= 1 + annual_raise_pct / 100.0
        if year in overrides:
            current_income = overrides[year]

        monthly_expenses = housing_cost(year) + base_monthly_expenses + ongoing_adjustment

        one_time_expense = 0.0
        for event in events_by_year.get(year, ()):
            if event.type is LifeEventType.ONE_TIME:
                one_time_expense += event.amount
            elif event.type is LifeEventType.ONGOING:
                ongoing_adjustment += event.amount / 12.0
                monthly_expenses += event.amount / 12.0
            elif event.type is LifeEventType.INCOME:
                current_income += event.amount
            logger.debug("year %d: applied %s event %r", year, event.type.value, event.description)

        monthly_income = current_income / 12.0
        monthly_discretionary = monthly_income - monthly_expenses
        if monthly_discretionary > 0:
            monthly_savings = monthly_discretionary * savings_rate_pct / 100.0
        else:
            monthly_savings = 0.0

        portfolio = final_value(
            project_investment_growth(portfolio, monthly_savings, investment_return_pct, 1)
        )
        portfolio = max(0.0, portfolio - one_time_expense)

        equity = equity_for_year(year)
        records.append(
            YearlyRecord(
                year=year,
                annual_income=current_income,
                monthly_income=monthly_income,
                monthly_expenses=monthly_expenses,
                monthly_discretionary=monthly_discretionary,
                monthly_savings=monthly_savings,
                one_time_expense=one_time_expense,
                portfolio=portfolio,
                equity=equity,
                net_worth=portfolio + equity,
            )
        )
    return records


def _summarize(
    label: str,
    projection: YearlyProjection,
    annual_housing_cost: float,
    starting_portfolio: float,
    settings: ProjectionSettings,
) -> ScenarioFinancials:
    yearly = projection.yearly_data
    first = yearly[0]
    monthly_to_investments = first.monthly_savings
    rate = settings.investment_return

    years_to_retirement = settings.retirement_age - settings.current_age
    if 0 < years_to_retirement <= len(yearly):
        retirement_portfolio = yearly[years_to_retirement - 1].portfolio
    elif years_to_retirement > len(yearly):
        last = yearly[-1]
        retirement_portfolio = final_value(
            project_investment_growth(
                last.portfolio,
                last.monthly_savings,
                rate,
                years_to_retirement - len(yearly),
            )
        )
    else:
        retirement_portfolio = 0.0

    fi_target = first.monthly_expenses * 12 * FI_MULTIPLE
    return ScenarioFinancials(
        label=label,
        projection=projection,
        annual_housing_cost=annual_housing_cost,
        monthly_discretionary=first.monthly_discretionary,
        monthly_to_investments=monthly_to_investments,
        starting_portfolio=starting_portfolio,
        final_net_worth=final_net_worth(projection.net_worth_series, settings.timeframe),
        retirement_portfolio=retirement_portfolio,
        years_to_fi=years_to_goal(
            starting_portfolio, monthly_to_investments, rate, fi_target
        ),
        years_to_milestone=years_to_goal(
            starting_portfolio, monthly_to_investments, rate, settings.savings_milestone
        ),
        milestone_amount=settings.savings_milestone,
    )
