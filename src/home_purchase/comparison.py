from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .model import (
    compute_pmi,
    final_value,
    monthly_mortgage_payment,
    project_equity,
    project_investment_growth,
)
from .schemas import (
    CombinedWealth,
    ComparisonDifferences,
    ComparisonResult,
    EquitySnapshot,
    HousePriceComparison,
    InvestmentVsEquity,
    ProjectionSettings,
    ScenarioFinancials,
    ScenarioRecord,
    Winner,
)
from .simulation import final_net_worth, rent_financials, scenario_financials

logger = logging.getLogger(__name__)


def compare(
    results_a: ScenarioFinancials,
    results_b: ScenarioFinancials,
    timeframe: int,
) -> ComparisonResult:
    """Differences, break-even year and winner for two simulated scenarios."""
    return ComparisonResult(
        scenario_a=results_a,
        scenario_b=results_b,
        differences=calculate_differences(results_a, results_b),
        winner=determine_winner(results_a, results_b, timeframe),
    )


def calculate_differences(
    results_a: ScenarioFinancials, results_b: ScenarioFinancials
) -> ComparisonDifferences:
    return ComparisonDifferences(
        annual_cost=results_a.annual_housing_cost - results_b.annual_housing_cost,
        discretionary=results_a.monthly_discretionary - results_b.monthly_discretionary,
        investments=results_a.monthly_to_investments - results_b.monthly_to_investments,
        net_worth=results_a.final_net_worth - results_b.final_net_worth,
        retirement_portfolio=(
            results_a.retirement_portfolio - results_b.retirement_portfolio
        ),
        years_to_fi=_year_gap(results_a.years_to_fi, results_b.years_to_fi),
        years_to_milestone=_year_gap(
            results_a.years_to_milestone, results_b.years_to_milestone
        ),
    )


def determine_winner(
    results_a: ScenarioFinancials,
    results_b: ScenarioFinancials,
    timeframe: int,
) -> Winner:
    series_a = results_a.net_worth_series
    series_b = results_b.net_worth_series
    final_a = final_net_worth(series_a, timeframe)
    final_b = final_net_worth(series_b, timeframe)
    diff = final_a - final_b
    return Winner(
        label="A" if diff >= 0 else "B",
        difference_amount=abs(diff),
        break_even_year=find_crossover(series_a, series_b, timeframe),
    )


def find_crossover(
    series_a: Sequence[float],
    series_b: Sequence[float],
    timeframe: Optional[int] = None,
) -> Optional[int]:
    """
    First year (1-based) where the lead between two series changes hands.

    Reaching a tie from a strict lead counts as a crossover.
    """
    length = min(len(series_a), len(series_b))
    if timeframe is not None:
        length = min(length, timeframe)
    for i in range(1, length):
        prev_a, prev_b = series_a[i - 1], series_b[i - 1]
        cur_a, cur_b = series_a[i], series_b[i]
        if (prev_a < prev_b and cur_a >= cur_b) or (prev_a > prev_b and cur_a <= cur_b):
            return i + 1
    return None


def run_comprehensive_comparison(
    scenario_a: ScenarioRecord,
    scenario_b: ScenarioRecord,
    settings: Optional[ProjectionSettings] = None,
) -> ComparisonResult:
    settings = settings or ProjectionSettings()
    results_a = scenario_financials(scenario_a, settings)
    results_b = scenario_financials(scenario_b, settings)
    result = compare(results_a, results_b, settings.timeframe)
    logger.info(
        "%s vs %s: winner %s by %.2f",
        scenario_a.name,
        scenario_b.name,
        result.winner.label,
        result.winner.difference_amount,
    )
    return result


def compare_buy_vs_rent(
    scenario: ScenarioRecord,
    settings: Optional[ProjectionSettings] = None,
    monthly_rent: float = 0.0,
    rent_increase_pct: float = 3.0,
) -> ComparisonResult:
    """Scenario A buys the property, scenario B rents and keeps the down payment invested."""
    settings = settings or ProjectionSettings()
    buy = scenario_financials(scenario, settings, label="Buy")
    rent = rent_financials(scenario, settings, monthly_rent, rent_increase_pct)
    return compare(buy, rent, settings.timeframe)


@dataclass
class HouseOption:
    """Terms used by the expensive-vs-cheaper comparison."""

    price: float
    down_payment: float  # percent
    rate: float
    term: int = 30
    taxes: float = 0.0
    insurance: float = 0.0
    hoa: float = 0.0

    @classmethod
    def from_scenario(cls, scenario: ScenarioRecord) -> "HouseOption":
        prop = scenario.property
        return cls(
            price=prop.purchase_price,
            down_payment=prop.down_payment_percent,
            rate=prop.interest_rate,
            term=prop.loan_term_years,
            taxes=prop.property_tax,
            insurance=prop.insurance,
            hoa=prop.hoa,
        )

    @property
    def loan_amount(self) -> float:
        return self.price * (1 - self.down_payment / 100.0)

    @property
    def down_payment_amount(self) -> float:
        return self.price * self.down_payment / 100.0

    def monthly_cost(self) -> float:
        loan = self.loan_amount
        return (
            monthly_mortgage_payment(loan, self.rate, self.term)
            + compute_pmi(loan, self.price, self.down_payment)
            + self.taxes
            + self.insurance
            + self.hoa
        )

    def equity(self, years: int, appreciation_rate_pct: float) -> List[EquitySnapshot]:
        return project_equity(
            self.price,
            self.loan_amount,
            self.rate,
            min(years, self.term),
            appreciation_rate_pct,
            loan_term_years=self.term,
        )


def compare_house_prices(
    expensive: HouseOption,
    cheaper: HouseOption,
    investment_return_pct: float,
    appreciation_rate_pct: float,
    years: int,
) -> HousePriceComparison:
    """
    Expensive house versus cheaper house plus investing the difference.

    The cheaper path invests the down-payment difference up front and the
    monthly cost difference every month.
    """
    monthly_savings = expensive.monthly_cost() - cheaper.monthly_cost()
    expensive_equity = expensive.equity(years, appreciation_rate_pct)
    cheaper_equity = cheaper.equity(years, appreciation_rate_pct)
    down_payment_diff = expensive.down_payment_amount - cheaper.down_payment_amount
    investments = project_investment_growth(
        down_payment_diff, monthly_savings, investment_return_pct, years
    )

    combined = [
        CombinedWealth(
            year=i + 1,
            equity=_at(cheaper_equity, i),
            investment_value=investments[i].value if i < len(investments) else 0.0,
        )
        for i in range(years)
    ]

    break_even_year = None
    for i in range(years):
        if combined[i].total_wealth > _at(expensive_equity, i):
            break_even_year = i + 1
            break

    final_expensive = _at(expensive_equity, years - 1)
    final_cheaper = combined[-1].total_wealth if combined else 0.0
    return HousePriceComparison(
        expensive_house_wealth=expensive_equity,
        cheaper_house_wealth=combined,
        monthly_savings=monthly_savings,
        break_even_year=break_even_year,
        winner="cheaper" if final_cheaper > final_expensive else "expensive",
        final_expensive_wealth=final_expensive,
        final_cheaper_wealth=final_cheaper,
    )


def compare_investment_vs_equity(
    portfolio_amount: float,
    equity_schedule: Sequence[EquitySnapshot],
    investment_return_pct: float,
) -> InvestmentVsEquity:
    """Grow the portfolio left after the down payment alongside home equity."""
    years = len(equity_schedule)
    growth = project_investment_growth(portfolio_amount, 0.0, investment_return_pct, years)
    crossover = None
    for i in range(years):
        if equity_schedule[i].equity > growth[i].value:
            crossover = i + 1
            break
    return InvestmentVsEquity(
        equity=list(equity_schedule),
        investment=growth,
        final_equity=equity_schedule[-1].equity if equity_schedule else 0.0,
        final_investment=final_value(growth),
        crossover_year=crossover,
    )


def _at(snapshots: Sequence[EquitySnapshot], index: int) -> float:
    if 0 <= index < len(snapshots):
        return snapshots[index].equity
    return 0.0


def _year_gap(a: Union[int, float], b: Union[int, float]) -> Union[int, float]:
    # two unreachable goals are level rather than nan
    if a == b:
        return 0
    return a - b
