"""
Tests for the year-by-year household simulation.
"""

import pytest

from home_purchase.model import analyze_scenario, is_never, project_equity
from home_purchase.schemas import (
    IncomeAdjustment,
    LifeEvent,
    LifeEventType,
    ProjectionSettings,
)
from home_purchase.simulation import (
    rent_financials,
    rent_for_year,
    scenario_financials,
    simulate_rent,
    simulate_years,
)


def _run(scenario, years=10, raise_pct=0.0, expenses=3_000, savings=50, adjustments=(), events=()):
    return simulate_years(scenario, years, raise_pct, expenses, savings, adjustments, events, 8.0, 3.0)


class TestSimulateYears:
    def test_baseline_year(self, scenario):
        projection = _run(scenario, years=3)
        housing = analyze_scenario(scenario.property, scenario.income).total_monthly_cost

        first = projection.yearly_data[0]
        assert len(projection.yearly_data) == 3
        assert first.annual_income == pytest.approx(120_000)
        assert first.monthly_income == pytest.approx(10_000)
        assert first.monthly_expenses == pytest.approx(housing + 3_000)
        assert first.monthly_discretionary == pytest.approx(10_000 - housing - 3_000)
        assert first.monthly_savings == pytest.approx(first.monthly_discretionary / 2)
        assert first.one_time_expense == 0

    def test_portfolio_starts_after_down_payment(self, scenario):
        projection = _run(scenario, years=1, savings=0)

        # 100k portfolio minus the 80k down payment, grown for one year
        assert projection.yearly_data[0].portfolio == pytest.approx(
            20_000 * (1 + 0.08 / 12) ** 12
        )

    def test_down_payment_larger_than_portfolio(self, make_scenario):
        projection = _run(make_scenario(current_portfolio=10_000), years=1, savings=0)

        assert projection.yearly_data[0].portfolio == 0.0

    def test_raise_applies_every_year(self, scenario):
        projection = _run(scenario, years=3, raise_pct=3)

        incomes = [record.annual_income for record in projection.yearly_data]
        assert incomes == pytest.approx([123_600, 127_308, 131_127.24])

    def test_income_adjustment_overrides(self, scenario):
        projection = _run(
            scenario,
            years=4,
            raise_pct=3,
            adjustments=[IncomeAdjustment(year=3, income=150_000)],
        )

        incomes = [record.annual_income for record in projection.yearly_data]
        assert incomes[2] == pytest.approx(150_000)
        assert incomes[3] == pytest.approx(154_500)

    def test_one_time_event_hits_portfolio_once(self, scenario):
        baseline = _run(scenario)
        event = LifeEvent(year=5, description="New roof", type=LifeEventType.ONE_TIME, amount=10_000)
        projection = _run(scenario, events=[event])

        for year in range(4):
            assert projection.yearly_data[year].portfolio == pytest.approx(
                baseline.yearly_data[year].portfolio
            )
        assert projection.yearly_data[4].portfolio == pytest.approx(
            baseline.yearly_data[4].portfolio - 10_000
        )
        assert projection.yearly_data[4].one_time_expense == 10_000
        assert [r.monthly_expenses for r in projection.yearly_data] == pytest.approx(
            [r.monthly_expenses for r in baseline.yearly_data]
        )

    def test_one_time_event_floors_portfolio(self, make_scenario):
        scenario = make_scenario(current_portfolio=80_000)
        event = LifeEvent(year=1, description="Wedding", type="one-time", amount=1_000_000)
        projection = _run(scenario, years=2, events=[event])

        assert projection.yearly_data[0].portfolio == 0.0
        assert projection.yearly_data[1].portfolio > 0.0

    def test_ongoing_event_raises_expenses_permanently(self, scenario):
        baseline = _run(scenario, years=12)
        event = LifeEvent(year=5, description="Childcare", type=LifeEventType.ONGOING, amount=6_000)
        projection = _run(scenario, years=12, events=[event])

        for base, record in zip(baseline.yearly_data, projection.yearly_data):
            extra = record.monthly_expenses - base.monthly_expenses
            if record.year < 5:
                assert extra == pytest.approx(0)
            else:
                assert extra == pytest.approx(500)

    def test_income_event_compounds_with_raises(self, make_scenario):
        scenario = make_scenario(annual_income=100_000)
        event = LifeEvent(year=2, description="Promotion", type=LifeEventType.INCOME, amount=10_000)
        projection = _run(scenario, years=3, raise_pct=10, events=[event])

        incomes = [record.annual_income for record in projection.yearly_data]
        assert incomes == pytest.approx([110_000, 131_000, 144_100])
        assert projection.yearly_data[1].monthly_income == pytest.approx(131_000 / 12)

    def test_no_savings_when_expenses_exceed_income(self, scenario):
        projection = _run(scenario, years=2, expenses=20_000)

        record = projection.yearly_data[0]
        assert record.monthly_discretionary < 0
        assert record.monthly_savings == 0.0

    def test_net_worth_adds_equity(self, scenario):
        projection = _run(scenario, years=5)
        equity = project_equity(400_000, 320_000, 6.5, 5, 3.0, loan_term_years=30)

        for record, snapshot in zip(projection.yearly_data, equity):
            assert record.equity == pytest.approx(snapshot.equity)
            assert record.net_worth == pytest.approx(record.portfolio + snapshot.equity)
        assert len(projection.equity_data) == 5

    def test_paid_off_home_keeps_appreciating(self, make_scenario):
        projection = _run(make_scenario(loan_term_years=15), years=20)

        assert len(projection.equity_data) == 15
        assert projection.yearly_data[17].equity == pytest.approx(400_000 * 1.03**18)

    def test_cash_purchase(self, make_scenario):
        scenario = make_scenario(down_payment_percent=100, current_portfolio=500_000)
        projection = _run(scenario, years=2)

        assert projection.equity_data == []
        assert projection.yearly_data[1].equity == pytest.approx(400_000 * 1.03**2)


class TestSimulateRent:
    def test_rent_keeps_whole_portfolio(self, scenario):
        projection = simulate_rent(scenario, 1, 0, 3_000, 0, investment_return_pct=8.0, monthly_rent=2_000)

        record = projection.yearly_data[0]
        assert record.portfolio == pytest.approx(100_000 * (1 + 0.08 / 12) ** 12)
        assert record.equity == 0.0
        assert record.net_worth == record.portfolio
        assert projection.equity_data == []

    def test_rent_grows_each_year(self, scenario):
        projection = simulate_rent(
            scenario, 3, 0, 1_000, 50, monthly_rent=2_000, rent_increase_pct=5
        )

        expenses = [record.monthly_expenses for record in projection.yearly_data]
        assert expenses == pytest.approx([3_000, 3_100, 3_205])
        assert rent_for_year(2_000, 5, 3) == pytest.approx(2_205)

    def test_same_income_semantics_as_buying(self, scenario):
        adjustments = [IncomeAdjustment(year=2, income=90_000)]
        events = [
            LifeEvent(year=3, description="Raise", type=LifeEventType.INCOME, amount=5_000),
            LifeEvent(year=4, description="Car", type=LifeEventType.ONGOING, amount=2_400),
        ]
        buy = simulate_years(scenario, 6, 2, 1_000, 40, adjustments, events, 7, 3)
        rent = simulate_rent(scenario, 6, 2, 1_000, 40, adjustments, events, 7, 2_500, 0)

        assert [r.annual_income for r in buy.yearly_data] == pytest.approx(
            [r.annual_income for r in rent.yearly_data]
        )
        assert rent.yearly_data[4].monthly_expenses == pytest.approx(2_500 + 1_000 + 200)


class TestScenarioFinancials:
    def test_summary_metrics(self, scenario):
        settings = ProjectionSettings(timeframe=10, other_monthly_expenses=3_000, retirement_age=35)
        results = scenario_financials(scenario, settings)

        first = results.yearly_data[0]
        assert results.label == "Maple Street"
        assert results.starting_portfolio == pytest.approx(20_000)
        assert results.annual_housing_cost == pytest.approx(first.monthly_expenses * 12 - 36_000)
        assert results.monthly_to_investments == pytest.approx(first.monthly_savings)
        assert results.final_net_worth == pytest.approx(results.yearly_data[-1].net_worth)
        assert results.retirement_portfolio == pytest.approx(results.yearly_data[4].portfolio)
        assert results.years_to_fi > 0
        assert not is_never(results.years_to_milestone)

    def test_retirement_beyond_timeframe_is_extrapolated(self, scenario):
        settings = ProjectionSettings(timeframe=10, current_age=30, retirement_age=65)
        results = scenario_financials(scenario, settings)

        assert results.retirement_portfolio > results.yearly_data[-1].portfolio

    def test_already_retired(self, scenario):
        settings = ProjectionSettings(timeframe=5, current_age=70, retirement_age=65)

        assert scenario_financials(scenario, settings).retirement_portfolio == 0.0

    def test_no_savings_never_reaches_fi(self, scenario):
        settings = ProjectionSettings(timeframe=5, savings_rate=0)

        results = scenario_financials(scenario, settings)
        assert is_never(results.years_to_fi)

    def test_rent_financials(self, scenario):
        settings = ProjectionSettings(timeframe=5)
        results = rent_financials(scenario, settings, monthly_rent=2_200)

        assert results.label == "Rent"
        assert results.annual_housing_cost == pytest.approx(26_400)
        assert results.starting_portfolio == pytest.approx(100_000)
        assert all(record.equity == 0 for record in results.yearly_data)


class TestProjectionSettings:
    def test_rejects_empty_timeframe(self):
        with pytest.raises(ValueError, match="timeframe"):
            ProjectionSettings(timeframe=0)

    def test_rejects_savings_rate_out_of_range(self):
        with pytest.raises(ValueError, match="savings_rate"):
            ProjectionSettings(savings_rate=120)
