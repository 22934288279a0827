from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Union

from .schemas import (
    AffordabilityRatios,
    AmortizationRow,
    EquitySnapshot,
    HouseholdFinancials,
    InvestmentSnapshot,
    PaymentBreakdown,
    PropertyTerms,
    ScenarioCalculations,
)

logger = logging.getLogger(__name__)

# Returned by years_to_goal when the goal cannot be reached.
NEVER = math.inf

PMI_ANNUAL_RATE = 0.0075
PMI_DOWN_PAYMENT_THRESHOLD = 20.0
GOAL_SEEK_MAX_MONTHS = 100 * 12
OPPORTUNITY_COST_YEARS = 10

# (status, max housing ratio, max debt-to-income ratio), worst first
AFFORDABILITY_THRESHOLDS = (
    ("warning", 40.0, 43.0),
    ("caution", 33.0, 36.0),
    ("good", 28.0, 30.0),
)


def monthly_mortgage_payment(
    principal: float, annual_rate_pct: float, term_years: int
) -> float:
    """Principal and interest payment for a fixed-rate, fully amortizing loan."""
    if principal <= 0 or term_years <= 0:
        return 0.0
    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    num_payments = term_years * 12
    if monthly_rate == 0:
        return principal / num_payments
    growth = (1 + monthly_rate) ** num_payments
    return principal * (monthly_rate * growth) / (growth - 1)


def amortize(
    principal: float, annual_rate_pct: float, term_years: int
) -> List[AmortizationRow]:
    """
    Month-by-month payment schedule.

    The final row's balance is forced to zero so floating-point drift never
    leaves a residual balance. Non-positive principal or term produces an
    empty schedule.
    """
    if principal <= 0 or term_years <= 0:
        return []

    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    num_payments = term_years * 12
    payment = monthly_mortgage_payment(principal, annual_rate_pct, term_years)

    schedule: List[AmortizationRow] = []
    balance = principal
    for month in range(1, num_payments + 1):
        interest = balance * monthly_rate
        principal_paid = payment - interest
        balance -= principal_paid
        if month == num_payments:
            balance = 0.0
        schedule.append(
            AmortizationRow(
                month=month,
                payment=payment,
                principal=principal_paid,
                interest=interest,
                balance=max(balance, 0.0),
            )
        )
    return schedule


def project_equity(
    purchase_price: float,
    initial_loan: float,
    annual_rate_pct: float,
    years: int,
    appreciation_rate_pct: float,
    loan_term_years: Optional[int] = None,
) -> List[EquitySnapshot]:
    """
    Yearly home value, loan balance and equity.

    The loan is amortized over ``loan_term_years`` (``years`` when omitted)
    and the projection stops when the schedule runs out, so asking for 50
    years of a 30-year loan yields 30 snapshots. Equity is not clamped: a
    steep enough price decline reports negative equity.
    """
    term = years if loan_term_years is None else loan_term_years
    schedule = amortize(initial_loan, annual_rate_pct, term)
    down_payment = purchase_price - initial_loan

    snapshots: List[EquitySnapshot] = []
    for year in range(1, years + 1):
        month_index = year * 12 - 1
        if month_index >= len(schedule):
            break
        loan_balance = schedule[month_index].balance
        home_value = purchase_price * (1 + appreciation_rate_pct / 100.0) ** year
        principal_paid = initial_loan - loan_balance
        snapshots.append(
            EquitySnapshot(
                year=year,
                home_value=home_value,
                loan_balance=loan_balance,
                principal_paid=principal_paid,
                equity=down_payment + principal_paid + (home_value - purchase_price),
            )
        )
    return snapshots


def project_investment_growth(
    initial: float,
    monthly_contribution: float,
    annual_return_pct: float,
    years: int,
) -> List[InvestmentSnapshot]:
    """Yearly balances with contributions arriving at the start of each month."""
    monthly_rate = annual_return_pct / 100.0 / 12.0
    value = initial
    invested = initial
    snapshots: List[InvestmentSnapshot] = []
    for year in range(1, years + 1):
        for _ in range(12):
            value += monthly_contribution
            invested += monthly_contribution
            value *= 1 + monthly_rate
        snapshots.append(InvestmentSnapshot(year=year, invested=invested, value=value))
    return snapshots


def years_to_goal(
    starting_amount: float,
    monthly_contribution: float,
    annual_return_pct: float,
    goal_amount: float,
) -> Union[int, float]:
    """
    Whole years until a contributing balance reaches ``goal_amount``.

    Returns ``NEVER`` when there are no contributions to close the gap or the
    goal is not reached before the 100-year cap.
    """
    if starting_amount >= goal_amount:
        return 0
    if monthly_contribution <= 0:
        return NEVER

    monthly_rate = annual_return_pct / 100.0 / 12.0
    balance = starting_amount
    months = 0
    while balance < goal_amount and months < GOAL_SEEK_MAX_MONTHS:
        balance += monthly_contribution
        balance *= 1 + monthly_rate
        months += 1

    if months >= GOAL_SEEK_MAX_MONTHS:
        logger.debug("goal %.2f unreachable within %d months", goal_amount, months)
        return NEVER
    return math.ceil(months / 12)


def is_never(years: Union[int, float]) -> bool:
    return math.isinf(years)


def compute_pmi(
    loan_amount: float, purchase_price: float, down_payment_percent: float
) -> float:
    """Monthly PMI; zero once the down payment reaches 20%."""
    if down_payment_percent >= PMI_DOWN_PAYMENT_THRESHOLD:
        return 0.0
    return loan_amount * PMI_ANNUAL_RATE / 12.0


def compose_payment(
    loan_amount: float,
    annual_rate_pct: float,
    term_years: int,
    property_tax: float,
    insurance: float,
    hoa: float,
    pmi: float,
) -> PaymentBreakdown:
    return PaymentBreakdown(
        principal_and_interest=monthly_mortgage_payment(
            loan_amount, annual_rate_pct, term_years
        ),
        pmi=pmi,
        property_tax=property_tax,
        insurance=insurance,
        hoa=hoa,
    )


def affordability_ratios(
    total_monthly_payment: float,
    monthly_income: float,
    other_monthly_debt: float,
) -> AffordabilityRatios:
    """
    Front-end (housing) and back-end (debt-to-income) ratios in percent.

    Without positive income the ratios are not computable and come back as
    ``inf`` or ``nan`` with a ``warning`` status.
    """
    housing_ratio = _percent_of(total_monthly_payment, monthly_income)
    dti_ratio = _percent_of(total_monthly_payment + other_monthly_debt, monthly_income)

    if monthly_income <= 0:
        return AffordabilityRatios(housing_ratio, dti_ratio, "warning")

    status = "excellent"
    for label, max_housing, max_dti in AFFORDABILITY_THRESHOLDS:
        if housing_ratio > max_housing or dti_ratio > max_dti:
            status = label
            break
    return AffordabilityRatios(housing_ratio, dti_ratio, status)


def recommended_price(
    annual_income: float,
    down_payment_percent: float,
    annual_rate_pct: float,
    term_years: int,
) -> float:
    """
    Highest purchase price whose P&I fits the 28% housing guideline.

    15% of the allowed payment is held back for taxes and insurance.
    """
    if annual_income <= 0 or term_years <= 0 or down_payment_percent >= 100:
        return 0.0
    max_payment = annual_income / 12.0 * 0.28
    pi_budget = max_payment * 0.85

    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    num_payments = term_years * 12
    if monthly_rate == 0:
        max_loan = pi_budget * num_payments
    else:
        growth = (1 + monthly_rate) ** num_payments
        max_loan = pi_budget * (growth - 1) / (monthly_rate * growth)
    return max_loan / (1 - down_payment_percent / 100.0)


def analyze_scenario(
    terms: PropertyTerms, income: HouseholdFinancials
) -> ScenarioCalculations:
    """Payment breakdown, affordability and down-payment opportunity cost."""
    loan_amount = terms.loan_amount
    pmi = compute_pmi(loan_amount, terms.purchase_price, terms.down_payment_percent)
    payment = compose_payment(
        loan_amount,
        terms.interest_rate,
        terms.loan_term_years,
        terms.property_tax,
        terms.insurance,
        terms.hoa,
        pmi,
    )
    affordability = affordability_ratios(
        payment.total_payment, income.monthly_income, income.monthly_debts
    )
    growth = project_investment_growth(
        terms.down_payment_amount, 0.0, income.investment_return, OPPORTUNITY_COST_YEARS
    )
    return ScenarioCalculations(
        payment=payment,
        loan_amount=loan_amount,
        total_monthly_cost=payment.total_payment + terms.monthly_operating_costs,
        affordability=affordability,
        opportunity_cost=growth[-1] if growth else None,
    )


def annual_to_monthly_rate(annual_rate_pct: float) -> float:
    if annual_rate_pct <= 0:
        return 0.0
    return annual_rate_pct / 100.0 / 12.0


def final_value(snapshots: Sequence[InvestmentSnapshot]) -> float:
    return snapshots[-1].value if snapshots else 0.0


def _percent_of(amount: float, base: float) -> float:
    if base <= 0:
        return math.inf if amount > 0 else math.nan
    return amount / base * 100.0
