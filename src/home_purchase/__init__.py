"""
Home purchase planning toolkit.

This package amortizes fixed-rate mortgages, projects home equity and
investment growth, and simulates a household year by year to compare two
purchase scenarios, or buying against renting, on net worth.
"""

from .schemas import (
    ComparisonResult,
    HouseholdFinancials,
    IncomeAdjustment,
    LifeEvent,
    LifeEventType,
    PlannerSettings,
    ProjectionSettings,
    PropertyTerms,
    ScenarioFinancials,
    ScenarioRecord,
)
from .model import (
    NEVER,
    affordability_ratios,
    amortize,
    compose_payment,
    compute_pmi,
    project_equity,
    project_investment_growth,
    years_to_goal,
)
from .simulation import simulate_rent, simulate_years
from .comparison import compare, compare_buy_vs_rent, run_comprehensive_comparison

__all__ = [
    "ComparisonResult",
    "HouseholdFinancials",
    "IncomeAdjustment",
    "LifeEvent",
    "LifeEventType",
    "PlannerSettings",
    "ProjectionSettings",
    "PropertyTerms",
    "ScenarioFinancials",
    "ScenarioRecord",
    "NEVER",
    "affordability_ratios",
    "amortize",
    "compose_payment",
    "compute_pmi",
    "project_equity",
    "project_investment_growth",
    "years_to_goal",
    "simulate_rent",
    "simulate_years",
    "compare",
    "compare_buy_vs_rent",
    "run_comprehensive_comparison",
]
