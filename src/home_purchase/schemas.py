from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class PropertyTerms:
    """Purchase and carrying costs for a single property."""

    purchase_price: float
    down_payment_percent: float
    interest_rate: float  # annual percentage, e.g., 6.5
    loan_term_years: int = 30
    down_payment_amount: Optional[float] = None
    # monthly amounts
    property_tax: float = 0.0
    insurance: float = 0.0
    hoa: float = 0.0
    utilities: float = 0.0
    maintenance: float = 0.0

    def __post_init__(self) -> None:
        if self.down_payment_amount is None:
            self.down_payment_amount = (
                self.purchase_price * self.down_payment_percent / 100.0
            )

    @property
    def loan_amount(self) -> float:
        return max(self.purchase_price - self.down_payment_amount, 0.0)

    @property
    def monthly_operating_costs(self) -> float:
        return self.utilities + self.maintenance


@dataclass
class HouseholdFinancials:
    annual_income: float
    monthly_debts: float = 0.0
    investment_return: float = 8.0  # annual percentage
    current_portfolio: float = 0.0

    @property
    def monthly_income(self) -> float:
        return self.annual_income / 12.0


@dataclass(frozen=True)
class PaymentBreakdown:
    principal_and_interest: float
    pmi: float
    property_tax: float
    insurance: float
    hoa: float

    @property
    def total_payment(self) -> float:
        return (
            self.principal_and_interest
            + self.pmi
            + self.property_tax
            + self.insurance
            + self.hoa
        )


@dataclass(frozen=True)
class AffordabilityRatios:
    housing_ratio: float
    dti_ratio: float
    status: str

    @property
    def within_guidelines(self) -> bool:
        return self.housing_ratio <= 28 and self.dti_ratio <= 36


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    payment: float
    principal: float
    interest: float
    balance: float


@dataclass(frozen=True)
class EquitySnapshot:
    year: int
    home_value: float
    loan_balance: float
    principal_paid: float
    equity: float


@dataclass(frozen=True)
class InvestmentSnapshot:
    year: int
    invested: float
    value: float

    @property
    def gains(self) -> float:
        return self.value - self.invested


@dataclass
class ScenarioCalculations:
    """Last computed analysis of a scenario, stored alongside its inputs."""

    payment: PaymentBreakdown
    loan_amount: float
    total_monthly_cost: float  # total payment plus utilities and maintenance
    affordability: AffordabilityRatios
    opportunity_cost: Optional[InvestmentSnapshot] = None


class LifeEventType(str, Enum):
    ONE_TIME = "one-time"
    ONGOING = "ongoing"
    INCOME = "income"


@dataclass(frozen=True)
class IncomeAdjustment:
    """Replaces the projected annual income for one year."""

    year: int
    income: float


@dataclass(frozen=True)
class LifeEvent:
    year: int
    description: str
    type: LifeEventType
    amount: float

    def __post_init__(self) -> None:
        if not isinstance(self.type, LifeEventType):
            object.__setattr__(self, "type", LifeEventType(self.type))


@dataclass(frozen=True)
class YearlyRecord:
    year: int
    annual_income: float
    monthly_income: float
    monthly_expenses: float
    monthly_discretionary: float
    monthly_savings: float
    one_time_expense: float
    portfolio: float
    equity: float
    net_worth: float


@dataclass
class YearlyProjection:
    yearly_data: List[YearlyRecord] = field(default_factory=list)
    equity_data: List[EquitySnapshot] = field(default_factory=list)

    @property
    def net_worth_series(self) -> List[float]:
        return [record.net_worth for record in self.yearly_data]


@dataclass
class ProjectionSettings:
    """Knobs shared by every scenario in a comparison run."""

    timeframe: int = 30
    other_monthly_expenses: float = 0.0
    savings_rate: float = 50.0  # percent of discretionary income invested
    current_age: int = 30
    retirement_age: int = 65
    savings_milestone: float = 500_000.0
    investment_return: float = 8.0
    appreciation_rate: float = 3.0
    annual_raise: float = 0.0
    income_adjustments: List[IncomeAdjustment] = field(default_factory=list)
    life_events: List[LifeEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.timeframe <= 0:
            raise ValueError("timeframe must be positive")
        if not 0 <= self.savings_rate <= 100:
            raise ValueError("savings_rate must be between 0 and 100")


@dataclass
class PlannerSettings:
    """Defaults offered for new scenarios and projections."""

    investment_return: float = 8.0
    appreciation_rate: float = 3.0
    loan_term: int = 30
    down_payment_percent: float = 20.0

    def __post_init__(self) -> None:
        self.investment_return = float(self.investment_return)
        self.appreciation_rate = float(self.appreciation_rate)
        self.loan_term = int(self.loan_term)
        self.down_payment_percent = float(self.down_payment_percent)
        if self.loan_term <= 0:
            raise ValueError("loan_term must be positive")
        if not 0 <= self.down_payment_percent < 100:
            raise ValueError("down_payment_percent must be between 0 and 100")


@dataclass
class ScenarioRecord:
    """A named snapshot of property terms and household financials."""

    name: str
    property: PropertyTerms
    income: HouseholdFinancials
    id: Optional[str] = None
    timestamp: Optional[str] = None
    calculations: Optional[ScenarioCalculations] = None

    def to_dict(self) -> Dict[str, Any]:
        prop = self.property
        income = self.income
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "timestamp": self.timestamp,
            "propertyInfo": {
                "purchasePrice": prop.purchase_price,
                "downPaymentPercent": prop.down_payment_percent,
                "downPaymentAmount": prop.down_payment_amount,
                "interestRate": prop.interest_rate,
                "loanTerm": prop.loan_term_years,
                "propertyTax": prop.property_tax,
                "insurance": prop.insurance,
                "hoa": prop.hoa,
                "utilities": prop.utilities,
                "maintenance": prop.maintenance,
            },
            "incomeInfo": {
                "annualIncome": income.annual_income,
                "monthlyDebts": income.monthly_debts,
                "investmentReturn": income.investment_return,
                "currentPortfolio": income.current_portfolio,
            },
            "calculations": None,
        }
        calc = self.calculations
        if calc is not None:
            payload["calculations"] = {
                "principalAndInterest": calc.payment.principal_and_interest,
                "pmi": calc.payment.pmi,
                "propertyTax": calc.payment.property_tax,
                "insurance": calc.payment.insurance,
                "hoa": calc.payment.hoa,
                "totalPayment": calc.payment.total_payment,
                "loanAmount": calc.loan_amount,
                "totalMonthlyCost": calc.total_monthly_cost,
                "affordability": {
                    "housingRatio": calc.affordability.housing_ratio,
                    "dtiRatio": calc.affordability.dti_ratio,
                    "withinGuidelines": calc.affordability.within_guidelines,
                    "status": calc.affordability.status,
                },
                "opportunityCost": None,
            }
            if calc.opportunity_cost is not None:
                snap = calc.opportunity_cost
                payload["calculations"]["opportunityCost"] = {
                    "year": snap.year,
                    "invested": snap.invested,
                    "value": snap.value,
                    "gains": snap.gains,
                }
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioRecord":
        prop = data.get("propertyInfo") or {}
        income = data.get("incomeInfo") or {}
        record = cls(
            id=data.get("id"),
            name=data.get("name") or "",
            timestamp=data.get("timestamp"),
            property=PropertyTerms(
                purchase_price=float(prop.get("purchasePrice", 0.0)),
                down_payment_percent=float(prop.get("downPaymentPercent", 0.0)),
                down_payment_amount=_optional_float(prop.get("downPaymentAmount")),
                interest_rate=float(prop.get("interestRate", 0.0)),
                loan_term_years=int(prop.get("loanTerm", 30)),
                property_tax=float(prop.get("propertyTax", 0.0)),
                insurance=float(prop.get("insurance", 0.0)),
                hoa=float(prop.get("hoa", 0.0)),
                utilities=float(prop.get("utilities", 0.0)),
                maintenance=float(prop.get("maintenance", 0.0)),
            ),
            income=HouseholdFinancials(
                annual_income=float(income.get("annualIncome", 0.0)),
                monthly_debts=float(income.get("monthlyDebts", 0.0)),
                investment_return=float(income.get("investmentReturn", 8.0)),
                current_portfolio=float(income.get("currentPortfolio", 0.0)),
            ),
        )
        calc = data.get("calculations")
        if calc:
            opportunity = calc.get("opportunityCost")
            ratios = calc.get("affordability") or {}
            record.calculations = ScenarioCalculations(
                payment=PaymentBreakdown(
                    principal_and_interest=calc.get("principalAndInterest", 0.0),
                    pmi=calc.get("pmi", 0.0),
                    property_tax=calc.get("propertyTax", 0.0),
                    insurance=calc.get("insurance", 0.0),
                    hoa=calc.get("hoa", 0.0),
                ),
                loan_amount=calc.get("loanAmount", record.property.loan_amount),
                total_monthly_cost=calc.get("totalMonthlyCost", 0.0),
                affordability=AffordabilityRatios(
                    housing_ratio=ratios.get("housingRatio", 0.0),
                    dti_ratio=ratios.get("dtiRatio", 0.0),
                    status=ratios.get("status", "excellent"),
                ),
                opportunity_cost=(
                    InvestmentSnapshot(
                        year=opportunity["year"],
                        invested=opportunity["invested"],
                        value=opportunity["value"],
                    )
                    if opportunity
                    else None
                ),
            )
        return record


@dataclass
class ScenarioFinancials:
    label: str
    projection: YearlyProjection
    annual_housing_cost: float
    monthly_discretionary: float
    monthly_to_investments: float
    starting_portfolio: float
    final_net_worth: float
    retirement_portfolio: float
    years_to_fi: float  # whole years, or NEVER
    years_to_milestone: float
    milestone_amount: float

    @property
    def yearly_data(self) -> List[YearlyRecord]:
        return self.projection.yearly_data

    @property
    def net_worth_series(self) -> List[float]:
        return self.projection.net_worth_series


@dataclass(frozen=True)
class ComparisonDifferences:
    """Scenario A minus scenario B for each headline metric."""

    annual_cost: float
    discretionary: float
    investments: float
    net_worth: float
    retirement_portfolio: float
    years_to_fi: float
    years_to_milestone: float


@dataclass(frozen=True)
class Winner:
    label: str
    difference_amount: float
    break_even_year: Optional[int]


@dataclass
class ComparisonResult:
    scenario_a: ScenarioFinancials
    scenario_b: ScenarioFinancials
    differences: ComparisonDifferences
    winner: Winner


@dataclass
class CombinedWealth:
    year: int
    equity: float
    investment_value: float

    @property
    def total_wealth(self) -> float:
        return self.equity + self.investment_value


@dataclass
class HousePriceComparison:
    expensive_house_wealth: List[EquitySnapshot]
    cheaper_house_wealth: List[CombinedWealth]
    monthly_savings: float
    break_even_year: Optional[int]
    winner: str  # "cheaper" or "expensive"
    final_expensive_wealth: float
    final_cheaper_wealth: float

    @property
    def wealth_difference(self) -> float:
        return abs(self.final_expensive_wealth - self.final_cheaper_wealth)


@dataclass
class InvestmentVsEquity:
    equity: List[EquitySnapshot]
    investment: List[InvestmentSnapshot]
    final_equity: float
    final_investment: float
    crossover_year: Optional[int] = None


def _optional_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    return float(value)
