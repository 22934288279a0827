from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from .schemas import ScenarioRecord


class ScenarioValidationError(ValueError):
    """Raised when an invalid scenario is about to be stored or computed."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        if not self.valid:
            raise ScenarioValidationError(self.errors)


def validate_scenario(scenario: Union[ScenarioRecord, Dict[str, Any]]) -> ValidationResult:
    """
    Check a scenario before it reaches the engine.

    Accepts either a ``ScenarioRecord`` or its JSON dictionary form, so
    imported files can be checked before they are parsed.
    """
    data = scenario.to_dict() if isinstance(scenario, ScenarioRecord) else scenario
    errors: List[str] = []

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Scenario name is required")

    prop = data.get("propertyInfo")
    if not isinstance(prop, dict):
        errors.append("Property information is missing")
    else:
        if not _number(prop, "purchasePrice") > 0:
            errors.append("Purchase price must be greater than 0")
        down = _number(prop, "downPaymentPercent")
        if not 0 <= down <= 100:
            errors.append("Down payment percent must be between 0 and 100")
        if not _number(prop, "interestRate") >= 0:
            errors.append("Interest rate cannot be negative")
        if not _number(prop, "loanTerm", default=30) > 0:
            errors.append("Loan term must be greater than 0")

    income = data.get("incomeInfo")
    if not isinstance(income, dict):
        errors.append("Income information is missing")
    elif not _number(income, "annualIncome") > 0:
        errors.append("Annual income must be greater than 0")

    return ValidationResult(valid=not errors, errors=errors)


def _number(section: Dict[str, Any], key: str, default: float = 0.0) -> float:
    # non-numeric values become NaN, which fails every range check
    value = section.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")
