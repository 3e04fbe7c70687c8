"""Computed aggregate fields (sums and net totals).

An AggregateSpec is an ordered list of named expressions evaluated over
the response snapshot. Absent and non-numeric answers count as zero.
Aggregates are written after every other field so they always reflect
the freshest inputs.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union

from ..errors import ConfigurationError, ValidationResult
from ..models.responses import coerce_number
from .transforms import format_currency


def _number(responses: Mapping[str, Any], key: str) -> float:
    value = coerce_number(responses.get(key))
    return 0.0 if value is None else value


@dataclass(frozen=True)
class NetOf:
    """A value less an amount owed against it, floored at zero (equity)."""
    value_key: str
    less_key: str

    def evaluate(self, responses: Mapping[str, Any], computed: Mapping[str, float]) -> float:
        return max(0.0, _number(responses, self.value_key) - _number(responses, self.less_key))


Term = Union[str, NetOf]


@dataclass(frozen=True)
class Sum:
    """Sum of response keys and net terms."""
    terms: Tuple[Term, ...]

    def __init__(self, *terms: Term):
        object.__setattr__(self, "terms", tuple(terms))

    def evaluate(self, responses: Mapping[str, Any], computed: Mapping[str, float]) -> float:
        total = 0.0
        for term in self.terms:
            if isinstance(term, NetOf):
                total += term.evaluate(responses, computed)
            else:
                total += _number(responses, term)
        return total


@dataclass(frozen=True)
class Difference:
    """Difference of two earlier aggregate fields; may be negative."""
    minuend: str
    subtrahend: str

    def evaluate(self, responses: Mapping[str, Any], computed: Mapping[str, float]) -> float:
        return computed.get(self.minuend, 0.0) - computed.get(self.subtrahend, 0.0)


@dataclass(frozen=True)
class Copy:
    """Repeat an earlier aggregate under a second field name."""
    source: str

    def evaluate(self, responses: Mapping[str, Any], computed: Mapping[str, float]) -> float:
        return computed.get(self.source, 0.0)


Expression = Union[Sum, NetOf, Difference, Copy]


@dataclass(frozen=True)
class AggregateField:
    name: str
    expression: Expression


@dataclass(frozen=True)
class AggregateSpec:
    """
    Ordered aggregate fields for one document type.

    Raises:
        ConfigurationError: If field names repeat or a field refers to an
            aggregate that is not defined before it.
    """
    name: str
    fields: Tuple[AggregateField, ...]

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        result = ValidationResult(is_valid=True)
        seen = []
        for agg in self.fields:
            if agg.name in seen:
                result.add_error(f"Duplicate aggregate field '{agg.name}'")
            expression = agg.expression
            references = ()
            if isinstance(expression, Difference):
                references = (expression.minuend, expression.subtrahend)
            elif isinstance(expression, Copy):
                references = (expression.source,)
            for ref in references:
                if ref not in seen:
                    result.add_error(
                        f"Aggregate '{agg.name}' refers to '{ref}' before it is defined"
                    )
            seen.append(agg.name)
        if not result.is_valid:
            raise ConfigurationError(
                f"Aggregate spec '{self.name}' is invalid",
                validation_result=result
            )

    def field_names(self):
        return [agg.name for agg in self.fields]


def compute_aggregates(responses: Mapping[str, Any], spec: AggregateSpec) -> Dict[str, float]:
    """
    Evaluate an aggregate spec.

    Args:
        responses: Response snapshot.
        spec: Aggregate definitions.

    Returns:
        Ordered mapping of field name to value, in spec order.
    """
    computed: Dict[str, float] = {}
    for agg in spec.fields:
        computed[agg.name] = round(agg.expression.evaluate(responses, computed), 2)
    return computed


def format_aggregates(values: Mapping[str, float]) -> Dict[str, str]:
    """Render computed aggregates with the currency transform."""
    return {name: format_currency(value) for name, value in values.items()}


# ============================================================================
# Financial affidavit
# ============================================================================

INCOME_KEYS = (
    "gross-monthly-salary",
    "overtime-income",
    "bonus-income",
    "rental-income",
    "investment-income",
    "social-security-income",
    "pension-income",
    "disability-income",
    "unemployment-income",
    "child-support-received",
    "spousal-support-received",
    "other-income-amount",
)

HOUSING_KEYS = (
    "monthly-rent-mortgage",
    "property-taxes",
    "homeowners-insurance",
    "hoa-fees",
    "home-maintenance",
)

UTILITY_KEYS = (
    "electricity",
    "gas-heating",
    "water-sewer",
    "trash-collection",
    "phone-cell",
    "internet-cable",
)

TRANSPORTATION_KEYS = (
    "car-payment",
    "car-insurance",
    "gas-fuel",
    "car-maintenance",
    "parking-tolls",
    "public-transportation",
)

FOOD_PERSONAL_KEYS = (
    "groceries",
    "dining-out",
    "clothing",
    "personal-care",
    "dry-cleaning",
)

HEALTHCARE_KEYS = (
    "health-insurance",
    "dental-insurance",
    "vision-insurance",
    "medical-out-of-pocket",
    "therapy-counseling",
)

CHILDREN_KEYS = (
    "childcare-daycare",
    "child-tuition",
    "child-activities",
    "child-medical",
    "child-support-paid",
)

OTHER_EXPENSE_KEYS = (
    "life-insurance",
    "entertainment",
    "subscriptions",
    "pet-expenses",
    "charitable-contributions",
    "misc-expenses",
)

EXPENSE_KEYS = (
    HOUSING_KEYS + UTILITY_KEYS + TRANSPORTATION_KEYS + FOOD_PERSONAL_KEYS
    + HEALTHCARE_KEYS + CHILDREN_KEYS + OTHER_EXPENSE_KEYS
)

ACCOUNT_KEYS = (
    "checking-balance",
    "savings-balance",
    "investment-balance",
    "retirement-401k",
    "retirement-ira",
    "pension-value",
    "cash-on-hand",
)

DEBT_KEYS = (
    "primary-residence-mortgage",
    "other-property-mortgage",
    "vehicle-1-loan",
    "vehicle-2-loan",
    "credit-card-debt",
    "student-loan-debt",
    "personal-loan-debt",
    "medical-debt",
    "tax-debt",
    "other-debt",
)

FINANCIAL_AFFIDAVIT_AGGREGATES = AggregateSpec("financial-affidavit", (
    AggregateField("TotalMonthlyIncome", Sum(*INCOME_KEYS)),
    AggregateField("TotalGrossIncome", Copy("TotalMonthlyIncome")),
    AggregateField("TotalMonthlyExpenses", Sum(*EXPENSE_KEYS)),
    AggregateField("NetMonthlyIncome", Difference("TotalMonthlyIncome", "TotalMonthlyExpenses")),
    AggregateField("TotalAssets", Sum(
        NetOf("primary-residence-value", "primary-residence-mortgage"),
        NetOf("other-property-value", "other-property-mortgage"),
        NetOf("vehicle-1-value", "vehicle-1-loan"),
        NetOf("vehicle-2-value", "vehicle-2-loan"),
        *ACCOUNT_KEYS
    )),
    AggregateField("TotalLiabilities", Sum(*DEBT_KEYS)),
    AggregateField("TotalDebts", Copy("TotalLiabilities")),
    AggregateField("NetWorth", Difference("TotalAssets", "TotalLiabilities")),
    AggregateField("HousingSubtotal", Sum(*HOUSING_KEYS)),
    AggregateField("UtilitySubtotal", Sum(*UTILITY_KEYS)),
    AggregateField("TransportationSubtotal", Sum(*TRANSPORTATION_KEYS)),
    AggregateField("FoodPersonalSubtotal", Sum(*FOOD_PERSONAL_KEYS)),
    AggregateField("HealthcareSubtotal", Sum(*HEALTHCARE_KEYS)),
))

AGGREGATE_SPECS: Dict[str, AggregateSpec] = {
    "financial-affidavit": FINANCIAL_AFFIDAVIT_AGGREGATES,
}
