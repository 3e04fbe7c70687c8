"""Derived fields computed from several answers at once.

These fields have no single source key: full names, durations, ages and
prose descriptions. Fields tied to the time of generation read only the
``generated_at`` passed in, never the clock, so output stays
reproducible.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..models.responses import coerce_number, is_answered, parse_date
from .transforms import (
    format_county,
    format_duration_months,
    format_exchange_location,
    format_parent,
    format_transportation,
    long_date,
)

logger = logging.getLogger(__name__)

MAX_CHILDREN = 5

DerivedFunction = Callable[[Mapping[str, Any], datetime], Dict[str, str]]


def _text(responses: Mapping[str, Any], key: str, default: str = "") -> str:
    value = responses.get(key)
    if not is_answered(value):
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _int(responses: Mapping[str, Any], key: str, default: int = 0) -> int:
    number = coerce_number(responses.get(key))
    return default if number is None else int(number)


def full_name(*parts: str) -> str:
    """Join name parts, collapsing the gaps left by missing parts."""
    return " ".join(" ".join(parts).split())


def age_on(birth: date, day: date) -> int:
    """Whole years between a birth date and a reference date."""
    age = day.year - birth.year
    if (day.month, day.day) < (birth.month, birth.day):
        age -= 1
    return max(age, 0)


def years_between(start: date, end: date) -> int:
    """Whole years between two dates, using 365.25-day years."""
    return max(0, math.floor((end - start).days / 365.25))


def _children_rows(
    responses: Mapping[str, Any],
    today: date,
    limit: int,
    include_details: bool
) -> Dict[str, str]:
    """
    Name, birth date and age rows, one per answered child.

    Row N always holds child N's answers; a child without a readable birth
    date keeps its name row with the date and age left blank.
    """
    fields: Dict[str, str] = {}
    for index in range(1, min(limit, MAX_CHILDREN) + 1):
        name = _text(responses, f"child-{index}-name")
        if not name:
            continue
        fields[f"Child{index}Name"] = name
        birth = parse_date(responses.get(f"child-{index}-dob"))
        if birth is not None:
            fields[f"Child{index}DOB"] = long_date(birth)
            fields[f"Child{index}Age"] = str(age_on(birth, today))
        if include_details:
            school = _text(responses, f"child-{index}-school")
            needs = _text(responses, f"child-{index}-special-needs")
            if school:
                fields[f"Child{index}School"] = school
            if needs:
                fields[f"Child{index}SpecialNeeds"] = needs
    return fields


# ============================================================================
# Petition
# ============================================================================

def petition_fields(responses: Mapping[str, Any], generated_at: datetime) -> Dict[str, str]:
    """
    Compute petition fields that combine several answers.

    Args:
        responses: Response snapshot.
        generated_at: Generation timestamp used for the filing date.

    Returns:
        Ordered mapping of destination field name to value.
    """
    fields: Dict[str, str] = {}
    fields["PetitionerFullName"] = full_name(
        _text(responses, "petitioner-first-name"),
        _text(responses, "petitioner-middle-name"),
        _text(responses, "petitioner-last-name")
    )
    fields["RespondentFullName"] = full_name(
        _text(responses, "spouse-first-name"),
        _text(responses, "spouse-last-name")
    )
    fields["DateFiled"] = long_date(generated_at.date())

    case_number = _text(responses, "case-number")
    if case_number:
        fields["CaseNumber"] = case_number

    county = _text(responses, "petitioner-county")
    if county:
        fields["CountyHeader"] = format_county(county)

    residency = format_duration_months(_int(responses, "residency-duration-months"))
    if residency:
        fields["ResidencyDuration"] = residency

    married = parse_date(responses.get("marriage-date"))
    if married is not None:
        ended = parse_date(responses.get("separation-date")) or generated_at.date()
        fields["YearsOfMarriage"] = str(years_between(married, ended))

    return {name: value for name, value in fields.items() if value}


def petition_with_children_fields(
    responses: Mapping[str, Any],
    generated_at: datetime
) -> Dict[str, str]:
    """Petition fields plus name, birth date and age rows per child."""
    fields = petition_fields(responses, generated_at)
    count = _int(responses, "number-of-children", MAX_CHILDREN) or MAX_CHILDREN
    fields.update(_children_rows(responses, generated_at.date(), count, include_details=False))
    return fields


# ============================================================================
# Financial affidavit
# ============================================================================

def financial_affidavit_fields(
    responses: Mapping[str, Any],
    generated_at: datetime
) -> Dict[str, str]:
    return {"DatePrepared": long_date(generated_at.date())}


# ============================================================================
# Parenting plan
# ============================================================================

SCHEDULE_TEXT = {
    "week_on_off": (
        "The parents will share equal parenting time on a week-on/week-off basis, "
        "with exchanges occurring on Sundays."
    ),
    "2_2_3": (
        "The parents will share equal parenting time using a 2-2-3 rotation: "
        "Parent 1 has Monday-Tuesday, Parent 2 has Wednesday-Thursday, "
        "weekends alternate starting Friday."
    ),
    "3_4_4_3": (
        "The parents will share equal parenting time using a 3-4-4-3 rotation: "
        "Parent 1 has Thursday-Sunday one week, Parent 2 has Thursday-Sunday the next."
    ),
}

BIRTHDAY_TEXT = {
    "alternate": "Children's birthdays will alternate between parents each year.",
    "split": "Children's birthdays will be split between parents (morning/afternoon).",
    "together": "Children's birthdays will be celebrated with both parents together.",
    "separate": "Each parent will celebrate children's birthdays separately.",
}


def schedule_description(responses: Mapping[str, Any]) -> str:
    """Describe the regular parenting schedule in one paragraph."""
    schedule = _text(responses, "schedule-type", "standard")
    primary = format_parent(_text(responses, "primary-residence", "parent1"))

    if schedule == "standard":
        text = (
            f"The children will primarily reside with {primary}. The non-residential "
            "parent will have parenting time every other weekend."
        )
    elif schedule == "60_40":
        text = (
            f"The children will primarily reside with {primary} (approximately 60% of "
            "the time). The other parent will have parenting time every other weekend "
            "plus one weeknight."
        )
    elif schedule == "custom":
        text = _text(
            responses, "custom-schedule-details",
            "Custom schedule as agreed by the parties."
        )
    else:
        text = SCHEDULE_TEXT.get(schedule, "")

    midweek_day = _text(responses, "midweek-visit-day")
    if _text(responses, "midweek-visit") == "yes" and midweek_day:
        text += (
            f" The non-custodial parent will also have a midweek visit on {midweek_day}s."
        )
    return text.strip()


def holiday_description(responses: Mapping[str, Any]) -> str:
    """Describe the holiday schedule, one line per arrangement."""
    lines: List[str] = []
    approach = _text(responses, "holiday-approach", "alternate")
    if approach == "alternate":
        lines.append("Holidays will alternate by year (odd/even):")
        for label, key, default in (
            ("Thanksgiving", "thanksgiving-odd-years", "parent1"),
            ("Christmas Eve", "christmas-eve-odd-years", "parent1"),
            ("Christmas Day", "christmas-day-odd-years", "parent2"),
        ):
            parent = format_parent(_text(responses, key, default))
            lines.append(f"- {label}: {parent} in odd years")
    elif approach == "split":
        lines.append("Holidays will be split each year.")

    if _text(responses, "mothers-day", "mother") == "mother":
        lines.append("- Mother's Day: Always with Mother")
    if _text(responses, "fathers-day", "father") == "father":
        lines.append("- Father's Day: Always with Father")

    birthday = BIRTHDAY_TEXT.get(_text(responses, "child-birthday", "alternate"))
    if birthday:
        lines.append(birthday)
    return "\n".join(lines)


def transportation_details(responses: Mapping[str, Any]) -> str:
    """Describe where exchanges happen and who drives."""
    location = format_exchange_location(_text(responses, "exchange-location", "parent1_home"))
    responsibility = format_transportation(
        _text(responses, "transportation-responsibility", "receiving")
    )
    details = f"Exchanges will occur at {location}. {responsibility}."
    grace = _int(responses, "exchange-time-flexibility", 15)
    if grace:
        details += f" A grace period of {grace} minutes is allowed."
    return details


def parenting_plan_fields(
    responses: Mapping[str, Any],
    generated_at: datetime
) -> Dict[str, str]:
    """
    Compute parenting plan fields that combine several answers.

    Parent names fall back to "Petitioner" and "Respondent" when the name
    questions are unanswered.
    """
    parent1 = full_name(
        _text(responses, "petitioner-first-name"),
        _text(responses, "petitioner-last-name")
    ) or "Petitioner"
    parent2 = full_name(
        _text(responses, "spouse-first-name"),
        _text(responses, "spouse-last-name")
    ) or "Respondent"

    fields: Dict[str, str] = {"DatePrepared": long_date(generated_at.date())}
    case_number = _text(responses, "case-number")
    if case_number:
        fields["CaseNumber"] = case_number
    fields["Parent1Name"] = parent1
    fields["Parent2Name"] = parent2
    fields["PetitionerName"] = parent1
    fields["RespondentName"] = parent2
    for field_name, key in (("Parent1Address", "petitioner-address"),
                            ("Parent2Address", "spouse-address")):
        address = _text(responses, key)
        if address:
            fields[field_name] = address

    count = _int(responses, "children-count", MAX_CHILDREN)
    fields.update(_children_rows(responses, generated_at.date(), count, include_details=True))

    fields["ScheduleDescription"] = schedule_description(responses)
    fields["HolidayScheduleDescription"] = holiday_description(responses)
    fields["TransportationDetails"] = transportation_details(responses)
    return {name: value for name, value in fields.items() if value}


DERIVED_FIELDS: Dict[str, DerivedFunction] = {
    "petition-no-children": petition_fields,
    "petition-with-children": petition_with_children_fields,
    "financial-affidavit": financial_affidavit_fields,
    "parenting-plan": parenting_plan_fields,
}


def compute_derived_fields(
    document_type: str,
    responses: Mapping[str, Any],
    generated_at: datetime
) -> Dict[str, str]:
    """
    Compute the derived fields registered for a document type.

    Returns:
        Ordered field values; empty for types without derived fields.
    """
    func: Optional[DerivedFunction] = DERIVED_FIELDS.get(document_type)
    if func is None:
        return {}
    return func(responses, generated_at)
