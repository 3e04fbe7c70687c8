"""Transform catalog for field mapping.

Every function here is total: it accepts any raw response value and
returns a string, falling back to a best-effort rendering for malformed
input. Lookups fall back to the raw code when it is not recognized so
that a gap in a lookup table never drops the user's answer.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping

from ..models.mapping import Transform
from ..models.responses import coerce_number, parse_date

TRUTHY_STRINGS = ("Yes", "yes", "true", "1", "on", "X")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ============================================================================
# Dates, money and durations
# ============================================================================

def long_date(day: date) -> str:
    """Render a date as ``January 5, 2020``."""
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def format_date(value: Any) -> str:
    """
    Format a date in long human form.

    Returns:
        ``"January 5, 2020"``; ``""`` for an empty value; the raw text when
        the value cannot be read as a date.
    """
    if value is None or value == "":
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return _text(value)
    return long_date(parsed)


def format_short_date(value: Any) -> str:
    """Format a date as ``MM/DD/YYYY`` for court headers."""
    if value is None or value == "":
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return _text(value)
    return parsed.strftime("%m/%d/%Y")


def format_currency(value: Any) -> str:
    """
    Format a monetary amount.

    Returns:
        ``"$1,234.56"``; negatives as ``"-$12.00"``; ``"$0.00"`` for
        missing or non-numeric input.
    """
    number = coerce_number(value)
    if number is None:
        return "$0.00"
    try:
        amount = Decimal(str(number)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the default decimal context holds
        sign = "-" if number < 0 else ""
        return f"{sign}${abs(number):,.2f}"
    if amount == 0:
        return "$0.00"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def yes_no_checkbox(value: Any) -> str:
    """Map a yes/no answer to the checkbox state strings ``Yes``/``No``."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return "Yes" if _text(value).strip().lower() in ("yes", "true", "1", "on", "x") else "No"


def is_truthy(value: Any) -> bool:
    """Check a rendered field value against the canonical checked strings."""
    if isinstance(value, bool):
        return value
    return _text(value).strip() in TRUTHY_STRINGS


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def format_duration_months(value: Any) -> str:
    """Render a month count as ``"2 years and 3 months"``."""
    number = coerce_number(value)
    if number is None:
        return _text(value)
    months_total = int(number)
    if months_total <= 0:
        return ""
    years, months = divmod(months_total, 12)
    parts = []
    if years > 0:
        parts.append(_plural(years, "year"))
    if months > 0:
        parts.append(_plural(months, "month"))
    return " and ".join(parts)


# ============================================================================
# Code -> label lookups
# ============================================================================

COUNTY_NAMES = {
    "cook": "Cook County",
    "dupage": "DuPage County",
    "lake": "Lake County",
    "will": "Will County",
    "kane": "Kane County",
    "mchenry": "McHenry County",
    "winnebago": "Winnebago County",
    "madison": "Madison County",
    "stclair": "St. Clair County",
    "sangamon": "Sangamon County",
    "other": "Other County",
}

GROUNDS = {
    "irreconcilable": "Irreconcilable Differences",
    "impotence": "Impotence",
    "bigamy": "Bigamy",
    "adultery": "Adultery",
    "desertion": "Willful Desertion",
    "substance": "Habitual Drunkenness or Drug Addiction",
    "cruelty": "Extreme and Repeated Mental or Physical Cruelty",
    "attempted_murder": "Attempt on Life of Spouse",
    "felony": "Conviction of a Felony or Other Infamous Crime",
}

EMPLOYMENT_STATUS = {
    "full_time": "Employed Full-Time",
    "part_time": "Employed Part-Time",
    "self_employed": "Self-Employed",
    "unemployed": "Unemployed",
    "retired": "Retired",
    "disabled": "Disabled",
}

DECISION_MAKING = {
    "joint": "Joint (Both Parents)",
    "parent1": "Petitioner (Parent 1)",
    "parent2": "Respondent (Parent 2)",
    "na": "Not Applicable",
}

SCHEDULE_TYPES = {
    "standard": "Standard (Every Other Weekend)",
    "week_on_off": "50/50 - Week On/Week Off",
    "2_2_3": "50/50 - 2-2-3 Rotation",
    "3_4_4_3": "50/50 - 3-4-4-3 Rotation",
    "60_40": "60/40 Split",
    "custom": "Custom Schedule",
}

PARENTS = {
    "parent1": "Petitioner (Parent 1)",
    "parent2": "Respondent (Parent 2)",
    "shared": "Shared (Alternating)",
    "mother": "Mother",
    "father": "Father",
    "split": "Split Between Parents",
}

EXCHANGE_TIMES = {
    "friday_school": "Friday after school",
    "friday_6pm": "Friday at 6:00 PM",
    "saturday_morning": "Saturday morning",
    "sunday_6pm": "Sunday at 6:00 PM",
    "monday_school": "Monday (drop at school)",
}

HOLIDAY_APPROACHES = {
    "alternate": "Alternate Years (Odd/Even)",
    "split": "Split Each Holiday",
    "specific": "Specific Holidays Assigned",
}

SUMMER_APPROACHES = {
    "regular": "Continue Regular Schedule",
    "extended": "Extended Time with Non-Custodial Parent",
    "fifty_fifty": "50/50 Split (2 weeks alternating)",
    "custom": "Custom Arrangement",
}

COMMUNICATION_METHODS = {
    "email": "Email",
    "text": "Text Message",
    "app": "Co-Parenting App",
    "phone": "Phone Calls",
}

RESPONSE_TIMES = {
    "24_hours": "Within 24 hours",
    "48_hours": "Within 48 hours",
    "72_hours": "Within 72 hours",
}

EXCHANGE_LOCATIONS = {
    "parent1_home": "Parent 1's Residence",
    "parent2_home": "Parent 2's Residence",
    "school": "School (Drop Off/Pick Up)",
    "public": "Public Location",
    "midpoint": "Midpoint Between Homes",
}

TRANSPORTATION = {
    "receiving": "Receiving Parent Picks Up",
    "sending": "Sending Parent Drops Off",
    "split": "Split (Each Drives One Way)",
}


def lookup(table: Mapping[str, str], lowercase: bool = False) -> Callable[[Any], str]:
    """
    Build a code -> label function with identity fallback.

    Args:
        table: Known codes and their labels.
        lowercase: Match codes case-insensitively.
    """
    def _lookup(value: Any) -> str:
        code = _text(value)
        key = code.lower() if lowercase else code
        return table.get(key, code)
    return _lookup


format_county = lookup(COUNTY_NAMES, lowercase=True)
format_grounds = lookup(GROUNDS)
format_employment_status = lookup(EMPLOYMENT_STATUS)
format_decision_making = lookup(DECISION_MAKING)
format_schedule_type = lookup(SCHEDULE_TYPES)
format_parent = lookup(PARENTS)
format_exchange_time = lookup(EXCHANGE_TIMES)
format_holiday_approach = lookup(HOLIDAY_APPROACHES)
format_summer_approach = lookup(SUMMER_APPROACHES)
format_communication_method = lookup(COMMUNICATION_METHODS)
format_response_time = lookup(RESPONSE_TIMES)
format_exchange_location = lookup(EXCHANGE_LOCATIONS)
format_transportation = lookup(TRANSPORTATION)


# ============================================================================
# Catalog
# ============================================================================

DATE = Transform("date", format_date)
SHORT_DATE = Transform("short_date", format_short_date)
CURRENCY = Transform("currency", format_currency)
YES_NO = Transform("yes_no", yes_no_checkbox)
DURATION_MONTHS = Transform("duration_months", format_duration_months)
COUNTY = Transform("county", format_county)
GROUNDS_LABEL = Transform("grounds", format_grounds)
EMPLOYMENT = Transform("employment_status", format_employment_status)
DECISION = Transform("decision_making", format_decision_making)
SCHEDULE = Transform("schedule_type", format_schedule_type)
PARENT = Transform("parent", format_parent)
EXCHANGE_TIME = Transform("exchange_time", format_exchange_time)
HOLIDAY = Transform("holiday_approach", format_holiday_approach)
SUMMER = Transform("summer_approach", format_summer_approach)
COMMUNICATION = Transform("communication_method", format_communication_method)
RESPONSE_TIME = Transform("response_time", format_response_time)
EXCHANGE_LOCATION = Transform("exchange_location", format_exchange_location)
TRANSPORT = Transform("transportation", format_transportation)

TRANSFORMS: Dict[str, Transform] = {
    t.name: t
    for t in (
        DATE,
        SHORT_DATE,
        CURRENCY,
        YES_NO,
        DURATION_MONTHS,
        COUNTY,
        GROUNDS_LABEL,
        EMPLOYMENT,
        DECISION,
        SCHEDULE,
        PARENT,
        EXCHANGE_TIME,
        HOLIDAY,
        SUMMER,
        COMMUNICATION,
        RESPONSE_TIME,
        EXCHANGE_LOCATION,
        TRANSPORT,
    )
}


def get_transform(name: str) -> Transform:
    """
    Look up a catalog transform by name.

    Raises:
        KeyError: If no transform has that name.
    """
    return TRANSFORMS[name]
