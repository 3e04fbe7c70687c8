"""Response map value model.

A response map binds question ids to a small closed union of values:
text, number, boolean, list of strings, or nothing.
"""

import math
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

ResponseValue = Union[str, int, float, bool, List[str], None]
ResponseMap = Dict[str, ResponseValue]


def normalize_value(value: Any) -> ResponseValue:
    """
    Coerce a raw value into the response value union.

    Args:
        value: Raw value as received from a caller or a JSON payload.

    Returns:
        The normalized value. Mappings (address blocks) are joined into one
        line, sequences become lists of strings, NaN becomes None.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return value
    if isinstance(value, Mapping):
        parts = [str(v).strip() for v in value.values() if v not in (None, "")]
        return ", ".join(p for p in parts if p)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item) for item in value if item is not None]
    return str(value)


def normalize_responses(raw: Optional[Mapping[str, Any]]) -> ResponseMap:
    """Normalize every value of a raw response mapping."""
    if not raw:
        return {}
    return {str(key): normalize_value(value) for key, value in raw.items()}


def is_answered(value: ResponseValue) -> bool:
    """
    Check whether a value counts as an answer.

    ``0`` and ``False`` are answers; ``None``, blank strings and empty
    lists are not.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, list):
        return len(value) > 0
    return True


def coerce_number(value: Any) -> Optional[float]:
    """
    Interpret a value as a number.

    Accepts ints, floats and numeric strings (``"$1,200.50"`` included).
    Booleans, blanks and anything unparseable give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace("$", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def first_value(responses: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present, non-None value among several keys."""
    for key in keys:
        value = responses.get(key)
        if value is not None:
            return value
    return None


_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%B %d, %Y", "%b %d, %Y")


def parse_date(value: Any) -> Optional[date]:
    """
    Interpret a value as a calendar date.

    Accepts ``date``/``datetime`` objects, ISO-8601 strings (with or without
    a time part) and US month/day/year strings.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    # ISO timestamps such as 2020-01-05T00:00:00.000Z
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso).date()
    except ValueError:
        return None
