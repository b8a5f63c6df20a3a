from datetime import date
from types import MappingProxyType
from typing import Optional

from banner_schedule.errors import InvalidSemester

# Two-digit suffixes Banner appends to the year to form a term identifier.
SEMESTER_CODES = MappingProxyType(
    {
        "fall": 90,
        "summer": 60,
        "winter": 10,
        "spring": 20,
    }
)


def encode(year: int, semester: str) -> str:
    """Build the Banner term identifier for a year and semester.

    Args:
        year (int): Calendar year (e.g., 2013)
        semester (str): One of "spring", "summer", "fall" or "winter"

    Returns:
        str: The term identifier (e.g., "201390" for Fall 2013)

    Raises:
        ValueError: If the year is not a non-negative integer
        InvalidSemester: If the semester is not recognized
    """
    if isinstance(year, bool) or not isinstance(year, int) or year < 0:
        raise ValueError(f"Year must be a non-negative integer, got {year!r}")

    if not isinstance(semester, str):
        raise InvalidSemester(semester)

    code = SEMESTER_CODES.get(semester.strip().lower())
    if code is None:
        raise InvalidSemester(semester)

    return f"{year}{code:02d}"


def current_semester(today: Optional[date] = None) -> str:
    """Guess the current semester from the calendar month.

    This is only an approximation for picking a default term. Winter is
    never returned; it has to be requested explicitly.

    Args:
        today (Optional[date]): Date to evaluate, defaults to date.today()

    Returns:
        str: "spring", "summer" or "fall"
    """
    month = (today or date.today()).month

    if month <= 5:
        return "spring"
    if month <= 7:
        return "summer"
    return "fall"
