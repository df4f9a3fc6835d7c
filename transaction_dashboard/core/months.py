# transaction_dashboard/core/months.py
from transaction_dashboard.errors import InvalidQueryError

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_BY_NAME = {name.lower(): number for number, name in enumerate(MONTH_NAMES, start=1)}
_BY_NAME.update({name[:3].lower(): number for number, name in enumerate(MONTH_NAMES, start=1)})


def parse_month(value):
    """
    Return the month number (1-12) for a month name, a three-letter
    abbreviation or a number, ignoring case and surrounding whitespace.
    """
    if value is None:
        raise InvalidQueryError("month is required")
    text = str(value).strip().lower()
    if not text:
        raise InvalidQueryError("month is required")
    if text.isdecimal():
        number = int(text)
        if 1 <= number <= 12:
            return number
        raise InvalidQueryError(f"month out of range: {value}")
    try:
        return _BY_NAME[text]
    except KeyError:
        raise InvalidQueryError(f"unknown month: {value}") from None


def month_name(number):
    return MONTH_NAMES[number - 1]
