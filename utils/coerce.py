"""
Lenient coercion of form values. Borrower forms post numbers as numbers,
numeric strings, or formatted strings such as "1,500,000".
"""
import math
from typing import Any


def to_number(value: Any) -> float | None:
    """Coerce a form value to a number; None for missing or non-numeric input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            return None
    # "nan" and "inf" count as non-numeric
    return number if math.isfinite(number) else None


def to_text(value: Any) -> str:
    return "" if value is None else str(value)
