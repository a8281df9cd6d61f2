"""Job variable coercion.

Job variables arrive as a flat map of JSON primitives set by whoever
modelled the process, so numbers may come as strings and flags as "yes".
These helpers turn them into typed values and never raise.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes")
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def extract_int(value: Any) -> Optional[int]:
    """Coerce to a signed 64-bit int.

    Numbers are truncated, numeric strings parsed; blanks, bad strings,
    values outside the 64-bit range and other types give None.

    Examples:
        >>> extract_int("42")
        42
        >>> extract_int(" ")
        >>> extract_int("abc")
        >>> extract_int("99999999999999999999")
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float)):
        logger.warning(f"Unexpected value type {type(value).__name__} for integer: {value}")
        return None

    try:
        number = int(value)
    except (ValueError, OverflowError):
        logger.warning(f"Could not parse '{value}' as an integer")
        return None

    if not INT64_MIN <= number <= INT64_MAX:
        logger.warning(f"Integer {value} is outside the 64-bit range")
        return None
    return number


def extract_string(value: Any) -> Optional[str]:
    """Coerce to a trimmed string; blank gives None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def extract_bool(value: Any) -> Optional[bool]:
    """Coerce to bool.

    Booleans pass through. Otherwise "true", "1" and "yes" (any case) are
    True, any other non-blank value is False, and blank or None is None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if not text:
        return None
    return text in TRUE_VALUES


def timestamp() -> str:
    """Local timestamp used in result payloads."""
    return datetime.now().isoformat()


def search_parameters(**params: Any) -> Dict[str, Any]:
    """Echo of the populated search parameters for result payloads."""
    return {key: value for key, value in params.items() if value is not None}
