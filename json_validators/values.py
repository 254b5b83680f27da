"""
Value model shared by every keyword validator.

Control values are JSON-shaped: string, number, boolean, null, ordered
sequence or keyed mapping. ``kind_of`` classifies a value into that closed
set so validators can match on it exhaustively instead of sniffing types
ad hoc.

The loose matching used by ``enum`` and ``const`` is spelled out here as an
explicit coercion table (see ``loosely_equal``), because form inputs usually
deliver text even when the schema declares numbers or booleans.
"""

import math
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional


class ValueKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    SEQUENCE = "array"
    MAPPING = "object"


# Text accepted as a boolean when matching against boolean enum/const values
TRUE_STRINGS = ("true", "1")
FALSE_STRINGS = ("false", "0")


def kind_of(value: Any) -> ValueKind:
    """
    Classify a value into its ValueKind.

    bool is checked before int because bool is an int subclass in Python.

    Raises:
        TypeError: If the value is not JSON-representable
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def kind_or_none(value: Any) -> Optional[ValueKind]:
    """kind_of, but None for non-JSON values such as datetime objects."""
    try:
        return kind_of(value)
    except TypeError:
        return None


def is_temporal(value: Any) -> bool:
    """True for datetime/date/time objects, which only the format validator accepts."""
    return isinstance(value, (datetime, date, time))


def is_empty(value: Any) -> bool:
    """None, empty string, empty sequence and empty mapping count as 'no data'."""
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def has_value(value: Any) -> bool:
    """Whether a value satisfies 'required' (only None and "" are missing)."""
    return value is not None and value != ""


def to_number(value: Any) -> Optional[float]:
    """
    Numeric reading of a value, or None if it has none.

    Numbers map to themselves; strings map to their parsed float when they
    hold finite numeric text. Booleans are never numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def to_boolean(value: Any) -> Optional[bool]:
    """Boolean reading of a value per the coercion table, or None."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    return None


def is_integral(number: float) -> bool:
    # ints of any size are integral; float() would overflow past ~1e308
    if isinstance(number, int):
        return True
    return math.isfinite(number) and number.is_integer()


def deep_equal(left: Any, right: Any) -> bool:
    """
    Structural equality over JSON values.

    Unlike ``==`` this keeps booleans apart from numbers, so ``[1]`` and
    ``[True]`` are different items.
    """
    left_kind, right_kind = kind_or_none(left), kind_or_none(right)
    if left_kind is None or right_kind is None:
        return left_kind is right_kind and left == right
    if left_kind is not right_kind:
        return False
    if left_kind is ValueKind.SEQUENCE:
        return len(left) == len(right) and all(
            deep_equal(a, b) for a, b in zip(left, right)
        )
    if left_kind is ValueKind.MAPPING:
        return left.keys() == right.keys() and all(
            deep_equal(left[k], right[k]) for k in left
        )
    return left == right


def loosely_equal(allowed: Any, actual: Any) -> bool:
    """
    Match an actual control value against an allowed enum/const value.

    Coercion table (allowed kind -> what an actual value may be):
        string  -> same text; or, when both read as numbers, equal numbers
        number  -> equal number; numeric text with that value; True for 1,
                   False for 0
        boolean -> same bool; "true"/"1" or "false"/"0" (any case); 1 or 0
        null    -> None or ""
        array / object -> deep equality only
    """
    allowed_kind = kind_of(allowed)
    actual_kind = kind_or_none(actual)
    if actual_kind is None:
        return False

    if allowed_kind is ValueKind.NULL:
        return actual is None or actual == ""

    if allowed_kind is ValueKind.BOOLEAN:
        return to_boolean(actual) is allowed

    if allowed_kind is ValueKind.NUMBER:
        if actual_kind is ValueKind.BOOLEAN:
            return to_boolean(allowed) is actual
        number = to_number(actual)
        return number is not None and number == allowed

    if allowed_kind is ValueKind.STRING:
        if actual_kind is ValueKind.STRING and actual == allowed:
            return True
        if actual_kind in (ValueKind.STRING, ValueKind.NUMBER):
            allowed_number = to_number(allowed)
            actual_number = to_number(actual)
            return (
                allowed_number is not None
                and actual_number is not None
                and allowed_number == actual_number
            )
        return False

    return deep_equal(allowed, actual)
