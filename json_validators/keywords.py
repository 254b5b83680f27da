"""
Keyword validators.

One factory per JSON Schema keyword. Each factory checks its configuration
up front (raising InvalidValidatorConfig on bad input) and returns a checker:

    checker(control, invert=False) -> ErrorReport | None

Conventions shared by every checker:

- Empty values (None, "", [], {}) are not checked, so they are valid.
  'required' is the one keyword that looks at emptiness.
- Values the keyword does not apply to are valid: minLength ignores
  numbers, minimum ignores text that is not numeric, and so on (the HTML
  forms rule for inapplicable constraints).
- invert=True returns the exact complement: a report when the value would
  have been valid, None when it would have been invalid. 'not' and 'oneOf'
  rely on this to describe which constraint matched.
"""

import logging
import math
import re
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .config_loader import get_config
from .control import as_control, get_value
from .errors import Checker, ErrorReport, inverted_error, keyword_error, merge_errors
from .exceptions import InvalidValidatorConfig
from .formats import TEMPORAL_TYPES, check_format, is_known_format
from .values import (
    ValueKind,
    deep_equal,
    has_value,
    is_empty,
    is_integral,
    is_temporal,
    kind_or_none,
    loosely_equal,
    to_number,
)

logger = logging.getLogger(__name__)

TYPE_NAMES = ("string", "number", "integer", "boolean", "null", "object", "array")


def _result(is_valid: bool, invert: bool, keyword: str, message: str,
            **details) -> Optional[ErrorReport]:
    """Turn a pass/fail decision into None or a report, honouring invert."""
    if is_valid != invert:
        return None
    if invert:
        return inverted_error(keyword, message, **details)
    return keyword_error(keyword, message, **details)


def _require_count(keyword: str, count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidValidatorConfig(
            keyword, f"expected a non-negative integer, got {count!r}"
        )
    return count


def _require_number(keyword: str, number: Any) -> float:
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise InvalidValidatorConfig(keyword, f"expected a number, got {number!r}")
    if isinstance(number, float) and not math.isfinite(number):
        raise InvalidValidatorConfig(keyword, f"expected a finite number, got {number!r}")
    return number


def null_validator(control: Any, invert: bool = False) -> Optional[ErrorReport]:
    """Checker that accepts everything (and, inverted, nothing)."""
    if not invert:
        return None
    return inverted_error("null", "any value")


# ---------------------------------------------------------------------------
# Any control: required, type, enum, const
# ---------------------------------------------------------------------------


def required_checker(required: bool = True) -> Checker:
    """
    Build the 'required' checker.

    Args:
        required: False disables the check (returns null_validator)

    Returns:
        Checker reporting {"required": ...} when the value is None or ""
    """
    if not required:
        return null_validator

    def check_required_value(control, invert=False):
        value = get_value(control)
        return _result(
            has_value(value), invert, "required", "This field is required",
            requiredValue=True, actualValue=value,
        )

    return check_required_value


def check_required(control: Any, invert: bool = False) -> Optional[ErrorReport]:
    """Run the 'required' check on a control right away."""
    return required_checker()(control, invert)


def _is_type(value: Any, type_name: str) -> bool:
    kind = kind_or_none(value)
    if type_name == "string":
        return kind is ValueKind.STRING
    if type_name == "number":
        return to_number(value) is not None
    if type_name == "integer":
        number = to_number(value)
        return number is not None and is_integral(number)
    if type_name == "boolean":
        return kind is ValueKind.BOOLEAN
    if type_name == "null":
        return kind is ValueKind.NULL
    if type_name == "object":
        return kind is ValueKind.MAPPING
    if type_name == "array":
        return kind is ValueKind.SEQUENCE
    raise ValueError(f"Unknown type name: {type_name}")


def type_validator(required_type: Union[str, Sequence[str], None]) -> Checker:
    """
    Require the value to be of a JSON type, or one of several.

    'number' and 'integer' also accept numeric text, since form inputs
    deliver text; 'integer' needs a value without a fractional part.
    """
    if required_type is None:
        return null_validator
    if isinstance(required_type, str):
        allowed = (required_type,)
    elif isinstance(required_type, (list, tuple)):
        allowed = tuple(required_type)
    else:
        raise InvalidValidatorConfig(
            "type", f"expected a type name or a list of them, got {required_type!r}"
        )
    if not allowed:
        raise InvalidValidatorConfig("type", "expected at least one type name")
    unknown = [name for name in allowed if name not in TYPE_NAMES]
    if unknown:
        raise InvalidValidatorConfig("type", f"unknown type name(s): {unknown}")

    message = f"Must be of type {' or '.join(allowed)}"

    def check_type(control, invert=False):
        value = get_value(control)
        is_valid = is_empty(value) or any(_is_type(value, name) for name in allowed)
        return _result(
            is_valid, invert, "type", message,
            requiredType=required_type, actualValue=value,
        )

    return check_type


def enum_validator(allowed_values: Sequence[Any]) -> Checker:
    """
    Require the value to loosely equal one of the allowed values.

    A list value passes when every item matches an allowed value (multi
    selects), or when the list itself equals an allowed list.
    """
    if not isinstance(allowed_values, (list, tuple)):
        raise InvalidValidatorConfig(
            "enum", f"expected a list of values, got {allowed_values!r}"
        )
    allowed = tuple(allowed_values)
    not_json = [option for option in allowed if kind_or_none(option) is None]
    if not_json:
        raise InvalidValidatorConfig("enum", f"expected JSON values, got {not_json!r}")

    def matches(item):
        return any(loosely_equal(option, item) for option in allowed)

    def check_enum(control, invert=False):
        value = get_value(control)
        if is_empty(value):
            is_valid = True
        elif kind_or_none(value) is ValueKind.SEQUENCE:
            is_valid = matches(value) or all(matches(item) for item in value)
        else:
            is_valid = matches(value)
        return _result(
            is_valid, invert, "enum", "Must be one of the allowed values",
            allowedValues=list(allowed), actualValue=value,
        )

    return check_enum


def const_validator(required_value: Any) -> Checker:
    """Require the value to loosely equal a single value."""
    if kind_or_none(required_value) is None:
        raise InvalidValidatorConfig("const", f"expected a JSON value, got {required_value!r}")

    def check_const(control, invert=False):
        value = get_value(control)
        is_valid = is_empty(value) or loosely_equal(required_value, value)
        return _result(
            is_valid, invert, "const", f"Must be {required_value!r}",
            requiredValue=required_value, actualValue=value,
        )

    return check_const


# ---------------------------------------------------------------------------
# Text controls: minLength, maxLength, pattern, format
# ---------------------------------------------------------------------------


def min_length_validator(required_length: int) -> Checker:
    required_length = _require_count("minLength", required_length)
    message = f"Must be at least {required_length} characters"

    def check_min_length(control, invert=False):
        value = get_value(control)
        is_text = isinstance(value, str)
        is_valid = is_empty(value) or not is_text or len(value) >= required_length
        return _result(
            is_valid, invert, "minLength", message,
            requiredLength=required_length,
            actualLength=len(value) if is_text else None,
        )

    return check_min_length


def max_length_validator(required_length: int) -> Checker:
    required_length = _require_count("maxLength", required_length)
    message = f"Must be {required_length} characters or fewer"

    def check_max_length(control, invert=False):
        value = get_value(control)
        is_text = isinstance(value, str)
        is_valid = is_empty(value) or not is_text or len(value) <= required_length
        return _result(
            is_valid, invert, "maxLength", message,
            requiredLength=required_length,
            actualLength=len(value) if is_text else None,
        )

    return check_max_length


def pattern_validator(pattern: Union[str, "re.Pattern"],
                      whole_string: Optional[bool] = None) -> Checker:
    """
    Require text to match a regular expression.

    Unlike an HTML input pattern, a JSON Schema pattern may match anywhere
    in the value. Pass whole_string=True to anchor it to the entire value.

    Args:
        pattern: Regex source or compiled pattern
        whole_string: Match the whole value; None reads pattern.whole_string
            from settings

    Raises:
        InvalidValidatorConfig: If the pattern does not compile
    """
    if whole_string is None:
        whole_string = get_config().get_pattern_whole_string()

    if isinstance(pattern, re.Pattern):
        regex = pattern
    elif isinstance(pattern, str):
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise InvalidValidatorConfig("pattern", f"{pattern!r} does not compile: {e}") from e
    else:
        raise InvalidValidatorConfig("pattern", f"expected a string, got {pattern!r}")

    required_pattern = f"^{regex.pattern}$" if whole_string else regex.pattern
    match = regex.fullmatch if whole_string else regex.search

    def check_pattern(control, invert=False):
        value = get_value(control)
        is_valid = is_empty(value) or not isinstance(value, str) or match(value) is not None
        return _result(
            is_valid, invert, "pattern", f"Must match pattern {required_pattern}",
            requiredPattern=required_pattern, actualValue=value,
        )

    return check_pattern


def format_validator(required_format: Optional[str]) -> Checker:
    """
    Require text to be in a named format (date-time, email, hostname, ...).

    Unrecognized format tags pass every value unless settings say
    formats.unknown: error, in which case they fail here at build time.
    Python date/time/datetime objects satisfy the matching temporal format.
    """
    if not required_format:
        return null_validator

    known = is_known_format(required_format)
    if not known:
        if get_config().get_unknown_format_policy() == "error":
            raise InvalidValidatorConfig(
                "format", f"{required_format!r} is not a recognized format"
            )
        logger.warning(
            f"format validator: '{required_format}' is not a recognized format, "
            f"all values will pass"
        )

    message = f"Must be a valid {required_format}"

    def check_format_value(control, invert=False):
        value = get_value(control)
        if is_empty(value) or not known:
            is_valid = True
        elif isinstance(value, str):
            is_valid = check_format(required_format, value)
        elif is_temporal(value):
            is_valid = isinstance(value, TEMPORAL_TYPES.get(required_format, ()))
        else:
            is_valid = True
        return _result(
            is_valid, invert, "format", message,
            requiredFormat=required_format, actualValue=value,
        )

    return check_format_value


# ---------------------------------------------------------------------------
# Numeric controls: minimum, maximum, exclusiveMinimum, exclusiveMaximum,
# multipleOf
# ---------------------------------------------------------------------------


def _bound_checker(keyword: str, limit_name: str, limit: float, passes,
                   message: str, **extra) -> Checker:
    def check_bound(control, invert=False):
        value = get_value(control)
        number = None if is_empty(value) else to_number(value)
        is_valid = number is None or passes(number)
        return _result(
            is_valid, invert, keyword, message,
            actualValue=value, **{limit_name: limit}, **extra,
        )

    return check_bound


def minimum_validator(minimum: float, exclusive: bool = False) -> Checker:
    """
    Require a numeric value of at least `minimum`.

    Non-numeric values pass: they have no minimum under the HTML forms rules.

    Args:
        minimum: Lowest allowed value
        exclusive: Disallow `minimum` itself (draft-4 boolean exclusiveMinimum)
    """
    minimum = _require_number("minimum", minimum)
    if exclusive:
        return _bound_checker(
            "minimum", "minimumValue", minimum, lambda n: n > minimum,
            f"Must be greater than {minimum}", exclusive=True,
        )
    return _bound_checker(
        "minimum", "minimumValue", minimum, lambda n: n >= minimum,
        f"Must be {minimum} or more",
    )


def maximum_validator(maximum: float, exclusive: bool = False) -> Checker:
    """Require a numeric value of at most `maximum` (see minimum_validator)."""
    maximum = _require_number("maximum", maximum)
    if exclusive:
        return _bound_checker(
            "maximum", "maximumValue", maximum, lambda n: n < maximum,
            f"Must be less than {maximum}", exclusive=True,
        )
    return _bound_checker(
        "maximum", "maximumValue", maximum, lambda n: n <= maximum,
        f"Must be {maximum} or less",
    )


def exclusive_minimum_validator(exclusive_minimum: float) -> Checker:
    exclusive_minimum = _require_number("exclusiveMinimum", exclusive_minimum)
    return _bound_checker(
        "exclusiveMinimum", "exclusiveMinimumValue", exclusive_minimum,
        lambda n: n > exclusive_minimum,
        f"Must be greater than {exclusive_minimum}",
    )


def exclusive_maximum_validator(exclusive_maximum: float) -> Checker:
    exclusive_maximum = _require_number("exclusiveMaximum", exclusive_maximum)
    return _bound_checker(
        "exclusiveMaximum", "exclusiveMaximumValue", exclusive_maximum,
        lambda n: n < exclusive_maximum,
        f"Must be less than {exclusive_maximum}",
    )


def multiple_of_validator(multiple_of: float) -> Checker:
    """
    Require a numeric value that is a whole multiple of `multiple_of`.

    Raises:
        InvalidValidatorConfig: If multiple_of is not a finite number > 0
    """
    multiple_of = _require_number("multipleOf", multiple_of)
    if multiple_of <= 0:
        raise InvalidValidatorConfig("multipleOf", f"must be greater than 0, got {multiple_of}")
    # Fractions keep big ints exact; the tolerance only absorbs float noise
    divisor = Fraction(multiple_of)
    tolerance = Fraction(get_config().get_multiple_of_tolerance()) * divisor

    def is_multiple(number):
        if isinstance(number, int) and isinstance(multiple_of, int):
            return number % multiple_of == 0
        if isinstance(number, float) and not math.isfinite(number):
            return False
        remainder = Fraction(number) % divisor
        return min(remainder, divisor - remainder) <= tolerance

    return _bound_checker(
        "multipleOf", "multipleOfValue", multiple_of, is_multiple,
        f"Must be a multiple of {multiple_of}",
    )


# ---------------------------------------------------------------------------
# Group controls: minProperties, maxProperties, dependencies
# ---------------------------------------------------------------------------


def min_properties_validator(required_properties: int) -> Checker:
    required_properties = _require_count("minProperties", required_properties)
    message = f"Must have at least {required_properties} properties"

    def check_min_properties(control, invert=False):
        value = get_value(control)
        is_mapping = isinstance(value, dict)
        is_valid = is_empty(value) or not is_mapping or len(value) >= required_properties
        return _result(
            is_valid, invert, "minProperties", message,
            minimumProperties=required_properties,
            actualProperties=len(value) if is_mapping else None,
        )

    return check_min_properties


def max_properties_validator(required_properties: int) -> Checker:
    required_properties = _require_count("maxProperties", required_properties)
    message = f"Must have {required_properties} properties or fewer"

    def check_max_properties(control, invert=False):
        value = get_value(control)
        is_mapping = isinstance(value, dict)
        is_valid = is_empty(value) or not is_mapping or len(value) <= required_properties
        return _result(
            is_valid, invert, "maxProperties", message,
            maximumProperties=required_properties,
            actualProperties=len(value) if is_mapping else None,
        )

    return check_max_properties


def _property_names(requiring_field: str, names: Any) -> tuple:
    if not isinstance(names, (list, tuple)) or not all(isinstance(n, str) for n in names):
        raise InvalidValidatorConfig(
            "dependencies",
            f"'{requiring_field}' must list property names, got {names!r}",
        )
    return tuple(names)


def dependencies_validator(dependencies: Optional[Dict[str, Any]]) -> Checker:
    """
    Apply extra requirements to a group when certain properties have values.

    Supported forms, per depending property:
        {"card": ["billing_address"]}                  # property dependency
        {"card": {"required": [...],                   # schema dependency
                  "properties": {"cvv": {"minLength": 3}}}}

    Schema dependencies only apply 'required' and the per-property keyword
    schemas to sibling values; other sub-schema keywords are skipped.
    This is a partial implementation of the keyword.
    """
    if dependencies is None:
        return null_validator
    if not isinstance(dependencies, dict):
        raise InvalidValidatorConfig(
            "dependencies", f"expected an object, got {dependencies!r}"
        )
    if not dependencies:
        return null_validator

    # Compiled lazily to avoid a module cycle with the schema compiler
    from .schema_compiler import compile_schema

    plan: Dict[str, tuple] = {}
    for requiring_field, dependency in dependencies.items():
        if isinstance(dependency, (list, tuple)):
            plan[requiring_field] = (_property_names(requiring_field, dependency), {})
        elif isinstance(dependency, dict):
            skipped = set(dependency) - {"required", "properties"}
            if skipped:
                logger.debug(
                    f"dependencies validator: skipping unsupported keywords "
                    f"{sorted(skipped)} for '{requiring_field}'"
                )
            properties = dependency.get("properties", {})
            if not isinstance(properties, dict):
                raise InvalidValidatorConfig(
                    "dependencies",
                    f"'{requiring_field}.properties' must be an object, got {properties!r}",
                )
            property_checkers = {}
            for name, sub_schema in properties.items():
                checker = compile_schema(sub_schema, check_schema=False)
                if checker is not None:
                    property_checkers[name] = checker
            required_fields = _property_names(requiring_field, dependency.get("required", ()))
            plan[requiring_field] = (required_fields, property_checkers)
        else:
            raise InvalidValidatorConfig(
                "dependencies",
                f"'{requiring_field}' must map to a list or an object, got {dependency!r}",
            )

    def check_dependencies(control, invert=False):
        value = get_value(control)
        failed: Dict[str, Dict[str, Any]] = {}
        if isinstance(value, dict) and not is_empty(value):
            for requiring_field, (required_fields, property_checkers) in plan.items():
                if not has_value(value.get(requiring_field)):
                    continue
                field_errors: Dict[str, Any] = {}
                for name in required_fields:
                    report = check_required(as_control(value.get(name)))
                    if report:
                        field_errors[name] = report
                for name, checker in property_checkers.items():
                    report = checker(as_control(value.get(name)))
                    if report:
                        field_errors[name] = merge_errors(field_errors.get(name), report)
                if field_errors:
                    failed[requiring_field] = field_errors
        return _result(
            not failed, invert, "dependencies", "Dependent properties are not satisfied",
            failedDependencies=failed,
        )

    return check_dependencies


# ---------------------------------------------------------------------------
# Array controls: minItems, maxItems, uniqueItems, contains
# ---------------------------------------------------------------------------


def min_items_validator(required_items: int) -> Checker:
    required_items = _require_count("minItems", required_items)
    message = f"Must have at least {required_items} items"

    def check_min_items(control, invert=False):
        value = get_value(control)
        is_list = isinstance(value, (list, tuple))
        is_valid = is_empty(value) or not is_list or len(value) >= required_items
        return _result(
            is_valid, invert, "minItems", message,
            minimumItems=required_items,
            actualItems=len(value) if is_list else None,
        )

    return check_min_items


def max_items_validator(required_items: int) -> Checker:
    required_items = _require_count("maxItems", required_items)
    message = f"Must have {required_items} items or fewer"

    def check_max_items(control, invert=False):
        value = get_value(control)
        is_list = isinstance(value, (list, tuple))
        is_valid = is_empty(value) or not is_list or len(value) <= required_items
        return _result(
            is_valid, invert, "maxItems", message,
            maximumItems=required_items,
            actualItems=len(value) if is_list else None,
        )

    return check_max_items


def _duplicate_items(items: Iterable[Any]) -> List[Any]:
    seen: List[Any] = []
    duplicates: List[Any] = []
    for item in items:
        if any(deep_equal(item, other) for other in seen):
            if not any(deep_equal(item, other) for other in duplicates):
                duplicates.append(item)
        else:
            seen.append(item)
    return duplicates


def unique_items_validator(unique: bool = True) -> Checker:
    """Require list items to be pairwise distinct (deep equality)."""
    if not unique:
        return null_validator

    def check_unique_items(control, invert=False):
        value = get_value(control)
        duplicates = (
            _duplicate_items(value)
            if isinstance(value, (list, tuple)) and not is_empty(value)
            else []
        )
        return _result(
            not duplicates, invert, "uniqueItems", "Items must be unique",
            duplicateItems=duplicates,
        )

    return check_unique_items


def contains_validator(required_item: Any = True) -> Checker:
    """
    Placeholder for the 'contains' keyword.

    Matching list items against a sub-schema is not implemented, so every
    value passes (and, inverted, every value fails).
    """
    if not required_item:
        return null_validator
    logger.debug("contains validator is not implemented; all values will pass")

    def check_contains(control, invert=False):
        value = get_value(control)
        return _result(
            True, invert, "contains", "Must contain a matching item",
            requiredItem=required_item, actualItems=value,
        )

    return check_contains


# ---------------------------------------------------------------------------
# Forms-library aliases
# ---------------------------------------------------------------------------


def min_validator(minimum: float) -> Checker:
    """Same as minimum_validator."""
    return minimum_validator(minimum)


def max_validator(maximum: float) -> Checker:
    """Same as maximum_validator."""
    return maximum_validator(maximum)


def required_true_validator() -> Checker:
    """Same as const_validator(True)."""
    return const_validator(True)


def email_validator() -> Checker:
    """Same as format_validator('email')."""
    return format_validator("email")
