"""
Public API for json-validators

JsonValidators is the "front door": one namespace holding every keyword
validator and combinator, laid out like a conventional forms Validators
class so it can stand in for one.

Differences from a conventional forms library:

- 'pattern' matches anywhere in the value by default (JSON Schema
  semantics). Pass whole_string=True, or wrap the pattern in ^...$, for
  the old behaviour.
- Every checker accepts a second argument, invert, which flips its result.
  'compose_not' and 'compose_one_of' use it to report what matched.
- 'required' is overloaded: called with nothing or a boolean it *returns*
  the checker, called with a control it *runs* the check. That lets
  'required' be built from schema key/value pairs like every other
  keyword.
"""

import logging
from typing import Any, Optional, Sequence, Union

from . import combinators, keywords
from .control import is_control, set_errors
from .errors import AsyncChecker, Checker, ErrorReport

logger = logging.getLogger(__name__)


class JsonValidators:
    """
    JSON Schema keyword validators and combinators.

    Example:
        from json_validators import FormControl, JsonValidators as V

        checker = V.compose_any_of([V.type("integer"), V.pattern("^n/a$")])
        checker(FormControl("n/a"))   # -> None
        checker(FormControl("x"))     # -> {"type": {...}, "pattern": {...}, "anyOf": {...}}
    """

    # For all controls: required, type, enum, const

    @staticmethod
    def required(input: Union[None, bool, Any] = None) -> Union[Checker, Optional[ErrorReport]]:
        """
        'required' validator, overloaded on its argument.

        Args:
            input: None or True returns the required checker; False returns
                a checker that accepts everything; a control runs the check
                on it immediately

        Returns:
            A checker, or the report for the given control
        """
        if input is None:
            return keywords.required_checker(True)
        if isinstance(input, bool):
            return keywords.required_checker(input)
        if is_control(input):
            return keywords.check_required(input)
        raise TypeError(f"required() expects a boolean or a control, got {input!r}")

    type = staticmethod(keywords.type_validator)
    enum = staticmethod(keywords.enum_validator)
    const = staticmethod(keywords.const_validator)

    # For text controls: min_length, max_length, pattern, format

    min_length = staticmethod(keywords.min_length_validator)
    max_length = staticmethod(keywords.max_length_validator)
    pattern = staticmethod(keywords.pattern_validator)
    format = staticmethod(keywords.format_validator)

    # For numeric controls

    minimum = staticmethod(keywords.minimum_validator)
    exclusive_minimum = staticmethod(keywords.exclusive_minimum_validator)
    maximum = staticmethod(keywords.maximum_validator)
    exclusive_maximum = staticmethod(keywords.exclusive_maximum_validator)
    multiple_of = staticmethod(keywords.multiple_of_validator)

    # For group controls (partial: dependencies)

    min_properties = staticmethod(keywords.min_properties_validator)
    max_properties = staticmethod(keywords.max_properties_validator)
    dependencies = staticmethod(keywords.dependencies_validator)

    # For array controls (partial: contains)

    min_items = staticmethod(keywords.min_items_validator)
    max_items = staticmethod(keywords.max_items_validator)
    unique_items = staticmethod(keywords.unique_items_validator)
    contains = staticmethod(keywords.contains_validator)

    null_validator = staticmethod(keywords.null_validator)

    # Combinators

    compose_any_of = staticmethod(combinators.compose_any_of)
    compose_one_of = staticmethod(combinators.compose_one_of)
    compose_all_of = staticmethod(combinators.compose_all_of)
    compose_not = staticmethod(combinators.compose_not)
    compose = staticmethod(combinators.compose)
    compose_async = staticmethod(combinators.compose_async)

    # Conventional forms validators and their JSON Schema equivalents:
    #   min(n) -> minimum(n), max(n) -> maximum(n),
    #   required_true -> const(True), email -> format("email")

    @staticmethod
    def min(minimum: float) -> Checker:
        return keywords.min_validator(minimum)

    @staticmethod
    def max(maximum: float) -> Checker:
        return keywords.max_validator(maximum)

    @staticmethod
    def required_true(control: Any, invert: bool = False) -> Optional[ErrorReport]:
        """Run const(True) on a control."""
        return keywords.required_true_validator()(control, invert)

    @staticmethod
    def email(control: Any, invert: bool = False) -> Optional[ErrorReport]:
        """Run format('email') on a control."""
        return keywords.email_validator()(control, invert)


def validate(control: Any, checker: Optional[Checker]) -> Optional[ErrorReport]:
    """
    Run a checker and store its report in the control's error slot.

    This is the host-side step checkers never do themselves.
    """
    report = checker(control) if checker is not None else None
    set_errors(control, report)
    if report is not None:
        logger.debug(f"Validation failed: {sorted(report)}")
    return report


async def validate_async(control: Any, checker: Optional[AsyncChecker]) -> Optional[ErrorReport]:
    """Async counterpart of validate() for checkers built with compose_async."""
    report = await checker(control) if checker is not None else None
    set_errors(control, report)
    return report


def validators_for(checkers: Sequence[Optional[Checker]]) -> Optional[Checker]:
    """Combine a control's checker list the way a forms library would."""
    return combinators.compose(checkers)
