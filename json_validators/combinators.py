"""
Combinators: merge several checkers into one.

    compose_all_of  - valid when every checker is valid
    compose_any_of  - valid when at least one checker is valid
    compose_one_of  - valid when exactly one checker is valid
    compose_not     - valid when the checker is invalid
    compose         - compose_all_of without the synthetic 'allOf' entry
    compose_async   - compose for checkers that may be coroutines

Combinators take the same (control, invert=False) call as keyword checkers,
so they nest freely. None entries in a checker list are ignored, and a list
with nothing left in it yields None instead of a checker.
"""

import inspect
import logging
from typing import Any, List, Optional, Sequence

from .errors import AsyncChecker, Checker, ErrorReport, inverted_error, merge_errors

logger = logging.getLogger(__name__)


def _inverted_all() -> ErrorReport:
    """Fallback when inverted branches give no report of their own."""
    return inverted_error("compose", "all of the listed constraints")


def _present(checkers: Optional[Sequence[Optional[Checker]]]) -> List[Checker]:
    if not checkers:
        return []
    return [checker for checker in checkers if checker is not None]


def _run_all(control: Any, checkers: List[Checker], invert: bool = False) -> List[Optional[ErrorReport]]:
    return [checker(control, invert) for checker in checkers]


def compose_all_of(checkers: Sequence[Optional[Checker]]) -> Optional[Checker]:
    """
    Combine checkers so that all of them must pass.

    Returns:
        Checker whose report is the union of every failing report plus an
        'allOf' entry, or None if no checkers were given
    """
    present = _present(checkers)
    if not present:
        return None

    def check_all_of(control, invert=False):
        failures = [r for r in _run_all(control, present) if r is not None]
        is_valid = not failures
        if is_valid != invert:
            return None
        if invert:
            return merge_errors(
                *_run_all(control, present, invert=True),
                {"allOf": {"inverted": True,
                           "message": "Must not satisfy all of the listed constraints"}},
            )
        return merge_errors(
            *failures,
            {"allOf": {"failedCount": len(failures), "totalBranches": len(present),
                       "message": "Must satisfy all of the listed constraints"}},
        )

    return check_all_of


def compose_any_of(checkers: Sequence[Optional[Checker]]) -> Optional[Checker]:
    """
    Combine checkers so that at least one of them must pass.

    Returns:
        Checker whose report unions every branch report plus an 'anyOf'
        entry, or None if no checkers were given
    """
    present = _present(checkers)
    if not present:
        return None

    def check_any_of(control, invert=False):
        reports = _run_all(control, present)
        failures = [r for r in reports if r is not None]
        is_valid = len(failures) < len(present)
        if is_valid != invert:
            return None
        if invert:
            return merge_errors(
                *_run_all(control, present, invert=True),
                {"anyOf": {"inverted": True,
                           "message": "Must not satisfy any of the listed constraints"}},
            )
        return merge_errors(
            *failures,
            {"anyOf": {"validCount": 0, "totalBranches": len(present),
                       "message": "Must satisfy at least one of the listed constraints"}},
        )

    return check_any_of


def compose_one_of(checkers: Sequence[Optional[Checker]]) -> Optional[Checker]:
    """
    Combine checkers so that exactly one of them must pass.

    The report carries the failing branches' reports, the reports of valid
    branches run inverted (explaining what they matched), and a 'oneOf'
    entry listing how many and which branches passed.
    """
    present = _present(checkers)
    if not present:
        return None

    def check_one_of(control, invert=False):
        reports = _run_all(control, present)
        valid_branches = [i for i, report in enumerate(reports) if report is None]
        is_valid = len(valid_branches) == 1
        if is_valid != invert:
            return None
        matched = [present[i](control, True) for i in valid_branches]
        return merge_errors(
            *[r for r in reports if r is not None],
            *matched,
            {"oneOf": {
                "validCount": len(valid_branches),
                "validBranches": valid_branches,
                "totalBranches": len(present),
                "inverted": invert,
                "message": f"{len(valid_branches)} of {len(present)} oneOf branches valid",
            }},
        )

    return check_one_of


def compose_not(checker: Optional[Checker]) -> Optional[Checker]:
    """
    Invert a checker.

    compose_not(compose_not(checker)) has the same validity as checker, but
    its reports are harder to read, so avoid double negation where possible.
    """
    if checker is None:
        return None

    def check_not(control, invert=False):
        negated = checker(control, not invert)
        if negated is None:
            return None
        message = (
            "Must satisfy the negated constraint" if invert
            else "Must not satisfy the negated constraint"
        )
        return {"not": {"message": message, "negatedErrors": negated}}

    return check_not


def compose(checkers: Sequence[Optional[Checker]]) -> Optional[Checker]:
    """
    Forms-library style combination: all checkers must pass.

    Same logic as compose_all_of; the report is just the union of the
    failing reports, without an 'allOf' entry.
    """
    present = _present(checkers)
    if not present:
        return None

    def check_composed(control, invert=False):
        failures = [r for r in _run_all(control, present) if r is not None]
        is_valid = not failures
        if is_valid != invert:
            return None
        if invert:
            return merge_errors(*_run_all(control, present, invert=True)) or _inverted_all()
        return merge_errors(*failures)

    return check_composed


async def _resolve(result):
    if inspect.isawaitable(result):
        return await result
    return result


def compose_async(checkers: Sequence[Optional[AsyncChecker]]) -> Optional[AsyncChecker]:
    """
    Combine asynchronous checkers so that all of them must pass.

    Checkers are awaited one at a time in list order and none is skipped
    after a failure, so the report holds every error. Plain synchronous
    checkers may be mixed in. Each checker runs once per call; an inverted
    report is built from the synchronous checkers only.

    Returns:
        Coroutine function (control, invert=False) -> report or None, or
        None if no checkers were given
    """
    present = _present(checkers)
    if not present:
        return None

    async def check_async(control, invert=False):
        reports = []
        synchronous = []
        for checker in present:
            result = checker(control)
            if not inspect.isawaitable(result):
                synchronous.append(checker)
            reports.append(await _resolve(result))
        failures = [r for r in reports if r is not None]
        is_valid = not failures
        logger.debug(f"Async validation finished: {len(failures)} of {len(present)} checkers failed")
        if is_valid != invert:
            return None
        if invert:
            # Async checkers are never awaited twice; only sync ones explain a match
            inverted = [checker(control, True) for checker in synchronous]
            return merge_errors(*inverted) or _inverted_all()
        return merge_errors(*failures)

    return check_async
