"""
Error report shape.

A report is a plain dict keyed by keyword name, each entry a small dict of
details, e.g.::

    {"minLength": {"requiredLength": 3, "actualLength": 1,
                   "message": "Must be at least 3 characters"}}

``None`` always means valid. A report is never an empty dict.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Union

ErrorReport = Dict[str, Dict[str, Any]]

# checker(control, invert=False) -> report or None
Checker = Callable[..., Optional[ErrorReport]]
AsyncChecker = Callable[..., Union[Awaitable[Optional[ErrorReport]], Optional[ErrorReport]]]


def keyword_error(keyword: str, message: str, **details) -> ErrorReport:
    """Build a single-keyword report."""
    entry = dict(details)
    entry["message"] = message
    return {keyword: entry}


def inverted_error(keyword: str, message: str, **details) -> ErrorReport:
    """
    Report produced when an inverted check finds the value *valid*.

    Used by 'not' and 'oneOf' to explain which constraint matched when it
    should not have.
    """
    return keyword_error(keyword, f"Must not satisfy: {message}", inverted=True, **details)


def _merge_into(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if key not in target:
            target[key] = value
        elif isinstance(target[key], dict) and isinstance(value, dict):
            merged = dict(target[key])
            _merge_into(merged, value)
            target[key] = merged
        # Earlier entries win on conflicting leaves


def merge_errors(*reports: Optional[ErrorReport]) -> Optional[ErrorReport]:
    """
    Union several reports into one.

    None entries are skipped. Keys from earlier reports are never overwritten;
    when both sides hold a dict under the same key the dicts are merged
    recursively with the same rule.

    Returns:
        The merged report, or None if nothing failed
    """
    merged: Dict[str, Any] = {}
    for report in reports:
        if report:
            _merge_into(merged, report)
    return merged or None
