"""
Recognizers for the JSON Schema 'format' keyword.

Each entry in FORMAT_TESTS is either a compiled regex (matched against the
whole string) or a predicate taking the string. Tags missing from the table
are not errors here; the format validator decides what to do with them.
"""

import ipaddress
import re
import urllib.parse
from datetime import date, datetime, time
from typing import Callable, Dict, Pattern, Union

DATE_RE = re.compile(r"^\d\d\d\d-[0-1]\d-[0-3]\d$")
TIME_RE = re.compile(
    r"^[0-2]\d:[0-5]\d:[0-5]\d(?:\.\d+)?(?:z|[+-]\d\d:\d\d)?$", re.IGNORECASE
)
DATE_TIME_RE = re.compile(
    r"^\d\d\d\d-[0-1]\d-[0-3]\d[t\s][0-2]\d:[0-5]\d:[0-5]\d(?:\.\d+)?(?:z|[+-]\d\d:\d\d)?$",
    re.IGNORECASE,
)
EMAIL_RE = re.compile(
    r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$",
    re.IGNORECASE,
)
HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}\.?$)[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
    r"(?:\.[a-z0-9](?:[-0-9a-z]{0,61}[0-9a-z])?)*\.?$",
    re.IGNORECASE,
)
URI_RE = re.compile(r"^[a-z][a-z0-9+.-]*:/?/?[^\s]*$", re.IGNORECASE)
UUID_RE = re.compile(
    r"^(?:urn:uuid:)?[0-9a-f]{8}-(?:[0-9a-f]{4}-){3}[0-9a-f]{12}$", re.IGNORECASE
)
COLOR_RE = re.compile(
    r"^\s*(#(?:[\da-f]{3}){1,2}"
    r"|rgb\((?:\d{1,3},\s*){2}\d{1,3}\)"
    r"|rgba\((?:\d{1,3},\s*){3}\d*\.?\d+\)"
    r"|hsl\(\d{1,3}(?:,\s*\d{1,3}%){2}\)"
    r"|hsla\(\d{1,3}(?:,\s*\d{1,3}%){2},\s*\d*\.?\d+\))\s*$",
    re.IGNORECASE,
)
JSON_POINTER_RE = re.compile(
    r"^(?:/(?:[^~/]|~0|~1)*)*$"
    r"|^#(?:/(?:[a-z0-9_\-.!$&'()*+,;:=@]|%[0-9a-f]{2}|~0|~1)*)*$",
    re.IGNORECASE,
)
RELATIVE_JSON_POINTER_RE = re.compile(r"^(?:0|[1-9][0-9]*)(?:#|(?:/(?:[^~/]|~0|~1)*)*)$")

URL_SCHEMES = ("http", "https", "ftp")

FormatTest = Union[Pattern, Callable[[str], bool]]


def is_date(value: str) -> bool:
    if not DATE_RE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_date_time(value: str) -> bool:
    return bool(DATE_TIME_RE.fullmatch(value)) and is_date(value[:10])


def is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def is_ipv6(value: str) -> bool:
    try:
        ipaddress.IPv6Address(value.strip())
    except ValueError:
        return False
    return True


def is_url(value: str) -> bool:
    """Absolute http(s)/ftp URL with a valid host."""
    if any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urllib.parse.urlparse(value)
        host = parsed.hostname
        parsed.port  # raises on a malformed port
    except ValueError:
        return False
    if parsed.scheme.lower() not in URL_SCHEMES or not host:
        return False
    return bool(HOSTNAME_RE.fullmatch(host)) or is_ipv4(host) or is_ipv6(host)


def is_regex(value: str) -> bool:
    try:
        re.compile(value)
    except re.error:
        return False
    return True


FORMAT_TESTS: Dict[str, FormatTest] = {
    "date": is_date,
    "time": TIME_RE,
    "date-time": is_date_time,
    "email": EMAIL_RE,
    "hostname": HOSTNAME_RE,
    "ipv4": is_ipv4,
    "ipv6": is_ipv6,
    "uri": URI_RE,
    "url": is_url,
    "uuid": UUID_RE,
    "color": COLOR_RE,
    "json-pointer": JSON_POINTER_RE,
    "relative-json-pointer": RELATIVE_JSON_POINTER_RE,
    "regex": is_regex,
}

# Python objects accepted as already-parsed values for each temporal format
TEMPORAL_TYPES = {
    "date": (date,),
    "time": (time,),
    "date-time": (datetime,),
}


def is_known_format(name: str) -> bool:
    return name in FORMAT_TESTS


def check_format(name: str, value: str) -> bool:
    """
    Run the recognizer for a known format tag.

    Raises:
        KeyError: If the format tag is unknown
    """
    test = FORMAT_TESTS[name]
    if isinstance(test, re.Pattern):
        return test.fullmatch(value) is not None
    return bool(test(value))
