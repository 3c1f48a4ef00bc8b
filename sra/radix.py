"""Boundary integer strings: ``0x``-prefixed hex or plain decimal."""
from __future__ import annotations

import re
from typing import Tuple

from sra.errors import MalformedRadixPrefix, UnsupportedRadix

__all__ = [
    "HEX_PREFIX",
    "SUPPORTED_RADICES",
    "check_radix",
    "parse_int",
    "parse_int_in",
    "format_int",
]

HEX_PREFIX = "0x"
SUPPORTED_RADICES = (10, 16)

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
_DEC_DIGITS = re.compile(r"[0-9]+")


def check_radix(radix: int) -> int:
    if radix not in SUPPORTED_RADICES:
        raise UnsupportedRadix(f"Unsupported radix {radix!r}; use 10 or 16")
    return radix


def parse_int(value: str, *, field: str = "value") -> Tuple[int, int]:
    """Parse *value* and return ``(integer, radix)``.

    A leading ``0x`` (any case) selects base 16, otherwise base 10. Signs,
    underscores and empty digit strings are rejected even though ``int()``
    would accept some of them.
    """

    if not isinstance(value, str):
        raise MalformedRadixPrefix(f"{field} must be a string, got {type(value).__name__}")
    text = value.strip()
    if text[:2].lower() == HEX_PREFIX:
        digits, radix, pattern = text[2:], 16, _HEX_DIGITS
    else:
        digits, radix, pattern = text, 10, _DEC_DIGITS
    if not pattern.fullmatch(digits):
        raise MalformedRadixPrefix(f"Invalid base-{radix} integer for {field}: {value!r}")
    return int(digits, radix), radix


def parse_int_in(value: str, radix: int, *, field: str = "value") -> int:
    """Parse *value*, requiring it to use the same prefix convention as *radix*."""

    number, found = parse_int(value, field=field)
    if found != radix:
        raise MalformedRadixPrefix(
            f"{field} is base {found} but base {radix} was expected"
        )
    return number


def format_int(value: int, radix: int = 16) -> str:
    check_radix(radix)
    if value < 0:
        raise MalformedRadixPrefix("Cannot format negative integers")
    if radix == 16:
        return f"{HEX_PREFIX}{value:x}"
    return str(value)
