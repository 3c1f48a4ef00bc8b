"""Typed failures raised by the SRA engine."""
from __future__ import annotations

__all__ = [
    "SRAError",
    "InvalidPrime",
    "NoModularInverse",
    "MalformedRadixPrefix",
    "UnsupportedRadix",
    "NonTerminatingSearch",
    "SearchCancelled",
    "ValueOutOfRange",
    "InvalidParameter",
    "UnknownMethod",
]


class SRAError(ValueError):
    """Base class for every error the engine reports to a caller."""


class InvalidPrime(SRAError):
    """Raised when a value supplied as a prime fails verification."""


class NoModularInverse(SRAError):
    """Raised when ``gcd(a, m) != 1`` so no inverse exists."""


class MalformedRadixPrefix(SRAError):
    """Raised when a boundary string is not a valid 0x-hex or decimal integer."""


class UnsupportedRadix(MalformedRadixPrefix):
    """Raised when output is requested in a radix other than 10 or 16."""


class NonTerminatingSearch(SRAError):
    """Raised when a search cannot (or did not) finish within its bound."""


class SearchCancelled(SRAError):
    """Raised when a caller cancels a running search."""


class ValueOutOfRange(SRAError):
    """Raised when a transform input is not in ``[0, prime)``."""


class InvalidParameter(SRAError):
    """Raised for structurally wrong parameters (missing, negative, wrong type)."""


class UnknownMethod(SRAError):
    """Raised by the worker for a method name it does not dispatch."""
