"""Threshold comparisons used by rule predicates.

A comparison is written as an operator prefix followed by a number, e.g.
">=1440" or "<30". The operator token is the longest leading run of '>',
'<' and '=' characters; whatever follows is the value.

Numbers are parsed through a NumberType, which fixes the numeric domain
the threshold lives in (rules only use unsigned integers).
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T", int, float)

OPERATOR_CHARACTERS = frozenset("<>=")
EXPECTED_OPERATORS = "'>', '>=', '<' or '<='"

# Largest value of an unsigned 64-bit integer
MAX_UNSIGNED = 2**64 - 1

_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")
_SIGNED_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)


class ComparisonError(ValueError):
    """Base exception for comparison parse errors."""


class MalformedComparisonError(ComparisonError):
    """Operator prefix or value is missing."""


class UnknownOperatorError(ComparisonError):
    """Operator prefix is not one of >, >=, < or <=."""


class InvalidNumberError(ComparisonError):
    """Value is not a number of the expected type."""


class ComparisonOperator(Enum):
    """Supported comparison operators."""

    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="

    def __str__(self) -> str:
        return self.value


_OPERATOR_FUNCTIONS: dict[ComparisonOperator, Callable[[object, object], bool]] = {
    ComparisonOperator.GREATER_THAN: operator.gt,
    ComparisonOperator.GREATER_THAN_OR_EQUAL: operator.ge,
    ComparisonOperator.LESS_THAN: operator.lt,
    ComparisonOperator.LESS_THAN_OR_EQUAL: operator.le,
}


@dataclass(frozen=True)
class NumberType(Generic[T]):
    """Parsing strategy for one numeric domain.

    Attributes:
        name: Human readable name used in error messages.
        parse: Converts the value token, raising ValueError if it is not a
            member of the domain.
    """

    name: str
    parse: Callable[[str], T]


def _parse_unsigned(text: str) -> int:
    if not _UNSIGNED_PATTERN.fullmatch(text):
        raise ValueError(text)
    value = int(text)
    if value > MAX_UNSIGNED:
        raise ValueError(text)
    return value


def _parse_signed(text: str) -> int:
    if not _SIGNED_PATTERN.fullmatch(text):
        raise ValueError(text)
    return int(text)


def _parse_float(text: str) -> float:
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ValueError(text)
    return float(text)


UNSIGNED_INTEGER: NumberType[int] = NumberType("unsigned integer", _parse_unsigned)
SIGNED_INTEGER: NumberType[int] = NumberType("integer", _parse_signed)
FLOAT: NumberType[float] = NumberType("number", _parse_float)


@dataclass(frozen=True)
class Comparison(Generic[T]):
    """A parsed threshold comparison.

    Attributes:
        operator: How candidates are compared against the threshold.
        value: The threshold.
    """

    operator: ComparisonOperator
    value: T

    def compare(self, candidate: T) -> bool:
        """Compare candidate against the threshold (candidate OP value)."""
        return _OPERATOR_FUNCTIONS[self.operator](candidate, self.value)

    def __str__(self) -> str:
        return f"{self.operator}{self.value}"


def split_comparison(text: str) -> tuple[str, str]:
    """Split text into its operator token and value token."""
    position = 0
    while position < len(text) and text[position] in OPERATOR_CHARACTERS:
        position += 1
    return text[:position], text[position:]


def parse_comparison(
    text: str,
    number: NumberType[T] = UNSIGNED_INTEGER,  # type: ignore[assignment]
) -> Comparison[T]:
    """Parse a comparison such as ">=1440".

    Args:
        text: The comparison expression.
        number: Numeric domain of the threshold.

    Returns:
        The parsed comparison.

    Raises:
        MalformedComparisonError: If there is no operator prefix or no value.
        UnknownOperatorError: If the prefix is not a supported operator.
        InvalidNumberError: If the value is not a valid number of the domain.
    """
    prefix, value = split_comparison(text)
    if not value or not prefix:
        raise MalformedComparisonError(
            f'invalid value: string "{text}", '
            f"expected a number prefixed with {EXPECTED_OPERATORS}"
        )

    try:
        comparison_operator = ComparisonOperator(prefix)
    except ValueError:
        raise UnknownOperatorError(
            f'invalid value: prefix "{prefix}", expected prefix {EXPECTED_OPERATORS}'
        ) from None

    try:
        threshold = number.parse(value)
    except ValueError:
        raise InvalidNumberError(
            f'invalid value: string "{value}", expected a suitable {number.name}'
        ) from None

    return Comparison(operator=comparison_operator, value=threshold)
