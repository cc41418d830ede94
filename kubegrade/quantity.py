"""Kubernetes resource quantities such as ``500m``, ``256Mi`` or ``1e3``."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

_QUANTITY_RE = re.compile(
    r"(?P<number>[+-]?(?:\d+\.?\d*|\.\d+))"
    r"(?P<suffix>[eE][+-]?\d+|Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E)?"
)

_BINARY_SUFFIXES = {
    "Ki": 2**10,
    "Mi": 2**20,
    "Gi": 2**30,
    "Ti": 2**40,
    "Pi": 2**50,
    "Ei": 2**60,
}

_DECIMAL_SUFFIXES = {
    "n": Fraction(1, 10**9),
    "u": Fraction(1, 10**6),
    "m": Fraction(1, 10**3),
    "k": Fraction(10**3),
    "M": Fraction(10**6),
    "G": Fraction(10**9),
    "T": Fraction(10**12),
    "P": Fraction(10**15),
    "E": Fraction(10**18),
}


@dataclass(frozen=True)
class Quantity:
    """An exact resource amount; two quantities are equal when their values are."""

    value: Fraction = Fraction(0)
    text: str = field(default="0", compare=False)

    def is_zero(self) -> bool:
        """True if the amount is zero."""
        return self.value == 0

    def __str__(self) -> str:
        return self.text


def _multiplier(suffix: str | None) -> Fraction:
    if not suffix:
        return Fraction(1)
    if suffix in _BINARY_SUFFIXES:
        return Fraction(_BINARY_SUFFIXES[suffix])
    if suffix in _DECIMAL_SUFFIXES:
        return _DECIMAL_SUFFIXES[suffix]
    return Fraction(10) ** int(suffix[1:])


def parse_quantity(text: Any) -> Quantity:
    """Parse a quantity string (or a plain number) into a :class:`Quantity`.

    Raises :class:`ValueError` if the text is not a valid quantity.
    """
    if isinstance(text, bool):
        raise ValueError(f"{text!r} is not a valid quantity")
    if isinstance(text, (int, float)):
        text = str(text)
    if not isinstance(text, str):
        raise ValueError(f"{text!r} is not a valid quantity")
    stripped = text.strip()
    match = _QUANTITY_RE.fullmatch(stripped)
    if match is None:
        raise ValueError(f"{text!r} is not a valid quantity")
    try:
        number = Fraction(Decimal(match.group("number")))
    except InvalidOperation as exc:
        raise ValueError(f"{text!r} is not a valid quantity") from exc
    return Quantity(number * _multiplier(match.group("suffix")), stripped)