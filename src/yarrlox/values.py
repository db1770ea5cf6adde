"""Runtime value model.

yarrlox values are plain Python objects: `str`, `float`, `bool`, `None`
(nil) and `LoxCallable` instances. The helpers here give them the
language's semantics where Python's own would differ, most notably
equality, where Python treats `True == 1.0`.
"""

from __future__ import annotations

import math
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from yarrlox.callables import LoxCallable

Value = Union[str, float, bool, None, "LoxCallable"]


class LoxType(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NIL = "nil"
    CALLABLE = "callable"

    def __str__(self) -> str:
        return self.value


def type_of(value: Value) -> LoxType:
    # bool before float: bool is an int subclass but never a number here
    if value is None:
        return LoxType.NIL
    if isinstance(value, bool):
        return LoxType.BOOL
    if isinstance(value, float):
        return LoxType.NUMBER
    if isinstance(value, str):
        return LoxType.STRING
    return LoxType.CALLABLE


def is_truthy(value: Value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def values_equal(left: Value, right: Value) -> bool:
    """Structural equality without type coercion."""
    if type_of(left) is not type_of(right):
        return False
    return left == right


def format_number(n: float) -> str:
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    # Shortest round-trip digits in positional notation, never an exponent.
    text = format(Decimal(repr(n)), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def stringify(value: Value) -> str:
    """Render a value the way `print` shows it."""
    ty = type_of(value)
    if ty is LoxType.NIL:
        return "nil"
    if ty is LoxType.BOOL:
        return "true" if value else "false"
    if ty is LoxType.NUMBER:
        return format_number(value)  # type: ignore[arg-type]
    if ty is LoxType.STRING:
        return f'"{value}"'
    return str(value)
