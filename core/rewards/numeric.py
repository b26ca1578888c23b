"""
Checked unsigned 64-bit arithmetic.

Python integers never overflow, so every ledger quantity is checked
explicitly against the u64 range. Results outside it raise
ArithmeticOverflow; nothing wraps and nothing saturates.
"""
from __future__ import annotations

from core.schemas.errors import ArithmeticOverflow
from core.schemas.records import U64_MAX


def require_u64(value: int, name: str = "value") -> int:
    """Return `value` unchanged if it is an int in [0, 2**64 - 1]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ArithmeticOverflow(
            f"{name} must be an integer, got {type(value).__name__}",
            details={"name": name},
        )
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflow(
            f"{name}={value} is outside the u64 range",
            details={"name": name, "value": str(value)},
        )
    return value


def checked_add(a: int, b: int) -> int:
    result = require_u64(a, "lhs") + require_u64(b, "rhs")
    if result > U64_MAX:
        raise ArithmeticOverflow(
            f"u64 addition overflow: {a} + {b}",
            details={"op": "add", "lhs": str(a), "rhs": str(b)},
        )
    return result


def checked_sub(a: int, b: int) -> int:
    result = require_u64(a, "lhs") - require_u64(b, "rhs")
    if result < 0:
        raise ArithmeticOverflow(
            f"u64 subtraction underflow: {a} - {b}",
            details={"op": "sub", "lhs": str(a), "rhs": str(b)},
        )
    return result


def checked_mul(a: int, b: int) -> int:
    result = require_u64(a, "lhs") * require_u64(b, "rhs")
    if result > U64_MAX:
        raise ArithmeticOverflow(
            f"u64 multiplication overflow: {a} * {b}",
            details={"op": "mul", "lhs": str(a), "rhs": str(b)},
        )
    return result


__all__ = [
    "require_u64",
    "checked_add",
    "checked_sub",
    "checked_mul",
]
