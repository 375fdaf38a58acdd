"""Checked scaled-integer arithmetic shared by the vesting and staking engines.

Every function is stateless and operates on plain Python ints. Python ints never
wrap, so "overflow" here means leaving the declared integer domain of the value
being produced (u64 timestamps, i128 amounts, u256 intermediate products). Any
such excursion raises ``ArithmeticOverflow`` instead of silently growing.

Rounding is explicit: division uses ``//`` (floor toward -inf), which for the
non-negative operands used here is truncation.
"""

from __future__ import annotations

from .errors import ArithmeticOverflow

# Domain constants
PRECISION: int = 1_000_000_000_000  # 1e12 reward-per-share scale
U64_MAX: int = (1 << 64) - 1
I128_MIN: int = -(1 << 127)
I128_MAX: int = (1 << 127) - 1
U256_MAX: int = (1 << 256) - 1  # width of a multiply-then-divide intermediate


def _require_in_range(value: int, lo: int, hi: int, op: str) -> int:
    if value < lo or value > hi:
        raise ArithmeticOverflow(f"{op}: result {value} outside [{lo}, {hi}]")
    return value


def checked_add(a: int, b: int, *, lo: int = I128_MIN, hi: int = I128_MAX) -> int:
    return _require_in_range(a + b, lo, hi, "add")


def checked_sub(a: int, b: int, *, lo: int = I128_MIN, hi: int = I128_MAX) -> int:
    return _require_in_range(a - b, lo, hi, "sub")


def checked_mul(a: int, b: int, *, lo: int = I128_MIN, hi: int = I128_MAX) -> int:
    return _require_in_range(a * b, lo, hi, "mul")


def mul_div(a: int, b: int, c: int, *, hi: int = I128_MAX) -> int:
    """``floor(a * b / c)`` with the product formed before the division.

    The exact product must fit in ``U256_MAX`` and the quotient in ``hi``.
    Operands are non-negative quantities (amounts, durations, scaled shares).

    Raises:
        ValueError: a negative operand.
        ArithmeticOverflow: ``c == 0``, product or quotient out of range.
    """
    if a < 0 or b < 0 or c < 0:
        raise ValueError(f"mul_div operands must be non-negative: {a}, {b}, {c}")
    if c == 0:
        raise ArithmeticOverflow("mul_div: zero divisor")
    product = a * b
    if product > U256_MAX:
        raise ArithmeticOverflow("mul_div: intermediate product exceeds u256")
    return _require_in_range(product // c, 0, hi, "mul_div")
