"""Decimal-aware rounding shared by every calculator.

Binary floats cannot represent most decimal fractions exactly, so plain
``round(2.675, 2)`` gives ``2.67``. Values are rounded here through their
shortest decimal ``repr`` with ``ROUND_HALF_UP`` (half away from zero), which
is what an inspector reading a CMM report expects.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

DEFAULT_PRECISION = 4
MIN_PRECISION = 1
MAX_PRECISION = 6


def round_half_up(value: float, decimals: int = DEFAULT_PRECISION) -> float:
    """Round ``value`` to ``decimals`` places, ties away from zero.

    >>> round_half_up(3.145, 2)
    3.15
    >>> round_half_up(-3.145, 2)
    -3.15
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    quantum = Decimal(1).scaleb(-decimals)
    rounded = float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
    # Normalise -0.0 so results compare and print cleanly
    return rounded + 0.0


def validate_precision(precision: int) -> bool:
    """True if ``precision`` is an accepted output precision (1-6)."""
    return isinstance(precision, int) and MIN_PRECISION <= precision <= MAX_PRECISION


def format_value(value: float, decimals: int = DEFAULT_PRECISION) -> str:
    """Fixed-point string of ``value`` after half-up rounding."""
    return f"{round_half_up(value, decimals):.{decimals}f}"
