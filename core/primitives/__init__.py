"""
Till Core Primitives
=======================
Shared, engine-agnostic building blocks.

Primitives:
    money   — Decimal conversion, validation and display rounding
"""

from core.primitives.money import (
    CENT,
    HUNDRED,
    ZERO,
    format_money,
    quantize_money,
    to_decimal,
    to_non_negative,
)

__all__ = [
    "ZERO",
    "HUNDRED",
    "CENT",
    "to_decimal",
    "to_non_negative",
    "quantize_money",
    "format_money",
]
