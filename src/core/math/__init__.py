"""
Core math modules

Численные примитивы для денежных расчётов с гарантией стабильности.
"""

from src.core.math.numerical_safeguards import (
    CURRENCY_PRECISION_DEFAULT,
    EPS_CALC,
    coerce_number,
    is_number,
    is_valid_float,
    round_currency,
    safe_divide,
    sanitize_float,
    sum_finite,
)

__all__ = [
    # Constants
    "CURRENCY_PRECISION_DEFAULT",
    "EPS_CALC",
    # NaN/Inf sanitization
    "is_number",
    "is_valid_float",
    "sanitize_float",
    "coerce_number",
    "sum_finite",
    # Safe division
    "safe_divide",
    # Rounding
    "round_currency",
]
