"""
Numerical Safeguards — безопасная арифметика для денежных расчётов

Модуль обеспечивает численную устойчивость всех расчётов по акциям:
- Проверка "числа" для недоверенного ввода (persisted state, API ответы)
- NaN/Inf санитизация для предотвращения распространения невалидных значений
- Безопасное деление (доли, проценты) с защитой от деления на ноль
- Округление до точности валюты

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не происходит (возвращается fallback)
2. NaN/Inf никогда не пропагируют в market_value / zakat_due
3. bool никогда не считается числом (True не превращается в 1.0)
4. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Any, Final, Iterable

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для общих вычислений и сравнений
EPS_CALC: Final[float] = 1e-12

# Точность валюты по умолчанию (центы)
CURRENCY_PRECISION_DEFAULT: Final[int] = 2


# =============================================================================
# NaN/Inf САНИТИЗАЦИЯ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


def is_number(value: Any) -> bool:
    """
    Проверка "это конечное число" для недоверенного ввода.

    bool исключён явно: в Python bool — подкласс int.

    Examples:
        >>> is_number(10)
        True
        >>> is_number(True)
        False
        >>> is_number("10")
        False
        >>> is_number(float('nan'))
        False
    """
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return is_valid_float(float(value))


def sanitize_float(value: float, fallback: float = 0.0) -> float:
    """
    Санитизация float: замена NaN/Inf на fallback значение.

    Args:
        value: Исходное значение
        fallback: Значение для замены NaN/Inf (default: 0.0)

    Returns:
        value если валидное, иначе fallback

    Examples:
        >>> sanitize_float(10.0)
        10.0
        >>> sanitize_float(float('nan'))
        0.0
        >>> sanitize_float(float('-inf'), fallback=-1.0)
        -1.0
    """
    if is_valid_float(value):
        return value
    return fallback


def coerce_number(value: Any, fallback: float = 0.0) -> float:
    """
    Приведение недоверенного значения к float.

    Returns:
        float(value) если is_number(value), иначе fallback
    """
    if is_number(value):
        return float(value)
    return fallback


def sum_finite(values: Iterable[Any]) -> float:
    """
    Сумма только конечных чисел; всё остальное считается 0.

    Examples:
        >>> sum_finite([1.0, float('nan'), None, 2.5])
        3.5
    """
    return sum((coerce_number(v) for v in values), 0.0)


# =============================================================================
# БЕЗОПАСНОЕ ДЕЛЕНИЕ
# =============================================================================


def safe_divide(
    numerator: float,
    denominator: float,
    fallback: float = 0.0,
) -> float:
    """
    Безопасное деление с защитой от деления на ноль и NaN/Inf.

    ВАЖНО: Если abs(denominator) < EPS_CALC, возвращается fallback.
    Для денежных долей (yourShares / totalShares, value / total) малые
    знаменатели означают "нет данных", а не "очень большая доля".

    Args:
        numerator: Числитель
        denominator: Знаменатель
        fallback: Значение при делении на ноль (default: 0.0)

    Returns:
        Результат деления или fallback

    Examples:
        >>> safe_divide(10.0, 2.0)
        5.0
        >>> safe_divide(10.0, 0.0)
        0.0
    """
    num_clean = sanitize_float(numerator, fallback=0.0)
    denom_clean = sanitize_float(denominator, fallback=0.0)

    if abs(denom_clean) < EPS_CALC:
        return fallback

    try:
        result = num_clean / denom_clean
    except (ZeroDivisionError, FloatingPointError, OverflowError):
        return fallback

    return sanitize_float(result, fallback=fallback)


# =============================================================================
# ОКРУГЛЕНИЕ
# =============================================================================


def round_currency(value: float, precision: int = CURRENCY_PRECISION_DEFAULT) -> float:
    """
    Округление до точности валюты (round half away from zero).

    Встроенный round() использует banker's rounding (0.125 → 0.12),
    для денежных сумм нужно 0.125 → 0.13.

    Args:
        value: Значение для округления
        precision: Количество знаков после запятой (default: 2)

    Returns:
        Округлённое значение; NaN/Inf → 0.0

    Examples:
        >>> round_currency(37.5)
        37.5
        >>> round_currency(0.125)
        0.13
        >>> round_currency(-0.125)
        -0.13
    """
    if precision < 0:
        raise ValueError(f"precision must be non-negative, got {precision}")

    if not is_valid_float(value):
        return 0.0

    scale = 10 ** precision
    ratio = value * scale

    # Компенсация ошибки представления (1.005 * 100 = 100.49999...)
    ratio = round(ratio, 6)

    if ratio >= 0:
        steps = math.floor(ratio + 0.5)
    else:
        steps = math.ceil(ratio - 0.5)

    return steps / scale

