"""
Numerical Safeguards — безопасные математические примитивы

Модуль обеспечивает численную устойчивость не-денежных вычислений движка
(конверсия, риск-скоринг, сезонность, эластичность):
- Безопасное деление с защитой от деления на ноль
- NaN/Inf санитизация для входных сигналов из внешних систем
- Ограничение диапазонов (clamp)
- Целочисленное деление с округлением вверх для денежных сумм

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не происходит (возвращается fallback)
2. NaN/Inf никогда не пропагируют (заменяются на fallback)
3. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для общих вычислений
EPS_CALC: Final[float] = 1e-12


# =============================================================================
# NaN/Inf САНИТИЗАЦИЯ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли число валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение конечное
    """
    return math.isfinite(value)


def sanitize_float(value: float, fallback: float = 0.0) -> float:
    """
    Санитизация float: замена NaN/Inf на fallback значение.

    Examples:
        >>> sanitize_float(10.0)
        10.0
        >>> sanitize_float(float('nan'))
        0.0
        >>> sanitize_float(float('inf'), fallback=1.0)
        1.0
    """
    if is_valid_float(value):
        return float(value)
    return fallback


# =============================================================================
# БЕЗОПАСНОЕ ДЕЛЕНИЕ
# =============================================================================


def safe_divide(
    numerator: float,
    denominator: float,
    fallback: float = 0.0,
    eps: float = EPS_CALC,
) -> float:
    """
    Безопасное деление с защитой от деления на ноль и NaN/Inf.

    Если abs(denominator) < eps, возвращается fallback (а не огромное число):
    для отношений вида inventory / max_inventory это означает "сигнал отсутствует".

    Args:
        numerator: Числитель
        denominator: Знаменатель
        fallback: Значение при делении на ноль (default: 0.0)
        eps: Минимальный абсолютный порог для знаменателя

    Returns:
        Результат деления или fallback

    Examples:
        >>> safe_divide(10.0, 2.0)
        5.0
        >>> safe_divide(10.0, 0.0)
        0.0
        >>> safe_divide(10.0, 0.0, fallback=-1.0)
        -1.0
    """
    if eps <= 0:
        raise ValueError(f"eps must be positive, got {eps}")

    num_clean = sanitize_float(numerator)
    denom_clean = sanitize_float(denominator)

    if abs(denom_clean) < eps:
        return fallback

    return sanitize_float(num_clean / denom_clean, fallback=fallback)


def ceil_div(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с округлением вверх (без float).

    Raises:
        ValueError: Если знаменатель не положительный

    Examples:
        >>> ceil_div(7, 2)
        4
        >>> ceil_div(-7, 2)
        -3
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    return -(-numerator // denominator)


# =============================================================================
# ОГРАНИЧЕНИЕ ДИАПАЗОНА
# =============================================================================


def clamp(
    value: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    """
    Ограничение значения в заданном диапазоне.

    Examples:
        >>> clamp(5.0, 0.0, 10.0)
        5.0
        >>> clamp(-1.0, 0.0, 10.0)
        0.0
        >>> clamp(15.0, 0.0, 10.0)
        10.0
    """
    result = value

    if min_value is not None:
        result = max(result, min_value)

    if max_value is not None:
        result = min(result, max_value)

    return result
