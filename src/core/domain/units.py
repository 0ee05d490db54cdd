"""
MoneyUnits — Централизованный модуль денежных единиц и ставок

Единственный допустимый способ работы с:
- Cents (целые минорные единицы валюты, никогда не float)
- Bps (базисные пункты, 0..10000 = 0%..100%)
- процентами (только для отображения и входных сигналов)

ЗАПРЕЩЕНО смешивать Cents, Bps и float без явного конвертера из этого модуля.
Все округления денежных сумм — целочисленные (floor/ceil), без float-арифметики.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Final, NewType

# =============================================================================
# ТИПЫ
# =============================================================================

Cents = NewType("Cents", int)
Bps = NewType("Bps", int)


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# 100% в базисных пунктах
BPS_DENOMINATOR: Final[int] = 10_000

# Минимальная цена, где требуется "текущая цена"
MIN_PRICE_CENTS: Final[Cents] = Cents(1)

# Шаг "психологического" ценообразования (50 тетри)
PRICE_STEP_CENTS: Final[Cents] = Cents(50)

# Символы валют для отображения
GEL_SYMBOL: Final[str] = "₾"
USD_SYMBOL: Final[str] = "$"

# Фиксированный курс отображения (GEL за 1 USD)
DEFAULT_FX_RATE_GEL_PER_USD: Final[Decimal] = Decimal("2.7")


# =============================================================================
# НОРМАЛИЗАЦИЯ
# =============================================================================


def clamp_cents(value: int) -> Cents:
    """
    Защитный floor денежной суммы: отрицательные значения → 0.

    Это нормализация, а не ошибка.
    """
    return Cents(max(0, int(value)))


def clamp_bps(value: int) -> Bps:
    """
    Ограничение ставки диапазоном 0..10000 bps.

    Args:
        value: Ставка в bps (может быть отрицательной или > 100%)

    Returns:
        Ставка в [0, BPS_DENOMINATOR]
    """
    return Bps(min(BPS_DENOMINATOR, max(0, int(value))))


def floor_price(value: int) -> Cents:
    """Цена не ниже MIN_PRICE_CENTS."""
    return Cents(max(MIN_PRICE_CENTS, int(value)))


# =============================================================================
# КОНВЕРТЕРЫ
# =============================================================================


def pct_to_bps(pct: float) -> Bps:
    """
    Конверсия процента (0..100) в bps с округлением half-up.

    Examples:
        >>> pct_to_bps(18)
        1800
        >>> pct_to_bps(2.5)
        250
    """
    return Bps(int(Decimal(str(pct)).scaleb(2).quantize(Decimal(1), rounding=ROUND_HALF_UP)))


def apply_bps_floor(amount_cents: Cents, rate_bps: Bps) -> Cents:
    """
    Доля суммы по ставке с округлением вниз.

    ТОЛЬКО целочисленная арифметика: floor(amount * rate / 10000).
    Используется для комиссий, удерживаемых из заказа.
    """
    return Cents((amount_cents * rate_bps) // BPS_DENOMINATOR)


def apply_bps_ceil(amount_cents: Cents, rate_bps: Bps) -> Cents:
    """
    Доля суммы по ставке с округлением вверх.

    Используется для издержек в пессимистичных сценариях (никогда не занижает).
    """
    return Cents(-((-amount_cents * rate_bps) // BPS_DENOMINATOR))


# =============================================================================
# ОКРУГЛЕНИЕ ДО ШАГА
# =============================================================================


def round_up_to_step(value_cents: int, step_cents: Cents = PRICE_STEP_CENTS) -> Cents:
    """
    Округление вверх до ближайшего кратного шага.

    Raises:
        ValueError: Если шаг не положительный

    Examples:
        >>> round_up_to_step(1001, 50)
        1050
        >>> round_up_to_step(1000, 50)
        1000
    """
    if step_cents <= 0:
        raise ValueError(f"step_cents must be positive, got {step_cents}")
    return Cents(-(-value_cents // step_cents) * step_cents)


def round_down_to_step(value_cents: int, step_cents: Cents = PRICE_STEP_CENTS) -> Cents:
    """
    Округление вниз до ближайшего кратного шага.

    Raises:
        ValueError: Если шаг не положительный
    """
    if step_cents <= 0:
        raise ValueError(f"step_cents must be positive, got {step_cents}")
    return Cents((value_cents // step_cents) * step_cents)


# =============================================================================
# ОТОБРАЖЕНИЕ
# =============================================================================


def cents_to_decimal(amount_cents: Cents) -> Decimal:
    """Сумма в основных единицах валюты (точно, через Decimal)."""
    return Decimal(amount_cents).scaleb(-2)


def format_gel(amount_cents: Cents) -> str:
    """
    Форматирование суммы в лари: 2 знака после запятой + символ ₾.

    Examples:
        >>> format_gel(500)
        '5.00₾'
        >>> format_gel(152500)
        '1525.00₾'
    """
    return f"{cents_to_decimal(amount_cents):.2f}{GEL_SYMBOL}"


def format_usd(
    amount_cents_gel: Cents,
    fx_rate_gel_per_usd: Decimal = DEFAULT_FX_RATE_GEL_PER_USD,
) -> str:
    """
    Отображение суммы в лари как долларов по фиксированному курсу.

    Курс — только для отображения; расчёты всегда ведутся в тетри.

    Examples:
        >>> format_usd(2700)
        '$10.00'
    """
    usd = (cents_to_decimal(amount_cents_gel) / fx_rate_gel_per_usd).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return f"{USD_SYMBOL}{usd:.2f}"
