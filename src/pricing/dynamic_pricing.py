"""
Dynamic Pricing Engine — рекомендация цены по рыночным сигналам

Правила (приоритет сверху вниз, срабатывает первое):
1. Склад заполнен (inventory / max_inventory >= 0.8) → decrease (распродать остаток)
2. Товар заканчивается (inventory / max_inventory <= 0.1) → increase (нормировать остаток)
3. Конверсия ниже половины целевой (включая 0) → decrease (стимулировать спрос)
4. Конверсия выше 1.5× целевой → increase (спрос позволяет более высокую цену)
5. Сходимость маржи: половина разрыва до целевой маржи, не более 500 bps;
   разрыв меньше минимального шага → hold

Тренд спроса и сезонность масштабируют ВЕЛИЧИНУ корректировки,
но никогда не меняют её знак: знак задаёт сработавшее правило.

Новая цена всегда >= 1 цента (никогда не бросает исключение и не возвращает <= 0).
"""

import logging
import math
from dataclasses import dataclass
from typing import Final, Iterable

from src.core.domain.pricing import (
    DemandTrend,
    DynamicPriceResult,
    PriceAction,
    PricingItem,
    PricingSignals,
)
from src.core.domain.units import (
    BPS_DENOMINATOR,
    MIN_PRICE_CENTS,
    PRICE_STEP_CENTS,
    Bps,
    Cents,
    floor_price,
    round_down_to_step,
    round_up_to_step,
)
from src.core.math.margins import margin_after_price_change_bps
from src.core.math.numerical_safeguards import ceil_div, clamp, safe_divide, sanitize_float

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Типичная ценовая эластичность для e-commerce
DEFAULT_PRICE_ELASTICITY: Final[float] = -1.5

# Веса тренда спроса: (повышение, снижение)
_DEMAND_WEIGHTS: Final[dict[DemandTrend, tuple[float, float]]] = {
    DemandTrend.HIGH: (1.25, 0.5),
    DemandTrend.MEDIUM: (1.0, 1.0),
    DemandTrend.LOW: (0.75, 1.25),
}


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class DynamicPricingConfig:
    """Конфигурация динамического ценообразования."""

    # Границы корректировки (bps)
    min_adjustment_bps: int = 100
    max_adjustment_bps: int = 1500

    # Склад
    overstock_ratio: float = 0.8
    overstock_bps_per_ratio: float = 4000.0
    overstock_min_bps: int = 200
    overstock_max_bps: int = 800
    stockout_ratio: float = 0.1
    stockout_bps_per_ratio: float = 3000.0
    stockout_max_bps: int = 300

    # Конверсия (%)
    target_conversion_rate: float = 5.0
    low_conversion_min_bps: int = 300
    low_conversion_bps_per_pct: float = 100.0
    high_conversion_bps_per_pct: float = 30.0
    high_conversion_max_bps: int = 300

    # Сходимость маржи
    max_convergence_bps: int = 500

    # Сезонность
    min_seasonality: float = 0.5
    max_seasonality: float = 1.5

    # Шаг цены
    price_step_cents: Cents = PRICE_STEP_CENTS

    # Скидка относительно конкурента (bps)
    competitor_undercut_bps: Bps = Bps(500)


# =============================================================================
# ВЫБОР ПРАВИЛА
# =============================================================================


def _select_rule(
    signals: PricingSignals,
    cfg: DynamicPricingConfig,
) -> tuple[PriceAction, float, str]:
    """
    Первое сработавшее правило: (действие, базовая величина bps, причина).
    """
    conversion_rate = max(0.0, sanitize_float(signals.conversion_rate))

    if signals.max_inventory > 0:
        ratio = safe_divide(signals.inventory_level, signals.max_inventory)

        if ratio >= cfg.overstock_ratio:
            magnitude = clamp(
                (ratio - cfg.overstock_ratio) * cfg.overstock_bps_per_ratio,
                cfg.overstock_min_bps,
                cfg.overstock_max_bps,
            )
            return PriceAction.DECREASE, magnitude, f"High inventory ({ratio * 100:.0f}% of capacity)"

        if ratio <= cfg.stockout_ratio:
            magnitude = clamp(
                (cfg.stockout_ratio - ratio) * cfg.stockout_bps_per_ratio,
                cfg.min_adjustment_bps,
                cfg.stockout_max_bps,
            )
            return PriceAction.INCREASE, magnitude, f"Low inventory ({ratio * 100:.0f}% of capacity)"

    target_cr = cfg.target_conversion_rate

    if conversion_rate < target_cr / 2:
        magnitude = max(
            float(cfg.low_conversion_min_bps),
            (target_cr - conversion_rate) * cfg.low_conversion_bps_per_pct,
        )
        return (
            PriceAction.DECREASE,
            magnitude,
            f"Low conversion rate {conversion_rate:.2f}% (target: {target_cr:g}%)",
        )

    if conversion_rate > target_cr * 1.5:
        magnitude = clamp(
            (conversion_rate - target_cr) * cfg.high_conversion_bps_per_pct,
            cfg.min_adjustment_bps,
            cfg.high_conversion_max_bps,
        )
        return (
            PriceAction.INCREASE,
            magnitude,
            f"High conversion rate {conversion_rate:.2f}% (premium pricing opportunity)",
        )

    gap = signals.target_margin_bps - signals.current_margin_bps
    current_pct = signals.current_margin_bps / 100
    target_pct = signals.target_margin_bps / 100

    if abs(gap) < cfg.min_adjustment_bps:
        return PriceAction.HOLD, 0.0, f"Margin {current_pct:.1f}% is at target {target_pct:.1f}%"

    magnitude = min(abs(gap) / 2, cfg.max_convergence_bps)

    if gap > 0:
        return PriceAction.INCREASE, magnitude, f"Margin {current_pct:.1f}% below target {target_pct:.1f}%"

    if signals.demand_trend == DemandTrend.HIGH:
        return (
            PriceAction.HOLD,
            0.0,
            f"Margin {current_pct:.1f}% above target {target_pct:.1f}%, holding on high demand",
        )

    return PriceAction.DECREASE, magnitude, f"Margin {current_pct:.1f}% above target {target_pct:.1f}%"


def _weighted_magnitude(
    action: PriceAction,
    base_magnitude: float,
    signals: PricingSignals,
    cfg: DynamicPricingConfig,
) -> int:
    """Величина корректировки с учётом спроса и сезонности (всегда положительная)."""
    increase_weight, decrease_weight = _DEMAND_WEIGHTS[signals.demand_trend]
    demand_weight = increase_weight if action == PriceAction.INCREASE else decrease_weight
    seasonality = clamp(
        sanitize_float(signals.seasonality, fallback=1.0),
        cfg.min_seasonality,
        cfg.max_seasonality,
    )

    magnitude = base_magnitude * demand_weight * seasonality
    return int(round(clamp(magnitude, cfg.min_adjustment_bps, cfg.max_adjustment_bps)))


def _apply_adjustment(current_price: Cents, action: PriceAction, magnitude_bps: int, step: Cents) -> Cents:
    """
    Новая цена: ceil для повышения, floor для снижения.

    Цены от двух шагов и выше округляются до шага в направлении изменения.
    """
    if action == PriceAction.INCREASE:
        new_price = ceil_div(current_price * (BPS_DENOMINATOR + magnitude_bps), BPS_DENOMINATOR)
        if current_price >= 2 * step:
            new_price = round_up_to_step(new_price, step)
    else:
        new_price = current_price * (BPS_DENOMINATOR - magnitude_bps) // BPS_DENOMINATOR
        if current_price >= 2 * step:
            new_price = round_down_to_step(new_price, step)

    return floor_price(new_price)


def _confidence(adjustment_bps: int) -> float:
    """Уверенность 50..100: растёт с величиной корректировки."""
    return min(100.0, 50.0 + abs(adjustment_bps) / 20)


def _hold(current_price: Cents, signals: PricingSignals, reason: str) -> DynamicPriceResult:
    return DynamicPriceResult(
        new_price_cents=current_price,
        recommended_action=PriceAction.HOLD,
        adjustment_bps=0,
        expected_margin_bps=signals.current_margin_bps,
        confidence=_confidence(0),
        reason=reason,
    )


# =============================================================================
# PUBLIC API
# =============================================================================


def compute_dynamic_price(
    current_price_cents: Cents,
    signals: PricingSignals,
    min_margin_bps: int | None = None,
    config: DynamicPricingConfig | None = None,
) -> DynamicPriceResult:
    """
    Рекомендация новой цены.

    Args:
        current_price_cents: Текущая цена (< 1 поднимается до 1 цента)
        signals: Рыночные сигналы
        min_margin_bps: Нижняя граница маржи (опционально): снижение цены,
            пробивающее её, уменьшается до границы или превращается в hold
        config: Конфигурация (опционально)

    Returns:
        DynamicPriceResult, new_price_cents >= 1

    Examples:
        Склад заполнен (inventory == max_inventory) → recommended_action=decrease
    """
    cfg = config or DynamicPricingConfig()
    current_price = floor_price(current_price_cents)

    action, base_magnitude, reason = _select_rule(signals, cfg)

    if action == PriceAction.HOLD:
        logger.debug("Holding price %d: %s", current_price, reason)
        return _hold(current_price, signals, reason)

    magnitude = _weighted_magnitude(action, base_magnitude, signals, cfg)
    new_price = _apply_adjustment(current_price, action, magnitude, cfg.price_step_cents)
    expected_margin = margin_after_price_change_bps(signals.current_margin_bps, current_price, new_price)

    if action == PriceAction.DECREASE and min_margin_bps is not None and expected_margin < min_margin_bps:
        floor_limited_price = _lowest_price_for_margin(
            current_price, signals.current_margin_bps, min_margin_bps, cfg.price_step_cents
        )
        if floor_limited_price is None or floor_limited_price >= current_price:
            hold_reason = f"Maintaining current price to respect {min_margin_bps / 100:.1f}% margin floor"
            logger.debug("Decrease blocked by margin floor at price %d", current_price)
            return _hold(current_price, signals, hold_reason)

        new_price = floor_limited_price
        magnitude = (current_price - new_price) * BPS_DENOMINATOR // current_price
        expected_margin = margin_after_price_change_bps(signals.current_margin_bps, current_price, new_price)
        reason = f"{reason}; decrease limited by {min_margin_bps / 100:.1f}% margin floor"

    adjustment_bps = magnitude if action == PriceAction.INCREASE else -magnitude

    logger.debug(
        "Price %s %d -> %d (%+d bps): %s",
        action.value,
        current_price,
        new_price,
        adjustment_bps,
        reason,
    )

    return DynamicPriceResult(
        new_price_cents=new_price,
        recommended_action=action,
        adjustment_bps=adjustment_bps,
        expected_margin_bps=expected_margin,
        confidence=_confidence(adjustment_bps),
        reason=reason,
    )


def _lowest_price_for_margin(
    current_price: Cents,
    current_margin_bps: int,
    min_margin_bps: int,
    step: Cents,
) -> Cents | None:
    """
    Минимальная цена, при которой маржа (при прежних издержках) не ниже границы.

    None если граница недостижима (>= 100%).
    """
    if min_margin_bps >= BPS_DENOMINATOR:
        return None

    costs_scaled = (BPS_DENOMINATOR - current_margin_bps) * current_price
    price = floor_price(ceil_div(costs_scaled, BPS_DENOMINATOR - min_margin_bps))
    if current_price >= 2 * step:
        price = round_up_to_step(price, step)
    return price


def estimate_conversion_after_price_change(
    current_conversion_rate: float,
    pct_price_change: float,
    elasticity: float = DEFAULT_PRICE_ELASTICITY,
) -> float:
    """
    Конверсия после изменения цены (линейная эластичность).

    new_rate = rate * (1 + elasticity * pct / 100), ограничено 0..100.
    Неограниченное изменение цены насыщает результат: при отрицательной
    эластичности бесконечный рост цены даёт 0, бесконечное снижение даёт 100.

    Examples:
        >>> estimate_conversion_after_price_change(1, 500)
        0.0
        >>> estimate_conversion_after_price_change(4.0, -10)
        4.6
    """
    rate = max(0.0, sanitize_float(current_conversion_rate))
    if rate == 0.0:
        return 0.0

    pct_change = 0.0 if math.isnan(pct_price_change) else pct_price_change
    demand_change_pct = sanitize_float(elasticity) * pct_change
    if math.isnan(demand_change_pct):
        # нулевая эластичность при бесконечном изменении цены
        demand_change_pct = 0.0

    expected = rate * (1 + demand_change_pct / 100)
    return clamp(expected, 0.0, 100.0)


def batch_compute_dynamic_prices(
    items: Iterable[PricingItem],
    min_margin_bps: int | None = None,
    config: DynamicPricingConfig | None = None,
) -> list[DynamicPriceResult]:
    """
    Пакетный расчёт: каждый элемент независим, порядок сохраняется.
    """
    return [
        compute_dynamic_price(item.current_price_cents, item.signals, min_margin_bps, config)
        for item in items
    ]


def competitive_price(
    current_price_cents: Cents,
    competitor_price_cents: Cents | None,
    cost_cents: Cents,
    min_margin_bps: int,
    config: DynamicPricingConfig | None = None,
) -> Cents:
    """
    Цена относительно конкурента.

    Если конкурент дешевле — цена на 5% ниже конкурента, но не ниже цены,
    сохраняющей min_margin_bps при издержках cost_cents, и не выше текущей.
    Если конкурент дороже или неизвестен — текущая цена.

    Examples:
        >>> competitive_price(10000, 9000, 5000, 1500)
        8550
        >>> competitive_price(10000, 9000, 8000, 1500)
        9412
    """
    cfg = config or DynamicPricingConfig()
    current_price = floor_price(current_price_cents)

    if competitor_price_cents is None or competitor_price_cents <= 0 or competitor_price_cents >= current_price:
        return current_price

    if min_margin_bps >= BPS_DENOMINATOR:
        return current_price

    undercut_price = competitor_price_cents * (BPS_DENOMINATOR - cfg.competitor_undercut_bps) // BPS_DENOMINATOR
    margin_floor_price = ceil_div(max(0, cost_cents) * BPS_DENOMINATOR, BPS_DENOMINATOR - min_margin_bps)

    return Cents(min(current_price, max(undercut_price, margin_floor_price, MIN_PRICE_CENTS)))
