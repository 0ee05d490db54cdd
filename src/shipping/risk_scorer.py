"""
Shipping Risk Scorer — скоринг риска доставки

Риск (0-100, 100 = максимальный) складывается из трёх независимых вкладов,
каждый ограничен своим поддиапазоном:

1. Срок доставки: дни сверх базовых 7 дней (до 30 баллов, буфер до 600 bps)
2. Вероятность задержки (до 25 баллов)
3. Возвраты: превышение базовых 5% (до 45 баллов) + ступенчатый штраф
   при превышении > 10% (+10) и > 15% (+30)

Влияние на конверсию — со знаком:
- медленная доставка, задержки и возвраты снижают конверсию
- доставка быстрее 7 дней и возвраты ниже базы повышают её
  (1-дневная надёжная доставка даёт положительный эффект)

Буфер маржи в 0..10000 bps и не ниже минимума уровня риска:
LOW 0-20 → 0, MEDIUM 20-40 → 50, MEDIUM_HIGH 40-70 → 200, HIGH 70-100 → 500 bps.
"""

import logging
from dataclasses import dataclass
from typing import Final, Sequence

from src.core.domain.shipping import (
    ProductType,
    RiskTier,
    ShippingRiskFactors,
    ShippingRiskScore,
    ShippingStrategy,
)
from src.core.domain.units import BPS_DENOMINATOR, Bps, Cents, clamp_bps, clamp_cents
from src.core.math.numerical_safeguards import ceil_div, clamp, sanitize_float

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

RISK_SCORE_MIN: Final[int] = 0
RISK_SCORE_MAX: Final[int] = 100

TIER_RECOMMENDATIONS: Final[dict[RiskTier, str]] = {
    RiskTier.LOW: "Low risk: Shipping is a competitive advantage. Safe to operate at lower margins.",
    RiskTier.MEDIUM: (
        "Medium risk: Acceptable for most products. Monitor delivery performance. "
        "Consider 50-200 bps margin buffer."
    ),
    RiskTier.MEDIUM_HIGH: (
        "Medium-high risk: Add extra margin buffer (200-500 bps) and monitor refund rates. "
        "Consider premium shipping options."
    ),
    RiskTier.HIGH: "High risk: Consider switching carriers or adjusting product strategy (higher margin target).",
}

# Перевозчики по (категория, срок в днях, не более 7)
CARRIER_RECOMMENDATIONS: Final[dict[tuple[ProductType, int], str]] = {
    (ProductType.STANDARD, 5): "Express Ground (2-3 days, ₾3-5 per unit)",
    (ProductType.STANDARD, 7): "Standard Ground (4-7 days, ₾1-2 per unit)",
    (ProductType.FRAGILE, 3): "Premium Express (1-2 days, ₾8-12 per unit, fragile-safe packaging)",
    (ProductType.PERISHABLE, 1): "Overnight Express (1 day, ₾15-20 per unit, temperature-controlled)",
}
DEFAULT_CARRIER: Final[str] = "Standard Ground (default)"

# Оценка стоимости доставки по максимальному сроку: (срок не более, cents)
_SHIPPING_COST_BY_DAYS: Final[tuple[tuple[float, int], ...]] = (
    (2.0, 800),
    (5.0, 400),
)
_DEFAULT_SHIPPING_COST_CENTS: Final[int] = 200


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class ShippingRiskConfig:
    """Конфигурация скоринга риска доставки."""

    # Базовые уровни
    baseline_delivery_days: float = 7.0
    baseline_refund_rate_pct: float = 5.0

    # Срок доставки
    delivery_points_per_day: float = 5.0
    delivery_points_cap: float = 30.0
    delivery_conversion_per_day: float = 1.0
    delivery_conversion_cap: float = 15.0
    fast_delivery_conversion_per_day: float = 2.0
    fast_delivery_conversion_cap: float = 12.0
    delivery_buffer_bps_per_day: float = 100.0
    delivery_buffer_bps_cap: float = 600.0

    # Вероятность задержки
    delay_points_scale: float = 20.0
    delay_points_cap: float = 25.0
    delay_conversion_scale: float = 5.0
    delay_conversion_cap: float = 10.0
    delay_buffer_bps_scale: float = 200.0
    delay_buffer_bps_cap: float = 500.0

    # Возвраты
    refund_points_per_pct: float = 3.0
    refund_points_cap: float = 45.0
    low_refund_conversion_per_pct: float = 0.5
    low_refund_conversion_cap: float = 2.5

    # Границы уровней риска
    medium_tier_score: int = 20
    medium_high_tier_score: int = 40
    high_tier_score: int = 70


# Ступени превышения возвратов: (порог превышения %, баллы риска, падение конверсии %, буфер bps)
# Проверяются сверху вниз, срабатывает первая (штрафы не суммируются)
_REFUND_STEPS: Final[tuple[tuple[float, float, float, int], ...]] = (
    (15.0, 30.0, 20.0, 2000),
    (10.0, 10.0, 10.0, 1000),
    (5.0, 0.0, 5.0, 500),
)

# Минимальный буфер маржи по уровню риска (bps)
_TIER_BUFFER_FLOOR_BPS: Final[dict[RiskTier, int]] = {
    RiskTier.LOW: 0,
    RiskTier.MEDIUM: 50,
    RiskTier.MEDIUM_HIGH: 200,
    RiskTier.HIGH: 500,
}


# =============================================================================
# SCORING
# =============================================================================


def risk_tier_for_score(risk_score: int, config: ShippingRiskConfig | None = None) -> RiskTier:
    """Уровень риска по баллу."""
    cfg = config or ShippingRiskConfig()
    if risk_score >= cfg.high_tier_score:
        return RiskTier.HIGH
    if risk_score >= cfg.medium_high_tier_score:
        return RiskTier.MEDIUM_HIGH
    if risk_score >= cfg.medium_tier_score:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def compute_shipping_risk_score(
    factors: ShippingRiskFactors,
    config: ShippingRiskConfig | None = None,
) -> ShippingRiskScore:
    """
    Скоринг риска доставки.

    Входные сигналы нормализуются: NaN/Inf → 0, отрицательные → 0,
    delay_probability ограничивается 0..1. Каждый вклад ограничен сверху,
    поэтому сколь угодно большой срок доставки не переполняет буфер.

    Args:
        factors: Сигналы доставки
        config: Конфигурация (опционально)

    Returns:
        ShippingRiskScore (risk_score 0-100, буфер 0..10000 bps)

    Examples:
        Доставка 1 день, без задержек и возвратов:
        risk_score=0, conversion_impact=14.5, буфер 0 bps
    """
    cfg = config or ShippingRiskConfig()

    delivery_days = max(0.0, sanitize_float(factors.delivery_days_avg))
    delay_probability = clamp(sanitize_float(factors.delay_probability), 0.0, 1.0)
    refund_rate_pct = max(0.0, sanitize_float(factors.refund_rate_pct))

    risk_points = 0.0
    conversion_impact = 0.0
    buffer_bps = 0.0

    # 1. Срок доставки
    days_over = max(0.0, delivery_days - cfg.baseline_delivery_days)
    days_faster = max(0.0, cfg.baseline_delivery_days - delivery_days)
    if days_over > 0:
        risk_points += min(days_over * cfg.delivery_points_per_day, cfg.delivery_points_cap)
        conversion_impact -= min(days_over * cfg.delivery_conversion_per_day, cfg.delivery_conversion_cap)
        buffer_bps += min(days_over * cfg.delivery_buffer_bps_per_day, cfg.delivery_buffer_bps_cap)
    elif days_faster > 0:
        conversion_impact += min(
            days_faster * cfg.fast_delivery_conversion_per_day,
            cfg.fast_delivery_conversion_cap,
        )

    # 2. Вероятность задержки
    risk_points += min(delay_probability * cfg.delay_points_scale, cfg.delay_points_cap)
    conversion_impact -= min(delay_probability * cfg.delay_conversion_scale, cfg.delay_conversion_cap)
    buffer_bps += min(delay_probability * cfg.delay_buffer_bps_scale, cfg.delay_buffer_bps_cap)

    # 3. Возвраты
    excess_refund_pct = max(0.0, refund_rate_pct - cfg.baseline_refund_rate_pct)
    risk_points += min(excess_refund_pct * cfg.refund_points_per_pct, cfg.refund_points_cap)
    for threshold, step_points, step_conversion, step_buffer in _REFUND_STEPS:
        if excess_refund_pct > threshold:
            risk_points += step_points
            conversion_impact -= step_conversion
            buffer_bps += step_buffer
            break

    if refund_rate_pct < cfg.baseline_refund_rate_pct:
        conversion_impact += min(
            (cfg.baseline_refund_rate_pct - refund_rate_pct) * cfg.low_refund_conversion_per_pct,
            cfg.low_refund_conversion_cap,
        )

    risk_score = int(round(clamp(risk_points, RISK_SCORE_MIN, RISK_SCORE_MAX)))
    tier = risk_tier_for_score(risk_score, cfg)
    buffer_bps = sanitize_float(clamp(buffer_bps, 0.0, float(BPS_DENOMINATOR)))
    margin_buffer_bps = clamp_bps(max(int(round(buffer_bps)), _TIER_BUFFER_FLOOR_BPS[tier]))

    return ShippingRiskScore(
        risk_score=risk_score,
        conversion_impact=round(conversion_impact, 1),
        recommended_margin_additional_bps=margin_buffer_bps,
        recommendation=TIER_RECOMMENDATIONS[tier],
        risk_tier=tier,
    )


# =============================================================================
# CARRIERS
# =============================================================================


def carrier_reliability_score(on_time_rate: float, complaint_rate: float, refund_rate: float) -> int:
    """
    Надёжность перевозчика (0-100, выше — надёжнее).

    Веса: вовремя 50%, жалобы 30%, возвраты 20% (возвраты нормируются на 10%).

    Args:
        on_time_rate: Доля доставок вовремя (0..1)
        complaint_rate: Доля жалоб (0..1)
        refund_rate: Доля возвратов (0..1)

    Examples:
        >>> carrier_reliability_score(1.0, 0.0, 0.0)
        100
    """
    on_time = clamp(sanitize_float(on_time_rate), 0.0, 1.0)
    complaints = clamp(sanitize_float(complaint_rate), 0.0, 1.0)
    refunds = clamp(sanitize_float(refund_rate), 0.0, 0.1)

    score = on_time * 50 + (1 - complaints) * 30 + (1 - refunds) * 20
    return int(round(score))


def recommend_carrier(product_type: ProductType, target_delivery_days: float) -> str:
    """
    Перевозчик для категории товара и целевого срока доставки.

    Срок больше 7 дней трактуется как 7; нецелый срок округляется вниз.
    Для неизвестной комбинации возвращается стандартная наземная доставка.

    Examples:
        >>> recommend_carrier(ProductType.PERISHABLE, 1)
        'Overnight Express (1 day, ₾15-20 per unit, temperature-controlled)'
    """
    days = sanitize_float(target_delivery_days)
    key = (product_type, int(min(days, 7.0)))
    return CARRIER_RECOMMENDATIONS.get(key, DEFAULT_CARRIER)


def optimize_shipping_strategy(
    product_type: ProductType,
    target_margin_bps: Bps,
    max_delivery_days: float,
    config: ShippingRiskConfig | None = None,
) -> ShippingStrategy:
    """
    Стратегия доставки: перевозчик, оценка стоимости и риска.

    Оценка риска строится из максимального срока: вероятность задержки
    max(5%, дни / 20), доля возвратов 5% + 1% за день. Требуемая маржа —
    целевая маржа плюс буфер на риск доставки.

    Args:
        product_type: Категория товара
        target_margin_bps: Целевая маржа продавца
        max_delivery_days: Максимально допустимый срок доставки
        config: Конфигурация скоринга (опционально)

    Returns:
        ShippingStrategy
    """
    days = max(0.0, sanitize_float(max_delivery_days))

    shipping_cost = _DEFAULT_SHIPPING_COST_CENTS
    for max_days, cost_cents in _SHIPPING_COST_BY_DAYS:
        if days <= max_days:
            shipping_cost = cost_cents
            break

    score = compute_shipping_risk_score(
        ShippingRiskFactors(
            delivery_days_avg=days,
            delay_probability=max(0.05, days / 20),
            refund_rate_pct=5.0 + days,
        ),
        config,
    )
    required_margin = clamp_bps(target_margin_bps + score.recommended_margin_additional_bps)

    logger.debug(
        "Shipping strategy for %s within %g days: risk %d, required margin %d bps",
        product_type.value,
        days,
        score.risk_score,
        required_margin,
    )

    return ShippingStrategy(
        recommended_carrier=recommend_carrier(product_type, days),
        estimated_shipping_cost_cents=Cents(shipping_cost),
        estimated_risk_score=score.risk_score,
        required_margin_bps=required_margin,
    )


@dataclass(frozen=True)
class ShippingOption:
    """Вариант доставки."""

    shipping_cost_cents: Cents
    delivery_days: float


@dataclass(frozen=True)
class ShippingTradeoff:
    """Маржа и конверсия для одного варианта доставки."""

    shipping_cost_cents: Cents
    delivery_days: float
    resulting_margin_bps: int
    conversion_boost_pct: float
    recommendation: str


def shipping_margin_tradeoff(
    product_margin_bps: Bps,
    options: Sequence[ShippingOption],
    reference_price_cents: Cents = Cents(10_000),
    min_viable_margin_bps: Bps = Bps(1000),
) -> list[ShippingTradeoff]:
    """
    Сравнение вариантов доставки: стоимость против скорости.

    Стоимость доставки переводится в bps от reference_price_cents
    (округление вверх) и вычитается из маржи продукта. Каждый день быстрее
    7-дневной базы даёт +2% конверсии.

    Returns:
        Список в порядке options
    """
    reference_price = max(1, reference_price_cents)
    results: list[ShippingTradeoff] = []

    for option in options:
        cost = clamp_cents(option.shipping_cost_cents)
        cost_bps = ceil_div(cost * BPS_DENOMINATOR, reference_price)
        resulting_margin_bps = product_margin_bps - cost_bps
        conversion_boost = max(0.0, (7 - sanitize_float(option.delivery_days, fallback=7.0)) * 2)

        if resulting_margin_bps < min_viable_margin_bps:
            recommendation = "Too expensive - margin becomes unprofitable"
        elif conversion_boost > 10:
            recommendation = f"Recommended - {conversion_boost:.0f}% estimated conversion boost justifies cost"
        else:
            recommendation = "Acceptable option"

        results.append(
            ShippingTradeoff(
                shipping_cost_cents=cost,
                delivery_days=option.delivery_days,
                resulting_margin_bps=resulting_margin_bps,
                conversion_boost_pct=conversion_boost,
                recommendation=recommendation,
            )
        )

    logger.debug("Evaluated %d shipping options at margin %d bps", len(results), product_margin_bps)
    return results
