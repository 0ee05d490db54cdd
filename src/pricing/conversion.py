"""
Conversion Funnel — анализ воронки конверсии

Воронка: показы → клики → корзина → покупки.
Узкое место определяет тип рекомендаций и параметры A/B теста.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from pydantic import BaseModel, Field

from src.core.domain.units import Cents, clamp_cents
from src.core.math.numerical_safeguards import safe_divide

# =============================================================================
# CONSTANTS
# =============================================================================

# Пороговые значения воронки (%)
MIN_HEALTHY_CTR_PCT: Final[float] = 3.0
MIN_HEALTHY_CLICK_TO_CART_PCT: Final[float] = 20.0
MIN_HEALTHY_CART_TO_ORDER_PCT: Final[float] = 50.0


class FunnelBottleneck(str, Enum):
    """Этап воронки, теряющий больше всего покупателей"""

    AWARENESS = "awareness"  # мало кликов
    INTEREST = "interest"  # клики без добавления в корзину
    DECISION = "decision"  # корзина без покупки


class ConversionHealth(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class SuggestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_PRIORITY_ORDER: Final[dict[SuggestionPriority, int]] = {
    SuggestionPriority.HIGH: 0,
    SuggestionPriority.MEDIUM: 1,
    SuggestionPriority.LOW: 2,
}

# Параметры A/B теста по узкому месту: (длительность, дни; минимум конверсий)
_AB_TEST_PLANS: Final[dict[FunnelBottleneck, tuple[int, int]]] = {
    FunnelBottleneck.AWARENESS: (7, 50),
    FunnelBottleneck.INTEREST: (10, 75),
    FunnelBottleneck.DECISION: (14, 100),
}


# =============================================================================
# MODELS
# =============================================================================


class ConversionMetrics(BaseModel):
    """Счётчики воронки за период."""

    impressions: int = Field(0, ge=0, description="Показы")
    clicks: int = Field(0, ge=0, description="Клики")
    cart_adds: int = Field(0, ge=0, description="Добавления в корзину")
    purchases: int = Field(0, ge=0, description="Покупки")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class ConversionSuggestion:
    """Рекомендация по оптимизации конверсии."""

    type: str  # title / images / description / price / affiliate
    priority: SuggestionPriority
    expected_impact_pct: float  # ожидаемый прирост конверсии (%)
    action: str


@dataclass(frozen=True)
class ConversionAnalysis:
    """Результат анализа воронки (все ставки в %)."""

    conversion_rate: float
    click_through_rate: float
    click_to_cart_rate: float
    cart_to_order_rate: float
    bottleneck: FunnelBottleneck
    suggestions: list[ConversionSuggestion] = field(default_factory=list)


@dataclass(frozen=True)
class ABTestPlan:
    test: str
    duration_days: int
    min_conversions: int


# =============================================================================
# ANALYSIS
# =============================================================================


def _rate_pct(numerator: int, denominator: int) -> float:
    return safe_divide(numerator * 100.0, denominator)


def analyze_conversion_funnel(metrics: ConversionMetrics) -> ConversionAnalysis:
    """
    Анализ воронки и поиск узкого места.

    Пока CTR ниже 3%, узкое место — awareness. При нормальном CTR:
    click→cart < 20% → interest, иначе cart→order < 50% → decision.

    Args:
        metrics: Счётчики воронки (нулевые знаменатели дают ставку 0)

    Returns:
        ConversionAnalysis с рекомендациями, отсортированными по приоритету
        и ожидаемому эффекту
    """
    conversion_rate = _rate_pct(metrics.purchases, metrics.impressions)
    click_through_rate = _rate_pct(metrics.clicks, metrics.impressions)
    click_to_cart_rate = _rate_pct(metrics.cart_adds, metrics.clicks)
    cart_to_order_rate = _rate_pct(metrics.purchases, metrics.cart_adds)

    bottleneck = FunnelBottleneck.AWARENESS
    if click_through_rate >= MIN_HEALTHY_CTR_PCT:
        if click_to_cart_rate < MIN_HEALTHY_CLICK_TO_CART_PCT:
            bottleneck = FunnelBottleneck.INTEREST
        elif cart_to_order_rate < MIN_HEALTHY_CART_TO_ORDER_PCT:
            bottleneck = FunnelBottleneck.DECISION

    suggestions = _suggestions_for(
        bottleneck,
        click_through_rate=click_through_rate,
        click_to_cart_rate=click_to_cart_rate,
        cart_to_order_rate=cart_to_order_rate,
    )

    return ConversionAnalysis(
        conversion_rate=conversion_rate,
        click_through_rate=click_through_rate,
        click_to_cart_rate=click_to_cart_rate,
        cart_to_order_rate=cart_to_order_rate,
        bottleneck=bottleneck,
        suggestions=suggestions,
    )


def _suggestions_for(
    bottleneck: FunnelBottleneck,
    click_through_rate: float,
    click_to_cart_rate: float,
    cart_to_order_rate: float,
) -> list[ConversionSuggestion]:
    high, medium = SuggestionPriority.HIGH, SuggestionPriority.MEDIUM
    suggestions: list[ConversionSuggestion] = []

    if bottleneck == FunnelBottleneck.AWARENESS:
        suggestions.append(ConversionSuggestion(
            "title", high, 25,
            'Improve product title with keywords and power words ("Best-selling", "Limited stock")',
        ))
        suggestions.append(ConversionSuggestion(
            "images", high, 30,
            "Add high-quality lifestyle images showing product in use; add comparison to competitor products",
        ))
        if click_through_rate < 2:
            suggestions.append(ConversionSuggestion(
                "description", medium, 15,
                "Add compelling benefits summary and unique selling points above the fold",
            ))

    elif bottleneck == FunnelBottleneck.INTEREST:
        suggestions.append(ConversionSuggestion(
            "price", high, 20,
            'Test 5-10% price reduction or offer "Free shipping on orders over ₾50"',
        ))
        suggestions.append(ConversionSuggestion(
            "images", high, 18,
            "Add more detailed product images (close-ups, size reference, material quality)",
        ))
        suggestions.append(ConversionSuggestion(
            "description", medium, 12,
            "Add customer reviews and FAQ section addressing common questions",
        ))
        if click_to_cart_rate < 5:
            suggestions.append(ConversionSuggestion(
                "affiliate", medium, 15,
                "Enable affiliate bonuses (5-10% extra commission for promoters)",
            ))

    else:
        suggestions.append(ConversionSuggestion(
            "price", high, 25,
            'Reduce price by 3-5% or add bundle discount "Buy 2+ save 10%"',
        ))
        suggestions.append(ConversionSuggestion(
            "affiliate", high, 20,
            "Boost affiliate commission by +5% to drive promoter activity and urgency",
        ))
        if cart_to_order_rate < 30:
            suggestions.append(ConversionSuggestion(
                "description", medium, 10,
                'Add trust signals: "Money-back guarantee", "Shipped within 24 hours", "10K+ sold"',
            ))

    return sorted(suggestions, key=lambda s: (_PRIORITY_ORDER[s.priority], -s.expected_impact_pct))


def diagnose_conversion_health(metrics: ConversionMetrics) -> ConversionHealth:
    """Оценка воронки по общей конверсии: > 10% / > 5% / > 2% / ниже."""
    conversion_rate = analyze_conversion_funnel(metrics).conversion_rate

    if conversion_rate > 10:
        return ConversionHealth.EXCELLENT
    if conversion_rate > 5:
        return ConversionHealth.GOOD
    if conversion_rate > 2:
        return ConversionHealth.FAIR
    return ConversionHealth.POOR


def estimate_revenue_impact(
    base_revenue_cents: Cents,
    metrics: ConversionMetrics,
    suggestion: ConversionSuggestion,
) -> Cents:
    """
    Ожидаемая выручка после применения рекомендации.

    Показы не меняются, конверсия растёт на expected_impact_pct,
    средний чек = base_revenue / max(purchases, 1).

    Returns:
        Выручка в центах (floor)
    """
    base_revenue = clamp_cents(base_revenue_cents)
    conversion_rate = _rate_pct(metrics.purchases, metrics.impressions)
    improvement_pct = conversion_rate * suggestion.expected_impact_pct / 100
    additional_purchases = metrics.impressions * improvement_pct / 100
    avg_order_value = base_revenue / max(metrics.purchases, 1)

    return Cents(base_revenue + int(additional_purchases * avg_order_value))


def recommend_ab_test(analysis: ConversionAnalysis) -> ABTestPlan:
    """Параметры A/B теста: чем глубже узкое место, тем дольше тест."""
    duration_days, min_conversions = _AB_TEST_PLANS[analysis.bottleneck]
    return ABTestPlan(
        test=f"A/B test for {analysis.bottleneck.value} bottleneck",
        duration_days=duration_days,
        min_conversions=min_conversions,
    )
