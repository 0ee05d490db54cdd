"""
Pricing — сигналы и результаты динамического ценообразования

Immutable Pydantic модели для входных сигналов и frozen dataclass для результата.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from src.core.domain.units import Bps, Cents

# =============================================================================
# ENUMS
# =============================================================================


class DemandTrend(str, Enum):
    """Тренд спроса"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PriceAction(str, Enum):
    """Рекомендованное действие с ценой"""

    INCREASE = "increase"
    DECREASE = "decrease"
    HOLD = "hold"


class PricingMode(str, Enum):
    """Стратегический режим ценообразования магазина"""

    GROWTH = "growth"  # доля рынка: конкурентная цена
    PROFIT = "profit"  # премиальная цена
    HYBRID = "hybrid"


class StockLevel(str, Enum):
    """Уровень складского остатка"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SellerTier(str, Enum):
    """Тариф продавца на платформе"""

    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


# =============================================================================
# SIGNALS
# =============================================================================


class PricingSignals(BaseModel):
    """
    Рыночные сигналы товара.

    conversion_rate — в процентах (5.0 = 5%).
    seasonality — множитель (0.8 низкий сезон .. 1.2 пик).
    """

    current_margin_bps: int = Field(..., description="Текущая маржа (bps)")
    target_margin_bps: Bps = Field(..., description="Целевая маржа (bps)")
    conversion_rate: float = Field(..., description="Конверсия (%)")
    inventory_level: int = Field(..., description="Остаток (шт.)")
    max_inventory: int = Field(..., description="Ёмкость склада (шт.)")
    demand_trend: DemandTrend = Field(DemandTrend.MEDIUM, description="Тренд спроса")
    seasonality: float = Field(1.0, description="Сезонный множитель")
    competitor_price_cents: Cents | None = Field(None, description="Цена конкурента (cents)")

    model_config = {"frozen": True}


class PricingItem(BaseModel):
    """Элемент пакетного расчёта цен."""

    current_price_cents: Cents
    signals: PricingSignals

    model_config = {"frozen": True}


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class DynamicPriceResult:
    """Рекомендация динамического ценообразования."""

    new_price_cents: Cents
    recommended_action: PriceAction
    adjustment_bps: int  # Применённая корректировка (со знаком)
    expected_margin_bps: int  # Маржа при новой цене и прежних издержках
    confidence: float  # 0-100
    reason: str


# =============================================================================
# RETAIL PRICING (режимы growth / profit / hybrid)
# =============================================================================


class PricingParameters(BaseModel):
    """
    Издержки и ставки для расчёта розничной цены.

    Розничная цена включает НДС; target_margin_bps — доля прибыли в цене.
    """

    supplier_cost_cents: Cents = Field(..., description="Закупочная цена (cents)")
    shipping_cost_cents: Cents = Field(0, description="Доставка (cents)")
    platform_fee_bps: Bps = Field(500, description="Комиссия платформы (bps)")
    vat_rate_bps: Bps = Field(1800, description="Ставка НДС (bps)")
    target_margin_bps: Bps = Field(2500, description="Целевая маржа (bps)")

    model_config = {"frozen": True}


class MarketConditions(BaseModel):
    """Рыночная обстановка для корректировки базовой цены."""

    competitor_price_cents: Cents | None = Field(None, description="Цена конкурента (cents)")
    demand_level: DemandTrend = Field(DemandTrend.MEDIUM, description="Уровень спроса")
    seasonal_factor: float = Field(1.0, description="Сезонный множитель (0.8..1.2)")
    inventory_level: StockLevel = Field(StockLevel.MEDIUM, description="Уровень остатка")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class RetailPriceResult:
    """Розничная цена и её разложение."""

    retail_price_cents: Cents
    platform_fee_cents: Cents
    vat_cents: Cents
    net_profit_cents: int
    actual_margin_bps: int
    target_margin_bps: Bps  # цель после поправки на режим
    mode: PricingMode
    reasoning: str
    is_feasible: bool = True


@dataclass(frozen=True)
class MarginCheck:
    """Проверка цены на нижнюю границу маржи."""

    is_valid: bool
    actual_margin_bps: int
    message: str
