"""
Shipping — факторы риска доставки и результат скоринга
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field

from src.core.domain.units import Bps, Cents


class RiskTier(str, Enum):
    """Уровень риска доставки (по диапазонам risk_score)"""

    LOW = "low"  # 0-20
    MEDIUM = "medium"  # 20-40
    MEDIUM_HIGH = "medium_high"  # 40-70
    HIGH = "high"  # 70-100


class ProductType(str, Enum):
    """Категория товара для выбора перевозчика"""

    STANDARD = "standard"
    FRAGILE = "fragile"
    PERISHABLE = "perishable"
    DANGEROUS = "dangerous"


class ShippingRiskFactors(BaseModel):
    """Сигналы перевозчика и доставки."""

    delivery_days_avg: float = Field(..., description="Средний срок доставки (дни)")
    delay_probability: float = Field(0.0, description="Вероятность задержки (0..1)")
    refund_rate_pct: float = Field(0.0, description="Доля возвратов (%)")
    carrier_id: str = Field("standard", description="Идентификатор перевозчика")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class ShippingRiskScore:
    """Результат скоринга риска доставки."""

    risk_score: int  # 0-100
    conversion_impact: float  # %, со знаком: > 0 рост конверсии, < 0 падение
    recommended_margin_additional_bps: Bps  # 0..10000
    recommendation: str
    risk_tier: RiskTier


@dataclass(frozen=True)
class ShippingStrategy:
    """Рекомендованная стратегия доставки для категории товара."""

    recommended_carrier: str
    estimated_shipping_cost_cents: Cents
    estimated_risk_score: int  # 0-100
    required_margin_bps: Bps  # целевая маржа + буфер на риск доставки
