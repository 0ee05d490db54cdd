"""
Margin — сценарии неблагоприятных факторов и результаты симуляции маржи

WorstCaseScenario описывает ВЕРХНИЕ границы факторов, которые бизнес обязан
пережить одновременно.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from src.core.domain.units import Bps, Cents


class WorstCaseScenario(BaseModel):
    """
    Потолки неблагоприятных факторов.

    Immutable модель (frozen=True).
    """

    max_refund_rate_pct: float = Field(0.0, description="Доля возвратов (%)")
    max_shipping_delay_days: float = Field(0.0, description="Дополнительная задержка доставки (дни)")
    max_return_shipping_cost_cents: Cents = Field(0, description="Стоимость обратной доставки (cents)")
    max_platform_fee_increase_bps: Bps = Field(0, description="Рост комиссии платформы (bps)")
    competitor_price_cut_pct: float = Field(0.0, description="Снижение цены конкурентами (%)")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class MarginScenario:
    """Один сценарий симуляции (best / average / worst)."""

    name: str
    probability: float  # 0-1
    margin_bps: int
    assumptions: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MarginSimulationResult:
    """Результат проверки цены на worst-case сценарии."""

    is_approved: bool
    best_case_margin_bps: int
    avg_case_margin_bps: int
    worst_case_margin_bps: int
    min_margin_bps: Bps
    scenarios: tuple[MarginScenario, ...] = ()
    rejection_reason: str | None = None


@dataclass(frozen=True)
class MarginSensitivity:
    """
    Чувствительность маржи к отдельным факторам (изменение в bps, всегда <= 0).
    """

    refund_rate_5_pct: int
    shipping_delay_per_day: int
    competitor_price_10_pct_cut: int
    platform_fee_increase_5_pct: int


# =============================================================================
# ЦЕНА ОТ ИЗДЕРЖЕК
# =============================================================================


class MarginCalculatorInput(BaseModel):
    """
    Издержки единицы товара и желаемая прибыль.

    desired_profit_cents, если задан, имеет приоритет над desired_profit_bps
    (доля прибыли от cost + shipping).
    """

    cost_cents: Cents = Field(..., description="Себестоимость (cents)")
    shipping_cents: Cents = Field(0, description="Доставка (cents)")
    payment_fee_bps: Bps = Field(290, description="Комиссия платёжной системы (bps)")
    platform_fee_bps: Bps = Field(3000, description="Комиссия площадки (bps)")
    affiliate_fee_bps: Bps = Field(0, description="Комиссия партнёра (bps)")
    is_vat_payer: bool = Field(..., description="Продавец — плательщик НДС")
    vat_rate_bps: Bps = Field(1800, description="Ставка НДС (bps)")
    desired_profit_bps: Bps = Field(3000, description="Желаемая прибыль (bps от издержек)")
    desired_profit_cents: Cents | None = Field(None, description="Желаемая прибыль (cents)")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class MarginBreakdown:
    """Разложение цены: revenue — выручка без НДС."""

    revenue: Cents
    vat: Cents
    cost: Cents
    shipping: Cents
    payment_fee: Cents
    platform_fee: Cents
    affiliate_fee: Cents
    net_profit: int


@dataclass(frozen=True)
class MarginCalculation:
    """Рекомендованная (или анализируемая) цена и маржа."""

    recommended_price_cents: Cents
    gross_margin_bps: int  # (выручка без НДС - cost - shipping) / цена
    net_profit_cents: int
    breakdown: MarginBreakdown
    is_feasible: bool = True
