"""
Order — входные данные и результат расчёта заказа

Immutable Pydantic модели.

OrderCalculationInput принимает любые целые Cents/Bps (в т.ч. отрицательные):
нормализация — задача калькулятора, а не модели.

OrderTotals тоже принимает любые целые, чтобы запись из внешней/устаревшей
системы можно было представить и затем отклонить через validate_order_calculation.
"""

from pydantic import BaseModel, Field

from src.core.domain.tax_profile import TaxProfile
from src.core.domain.units import Bps, Cents


class OrderCalculationInput(BaseModel):
    """Входные данные расчёта заказа (цены включают НДС)."""

    subtotal_cents: Cents = Field(..., description="Сумма товаров, включая НДС (cents)")
    shipping_cost_cents: Cents = Field(0, description="Доставка (cents)")
    platform_fee_bps: Bps = Field(0, description="Комиссия платформы (bps)")
    affiliate_fee_bps: Bps = Field(0, description="Комиссия партнёра (bps)")
    buyer_country_code: str = Field(..., min_length=2, max_length=2, description="Страна покупателя (ISO-2)")
    tax_profile: TaxProfile = Field(..., description="Налоговый профиль магазина")

    model_config = {"frozen": True}


class OrderBreakdown(BaseModel):
    """Разбивка заказа для отображения."""

    gross: Cents
    vat_tax: Cents
    platform_fee: Cents
    affiliate_fee: Cents
    shipping: Cents
    total: Cents

    model_config = {"frozen": True}


class OrderTotals(BaseModel):
    """
    Итоги заказа.

    Инвариант (для записей из compute_order_totals):
        total_cents = subtotal_cents + shipping_cost_cents + platform_fee_cents + affiliate_fee_cents

    НДС извлекается из subtotal (цены включают налог), а не добавляется сверху.
    """

    subtotal_cents: Cents
    vat_amount_cents: Cents
    vat_rate_bps: Bps
    vat_enabled: bool
    shipping_cost_cents: Cents
    platform_fee_cents: Cents
    affiliate_fee_cents: Cents
    total_cents: Cents
    net_seller_cents: Cents
    breakdown: OrderBreakdown

    model_config = {"frozen": True}
