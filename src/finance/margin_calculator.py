"""
Margin Calculator — рекомендованная цена от издержек и обратный анализ цены

Прямой расчёт (calculate_margin):
1. need = cost + shipping + желаемая прибыль
2. Цена без НДС P = ceil(need * 10000 / (10000 - F)), F — сумма комиссий (bps):
   комиссии удерживаются из P, а не добавляются к need
3. Комиссии: floor(P * fee_bps / 10000), как в итогах заказа
4. Плательщик НДС: НДС сверху, ceil(P * r / 10000); итоговая цена = P + НДС

Обратный анализ (analyze_price): НДС извлекается из цены (floor, как в VAT Engine),
комиссии считаются от выручки без НДС.

gross_margin_bps = floor((выручка без НДС - cost - shipping) * 10000 / цена)
"""

import logging
from typing import Final

from src.core.domain.margin import MarginBreakdown, MarginCalculation, MarginCalculatorInput
from src.core.domain.units import (
    BPS_DENOMINATOR,
    Bps,
    Cents,
    apply_bps_ceil,
    apply_bps_floor,
    clamp_bps,
    clamp_cents,
)
from src.core.math.margins import compute_margin_bps
from src.core.math.numerical_safeguards import ceil_div
from src.finance.vat import compute_vat_inclusive

logger = logging.getLogger(__name__)

_ZERO: Final[Cents] = Cents(0)


def _fee_rates(costs: MarginCalculatorInput) -> tuple[Bps, Bps, Bps]:
    return (
        clamp_bps(costs.payment_fee_bps),
        clamp_bps(costs.platform_fee_bps),
        clamp_bps(costs.affiliate_fee_bps),
    )


def _target_profit(costs: MarginCalculatorInput, base_cost: Cents) -> Cents:
    if costs.desired_profit_cents is not None:
        return clamp_cents(costs.desired_profit_cents)
    return apply_bps_ceil(base_cost, clamp_bps(costs.desired_profit_bps))


def calculate_margin(costs: MarginCalculatorInput) -> MarginCalculation:
    """
    Рекомендованная цена, обеспечивающая желаемую прибыль после комиссий и НДС.

    Args:
        costs: Издержки, ставки комиссий и желаемая прибыль

    Returns:
        MarginCalculation; net_profit_cents >= желаемой прибыли.
        Если комиссии вместе >= 100%, is_feasible=False и цена 0.

    Examples:
        cost 5000, shipping 500, комиссии 290 + 3000 bps, прибыль 30%,
        плательщик НДС → цена 12575 (10656 + НДС 1919), net 1651
    """
    cost = clamp_cents(costs.cost_cents)
    shipping = clamp_cents(costs.shipping_cents)
    base_cost = Cents(cost + shipping)
    payment_bps, platform_bps, affiliate_bps = _fee_rates(costs)
    total_fee_bps = payment_bps + platform_bps + affiliate_bps

    if total_fee_bps >= BPS_DENOMINATOR:
        logger.debug("Fees of %d bps leave no revenue for costs", total_fee_bps)
        return MarginCalculation(
            recommended_price_cents=_ZERO,
            gross_margin_bps=0,
            net_profit_cents=0,
            breakdown=MarginBreakdown(
                revenue=_ZERO,
                vat=_ZERO,
                cost=cost,
                shipping=shipping,
                payment_fee=_ZERO,
                platform_fee=_ZERO,
                affiliate_fee=_ZERO,
                net_profit=0,
            ),
            is_feasible=False,
        )

    need = base_cost + _target_profit(costs, base_cost)
    price_before_vat = Cents(ceil_div(need * BPS_DENOMINATOR, BPS_DENOMINATOR - total_fee_bps))

    payment_fee = apply_bps_floor(price_before_vat, payment_bps)
    platform_fee = apply_bps_floor(price_before_vat, platform_bps)
    affiliate_fee = apply_bps_floor(price_before_vat, affiliate_bps)

    vat = _ZERO
    if costs.is_vat_payer:
        vat = apply_bps_ceil(price_before_vat, clamp_bps(costs.vat_rate_bps))
    final_price = Cents(price_before_vat + vat)

    net_profit = final_price - base_cost - payment_fee - platform_fee - affiliate_fee - vat
    gross_margin = compute_margin_bps(price_before_vat, base_cost, final_price)

    logger.debug("Recommended price %d (before VAT %d), net profit %d", final_price, price_before_vat, net_profit)

    return MarginCalculation(
        recommended_price_cents=final_price,
        gross_margin_bps=gross_margin,
        net_profit_cents=net_profit,
        breakdown=MarginBreakdown(
            revenue=price_before_vat,
            vat=vat,
            cost=cost,
            shipping=shipping,
            payment_fee=payment_fee,
            platform_fee=platform_fee,
            affiliate_fee=affiliate_fee,
            net_profit=net_profit,
        ),
    )


def analyze_price(selling_price_cents: Cents, costs: MarginCalculatorInput) -> MarginCalculation:
    """
    Обратный расчёт: фактическая прибыль и маржа при заданной цене.

    Желаемая прибыль из costs не используется. Чистая прибыль и маржа
    могут быть отрицательными (убыточная цена).
    """
    price = clamp_cents(selling_price_cents)
    cost = clamp_cents(costs.cost_cents)
    shipping = clamp_cents(costs.shipping_cents)
    payment_bps, platform_bps, affiliate_bps = _fee_rates(costs)

    vat = _ZERO
    if costs.is_vat_payer:
        vat = compute_vat_inclusive(price, costs.vat_rate_bps).vat_amount_cents
    revenue = Cents(price - vat)

    payment_fee = apply_bps_floor(revenue, payment_bps)
    platform_fee = apply_bps_floor(revenue, platform_bps)
    affiliate_fee = apply_bps_floor(revenue, affiliate_bps)

    net_profit = revenue - cost - shipping - payment_fee - platform_fee - affiliate_fee

    return MarginCalculation(
        recommended_price_cents=price,
        gross_margin_bps=compute_margin_bps(revenue, cost + shipping, price),
        net_profit_cents=net_profit,
        breakdown=MarginBreakdown(
            revenue=revenue,
            vat=vat,
            cost=cost,
            shipping=shipping,
            payment_fee=payment_fee,
            platform_fee=platform_fee,
            affiliate_fee=affiliate_fee,
            net_profit=net_profit,
        ),
    )
