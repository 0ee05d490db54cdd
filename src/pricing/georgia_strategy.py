"""
Georgia Pricing Strategy — режимы ценообразования для грузинского рынка

Режимы:
- GROWTH: конкурентная цена ради доли рынка (цель маржи -500 bps, не ниже 20%)
- PROFIT: премиальная цена (цель маржи +1000 bps, не выше 40%)
- HYBRID: цель маржи без поправки

Розничная цена включает НДС. Маржа — доля чистой прибыли в розничной цене:

    net = price - vat(price) - fee(price) - cost
    vat = floor(price * r / (10000 + r)),  fee = ceil(price * f / 10000)

Только целочисленная арифметика в тетри.
"""

import logging
from typing import Final

from src.core.domain.pricing import (
    DemandTrend,
    MarginCheck,
    MarketConditions,
    PricingMode,
    PricingParameters,
    RetailPriceResult,
    SellerTier,
    StockLevel,
)
from src.core.domain.units import (
    BPS_DENOMINATOR,
    Bps,
    Cents,
    apply_bps_ceil,
    clamp_bps,
    clamp_cents,
    floor_price,
)
from src.core.math.margins import compute_margin_bps
from src.core.math.numerical_safeguards import ceil_div, clamp, sanitize_float
from src.finance.vat import compute_vat_inclusive

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Пороги LTV/CAC для выбора режима
GROWTH_MAX_LTV_CAC: Final[float] = 1.5
PROFIT_MIN_LTV_CAC: Final[float] = 2.5

# Поправки целевой маржи по режимам
GROWTH_MARGIN_CUT_BPS: Final[int] = 500
GROWTH_MARGIN_FLOOR_BPS: Final[int] = 2000
PROFIT_MARGIN_BOOST_BPS: Final[int] = 1000
PROFIT_MARGIN_CAP_BPS: Final[int] = 4000

# Комиссия платформы по тарифу продавца
PLATFORM_FEE_BPS_BY_TIER: Final[dict[SellerTier, Bps]] = {
    SellerTier.STANDARD: Bps(500),
    SellerTier.PREMIUM: Bps(700),
    SellerTier.ENTERPRISE: Bps(400),
}
GROWTH_STANDARD_FEE_BPS: Final[Bps] = Bps(300)

# Корректировка под рынок
COMPETITOR_TARGET_BPS: Final[int] = 9200  # 8% ниже конкурента в режиме роста
DEMAND_MULTIPLIER_BPS: Final[dict[DemandTrend, int]] = {
    DemandTrend.LOW: 9500,
    DemandTrend.MEDIUM: 10000,
    DemandTrend.HIGH: 10500,
}
MIN_SEASONAL_FACTOR: Final[float] = 0.5
MAX_SEASONAL_FACTOR: Final[float] = 1.5
CLEARANCE_MULTIPLIER_BPS: Final[int] = 9000

DEFAULT_MIN_MARGIN_BPS: Final[Bps] = Bps(2000)

# Потери округления (floor НДС, ceil комиссии) покрываются за несколько центов
_MAX_ROUNDING_STEPS: Final[int] = 10

_REASONING: Final[dict[PricingMode, str]] = {
    PricingMode.GROWTH: "Growth mode: competitive price at {margin:.1f}% margin to win market share",
    PricingMode.PROFIT: "Profit mode: premium price at {margin:.1f}% margin to maximize revenue",
    PricingMode.HYBRID: "Hybrid mode: balanced price at {margin:.1f}% margin for growth and profit",
}


# =============================================================================
# РЕЖИМ
# =============================================================================


def recommend_pricing_mode(ltv: float, cac: float) -> PricingMode:
    """
    Режим по отношению LTV/CAC.

    ratio < 1.5 → GROWTH; ratio > 2.5 → PROFIT; иначе HYBRID.
    Нулевой или отрицательный CAC: PROFIT при положительном LTV, иначе GROWTH.

    Examples:
        >>> recommend_pricing_mode(100.0, 100.0)
        <PricingMode.GROWTH: 'growth'>
        >>> recommend_pricing_mode(300.0, 100.0)
        <PricingMode.PROFIT: 'profit'>
    """
    ltv = sanitize_float(ltv)
    cac = sanitize_float(cac)

    if cac <= 0:
        return PricingMode.PROFIT if ltv > 0 else PricingMode.GROWTH

    ratio = ltv / cac
    if ratio < GROWTH_MAX_LTV_CAC:
        return PricingMode.GROWTH
    if ratio > PROFIT_MIN_LTV_CAC:
        return PricingMode.PROFIT
    return PricingMode.HYBRID


def mode_target_margin_bps(target_margin_bps: Bps, mode: PricingMode) -> Bps:
    """Целевая маржа с поправкой на режим."""
    target = clamp_bps(target_margin_bps)
    if mode == PricingMode.GROWTH:
        return Bps(max(GROWTH_MARGIN_FLOOR_BPS, target - GROWTH_MARGIN_CUT_BPS))
    if mode == PricingMode.PROFIT:
        return Bps(min(PROFIT_MARGIN_CAP_BPS, target + PROFIT_MARGIN_BOOST_BPS))
    return target


def calculate_georgian_platform_fee(mode: PricingMode, tier: SellerTier = SellerTier.STANDARD) -> Bps:
    """
    Комиссия платформы: standard 5%, premium 7%, enterprise 4%.

    Продавцы standard в режиме роста платят 3%.
    """
    if mode == PricingMode.GROWTH and tier == SellerTier.STANDARD:
        return GROWTH_STANDARD_FEE_BPS
    return PLATFORM_FEE_BPS_BY_TIER[tier]


# =============================================================================
# РОЗНИЧНАЯ ЦЕНА
# =============================================================================


def _net_profit(price: Cents, cost: Cents, fee_bps: Bps, vat_bps: Bps) -> tuple[Cents, Cents, int]:
    vat = compute_vat_inclusive(price, vat_bps).vat_amount_cents
    fee = apply_bps_ceil(price, fee_bps)
    return vat, fee, price - vat - fee - cost


def calculate_retail_price(params: PricingParameters, mode: PricingMode) -> RetailPriceResult:
    """
    Минимальная розничная цена (с НДС), дающая целевую маржу режима.

    Замкнутая форма:

        price = ceil(cost * 10000 * (10000 + r) / (10000² - (m + f) * (10000 + r)))

    затем шаг в 1 цент вверх, пока округление НДС и комиссии не перестанет
    съедать маржу.

    Args:
        params: Издержки и ставки (отрицательные суммы → 0, ставки → 0..10000)
        mode: Режим ценообразования

    Returns:
        RetailPriceResult; is_feasible=False и нулевые суммы, если маржа,
        комиссия и НДС вместе не оставляют места для цены

    Examples:
        cost 5000 + shipping 500, комиссия 500, НДС 1800, HYBRID 2500 →
        retail 10047, vat 1532, fee 503, net 2512, margin 2500
    """
    cost = Cents(clamp_cents(params.supplier_cost_cents) + clamp_cents(params.shipping_cost_cents))
    fee_bps = clamp_bps(params.platform_fee_bps)
    vat_bps = clamp_bps(params.vat_rate_bps)
    target = mode_target_margin_bps(params.target_margin_bps, mode)

    denominator = BPS_DENOMINATOR * BPS_DENOMINATOR - (target + fee_bps) * (BPS_DENOMINATOR + vat_bps)
    if denominator <= 0:
        logger.debug("No feasible retail price: margin %d + fee %d bps with VAT %d bps", target, fee_bps, vat_bps)
        return RetailPriceResult(
            retail_price_cents=Cents(0),
            platform_fee_cents=Cents(0),
            vat_cents=Cents(0),
            net_profit_cents=0,
            actual_margin_bps=0,
            target_margin_bps=target,
            mode=mode,
            reasoning=(
                f"Margin {target / 100:.1f}% plus platform fee {fee_bps / 100:.1f}% "
                f"leaves no room for a VAT-inclusive price"
            ),
            is_feasible=False,
        )

    price = floor_price(ceil_div(cost * BPS_DENOMINATOR * (BPS_DENOMINATOR + vat_bps), denominator))
    vat, fee, net = _net_profit(price, cost, fee_bps, vat_bps)
    margin = compute_margin_bps(price - vat - fee, cost, price)

    for _ in range(_MAX_ROUNDING_STEPS):
        if margin >= target:
            break
        price = Cents(price + 1)
        vat, fee, net = _net_profit(price, cost, fee_bps, vat_bps)
        margin = compute_margin_bps(price - vat - fee, cost, price)

    logger.debug("Retail price %s: %d (margin %d bps, target %d)", mode.value, price, margin, target)

    return RetailPriceResult(
        retail_price_cents=price,
        platform_fee_cents=fee,
        vat_cents=vat,
        net_profit_cents=net,
        actual_margin_bps=margin,
        target_margin_bps=target,
        mode=mode,
        reasoning=_REASONING[mode].format(margin=margin / 100),
    )


# =============================================================================
# КОРРЕКТИРОВКА ПОД РЫНОК
# =============================================================================


def _scale_half_up(amount: int, rate_bps: int) -> int:
    return (amount * rate_bps + BPS_DENOMINATOR // 2) // BPS_DENOMINATOR


def adjust_price_for_market(
    base_price_cents: Cents,
    conditions: MarketConditions,
    mode: PricingMode,
) -> Cents:
    """
    Корректировка базовой цены под рыночную обстановку.

    Порядок:
    1. GROWTH: не дороже 92% цены конкурента (если она известна)
    2. Спрос: low ×0.95, medium ×1.0, high ×1.05
    3. Сезонность: множитель, ограниченный 0.5..1.5
    4. Высокий остаток вне режима PROFIT: распродажа ×0.9

    Каждый шаг округляется half-up; результат >= 1 цента.

    Examples:
        10000, конкурент 10000, спрос high, остаток high, GROWTH → 8694
    """
    price = clamp_cents(base_price_cents)

    competitor = conditions.competitor_price_cents
    if mode == PricingMode.GROWTH and competitor is not None and competitor > 0:
        price = min(price, _scale_half_up(competitor, COMPETITOR_TARGET_BPS))

    price = _scale_half_up(price, DEMAND_MULTIPLIER_BPS[conditions.demand_level])

    seasonal_factor = clamp(
        sanitize_float(conditions.seasonal_factor, fallback=1.0),
        MIN_SEASONAL_FACTOR,
        MAX_SEASONAL_FACTOR,
    )
    price = _scale_half_up(price, int(round(seasonal_factor * BPS_DENOMINATOR)))

    if conditions.inventory_level == StockLevel.HIGH and mode != PricingMode.PROFIT:
        price = _scale_half_up(price, CLEARANCE_MULTIPLIER_BPS)

    return floor_price(price)


# =============================================================================
# ПРОВЕРКА МАРЖИ
# =============================================================================


def validate_minimum_margin(
    retail_price_cents: Cents,
    cost_cents: Cents,
    platform_fee_cents: Cents,
    vat_cents: Cents,
    min_margin_bps: Bps = DEFAULT_MIN_MARGIN_BPS,
) -> MarginCheck:
    """
    Проверка цены на нижнюю границу маржи (по умолчанию 20%).

    actual = floor((price - fee - vat - cost) * 10000 / price)
    """
    revenue = retail_price_cents - platform_fee_cents - vat_cents
    actual = compute_margin_bps(revenue, cost_cents, floor_price(retail_price_cents))
    is_valid = actual >= min_margin_bps

    if is_valid:
        message = f"Margin {actual / 100:.1f}% meets the {min_margin_bps / 100:.1f}% floor"
    else:
        message = (
            f"Margin {actual / 100:.1f}% is below the {min_margin_bps / 100:.1f}% floor: "
            f"raise the price or cut costs"
        )

    return MarginCheck(is_valid=is_valid, actual_margin_bps=actual, message=message)
