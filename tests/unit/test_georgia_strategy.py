"""
Тесты Georgia Pricing Strategy

Покрытие:
- Выбор режима по LTV/CAC
- Поправка целевой маржи и комиссия по тарифу
- Розничная цена с НДС: замкнутая форма, добор центов, недостижимая цена
- Корректировка под рынок
- Нижняя граница маржи
"""

import pytest

from src.core.domain.pricing import (
    DemandTrend,
    MarketConditions,
    PricingMode,
    PricingParameters,
    SellerTier,
    StockLevel,
)
from src.pricing.georgia_strategy import (
    adjust_price_for_market,
    calculate_georgian_platform_fee,
    calculate_retail_price,
    mode_target_margin_bps,
    recommend_pricing_mode,
    validate_minimum_margin,
)

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def params() -> PricingParameters:
    """Закупка 50₾ + доставка 5₾, комиссия 5%, НДС 18%, цель 25%."""
    return PricingParameters(
        supplier_cost_cents=5000,
        shipping_cost_cents=500,
        platform_fee_bps=500,
        vat_rate_bps=1800,
        target_margin_bps=2500,
    )


# =============================================================================
# РЕЖИМ
# =============================================================================


class TestRecommendPricingMode:
    """Тесты выбора режима"""

    @pytest.mark.parametrize(
        "ltv, cac, expected",
        [
            (100.0, 100.0, PricingMode.GROWTH),
            (149.0, 100.0, PricingMode.GROWTH),
            (150.0, 100.0, PricingMode.HYBRID),
            (250.0, 100.0, PricingMode.HYBRID),
            (251.0, 100.0, PricingMode.PROFIT),
        ],
    )
    def test_ltv_cac_thresholds(self, ltv: float, cac: float, expected: PricingMode) -> None:
        assert recommend_pricing_mode(ltv, cac) == expected

    def test_zero_cac(self) -> None:
        """Бесплатное привлечение: прибыль при положительном LTV"""
        assert recommend_pricing_mode(100.0, 0.0) == PricingMode.PROFIT
        assert recommend_pricing_mode(0.0, 0.0) == PricingMode.GROWTH

    def test_nan_inputs(self) -> None:
        assert recommend_pricing_mode(float("nan"), float("nan")) == PricingMode.GROWTH


class TestModeAdjustments:
    """Тесты поправок режима"""

    def test_growth_cuts_target_with_floor(self) -> None:
        assert mode_target_margin_bps(2500, PricingMode.GROWTH) == 2000
        assert mode_target_margin_bps(3000, PricingMode.GROWTH) == 2500
        assert mode_target_margin_bps(1500, PricingMode.GROWTH) == 2000

    def test_profit_boosts_target_with_cap(self) -> None:
        assert mode_target_margin_bps(2500, PricingMode.PROFIT) == 3500
        assert mode_target_margin_bps(3500, PricingMode.PROFIT) == 4000

    def test_hybrid_keeps_target(self) -> None:
        assert mode_target_margin_bps(2700, PricingMode.HYBRID) == 2700

    def test_platform_fee_by_tier(self) -> None:
        assert calculate_georgian_platform_fee(PricingMode.HYBRID) == 500
        assert calculate_georgian_platform_fee(PricingMode.PROFIT, SellerTier.PREMIUM) == 700
        assert calculate_georgian_platform_fee(PricingMode.HYBRID, SellerTier.ENTERPRISE) == 400

    def test_growth_discount_only_for_standard(self) -> None:
        assert calculate_georgian_platform_fee(PricingMode.GROWTH) == 300
        assert calculate_georgian_platform_fee(PricingMode.GROWTH, SellerTier.PREMIUM) == 700


# =============================================================================
# РОЗНИЧНАЯ ЦЕНА
# =============================================================================


class TestCalculateRetailPrice:
    """Тесты розничной цены"""

    def test_hybrid_reference(self, params: PricingParameters) -> None:
        result = calculate_retail_price(params, PricingMode.HYBRID)

        assert result.is_feasible
        assert result.retail_price_cents == 10047
        assert result.vat_cents == 1532
        assert result.platform_fee_cents == 503
        assert result.net_profit_cents == 2512
        assert result.actual_margin_bps == 2500
        assert result.reasoning.startswith("Hybrid mode")

    def test_growth_steps_up_past_rounding_loss(self, params: PricingParameters) -> None:
        """Замкнутая форма даёт 9206 (маржа 19.99%); добор 1 цента → 20.00%"""
        result = calculate_retail_price(params, PricingMode.GROWTH)

        assert result.target_margin_bps == 2000
        assert result.retail_price_cents == 9207
        assert result.net_profit_cents == 1842
        assert result.actual_margin_bps == 2000

    def test_profit_reference(self, params: PricingParameters) -> None:
        result = calculate_retail_price(params, PricingMode.PROFIT)

        assert result.target_margin_bps == 3500
        assert result.retail_price_cents == 12293
        assert result.net_profit_cents == 4303
        assert result.actual_margin_bps == 3500

    @pytest.mark.parametrize("mode", list(PricingMode))
    def test_components_add_up(self, params: PricingParameters, mode: PricingMode) -> None:
        result = calculate_retail_price(params, mode)

        assert (
            result.retail_price_cents - result.vat_cents - result.platform_fee_cents - 5500
            == result.net_profit_cents
        )
        assert result.actual_margin_bps >= result.target_margin_bps

    def test_mode_ordering(self, params: PricingParameters) -> None:
        growth = calculate_retail_price(params, PricingMode.GROWTH).retail_price_cents
        hybrid = calculate_retail_price(params, PricingMode.HYBRID).retail_price_cents
        profit = calculate_retail_price(params, PricingMode.PROFIT).retail_price_cents

        assert growth < hybrid < profit

    def test_infeasible_deductions(self) -> None:
        """Маржа 40% + комиссия 50% при НДС 18% — цены не существует"""
        params = PricingParameters(
            supplier_cost_cents=5000,
            platform_fee_bps=5000,
            vat_rate_bps=1800,
            target_margin_bps=4000,
        )
        result = calculate_retail_price(params, PricingMode.HYBRID)

        assert not result.is_feasible
        assert result.retail_price_cents == 0
        assert "no room" in result.reasoning

    def test_zero_cost_still_positive_price(self) -> None:
        params = PricingParameters(supplier_cost_cents=0)
        result = calculate_retail_price(params, PricingMode.HYBRID)

        assert result.is_feasible
        assert result.retail_price_cents >= 1
        assert result.actual_margin_bps >= 2500

    def test_negative_cost_clamped(self) -> None:
        negative = calculate_retail_price(PricingParameters(supplier_cost_cents=-500), PricingMode.HYBRID)
        zero = calculate_retail_price(PricingParameters(supplier_cost_cents=0), PricingMode.HYBRID)

        assert negative == zero


# =============================================================================
# КОРРЕКТИРОВКА ПОД РЫНОК
# =============================================================================


class TestAdjustPriceForMarket:
    """Тесты корректировки цены"""

    def test_growth_full_chain(self) -> None:
        """10000 → 9200 (конкурент) → 9660 (спрос) → 8694 (распродажа)"""
        conditions = MarketConditions(
            competitor_price_cents=10000,
            demand_level=DemandTrend.HIGH,
            seasonal_factor=1.0,
            inventory_level=StockLevel.HIGH,
        )
        assert adjust_price_for_market(10000, conditions, PricingMode.GROWTH) == 8694

    def test_profit_skips_clearance(self) -> None:
        """10000 → 9500 (спрос) → 11400 (сезон); распродажи нет"""
        conditions = MarketConditions(
            demand_level=DemandTrend.LOW,
            seasonal_factor=1.2,
            inventory_level=StockLevel.HIGH,
        )
        assert adjust_price_for_market(10000, conditions, PricingMode.PROFIT) == 11400

    def test_hybrid_clearance(self) -> None:
        conditions = MarketConditions(inventory_level=StockLevel.HIGH)
        assert adjust_price_for_market(10000, conditions, PricingMode.HYBRID) == 9000

    def test_competitor_ignored_outside_growth(self) -> None:
        conditions = MarketConditions(competitor_price_cents=5000)
        assert adjust_price_for_market(10000, conditions, PricingMode.HYBRID) == 10000

    def test_unknown_competitor_in_growth(self) -> None:
        assert adjust_price_for_market(10000, MarketConditions(), PricingMode.GROWTH) == 10000

    def test_seasonal_factor_bounds(self) -> None:
        assert adjust_price_for_market(10000, MarketConditions(seasonal_factor=3.0), PricingMode.HYBRID) == 15000
        assert adjust_price_for_market(10000, MarketConditions(seasonal_factor=0.0), PricingMode.HYBRID) == 5000
        assert (
            adjust_price_for_market(10000, MarketConditions(seasonal_factor=float("nan")), PricingMode.HYBRID)
            == 10000
        )

    def test_price_never_below_one_cent(self) -> None:
        conditions = MarketConditions(demand_level=DemandTrend.LOW, inventory_level=StockLevel.HIGH)
        assert adjust_price_for_market(0, conditions, PricingMode.GROWTH) == 1


# =============================================================================
# ПРОВЕРКА МАРЖИ
# =============================================================================


class TestValidateMinimumMargin:
    """Тесты нижней границы маржи"""

    def test_valid_at_target(self) -> None:
        check = validate_minimum_margin(10047, 5500, 503, 1532)

        assert check.is_valid
        assert check.actual_margin_bps == 2500
        assert "meets the 20.0% floor" in check.message

    def test_below_floor(self) -> None:
        check = validate_minimum_margin(9206, 5500, 461, 1404)

        assert not check.is_valid
        assert check.actual_margin_bps == 1999
        assert "below the 20.0% floor" in check.message

    def test_custom_floor(self) -> None:
        assert not validate_minimum_margin(10047, 5500, 503, 1532, min_margin_bps=3000).is_valid

    def test_zero_price_does_not_divide_by_zero(self) -> None:
        check = validate_minimum_margin(0, 5500, 0, 0)

        assert not check.is_valid
        assert check.actual_margin_bps < 0
