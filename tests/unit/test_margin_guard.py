"""
Тесты Worst-Case Margin Guard

Покрытие:
- Симуляция best / average / worst (ручной расчёт эталона)
- Одобрение и отказ (в т.ч. глубоко отрицательная маржа без исключений)
- Нормализация сценария
- Чувствительность маржи (конкуренты — наибольший эффект)
- Минимальная цена: кратность 50 и повторная проверка
"""

import logging

import pytest

from src.core.domain.margin import WorstCaseScenario
from src.guard.margin_guard import (
    MarginGuardConfig,
    WorstCaseMarginGuard,
    margin_sensitivity,
    min_price_for_worst_case,
    simulate_worst_case_margin,
)
from src.shipping.risk_scorer import ShippingRiskConfig

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def scenario():
    """Типичные потолки: 10% возвратов, +3 дня, 5₾ обратной доставки, +2% комиссии, -10% цены."""
    return WorstCaseScenario(
        max_refund_rate_pct=10,
        max_shipping_delay_days=3,
        max_return_shipping_cost_cents=500,
        max_platform_fee_increase_bps=200,
        competitor_price_cut_pct=10,
    )


# =============================================================================
# СИМУЛЯЦИЯ
# =============================================================================


class TestSimulateWorstCaseMargin:
    """Тесты simulate_worst_case_margin"""

    def test_reference_scenarios(self, scenario) -> None:
        """
        Цена 100₾, издержки 50₾.

        Worst: цена 9000, возвраты 900, обратная доставка 500, комиссия 180,
        резерв доставки 500 bps → 450; маржа (8100 - 6130) / 10000 = 1970 bps.
        """
        result = simulate_worst_case_margin(10_000, 4000, 500, 500, 0, 0, scenario)
        assert result.best_case_margin_bps == 5000
        assert result.avg_case_margin_bps == 3442
        assert result.worst_case_margin_bps == 1970
        assert result.is_approved
        assert result.min_margin_bps == 0
        assert result.rejection_reason is None

    def test_scenario_breakdown(self, scenario) -> None:
        result = simulate_worst_case_margin(10_000, 4000, 500, 500, 0, 0, scenario)
        assert [s.probability for s in result.scenarios] == [0.6, 0.3, 0.1]
        assert [s.margin_bps for s in result.scenarios] == [5000, 3442, 1970]
        worst = result.scenarios[2]
        assert worst.assumptions["refund_rate"] == "10%"
        assert worst.assumptions["delivery_delay"] == "3 days"
        assert worst.assumptions["return_shipping"] == "5.00₾"
        assert result.scenarios[0].assumptions["delivery_delay"] == "On-time"

    def test_ordering(self, scenario) -> None:
        result = simulate_worst_case_margin(25_000, 9000, 700, 1200, 300, 200, scenario)
        assert result.best_case_margin_bps >= result.avg_case_margin_bps >= result.worst_case_margin_bps

    def test_caller_floor(self, scenario) -> None:
        result = simulate_worst_case_margin(10_000, 4000, 500, 500, 0, 0, scenario, min_margin_bps=2000)
        assert not result.is_approved
        assert result.min_margin_bps == 2000
        assert "increase price by at least 30 bps" in result.rejection_reason

    def test_config_floor(self, scenario) -> None:
        config = MarginGuardConfig(min_margin_bps=2500)
        result = simulate_worst_case_margin(10_000, 4000, 500, 500, 0, 0, scenario, config=config)
        assert not result.is_approved
        assert result.min_margin_bps == 2500

    def test_costs_exceed_price_rejected(self, scenario) -> None:
        """Себестоимость + доставка > цены → отказ, без исключения"""
        result = simulate_worst_case_margin(1000, 800, 300, 0, 0, 0, scenario)
        assert not result.is_approved
        assert result.worst_case_margin_bps <= 0
        assert result.rejection_reason is not None

    def test_zero_margin_not_approved(self) -> None:
        """Маржа ровно 0 — не прибыль"""
        result = simulate_worst_case_margin(1000, 1000, 0, 0, 0, 0, WorstCaseScenario())
        assert result.worst_case_margin_bps == 0
        assert not result.is_approved

    @pytest.mark.parametrize("price", [-100, 0, 1])
    def test_degenerate_price_does_not_raise(self, scenario, price) -> None:
        result = simulate_worst_case_margin(price, 500, 500, 0, 0, 0, scenario)
        assert not result.is_approved

    def test_empty_scenario_collapses_cases(self) -> None:
        result = simulate_worst_case_margin(10_000, 4000, 500, 0, 0, 0, WorstCaseScenario())
        assert result.best_case_margin_bps == result.avg_case_margin_bps == result.worst_case_margin_bps == 5500

    def test_negative_ceilings_treated_as_zero(self) -> None:
        negative = WorstCaseScenario(
            max_refund_rate_pct=-10,
            max_shipping_delay_days=-3,
            max_return_shipping_cost_cents=-500,
            max_platform_fee_increase_bps=-200,
            competitor_price_cut_pct=float("nan"),
        )
        result = simulate_worst_case_margin(10_000, 4000, 500, 0, 0, 0, negative)
        assert result.worst_case_margin_bps == 5500

    def test_huge_shipping_delay_does_not_raise(self) -> None:
        """Резерв на доставку ограничен: 600 bps за срок + 200 bps за задержку"""
        result = simulate_worst_case_margin(
            10_000, 4000, 500, 0, 0, 0, WorstCaseScenario(max_shipping_delay_days=1e307)
        )
        assert result.best_case_margin_bps == 5500
        assert result.avg_case_margin_bps == 4800
        assert result.worst_case_margin_bps == 4700
        assert result.is_approved

    def test_shipping_reserve_never_exceeds_price(self) -> None:
        """Даже неограниченный буфер перевозчика съедает не больше 100% цены"""
        unbounded = ShippingRiskConfig(delivery_buffer_bps_per_day=1_000_000, delivery_buffer_bps_cap=float("inf"))
        guard = WorstCaseMarginGuard(shipping_config=unbounded)
        result = guard.simulate(10_000, 4000, 500, 0, 0, 0, WorstCaseScenario(max_shipping_delay_days=3))
        assert result.worst_case_margin_bps == -4500
        assert not result.is_approved


# =============================================================================
# ЧУВСТВИТЕЛЬНОСТЬ
# =============================================================================


class TestMarginSensitivity:
    """Тесты margin_sensitivity"""

    def test_reference(self) -> None:
        sensitivity = margin_sensitivity(10_000, 4000, 500, 0)
        assert sensitivity.refund_rate_5_pct == -500
        assert sensitivity.shipping_delay_per_day == -100
        assert sensitivity.competitor_price_10_pct_cut == -1000
        assert sensitivity.platform_fee_increase_5_pct == -500

    @pytest.mark.parametrize(
        "price,cost,shipping,other",
        [(10_000, 4000, 500, 0), (2500, 1000, 300, 100), (100_000, 20_000, 1500, 500), (5000, 6000, 500, 0)],
    )
    def test_competitor_cut_dominates(self, price, cost, shipping, other) -> None:
        sensitivity = margin_sensitivity(price, cost, shipping, other)
        deltas = [
            sensitivity.refund_rate_5_pct,
            sensitivity.shipping_delay_per_day,
            sensitivity.platform_fee_increase_5_pct,
        ]
        assert all(delta <= 0 for delta in deltas + [sensitivity.competitor_price_10_pct_cut])
        assert abs(sensitivity.competitor_price_10_pct_cut) > max(abs(delta) for delta in deltas)


# =============================================================================
# МИНИМАЛЬНАЯ ЦЕНА
# =============================================================================


class TestMinPriceForWorstCase:
    """Тесты min_price_for_worst_case"""

    def test_reference(self, scenario) -> None:
        """9200 даёт 1491 bps (< 1500), 9250 — 1522 bps"""
        price = min_price_for_worst_case(4000, 500, 500, 0, 0, scenario, 1500)
        assert price == 9250

    @pytest.mark.parametrize("target", [0, 500, 1500, 3000, 5000])
    def test_rounded_and_reverified(self, scenario, target) -> None:
        price = min_price_for_worst_case(4000, 500, 500, 300, 200, scenario, target)
        assert price % 50 == 0
        result = simulate_worst_case_margin(price, 4000, 500, 500, 300, 200, scenario, min_margin_bps=target)
        assert result.worst_case_margin_bps >= target

    def test_zero_costs(self) -> None:
        assert min_price_for_worst_case(0, 0, 0, 0, 0, WorstCaseScenario(), 0) == 50

    def test_custom_step(self, scenario) -> None:
        guard = WorstCaseMarginGuard(MarginGuardConfig(price_step_cents=100, max_search_price_cents=1_000_000))
        price = guard.min_price(4000, 500, 500, 0, 0, scenario, 1500)
        assert price % 100 == 0
        assert guard.simulate(price, 4000, 500, 500, 0, 0, scenario).worst_case_margin_bps >= 1500

    def test_unreachable_target_returns_cap(self, scenario, caplog) -> None:
        """Маржа 100% недостижима при ненулевых издержках"""
        config = MarginGuardConfig(max_search_price_cents=1_000_000)
        with caplog.at_level(logging.WARNING, logger="src.guard.margin_guard"):
            price = min_price_for_worst_case(4000, 500, 500, 0, 0, scenario, 10_000, config=config)
        assert price == 1_000_000
        assert "unreachable" in caplog.text
