"""
Тесты Margin Calculator

Покрытие:
- Рекомендованная цена: комиссии удерживаются из цены, НДС сверху
- Желаемая прибыль в bps и в центах
- Комиссии >= 100% — цена недостижима
- Обратный анализ цены
"""

import pytest

from src.core.domain.margin import MarginCalculatorInput
from src.finance.margin_calculator import analyze_price, calculate_margin


@pytest.fixture
def costs() -> MarginCalculatorInput:
    """Себестоимость 50₾ + доставка 5₾, комиссии по умолчанию (2.9% + 30%), прибыль 30%."""
    return MarginCalculatorInput(cost_cents=5000, shipping_cents=500, is_vat_payer=True)


class TestCalculateMargin:
    """Тесты прямого расчёта"""

    def test_vat_payer_reference(self, costs: MarginCalculatorInput) -> None:
        result = calculate_margin(costs)

        assert result.is_feasible
        assert result.recommended_price_cents == 12575
        assert result.breakdown.revenue == 10656
        assert result.breakdown.vat == 1919
        assert result.breakdown.payment_fee == 309
        assert result.breakdown.platform_fee == 3196
        assert result.breakdown.affiliate_fee == 0
        assert result.net_profit_cents == 1651
        assert result.gross_margin_bps == 4100

    def test_non_vat_payer(self, costs: MarginCalculatorInput) -> None:
        result = calculate_margin(costs.model_copy(update={"is_vat_payer": False}))

        assert result.recommended_price_cents == 10656
        assert result.breakdown.vat == 0
        assert result.net_profit_cents == 1651
        assert result.gross_margin_bps == 4838

    def test_profit_never_below_target(self, costs: MarginCalculatorInput) -> None:
        """30% от 55₾ = 16.50₾; удержанные комиссии не съедают прибыль"""
        assert calculate_margin(costs).net_profit_cents >= 1650

    def test_desired_profit_cents_overrides_bps(self) -> None:
        costs = MarginCalculatorInput(
            cost_cents=5000,
            shipping_cents=500,
            payment_fee_bps=0,
            platform_fee_bps=0,
            is_vat_payer=False,
            desired_profit_bps=9000,
            desired_profit_cents=1000,
        )
        result = calculate_margin(costs)

        assert result.recommended_price_cents == 6500
        assert result.net_profit_cents == 1000
        assert result.gross_margin_bps == 1538

    def test_breakdown_adds_up(self, costs: MarginCalculatorInput) -> None:
        result = calculate_margin(costs.model_copy(update={"affiliate_fee_bps": 500}))
        b = result.breakdown

        assert result.recommended_price_cents == b.revenue + b.vat
        assert b.net_profit == b.revenue - b.cost - b.shipping - b.payment_fee - b.platform_fee - b.affiliate_fee
        assert b.affiliate_fee > 0

    def test_fees_of_100_pct_are_infeasible(self) -> None:
        costs = MarginCalculatorInput(
            cost_cents=5000,
            payment_fee_bps=0,
            platform_fee_bps=6000,
            affiliate_fee_bps=4000,
            is_vat_payer=True,
        )
        result = calculate_margin(costs)

        assert not result.is_feasible
        assert result.recommended_price_cents == 0
        assert result.breakdown.cost == 5000

    def test_negative_costs_clamped(self) -> None:
        costs = MarginCalculatorInput(cost_cents=-100, shipping_cents=-50, is_vat_payer=False)
        result = calculate_margin(costs)

        assert result.recommended_price_cents == 0
        assert result.breakdown.cost == 0
        assert result.net_profit_cents == 0


class TestAnalyzePrice:
    """Тесты обратного анализа"""

    def test_recommended_price_round_trip(self, costs: MarginCalculatorInput) -> None:
        """НДС извлекается floor: 1918 против 1919 начисленных сверху"""
        result = analyze_price(12575, costs)

        assert result.recommended_price_cents == 12575
        assert result.breakdown.vat == 1918
        assert result.breakdown.revenue == 10657
        assert result.breakdown.payment_fee == 309
        assert result.breakdown.platform_fee == 3197
        assert result.net_profit_cents == 1651
        assert result.gross_margin_bps == 4100

    def test_loss_making_price(self) -> None:
        costs = MarginCalculatorInput(
            cost_cents=5000,
            payment_fee_bps=0,
            platform_fee_bps=0,
            is_vat_payer=False,
        )
        result = analyze_price(4000, costs)

        assert result.net_profit_cents == -1000
        assert result.gross_margin_bps == -2500

    def test_zero_price(self, costs: MarginCalculatorInput) -> None:
        result = analyze_price(0, costs)

        assert result.breakdown.vat == 0
        assert result.net_profit_cents == -5500
