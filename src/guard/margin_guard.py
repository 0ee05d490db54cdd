"""
Worst-Case Margin Guard — сертификация цены на худшем сценарии

Цена одобряется, только если маржа остаётся положительной (и не ниже
заданного минимума) при ОДНОВРЕМЕННОМ действии всех неблагоприятных факторов
на их потолках.

Маржа считается относительно прейскурантной цены (см. src.core.math.margins).

Сценарии (factor f: best = 0, average = 0.5, worst = 1):
- достижимая цена p = floor(price * (1 - f * competitor_cut%))
- потери на возвратах ceil(p * f * refund%)
- обратная доставка ceil(f * return_shipping_cost)
- рост комиссии платформы ceil(p * f * fee_increase_bps / 10000)
- резерв на риск доставки ceil(p * buffer_bps / 10000), где buffer_bps —
  буфер Shipping Risk Scorer для доставки 7 + f * delay_days дней

Average case — середина между best и worst, а не статистическое среднее.
Отрицательная маржа — корректный отказ, а не ошибка: функции не бросают исключений.
"""

import logging
import math
from dataclasses import dataclass
from typing import Final

from src.core.domain.margin import (
    MarginScenario,
    MarginSensitivity,
    MarginSimulationResult,
    WorstCaseScenario,
)
from src.core.domain.shipping import ShippingRiskFactors
from src.core.domain.units import (
    BPS_DENOMINATOR,
    PRICE_STEP_CENTS,
    Bps,
    Cents,
    apply_bps_ceil,
    clamp_bps,
    clamp_cents,
    floor_price,
    format_gel,
    pct_to_bps,
    round_up_to_step,
)
from src.core.math.margins import compute_margin_bps
from src.core.math.numerical_safeguards import clamp, sanitize_float
from src.shipping.risk_scorer import ShippingRiskConfig, compute_shipping_risk_score

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

BEST_CASE_FACTOR: Final[float] = 0.0
AVG_CASE_FACTOR: Final[float] = 0.5
WORST_CASE_FACTOR: Final[float] = 1.0


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class MarginGuardConfig:
    """Конфигурация Margin Guard."""

    # Минимальная worst-case маржа, если вызывающая сторона не задала свою
    min_margin_bps: Bps = Bps(0)

    # Поиск минимальной цены
    price_step_cents: Cents = PRICE_STEP_CENTS
    max_search_price_cents: Cents = Cents(100_000_000)  # кратно price_step_cents
    max_search_iterations: int = 64
    max_rounding_steps: int = 200

    # Вероятности сценариев (для отображения)
    best_case_probability: float = 0.6
    avg_case_probability: float = 0.3
    worst_case_probability: float = 0.1

    # Приращения для анализа чувствительности
    sensitivity_refund_pct: float = 5.0
    sensitivity_delay_days: float = 1.0
    sensitivity_competitor_cut_pct: float = 10.0
    sensitivity_fee_increase_bps: Bps = Bps(500)


@dataclass(frozen=True)
class _NormalizedScenario:
    """Потолки факторов после нормализации (NaN/отрицательные → 0)."""

    refund_rate_pct: float
    shipping_delay_days: float
    return_shipping_cost_cents: Cents
    platform_fee_increase_bps: Bps
    competitor_price_cut_pct: float

    @classmethod
    def from_scenario(cls, scenario: WorstCaseScenario) -> "_NormalizedScenario":
        return cls(
            refund_rate_pct=clamp(sanitize_float(scenario.max_refund_rate_pct), 0.0, 100.0),
            shipping_delay_days=max(0.0, sanitize_float(scenario.max_shipping_delay_days)),
            return_shipping_cost_cents=clamp_cents(scenario.max_return_shipping_cost_cents),
            platform_fee_increase_bps=clamp_bps(scenario.max_platform_fee_increase_bps),
            competitor_price_cut_pct=clamp(sanitize_float(scenario.competitor_price_cut_pct), 0.0, 100.0),
        )


# =============================================================================
# GUARD
# =============================================================================


class WorstCaseMarginGuard:
    """Worst-Case Margin Guard.

    Порядок расчёта:
    1. Нормализация входов (цена >= 1 цента, издержки >= 0, факторы >= 0)
    2. Маржа best / average / worst сценариев
    3. Одобрение: worst > 0 и worst >= минимальной маржи
    """

    def __init__(
        self,
        config: MarginGuardConfig | None = None,
        shipping_config: ShippingRiskConfig | None = None,
    ):
        """Инициализация guard.

        Args:
            config: конфигурация guard (опционально, используется default)
            shipping_config: конфигурация скоринга доставки для резерва на риск
        """
        self.config = config or MarginGuardConfig()
        self.shipping_config = shipping_config or ShippingRiskConfig()

    # -------------------------------------------------------------------------
    # Сценарии
    # -------------------------------------------------------------------------

    def _shipping_buffer_bps(self, extra_delay_days: float, delay_probability: float) -> Bps:
        factors = ShippingRiskFactors(
            delivery_days_avg=self.shipping_config.baseline_delivery_days + extra_delay_days,
            delay_probability=delay_probability,
            refund_rate_pct=0.0,  # возвраты уже учтены в выручке
        )
        return compute_shipping_risk_score(factors, self.shipping_config).recommended_margin_additional_bps

    def _scenario_margin(
        self,
        price: Cents,
        fixed_costs: Cents,
        scenario: _NormalizedScenario,
        factor: float,
    ) -> int:
        cut_bps = clamp_bps(pct_to_bps(scenario.competitor_price_cut_pct * factor))
        achievable_price = Cents(price * (BPS_DENOMINATOR - cut_bps) // BPS_DENOMINATOR)

        refund_bps = clamp_bps(pct_to_bps(scenario.refund_rate_pct * factor))
        refund_loss = apply_bps_ceil(achievable_price, refund_bps)

        return_shipping = math.ceil(scenario.return_shipping_cost_cents * factor)

        fee_increase_bps = clamp_bps(math.ceil(scenario.platform_fee_increase_bps * factor))
        fee_increase = apply_bps_ceil(achievable_price, fee_increase_bps)

        delay_days = scenario.shipping_delay_days * factor
        delay_probability = factor if scenario.shipping_delay_days > 0 else 0.0
        reserve_bps = clamp_bps(self._shipping_buffer_bps(delay_days, delay_probability))
        shipping_reserve = apply_bps_ceil(achievable_price, reserve_bps)

        revenue = achievable_price - refund_loss
        costs = fixed_costs + return_shipping + fee_increase + shipping_reserve
        return compute_margin_bps(revenue, costs, price)

    def simulate(
        self,
        price_cents: Cents,
        cost_cents: Cents,
        shipping_cents: Cents,
        platform_fee_cents: Cents,
        affiliate_fee_cents: Cents,
        other_fixed_costs_cents: Cents,
        scenario: WorstCaseScenario,
        min_margin_bps: Bps | None = None,
    ) -> MarginSimulationResult:
        """
        Симуляция маржи на трёх сценариях.

        Args:
            price_cents: Прейскурантная цена (< 1 поднимается до 1 цента)
            cost_cents: Себестоимость единицы
            shipping_cents: Стоимость доставки
            platform_fee_cents: Комиссия платформы (фиксированная сумма)
            affiliate_fee_cents: Комиссия партнёра (фиксированная сумма)
            other_fixed_costs_cents: Прочие издержки
            scenario: Потолки неблагоприятных факторов
            min_margin_bps: Минимальная worst-case маржа (по умолчанию из config)

        Returns:
            MarginSimulationResult (никогда не бросает исключение)
        """
        price = floor_price(price_cents)
        fixed_costs = Cents(
            sum(
                clamp_cents(amount)
                for amount in (
                    cost_cents,
                    shipping_cents,
                    platform_fee_cents,
                    affiliate_fee_cents,
                    other_fixed_costs_cents,
                )
            )
        )
        normalized = _NormalizedScenario.from_scenario(scenario)
        floor_bps = self.config.min_margin_bps if min_margin_bps is None else min_margin_bps

        best = self._scenario_margin(price, fixed_costs, normalized, BEST_CASE_FACTOR)
        avg = self._scenario_margin(price, fixed_costs, normalized, AVG_CASE_FACTOR)
        worst = self._scenario_margin(price, fixed_costs, normalized, WORST_CASE_FACTOR)

        is_approved = worst > 0 and worst >= floor_bps

        rejection_reason = None
        if not is_approved:
            required_bps = max(floor_bps, 1)
            rejection_reason = (
                f"Worst-case margin {worst / 100:.1f}% falls below {required_bps / 100:.1f}% minimum. "
                f"Recommended: increase price by at least {required_bps - worst} bps"
            )
            logger.debug("Price %d rejected: %s", price, rejection_reason)

        return MarginSimulationResult(
            is_approved=is_approved,
            best_case_margin_bps=best,
            avg_case_margin_bps=avg,
            worst_case_margin_bps=worst,
            min_margin_bps=floor_bps,
            scenarios=self._build_scenarios(normalized, best, avg, worst),
            rejection_reason=rejection_reason,
        )

    def _build_scenarios(
        self,
        scenario: _NormalizedScenario,
        best: int,
        avg: int,
        worst: int,
    ) -> tuple[MarginScenario, ...]:
        def assumptions(factor: float) -> dict[str, str]:
            delay = scenario.shipping_delay_days * factor
            return {
                "refund_rate": f"{scenario.refund_rate_pct * factor:g}%",
                "delivery_delay": f"{delay:g} days" if delay > 0 else "On-time",
                "price_competition": f"{scenario.competitor_price_cut_pct * factor:g}%",
                "platform_fees": f"+{math.ceil(scenario.platform_fee_increase_bps * factor)} bps",
                "return_shipping": format_gel(Cents(math.ceil(scenario.return_shipping_cost_cents * factor))),
            }

        cfg = self.config
        return (
            MarginScenario("Best Case (Normal)", cfg.best_case_probability, best, assumptions(BEST_CASE_FACTOR)),
            MarginScenario("Average Case (Minor Issues)", cfg.avg_case_probability, avg, assumptions(AVG_CASE_FACTOR)),
            MarginScenario(
                "Worst Case (All Negatives)", cfg.worst_case_probability, worst, assumptions(WORST_CASE_FACTOR)
            ),
        )

    # -------------------------------------------------------------------------
    # Чувствительность
    # -------------------------------------------------------------------------

    def sensitivity(
        self,
        price_cents: Cents,
        cost_cents: Cents,
        shipping_cents: Cents,
        other_costs_cents: Cents,
    ) -> MarginSensitivity:
        """
        Изменение маржи (bps, <= 0) при возмущении ровно одного фактора.

        Все изменения измеряются относительно прейскурантной цены, поэтому
        снижение цены конкурентами (масштабирует всю цену) всегда даёт
        наибольшее по модулю изменение.
        """
        cfg = self.config
        price = floor_price(price_cents)
        costs = clamp_cents(cost_cents) + clamp_cents(shipping_cents) + clamp_cents(other_costs_cents)
        base = compute_margin_bps(price, costs, price)

        refund_loss = apply_bps_ceil(price, pct_to_bps(cfg.sensitivity_refund_pct))
        refund_delta = compute_margin_bps(price - refund_loss, costs, price) - base

        delay_buffer_bps = clamp_bps(
            self._shipping_buffer_bps(cfg.sensitivity_delay_days, 0.0) - self._shipping_buffer_bps(0.0, 0.0)
        )
        delay_reserve = apply_bps_ceil(price, delay_buffer_bps)
        delay_delta = compute_margin_bps(price, costs + delay_reserve, price) - base

        cut_bps = clamp_bps(pct_to_bps(cfg.sensitivity_competitor_cut_pct))
        cut_price = Cents(price * (BPS_DENOMINATOR - cut_bps) // BPS_DENOMINATOR)
        competitor_delta = compute_margin_bps(cut_price, costs, price) - base

        fee_increase = apply_bps_ceil(price, cfg.sensitivity_fee_increase_bps)
        fee_delta = compute_margin_bps(price, costs + fee_increase, price) - base

        return MarginSensitivity(
            refund_rate_5_pct=min(0, refund_delta),
            shipping_delay_per_day=min(0, delay_delta),
            competitor_price_10_pct_cut=min(0, competitor_delta),
            platform_fee_increase_5_pct=min(0, fee_delta),
        )

    # -------------------------------------------------------------------------
    # Минимальная цена
    # -------------------------------------------------------------------------

    def min_price(
        self,
        cost_cents: Cents,
        shipping_cents: Cents,
        platform_fee_cents: Cents,
        affiliate_fee_cents: Cents,
        other_fixed_costs_cents: Cents,
        scenario: WorstCaseScenario,
        target_margin_bps: Bps,
    ) -> Cents:
        """
        Минимальная цена (кратная шагу), проходящая worst-case проверку.

        1. Экспоненциальный поиск верхней границы (удвоение от шага)
        2. Бинарный поиск минимальной проходящей цены
        3. Округление вверх до шага и повторная проверка; при провале — +шаг

        Все фазы ограничены по числу итераций. Если цель недостижима
        до max_search_price_cents, возвращается этот потолок.

        Returns:
            Цена в центах, кратная price_step_cents
        """
        cfg = self.config
        step = cfg.price_step_cents
        cap = round_up_to_step(max(step, cfg.max_search_price_cents), step)

        def passes(price: int) -> bool:
            result = self.simulate(
                price,
                cost_cents,
                shipping_cents,
                platform_fee_cents,
                affiliate_fee_cents,
                other_fixed_costs_cents,
                scenario,
                min_margin_bps=target_margin_bps,
            )
            return result.worst_case_margin_bps >= target_margin_bps

        # 1. Верхняя граница
        low, high = 0, step
        iterations = 0
        while not passes(high):
            if high >= cap or iterations >= cfg.max_search_iterations:
                logger.warning(
                    "Target margin %d bps unreachable below %d cents, returning search cap",
                    target_margin_bps,
                    cap,
                )
                return cap
            low, high = high, min(high * 2, cap)
            iterations += 1

        # 2. Бинарный поиск: low не проходит (или 0), high проходит
        iterations = 0
        while high - low > 1 and iterations < cfg.max_search_iterations:
            mid = (low + high) // 2
            if passes(mid):
                high = mid
            else:
                low = mid
            iterations += 1

        # 3. Округление до шага с повторной проверкой
        price = round_up_to_step(high, step)
        rounding_steps = 0
        while not passes(price) and price < cap and rounding_steps < cfg.max_rounding_steps:
            price += step
            rounding_steps += 1

        logger.debug("Minimum worst-case price for %d bps target: %d cents", target_margin_bps, price)
        return Cents(min(price, cap))


# =============================================================================
# FUNCTIONS
# =============================================================================


def simulate_worst_case_margin(
    price_cents: Cents,
    cost_cents: Cents,
    shipping_cents: Cents,
    platform_fee_cents: Cents,
    affiliate_fee_cents: Cents,
    other_fixed_costs_cents: Cents,
    scenario: WorstCaseScenario,
    min_margin_bps: Bps | None = None,
    config: MarginGuardConfig | None = None,
) -> MarginSimulationResult:
    """Симуляция маржи (см. WorstCaseMarginGuard.simulate)."""
    return WorstCaseMarginGuard(config).simulate(
        price_cents,
        cost_cents,
        shipping_cents,
        platform_fee_cents,
        affiliate_fee_cents,
        other_fixed_costs_cents,
        scenario,
        min_margin_bps=min_margin_bps,
    )


def margin_sensitivity(
    price_cents: Cents,
    cost_cents: Cents,
    shipping_cents: Cents,
    other_costs_cents: Cents,
    config: MarginGuardConfig | None = None,
) -> MarginSensitivity:
    """Чувствительность маржи (см. WorstCaseMarginGuard.sensitivity)."""
    return WorstCaseMarginGuard(config).sensitivity(price_cents, cost_cents, shipping_cents, other_costs_cents)


def min_price_for_worst_case(
    cost_cents: Cents,
    shipping_cents: Cents,
    platform_fee_cents: Cents,
    affiliate_fee_cents: Cents,
    other_fixed_costs_cents: Cents,
    scenario: WorstCaseScenario,
    target_margin_bps: Bps,
    config: MarginGuardConfig | None = None,
) -> Cents:
    """Минимальная цена для целевой worst-case маржи (см. WorstCaseMarginGuard.min_price)."""
    return WorstCaseMarginGuard(config).min_price(
        cost_cents,
        shipping_cents,
        platform_fee_cents,
        affiliate_fee_cents,
        other_fixed_costs_cents,
        scenario,
        target_margin_bps,
    )
