"""
Тесты единой формулы маржи

margin_bps = floor((revenue - costs) * 10000 / list_price)
"""

from src.core.math.margins import compute_margin_bps, margin_after_price_change_bps


class TestComputeMarginBps:
    """Тесты compute_margin_bps"""

    def test_basic(self) -> None:
        assert compute_margin_bps(10_000, 2_500, 10_000) == 7500

    def test_negative_margin_is_valid(self) -> None:
        """Убыточный сценарий — результат, не ошибка"""
        assert compute_margin_bps(1000, 1400, 1000) == -4000

    def test_floor_rounding(self) -> None:
        """Округление всегда вниз (в т.ч. для отрицательной маржи)"""
        assert compute_margin_bps(1000, 333, 1000) == 6670
        assert compute_margin_bps(1000, 1001, 1000) == -10
        assert compute_margin_bps(1, 0, 3) == 3333

    def test_zero_list_price_does_not_raise(self) -> None:
        assert compute_margin_bps(0, 0, 0) == 0


class TestMarginAfterPriceChange:
    """Тесты margin_after_price_change_bps"""

    def test_unchanged_price(self) -> None:
        assert margin_after_price_change_bps(2000, 10_000, 10_000) == 2000

    def test_price_decrease(self) -> None:
        assert margin_after_price_change_bps(2000, 10_000, 8_000) == 0

    def test_price_increase_rounded_conservatively(self) -> None:
        """costs = 8000; 8000 / 12000 → ceil → маржа 3333, не 3334"""
        assert margin_after_price_change_bps(2000, 10_000, 12_000) == 3333

    def test_zero_new_price_does_not_raise(self) -> None:
        assert margin_after_price_change_bps(2000, 10_000, 0) < 0
