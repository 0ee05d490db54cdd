"""
Margins — единая формула маржи в базисных пунктах

Маржа = прибыль на единицу товара относительно прейскурантной цены:

    margin_bps = floor((revenue - costs) * 10000 / list_price)

- revenue: фактически полученная выручка (после давления конкурентов и возвратов)
- costs: все издержки единицы товара
- list_price: цена, выставленная на витрине (база сравнения сценариев)

Округление всегда floor: маржа никогда не завышается.
Отрицательная маржа — валидный результат (убыточный сценарий), не ошибка.
"""

from src.core.domain.units import BPS_DENOMINATOR, MIN_PRICE_CENTS, Cents


def compute_margin_bps(revenue_cents: int, costs_cents: int, list_price_cents: Cents) -> int:
    """
    Маржа в bps относительно прейскурантной цены.

    Args:
        revenue_cents: Выручка с единицы (cents)
        costs_cents: Издержки единицы (cents)
        list_price_cents: Прейскурантная цена (cents); не ниже 1 цента

    Returns:
        Маржа в bps (может быть отрицательной)

    Examples:
        >>> compute_margin_bps(10000, 2500, 10000)
        7500
        >>> compute_margin_bps(1000, 1400, 1000)
        -4000
    """
    base = max(MIN_PRICE_CENTS, list_price_cents)
    return ((revenue_cents - costs_cents) * BPS_DENOMINATOR) // base


def margin_after_price_change_bps(current_margin_bps: int, old_price_cents: Cents, new_price_cents: Cents) -> int:
    """
    Маржа после изменения цены при неизменных издержках.

    costs = old_price * (1 - m); m' = 1 - costs / new_price.
    Округление вниз (консервативно).

    Examples:
        >>> margin_after_price_change_bps(2000, 10000, 10000)
        2000
        >>> margin_after_price_change_bps(2000, 10000, 8000)
        0
    """
    old_price = max(MIN_PRICE_CENTS, old_price_cents)
    new_price = max(MIN_PRICE_CENTS, new_price_cents)
    costs_scaled = (BPS_DENOMINATOR - current_margin_bps) * old_price
    return BPS_DENOMINATOR - (-(-costs_scaled // new_price))
