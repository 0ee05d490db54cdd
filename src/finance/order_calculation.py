"""
Order Total Computation — расчёт итогов заказа с учётом НДС

Единственный источник истины для итогов заказа (расчёты клиента не используются).

Шаги:
1. Нормализация: отрицательные суммы и ставки → 0 (не ошибка)
2. НДС применяется ТОЛЬКО если: плательщик НДС, vat_enabled, покупатель в стране резидентства
3. Комиссии платформы и партнёра: floor(subtotal * bps / 10000)
4. total = subtotal + shipping + platform_fee + affiliate_fee (НДС уже внутри subtotal)
5. net_seller = subtotal - vat - platform_fee - affiliate_fee (доставка транзитная, не учитывается)
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from src.core.contracts import OrderTotalsValidator
from src.core.domain.order import OrderBreakdown, OrderCalculationInput, OrderTotals
from src.core.domain.tax_profile import TaxProfile, TaxStatus
from src.core.domain.units import (
    DEFAULT_FX_RATE_GEL_PER_USD,
    Bps,
    Cents,
    apply_bps_floor,
    clamp_bps,
    clamp_cents,
    format_gel,
    format_usd,
)
from src.core.domain.validation import ValidationResult
from src.finance.vat import compute_vat_inclusive

logger = logging.getLogger(__name__)


class DisplayCurrency(str, Enum):
    """Валюта отображения итогов"""

    GEL = "GEL"
    USD = "USD"


# Поля, которые не могут быть отрицательными
_NON_NEGATIVE_FIELDS: tuple[tuple[str, str], ...] = (
    ("subtotal_cents", "Subtotal"),
    ("vat_amount_cents", "VAT amount"),
    ("shipping_cost_cents", "Shipping cost"),
    ("platform_fee_cents", "Platform fee"),
    ("affiliate_fee_cents", "Affiliate fee"),
    ("total_cents", "Total"),
)

# Соответствие полей breakdown полям записи
_BREAKDOWN_FIELDS: tuple[tuple[str, str], ...] = (
    ("gross", "subtotal_cents"),
    ("vat_tax", "vat_amount_cents"),
    ("platform_fee", "platform_fee_cents"),
    ("affiliate_fee", "affiliate_fee_cents"),
    ("shipping", "shipping_cost_cents"),
    ("total", "total_cents"),
)


# =============================================================================
# РАСЧЁТ
# =============================================================================


def vat_applies(tax_profile: TaxProfile, buyer_country_code: str) -> bool:
    """
    Применяется ли НДС к заказу.

    Покупатель из другой страны находится вне домашней юрисдикции НДС.
    """
    return (
        tax_profile.tax_status == TaxStatus.VAT_PAYER
        and tax_profile.vat_enabled
        and buyer_country_code.upper() == tax_profile.tax_residency_country.upper()
    )


def compute_order_totals(order: OrderCalculationInput) -> OrderTotals:
    """
    Итоги заказа.

    Args:
        order: Входные данные (цены включают НДС)

    Returns:
        OrderTotals, все поля >= 0

    Examples:
        Для subtotal=10000, НДС 1800 bps, покупатель GE:
        vat_amount_cents=1525, total_cents=10000
    """
    subtotal = clamp_cents(order.subtotal_cents)
    shipping = clamp_cents(order.shipping_cost_cents)
    platform_fee_bps = clamp_bps(order.platform_fee_bps)
    affiliate_fee_bps = clamp_bps(order.affiliate_fee_bps)

    apply_vat = vat_applies(order.tax_profile, order.buyer_country_code)

    vat_amount = Cents(0)
    vat_rate_bps = Bps(0)
    if apply_vat:
        vat_rate_bps = order.tax_profile.vat_rate_bps
        vat_amount = compute_vat_inclusive(subtotal, vat_rate_bps).vat_amount_cents

    platform_fee = apply_bps_floor(subtotal, platform_fee_bps)
    affiliate_fee = apply_bps_floor(subtotal, affiliate_fee_bps)

    total = Cents(subtotal + shipping + platform_fee + affiliate_fee)

    # Комиссии до 100% каждая могут превысить subtotal: выплата продавцу не уходит ниже нуля
    net_seller = clamp_cents(subtotal - vat_amount - platform_fee - affiliate_fee)

    return OrderTotals(
        subtotal_cents=subtotal,
        vat_amount_cents=vat_amount,
        vat_rate_bps=vat_rate_bps,
        vat_enabled=apply_vat,
        shipping_cost_cents=shipping,
        platform_fee_cents=platform_fee,
        affiliate_fee_cents=affiliate_fee,
        total_cents=total,
        net_seller_cents=net_seller,
        breakdown=OrderBreakdown(
            gross=subtotal,
            vat_tax=vat_amount,
            platform_fee=platform_fee,
            affiliate_fee=affiliate_fee,
            shipping=shipping,
            total=total,
        ),
    )


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_order_calculation(result: OrderTotals | Mapping[str, Any]) -> ValidationResult:
    """
    Проверка итогов заказа: неотрицательность и тождество суммы.

    Не предполагает, что запись получена из compute_order_totals:
    используется и для записей из внешних систем.

    Порядок проверок:
    1. Форма записи (схема order_totals); при ошибках формы дальнейшие правила не проверяются
    2. Неотрицательность всех денежных полей
    3. total = subtotal + shipping + platform_fee + affiliate_fee
    4. НДС не превышает subtotal; НДС == 0 если vat_enabled=False
    5. breakdown совпадает с полями записи

    Returns:
        ValidationResult (никогда не бросает исключение для записи-словаря)
    """
    if isinstance(result, OrderTotals):
        record = result.model_dump()
    else:
        record = dict(result)
        shape_errors = OrderTotalsValidator().error_messages(record)
        if shape_errors:
            return ValidationResult.from_messages(shape_errors)

    errors: list[str] = []

    for field_name, label in _NON_NEGATIVE_FIELDS:
        if record[field_name] < 0:
            errors.append(f"{label} cannot be negative")

    expected_total = (
        record["subtotal_cents"]
        + record["shipping_cost_cents"]
        + record["platform_fee_cents"]
        + record["affiliate_fee_cents"]
    )
    if record["total_cents"] != expected_total:
        errors.append(
            f"Total {record['total_cents']} does not equal subtotal + shipping + "
            f"platform fee + affiliate fee ({expected_total})"
        )

    if record["vat_amount_cents"] > record["subtotal_cents"]:
        errors.append("VAT amount cannot exceed subtotal")

    if not record["vat_enabled"] and record["vat_amount_cents"] != 0:
        errors.append("VAT must be 0 if not enabled")

    breakdown = record.get("breakdown")
    if breakdown is not None:
        for breakdown_field, field_name in _BREAKDOWN_FIELDS:
            if breakdown[breakdown_field] != record[field_name]:
                errors.append(f"Breakdown {breakdown_field} does not match {field_name}")

    if errors:
        logger.debug("Order calculation rejected: %s", errors)

    return ValidationResult.from_messages(errors)


# =============================================================================
# ОТОБРАЖЕНИЕ
# =============================================================================


def format_order_totals(
    result: OrderTotals,
    currency: DisplayCurrency = DisplayCurrency.GEL,
    fx_rate_gel_per_usd: Decimal = DEFAULT_FX_RATE_GEL_PER_USD,
) -> dict[str, str]:
    """
    Форматирование итогов для отображения (2 знака, символ валюты).

    USD — только пересчёт по фиксированному курсу для показа.
    """
    if currency == DisplayCurrency.USD:
        def fmt(cents: Cents) -> str:
            return format_usd(cents, fx_rate_gel_per_usd)
    else:
        fmt = format_gel

    return {
        "subtotal": fmt(result.subtotal_cents),
        "vat": fmt(result.vat_amount_cents),
        "shipping": fmt(result.shipping_cost_cents),
        "platform_fee": fmt(result.platform_fee_cents),
        "affiliate_fee": fmt(result.affiliate_fee_cents),
        "total": fmt(result.total_cents),
        "net_seller": fmt(result.net_seller_cents),
    }
