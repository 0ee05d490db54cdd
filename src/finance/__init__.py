"""Finance — НДС, налоговые профили и итоги заказа.

Цены включают НДС (Грузия, 18%); все суммы — целые тетри.
Margin calculator — цена от издержек и обратный анализ цены.
"""

from .margin_calculator import analyze_price, calculate_margin
from .order_calculation import (
    DisplayCurrency,
    compute_order_totals,
    format_order_totals,
    validate_order_calculation,
)
from .tax_profile import default_tax_profile, tax_profile_from_store, vat_rate_for_country
from .vat import compute_vat_inclusive, is_vat_enabled, validate_tax_status_consistency

__all__ = [
    "compute_vat_inclusive",
    "is_vat_enabled",
    "validate_tax_status_consistency",
    "default_tax_profile",
    "tax_profile_from_store",
    "vat_rate_for_country",
    "DisplayCurrency",
    "compute_order_totals",
    "validate_order_calculation",
    "format_order_totals",
    "calculate_margin",
    "analyze_price",
]
