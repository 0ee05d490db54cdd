"""Pricing — динамическое ценообразование, режимы growth/profit/hybrid и анализ воронки конверсии."""

from .conversion import (
    analyze_conversion_funnel,
    diagnose_conversion_health,
    estimate_revenue_impact,
    recommend_ab_test,
)
from .dynamic_pricing import (
    DynamicPricingConfig,
    batch_compute_dynamic_prices,
    competitive_price,
    compute_dynamic_price,
    estimate_conversion_after_price_change,
)
from .georgia_strategy import (
    adjust_price_for_market,
    calculate_georgian_platform_fee,
    calculate_retail_price,
    recommend_pricing_mode,
    validate_minimum_margin,
)

__all__ = [
    "DynamicPricingConfig",
    "compute_dynamic_price",
    "estimate_conversion_after_price_change",
    "batch_compute_dynamic_prices",
    "competitive_price",
    "analyze_conversion_funnel",
    "diagnose_conversion_health",
    "estimate_revenue_impact",
    "recommend_ab_test",
    "recommend_pricing_mode",
    "calculate_retail_price",
    "calculate_georgian_platform_fee",
    "adjust_price_for_market",
    "validate_minimum_margin",
]
