"""Shipping — скоринг риска доставки и выбор перевозчика."""

from .risk_scorer import (
    ShippingOption,
    ShippingRiskConfig,
    carrier_reliability_score,
    compute_shipping_risk_score,
    optimize_shipping_strategy,
    recommend_carrier,
    shipping_margin_tradeoff,
)

__all__ = [
    "ShippingRiskConfig",
    "ShippingOption",
    "compute_shipping_risk_score",
    "carrier_reliability_score",
    "recommend_carrier",
    "optimize_shipping_strategy",
    "shipping_margin_tradeoff",
]
