"""
Domain models and value objects.

Contains money units (Cents, Bps), tax profiles, order records,
pricing signals, shipping risk factors and margin scenarios.
"""

from src.core.domain.margin import (
    MarginBreakdown,
    MarginCalculation,
    MarginCalculatorInput,
    MarginScenario,
    MarginSensitivity,
    MarginSimulationResult,
    WorstCaseScenario,
)
from src.core.domain.order import OrderBreakdown, OrderCalculationInput, OrderTotals
from src.core.domain.pricing import (
    DemandTrend,
    DynamicPriceResult,
    MarginCheck,
    MarketConditions,
    PriceAction,
    PricingItem,
    PricingMode,
    PricingParameters,
    PricingSignals,
    RetailPriceResult,
    SellerTier,
    StockLevel,
)
from src.core.domain.shipping import (
    ProductType,
    RiskTier,
    ShippingRiskFactors,
    ShippingRiskScore,
    ShippingStrategy,
)
from src.core.domain.tax_profile import LegalEntityType, TaxProfile, TaxStatus
from src.core.domain.units import (
    BPS_DENOMINATOR,
    MIN_PRICE_CENTS,
    PRICE_STEP_CENTS,
    Bps,
    Cents,
    clamp_bps,
    clamp_cents,
)
from src.core.domain.validation import ValidationResult

__all__ = [
    # Units
    "Cents",
    "Bps",
    "BPS_DENOMINATOR",
    "MIN_PRICE_CENTS",
    "PRICE_STEP_CENTS",
    "clamp_cents",
    "clamp_bps",
    # Tax
    "TaxStatus",
    "LegalEntityType",
    "TaxProfile",
    # Orders
    "OrderCalculationInput",
    "OrderBreakdown",
    "OrderTotals",
    # Pricing
    "DemandTrend",
    "PriceAction",
    "PricingSignals",
    "PricingItem",
    "DynamicPriceResult",
    "PricingMode",
    "StockLevel",
    "SellerTier",
    "PricingParameters",
    "MarketConditions",
    "RetailPriceResult",
    "MarginCheck",
    # Shipping
    "RiskTier",
    "ShippingRiskFactors",
    "ShippingRiskScore",
    "ProductType",
    "ShippingStrategy",
    # Margin
    "WorstCaseScenario",
    "MarginScenario",
    "MarginSimulationResult",
    "MarginSensitivity",
    "MarginCalculatorInput",
    "MarginBreakdown",
    "MarginCalculation",
    # Validation
    "ValidationResult",
]
