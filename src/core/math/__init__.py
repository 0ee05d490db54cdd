"""
Core math modules

Численные примитивы и единая формула маржи.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_CALC,
    # Safe arithmetic
    ceil_div,
    safe_divide,
    # NaN/Inf sanitization
    is_valid_float,
    sanitize_float,
    # Utilities
    clamp,
)

# Margins
from src.core.math.margins import compute_margin_bps, margin_after_price_change_bps

__all__ = [
    "EPS_CALC",
    "ceil_div",
    "safe_divide",
    "is_valid_float",
    "sanitize_float",
    "clamp",
    "compute_margin_bps",
    "margin_after_price_change_bps",
]
