"""Margin Guard — допуск цены только при положительной worst-case марже."""

from .margin_guard import (
    MarginGuardConfig,
    WorstCaseMarginGuard,
    margin_sensitivity,
    min_price_for_worst_case,
    simulate_worst_case_margin,
)

__all__ = [
    "MarginGuardConfig",
    "WorstCaseMarginGuard",
    "simulate_worst_case_margin",
    "margin_sensitivity",
    "min_price_for_worst_case",
]
