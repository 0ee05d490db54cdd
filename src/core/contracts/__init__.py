"""
Contract Validation Module

Проверка формы записей, приходящих в движок из внешних систем.
"""

from .validators import (
    ContractValidator,
    OrderTotalsValidator,
    SchemaLoader,
    TaxProfileValidator,
    validate_order_totals_record,
    validate_tax_profile_record,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "OrderTotalsValidator",
    "TaxProfileValidator",
    # Functions
    "validate_order_totals_record",
    "validate_tax_profile_record",
]
