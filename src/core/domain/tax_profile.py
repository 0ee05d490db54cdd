"""
TaxProfile — налоговый профиль магазина

Immutable Pydantic модель. Создаётся с профилем по умолчанию при регистрации
магазина, меняется только явным обновлением (новая версия профиля), не удаляется.

Модель НЕ исправляет противоречие tax_status / vat_enabled: такой профиль
можно построить, но validate_tax_status_consistency обязан его отклонить.
"""

from enum import Enum
from typing import Final

from pydantic import BaseModel, Field

from src.core.domain.units import Bps

# Стандартная ставка НДС Грузии
GEORGIA_VAT_RATE_BPS: Final[Bps] = Bps(1800)

# Страна налогового резидентства по умолчанию
DEFAULT_TAX_RESIDENCY_COUNTRY: Final[str] = "GE"


# =============================================================================
# ENUMS
# =============================================================================


class TaxStatus(str, Enum):
    """Налоговый статус магазина"""

    VAT_PAYER = "vat_payer"
    NON_VAT_PAYER = "non_vat_payer"


class LegalEntityType(str, Enum):
    """Организационно-правовая форма продавца"""

    INDIVIDUAL = "individual"
    LLC = "llc"


# =============================================================================
# TAX PROFILE
# =============================================================================


class TaxProfile(BaseModel):
    """
    Налоговый профиль магазина.

    Immutable модель (frozen=True).
    """

    store_id: str = Field(..., min_length=1, description="Идентификатор магазина")
    tax_status: TaxStatus = Field(TaxStatus.NON_VAT_PAYER, description="Статус плательщика НДС")
    vat_enabled: bool = Field(False, description="Начисляется ли НДС")
    vat_rate_bps: Bps = Field(
        GEORGIA_VAT_RATE_BPS, ge=0, le=10_000, description="Ставка НДС (bps)"
    )
    vat_registration_no: str | None = Field(None, description="Номер регистрации плательщика НДС")
    prices_include_vat: bool = Field(True, description="Цены витрины включают НДС")
    tax_residency_country: str = Field(
        DEFAULT_TAX_RESIDENCY_COUNTRY,
        pattern=r"^[A-Z]{2}$",
        description="Страна налогового резидентства (ISO-2)",
    )
    legal_entity_type: LegalEntityType | None = Field(None, description="Форма юрлица")

    model_config = {"frozen": True}
