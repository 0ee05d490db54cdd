"""
Tax profile helpers — профиль по умолчанию и построение из записи магазина
"""

from typing import Any, Mapping

from src.core.domain.tax_profile import (
    DEFAULT_TAX_RESIDENCY_COUNTRY,
    GEORGIA_VAT_RATE_BPS,
    LegalEntityType,
    TaxProfile,
    TaxStatus,
)
from src.core.domain.units import Bps
from src.finance.vat import is_vat_enabled

# Стандартные ставки НДС по странам (bps)
VAT_RATES_BPS: dict[str, Bps] = {
    "GE": GEORGIA_VAT_RATE_BPS,
}


def default_tax_profile(store_id: str) -> TaxProfile:
    """
    Профиль нового магазина: не плательщик НДС, ставка 18%, резидент GE.
    """
    return TaxProfile(
        store_id=store_id,
        tax_status=TaxStatus.NON_VAT_PAYER,
        vat_enabled=False,
        vat_rate_bps=GEORGIA_VAT_RATE_BPS,
        vat_registration_no=None,
        prices_include_vat=True,
        tax_residency_country=DEFAULT_TAX_RESIDENCY_COUNTRY,
        legal_entity_type=None,
    )


def tax_profile_from_store(store_data: Mapping[str, Any]) -> TaxProfile:
    """
    Построение профиля из сырой записи магазина.

    Отсутствующие поля заполняются значениями по умолчанию; vat_enabled
    по умолчанию выводится из tax_status. Явно переданный противоречивый
    vat_enabled сохраняется как есть: его отклонит validate_tax_status_consistency.

    Args:
        store_data: Запись магазина (обязателен ключ 'id')

    Returns:
        TaxProfile

    Raises:
        ValueError: Если статус неизвестен или запись не соответствует форме
            профиля (pydantic.ValidationError — подкласс ValueError)
    """
    tax_status = TaxStatus(store_data.get("tax_status") or TaxStatus.NON_VAT_PAYER)
    vat_enabled = store_data.get("vat_enabled")
    vat_rate_bps = store_data.get("vat_rate_bps")
    prices_include_vat = store_data.get("prices_include_vat")
    legal_entity_type = store_data.get("legal_entity_type")

    return TaxProfile(
        store_id=store_data["id"],
        tax_status=tax_status,
        vat_enabled=is_vat_enabled(tax_status) if vat_enabled is None else vat_enabled,
        vat_rate_bps=GEORGIA_VAT_RATE_BPS if vat_rate_bps is None else vat_rate_bps,
        vat_registration_no=store_data.get("vat_registration_no"),
        prices_include_vat=True if prices_include_vat is None else prices_include_vat,
        tax_residency_country=store_data.get("tax_residency_country") or DEFAULT_TAX_RESIDENCY_COUNTRY,
        legal_entity_type=LegalEntityType(legal_entity_type) if legal_entity_type else None,
    )


def vat_rate_for_country(country_code: str) -> Bps:
    """Рекомендованная ставка НДС для страны (0 для неизвестных)."""
    return VAT_RATES_BPS.get(country_code.upper(), Bps(0))
