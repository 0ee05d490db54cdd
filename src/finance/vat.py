"""
VAT Engine — извлечение НДС из цены, включающей налог

Формула (ставка применяется к базе без налога, а не к брутто-цене):

    vat = floor(price * rate_bps / (10000 + rate_bps))
    net = price - vat

Округление ВСЕГДА floor, никогда не half-up:
10000 тетри при 1800 bps → 1525 НДС (а не 1526).
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from src.core.contracts import TaxProfileValidator
from src.core.domain.tax_profile import TaxProfile, TaxStatus
from src.core.domain.units import BPS_DENOMINATOR, Bps, Cents, clamp_bps, clamp_cents
from src.core.domain.validation import ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VatBreakdown:
    """Разложение цены с НДС: vat_amount_cents + net_amount_cents == price."""

    vat_amount_cents: Cents
    net_amount_cents: Cents


def compute_vat_inclusive(price_cents: Cents, rate_bps: Bps) -> VatBreakdown:
    """
    Извлечение НДС из цены, уже включающей налог.

    Args:
        price_cents: Цена с НДС (отрицательная → 0)
        rate_bps: Ставка НДС в bps (ограничивается 0..10000)

    Returns:
        VatBreakdown, где vat + net == price

    Examples:
        >>> compute_vat_inclusive(10000, 1800)
        VatBreakdown(vat_amount_cents=1525, net_amount_cents=8475)
        >>> compute_vat_inclusive(1, 1800)
        VatBreakdown(vat_amount_cents=0, net_amount_cents=1)
    """
    price = clamp_cents(price_cents)
    rate = clamp_bps(rate_bps)

    if price == 0 or rate == 0:
        return VatBreakdown(vat_amount_cents=Cents(0), net_amount_cents=price)

    vat = Cents((price * rate) // (BPS_DENOMINATOR + rate))
    return VatBreakdown(vat_amount_cents=vat, net_amount_cents=Cents(price - vat))


def is_vat_enabled(tax_status: TaxStatus | str) -> bool:
    """НДС начисляется только плательщиком НДС."""
    return tax_status == TaxStatus.VAT_PAYER


def validate_tax_status_consistency(profile: TaxProfile | Mapping[str, Any]) -> ValidationResult:
    """
    Проверка согласованности tax_status и vat_enabled.

    Правило: tax_status == vat_payer ⇔ vat_enabled == True.
    Любая другая комбинация — ошибка; профиль не исправляется и не изменяется.

    Плательщик НДС без регистрационного номера — предупреждение (warnings),
    а не ошибка.

    Args:
        profile: TaxProfile или сырая запись (dict) из внешней системы;
            сырая запись сначала проверяется по схеме tax_profile

    Returns:
        ValidationResult
    """
    if isinstance(profile, TaxProfile):
        record = profile.model_dump(mode="json")
    else:
        shape_errors = TaxProfileValidator().error_messages(profile)
        if shape_errors:
            return ValidationResult.from_messages(shape_errors)
        record = dict(profile)

    errors: list[str] = []
    warnings: list[str] = []

    tax_status = record["tax_status"]
    vat_enabled = record["vat_enabled"]

    if tax_status == TaxStatus.VAT_PAYER and not vat_enabled:
        errors.append("VAT payer must have vat_enabled=true")

    if tax_status == TaxStatus.NON_VAT_PAYER and vat_enabled:
        errors.append("Non-VAT payer must have vat_enabled=false")

    if tax_status == TaxStatus.VAT_PAYER and not record.get("vat_registration_no"):
        warnings.append("VAT payer should have VAT registration number")

    if errors:
        logger.debug("Inconsistent tax profile %s: %s", record.get("store_id"), errors)

    return ValidationResult.from_messages(errors, warnings)
