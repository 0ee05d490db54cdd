"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация правильных данных
- Детекция нарушений required полей и типов
- Детекция нарушений constraints (min/max/enum/pattern)
- Интеграция с Pydantic моделями
"""

import json

import pytest
from jsonschema import Draft202012Validator, ValidationError

from src.core.contracts import (
    OrderTotalsValidator,
    SchemaLoader,
    TaxProfileValidator,
    validate_order_totals_record,
    validate_tax_profile_record,
)
from src.core.domain import OrderCalculationInput, TaxProfile, TaxStatus
from src.finance.order_calculation import compute_order_totals

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def tax_profile():
    return TaxProfile(
        store_id="store-1",
        tax_status=TaxStatus.VAT_PAYER,
        vat_enabled=True,
        vat_registration_no="405123456",
    )


@pytest.fixture
def order_totals_record(tax_profile):
    """Запись итогов, полученная из расчёта."""
    totals = compute_order_totals(
        OrderCalculationInput(
            subtotal_cents=10_000,
            shipping_cost_cents=500,
            platform_fee_bps=500,
            buyer_country_code="GE",
            tax_profile=tax_profile,
        )
    )
    return totals.model_dump()


@pytest.fixture
def tax_profile_record(tax_profile):
    return tax_profile.model_dump(mode="json")


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class TestSchemaLoader:
    """Тесты загрузчика схем"""

    @pytest.mark.parametrize("schema_name", ["order_totals", "tax_profile"])
    def test_schemas_are_valid(self, schema_name: str) -> None:
        schema = SchemaLoader().load_schema(schema_name)
        Draft202012Validator.check_schema(schema)

    def test_schema_cached(self) -> None:
        loader = SchemaLoader()
        assert loader.load_schema("order_totals") is loader.load_schema("order_totals")

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does_not_exist")

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(RuntimeError, match="Schema directory not found"):
            SchemaLoader(tmp_path / "missing")

    def test_invalid_schema_rejected(self, tmp_path) -> None:
        (tmp_path / "broken.json").write_text(json.dumps({"type": 12}), encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON Schema"):
            SchemaLoader(tmp_path).load_schema("broken")


# =============================================================================
# ORDER TOTALS
# =============================================================================


class TestOrderTotalsContract:
    """Тесты контракта order_totals"""

    def test_computed_record_valid(self, order_totals_record) -> None:
        validate_order_totals_record(order_totals_record)
        assert OrderTotalsValidator().is_valid(order_totals_record)

    def test_record_without_breakdown_valid(self, order_totals_record) -> None:
        del order_totals_record["breakdown"]
        assert OrderTotalsValidator().is_valid(order_totals_record)

    def test_missing_required_field(self, order_totals_record) -> None:
        del order_totals_record["total_cents"]
        with pytest.raises(ValidationError):
            validate_order_totals_record(order_totals_record)

    def test_float_amount_rejected(self, order_totals_record) -> None:
        """Суммы — только целые центы"""
        order_totals_record["vat_amount_cents"] = 15.25
        assert not OrderTotalsValidator().is_valid(order_totals_record)

    def test_incomplete_breakdown(self, order_totals_record) -> None:
        del order_totals_record["breakdown"]["gross"]
        messages = OrderTotalsValidator().error_messages(order_totals_record)
        assert messages == ["breakdown: 'gross' is a required property"]

    def test_negative_amount_is_shape_valid(self, order_totals_record) -> None:
        """Знак — бизнес-правило, а не форма"""
        order_totals_record["platform_fee_cents"] = -1
        assert OrderTotalsValidator().is_valid(order_totals_record)


# =============================================================================
# TAX PROFILE
# =============================================================================


class TestTaxProfileContract:
    """Тесты контракта tax_profile"""

    def test_model_dump_valid(self, tax_profile_record) -> None:
        validate_tax_profile_record(tax_profile_record)

    def test_lowercase_country_rejected(self, tax_profile_record) -> None:
        tax_profile_record["tax_residency_country"] = "ge"
        with pytest.raises(ValidationError):
            validate_tax_profile_record(tax_profile_record)

    def test_rate_out_of_range(self, tax_profile_record) -> None:
        tax_profile_record["vat_rate_bps"] = 10_001
        assert not TaxProfileValidator().is_valid(tax_profile_record)

    def test_unknown_status(self, tax_profile_record) -> None:
        tax_profile_record["tax_status"] = "exempt"
        errors = list(TaxProfileValidator().iter_errors(tax_profile_record))
        assert len(errors) == 1
        assert errors[0].validator == "enum"

    def test_error_messages_root_path(self, tax_profile_record) -> None:
        del tax_profile_record["store_id"]
        assert TaxProfileValidator().error_messages(tax_profile_record) == [
            "<root>: 'store_id' is a required property"
        ]
