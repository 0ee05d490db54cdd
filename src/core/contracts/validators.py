"""
JSON Schema Contract Validators

Модуль для проверки формы записей, приходящих от внешних и устаревших систем.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы (schema/ рядом с модулем):
- order_totals.json — итоги заказа
- tax_profile.json — налоговый профиль магазина

Схемы проверяют только форму (обязательные поля, типы, диапазоны).
Бизнес-правила (знаки, тождество суммы, согласованность НДС) проверяются
в src.finance.
"""

import json
from pathlib import Path
from typing import Any, Iterator, Mapping

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат в каталоге schema/ рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: dict[str, dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'order_totals')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика (кэш заполняется при первой загрузке, далее только чтение)
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Mapping[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Mapping[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Mapping[str, Any]) -> Iterator[ValidationError]:
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)

    def error_messages(self, data: Mapping[str, Any]) -> list[str]:
        """
        Все ошибки формы в виде строк "path: message".

        Порядок детерминирован (сортировка по пути).
        """
        messages = []
        for error in sorted(self.iter_errors(data), key=lambda e: list(map(str, e.absolute_path))):
            path = ".".join(str(p) for p in error.absolute_path) or "<root>"
            messages.append(f"{path}: {error.message}")
        return messages


class OrderTotalsValidator(ContractValidator):
    """Валидатор записи итогов заказа."""

    def __init__(self):
        super().__init__("order_totals")


class TaxProfileValidator(ContractValidator):
    """Валидатор записи налогового профиля."""

    def __init__(self):
        super().__init__("tax_profile")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_order_totals_record(data: Mapping[str, Any]) -> None:
    """
    Валидация формы записи итогов заказа.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    OrderTotalsValidator().validate(data)


def validate_tax_profile_record(data: Mapping[str, Any]) -> None:
    """
    Валидация формы записи налогового профиля.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    TaxProfileValidator().validate(data)
