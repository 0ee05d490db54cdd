"""
ValidationResult — результат проверки бизнес-правил

Нарушение бизнес-правила — не исключение: вызывающая сторона обязана
отреагировать (например, отказаться сохранять профиль).
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ValidationResult:
    """Результат проверки: valid=False если есть хотя бы одна ошибка."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_messages(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors), warnings=list(warnings or []))
