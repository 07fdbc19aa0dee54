import re
from dataclasses import dataclass
from typing import List, Dict, Any, Iterable, Optional, Tuple

from pydantic_core import PydanticCustomError

from app.utils.exceptions import ConstraintViolation

# Коды правил валидации полей
NOT_BLANK = "NotBlank"
VALID_ENUM = "ValidEnum"
NOT_NULL = "NotNull"
NOT_EMPTY = "NotEmpty"
SIZE = "Size"

# Тип ошибки pydantic -> код правила
RULE_CODES = {
    "missing": NOT_NULL,
    "not_empty": NOT_EMPTY,
    "not_blank": NOT_BLANK,
    "enum": VALID_ENUM,
    "literal_error": VALID_ENUM,
    "string_too_short": SIZE,
    "string_too_long": SIZE,
    "too_short": SIZE,
    "too_long": SIZE,
}

# Источники параметров запроса FastAPI
LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


@dataclass(frozen=True)
class FieldValidationError:
    field: str
    rule_code: Optional[str]
    default_message: str


def _field_name(loc: Tuple[Any, ...]) -> str:
    parts = list(loc)
    if len(parts) > 1 and parts[0] in LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(part) for part in parts if part is not None)


def extract_field_errors(errors: Iterable[Dict[str, Any]]) -> List[FieldValidationError]:
    """Преобразовать ошибки pydantic в упорядоченный список ошибок полей

    Порядок сохраняется таким, каким его выдал валидатор.
    """
    result = []
    for error in errors:
        error_type = error.get("type")
        rule_code = RULE_CODES.get(error_type, error_type)
        # null в обязательном поле: ошибка типа с пустым значением
        if isinstance(error_type, str) and error_type.endswith("_type") and "input" in error and error["input"] is None:
            rule_code = NOT_NULL
        result.append(FieldValidationError(
            field=_field_name(tuple(error.get("loc", ()))),
            rule_code=rule_code,
            default_message=error.get("msg", "")
        ))
    return result


def is_missing_header(error: Dict[str, Any]) -> bool:
    """Ошибка относится к отсутствующему заголовку запроса"""
    loc = tuple(error.get("loc", ()))
    return error.get("type") == "missing" and len(loc) > 1 and loc[0] == "header"


def not_blank(value: Optional[str], message: str = "must not be blank") -> Optional[str]:
    """Проверка для field_validator: строка не состоит из одних пробелов"""
    if value is not None and not value.strip():
        raise PydanticCustomError("not_blank", message)
    return value


class ModelValidator:
    """Валидатор идентификаторов моделей"""

    MODEL_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
    MAX_MODEL_ID_LENGTH = 36

    @classmethod
    def validate_model_id(cls, model_id: str) -> Dict[str, Any]:
        """Проверить ID модели и вернуть все найденные нарушения"""
        result = {
            'is_valid': True,
            'violations': []
        }

        if len(model_id) > cls.MAX_MODEL_ID_LENGTH:
            result['is_valid'] = False
            result['violations'].append(ConstraintViolation(
                'model_id', f'size must be between 1 and {cls.MAX_MODEL_ID_LENGTH}'
            ))

        if not cls.MODEL_ID_PATTERN.match(model_id):
            result['is_valid'] = False
            result['violations'].append(ConstraintViolation(
                'model_id', 'must contain only letters, digits, "-" and "_"'
            ))

        return result
