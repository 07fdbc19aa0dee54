from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Optional, Dict, Any, Sequence, List


class ExceptionCode(Enum):
    """Коды ошибок API: (числовой код, HTTP статус)"""

    UNDEFINED = (0, HTTPStatus.BAD_REQUEST)
    EMPTY_REQUIRED_FIELD = (5, HTTPStatus.BAD_REQUEST)
    MODEL_NOT_FOUND = (11, HTTPStatus.NOT_FOUND)
    MISSING_REQUEST_HEADER = (20, HTTPStatus.BAD_REQUEST)
    VALIDATION_CONSTRAINT_VIOLATION = (26, HTTPStatus.BAD_REQUEST)
    CLASSIFIER_NOT_TRAINED = (28, HTTPStatus.BAD_REQUEST)

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def http_status(self) -> int:
        return int(self.value[1])


class BasicError(Exception):
    """Базовое исключение с собственным кодом и HTTP статусом"""

    def __init__(
            self,
            exception_code: ExceptionCode,
            message: str,
            details: Optional[Dict[str, Any]] = None
    ):
        self.exception_code = exception_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConstraintViolationError(BasicError):
    """Нарушение ограничения поля"""

    def __init__(self, message: str, field: Optional[str] = None):
        if field is not None:
            message = f"{field}: {message}"
        super().__init__(ExceptionCode.VALIDATION_CONSTRAINT_VIOLATION, message, {"field": field})


class EmptyRequiredFieldError(BasicError):
    """Обязательное поле не заполнено"""

    MESSAGE = "Field {} cannot be empty"

    def __init__(self, field: str):
        super().__init__(ExceptionCode.EMPTY_REQUIRED_FIELD, self.MESSAGE.format(field), {"field": field})


class ModelNotFoundError(BasicError):
    """Модель не найдена"""

    def __init__(self, model_id: str):
        super().__init__(ExceptionCode.MODEL_NOT_FOUND, f"Model {model_id} not found", {"model_id": model_id})


class ClassifierNotTrainedError(BasicError):
    """Классификатор модели еще не обучен"""

    def __init__(self, model_id: Optional[str] = None):
        super().__init__(
            ExceptionCode.CLASSIFIER_NOT_TRAINED,
            "Classifier is not trained yet",
            {"model_id": model_id}
        )


class MissingHeaderError(Exception):
    """Отсутствует обязательный заголовок запроса"""

    def __init__(self, header_name: str):
        self.header_name = header_name
        super().__init__(f"Missing header: {header_name}")


class DemoNotAvailableError(Exception):
    """Демо-модель недоступна"""

    MESSAGE = "Demo is not available"

    def __init__(self):
        super().__init__(self.MESSAGE)


@dataclass(frozen=True)
class ConstraintViolation:
    field: str
    message: str


class ConstraintViolationsError(Exception):
    """Набор нарушений ограничений, найденных за один проход валидации"""

    def __init__(self, violations: Sequence[ConstraintViolation]):
        self.violations: List[ConstraintViolation] = list(violations)
        super().__init__(", ".join(f"{v.field}: {v.message}" for v in self.violations))
