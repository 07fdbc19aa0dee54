"""Преобразование ошибок обработки запроса в HTTP ответ.

Любая ошибка, возникшая при обработке запроса, превращается ровно в одну пару
(HTTP статус, ExceptionResponseDto). Сначала ошибка относится к одному из видов
FailureKind, затем строится ответ обработчиком этого вида.
"""
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.models.error import ExceptionResponseDto
from app.utils.exceptions import (
    BasicError, ConstraintViolationError, ConstraintViolationsError, DemoNotAvailableError,
    EmptyRequiredFieldError, ExceptionCode, MissingHeaderError
)
from app.utils.error_recorder import ErrorRecorder, StructlogErrorRecorder
from app.utils.validators import (
    FieldValidationError, NOT_BLANK, NOT_EMPTY, NOT_NULL, SIZE, VALID_ENUM,
    extract_field_errors, is_missing_header
)

logger = structlog.get_logger()

UNDEFINED_MESSAGE = "Something went wrong, please try again"
NO_MESSAGE = "No message available"

# Ошибки маршрутизации: маршрут не найден или метод не поддерживается
ROUTING_STATUSES = (HTTPStatus.NOT_FOUND, HTTPStatus.METHOD_NOT_ALLOWED)


class FailureKind(str, Enum):
    MISSING_HEADER = "missing_header"
    DEMO_NOT_AVAILABLE = "demo_not_available"
    CONSTRAINT_VIOLATION = "constraint_violation"
    DEFINED = "defined"
    FIELD_VALIDATION = "field_validation"
    ROUTE_NOT_MATCHED = "route_not_matched"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class ErrorResponse:
    status_code: int
    body: ExceptionResponseDto

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.body.model_dump())


def classify_failure(exc: Any) -> FailureKind:
    """Определить вид ошибки. Более конкретные виды проверяются раньше общих."""
    if isinstance(exc, MissingHeaderError):
        return FailureKind.MISSING_HEADER
    if isinstance(exc, DemoNotAvailableError):
        return FailureKind.DEMO_NOT_AVAILABLE
    if isinstance(exc, ConstraintViolationsError):
        return FailureKind.CONSTRAINT_VIOLATION
    if isinstance(exc, BasicError):
        return FailureKind.DEFINED
    if isinstance(exc, RequestValidationError):
        errors = exc.errors()
        if errors and is_missing_header(errors[0]):
            return FailureKind.MISSING_HEADER
        return FailureKind.FIELD_VALIDATION
    if isinstance(exc, PydanticValidationError):
        return FailureKind.CONSTRAINT_VIOLATION
    if isinstance(exc, StarletteHTTPException) and exc.status_code in ROUTING_STATUSES:
        return FailureKind.ROUTE_NOT_MATCHED
    return FailureKind.UNDEFINED


def field_error_to_exception(field_error: FieldValidationError) -> BasicError:
    """Ошибка поля -> определенная ошибка API"""
    rule = field_error.rule_code
    if rule in (NOT_BLANK, VALID_ENUM):
        return ConstraintViolationError(field_error.default_message)
    if rule in (NOT_NULL, NOT_EMPTY):
        return EmptyRequiredFieldError(field_error.field)
    if rule == SIZE:
        return ConstraintViolationError(field_error.default_message, field=field_error.field)
    return BasicError(ExceptionCode.UNDEFINED, "")


class ResponseExceptionHandler:
    """Единая точка преобразования ошибок в ответы API"""

    def __init__(self, recorder: Optional[ErrorRecorder] = None):
        self.recorder = recorder or StructlogErrorRecorder()
        self._handlers: Dict[FailureKind, Callable[[Any], ErrorResponse]] = {
            FailureKind.MISSING_HEADER: self._handle_missing_header,
            FailureKind.DEMO_NOT_AVAILABLE: self._handle_demo_not_available,
            FailureKind.CONSTRAINT_VIOLATION: self._handle_constraint_violations,
            FailureKind.DEFINED: self._handle_defined,
            FailureKind.FIELD_VALIDATION: self._handle_field_validation,
            FailureKind.ROUTE_NOT_MATCHED: self._handle_route_not_matched,
            FailureKind.UNDEFINED: self._handle_undefined,
        }

    def translate(self, exc: Any) -> ErrorResponse:
        """Построить ответ для ошибки. Никогда не выбрасывает исключений."""
        try:
            kind = classify_failure(exc)
            return self._handlers.get(kind, self._handle_undefined)(exc)
        except Exception as e:
            self._record("Failed to translate exception", e)
            return self._undefined_response()

    def handle_missing_header(self, header_name: str) -> ErrorResponse:
        self._record("Missing header exception: " + header_name)
        code = ExceptionCode.MISSING_REQUEST_HEADER
        return self._build(code.http_status, code.code, "Missing header: " + header_name)

    def _record(self, message: str, cause: Any = None) -> None:
        # Ошибка журналирования не должна мешать ответу
        try:
            self.recorder.record("error", message, cause)
        except Exception:
            pass

    @staticmethod
    def _build(status_code: int, code: int, message: str) -> ErrorResponse:
        return ErrorResponse(status_code, ExceptionResponseDto(code=code, message=message))

    def _build_from(self, status_code: int, exc: BasicError) -> ErrorResponse:
        return self._build(status_code, exc.exception_code.code, exc.message)

    def _undefined_response(self) -> ErrorResponse:
        code = ExceptionCode.UNDEFINED
        return self._build(code.http_status, code.code, UNDEFINED_MESSAGE)

    def _handle_defined(self, exc: BasicError) -> ErrorResponse:
        self._record("Defined exception occurred", exc)
        return self._build_from(exc.exception_code.http_status, exc)

    def _handle_missing_header(self, exc: Any) -> ErrorResponse:
        if isinstance(exc, MissingHeaderError):
            return self.handle_missing_header(exc.header_name)
        return self.handle_missing_header(str(exc.errors()[0]["loc"][-1]))

    def _handle_field_validation(self, exc: RequestValidationError) -> ErrorResponse:
        self._record("Field validation failed", exc)

        # В ответ попадает только первая ошибка поля
        field_error = extract_field_errors(exc.errors())[0]
        basic_error = field_error_to_exception(field_error)

        return self._build_from(basic_error.exception_code.http_status, basic_error)

    def _handle_constraint_violations(self, exc: Any) -> ErrorResponse:
        self._record("Constraint violation exception occurred", exc)

        if isinstance(exc, ConstraintViolationsError):
            messages = [v.message for v in exc.violations]
        else:
            messages = [error["msg"] for error in exc.errors()]

        code = ExceptionCode.VALIDATION_CONSTRAINT_VIOLATION
        return self._build(code.http_status, code.code, "".join(m + "; " for m in messages))

    def _handle_demo_not_available(self, exc: DemoNotAvailableError) -> ErrorResponse:
        self._record("Demo is not available", exc)
        not_found = int(HTTPStatus.NOT_FOUND)
        return self._build(not_found, not_found, DemoNotAvailableError.MESSAGE)

    def _handle_route_not_matched(self, exc: StarletteHTTPException) -> ErrorResponse:
        self._record("404 error has occurred", exc)
        message = str(exc.detail) if exc.detail else NO_MESSAGE
        return self._build(int(HTTPStatus.NOT_FOUND), ExceptionCode.UNDEFINED.code, message)

    def _handle_undefined(self, exc: Any) -> ErrorResponse:
        self._record("Undefined exception occurred", exc)
        return self._undefined_response()


# Типы ошибок, для которых регистрируется обработчик
HANDLED_EXCEPTIONS = (
    MissingHeaderError,
    DemoNotAvailableError,
    ConstraintViolationsError,
    BasicError,
    RequestValidationError,
    PydanticValidationError,
    StarletteHTTPException,
    Exception,
)


def register_exception_handlers(app: FastAPI, handler: Optional[ResponseExceptionHandler] = None) -> None:
    """Подключить преобразователь ошибок к приложению"""
    handler = handler or ResponseExceptionHandler()

    async def _handle(_request: Request, exc: Exception) -> JSONResponse:
        return handler.translate(exc).to_response()

    for exc_class in HANDLED_EXCEPTIONS:
        app.add_exception_handler(exc_class, _handle)

    logger.info("Exception handlers registered", count=len(HANDLED_EXCEPTIONS))
