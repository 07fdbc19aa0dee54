from __future__ import annotations

import pytest
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.handlers.response_exception_handler import (
    FailureKind,
    ResponseExceptionHandler,
    classify_failure,
)
from app.utils.exceptions import (
    BasicError,
    ClassifierNotTrainedError,
    ConstraintViolation,
    ConstraintViolationsError,
    DemoNotAvailableError,
    ExceptionCode,
    MissingHeaderError,
    ModelNotFoundError,
)


def _field_error(field: str, error_type: str, msg: str = "invalid") -> dict:
    return {"type": error_type, "loc": ("body", field), "msg": msg, "input": None}


class _BrokenRecorder:
    def record(self, severity, message, cause=None) -> None:
        raise RuntimeError("log sink is down")


@pytest.fixture
def handler(recorder) -> ResponseExceptionHandler:
    return ResponseExceptionHandler(recorder)


@pytest.mark.parametrize(
    "exc",
    [
        ModelNotFoundError("abc"),
        ClassifierNotTrainedError("abc"),
        BasicError(ExceptionCode.VALIDATION_CONSTRAINT_VIOLATION, "custom message"),
    ],
)
def test_defined_failure_keeps_its_own_status_code_and_message(handler, exc) -> None:
    result = handler.translate(exc)

    assert result.status_code == exc.exception_code.http_status
    assert result.body.code == exc.exception_code.code
    assert result.body.message == exc.message


def test_model_not_found_is_404_with_model_code(handler) -> None:
    result = handler.translate(ModelNotFoundError("abc"))

    assert result.status_code == 404
    assert result.body.code == 11
    assert result.body.message == "Model abc not found"


def test_missing_header_message_names_the_header(handler, recorder) -> None:
    result = handler.translate(MissingHeaderError("X-Api-Key"))

    assert result.status_code == ExceptionCode.MISSING_REQUEST_HEADER.http_status
    assert result.body.code == 20
    assert result.body.message == "Missing header: X-Api-Key"
    assert recorder.records == [("error", "Missing header exception: X-Api-Key", None)]


def test_missing_header_parameter_from_request_validation(handler) -> None:
    exc = RequestValidationError(
        [{"type": "missing", "loc": ("header", "x-request-id"), "msg": "Field required", "input": None}]
    )

    result = handler.translate(exc)

    assert result.body.code == 20
    assert result.body.message == "Missing header: x-request-id"


def test_only_first_field_error_is_translated(handler) -> None:
    exc = RequestValidationError(
        [
            _field_error("name", "not_blank", "Model name cannot be empty"),
            _field_error("age", "missing", "Field required"),
        ]
    )

    result = handler.translate(exc)

    assert result.status_code == 400
    assert result.body.code == ExceptionCode.VALIDATION_CONSTRAINT_VIOLATION.code
    assert result.body.message == "Model name cannot be empty"
    assert "age" not in result.body.model_dump_json()


def test_enum_field_error_uses_default_message(handler) -> None:
    exc = RequestValidationError([_field_error("type", "enum", "Input should be 'RECOGNITION'")])

    result = handler.translate(exc)

    assert result.body.code == 26
    assert result.body.message == "Input should be 'RECOGNITION'"


@pytest.mark.parametrize("error_type", ["missing", "not_empty"])
def test_empty_required_field_names_the_field(handler, error_type) -> None:
    exc = RequestValidationError([_field_error("name", error_type)])

    result = handler.translate(exc)

    assert result.status_code == 400
    assert result.body.code == ExceptionCode.EMPTY_REQUIRED_FIELD.code
    assert result.body.message == "Field name cannot be empty"


def test_size_field_error_combines_field_and_message(handler) -> None:
    exc = RequestValidationError(
        [_field_error("username", "string_too_long", "must be 3-20 chars")]
    )

    result = handler.translate(exc)

    assert result.body.code == 26
    assert "username" in result.body.message
    assert "must be 3-20 chars" in result.body.message


def test_unrecognized_field_rule_gives_undefined_code_and_empty_message(handler) -> None:
    exc = RequestValidationError([_field_error("limit", "int_parsing", "Input should be a valid integer")])

    result = handler.translate(exc)

    assert result.status_code == ExceptionCode.UNDEFINED.http_status
    assert result.body.code == 0
    assert result.body.message == ""


def test_constraint_violations_are_joined_with_trailing_separator(handler) -> None:
    exc = ConstraintViolationsError(
        [ConstraintViolation("a", "A"), ConstraintViolation("b", "B")]
    )

    result = handler.translate(exc)

    assert result.status_code == 400
    assert result.body.code == 26
    assert result.body.message == "A; B; "


def test_pydantic_validation_error_is_a_violation_collection(handler) -> None:
    class Payload(BaseModel):
        first: int
        second: str = Field(..., max_length=1)

    with pytest.raises(ValidationError) as exc_info:
        Payload(first="x", second="too long")

    result = handler.translate(exc_info.value)

    assert result.body.code == 26
    assert result.body.message.count("; ") == 2
    assert result.body.message.endswith("; ")


def test_demo_not_available_is_404(handler) -> None:
    result = handler.translate(DemoNotAvailableError())

    assert result.status_code == 404
    assert result.body.code == 404
    assert result.body.message == DemoNotAvailableError.MESSAGE


@pytest.mark.parametrize(
    ("exc", "message"),
    [
        (StarletteHTTPException(status_code=405), "Method Not Allowed"),
        (StarletteHTTPException(status_code=404, detail="No route"), "No route"),
        (StarletteHTTPException(status_code=404, detail=""), "No message available"),
    ],
)
def test_routing_failures_are_404_with_undefined_code(handler, exc, message) -> None:
    result = handler.translate(exc)

    assert result.status_code == 404
    assert result.body.code == 0
    assert result.body.message == message


@pytest.mark.parametrize("exc", [RuntimeError("boom"), KeyError("x"), StarletteHTTPException(status_code=401)])
def test_unclassified_failure_gets_generic_message(handler, exc) -> None:
    result = handler.translate(exc)

    assert result.status_code == 400
    assert result.body.code == 0
    assert result.body.message == "Something went wrong, please try again"


@pytest.mark.parametrize(
    "exc",
    [
        None,
        "not an exception",
        RequestValidationError([]),
        RequestValidationError([{"unexpected": "shape"}]),
    ],
)
def test_translate_never_raises_on_malformed_failures(handler, exc) -> None:
    result = handler.translate(exc)

    assert isinstance(result.status_code, int)
    assert isinstance(result.body.code, int)
    assert isinstance(result.body.message, str)


def test_broken_defined_failure_degrades_to_undefined(handler) -> None:
    exc = BasicError(ExceptionCode.UNDEFINED, "x")
    exc.exception_code = "corrupted"

    result = handler.translate(exc)

    assert result.body.code == 0
    assert result.body.message == "Something went wrong, please try again"


def test_log_failure_does_not_prevent_response() -> None:
    handler = ResponseExceptionHandler(_BrokenRecorder())

    result = handler.translate(ModelNotFoundError("abc"))

    assert result.status_code == 404
    assert result.body.code == 11


_DEFINED = ModelNotFoundError("abc")
_DEMO = DemoNotAvailableError()
_VIOLATIONS = ConstraintViolationsError([ConstraintViolation("a", "A")])
_FIELD = RequestValidationError([_field_error("name", "missing")])
_ROUTE = StarletteHTTPException(status_code=405)
_UNDEFINED = RuntimeError("boom")


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (MissingHeaderError("X-Api-Key"), ("error", "Missing header exception: X-Api-Key", None)),
        (_DEMO, ("error", "Demo is not available", _DEMO)),
        (_VIOLATIONS, ("error", "Constraint violation exception occurred", _VIOLATIONS)),
        (_DEFINED, ("error", "Defined exception occurred", _DEFINED)),
        (_FIELD, ("error", "Field validation failed", _FIELD)),
        (_ROUTE, ("error", "404 error has occurred", _ROUTE)),
        (_UNDEFINED, ("error", "Undefined exception occurred", _UNDEFINED)),
    ],
)
def test_every_branch_records_the_failure_once(handler, recorder, exc, expected) -> None:
    handler.translate(exc)

    assert recorder.records == [expected]


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (MissingHeaderError("X"), FailureKind.MISSING_HEADER),
        (DemoNotAvailableError(), FailureKind.DEMO_NOT_AVAILABLE),
        (ConstraintViolationsError([]), FailureKind.CONSTRAINT_VIOLATION),
        (ModelNotFoundError("x"), FailureKind.DEFINED),
        (RequestValidationError([_field_error("name", "missing")]), FailureKind.FIELD_VALIDATION),
        (StarletteHTTPException(status_code=404), FailureKind.ROUTE_NOT_MATCHED),
        (ValueError("x"), FailureKind.UNDEFINED),
    ],
)
def test_classification(exc, kind) -> None:
    assert classify_failure(exc) is kind


def test_response_body_is_code_and_message_json(handler) -> None:
    response = handler.translate(MissingHeaderError("X-Api-Key")).to_response()

    assert response.status_code == 400
    assert response.body == b'{"code":20,"message":"Missing header: X-Api-Key"}'
