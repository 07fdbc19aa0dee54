from typing import Any, Optional, Protocol

import structlog


class ErrorRecorder(Protocol):
    """Приемник диагностических записей об ошибках"""

    def record(self, severity: str, message: str, cause: Any = None) -> None:
        ...


class StructlogErrorRecorder:
    """Запись ошибок через structlog"""

    def __init__(self, logger: Optional[Any] = None):
        self.logger = logger or structlog.get_logger("app.errors")

    def record(self, severity: str, message: str, cause: Any = None) -> None:
        log = getattr(self.logger, severity, self.logger.error)

        if isinstance(cause, BaseException):
            log(message, exc_info=cause, error_type=type(cause).__name__)
        elif cause is not None:
            log(message, cause=str(cause))
        else:
            log(message)
