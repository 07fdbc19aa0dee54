from pydantic import BaseModel


class ExceptionResponseDto(BaseModel):
    """Тело ответа с ошибкой"""

    code: int
    message: str
