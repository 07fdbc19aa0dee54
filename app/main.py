from fastapi import FastAPI, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import structlog
from contextlib import asynccontextmanager
from typing import Optional

from app.config.database import create_tables, get_db
from app.config.settings import settings
from app.handlers.response_exception_handler import ResponseExceptionHandler, register_exception_handlers
from app.routes import api

# Настройка логирования
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    # Startup
    logger.info("Starting Face Recognition admin backend")

    try:
        # Создаем таблицы БД
        create_tables()
        logger.info("Database tables created/verified")

    except Exception as e:
        logger.error("Failed to create database tables", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down Face Recognition admin backend")


def create_app(exception_handler: Optional[ResponseExceptionHandler] = None) -> FastAPI:
    """Создание и настройка FastAPI приложения"""

    app = FastAPI(
        title="Face Recognition Admin",
        description="Администрирование моделей системы распознавания лиц",
        version="1.0.0",
        # Отладочная страница Starlette не должна заменять JSON тело ошибки
        debug=False,
        lifespan=lifespan
    )

    # Обработка ошибок
    register_exception_handlers(app, exception_handler)

    # Подключение маршрутов
    app.include_router(api.router)

    @app.get("/health")
    async def health_check(db: Session = Depends(get_db)):
        """Проверка состояния системы"""
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "services": {
                "database": "ok"
            }
        }

    return app


# Создаем экземпляр приложения
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
