from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Optional
import structlog

from .settings import settings

logger = structlog.get_logger()


def build_engine(database_url: str, **kwargs) -> Engine:
    """Создать движок базы данных

    Для SQLite разрешаем использование соединения из разных потоков:
    FastAPI выполняет синхронные зависимости в пуле потоков.
    """
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args, echo=settings.debug, **kwargs)


engine = build_engine(settings.database_url)

# Фабрика сессий
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Базовый класс для моделей
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Сессия базы данных на время запроса"""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e), error_type=type(e).__name__)
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(bind: Optional[Engine] = None) -> None:
    """Создать все таблицы"""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created", url=str((bind or engine).url))
