#!/usr/bin/env python3
"""
Скрипт запуска административного сервера Face Recognition
"""
import sys
import uvicorn
from pathlib import Path

# Добавляем корневую директорию в PYTHONPATH
sys.path.insert(0, str(Path(__file__).parent))

from app.config.settings import settings


def main():
    """Главная функция запуска"""

    print("Запуск Face Recognition Admin...")
    print(f"Адрес: http://{settings.app_host}:{settings.app_port}")
    print(f"Режим отладки: {settings.debug}")
    print(f"База данных: {settings.database_url}")
    print(f"Демо-модель: {'включена' if settings.demo_enabled else 'выключена'}")

    try:
        uvicorn.run(
            "app.main:app",
            host=settings.app_host,
            port=settings.app_port,
            reload=settings.debug,
            log_level=settings.log_level.lower(),
            access_log=True
        )
    except KeyboardInterrupt:
        print("\nПриложение остановлено пользователем")
    except Exception as e:
        print(f"Ошибка запуска: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
