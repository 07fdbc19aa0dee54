from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Игнорируем дополнительные поля из .env
    )

    # Application settings
    app_host: str = Field("127.0.0.1")
    app_port: int = Field(8000)
    debug: bool = Field(False)

    # Database settings
    database_url: str = Field("sqlite:///./frs_admin.db")

    # Models
    classifier_name: str = Field("FaceClassifier")
    api_key_header: str = Field("X-Api-Key")

    # Demo
    demo_enabled: bool = Field(False)
    demo_model_id: str = Field("demo")

    # Logging
    log_level: str = Field("INFO")


# Глобальный экземпляр настроек
settings = Settings()
