# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "Clinic Queue API"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "clinic"
    DB_PASSWORD: str = ""
    DB_NAME: str = "clinic_queue"
    DB_ECHO: bool = False

    # si viene, pisa la URL armada con DB_* (tests / sqlite local)
    DATABASE_URL: str | None = None

    APPOINTMENT_REFERENCE_PREFIX: str = "REF"
    PAYMENT_REFERENCE_PREFIX: str = "PAY"

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")

settings = Settings()  # type: ignore[call-arg]
