"""
Application-wide settings using pydantic-settings.
All runtime env access in esa_rationale/ should go through this module.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    LOG_DIR: str = "./logs"
    LOG_FILE_NAME: str = "app.debug.log"
    LOG_FILE_WHEN: str = "midnight"
    LOG_FILE_INTERVAL: int = 1
    LOG_FILE_BACKUP_COUNT: int = 7
    LOG_FILE_ENCODING: str = "utf-8"
    LOG_FILE_LEVEL: str = "DEBUG"
    LOG_TRUNCATE: int = 600

    # Provider credentials
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = ""
    OLLAMA_BASE_URL: str = "http://localhost:11434"

    # Rationale generation
    RATIONALE_PROVIDER: str = ""
    RATIONALE_MODEL: str = "gpt-4o"
    RATIONALE_TEMPERATURE: float = 0.1
    GENERATION_TIMEOUT_S: float = 60.0

    # Audit trail
    DB_PATH: str = "./data/kdigo_history.db"
    AUDITING_ENABLED: bool = True
    AUDIT_REQUIRED: bool = False
    HISTORY_LIMIT: int = 50

    # Static pages
    WEB_DIR: str = "web"

    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_provider(self) -> str:
        return (self.RATIONALE_PROVIDER or "").strip().lower()

    def get_base_url(self, provider_hint: str = "") -> str:
        hint = (provider_hint or "").strip().lower()
        if hint == "ollama":
            return self.OLLAMA_BASE_URL
        return self.OPENAI_BASE_URL

    def has_openai_creds(self) -> bool:
        return bool(self.OPENAI_API_KEY)


settings = Settings()
