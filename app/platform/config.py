from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "A11y Audit AI"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True
    CORS_ORIGINS: str = "*"
    LOG_DIR: str = "logs"

    # ── Database ────────────────────────────────
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = False

    # ── JWT / Auth ──────────────────────────────
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"

    # ── Suggestions (OpenRouter) ────────────────
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    SUGGESTIONS_MODEL: str = "google/gemini-2.0-flash-001"
    SUGGESTIONS_TEMPERATURE: float = 0.4
    LLM_TIMEOUT_SECONDS: int = 60

    # ── Browser / axe-core ──────────────────────
    BROWSER_REMOTE_URL: Optional[str] = None  # Selenium grid / browserless endpoint
    CHROMEDRIVER_PATH: Optional[str] = None
    NAVIGATION_TIMEOUT_SECONDS: int = 30
    AUDIT_SCRIPT_TIMEOUT_SECONDS: int = 60
    NETWORK_IDLE_MS: int = 500
    VIEWPORT_WIDTH: int = 1200
    VIEWPORT_HEIGHT: int = 800
    AXE_SCRIPT_PATH: str = "assets/axe.min.js"
    AXE_CDN_URL: str = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"

    # ── Reports ─────────────────────────────────
    REPORT_LIST_LIMIT: int = 50
    REPORT_HISTORY_LIMIT: int = 20
    TREND_MAX_POINTS: int = 20

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
