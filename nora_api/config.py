from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── App ──────────────────────────────
    APP_NAME: str = "nora-api"
    ENV: str = "development"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALLOWED_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # ─── OpenAI ───────────────────────────
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_ADVANCED_MODEL: str = "gpt-4"
    OPENAI_VISION_MODEL: str = "gpt-4o"
    OPENAI_TRANSCRIPTION_MODEL: str = "whisper-1"
    OPENAI_TEMPERATURE: float = 0.8
    OPENAI_MAX_TOKENS: int = 150
    OPENAI_TIMEOUT: int = 30
    OPENAI_RETRIES: int = 3

    # ─── Uploads ──────────────────────────
    UPLOAD_MAX_BYTES: int = 25 * 1024 * 1024

    # ─── Usage tracking ───────────────────
    USAGE_RETENTION_DAYS: int = 7

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_development(self) -> bool:
        return self.ENV.lower() in ("development", "local")

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


settings = Settings()
