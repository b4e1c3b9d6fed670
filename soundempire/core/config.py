from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./soundempire.db"
    APP_ENV: str = "development"

    # One career per slot; the presentation layer only ever uses one.
    SAVE_SLOT: str = "default"

    # Fixed seed for reproducible runs. Unset means fresh entropy per process.
    RNG_SEED: Optional[int] = None

    LOG_LEVEL: str = "INFO"

    # Comma-separated allowed origins, or "*" to allow all.
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
