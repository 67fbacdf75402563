#Description: Pydantic settings loader with defaults, reading .env. Resolved once at startup.
import os
import pathlib

from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

env_path = pathlib.Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

class Settings(BaseSettings):
    APP_ENV: str = Field(default="development")
    DATABASE_URL: str = Field(default="sqlite:///./tvwh.db")
    MODE: str = Field(default=os.getenv("MODE", "paper"))  # live|paper|dryrun

    WEBHOOK_TOKEN: str | None = None

    KRAKEN_API_KEY: str | None = None
    KRAKEN_API_SECRET: str | None = None
    KRAKEN_BASE_URL: str = Field(default="https://api.kraken.com")
    KRAKEN_TIMEOUT_SECONDS: float = Field(default=20.0)

    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_CHAT_ID: str | None = None
    TELEGRAM_BASE_URL: str = Field(default="https://api.telegram.org")
    TELEGRAM_TIMEOUT_SECONDS: float = Field(default=10.0)

    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8081)
    RECENT_LIMIT: int = Field(default=50)

    class Config:
        env_file = ".env"
        extra = "allow"

    @property
    def is_live(self) -> bool:
        return self.MODE.lower() == "live"

    @property
    def kraken_enabled(self) -> bool:
        return bool(self.KRAKEN_API_KEY and self.KRAKEN_API_SECRET)

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.TELEGRAM_BOT_TOKEN and self.TELEGRAM_CHAT_ID)

settings = Settings()
