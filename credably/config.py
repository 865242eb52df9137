from pydantic_settings import BaseSettings
from functools import lru_cache
import os

class Settings(BaseSettings):
    # API Keys
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"

    # Session JWT issued by the sign-in provider (HS256 shared secret)
    auth_secret: str = ""
    session_cookie_name: str = "credably.session-token"

    # Database - DATABASE_URL in production, fallback to SQLite for local
    database_url: str = None

    # App Settings
    app_name: str = "Credably"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Public links (share URLs)
    public_base_url: str = "http://localhost:3002"
    allowed_origins: str = "http://localhost:3000,http://localhost:3002"

    rate_limit_enabled: bool = True

    # Provider APIs
    github_api_url: str = "https://api.github.com"
    twitter_api_url: str = "https://api.twitter.com/2"
    instagram_api_url: str = "https://graph.instagram.com"
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3"

    # API Settings
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "8000"))

    class Config:
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.database_url is None:
            self.database_url = "sqlite+aiosqlite:///./database/credably.db"
        # Hosted Postgres hands out postgres:// URLs, SQLAlchemy async needs the asyncpg driver
        if self.database_url.startswith("postgres://"):
            self.database_url = self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif self.database_url.startswith("postgresql://"):
            self.database_url = self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

@lru_cache()
def get_settings() -> Settings:
    return Settings()
