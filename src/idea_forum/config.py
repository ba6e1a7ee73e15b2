from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "idea-forum"
    app_env: str = "dev"
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "idea_forum"
    db_user: str = "forum"
    db_password: str = "forum"
    database_url: str | None = None  # full URL, wins over db_* when set
    # Caller identity forwarded by the auth proxy
    auth_user_header: str = "X-User-Id"
    # Feeds
    page_size_default: int = 10
    page_size_max: int = 100
    default_category_color: str = "#3b82f6"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
