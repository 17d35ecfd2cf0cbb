from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Linkshelf – Save URL API"
    log_level: str = "INFO"

    fetch_timeout: float = 10.0  # seconds
    max_content_size: int = 5 * 1024 * 1024  # 5 MB
    max_redirects: int = 10
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )

    save_rate_limit: str = "30/minute"

    # Bearer token -> owner id, e.g. LINKSHELF_API_TOKENS='{"secret": "user-1"}'
    api_tokens: dict[str, str] = {}

    model_config = SettingsConfigDict(
        env_prefix="LINKSHELF_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
