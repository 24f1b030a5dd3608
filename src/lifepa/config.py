"""Application configuration contract."""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    app_db: str = Field(alias="APP_DB", default="/tmp/lifepa.db")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")

    ai_provider: str = Field(alias="AI_PROVIDER", default="cohere")
    provider_timeout_seconds: int = Field(alias="PROVIDER_TIMEOUT_SECONDS", default=30)
    chat_timeout_seconds: float = Field(alias="CHAT_TIMEOUT_SECONDS", default=60.0)

    openai_model: str = Field(alias="OPENAI_MODEL", default="gpt-3.5-turbo")
    openai_base_url: str = Field(alias="OPENAI_BASE_URL", default="https://api.openai.com/v1")
    gemini_model: str = Field(alias="GEMINI_MODEL", default="gemini-2.5-flash")
    gemini_base_url: str = Field(
        alias="GEMINI_BASE_URL", default="https://generativelanguage.googleapis.com/v1beta"
    )
    cohere_model: str = Field(alias="COHERE_MODEL", default="command-r-08-2024")
    cohere_base_url: str = Field(alias="COHERE_BASE_URL", default="https://api.cohere.ai/v1")
    huggingface_model: str = Field(alias="HUGGINGFACE_MODEL", default="gpt2")
    huggingface_base_url: str = Field(
        alias="HUGGINGFACE_BASE_URL", default="https://api-inference.huggingface.co/models"
    )

    retry_max_retries: int = Field(alias="RETRY_MAX_RETRIES", default=3)
    retry_base_delay_ms: int = Field(alias="RETRY_BASE_DELAY_MS", default=1000)
    retry_max_delay_ms: int = Field(alias="RETRY_MAX_DELAY_MS", default=10000)

    classify_prefix_chars: int = Field(alias="CLASSIFY_PREFIX_CHARS", default=1000)
    default_currency: str = Field(alias="DEFAULT_CURRENCY", default="USD")

    # Empty path keeps secrets in memory only.
    secret_store_path: str = Field(alias="SECRET_STORE_PATH", default="")


def validate_settings_for_env(settings: Settings) -> None:
    from lifepa.providers.registry import available_providers

    known = available_providers()
    problems: list[str] = []
    if settings.ai_provider.strip().lower() not in known:
        problems.append(f"AI_PROVIDER(one of {', '.join(sorted(known))})")
    if settings.retry_max_retries < 0:
        problems.append("RETRY_MAX_RETRIES(>= 0)")
    if settings.retry_base_delay_ms <= 0:
        problems.append("RETRY_BASE_DELAY_MS(> 0)")
    if settings.retry_max_delay_ms < settings.retry_base_delay_ms:
        problems.append("RETRY_MAX_DELAY_MS(>= RETRY_BASE_DELAY_MS)")
    if settings.classify_prefix_chars <= 0:
        problems.append("CLASSIFY_PREFIX_CHARS(> 0)")

    if settings.secret_store_path.strip():
        msg = (
            "SECURITY WARNING: SECRET_STORE_PATH keeps API keys in a plaintext file. "
            "Prefer a platform keychain in production."
        )
        logger.warning(msg)
        if settings.app_env == "prod":
            problems.append("SECRET_STORE_PATH(plaintext store not allowed in prod)")

    if problems:
        keys = ", ".join(problems)
        raise ValueError(f"invalid configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
