"""Provider registry: maps provider ids to adapter classes and builds templates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from lifepa.config import Settings
from lifepa.errors import ConfigError
from lifepa.providers.base import HTTPProvider
from lifepa.providers.cohere import CohereProvider
from lifepa.providers.gemini import GeminiProvider
from lifepa.providers.huggingface import HuggingFaceProvider
from lifepa.providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ProviderInfo:
    provider_id: str
    display_name: str
    key_url: str
    adapter_class: type[HTTPProvider]
    # Used when Settings has no <id>_model / <id>_base_url field.
    default_model: str = ""
    default_base_url: str = ""


_providers: dict[str, ProviderInfo] = {}


def register_provider(info: ProviderInfo) -> None:
    """Register an adapter class under its provider id."""
    _providers[info.provider_id] = info


def get_provider_info(provider_id: str) -> ProviderInfo | None:
    return _providers.get(provider_id.strip().lower())


def available_providers() -> list[str]:
    return list(_providers)


def provider_display_name(provider_id: str) -> str:
    info = get_provider_info(provider_id)
    return info.display_name if info else "AI"


def provider_key_url(provider_id: str) -> str:
    info = get_provider_info(provider_id)
    return info.key_url if info else ""


def _settings_for(info: ProviderInfo, settings: Settings) -> tuple[str, str]:
    model = getattr(settings, f"{info.provider_id}_model", None) or info.default_model
    base_url = getattr(settings, f"{info.provider_id}_base_url", None) or info.default_base_url
    if not model or not base_url:
        raise ConfigError(f"no model or base URL configured for provider: {info.provider_id}")
    return model, base_url


def build_provider(
    provider_id: str,
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HTTPProvider:
    """Build an uninitialized adapter template for ``provider_id``."""
    info = get_provider_info(provider_id)
    if info is None:
        raise ConfigError(f"unknown AI provider: {provider_id}")
    model, base_url = _settings_for(info, settings)
    logger.debug("building provider %s model=%s", info.provider_id, model)
    return info.adapter_class(
        model,
        base_url,
        timeout_seconds=settings.provider_timeout_seconds,
        transport=transport,
    )


def register_builtin_providers() -> None:
    register_provider(
        ProviderInfo("openai", "OpenAI", "https://platform.openai.com/api-keys", OpenAIProvider)
    )
    register_provider(
        ProviderInfo(
            "gemini", "Google Gemini", "https://aistudio.google.com/app/apikey", GeminiProvider
        )
    )
    register_provider(
        ProviderInfo(
            "cohere", "Cohere", "https://dashboard.cohere.com/api-keys", CohereProvider
        )
    )
    register_provider(
        ProviderInfo(
            "huggingface",
            "Hugging Face",
            "https://huggingface.co/settings/tokens",
            HuggingFaceProvider,
        )
    )


def _reset() -> None:
    """Restore the built-in provider set (for testing)."""
    _providers.clear()
    register_builtin_providers()


register_builtin_providers()
