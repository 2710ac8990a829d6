"""Provider selection from configuration."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .. import config
from .base import DEFAULT_HTTP_TIMEOUT_SECONDS, LLMProvider
from .claude import ClaudeProvider
from .gemini import GeminiProvider
from .openai_compatible import DEEPSEEK, GROQ, OPENAI, OpenAICompatibleProvider

logger = logging.getLogger(__name__)


class ProviderType(str, Enum):
    OPENAI = "openai"
    GROQ = "groq"
    DEEPSEEK = "deepseek"
    CLAUDE = "claude"
    GEMINI = "gemini"
    VERTEX = "vertex"


@dataclass
class ProviderConfig:
    type: ProviderType
    api_key: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    # Vertex only
    project_id: Optional[str] = None
    location: Optional[str] = None
    credentials_path: Optional[str] = None


_API_KEYS = {
    ProviderType.OPENAI: lambda: config.OPENAI_API_KEY,
    ProviderType.GROQ: lambda: config.GROQ_API_KEY,
    ProviderType.DEEPSEEK: lambda: config.DEEPSEEK_API_KEY,
    ProviderType.CLAUDE: lambda: config.CLAUDE_API_KEY,
    ProviderType.GEMINI: lambda: config.GEMINI_API_KEY,
}


def parse_provider_type(value: str) -> ProviderType:
    try:
        return ProviderType((value or "").strip().lower())
    except ValueError:
        raise ValueError(f"unsupported LLM provider: {value}") from None


def load_provider_config() -> ProviderConfig:
    """Build a ProviderConfig from the LLM_* settings."""
    provider_type = parse_provider_type(config.LLM_PROVIDER)
    cfg = ProviderConfig(
        type=provider_type,
        model=config.LLM_MODEL or None,
        temperature=config.LLM_TEMPERATURE,
        max_tokens=config.LLM_MAX_TOKENS,
    )
    if provider_type is ProviderType.VERTEX:
        cfg.project_id = config.GOOGLE_CLOUD_PROJECT_ID
        cfg.location = config.VERTEX_AI_LOCATION
        cfg.credentials_path = config.GOOGLE_APPLICATION_CREDENTIALS
    else:
        cfg.api_key = _API_KEYS[provider_type]()
    return cfg


def new_provider(cfg: ProviderConfig) -> LLMProvider:
    """Instantiate the provider described by cfg.

    Raises:
        ValueError: unknown provider type or missing credentials.
    """
    provider_type = cfg.type if isinstance(cfg.type, ProviderType) else parse_provider_type(cfg.type)

    if provider_type is ProviderType.VERTEX:
        # Imported lazily: the vertexai SDK is heavy and only needed here.
        from .vertex import VertexProvider

        return VertexProvider(
            project_id=cfg.project_id,
            location=cfg.location or "us-central1",
            model=cfg.model,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            credentials_path=cfg.credentials_path,
        )

    if not cfg.api_key:
        raise ValueError(f"{provider_type.value} API key is required")

    common = dict(
        model=cfg.model,
        temperature=cfg.temperature,
        max_tokens=cfg.max_tokens,
        timeout=cfg.timeout,
    )
    if provider_type is ProviderType.OPENAI:
        return OpenAICompatibleProvider(OPENAI, cfg.api_key, **common)
    if provider_type is ProviderType.GROQ:
        return OpenAICompatibleProvider(GROQ, cfg.api_key, **common)
    if provider_type is ProviderType.DEEPSEEK:
        return OpenAICompatibleProvider(DEEPSEEK, cfg.api_key, **common)
    if provider_type is ProviderType.CLAUDE:
        return ClaudeProvider(cfg.api_key, **common)
    return GeminiProvider(cfg.api_key, **common)


def load_provider_from_env() -> LLMProvider:
    provider = new_provider(load_provider_config())
    logger.info(f"[LLM] Using provider {provider.get_provider_name()} (model: {provider.model})")
    return provider
