from .base import LLMProvider
from .provider import ProviderConfig, ProviderType, load_provider_config, new_provider
from .service import LLMService

__all__ = [
    'LLMProvider',
    'LLMService',
    'ProviderConfig',
    'ProviderType',
    'load_provider_config',
    'new_provider',
]
