"""External reasoning service providers."""

from __future__ import annotations

from skumapper.core.config import LLMConfig
from skumapper.core.protocols import IModelProvider
from skumapper.model_providers.litellm_provider import LiteLLMModelProvider
from skumapper.model_providers.mock_provider import MockModelProvider


def create_model_provider(config: LLMConfig | None = None) -> IModelProvider | None:
    """Build the configured provider, or None when the fallback is disabled."""
    if config is None:
        config = LLMConfig()
    if config.provider == "disabled":
        return None
    if config.provider == "mock":
        return MockModelProvider()
    return LiteLLMModelProvider(config)
