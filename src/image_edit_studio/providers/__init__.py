"""
Image Providers.

This package provides integrations with the external image services:
- Google Gemini: image generation, editing and inpainting
- remove.bg: background removal

Usage:
    from image_edit_studio.providers import get_registry

    registry = get_registry()
    registry.load_config()

    gemini = registry.get_provider("gemini")
    image = await gemini.generate_image("A lighthouse at dusk")
"""

from image_edit_studio.providers.base import (
    AuthenticationError,
    GenerationError,
    GenerationMode,
    GenerationRequest,
    GenerationResult,
    ImageProvider,
    ModelCard,
    ProviderConfig,
    ProviderError,
    RateLimitError,
)

from image_edit_studio.providers.registry import (
    BUILTIN_MODEL_CARDS,
    ProviderRegistry,
    get_model,
    get_registry,
)

# Import providers to register them
from image_edit_studio.providers.gemini import GeminiProvider
from image_edit_studio.providers.removebg import RemoveBgProvider


# Auto-register providers
def _register_providers():
    registry = get_registry()
    registry.register_provider(GeminiProvider)
    registry.register_provider(RemoveBgProvider)

_register_providers()


__all__ = [
    # Base classes
    "ImageProvider",
    "ModelCard",
    "ProviderConfig",
    "GenerationMode",
    "GenerationRequest",
    "GenerationResult",
    # Exceptions
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "GenerationError",
    # Registry
    "ProviderRegistry",
    "get_registry",
    "get_model",
    "BUILTIN_MODEL_CARDS",
    # Providers
    "GeminiProvider",
    "RemoveBgProvider",
]
