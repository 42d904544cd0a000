"""
Provider Registry - Central registry for providers and model cards.

This module manages:
- Registration of provider implementations
- Built-in model cards for supported providers
- Provider configuration loading/saving, with API keys from the
  environment filling in anything the config file leaves empty
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from image_edit_studio.providers.base import (
    ModelCard,
    GenerationMode,
    ImageProvider,
    ProviderConfig,
)

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = Path.home() / ".config" / "image_edit_studio" / "providers.json"

# Environment variables consulted for API keys, per provider
API_KEY_ENV_VARS: dict[str, str] = {
    "gemini": "GOOGLE_GENERATIVE_AI_API_KEY",
    "removebg": "REMOVE_BG_API_KEY",
}


# ============================================================================
# Built-in Model Cards
# ============================================================================

BUILTIN_MODEL_CARDS: dict[str, ModelCard] = {
    # -------------------------------------------------------------------------
    # Google Gemini Image
    # Source: https://ai.google.dev/gemini-api/docs/image-generation
    # -------------------------------------------------------------------------
    "gemini-2.5-flash-image": ModelCard(
        id="gemini-2.5-flash-image",
        provider="gemini",
        name="Gemini 2.5 Flash Image",
        description="Fast multimodal generation and conversational editing",
        modes={GenerationMode.TEXT_TO_IMAGE, GenerationMode.IMAGE_TO_IMAGE, GenerationMode.INPAINTING},
        max_reference_images=3,
    ),

    "gemini-2.5-flash-image-preview": ModelCard(
        id="gemini-2.5-flash-image-preview",
        provider="gemini",
        name="Gemini 2.5 Flash Image (Preview)",
        description="Preview release of Gemini 2.5 Flash Image",
        modes={GenerationMode.TEXT_TO_IMAGE, GenerationMode.IMAGE_TO_IMAGE, GenerationMode.INPAINTING},
        max_reference_images=3,
    ),

    "gemini-3-pro-image-preview": ModelCard(
        id="gemini-3-pro-image-preview",
        provider="gemini",
        name="Gemini 3 Pro Image (Preview)",
        description="Higher quality generation and editing",
        modes={GenerationMode.TEXT_TO_IMAGE, GenerationMode.IMAGE_TO_IMAGE, GenerationMode.INPAINTING},
        max_reference_images=14,
    ),

    # -------------------------------------------------------------------------
    # remove.bg
    # -------------------------------------------------------------------------
    "removebg": ModelCard(
        id="removebg",
        provider="removebg",
        name="remove.bg",
        description="Automatic background removal",
        modes={GenerationMode.BACKGROUND_REMOVAL},
        max_reference_images=1,
        param_defaults={"size": "auto"},
    ),
}


class ProviderRegistry:
    """
    Central registry for providers and model cards.

    Handles:
    - Provider registration
    - Model card lookup
    - Configuration management
    """

    _instance: ProviderRegistry | None = None

    def __new__(cls) -> ProviderRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init()
        return cls._instance

    @classmethod
    def instance(cls) -> ProviderRegistry:
        return cls()

    def _init(self) -> None:
        """Initialize the registry."""
        self._providers: dict[str, type[ImageProvider]] = {}
        self._provider_instances: dict[str, ImageProvider] = {}
        self._model_cards: dict[str, ModelCard] = dict(BUILTIN_MODEL_CARDS)
        self._configs: dict[str, ProviderConfig] = {}
        self._config_path: Path | None = None

    # -------------------------------------------------------------------------
    # Provider Registration
    # -------------------------------------------------------------------------

    def register_provider(self, provider_class: type[ImageProvider]) -> None:
        """Register a provider implementation."""
        self._providers[provider_class.id] = provider_class

    def get_provider(self, provider_id: str) -> ImageProvider | None:
        """Get an instantiated provider; None if unknown or disabled in config."""
        if not self.get_config(provider_id).enabled:
            return None

        if provider_id in self._provider_instances:
            return self._provider_instances[provider_id]

        if provider_id not in self._providers:
            return None

        provider = self._providers[provider_id](self.get_config(provider_id))
        self._provider_instances[provider_id] = provider
        return provider

    def list_providers(self) -> list[str]:
        """Get list of registered provider IDs."""
        return list(self._providers.keys())

    def list_configured_providers(self) -> list[str]:
        """Get list of enabled providers with API keys configured."""
        configured = []
        for pid in self._providers:
            config = self.get_config(pid)
            if config.enabled and config.api_key:
                configured.append(pid)
        return configured

    # -------------------------------------------------------------------------
    # Model Cards
    # -------------------------------------------------------------------------

    def get_model(self, model_id: str) -> ModelCard | None:
        """Get a model card by ID."""
        return self._model_cards.get(model_id)

    def list_models(self, provider_id: str | None = None) -> list[ModelCard]:
        """List all model cards, optionally filtered by provider."""
        if provider_id:
            return [m for m in self._model_cards.values() if m.provider == provider_id]
        return list(self._model_cards.values())

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_config(self, provider_id: str, config: ProviderConfig) -> None:
        """Set configuration for a provider."""
        self._configs[provider_id] = config
        # Invalidate cached instance
        self._provider_instances.pop(provider_id, None)

    def get_config(self, provider_id: str) -> ProviderConfig:
        """
        Get configuration for a provider.

        An empty API key is filled from the provider's environment
        variable, if set.
        """
        config = self._configs.get(provider_id, ProviderConfig())
        env_var = API_KEY_ENV_VARS.get(provider_id)
        if not config.api_key and env_var and os.environ.get(env_var):
            config = ProviderConfig(
                api_key=os.environ[env_var],
                enabled=config.enabled,
                base_url=config.base_url,
                default_model=config.default_model,
                extra=dict(config.extra),
            )
        return config

    def load_config(self, path: Path | None = None) -> None:
        """Load provider configurations from file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        self._config_path = path

        if not path.exists():
            logger.debug("No provider config at %s", path)
            return

        try:
            with open(path) as f:
                data = json.load(f)

            for provider_id, cfg_data in data.get("providers", {}).items():
                self.set_config(provider_id, ProviderConfig(
                    api_key=cfg_data.get("api_key", ""),
                    enabled=cfg_data.get("enabled", True),
                    base_url=cfg_data.get("base_url"),
                    default_model=cfg_data.get("default_model"),
                    extra=cfg_data.get("extra", {}),
                ))
        except (OSError, ValueError, AttributeError) as e:
            logger.warning("Failed to load provider config %s: %s", path, e)
            return

        logger.info("Loaded provider config from %s", path)

    def save_config(self, path: Path | None = None) -> None:
        """Save provider configurations to file."""
        if path is None:
            path = self._config_path or DEFAULT_CONFIG_PATH

        # Ensure directory exists
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "providers": {
                pid: {
                    "api_key": cfg.api_key,
                    "enabled": cfg.enabled,
                    "base_url": cfg.base_url,
                    "default_model": cfg.default_model,
                    "extra": cfg.extra,
                }
                for pid, cfg in self._configs.items()
            },
        }

        with open(path, "w") as f:
            json.dump(data, f, indent=2)


# ============================================================================
# Module-level convenience functions
# ============================================================================

def get_registry() -> ProviderRegistry:
    """Get the global provider registry."""
    return ProviderRegistry.instance()


def get_model(model_id: str) -> ModelCard | None:
    """Get a model card by ID."""
    return get_registry().get_model(model_id)
