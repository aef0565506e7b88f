"""
Feature store protocol and factory.

Defines the interface that all geodata providers must implement,
enabling the annotation pipeline to run against Overpass, an offline
dump or a test stub.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.config import Settings
    from app.models import BoundingBox, Feature


@runtime_checkable
class FeatureStore(Protocol):
    """
    Protocol for geodata feature stores.

    Uses structural subtyping (PEP 544).

    Example:
        >>> store = get_feature_store("overpass", settings)
        >>> features = await store.lookup(bbox)
    """

    @property
    def name(self) -> str:
        """
        Provider identifier.

        Returns:
            Short name like "overpass", "file"
        """
        ...

    async def lookup(self, bbox: "BoundingBox") -> List["Feature"]:
        """
        Fetch passes, rivers and towns inside a bounding box.

        Args:
            bbox: Area to query

        Returns:
            Features in source order (order is significant for ties)

        Raises:
            ProviderError: If the request fails or the payload is malformed
        """
        ...


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ProviderNotFoundError(ProviderError):
    """Raised when an unknown provider is requested."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Provider not found: {name}")


class ProviderRequestError(ProviderError):
    """Raised when a provider request fails."""

    pass


class ProviderConfigError(ProviderError):
    """Raised when provider configuration is incomplete."""

    pass


def get_feature_store(name: str, settings: "Settings") -> FeatureStore:
    """
    Factory function to create feature store instances.

    Args:
        name: Provider identifier ("overpass" or "file")
        settings: Application settings for provider configuration

    Returns:
        FeatureStore instance

    Raises:
        ProviderNotFoundError: If provider is not known
        ProviderConfigError: If provider configuration is incomplete
    """
    # Import here to avoid circular imports
    from providers.overpass import OverpassProvider
    from providers.static import StaticFeatureStore

    if name == "overpass":
        return OverpassProvider(url=settings.overpass_url, timeout_s=settings.lookup_timeout_s)
    elif name == "file":
        if not settings.can_use_file_provider():
            raise ProviderConfigError("file", "No features file configured (RL_FEATURES_FILE)")
        return StaticFeatureStore.from_json(settings.features_file)
    else:
        raise ProviderNotFoundError(name)


def available_providers() -> list[str]:
    """Return list of available provider names."""
    return ["overpass", "file"]
