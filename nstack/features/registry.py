"""Provider registry: the single source of truth for which features exist.

The registry is built once at import time from the catalog modules and never
mutated afterwards, so it can be shared freely.  It performs lookups only;
adding a feature means adding a ``Provider`` entry to one of the catalogs.
"""

from __future__ import annotations

from collections.abc import Iterable

from nstack.errors import UnknownProviderError
from nstack.features.auth import AUTH_PROVIDERS
from nstack.features.database import DATABASE_PROVIDERS
from nstack.features.models import Category, Provider
from nstack.features.ui import UI_PROVIDERS


class ProviderRegistry:
    """Ordered, read-only catalog of providers keyed by id."""

    def __init__(self, providers: Iterable[Provider]) -> None:
        ordered = tuple(providers)
        by_id: dict[str, Provider] = {}
        for provider in ordered:
            if provider.id in by_id:
                raise ValueError(f"Duplicate provider id: {provider.id!r}")
            by_id[provider.id] = provider
        self._providers = ordered
        self._by_id = by_id

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._by_id

    def ids(self) -> list[str]:
        return [p.id for p in self._providers]

    def list(self, category: Category | str | None = None) -> list[Provider]:
        """Providers in declaration order, optionally restricted to one category."""
        if category is None:
            return list(self._providers)
        wanted = Category(category)
        return [p for p in self._providers if p.category is wanted]

    def grouped(self) -> dict[Category, list[Provider]]:
        """Providers grouped by category; categories in enum order, empty ones omitted."""
        groups: dict[Category, list[Provider]] = {}
        for category in Category:
            members = self.list(category)
            if members:
                groups[category] = members
        return groups

    def get(self, provider_id: str) -> Provider:
        """Look up a provider by id.

        Raises:
            UnknownProviderError: If *provider_id* is not registered.
        """
        try:
            return self._by_id[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id, known=self.ids()) from None


REGISTRY = ProviderRegistry(DATABASE_PROVIDERS + UI_PROVIDERS + AUTH_PROVIDERS)


def list_providers(category: Category | str | None = None) -> list[Provider]:
    """List registered providers in declaration order."""
    return REGISTRY.list(category)


def grouped_providers() -> dict[Category, list[Provider]]:
    """Registered providers grouped by category."""
    return REGISTRY.grouped()


def get_provider(provider_id: str) -> Provider:
    """Return the provider registered under *provider_id*."""
    return REGISTRY.get(provider_id)
