"""nstack feature providers.

Each optional feature (database toolkit, UI library, auth) is a frozen
``Provider`` record.  The registry is the only place that enumerates them.

Quick usage::

    from nstack.features import get_provider, list_providers

    for provider in list_providers("database"):
        print(provider.id, provider.description)

    drizzle = get_provider("drizzle-postgres")
"""

from nstack.features.models import (
    ArtifactTemplate,
    Category,
    DependencySpec,
    EnvEntry,
    Provider,
    ResolvedArtifact,
)
from nstack.features.registry import (
    REGISTRY,
    ProviderRegistry,
    get_provider,
    grouped_providers,
    list_providers,
)
from nstack.features.templates import TemplateRenderer

__all__ = [
    "REGISTRY",
    "ArtifactTemplate",
    "Category",
    "DependencySpec",
    "EnvEntry",
    "Provider",
    "ProviderRegistry",
    "ResolvedArtifact",
    "TemplateRenderer",
    "get_provider",
    "grouped_providers",
    "list_providers",
]
