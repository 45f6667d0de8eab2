"""Recipe provider contract, source keys and the provider registry.

Every recipe source (the community database or an external API) is a
:class:`RecipeProvider` registered under one :class:`SourceKey`. Callers
look providers up through :class:`ProviderRegistry` instead of switching
on source strings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class SourceKey(str, Enum):
    """Closed set of recipe sources."""
    COMMUNITY = 'community'
    MEALDB = 'external:mealdb'

    @property
    def short_name(self):
        return self.value.split(':', 1)[-1]

    @property
    def is_external(self):
        return self.value.startswith('external:')

    @classmethod
    def from_param(cls, value):
        """Resolve 'mealdb', 'external:mealdb' or 'community' (case-insensitive)."""
        if not value:
            return None
        value = value.strip().lower()
        for key in cls:
            if value in (key.value, key.short_name):
                return key
        return None


@dataclass(frozen=True)
class ProviderRecipe:
    """Provider-native recipe payload tagged with the source it came from."""
    source: SourceKey
    data: dict = field(hash=False)


class RecipeProvider(ABC):
    """Abstraction over one recipe source.

    Each method issues the provider's request(s) and raises
    ``ProviderUnavailable`` on any transport or HTTP failure; callers
    treat that as zero results.
    """

    source_key = None

    @abstractmethod
    def search(self, query):
        ...

    @abstractmethod
    def get_by_id(self, recipe_id):
        ...

    @abstractmethod
    def list_by_category(self, category):
        ...

    @abstractmethod
    def list_by_area(self, cuisine):
        ...

    @abstractmethod
    def list_by_ingredient(self, ingredient):
        ...

    @abstractmethod
    def random(self, count):
        ...


class ProviderRegistry:
    """Dispatch table SourceKey -> RecipeProvider."""

    def __init__(self):
        self._providers = {}

    def register(self, provider):
        self._providers[provider.source_key] = provider

    def get(self, source):
        return self._providers.get(source)

    def sources(self):
        return list(self._providers)

    def __contains__(self, source):
        return source in self._providers
