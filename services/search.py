"""
Search Orchestrator

Decides which recipe providers to call for a set of filters, applies the
remaining filters client-side, deduplicates, applies nutrition filters
and truncates. Upstream failures degrade to an empty result with an
error field; search itself never raises for provider trouble.
"""

import logging

from constants import NUTRITION_FILTERS
from providers.base import SourceKey
from .errors import ProviderUnavailable
from .parsing import to_int_or_none

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = SourceKey.MEALDB
ALL_SOURCES = 'all'

# Seed filters in priority order, with the provider method each one calls
SEED_FILTERS = (
    ('query', 'search'),
    ('ingredient', 'list_by_ingredient'),
    ('category', 'list_by_category'),
    ('cuisine', 'list_by_area'),
)


def _contains(value, term):
    return term.lower() in (value or '').lower()


def _matches_category(recipe, term):
    return _contains(recipe.category, term)


def _matches_cuisine(recipe, term):
    return _contains(recipe.cuisine, term)


def _matches_ingredient(recipe, term):
    return any(_contains(ingredient.name, term) for ingredient in recipe.ingredients)


def _matches_query(recipe, term):
    return _contains(recipe.title, term) or _contains(recipe.description, term)


CLIENT_FILTERS = {
    'query': _matches_query,
    'ingredient': _matches_ingredient,
    'category': _matches_category,
    'cuisine': _matches_cuisine,
}


def clean_filters(filters):
    """Strip string values and drop blanks."""
    cleaned = {}
    for key, value in (filters or {}).items():
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ''):
            cleaned[key] = value
    return cleaned


def apply_fallback_filters(recipes, filters, skip=None):
    """
    Apply each present filter client-side.

    A filter that would leave no recipes is discarded (logged as a
    warning) and the unfiltered set is kept for the next filter.
    """
    for name, matches in CLIENT_FILTERS.items():
        term = filters.get(name)
        if not term or name == skip:
            continue
        filtered = [recipe for recipe in recipes if matches(recipe, term)]
        if filtered:
            recipes = filtered
        else:
            logger.warning("Filter %s=%r matched none of %d recipes; ignoring it", name, term, len(recipes))
    return recipes


def dedupe(recipes):
    seen = set()
    unique = []
    for recipe in recipes:
        if recipe.identity in seen:
            continue
        seen.add(recipe.identity)
        unique.append(recipe)
    return unique


class RecipeSearch:
    def __init__(self, registry, normalizer, resolver=None, default_number=20):
        self.registry = registry
        self.normalizer = normalizer
        self.resolver = resolver
        self.default_number = default_number

    def _sources(self, source_param):
        if not source_param:
            return [DEFAULT_SOURCE]
        if str(source_param).strip().lower() == ALL_SOURCES:
            return self.registry.sources()
        source = SourceKey.from_param(source_param)
        if source is None or source not in self.registry:
            return []
        return [source]

    def _seed(self, provider, filters, number):
        for name, method in SEED_FILTERS:
            term = filters.get(name)
            if term:
                return name, getattr(provider, method)(term)
        return None, provider.random(number)

    def _fetch_by_id(self, sources, recipe_id):
        """First source that knows recipe_id wins; raises only when every source failed."""
        failures = []
        for source in sources:
            try:
                provider_recipe = self.registry.get(source).get_by_id(recipe_id)
            except ProviderUnavailable as e:
                logger.warning("Lookup of %s via %s failed: %s", recipe_id, source.value, e.reason)
                failures.append(e)
                continue
            if provider_recipe is not None:
                return [self.normalizer.normalize(provider_recipe)]
        if failures and len(failures) == len(sources):
            raise failures[0]
        return []

    def _fetch_seeded(self, sources, filters, number):
        """Seed call against each source; raises only when every source failed."""
        recipes = []
        seed_name = None
        failures = []
        for source in sources:
            try:
                seed_name, provider_recipes = self._seed(self.registry.get(source), filters, number)
            except ProviderUnavailable as e:
                logger.warning("Search against %s failed: %s", source.value, e.reason)
                failures.append(e)
                continue
            recipes.extend(self.normalizer.normalize_all(provider_recipes))
        if failures and len(failures) == len(sources):
            raise failures[0]
        return seed_name, recipes

    def _apply_nutrition_filter(self, recipes, filter_name):
        predicate = NUTRITION_FILTERS.get(filter_name)
        if predicate is None:
            logger.warning("Unknown nutrition filter %r ignored", filter_name)
            return recipes

        missing = [recipe for recipe in recipes if recipe.nutrition is None]
        if missing and self.resolver is not None:
            resolved = self.resolver.resolve_many(recipe.title for recipe in missing)
            for recipe, nutrition in zip(missing, resolved):
                recipe.nutrition = nutrition

        return [recipe for recipe in recipes if recipe.nutrition is not None and predicate(recipe.nutrition)]

    def search(self, filters):
        """
        Run a recipe search.

        Returns {recipes, count, total, source, filters} and, when the
        upstream call failed, an error field with recipes empty.
        """
        filters = clean_filters(filters)
        number = to_int_or_none(filters.get('number'))
        if number is None or number < 1:
            number = self.default_number

        source_param = filters.get('source') or DEFAULT_SOURCE.short_name
        result = {
            'recipes': [],
            'count': 0,
            'total': 0,
            'source': source_param,
            'filters': filters,
        }

        sources = self._sources(source_param)
        if not sources:
            result['error'] = f"Unknown recipe source: {source_param}"
            return result

        try:
            if filters.get('id'):
                recipes = self._fetch_by_id(sources, str(filters['id']))
            else:
                seed_name, recipes = self._fetch_seeded(sources, filters, number)
                recipes = apply_fallback_filters(recipes, filters, skip=seed_name)
        except ProviderUnavailable as e:
            logger.warning("Recipe search failed: %s", e)
            result['error'] = str(e)
            return result

        recipes = dedupe(recipes)
        if filters.get('nutrition'):
            recipes = self._apply_nutrition_filter(recipes, filters['nutrition'])

        result['total'] = len(recipes)
        recipes = recipes[:number]
        result['recipes'] = [recipe.to_dict() for recipe in recipes]
        result['count'] = len(recipes)
        return result
