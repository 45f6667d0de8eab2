"""TheMealDB recipe directory client.

Filter endpoints (category, area, ingredient) only return summaries, so
each summary is followed by one detail lookup, capped at
``MAX_DETAIL_LOOKUPS``. A failed detail lookup drops that meal only.
"""

import logging

from constants import MAX_DETAIL_LOOKUPS
from services.errors import ProviderUnavailable
from utils.http import fetch_json, guard_payload
from providers.base import RecipeProvider, ProviderRecipe, SourceKey

logger = logging.getLogger(__name__)


class MealDBClient(RecipeProvider):
    source_key = SourceKey.MEALDB
    name = 'mealdb'

    def __init__(self, base_url, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _get(self, path, params=None):
        data = fetch_json(self.name, f"{self.base_url}/{path}", params=params, timeout=self.timeout)
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "unexpected response shape")
        return data

    def _wrap(self, meals):
        return [ProviderRecipe(self.source_key, dict(meal)) for meal in meals or [] if meal]

    def _with_details(self, summaries):
        recipes = []
        for summary in (summaries or [])[:MAX_DETAIL_LOOKUPS]:
            meal_id = summary.get('idMeal')
            if not meal_id:
                continue
            try:
                recipe = self.get_by_id(meal_id)
            except ProviderUnavailable as e:
                logger.warning("Could not get details for meal %s: %s", meal_id, e.reason)
                continue
            if recipe is not None:
                recipes.append(recipe)
        return recipes

    @guard_payload
    def search(self, query):
        # search.php already returns full meal records
        return self._wrap(self._get('search.php', {'s': query}).get('meals'))

    @guard_payload
    def get_by_id(self, recipe_id):
        meals = self._get('lookup.php', {'i': recipe_id}).get('meals')
        if not meals:
            return None
        return ProviderRecipe(self.source_key, dict(meals[0]))

    @guard_payload
    def list_by_category(self, category):
        return self._with_details(self._get('filter.php', {'c': category}).get('meals'))

    @guard_payload
    def list_by_area(self, cuisine):
        return self._with_details(self._get('filter.php', {'a': cuisine}).get('meals'))

    @guard_payload
    def list_by_ingredient(self, ingredient):
        return self._with_details(self._get('filter.php', {'i': ingredient}).get('meals'))

    @guard_payload
    def random(self, count):
        """random.php returns one meal per call; duplicates are dropped."""
        recipes = []
        seen = set()
        failures = 0
        for _ in range(max(count, 0)):
            try:
                meals = self._get('random.php').get('meals')
            except ProviderUnavailable as e:
                failures += 1
                logger.warning("MealDB random lookup failed: %s", e.reason)
                continue
            for recipe in self._wrap(meals):
                meal_id = recipe.data.get('idMeal')
                if meal_id in seen:
                    continue
                seen.add(meal_id)
                recipes.append(recipe)
        if count > 0 and failures == count:
            raise ProviderUnavailable(self.name, "all random lookups failed")
        return recipes[:count]
