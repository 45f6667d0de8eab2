"""Nutrition lookup provider clients.

Each client maps one provider's response onto :class:`NutritionRecord`
and raises ``ProviderUnavailable`` on transport or HTTP failures and on
response bodies it cannot map. A lookup that simply finds nothing
returns ``None``.
"""

import logging
from abc import ABC, abstractmethod

from constants import DEFAULT_SERVING_GRAMS
from services.records import NutritionRecord
from utils.http import fetch_json, guard_payload

logger = logging.getLogger(__name__)


class NutritionProvider(ABC):
    name = ''

    @property
    @abstractmethod
    def is_configured(self):
        """False when credentials are missing; the resolver skips the provider."""

    @abstractmethod
    def lookup(self, food_name):
        ...

    @abstractmethod
    def search(self, food_name, limit=10):
        """Candidate foods as ``{name, source, category}`` dicts."""


class CalorieNinjasClient(NutritionProvider):
    """Generic nutrition lookup; values per ``serving_size_g`` grams."""

    name = 'calorieninjas'

    def __init__(self, base_url, api_key, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout

    @property
    def is_configured(self):
        return bool(self.api_key)

    def _items(self, food_name):
        data = fetch_json(
            self.name, f"{self.base_url}/nutrition",
            params={'query': food_name},
            headers={'X-Api-Key': self.api_key},
            timeout=self.timeout,
        )
        return data.get('items') or [] if isinstance(data, dict) else []

    @guard_payload
    def lookup(self, food_name):
        items = self._items(food_name)
        if not items:
            return None
        item = items[0]
        return NutritionRecord(
            name=item.get('name') or food_name,
            category='Food',
            calories=item.get('calories'),
            protein=item.get('protein_g'),
            carbs=item.get('carbohydrates_total_g'),
            fat=item.get('fat_total_g'),
            fiber=item.get('fiber_g'),
            sugar=item.get('sugar_g'),
            sodium=item.get('sodium_mg'),
            potassium=item.get('potassium_mg'),
            serving_size=item.get('serving_size_g') or DEFAULT_SERVING_GRAMS,
            serving_unit='g',
            source=self.name,
        )

    @guard_payload
    def search(self, food_name, limit=10):
        return [
            {'name': item.get('name'), 'source': self.name, 'category': 'Food'}
            for item in self._items(food_name)[:limit]
            if item.get('name')
        ]


class EdamamFoodClient(NutritionProvider):
    """Edamam food database parser; nutrients are per 100 g."""

    name = 'edamam-food'
    BASE_URL = 'https://api.edamam.com/api/food-database/v2/parser'

    def __init__(self, app_id, app_key, timeout=10):
        self.app_id = app_id
        self.app_key = app_key
        self.timeout = timeout

    @property
    def is_configured(self):
        return bool(self.app_id and self.app_key)

    def _parse(self, food_name):
        data = fetch_json(
            self.name, self.BASE_URL,
            params={'ingr': food_name, 'app_id': self.app_id, 'app_key': self.app_key},
            timeout=self.timeout,
        )
        return data if isinstance(data, dict) else {}

    @guard_payload
    def lookup(self, food_name):
        data = self._parse(food_name)
        foods = [entry.get('food') for entry in (data.get('parsed') or []) + (data.get('hints') or [])]
        foods = [food for food in foods if food]
        if not foods:
            return None
        food = foods[0]
        nutrients = food.get('nutrients') or {}
        return NutritionRecord(
            name=food.get('label') or food_name,
            category=food.get('category') or 'Food',
            calories=nutrients.get('ENERC_KCAL'),
            protein=nutrients.get('PROCNT'),
            carbs=nutrients.get('CHOCDF'),
            fat=nutrients.get('FAT'),
            fiber=nutrients.get('FIBTG'),
            sugar=nutrients.get('SUGAR'),
            sodium=nutrients.get('NA'),
            potassium=nutrients.get('K'),
            serving_size=DEFAULT_SERVING_GRAMS,
            serving_unit='g',
            source=self.name,
        )

    @guard_payload
    def search(self, food_name, limit=10):
        candidates = []
        for hint in self._parse(food_name).get('hints') or []:
            food = hint.get('food') or {}
            if food.get('label'):
                candidates.append({
                    'name': food['label'],
                    'source': self.name,
                    'category': food.get('category') or 'Food',
                })
            if len(candidates) >= limit:
                break
        return candidates


class EdamamNutritionClient(NutritionProvider):
    """Edamam nutrition analysis of one free-text ingredient line.

    Values cover the whole analysed quantity (``totalWeight`` grams).
    """

    name = 'edamam-nutrition'
    BASE_URL = 'https://api.edamam.com/api/nutrition-data'

    def __init__(self, app_id, app_key, timeout=10):
        self.app_id = app_id
        self.app_key = app_key
        self.timeout = timeout

    @property
    def is_configured(self):
        return bool(self.app_id and self.app_key)

    @guard_payload
    def lookup(self, food_name):
        data = fetch_json(
            self.name, self.BASE_URL,
            params={
                'app_id': self.app_id,
                'app_key': self.app_key,
                'nutrition-type': 'logging',
                'ingr': food_name,
            },
            timeout=self.timeout,
        )
        if not isinstance(data, dict):
            return None
        total_weight = data.get('totalWeight') or 0
        if not total_weight:
            # Edamam answers 200 with zero weight when it cannot parse the text
            return None
        nutrients = data.get('totalNutrients') or {}

        def quantity(code):
            return (nutrients.get(code) or {}).get('quantity', 0)

        return NutritionRecord(
            name=food_name,
            category='Food',
            calories=data.get('calories') or quantity('ENERC_KCAL'),
            protein=quantity('PROCNT'),
            carbs=quantity('CHOCDF'),
            fat=quantity('FAT'),
            fiber=quantity('FIBTG'),
            sugar=quantity('SUGAR'),
            sodium=quantity('NA'),
            potassium=quantity('K'),
            serving_size=total_weight,
            serving_unit='g',
            source=self.name,
        )

    @guard_payload
    def search(self, food_name, limit=10):
        record = self.lookup(food_name)
        if record is None or limit < 1:
            return []
        return [{'name': record.name, 'source': self.name, 'category': record.category}]
