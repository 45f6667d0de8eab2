"""
Nutrition Resolver

Resolves free-text food names to one NutritionRecord by asking the
configured providers in priority order, and provides the pure helpers
for serving-size scaling and qualitative nutrient levels.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from constants import (
    UNIT_TO_GRAMS, UNKNOWN_UNIT_GRAMS, NUTRIENT_FIELDS, KCAL_PER_GRAM,
    PROTEIN_LEVELS, FIBER_LEVELS, SUGAR_LEVELS, SODIUM_LEVELS,
    HEALTHY_MIN_FIBER, HEALTHY_MAX_SUGAR, HEALTHY_MAX_SODIUM, NUTRITION_SUGGESTIONS,
)
from .errors import ProviderUnavailable

logger = logging.getLogger(__name__)


class NutritionResolver:
    """
    Fail-open lookup across nutrition providers.

    Providers are tried in the order given; the first non-null record
    wins. A provider that errors is logged and skipped, so only a miss
    (or failure) on every provider yields None.
    """

    def __init__(self, providers, workers=4):
        self.providers = list(providers)
        self.workers = max(1, workers)
        for provider in self.providers:
            if not provider.is_configured:
                logger.warning("Nutrition provider %s is not configured and will be skipped", provider.name)

    def _active(self):
        return [p for p in self.providers if p.is_configured]

    def resolve(self, food_name):
        """Return the first NutritionRecord any provider finds for food_name, or None."""
        food_name = (food_name or '').strip()
        if not food_name:
            return None

        for provider in self._active():
            try:
                record = provider.lookup(food_name)
            except ProviderUnavailable as e:
                logger.warning("Nutrition lookup for %r via %s failed: %s", food_name, provider.name, e.reason)
                continue
            if record is not None:
                logger.debug("Nutrition for %r resolved by %s", food_name, provider.name)
                return record

        logger.info("No nutrition data found for %r", food_name)
        return None

    def resolve_many(self, food_names):
        """Resolve several names concurrently; results keep input order."""
        food_names = list(food_names)
        if len(food_names) <= 1 or self.workers == 1:
            return [self.resolve(name) for name in food_names]
        with ThreadPoolExecutor(max_workers=min(self.workers, len(food_names))) as pool:
            return list(pool.map(self.resolve, food_names))

    def search_candidates(self, food_name, limit=10):
        """Candidate foods from every provider, deduplicated by case-insensitive name."""
        food_name = (food_name or '').strip()
        if not food_name or limit < 1:
            return []

        merged = []
        seen = set()
        for provider in self._active():
            try:
                candidates = provider.search(food_name, limit)
            except ProviderUnavailable as e:
                logger.warning("Food search for %r via %s failed: %s", food_name, provider.name, e.reason)
                continue
            for candidate in candidates:
                key = (candidate.get('name') or '').strip().lower()
                if not key or key in seen:
                    continue
                seen.add(key)
                merged.append(candidate)
        return merged[:limit]


def grams_for_unit(unit):
    """Gram-equivalent of one unit. Unrecognized units count as UNKNOWN_UNIT_GRAMS."""
    key = (unit or '').strip().lower()
    if key in UNIT_TO_GRAMS:
        return UNIT_TO_GRAMS[key]
    logger.debug("Unit %r has no gram conversion; approximating as %s g", unit, UNKNOWN_UNIT_GRAMS)
    return UNKNOWN_UNIT_GRAMS


def scale_to_serving(record, target_grams):
    """
    Rescale a record to target_grams. Pure: the input is never mutated.

    Every nutrient becomes original * target_grams / original_grams where
    original_grams = serving_size * grams_for_unit(serving_unit). The
    result is expressed per target_grams grams.
    """
    original_grams = record.serving_size * grams_for_unit(record.serving_unit)
    if original_grams <= 0:
        return record.copy()

    ratio = float(target_grams) / original_grams
    scaled = {nutrient: getattr(record, nutrient) * ratio for nutrient in NUTRIENT_FIELDS}
    return record.copy(serving_size=float(target_grams), serving_unit='g', **scaled)


def _level(value, levels, otherwise, higher_is_first):
    for name, threshold in levels:
        if (value >= threshold) if higher_is_first else (value <= threshold):
            return name
    return otherwise


def classify_nutrition(record):
    """Qualitative protein/fiber/sugar/sodium levels using fixed thresholds."""
    return {
        'protein': _level(record.protein, PROTEIN_LEVELS, 'low', higher_is_first=True),
        'fiber': _level(record.fiber, FIBER_LEVELS, 'low', higher_is_first=True),
        'sugar': _level(record.sugar, SUGAR_LEVELS, 'high', higher_is_first=False),
        'sodium': _level(record.sodium, SODIUM_LEVELS, 'high', higher_is_first=False),
    }


def macro_percentages(record):
    """Share of calories from protein, carbs and fat, in whole percent."""
    if record.calories <= 0:
        return {macro: 0 for macro in KCAL_PER_GRAM}
    return {
        macro: round(getattr(record, macro) * kcal / record.calories * 100)
        for macro, kcal in KCAL_PER_GRAM.items()
    }


def nutrition_recommendations(record):
    """Whether one serving looks healthy, plus suggestions for improving it."""
    return {
        'isHealthy': (record.fiber >= HEALTHY_MIN_FIBER
                      and record.sugar <= HEALTHY_MAX_SUGAR
                      and record.sodium <= HEALTHY_MAX_SODIUM),
        'suggestions': [message for applies, message in NUTRITION_SUGGESTIONS if applies(record)],
    }
