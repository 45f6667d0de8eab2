"""
Recipe Normalizer

Converts provider-native recipe payloads into CanonicalRecipe. This is
the only module that knows provider field names. Apart from the optional
nutrition lookup it has no side effects and never writes to storage.
"""

import logging

from constants import (
    MAX_INGREDIENT_SLOTS, TO_TASTE,
    ESTIMATED_PREP_QUICK, ESTIMATED_PREP_DEFAULT,
    ESTIMATED_COOK_DESSERT, ESTIMATED_COOK_DEFAULT,
)
from providers.base import SourceKey
from .errors import ValidationError
from .parsing import split_instruction_text, split_tags, to_int_or_none, to_decimal_or_none
from .records import (
    CanonicalRecipe, IngredientLine, NutritionRecord, Moderation, Monetization, Creator,
)

logger = logging.getLogger(__name__)

MEALDB_PAGE_URL = 'https://www.themealdb.com/meal.php?c={}'


def extract_slot_ingredients(meal, stop_at_empty=True):
    """
    Read ingredients from numbered strIngredientN / strMeasureN slots.

    With stop_at_empty (the canonical rule) extraction ends at the first
    slot whose name is empty or whitespace, even if later slots are
    filled. With stop_at_empty=False empty slots are skipped instead.
    A present ingredient with an empty measure gets the amount 'to taste'.
    """
    ingredients = []
    for i in range(1, MAX_INGREDIENT_SLOTS + 1):
        name = (meal.get(f'strIngredient{i}') or '').strip()
        if not name or name.lower() in ('null', 'undefined'):
            if stop_at_empty:
                break
            continue
        measure = (meal.get(f'strMeasure{i}') or '').strip()
        ingredients.append(IngredientLine(name=name, amount=measure or TO_TASTE))
    return ingredients


def extract_tags(tag_field, category):
    """Comma-separated tags, or the category as the only tag."""
    tags = split_tags(tag_field)
    if tags:
        return tags
    return [category.strip()] if category and category.strip() else []


def estimate_times(area, category):
    """Heuristic (prep, cook) minutes for sources that publish no timings."""
    prep = ESTIMATED_PREP_QUICK if 'quick' in (area or '').lower() else ESTIMATED_PREP_DEFAULT
    cook = ESTIMATED_COOK_DESSERT if 'dessert' in (category or '').lower() else ESTIMATED_COOK_DEFAULT
    return prep, cook


def _from_mealdb(meal, source_key):
    meal_id = meal.get('idMeal')
    title = (meal.get('strMeal') or '').strip() or 'Untitled Recipe'
    category = (meal.get('strCategory') or '').strip() or None
    cuisine = (meal.get('strArea') or '').strip() or None
    prep_time, cook_time = estimate_times(cuisine, category)

    return CanonicalRecipe(
        id=meal_id,
        source_key=source_key,
        title=title,
        description='',
        instructions=split_instruction_text(meal.get('strInstructions')),
        ingredients=extract_slot_ingredients(meal),
        prep_time=prep_time,
        cook_time=cook_time,
        times_estimated=True,
        servings=None,
        category=category,
        cuisine=cuisine,
        image=meal.get('strMealThumb') or None,
        tags=extract_tags(meal.get('strTags'), category),
        external_url=meal.get('strSource') or MEALDB_PAGE_URL.format(meal_id),
    )


def _from_community(row, source_key):
    ingredients = []
    for item in sorted(row.get('ingredients') or [], key=lambda i: i.get('position') or 0):
        ingredients.append(IngredientLine(
            name=item['name'],
            amount=item.get('amount'),
            unit=item.get('unit'),
            notes=item.get('notes'),
            optional=bool(item.get('is_optional')),
        ))
    steps = sorted(row.get('instructions') or [], key=lambda s: s.get('step_number') or 0)

    monetization = None
    if row.get('price') is not None or row.get('preview_text'):
        monetization = Monetization(
            is_premium=bool(row.get('is_premium')),
            price=to_decimal_or_none(row.get('price')),
            preview_text=row.get('preview_text'),
        )

    nutrition = row.get('nutrition')
    return CanonicalRecipe(
        id=row.get('slug') or row['id'],
        source_key=source_key,
        title=row.get('title') or 'Untitled Recipe',
        description=row.get('description') or '',
        instructions=[s['instruction'] for s in steps if (s.get('instruction') or '').strip()],
        ingredients=ingredients,
        prep_time=to_int_or_none(row.get('prep_time')),
        cook_time=to_int_or_none(row.get('cook_time')),
        times_estimated=bool(row.get('times_estimated')),
        servings=to_int_or_none(row.get('servings')),
        category=row.get('category'),
        cuisine=row.get('cuisine'),
        image=row.get('image'),
        tags=list(row.get('tags') or []),
        nutrition=NutritionRecord.from_dict(nutrition) if nutrition else None,
        moderation=Moderation(
            status=row.get('status') or 'draft',
            approval_status=row.get('approval_status') or 'pending',
            is_public=bool(row.get('is_public')),
        ),
        monetization=monetization,
        creator=Creator(id=row.get('user_id'), name=row.get('creator_name') or 'Anonymous'),
        external_url=row.get('external_url'),
        created_at=row.get('created_at'),
        updated_at=row.get('updated_at'),
    )


_NORMALIZERS = {
    SourceKey.MEALDB: _from_mealdb,
    SourceKey.COMMUNITY: _from_community,
}


class RecipeNormalizer:
    """Dispatches provider payloads to their per-source normalizer."""

    def __init__(self, resolver=None):
        self.resolver = resolver

    def normalize(self, provider_recipe, source_key=None, resolve_nutrition=True):
        """
        Convert a ProviderRecipe into a CanonicalRecipe.

        When the payload carries no nutrition and resolve_nutrition is set,
        the recipe title is resolved through the nutrition resolver and the
        result (possibly None) is attached.
        """
        source = source_key or provider_recipe.source
        source = SourceKey(source)
        normalize_fn = _NORMALIZERS.get(source)
        if normalize_fn is None:
            raise ValidationError(f"No normalizer registered for source {source.value}")

        recipe = normalize_fn(provider_recipe.data, source.value)
        if recipe.nutrition is None and resolve_nutrition:
            self.attach_nutrition(recipe)
        return recipe

    def normalize_all(self, provider_recipes, resolve_nutrition=False):
        return [self.normalize(p, resolve_nutrition=resolve_nutrition) for p in provider_recipes]

    def attach_nutrition(self, recipe):
        if self.resolver is None:
            return recipe
        recipe.nutrition = self.resolver.resolve(recipe.title)
        return recipe
