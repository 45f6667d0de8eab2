"""Provider clients for recipe, nutrition and barcode sources.

Recipe providers are looked up by :class:`SourceKey` through a
:class:`ProviderRegistry`; nutrition providers are consumed by the
nutrition resolver in a fixed priority order.
"""

from providers.base import SourceKey, ProviderRecipe, RecipeProvider, ProviderRegistry
from providers.mealdb import MealDBClient
from providers.community import CommunityRecipeClient
from providers.nutrition import (
    NutritionProvider,
    CalorieNinjasClient,
    EdamamFoodClient,
    EdamamNutritionClient,
)
from providers.barcode import UPCItemDBClient, BarcodeLookup

__all__ = [
    "SourceKey",
    "ProviderRecipe",
    "RecipeProvider",
    "ProviderRegistry",
    "MealDBClient",
    "CommunityRecipeClient",
    "NutritionProvider",
    "CalorieNinjasClient",
    "EdamamFoodClient",
    "EdamamNutritionClient",
    "UPCItemDBClient",
    "BarcodeLookup",
    "build_registry",
    "build_nutrition_providers",
]


def build_registry(config):
    """Registry with every recipe source wired from app config."""
    registry = ProviderRegistry()
    registry.register(MealDBClient(config['MEALDB_BASE_URL'], timeout=config['HTTP_TIMEOUT']))
    registry.register(CommunityRecipeClient())
    return registry


def build_nutrition_providers(config):
    """Nutrition providers in resolution priority order."""
    timeout = config['HTTP_TIMEOUT']
    return [
        CalorieNinjasClient(config['CALORIENINJAS_BASE_URL'], config['CALORIENINJAS_API_KEY'], timeout=timeout),
        EdamamFoodClient(config['EDAMAM_FOOD_DB_APP_ID'], config['EDAMAM_FOOD_DB_API_KEY'], timeout=timeout),
        EdamamNutritionClient(config['EDAMAM_NUTRITION_APP_ID'], config['EDAMAM_NUTRITION_API_KEY'], timeout=timeout),
    ]
