"""Tests for provider payload normalization."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import mealdb_meal
from providers.base import ProviderRecipe, SourceKey
from services.normalizer import (
    RecipeNormalizer,
    extract_slot_ingredients,
    extract_tags,
    estimate_times,
)
from services.parsing import split_instruction_text
from services.records import NutritionRecord


def twenty_slots_with_gap_at_five():
    ingredients = [(f'ingredient {i}', f'{i} g') for i in range(1, 21)]
    ingredients[4] = ('   ', '1 tbsp')
    return mealdb_meal(ingredients=ingredients)


class TestIngredientExtraction:
    def test_stops_at_first_empty_slot(self):
        ingredients = extract_slot_ingredients(twenty_slots_with_gap_at_five())
        assert [i.name for i in ingredients] == ['ingredient 1', 'ingredient 2', 'ingredient 3', 'ingredient 4']

    def test_skip_mode_continues_past_empty_slots(self):
        ingredients = extract_slot_ingredients(twenty_slots_with_gap_at_five(), stop_at_empty=False)
        assert len(ingredients) == 19
        assert ingredients[4].name == 'ingredient 6'

    def test_empty_measure_becomes_to_taste(self):
        meal = mealdb_meal(ingredients=[('salt', ''), ('pepper', None), ('flour', ' 200g ')])
        ingredients = extract_slot_ingredients(meal)
        assert [i.amount for i in ingredients] == ['to taste', 'to taste', '200g']

    def test_missing_slots_are_treated_as_empty(self):
        meal = {'strIngredient1': 'egg', 'strMeasure1': '2'}
        assert [i.name for i in extract_slot_ingredients(meal)] == ['egg']


class TestInstructionSplitting:
    def test_mixed_line_endings(self):
        assert split_instruction_text("Step one\r\nStep two\n\nStep three") == ['Step one', 'Step two', 'Step three']

    def test_blank_text(self):
        assert split_instruction_text('') == []
        assert split_instruction_text(None) == []


class TestTagsAndTimes:
    def test_tags_split_and_trimmed(self):
        assert extract_tags(' Pasta, ,Curry ,', 'Vegetarian') == ['Pasta', 'Curry']

    def test_category_used_when_no_tags(self):
        assert extract_tags(None, 'Dessert') == ['Dessert']
        assert extract_tags('', None) == []

    @pytest.mark.parametrize('area,category,expected', [
        ('Quick Thai', 'Chicken', (15, 60)),
        ('Italian', 'DESSERT', (30, 45)),
        (None, None, (30, 60)),
    ])
    def test_estimated_times(self, area, category, expected):
        assert estimate_times(area, category) == expected


class TestMealDBNormalization:
    def test_canonical_fields(self):
        normalizer = RecipeNormalizer()
        recipe = normalizer.normalize(ProviderRecipe(SourceKey.MEALDB, mealdb_meal()))

        assert recipe.id == '52772'
        assert recipe.source_key == 'external:mealdb'
        assert recipe.title == 'Teriyaki Chicken Casserole'
        assert recipe.instructions == ['Preheat oven.', 'Cook chicken.']
        assert [i.name for i in recipe.ingredients] == ['soy sauce', 'water', 'chicken breasts']
        assert recipe.tags == ['Meat', 'Casserole']
        assert recipe.cuisine == 'Japanese'
        assert (recipe.prep_time, recipe.cook_time) == (30, 60)
        assert recipe.times_estimated is True
        assert recipe.external_url == 'https://www.themealdb.com/meal.php?c=52772'
        assert recipe.nutrition is None

    def test_resolves_nutrition_by_title(self):
        resolver = MagicMock()
        resolver.resolve.return_value = NutritionRecord(calories=420, source='calorieninjas')

        recipe = RecipeNormalizer(resolver).normalize(ProviderRecipe(SourceKey.MEALDB, mealdb_meal()))

        resolver.resolve.assert_called_once_with('Teriyaki Chicken Casserole')
        assert recipe.nutrition.calories == 420

    def test_nutrition_resolution_can_be_skipped(self):
        resolver = MagicMock()
        RecipeNormalizer(resolver).normalize(ProviderRecipe(SourceKey.MEALDB, mealdb_meal()), resolve_nutrition=False)
        resolver.resolve.assert_not_called()

    def test_to_dict_uses_camel_case(self):
        data = RecipeNormalizer().normalize(ProviderRecipe(SourceKey.MEALDB, mealdb_meal())).to_dict()
        assert data['sourceKey'] == 'external:mealdb'
        assert data['timesEstimated'] is True
        assert data['readyInMinutes'] == 90


class TestCommunityNormalization:
    def test_stored_columns_are_authoritative(self):
        row = {
            'id': 7,
            'slug': 'nan-s-lasagna',
            'title': "Nan's Lasagna",
            'description': 'Family recipe',
            'prep_time': 20,
            'cook_time': 50,
            'times_estimated': False,
            'servings': 6,
            'category': 'Pasta',
            'cuisine': 'Italian',
            'status': 'published',
            'approval_status': 'approved',
            'is_public': True,
            'is_premium': True,
            'price': Decimal('3.50'),
            'preview_text': 'Layered goodness',
            'user_id': 3,
            'creator_name': 'Nan',
            'ingredients': [
                {'name': 'ricotta', 'amount': '250', 'unit': 'g', 'position': 2, 'is_optional': False},
                {'name': 'lasagna sheets', 'amount': '12', 'unit': None, 'position': 1, 'is_optional': False},
            ],
            'instructions': [
                {'step_number': 2, 'instruction': 'Bake.'},
                {'step_number': 1, 'instruction': 'Layer.'},
            ],
            'tags': ['Pasta', 'Baked'],
            'nutrition': {'calories': 510, 'protein': 28, 'serving_size': 1, 'serving_unit': 'portion'},
        }
        resolver = MagicMock()

        recipe = RecipeNormalizer(resolver).normalize(ProviderRecipe(SourceKey.COMMUNITY, row))

        assert recipe.id == 'nan-s-lasagna'
        assert recipe.times_estimated is False
        assert (recipe.prep_time, recipe.cook_time, recipe.servings) == (20, 50, 6)
        assert [i.name for i in recipe.ingredients] == ['lasagna sheets', 'ricotta']
        assert recipe.instructions == ['Layer.', 'Bake.']
        assert recipe.moderation.approval_status == 'approved'
        assert recipe.monetization.price == Decimal('3.50')
        assert recipe.creator.name == 'Nan'
        assert recipe.nutrition.calories == 510
        resolver.resolve.assert_not_called()
