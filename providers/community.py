"""Community recipe provider backed by the relational store.

Implements the same contract as the external clients so the search
orchestrator can treat user submissions as one more source. Only public,
published, approved recipes are visible; results are ordered by recency.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from constants import APPROVAL_APPROVED
from models import db, Recipe, RecipeIngredient
from services.errors import ProviderUnavailable
from providers.base import RecipeProvider, ProviderRecipe, SourceKey

logger = logging.getLogger(__name__)

MAX_RESULTS = 50


def recipe_payload(recipe):
    """Provider-native shape of a persisted recipe: its columns plus child rows."""
    return {
        'id': recipe.id,
        'slug': recipe.slug,
        'title': recipe.title,
        'description': recipe.description,
        'prep_time': recipe.prep_time,
        'cook_time': recipe.cook_time,
        'times_estimated': recipe.times_estimated,
        'servings': recipe.servings,
        'difficulty': recipe.difficulty,
        'category': recipe.category,
        'cuisine': recipe.cuisine,
        'image': recipe.image,
        'source_key': recipe.source_key,
        'external_id': recipe.external_id,
        'external_url': recipe.external_url,
        'status': recipe.status,
        'approval_status': recipe.approval_status,
        'is_public': recipe.is_public,
        'is_premium': recipe.is_premium,
        'price': recipe.price,
        'preview_text': recipe.preview_text,
        'user_id': recipe.user_id,
        'creator_name': recipe.creator.name if recipe.creator else None,
        'created_at': recipe.created_at,
        'updated_at': recipe.updated_at,
        'ingredients': [
            {
                'name': ri.name,
                'amount': ri.amount,
                'unit': ri.unit,
                'notes': ri.notes,
                'position': ri.position,
                'is_optional': ri.is_optional,
            }
            for ri in recipe.ingredients
        ],
        'instructions': [
            {'step_number': step.step_number, 'instruction': step.instruction}
            for step in recipe.instructions
        ],
        'tags': recipe.tags,
        'nutrition': _nutrition_payload(recipe.nutrition),
    }


def _nutrition_payload(nutrition):
    if nutrition is None:
        return None
    return {
        'calories': nutrition.calories,
        'protein': nutrition.protein,
        'carbs': nutrition.carbs,
        'fat': nutrition.fat,
        'fiber': nutrition.fiber,
        'sugar': nutrition.sugar,
        'sodium': nutrition.sodium,
        'potassium': nutrition.potassium,
        'serving_size': nutrition.serving_size,
        'serving_unit': nutrition.serving_unit,
        'source': nutrition.source,
    }


def visible_recipes():
    """Query of recipes anyone may see."""
    return Recipe.query.filter(
        Recipe.is_public.is_(True),
        Recipe.status == 'published',
        Recipe.approval_status == APPROVAL_APPROVED,
    )


class CommunityRecipeClient(RecipeProvider):
    source_key = SourceKey.COMMUNITY
    name = 'community'

    def _run(self, query, limit=MAX_RESULTS):
        try:
            recipes = query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).limit(limit).all()
            return [ProviderRecipe(self.source_key, recipe_payload(r)) for r in recipes]
        except SQLAlchemyError as e:
            raise ProviderUnavailable(self.name, str(e)) from e

    def search(self, query):
        term = f"%{query.strip()}%"
        return self._run(visible_recipes().filter(db.or_(
            Recipe.title.ilike(term),
            Recipe.description.ilike(term),
            Recipe.slug.ilike(term),
        )))

    def get_by_id(self, recipe_id):
        """Look up by slug or numeric id."""
        conditions = [Recipe.slug == str(recipe_id)]
        if str(recipe_id).isdigit():
            conditions.append(Recipe.id == int(recipe_id))
        results = self._run(visible_recipes().filter(db.or_(*conditions)), limit=1)
        return results[0] if results else None

    def list_by_category(self, category):
        return self._run(visible_recipes().filter(Recipe.category.ilike(category.strip())))

    def list_by_area(self, cuisine):
        return self._run(visible_recipes().filter(Recipe.cuisine.ilike(cuisine.strip())))

    def list_by_ingredient(self, ingredient):
        matching = db.session.query(RecipeIngredient.recipe_id).filter(
            RecipeIngredient.name.ilike(f"%{ingredient.strip()}%"))
        return self._run(visible_recipes().filter(Recipe.id.in_(matching)))

    def random(self, count):
        """Most recent recipes; the community source has no random ordering."""
        return self._run(visible_recipes(), limit=max(count, 0))


def list_page(category=None, cuisine=None, query=None, owner_id=None, page=1, limit=12):
    """
    One page of community recipes, newest first.

    With owner_id the listing is that user's own recipes in any
    moderation state; otherwise only visible recipes.
    """
    if owner_id is not None:
        recipes = Recipe.query.filter(Recipe.user_id == owner_id, Recipe.source_key == SourceKey.COMMUNITY.value)
    else:
        recipes = visible_recipes()
    if category:
        recipes = recipes.filter(Recipe.category.ilike(category.strip()))
    if cuisine:
        recipes = recipes.filter(Recipe.cuisine.ilike(cuisine.strip()))
    if query:
        term = f"%{query.strip()}%"
        recipes = recipes.filter(db.or_(Recipe.title.ilike(term), Recipe.description.ilike(term)))

    try:
        pagination = recipes.order_by(Recipe.created_at.desc(), Recipe.id.desc()).paginate(
            page=page, per_page=limit, error_out=False)
    except SQLAlchemyError as e:
        raise ProviderUnavailable(CommunityRecipeClient.name, str(e)) from e

    return {
        'recipes': [ProviderRecipe(SourceKey.COMMUNITY, recipe_payload(r)) for r in pagination.items],
        'page': pagination.page,
        'limit': limit,
        'total': pagination.total,
        'pages': pagination.pages,
    }
