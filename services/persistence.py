"""
Persistence Service

Writes canonical recipes and user submissions into the relational store.
Each write runs in one transaction: the recipe row, its ingredient,
instruction, tag, nutrition and status-history rows and one audit row
are committed together or not at all.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from constants import (
    APPROVAL_PENDING, APPROVAL_APPROVED, MODERATOR_STATUSES,
    RECIPE_STATUSES, VALID_DIFFICULTIES, MAX_LENGTHS,
)
from models import (
    db, utcnow, Recipe, RecipeIngredient, RecipeInstruction, Tag, RecipeTag,
    RecipeNutrition, RecipeStatusHistory,
)
from providers.base import SourceKey
from utils.sanitizer import (
    sanitize_text, sanitize_optional, sanitize_url, sanitize_title,
    sanitize_instruction_step, sanitize_ingredient_text, slugify,
)
from .audit import record_action, ACTION_IMPORT_RECIPE, ACTION_CREATE_RECIPE, ACTION_UPDATE_RECIPE_STATUS
from .errors import (
    RecipeServiceError, ValidationError, PermissionDenied, NotFound,
    PersistenceFailure, DuplicateRecipe,
)
from .parsing import to_int_or_none, to_decimal_or_none, split_instruction_text, split_tags
from .records import IngredientLine, NutritionRecord, monetization_from_input
from .subscriptions import has_active_premium

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    SourceKey.MEALDB.value: 'TheMealDB',
}

IMPORT_DEFAULT_SERVINGS = 4
IMPORT_DEFAULT_CATEGORY = 'Main Course'
IMPORT_DEFAULT_CUISINE = 'International'


@contextmanager
def transaction():
    """
    Commit the session on success; roll back on any failure.

    Service errors propagate unchanged. Unique violations on the
    (source_key, external_id) pair become DuplicateRecipe, anything else
    PersistenceFailure.
    """
    try:
        yield db.session
        db.session.commit()
    except RecipeServiceError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        logger.exception("Recipe transaction rolled back")
        if 'external_id' in str(e.orig) or 'uq_recipe_source_external' in str(e.orig):
            raise DuplicateRecipe('Recipe has already been imported', details=str(e.orig)) from e
        raise PersistenceFailure('Could not save recipe', details=str(e.orig)) from e
    except Exception as e:
        db.session.rollback()
        logger.exception("Recipe transaction rolled back")
        raise PersistenceFailure('Could not save recipe', details=str(e)) from e


def unique_slug(title):
    base = slugify(title, max_length=200)
    slug = base
    suffix = 2
    while Recipe.query.filter_by(slug=slug).first() is not None:
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


def _clean_ingredient(line):
    name = sanitize_ingredient_text(line.name, MAX_LENGTHS['ingredient_name'])
    if not name:
        return None
    return IngredientLine(
        name=name,
        amount=sanitize_ingredient_text(line.amount, MAX_LENGTHS['ingredient_amount']) or None,
        unit=sanitize_ingredient_text(line.unit, MAX_LENGTHS['ingredient_unit']) or None,
        notes=sanitize_optional(line.notes, MAX_LENGTHS['ingredient_notes']),
        optional=line.optional,
    )


def _insert_ingredients(recipe, ingredients):
    rows = []
    for line in ingredients:
        line = _clean_ingredient(line)
        if line is None:
            continue
        rows.append(RecipeIngredient(
            recipe_id=recipe.id,
            name=line.name,
            amount=line.amount,
            unit=line.unit,
            notes=line.notes,
            position=len(rows) + 1,
            is_optional=line.optional,
        ))
    db.session.add_all(rows)
    db.session.flush()
    return len(rows)


def _insert_instructions(recipe, steps):
    rows = []
    for text in steps:
        text = sanitize_instruction_step(text, MAX_LENGTHS['instruction_step'])
        if text:
            rows.append(RecipeInstruction(recipe_id=recipe.id, step_number=len(rows) + 1, instruction=text))
    db.session.add_all(rows)
    db.session.flush()
    return len(rows)


def _resolve_tag(name):
    tag = Tag.query.filter(db.func.lower(Tag.name) == name.lower()).first()
    if tag is None:
        tag = Tag(name=name)
        db.session.add(tag)
        db.session.flush()
    return tag


def _link_tags(recipe, tags):
    linked = set()
    for raw in tags:
        name = sanitize_text(raw, MAX_LENGTHS['tag_name'])
        if not name or name.lower() in linked:
            continue
        tag = _resolve_tag(name)
        db.session.add(RecipeTag(recipe_id=recipe.id, tag_id=tag.id))
        linked.add(name.lower())
    db.session.flush()
    return len(linked)


def _insert_nutrition(recipe, nutrition):
    if nutrition is None:
        return None
    row = RecipeNutrition(
        recipe_id=recipe.id,
        calories=nutrition.calories,
        protein=nutrition.protein,
        carbs=nutrition.carbs,
        fat=nutrition.fat,
        fiber=nutrition.fiber,
        sugar=nutrition.sugar,
        sodium=nutrition.sodium,
        potassium=nutrition.potassium,
        serving_size=nutrition.serving_size,
        serving_unit=nutrition.serving_unit[:20],
        source=(nutrition.source or '')[:50] or None,
    )
    db.session.add(row)
    return row


def _add_history(recipe, status, actor_id, notes):
    db.session.add(RecipeStatusHistory(recipe_id=recipe.id, status=status, changed_by=actor_id, notes=notes))


def _snapshot(recipe, ingredient_count, instruction_count):
    return {
        'title': recipe.title,
        'slug': recipe.slug,
        'sourceKey': recipe.source_key,
        'externalId': recipe.external_id,
        'approvalStatus': recipe.approval_status,
        'isPublic': recipe.is_public,
        'isPremium': recipe.is_premium,
        'price': recipe.price,
        'ingredientCount': ingredient_count,
        'instructionCount': instruction_count,
    }


def import_external_recipe(recipe, actor_id):
    """
    Persist a canonical recipe fetched from an external source.

    Imports are published and approved immediately. A second import of
    the same (source_key, id) raises DuplicateRecipe.

    Returns:
        {'recipe_id': int, 'slug': str}
    """
    title = sanitize_title(recipe.title, MAX_LENGTHS['recipe_title'])
    if not title:
        raise ValidationError('Title is required')

    existing = Recipe.query.filter_by(source_key=recipe.source_key, external_id=recipe.id).first()
    if existing is not None:
        raise DuplicateRecipe(f'Recipe {recipe.source_key}:{recipe.id} has already been imported',
                              details={'recipeId': existing.id})

    label = SOURCE_LABELS.get(recipe.source_key, recipe.source_key)
    description = recipe.description or f"Imported from {label}: {recipe.title}"

    with transaction():
        row = Recipe(
            slug=unique_slug(recipe.title),
            title=title,
            description=sanitize_text(description, MAX_LENGTHS['description']),
            prep_time=recipe.prep_time,
            cook_time=recipe.cook_time,
            times_estimated=recipe.times_estimated,
            servings=recipe.servings if recipe.servings is not None else IMPORT_DEFAULT_SERVINGS,
            difficulty='medium',
            category=sanitize_text(recipe.category or IMPORT_DEFAULT_CATEGORY, MAX_LENGTHS['category']),
            cuisine=sanitize_text(recipe.cuisine or IMPORT_DEFAULT_CUISINE, MAX_LENGTHS['cuisine']),
            image=sanitize_url(recipe.image, MAX_LENGTHS['image']),
            source_key=recipe.source_key,
            external_id=recipe.id,
            external_url=sanitize_url(recipe.external_url),
            status='published',
            approval_status=APPROVAL_APPROVED,
            is_public=True,
            user_id=actor_id,
            submitted_at=utcnow(),
        )
        db.session.add(row)
        db.session.flush()

        ingredient_count = _insert_ingredients(row, recipe.ingredients)
        instruction_count = _insert_instructions(row, recipe.instructions)
        _link_tags(row, recipe.tags)
        _insert_nutrition(row, recipe.nutrition)
        _add_history(row, APPROVAL_APPROVED, actor_id, f"Imported from {label}")
        record_action(actor_id, ACTION_IMPORT_RECIPE, 'recipe', row.id,
                      new_values=_snapshot(row, ingredient_count, instruction_count))

    logger.info("Imported %s:%s as recipe %s", recipe.source_key, recipe.id, row.id)
    return {'recipe_id': row.id, 'slug': row.slug}


def _form_ingredients(raw):
    if isinstance(raw, str):
        raw = split_instruction_text(raw)
    lines = []
    for item in raw or []:
        line = IngredientLine.from_dict(item)
        if line is not None:
            lines.append(line)
    return lines


def _form_instructions(raw):
    if isinstance(raw, str):
        return split_instruction_text(raw)
    steps = []
    for step in raw or []:
        text = step.get('instruction', '') if isinstance(step, dict) else step
        text = str(text or '').strip()
        if text:
            steps.append(text)
    return steps


def _form_tags(raw):
    if isinstance(raw, str):
        return split_tags(raw)
    return [str(tag).strip() for tag in raw or [] if str(tag).strip()]


def create_user_recipe(form, actor_id, has_premium=has_active_premium):
    """
    Persist a community submission. It starts pending and private.

    Price and preview text need an active premium entitlement; without
    one PermissionDenied is raised and nothing is written.

    Returns:
        {'recipe_id': int, 'slug': str, 'approval_status': 'pending'}
    """
    raw_title = (form.get('title') or '').strip()
    title = sanitize_title(raw_title, MAX_LENGTHS['recipe_title'])
    if not title:
        raise ValidationError('Title is required')

    steps = _form_instructions(form.get('instructions'))
    if not steps:
        raise ValidationError('Instructions are required')

    raw_price = form.get('price')
    raw_preview = (form.get('previewText') or form.get('preview_text') or '').strip()
    wants_monetization = to_decimal_or_none(raw_price) is not None or bool(raw_preview)
    if wants_monetization and not has_premium(actor_id):
        raise PermissionDenied('An active premium subscription is required to set a price or preview text')
    monetization = monetization_from_input(raw_price, raw_preview)

    difficulty = (form.get('difficulty') or 'medium').strip().lower()
    if difficulty not in VALID_DIFFICULTIES:
        raise ValidationError(f'Difficulty must be one of: {", ".join(sorted(VALID_DIFFICULTIES))}')

    status = (form.get('status') or 'published').strip().lower()
    if status not in RECIPE_STATUSES:
        raise ValidationError(f'Status must be one of: {", ".join(sorted(RECIPE_STATUSES))}')

    ingredients = _form_ingredients(form.get('ingredients'))
    nutrition = NutritionRecord.from_dict(form.get('nutrition'))

    with transaction():
        row = Recipe(
            slug=unique_slug(raw_title),
            title=title,
            description=sanitize_text(form.get('description'), MAX_LENGTHS['description']),
            prep_time=to_int_or_none(form.get('prepTime', form.get('prep_time')), non_negative=True),
            cook_time=to_int_or_none(form.get('cookTime', form.get('cook_time')), non_negative=True),
            times_estimated=False,
            servings=to_int_or_none(form.get('servings'), non_negative=True),
            difficulty=difficulty,
            category=sanitize_optional(form.get('category'), MAX_LENGTHS['category']),
            cuisine=sanitize_optional(form.get('cuisine'), MAX_LENGTHS['cuisine']),
            image=sanitize_url(form.get('image') or form.get('imageUrl'), MAX_LENGTHS['image']),
            source_key=SourceKey.COMMUNITY.value,
            status=status,
            approval_status=APPROVAL_PENDING,
            is_public=False,
            is_premium=monetization.is_premium if monetization else False,
            price=monetization.price if monetization else None,
            preview_text=sanitize_optional(monetization.preview_text, 250) if monetization else None,
            user_id=actor_id,
            submitted_at=utcnow(),
        )
        db.session.add(row)
        db.session.flush()

        ingredient_count = _insert_ingredients(row, ingredients)
        instruction_count = _insert_instructions(row, steps)
        _link_tags(row, _form_tags(form.get('tags')))
        _insert_nutrition(row, nutrition)
        _add_history(row, APPROVAL_PENDING, actor_id, 'Recipe submitted for moderation')
        record_action(actor_id, ACTION_CREATE_RECIPE, 'recipe', row.id,
                      new_values=_snapshot(row, ingredient_count, instruction_count))

    logger.info("User %s submitted recipe %s for moderation", actor_id, row.id)
    return {'recipe_id': row.id, 'slug': row.slug, 'approval_status': row.approval_status}


def update_recipe_status(recipe_id, status, actor_id, notes=None):
    """
    Move a recipe to approved or rejected.

    Re-applying the current status changes nothing and writes no history.
    Approved recipes become public; rejected ones private.

    Returns:
        {'recipe_id': int, 'approval_status': str, 'changed': bool}
    """
    status = (status or '').strip().lower()
    if status not in MODERATOR_STATUSES:
        raise ValidationError(f'Status must be one of: {", ".join(sorted(MODERATOR_STATUSES))}')

    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        raise NotFound(f'Recipe {recipe_id} not found')

    if recipe.approval_status == status:
        return {'recipe_id': recipe.id, 'approval_status': status, 'changed': False}

    old_values = {'approvalStatus': recipe.approval_status, 'isPublic': recipe.is_public}
    notes = sanitize_optional(notes, 500)

    with transaction():
        recipe.approval_status = status
        recipe.is_public = status == APPROVAL_APPROVED
        _add_history(recipe, status, actor_id, notes)
        record_action(actor_id, ACTION_UPDATE_RECIPE_STATUS, 'recipe', recipe.id,
                      old_values=old_values,
                      new_values={'approvalStatus': status, 'isPublic': recipe.is_public},
                      notes=notes)

    logger.info("Recipe %s moved from %s to %s by %s", recipe.id, old_values['approvalStatus'], status, actor_id)
    return {'recipe_id': recipe.id, 'approval_status': status, 'changed': True}


def get_status_history(recipe_id):
    """Every moderation transition of a recipe, oldest first."""
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        raise NotFound(f'Recipe {recipe_id} not found')
    rows = RecipeStatusHistory.query.filter_by(recipe_id=recipe.id).order_by(RecipeStatusHistory.id).all()
    return [
        {
            'status': row.status,
            'changedBy': row.changed_by,
            'notes': row.notes,
            'createdAt': row.created_at.isoformat() if row.created_at else None,
        }
        for row in rows
    ]
