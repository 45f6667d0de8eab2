from flask import Flask, request, jsonify
from flask_migrate import Migrate
import logging
import math
import sqlite3
import sys

from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import get_config
from models import db
from providers import (
    SourceKey, build_registry, build_nutrition_providers, UPCItemDBClient, BarcodeLookup,
)
from providers.community import list_page
from services.errors import (
    RecipeServiceError, ProviderUnavailable, NotFound, ValidationError, Unauthorized,
)
from services.auth import get_current_actor, login_required, admin_required
from services.favorites import ServerFavorites, favorite_key
from services.normalizer import RecipeNormalizer
from services.nutrition import (
    NutritionResolver, scale_to_serving, grams_for_unit, classify_nutrition, macro_percentages,
    nutrition_recommendations,
)
from services.parsing import to_int_or_none, to_float, parse_bool
from services.persistence import (
    import_external_recipe, create_user_recipe, update_recipe_status, get_status_history,
)
from services.records import CanonicalRecipe
from services.search import RecipeSearch

app = Flask(__name__)
app.config.from_object(get_config())

logging.basicConfig(
    level=app.config['LOG_LEVEL'],
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

db.init_app(app)
migrate = Migrate(app, db)


# Enable SQLite foreign key enforcement on every connection
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Provider wiring; every client reads its credentials from app config
registry = build_registry(app.config)
resolver = NutritionResolver(build_nutrition_providers(app.config), workers=app.config['NUTRITION_WORKERS'])
normalizer = RecipeNormalizer(resolver)
recipe_search = RecipeSearch(registry, normalizer, resolver, default_number=app.config['SEARCH_DEFAULT_NUMBER'])
barcode_lookup = BarcodeLookup(
    [UPCItemDBClient(app.config['UPCITEMDB_BASE_URL'], app.config['UPCITEMDB_API_KEY'],
                     timeout=app.config['HTTP_TIMEOUT'])],
    resolver,
)
favorites = ServerFavorites()

MAX_PAGE_SIZE = 50
MAX_FOOD_SEARCH_RESULTS = 50


def _bounded(value, default, min_val, max_val):
    """Parse an integer query parameter and clamp it."""
    result = to_int_or_none(value)
    if result is None:
        return default
    return max(min_val, min(max_val, result))


def _json_body():
    return request.get_json(silent=True) or request.form.to_dict() or {}


def _source_param(value, default=SourceKey.MEALDB):
    if not value:
        return default
    source = SourceKey.from_param(value)
    if source is None or source not in registry:
        raise ValidationError(f'Unknown recipe source: {value}')
    return source


@app.errorhandler(RecipeServiceError)
def handle_service_error(error):
    body = {'error': error.kind, 'message': error.message}
    if error.details is not None and app.config['SHOW_ERROR_DETAILS']:
        body['details'] = error.details
    if error.status_code >= 500:
        logger.error("%s: %s", error.kind, error.message)
    return jsonify(body), error.status_code


# ============================================
# ROUTES - RECIPES
# ============================================

@app.route('/api/recipes/search')
def recipes_search():
    """Aggregated recipe search. Upstream trouble yields an empty result, never an error status."""
    return jsonify(recipe_search.search(request.args.to_dict()))


@app.route('/api/recipes/<recipe_id>')
def recipe_detail(recipe_id):
    source = _source_param(request.args.get('source'))
    provider = registry.get(source)
    try:
        provider_recipe = provider.get_by_id(recipe_id)
    except ProviderUnavailable as e:
        logger.warning("Recipe %s lookup via %s failed: %s", recipe_id, source.value, e.reason)
        provider_recipe = None
    if provider_recipe is None:
        raise NotFound(f'Recipe {recipe_id} not found')
    return jsonify(normalizer.normalize(provider_recipe).to_dict())


@app.route('/api/recipes', methods=['GET'])
def recipes_list():
    owner_id = None
    if parse_bool(request.args.get('mine')):
        actor = get_current_actor()
        if actor is None:
            raise Unauthorized('Authentication required')
        owner_id = actor.id

    page = list_page(
        category=request.args.get('category'),
        cuisine=request.args.get('cuisine'),
        query=request.args.get('query'),
        owner_id=owner_id,
        page=_bounded(request.args.get('page'), 1, 1, 10000),
        limit=_bounded(request.args.get('limit'), 12, 1, MAX_PAGE_SIZE),
    )
    page['recipes'] = [
        normalizer.normalize(recipe, resolve_nutrition=False).to_dict() for recipe in page['recipes']
    ]
    return jsonify(page)


@app.route('/api/recipes', methods=['POST'])
@login_required
def recipe_create():
    actor = get_current_actor()
    result = create_user_recipe(_json_body(), actor.id)
    return jsonify({
        'success': True,
        'recipeId': result['recipe_id'],
        'slug': result['slug'],
        'approvalStatus': result['approval_status'],
    }), 201


# ============================================
# ROUTES - ADMIN
# ============================================

@app.route('/api/admin/recipes/import', methods=['POST'])
@admin_required
def admin_recipe_import():
    """Import either a full canonical recipe or a {source, externalId} reference."""
    actor = get_current_actor()
    payload = _json_body()

    if payload.get('title'):
        recipe = CanonicalRecipe.from_dict(payload, default_source_key=payload.get('source') or SourceKey.MEALDB.value)
        source = SourceKey.from_param(recipe.source_key)
        if source is None or not source.is_external:
            raise ValidationError('Only external recipes can be imported')
        recipe.source_key = source.value
        if recipe.nutrition is None:
            normalizer.attach_nutrition(recipe)
    else:
        external_id = str(payload.get('externalId') or payload.get('id') or '').strip()
        if not external_id:
            raise ValidationError('externalId is required')
        source = _source_param(payload.get('source'))
        if not source.is_external:
            raise ValidationError('Only external recipes can be imported')
        provider_recipe = registry.get(source).get_by_id(external_id)
        if provider_recipe is None:
            raise NotFound(f'Recipe {external_id} not found in {source.short_name}')
        recipe = normalizer.normalize(provider_recipe)

    result = import_external_recipe(recipe, actor.id)
    return jsonify({'success': True, 'recipeId': result['recipe_id'], 'slug': result['slug']})


@app.route('/api/admin/recipes/<int:recipe_id>/status', methods=['POST'])
@admin_required
def admin_recipe_status(recipe_id):
    actor = get_current_actor()
    payload = _json_body()
    result = update_recipe_status(recipe_id, payload.get('status'), actor.id, notes=payload.get('notes'))
    return jsonify({
        'success': True,
        'recipeId': result['recipe_id'],
        'approvalStatus': result['approval_status'],
        'changed': result['changed'],
    })


@app.route('/api/admin/recipes/<int:recipe_id>/history')
@admin_required
def admin_recipe_history(recipe_id):
    return jsonify({'recipeId': recipe_id, 'history': get_status_history(recipe_id)})


@app.route('/api/admin/recipes/external')
@admin_required
def admin_external_browse():
    """Browse an external source by query or id before importing."""
    source = _source_param(request.args.get('source'))
    filters = {
        'source': source.short_name,
        'query': request.args.get('query'),
        'id': request.args.get('id'),
        'number': request.args.get('number'),
    }
    return jsonify(recipe_search.search(filters))


# ============================================
# ROUTES - NUTRITION
# ============================================

@app.route('/api/nutrition/lookup')
def nutrition_lookup():
    food = (request.args.get('food') or '').strip()
    if not food:
        raise ValidationError('food is required')

    record = resolver.resolve(food)
    if record is None:
        raise NotFound(f'No nutrition data found for {food}')

    serving_size = to_float(request.args.get('servingSize'), default=None)
    serving_unit = (request.args.get('servingUnit') or 'g').strip()
    if serving_size is not None:
        if not math.isfinite(serving_size) or serving_size <= 0:
            raise ValidationError('servingSize must be a finite number greater than zero')
        record = scale_to_serving(record, serving_size * grams_for_unit(serving_unit))

    return jsonify({
        'nutrition': record.to_dict(),
        'levels': classify_nutrition(record),
        'macros': macro_percentages(record),
        'recommendations': nutrition_recommendations(record),
    })


@app.route('/api/nutrition/search')
def nutrition_search():
    query = (request.args.get('query') or '').strip()
    if not query:
        raise ValidationError('query is required')
    limit = _bounded(request.args.get('limit'), 10, 1, MAX_FOOD_SEARCH_RESULTS)
    results = resolver.search_candidates(query, limit)
    return jsonify({'results': results, 'count': len(results)})


@app.route('/api/nutrition/barcode')
def nutrition_barcode():
    code = (request.args.get('code') or '').strip()
    if not code:
        raise ValidationError('code is required')
    results = barcode_lookup.lookup(code)
    if not results:
        raise NotFound(f'No product found for barcode {code}')
    return jsonify({'product': results[0], 'alternatives': results[1:]})


# ============================================
# ROUTES - FAVORITES
# ============================================

@app.route('/api/favorites', methods=['GET'])
@login_required
def favorites_list():
    return jsonify({'favorites': favorites.get(get_current_actor().id)})


@app.route('/api/favorites', methods=['POST'])
@login_required
def favorites_add():
    payload = _json_body()
    key = favorite_key(payload.get('source'), payload.get('recipeId'))
    if not favorites.add(get_current_actor().id, key):
        return jsonify({'error': 'already_favorite', 'message': 'Recipe already in favorites'}), 409
    return jsonify({'success': True, 'key': key}), 201


@app.route('/api/favorites', methods=['DELETE'])
@login_required
def favorites_remove():
    payload = _json_body() or request.args.to_dict()
    key = favorite_key(payload.get('source'), payload.get('recipeId'))
    if not favorites.remove(get_current_actor().id, key):
        raise NotFound('Recipe is not in favorites')
    return jsonify({'success': True, 'key': key})


@app.route('/api/favorites/toggle', methods=['POST'])
@login_required
def favorites_toggle():
    payload = _json_body()
    key = favorite_key(payload.get('source'), payload.get('recipeId'))
    return jsonify({'key': key, 'favorite': favorites.toggle(get_current_actor().id, key)})


# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db():
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    init_db()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
