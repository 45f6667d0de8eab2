"""HTTP-level tests for the JSON API."""

from unittest.mock import patch

import pytest

import app as app_module
from conftest import as_user, json_response, mealdb_meal
from models import db, Recipe, AuditLog, User
from providers.base import ProviderRecipe, SourceKey
from services.errors import ProviderUnavailable
from services.records import NutritionRecord


@pytest.fixture
def no_nutrition(monkeypatch):
    monkeypatch.setattr(app_module.resolver, 'resolve', lambda name: None)


@pytest.fixture
def mealdb():
    return app_module.registry.get(SourceKey.MEALDB)


class TestSearchRoute:
    def test_upstream_failure_is_still_200(self, client, mealdb, monkeypatch):
        def boom(query):
            raise ProviderUnavailable('mealdb', 'HTTP 500')
        monkeypatch.setattr(mealdb, 'search', boom)

        response = client.get('/api/recipes/search?query=beef')

        assert response.status_code == 200
        assert response.json['count'] == 0
        assert response.json['recipes'] == []
        assert 'error' in response.json

    def test_returns_normalized_recipes(self, client, mealdb, monkeypatch):
        monkeypatch.setattr(mealdb, 'search', lambda q: [ProviderRecipe(SourceKey.MEALDB, mealdb_meal())])

        response = client.get('/api/recipes/search?query=chicken&diet=vegan')

        assert response.status_code == 200
        assert response.json['recipes'][0]['title'] == 'Teriyaki Chicken Casserole'
        assert response.json['filters']['diet'] == 'vegan'


class TestRecipeDetailRoute:
    def test_not_found(self, client, mealdb, monkeypatch):
        monkeypatch.setattr(mealdb, 'get_by_id', lambda recipe_id: None)

        response = client.get('/api/recipes/123?source=mealdb')

        assert response.status_code == 404
        assert response.json['error'] == 'not_found'
        assert 'message' in response.json

    def test_found_with_nutrition(self, client, mealdb, monkeypatch):
        monkeypatch.setattr(mealdb, 'get_by_id', lambda recipe_id: ProviderRecipe(SourceKey.MEALDB, mealdb_meal()))
        monkeypatch.setattr(app_module.resolver, 'resolve', lambda name: NutritionRecord(calories=500))

        response = client.get('/api/recipes/52772')

        assert response.status_code == 200
        assert response.json['nutrition']['calories'] == 500

    def test_unknown_source(self, client):
        response = client.get('/api/recipes/1?source=spoonacular')
        assert response.status_code == 400
        assert response.json['error'] == 'validation_error'


class TestCommunityRoutes:
    def test_create_requires_login(self, client):
        response = client.post('/api/recipes', json={'title': 'Soup', 'instructions': 'Boil.'})
        assert response.status_code == 401
        assert response.json['error'] == 'unauthorized'

    def test_create_returns_201_and_pending(self, client, user):
        response = client.post('/api/recipes', json={
            'title': 'Soup',
            'instructions': ['Boil water.', 'Add vegetables.'],
            'ingredients': [{'name': 'carrot', 'amount': '2'}],
        }, headers=as_user(user))

        assert response.status_code == 201
        assert response.json['success'] is True
        assert response.json['approvalStatus'] == 'pending'
        assert response.json['slug'] == 'soup'

    def test_premium_gating_returns_403(self, client, user):
        response = client.post('/api/recipes', json={
            'title': 'Soup', 'instructions': 'Boil.', 'price': 5,
        }, headers=as_user(user))

        assert response.status_code == 403
        assert response.json['error'] == 'permission_denied'
        assert Recipe.query.count() == 0

    def test_listing_shows_own_pending_recipes_only_with_mine(self, client, user):
        client.post('/api/recipes', json={'title': 'Soup', 'instructions': 'Boil.'}, headers=as_user(user))

        public = client.get('/api/recipes')
        mine = client.get('/api/recipes?mine=true', headers=as_user(user))

        assert public.json['total'] == 0
        assert mine.json['total'] == 1
        assert mine.json['recipes'][0]['moderation']['approvalStatus'] == 'pending'


class TestAdminRoutes:
    def test_import_requires_admin(self, client, user):
        response = client.post('/api/admin/recipes/import', json={'source': 'mealdb', 'externalId': '1'},
                               headers=as_user(user))
        assert response.status_code == 403

    def test_import_by_reference(self, client, admin, mealdb, monkeypatch, no_nutrition):
        monkeypatch.setattr(mealdb, 'get_by_id', lambda recipe_id: ProviderRecipe(SourceKey.MEALDB, mealdb_meal()))

        response = client.post('/api/admin/recipes/import', json={'source': 'mealdb', 'externalId': '52772'},
                               headers=as_user(admin))

        assert response.status_code == 200
        assert response.json['success'] is True
        recipe = db.session.get(Recipe, response.json['recipeId'])
        assert recipe.external_id == '52772'
        assert AuditLog.query.filter_by(action='IMPORT_RECIPE').count() == 1

    def test_import_canonical_payload_and_duplicate(self, client, admin, no_nutrition):
        payload = {
            'externalId': '9001',
            'sourceKey': 'external:mealdb',
            'title': 'Test Dish',
            'ingredients': [{'name': 'rice', 'amount': '1 cup'}],
            'instructions': 'Rinse.\r\nCook.',
        }

        first = client.post('/api/admin/recipes/import', json=payload, headers=as_user(admin))
        second = client.post('/api/admin/recipes/import', json=payload, headers=as_user(admin))

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json['error'] == 'duplicate_recipe'

    def test_admin_email_grants_access(self, app, client):
        owner = User(email=app.config['ADMIN_EMAIL'], name='Owner')
        db.session.add(owner)
        db.session.commit()

        response = client.get('/api/admin/recipes/1/history', headers=as_user(owner))

        assert response.status_code == 404

    def test_status_transition_and_history(self, client, user, admin):
        created = client.post('/api/recipes', json={'title': 'Soup', 'instructions': 'Boil.'},
                              headers=as_user(user)).json

        url = f"/api/admin/recipes/{created['recipeId']}/status"
        approved = client.post(url, json={'status': 'approved'}, headers=as_user(admin))
        repeated = client.post(url, json={'status': 'approved'}, headers=as_user(admin))
        invalid = client.post(url, json={'status': 'published'}, headers=as_user(admin))
        history = client.get(f"/api/admin/recipes/{created['recipeId']}/history", headers=as_user(admin))

        assert approved.json['changed'] is True
        assert repeated.json['changed'] is False
        assert invalid.status_code == 400
        assert [h['status'] for h in history.json['history']] == ['pending', 'approved']


class TestNutritionRoutes:
    def test_lookup_scales_and_classifies(self, client, monkeypatch):
        record = NutritionRecord(calories=100, protein=10, carbs=10, fat=2, sodium=500,
                                 serving_size=100, serving_unit='g', name='tofu')
        monkeypatch.setattr(app_module.resolver, 'resolve', lambda name: record)

        response = client.get('/api/nutrition/lookup?food=tofu&servingSize=2&servingUnit=cup')

        assert response.status_code == 200
        assert response.json['nutrition']['calories'] == pytest.approx(480)
        assert response.json['nutrition']['servingSize'] == 480
        assert response.json['levels']['protein'] == 'high'
        assert response.json['levels']['sodium'] == 'high'
        assert response.json['recommendations']['isHealthy'] is False
        assert 'Add more fiber-rich foods' in response.json['recommendations']['suggestions']

    @pytest.mark.parametrize('size', ['nan', 'inf', '-inf', '0'])
    def test_lookup_rejects_non_finite_or_empty_serving(self, client, monkeypatch, size):
        monkeypatch.setattr(app_module.resolver, 'resolve', lambda name: NutritionRecord(calories=52, name='apple'))

        response = client.get(f'/api/nutrition/lookup?food=apple&servingSize={size}')

        assert response.status_code == 400
        assert response.json['error'] == 'validation_error'

    def test_lookup_not_found(self, client, no_nutrition):
        response = client.get('/api/nutrition/lookup?food=unobtainium')
        assert response.status_code == 404

    def test_lookup_requires_food(self, client):
        assert client.get('/api/nutrition/lookup').status_code == 400

    def test_search(self, client, monkeypatch):
        monkeypatch.setattr(app_module.resolver, 'search_candidates',
                            lambda query, limit: [{'name': 'Oats', 'source': 'edamam-food', 'category': 'Food'}])
        response = client.get('/api/nutrition/search?query=oat&limit=5')
        assert response.json['count'] == 1

    @patch('utils.http.requests.get')
    def test_barcode_not_found(self, mock_get, client, no_nutrition):
        mock_get.return_value = json_response({'items': []})

        response = client.get('/api/nutrition/barcode?code=000')

        assert response.status_code == 404


class TestFavoritesRoutes:
    def test_add_toggle_remove(self, client, user):
        headers = as_user(user)
        body = {'source': 'mealdb', 'recipeId': '52772'}

        added = client.post('/api/favorites', json=body, headers=headers)
        again = client.post('/api/favorites', json=body, headers=headers)
        listed = client.get('/api/favorites', headers=headers)
        toggled = client.post('/api/favorites/toggle', json=body, headers=headers)
        removed = client.delete('/api/favorites', json=body, headers=headers)

        assert added.status_code == 201
        assert again.status_code == 409
        assert listed.json['favorites'] == ['external:mealdb:52772']
        assert toggled.json['favorite'] is False
        assert removed.status_code == 404

    def test_unknown_source_rejected(self, client, user):
        response = client.post('/api/favorites', json={'source': 'nope', 'recipeId': '1'}, headers=as_user(user))
        assert response.status_code == 400
