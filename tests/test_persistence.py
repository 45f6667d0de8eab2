"""Tests for the import/create transactions and moderation transitions."""

import json
from datetime import timedelta

import pytest

from models import (
    db, utcnow, Recipe, RecipeIngredient, RecipeInstruction, RecipeTag, Tag,
    RecipeNutrition, RecipeStatusHistory, AuditLog, Subscription,
)
from services import persistence
from services.errors import ValidationError, PermissionDenied, NotFound, PersistenceFailure, DuplicateRecipe
from services.persistence import (
    import_external_recipe, create_user_recipe, update_recipe_status, get_status_history, unique_slug,
)
from services.records import CanonicalRecipe, IngredientLine, NutritionRecord
from services.subscriptions import has_active_premium


def make_dish(external_id='9001', nutrition=None):
    return CanonicalRecipe(
        id=external_id,
        source_key='external:mealdb',
        title='Test Dish',
        instructions=['Chop everything.', 'Simmer for 20 minutes.'],
        ingredients=[
            IngredientLine(name='onion', amount='1'),
            IngredientLine(name='garlic', amount='2 cloves'),
            IngredientLine(name='salt', amount='to taste'),
        ],
        prep_time=30,
        cook_time=60,
        times_estimated=True,
        category='Vegetarian',
        tags=['Quick', 'Vegan'],
        nutrition=nutrition,
    )


class TestImport:
    def test_end_to_end_row_counts(self, app, admin):
        result = import_external_recipe(make_dish(), admin.id)

        assert Recipe.query.count() == 1
        assert RecipeIngredient.query.count() == 3
        assert RecipeInstruction.query.count() == 2
        assert AuditLog.query.count() == 1

        recipe = db.session.get(Recipe, result['recipe_id'])
        assert recipe.approval_status == 'approved'
        assert recipe.is_public is True
        assert recipe.status == 'published'
        assert recipe.nutrition is None

    def test_child_rows_are_ordered_from_one(self, app, admin):
        recipe_id = import_external_recipe(make_dish(), admin.id)['recipe_id']
        recipe = db.session.get(Recipe, recipe_id)

        assert [(i.position, i.name) for i in recipe.ingredients] == [(1, 'onion'), (2, 'garlic'), (3, 'salt')]
        assert [s.step_number for s in recipe.instructions] == [1, 2]
        assert sorted(recipe.tags) == ['Quick', 'Vegan']

    def test_import_defaults_and_estimated_flag(self, app, admin):
        recipe = db.session.get(Recipe, import_external_recipe(make_dish(), admin.id)['recipe_id'])

        assert recipe.servings == 4
        assert recipe.cuisine == 'International'
        assert recipe.description == 'Imported from TheMealDB: Test Dish'
        assert recipe.times_estimated is True
        assert recipe.slug == 'test-dish'

    def test_audit_row_snapshot(self, app, admin):
        import_external_recipe(make_dish(), admin.id)
        entry = AuditLog.query.one()

        assert entry.action == 'IMPORT_RECIPE'
        assert entry.user_id == admin.id
        snapshot = json.loads(entry.new_values)
        assert snapshot['title'] == 'Test Dish'
        assert snapshot['ingredientCount'] == 3

    def test_nutrition_row_written_when_present(self, app, admin):
        import_external_recipe(make_dish(nutrition=NutritionRecord(calories=350, protein=12, source='calorieninjas')),
                               admin.id)
        row = RecipeNutrition.query.one()
        assert row.calories == 350
        assert row.source == 'calorieninjas'

    def test_existing_tags_are_reused(self, app, admin):
        db.session.add(Tag(name='vegan'))
        db.session.commit()

        import_external_recipe(make_dish(), admin.id)

        assert Tag.query.count() == 2
        assert RecipeTag.query.count() == 2

    def test_duplicate_import_is_rejected(self, app, admin):
        import_external_recipe(make_dish(), admin.id)

        with pytest.raises(DuplicateRecipe):
            import_external_recipe(make_dish(), admin.id)

        assert Recipe.query.count() == 1
        assert AuditLog.query.count() == 1

    def test_failed_instruction_insert_rolls_back_everything(self, app, admin, monkeypatch):
        def fail_instructions(recipe, steps):
            assert RecipeIngredient.query.filter_by(recipe_id=recipe.id).count() == 3
            raise RuntimeError('disk full')

        monkeypatch.setattr(persistence, '_insert_instructions', fail_instructions)

        with pytest.raises(PersistenceFailure):
            import_external_recipe(make_dish(), admin.id)

        db.session.expire_all()
        assert Recipe.query.count() == 0
        assert RecipeIngredient.query.count() == 0
        assert AuditLog.query.count() == 0

    def test_unique_slug_appends_suffix(self, app, admin):
        import_external_recipe(make_dish('1'), admin.id)
        assert unique_slug('Test Dish') == 'test-dish-2'


class TestCreateUserRecipe:
    def form(self, **overrides):
        data = {
            'title': 'Weeknight Dal',
            'description': 'Red lentils <b>fast</b>',
            'instructions': 'Rinse lentils.\nSimmer with spices.',
            'ingredients': [{'name': 'red lentils', 'amount': '1', 'unit': 'cup'}, 'turmeric'],
            'prepTime': '10',
            'cookTime': 'about twenty',
            'servings': '',
            'tags': 'Indian, Vegan',
        }
        data.update(overrides)
        return data

    def test_submission_starts_pending_and_private(self, app, user):
        result = create_user_recipe(self.form(), user.id)

        recipe = db.session.get(Recipe, result['recipe_id'])
        assert result['approval_status'] == 'pending'
        assert recipe.is_public is False
        assert recipe.source_key == 'community'
        assert RecipeStatusHistory.query.one().notes == 'Recipe submitted for moderation'

    def test_lenient_numeric_coercion(self, app, user):
        recipe = db.session.get(Recipe, create_user_recipe(self.form(), user.id)['recipe_id'])
        assert recipe.prep_time == 10
        assert recipe.cook_time is None
        assert recipe.servings is None

    def test_negative_numbers_are_stored_as_absent(self, app, user):
        form = self.form(prepTime='-5', cookTime='-10', servings='-3')
        recipe = db.session.get(Recipe, create_user_recipe(form, user.id)['recipe_id'])
        assert recipe.prep_time is None
        assert recipe.cook_time is None
        assert recipe.servings is None

    def test_text_is_escaped(self, app, user):
        recipe = db.session.get(Recipe, create_user_recipe(self.form(), user.id)['recipe_id'])
        assert recipe.description == 'Red lentils &lt;b&gt;fast&lt;/b&gt;'

    def test_title_and_instructions_required(self, app, user):
        with pytest.raises(ValidationError):
            create_user_recipe(self.form(title='  '), user.id)
        with pytest.raises(ValidationError):
            create_user_recipe(self.form(instructions=''), user.id)
        assert Recipe.query.count() == 0

    def test_price_without_premium_is_denied(self, app, user):
        with pytest.raises(PermissionDenied):
            create_user_recipe(self.form(price='5'), user.id)
        assert Recipe.query.count() == 0
        assert AuditLog.query.count() == 0

    def test_preview_text_without_premium_is_denied(self, app, user):
        with pytest.raises(PermissionDenied):
            create_user_recipe(self.form(previewText='A taste'), user.id)
        assert Recipe.query.count() == 0

    def test_premium_member_can_set_price(self, app, premium_user):
        result = create_user_recipe(self.form(price='4.99', previewText='x' * 300), premium_user.id)
        recipe = db.session.get(Recipe, result['recipe_id'])

        assert recipe.is_premium is True
        assert float(recipe.price) == pytest.approx(4.99)
        assert len(recipe.preview_text) == 250

    def test_negative_price_rejected(self, app, premium_user):
        with pytest.raises(ValidationError):
            create_user_recipe(self.form(price='-1'), premium_user.id)
        assert Recipe.query.count() == 0

    def test_expired_subscription_is_not_premium(self, app, user):
        db.session.add(Subscription(user_id=user.id, status='active', end_date=utcnow() - timedelta(days=1)))
        db.session.commit()
        assert has_active_premium(user.id) is False


class TestStatusTransitions:
    @pytest.fixture
    def pending_recipe(self, app, user):
        form = {'title': 'Pending Pie', 'instructions': 'Bake it.'}
        return create_user_recipe(form, user.id)['recipe_id']

    def test_approve_makes_public_and_records_history(self, app, admin, pending_recipe):
        result = update_recipe_status(pending_recipe, 'approved', admin.id, notes='Looks great')

        recipe = db.session.get(Recipe, pending_recipe)
        assert result['changed'] is True
        assert recipe.approval_status == 'approved'
        assert recipe.is_public is True
        assert [h['status'] for h in get_status_history(pending_recipe)] == ['pending', 'approved']
        assert AuditLog.query.filter_by(action='UPDATE_RECIPE_STATUS').count() == 1

    def test_reapplying_status_is_a_no_op(self, app, admin, pending_recipe):
        update_recipe_status(pending_recipe, 'approved', admin.id)
        result = update_recipe_status(pending_recipe, 'approved', admin.id)

        assert result['changed'] is False
        assert len(get_status_history(pending_recipe)) == 2

    def test_approved_and_rejected_are_reversible(self, app, admin, pending_recipe):
        update_recipe_status(pending_recipe, 'approved', admin.id)
        update_recipe_status(pending_recipe, 'rejected', admin.id)
        update_recipe_status(pending_recipe, 'approved', admin.id)

        history = get_status_history(pending_recipe)
        assert [h['status'] for h in history] == ['pending', 'approved', 'rejected', 'approved']
        assert db.session.get(Recipe, pending_recipe).is_public is True

    def test_invalid_status(self, app, admin, pending_recipe):
        with pytest.raises(ValidationError):
            update_recipe_status(pending_recipe, 'pending', admin.id)

    def test_missing_recipe(self, app, admin):
        with pytest.raises(NotFound):
            update_recipe_status(404, 'approved', admin.id)
        with pytest.raises(NotFound):
            get_status_history(404)


class TestOwnershipRules:
    def test_deleting_recipe_removes_child_rows(self, app, admin):
        recipe_id = import_external_recipe(make_dish(), admin.id)['recipe_id']

        Recipe.query.filter_by(id=recipe_id).delete()
        db.session.commit()

        assert RecipeIngredient.query.count() == 0
        assert RecipeInstruction.query.count() == 0
        assert RecipeTag.query.count() == 0
        assert RecipeStatusHistory.query.count() == 0

    def test_deleting_user_keeps_recipe_without_owner(self, app, user):
        recipe_id = create_user_recipe({'title': 'Soup', 'instructions': 'Boil.'}, user.id)['recipe_id']

        db.session.delete(user)
        db.session.commit()

        recipe = db.session.get(Recipe, recipe_id)
        assert recipe is not None
        assert recipe.user_id is None
        assert AuditLog.query.one().user_id is None
