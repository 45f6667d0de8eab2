"""
Pytest configuration and shared fixtures.

The app module builds its Flask app at import time from FLASK_ENV, so the
testing environment is selected before it is imported.
"""

import os

os.environ['FLASK_ENV'] = 'testing'

from unittest.mock import MagicMock

import pytest
import requests

from app import app as flask_app
from models import db, User, Subscription


@pytest.fixture
def app():
    """App with a fresh in-memory schema per test."""
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    cook = User(email='cook@example.com', name='Home Cook')
    db.session.add(cook)
    db.session.commit()
    return cook


@pytest.fixture
def premium_user(app):
    member = User(email='member@example.com', name='Premium Member')
    db.session.add(member)
    db.session.flush()
    db.session.add(Subscription(user_id=member.id, plan_name='Premium', status='active'))
    db.session.commit()
    return member


@pytest.fixture
def admin(app):
    moderator = User(email='moderator@example.com', name='Moderator', role='admin')
    db.session.add(moderator)
    db.session.commit()
    return moderator


def as_user(user):
    return {'X-User-Id': str(user.id)}


def json_response(payload, status_code=200):
    """requests.Response stand-in returning payload from .json()."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        error = requests.HTTPError(f"{status_code} Error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


def mealdb_meal(meal_id='52772', title='Teriyaki Chicken Casserole', category='Chicken', area='Japanese',
                ingredients=None, instructions='Preheat oven.\r\nCook chicken.', tags='Meat,Casserole'):
    """A TheMealDB lookup record with numbered ingredient slots."""
    if ingredients is None:
        ingredients = [('soy sauce', '3/4 cup'), ('water', '1/2 cup'), ('chicken breasts', '2')]
    meal = {
        'idMeal': meal_id,
        'strMeal': title,
        'strCategory': category,
        'strArea': area,
        'strInstructions': instructions,
        'strMealThumb': f'https://www.themealdb.com/images/media/meals/{meal_id}.jpg',
        'strTags': tags,
        'strSource': None,
        'strYoutube': None,
    }
    for i in range(1, 21):
        name, measure = ingredients[i - 1] if i <= len(ingredients) else ('', '')
        meal[f'strIngredient{i}'] = name
        meal[f'strMeasure{i}'] = measure
    return meal
