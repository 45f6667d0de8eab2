"""
Application Configuration

Centralizes all Flask, database and provider settings.
Values come from the environment (a local .env file is loaded first).
"""

import os

from dotenv import load_dotenv

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

load_dotenv(os.path.join(BASE_DIR, '.env'))


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (ValueError, TypeError):
        return default


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///recipes.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Recipe directory provider
    MEALDB_BASE_URL = os.environ.get('MEALDB_BASE_URL', 'https://www.themealdb.com/api/json/v1/1')

    # Nutrition providers (a provider without credentials is skipped)
    CALORIENINJAS_BASE_URL = os.environ.get('CALORIENINJAS_API_BASE', 'https://api.calorieninjas.com/v1')
    CALORIENINJAS_API_KEY = os.environ.get('CALORIENINJAS_API_KEY')
    EDAMAM_FOOD_DB_APP_ID = os.environ.get('EDAMAM_FOOD_DB_APP_ID')
    EDAMAM_FOOD_DB_API_KEY = os.environ.get('EDAMAM_FOOD_DB_API_KEY')
    EDAMAM_NUTRITION_APP_ID = os.environ.get('EDAMAM_NUTRITION_APP_ID')
    EDAMAM_NUTRITION_API_KEY = os.environ.get('EDAMAM_NUTRITION_API_KEY')

    # Barcode provider
    UPCITEMDB_BASE_URL = os.environ.get('UPCITEMDB_BASE_URL', 'https://api.upcitemdb.com/prod/trial/lookup')
    UPCITEMDB_API_KEY = os.environ.get('UPCITEMDB_API_KEY')

    # Outbound HTTP
    HTTP_TIMEOUT = _env_int('HTTP_TIMEOUT', 10)
    NUTRITION_WORKERS = _env_int('NUTRITION_WORKERS', 4)

    # Search
    SEARCH_DEFAULT_NUMBER = _env_int('SEARCH_DEFAULT_NUMBER', 20)

    # Elevated privilege: role 'admin' or this e-mail address
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'savoryadmin@example.com')

    # Error reporting
    SHOW_ERROR_DETAILS = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SHOW_ERROR_DETAILS = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    CALORIENINJAS_API_KEY = 'test-key'
    EDAMAM_FOOD_DB_APP_ID = 'test-app'
    EDAMAM_FOOD_DB_API_KEY = 'test-key'
    EDAMAM_NUTRITION_APP_ID = 'test-app'
    EDAMAM_NUTRITION_API_KEY = 'test-key'
    UPCITEMDB_API_KEY = 'test-key'
    NUTRITION_WORKERS = 1


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
