"""
Services Package

Business logic for recipe ingestion: nutrition resolution, normalization,
search, persistence and the auth/subscription collaborators.

Only the error taxonomy is re-exported here; import the other modules
directly (they depend on the providers and models packages).
"""

from .errors import (
    RecipeServiceError,
    ProviderUnavailable,
    NotFound,
    ValidationError,
    PermissionDenied,
    Unauthorized,
    PersistenceFailure,
    DuplicateRecipe,
)

__all__ = [
    'RecipeServiceError',
    'ProviderUnavailable',
    'NotFound',
    'ValidationError',
    'PermissionDenied',
    'Unauthorized',
    'PersistenceFailure',
    'DuplicateRecipe',
]
