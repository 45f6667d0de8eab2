"""
Service Errors

Exception taxonomy shared by providers, services and routes. Each error
carries a machine-readable kind and the HTTP status it maps to.
"""


class RecipeServiceError(Exception):
    """Base class for all expected service failures."""
    kind = 'error'
    status_code = 500

    def __init__(self, message=None, details=None):
        self.message = message or self.__class__.__doc__ or self.kind
        self.details = details
        super().__init__(self.message)


class ProviderUnavailable(RecipeServiceError):
    """Upstream provider request failed."""
    kind = 'provider_unavailable'
    status_code = 502

    def __init__(self, provider, reason):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} unavailable: {reason}")


class NotFound(RecipeServiceError):
    """Requested recipe or food does not exist."""
    kind = 'not_found'
    status_code = 404


class ValidationError(RecipeServiceError):
    """Malformed or out-of-range input."""
    kind = 'validation_error'
    status_code = 400


class PermissionDenied(RecipeServiceError):
    """Action requires a role or entitlement the actor does not hold."""
    kind = 'permission_denied'
    status_code = 403


class Unauthorized(PermissionDenied):
    """Authentication required."""
    kind = 'unauthorized'
    status_code = 401


class PersistenceFailure(RecipeServiceError):
    """Transaction was rolled back."""
    kind = 'persistence_failure'
    status_code = 500


class DuplicateRecipe(PersistenceFailure):
    """Recipe has already been imported."""
    kind = 'duplicate_recipe'
    status_code = 409
