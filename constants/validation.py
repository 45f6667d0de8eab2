"""
Validation Constants

Whitelists and limits for recipe moderation, monetization and
normalization of provider data.
"""

# Publication status of a persisted recipe
RECIPE_STATUSES = {'draft', 'published'}

# Moderation lifecycle
APPROVAL_PENDING = 'pending'
APPROVAL_APPROVED = 'approved'
APPROVAL_REJECTED = 'rejected'
APPROVAL_STATUSES = {APPROVAL_PENDING, APPROVAL_APPROVED, APPROVAL_REJECTED}

# Statuses a moderator may move a recipe to
MODERATOR_STATUSES = {APPROVAL_APPROVED, APPROVAL_REJECTED}

# Valid difficulty levels
VALID_DIFFICULTIES = {'easy', 'medium', 'hard'}

# Monetization
PREVIEW_TEXT_MAX_LENGTH = 250

# Provider ingredient slots (strIngredient1..strIngredient20)
MAX_INGREDIENT_SLOTS = 20

# Amount assigned to a present ingredient with an empty measure
TO_TASTE = 'to taste'

# Heuristic timings (minutes) for sources without explicit timings
ESTIMATED_PREP_QUICK = 15
ESTIMATED_PREP_DEFAULT = 30
ESTIMATED_COOK_DESSERT = 45
ESTIMATED_COOK_DEFAULT = 60

# Detail lookups issued per provider list call
MAX_DETAIL_LOOKUPS = 12

# Maximum field lengths for security
MAX_LENGTHS = {
    'recipe_title': 200,
    'description': 5000,
    'category': 100,
    'cuisine': 100,
    'instructions': 50000,
    'instruction_step': 5000,
    'ingredient_name': 200,
    'ingredient_amount': 50,
    'ingredient_unit': 50,
    'ingredient_notes': 255,
    'tag_name': 100,
    'image': 500,
}
