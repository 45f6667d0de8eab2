from .units import UNIT_TO_GRAMS, UNKNOWN_UNIT_GRAMS, DEFAULT_SERVING_GRAMS
from .nutrition import (
    NUTRIENT_FIELDS, PROTEIN_LEVELS, FIBER_LEVELS, SUGAR_LEVELS, SODIUM_LEVELS,
    NUTRITION_FILTERS, KCAL_PER_GRAM,
    HEALTHY_MIN_FIBER, HEALTHY_MAX_SUGAR, HEALTHY_MAX_SODIUM, NUTRITION_SUGGESTIONS,
)
from .validation import (
    RECIPE_STATUSES, APPROVAL_PENDING, APPROVAL_APPROVED, APPROVAL_REJECTED,
    APPROVAL_STATUSES, MODERATOR_STATUSES, VALID_DIFFICULTIES,
    PREVIEW_TEXT_MAX_LENGTH, MAX_INGREDIENT_SLOTS, TO_TASTE,
    ESTIMATED_PREP_QUICK, ESTIMATED_PREP_DEFAULT,
    ESTIMATED_COOK_DESSERT, ESTIMATED_COOK_DEFAULT,
    MAX_DETAIL_LOOKUPS, MAX_LENGTHS,
)
