"""
Nutrition Constants

Fixed business thresholds for qualitative nutrient levels and the
named nutrition filters accepted by recipe search.
"""

NUTRIENT_FIELDS = ('calories', 'protein', 'carbs', 'fat', 'fiber', 'sugar', 'sodium', 'potassium')

# nutrient -> ordered (level, predicate threshold) pairs, first match wins.
# protein/fiber: higher is "high"; sugar/sodium: lower is "low".
PROTEIN_LEVELS = (('high', 15), ('medium', 8))
FIBER_LEVELS = (('high', 5), ('medium', 2.5))
SUGAR_LEVELS = (('low', 5), ('medium', 15))
SODIUM_LEVELS = (('low', 400), ('medium', 800))

# Named search filters
NUTRITION_FILTERS = {
    'high-protein': lambda n: n.protein >= 15,
    'low-calorie': lambda n: n.calories < 300,
    'high-fiber': lambda n: n.fiber >= 5,
    'low-sugar': lambda n: n.sugar <= 5,
}

# kcal per gram, for macro percentage breakdowns
KCAL_PER_GRAM = {'protein': 4, 'carbs': 4, 'fat': 9}

# Health recommendations for one serving
HEALTHY_MIN_FIBER = 3
HEALTHY_MAX_SUGAR = 10
HEALTHY_MAX_SODIUM = 600
NUTRITION_SUGGESTIONS = (
    (lambda n: n.protein < 10, 'Consider adding a protein source'),
    (lambda n: n.fiber < 3, 'Add more fiber-rich foods'),
    (lambda n: n.sugar > 15, 'Reduce sugar intake'),
)
