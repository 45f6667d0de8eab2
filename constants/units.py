"""
Unit Constants and Conversion Tables

Serving-unit to gram-equivalent factors used when scaling nutrition
records to a different serving size.
"""

# Serving unit (lowercase) -> grams per one unit.
# Volume units use water density (1 ml ~ 1 g).
UNIT_TO_GRAMS = {
    'g': 1, 'gram': 1, 'grams': 1,
    'kg': 1000, 'kilogram': 1000, 'kilograms': 1000,
    'oz': 28.35, 'ounce': 28.35, 'ounces': 28.35,
    'lb': 453.59, 'pound': 453.59, 'pounds': 453.59,
    'cup': 240, 'cups': 240,
    'tbsp': 15, 'tablespoon': 15, 'tablespoons': 15,
    'tsp': 5, 'teaspoon': 5, 'teaspoons': 5,
    'ml': 1, 'milliliter': 1, 'milliliters': 1,
    'l': 1000, 'liter': 1000, 'liters': 1000,
}

# Gram-equivalent assumed for units missing from UNIT_TO_GRAMS.
# Known approximation: 'piece', 'slice', 'serving' etc. all count as 1 g.
UNKNOWN_UNIT_GRAMS = 1

# Serving size reported by providers that publish values per 100 g
DEFAULT_SERVING_GRAMS = 100
