# Utility modules for the recipe service
from .http import fetch_json, guard_payload
from .sanitizer import (
    sanitize_text, sanitize_optional, sanitize_url, sanitize_title,
    sanitize_instruction_step, sanitize_ingredient_text, slugify
)
