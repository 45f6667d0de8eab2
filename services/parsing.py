"""
Parsing Service

Lenient parsers for form input and provider text fields.
"""

import re
from decimal import Decimal, InvalidOperation


def to_int_or_none(value, non_negative=False):
    """Parse an optional integer. Absent, empty or unparseable values become None.

    With non_negative, values below zero also become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return None if non_negative and value < 0 else value
    value = str(value).strip()
    if not value:
        return None
    # Accept leading digits like "30 minutes" or "12.5"
    match = re.match(r'^[+-]?\d+', value)
    if not match:
        return None
    result = int(match.group())
    if non_negative and result < 0:
        return None
    return result


def to_decimal_or_none(value):
    """Parse an optional decimal amount (e.g. a price). Unparseable values become None."""
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    if not value:
        return None
    try:
        result = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def to_float(value, default=0.0):
    """Parse a float, falling back to default."""
    try:
        return float(value) if value is not None and value != '' else default
    except (ValueError, TypeError):
        return default


def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def split_instruction_text(text):
    """Split a free-text instruction block into trimmed, non-empty steps.

    Handles both \\n and \\r\\n line breaks.
    """
    if not text:
        return []
    steps = []
    for line in re.split(r'\r\n|\n', str(text)):
        line = line.strip()
        if line:
            steps.append(line)
    return steps


def split_tags(text):
    """Split a comma-separated tag field, dropping blanks."""
    if not text:
        return []
    return [tag.strip() for tag in str(text).split(',') if tag.strip()]


def unique_preserving_order(values):
    seen = set()
    result = []
    for value in values:
        key = value.lower()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result
