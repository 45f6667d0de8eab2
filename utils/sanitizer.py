"""
Input Sanitization Module

Cleans user submissions and provider text before it is stored: HTML is
escaped, control characters are removed and lengths are capped to the
column sizes.
"""

import html
import re
import unicodedata
from urllib.parse import urlparse

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=10000):
    """
    Sanitize free text by HTML-escaping special characters.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum stored length

    Returns:
        Sanitized string, truncated to max_length
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = _CONTROL_CHARS.sub('', text.strip())
    text = html.escape(text)

    # Truncate without splitting an escape sequence
    if len(text) > max_length:
        text = text[:max_length]
        amp = text.rfind('&')
        if amp != -1 and ';' not in text[amp:]:
            text = text[:amp]

    return text


def sanitize_optional(text, max_length):
    """Like sanitize_text, but blank input becomes None."""
    text = sanitize_text(text, max_length)
    return text or None


def sanitize_url(url, max_length=500):
    """
    Sanitize a URL by rejecting anything but http(s) and relative paths.

    Returns:
        The URL if safe, None otherwise
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    if len(url) > max_length:
        return None

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    if parsed.scheme.lower() not in ('http', 'https', ''):
        return None

    # Catch "javascript:" hidden behind whitespace or encoding
    lowered = re.sub(r'\s', '', url.lower())
    for dangerous in ('javascript:', 'data:', 'vbscript:', 'file:', '%6aavascript'):
        if dangerous in lowered:
            return None

    return url


def sanitize_title(title, max_length=200):
    """Recipe title: single line, escaped, whitespace collapsed."""
    if not title:
        return ''
    title = re.sub(r'\s+', ' ', str(title))
    return sanitize_text(title, max_length)


def sanitize_instruction_step(step, max_length=5000):
    """One instruction step. Newlines inside the step are kept."""
    return sanitize_text(step, max_length)


def sanitize_ingredient_text(text, max_length=200):
    """Ingredient name, amount or unit from a form or provider."""
    if not text:
        return ''
    text = re.sub(r'\s+', ' ', str(text))
    return sanitize_text(text, max_length)


def slugify(text, max_length=200):
    """URL slug: lowercase ASCII words joined by hyphens."""
    text = unicodedata.normalize('NFKD', html.unescape(str(text or '')))
    text = text.encode('ascii', 'ignore').decode('ascii').lower()
    text = re.sub(r'[^a-z0-9]+', '-', text).strip('-')
    return text[:max_length].rstrip('-') or 'recipe'
