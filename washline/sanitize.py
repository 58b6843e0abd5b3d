"""Free-text cleaning for values that are stored and echoed back to clients."""

import html

from washline.errors import ValidationError

MAX_TEXT_LENGTH = 2000


def sanitize_string(value):
    """Trim and HTML-escape a string; other types pass through."""
    if not isinstance(value, str):
        return value
    return html.escape(value.strip(), quote=True)


def sanitize_dict(data):
    """Escape every string leaf of a JSON-like structure"""
    if isinstance(data, dict):
        return {key: sanitize_dict(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [sanitize_dict(item) for item in data]
    return sanitize_string(data)


def clean_text(value, field, required=False, max_length=MAX_TEXT_LENGTH):
    """Validate a free-text request field and return it escaped.

    Absent values become ``''`` unless ``required`` is set.
    """
    if value is None:
        value = ''
    if not isinstance(value, str):
        raise ValidationError('{} must be a string'.format(field))
    value = value.strip()
    if required and not value:
        raise ValidationError('{} is required'.format(field))
    if len(value) > max_length:
        raise ValidationError('{} must be at most {} characters'.format(field, max_length))
    return html.escape(value, quote=True)
