"""
Record Schema
=============

Field kinds and per-resource descriptions used by the generic record handler.

Each field kind decides how a payload value is validated, how it is stored
and how it is rendered back. ``RICH_TEXT`` is stored verbatim and always
sanitized on the way out.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from urllib.parse import urlparse

from ...core.sanitize import escape_text, sanitize_html

_WHITESPACE_RE = re.compile(r'\s')


class FieldKind(Enum):
    TEXT = 'text'
    RICH_TEXT = 'rich_text'
    URL = 'url'
    INTEGER = 'integer'
    DATE = 'date'
    TAGS = 'tags'


def is_valid_url(url):
    """Absolute URL with a scheme and a host, no embedded whitespace"""
    if not url or _WHITESPACE_RE.search(url):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme) and parsed.scheme.isalpha() and bool(parsed.netloc)


def to_int(value, default=None):
    """Lenient integer conversion; bools and garbage give *default*"""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Field:
    """One attribute of a record.

    ``name`` is the key used in payloads and responses, ``column`` the table
    column (defaults to ``name``).
    """
    name: str
    kind: FieldKind = FieldKind.TEXT
    column: str = None
    required: bool = False
    min_length: int = 0
    min_value: int = None
    max_value: int = None
    default: object = ''
    length_error: str = ''
    invalid_error: str = ''

    @property
    def db_column(self):
        return self.column or self.name

    def required_error(self):
        return f"Поле '{self.name}' обязательно"

    def clean(self, payload, errors):
        """Validate ``payload[name]`` and return the value to store.

        Violations are appended to *errors*; the returned value is then
        meaningless and must not be persisted.
        """
        raw = payload.get(self.name)

        if self.kind is FieldKind.RICH_TEXT:
            value = raw if isinstance(raw, str) else ''
            if self.required and not value.strip():
                errors.append(self.required_error())
            return value

        if self.kind is FieldKind.TAGS:
            if not isinstance(raw, list):
                return '[]'
            tags = [escape_text(tag) for tag in raw if tag is not None and str(tag).strip()]
            return json.dumps(tags, ensure_ascii=False)

        if self.kind is FieldKind.INTEGER:
            missing = raw is None or (isinstance(raw, str) and not raw.strip())
            if missing:
                if self.required:
                    errors.append(self.required_error())
                return self.default
            value = to_int(raw)
            if value is None:
                if self.required or self.invalid_error:
                    errors.append(self.invalid_error or self.required_error())
                return self.default
            if ((self.min_value is not None and value < self.min_value)
                    or (self.max_value is not None and value > self.max_value)):
                errors.append(self.invalid_error)
            return value

        if self.kind is FieldKind.DATE:
            text = str(raw).strip() if raw is not None else ''
            if not text:
                if self.required:
                    errors.append(self.required_error())
                return None
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                errors.append(self.invalid_error)
                return None

        # TEXT and URL
        text = '' if raw is None or isinstance(raw, (dict, list)) else str(raw).strip()
        if not text:
            if self.required:
                errors.append(self.required_error())
            return ''
        if self.min_length and len(text) < self.min_length:
            errors.append(self.length_error)
        if self.kind is FieldKind.URL:
            if not is_valid_url(text):
                errors.append(self.invalid_error)
            return text
        return escape_text(text)

    def render(self, value):
        """Stored value -> response value"""
        if self.kind is FieldKind.RICH_TEXT:
            return sanitize_html(value)
        if self.kind is FieldKind.TAGS:
            try:
                tags = json.loads(value or '[]')
            except ValueError:
                return []
            return tags if isinstance(tags, list) else []
        if self.kind is FieldKind.DATE:
            return value.isoformat() if value else None
        if self.kind is FieldKind.INTEGER:
            return to_int(value, self.default)
        return value if value is not None else ''


@dataclass(frozen=True)
class ResourceSpec:
    """Everything the generic handler needs to know about one record kind"""
    name: str
    table: object
    fields: tuple
    default_sort: str
    fallback_sort_column: str
    # sort key -> column; empty means the fallback column is always used
    sort_columns: dict = field(default_factory=dict)
    not_found: str = 'Запись не найдена'
    id_required: str = 'ID обязателен'
    created: str = 'Запись создана'
    updated: str = 'Запись обновлена'
    deleted: str = 'Запись удалена'

    def sort_column(self, key):
        return self.sort_columns.get(key, self.fallback_sort_column)
