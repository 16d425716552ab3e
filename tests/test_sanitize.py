"""
Sanitizer and field-kind tests.
"""

import pytest

from etmsite.core.sanitize import escape_text, sanitize_html
from etmsite.modules.records.schema import Field, FieldKind, is_valid_url, to_int


@pytest.mark.parametrize("raw,expected", [
    ("<p>Hello <em>world</em></p>", "<p>Hello <em>world</em></p>"),
    ("<p>a<br>b<br/>c</p>", "<p>a<br>b<br>c</p>"),
    ("<div><p>kept</p></div>", "<p>kept</p>"),
    ("<p>x<script>alert(1)</script>y</p>", "<p>xy</p>"),
    ("<style>p{}</style><p>s</p>", "<p>s</p>"),
    ('<a href="https://etm.ru" onclick="x()" title="t">l</a>', '<a href="https://etm.ru">l</a>'),
    ('<a href="javascript:alert(1)">l</a>', "<a>l</a>"),
    ('<p class="lead">c</p>', '<p class="lead">c</p>'),
    ("<p>unclosed <strong>bold", "<p>unclosed <strong>bold</strong></p>"),
    ("5 < 6 & 7", "5 &lt; 6 &amp; 7"),
    ("", ""),
    (None, ""),
])
def test_sanitize_html(raw, expected):
    assert sanitize_html(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ('<p>Before <input type="text"> after</p><p>Second paragraph</p>',
     "<p>Before  after</p><p>Second paragraph</p>"),
    ('<p>A</p><embed src="x.swf"><p>B kept</p>', "<p>A</p><p>B kept</p>"),
    ("<p>a<input/>b</p><p>c</p>", "<p>ab</p><p>c</p>"),
    ("<p>x<script/>y</p><p>z</p>", "<p>xy</p><p>z</p>"),
])
def test_void_dangerous_tags_drop_only_themselves(raw, expected):
    """Text after an <input> or <embed> survives."""
    assert sanitize_html(raw) == expected


def test_sanitize_escapes_attribute_values():
    out = sanitize_html('<a href="/x?a=1&b=&quot;2&quot;">l</a>')
    assert out == '<a href="/x?a=1&amp;b=&quot;2&quot;">l</a>'


def test_escape_text():
    assert escape_text('  "O\'Neil" <b>  ') == "&quot;O&#x27;Neil&quot; &lt;b&gt;"
    assert escape_text(None) == ""


@pytest.mark.parametrize("url,ok", [
    ("https://etm-murmansk.ru/a.png", True),
    ("http://localhost:8080/x", True),
    ("ftp://files.example.com/doc.pdf", True),
    ("uploads/2026-03/img.png", False),
    ("not-a-url", False),
    ("https://bad host/x", False),
    ("https://", False),
    ("", False),
])
def test_is_valid_url(url, ok):
    assert is_valid_url(url) is ok


@pytest.mark.parametrize("value,expected", [
    (5, 5), ("7", 7), (" 8 ", 8), (2.9, 2), ("x", None), (None, None), (True, None),
])
def test_to_int(value, expected):
    assert to_int(value) == expected


def test_tags_field_drops_blank_items_and_escapes():
    field = Field("tags", FieldKind.TAGS)
    errors = []
    stored = field.clean({"tags": [" a ", "", None, "<b>"]}, errors)

    assert errors == []
    assert field.render(stored) == ["a", "&lt;b&gt;"]


def test_tags_field_ignores_non_list():
    field = Field("tags", FieldKind.TAGS)
    assert field.clean({"tags": "a,b"}, []) == "[]"


def test_integer_field_range():
    field = Field("year", FieldKind.INTEGER, required=True, min_value=2000, max_value=2100,
                  default=0, invalid_error="bad year")
    errors = []
    assert field.clean({"year": "2024"}, errors) == 2024
    field.clean({"year": 2101}, errors)
    field.clean({"year": "soon"}, errors)
    field.clean({}, errors)
    assert errors == ["bad year", "bad year", "Поле 'year' обязательно"]


def test_text_min_length_only_checked_when_present():
    field = Field("name", min_length=2, length_error="too short")
    errors = []
    assert field.clean({}, errors) == ""
    field.clean({"name": "a"}, errors)
    assert errors == ["too short"]
