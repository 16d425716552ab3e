"""
HTML Sanitizer
==============

Whitelist sanitizer for rich-text fields. Rich text is stored exactly as the
editor produced it and passes through ``sanitize_html`` on every read.

- Dangerous elements (script, style, iframe, ...) are dropped with their content
- Other non-whitelisted tags are unwrapped, keeping their text
- Only whitelisted attributes survive; links must use a safe scheme
"""

import html
from html.parser import HTMLParser
from urllib.parse import urlparse

ALLOWED_HTML_TAGS = frozenset({
    'p', 'br', 'strong', 'em', 'u', 's',
    'a', 'ul', 'ol', 'li',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'blockquote', 'code', 'pre',
})

ALLOWED_HTML_ATTRS = frozenset({'href', 'target', 'rel', 'class'})

DANGEROUS_TAGS = frozenset({
    'script', 'style', 'iframe', 'object', 'embed', 'form', 'input', 'button',
})

VOID_TAGS = frozenset({'br', 'input', 'embed'})

SAFE_URL_SCHEMES = ('', 'http', 'https', 'mailto', 'tel')


def _safe_url(value):
    scheme = urlparse(value.strip()).scheme.lower()
    return scheme in SAFE_URL_SCHEMES


class _Sanitizer(HTMLParser):

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.out = []
        self.open_tags = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in DANGEROUS_TAGS:
            # Void elements have no end tag to close the skip
            if tag not in VOID_TAGS:
                self.skip_depth += 1
            return
        if self.skip_depth or tag not in ALLOWED_HTML_TAGS:
            return

        kept = []
        for name, value in attrs:
            if name not in ALLOWED_HTML_ATTRS or value is None:
                continue
            if name == 'href' and not _safe_url(value):
                continue
            kept.append(f' {name}="{html.escape(value, quote=True)}"')

        self.out.append(f"<{tag}{''.join(kept)}>")
        if tag not in VOID_TAGS:
            self.open_tags.append(tag)

    def handle_startendtag(self, tag, attrs):
        if tag in DANGEROUS_TAGS:
            return
        self.handle_starttag(tag, attrs)
        if tag in self.open_tags and tag not in VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag):
        if tag in DANGEROUS_TAGS and tag not in VOID_TAGS:
            self.skip_depth = max(self.skip_depth - 1, 0)
            return
        if self.skip_depth or tag not in self.open_tags:
            return
        # Close anything left open inside this element first
        while self.open_tags:
            current = self.open_tags.pop()
            self.out.append(f"</{current}>")
            if current == tag:
                break

    def handle_data(self, data):
        if not self.skip_depth:
            self.out.append(html.escape(data, quote=False))

    def result(self):
        self.close()
        while self.open_tags:
            self.out.append(f"</{self.open_tags.pop()}>")
        return ''.join(self.out)


def sanitize_html(value):
    """Return *value* reduced to the rich-text whitelist"""
    if not value:
        return ''
    parser = _Sanitizer()
    parser.feed(value)
    return parser.result()


def escape_text(value):
    """Trim and HTML-escape a plain-text field"""
    if value is None:
        return ''
    return html.escape(str(value).strip(), quote=True)
