"""
Markdown rendering of post and reply bodies.

Raw HTML typed by members is rendered as text, links and images keep only
http, https, mailto and relative targets, then ``@handle`` mentions in text
are wrapped for styling.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

_MENTION_IN_HTML = re.compile(r"(?:^|(?<=[^\w@/.=\"'&]))@([a-z0-9][a-z0-9-]*)", re.IGNORECASE)
_TAG_OR_TEXT = re.compile(r"(<[^>]*>)")
_SAFE_SCHEMES = frozenset({"http", "https", "mailto"})
_URL_ATTRIBUTES = (("a", "href"), ("img", "src"))


def is_safe_url(url: str) -> bool:
    """Whether ``url`` is relative or uses an allowed scheme."""
    # Browsers ignore whitespace and control characters inside the scheme
    cleaned = "".join(ch for ch in url if ch > " " and ch != "\x7f")
    scheme, separator, _ = cleaned.partition(":")
    if not separator or any(ch in scheme for ch in "/?#"):
        return True
    return scheme.lower() in _SAFE_SCHEMES


class _SafeUrlTreeprocessor(Treeprocessor):
    def run(self, root: etree.Element) -> None:
        for tag, attribute in _URL_ATTRIBUTES:
            for element in root.iter(tag):
                url = element.get(attribute)
                if url is not None and not is_safe_url(url):
                    del element.attrib[attribute]


class SafeBodyExtension(Extension):
    """Disable raw HTML passthrough and strip unsafe link targets."""

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")
        # After "unescape" so backslash escapes cannot hide a scheme
        md.treeprocessors.register(_SafeUrlTreeprocessor(md), "safe_url", -10)


def _wrap_mentions(text: str) -> str:
    return _MENTION_IN_HTML.sub(r'<span class="user-mention">@\1</span>', text)


def render_body(body: str) -> str:
    """Render ``body`` as HTML.

    Example:
        >>> render_body("Hey @dan, **thanks**")
        '<p>Hey <span class="user-mention">@dan</span>, <strong>thanks</strong></p>'
    """
    html = markdown.markdown(body or "", extensions=["fenced_code", "sane_lists", SafeBodyExtension()])
    # Only touch text between tags so attributes and code spans stay intact
    parts = _TAG_OR_TEXT.split(html)
    in_code = 0
    for index, part in enumerate(parts):
        if part.startswith("<"):
            name = part.strip("</>").split(" ")[0].lower()
            if name in ("code", "pre"):
                in_code += -1 if part.startswith("</") else 1
            continue
        if in_code <= 0:
            parts[index] = _wrap_mentions(part)
    return "".join(parts)
