"""
Small helpers over BeautifulSoup trees shared by the reducer, the seed finder
and the snippet builder.

Tag.__eq__ in BeautifulSoup compares markup, not identity, so two identical
<li> siblings are "equal". Everything here that needs node identity uses
`is` or id() instead.
"""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import PreformattedString

from .classification import INTERACTIVE_TAGS

# void elements render as <input id="u"> rather than <input id="u"/>
SERIALIZE_FORMATTER = "html5"

_WHITESPACE = re.compile(r"\s+")


def normalize_space(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def element_children(tag: Tag) -> list[Tag]:
    """Child elements only; text nodes are skipped."""
    return [child for child in tag.children if isinstance(child, Tag)]


def own_text(tag: Tag) -> str:
    """Text of the element's direct text nodes, whitespace-normalized."""
    parts = [
        str(child) for child in tag.children
        if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
    ]
    return normalize_space(" ".join(parts))


def visible_text(tag: Tag) -> str:
    """All descendant text, whitespace-normalized."""
    return normalize_space(tag.get_text(" "))


def attr_text(tag: Tag, key: str) -> str:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    value = tag.get(key)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def has_any_attr(tag: Tag, keys: Iterable[str]) -> bool:
    return any(tag.has_attr(key) for key in keys)


def is_interactive(tag: Tag) -> bool:
    if tag.name in INTERACTIVE_TAGS:
        return True
    if tag.name == "a":
        return attr_text(tag, "role") == "button" or bool(attr_text(tag, "href").strip())
    return False


def has_useful_text(tag: Tag) -> bool:
    """Own text, or a value/label-like attribute, of at least two characters."""
    if len(own_text(tag)) >= 2:
        return True
    meta = "".join(attr_text(tag, key) for key in ("value", "aria-label", "title", "placeholder"))
    return len(meta.strip()) >= 2


def is_blank(tag: Tag) -> bool:
    """No child elements and no non-whitespace text."""
    return not element_children(tag) and not tag.get_text().strip()


def _top(tag: Tag) -> Tag:
    node = tag
    while node.parent is not None:
        node = node.parent
    return node


def css_path(tag: Tag) -> str:
    """
    Canonical structural identity of an element.

    A unique id short-circuits the path; otherwise every level contributes
    tag, classes and its 1-based position among element siblings.
    """
    segments = []
    node: Optional[Tag] = tag
    top = _top(tag)
    while isinstance(node, Tag) and not isinstance(node, BeautifulSoup):
        ident = attr_text(node, "id").strip()
        if ident and len(top.find_all(id=ident, limit=2)) == 1:
            segments.append(f"#{ident}")
            break

        segment = node.name + "".join(f".{cls}" for cls in node.get("class") or [])
        parent = node.parent
        if isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
            siblings = element_children(parent)
            index = next(i for i, sibling in enumerate(siblings, 1) if sibling is node)
            segment += f":nth-child({index})"
        segments.append(segment)
        node = parent

    return " > ".join(reversed(segments))


def climb(tag: Tag, depth: int, root: Tag) -> Tag:
    """Walk up at most `depth` parents, never above `root`."""
    current = tag
    for _ in range(depth):
        if current is root:
            break
        parent = current.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            break
        current = parent
    return current


def remove_comments(soup: Tag) -> int:
    """Remove HTML comments. Returns count of removed comments."""
    comments = soup.find_all(string=lambda text: isinstance(text, Comment))
    for comment in comments:
        comment.extract()
    return len(comments)


def serialize(tag: Tag) -> str:
    """Outer markup of an element."""
    return tag.decode(formatter=SERIALIZE_FORMATTER)


def serialize_contents(tag: Tag) -> str:
    """Inner markup of an element."""
    return tag.decode_contents(formatter=SERIALIZE_FORMATTER)
