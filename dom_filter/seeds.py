"""
Seed Finder: ranked search for elements matching a natural-language
description such as "username field" or "Start Button".

Passes, in priority order:
  A. exact text       label/button/link text containing the description,
                      then any element whose own text is exactly it
  B. attribute match  placeholder/aria-label/title/name/id containing the
                      description's label words as whole tokens
  C. role heuristics  keyword sniffing ("user", "pass", "button", "login"...)
                      mapped to likely controls; only consulted when A and B
                      found nothing, since they are guesses

Results keep pass order and are deduplicated by structural identity. No
match is a normal outcome, not an error.
"""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Tag

from .classification import (
    ACTION_VOCABULARY,
    ATTRIBUTE_MATCH_KEYS,
    LABEL_NOISE_WORDS,
    QUOTE_TRANSLATION,
)
from .dom import attr_text, css_path, own_text, visible_text
from .logger import get_module_logger
from .schemas import SeedCandidate, SeedPass

logger = get_module_logger("seeds")

_TOKEN = re.compile(r"[^\W_]+")

TEXT_MATCH_TAGS = ("label", "button", "a")
USER_KEYWORDS = ("user", "username", "email")
USER_INPUT_TYPES = ("text", "email")


def normalize_description(description: Optional[str]) -> str:
    """Trim, unify curly quotes, case-fold."""
    return (description or "").strip().translate(QUOTE_TRANSLATION).casefold()


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text.casefold())


def target_label(normalized: str) -> str:
    """
    The part of a description that names the element: "start button" → "start".
    Falls back to the whole description when nothing but widget words is left.
    """
    words = [w for w in tokenize(normalized) if w not in LABEL_NOISE_WORDS]
    return " ".join(words) if words else normalized


def contains_tokens(haystack: list[str], needle: list[str]) -> bool:
    """True when `needle` occurs as a contiguous run of whole tokens."""
    if not needle or len(needle) > len(haystack):
        return False
    width = len(needle)
    return any(haystack[i:i + width] == needle for i in range(len(haystack) - width + 1))


def _input_type(tag: Tag) -> str:
    # a missing type attribute means a text input
    return attr_text(tag, "type").strip().casefold() or "text"


def _attr_contains(tag: Tag, keys: Iterable[str], fragments: Iterable[str]) -> bool:
    values = [attr_text(tag, key).casefold() for key in keys]
    return any(fragment in value for value in values for fragment in fragments)


class SeedFinder:
    """Multi-pass search for description-matching elements."""

    def find(self, document: Tag, description: Optional[str]) -> list[SeedCandidate]:
        """
        Args:
            document: BeautifulSoup document or the root element to search
            description: Natural-language description of the element

        Returns:
            Deduplicated candidates, best first
        """
        root = document.body if isinstance(document, BeautifulSoup) and document.body else document
        query = normalize_description(description)
        if not query:
            return []

        label = target_label(query)
        found: list[tuple[Tag, SeedPass]] = []
        found += [(tag, SeedPass.EXACT_TEXT) for tag in self.exact_text(root, query, label)]
        found += [(tag, SeedPass.ATTRIBUTE) for tag in self.attribute_match(root, label)]
        if not found:
            found += [(tag, SeedPass.ROLE_HEURISTIC) for tag in self.role_heuristics(root, query, label)]

        seeds = self._dedupe(found)
        logger.info(f"Found {len(seeds)} seed candidates for '{description}'")
        return seeds

    # --- Pass A ---

    def exact_text(self, root: Tag, query: str, label: str) -> list[Tag]:
        matches = []
        for name in TEXT_MATCH_TAGS:
            matches += [tag for tag in root.find_all(name) if query in own_text(tag).casefold()]

        wanted = {query, label}
        matches += [tag for tag in root.find_all(True) if own_text(tag).casefold() in wanted]
        return matches

    # --- Pass B ---

    def attribute_match(self, root: Tag, label: str) -> list[Tag]:
        needle = tokenize(label)
        matches = []
        for key in ATTRIBUTE_MATCH_KEYS:
            for tag in root.find_all(attrs={key: True}):
                if contains_tokens(tokenize(attr_text(tag, key)), needle):
                    matches.append(tag)
        return matches

    # --- Pass C ---

    def role_heuristics(self, root: Tag, query: str, label: str) -> list[Tag]:
        matches = []

        if any(word in query for word in USER_KEYWORDS):
            matches += [
                tag for tag in root.find_all("input")
                if _input_type(tag) in USER_INPUT_TYPES
                or _attr_contains(tag, ("name", "id"), ("user", "email"))
            ]
            matches += self._labelled_inputs(root, query, label)

        if "pass" in query:
            matches += [
                tag for tag in root.find_all("input")
                if _input_type(tag) == "password"
                or _attr_contains(tag, ("name", "id"), ("pass",))
            ]

        if ("button" in query or query.startswith("click")
                or "sign in" in query or "login" in query):
            buttons = [
                tag for tag in root.find_all(["button", "input", "a"])
                if tag.name == "button"
                or (tag.name == "input" and _input_type(tag) == "submit")
                or (tag.name == "a" and attr_text(tag, "role") == "button")
            ]
            matches += [tag for tag in buttons if self._mentions_action(tag, query)]

        return matches

    def _labelled_inputs(self, root: Tag, query: str, label: str) -> list[Tag]:
        """Inputs named by a <label> whose text mentions the description."""
        inputs = []
        for label_tag in root.find_all("label"):
            text = visible_text(label_tag).casefold()
            if query not in text and label not in text and not any(k in text for k in USER_KEYWORDS):
                continue
            target_id = attr_text(label_tag, "for").strip()
            if target_id:
                target = root.find(id=target_id)
            else:
                target = label_tag.find_next_sibling("input")
            if target is not None:
                inputs.append(target)
        return inputs

    @staticmethod
    def _mentions_action(tag: Tag, query: str) -> bool:
        text = " ".join([
            visible_text(tag),
            attr_text(tag, "value"),
            attr_text(tag, "aria-label"),
            attr_text(tag, "title"),
        ]).casefold()
        return any(word in query or word in text for word in ACTION_VOCABULARY)

    # --- Dedup ---

    @staticmethod
    def _dedupe(found: list[tuple[Tag, SeedPass]]) -> list[SeedCandidate]:
        seen = set()
        seeds = []
        for tag, found_by in found:
            key = css_path(tag)
            if key in seen:
                continue
            seen.add(key)
            seeds.append(SeedCandidate(element=tag, found_by=found_by, key=key))
        return seeds


def find_seeds(document: Tag, description: Optional[str]) -> list[SeedCandidate]:
    """Convenience function to run all seed passes."""
    return SeedFinder().find(document, description)
