"""
Structural Reducer: the eight-stage pipeline that shrinks a whole document.

Stage order matters; later stages rely on earlier removals:
  1. strip_noise        scripts, styles, media, stylesheet/icon links, viewport/charset meta
  2. strip_hidden       inline-hidden elements that nothing can address
  3. strip_chrome       dead framework chrome (dense-framework documents only)
  4. unwrap             decorative/generic inline wrappers with at most one child
  5. prune_attributes   attribute allow-list, class limits on generic documents
  6. remove_empty       childless, textless elements, to a fixpoint
  7. compact            whitespace runs collapse to one space
  8. cap                hard character cut

Stages 4-8 double as the cleanup pass for snippets (see snippet.py).

Every stage mutates the tree it is handed and nothing else, so one reducer
instance can serve concurrent calls as long as each call parses its own tree.
"""

from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from .classification import (
    CHROME_CLASSES,
    CHROME_IDENTIFYING_ATTRS,
    CHROME_IDS,
    EMPTY_PRESERVED_TAGS,
    FORM_CONTROL_ATTRS,
    FORM_CONTROL_TAGS,
    FRAMEWORK_WRAPPER_PREFIXES,
    FRAMEWORK_WRAPPER_TAGS,
    HIDDEN_CLASSES,
    HIDDEN_STYLE_PATTERNS,
    IDENTIFYING_ATTRS,
    INTERACTIVE_SELECTOR,
    KEEP_ATTR_PREFIXES,
    KEEP_ATTRS,
    KEEP_TAGS,
    STRIP_SELECTORS,
    STRIP_TAGS,
    UNWRAP_TAGS,
)
from .dom import (
    attr_text,
    element_children,
    has_any_attr,
    is_blank,
    is_interactive,
    serialize_contents,
    visible_text,
)
from .exceptions import DomFilterError, ReductionError
from .logger import get_module_logger
from .platform_detector import detect_platform
from .preprocessor import Preprocessor
from .safety import cap, compact
from .schemas import DEFAULT_SETTINGS, PlatformProfile, ReductionSettings

logger = get_module_logger("reducer")

_CHROME_SELECTOR = ", ".join(
    [f"#{ident}" for ident in sorted(CHROME_IDS)]
    + [f".{cls}" for cls in sorted(CHROME_CLASSES)]
)


class StructuralReducer:
    """Whole-document reduction pipeline."""

    def __init__(
        self,
        settings: Optional[ReductionSettings] = None,
        preprocessor: Optional[Preprocessor] = None
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self.preprocessor = preprocessor or Preprocessor()

    # --- Entry points ---

    def reduce(self, html: str, warnings: Optional[list[str]] = None) -> tuple[str, PlatformProfile]:
        """
        Parse and reduce a whole document.

        Raises PreprocessorError or ReductionError; the best-effort wrapper
        lives in filtering.py.
        """
        logger.info(f"Starting DOM filtering. Input length: {len(html)}")
        soup = self.preprocessor.parse(html, warnings)
        profile = detect_platform(soup)
        out = self.reduce_tree(soup, profile)
        logger.info(f"DOM filtering completed. Output length: {len(out)}")
        return out, profile

    def reduce_tree(self, soup: BeautifulSoup, profile: PlatformProfile) -> str:
        """Run all eight stages on a parsed document."""
        self.prepare(soup, profile)
        return self.finish(soup.body, profile)

    def prepare(self, soup: BeautifulSoup, profile: PlatformProfile) -> None:
        """Stages 1-3: drop everything that is never worth showing."""
        root = soup.body
        self.run_stage("noise strip", self.strip_noise, soup)
        self.run_stage("hidden strip", self.strip_hidden, root, profile)
        if profile.is_dense_framework:
            self.run_stage("chrome strip", self.strip_chrome, root)

    def finish(self, root: Tag, profile: PlatformProfile) -> str:
        """Stages 4-8: tidy the remaining tree and serialize it."""
        self.run_stage("unwrap", self.unwrap, root, profile)
        self.run_stage("attribute prune", self.prune_attributes, root, profile)
        self.run_stage("empty removal", self.remove_empty, root)
        out = self.run_stage("whitespace compaction", compact, serialize_contents(root))
        return cap(out, self.settings.max_output_chars)

    def run_stage(self, stage: str, func: Callable, *args):
        try:
            result = func(*args)
        except DomFilterError:
            raise
        except Exception as e:
            raise ReductionError(f"Stage '{stage}' failed: {e}", stage=stage) from e
        logger.debug(f"Stage complete: {stage}")
        return result

    # --- Stage 1 ---

    def strip_noise(self, soup: BeautifulSoup) -> int:
        """Remove scripts, styles, media and non-essential meta/link elements."""
        removed = 0
        for tag in soup.find_all(list(STRIP_TAGS)) + soup.select(", ".join(STRIP_SELECTORS)):
            if tag.decomposed:
                continue
            tag.decompose()
            removed += 1
        return removed

    # --- Stage 2 ---

    def is_hidden(self, tag: Tag) -> bool:
        style = attr_text(tag, "style")
        if style and any(p.search(style) for p in HIDDEN_STYLE_PATTERNS):
            return True
        if tag.has_attr("hidden"):
            return True
        if attr_text(tag, "aria-hidden").strip().lower() == "true":
            return True
        if self.settings.strip_hidden_classes:
            return any(cls in HIDDEN_CLASSES for cls in tag.get("class") or [])
        return False

    def strip_hidden(self, root: Tag, profile: PlatformProfile) -> int:
        """
        Remove hidden elements, except those a later lookup may still need:
        anything carrying an identifying attribute, and on dense-framework
        documents anything wrapping a control (it may be revealed lazily).
        """
        removed = 0
        for tag in root.find_all(True):
            if tag.decomposed or not self.is_hidden(tag):
                continue
            if profile.is_dense_framework and tag.select_one(INTERACTIVE_SELECTOR):
                continue
            if has_any_attr(tag, IDENTIFYING_ATTRS):
                continue
            tag.decompose()
            removed += 1
        return removed

    # --- Stage 3 ---

    def strip_chrome(self, root: Tag) -> int:
        """Remove framework chrome, but only where it is purely decorative."""
        removed = 0
        for tag in root.select(_CHROME_SELECTOR):
            if tag.decomposed:
                continue
            if tag.select_one(INTERACTIVE_SELECTOR):
                continue
            # a chrome id is what matched; it identifies nothing
            ident = attr_text(tag, "id")
            if (ident and ident not in CHROME_IDS) or has_any_attr(tag, CHROME_IDENTIFYING_ATTRS):
                continue
            if visible_text(tag) or tag.find("img"):
                continue
            tag.decompose()
            removed += 1
        return removed

    # --- Stage 4 ---

    def is_wrapper(self, tag: Tag, profile: PlatformProfile) -> bool:
        if tag.name in KEEP_TAGS or has_any_attr(tag, ("id", "data-testid")):
            return False
        if tag.name in UNWRAP_TAGS:
            return not tag.has_attr("class")
        if profile.is_dense_framework:
            return tag.name in FRAMEWORK_WRAPPER_TAGS or tag.name.startswith(FRAMEWORK_WRAPPER_PREFIXES)
        return False

    def unwrap(self, root: Tag, profile: PlatformProfile) -> int:
        """
        Replace wrapper elements by their content. A wrapper with more than
        one child element is left alone so sibling structure stays readable.
        """
        unwrapped = 0
        for tag in root.find_all(True):
            if tag.parent is None or not self.is_wrapper(tag, profile):
                continue
            if len(element_children(tag)) > 1:
                continue
            tag.unwrap()
            unwrapped += 1
        return unwrapped

    # --- Stage 5 ---

    def shorten_classes(self, classes: list[str]) -> list[str]:
        """Keep at most class_token_limit tokens (3+ chars) within class_char_limit."""
        kept = []
        length = 0
        for token in classes:
            if len(token) <= 2 or len(kept) >= self.settings.class_token_limit:
                continue
            needed = len(token) + (1 if kept else 0)
            if length + needed > self.settings.class_char_limit:
                continue
            kept.append(token)
            length += needed
        return kept

    def _keep_attribute(self, tag: Tag, key: str, value) -> bool:
        if tag.name == "a" and key == "href":
            href = str(value).strip()
            return len(href) <= self.settings.href_max_length and not href.lower().startswith("javascript:")
        if key in KEEP_ATTRS or key.startswith(KEEP_ATTR_PREFIXES):
            return True
        return tag.name in FORM_CONTROL_TAGS and key in FORM_CONTROL_ATTRS

    def prune_attributes(self, root: Tag, profile: PlatformProfile) -> None:
        """Drop every attribute not on the allow-list."""
        for tag in root.find_all(True):
            kept = {}
            for key, value in tag.attrs.items():
                if key == "class":
                    classes = value if isinstance(value, list) else str(value).split()
                    if not profile.is_dense_framework:
                        classes = self.shorten_classes(classes)
                    if classes:
                        kept[key] = classes
                elif self._keep_attribute(tag, key, value):
                    kept[key] = value
            tag.attrs = kept

    # --- Stage 6 ---

    def remove_empty(self, root: Tag) -> int:
        """
        Remove elements with no children and no text, repeating until nothing
        qualifies. Controls and void elements are never "empty".
        """
        total = 0
        while True:
            removed = 0
            # deepest first, so a parent sees its children already gone
            for tag in reversed(root.find_all(True)):
                if tag.decomposed or tag.name in EMPTY_PRESERVED_TAGS or is_interactive(tag):
                    continue
                if is_blank(tag):
                    tag.decompose()
                    removed += 1
            total += removed
            if not removed:
                return total


def reduce_html(html: str, settings: Optional[ReductionSettings] = None) -> str:
    """Convenience function; raises on failure (see filtering.filter_relevant_html)."""
    out, _ = StructuralReducer(settings).reduce(html)
    return out
