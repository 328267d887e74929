"""
Public reduction API.

Three outputs, all bounded by ReductionSettings.max_output_chars:
  filter_relevant_html(raw)                 whole-document reduction
  filter_relevant_html(raw, description)    multi-seed snippet around matches
  extract_snippet_by_description(dom, d)    single best match with context
  extract_relevant_text(raw)                tag-free text of the reduction

Best effort, never fail: a parse failure returns the input capped, a stage
failure on the description path falls back to the whole-document reduction,
and a stage failure there falls back to the input capped.
"""

from typing import Optional

from .dom import normalize_space, serialize
from .logger import get_module_logger
from .platform_detector import detect_platform
from .preprocessor import Preprocessor
from .reducer import StructuralReducer
from .safety import cap, fallback_text
from .schemas import DEFAULT_SETTINGS, FilterResult, ReductionSettings
from .seeds import SeedFinder
from .snippet import SnippetBuilder

logger = get_module_logger("filtering")


class DomFilter:
    """
    Orchestrates the reduction paths:
    1. Preprocessor: sanitize and parse
    2. Platform detection
    3. StructuralReducer (whole document) or SeedFinder + SnippetBuilder
    """

    def __init__(self, settings: Optional[ReductionSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self.preprocessor = Preprocessor()
        self.reducer = StructuralReducer(self.settings, self.preprocessor)
        self.finder = SeedFinder()
        self.builder = SnippetBuilder(self.settings, self.reducer)

    def filter(self, raw_html: Optional[str], description: Optional[str] = None) -> FilterResult:
        """Whole-document reduction, or a multi-seed snippet when a description is given."""
        if not raw_html:
            logger.warning("Input HTML is null or empty")
            return FilterResult(warnings=["Input HTML is empty"])
        if not description or not description.strip():
            return self._reduce_whole(raw_html)
        return self._reduce_described(raw_html, description)

    def snippet(self, dom: Optional[str], description: Optional[str]) -> FilterResult:
        """Context around the single best match; whole-document reduction when none."""
        if not dom:
            logger.warning("DOM is null or empty for snippet extraction")
            return FilterResult(warnings=["Input HTML is empty"])

        warnings = []
        try:
            logger.info(f"Extracting snippet for description: {description}")
            soup = self.preprocessor.parse(dom, warnings)
            profile = detect_platform(soup)
            self.reducer.run_stage("noise strip", self.reducer.strip_noise, soup)

            seeds = self.finder.find(soup, description)
            if not seeds:
                logger.info("No candidates found, returning filtered DOM")
                return self._reduce_whole(dom)

            container = self.builder.single(seeds[0].element, soup.body)
            out = cap(serialize(container), self.settings.max_output_chars)
            logger.info(f"Built snippet with context, size: {len(out)}")
            return FilterResult(
                html=out,
                is_dense_framework=profile.is_dense_framework,
                seed_count=len(seeds),
                warnings=warnings
            )
        except Exception as e:
            logger.exception(f"Error extracting snippet: {e}")
            return self._fall_back_to_whole(dom, warnings, e)

    def text(self, raw_html: Optional[str]) -> str:
        """Plain text of the whole-document reduction."""
        reduced = self.filter(raw_html).html
        if not reduced:
            return ""
        try:
            soup = self.preprocessor.parse(reduced)
        except Exception as e:
            logger.warning(f"Could not re-parse reduced HTML for text extraction: {e}")
            return ""
        return normalize_space(soup.body.get_text(" "))

    # --- Paths ---

    def _reduce_whole(self, raw_html: str) -> FilterResult:
        warnings = []
        try:
            out, profile = self.reducer.reduce(raw_html, warnings)
        except Exception as e:
            logger.exception(f"Error filtering HTML: {e}")
            warnings.append(f"Filtering failed, returning original input: {e}")
            return FilterResult(
                html=fallback_text(raw_html, self.settings.max_output_chars),
                fallback_used=True,
                warnings=warnings
            )
        return FilterResult(
            html=out,
            is_dense_framework=profile.is_dense_framework,
            warnings=warnings
        )

    def _reduce_described(self, raw_html: str, description: str) -> FilterResult:
        warnings = []
        try:
            soup = self.preprocessor.parse(raw_html, warnings)
            profile = detect_platform(soup)
            self.reducer.prepare(soup, profile)

            seeds = self.finder.find(soup, description)
            if not seeds:
                logger.info("No seeds found, falling back to whole-document reduction")
                out = self.reducer.finish(soup.body, profile)
            else:
                snippet = self.builder.build(seeds, soup.body)
                out = self.builder.render(snippet, profile)

            return FilterResult(
                html=out,
                is_dense_framework=profile.is_dense_framework,
                seed_count=len(seeds),
                warnings=warnings
            )
        except Exception as e:
            logger.exception(f"Error filtering HTML with description: {e}")
            return self._fall_back_to_whole(raw_html, warnings, e)

    def _fall_back_to_whole(self, raw_html: str, warnings: list[str], error: Exception) -> FilterResult:
        result = self._reduce_whole(raw_html)
        return result.model_copy(update={
            "fallback_used": True,
            "warnings": warnings + [f"Snippet extraction failed: {error}"] + result.warnings,
        })


def filter_relevant_html(
    raw_html: Optional[str],
    description: Optional[str] = None,
    settings: Optional[ReductionSettings] = None
) -> str:
    """Convenience function: reduced markup, focused on `description` when given."""
    return DomFilter(settings).filter(raw_html, description).html


def extract_snippet_by_description(
    dom: Optional[str],
    description: Optional[str],
    settings: Optional[ReductionSettings] = None
) -> str:
    """Convenience function: markup around the best match for `description`."""
    return DomFilter(settings).snippet(dom, description).html


def extract_relevant_text(raw_html: Optional[str], settings: Optional[ReductionSettings] = None) -> str:
    """Convenience function: only text (no tags) after filtering."""
    return DomFilter(settings).text(raw_html)
