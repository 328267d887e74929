"""
DOM Filter

Reduces raw HTML to the small, relevant part an LLM needs to recommend a
locator for one described element.
- Preprocessor: String-level sanitization and tolerant parsing
- StructuralReducer: eight-stage whole-document reduction
- SeedFinder + SnippetBuilder: description-guided snippets
- LocatorAdvisor: LLM locator recommendation (optional, needs a provider)

Public API surface:
  Reduction functions: filter_relevant_html, extract_snippet_by_description, extract_relevant_text
  Pipeline classes: DomFilter, StructuralReducer, SeedFinder, SnippetBuilder, Preprocessor
  Data models: ReductionSettings, PlatformProfile, FilterResult, Locator, LocatorPair
  Locator contract: parse_single_locator, parse_locator_response, try_parse_structured
  Error types: DomFilterError and subclasses
  Caching: LocatorCache, get_default_cache
"""

# --- Reduction (offline, never fails) ---
from .filtering import (
    DomFilter,
    extract_relevant_text,
    extract_snippet_by_description,
    filter_relevant_html,
)
from .platform_detector import detect_platform
from .preprocessor import Preprocessor
from .reducer import StructuralReducer
from .seeds import SeedFinder, find_seeds
from .snippet import SnippetBuilder

# --- Data models ---
from .schemas import (
    FilterResult,
    Locator,
    LocatorPair,
    LocatorStrategy,
    PlatformProfile,
    ReductionSettings,
    SeedCandidate,
)

# --- Locator contract ---
from .locator import parse_locator_response, parse_single_locator, try_parse_structured

# --- Exceptions ---
from .exceptions import (
    AdvisorError,
    DomFilterError,
    LLMClientError,
    LocatorParseError,
    PreprocessorError,
    ReductionError,
)

# --- LLM collaborator ---
from .advisor import LocatorAdvisor
from .locator_cache import LocatorCache, get_default_cache
from .main import LocatorPipeline

__version__ = "0.1.0"
__all__ = [
    "filter_relevant_html",
    "extract_snippet_by_description",
    "extract_relevant_text",
    "DomFilter",
    "StructuralReducer",
    "SeedFinder",
    "find_seeds",
    "SnippetBuilder",
    "Preprocessor",
    "detect_platform",
    "FilterResult",
    "Locator",
    "LocatorPair",
    "LocatorStrategy",
    "PlatformProfile",
    "ReductionSettings",
    "SeedCandidate",
    "parse_locator_response",
    "parse_single_locator",
    "try_parse_structured",
    "DomFilterError",
    "PreprocessorError",
    "ReductionError",
    "LocatorParseError",
    "LLMClientError",
    "AdvisorError",
    "LocatorAdvisor",
    "LocatorCache",
    "get_default_cache",
    "LocatorPipeline",
]
