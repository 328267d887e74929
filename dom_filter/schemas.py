"""
Pydantic schemas defining the contracts between modules.

ReductionSettings: tunables shared by the reducer, seed finder and snippet builder
PlatformProfile:   Platform Detector → every stage that behaves per platform
SeedCandidate:     Seed Finder → Context Snippet Builder
FilterResult:      DomFilter → caller
Locator/LocatorPair: oracle answer → test-automation caller

Data flow:
  raw markup → PlatformProfile → StructuralReducer → FilterResult
  raw markup → PlatformProfile → SeedCandidate list → SnippetBuilder → FilterResult
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReductionSettings(BaseModel):
    """Tunables for one reduction call."""
    model_config = ConfigDict(frozen=True)

    max_output_chars: int = Field(default=200_000, gt=0)   # safety cap for LLM prompts
    snippet_parent_depth: int = Field(default=3, ge=0)     # how far up to climb for context
    snippet_sibling_limit: int = Field(default=12, gt=0)   # max children kept per node
    promote_sibling_limit: int = Field(default=5, ge=0)    # single-match parent promotion
    class_token_limit: int = Field(default=5, ge=0)
    class_char_limit: int = Field(default=40, ge=0)
    href_max_length: int = Field(default=300, gt=0)
    strip_hidden_classes: bool = False


DEFAULT_SETTINGS = ReductionSettings()


class PlatformProfile(BaseModel):
    """Outcome of platform detection, computed once per document."""
    model_config = ConfigDict(frozen=True)

    is_dense_framework: bool = False
    # hit counts stop at the decision point, they are not full tallies
    marker_hits: int = 0      # highly specific framework markers
    fragment_hits: int = 0    # elements with framework-like class fragments


# --- Seed search ---

class SeedPass(int, Enum):
    """Seed search passes, in priority order."""
    EXACT_TEXT = 0
    ATTRIBUTE = 1
    ROLE_HEURISTIC = 2


class SeedCandidate(BaseModel):
    """An element judged to match a description, plus the pass that found it."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    element: Any                 # bs4 Tag inside the searched document
    found_by: SeedPass
    key: str                     # structural identity (canonical CSS path)


# --- Output ---

class FilterResult(BaseModel):
    """Output of one DomFilter call."""
    html: str = ""
    is_dense_framework: bool = False
    seed_count: int = 0
    fallback_used: bool = False   # True when the best-effort path took over
    warnings: list[str] = Field(default_factory=list)


# --- Locator contract (consumed by the test-automation layer) ---

class LocatorStrategy(str, Enum):
    """Addressing modes a locator string can select."""
    ID = "id"
    NAME = "name"
    CSS = "css"
    XPATH = "xpath"


class Locator(BaseModel):
    """A single parsed locator."""
    strategy: LocatorStrategy
    value: str

    def __str__(self) -> str:
        return f"{self.strategy.value}={self.value}"


class LocatorPair(BaseModel):
    """Primary locator plus an optional fallback tried when it finds nothing."""
    primary: Locator
    fallback: Optional[Locator] = None

    def to_response(self) -> dict:
        """Render in the structured oracle format."""
        return {
            "primary": str(self.primary),
            "fallback": str(self.fallback) if self.fallback else "",
        }
