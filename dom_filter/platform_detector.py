"""
Platform detection: dense-framework documents versus generic markup.

Dense-framework pages (Salesforce Lightning and its relatives) wrap every
control in several layers of framework containers, hide functional widgets
until they are revealed lazily, and encode roles in class names. Several
reduction stages switch behaviour on this one flag.
"""

from bs4 import BeautifulSoup

from .classification import (
    DENSE_FRAMEWORK_FRAGMENT_THRESHOLD,
    DENSE_FRAMEWORK_FRAGMENTS,
    DENSE_FRAMEWORK_MARKERS,
)
from .logger import get_module_logger
from .schemas import PlatformProfile

logger = get_module_logger("platform_detector")


def detect_platform(soup: BeautifulSoup) -> PlatformProfile:
    """
    Classify a parsed document.

    Dense-framework when any highly specific marker matches, or when more than
    DENSE_FRAMEWORK_FRAGMENT_THRESHOLD elements carry a framework-like class
    fragment. The threshold keeps small generic fragments that happen to use a
    "ui" class from being misclassified.
    """
    marker_hits = len(soup.select(", ".join(DENSE_FRAMEWORK_MARKERS), limit=1))

    fragment_hits = 0
    if not marker_hits:
        fragment_hits = len(soup.select(
            ", ".join(DENSE_FRAMEWORK_FRAGMENTS),
            limit=DENSE_FRAMEWORK_FRAGMENT_THRESHOLD + 1
        ))

    profile = PlatformProfile(
        is_dense_framework=bool(marker_hits) or fragment_hits > DENSE_FRAMEWORK_FRAGMENT_THRESHOLD,
        marker_hits=marker_hits,
        fragment_hits=fragment_hits,
    )
    logger.info(f"Detected dense-framework document: {profile.is_dense_framework}")
    return profile
