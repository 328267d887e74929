"""
Safety envelope: size capping and the best-effort fallback.

The cap is a plain character cut. It may leave a tag half-written; the
consumer is an LLM prompt, not a parser, and the bound matters more.
"""

import re
from typing import Optional

from .logger import get_module_logger

logger = get_module_logger("safety")

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def compact(markup: str) -> str:
    """Collapse runs of two or more whitespace characters and trim."""
    return _WHITESPACE_RUN.sub(" ", markup).strip()


def cap(text: str, max_chars: int) -> str:
    """Truncate to max_chars characters."""
    if len(text) > max_chars:
        logger.debug(f"Capping output from {len(text)} to {max_chars} chars")
        return text[:max_chars]
    return text


def fallback_text(raw: Optional[str], max_chars: int) -> str:
    """What the caller gets when the enhanced pipeline gives up: the input, capped."""
    return cap(raw or "", max_chars)
