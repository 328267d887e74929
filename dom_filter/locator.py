"""
Locator strings, as returned by the recommendation oracle.

Grammar of one locator:
  id=<value> | name=<value> | css=<selector> | xpath=<expression>   (prefix is case-insensitive)
  /...  or  (...                                                     → xpath
  anything else                                                      → css

An oracle answer is either the structured form
  {"primary": "<locator>", "fallback": "<locator or empty>"}
or one bare locator string. Anything that yields no usable primary locator
raises LocatorParseError.
"""

import json
import re
from typing import Optional

import soupsieve
from lxml import etree

from .exceptions import LocatorParseError
from .logger import get_module_logger
from .schemas import Locator, LocatorPair, LocatorStrategy

logger = get_module_logger("locator")

_SCHEME_PREFIXES = (
    ("id=", LocatorStrategy.ID),
    ("name=", LocatorStrategy.NAME),
    ("css=", LocatorStrategy.CSS),
    ("xpath=", LocatorStrategy.XPATH),
)

_CODE_FENCE = re.compile(r"```[a-zA-Z]*")


def _validate(strategy: LocatorStrategy, value: str) -> None:
    try:
        if strategy == LocatorStrategy.CSS:
            soupsieve.compile(value)
        elif strategy == LocatorStrategy.XPATH:
            etree.XPath(value)
    except (soupsieve.SelectorSyntaxError, etree.XPathSyntaxError) as e:
        raise LocatorParseError(
            f"Invalid {strategy.value} locator: {e}",
            locator=value,
            details={"error": str(e)}
        ) from e


def parse_single_locator(text: Optional[str]) -> Locator:
    """Parse one locator string into a strategy and value."""
    if text is None or not text.strip():
        raise LocatorParseError("Locator string is null or empty", locator=text)

    locator = text.strip()
    lowered = locator.lower()

    for prefix, strategy in _SCHEME_PREFIXES:
        if lowered.startswith(prefix):
            value = locator[len(prefix):].strip()
            break
    else:
        strategy = LocatorStrategy.XPATH if locator.startswith(("/", "(")) else LocatorStrategy.CSS
        value = locator

    if not value:
        raise LocatorParseError(f"Locator '{locator}' has an empty value", locator=locator)

    _validate(strategy, value)
    return Locator(strategy=strategy, value=value)


def try_parse_structured(text: Optional[str]) -> Optional[dict]:
    """
    Attempt the structured {"primary", "fallback"} form.

    Returns the decoded object, or None when the text is not a JSON object
    (the caller then treats it as a bare locator string).
    """
    candidate = (text or "").strip()
    if not candidate.startswith("{"):
        return None
    try:
        decoded = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None


def parse_locator_response(text: Optional[str]) -> LocatorPair:
    """Parse an oracle answer into a primary locator and optional fallback."""
    structured = try_parse_structured(text)
    if structured is None:
        return LocatorPair(primary=parse_single_locator(text))
    return locator_pair_from_structured(structured)


def locator_pair_from_structured(structured: dict) -> LocatorPair:
    """Build a LocatorPair from a decoded {"primary", "fallback"} object."""
    primary = structured.get("primary")
    if not isinstance(primary, str) or not primary.strip():
        raise LocatorParseError(
            "Structured locator is missing a primary locator",
            details={"response": structured}
        )

    fallback = structured.get("fallback")
    return LocatorPair(
        primary=parse_single_locator(primary),
        fallback=parse_single_locator(fallback) if isinstance(fallback, str) and fallback.strip() else None,
    )


# --- Helpers for free-form LLM output ---

def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and stray backticks around an answer."""
    cleaned = _CODE_FENCE.sub("", text).replace("```", "").strip()
    return cleaned.strip("`").strip()


def extract_json_object(text: str) -> Optional[dict]:
    """Find a JSON object embedded in prose (first '{' to last '}')."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return try_parse_structured(text[start:end + 1])
