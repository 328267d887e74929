"""
LLM-based locator advisor.

Asks the recommendation oracle for a locator for one described element.

Pipeline position: after reduction (DomFilter snippet → LocatorAdvisor → caller).
Input:  page markup (usually already reduced) + natural-language description
Output: LocatorPair (primary + optional fallback), cached per (description, snippet)
"""

import re
from typing import Optional

from .exceptions import AdvisorError, LLMClientError, LocatorParseError
from .filtering import DomFilter
from .llm_client import BaseLLMClient, LLMClient, LLMProvider
from .locator import (
    extract_json_object,
    locator_pair_from_structured,
    parse_single_locator,
    strip_code_fences,
    try_parse_structured,
)
from .locator_cache import LocatorCache, get_default_cache
from .logger import get_module_logger
from .schemas import LocatorPair, ReductionSettings

logger = get_module_logger("advisor")


# --- LLM Prompt Design ---
# The system prompt only fixes the role and the output type; the matching
# rules live in the user prompt next to the snippet they apply to.

SYSTEM_PROMPT = "You are a QA automation expert. Always return valid JSON locators for Selenium."

# The rules mirror the seed search: strip widget words to get the target
# label, prefer attribute hooks, then exact text, then whole-word text, and
# only then the fixed synonym list. Allowing an XPath primary matters because
# CSS cannot match inner text.

USER_PROMPT = """Find the most reliable and maintainable Selenium locator for the element described below.
Treat the description as intent; it does not have to match a tag name.

First normalize the description: lowercase, trim, collapse spaces. Remove generic UI words
(button, link, tab, icon, image, img, label, field, box, div, span, section, panel, menu,
card, header, footer, item, option, tile). What remains is the TARGET LABEL
(e.g. "start" from "Start Button").

Matching precedence, stop at the first unique hit:
1) An attribute equals the TARGET LABEL (case-insensitive): aria-label, title, alt,
   placeholder, value, data-testid, data-qa, name, id. Prefer a CSS attribute-equals
   selector on the clickable element.
2) Visible text equals the TARGET LABEL (case-insensitive), via XPath with
   normalize-space() and translate(), selecting the clickable element.
3) Visible text contains the TARGET LABEL as a whole word.
4) Only if 1-3 found nothing, these synonyms (no others): logout/sign out/log off/exit;
   login/sign in/log on; submit/save/apply/confirm; cancel/close/dismiss; search/find/lookup;
   settings/preferences/options/configuration; start/begin/get started/launch;
   delete/remove/trash; home/dashboard.
5) Last resort: a stable, unique data-* attribute combination.

Rules:
- The locator must match exactly one element in the snippet.
- Target the clickable <a>/<button>, not an inner <span>/<i>.
- Do not output comma-separated multi-selectors, index-based selectors or dynamic class fragments.
- Never fall back to a generic button[type='submit'] unless the TARGET LABEL is "submit".

HTML snippet:
```html
{snippet}
```

Element: {description}

Respond with JSON only, exactly:
{{"primary": "<best_selector>", "fallback": "<xpath_fallback_or_empty>"}}"""


_BARE_LOCATOR = re.compile(r"^(?:(?:id|name|css|xpath)=|[/(#.])|\[", re.IGNORECASE)


def _looks_like_locator(text: str) -> bool:
    """A lone locator line, as opposed to a sentence of prose."""
    return bool(text) and "\n" not in text and bool(_BARE_LOCATOR.search(text))


def fallback_locators(description: str) -> LocatorPair:
    """
    Keyword-based guess used when the oracle gave nothing usable.

    Covers the common login-form vocabulary; anything else becomes an id
    derived from the description plus a text/placeholder XPath.
    """
    lowered = description.strip().lower()

    if "user" in lowered or "email" in lowered:
        primary = "input[name*='user']"
        fallback = "//input[@type='text' and (@name='username' or @placeholder='Username')]"
    elif "pass" in lowered:
        primary = "input[type='password']"
        fallback = "//input[@type='password']"
    elif "login" in lowered or "submit" in lowered or "button" in lowered:
        primary = "button[type='submit']"
        fallback = "//button[contains(text(),'Login') or contains(text(),'Submit')]"
    else:
        # quotes would end the XPath string literal
        text = re.sub(r"['\"]", "", description.strip())
        safe_id = re.sub(r"[^a-z0-9]", "", lowered)
        xpath = f"//*[contains(text(),'{text}') or @placeholder='{text}']"
        if not safe_id:
            return LocatorPair(primary=parse_single_locator(xpath))
        primary, fallback = f"id={safe_id}", xpath

    return LocatorPair(
        primary=parse_single_locator(primary),
        fallback=parse_single_locator(fallback),
    )


class LocatorAdvisor:
    """LLM-based locator recommendation."""

    def __init__(
        self,
        llm_client: Optional[BaseLLMClient] = None,
        provider: Optional[LLMProvider] = None,
        use_cache: bool = True,
        cache: Optional[LocatorCache] = None,
        settings: Optional[ReductionSettings] = None,
        strict: bool = False
    ):
        self.llm_client = llm_client
        self.use_cache = use_cache
        self.cache = cache if cache else (get_default_cache() if use_cache else None)
        self.filter = DomFilter(settings)
        # strict: surface unusable oracle answers instead of guessing
        self.strict = strict

        if self.llm_client is None:
            try:
                self.llm_client = LLMClient.create(provider=provider)
            except LLMClientError as e:
                raise AdvisorError(
                    message=f"Failed to initialize LLM client: {e.message}",
                    suggested_prompt="Check LLM_PROVIDER and the API key (OPENAI_API_KEY or ANTHROPIC_API_KEY)."
                )

    def ask_for_locator(
        self,
        dom: str,
        description: str,
        force_refresh: bool = False
    ) -> LocatorPair:
        """Recommend a locator for the element `description` names inside `dom`."""
        snippet = self.filter.snippet(dom, description).html
        logger.info(f"Extracted snippet length: {len(snippet)}")

        if self.use_cache and self.cache and not force_refresh:
            cached = self.cache.get(description, snippet)
            if cached:
                return cached

        prompt = USER_PROMPT.format(snippet=snippet, description=description)

        try:
            response = self.llm_client.complete(prompt=prompt, system_prompt=SYSTEM_PROMPT)
        except LLMClientError as e:
            if self.strict:
                raise
            logger.warning(f"LLM call failed, using keyword fallback: {e.message}")
            return fallback_locators(description)

        pair = self.parse_response(response)
        if pair is None:
            logger.warning(f"Unusable LLM answer for '{description}', using keyword fallback")
            return fallback_locators(description)

        if self.use_cache and self.cache:
            self.cache.put(
                description=description,
                snippet=snippet,
                locators=pair,
                extra_info={"provider": self.llm_client.provider_name}
            )

        logger.info(f"Locator for '{description}': {pair.primary}")
        return pair

    def parse_response(self, response: str) -> Optional[LocatorPair]:
        """
        Turn a raw oracle answer into a LocatorPair.

        Tries, in order: the structured form, a JSON object buried in prose,
        and a single bare locator line. Returns None when none of them
        yields a valid primary locator (or raises, in strict mode).
        """
        content = strip_code_fences(response or "")

        structured = try_parse_structured(content) or extract_json_object(content)
        try:
            if structured is not None:
                return locator_pair_from_structured(structured)
            if _looks_like_locator(content):
                return LocatorPair(primary=parse_single_locator(content))
        except LocatorParseError as e:
            if self.strict:
                raise
            logger.warning(f"Failed to parse locator answer: {e.message}")
            return None

        if self.strict:
            raise LocatorParseError("LLM answer holds no locator", locator=content)
        return None


def ask_for_locator(
    dom: str,
    description: str,
    provider: Optional[LLMProvider] = None
) -> LocatorPair:
    """Convenience function to ask the default oracle for one locator."""
    return LocatorAdvisor(provider=provider).ask_for_locator(dom, description)
