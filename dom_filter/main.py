"""
Main orchestrator for locator recommendation.

Coordinates the two-stage flow: DomFilter (reduce) → LocatorAdvisor (ask).
Reduction runs offline and never fails; only the advisor talks to an LLM.
"""

from pathlib import Path
from typing import Optional, Union

from .advisor import LocatorAdvisor
from .filtering import filter_relevant_html
from .llm_client import BaseLLMClient, LLMProvider
from .logger import get_module_logger, setup_logger
from .preprocessor import Preprocessor
from .schemas import LocatorPair, ReductionSettings

logger = get_module_logger("main")


class LocatorPipeline:
    """
    Main orchestrator for locator lookup.

    1. DomFilter: description-guided reduction of the page source
    2. LocatorAdvisor: snippet → LLM → LocatorPair (cached)
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        llm_client: Optional[BaseLLMClient] = None,
        settings: Optional[ReductionSettings] = None,
        log_level: int = None,
        use_cache: bool = True
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.settings = settings
        self.advisor = LocatorAdvisor(
            llm_client=llm_client,
            provider=provider,
            use_cache=use_cache,
            settings=settings
        )

        logger.info("LocatorPipeline initialized")

    def locate(
        self,
        page_source: str,
        description: str,
        force_refresh: bool = False
    ) -> LocatorPair:
        """
        Recommend a locator for one described element.

        Args:
            page_source: Raw page markup (e.g. a browser's page source)
            description: Natural-language description of the element
            force_refresh: Skip the locator cache if True

        Returns:
            LocatorPair with primary and optional fallback locator
        """
        logger.info(f"Locating '{description}'")

        # Stage 1: reduce (offline, never fails)
        # Input:  raw page source
        # Output: multi-seed snippet, or the whole-page reduction when nothing matched
        reduced = filter_relevant_html(page_source, description, self.settings)
        logger.info(f"Reduced page source from {len(page_source or '')} to {len(reduced)} chars")

        # Stage 2: ask the oracle (cached per description + snippet)
        # The advisor narrows the reduced markup once more to the single best match.
        return self.advisor.ask_for_locator(reduced, description, force_refresh=force_refresh)

    def locate_file(
        self,
        file_path: Union[str, Path],
        description: str,
        force_refresh: bool = False
    ) -> LocatorPair:
        """Recommend a locator for an element in a saved HTML file."""
        raw_bytes = Path(file_path).read_bytes()
        html = Preprocessor.decode_bytes(raw_bytes)
        return self.locate(html, description, force_refresh=force_refresh)


def locate_element(
    page_source: str,
    description: str,
    provider: Optional[LLMProvider] = None
) -> LocatorPair:
    """Convenience function to locate one element with the default oracle."""
    return LocatorPipeline(provider=provider).locate(page_source, description)
