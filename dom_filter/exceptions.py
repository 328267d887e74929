"""
Custom exceptions for the DOM filter.

Error philosophy:
  - PreprocessorError  → NON-FATAL: the markup could not be parsed; the public
                         API returns the original input, size-capped.
  - ReductionError     → NON-FATAL: a pipeline stage blew up; the public API
                         substitutes the best output it already has.
  - LocatorParseError  → FAIL HARD: an oracle answer that names no usable
                         locator cannot be repaired locally.
  - LLMClientError     → FAIL HARD at the client level; the advisor turns it
                         into a heuristic fallback locator.
  - AdvisorError       → FAIL HARD: the advisor has no client to talk to.

Reduction never raises to its caller. Everything that touches the oracle's
answer does.
"""

from typing import Optional


class DomFilterError(Exception):
    """Base exception for all DOM filter errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- NON-FATAL: caught inside the public reduction API ---

class PreprocessorError(DomFilterError):
    """
    Raised when no parser in the fallback chain accepts the markup.

    Non-fatal - the caller receives the original text, size-capped.
    """
    pass


class ReductionError(DomFilterError):
    """
    Raised when a reduction stage fails unexpectedly.

    Non-fatal - the enhanced pipeline for this call is abandoned.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.stage = stage


# --- FAIL HARD: surfaced to the caller ---

class LocatorParseError(DomFilterError):
    """Raised when a locator string is empty or cannot be compiled."""

    def __init__(
        self,
        message: str,
        locator: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.locator = locator


class LLMClientError(DomFilterError):
    """Raised when the LLM API call fails."""

    def __init__(
        self,
        message: str,
        provider: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.provider = provider  # "ollama", "openai" or "anthropic"


class AdvisorError(DomFilterError):
    """
    Raised when the locator advisor cannot be set up.

    Carries a hint telling the caller how to fix the configuration.
    """

    def __init__(
        self,
        message: str,
        suggested_prompt: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.suggested_prompt = suggested_prompt

    def to_response(self) -> dict:
        return {
            "error": "AdvisorError",
            "message": self.message,
            "suggested_prompt": self.suggested_prompt,
            "details": self.details
        }
