"""
Failure types shared by the assistant.

Each error carries a message that is safe to show to the user; the
underlying cause is chained with ``raise ... from`` and only logged.
"""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for failures surfaced to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.user_message = message


class LLMServiceError(AssistantError):
    """The LLM request failed or returned something unusable."""


class ExtractionError(AssistantError):
    """Contact or job details could not be extracted."""


class GenerationError(AssistantError):
    """A cover letter, ATS report or optimized CV could not be produced."""


class FileProcessingError(AssistantError):
    """An uploaded file could not be turned into text."""
