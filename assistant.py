"""
Session controller coordinating resume loading, background extraction and
the three user-triggered generation actions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from data_models import (
    COVER_LETTER_TITLE,
    OPTIMIZED_CV_TITLE,
    ATSReport,
    ActiveAction,
    AppState,
    CandidateContact,
    GeneratedArtifact,
    JobPosting,
    SessionState,
)
from debounce import Debouncer
from errors import AssistantError
from resume_loader import TextExtractor

LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5
MISSING_INPUTS_ERROR = "Please provide a job description and CV, and wait for the details to be extracted."


class AssistantClient(Protocol):
    """Operations the controller needs from the LLM client."""

    def extract_contact(self, resume_text: str) -> CandidateContact: ...

    def extract_job_info(self, job_description: str) -> JobPosting: ...

    def generate_cover_letter(
        self,
        job_description: str,
        resume_text: str,
        contact: CandidateContact,
        subject: str,
        hiring_manager: str,
    ) -> str: ...

    def score_against_job(self, job_description: str, resume_text: str) -> ATSReport: ...

    def optimize_resume(self, job_description: str, resume_text: str) -> str: ...


class CoverLetterAssistant:
    """Owns one SessionState and applies every state transition on the event loop."""

    def __init__(
        self,
        client: AssistantClient,
        extractor: Optional[TextExtractor] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        """
        Initialize the controller.

        Args:
            client: LLM client used for extraction and generation.
            extractor: Text extractor for uploaded files.
            debounce_seconds: Quiet period before job info is extracted.
        """
        self.client = client
        self.extractor = extractor or TextExtractor()
        self.state = SessionState()
        self._job_debouncer = Debouncer(debounce_seconds, self.refresh_job_info)
        self._contact_seq = 0
        self._job_seq = 0

    @property
    def busy(self) -> bool:
        return self.state.active_action is not None or self.state.processing_file

    def can_generate(self) -> bool:
        """Whether the cover letter action is currently allowed."""
        state = self.state
        if self.busy or state.extracting_contact or state.extracting_job_info:
            return False
        if not state.job_description.strip() or not state.resume_text.strip():
            return False
        if state.contact is None or state.job_posting is None:
            return False
        return state.job_posting_source == state.job_description

    # Inputs

    async def load_resume(self, file_name: str, data: bytes) -> bool:
        """
        Replace the current resume with an uploaded file.

        Returns:
            False if the upload was refused because work is in flight.
        """
        if self.busy:
            LOGGER.info("Ignoring upload of %s while another operation is running", file_name)
            return False

        state = self.state
        state.file_name = file_name
        state.error = None
        state.cover_letter = None
        state.ats_report = None
        state.optimized_resume = None
        state.resume_text = ""
        state.contact = None
        state.app_state = AppState.IDLE
        state.processing_file = True
        self._contact_seq += 1
        seq = self._contact_seq
        LOGGER.info("Processing uploaded resume %s (%d bytes)", file_name, len(data))

        loop = asyncio.get_running_loop()

        def report(message: str) -> None:
            loop.call_soon_threadsafe(setattr, state, "processing_message", message)

        try:
            try:
                text = await asyncio.to_thread(self.extractor.extract, file_name, data, report)
            except AssistantError as exc:
                state.error = exc.user_message
                state.app_state = AppState.ERROR
                return True
            await self._extract_contact(text, seq)
        finally:
            state.processing_file = False
            state.processing_message = ""
        return True

    def set_job_description(self, text: str) -> bool:
        """
        Store new job description text and schedule debounced extraction.

        Returns:
            False if the edit was refused because work is in flight.
        """
        if self.busy:
            return False
        if text == self.state.job_description:
            return True
        self.state.job_description = text
        self._job_debouncer.trigger(text)
        return True

    @property
    def job_info_pending(self) -> bool:
        return self._job_debouncer.pending

    async def drain(self) -> None:
        """Wait for any debounced extraction to finish."""
        await self._job_debouncer.drain()

    # Background extraction

    async def refresh_job_info(self, text: str) -> None:
        """Extract the job posting for ``text``; stale responses are discarded."""
        if not text.strip():
            return
        self._job_seq += 1
        seq = self._job_seq
        state = self.state
        state.extracting_job_info = True
        state.error = None
        try:
            posting = await asyncio.to_thread(self.client.extract_job_info, text)
        except AssistantError as exc:
            if seq == self._job_seq:
                state.error = exc.user_message
            return
        finally:
            if seq == self._job_seq:
                state.extracting_job_info = False

        if seq != self._job_seq:
            LOGGER.debug("Discarding stale job info response #%d (latest #%d)", seq, self._job_seq)
            return
        state.job_posting = posting
        state.job_posting_source = text

    async def _extract_contact(self, text: str, seq: int) -> None:
        state = self.state
        state.resume_text = text
        state.extracting_contact = True
        state.error = None
        try:
            contact = await asyncio.to_thread(self.client.extract_contact, text)
        except AssistantError as exc:
            if seq == self._contact_seq:
                state.error = exc.user_message
            return
        finally:
            if seq == self._contact_seq:
                state.extracting_contact = False

        if seq != self._contact_seq:
            LOGGER.debug("Discarding stale contact response #%d (latest #%d)", seq, self._contact_seq)
            return
        state.contact = contact

    # Primary actions

    async def generate_cover_letter(self) -> bool:
        """
        Generate the cover letter from the current inputs.

        Returns:
            True if the action ran (successfully or not), False if it was refused.
        """
        state = self.state
        if self.busy or state.extracting_contact or state.extracting_job_info:
            return False
        if not self.can_generate():
            state.error = MISSING_INPUTS_ERROR
            state.app_state = AppState.ERROR
            return False

        contact = state.contact
        posting = state.job_posting
        state.app_state = AppState.LOADING
        state.active_action = ActiveAction.COVER_LETTER
        state.error = None
        state.cover_letter = None
        state.ats_report = None
        state.optimized_resume = None
        try:
            letter = await asyncio.to_thread(
                self.client.generate_cover_letter,
                state.job_description,
                state.resume_text,
                contact,
                posting.subject_line(),
                posting.hiring_manager,
            )
            state.cover_letter = GeneratedArtifact(COVER_LETTER_TITLE, letter)
            state.app_state = AppState.SUCCESS
            LOGGER.info("Cover letter generated (%d chars)", len(letter))
        except AssistantError as exc:
            state.error = exc.user_message
            state.app_state = AppState.ERROR
        finally:
            state.active_action = None
        return True

    def can_analyze(self) -> bool:
        state = self.state
        return state.active_action is None and state.cover_letter is not None and state.ats_report is None

    def can_optimize(self) -> bool:
        state = self.state
        return state.active_action is None and state.cover_letter is not None and state.optimized_resume is None

    async def analyze_ats(self) -> bool:
        """Score the resume against the job description once per cover letter."""
        if not self.can_analyze():
            return False
        state = self.state
        state.active_action = ActiveAction.ATS
        state.error = None
        try:
            state.ats_report = await asyncio.to_thread(
                self.client.score_against_job, state.job_description, state.resume_text
            )
        except AssistantError as exc:
            state.error = exc.user_message
            state.app_state = AppState.ERROR
        finally:
            state.active_action = None
        return True

    async def optimize_resume(self) -> bool:
        """Rewrite the resume body and re-attach the contact header."""
        if not self.can_optimize():
            return False
        state = self.state
        state.active_action = ActiveAction.CV
        state.error = None
        try:
            body = await asyncio.to_thread(
                self.client.optimize_resume, state.job_description, state.resume_text
            )
            state.optimized_resume = GeneratedArtifact(OPTIMIZED_CV_TITLE, assemble_resume(state.contact, body))
        except AssistantError as exc:
            state.error = exc.user_message
            state.app_state = AppState.ERROR
        finally:
            state.active_action = None
        return True


def assemble_resume(contact: Optional[CandidateContact], body: str) -> str:
    """Prefix the optimized body with the locally known contact header."""
    if contact is None:
        return body
    return contact.header() + "\n\n" + body
