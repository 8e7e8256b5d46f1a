"""
LLM client wrapper for extraction, scoring and writing tasks.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, Optional

import google.generativeai as genai

from data_models import ATSReport, CandidateContact, JobPosting
from errors import ExtractionError, GenerationError, LLMServiceError
from prompts import (
    ATS_SCHEMA,
    CONTACT_SCHEMA,
    JOB_INFO_SCHEMA,
    build_ats_prompt,
    build_contact_prompt,
    build_cover_letter_prompt,
    build_job_info_prompt,
    build_optimize_prompt,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT = 60.0

CONTACT_ERROR = "Could not automatically extract contact details from the CV. Please ensure it's clearly formatted."
JOB_INFO_ERROR = "Could not automatically extract job details from the description."
COVER_LETTER_ERROR = "Failed to generate cover letter. The AI service may be temporarily unavailable."
ATS_ERROR = "Failed to analyze CV. The ATS service may be temporarily unavailable."
OPTIMIZE_ERROR = "Failed to optimize CV. The AI service may be temporarily unavailable."

EXTRACTION_TEMPERATURE = 0.2
WRITING_TEMPERATURE = 0.7


class GeminiClient:
    """Wrapper around the Google Gemini API for the assistant's five tasks."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize the Gemini client.

        Args:
            api_key: Google Gemini API key.
            model_name: Name of the Gemini model to use.
            timeout: Upper bound in seconds for a single request.
        """
        genai.configure(api_key=api_key)
        self._model_name = model_name
        self._timeout = timeout
        self._model = genai.GenerativeModel(model_name)
        self._generation_config = {
            "temperature": EXTRACTION_TEMPERATURE,
            "top_p": 0.9,
            "top_k": 32,
            "candidate_count": 1,
        }
        LOGGER.info("Gemini client initialized with model %s (timeout %.0fs)", model_name, timeout)

    @property
    def model_name(self) -> str:
        return self._model_name

    def invoke(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        temperature: Optional[float] = None,
    ) -> Any:
        """
        Issue a single generate-content request.

        Args:
            prompt: Full prompt text.
            schema: Optional response schema; when given the model is asked for JSON.
            temperature: Optional override of the default sampling temperature.

        Returns:
            Parsed dictionary when a schema is supplied, stripped text otherwise.

        Raises:
            LLMServiceError: On API faults, empty responses or unparsable JSON.
        """
        config: Dict[str, Any] = dict(self._generation_config)
        if temperature is not None:
            config["temperature"] = temperature
        if schema is not None:
            config["response_mime_type"] = "application/json"
            config["response_schema"] = schema

        try:
            response = self._model.generate_content(
                prompt,
                generation_config=config,
                request_options={"timeout": self._timeout},
            )
            text = _response_text(response)
        except Exception as exc:
            raise LLMServiceError(f"Gemini request failed: {exc}") from exc

        if not text:
            raise LLMServiceError("Empty response from Gemini")
        LOGGER.debug("Raw LLM response (first 200 chars): %s", text[:200])

        if schema is None:
            return text
        return _parse_json_object(text)

    def extract_contact(self, resume_text: str) -> CandidateContact:
        """Extract the candidate's contact block from resume text."""
        try:
            payload = self.invoke(build_contact_prompt(resume_text), CONTACT_SCHEMA, EXTRACTION_TEMPERATURE)
        except LLMServiceError as exc:
            LOGGER.error("Contact extraction failed: %s", exc)
            raise ExtractionError(CONTACT_ERROR) from exc
        contact = CandidateContact.from_payload(payload)
        LOGGER.info("Extracted contact details for %s", contact.name or "<unnamed candidate>")
        return contact

    def extract_job_info(self, job_description: str) -> JobPosting:
        """Extract role, company and hiring manager from a job description."""
        try:
            payload = self.invoke(build_job_info_prompt(job_description), JOB_INFO_SCHEMA, EXTRACTION_TEMPERATURE)
        except LLMServiceError as exc:
            LOGGER.error("Job info extraction failed: %s", exc)
            raise ExtractionError(JOB_INFO_ERROR) from exc
        posting = JobPosting.from_payload(payload)
        LOGGER.info("Extracted job info: %s at %s", posting.role, posting.company)
        return posting

    def generate_cover_letter(
        self,
        job_description: str,
        resume_text: str,
        contact: CandidateContact,
        subject: str,
        hiring_manager: str,
    ) -> str:
        """
        Generate a tailored cover letter.

        Args:
            job_description: Description for the role.
            resume_text: Resume content.
            contact: Contact details for the letter header.
            subject: Subject line of the letter.
            hiring_manager: Hiring manager name, may be empty.

        Returns:
            Cover letter text.
        """
        prompt = build_cover_letter_prompt(job_description, resume_text, contact, subject, hiring_manager)
        try:
            return self.invoke(prompt, temperature=WRITING_TEMPERATURE)
        except LLMServiceError as exc:
            LOGGER.error("Gemini cover letter generation failed: %s", exc)
            raise GenerationError(COVER_LETTER_ERROR) from exc

    def score_against_job(self, job_description: str, resume_text: str) -> ATSReport:
        """
        Request an ATS-style match score for the resume.

        Returns:
            ATSReport with the score clamped to 0..100.
        """
        try:
            data = self.invoke(build_ats_prompt(job_description, resume_text), ATS_SCHEMA, EXTRACTION_TEMPERATURE)
        except LLMServiceError as exc:
            LOGGER.error("Gemini ATS scoring failed: %s", exc)
            raise GenerationError(ATS_ERROR) from exc

        if "score" not in data:
            LOGGER.error("'score' field missing in LLM response! Response keys: %s", list(data.keys())[:10])
            raise GenerationError(ATS_ERROR)
        raw_score = data.get("score")
        try:
            score = float(raw_score)
        except (ValueError, TypeError) as exc:
            LOGGER.error("Failed to convert score to float: %s. Score value: %s (type: %s)",
                         exc, raw_score, type(raw_score))
            raise GenerationError(ATS_ERROR) from exc
        if math.isnan(score):
            LOGGER.error("LLM returned a NaN score")
            raise GenerationError(ATS_ERROR)

        score = max(0.0, min(100.0, score))
        LOGGER.info("ATS score after validation: %.1f", score)
        return ATSReport(
            score=score,
            strengths=str(data.get("strengths") or "").strip(),
            suggestions=str(data.get("suggestions") or "").strip(),
        )

    def optimize_resume(self, job_description: str, resume_text: str) -> str:
        """Rewrite the resume body for the job; the contact header is excluded."""
        try:
            return self.invoke(build_optimize_prompt(job_description, resume_text), temperature=WRITING_TEMPERATURE)
        except LLMServiceError as exc:
            LOGGER.error("Gemini CV optimization failed: %s", exc)
            raise GenerationError(OPTIMIZE_ERROR) from exc


def _response_text(response: Any) -> str:
    """Pull the text out of a generate_content response."""
    if hasattr(response, "text"):
        return (response.text or "").strip()
    candidates = getattr(response, "candidates", None)
    if candidates:
        return (candidates[0].content.parts[0].text or "").strip()
    LOGGER.error("Unexpected response format from Gemini: %s", type(response))
    return ""


def _parse_json_object(text: str) -> Dict[str, Any]:
    """Parse a JSON object, tolerating code fences or prose around it."""
    if not text.startswith("{"):
        match = re.search(r"\{.*\}", text, re.S)
        if not match:
            raise LLMServiceError(f"No JSON object found in LLM response: {text[:200]}")
        text = match.group(0)
        LOGGER.debug("Extracted JSON from response (first 200 chars): %s", text[:200])

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LLMServiceError(f"Failed to parse JSON from LLM response: {exc}") from exc
    if not isinstance(data, dict):
        raise LLMServiceError("LLM response is not a JSON object")
    return data
