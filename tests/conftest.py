import time
from typing import Callable, Dict, List, Optional

import pytest

from assistant import CoverLetterAssistant
from data_models import ATSReport, CandidateContact, JobPosting
from errors import FileProcessingError

JOB_DESCRIPTION = "Acme Corp is hiring a Data Engineer. You will report to Sam Lee."
RESUME_TEXT = "Jane Doe, jane@x.com, 555-1212, 123 Main St, linkedin.com/in/janedoe\nBuilt pipelines in Python."


class FakeClient:
    """In-memory stand-in for GeminiClient that records every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.contact = CandidateContact(
            name="Jane Doe",
            address="123 Main St",
            phone="555-1212",
            email="jane@x.com",
            linkedin="linkedin.com/in/janedoe",
        )
        self.posting = JobPosting(role="Data Engineer", company="Acme Corp", hiring_manager="Sam Lee")
        self.postings_by_text: Dict[str, JobPosting] = {}
        self.letter = "Jane Doe\n\nDear Sam Lee,\n\nI'd love to join Acme Corp."
        self.report = ATSReport(score=82.0, strengths="Strong Python", suggestions="Add metrics")
        self.optimized_body = "Professional Summary\nData engineer with pipeline experience."
        self.failures: Dict[str, Exception] = {}
        self.delays: Dict[str, Callable[..., float]] = {}

    def _record(self, name, *args):
        self.calls.append((name, args))
        delay = self.delays.get(name)
        if delay is not None:
            time.sleep(delay(*args))
        if name in self.failures:
            raise self.failures[name]

    def calls_to(self, name):
        return [args for call_name, args in self.calls if call_name == name]

    def extract_contact(self, resume_text):
        self._record("extract_contact", resume_text)
        return self.contact

    def extract_job_info(self, job_description):
        self._record("extract_job_info", job_description)
        return self.postings_by_text.get(job_description, self.posting)

    def generate_cover_letter(self, job_description, resume_text, contact, subject, hiring_manager):
        self._record("generate_cover_letter", job_description, resume_text, contact, subject, hiring_manager)
        return self.letter

    def score_against_job(self, job_description, resume_text):
        self._record("score_against_job", job_description, resume_text)
        return self.report

    def optimize_resume(self, job_description, resume_text):
        self._record("optimize_resume", job_description, resume_text)
        return self.optimized_body


class FakeExtractor:
    """Returns fixed text (or raises) instead of reading real files."""

    def __init__(self, text: str = RESUME_TEXT, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[tuple] = []

    def extract(self, file_name, data, on_progress=None):
        self.calls.append((file_name, data))
        if on_progress:
            on_progress("Reading file...")
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def failing_extractor():
    return FakeExtractor(error=FileProcessingError("Could not process the PDF. Error: broken xref"))


@pytest.fixture
def assistant(fake_client, fake_extractor):
    return CoverLetterAssistant(fake_client, fake_extractor, debounce_seconds=0.05)


@pytest.fixture
def ready_assistant(assistant, fake_client):
    """Assistant whose inputs and extractions are already complete."""
    state = assistant.state
    state.job_description = JOB_DESCRIPTION
    state.resume_text = RESUME_TEXT
    state.contact = fake_client.contact
    state.job_posting = fake_client.posting
    state.job_posting_source = JOB_DESCRIPTION
    return assistant
