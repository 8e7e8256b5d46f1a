import asyncio

import pytest

from assistant import MISSING_INPUTS_ERROR, CoverLetterAssistant, assemble_resume
from data_models import ActiveAction, AppState, ATSReport, GeneratedArtifact, JobPosting
from errors import ExtractionError, GenerationError
from llm_handler import ATS_ERROR, CONTACT_ERROR, COVER_LETTER_ERROR, JOB_INFO_ERROR

from conftest import JOB_DESCRIPTION, RESUME_TEXT


def test_load_resume_extracts_text_and_contact(assistant, fake_client, fake_extractor):
    accepted = asyncio.run(assistant.load_resume("cv.txt", b"raw bytes"))

    state = assistant.state
    assert accepted is True
    assert fake_extractor.calls == [("cv.txt", b"raw bytes")]
    assert state.file_name == "cv.txt"
    assert state.resume_text == RESUME_TEXT
    assert state.contact == fake_client.contact
    assert state.processing_file is False
    assert state.processing_message == ""
    assert state.extracting_contact is False
    assert state.error is None


def test_load_resume_clears_downstream_results(assistant):
    state = assistant.state
    state.cover_letter = GeneratedArtifact("Your Generated Cover Letter", "old letter")
    state.ats_report = ATSReport(50.0, "a", "b")
    state.optimized_resume = GeneratedArtifact("Optimized CV", "old cv")
    state.app_state = AppState.SUCCESS

    asyncio.run(assistant.load_resume("cv.md", b"# Jane"))

    assert state.cover_letter is None
    assert state.ats_report is None
    assert state.optimized_resume is None
    assert state.app_state == AppState.IDLE


def test_file_failure_halts_pipeline(fake_client, failing_extractor):
    assistant = CoverLetterAssistant(fake_client, failing_extractor)

    asyncio.run(assistant.load_resume("scan.pdf", b"%PDF-"))

    state = assistant.state
    assert state.error == "Could not process the PDF. Error: broken xref"
    assert state.app_state == AppState.ERROR
    assert state.processing_file is False
    assert fake_client.calls_to("extract_contact") == []


def test_contact_failure_keeps_resume_text(assistant, fake_client):
    fake_client.failures["extract_contact"] = ExtractionError(CONTACT_ERROR)

    asyncio.run(assistant.load_resume("cv.txt", b"text"))

    state = assistant.state
    assert state.error == CONTACT_ERROR
    assert state.resume_text == RESUME_TEXT
    assert state.contact is None
    assert state.extracting_contact is False
    assert state.app_state == AppState.IDLE


def test_upload_refused_while_action_in_flight(assistant, fake_extractor):
    assistant.state.active_action = ActiveAction.ATS

    assert asyncio.run(assistant.load_resume("cv.txt", b"x")) is False
    assert fake_extractor.calls == []


def test_job_description_edits_are_coalesced(assistant, fake_client):
    async def scenario():
        for text in ("Acme", "Acme Corp", JOB_DESCRIPTION):
            assistant.set_job_description(text)
            await asyncio.sleep(0.01)
        assert assistant.job_info_pending
        await assistant.drain()

    asyncio.run(scenario())

    assert fake_client.calls_to("extract_job_info") == [(JOB_DESCRIPTION,)]
    assert assistant.state.job_posting == fake_client.posting
    assert assistant.state.job_posting_source == JOB_DESCRIPTION
    assert assistant.state.extracting_job_info is False


def test_blank_job_description_is_not_extracted(assistant, fake_client):
    async def scenario():
        assistant.set_job_description("   ")
        await assistant.drain()

    asyncio.run(scenario())

    assert fake_client.calls_to("extract_job_info") == []


def test_job_info_failure_sets_session_error(assistant, fake_client):
    fake_client.failures["extract_job_info"] = ExtractionError(JOB_INFO_ERROR)

    asyncio.run(assistant.refresh_job_info(JOB_DESCRIPTION))

    assert assistant.state.error == JOB_INFO_ERROR
    assert assistant.state.job_posting is None
    assert assistant.state.extracting_job_info is False
    assert assistant.can_generate() is False


def test_stale_job_info_response_is_discarded(assistant, fake_client):
    fake_client.postings_by_text = {
        "old posting": JobPosting(role="Old Role", company="Old Co"),
        "new posting": JobPosting(role="New Role", company="New Co"),
    }
    fake_client.delays["extract_job_info"] = lambda text: 0.2 if text == "old posting" else 0.0

    async def scenario():
        await asyncio.gather(
            assistant.refresh_job_info("old posting"),
            assistant.refresh_job_info("new posting"),
        )

    asyncio.run(scenario())

    assert assistant.state.job_posting.role == "New Role"
    assert assistant.state.job_posting_source == "new posting"
    assert assistant.state.extracting_job_info is False


def test_can_generate_when_everything_is_ready(ready_assistant):
    assert ready_assistant.can_generate() is True


@pytest.mark.parametrize(
    "field, value",
    [
        ("active_action", ActiveAction.COVER_LETTER),
        ("processing_file", True),
        ("extracting_contact", True),
        ("extracting_job_info", True),
        ("job_description", ""),
        ("resume_text", "  "),
        ("contact", None),
        ("job_posting", None),
        ("job_posting_source", "an earlier description"),
    ],
)
def test_can_generate_blocked_by_each_condition(ready_assistant, field, value):
    setattr(ready_assistant.state, field, value)
    assert ready_assistant.can_generate() is False


def test_generate_cover_letter_success(ready_assistant, fake_client):
    state = ready_assistant.state
    state.ats_report = ATSReport(40.0, "x", "y")
    state.optimized_resume = GeneratedArtifact("Optimized CV", "stale")

    assert asyncio.run(ready_assistant.generate_cover_letter()) is True

    assert state.app_state == AppState.SUCCESS
    assert state.cover_letter.content == fake_client.letter
    assert state.cover_letter.title == "Your Generated Cover Letter"
    assert state.ats_report is None
    assert state.optimized_resume is None
    assert state.active_action is None
    (call,) = fake_client.calls_to("generate_cover_letter")
    assert call[3] == "Application for Data Engineer at Acme Corp"
    assert call[4] == "Sam Lee"


def test_generate_with_missing_inputs_reports_error(assistant, fake_client):
    assert asyncio.run(assistant.generate_cover_letter()) is False

    assert assistant.state.error == MISSING_INPUTS_ERROR
    assert assistant.state.app_state == AppState.ERROR
    assert fake_client.calls == []


def test_generate_failure_resets_action(ready_assistant, fake_client):
    fake_client.failures["generate_cover_letter"] = GenerationError(COVER_LETTER_ERROR)

    asyncio.run(ready_assistant.generate_cover_letter())

    state = ready_assistant.state
    assert state.error == COVER_LETTER_ERROR
    assert state.app_state == AppState.ERROR
    assert state.active_action is None
    assert state.cover_letter is None


def test_analyze_ats_runs_once_per_cover_letter(ready_assistant, fake_client):
    async def scenario():
        await ready_assistant.generate_cover_letter()
        first = await ready_assistant.analyze_ats()
        second = await ready_assistant.analyze_ats()
        return first, second

    first, second = asyncio.run(scenario())

    assert (first, second) == (True, False)
    assert ready_assistant.state.ats_report == fake_client.report
    assert len(fake_client.calls_to("score_against_job")) == 1


def test_analyze_ats_requires_cover_letter(ready_assistant, fake_client):
    assert asyncio.run(ready_assistant.analyze_ats()) is False
    assert fake_client.calls_to("score_against_job") == []


def test_analyze_ats_failure_allows_retry(ready_assistant, fake_client):
    fake_client.failures["score_against_job"] = GenerationError(ATS_ERROR)

    async def scenario():
        await ready_assistant.generate_cover_letter()
        await ready_assistant.analyze_ats()

    asyncio.run(scenario())

    state = ready_assistant.state
    assert state.error == ATS_ERROR
    assert state.app_state == AppState.ERROR
    assert state.active_action is None
    assert ready_assistant.can_analyze() is True


def test_optimize_resume_prefixes_contact_header(ready_assistant, fake_client):
    async def scenario():
        await ready_assistant.generate_cover_letter()
        await ready_assistant.optimize_resume()

    asyncio.run(scenario())

    expected_header = "Jane Doe\n123 Main St\n555-1212 | jane@x.com\nlinkedin.com/in/janedoe"
    optimized = ready_assistant.state.optimized_resume
    assert optimized.title == "Optimized CV"
    assert optimized.content == expected_header + "\n\n" + fake_client.optimized_body
    assert ready_assistant.can_optimize() is False


def test_assemble_resume_without_contact_returns_body():
    assert assemble_resume(None, "Body only") == "Body only"


def test_job_description_edit_refused_while_busy(assistant):
    assistant.state.processing_file = True
    assert assistant.set_job_description("new text") is False
    assert assistant.state.job_description == ""
