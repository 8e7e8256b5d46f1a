"""
Shared data models used across the application.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

COVER_LETTER_TITLE = "Your Generated Cover Letter"
OPTIMIZED_CV_TITLE = "Optimized CV"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value).strip()


@dataclass(frozen=True)
class CandidateContact:
    """Contact details extracted from the uploaded resume."""

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    linkedin: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CandidateContact":
        """Build a contact from an LLM payload; missing or null fields become ''."""
        return cls(
            name=_as_text(payload.get("name")),
            address=_as_text(payload.get("address")),
            phone=_as_text(payload.get("phone")),
            email=_as_text(payload.get("email")),
            linkedin=_as_text(payload.get("linkedin")),
        )

    def header_lines(self) -> List[str]:
        contact_line = f"{self.phone} | {self.email}" if (self.phone or self.email) else ""
        lines = [self.name, self.address, contact_line, self.linkedin]
        return [line for line in lines if line]

    def header(self) -> str:
        """Contact block placed on top of the optimized CV."""
        return "\n".join(self.header_lines())


@dataclass(frozen=True)
class JobPosting:
    """Role metadata extracted from the job description."""

    role: str = ""
    company: str = ""
    hiring_manager: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "JobPosting":
        return cls(
            role=_as_text(payload.get("role")),
            company=_as_text(payload.get("company")),
            hiring_manager=_as_text(payload.get("hiring_manager")),
        )

    def subject_line(self) -> str:
        return f"Application for {self.role} at {self.company}"


@dataclass(frozen=True)
class ATSReport:
    """Simulated applicant tracking system evaluation."""

    score: float
    strengths: str
    suggestions: str

    def score_band(self) -> str:
        """
        Classify the score for display.

        Returns:
            "strong" for 85 and above, "fair" for 60 and above, else "weak".
        """
        if self.score >= 85:
            return "strong"
        if self.score >= 60:
            return "fair"
        return "weak"


@dataclass(frozen=True)
class GeneratedArtifact:
    """Text produced by the LLM together with its display title."""

    title: str
    content: str


class AppState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ActiveAction(str, Enum):
    COVER_LETTER = "cover-letter"
    ATS = "ats"
    CV = "cv"


@dataclass
class SessionState:
    """In-memory state of a single assistant session."""

    job_description: str = ""
    resume_text: str = ""
    file_name: str = ""
    contact: Optional[CandidateContact] = None
    job_posting: Optional[JobPosting] = None
    # Job description text the current job_posting was extracted from
    job_posting_source: str = ""
    cover_letter: Optional[GeneratedArtifact] = None
    ats_report: Optional[ATSReport] = None
    optimized_resume: Optional[GeneratedArtifact] = None
    app_state: AppState = AppState.IDLE
    active_action: Optional[ActiveAction] = None
    error: Optional[str] = None
    processing_file: bool = False
    processing_message: str = ""
    extracting_contact: bool = False
    extracting_job_info: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view of the session."""
        data = asdict(self)
        data["app_state"] = self.app_state.value
        data["active_action"] = self.active_action.value if self.active_action else None
        if self.ats_report is not None:
            data["ats_report"]["band"] = self.ats_report.score_band()
        return data
