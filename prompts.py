"""
Prompt templates and JSON response schemas for every LLM task.

All builders are pure: they interpolate user text into fixed templates and
never touch the network.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from data_models import CandidateContact

GENERIC_SALUTATION = "Dear Hiring Team,"

CONTACT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING", "description": "Full name of the candidate."},
        "address": {"type": "STRING", "description": "Full mailing address, or empty string."},
        "phone": {"type": "STRING", "description": "Primary phone number, or empty string."},
        "email": {"type": "STRING", "description": "Primary email address, or empty string."},
        "linkedin": {"type": "STRING", "description": "LinkedIn profile URL, or empty string."},
    },
    "required": ["name", "address", "phone", "email", "linkedin"],
}

JOB_INFO_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "role": {"type": "STRING", "description": "The job title."},
        "company": {"type": "STRING", "description": "The hiring company."},
        "hiring_manager": {"type": "STRING", "description": "Hiring manager name, or empty string."},
    },
    "required": ["role", "company", "hiring_manager"],
}

ATS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "score": {"type": "NUMBER", "description": "ATS match score from 0 to 100."},
        "strengths": {"type": "STRING", "description": "Short summary of the CV's strengths."},
        "suggestions": {"type": "STRING", "description": "Actionable suggestions for improvement."},
    },
    "required": ["score", "strengths", "suggestions"],
}


def format_letter_date(day: date) -> str:
    """Format a date the way it appears on a US letter, e.g. 'October 18, 2026'."""
    return f"{day:%B} {day.day}, {day.year}"


def salutation_for(hiring_manager: str) -> str:
    name = (hiring_manager or "").strip()
    return f"Dear {name}," if name else GENERIC_SALUTATION


def build_contact_prompt(resume_text: str) -> str:
    return f"""You are a precise resume parser. Read the CV text below and extract the candidate's contact information.

Fields:
- name: the candidate's full name.
- address: the full mailing address.
- phone: the primary phone number.
- email: the primary email address.
- linkedin: the full LinkedIn profile URL.

Every field must be present in the JSON. If a value cannot be found, use an empty string.
Never return null and never omit a field. Copy values exactly as written in the CV.

--- RESUME TEXT ---
{resume_text}
--- END OF RESUME TEXT ---

Respond with ONLY the JSON."""


def build_job_info_prompt(job_description: str) -> str:
    return f"""You are a precise job posting parser. Read the job description below and extract:

- role: the specific job title being advertised (e.g. "Senior Product Manager").
- company: the name of the hiring company.
- hiring_manager: the name of the hiring manager or contact person, if one is mentioned.
  Look for phrases like "reports to [Name]" or "contact [Name]".

Every field must be present in the JSON. If a value cannot be found, use an empty string.
Never return null and never omit a field.

--- JOB DESCRIPTION ---
{job_description}
--- END OF JOB DESCRIPTION ---

Respond with ONLY the JSON."""


def build_cover_letter_prompt(
    job_description: str,
    resume_text: str,
    contact: CandidateContact,
    subject: str,
    hiring_manager: str,
    today: Optional[date] = None,
) -> str:
    """
    Build the cover letter prompt.

    Args:
        job_description: Job description pasted by the user.
        resume_text: Text extracted from the uploaded CV.
        contact: Contact details used for the letter header.
        subject: Subject line, usually "Application for <role> at <company>".
        hiring_manager: Hiring manager name or empty string.
        today: Date printed on the letter; defaults to the current date.

    Returns:
        Prompt string.
    """
    letter_date = format_letter_date(today or date.today())
    if (hiring_manager or "").strip():
        salutation_rule = (
            f'The hiring manager is "{hiring_manager.strip()}". '
            f'Open the letter with "{salutation_for(hiring_manager)}".'
        )
    else:
        salutation_rule = (
            "The hiring manager is unknown. Open the letter with a professional generic "
            f'greeting such as "{GENERIC_SALUTATION}".'
        )

    return f"""You are an experienced career coach and professional writer. Write a cover letter that is polished,
confident and personable, so the hiring manager feels they are already meeting a future colleague.

LETTER LAYOUT - FOLLOW EXACTLY:

1. Header with the candidate's contact details:
   {contact.name}
   {contact.address}
   {contact.phone} | {contact.email}
   {contact.linkedin}
2. Date after the header: {letter_date}
3. Subject line: "Subject: {subject}"
4. Salutation: {salutation_rule}

TONE:
- First person ("I", "my"), enthusiastic but professional and authentic.
- Clear, direct language. Contractions are fine where they sound natural.
- Vary sentence structure and keep transitions smooth.

CONTENT:
- Connect specific achievements from the CV to the needs in the job description instead of listing them.
- Opening: name the role from the subject line and show genuine interest in the company.
- Body (2-3 paragraphs): one key requirement per paragraph, backed by concrete, quantified examples from the CV.
- Closing: restate interest and ask for an interview.
- Do not restate the CV line by line and avoid cliches such as "hardworking team player".

The output must start with the candidate's name. Write ONLY the cover letter, no additional commentary.

--- JOB DESCRIPTION ---
{job_description}
--- END OF JOB DESCRIPTION ---

--- CANDIDATE CV ---
{resume_text}
--- END OF CANDIDATE CV ---"""


def build_ats_prompt(job_description: str, resume_text: str) -> str:
    return f"""Act as an applicant tracking system (ATS). Compare the CV with the job description and
return a JSON with fields:
- score: a number from 0 to 100 for how well the CV matches the required skills, experience and keywords.
- strengths: the top 2-3 strengths of the CV for this job, in a few short sentences.
- suggestions: the 2-3 most important, actionable changes that would make the CV fit this job better.

Keep the analysis concise and actionable.

--- JOB DESCRIPTION ---
{job_description}
--- END OF JOB DESCRIPTION ---

--- CANDIDATE CV ---
{resume_text}
--- END OF CANDIDATE CV ---

Respond with ONLY the JSON."""


def build_optimize_prompt(job_description: str, resume_text: str) -> str:
    return f"""You are an expert resume writer. Rewrite the BODY of the CV below so it lines up with the job description.

INSTRUCTIONS:
1. Mirror the job description: surface the skills, technologies and responsibilities it asks for.
2. Work relevant keywords naturally into the summary, experience and skills sections.
3. Quantify achievements where possible. If the CV has no numbers, suggest realistic metrics the candidate can verify.
4. Start bullet points with strong action verbs (Led, Built, Reduced, Delivered).
5. Open with a short professional summary aimed at the core requirements of the role.

STRICT RULES:
- Start DIRECTLY with the professional summary.
- Do NOT include a header with personal contact details (name, address, phone, email, LinkedIn).
  The header is added separately.
- Do not invent experience; rephrase and reframe what is already there.

--- JOB DESCRIPTION ---
{job_description}
--- END OF JOB DESCRIPTION ---

--- ORIGINAL CV ---
{resume_text}
--- END OF ORIGINAL CV ---

Write ONLY the optimized CV body."""
