"""
HTML rendering of the assistant session (form, result cards, ATS report).
"""

from __future__ import annotations

import json
from html import escape

from data_models import ActiveAction, ATSReport, GeneratedArtifact, SessionState

BAND_COLORS = {
    "strong": "#3f8f5a",
    "fair": "#c9a03a",
    "weak": "#b5483f",
}

UPLOAD_HINT = "PDF, TXT, or MD files supported"
PENDING_EDIT_MESSAGE = "Your job description edit will be saved when the current request finishes."


def _disabled(flag: bool) -> str:
    return " disabled" if flag else ""


def _hidden(flag: bool) -> str:
    return " hidden" if flag else ""


def _indicator(element_id: str, active: bool, text: str) -> str:
    """Progress text that the page script shows and hides while polling."""
    return f'<span id="{element_id}" class="extracting"{_hidden(not active)}>{escape(text)}</span>'


def render_result_card(artifact: GeneratedArtifact, card_id: str) -> str:
    """Result panel with a copy-to-clipboard button for the exact text shown."""
    return f"""
    <section class="card">
        <h2>{escape(artifact.title)}</h2>
        <button type="button" class="copy" data-target="{card_id}">Copy</button>
        <pre id="{card_id}">{escape(artifact.content)}</pre>
    </section>"""


def render_ats_card(report: ATSReport) -> str:
    color = BAND_COLORS[report.score_band()]
    return f"""
    <section class="card">
        <h2>ATS Analysis Report</h2>
        <div class="ats">
            <div class="score" style="border-color: {color}; color: {color};">
                <span class="value">{report.score:.0f}</span><span class="of">/100</span>
                <p>Overall Match</p>
            </div>
            <div class="analysis">
                <h3>Strengths</h3>
                <p>{escape(report.strengths)}</p>
                <h3>Suggestions for Improvement</h3>
                <p>{escape(report.suggestions)}</p>
            </div>
        </div>
    </section>"""


def _action_label(state: SessionState, action: ActiveAction, idle: str, running: str, done: str, finished: bool) -> str:
    if state.active_action == action:
        return running
    return done if finished else idle


def render_page(state: SessionState, can_generate: bool, can_analyze: bool, can_optimize: bool) -> str:
    """
    Render the full single-page UI for the current session state.

    Args:
        state: Current session state.
        can_generate: Whether the generate button is enabled.
        can_analyze: Whether the ATS button is enabled.
        can_optimize: Whether the optimize button is enabled.

    Returns:
        HTML document as a string.
    """
    inputs_locked = state.active_action is not None or state.processing_file

    if state.processing_file:
        upload_status = f'<p id="upload-status" class="processing">{escape(state.processing_message or "Processing...")}</p>'
    elif state.file_name:
        upload_status = f'<p id="upload-status" class="file-name">{escape(state.file_name)}</p>'
    else:
        upload_status = f'<p id="upload-status" class="hint">{UPLOAD_HINT}</p>'

    generate_label = "Generating..." if state.active_action == ActiveAction.COVER_LETTER else "Generate Cover Letter"

    error_block = (
        f'<div id="error-banner" class="error" role="alert"{_hidden(not state.error)}>'
        f'<strong>Error</strong><p id="error-text">{escape(state.error or "")}</p></div>'
    )

    results = []
    if state.cover_letter is not None:
        results.append(render_result_card(state.cover_letter, "cover-letter"))
        ats_label = _action_label(
            state, ActiveAction.ATS, "Analyze CV with ATS", "Analyzing...", "Analysis Complete",
            state.ats_report is not None,
        )
        cv_label = _action_label(
            state, ActiveAction.CV, "Optimize CV for this Role", "Optimizing...", "CV Optimized",
            state.optimized_resume is not None,
        )
        results.append(f"""
    <section class="card next-steps">
        <h3>Next Steps</h3>
        <p class="hint">Take your application to the next level.</p>
        <button type="button" data-action="/api/ats"{_disabled(not can_analyze)}>{ats_label}</button>
        <button type="button" data-action="/api/optimize"{_disabled(not can_optimize)}>{cv_label}</button>
    </section>""")
    if state.ats_report is not None:
        results.append(render_ats_card(state.ats_report))
    if state.optimized_resume is not None:
        results.append(render_result_card(state.optimized_resume, "optimized-cv"))

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>AI Cover Letter Generator</title>
    <style>
        body {{
            font-family: Arial, sans-serif;
            margin: 2rem auto;
            max-width: 56rem;
            background-color: #f7f1ec;
            color: #333;
        }}
        h1 {{
            color: #677472;
            margin-bottom: 0.25rem;
        }}
        .card, fieldset {{
            background-color: white;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            border: 1px solid #e0e0e0;
            border-radius: 6px;
            padding: 1rem 1.5rem;
            margin-top: 1.5rem;
            position: relative;
        }}
        textarea {{
            width: 100%;
            min-height: 12rem;
            border: 2px solid #91a29e;
            border-radius: 4px;
            padding: 0.75rem;
            box-sizing: border-box;
        }}
        button {{
            background-image: linear-gradient(to right, #677472, #91a29e);
            color: white;
            border: none;
            border-radius: 4px;
            padding: 0.75rem 1.25rem;
            font-weight: bold;
            cursor: pointer;
        }}
        button:disabled {{
            background: #c8c8c8;
            cursor: not-allowed;
        }}
        .copy {{
            position: absolute;
            top: 1rem;
            right: 1rem;
            padding: 0.4rem 0.8rem;
        }}
        pre {{
            white-space: pre-wrap;
            background-color: #f7f1ec;
            padding: 1rem;
            border-radius: 4px;
        }}
        .extracting, .processing {{
            color: #677472;
            font-size: 0.85rem;
            margin-left: 1rem;
        }}
        .file-name {{
            color: #3f8f5a;
            font-weight: 500;
        }}
        .hint {{
            color: #677472;
        }}
        .error {{
            background-color: rgba(181, 72, 63, 0.1);
            border: 1px solid #b5483f;
            color: #b5483f;
            padding: 1rem;
            border-radius: 6px;
            margin-top: 1.5rem;
        }}
        .ats {{
            display: flex;
            gap: 2rem;
        }}
        .score {{
            border: 6px solid;
            border-radius: 50%;
            width: 8rem;
            height: 8rem;
            text-align: center;
            padding-top: 2rem;
            box-sizing: border-box;
        }}
        .score .value {{
            font-size: 2rem;
            font-weight: bold;
        }}
    </style>
</head>
<body>
    <h1>AI Cover Letter Generator</h1>
    <p class="hint">Craft the perfect cover letter in seconds.</p>

    <fieldset>
        <legend>1. Job Description {_indicator("job-status", state.extracting_job_info, "Extracting role & company...")}</legend>
        <textarea id="job-description" placeholder="Paste the full job description here..."{_disabled(inputs_locked)}>{escape(state.job_description)}</textarea>
    </fieldset>

    <fieldset>
        <legend>2. Your CV {_indicator("contact-status", state.extracting_contact, "Extracting contact info...")}</legend>
        <input id="cv-upload" type="file" accept=".txt,.md,text/plain,.pdf"{_disabled(inputs_locked)}>
        {upload_status}
    </fieldset>

    <p><button type="button" id="generate" data-action="/api/cover-letter"{_disabled(not can_generate)}>{generate_label}</button></p>

    {error_block}
    {''.join(results)}

    <script>
        const pendingEditMessage = {json.dumps(PENDING_EDIT_MESSAGE)};
        const uploadHint = {json.dumps(UPLOAD_HINT)};
        const jobDescription = document.getElementById('job-description');
        const upload = document.getElementById('cv-upload');
        let timer = null;
        let unsentText = null;
        let requestInFlight = false;

        const setLocked = (locked) => {{
            jobDescription.disabled = locked;
            upload.disabled = locked;
        }};
        const showError = (message) => {{
            document.getElementById('error-text').textContent = message || '';
            document.getElementById('error-banner').hidden = !message;
        }};
        const putJobDescription = (text) => fetch('/api/job-description', {{
            method: 'PUT',
            headers: {{'Content-Type': 'application/json'}},
            body: JSON.stringify({{text}}),
        }});
        const sendJobDescription = (text) => {{
            putJobDescription(text).then((response) => {{
                if (response.status === 409) {{
                    showError(pendingEditMessage);
                }} else if (unsentText === text) {{
                    unsentText = null;
                }}
            }});
        }};
        const refresh = () => {{
            // Flush an edit refused while the request ran before reloading
            if (unsentText === null) {{
                window.location.reload();
                return;
            }}
            putJobDescription(unsentText).finally(() => window.location.reload());
        }};
        const startRequest = () => {{
            requestInFlight = true;
            setLocked(true);
        }};

        jobDescription.addEventListener('input', (event) => {{
            clearTimeout(timer);
            const text = event.target.value;
            unsentText = text;
            timer = setTimeout(() => {{
                timer = null;
                sendJobDescription(text);
            }}, 100);
        }});
        upload.addEventListener('change', (event) => {{
            const file = event.target.files[0];
            if (!file) return;
            const form = new FormData();
            form.append('file', file);
            startRequest();
            fetch('/api/resume', {{method: 'POST', body: form}}).then(refresh);
        }});
        document.querySelectorAll('button[data-action]').forEach((button) => {{
            button.addEventListener('click', () => {{
                button.disabled = true;
                startRequest();
                fetch(button.dataset.action, {{method: 'POST'}}).then(refresh);
            }});
        }});
        document.querySelectorAll('button.copy').forEach((button) => {{
            button.addEventListener('click', () => {{
                const text = document.getElementById(button.dataset.target).textContent;
                navigator.clipboard.writeText(text).then(() => {{
                    button.textContent = 'Copied';
                    setTimeout(() => {{ button.textContent = 'Copy'; }}, 2000);
                }});
            }});
        }});

        const renderStatus = (data) => {{
            const busy = requestInFlight || data.processing_file || data.active_action !== null;
            setLocked(busy);
            document.getElementById('generate').disabled = !data.can_generate;
            document.getElementById('job-status').hidden = !data.extracting_job_info;
            document.getElementById('contact-status').hidden = !data.extracting_contact;

            const status = document.getElementById('upload-status');
            if (data.processing_file) {{
                status.className = 'processing';
                status.textContent = data.processing_message || 'Processing...';
            }} else if (data.file_name) {{
                status.className = 'file-name';
                status.textContent = data.file_name;
            }} else {{
                status.className = 'hint';
                status.textContent = uploadHint;
            }}

            if (unsentText !== null && !busy && timer === null) {{
                sendJobDescription(unsentText);
            }}
            showError(data.error || (unsentText !== null && busy ? pendingEditMessage : ''));
        }};
        setInterval(() => {{
            fetch('/api/state').then((r) => r.json()).then(renderStatus);
        }}, 1000);
    </script>
</body>
</html>"""
