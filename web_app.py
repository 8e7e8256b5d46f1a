"""
FastAPI application exposing the assistant page and its JSON endpoints.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, File, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from assistant import CoverLetterAssistant
from reporting import render_page

LOGGER = logging.getLogger(__name__)


class JobDescriptionIn(BaseModel):
    text: str


def _state_payload(assistant: CoverLetterAssistant) -> Dict[str, Any]:
    payload = assistant.state.to_dict()
    payload["can_generate"] = assistant.can_generate()
    payload["can_analyze"] = assistant.can_analyze()
    payload["can_optimize"] = assistant.can_optimize()
    return payload


def _respond(assistant: CoverLetterAssistant, accepted: bool) -> JSONResponse:
    if not accepted:
        LOGGER.info("Request refused in state %s", assistant.state.app_state.value)
    return JSONResponse(_state_payload(assistant), status_code=200 if accepted else 409)


def create_app(assistant: CoverLetterAssistant) -> FastAPI:
    """
    Build the web application around an existing assistant.

    Args:
        assistant: Controller owning the session state; its lifecycle belongs to the caller.

    Returns:
        Configured FastAPI application.
    """
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await assistant.drain()

    app = FastAPI(title="AI Cover Letter Generator", lifespan=lifespan)

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return render_page(
            assistant.state,
            can_generate=assistant.can_generate(),
            can_analyze=assistant.can_analyze(),
            can_optimize=assistant.can_optimize(),
        )

    @app.get("/api/state")
    async def get_state():
        return _state_payload(assistant)

    @app.put("/api/job-description")
    async def put_job_description(body: JobDescriptionIn):
        return _respond(assistant, assistant.set_job_description(body.text))

    @app.post("/api/resume")
    async def upload_resume(file: UploadFile = File(...)):
        contents = await file.read()
        return _respond(assistant, await assistant.load_resume(file.filename or "", contents))

    @app.post("/api/cover-letter")
    async def cover_letter():
        return _respond(assistant, await assistant.generate_cover_letter())

    @app.post("/api/ats")
    async def ats():
        return _respond(assistant, await assistant.analyze_ats())

    @app.post("/api/optimize")
    async def optimize():
        return _respond(assistant, await assistant.optimize_resume())

    return app
