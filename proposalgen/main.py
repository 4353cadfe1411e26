from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import List, Optional, Tuple

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from .config import Settings, load_settings
from .controller import ProposalController
from .generation import GenerationClient, GenerationError, InvalidCredentialError
from .markdown import render, render_html
from .prompt import PromptValidationError, build_prompt
from .prompt_templates import PLACEHOLDER
from .storage import KeyValueStore
from .template_store import TemplateStore

# -------------------------------------------------
# Setup
# -------------------------------------------------

logger = logging.getLogger("uvicorn.error")

SESSION_COOKIE = "proposalgen_session"
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


# -------------------------------------------------
# Schemas
# -------------------------------------------------

class GenerateIn(BaseModel):
    job_description: str
    task_template: Optional[str] = None
    persona_instruction: Optional[str] = None


class BlockOut(BaseModel):
    kind: str
    level: Optional[int] = None
    text: Optional[str] = None


class GenerateOut(BaseModel):
    text: str
    blocks: List[BlockOut]


class PersonaIn(BaseModel):
    persona_instruction: str


class TemplatesOut(BaseModel):
    placeholder: str
    persona_instruction: str
    default_task_template: str
    default_persona_instruction: str


def _normalize_newlines(value: Optional[str]) -> Optional[str]:
    # browsers submit textareas with CRLF line endings
    if value is None:
        return None
    return value.replace("\r\n", "\n")


def _block_out(block) -> BlockOut:
    return BlockOut(
        kind=block.kind,
        level=getattr(block, "level", None),
        text=getattr(block, "text", None),
    )


# -------------------------------------------------
# App
# -------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    client: Optional[GenerationClient] = None,
    store: Optional[KeyValueStore] = None,
) -> FastAPI:
    """
    Build the application.

    Settings are loaded here so a missing OPENAI_API_KEY stops the server
    before it accepts any request.
    """
    settings = settings or load_settings()
    client = client or GenerationClient(api_key=settings.openai_api_key, model=settings.model)
    template_store = TemplateStore(store if store is not None else settings.make_store())
    sessions: OrderedDict[str, ProposalController] = OrderedDict()

    app = FastAPI(title="Proposal Generator", version="0.1.0")
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.settings = settings
    app.state.templates = template_store
    app.state.sessions = sessions

    def lookup_session(request: Request) -> Optional[Tuple[str, ProposalController]]:
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or sid not in sessions:
            return None
        sessions.move_to_end(sid)
        return sid, sessions[sid]

    def open_session() -> Tuple[str, ProposalController]:
        sid = uuid.uuid4().hex
        sessions[sid] = ProposalController(template_store, client)
        # least recently used sessions go first
        while len(sessions) > settings.max_sessions:
            _, evicted = sessions.popitem(last=False)
            evicted.close()
        return sid, sessions[sid]

    def page(
        request: Request, controller: ProposalController, sid: Optional[str] = None
    ) -> HTMLResponse:
        response = templates.TemplateResponse(
            request,
            "index.html",
            {
                "state": controller.state,
                "persona_instruction": template_store.persona_instruction,
                "placeholder": PLACEHOLDER,
                "result_html": render_html(controller.blocks),
            },
        )
        if sid is not None:
            response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="lax")
        return response

    # -------------------------------------------------
    # Form routes
    # -------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        found = lookup_session(request)
        if found is None:
            # a blank form needs no server-side session until it is submitted
            return page(request, ProposalController(template_store, client))
        sid, controller = found
        return page(request, controller, sid)

    @app.post("/", response_class=HTMLResponse)
    async def submit(
        request: Request,
        job_description: Optional[str] = Form(None),
        task_template: Optional[str] = Form(None),
        persona_instruction: Optional[str] = Form(None),
    ):
        sid, controller = lookup_session(request) or open_session()
        persona_instruction = _normalize_newlines(persona_instruction)
        task_template = _normalize_newlines(task_template)
        job_description = _normalize_newlines(job_description)

        if persona_instruction is not None and persona_instruction != template_store.persona_instruction:
            controller.edit_persona_instruction(persona_instruction)
        if task_template is not None and task_template != controller.state.task_template:
            controller.edit_task_template(task_template)
        if job_description is not None and job_description != controller.state.job_description:
            controller.edit_job_description(job_description)
        await controller.submit()
        return page(request, controller, sid)

    @app.post("/reset", response_class=HTMLResponse)
    async def reset(request: Request):
        old = sessions.pop(request.cookies.get(SESSION_COOKIE, ""), None)
        if old is not None:
            old.close()
        sid, controller = open_session()
        return page(request, controller, sid)

    # -------------------------------------------------
    # JSON routes
    # -------------------------------------------------

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    @app.get("/api/templates", response_model=TemplatesOut)
    async def get_templates():
        return TemplatesOut(
            placeholder=PLACEHOLDER,
            persona_instruction=template_store.persona_instruction,
            default_task_template=template_store.default_task_template,
            default_persona_instruction=template_store.default_persona_instruction,
        )

    @app.put("/api/persona", response_model=TemplatesOut)
    async def put_persona(data: PersonaIn):
        template_store.set_persona_instruction(data.persona_instruction)
        return await get_templates()

    @app.delete("/api/persona", response_model=TemplatesOut)
    async def delete_persona():
        template_store.reset_persona_instruction()
        return await get_templates()

    @app.post("/api/generate", response_model=GenerateOut)
    async def generate(data: GenerateIn):
        """
        Generate a proposal without touching any session state.

        An omitted task template falls back to the default one and an
        omitted persona to the stored one.
        """
        template = (
            data.task_template
            if data.task_template is not None
            else template_store.default_task_template
        )
        persona = (
            data.persona_instruction
            if data.persona_instruction is not None
            else template_store.persona_instruction
        )
        try:
            prompt = build_prompt(template, data.job_description)
        except PromptValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            text = await client.generate(prompt, persona.strip() or None)
        except InvalidCredentialError as e:
            raise HTTPException(status_code=401, detail=e.user_message)
        except GenerationError as e:
            raise HTTPException(status_code=502, detail=e.user_message)
        except Exception as e:
            logger.exception("generate() failed")
            raise HTTPException(status_code=500, detail=f"{type(e).__name__}: {e}")

        return GenerateOut(text=text, blocks=[_block_out(b) for b in render(text)])

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="127.0.0.1", port=8000)
