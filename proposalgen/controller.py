from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from .generation import GenerationClient, GenerationError, UnknownGenerationError
from .markdown import Block, render
from .prompt import PromptValidationError, build_prompt
from .prompt_templates import DEFAULT_TASK_TEMPLATE
from .template_store import TemplateStore

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ViewState:
    phase: Phase = Phase.IDLE
    job_description: str = ""
    task_template: str = DEFAULT_TASK_TEMPLATE
    error: Optional[str] = None
    result: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.phase is Phase.SUBMITTING

    @property
    def can_submit(self) -> bool:
        return not self.loading and bool(self.job_description.strip())


class ProposalController:
    """
    Drives one form session.

    Idle -> Submitting -> Succeeded | Failed -> Idle. Validation failures
    stay in Idle with an error set and never reach the client.
    """

    def __init__(self, templates: TemplateStore, client: GenerationClient):
        self.templates = templates
        self.client = client
        self.state = ViewState()
        self.closed = False

    # -------- Edits --------
    def _after_edit(self) -> None:
        self.state.error = None
        if self.state.phase in (Phase.SUCCEEDED, Phase.FAILED):
            self.state.phase = Phase.IDLE

    def edit_job_description(self, value: str) -> None:
        if self.state.loading:
            return
        self.state.job_description = value
        self._after_edit()

    def edit_task_template(self, value: str) -> None:
        if self.state.loading:
            return
        self.state.task_template = value
        self._after_edit()

    def reset_task_template(self) -> None:
        self.edit_task_template(self.templates.default_task_template)

    def edit_persona_instruction(self, value: str) -> None:
        self.templates.set_persona_instruction(value)

    # -------- Submit --------
    async def submit(self) -> None:
        if self.state.loading:
            logger.debug("submit ignored: a request is already in flight")
            return

        try:
            prompt = build_prompt(self.state.task_template, self.state.job_description)
        except PromptValidationError as e:
            self.state.error = str(e)
            self.state.result = None
            self.state.phase = Phase.IDLE
            return

        persona = self.templates.persona_instruction.strip() or None
        self.state.phase = Phase.SUBMITTING
        self.state.error = None
        self.state.result = None

        try:
            text = await self.client.generate(prompt, persona)
        except GenerationError as e:
            self._resolve(error=e.user_message)
        except Exception:
            logger.exception("Error generating proposal")
            self._resolve(error=UnknownGenerationError().user_message)
        else:
            self._resolve(result=text)

    def _resolve(self, result: Optional[str] = None, error: Optional[str] = None) -> None:
        if self.closed:
            logger.info("discarding response for a closed session")
            return
        self.state.result = result
        self.state.error = error
        self.state.phase = Phase.FAILED if error is not None else Phase.SUCCEEDED

    # -------- Output --------
    @property
    def blocks(self) -> List[Block]:
        if not self.state.result:
            return []
        return render(self.state.result)

    def copy_text(self) -> Optional[str]:
        return self.state.result

    def close(self) -> None:
        self.closed = True
