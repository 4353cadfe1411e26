from __future__ import annotations

import logging

from .prompt_templates import (
    DEFAULT_PERSONA_INSTRUCTION,
    DEFAULT_TASK_TEMPLATE,
    PERSONA_STORAGE_KEY,
)
from .storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class TemplateStore:
    """
    The shared persona instruction and the read-only template defaults.

    The persona instruction is mirrored to ``store`` on every change and read
    back at startup. Storage failures are logged only; the in-memory value is
    what the session uses.
    """

    default_task_template = DEFAULT_TASK_TEMPLATE
    default_persona_instruction = DEFAULT_PERSONA_INSTRUCTION

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.persona_instruction = self._load_persona()

    def _load_persona(self) -> str:
        try:
            saved = self.store.get(PERSONA_STORAGE_KEY)
        except StorageError as e:
            logger.warning("Failed to read persona instruction from storage: %s", e)
            return self.default_persona_instruction
        return saved if saved else self.default_persona_instruction

    def set_persona_instruction(self, value: str) -> None:
        self.persona_instruction = value
        try:
            self.store.set(PERSONA_STORAGE_KEY, value)
        except StorageError as e:
            logger.warning("Failed to save persona instruction to storage: %s", e)

    def reset_persona_instruction(self) -> None:
        self.set_persona_instruction(self.default_persona_instruction)
