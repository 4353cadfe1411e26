from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from .prompt_templates import DEFAULT_MODEL
from .storage import JsonFileStore, KeyValueStore, MemoryStore


class ConfigError(RuntimeError):
    pass


@dataclass
class Settings:
    openai_api_key: str
    model: str = DEFAULT_MODEL
    store_path: Optional[str] = ".proposalgen/store.json"
    allowed_origins: List[str] = field(default_factory=list)
    max_sessions: int = 256

    def make_store(self) -> KeyValueStore:
        if not self.store_path:
            return MemoryStore()
        return JsonFileStore(self.store_path)


def load_settings() -> Settings:
    """
    Read settings from the environment (and a local .env, if present).

    OPENAI_API_KEY is required: without it the app refuses to start.
    """
    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("OPENAI_API_KEY environment variable is not set.")

    origins = os.getenv("PROPOSALGEN_ALLOWED_ORIGINS", "")
    return Settings(
        openai_api_key=api_key,
        model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
        store_path=os.getenv("PROPOSALGEN_STORE_PATH", ".proposalgen/store.json"),
        allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
        max_sessions=int(os.getenv("PROPOSALGEN_MAX_SESSIONS", "256")),
    )
