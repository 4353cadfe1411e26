from types import SimpleNamespace

import pytest

from proposalgen.config import Settings
from proposalgen.generation import GenerationClient
from proposalgen.storage import MemoryStore


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``."""

    def __init__(self, text="## Intro\nHello", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_client(completions):
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return GenerationClient(api_key="sk-test", model="test-model", client=fake)


@pytest.fixture
def completions():
    return FakeCompletions()


@pytest.fixture
def client(completions):
    return make_client(completions)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def settings():
    return Settings(openai_api_key="sk-test", model="test-model", store_path="")
