import asyncio

import httpx
import openai
import pytest

from proposalgen.generation import (
    EmptyResponseError,
    InvalidCredentialError,
    RequestFailedError,
    UnknownGenerationError,
    classify_error,
)
from tests.conftest import FakeCompletions, make_client


def _status_error(cls, status, message="Incorrect API key provided"):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return cls(message, response=response, body=None)


def test_returns_text_and_sends_persona_as_system_message():
    completions = FakeCompletions(text="hello")
    client = make_client(completions)

    assert asyncio.run(client.generate("the prompt", "be formal")) == "hello"

    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"] == [
        {"role": "system", "content": "be formal"},
        {"role": "user", "content": "the prompt"},
    ]


@pytest.mark.parametrize("persona", [None, "", "   "])
def test_blank_persona_is_not_sent(persona):
    completions = FakeCompletions(text="hello")
    asyncio.run(make_client(completions).generate("the prompt", persona))
    assert completions.calls[0]["messages"] == [{"role": "user", "content": "the prompt"}]


@pytest.mark.parametrize("text", [None, ""])
def test_empty_response(text):
    client = make_client(FakeCompletions(text=text))
    with pytest.raises(EmptyResponseError):
        asyncio.run(client.generate("p"))


def test_single_attempt_on_failure():
    completions = FakeCompletions(error=RuntimeError("boom"))
    with pytest.raises(RequestFailedError) as exc:
        asyncio.run(make_client(completions).generate("p"))
    assert len(completions.calls) == 1
    assert exc.value.detail == "boom"


def test_permission_message_is_credential_error():
    completions = FakeCompletions(error=RuntimeError("caller does not have permission"))
    with pytest.raises(InvalidCredentialError) as exc:
        asyncio.run(make_client(completions).generate("p"))
    assert "check your API key" in exc.value.user_message


@pytest.mark.parametrize("cls,status", [
    (openai.AuthenticationError, 401),
    (openai.PermissionDeniedError, 403),
])
def test_sdk_auth_errors_are_credential_errors(cls, status):
    assert isinstance(classify_error(_status_error(cls, status)), InvalidCredentialError)


def test_other_sdk_errors_are_request_failures():
    err = classify_error(_status_error(openai.InternalServerError, 500, "server overloaded"))
    assert isinstance(err, RequestFailedError)


def test_messageless_error_is_unknown():
    err = classify_error(RuntimeError())
    assert isinstance(err, UnknownGenerationError)
    assert err.user_message == "An unknown error occurred while generating the proposal."


def test_user_message_carries_config_hint():
    err = RequestFailedError("timeout")
    assert err.user_message == (
        "Failed to generate proposal: API request failed: timeout. "
        "Ensure your API key is correctly configured."
    )
