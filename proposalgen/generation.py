from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from .prompt_templates import DEFAULT_MODEL

logger = logging.getLogger(__name__)

# substrings providers use when a key is rejected
_CREDENTIAL_MARKERS = (
    "API_KEY_INVALID",
    "permission",
    "API key not valid",
    "invalid_api_key",
    "Incorrect API key",
)

CONFIG_HINT = "Ensure your API key is correctly configured."


# -------- Errors --------
class GenerationError(Exception):
    """Base class for failures talking to the generation endpoint."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        return f"Failed to generate proposal: {self.message}. {CONFIG_HINT}"


class InvalidCredentialError(GenerationError):
    def __init__(self, detail: str):
        super().__init__(f"API Key error: {detail}. Please check your API key configuration")
        self.detail = detail


class EmptyResponseError(GenerationError):
    def __init__(self):
        super().__init__(
            "The API returned no text. The content might have been blocked or an issue occurred"
        )


class RequestFailedError(GenerationError):
    def __init__(self, detail: str):
        super().__init__(f"API request failed: {detail}")
        self.detail = detail


class UnknownGenerationError(GenerationError):
    def __init__(self):
        super().__init__("An unknown error occurred while communicating with the API")

    @property
    def user_message(self) -> str:
        return "An unknown error occurred while generating the proposal."


@dataclass
class GenerationRequest:
    final_prompt: str
    persona_instruction: Optional[str] = None

    def messages(self) -> list[dict[str, str]]:
        msgs = []
        if self.persona_instruction and self.persona_instruction.strip():
            msgs.append({"role": "system", "content": self.persona_instruction})
        msgs.append({"role": "user", "content": self.final_prompt})
        return msgs


def classify_error(exc: BaseException) -> GenerationError:
    """Map an exception raised by the SDK onto the generation error taxonomy."""
    if isinstance(exc, GenerationError):
        return exc
    detail = str(exc).strip()
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return InvalidCredentialError(detail or type(exc).__name__)
    if not detail:
        return UnknownGenerationError()
    if any(marker in detail for marker in _CREDENTIAL_MARKERS):
        return InvalidCredentialError(detail)
    return RequestFailedError(detail)


class GenerationClient:
    """
    Thin async wrapper over the chat completions endpoint.

    One attempt per call: SDK retries are disabled and no timeout is added
    on top of the provider's own. Callers are responsible for not
    overlapping submissions.
    """

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, client: Any = None):
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key, max_retries=0)

    async def generate(self, prompt: str, persona_instruction: Optional[str] = None) -> str:
        request = GenerationRequest(final_prompt=prompt, persona_instruction=persona_instruction)
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=request.messages(),
            )
        except Exception as e:
            error = classify_error(e)
            logger.error("generation request failed: %s", error.message)
            raise error from e

        text = None
        if resp.choices:
            text = resp.choices[0].message.content
        if not text:
            logger.error("generation endpoint returned no text: %r", resp)
            raise EmptyResponseError()
        return text
