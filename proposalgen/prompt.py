from __future__ import annotations

from .prompt_templates import PLACEHOLDER


class PromptValidationError(ValueError):
    """Raised when the form inputs cannot be turned into a prompt."""

    message = "Invalid prompt input."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class EmptyJobDescriptionError(PromptValidationError):
    message = "Job description cannot be empty."


class EmptyTemplateError(PromptValidationError):
    message = "Prompt template cannot be empty."


class MissingPlaceholderError(PromptValidationError):
    message = f'Prompt template must include the placeholder "{PLACEHOLDER}".'


def build_prompt(template: str, job_description: str) -> str:
    """
    Insert the job description into the task template.

    Only the first placeholder is substituted; the job description is
    inserted verbatim (no trimming, no escaping).
    """
    if not job_description.strip():
        raise EmptyJobDescriptionError()
    if not template.strip():
        raise EmptyTemplateError()
    if PLACEHOLDER not in template:
        raise MissingPlaceholderError()
    return template.replace(PLACEHOLDER, job_description, 1)
