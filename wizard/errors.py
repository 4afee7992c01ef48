# wizard/errors.py
"""Error taxonomy for the goal-narrowing wizard.

Every error here is recoverable at the wizard-session level: a failed
transition leaves the session exactly as it was before the call.
"""
from __future__ import annotations


class WizardError(Exception):
    """Base class for all wizard errors."""


class WizardValidationError(WizardError):
    """Malformed caller input (bad locality code, wrong step index, unknown choice)."""


class InvalidTransition(WizardValidationError):
    """The operation is not legal in the wizard's current state."""

    def __init__(self, operation: str, state: str) -> None:
        super().__init__(f"{operation} is not allowed in state '{state}'")
        self.operation = operation
        self.state = state


class ServiceError(WizardError):
    """The generative text service was unreachable or returned no text."""


class ExtractionError(WizardError):
    """Model output could not be turned into the expected structure."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class MalformedOutput(ExtractionError):
    """The candidate text is not valid JSON."""


class UnexpectedShape(ExtractionError):
    """The JSON parsed but does not match the expected schema."""


class ConfigurationError(WizardError):
    """Deployment problem (missing API key, missing template row)."""


class TemplateMissing(ConfigurationError):
    def __init__(self, function_id: str) -> None:
        super().__init__(f"No prompt template found for function_id '{function_id}'")
        self.function_id = function_id


class ExecutionFailed(WizardError):
    """The execution simulator raised; the wizard stays finalized."""
