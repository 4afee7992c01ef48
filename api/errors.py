# api/errors.py
from fastapi import HTTPException

from wizard.errors import (
    ConfigurationError,
    ExecutionFailed,
    ExtractionError,
    InvalidTransition,
    MalformedOutput,
    ServiceError,
    TemplateMissing,
    WizardError,
    WizardValidationError,
)


def http_error_for(exc: WizardError) -> HTTPException:
    """Map a wizard error onto the HTTP status the UI keys its retry/abandon decision on."""
    if isinstance(exc, InvalidTransition):
        return HTTPException(
            status_code=409,
            detail={"error": "invalid_transition", "message": str(exc), "state": exc.state},
        )
    if isinstance(exc, WizardValidationError):
        return HTTPException(status_code=400, detail={"error": "validation_error", "message": str(exc)})
    if isinstance(exc, ExtractionError):
        kind = "malformed_output" if isinstance(exc, MalformedOutput) else "unexpected_shape"
        return HTTPException(
            status_code=502,
            detail={"error": kind, "message": str(exc), "raw": exc.raw[:4000]},
        )
    if isinstance(exc, ServiceError):
        return HTTPException(status_code=502, detail={"error": "service_error", "message": str(exc)})
    if isinstance(exc, TemplateMissing):
        return HTTPException(
            status_code=500,
            detail={"error": "template_missing", "message": str(exc), "function_id": exc.function_id},
        )
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=500, detail={"error": "configuration_error", "message": str(exc)})
    if isinstance(exc, ExecutionFailed):
        return HTTPException(status_code=500, detail={"error": "execution_failed", "message": str(exc)})
    return HTTPException(status_code=500, detail={"error": "wizard_error", "message": str(exc)})
