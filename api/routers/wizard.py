# api/routers/wizard.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.errors import http_error_for
from services.wizard_service import WizardService, get_wizard_service
from session_auth import require_user
from wizard.domain import WizardSnapshot
from wizard.errors import WizardError

router = APIRouter(prefix="/wizard", tags=["wizard"])


class SelectChoiceIn(BaseModel):
    step_index: int = Field(..., ge=0)
    choice_text: str = Field(..., min_length=1, max_length=500)


class LocalityIn(BaseModel):
    # Length and digits are checked by the wizard so the error shape stays uniform.
    code: str = Field(..., max_length=32)


@router.get("", response_model=WizardSnapshot)
def wizard_get(email: str = Depends(require_user), svc: WizardService = Depends(get_wizard_service)):
    return svc.get(email).snapshot()


@router.post("/start", response_model=WizardSnapshot)
def wizard_start(email: str = Depends(require_user), svc: WizardService = Depends(get_wizard_service)):
    return svc.start(email)


@router.post("/select", response_model=WizardSnapshot)
def wizard_select(
    payload: SelectChoiceIn,
    email: str = Depends(require_user),
    svc: WizardService = Depends(get_wizard_service),
):
    try:
        return svc.get(email).select_choice(payload.step_index, payload.choice_text)
    except WizardError as e:
        raise http_error_for(e) from e


@router.post("/locality", response_model=WizardSnapshot)
def wizard_locality(
    payload: LocalityIn,
    email: str = Depends(require_user),
    svc: WizardService = Depends(get_wizard_service),
):
    try:
        return svc.get(email).submit_locality(payload.code)
    except WizardError as e:
        raise http_error_for(e) from e


@router.post("/locality/cancel", response_model=WizardSnapshot)
def wizard_locality_cancel(email: str = Depends(require_user), svc: WizardService = Depends(get_wizard_service)):
    try:
        return svc.get(email).cancel_locality()
    except WizardError as e:
        raise http_error_for(e) from e


@router.post("/back", response_model=WizardSnapshot)
def wizard_back(email: str = Depends(require_user), svc: WizardService = Depends(get_wizard_service)):
    try:
        return svc.get(email).go_back()
    except WizardError as e:
        raise http_error_for(e) from e


@router.post("/execute", response_model=WizardSnapshot)
def wizard_execute(email: str = Depends(require_user), svc: WizardService = Depends(get_wizard_service)):
    try:
        return svc.get(email).execute()
    except WizardError as e:
        raise http_error_for(e) from e


@router.post("/reset", response_model=WizardSnapshot)
def wizard_reset(email: str = Depends(require_user), svc: WizardService = Depends(get_wizard_service)):
    return svc.get(email).reset()
