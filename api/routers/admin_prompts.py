# api/routers/admin_prompts.py
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.deps.admin_key import require_admin_key
from services.prompt_store import PromptTemplateRecord
from services.wizard_service import WizardService, get_wizard_service
from wizard.errors import TemplateMissing

router = APIRouter(prefix="/admin/prompts", tags=["admin-prompts"])


class PromptTemplateIn(BaseModel):
    template_text: str = Field(..., min_length=1, max_length=20000)
    description: str = Field(default="", max_length=2000)


@router.get("", response_model=list[PromptTemplateRecord], dependencies=[Depends(require_admin_key)])
def admin_list_prompts(svc: WizardService = Depends(get_wizard_service)):
    return svc.prompt_store.list()


@router.get("/{function_id}", response_model=PromptTemplateRecord, dependencies=[Depends(require_admin_key)])
def admin_get_prompt(function_id: str, svc: WizardService = Depends(get_wizard_service)):
    try:
        return svc.prompt_store.get(function_id)
    except TemplateMissing as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.put("/{function_id}", response_model=PromptTemplateRecord, dependencies=[Depends(require_admin_key)])
def admin_put_prompt(function_id: str, payload: PromptTemplateIn, svc: WizardService = Depends(get_wizard_service)):
    return svc.prompt_store.put(function_id, payload.template_text, payload.description)
