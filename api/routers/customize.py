# api/routers/customize.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from core import config as cfg
from core.logging import logger
from services.headline_service import generate_headline
from services.wizard_service import WizardService, get_wizard_service
from session_auth import require_user
from wizard.errors import ConfigurationError, WizardError

router = APIRouter(prefix="/api", tags=["customize"])


class CustomizeIn(BaseModel):
    userPreference: str | None = Field(default=None, max_length=2000)


class CustomizeOut(BaseModel):
    headline: str


@router.post("/customize", response_model=CustomizeOut)
def customize(
    payload: CustomizeIn,
    email: str = Depends(require_user),
    svc: WizardService = Depends(get_wizard_service),
):
    preference = (payload.userPreference or "").strip()
    if not preference:
        return JSONResponse({"error": "User preference is required."}, status_code=400)

    try:
        headline = generate_headline(
            preference,
            prompt_store=svc.prompt_store,
            text_service=svc.text_service,
            model_name=cfg.HEADLINE_MODEL,
        )
    except ConfigurationError as e:
        logger.error("CUSTOMIZE_CONFIG_ERROR email=%s err=%s", email, e)
        return JSONResponse({"error": f"Server configuration error: {e}"}, status_code=500)
    except WizardError:
        logger.exception("CUSTOMIZE_FAIL email=%s", email)
        return JSONResponse(
            {"error": "AIによるカスタマイズ処理中に予期せぬエラーが発生しました"},
            status_code=500,
        )

    return CustomizeOut(headline=headline)
