import os
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, HTMLResponse
from sqlalchemy.orm import Session

from core.logging import logger
from deps import get_db
from services.user_service import get_or_create_user
from services.wizard_service import WizardService, get_wizard_service
from session_auth import (
    set_user_session,
    clear_user_session,
    get_session_email,
    is_admin_email,
    require_user,
)


router = APIRouter(prefix="/auth", tags=["auth"])


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


def _oauth_config_ok() -> bool:
    return all(
        _env(k)
        for k in (
            "GOOGLE_OAUTH_CLIENT_ID",
            "GOOGLE_OAUTH_CLIENT_SECRET",
            "GOOGLE_OAUTH_REDIRECT_URI",
            "SESSION_SECRET",
        )
    )


@router.get("/login")
async def login():
    if not _oauth_config_ok():
        return HTMLResponse("<h3>ログイン設定が完了していません</h3>", status_code=500)

    params = {
        "client_id": _env("GOOGLE_OAUTH_CLIENT_ID"),
        "redirect_uri": _env("GOOGLE_OAUTH_REDIRECT_URI"),
        "response_type": "code",
        "scope": "openid email profile",
        "access_type": "online",
        "prompt": "select_account",
    }
    return RedirectResponse(f"{GOOGLE_AUTH_URL}?{urlencode(params)}")


@router.get("/oauth/callback")
async def oauth_callback(code: str, db: Session = Depends(get_db)):
    if not _oauth_config_ok():
        return HTMLResponse("<h3>ログイン設定が完了していません</h3>", status_code=500)

    # Exchange code for tokens
    async with httpx.AsyncClient(timeout=12) as client:
        token_resp = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": _env("GOOGLE_OAUTH_CLIENT_ID"),
                "client_secret": _env("GOOGLE_OAUTH_CLIENT_SECRET"),
                "redirect_uri": _env("GOOGLE_OAUTH_REDIRECT_URI"),
                "grant_type": "authorization_code",
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        token_resp.raise_for_status()
        access_token = token_resp.json().get("access_token")
        if not access_token:
            return HTMLResponse("<h3>Missing access token</h3>", status_code=500)

        # Fetch user profile (email)
        me_resp = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        me_resp.raise_for_status()

    profile = me_resp.json()
    email = ((profile or {}).get("email") or "").strip().lower()
    if not email or not (profile or {}).get("email_verified", True):
        return HTMLResponse("<h3>メールアドレスを確認できませんでした</h3>", status_code=403)

    get_or_create_user(db, email)
    logger.info("LOGIN email=%s admin=%s", email, is_admin_email(email))

    resp = RedirectResponse("/admin" if is_admin_email(email) else "/", status_code=302)
    set_user_session(resp, email=email)
    return resp


@router.get("/me")
async def me(email: str = Depends(require_user)):
    return {"email": email, "is_admin": is_admin_email(email)}


@router.post("/logout")
async def logout(request: Request, svc: WizardService = Depends(get_wizard_service)):
    email = get_session_email(request)
    if email:
        svc.end(email)
    resp = RedirectResponse("/auth/login", status_code=302)
    clear_user_session(resp)
    return resp
