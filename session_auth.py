import os
from typing import Optional

from fastapi import Request, HTTPException
from itsdangerous import URLSafeSerializer, BadSignature


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _serializer() -> URLSafeSerializer:
    secret = _env("SESSION_SECRET")
    if not secret:
        # Don't crash the whole app; protected routes will refuse.
        raise RuntimeError("SESSION_SECRET is not set")
    return URLSafeSerializer(secret, salt="delight-session-v1")


SESSION_COOKIE = "delight_session"


def set_user_session(response, email: str) -> None:
    s = _serializer()
    token = s.dumps({"email": email.lower()})
    response.set_cookie(
        SESSION_COOKIE,
        token,
        httponly=True,
        secure=_env("SESSION_COOKIE_SECURE", "true").lower() in ("1", "true", "yes", "on"),
        samesite="lax",
        max_age=60 * 60 * 24 * 7,  # 7 days
        path="/",
    )


def clear_user_session(response) -> None:
    response.delete_cookie(SESSION_COOKIE, path="/")


def get_session_email(request: Request) -> Optional[str]:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    try:
        s = _serializer()
        data = s.loads(token)
        return (data or {}).get("email")
    except (BadSignature, RuntimeError):
        return None


def is_admin_email(email: Optional[str]) -> bool:
    expected = _env("ADMIN_EMAIL")
    return bool(email and expected and email.lower() == expected.lower())


def require_user(request: Request) -> str:
    email = get_session_email(request)
    if not email:
        raise HTTPException(status_code=401, detail="Not logged in.")
    return email


def require_admin(request: Request) -> str:
    if not _env("ADMIN_EMAIL"):
        raise HTTPException(status_code=500, detail="ADMIN_EMAIL not configured.")

    email = require_user(request)
    if not is_admin_email(email):
        raise HTTPException(status_code=403, detail="Forbidden.")
    return email
