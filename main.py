import html
from urllib.parse import quote

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware

from core import config as cfg
from core.logging import logger
from core.request_context import request_scope
from db import Base, SessionLocal, engine
from session_auth import require_admin
from services.prompt_store import seed_default_prompts
from services.wizard_service import WizardService, get_wizard_service

from api.routers.health import router as health_router
from api.routers.wizard import router as wizard_router
from api.routers.customize import router as customize_router
from api.routers.admin_prompts import router as admin_prompts_router
from google_oauth import router as auth_router


def create_app() -> FastAPI:
    app = FastAPI(title="Delight Dashboard")

    # --- CORS (admin UI is backend-served; the dashboard SPA may live elsewhere) ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        with request_scope(request.headers.get("X-Request-ID")) as rid:
            response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    # --- Routers ---
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(wizard_router)
    app.include_router(customize_router)
    app.include_router(admin_prompts_router)

    @app.on_event("startup")
    def _startup() -> None:
        Base.metadata.create_all(bind=engine)
        if cfg.SEED_PROMPTS:
            db = SessionLocal()
            try:
                seed_default_prompts(db)
            finally:
                db.close()
        logger.info("Database tables ensured (seed_prompts=%s).", cfg.SEED_PROMPTS)

    # -------------------------------------------------------------------
    # Admin Portal (server-rendered HTML)
    # -------------------------------------------------------------------

    @app.get("/admin", response_class=HTMLResponse)
    def admin_portal(
        message: str = "",
        error: str = "",
        email: str = Depends(require_admin),
        svc: WizardService = Depends(get_wizard_service),
    ):
        """
        Prompt template editor.
        Changes take effect for users immediately.
        """
        prompts = svc.prompt_store.list()
        return _render_admin_page(email, prompts, message=message, error=error)

    @app.post("/admin/prompts/{function_id}/save")
    def admin_save_prompt(
        function_id: str,
        template_text: str = Form(...),
        description: str = Form(""),
        email: str = Depends(require_admin),
        svc: WizardService = Depends(get_wizard_service),
    ):
        """
        Persist one template and redirect back to the portal.
        """
        if not template_text.strip():
            msg = f"[{function_id}] 保存に失敗しました: テンプレートが空です"
            return RedirectResponse(f"/admin?error={quote(msg)}", status_code=303)

        svc.prompt_store.put(function_id, template_text, description)
        logger.info("ADMIN_PROMPT_SAVE function_id=%s by=%s", function_id, email)
        msg = f"[{function_id}] が正常に保存されました！"
        return RedirectResponse(f"/admin?message={quote(msg)}", status_code=303)

    return app


def _render_admin_page(email: str, prompts, *, message: str = "", error: str = "") -> str:
    esc = html.escape

    banner = ""
    if error:
        banner = f'<div class="banner error">{esc(error)}</div>'
    elif message:
        banner = f'<div class="banner ok">{esc(message)}</div>'

    if not prompts:
        cards = '<div class="card">プロンプトテンプレートが見つかりません。</div>'
    else:
        cards = "\n".join(
            f"""
      <form class="card" method="post" action="/admin/prompts/{quote(p.function_id, safe='')}/save">
        <h3>エージェントID: {esc(p.function_id)}</h3>
        <label>説明 (管理用)</label>
        <textarea name="description" rows="2">{esc(p.description)}</textarea>
        <label>プロンプトテンプレート</label>
        <textarea name="template_text" rows="10" class="mono">{esc(p.template_text)}</textarea>
        <div class="hint">{{history}} や {{preference}} などのプレースホルダーは実行時に置き換えられます。</div>
        <button type="submit">このプロンプトを保存</button>
      </form>"""
            for p in prompts
        )

    return f"""
<!doctype html>
<html lang="ja">
  <head>
    <title>サービス管理者ダッシュボード</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      body {{
        font-family: system-ui, -apple-system, BlinkMacSystemFont, sans-serif;
        background: #f6f7f9;
        padding: 40px;
      }}
      .container {{
        max-width: 1000px;
        margin: 0 auto;
      }}
      h1 {{
        color: #1976d2;
      }}
      .card {{
        display: block;
        background: #fff;
        border: 1px solid #e0e0e0;
        border-radius: 8px;
        padding: 20px;
        margin-bottom: 30px;
        box-shadow: 0 2px 4px rgba(0,0,0,0.05);
      }}
      label {{
        display: block;
        margin-top: 16px;
        font-weight: 600;
      }}
      textarea {{
        width: 100%;
        margin-top: 8px;
        padding: 10px;
        font-size: 14px;
        border-radius: 6px;
        border: 1px solid #ccc;
      }}
      .mono {{
        font-family: monospace;
        background: #f7f7f7;
      }}
      .hint {{
        font-size: 12px;
        color: #666;
        margin-top: 4px;
      }}
      button {{
        margin-top: 16px;
        padding: 10px 20px;
        border-radius: 6px;
        border: none;
        cursor: pointer;
        background: #1976d2;
        color: #fff;
      }}
      .banner {{
        padding: 12px 16px;
        border-radius: 8px;
        margin-bottom: 20px;
      }}
      .banner.ok {{ background: #e8f5e9; color: #388e3c; }}
      .banner.error {{ background: #ffebee; color: #d32f2f; }}
    </style>
  </head>
  <body>
    <div class="container">
      <h1>サービス管理者ダッシュボード</h1>
      <p>ログイン中: <b>{esc(email)}</b></p>
      <p>AIエージェントのプロンプトテンプレートを編集します。変更は利用者に即時反映されます。</p>
      {banner}
      {cards}
      <form method="post" action="/auth/logout"><button type="submit">ログアウト</button></form>
    </div>
  </body>
</html>
    """


app = create_app()
