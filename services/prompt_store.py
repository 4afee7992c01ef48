# services/prompt_store.py
"""Prompt Template Store: keyed templates edited by admins, read by the wizard.

Rows live in the `ai_prompts` table. The wizard only needs `get`; the admin
surfaces use `list` and `put`.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.logging import logger
from models import PromptTemplate
from wizard.errors import TemplateMissing

CHOICE_GENERATOR_ID = "choice_generator"
HEADLINE_GENERATOR_ID = "generate_headline"


class PromptTemplateRecord(BaseModel):
    function_id: str
    template_text: str
    description: str = ""
    updated_at: Optional[datetime] = None


class PromptTemplateStore(Protocol):
    def get(self, function_id: str) -> PromptTemplateRecord: ...

    def put(self, function_id: str, template_text: str, description: str) -> PromptTemplateRecord: ...

    def list(self) -> List[PromptTemplateRecord]: ...


DEFAULTS: Dict[str, Dict[str, str]] = {
    CHOICE_GENERATOR_ID: {
        "description": "目標絞り込みウィザードの次の選択肢を4つ生成する（{history}, {step}, {max_steps} を利用可能）",
        "template_text": (
            "あなたはユーザーの目標を段階的に具体化するアシスタントです。\n"
            "これまでのユーザーの選択:\n"
            "{history}\n\n"
            "次は全{max_steps}ステップ中の{step}ステップ目です。"
            "これまでの選択をさらに具体化する質問を1つと、その答えとなる選択肢を4つ作ってください。\n"
            "地域を特定しないと先に進めない場合は needsPostalCode を true にしてください。\n"
            "出力は次の形式のJSONのみを ```json で囲んで返してください:\n"
            "{\"nextQuestion\": \"...\", \"needsPostalCode\": false, "
            "\"choices\": [{\"text\": \"...\", \"icon\": \"絵文字1文字\"}, ...4件]}"
        ),
    },
    HEADLINE_GENERATOR_ID: {
        "description": "ダッシュボードの見出しをパーソナライズする（{preference} を利用可能）",
        "template_text": (
            "あなたは、優れたサービス基盤のパーソナライズAIです。\n"
            "ユーザーは「{preference}」という目的でサービスを利用します。\n"
            "このユーザーにデライトを与える、魅力的なダッシュボードの新しい見出し案を1つ提案してください。\n"
            "提案は、日本語の短文のみで、それ以外の説明文は不要です。"
        ),
    },
}


def _to_record(row: PromptTemplate) -> PromptTemplateRecord:
    return PromptTemplateRecord(
        function_id=row.function_id,
        template_text=row.template_text,
        description=row.description or "",
        updated_at=row.updated_at,
    )


class SqlPromptTemplateStore:
    """PromptTemplateStore over SQLAlchemy; one short-lived session per call."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, function_id: str) -> PromptTemplateRecord:
        db = self._session_factory()
        try:
            row = db.get(PromptTemplate, function_id)
            if row is None:
                raise TemplateMissing(function_id)
            return _to_record(row)
        finally:
            db.close()

    def put(self, function_id: str, template_text: str, description: str) -> PromptTemplateRecord:
        db = self._session_factory()
        try:
            row = db.get(PromptTemplate, function_id)
            if row:
                row.template_text = template_text
                row.description = description
                row.updated_at = datetime.utcnow()
            else:
                row = PromptTemplate(
                    function_id=function_id,
                    template_text=template_text,
                    description=description,
                )
                db.add(row)

            db.commit()
            db.refresh(row)
            logger.info("PROMPT_SAVED function_id=%s chars=%s", function_id, len(template_text))
            return _to_record(row)
        finally:
            db.close()

    def list(self) -> List[PromptTemplateRecord]:
        db = self._session_factory()
        try:
            rows = db.query(PromptTemplate).order_by(PromptTemplate.function_id.asc()).all()
            return [_to_record(r) for r in rows]
        finally:
            db.close()


def seed_default_prompts(db: Session) -> List[str]:
    """Insert the default templates whose rows are missing. Never overwrites edits."""
    created: List[str] = []
    for function_id, default in DEFAULTS.items():
        if db.get(PromptTemplate, function_id) is None:
            db.add(
                PromptTemplate(
                    function_id=function_id,
                    template_text=default["template_text"],
                    description=default["description"],
                )
            )
            created.append(function_id)
    if created:
        db.commit()
        logger.info("Seeded default prompt templates: %s", ", ".join(created))
    return created
