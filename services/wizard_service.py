# services/wizard_service.py
"""Builds wizard machines with their collaborators and tracks them per session."""
from __future__ import annotations

from typing import Optional

from core import config as cfg
from core.logging import logger
from db import SessionLocal
from services.llm_client import OpenAITextService, TextService
from services.prompt_store import PromptTemplateStore, SqlPromptTemplateStore
from services.wizard_sessions import WizardSessionStore, wizard_sessions
from wizard.domain import WizardSnapshot
from wizard.machine import WizardMachine


class WizardService:
    def __init__(
        self,
        *,
        prompt_store: PromptTemplateStore,
        text_service: TextService,
        sessions: WizardSessionStore,
        model_name: str = cfg.WIZARD_MODEL,
        max_steps: int = cfg.WIZARD_MAX_STEPS,
    ) -> None:
        self.prompt_store = prompt_store
        self.text_service = text_service
        self.sessions = sessions
        self.model_name = model_name
        self.max_steps = max_steps

    def _new_machine(self, session_key: str) -> WizardMachine:
        return WizardMachine(
            prompt_store=self.prompt_store,
            text_service=self.text_service,
            model_name=self.model_name,
            max_steps=self.max_steps,
            session_key=session_key,
        )

    def get(self, session_key: str) -> WizardMachine:
        return self.sessions.get_or_start(session_key, self._new_machine)

    def start(self, session_key: str) -> WizardSnapshot:
        """Begin a fresh dialogue, discarding any previous one for this session."""
        wizard = self._new_machine(session_key)
        self.sessions.replace(session_key, wizard)
        logger.info("WIZARD_START session=%s max_steps=%s", session_key, self.max_steps)
        return wizard.snapshot()

    def end(self, session_key: str) -> None:
        self.sessions.drop(session_key)


_wizard_service: Optional[WizardService] = None


def get_wizard_service() -> WizardService:
    """FastAPI dependency; tests override it with fakes."""
    global _wizard_service
    if _wizard_service is None:
        _wizard_service = WizardService(
            prompt_store=SqlPromptTemplateStore(SessionLocal),
            text_service=OpenAITextService(),
            sessions=wizard_sessions,
        )
    return _wizard_service
