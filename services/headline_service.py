# services/headline_service.py
"""Personalized dashboard headline from a free-text usage preference."""
from __future__ import annotations

from core.logging import logger
from services.llm_client import TextService
from services.prompt_store import HEADLINE_GENERATOR_ID, PromptTemplateStore
from wizard.render import render_template


def generate_headline(
    preference: str,
    *,
    prompt_store: PromptTemplateStore,
    text_service: TextService,
    model_name: str,
) -> str:
    template = prompt_store.get(HEADLINE_GENERATOR_ID)
    prompt = render_template(template.template_text, {"preference": preference.strip()})
    headline = text_service.complete(model_name, prompt).strip()
    logger.info("HEADLINE_GENERATED chars=%s", len(headline))
    return headline
