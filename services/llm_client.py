# services/llm_client.py
"""Generative Text Service adapter: rendered prompt in, free text out."""
from __future__ import annotations

from typing import Optional, Protocol

from openai import OpenAI

from core import config as cfg
from core.logging import logger
from wizard.errors import ConfigurationError, ServiceError


class TextService(Protocol):
    def complete(self, model_name: str, prompt: str) -> str: ...


class OpenAITextService:
    """Single-shot chat completion. No streaming, no tools."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        *,
        api_key: Optional[str] = None,
        timeout_s: float = cfg.LLM_TIMEOUT_S,
        max_retries: int = cfg.LLM_MAX_RETRIES,
        temperature: float = cfg.LLM_TEMPERATURE,
    ) -> None:
        self._client = client
        self._api_key = api_key if api_key is not None else (cfg.OPENAI_API_KEY or "")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._temperature = temperature

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key.strip():
                raise ConfigurationError("OPENAI_API_KEY is not configured")
            self._client = OpenAI(
                api_key=self._api_key.strip(),
                timeout=self._timeout_s,
                max_retries=self._max_retries,
            )
        return self._client

    def complete(self, model_name: str, prompt: str) -> str:
        client = self._get_client()
        try:
            resp = client.chat.completions.create(
                model=model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
            )
        except Exception as e:
            logger.exception("LLM_CALL_FAIL model=%s", model_name)
            raise ServiceError(f"Generative text service call failed: {e}") from e

        content = ""
        if resp.choices:
            content = (resp.choices[0].message.content or "").strip()
        if not content:
            logger.error("LLM_EMPTY_RESPONSE model=%s", model_name)
            raise ServiceError("Generative text service returned no text")
        return content
