"""Environment-backed configuration for the dashboard backend.

- Reads env vars at import time
- Collaborator keys (OpenAI, Google OAuth, admin) are optional here; the
  code paths that need them fail with a configuration error instead.
"""

from __future__ import annotations

import os

from core.logging import logger


def _env_bool(name: str, default: str) -> bool:
    return (os.getenv(name, default) or default).strip().lower() in ("1", "true", "yes", "on")


# ---------- Generative text service ----------
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
if not OPENAI_API_KEY:
    logger.warning("OPENAI_API_KEY is not set. Choice generation and headlines will fail.")

WIZARD_MODEL = (os.getenv("WIZARD_MODEL") or "").strip() or "gpt-4o-mini"
HEADLINE_MODEL = (os.getenv("HEADLINE_MODEL") or "").strip() or WIZARD_MODEL

LLM_TIMEOUT_S = float((os.getenv("LLM_TIMEOUT_S") or "20.0").strip() or "20.0")
# Single call by default; at most one retry for transient network failures.
LLM_MAX_RETRIES = min(max(int((os.getenv("LLM_MAX_RETRIES") or "0").strip() or "0"), 0), 1)
LLM_TEMPERATURE = float((os.getenv("LLM_TEMPERATURE") or "0.7").strip() or "0.7")

# ---------- Wizard ----------
WIZARD_MAX_STEPS = max(int((os.getenv("WIZARD_MAX_STEPS") or "3").strip() or "3"), 1)

# ---------- Prompt templates ----------
# Insert default templates on startup when their rows are missing.
SEED_PROMPTS = _env_bool("SEED_PROMPTS", "1")
