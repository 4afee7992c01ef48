# wizard/extract.py
"""Best-effort structured-output extraction from free-text model completions.

Two tiers, in order:
  1. the body of the first fenced ```json block, if any
  2. otherwise the whole text, trimmed

The candidate is parsed as JSON and then validated against the caller's
schema. Parse failures raise MalformedOutput; schema mismatches raise
UnexpectedShape. Both carry the raw text.
"""
from __future__ import annotations

import json
import re
from typing import Annotated, Any, List

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, TypeAdapter, ValidationError

from core.logging import logger
from wizard.domain import Choice
from wizard.errors import MalformedOutput, UnexpectedShape

CHOICES_PER_STEP = 4

_JSON_FENCE_RE = re.compile(r"```json[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)


class GeneratedChoice(BaseModel):
    """A choice as the model must emit it: both keys present, both strings."""

    text: StrictStr = Field(..., min_length=1)
    icon: StrictStr

    def to_choice(self) -> Choice:
        return Choice(text=self.text, icon=self.icon)


ChoiceList = Annotated[List[GeneratedChoice], Field(min_length=CHOICES_PER_STEP, max_length=CHOICES_PER_STEP)]

_choice_list_adapter: TypeAdapter = TypeAdapter(ChoiceList)


class ChoiceStepProposal(BaseModel):
    """Richer choice-generation payload: the next question plus its choices."""

    model_config = ConfigDict(populate_by_name=True)

    next_question: str = Field(..., alias="nextQuestion", min_length=1)
    needs_postal_code: StrictBool = Field(default=False, alias="needsPostalCode")
    choices: ChoiceList


def _candidate(raw: str) -> str:
    m = _JSON_FENCE_RE.search(raw or "")
    if m:
        return m.group(1).strip()
    return (raw or "").strip()


def _clip(raw: str, limit: int = 300) -> str:
    raw = raw or ""
    return raw if len(raw) <= limit else raw[:limit] + "..."


def extract_json(raw: str) -> Any:
    candidate = _candidate(raw)
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("EXTRACT_MALFORMED err=%s raw=%r", e, _clip(raw))
        raise MalformedOutput(f"Model output is not valid JSON: {e}", raw) from e


def _validate_choices(data: Any, raw: str) -> List[GeneratedChoice]:
    try:
        return _choice_list_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning("EXTRACT_UNEXPECTED_SHAPE schema=choices raw=%r", _clip(raw))
        raise UnexpectedShape(f"Expected an array of {CHOICES_PER_STEP} choices", raw) from e


def extract_choices(raw: str) -> List[Choice]:
    """Extract exactly four {text, icon} choices."""
    return [c.to_choice() for c in _validate_choices(extract_json(raw), raw)]


def extract_choice_step(raw: str, *, default_question: str) -> ChoiceStepProposal:
    """Accept either the bare choice array or the {nextQuestion, needsPostalCode, choices} object."""
    data = extract_json(raw)
    if isinstance(data, list):
        return ChoiceStepProposal(next_question=default_question, choices=_validate_choices(data, raw))

    try:
        return ChoiceStepProposal.model_validate(data)
    except ValidationError as e:
        logger.warning("EXTRACT_UNEXPECTED_SHAPE schema=choice_step raw=%r", _clip(raw))
        raise UnexpectedShape(
            "Expected {nextQuestion, needsPostalCode, choices} or an array of choices", raw
        ) from e
