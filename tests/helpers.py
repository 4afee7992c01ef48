"""Test doubles for the wizard's external collaborators."""

import json
import threading

from services.prompt_store import PromptTemplateRecord
from wizard.errors import ServiceError, TemplateMissing

GENERATED_CHOICES = [
    {"text": "近所のレストランを予約したい", "icon": "🍴"},
    {"text": "テイクアウトを注文したい", "icon": "🥡"},
    {"text": "美容院を予約したい", "icon": "💇"},
    {"text": "カフェの席を確保したい", "icon": "☕"},
]


def fenced(value) -> str:
    return "```json\n" + json.dumps(value, ensure_ascii=False, indent=2) + "\n```"


class FakeTextService:
    """Scripted TextService: pops one response (or exception) per call."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def complete(self, model_name: str, prompt: str) -> str:
        self.calls.append({"model": model_name, "prompt": prompt})
        if not self.responses:
            raise ServiceError("no scripted response left")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class InMemoryPromptStore:
    def __init__(self, templates=None):
        self._rows = {}
        for function_id, text in (templates or {}).items():
            self.put(function_id, text, "")

    def get(self, function_id: str) -> PromptTemplateRecord:
        row = self._rows.get(function_id)
        if row is None:
            raise TemplateMissing(function_id)
        return row

    def put(self, function_id: str, template_text: str, description: str) -> PromptTemplateRecord:
        row = PromptTemplateRecord(function_id=function_id, template_text=template_text, description=description)
        self._rows[function_id] = row
        return row

    def list(self):
        return [self._rows[k] for k in sorted(self._rows)]


class GatedTextService:
    """TextService that blocks inside complete() until released."""

    def __init__(self, response: str):
        self.response = response
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def complete(self, model_name: str, prompt: str) -> str:
        self.calls += 1
        self.entered.set()
        if not self.release.wait(timeout=5):
            raise ServiceError("gate never released")
        return self.response
