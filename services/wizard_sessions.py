# services/wizard_sessions.py
"""Tiny in-memory registry of live wizard sessions.

Purpose:
- Hold each signed-in user's WizardMachine between HTTP requests.

Notes:
- In-memory only; progress is not persisted across restarts or devices.
- Keyed by the session key (the user's email).
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, Dict, Optional

from wizard.machine import WizardMachine


class WizardSessionStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._store: Dict[str, WizardMachine] = {}

    def get(self, session_key: str) -> Optional[WizardMachine]:
        if not session_key:
            return None
        with self._lock:
            return self._store.get(session_key)

    def get_or_start(self, session_key: str, factory: Callable[[str], WizardMachine]) -> WizardMachine:
        if not session_key:
            raise ValueError("session_key is required")
        with self._lock:
            wizard = self._store.get(session_key)
            if wizard is None:
                wizard = factory(session_key)
                self._store[session_key] = wizard
            return wizard

    def replace(self, session_key: str, wizard: WizardMachine) -> None:
        if not session_key:
            raise ValueError("session_key is required")
        with self._lock:
            self._store[session_key] = wizard

    def drop(self, session_key: str) -> None:
        if not session_key:
            return
        with self._lock:
            self._store.pop(session_key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


wizard_sessions = WizardSessionStore()
