"""
wizard/machine.py

Goal-narrowing wizard built on the `transitions` library.

The user answers a fixed first question, then up to ``max_steps - 1``
AI-generated follow-ups, supplies a 7-digit postal code and finally runs the
(simulated) executor:

    collecting(1..N) -> awaiting_locality -> finalized -> executing -> completed

Every public operation either applies completely or raises a WizardError
and leaves history, state and goal untouched.

Public API:
    wizard = WizardMachine(prompt_store=..., text_service=...)
    wizard.select_choice(0, "地元のお店を予約・注文したい")
    wizard.snapshot()
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, List, Optional

from transitions import Machine

from core.logging import logger
from services.llm_client import TextService
from services.prompt_store import CHOICE_GENERATOR_ID, PromptTemplateStore
from wizard.domain import (
    FOLLOW_UP_QUESTION,
    LOCALITY_CODE_LENGTH,
    ExecutionResult,
    GoalDescriptor,
    Step,
    WizardSnapshot,
    first_step,
)
from wizard.errors import ExecutionFailed, InvalidTransition, WizardValidationError
from wizard.extract import ChoiceStepProposal, extract_choice_step
from wizard.render import render_template
from wizard.simulator import simulate


# -------------------- FSM states --------------------


WIZARD_STATES = [
    "collecting",
    "awaiting_locality",
    "finalized",
    "executing",
    "completed",
]

_LOCALITY_RE = re.compile(r"[0-9]{%d}" % LOCALITY_CODE_LENGTH)


def format_history(selections: List[str]) -> str:
    return "\n".join(f"Step {i}: {text}" for i, text in enumerate(selections, start=1))


def _serialized(method):
    """Run a public operation under the machine's lock.

    Operations on one wizard never interleave, so a slow text-service call
    inside select_choice cannot race a second select, a go_back or a reset.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._op_lock:
            return method(self, *args, **kwargs)

    return wrapper


@dataclass(eq=False)
class WizardMachine:
    prompt_store: PromptTemplateStore
    text_service: TextService
    model_name: str = "gpt-4o-mini"
    max_steps: int = 3
    simulator: Callable[[str, str], str] = simulate
    session_key: str = "-"

    # transitions Machine will attach itself and manage `state` attr
    machine: Machine = field(init=False, repr=False)
    state: str = field(init=False, default="collecting")
    history: List[Step] = field(init=False, default_factory=list)
    goal: Optional[GoalDescriptor] = field(init=False, default=None)
    result: Optional[ExecutionResult] = field(init=False, default=None)
    # Reentrant: public operations return self.snapshot() while holding it.
    _op_lock: RLock = field(init=False, repr=False, default_factory=RLock)

    def __post_init__(self) -> None:
        if self.max_steps < 1:
            raise ValueError("max_steps must be at least 1")

        self.machine = Machine(
            model=self,
            states=WIZARD_STATES,
            initial="collecting",
            auto_transitions=False,
        )
        self.machine.add_transition("ask_locality", "collecting", "awaiting_locality")
        self.machine.add_transition("resume_collecting", "awaiting_locality", "collecting")
        self.machine.add_transition("finalize", "awaiting_locality", "finalized")
        self.machine.add_transition("begin_execution", "finalized", "executing")
        self.machine.add_transition("complete_execution", "executing", "completed")
        self.machine.add_transition("abort_execution", "executing", "finalized")
        self.machine.add_transition("restart", "*", "collecting")

        self.history = [first_step()]

    # -------------------- Public API --------------------

    @property
    def step(self) -> int:
        """1-based number of the step currently shown (or last answered)."""
        return len(self.history)

    @_serialized
    def snapshot(self) -> WizardSnapshot:
        return WizardSnapshot(
            state=self.state,
            step=self.step,
            max_steps=self.max_steps,
            history=[s.model_copy(deep=True) for s in self.history],
            goal_path=self.goal.goal_path if self.goal else None,
            locality_code=self.goal.locality_code if self.goal else None,
            result=self.result.model_copy() if self.result else None,
        )

    @_serialized
    def select_choice(self, step_index: int, choice_text: str) -> WizardSnapshot:
        """Answer the open step (0-based ``step_index``) with one of its offered choices.

        Below the step budget this asks the text service for the next step;
        on the last step it moves straight to awaiting_locality.
        """
        self._require("select_choice", "collecting")

        open_index = len(self.history) - 1
        if step_index != open_index:
            raise WizardValidationError(
                f"step_index {step_index} is not the open step (expected {open_index})"
            )
        current = self.history[open_index]
        if not current.offers(choice_text):
            raise WizardValidationError(f"'{choice_text}' is not one of the offered choices")

        if self.step >= self.max_steps:
            current.selected = choice_text
            self.ask_locality()
            logger.info(
                "WIZARD_SELECT session=%s step=%s/%s final=1 state=%s",
                self.session_key, self.step, self.max_steps, self.state,
            )
            return self.snapshot()

        selections = [s.selected for s in self.history[:-1]] + [choice_text]
        # Raises before anything is mutated; the selection only sticks on success.
        proposal = self._propose_next_step(selections)

        # The open step must still be the one that was answered.
        if self.state != "collecting" or len(self.history) - 1 != open_index or self.history[-1] is not current:
            raise InvalidTransition("select_choice", self.state)
        current.selected = choice_text
        if proposal.needs_postal_code:
            self.ask_locality()
        else:
            choices = [c.to_choice() for c in proposal.choices]
            self.history.append(Step(question=proposal.next_question, choices=choices))

        logger.info(
            "WIZARD_SELECT session=%s step=%s/%s state=%s",
            self.session_key, self.step, self.max_steps, self.state,
        )
        return self.snapshot()

    @_serialized
    def submit_locality(self, code: str) -> WizardSnapshot:
        self._require("submit_locality", "awaiting_locality")
        if not isinstance(code, str) or not _LOCALITY_RE.fullmatch(code):
            raise WizardValidationError(
                f"Postal code must be exactly {LOCALITY_CODE_LENGTH} digits (no hyphen)"
            )

        self.goal = GoalDescriptor(
            selections=[s.selected for s in self.history if s.selected is not None],
            locality_code=code,
        )
        self.finalize()
        logger.info("WIZARD_LOCALITY session=%s prefix=%s", self.session_key, code[0])
        return self.snapshot()

    @_serialized
    def cancel_locality(self) -> WizardSnapshot:
        """Back out of the postal-code prompt; the last answer is retracted."""
        self._require("cancel_locality", "awaiting_locality")
        self.history[-1].selected = None
        self.resume_collecting()
        return self.snapshot()

    @_serialized
    def go_back(self) -> WizardSnapshot:
        self._require("go_back", "collecting")
        if len(self.history) <= 1:
            raise InvalidTransition("go_back", f"{self.state}(1)")

        del self.history[-1]
        self.history[-1].selected = None
        logger.info("WIZARD_BACK session=%s step=%s", self.session_key, self.step)
        return self.snapshot()

    @_serialized
    def execute(self) -> WizardSnapshot:
        self._require("execute", "finalized")
        if self.goal is None:
            raise InvalidTransition("execute", self.state)

        self.begin_execution()
        try:
            narrative = self.simulator(self.goal.goal_path, self.goal.locality_code)
        except Exception as e:
            self.abort_execution()
            logger.exception("WIZARD_EXECUTE_FAIL session=%s", self.session_key)
            raise ExecutionFailed(f"Execution failed: {e}") from e

        self.result = ExecutionResult(narrative=narrative)
        self.complete_execution()
        logger.info("WIZARD_EXECUTE session=%s state=%s", self.session_key, self.state)
        return self.snapshot()

    @_serialized
    def reset(self) -> WizardSnapshot:
        self.restart()
        self.history = [first_step()]
        self.goal = None
        self.result = None
        return self.snapshot()

    # -------------------- Internals --------------------

    def _require(self, operation: str, state: str) -> None:
        if self.state != state:
            raise InvalidTransition(operation, self.state)

    def _propose_next_step(self, selections: List[str]) -> ChoiceStepProposal:
        template = self.prompt_store.get(CHOICE_GENERATOR_ID)
        prompt = render_template(
            template.template_text,
            {
                "history": format_history(selections),
                "step": str(len(selections) + 1),
                "max_steps": str(self.max_steps),
            },
        )
        raw = self.text_service.complete(self.model_name, prompt)
        return extract_choice_step(raw, default_question=FOLLOW_UP_QUESTION)
