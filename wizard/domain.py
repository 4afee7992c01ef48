# wizard/domain.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

WizardState = Literal["collecting", "awaiting_locality", "finalized", "executing", "completed"]

GOAL_PATH_SEPARATOR = " > "
LOCALITY_CODE_LENGTH = 7


class Choice(BaseModel):
    text: str = Field(..., min_length=1)
    # Display glyph; opaque to the wizard logic.
    icon: str = ""


class Step(BaseModel):
    question: str
    choices: List[Choice] = Field(default_factory=list)
    selected: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.selected is None

    def offers(self, text: str) -> bool:
        return any(c.text == text for c in self.choices)


class GoalDescriptor(BaseModel):
    selections: List[str]
    locality_code: str

    @property
    def goal_path(self) -> str:
        return GOAL_PATH_SEPARATOR.join(self.selections)


class ExecutionResult(BaseModel):
    narrative: str


class WizardSnapshot(BaseModel):
    state: WizardState
    step: int
    max_steps: int
    history: List[Step]
    goal_path: Optional[str] = None
    locality_code: Optional[str] = None
    result: Optional[ExecutionResult] = None


FIRST_STEP_QUESTION = "今日はどんなことを実現したいですか？"
FOLLOW_UP_QUESTION = "もう少し詳しく教えてください。"

FIRST_STEP_CHOICES = (
    Choice(text="地元のお店を予約・注文したい", icon="🍽️"),
    Choice(text="新しいスキルを学びたい", icon="📚"),
    Choice(text="仕事の効率を上げたい", icon="💼"),
    Choice(text="週末の予定を立てたい", icon="🗓️"),
)


def first_step() -> Step:
    """The fixed opening step; never AI-generated."""
    return Step(question=FIRST_STEP_QUESTION, choices=[c.model_copy() for c in FIRST_STEP_CHOICES])
