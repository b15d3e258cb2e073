"""
models/question_model.py

Read-only exam content: questions and exam definitions.
Pydantic v2 models, loaded from the exam bank and never mutated during a session.
"""

from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single-choice"
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_BLANK = "fill-blank"
    SHORT_ANSWER = "short-answer"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE)


class Question(BaseModel):
    """
    A single exam question.

    Fields the student must not see (correct_answer, category, created_by ...)
    are dropped on load.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(
        ...,
        min_length=1,
        description="Question identifier"
    )
    type: QuestionType = Field(
        ...,
        description="Question type tag"
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Prompt text"
    )
    points: float = Field(
        default=1.0,
        ge=0,
        description="Point value"
    )
    options: Optional[List[str]] = Field(
        default=None,
        description="Ordered option list (choice types only)"
    )

    @model_validator(mode='after')
    def validate_choice_options(self) -> 'Question':
        """Choice questions need at least two options to choose between."""
        if self.type.is_choice and (not self.options or len(self.options) < 2):
            raise ValueError(f"Choice question '{self.id}' needs at least 2 options, got {self.options}")
        return self


class ExamDefinition(BaseModel):
    """Exam metadata and its ordered question ids."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    duration_minutes: int = Field(
        ...,
        ge=1,
        validation_alias=AliasChoices("duration_minutes", "duration"),
        description="Total exam time in minutes"
    )
    question_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("question_ids", "questions"),
        description="Question ids in presentation order"
    )

    @field_validator('question_ids')
    @classmethod
    def drop_duplicate_ids(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60
