"""
models/session_state.py

State of one exam-taking session (the student's OMR card) and the record
handed to the submission collaborator when the session is submitted.
Pydantic BaseModel based. No UI code.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from exam_taking.models.answer_model import AnswerMap


class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    CLOSED = "closed"


class SessionState(BaseModel):
    """
    Everything that changes while a student takes an exam.

    Attributes:
        phase:             lifecycle phase.
        current_index:     cursor into the exam's question list (0-based).
        seconds_remaining: countdown value, set to duration*60 at start.
        violation_count:   anti-cheating events detected so far.
        is_focused:        False while the exam tab is hidden.
        is_submitting:     set on the first submit attempt; blocks ticks and
                           further submits until a new session starts.
        answers:           question id -> Answer.
        started_at:        UTC time the session was started.
    """

    phase: SessionPhase = SessionPhase.NOT_STARTED
    current_index: int = Field(default=0, ge=0)
    seconds_remaining: int = Field(default=0, ge=0)
    violation_count: int = Field(default=0, ge=0)
    is_focused: bool = True
    is_submitting: bool = False
    answers: AnswerMap = Field(default_factory=dict)
    started_at: Optional[datetime] = None

    model_config = {"validate_assignment": True}


class SubmissionRecord(BaseModel):
    """Payload for one submission. Built once per submit attempt."""

    exam_id: str
    exam_title: str
    answers: Dict[str, Union[str, List[str]]]
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    time_spent_seconds: int = Field(..., ge=0)
