"""
services/exam_session.py

Exam-taking session state machine.

    not_started --start--> in_progress --submit--> submitting --ok--> closed
                                ^                       |
                                +------- failed --------+

One instance per opened exam. close() tears the session down from any
phase: the countdown is cancelled and the violation monitor detached, so
nothing fires into a closed session. Opening the exam again means a new
instance.
"""

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional

from config import SUBMIT_TIMEOUT_SECONDS
from exam_taking.models.question_model import ExamDefinition, Question
from exam_taking.models.session_state import SessionPhase, SessionState, SubmissionRecord
from exam_taking.models.signal_model import BrowserSignal, Notice, SignalVerdict, ViolationEvent
from exam_taking.services.answer_editor import answers_payload, apply_edit, describe_control
from exam_taking.services.countdown import (
    AsyncioScheduler, CountdownTimer, Scheduler, format_remaining, is_low_time,
)
from exam_taking.services.violation_monitor import ViolationMonitor

logger = logging.getLogger(__name__)

Submitter = Callable[[SubmissionRecord], Awaitable[Any]]


class ExamSession:
    """
    Args:
        exam:           exam being taken.
        questions:      the exam's questions, in presentation order.
        submitter:      async callable receiving the SubmissionRecord; raising
                        means the submission failed.
        scheduler:      timer scheduler (defaults to the running asyncio loop).
        on_closed:      called with the record after a successful submit.
        on_violation:   called for every detected violation.
        submit_timeout: seconds to wait for the submitter before giving up.
    """

    def __init__(
        self,
        exam: ExamDefinition,
        questions: List[Question],
        submitter: Submitter,
        scheduler: Optional[Scheduler] = None,
        on_closed: Optional[Callable[[SubmissionRecord], None]] = None,
        on_violation: Optional[Callable[[ViolationEvent], None]] = None,
        submit_timeout: float = SUBMIT_TIMEOUT_SECONDS,
    ):
        self.exam = exam
        self.questions = list(questions)
        self._questions_by_id: Dict[str, Question] = {q.id: q for q in self.questions}
        self._submitter = submitter
        self._scheduler = scheduler or AsyncioScheduler()
        self._on_closed = on_closed
        self._on_violation = on_violation
        self.submit_timeout = submit_timeout

        self.state = SessionState()
        self.last_record: Optional[SubmissionRecord] = None
        self._notices: Deque[Notice] = deque()

        self._timer = CountdownTimer(self._scheduler, self._on_tick, self._on_expire)
        self._monitor = ViolationMonitor(on_violation=self._handle_violation, notify=self._notify)

    # ── read-only views ────────────────────────────────────────────────────

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if not self.questions:
            return None
        return self.questions[self.state.current_index]

    @property
    def answered_count(self) -> int:
        return len(self.state.answers)

    @property
    def progress_percent(self) -> int:
        if not self.questions:
            return 0
        return round((self.state.current_index + 1) / len(self.questions) * 100)

    @property
    def time_label(self) -> str:
        return format_remaining(self.state.seconds_remaining)

    @property
    def timer_active(self) -> bool:
        return self._timer.active

    @property
    def monitor_attached(self) -> bool:
        return self._monitor.attached

    def get_answer(self, question_id: str) -> Any:
        """Payload value stored for a question, None if unanswered."""
        answer = self.state.answers.get(question_id)
        return answer.payload() if answer is not None else None

    # ── transitions ────────────────────────────────────────────────────────

    def start(self) -> bool:
        if self.state.phase is not SessionPhase.NOT_STARTED:
            logger.debug(f"start ignored in phase {self.state.phase.value}")
            return False

        self._monitor.reset()
        self._timer.reset(self.exam.duration_seconds)
        self.state = SessionState(
            phase=SessionPhase.IN_PROGRESS,
            current_index=0,
            seconds_remaining=self.exam.duration_seconds,
            violation_count=0,
            is_focused=True,
            is_submitting=False,
            answers={},
            started_at=datetime.now(timezone.utc),
        )
        self._resume()

        logger.info(f"Exam '{self.exam.title}' started: {self.question_count} questions, "
                    f"{self.exam.duration_minutes} min")
        self._notify(Notice(level="success", message=f"Exam started. Good luck! Time allowed: "
                                                     f"{self.exam.duration_minutes} minutes."))
        return True

    def edit_answer(self, question_id: str, value: Any) -> bool:
        """Apply one edit. Returns False when the edit was ignored."""
        if self.state.phase is not SessionPhase.IN_PROGRESS:
            return False
        question = self._questions_by_id.get(question_id)
        if question is None:
            logger.debug(f"Ignoring answer for unknown question {question_id}")
            return False

        current = self.state.answers.get(question_id)
        updated = apply_edit(question, current, value)
        if updated is current:
            return False
        if updated is None:
            self.state.answers.pop(question_id, None)
        else:
            self.state.answers[question_id] = updated
        return True

    def next(self) -> int:
        return self.go_to(self.state.current_index + 1)

    def previous(self) -> int:
        return self.go_to(self.state.current_index - 1)

    def go_to(self, index: int) -> int:
        """Move the cursor. Out-of-range moves leave it where it is."""
        if self.state.phase is SessionPhase.IN_PROGRESS and 0 <= index < len(self.questions):
            self.state.current_index = index
        return self.state.current_index

    def report_signal(self, signal: BrowserSignal) -> SignalVerdict:
        verdict = self._monitor.handle(signal)
        self.state.violation_count = self._monitor.violation_count
        self.state.is_focused = self._monitor.is_focused
        return verdict

    async def submit(self, reason: str = "manual") -> bool:
        """
        Submit once. Ignored unless in progress and not already submitting.

        Returns:
            True if the submission was accepted and the session closed.
        """
        if self.state.phase is not SessionPhase.IN_PROGRESS or self.state.is_submitting:
            logger.debug(f"submit ({reason}) ignored in phase {self.state.phase.value}")
            return False

        self.state.phase = SessionPhase.SUBMITTING
        self.state.is_submitting = True
        self._suspend()

        record = self._build_record()
        logger.info(f"Submitting exam '{self.exam.id}' ({reason}): "
                    f"{len(record.answers)}/{self.question_count} answered, "
                    f"{record.time_spent_seconds}s spent")
        try:
            await asyncio.wait_for(self._submitter(record), timeout=self.submit_timeout)
        except asyncio.TimeoutError:
            self._submit_failed(f"no response after {self.submit_timeout:g}s")
            return False
        except asyncio.CancelledError:
            self._submit_failed("submission was cancelled")
            raise
        except Exception as e:
            self._submit_failed(str(e) or type(e).__name__)
            return False

        if self.state.phase is not SessionPhase.SUBMITTING:
            logger.warning(f"Exam '{self.exam.id}' was closed while submitting; result discarded")
            return False

        self.state.phase = SessionPhase.CLOSED
        self.last_record = record
        logger.info(f"Exam '{self.exam.id}' submitted")
        self._notify(Notice(level="success", message="Exam submitted successfully!"))
        if self._on_closed:
            self._on_closed(record)
        return True

    def close(self) -> None:
        """Tear down. Safe to call more than once and from any phase."""
        self._suspend()
        if self.state.phase is not SessionPhase.CLOSED:
            logger.info(f"Exam session '{self.exam.id}' closed in phase {self.state.phase.value}")
            self.state.phase = SessionPhase.CLOSED

    # ── host page ──────────────────────────────────────────────────────────

    def question_view(self, index: int) -> Optional[Dict[str, Any]]:
        if not 0 <= index < len(self.questions):
            return None
        q = self.questions[index]
        return {
            "id": q.id,
            "type": q.type.value,
            "content": q.content,
            "points": q.points,
            **describe_control(q),
            "saved_answer": self.get_answer(q.id),
            "index": index,
            "total": len(self.questions),
        }

    def snapshot(self) -> Dict[str, Any]:
        s = self.state
        return {
            "exam_id": self.exam.id,
            "exam_title": self.exam.title,
            "phase": s.phase.value,
            "current_index": s.current_index,
            "total": self.question_count,
            "answered_count": self.answered_count,
            "progress_percent": self.progress_percent,
            "seconds_remaining": s.seconds_remaining,
            "time_label": self.time_label,
            "low_time": is_low_time(s.seconds_remaining),
            "violation_count": s.violation_count,
            "is_focused": s.is_focused,
            "is_submitting": s.is_submitting,
        }

    def drain_notices(self) -> List[Notice]:
        notices = list(self._notices)
        self._notices.clear()
        return notices

    # ── internals ──────────────────────────────────────────────────────────

    def _suspend(self) -> None:
        self._timer.stop()
        self._monitor.detach()

    def _resume(self) -> None:
        self._monitor.attach()
        self._timer.start()

    def _build_record(self) -> SubmissionRecord:
        return SubmissionRecord(
            exam_id=self.exam.id,
            exam_title=self.exam.title,
            answers=answers_payload(self.state.answers),
            submitted_at=datetime.now(timezone.utc),
            time_spent_seconds=self.exam.duration_seconds - self.state.seconds_remaining,
        )

    def _submit_failed(self, reason: str) -> None:
        if self.state.phase is not SessionPhase.SUBMITTING:
            logger.warning(f"Submit failure after close ignored: {reason}")
            return
        logger.error(f"Submit failed for exam '{self.exam.id}': {reason}")
        self.state.phase = SessionPhase.IN_PROGRESS
        self.state.is_submitting = False
        # an expired countdown stays at 0; the student retries by hand
        self._resume()
        self._notify(Notice(level="error", message=f"Failed to submit exam: {reason}. Please try again."))

    def _on_tick(self, seconds_remaining: int) -> None:
        self.state.seconds_remaining = seconds_remaining

    def _on_expire(self) -> None:
        if self.state.phase is not SessionPhase.IN_PROGRESS:
            return
        logger.info(f"Time is up for exam '{self.exam.id}', auto-submitting")
        self._notify(Notice(level="warning", message="Time is up! Submitting your exam."))
        self._scheduler.spawn(self.submit(reason="timeout"))

    def _handle_violation(self, event: ViolationEvent) -> None:
        self.state.violation_count = event.count
        if self._on_violation:
            self._on_violation(event)

    def _notify(self, notice: Notice) -> None:
        self._notices.append(notice)
