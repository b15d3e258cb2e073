"""
Shared fixtures: a manual-clock scheduler, a recording submitter and small exams.
"""

import asyncio

import pytest

from exam_taking.models.question_model import ExamDefinition, Question
from exam_taking.services.exam_session import ExamSession
from exam_taking.services.submission_store import SubmissionError


class FakeHandle:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Runs timer callbacks only when the test advances the clock."""

    def __init__(self):
        self.now = 0.0
        self.handles = []
        self.spawned = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def spawn(self, coro):
        self.spawned.append(coro)

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            handle.fired = True
            self.now = handle.due
            handle.callback()
        self.now = target

    def run_spawned(self):
        coros, self.spawned = self.spawned, []

        async def _run():
            return [await c for c in coros]

        return asyncio.run(_run())


class RecordingSubmitter:
    """Async submitter that records calls and can fail the first N of them."""

    def __init__(self, fail_times=0, delay=0.0):
        self.calls = []
        self.fail_times = fail_times
        self.delay = delay

    async def __call__(self, record):
        self.calls.append(record)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise SubmissionError("backend unavailable")


def make_question(qid, qtype="single-choice", options=("A", "B", "C", "D")):
    choice = qtype in ("single-choice", "multiple-choice")
    return Question(
        id=qid,
        type=qtype,
        content=f"Question {qid}",
        points=1,
        options=list(options) if choice else None,
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def submitter():
    return RecordingSubmitter()


@pytest.fixture
def mixed_questions():
    return [
        make_question("q1", "single-choice"),
        make_question("q2", "multiple-choice", options=("A", "B", "C")),
        make_question("q3", "fill-blank"),
        make_question("q4", "short-answer"),
    ]


@pytest.fixture
def mixed_exam(mixed_questions):
    return ExamDefinition(
        id="exam-1",
        title="Mixed Exam",
        duration_minutes=5,
        question_ids=[q.id for q in mixed_questions],
    )


@pytest.fixture
def session(mixed_exam, mixed_questions, submitter, scheduler):
    return ExamSession(mixed_exam, mixed_questions, submitter, scheduler=scheduler)
