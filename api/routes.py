"""
api/routes.py — FastAPI endpoints for the exam-taking view
"""

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

import api.session as session
from exam_taking.models.session_state import SubmissionRecord
from exam_taking.models.signal_model import BrowserSignal, ViolationEvent
from exam_taking.services.exam_catalog import ExamCatalog
from exam_taking.services.exam_session import ExamSession
from exam_taking.services.submission_store import SubmissionStore
from exam_taking.services.violation_monitor import DISALLOWED_SHORTCUTS, LEAVE_CONFIRM_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class OpenExamBody(BaseModel):
    exam_id: str

class AnswerBody(BaseModel):
    question_id: str
    value: Any = None

class NavigateBody(BaseModel):
    direction: Optional[Literal["next", "previous"]] = None
    index: Optional[int] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def _catalog(request: Request) -> ExamCatalog:
    return request.app.state.catalog


def _store(request: Request) -> SubmissionStore:
    return request.app.state.submissions


def _exam_session(request: Request) -> ExamSession:
    exam_session = session.get(request.state.session_id, "exam_session")
    if exam_session is None:
        raise HTTPException(status_code=404, detail="No exam is open.")
    return exam_session


def _state_response(exam_session: ExamSession) -> dict:
    return {
        **exam_session.snapshot(),
        "notices": [n.model_dump() for n in exam_session.drain_notices()],
    }


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.get("/api/exams")
async def list_exams(request: Request):
    catalog = _catalog(request)
    return {
        "exams": [
            {
                "id": e.id,
                "title": e.title,
                "description": e.description,
                "duration_minutes": e.duration_minutes,
                "question_count": len(catalog.questions_for(e)),
            }
            for e in catalog.list_exams()
        ]
    }


@router.post("/api/open-exam")
async def open_exam(body: OpenExamBody, request: Request):
    catalog = _catalog(request)
    exam = catalog.get_exam(body.exam_id)
    if exam is None:
        raise HTTPException(status_code=404, detail="Exam not found.")

    questions = catalog.questions_for(exam)
    if not questions:
        raise HTTPException(status_code=409, detail="This exam has no questions.")

    sid = request.state.session_id

    def _on_closed(record: SubmissionRecord) -> None:
        logger.info(f"[{sid[:8]}] exam '{record.exam_id}' closed after {record.time_spent_seconds}s")

    def _on_violation(event: ViolationEvent) -> None:
        logger.warning(f"[{sid[:8]}] violation #{event.count} in exam '{exam.id}': {event.detail}")

    exam_session = ExamSession(
        exam=exam,
        questions=questions,
        submitter=_store(request).submit,
        on_closed=_on_closed,
        on_violation=_on_violation,
    )
    session.open_exam(sid, exam_session)
    return _state_response(exam_session)


@router.post("/api/start")
async def start_exam(request: Request):
    exam_session = _exam_session(request)
    if not exam_session.start():
        raise HTTPException(status_code=409, detail="The exam has already been started.")
    return _state_response(exam_session)


@router.get("/api/question/{index}")
async def get_question(index: int, request: Request):
    view = _exam_session(request).question_view(index)
    if view is None:
        raise HTTPException(status_code=404, detail="Question not found.")
    return view


@router.post("/api/answer")
async def save_answer(body: AnswerBody, request: Request):
    exam_session = _exam_session(request)
    changed = exam_session.edit_answer(body.question_id, body.value)
    return {
        "ok": changed,
        "answer": exam_session.get_answer(body.question_id),
        "answered_count": exam_session.answered_count,
    }


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    exam_session = _exam_session(request)
    if body.direction == "next":
        idx = exam_session.next()
    elif body.direction == "previous":
        idx = exam_session.previous()
    elif body.index is not None:
        idx = exam_session.go_to(body.index)
    else:
        raise HTTPException(status_code=400, detail="Give a direction or an index.")
    return {"index": idx, "ok": True}


@router.post("/api/signal")
async def report_signal(signal: BrowserSignal, request: Request):
    exam_session = _exam_session(request)
    verdict = exam_session.report_signal(signal)
    return {
        **verdict.model_dump(),
        "violation_count": exam_session.state.violation_count,
        "is_focused": exam_session.state.is_focused,
    }


@router.post("/api/submit")
async def submit_exam(request: Request):
    exam_session = _exam_session(request)
    submitted = await exam_session.submit()
    return {"submitted": submitted, **_state_response(exam_session)}


@router.get("/api/state")
async def get_state(request: Request):
    return _state_response(_exam_session(request))


@router.get("/api/monitor-policy")
async def monitor_policy():
    return {
        "disallowed_shortcuts": [
            {"modifier": modifier, "key": key} for modifier, key in DISALLOWED_SHORTCUTS
        ],
        "leave_confirm_message": LEAVE_CONFIRM_MESSAGE,
    }


@router.post("/api/close")
async def close_exam(request: Request):
    session.reset(request.state.session_id)
    return {"ok": True}
