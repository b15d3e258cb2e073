"""
api/session.py — multi-user in-memory sessions (cookie based)

Each browser gets a UUID session id and its own state, including the exam
session it currently has open. Sessions expire after SESSION_TTL; an expired
or reset session closes its exam session so no countdown outlives it.
"""

import logging
import threading
import time
import uuid
from typing import Any

from config import SESSION_TTL
from exam_taking.services.exam_session import ExamSession

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}


def _new_state() -> dict[str, Any]:
    return {
        "exam_session": None,
    }


def _close_exam(state: dict[str, Any]) -> None:
    exam_session: ExamSession | None = state.get("exam_session")
    if exam_session is not None:
        exam_session.close()


def create_session() -> str:
    """Create a session and return its id."""
    sid = uuid.uuid4().hex
    with _lock:
        _sessions[sid] = _new_state()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """Session data for `sid`, None if missing or expired."""
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            _close_exam(_sessions.pop(sid))
            del _timestamps[sid]
            return None
        _timestamps[sid] = time.time()  # refresh on access
        return _sessions[sid]


def get(sid: str, key: str, default=None):
    session = get_session(sid)
    if session is None:
        return default
    return session.get(key, default)


def open_exam(sid: str, exam_session: ExamSession) -> None:
    """Replace the open exam session, closing the previous one."""
    with _lock:
        if sid not in _sessions:
            return
        _close_exam(_sessions[sid])
        _sessions[sid]["exam_session"] = exam_session
        _timestamps[sid] = time.time()


def reset(sid: str) -> None:
    """Close the open exam and clear the session."""
    with _lock:
        if sid in _sessions:
            _close_exam(_sessions[sid])
            _sessions[sid] = _new_state()
            _timestamps[sid] = time.time()


def cleanup_expired() -> int:
    """Drop expired sessions. Returns how many were removed."""
    now = time.time()
    removed = 0
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            _close_exam(_sessions.pop(sid))
            del _timestamps[sid]
            removed += 1
    return removed


def clear_all() -> None:
    """Close every session (app shutdown)."""
    with _lock:
        for state in _sessions.values():
            _close_exam(state)
        _sessions.clear()
        _timestamps.clear()
