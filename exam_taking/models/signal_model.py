"""
models/signal_model.py

Browser signals reported by the host page, the monitor's verdict on each,
and the toast-style notices shown back to the student.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class SignalKind(str, Enum):
    VISIBILITY = "visibility"       # document.visibilitychange
    BEFORE_UNLOAD = "beforeunload"  # leave / reload attempt
    KEYDOWN = "keydown"
    CONTEXT_MENU = "contextmenu"


class BrowserSignal(BaseModel):
    kind: SignalKind
    hidden: bool = Field(default=False, description="document.hidden (visibility only)")
    key: str = Field(default="", description="KeyboardEvent.key (keydown only)")
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False


class SignalVerdict(BaseModel):
    """What the host page should do with a signal."""

    suppress_default: bool = False
    confirm_message: Optional[str] = None
    violation: bool = False
    message: Optional[str] = None


class Notice(BaseModel):
    level: Literal["success", "info", "warning", "error"]
    message: str


class ViolationEvent(BaseModel):
    kind: SignalKind
    detail: str
    count: int
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
