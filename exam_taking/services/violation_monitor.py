"""
services/violation_monitor.py

Anti-cheating monitor for an exam in progress.

Counting policy: every action the monitor suppresses is a violation
(hiding the exam tab, disallowed shortcuts, the context menu). A leave/reload
attempt is answered with a confirmation prompt instead of being suppressed and
is not counted unless COUNT_NAVIGATION_AS_VIOLATION is set.

The monitor only observes between attach() and detach(). While detached
every signal gets an empty verdict and changes nothing.
"""

import logging
from typing import Callable, List, Optional, Tuple

from config import COUNT_CONTEXT_MENU_AS_VIOLATION, COUNT_NAVIGATION_AS_VIOLATION
from exam_taking.models.signal_model import (
    BrowserSignal, Notice, SignalKind, SignalVerdict, ViolationEvent,
)

logger = logging.getLogger(__name__)

LEAVE_CONFIRM_MESSAGE = "Are you sure you want to leave the exam? Your progress will be lost."
TAB_HIDDEN_MESSAGE = "Warning: You switched tabs! This has been recorded."
TAB_RETURNED_MESSAGE = "Welcome back to the exam."
SHORTCUT_MESSAGE = "This action is not allowed during the exam!"
CONTEXT_MENU_MESSAGE = "Right-click is disabled during the exam!"

# (modifier, key). "ctrl" also matches Cmd on macOS.
DISALLOWED_SHORTCUTS: List[Tuple[str, str]] = [
    ("ctrl", "c"),            # copy
    ("ctrl", "v"),            # paste
    ("ctrl+shift", "v"),      # paste as plain text
    ("ctrl", "a"),            # select all
    ("ctrl", "t"),            # new tab
    ("alt", "tab"),           # task switch
    ("", "f12"),              # dev tools
    ("ctrl+shift", "i"),
    ("ctrl+shift", "j"),
    ("ctrl+shift", "c"),
]


def is_disallowed_shortcut(signal: BrowserSignal) -> bool:
    key = signal.key.lower()
    ctrl = signal.ctrl or signal.meta
    for modifier, blocked in DISALLOWED_SHORTCUTS:
        if key != blocked:
            continue
        if modifier == "" \
                or (modifier == "ctrl" and ctrl and not signal.shift) \
                or (modifier == "alt" and signal.alt) \
                or (modifier == "ctrl+shift" and ctrl and signal.shift):
            return True
    return False


class ViolationMonitor:
    """
    Turns browser signals into violations while attached.

    Args:
        on_violation:   called with a ViolationEvent for every counted violation.
        notify:         receives the toast notices for the student.
        count_context_menu / count_navigation: counting policy switches.
    """

    def __init__(
        self,
        on_violation: Optional[Callable[[ViolationEvent], None]] = None,
        notify: Optional[Callable[[Notice], None]] = None,
        count_context_menu: bool = COUNT_CONTEXT_MENU_AS_VIOLATION,
        count_navigation: bool = COUNT_NAVIGATION_AS_VIOLATION,
    ):
        self._on_violation = on_violation
        self._notify = notify
        self.count_context_menu = count_context_menu
        self.count_navigation = count_navigation
        self.attached = False
        self.violation_count = 0
        self.is_focused = True

    # ── scope ──────────────────────────────────────────────────────────────

    def attach(self) -> None:
        if not self.attached:
            self.attached = True
            logger.info("Violation monitor attached")

    def detach(self) -> None:
        if self.attached:
            self.attached = False
            logger.info(f"Violation monitor detached (violations: {self.violation_count})")

    def reset(self) -> None:
        """Zero the counter for a new session."""
        self.violation_count = 0
        self.is_focused = True

    def __enter__(self) -> "ViolationMonitor":
        self.attach()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()

    # ── signals ────────────────────────────────────────────────────────────

    def handle(self, signal: BrowserSignal) -> SignalVerdict:
        if not self.attached:
            return SignalVerdict()

        if signal.kind is SignalKind.VISIBILITY:
            return self._handle_visibility(signal)
        if signal.kind is SignalKind.BEFORE_UNLOAD:
            if self.count_navigation:
                self._record(signal.kind, "leave/reload attempt", notice=None)
            return SignalVerdict(
                confirm_message=LEAVE_CONFIRM_MESSAGE,
                violation=self.count_navigation,
            )
        if signal.kind is SignalKind.KEYDOWN:
            if not is_disallowed_shortcut(signal):
                return SignalVerdict()
            self._record(signal.kind, f"blocked shortcut {self._describe_keys(signal)}",
                         notice=Notice(level="error", message=SHORTCUT_MESSAGE))
            return SignalVerdict(suppress_default=True, violation=True, message=SHORTCUT_MESSAGE)
        if signal.kind is SignalKind.CONTEXT_MENU:
            notice = Notice(level="error", message=CONTEXT_MENU_MESSAGE)
            if self.count_context_menu:
                self._record(signal.kind, "context menu", notice=notice)
            else:
                self._emit(notice)
            return SignalVerdict(suppress_default=True, violation=self.count_context_menu,
                                 message=CONTEXT_MENU_MESSAGE)
        return SignalVerdict()

    def _handle_visibility(self, signal: BrowserSignal) -> SignalVerdict:
        if signal.hidden:
            self.is_focused = False
            self._record(signal.kind, "exam tab hidden",
                         notice=Notice(level="error", message=TAB_HIDDEN_MESSAGE))
            return SignalVerdict(violation=True, message=TAB_HIDDEN_MESSAGE)

        self.is_focused = True
        self._emit(Notice(level="info", message=TAB_RETURNED_MESSAGE))
        return SignalVerdict(message=TAB_RETURNED_MESSAGE)

    def _record(self, kind: SignalKind, detail: str, notice: Optional[Notice]) -> None:
        self.violation_count += 1
        logger.warning(f"Violation #{self.violation_count}: {detail}")
        if notice is not None:
            self._emit(notice)
        if self._on_violation:
            self._on_violation(ViolationEvent(kind=kind, detail=detail, count=self.violation_count))

    def _emit(self, notice: Notice) -> None:
        if self._notify:
            self._notify(notice)

    @staticmethod
    def _describe_keys(signal: BrowserSignal) -> str:
        parts = [name for name, on in (("Ctrl", signal.ctrl), ("Meta", signal.meta),
                                       ("Alt", signal.alt), ("Shift", signal.shift)) if on]
        return "+".join(parts + [signal.key])
