"""
services/submission_store.py

Receives finished exams. Keeps them in memory and, when a file path is
given, appends each one as a JSON line. File writes run off the event loop.
"""

import asyncio
import logging
import os
from typing import List, Optional

from exam_taking.models.session_state import SubmissionRecord

logger = logging.getLogger(__name__)


class SubmissionError(RuntimeError):
    """The submission could not be stored. The session may retry."""


class SubmissionStore:
    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._records: List[SubmissionRecord] = []

    async def submit(self, record: SubmissionRecord) -> None:
        if self.path:
            try:
                await asyncio.to_thread(self._append_line, record.model_dump_json())
            except OSError as e:
                logger.error(f"Could not write submission for exam '{record.exam_id}': {e}")
                raise SubmissionError(f"could not save submission ({e.strerror or e})") from e
        self._records.append(record)
        logger.info(f"Stored submission for exam '{record.exam_id}' ({len(record.answers)} answers)")

    def list_submissions(self, exam_id: Optional[str] = None) -> List[SubmissionRecord]:
        if exam_id is None:
            return list(self._records)
        return [r for r in self._records if r.exam_id == exam_id]

    def _append_line(self, line: str) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
