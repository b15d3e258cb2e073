"""
services/exam_catalog.py

Read-only exam and question source.

The bank file uses the exam database's own shape:
    {"exams": [{"id", "title", "duration", "questions": [ids], ...}],
     "questions": [{"id", "type", "content", "options", "points", ...}]}
Without a bank file the built-in sample exam is served.
"""

import json
import logging
import os
from typing import Dict, List, Optional

from pydantic import ValidationError

from exam_taking.models.question_model import ExamDefinition, Question

logger = logging.getLogger(__name__)


# ── Sample exam ──────────────────────────────────────────────────────────────
SAMPLE_QUESTIONS: List[Question] = [
    Question(
        id="q1", type="single-choice", points=2,
        content="Which of the following does NOT terminate an offer in a trade contract?",
        options=["Revocation of the offer", "Rejection of the offer", "Counter-offer", "Public notice of the offer"],
    ),
    Question(
        id="q2", type="single-choice", points=2,
        content="Under Incoterms 2020, which term places the greatest risk on the seller?",
        options=["EXW", "FCA", "CIF", "DDP"],
    ),
    Question(
        id="q3", type="multiple-choice", points=3,
        content="Which of the following are documents of title or payment instruments in a documentary collection?",
        options=["Bill of lading", "Bill of exchange", "Sea waybill", "Packing list"],
    ),
    Question(
        id="q4", type="fill-blank", points=1,
        content="FCL stands for Full Container ____.",
    ),
    Question(
        id="q5", type="short-answer", points=5,
        content="Explain the difference between D/P and D/A collections.",
    ),
]

SAMPLE_EXAM = ExamDefinition(
    id="sample",
    title="International Trade - Sample Exam",
    description="Five questions covering every question type.",
    duration_minutes=15,
    question_ids=[q.id for q in SAMPLE_QUESTIONS],
)


class ExamCatalog:
    """In-memory catalog of exams and questions."""

    def __init__(self, exams: List[ExamDefinition], questions: List[Question]):
        self._exams: Dict[str, ExamDefinition] = {e.id: e for e in exams}
        self._questions: Dict[str, Question] = {q.id: q for q in questions}

    @classmethod
    def sample(cls) -> "ExamCatalog":
        return cls([SAMPLE_EXAM], SAMPLE_QUESTIONS)

    @classmethod
    def from_dict(cls, data: dict) -> "ExamCatalog":
        """
        Build a catalog from bank data. Invalid entries are skipped and logged,
        a bank with no valid exam raises ValueError.
        """
        exams: List[ExamDefinition] = []
        questions: List[Question] = []

        for raw in data.get("questions", []):
            try:
                questions.append(Question.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid question {raw.get('id')!r}: {e.error_count()} error(s)")

        for raw in data.get("exams", []):
            try:
                exams.append(ExamDefinition.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid exam {raw.get('id')!r}: {e.error_count()} error(s)")

        if not exams:
            raise ValueError("Exam bank contains no valid exam.")
        return cls(exams, questions)

    @classmethod
    def load(cls, path: Optional[str]) -> "ExamCatalog":
        """Load the bank at `path`, or the sample catalog if there is none."""
        if not path or not os.path.exists(path):
            logger.info(f"No exam bank at {path!r}, serving the sample exam")
            return cls.sample()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in exam bank: {e}")

        catalog = cls.from_dict(data)
        logger.info(f"Loaded exam bank {path}: {len(catalog._exams)} exams, {len(catalog._questions)} questions")
        return catalog

    def list_exams(self) -> List[ExamDefinition]:
        return list(self._exams.values())

    def get_exam(self, exam_id: str) -> Optional[ExamDefinition]:
        return self._exams.get(exam_id)

    def questions_for(self, exam: ExamDefinition) -> List[Question]:
        """The exam's questions in exam order. Ids without a question are dropped."""
        missing = [qid for qid in exam.question_ids if qid not in self._questions]
        if missing:
            logger.warning(f"Exam '{exam.id}' references unknown questions: {missing}")
        return [self._questions[qid] for qid in exam.question_ids if qid in self._questions]
