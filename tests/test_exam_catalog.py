"""
Tests for the exam catalog and the question/exam models it loads.
"""

import json

import pytest
from pydantic import ValidationError

from exam_taking.models.question_model import ExamDefinition, Question, QuestionType
from exam_taking.services.exam_catalog import SAMPLE_EXAM, ExamCatalog


BANK = {
    "exams": [
        {
            "id": "midterm",
            "title": "Midterm",
            "description": "Chapters 1-3",
            "duration": 45,
            "questions": ["q2", "q1", "missing"],
            "published": True,
            "created_by": "teacher-1",
        },
        {"id": "broken", "title": "No duration", "questions": []},
    ],
    "questions": [
        {
            "id": "q1", "type": "single-choice", "content": "Pick one",
            "options": ["A", "B"], "correct_answer": "A", "points": 2, "category": "basics",
        },
        {"id": "q2", "type": "short-answer", "content": "Explain", "correct_answer": "", "points": 5},
        {"id": "q3", "type": "multiple-choice", "content": "Only one option", "options": ["A"]},
    ],
}


class TestModels:
    def test_source_aliases(self):
        exam = ExamDefinition.model_validate({"id": "e", "title": "T", "duration": 30, "questions": ["a"]})
        assert exam.duration_minutes == 30
        assert exam.duration_seconds == 1800
        assert exam.question_ids == ["a"]

    def test_duplicate_question_ids_dropped(self):
        exam = ExamDefinition(id="e", title="T", duration_minutes=1, question_ids=["a", "b", "a"])
        assert exam.question_ids == ["a", "b"]

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            ExamDefinition(id="e", title="T", duration_minutes=0)

    def test_choice_question_needs_two_options(self):
        with pytest.raises(ValidationError):
            Question(id="q", type="single-choice", content="?", options=["only"])

    def test_answer_key_not_loaded(self):
        q = Question.model_validate(BANK["questions"][0])
        assert q.type is QuestionType.SINGLE_CHOICE
        assert not hasattr(q, "correct_answer")


class TestExamCatalog:
    def test_invalid_entries_skipped(self):
        catalog = ExamCatalog.from_dict(BANK)

        assert [e.id for e in catalog.list_exams()] == ["midterm"]
        exam = catalog.get_exam("midterm")
        assert [q.id for q in catalog.questions_for(exam)] == ["q2", "q1"]

    def test_unknown_exam(self):
        assert ExamCatalog.sample().get_exam("nope") is None

    def test_bank_without_exams_rejected(self):
        with pytest.raises(ValueError):
            ExamCatalog.from_dict({"exams": [], "questions": []})

    def test_load_file(self, tmp_path):
        path = tmp_path / "exams.json"
        path.write_text(json.dumps(BANK), encoding="utf-8")

        catalog = ExamCatalog.load(str(path))
        assert catalog.get_exam("midterm").duration_minutes == 45

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "exams.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            ExamCatalog.load(str(path))

    def test_missing_file_falls_back_to_sample(self, tmp_path):
        catalog = ExamCatalog.load(str(tmp_path / "absent.json"))
        assert catalog.list_exams() == [SAMPLE_EXAM]

    def test_sample_covers_every_question_type(self):
        catalog = ExamCatalog.sample()
        types = {q.type for q in catalog.questions_for(SAMPLE_EXAM)}
        assert types == set(QuestionType)
