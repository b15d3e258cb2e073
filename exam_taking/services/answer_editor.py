"""
services/answer_editor.py

Maps a question's type to its input control and normalises raw user input
into the answer shape for that type.
Pure functions: no session state, no UI code.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from exam_taking.models.answer_model import (
    Answer, AnswerMap, MultipleChoiceAnswer, SingleChoiceAnswer, TextAnswer,
)
from exam_taking.models.question_model import Question, QuestionType

logger = logging.getLogger(__name__)

_CONTROLS = {
    QuestionType.SINGLE_CHOICE: "radio",
    QuestionType.MULTIPLE_CHOICE: "checkbox",
    QuestionType.FILL_BLANK: "text",
    QuestionType.SHORT_ANSWER: "textarea",
}


def describe_control(question: Question) -> Dict[str, Any]:
    """
    Control descriptor for the host page.

    Returns:
        {"control": "radio" | "checkbox" | "text" | "textarea",
         "options": [...] (choice types) or []}
    """
    return {
        "control": _CONTROLS[question.type],
        "options": list(question.options or []) if question.type.is_choice else [],
    }


def apply_edit(question: Question, current: Optional[Answer], value: Any) -> Optional[Answer]:
    """
    Apply one user edit to a question's answer.

    Args:
        question: the question being answered.
        current:  the answer stored so far (None if unanswered).
        value:    raw input. single-choice: the chosen option.
                  multiple-choice: the option being toggled.
                  fill-blank / short-answer: the full text.

    Returns:
        The new answer, or None when the question ends up unanswered
        (multiple-choice with every option unchecked).
        Input that does not fit the question (non-string, unknown option)
        leaves `current` unchanged.
    """
    if not isinstance(value, str):
        logger.debug(f"Ignoring non-text input for question {question.id}: {value!r}")
        return current

    if question.type is QuestionType.SINGLE_CHOICE:
        if value not in question.options:
            return current
        return SingleChoiceAnswer(value=value)

    if question.type is QuestionType.MULTIPLE_CHOICE:
        if value not in question.options:
            return current
        selected = list(current.values) if isinstance(current, MultipleChoiceAnswer) else []
        if value in selected:
            selected = [option for option in selected if option != value]
        else:
            selected.append(value)
        return MultipleChoiceAnswer(values=selected) if selected else None

    # fill-blank / short-answer: stored verbatim
    return TextAnswer(question_type=question.type.value, value=value)


def answers_payload(answers: AnswerMap) -> Dict[str, Union[str, List[str]]]:
    """AnswerMap -> plain {question_id: str | list[str]} for submission."""
    return {qid: answer.payload() for qid, answer in answers.items()}
