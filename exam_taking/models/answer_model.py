"""
models/answer_model.py

Answer values, tagged by question type.

  - single-choice             -> SingleChoiceAnswer.value   (one option string)
  - multiple-choice           -> MultipleChoiceAnswer.values (ordered, no duplicates)
  - fill-blank / short-answer -> TextAnswer.value           (verbatim text)
"""

from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, Field, field_validator


class SingleChoiceAnswer(BaseModel):
    question_type: Literal["single-choice"] = "single-choice"
    value: str

    def payload(self) -> str:
        return self.value


class MultipleChoiceAnswer(BaseModel):
    question_type: Literal["multiple-choice"] = "multiple-choice"
    values: List[str] = Field(default_factory=list)

    @field_validator('values')
    @classmethod
    def no_duplicates(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate options in selection: {v}")
        return v

    def payload(self) -> List[str]:
        return list(self.values)


class TextAnswer(BaseModel):
    question_type: Literal["fill-blank", "short-answer"]
    value: str

    def payload(self) -> str:
        return self.value


Answer = Annotated[
    Union[SingleChoiceAnswer, MultipleChoiceAnswer, TextAnswer],
    Field(discriminator="question_type"),
]

# question id -> answer
AnswerMap = Dict[str, Answer]
