from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from questionsets.models import ESSAY, FILL_IN_THE_BLANKS, MULTIPLE_CHOICE, TRUE_FALSE

TRUE_VALUES = {"true", "t", "1", "yes"}
FALSE_VALUES = {"false", "f", "0", "no"}


def normalise_true_false(value):
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return "true"
    if text in FALSE_VALUES:
        return "false"
    raise ValueError("true-false questions need a true or false correct answer")


class QuestionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    type: Literal[MULTIPLE_CHOICE, TRUE_FALSE, FILL_IN_THE_BLANKS, ESSAY]
    question: str = Field(min_length=1)
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[Any] = Field(default=None, alias="correctAnswer")
    points: int = Field(default=1, ge=0)
    order: Optional[int] = Field(default=None, ge=1)

    @field_validator("options", mode="before")
    @classmethod
    def split_options(cls, value):
        # Spreadsheet style "A. Paris|B. Lyon" strings are accepted as well as lists
        if value is None:
            return []
        if isinstance(value, str):
            return [option.strip() for option in value.split("|") if option.strip()]
        return value

    @model_validator(mode="after")
    def check_answer_for_type(self):
        answer = self.correct_answer
        if isinstance(answer, str):
            answer = answer.strip()

        if self.type == MULTIPLE_CHOICE:
            if not self.options:
                raise ValueError("multiple-choice questions need options")
            if answer in (None, ""):
                raise ValueError("multiple-choice questions need a correct answer")
            if not any(str(option).strip().startswith(f"{answer}.") for option in self.options):
                raise ValueError(f"multiple-choice correct answer {answer} does not match an option label")
        elif self.type == TRUE_FALSE:
            if answer in (None, ""):
                raise ValueError("true-false questions need a correct answer")
            answer = normalise_true_false(answer)
        elif self.type == FILL_IN_THE_BLANKS:
            if answer in (None, ""):
                raise ValueError("fill-in-the-blanks questions need a correct answer")

        self.correct_answer = "" if answer is None else str(answer)
        return self

    def model_fields_for_question(self):
        return {
            "type": self.type,
            "question_text": self.question,
            "options": self.options if self.type == MULTIPLE_CHOICE else [],
            "correct_answer": self.correct_answer,
            "points": self.points,
        }


class QuestionSetCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    questions: List[QuestionPayload] = Field(min_length=1)


class QuestionSetUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    questions: Optional[List[QuestionPayload]] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class QuestionsAppend(BaseModel):
    questions: List[QuestionPayload] = Field(min_length=1)


class QuestionUpdate(BaseModel):
    """Partial edit of one question, validated again as a whole once merged."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: Optional[str] = None
    question: Optional[str] = None
    options: Optional[Any] = None
    correct_answer: Optional[Any] = Field(default=None, alias="correctAnswer")
    points: Optional[int] = None
    order: Optional[int] = None

    def merged_with(self, question):
        current = {
            "type": question.type,
            "question": question.question_text,
            "options": question.options,
            "correctAnswer": question.correct_answer,
            "points": question.points,
            "order": question.order,
        }
        current.update(self.model_dump(by_alias=True, exclude_unset=True))
        return current
