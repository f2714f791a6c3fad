from typing import Any, List, Literal, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

from quiz.models import QUESTION_SETS_PER_QUIZ


class SubmittedAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(alias="questionId")
    answer: Optional[Any] = None


class QuestionSetSubmissionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_set_order: int = Field(alias="questionSetOrder", ge=1, le=QUESTION_SETS_PER_QUIZ)
    answers: List[SubmittedAnswer]
    is_final_submission: bool = Field(default=False, alias="isFinalSubmission")

    @field_validator("answers")
    @classmethod
    def unique_questions(cls, answers):
        question_ids = [answer.question_id for answer in answers]
        if len(question_ids) != len(set(question_ids)):
            raise ValueError("each question may only be answered once")
        return answers


class OpenQuizSubmissionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: str
    name: str = Field(min_length=1, max_length=255)
    question_set_combination: List[int] = Field(alias="questionSetCombination",
                                                min_length=QUESTION_SETS_PER_QUIZ,
                                                max_length=QUESTION_SETS_PER_QUIZ)
    answers: List[SubmittedAnswer] = Field(default_factory=list)
    time_taken: int = Field(default=0, alias="timeTaken", ge=0)
    submission_type: Literal["manual", "timeout", "focus-loss"] = Field(default="manual", alias="submissionType")

    @field_validator("email")
    @classmethod
    def valid_email(cls, email):
        email = email.lower()
        try:
            validate_email(email)
        except DjangoValidationError:
            raise ValueError("Please provide a valid email address")
        return email


class ManualGrade(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(alias="questionId")
    points_awarded: int = Field(alias="pointsAwarded", ge=0)


class ManualGradingPayload(BaseModel):
    grades: List[ManualGrade] = Field(min_length=1)
    feedback: Optional[str] = None
