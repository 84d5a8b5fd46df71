"""
Pydantic models for the study tracker.
Wire names follow the frontend (camelCase) through aliases; Python code uses snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from typing import List, Optional, Any
from enum import Enum


# Enums for type safety and validation
class UploadKind(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    DOCUMENT = "document"
    OTHER = "other"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GoalPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecommendationCategory(str, Enum):
    WEAK_SUBJECTS = "weak_subjects"
    TIME_MANAGEMENT = "time_management"
    CONSISTENCY = "consistency"
    GOAL_SETTING = "goal_setting"
    LEARNING_TECHNIQUE = "learning_technique"
    MOTIVATION = "motivation"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Generated content
class Question(BaseModel):
    """One multiple-choice question embedded in a quiz"""
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correct_answer: StrictInt = Field(..., alias="correctAnswer", ge=0, le=3)
    explanation: Optional[str] = None

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question text is empty")
        return value

    @field_validator("options", mode="before")
    @classmethod
    def stringify_options(cls, value: Any) -> Any:
        # numeric answers ("42", 3.14) come back as JSON numbers
        if isinstance(value, list):
            return [str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v for v in value]
        return value


class Recommendation(BaseModel):
    """Study recommendation; fields are optional because the UI fills in defaults"""
    model_config = ConfigDict(extra="allow")

    category: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None


class Attachment(BaseModel):
    """Binary payload handed whole to the generative model"""
    mime_type: str
    data: str  # base64
    filename: Optional[str] = None

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class ExtractedContent(BaseModel):
    """Result of content extraction: either text or an attachment"""
    text: Optional[str] = None
    attachment: Optional[Attachment] = None


# Requests
class SignupRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class QuizGenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_id: Optional[str] = Field(None, alias="uploadId")
    subject: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    model: Optional[str] = None


class SubmittedAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected_answer: Optional[int] = Field(None, alias="selectedAnswer")
    time_taken: Optional[float] = Field(None, alias="timeTaken")


class QuizSubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: List[SubmittedAnswer]
    total_time_taken: Optional[float] = Field(None, alias="totalTimeTaken")


class SessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")


class GoalRequest(BaseModel):
    subject: Optional[str] = None
    target_hours: Optional[float] = None
    period: Optional[str] = None


def dump_questions(questions: List[Question]) -> List[dict[str, Any]]:
    """Serialize questions with their wire names"""
    return [q.model_dump(by_alias=True) for q in questions]
