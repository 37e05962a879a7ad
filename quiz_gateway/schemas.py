# quiz_gateway/schemas.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union

from quiz_gateway.config import DEFAULT_DIFFICULTY, DEFAULT_QUESTION_COUNT


class Question(BaseModel):
    id: Union[int, str] = Field(..., description="1-based position unless the model supplied one")
    question: str = ""
    # Not forced to 4 items here, the normalizer warns instead
    options: List[str] = Field(default_factory=list)
    correctAnswer: int = Field(0, ge=0, le=3)
    explanation: str = ""
    difficulty: str
    topic: str
    imageUrl: Optional[str] = None


class Quiz(BaseModel):
    questions: List[Question]


class TopicRequest(BaseModel):
    topic: Optional[str] = None
    difficulty: str = DEFAULT_DIFFICULTY
    questionCount: int = Field(DEFAULT_QUESTION_COUNT, ge=1)


class QuizMetadata(BaseModel):
    source: Literal["pdf", "topic", "image"]
    filename: Optional[str] = None
    topic: Optional[str] = None
    generatedAt: str
    difficulty: str
    # length of the normalized quiz, not the requested count
    questionCount: int


class QuizResponse(BaseModel):
    success: bool = True
    quiz: Quiz
    metadata: QuizMetadata


class HealthCheck(BaseModel):
    ok: bool
    message: str


class HealthStatus(BaseModel):
    status: str
    geminiApi: Literal["connected", "error"]
    geminiMessage: str
    timestamp: str
