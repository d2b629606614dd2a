"""
Data models for SmartNotes
Notes, quiz items, chat transcript and the shapes returned by the AI provider.

Field names are snake_case in Python and camelCase in the persisted JSON,
which keeps the stored format readable by earlier releases.
"""

import time
import uuid
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


class StoredModel(BaseModel):
    """Base model that (de)serializes with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dict for persistence; unset optional fields are left out"""
        return self.model_dump(by_alias=True, exclude_none=True)


class User(StoredModel):
    """A registered user. The password is kept in clear text."""
    id: str
    username: str
    password: str


class QuizItem(StoredModel):
    """One quiz question, the student's answer and an optional grade"""
    id: str
    question: str
    user_answer: str = ""
    is_correct: Optional[bool] = None
    feedback: Optional[str] = None

    @property
    def is_graded(self) -> bool:
        return self.is_correct is not None and self.feedback is not None

    @property
    def is_answered(self) -> bool:
        return self.user_answer.strip() != ""

    def with_answer(self, answer: str) -> "QuizItem":
        """Copy with a new answer; any previous grade is cleared"""
        return self.model_copy(update={"user_answer": answer, "is_correct": None, "feedback": None})

    def with_grade(self, is_correct: bool, feedback: str) -> "QuizItem":
        return self.model_copy(update={"is_correct": is_correct, "feedback": feedback})


class AIAnalysis(StoredModel):
    summary: List[str]
    questions: List[QuizItem]


class Attachment(StoredModel):
    """Code sample or diagram (SVG markup) returned with a chat reply"""
    type: Literal["code", "image"]
    title: str
    content: str
    language: Optional[str] = None


class ChatMessage(StoredModel):
    id: str
    role: Literal["user", "model"]
    content: str
    attachment: Optional[Attachment] = None
    timestamp: int


class Note(StoredModel):
    id: str
    title: str = ""
    content: str = ""
    created_at: int
    updated_at: int
    analysis: Optional[AIAnalysis] = None
    chat_history: Optional[List[ChatMessage]] = None

    @classmethod
    def create(cls) -> "Note":
        ts = now_ms()
        return cls(id=new_id(), title="", content="", created_at=ts, updated_at=ts)

    @property
    def has_content(self) -> bool:
        return self.content.strip() != ""

    @property
    def word_count(self) -> int:
        text = self.content.strip()
        return len(text.split()) if text else 0

    @property
    def char_count(self) -> int:
        return len(self.content)

    def touched(self, **changes) -> "Note":
        """Copy with the given field changes and a fresh updated_at"""
        changes["updated_at"] = now_ms()
        return self.model_copy(update=changes)

    def with_title(self, title: str) -> "Note":
        return self.touched(title=title)

    def with_content(self, content: str) -> "Note":
        return self.touched(content=content)

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on title or content"""
        needle = term.lower()
        return needle in self.title.lower() or needle in self.content.lower()


# Raw provider results, before they are folded into a note

class AnalysisResponse(BaseModel):
    summary: List[str]
    questions: List[str]


class GradingRequestItem(BaseModel):
    id: str
    question: str
    answer_text: str


class Evaluation(StoredModel):
    question_id: str
    is_correct: bool
    feedback: str


class ChatTurn(BaseModel):
    """Role and text of a prior message, as replayed to the provider"""
    role: Literal["user", "model"]
    text: str


class ChatReply(BaseModel):
    text: str
    attachment: Optional[Attachment] = None
