"""Question records."""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class QuestionCategory(str, Enum):
    MATH = "MATH"
    QUIZ = "QUIZ"
    PUZZLE = "PUZZLE"
    TYPING = "TYPING"


class Question(BaseModel):
    """A playable question. Custom ones are stored, the rest are ephemeral."""

    id: str
    type: QuestionCategory
    question_text: str
    correct_answer: str
    options: Optional[List[str]] = None  # multiple choice only

    class Config:
        alias_generator = to_camel
        populate_by_name = True
