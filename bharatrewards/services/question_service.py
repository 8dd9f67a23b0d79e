"""Question supply for quiz sessions.

Questions come from three sources, in priority order:
1. admin-authored custom questions for the category
2. OpenAI generation for whatever is still missing
3. the built-in fallback set, when generation is unavailable or fails

Generation problems never reach the caller; they are logged and recorded on
the returned batch.
"""
import logging
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple
from fastapi import Depends
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from bharatrewards.core.config import settings
from bharatrewards.models import Question, QuestionCategory
from bharatrewards.services.fallback_questions import get_fallback_questions
from bharatrewards.services.openai_service import OpenAIService
from bharatrewards.services.storage_service import StorageService, get_storage

logger = logging.getLogger(__name__)

QUIZ_OPTION_COUNT = 4


class QuestionSource(str, Enum):
    CUSTOM = "CUSTOM"
    GENERATED = "GENERATED"
    FALLBACK = "FALLBACK"


class GeneratedQuestion(BaseModel):
    """Shape one generated item must have before it is served."""

    question_text: str = Field(min_length=1)
    correct_answer: str = Field(min_length=1)
    options: Optional[List[str]] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class GeneratedQuizQuestion(GeneratedQuestion):
    options: List[str]

    @model_validator(mode="after")
    def check_options(self):
        if len(self.options) != QUIZ_OPTION_COUNT:
            raise ValueError(f"expected {QUIZ_OPTION_COUNT} options, got {len(self.options)}")
        return self


@dataclass
class QuestionBatch:
    """Questions for one quiz, grouped by where they came from."""

    category: QuestionCategory
    requested: int
    custom: List[Question] = field(default_factory=list)
    generated: List[Question] = field(default_factory=list)
    fallback: List[Question] = field(default_factory=list)
    generation_error: Optional[str] = None

    @property
    def questions(self) -> List[Question]:
        return self.custom + self.generated + self.fallback

    def items(self) -> Iterator[Tuple[QuestionSource, Question]]:
        for q in self.custom:
            yield QuestionSource.CUSTOM, q
        for q in self.generated:
            yield QuestionSource.GENERATED, q
        for q in self.fallback:
            yield QuestionSource.FALLBACK, q

    def __len__(self) -> int:
        return len(self.custom) + len(self.generated) + len(self.fallback)


class QuestionService:
    """Blends custom, generated and fallback questions up to a target count."""

    def __init__(
        self,
        storage: StorageService,
        generator: Optional[Any] = None,
        rng: Optional[random.Random] = None,
    ):
        self.storage = storage
        self.generator = generator  # anything with generate_questions(category, count)
        self.rng = rng or random.Random()

    def fetch_questions(self, category: str, count: int = settings.DEFAULT_QUESTION_COUNT) -> QuestionBatch:
        category = QuestionCategory(category)
        batch = QuestionBatch(category=category, requested=count)
        if count <= 0:
            return batch

        custom = self.storage.list_custom_questions(category)
        self.rng.shuffle(custom)
        batch.custom = custom[:count]

        remaining = count - len(batch.custom)
        if remaining <= 0:
            return batch

        if self.generator is None:
            logger.warning("No API key configured. Using fallback questions for %s.", category.value)
            batch.fallback = get_fallback_questions(category, remaining)
            return batch

        try:
            batch.generated = self._generate(category, remaining)
        except Exception as e:
            logger.error("Question generation failed for %s: %s", category.value, e, exc_info=True)
            batch.generation_error = str(e)
            batch.fallback = get_fallback_questions(category, remaining)
            return batch

        shortfall = remaining - len(batch.generated)
        if shortfall > 0:
            logger.warning(
                "Generator returned %d of %d %s questions; topping up from fallback",
                len(batch.generated), remaining, category.value,
            )
            batch.fallback = get_fallback_questions(category, shortfall)

        return batch

    def _generate(self, category: QuestionCategory, count: int) -> List[Question]:
        raw_items = self.generator.generate_questions(category.value, count)
        if not isinstance(raw_items, list):
            raise ValueError("Generator did not return a list")

        schema = GeneratedQuizQuestion if category == QuestionCategory.QUIZ else GeneratedQuestion
        questions = []
        try:
            for item in raw_items[:count]:
                parsed = schema.model_validate(item)
                questions.append(Question(
                    id=f"{category.value}-{uuid.uuid4().hex}",
                    type=category,
                    question_text=parsed.question_text,
                    correct_answer=parsed.correct_answer,
                    options=parsed.options,
                ))
        except ValidationError as e:
            raise ValueError(f"Malformed generated question: {e}")

        return questions


def get_question_service(storage: StorageService = Depends(get_storage)) -> QuestionService:
    generator = OpenAIService() if settings.OPENAI_API_KEY else None
    return QuestionService(storage, generator=generator)
