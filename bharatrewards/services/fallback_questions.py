"""Built-in questions served when generation is unavailable or fails."""
import uuid
from typing import Dict, List, Optional

from bharatrewards.models import Question, QuestionCategory


FALLBACK_QUESTIONS: Dict[QuestionCategory, List[dict]] = {
    QuestionCategory.MATH: [
        {"question_text": "12 + 15 = ?", "correct_answer": "27"},
        {"question_text": "10 * 5 = ?", "correct_answer": "50"},
        {"question_text": "100 / 4 = ?", "correct_answer": "25"},
        {"question_text": "81 - 29 = ?", "correct_answer": "52"},
        {"question_text": "7 * 8 = ?", "correct_answer": "56"},
    ],
    QuestionCategory.QUIZ: [
        {
            "question_text": "National Bird of India?",
            "options": ["Peacock", "Parrot", "Eagle", "Crow"],
            "correct_answer": "Peacock",
        },
        {
            "question_text": "Currency of India?",
            "options": ["Dollar", "Yen", "Rupee", "Euro"],
            "correct_answer": "Rupee",
        },
        {
            "question_text": "Capital of India?",
            "options": ["Mumbai", "New Delhi", "Kolkata", "Chennai"],
            "correct_answer": "New Delhi",
        },
    ],
    QuestionCategory.PUZZLE: [
        {
            "question_text": "What comes once in a minute, twice in a moment, but never in a thousand years?",
            "correct_answer": "m",
        },
        {
            "question_text": "What has keys but can't open locks?",
            "correct_answer": "piano",
        },
    ],
    QuestionCategory.TYPING: [
        {
            "question_text": "India is the seventh-largest country by area.",
            "correct_answer": "India is the seventh-largest country by area.",
        },
        {
            "question_text": "The Ganga is the longest river in India.",
            "correct_answer": "The Ganga is the longest river in India.",
        },
    ],
}


def get_fallback_questions(category: str, limit: Optional[int] = None) -> List[Question]:
    """Fresh copies of the fallback set for `category`, first `limit` items.

    Raises ValueError for categories outside QuestionCategory.
    """
    category = QuestionCategory(category)
    items = FALLBACK_QUESTIONS[category]
    if limit is not None:
        items = items[:max(limit, 0)]

    return [
        Question(id=f"fb-{uuid.uuid4().hex}", type=category, **item)
        for item in items
    ]
