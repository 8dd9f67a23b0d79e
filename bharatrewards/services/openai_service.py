"""OpenAI LLM service for question generation."""
import json
from typing import List, Dict, Optional
from openai import OpenAI
from bharatrewards.core.config import settings


CATEGORY_PROMPTS = {
    "MATH": (
        "Generate {count} short arithmetic problems with a single numeric answer.",
        '{{"questions": [{{"questionText": "5 + 5 = ?", "correctAnswer": "10"}}]}}',
    ),
    "QUIZ": (
        "Generate {count} Indian trivia questions, each with exactly 4 options "
        "and correctAnswer equal to the text of one option.",
        '{{"questions": [{{"questionText": "Q?", "options": ["A", "B", "C", "D"], "correctAnswer": "A"}}]}}',
    ),
    "PUZZLE": (
        "Generate {count} riddles with a one or two word answer.",
        '{{"questions": [{{"questionText": "Riddle?", "correctAnswer": "Ans"}}]}}',
    ),
    "TYPING": (
        "Generate {count} short facts about India for a typing exercise. "
        "correctAnswer must be identical to questionText.",
        '{{"questions": [{{"questionText": "Fact.", "correctAnswer": "Fact."}}]}}',
    ),
}


class OpenAIService:
    """Service for interacting with OpenAI API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initialize OpenAI client with API key from settings."""
        self.client = OpenAI(api_key=api_key or settings.OPENAI_API_KEY)
        self.model = model or getattr(settings, 'OPENAI_MODEL', 'gpt-4o-mini')

    def generate_questions(self, category: str, count: int) -> List[Dict]:
        """
        Generate quiz questions for a category using OpenAI.

        Args:
            category: MATH, QUIZ, PUZZLE or TYPING
            count: Number of questions to generate

        Returns:
            List of raw question dictionaries:
            {
                "questionText": str,
                "correctAnswer": str,
                "options": List[str] (QUIZ only)
            }

        Raises:
            ValueError: unknown category, API failure or unparseable response
        """
        user_prompt = self._build_user_prompt(category, count)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._build_system_prompt()},
                    {"role": "user", "content": user_prompt}
                ],
                temperature=0.7,
                response_format={"type": "json_object"}
            )

            content = response.choices[0].message.content
            result = json.loads(content or "{}")

        except Exception as e:
            raise ValueError(f"Error generating questions from OpenAI: {str(e)}")

        if isinstance(result, list):
            return result
        if isinstance(result, dict):
            return result.get("questions", [])
        raise ValueError(f"Unexpected response shape from OpenAI: {type(result).__name__}")

    def _build_system_prompt(self) -> str:
        return """You write questions for a quick quiz game played by Indian users.
Keep every question short and answerable in a few seconds.
Return ONLY valid JSON: an object with a "questions" array."""

    def _build_user_prompt(self, category: str, count: int) -> str:
        """Build the category prompt. Unknown categories are a configuration error."""
        if category not in CATEGORY_PROMPTS:
            raise ValueError(f"No prompt configured for category: {category}")

        instruction, example = CATEGORY_PROMPTS[category]
        return (
            f"{instruction.format(count=count)}\n"
            f"Generate exactly {count} items.\n"
            f"JSON format: {example.format()}"
        )
