"""AI quiz-question generator backed by an OpenRouter chat-completions endpoint."""
import json
import logging
import random
import re
from typing import Any, List, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from app.config import settings
from app.config.puzzles_config import (
    PUZZLE_CATEGORIES, DEFAULT_PUZZLE_COUNT, MAX_PROMPT_CATEGORIES, FALLBACK_QUESTIONS
)
from app.modules.puzzles.schemas import GeneratedQuestion

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

PROMPT_TEMPLATE = """Generate {count} unique, creative, and engaging quiz questions in Somali language about the following categories: {categories}.

IMPORTANT INSTRUCTIONS:
1. Make questions diverse and fun - avoid repetitive themes
2. Include both factual and opinion-based questions
3. Make questions culturally relevant to Somalia and East Africa
4. Mix easy and challenging questions
5. Include at least one question that encourages personal expression
6. For multiple choice questions, make options thoughtful and occasionally humorous
7. For open-ended questions, design them to reveal personality traits

Each question should follow this format:
1. For multiple choice questions (about 70% of questions):
{{
  "category": "category name",
  "question": "The question text in Somali",
  "options": ["Option 1", "Option 2", "Option 3", "Option 4"]
}}

2. For open-ended questions (about 30% of questions):
{{
  "category": "category name",
  "question": "The question text in Somali",
  "options": null
}}

Return ONLY valid JSON array of questions without any additional text."""


class QuizGeneratorConfigError(Exception):
    """Raised when the generator cannot run at all (no API key)."""


class QuizGeneratorResponseError(Exception):
    """Raised for any upstream response the generator cannot turn into questions."""


def build_prompt(categories: Sequence[str], count: int) -> str:
    return PROMPT_TEMPLATE.format(count=count, categories=", ".join(categories))


def pick_categories(categories: Sequence[str], limit: int = MAX_PROMPT_CATEGORIES) -> List[str]:
    """Random subset of at most limit categories, for variety between calls"""
    shuffled = list(categories)
    random.shuffle(shuffled)
    return shuffled[:min(limit, len(shuffled))]


def extract_questions(raw_text: str) -> List[GeneratedQuestion]:
    """Pull the first [...] span out of a completion and validate each item. Malformed items are dropped."""
    match = _JSON_ARRAY.search(raw_text or "")
    if not match:
        raise QuizGeneratorResponseError("Could not extract valid JSON from API response")
    try:
        items = json.loads(match.group(0))
    except ValueError as e:
        raise QuizGeneratorResponseError(f"Failed to parse API response as JSON: {e}")
    if not isinstance(items, list):
        raise QuizGeneratorResponseError("API response JSON is not an array")

    questions = []
    for item in items:
        try:
            questions.append(GeneratedQuestion.model_validate(item))
        except ValidationError:
            logger.warning(f"Dropping malformed generated question: {item!r}")
    if not questions:
        raise QuizGeneratorResponseError("API response contained no usable questions")
    return questions


def fallback_questions() -> List[GeneratedQuestion]:
    return [GeneratedQuestion(**q) for q in FALLBACK_QUESTIONS]


class QuizQuestionGenerator:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
    ):
        self.client = client
        self.api_key = (api_key if api_key is not None else settings.openrouter_api_key).strip()
        self.api_url = api_url or settings.openrouter_api_url
        self.model = model or settings.openrouter_model

    async def _post(self, payload: dict) -> Any:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": settings.openrouter_referer,
            "X-Title": settings.openrouter_title,
        }
        if self.client is not None:
            response = await self.client.post(self.api_url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=settings.openrouter_timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        if response.status_code >= 400:
            logger.error(f"API error response: {response.text}")
            raise QuizGeneratorResponseError(f"API error: {response.status_code} {response.reason_phrase}")
        return response.json()

    async def request_questions(self, categories: Sequence[str], count: int) -> List[GeneratedQuestion]:
        """One round trip to the LLM; raises on anything unusable"""
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(categories, count)}],
            "max_tokens": 4096,
            "temperature": 0.8,
        }
        logger.info(f"Requesting {count} quiz questions from model {self.model}")
        data = await self._post(payload)
        try:
            raw_text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"Unexpected API response format: {data!r}")
            raise QuizGeneratorResponseError("Unexpected API response format")
        return extract_questions(raw_text)

    async def generate(
        self,
        categories: Optional[Sequence[str]] = None,
        count: int = DEFAULT_PUZZLE_COUNT,
    ) -> Tuple[List[GeneratedQuestion], str]:
        """Questions plus their source ("ai" or "fallback")"""
        if not self.api_key:
            raise QuizGeneratorConfigError("API key is missing or empty")

        selected = pick_categories(categories or PUZZLE_CATEGORIES)
        try:
            return await self.request_questions(selected, count), "ai"
        except (httpx.HTTPError, ValueError, QuizGeneratorResponseError) as e:
            logger.error(f"API request failed, using fallback questions: {e}")
            questions = fallback_questions()
            logger.info(f"Generated fallback sample questions: {len(questions)}")
            return questions, "fallback"
