from fastapi import APIRouter, Depends, HTTPException
from app.modules.puzzles.schemas import GenerateQuestionsRequest, GenerateQuestionsResponse
from app.modules.puzzles.generator import QuizQuestionGenerator, QuizGeneratorConfigError
from app.core.dependencies import get_current_user_id
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/puzzles", tags=["puzzles"])


def get_question_generator() -> QuizQuestionGenerator:
    return QuizQuestionGenerator()


@router.post("/generate", response_model=GenerateQuestionsResponse)
async def generate_questions(
    request: GenerateQuestionsRequest,
    user_data: Dict = Depends(get_current_user_id),
    generator: QuizQuestionGenerator = Depends(get_question_generator)
):
    """Generate quiz questions with the LLM; falls back to the built-in bank on upstream failure"""
    try:
        questions, source = await generator.generate(request.categories, request.count)
    except QuizGeneratorConfigError as e:
        logger.error(f"Error generating quiz questions: {e}")
        raise HTTPException(status_code=503, detail="Quiz generation is not configured")
    return GenerateQuestionsResponse(questions=questions, source=source)
