# Prompts module initialization

from .study_prompts import (
    build_quiz_from_text_prompt,
    build_quiz_from_attachment_prompt,
    build_recommendations_prompt,
    QUIZ_QUESTION_COUNT,
    RECOMMENDATION_CATEGORIES,
)

__all__ = [
    'build_quiz_from_text_prompt',
    'build_quiz_from_attachment_prompt',
    'build_recommendations_prompt',
    'QUIZ_QUESTION_COUNT',
    'RECOMMENDATION_CATEGORIES',
]
