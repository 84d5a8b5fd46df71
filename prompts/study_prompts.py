"""
Prompt templates for quiz and recommendation generation.
Builders are pure: identical inputs always give the identical prompt.
"""

import json
from typing import Dict, Any

from models.study_models import Priority, RecommendationCategory

QUIZ_QUESTION_COUNT = 10

QUIZ_OUTPUT_CONTRACT = f"""Requirements:
- Generate exactly {QUIZ_QUESTION_COUNT} multiple-choice questions
- Each question must have exactly 4 options
- "correctAnswer" is the 0-based index (0-3) of the correct option
- Include a clear explanation for each correct answer
- Return ONLY a valid JSON array in this format (no markdown, no extra text):
[
  {{
    "question": "Question text",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Why this answer is correct"
  }}
]"""

RECOMMENDATION_CATEGORIES = tuple(c.value for c in RecommendationCategory)
RECOMMENDATION_PRIORITIES = tuple(p.value for p in Priority)


def build_quiz_from_text_prompt(content: str, subject: str, difficulty: str) -> str:
    """Build prompt for a quiz over extracted note text"""
    return f"""You are an expert teacher creating educational quizzes.
Based on the following study notes about "{subject}":

{content}

Test understanding of the key concepts in these notes.
Difficulty: {difficulty}

{QUIZ_OUTPUT_CONTRACT}"""


def build_quiz_from_attachment_prompt(subject: str, difficulty: str, is_pdf: bool) -> str:
    """Build prompt for a quiz over an attached image or PDF (sent alongside, not inlined)"""
    file_type = "PDF document" if is_pdf else "image"

    return f"""You are an expert teacher creating educational quizzes.
Analyze this {file_type} which contains study notes about "{subject}".

Extract the key concepts and test understanding of them.
Difficulty: {difficulty}

{QUIZ_OUTPUT_CONTRACT}"""


def build_recommendations_prompt(study_data: Dict[str, Any]) -> str:
    """Build prompt for study recommendations from summarized statistics"""
    sessions = json.dumps(study_data.get("sessions", {}), indent=2, sort_keys=True, default=str)
    quiz_results = json.dumps(study_data.get("quizResults", {}), indent=2, sort_keys=True, default=str)
    goals = json.dumps(study_data.get("goals", []), indent=2, sort_keys=True, default=str)

    return f"""You are an AI study coach analyzing a student's learning patterns.

Study Sessions Data:
{sessions}

Quiz Results:
{quiz_results}

Study Goals:
{goals}

Analyze this data and provide 5-7 specific, actionable recommendations to improve their learning.

Focus on:
1. Weak subjects (based on quiz scores and study time)
2. Study time optimization
3. Consistency improvements
4. Goal achievement strategies
5. Learning techniques
6. Time management

Return ONLY a valid JSON array in this exact format (no markdown, no extra text):
[
  {{
    "category": "weak_subjects",
    "title": "Focus more on Physics",
    "description": "Your quiz scores in Physics are below average. Consider spending 2 more hours per week on this subject.",
    "priority": "high"
  }}
]

Categories should be one of: {", ".join(RECOMMENDATION_CATEGORIES)}
Priority should be: {", ".join(RECOMMENDATION_PRIORITIES[:-1])}, or {RECOMMENDATION_PRIORITIES[-1]}"""
