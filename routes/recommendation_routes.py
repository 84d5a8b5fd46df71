"""
FastAPI routes for AI study recommendations and the model registry.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from routes.dependencies import require_user
from services.recommendation_service import RecommendationService
from utils.model_config import ModelConfig

router = APIRouter(prefix="/api", tags=["recommendations"])

recommendation_service = RecommendationService()


@router.get("/recommendations/generate")
async def generate_recommendations(model: Optional[str] = None, user_id: str = Depends(require_user)):
    """
    5-7 recommendations from the last 50 sessions, last 20 quiz results and
    all goals. Users with no history get a fixed getting-started pair and no
    model call is made.
    """
    return await recommendation_service.generate_recommendations(user_id, model=model)


@router.get("/recommendations/subjects")
async def list_subjects(user_id: str = Depends(require_user)):
    return {"subjects": recommendation_service.list_subjects(user_id)}


@router.get("/models")
async def list_models():
    models = []
    for key in ModelConfig.get_available_models():
        config = ModelConfig.get_config(key)
        models.append({
            "key": key,
            "provider": config["provider"].value,
            "supportsImages": config.get("supports_images", False),
            "supportsPdf": config.get("supports_pdf", False),
        })
    return {"default": ModelConfig.default_model(), "models": models}
