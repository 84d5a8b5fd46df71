from fastapi import APIRouter, Depends

from models.study_models import GoalRequest
from routes.dependencies import require_user
from services.goal_service import GoalService

router = APIRouter(prefix="/api/goals", tags=["goals"])

goal_service = GoalService()


@router.get("")
async def list_goals(user_id: str = Depends(require_user)):
    """Goals with progress computed from the sessions in each goal's window"""
    return goal_service.list_goals(user_id)


@router.post("", status_code=201)
async def create_goal(body: GoalRequest, user_id: str = Depends(require_user)):
    return goal_service.create_goal(user_id, body.subject, body.target_hours, body.period)


@router.put("/{goal_id}")
async def update_goal(goal_id: str, body: GoalRequest, user_id: str = Depends(require_user)):
    return goal_service.update_goal(user_id, goal_id, body.subject, body.target_hours, body.period)


@router.delete("/{goal_id}")
async def delete_goal(goal_id: str, user_id: str = Depends(require_user)):
    return goal_service.delete_goal(user_id, goal_id)
