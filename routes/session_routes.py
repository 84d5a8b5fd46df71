from fastapi import APIRouter, Depends

from models.study_models import SessionRequest
from routes.dependencies import require_user
from services.session_service import SessionService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

session_service = SessionService()


@router.get("")
async def list_sessions(user_id: str = Depends(require_user)):
    return session_service.list_sessions(user_id)


@router.post("", status_code=201)
async def create_session(body: SessionRequest, user_id: str = Depends(require_user)):
    return session_service.create_session(user_id, body.subject, body.start_time, body.end_time)


@router.put("/{session_id}")
async def update_session(session_id: str, body: SessionRequest, user_id: str = Depends(require_user)):
    return session_service.update_session(user_id, session_id, body.subject, body.start_time, body.end_time)


@router.delete("/{session_id}")
async def delete_session(session_id: str, user_id: str = Depends(require_user)):
    return session_service.delete_session(user_id, session_id)
