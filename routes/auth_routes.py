"""
FastAPI routes for signup, login and the cookie session.
"""

import logging

from fastapi import APIRouter, Depends, Request

from models.study_models import LoginRequest, SignupRequest
from routes.dependencies import SESSION_USER_KEY, require_user
from services.auth_service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

auth_service = AuthService()


def _start_session(request: Request, user: dict) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user["id"]
    request.session["user"] = user


@router.post("/signup", status_code=201)
async def signup(body: SignupRequest, request: Request):
    user = auth_service.signup(body.username, body.email, body.password)
    _start_session(request, user)
    return {"message": "User registered successfully", "user": user}


@router.post("/login")
async def login(body: LoginRequest, request: Request):
    user = auth_service.login(body.email, body.password)
    _start_session(request, user)
    logger.info(f"User {user['id']} logged in")
    return {"message": "Login successful", "user": user}


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out successfully"}


@router.get("/me")
async def me(user_id: str = Depends(require_user)):
    return {"user": auth_service.current_user(user_id)}


@router.get("/check-session")
async def check_session(request: Request):
    """Never fails: reports whether the cookie carries a logged-in user"""
    user = request.session.get("user")
    if request.session.get(SESSION_USER_KEY) and user:
        return {"loggedIn": True, "user": user}
    return {"loggedIn": False}
