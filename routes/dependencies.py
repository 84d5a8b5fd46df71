"""
Request-scoped identity. Handlers receive the authenticated user id as an
explicit argument rather than reading the session themselves.
"""

from fastapi import Request

from utils.exceptions import AuthenticationError

SESSION_USER_KEY = "user_id"


def require_user(request: Request) -> str:
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise AuthenticationError()
    return str(user_id)
