import logging
from typing import Any, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from utils.exceptions import AuthenticationError, ValidationError
from utils.file_storage import UserStorage

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to return to the client and keep in the session cookie"""
    return {"id": str(user["id"]), "username": user.get("username"), "email": user.get("email")}


class AuthService:
    def __init__(self, storage: Optional[UserStorage] = None):
        self.storage = storage or UserStorage()

    def signup(self, username: Optional[str], email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not username or not email or not password:
            raise ValidationError("Please fill in all fields", error_code="MISSING_REQUIRED_FIELD")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                error_code="PASSWORD_TOO_SHORT",
            )
        if self.storage.get_by_email(email):
            raise ValidationError("Email already in use", error_code="EMAIL_IN_USE")
        if self.storage.get_by_username(username):
            raise ValidationError("Username already taken", error_code="USERNAME_TAKEN")

        user = self.storage.create_user(username, email, generate_password_hash(password))
        logger.info(f"User {user['id']} registered")
        return public_user(user)

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Please fill all the fields", error_code="MISSING_REQUIRED_FIELD")

        user = self.storage.get_by_email(email)
        if not user:
            raise ValidationError("User not found", error_code="USER_NOT_FOUND")
        if not check_password_hash(user["password_hash"], password):
            raise ValidationError("Incorrect password", error_code="INCORRECT_PASSWORD")

        return public_user(user)

    def current_user(self, user_id: Optional[str]) -> Dict[str, Any]:
        user = self.storage.get_user(user_id) if user_id else None
        if not user:
            raise AuthenticationError()
        return public_user(user)
