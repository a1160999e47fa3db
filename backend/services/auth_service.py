"""
Auth Service

Account signup and login. Passwords are hashed with bcrypt; tokens are
HS256 JWTs carrying the user id and role.
"""

from datetime import datetime, timedelta, timezone
import logging

import bcrypt
import jwt
from sqlalchemy.orm import Session

from constants import UserRole
from dtos.request.auth_request import LoginRequest, SignupRequest
from exceptions import AuthError, ConfigurationError
from models import User as UserModel
from repositories.user_repository import UserRepository
from services.authenticators import check_password

logger = logging.getLogger(__name__)


class AuthService:
    """Service for account creation and token issuing."""

    def __init__(self, db: Session, secret: str, algorithm: str = "HS256", expires_minutes: int = 60):
        self.users = UserRepository(db)
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue_token(self, user: UserModel) -> str:
        """Return a signed JWT for the provided user."""
        if not self.secret:
            raise ConfigurationError("JWT secret is not configured", missing_keys=["jwt_secret"])
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def signup(self, request: SignupRequest) -> tuple[UserModel, str]:
        """
        Create an account and return it with a fresh token.

        Raises:
            ConflictError: If the email is already registered
        """
        password_hash = bcrypt.hashpw(request.password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        full_name = f"{request.first_name or ''} {request.last_name or ''}".strip()
        user = UserModel(
            email=request.email,
            password_hash=password_hash,
            role=(request.role or UserRole.USER).value,
            first_name=request.first_name,
            last_name=request.last_name,
            name=full_name or None,
        )
        self.users.create_user(user)
        return user, self.issue_token(user)

    def login(self, request: LoginRequest) -> tuple[UserModel, str]:
        """
        Verify credentials and return the user with a fresh token.

        Raises:
            AuthError: On unknown email or wrong password
        """
        user = self.users.get_by_email(request.email)
        if user is None or not check_password(request.password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthError("Invalid email or password")
        return user, self.issue_token(user)
