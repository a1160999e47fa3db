"""
Dependency injection providers for FastAPI.

Long-lived objects (settings, database, authenticator, upload pipeline) are
built once by the app factory and kept on app.state; these providers hand
them to endpoints, together with per-request repositories and services.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from config.settings import Settings
from database import get_db
from exceptions import AuthError
from repositories.activity_repository import ActivityRepository
from repositories.product_repository import ProductRepository
from services.auth_service import AuthService
from services.interfaces import AuthenticatedUser, IAuthenticator
from services.upload_pipeline import UploadPipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_product_repository(db: Session = Depends(get_db)) -> ProductRepository:
    """
    Factory function for creating ProductRepository instances.

    Args:
        db: Database session (injected)

    Returns:
        ProductRepository instance
    """
    return ProductRepository(db)


def get_activity_repository(db: Session = Depends(get_db)) -> ActivityRepository:
    return ActivityRepository(db)


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    """
    Factory function for creating AuthService instances.

    Args:
        db: Database session (injected)
        settings: Application settings (injected)

    Returns:
        AuthService bound to the request's session
    """
    return AuthService(db, settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expires_minutes)


def get_authenticator(request: Request) -> IAuthenticator:
    """
    Return the configured authenticator.

    Note: tests can swap it through app.dependency_overrides.
    """
    return request.app.state.authenticator


def get_current_user(
    authorization: Optional[str] = Header(None),
    authenticator: IAuthenticator = Depends(get_authenticator),
    db: Session = Depends(get_db),
) -> AuthenticatedUser:
    """
    Resolve the caller of a protected endpoint.

    Raises:
        AuthError: Rendered as 401 by the application error handler, with the
            authenticator's WWW-Authenticate challenge
    """
    try:
        return authenticator.authenticate(authorization, db)
    except AuthError as e:
        e.challenge = authenticator.challenge
        raise


def get_upload_pipeline(request: Request) -> UploadPipeline:
    return request.app.state.upload_pipeline
