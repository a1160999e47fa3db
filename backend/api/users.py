from fastapi import APIRouter, Depends
import logging

from constants import HTTPStatus
from dependencies import get_auth_service
from dtos.request.auth_request import LoginRequest, SignupRequest
from dtos.response.auth_response import AuthResponse, AuthUser
from services.auth_service import AuthService
from utils.error_handlers import handle_api_errors

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=HTTPStatus.CREATED)
@handle_api_errors("Signup")
def signup(payload: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Create an account and return a bearer token for it

    Raises:
        HTTPException: 409 if the email is already registered
    """
    user, token = auth.signup(payload)
    return AuthResponse(message="User created", token=token, user=AuthUser.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@handle_api_errors("Login")
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Exchange email and password for a bearer token

    Raises:
        HTTPException: 401 on unknown email or wrong password
    """
    user, token = auth.login(payload)
    return AuthResponse(token=token, user=AuthUser.model_validate(user))
