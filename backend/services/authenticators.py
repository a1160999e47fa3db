"""
Authenticators

Concrete IAuthenticator variants and the factory that picks one from settings.
"""

import base64
import binascii
import logging
from typing import Optional, Sequence, Tuple

import bcrypt
import jwt
from jwt import ExpiredSignatureError, InvalidTokenError, PyJWKClient, PyJWKClientConnectionError, PyJWKClientError
from sqlalchemy.orm import Session

from config.settings import Settings
from constants import AuthMode, ServerConfig
from exceptions import AuthError, ConfigurationError, UpstreamError
from repositories.user_repository import UserRepository
from services.interfaces import AuthenticatedUser, IAuthenticator

logger = logging.getLogger(__name__)


def _split_authorization(authorization: Optional[str], scheme: str) -> str:
    """Return the credential part of '<scheme> <credential>' or raise AuthError."""
    if not authorization:
        raise AuthError("Not authorized, no token")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != scheme.lower() or not parts[1].strip():
        raise AuthError("Authorization header missing or invalid")
    return parts[1].strip()


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


class JWTAuthenticator(IAuthenticator):
    """Bearer tokens signed with the local secret; the subject must be a stored user."""

    scheme = "Bearer"

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ConfigurationError("JWT secret is not configured", missing_keys=["jwt_secret"])
        self.secret = secret
        self.algorithm = algorithm

    def authenticate(self, authorization: Optional[str], db: Session) -> AuthenticatedUser:
        token = _split_authorization(authorization, self.scheme)
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthError("Token has expired")
        except InvalidTokenError:
            raise AuthError("Not authorized, token failed")

        user_id = claims.get("sub")
        if not user_id:
            raise AuthError("Token payload is malformed")

        user = UserRepository(db).get_by_id(str(user_id))
        if user is None:
            raise AuthError("User not found")
        return AuthenticatedUser(id=user.id, email=user.email, role=user.role, claims=claims)


class BasicAuthenticator(IAuthenticator):
    """HTTP Basic credentials checked against stored bcrypt hashes."""

    scheme = "Basic"

    @property
    def challenge(self) -> str:
        return f'{self.scheme} realm="{ServerConfig.TITLE}"'

    def authenticate(self, authorization: Optional[str], db: Session) -> AuthenticatedUser:
        encoded = _split_authorization(authorization, self.scheme)
        email, password = self._decode_credentials(encoded)

        user = UserRepository(db).get_by_email(email)
        if user is None or not check_password(password, user.password_hash):
            raise AuthError("Invalid credentials")
        return AuthenticatedUser(id=user.id, email=user.email, role=user.role)

    @staticmethod
    def _decode_credentials(encoded: str) -> Tuple[str, str]:
        try:
            decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise AuthError("Authorization header missing or invalid")
        email, sep, password = decoded.partition(":")
        if not sep or not email:
            raise AuthError("Authorization header missing or invalid")
        return email, password


class ProviderTokenAuthenticator(IAuthenticator):
    """
    ID tokens issued by an external identity provider.

    Signatures are checked against the provider's published JWKS; the user
    identity comes from the token claims, no local account is required.
    """

    scheme = "Bearer"

    def __init__(
        self,
        jwks_url: str,
        audience: str = "",
        issuer: str = "",
        algorithms: Sequence[str] = ("RS256",),
        jwk_client: Optional[PyJWKClient] = None,
    ):
        self.audience = audience or None
        self.issuer = issuer or None
        self.algorithms = list(algorithms)
        self.jwk_client = jwk_client or PyJWKClient(jwks_url, cache_keys=True)

    def authenticate(self, authorization: Optional[str], db: Session) -> AuthenticatedUser:
        token = _split_authorization(authorization, self.scheme)
        try:
            signing_key = self.jwk_client.get_signing_key_from_jwt(token)
        except PyJWKClientConnectionError as e:
            logger.error(f"Could not fetch identity provider keys: {e}")
            raise UpstreamError("Identity provider") from e
        except (PyJWKClientError, InvalidTokenError):
            raise AuthError("Not authorized, token failed")

        try:
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError:
            raise AuthError("Token has expired")
        except InvalidTokenError:
            raise AuthError("Not authorized, token failed")

        user_id = claims.get("sub") or claims.get("uid")
        if not user_id:
            raise AuthError("Token payload is malformed")
        return AuthenticatedUser(
            id=str(user_id),
            email=claims.get("email"),
            role=claims.get("role", "user"),
            claims=claims,
        )


def build_authenticator(settings: Settings) -> IAuthenticator:
    """
    Create the authenticator selected by AUTH_MODE.

    Raises:
        ConfigurationError: If the selected mode is missing required settings
    """
    mode = AuthMode(settings.auth_mode)
    if mode == AuthMode.JWT:
        authenticator = JWTAuthenticator(settings.jwt_secret, settings.jwt_algorithm)
    elif mode == AuthMode.BASIC:
        authenticator = BasicAuthenticator()
    else:
        if not settings.auth_provider_jwks_url:
            raise ConfigurationError(
                "Identity provider JWKS URL is not configured",
                missing_keys=["auth_provider_jwks_url"],
            )
        authenticator = ProviderTokenAuthenticator(
            settings.auth_provider_jwks_url,
            audience=settings.auth_provider_audience,
            issuer=settings.auth_provider_issuer,
        )
    logger.info(f"Authentication mode: {mode.value}")
    return authenticator
