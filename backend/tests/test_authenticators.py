import base64
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import bcrypt
import jwt
import pytest
from jwt import PyJWKClientConnectionError

from config.settings import Settings
from constants import AuthMode
from exceptions import AuthError, ConfigurationError, UpstreamError
from models import User
from services.authenticators import (
    BasicAuthenticator,
    JWTAuthenticator,
    ProviderTokenAuthenticator,
    build_authenticator,
)

SECRET = "authenticator-test-secret-0123456789abcdef"


@pytest.fixture
def user(db_session) -> User:
    password_hash = bcrypt.hashpw(b"hunter22", bcrypt.gensalt()).decode("utf-8")
    user = User(email="admin@example.com", password_hash=password_hash, role="admin")
    db_session.add(user)
    db_session.commit()
    return user


def _token(sub: str, secret: str = SECRET, minutes: int = 5, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": sub, "iat": now, "exp": now + timedelta(minutes=minutes), **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


def _basic(email: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{email}:{password}".encode("utf-8")).decode("ascii")


class FakeJWKClient:
    """Stands in for PyJWKClient: hands out a fixed HMAC key or fails to connect"""

    def __init__(self, key: str = SECRET, reachable: bool = True):
        self.key = key
        self.reachable = reachable

    def get_signing_key_from_jwt(self, token: str):
        if not self.reachable:
            raise PyJWKClientConnectionError("connection refused")
        return SimpleNamespace(key=self.key)


class TestJWTAuthenticator:
    def test_valid_token_resolves_user(self, db_session, user) -> None:
        authenticator = JWTAuthenticator(SECRET)

        current = authenticator.authenticate(f"Bearer {_token(user.id)}", db_session)

        assert current.id == user.id
        assert current.email == "admin@example.com"
        assert current.role == "admin"

    def test_missing_header(self, db_session) -> None:
        with pytest.raises(AuthError, match="no token"):
            JWTAuthenticator(SECRET).authenticate(None, db_session)

    def test_wrong_scheme(self, db_session, user) -> None:
        with pytest.raises(AuthError):
            JWTAuthenticator(SECRET).authenticate(f"Token {_token(user.id)}", db_session)

    def test_expired_token(self, db_session, user) -> None:
        with pytest.raises(AuthError, match="expired"):
            JWTAuthenticator(SECRET).authenticate(f"Bearer {_token(user.id, minutes=-1)}", db_session)

    def test_foreign_signature(self, db_session, user) -> None:
        token = _token(user.id, secret="another-secret-0123456789abcdef0123456789")

        with pytest.raises(AuthError, match="token failed"):
            JWTAuthenticator(SECRET).authenticate(f"Bearer {token}", db_session)

    def test_unknown_subject(self, db_session) -> None:
        with pytest.raises(AuthError, match="User not found"):
            JWTAuthenticator(SECRET).authenticate(f"Bearer {_token('f' * 24)}", db_session)

    def test_requires_secret(self) -> None:
        with pytest.raises(ConfigurationError):
            JWTAuthenticator("")


class TestBasicAuthenticator:
    def test_valid_credentials(self, db_session, user) -> None:
        current = BasicAuthenticator().authenticate(_basic("admin@example.com", "hunter22"), db_session)

        assert current.id == user.id

    def test_wrong_password(self, db_session, user) -> None:
        with pytest.raises(AuthError, match="Invalid credentials"):
            BasicAuthenticator().authenticate(_basic("admin@example.com", "wrong"), db_session)

    def test_unknown_email(self, db_session, user) -> None:
        with pytest.raises(AuthError):
            BasicAuthenticator().authenticate(_basic("nobody@example.com", "hunter22"), db_session)

    def test_malformed_credentials(self, db_session) -> None:
        with pytest.raises(AuthError):
            BasicAuthenticator().authenticate("Basic !!!not-base64!!!", db_session)


class TestProviderTokenAuthenticator:
    def _authenticator(self, **kwargs) -> ProviderTokenAuthenticator:
        kwargs.setdefault("jwk_client", FakeJWKClient())
        return ProviderTokenAuthenticator("https://idp.example.com/jwks", algorithms=["HS256"], **kwargs)

    def test_identity_comes_from_claims(self, db_session) -> None:
        token = _token("firebase-uid-1", email="guest@example.com")

        current = self._authenticator().authenticate(f"Bearer {token}", db_session)

        assert current.id == "firebase-uid-1"
        assert current.email == "guest@example.com"
        assert current.role == "user"

    def test_audience_is_checked(self, db_session) -> None:
        token = _token("uid-1", aud="other-project")

        with pytest.raises(AuthError):
            self._authenticator(audience="storefront").authenticate(f"Bearer {token}", db_session)

    def test_matching_audience_and_issuer(self, db_session) -> None:
        token = _token("uid-1", aud="storefront", iss="https://idp.example.com")
        authenticator = self._authenticator(audience="storefront", issuer="https://idp.example.com")

        assert authenticator.authenticate(f"Bearer {token}", db_session).id == "uid-1"

    def test_unreachable_provider_is_upstream_error(self, db_session) -> None:
        authenticator = self._authenticator(jwk_client=FakeJWKClient(reachable=False))

        with pytest.raises(UpstreamError):
            authenticator.authenticate(f"Bearer {_token('uid-1')}", db_session)


class TestBuildAuthenticator:
    def _settings(self, **overrides) -> Settings:
        return Settings(_env_file=None, database_url="sqlite://", **overrides)

    def test_jwt_mode(self) -> None:
        assert isinstance(build_authenticator(self._settings(jwt_secret=SECRET)), JWTAuthenticator)

    def test_basic_mode(self) -> None:
        authenticator = build_authenticator(self._settings(auth_mode=AuthMode.BASIC, jwt_secret=SECRET))

        assert isinstance(authenticator, BasicAuthenticator)

    def test_provider_mode_requires_jwks_url(self) -> None:
        with pytest.raises(ConfigurationError):
            build_authenticator(self._settings(auth_mode=AuthMode.PROVIDER))

    def test_provider_mode(self) -> None:
        settings = self._settings(auth_mode=AuthMode.PROVIDER, auth_provider_jwks_url="https://idp.example.com/jwks")

        assert isinstance(build_authenticator(settings), ProviderTokenAuthenticator)
