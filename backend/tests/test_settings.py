from pathlib import Path

import pytest

from config.settings import Settings, load_settings
from constants import AuthMode
from exceptions import ConfigurationError
from main import create_app


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run from an empty directory so no .env file is picked up"""
    monkeypatch.chdir(tmp_path)
    for key in ("DATABASE_URL", "JWT_SECRET", "AUTH_MODE", "AUTH_PROVIDER_JWKS_URL", "PORT", "UPLOAD_ROOT"):
        monkeypatch.delenv(key, raising=False)


class TestLoadSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite:///shop.db")
        monkeypatch.setenv("JWT_SECRET", "s")

        settings = load_settings()

        assert settings.auth_mode == AuthMode.JWT
        assert settings.port == 3001
        assert settings.upload_root == Path("uploads/products")
        assert settings.public_upload_prefix == "/uploads/products"
        assert settings.upload_timeout_seconds == 60.0
        assert settings.jwt_expires_minutes == 60

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql://shop@db/shop")
        monkeypatch.setenv("AUTH_MODE", "provider")
        monkeypatch.setenv("AUTH_PROVIDER_JWKS_URL", "https://idp.example.com/jwks")
        monkeypatch.setenv("PORT", "8080")

        settings = load_settings()

        assert settings.auth_mode == AuthMode.PROVIDER
        assert settings.port == 8080

    def test_reads_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("DATABASE_URL=sqlite:///from-file.db\nJWT_SECRET=s\n")

        assert load_settings().database_url == "sqlite:///from-file.db"

    def test_missing_database_url(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert "database_url" in exc_info.value.details["missing_keys"]

    def test_jwt_mode_requires_secret(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite://")

        with pytest.raises(ConfigurationError, match="JWT_SECRET"):
            load_settings()

    def test_provider_mode_requires_jwks_url(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        monkeypatch.setenv("AUTH_MODE", "provider")

        with pytest.raises(ConfigurationError, match="AUTH_PROVIDER_JWKS_URL"):
            load_settings()

    def test_unknown_auth_mode(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        monkeypatch.setenv("AUTH_MODE", "magic")

        with pytest.raises(ConfigurationError):
            load_settings()


class TestCreateApp:
    def test_refuses_to_start_without_database_url(self) -> None:
        with pytest.raises(ConfigurationError):
            create_app()

    def test_trailing_slash_in_url_prefix(self, tmp_path) -> None:
        settings = Settings(_env_file=None, database_url="sqlite://", upload_url_prefix="/static/img/")

        assert settings.public_upload_prefix == "/static/img"
