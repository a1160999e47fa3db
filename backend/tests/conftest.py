import sys
from pathlib import Path

# Add backend directory to Python path FIRST
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Now import after path is set
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from config.settings import Settings
from database import Database
from main import create_app

TEST_SECRET = "storefront-test-secret-0123456789abcdef"


def make_image_bytes(fmt: str = "PNG", size=(10, 10), color=(200, 30, 30), mode: str = "RGB") -> bytes:
    """Encode a solid-color image in memory"""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        jwt_secret=TEST_SECRET,
        upload_root=tmp_path / "uploads" / "products",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the app lifespan (database connect/close) running"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    """Create in-memory database for testing"""
    database = Database("sqlite://")
    database.connect()
    session = database.session()
    yield session
    session.close()
    database.close()


@pytest.fixture
def auth_token(client):
    response = client.post("/users/signup", json={
        "email": "shopper@example.com",
        "password": "s3cret-pass",
        "firstName": "Sam",
        "lastName": "Shopper",
    })
    assert response.status_code == 201
    return response.json()["token"]


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def upload_root(settings) -> Path:
    return settings.upload_root


@pytest.fixture
def image_bytes():
    """Factory for in-memory test images: image_bytes("JPEG", (40, 20))"""
    return make_image_bytes
