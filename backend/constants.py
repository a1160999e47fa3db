"""
Application-wide constants and configuration keys.

This module centralizes all magic strings and numbers used throughout the application
to improve maintainability and reduce duplication.
"""
from enum import Enum


class UploadLimits:
    """Constraints enforced on product image uploads"""

    FIELD_NAME = "images"
    MAX_FILES = 6
    MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5 MiB per file
    ALLOWED_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "webp", "gif"})
    CHUNK_SIZE = 64 * 1024  # Bytes read per chunk while streaming to disk
    MAX_BASE_NAME_LENGTH = 100  # Characters kept from the client filename stem

    @classmethod
    def is_allowed_extension(cls, extension: str) -> bool:
        """Check an extension (with or without leading dot) against the allow list"""
        return extension.lstrip(".").lower() in cls.ALLOWED_EXTENSIONS


class TranscodeSettings:
    """Output format for transcoded product images"""

    MAX_DIMENSION = 1600
    OUTPUT_FORMAT = "WEBP"
    OUTPUT_EXTENSION = "webp"
    QUALITY = 80


class AuthMode(str, Enum):
    """
    Selects which authenticator guards protected endpoints.

    - JWT: locally signed bearer token
    - BASIC: HTTP Basic credentials checked against stored bcrypt hashes
    - PROVIDER: ID token issued by an external identity provider
    """

    JWT = "jwt"
    BASIC = "basic"
    PROVIDER = "provider"


class UserRole(str, Enum):
    """Roles a user account can carry"""

    USER = "user"
    ADMIN = "admin"


class ActivityEventType(str, Enum):
    """Well-known activity event types; other values are stored as-is"""

    PAGE_VISIT = "PAGE_VISIT"
    BUTTON_CLICK = "BUTTON_CLICK"
    PRODUCT_VIEW = "PRODUCT_VIEW"
    LOGIN = "LOGIN"
    SIGNUP = "SIGNUP"
    LOGOUT = "LOGOUT"


class ServerConfig:
    """Server configuration constants"""

    TITLE = "Storefront API"
    VERSION = "1.0.0"
    HOST = "0.0.0.0"
    PORT = 3001


class HTTPStatus:
    """HTTP status codes used throughout the application"""

    # Success
    OK = 200
    CREATED = 201

    # Client Errors
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    CONFLICT = 409

    # Server Errors
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
