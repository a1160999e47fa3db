"""
Service Interfaces

Abstract base classes for the pluggable parts of the service layer.
This allows for dependency injection and easier testing/mocking.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a credential."""

    id: str
    email: Optional[str] = None
    role: str = "user"
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)


class IAuthenticator(ABC):
    """
    Interface for credential verification.

    One capability, three interchangeable variants (local JWT, Basic with
    bcrypt, external identity provider) chosen by configuration.
    """

    scheme: str = "Bearer"

    @property
    def challenge(self) -> str:
        """WWW-Authenticate value for a 401 from this authenticator"""
        return self.scheme

    @abstractmethod
    def authenticate(self, authorization: Optional[str], db: Session) -> AuthenticatedUser:
        """
        Resolve an Authorization header value to a user.

        Args:
            authorization: Raw Authorization header (may be None)
            db: Database session for user lookups

        Returns:
            AuthenticatedUser for the caller

        Raises:
            AuthError: If the credential is missing, malformed, invalid or expired
            UpstreamError: If an external identity provider cannot be reached
        """
        pass
