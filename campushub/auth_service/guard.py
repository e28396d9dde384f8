"""
Access control guard.

Turns the Authorization header into a Principal and checks it against the
role a route requires. Classification has no side effects; the admin check
reads the admin account once.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from campushub.auth_service.credentials import CredentialService
from campushub.errors import Forbidden, InvalidCredential, Unauthenticated


class Role(str, Enum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Authenticated:
    account_id: uuid.UUID
    email: Optional[str] = None


Principal = Union[Anonymous, Authenticated]


class AccessGuard:
    """
    Args:
        credentials (CredentialService): Verifies token signatures.
        store: Account lookup (PostgresStore or compatible).
    """

    def __init__(self, credentials: CredentialService, store) -> None:
        self.credentials = credentials
        self.store = store

    def classify(self, authorization: Optional[str]) -> Principal:
        """
        Classify a raw Authorization header value.

        Returns:
            Anonymous when the header is missing or empty, otherwise
            Authenticated for a valid `Bearer <token>`.

        Raises:
            InvalidCredential: Wrong scheme, empty token, or a token the
                credential service rejects.
        """
        if not authorization or not authorization.strip():
            return Anonymous()

        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise InvalidCredential("Invalid token")

        payload = self.credentials.decode_token(token)
        try:
            account_id = uuid.UUID(str(payload["id"]))
        except ValueError:
            raise InvalidCredential("Invalid token")
        return Authenticated(account_id=account_id, email=payload.get("email"))

    def require(self, principal: Principal, role: Optional[Role] = None) -> Authenticated:
        """
        Single authorization check, parameterized by the required role.

        Args:
            principal: Result of classify().
            role (Role, optional): Role the route requires; None means any
                authenticated account.

        Raises:
            Unauthenticated: principal is Anonymous.
            Forbidden: The account behind the token no longer exists or has
                a different role.
        """
        if not isinstance(principal, Authenticated):
            raise Unauthenticated()
        if role is None:
            return principal

        kind = "admin" if role is Role.ADMIN else "user"
        account = self.store.get_account(kind, principal.account_id)
        if account is None or account.get("role") != role.value:
            raise Forbidden()
        return principal
