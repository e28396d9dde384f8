"""
Credential service: password hashing and JWT issuance/verification.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from campushub.errors import InvalidCredential

ALGORITHM = "HS256"


class CredentialService:
    """
    Hashes passwords with Argon2 and signs identity tokens.

    Args:
        secret (str): HMAC signing secret.
        expiration_minutes (int): Token lifetime.
    """

    def __init__(self, secret: str, expiration_minutes: int = 60) -> None:
        if not secret:
            raise RuntimeError("JWT_SECRET is missing. Set it in .env")
        self._secret = secret
        self.expiration_minutes = expiration_minutes
        self._hasher = PasswordHasher()

    # --- PASSWORDS ---
    def hash_password(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify_password(self, password_hash: str, password: str) -> bool:
        """True when password matches; a corrupt stored hash counts as a mismatch."""
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    # --- JWT CREATION ---
    def create_token(self, account_id, email: str) -> str:
        """
        Generates a new JWT for an account.

        Args:
            account_id: The account's id (serialized as a string).
            email (str): The account's email.

        Returns:
            str: Encoded JWT string.
        """
        now = datetime.now(timezone.utc)

        payload = {
            "id": str(account_id),
            "email": email,
            "exp": now + timedelta(minutes=self.expiration_minutes),
            "iat": now,
        }

        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    # --- JWT VALIDATION ---
    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry and return the payload.

        Raises:
            InvalidCredential: Expired, malformed or foreign token, or no `id` claim.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise InvalidCredential("Token expired")
        except jwt.InvalidTokenError:
            raise InvalidCredential("Invalid token")

        if not payload.get("id"):
            raise InvalidCredential("Invalid token")
        return payload
