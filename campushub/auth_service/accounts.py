"""
Account workflow: signup, signin and profile lookups for users and admins.
"""

import logging
from typing import Any, Dict, List, Tuple

from campushub.auth_service.credentials import CredentialService
from campushub.auth_service.schemas import AuthPayload
from campushub.errors import AccountExists, AccountNotFound, InvalidCredentials
from campushub.validation import parse_payload

logger = logging.getLogger(__name__)

LABELS = {"user": "User", "admin": "Admin"}


def username_from_email(email: str) -> str:
    """Display name derived from the local part, e.g. o123@rguktong.ac.in -> o123."""
    return email.split("@", 1)[0]


class AccountWorkflow:
    """
    Args:
        store: Account persistence (PostgresStore or compatible).
        credentials (CredentialService): Hashing and token issuance.
        notifier: Receives the welcome email job.
    """

    def __init__(self, store, credentials: CredentialService, notifier) -> None:
        self.store = store
        self.credentials = credentials
        self.notifier = notifier

    def signup(self, kind: str, data: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """
        Create an account and log it in.

        Args:
            kind (str): "user" or "admin".
            data (dict): Request body with email and password.

        Returns:
            tuple: (token, account row)

        Raises:
            ValidationError: Malformed email or short password.
            AccountExists: The email is already registered for this kind.
        """
        payload = parse_payload(AuthPayload, data)
        label = LABELS[kind]

        if self.store.find_account_by_email(kind, payload.email):
            raise AccountExists(f"{label} already exists")

        password_hash = self.credentials.hash_password(payload.password)
        try:
            account = self.store.insert_account(
                kind, username_from_email(payload.email), payload.email, password_hash
            )
        except AccountExists:
            # Lost a race with a concurrent signup for the same email
            raise AccountExists(f"{label} already exists")

        token = self.credentials.create_token(account["id"], account["email"])
        logger.info(f"{label} {account['email']} signed up")

        if kind == "user":
            self.notifier.welcome(account)
        return token, account

    def signin(self, kind: str, data: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """
        Check credentials and issue a token.

        Raises:
            ValidationError: Malformed input.
            InvalidCredentials: Unknown email or wrong password (same message).
        """
        payload = parse_payload(AuthPayload, data)

        account = self.store.find_account_by_email(kind, payload.email)
        if account is None:
            raise InvalidCredentials()
        if not self.credentials.verify_password(account["password_hash"], payload.password):
            raise InvalidCredentials()

        token = self.credentials.create_token(account["id"], account["email"])
        logger.info(f"{LABELS[kind]} {account['email']} signed in")
        return token, account

    def profile(self, kind: str, account_id) -> Dict[str, Any]:
        account = self.store.get_account(kind, account_id)
        if account is None:
            raise AccountNotFound(f"{LABELS[kind]} not found")
        return account

    def list_admins(self) -> List[Dict[str, Any]]:
        return self.store.list_accounts("admin")

    def delete_admin(self, admin_id) -> None:
        if not self.store.delete_account("admin", admin_id):
            raise AccountNotFound("Admin not found")
        logger.info(f"Admin {admin_id} deleted")
