"""Credential stores used by the login endpoint."""

from __future__ import annotations

import abc
import hmac
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from firebase_admin import firestore
from werkzeug.security import check_password_hash

from ricgcw.constants import DEFAULT_ACCOUNTS, USERS_COLLECTION
from ricgcw.core.types import LoginResponse

if TYPE_CHECKING:
    from flask import Flask
    from google.cloud.firestore_v1.client import Client


@dataclass(frozen=True)
class Account:
    """An authenticated dashboard user."""

    email: str
    role: str
    branch: str

    def to_login_response(self) -> LoginResponse:
        """Return the body the SPA expects after a successful login."""
        return {
            "isAuthenticated": True,
            "role": self.role,
            "branch": self.branch,
            "email": self.email,
        }


def password_matches(entry: dict[str, Any], password: str) -> bool:
    """Check a password against an account entry.

    Entries hold either a Werkzeug ``passwordHash`` or a plain ``password``.
    """
    password_hash = entry.get("passwordHash")
    if password_hash:
        return check_password_hash(password_hash, password)
    stored = entry.get("password")
    if not isinstance(stored, str):
        return False
    return hmac.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))


def account_from_entry(entry: dict[str, Any]) -> Account:
    return Account(
        email=entry["email"],
        role=entry.get("role") or "viewer",
        branch=entry.get("branch") or "all",
    )


class Authenticator(abc.ABC):
    """Checks a login against a credential store."""

    @abc.abstractmethod
    def authenticate(self, email: str, password: str) -> Optional[Account]:
        """Return the account for valid credentials, otherwise None."""


class StaticAuthenticator(Authenticator):
    """Accounts loaded once from configuration."""

    def __init__(self, accounts: Iterable[dict[str, Any]]) -> None:
        self._accounts: dict[str, dict[str, Any]] = {}
        for entry in accounts:
            email = (entry.get("email") or "").strip().lower()
            if not email:
                raise ValueError("Every account needs an email.")
            self._accounts[email] = entry

    def __len__(self) -> int:
        return len(self._accounts)

    def authenticate(self, email: str, password: str) -> Optional[Account]:
        entry = self._accounts.get(email.strip().lower())
        if entry is None or not password_matches(entry, password):
            return None
        return account_from_entry(entry)


class FirestoreAuthenticator(Authenticator):
    """Accounts stored as documents in the ``users`` collection.

    Documents are looked up by ``emailLower``, the lowercased address, and
    then by ``email`` for documents written without it.
    """

    def __init__(
        self,
        client_factory: Callable[[], Client] = firestore.client,
        collection: str = USERS_COLLECTION,
    ) -> None:
        self._client_factory = client_factory
        self._collection = collection

    def _find(self, db: Client, email: str) -> Optional[dict[str, Any]]:
        normalized = email.strip().lower()
        lookups = [("emailLower", normalized), ("email", normalized)]
        if email.strip() != normalized:
            lookups.append(("email", email.strip()))
        for field_name, value in lookups:
            query = (
                db.collection(self._collection)
                .where(filter=firestore.FieldFilter(field_name, "==", value))
                .limit(1)
            )
            for doc in query.stream():
                return doc.to_dict() or {}
        return None

    def authenticate(self, email: str, password: str) -> Optional[Account]:
        entry = self._find(self._client_factory(), email)
        if not entry or not entry.get("passwordHash"):
            return None
        if not password_matches({"passwordHash": entry["passwordHash"]}, password):
            return None
        return account_from_entry(entry)


def load_accounts(app: Flask) -> list[dict[str, Any]]:
    """Read the configured account list, falling back to the development one."""
    raw = app.config.get("AUTH_USERS_JSON")
    path = app.config.get("AUTH_USERS_FILE")
    if raw:
        accounts = json.loads(raw)
    elif path:
        with open(path, "r") as f:
            accounts = json.load(f)
    else:
        app.logger.warning(
            "No AUTH_USERS_JSON or AUTH_USERS_FILE configured; "
            "using the built-in development accounts."
        )
        return [dict(entry) for entry in DEFAULT_ACCOUNTS]

    if not isinstance(accounts, list):
        raise ValueError("The account list must be a JSON array.")
    return accounts


def build_authenticator(app: Flask) -> Authenticator:
    """Create the authenticator selected by ``AUTH_BACKEND``."""
    backend = app.config.get("AUTH_BACKEND") or "static"
    if backend == "firestore":
        return FirestoreAuthenticator()
    if backend == "static":
        return StaticAuthenticator(load_accounts(app))
    raise ValueError(f"Unknown AUTH_BACKEND: {backend}")
