"""Development auth session backed by the collection store.

Users are looked up by email in the ``users`` table. Every user signs in
with the shared development password from config. The active session and
the signed-in user row are kept as single JSON documents.
"""

from __future__ import annotations

from typing import Any

from core.constants import AUTH_SESSION_KEY, CURRENT_USER_KEY, ID_FIELD, USERS_TABLE
from core.errors import CheforgStoreError
from core.logging_config import get_logger
from core.types import ErrorKind, ResultEnvelope
from store.collection_store import CollectionStore
from store.record_identity import Clock, format_timestamp, utc_now
from store.record_matching import strict_equals

_LOGGER = get_logger(__name__)


class AuthSession:
    """Sign-in, sign-out and session lookup returning result envelopes."""

    def __init__(self, store: CollectionStore, dev_password: str, clock: Clock = utc_now) -> None:
        self._store = store
        self._dev_password = dev_password
        self._clock = clock

    async def sign_in_with_password(self, email: str, password: str) -> ResultEnvelope[Any]:
        """Start a session for the user with ``email``.

        Args:
            email: Email of a row in the users table.
            password: Must equal the configured development password.

        Returns:
            Envelope with ``{"user": {...}}`` on success; ``NOT_FOUND`` when
            no user row with an id has that email; ``INVALID_CREDENTIALS`` on
            a bad password.
        """
        user = next(
            (
                row
                for row in self._store.get(USERS_TABLE)
                if isinstance(row, dict)
                and row.get(ID_FIELD) is not None
                and strict_equals(row.get("email"), email)
            ),
            None,
        )
        if user is None:
            _LOGGER.info("sign_in_rejected", reason="unknown_user")
            return ResultEnvelope.failure(ErrorKind.NOT_FOUND, "User not found")
        if password != self._dev_password:
            _LOGGER.info("sign_in_rejected", reason="bad_password", user_id=user[ID_FIELD])
            return ResultEnvelope.failure(ErrorKind.INVALID_CREDENTIALS, "Incorrect password")
        auth_user = {
            "id": str(user[ID_FIELD]),
            "email": user.get("email"),
            "created_at": format_timestamp(self._clock()),
        }
        try:
            self._store.set_document(AUTH_SESSION_KEY, auth_user)
            self._store.set_document(CURRENT_USER_KEY, user)
        except CheforgStoreError as error:
            return ResultEnvelope.failure(ErrorKind.WRITE_FAILED, str(error), error)
        _LOGGER.info("signed_in", user_id=auth_user["id"])
        return ResultEnvelope.success({"user": auth_user})

    async def sign_out(self) -> ResultEnvelope[None]:
        """Clear the active session and current user."""
        try:
            self._store.remove(AUTH_SESSION_KEY)
            self._store.remove(CURRENT_USER_KEY)
        except (OSError, CheforgStoreError) as error:
            _LOGGER.error("sign_out_failed", error=str(error))
            return ResultEnvelope.failure(
                ErrorKind.WRITE_FAILED, f"Failed to clear session: {error}", error
            )
        return ResultEnvelope.success(None)

    async def get_session(self) -> ResultEnvelope[dict[str, Any]]:
        """Return ``{"session": {"user": ...}}`` or ``{"session": None}``."""
        auth_user = self._store.get_document(AUTH_SESSION_KEY)
        if auth_user is None:
            return ResultEnvelope.success({"session": None})
        return ResultEnvelope.success({"session": {"user": auth_user}})

    async def current_user(self) -> ResultEnvelope[dict[str, Any]]:
        """Return the signed-in user row, or ``None`` data when signed out."""
        return ResultEnvelope.success(self._store.get_document(CURRENT_USER_KEY))
