"""Unit tests for the development auth session."""

from __future__ import annotations

import asyncio

from core.types import ErrorKind
from store.collection_store import CollectionStore
from store.store_client import StoreClient


def _seed_users(store: CollectionStore) -> None:
    store.set("users", [{"id": 1, "email": "admin@cheforg.com", "role": "gerente"}])


def test_sign_in_stores_session(client: StoreClient, store: CollectionStore) -> None:
    """A valid sign-in should persist the session and current user."""
    _seed_users(store)

    result = asyncio.run(client.auth.sign_in_with_password("admin@cheforg.com", "123456"))
    session = asyncio.run(client.auth.get_session())

    assert result.data["user"]["id"] == "1"
    assert session.data["session"]["user"]["email"] == "admin@cheforg.com"


def test_sign_in_unknown_user_is_not_found(client: StoreClient, store: CollectionStore) -> None:
    """Unknown emails should be reported as NOT_FOUND."""
    _seed_users(store)

    result = asyncio.run(client.auth.sign_in_with_password("ghost@cheforg.com", "123456"))

    assert result.error is not None and result.error.kind is ErrorKind.NOT_FOUND


def test_sign_in_skips_user_rows_without_id(
    client: StoreClient, store: CollectionStore
) -> None:
    """A user row with no id should not start a session."""
    store.set("users", [{"email": "noid@cheforg.com"}])

    result = asyncio.run(client.auth.sign_in_with_password("noid@cheforg.com", "123456"))
    session = asyncio.run(client.auth.get_session())

    assert result.error is not None and result.error.kind is ErrorKind.NOT_FOUND
    assert session.data == {"session": None}


def test_sign_in_wrong_password_is_rejected(client: StoreClient, store: CollectionStore) -> None:
    """Passwords other than the development password should fail."""
    _seed_users(store)

    result = asyncio.run(client.auth.sign_in_with_password("admin@cheforg.com", "wrong"))

    assert result.error is not None and result.error.kind is ErrorKind.INVALID_CREDENTIALS


def test_sign_out_clears_session(client: StoreClient, store: CollectionStore) -> None:
    """Signing out should remove the session and current user."""
    _seed_users(store)
    asyncio.run(client.auth.sign_in_with_password("admin@cheforg.com", "123456"))

    asyncio.run(client.auth.sign_out())
    session = asyncio.run(client.auth.get_session())
    user = asyncio.run(client.auth.current_user())

    assert session.data == {"session": None} and user.data is None
