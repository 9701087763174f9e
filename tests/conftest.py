"""Shared fixtures: a fake bingo API reachable through httpx."""

import httpx
import pytest

from bingo.api import BingoApi

from fakeapi import Storage, create_app
from stubs import StubApi


@pytest.fixture
def storage():
    store = Storage()
    store.add_user("u-alice", "alice")
    store.add_user("u-bob", "bob")
    store.add_user("u-admin", "root", is_admin=True)
    store.add_user("u-anon", "Anonymous User", auth_provider="anonymous")
    store.add_user("u-anon2", "Anonymous Fox", auth_provider="anonymous")
    return store


@pytest.fixture
def make_api(storage):
    app = create_app(storage)

    def _make(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://bingo.test",
            headers=headers,
        )
        return BingoApi(client)

    return _make


@pytest.fixture
def stub_api():
    return StubApi()
