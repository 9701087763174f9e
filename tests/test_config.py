"""Tests for environment-driven configuration."""

import logging

import pytest

from bingo import config
from bingo.api import BingoApi


def test_configure_logging_uses_level(monkeypatch):
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: seen.update(kwargs))
    config.configure_logging("debug")
    assert seen["level"] == "DEBUG"

    monkeypatch.setattr(config, "LOG_LEVEL", "warning")
    config.configure_logging()
    assert seen["level"] == "WARNING"


@pytest.mark.asyncio
async def test_client_from_env(monkeypatch):
    monkeypatch.setattr(config, "API_URL", "http://bingo.example/api")
    monkeypatch.setattr(config, "API_TOKEN", "secret")
    api = BingoApi.from_env()
    try:
        assert str(api._client.base_url) == "http://bingo.example/api/"
        assert api._client.headers["Authorization"] == "Bearer secret"
    finally:
        await api.aclose()


@pytest.mark.asyncio
async def test_client_without_token(monkeypatch):
    monkeypatch.setattr(config, "API_TOKEN", None)
    api = BingoApi.from_env(base_url="http://localhost:3000/api")
    try:
        assert "Authorization" not in api._client.headers
    finally:
        await api.aclose()
