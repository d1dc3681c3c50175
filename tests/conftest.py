"""Pytest configuration and shared fixtures for rssdd tests."""

from __future__ import annotations

import logging
import os

import pytest

from rssdd.config import config as config_module
from rssdd.core.bencode import encode


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("core", "marks tests as core codec tests"),
        ("property", "marks tests as property-based tests"),
        ("config", "marks tests as configuration tests"),
        ("feed", "marks tests as feed watcher tests"),
        ("cli", "marks tests as CLI tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _clear_rssdd_env(monkeypatch):
    """Keep the developer's RSSDD_* variables from leaking into tests."""
    for name in list(os.environ):
        if name.startswith("RSSDD_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_global_config(monkeypatch):
    """Start each test without a global configuration manager."""
    monkeypatch.setattr(config_module, "_config_manager", None)


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture
def torrent_dict() -> dict:
    """A minimal single-file torrent metainfo."""
    return {
        b"announce": b"http://tracker.example/announce",
        b"info": {
            b"length": 1024,
            b"name": b"test.bin",
            b"piece length": 16384,
            b"pieces": b"a" * 20,
        },
    }


@pytest.fixture
def torrent_bytes(torrent_dict) -> bytes:
    """The bencoded form of ``torrent_dict``."""
    return encode(torrent_dict)
