"""
test_logging_config.py — Tests for compagnon/logging_config.py

Verifies Loguru setup, stdlib interception, production detection and
the request id bound by the HTTP middleware.

Called by: pytest
Depends on: compagnon/logging_config.py
"""

import logging
import os
from unittest.mock import patch

import pytest
from loguru import logger

from compagnon.logging_config import _is_production, setup_logging


@pytest.fixture(autouse=True)
def _clean_loguru():
    logger.remove()
    yield
    logger.remove()


def test_setup_logging_adds_handler():
    with patch.dict(os.environ, {"APP_URL": "http://localhost:8000"}):
        setup_logging()
    assert len(logger._core.handlers) > 0


def test_stdlib_logging_intercepted():
    with patch.dict(os.environ, {"APP_URL": "http://localhost:8000"}):
        setup_logging()

    messages = []
    logger.add(lambda m: messages.append(str(m)), format="{message}")
    logging.getLogger("compagnon.cache").warning("cache write error")

    assert any("cache write error" in m for m in messages)


def test_noisy_loggers_quieted():
    with patch.dict(os.environ, {"APP_URL": "http://localhost:8000"}):
        setup_logging()
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


@pytest.mark.parametrize("url,expected", [
    ("", False),
    ("http://localhost:8000", False),
    ("http://127.0.0.1:8000", False),
    ("https://compagnon.example.fr", True),
])
def test_is_production(url, expected):
    with patch.dict(os.environ, {"APP_URL": url}):
        assert _is_production() is expected


def test_request_id_bound_in_middleware(client):
    records = []
    logger.add(lambda m: records.append(m.record), format="{message}", level="DEBUG")

    # load more before any refresh is ignored, with a debug line
    resp = client.post("/api/dashboard/more")

    req_id = resp.headers["X-Request-ID"]
    ignored = [r for r in records if "load_more ignored" in r["message"]]
    assert ignored
    assert ignored[0]["extra"]["request_id"] == req_id
