"""Pytest configuration."""

import logging

import pytest
from loguru import logger

from multisend.core.signatures import clear_signature_cache


@pytest.fixture(autouse=True)
def caplog(caplog):
    """Make loguru logs visible to pytest caplog."""

    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name).handle(record)

    handler_id = logger.add(PropagateHandler(), format="{message}")
    yield caplog
    try:
        logger.remove(handler_id)
    except ValueError:
        pass


@pytest.fixture(autouse=True)
def reset_signature_cache():
    """Start every test with an empty process-wide signature cache."""
    clear_signature_cache()
    yield
    clear_signature_cache()


@pytest.fixture(autouse=True)
def block_signature_lookups(monkeypatch):
    """Prevent OpenChain network calls during tests.

    Tests that exercise the lookup path pass their own fetcher or session.
    """

    def offline(selector):
        return []

    monkeypatch.setattr("multisend.core.signatures.signature_cache.fetcher", offline)
