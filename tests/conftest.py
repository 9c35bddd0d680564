"""Shared fixtures: a sink and an application logger writing to it."""

import logging

import pytest
from helpers import JsonLineFormatter

from logprobe import RecordSink, create_sink


@pytest.fixture
def sink() -> RecordSink:
    return create_sink()


@pytest.fixture
def app_logger(request: pytest.FixtureRequest, sink: RecordSink):
    """A stdlib logger writing JSON lines to the `sink` fixture."""
    logger = logging.getLogger(f"app.{request.node.name}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handler = logging.StreamHandler(sink)
    handler.setFormatter(JsonLineFormatter())
    logger.addHandler(handler)

    yield logger

    logger.removeHandler(handler)
