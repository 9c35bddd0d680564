"""Helpers producing JSON log lines the way an application logger does."""

import json
import logging
import os
import socket
import time
from typing import Any

from logprobe import RecordSink


class JsonLineFormatter(logging.Formatter):
    """Formats log records as pino-style JSON lines.

    Levels follow pino's numbering (info is 30), ``time`` is in epoch
    milliseconds, and a dict passed as the message is merged into the
    record instead of producing a ``msg`` field.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelno + 10,
            "time": int(record.created * 1000),
            "pid": os.getpid(),
            "hostname": socket.gethostname(),
        }
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        else:
            payload["msg"] = record.getMessage()
        return json.dumps(payload)


def make_record(**fields: Any) -> dict[str, Any]:
    """Build a record carrying a valid envelope for this process."""
    record: dict[str, Any] = {
        "level": 30,
        "time": int(time.time() * 1000),
        "pid": os.getpid(),
        "hostname": socket.gethostname(),
    }
    record.update(fields)
    return record


def write_record(sink: RecordSink, **fields: Any) -> None:
    """Write a record as a JSON line. Envelope fields can be overridden."""
    sink.write(json.dumps(make_record(**fields)) + "\n")


def same_msg(received: dict[str, Any], expected: dict[str, Any]) -> None:
    """Equality function comparing only the ``msg`` field."""
    if received.get("msg") != expected.get("msg"):
        raise AssertionError(
            f"expected msg {expected.get('msg')} doesn't match "
            f"the received one {received.get('msg')}"
        )
