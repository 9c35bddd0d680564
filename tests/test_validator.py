"""Tests for record validation and equality functions."""

import math
import os
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from helpers import make_record

from logprobe import (
    EnvelopeError,
    LiteralExpectation,
    PredicateExpectation,
    as_expectation,
    check,
    deep_strict_equal,
    partial_deep_equal,
    validate_envelope,
)


def test_check_passes_with_literal() -> None:
    check(make_record(msg="hello world"), {"msg": "hello world", "level": 30})


def test_validate_envelope_strips_envelope_fields() -> None:
    record = make_record(msg="hello world")

    assert validate_envelope(record) == {"level": 30, "msg": "hello world"}
    # The original record is left untouched.
    assert "pid" in record


def test_envelope_rejects_time_in_the_future() -> None:
    future = int((time.time() + 60) * 1000)

    with pytest.raises(EnvelopeError, match="time is greater than now"):
        check(make_record(time=future, msg="x"), {"msg": "x", "level": 30})


def test_envelope_rejects_other_process() -> None:
    with pytest.raises(EnvelopeError, match="does not match current process"):
        check(make_record(pid=os.getpid() + 1), {"level": 30})


def test_envelope_rejects_other_host() -> None:
    with pytest.raises(EnvelopeError, match="does not match current host"):
        check(make_record(hostname="definitely-not-this-host.invalid"), {"level": 30})


def test_envelope_uses_current_hostname(mocker) -> None:
    mocker.patch("logprobe.validator.socket.gethostname", return_value="build-host")

    check(make_record(hostname="build-host"), {"level": 30})


def test_envelope_rejects_missing_fields() -> None:
    record = make_record()
    del record["time"]

    with pytest.raises(EnvelopeError, match="Invalid record envelope"):
        check(record, {"level": 30})


def test_envelope_pid_is_strict() -> None:
    with pytest.raises(EnvelopeError, match="Invalid record envelope"):
        check(make_record(pid=str(os.getpid())), {"level": 30})


def test_envelope_error_is_an_assertion_error() -> None:
    with pytest.raises(AssertionError):
        check(make_record(pid=-1), {"level": 30})


@pytest.mark.parametrize(
    "timestamp",
    [
        time.time() - 1,
        int(time.time() * 1000) - 1000,
        (datetime.now(timezone.utc) - timedelta(seconds=1)).isoformat(),
        (datetime.now() - timedelta(seconds=1)).isoformat(),
    ],
    ids=["epoch-seconds", "epoch-millis", "iso-aware", "iso-naive"],
)
def test_envelope_accepts_time_formats(timestamp) -> None:
    check(make_record(time=timestamp), {"level": 30})


def test_envelope_is_checked_before_the_predicate() -> None:
    predicate = MagicMock()

    with pytest.raises(EnvelopeError):
        check(make_record(pid=os.getpid() + 1), predicate)

    predicate.assert_not_called()


def test_predicate_receives_record_without_envelope() -> None:
    predicate = MagicMock(return_value=None)

    check(make_record(msg="hi"), predicate)

    predicate.assert_called_once_with({"level": 30, "msg": "hi"})


def test_predicate_returning_false_is_a_mismatch() -> None:
    with pytest.raises(AssertionError, match="Predicate rejected record"):
        check(make_record(msg="hi"), lambda log: log["msg"] == "bye")


def test_predicate_exception_propagates_unchanged() -> None:
    def expect_bye(log) -> None:
        if log["msg"] != "bye":
            raise ValueError(f"unexpected message {log['msg']}")

    with pytest.raises(ValueError, match="unexpected message hi"):
        check(make_record(msg="hi"), expect_bye)


def test_custom_equality_receives_remainder_and_expected() -> None:
    equal = MagicMock()

    check(make_record(msg="hi"), {"msg": "hi"}, equal)

    equal.assert_called_once_with({"level": 30, "msg": "hi"}, {"msg": "hi"})


def test_deep_strict_equal_passes_for_equal_structures() -> None:
    deep_strict_equal(
        {"a": [1, {"b": "c"}], "d": None},
        {"d": None, "a": [1, {"b": "c"}]},
    )


@pytest.mark.parametrize(
    ("actual", "expected"),
    [
        (1, 1.0),
        (1, True),
        ({"a": 1}, {"a": 1, "b": 2}),
        ([1, 2], [1, 2, 3]),
        ({"a": {"b": 1}}, {"a": {"b": "1"}}),
    ],
)
def test_deep_strict_equal_rejects_differences(actual, expected) -> None:
    with pytest.raises(AssertionError, match="Expected values to be strictly deep-equal:"):
        deep_strict_equal(actual, expected)


def test_deep_strict_equal_treats_nan_as_equal() -> None:
    deep_strict_equal({"value": math.nan}, {"value": math.nan})


def test_deep_strict_equal_message_shows_diff() -> None:
    with pytest.raises(AssertionError) as exc_info:
        deep_strict_equal({"msg": "hello world", "level": 30}, {"msg": "by world", "level": 30})

    message = str(exc_info.value)
    assert "+ actual - expected" in message
    assert "+ {'level': 30, 'msg': 'hello world'}" in message
    assert "- {'level': 30, 'msg': 'by world'}" in message


def test_deep_strict_equal_custom_message() -> None:
    with pytest.raises(AssertionError, match="^nope$"):
        deep_strict_equal(1, 2, "nope")


def test_partial_deep_equal_ignores_extra_keys() -> None:
    partial_deep_equal(
        {"msg": "hi", "level": 30, "req": {"id": 1, "url": "/"}},
        {"msg": "hi", "req": {"url": "/"}},
    )


@pytest.mark.parametrize(
    "expected",
    [{"missing": 1}, {"req": {"url": "/other"}}, {"level": 30.0}],
)
def test_partial_deep_equal_rejects_differences(expected) -> None:
    with pytest.raises(AssertionError, match="partially and strictly deep-equal"):
        partial_deep_equal({"level": 30, "req": {"url": "/"}}, expected)


def test_as_expectation_dispatch() -> None:
    literal = as_expectation({"msg": "hi"})
    predicate = as_expectation(lambda log: None)

    assert isinstance(literal, LiteralExpectation)
    assert isinstance(predicate, PredicateExpectation)
    assert as_expectation(literal) is literal


def test_as_expectation_rejects_other_values() -> None:
    with pytest.raises(TypeError, match="Expected a mapping or a callable, got int"):
        as_expectation(42)


def test_expectation_identifiers() -> None:
    assert as_expectation({"msg": "server started"}).identifier == "server started"
    assert as_expectation({"level": 30}).identifier == "[literal]"
    assert as_expectation(lambda log: None).identifier == "[function]"
