"""Tests for WebSocket message parsing."""

import pytest

from blockfall_api.protocol import (
    CommandRequest,
    ErrorCode,
    ErrorResponse,
    HelloRequest,
    ResetRequest,
    SubscribeRequest,
    parse_message,
    to_dict,
)


def test_parse_hello():
    message = parse_message({"type": "hello", "version": "b1.0.0"})
    assert isinstance(message, HelloRequest)
    assert message.version == "b1.0.0"


def test_parse_reset():
    """Test reset defaults to a random seed and uniform pieces."""
    message = parse_message({"type": "reset"})
    assert isinstance(message, ResetRequest)
    assert message.seed is None
    assert message.bag is False

    message = parse_message({"type": "reset", "seed": 42, "bag": True})
    assert message.seed == 42
    assert message.bag is True


def test_parse_command_and_subscribe():
    message = parse_message({"type": "command", "command": "ROTATE"})
    assert isinstance(message, CommandRequest)
    assert message.command == "ROTATE"

    message = parse_message({"type": "subscribe", "stream": False})
    assert isinstance(message, SubscribeRequest)
    assert message.stream is False


def test_unknown_message_type():
    """Test unknown or missing types are rejected."""
    with pytest.raises(ValueError):
        parse_message({"type": "teleport"})
    with pytest.raises(ValueError):
        parse_message({"command": "ROTATE"})
    with pytest.raises(ValueError):
        parse_message(["hello"])


def test_malformed_fields():
    """Test missing or unexpected fields are rejected."""
    with pytest.raises(ValueError):
        parse_message({"type": "command"})
    with pytest.raises(ValueError):
        parse_message({"type": "reset", "speed": 2})


def test_to_dict():
    error = ErrorResponse(code=ErrorCode.INVALID_ACTION, message="nope")
    assert to_dict(error) == {
        "code": "INVALID_ACTION",
        "message": "nope",
        "details": None,
        "type": "error",
    }


@pytest.mark.parametrize("message", [
    {"type": "command", "command": ["MOVE_LEFT"]},
    {"type": "command", "command": 3},
    {"type": "reset", "seed": [1]},
    {"type": "reset", "seed": "42"},
    {"type": "reset", "seed": True},
    {"type": "reset", "bag": "yes"},
    {"type": "subscribe", "stream": 1},
    {"type": "hello", "version": 1},
])
def test_wrongly_typed_fields(message):
    """Test fields of the wrong JSON type are rejected as invalid messages."""
    with pytest.raises(ValueError):
        parse_message(message)


def test_null_seed_is_accepted():
    message = parse_message({"type": "reset", "seed": None, "bag": False})
    assert message.seed is None
