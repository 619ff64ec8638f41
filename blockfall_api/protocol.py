"""Protocol data classes for WebSocket communication."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Literal
from enum import Enum

PROTOCOL_VERSION = "b1.0.0"


class MessageType(str, Enum):
    """WebSocket message types."""
    HELLO = "hello"
    RESET = "reset"
    COMMAND = "command"
    SUBSCRIBE = "subscribe"
    SNAPSHOT = "snapshot"
    SUBSCRIBE_ACK = "subscribe_ack"
    GAME_OVER = "game_over"
    ERROR = "error"


@dataclass
class HelloRequest:
    """Client hello message."""
    type: Literal["hello"] = "hello"
    version: str = PROTOCOL_VERSION


@dataclass
class HelloResponse:
    """Server hello response."""
    type: Literal["hello"] = "hello"
    version: str = PROTOCOL_VERSION
    server: str = "blockfall-py"


@dataclass
class ResetRequest:
    """Request to start a new game."""
    seed: Optional[int] = None
    bag: bool = False  # Use the 7-bag randomizer instead of uniform draws
    type: Literal["reset"] = "reset"


@dataclass
class CommandRequest:
    """Request to apply a player command."""
    command: str  # MOVE_LEFT, MOVE_RIGHT, SOFT_DROP, ROTATE, HARD_DROP, QUIT
    type: Literal["command"] = "command"


@dataclass
class SubscribeRequest:
    """Request to start or stop server-driven gravity and snapshot streaming."""
    stream: bool = True
    type: Literal["subscribe"] = "subscribe"


@dataclass
class SubscribeAck:
    streaming: bool
    type: Literal["subscribe_ack"] = "subscribe_ack"


@dataclass
class SnapshotResponse:
    """Game state snapshot response."""
    data: Dict[str, Any]  # Snapshot dict from Snapshot.to_dict()
    done: bool
    info: Dict[str, Any]
    type: Literal["snapshot"] = "snapshot"


@dataclass
class GameOverResponse:
    """Sent once when a game ends."""
    score: int
    lines: int
    pieces: int
    type: Literal["game_over"] = "game_over"


@dataclass
class ErrorResponse:
    """Error response."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    type: Literal["error"] = "error"


class ErrorCode:
    """Standard error codes."""
    INVALID_MESSAGE = "INVALID_MESSAGE"
    INVALID_ACTION = "INVALID_ACTION"
    GAME_NOT_INITIALIZED = "GAME_NOT_INITIALIZED"
    GAME_OVER = "GAME_OVER"
    VERSION_MISMATCH = "VERSION_MISMATCH"


_REQUEST_TYPES = {
    MessageType.HELLO: HelloRequest,
    MessageType.RESET: ResetRequest,
    MessageType.COMMAND: CommandRequest,
    MessageType.SUBSCRIBE: SubscribeRequest,
}

# Expected JSON types per request field
_FIELD_TYPES = {
    HelloRequest: {"version": str},
    ResetRequest: {"seed": int, "bag": bool},
    CommandRequest: {"command": str},
    SubscribeRequest: {"stream": bool},
}

_OPTIONAL_FIELDS = {"seed"}


def parse_message(data: Dict[str, Any]) -> Any:
    """Parse incoming WebSocket message.

    Args:
        data: JSON message dict

    Returns:
        Parsed message object

    Raises:
        ValueError: If message type or fields are invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")

    msg_type = data.get("type")
    try:
        request_cls = _REQUEST_TYPES[MessageType(msg_type)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown message type: {msg_type}")

    try:
        message = request_cls(**data)
    except TypeError as e:
        raise ValueError(f"Invalid {msg_type} message: {e}")

    for name, expected in _FIELD_TYPES.get(request_cls, {}).items():
        value = getattr(message, name)
        if value is None and name in _OPTIONAL_FIELDS:
            continue
        # bool is an int subclass; only accept it where a bool is expected
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ValueError(f"Invalid {msg_type} message: {name} must be {expected.__name__}")

    return message


def to_dict(obj: Any) -> Dict[str, Any]:
    """Convert dataclass to dict for JSON serialization.

    Args:
        obj: Dataclass instance

    Returns:
        Dictionary representation
    """
    return asdict(obj)
