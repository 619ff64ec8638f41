"""In-process tests for the WebSocket server."""

from fastapi.testclient import TestClient

from blockfall_api.server import app

client = TestClient(app)


def send(ws, message):
    ws.send_json(message)
    return ws.receive_json()


def test_health_endpoints():
    assert client.get("/").json()["service"] == "blockfall-api"
    assert client.get("/health").json() == {"status": "healthy"}


def test_hello():
    with client.websocket_connect("/ws") as ws:
        data = send(ws, {"type": "hello", "version": "b1.0.0"})
        assert data["type"] == "hello"
        assert data["server"] == "blockfall-py"


def test_hello_version_mismatch():
    with client.websocket_connect("/ws") as ws:
        data = send(ws, {"type": "hello", "version": "0.0.1"})
        assert data["type"] == "error"
        assert data["code"] == "VERSION_MISMATCH"


def test_reset_and_move():
    """Test a reset followed by a move returns shifted cells."""
    with client.websocket_connect("/ws") as ws:
        data = send(ws, {"type": "reset", "seed": 42})
        assert data["type"] == "snapshot"
        assert data["done"] is False
        assert data["data"]["score"] == 0
        assert data["data"]["phase"] == "running"
        start_cells = data["data"]["active"]["cells"]

        data = send(ws, {"type": "command", "command": "MOVE_LEFT"})
        assert data["type"] == "snapshot"
        assert data["info"]["accepted"] is True
        assert data["info"]["events"] == ["move"]
        assert data["data"]["active"]["cells"] == [[x - 1, y] for x, y in start_cells]


def test_hard_drop_scores():
    with client.websocket_connect("/ws") as ws:
        send(ws, {"type": "reset", "seed": 7})
        data = send(ws, {"type": "command", "command": "HARD_DROP"})
        assert data["data"]["score"] > 0
        assert "lock" in data["info"]["events"]
        assert any(data["data"]["board"]["cells"]), "Board should hold the locked piece"


def test_command_before_reset():
    with client.websocket_connect("/ws") as ws:
        data = send(ws, {"type": "command", "command": "ROTATE"})
        assert data["type"] == "error"
        assert data["code"] == "GAME_NOT_INITIALIZED"


def test_invalid_command():
    with client.websocket_connect("/ws") as ws:
        send(ws, {"type": "reset", "seed": 1})
        data = send(ws, {"type": "command", "command": "HOLD"})
        assert data["type"] == "error"
        assert data["code"] == "INVALID_ACTION"


def test_invalid_json_and_unknown_type():
    with client.websocket_connect("/ws") as ws:
        ws.send_text("{not json")
        data = ws.receive_json()
        assert data["code"] == "INVALID_MESSAGE"

        data = send(ws, {"type": "teleport"})
        assert data["code"] == "INVALID_MESSAGE"


def test_quit_reports_game_over():
    """Test quitting sends a final snapshot, then the final score."""
    with client.websocket_connect("/ws") as ws:
        send(ws, {"type": "reset", "seed": 3})

        data = send(ws, {"type": "command", "command": "QUIT"})
        assert data["type"] == "snapshot"
        assert data["done"] is True

        data = ws.receive_json()
        assert data["type"] == "game_over"
        assert data["score"] == 0

        data = send(ws, {"type": "command", "command": "MOVE_LEFT"})
        assert data["type"] == "error"
        assert data["code"] == "GAME_OVER"

        data = send(ws, {"type": "reset", "seed": 3})
        assert data["data"]["phase"] == "running"


def test_subscribe():
    with client.websocket_connect("/ws") as ws:
        data = send(ws, {"type": "subscribe", "stream": True})
        assert data["code"] == "GAME_NOT_INITIALIZED"

        send(ws, {"type": "reset", "seed": 3})
        data = send(ws, {"type": "subscribe", "stream": False})
        assert data == {"type": "subscribe_ack", "streaming": False}


def receive_until(ws, predicate, limit=20):
    """Read messages until one matches, skipping gravity pushes in between."""
    for _ in range(limit):
        data = ws.receive_json()
        if predicate(data):
            return data
    raise AssertionError("Expected message never arrived")


def top_row(data):
    return min(y for _, y in data["data"]["active"]["cells"])


def test_wrongly_typed_fields_keep_connection_open():
    """Test bad field types get an error reply and the socket keeps working."""
    with client.websocket_connect("/ws") as ws:
        data = send(ws, {"type": "reset", "seed": [1]})
        assert data["type"] == "error"
        assert data["code"] == "INVALID_MESSAGE"

        send(ws, {"type": "reset", "seed": 5})
        data = send(ws, {"type": "command", "command": ["MOVE_LEFT"]})
        assert data["type"] == "error"
        assert data["code"] == "INVALID_MESSAGE"

        data = send(ws, {"type": "command", "command": "MOVE_LEFT"})
        assert data["type"] == "snapshot"
        assert data["info"]["accepted"] is True


def test_streaming_pushes_gravity_snapshots():
    """Test a subscribed client receives gravity steps without sending commands."""
    with client.websocket_connect("/ws") as ws:
        start = send(ws, {"type": "reset", "seed": 11})
        data = send(ws, {"type": "subscribe", "stream": True})
        assert data == {"type": "subscribe_ack", "streaming": True}

        data = ws.receive_json()
        assert data["type"] == "snapshot"
        assert data["info"]["events"] == ["gravity"]
        assert top_row(data) == top_row(start) + 1

        ws.send_json({"type": "subscribe", "stream": False})
        data = receive_until(ws, lambda d: d["type"] == "subscribe_ack")
        assert data["streaming"] is False


def test_reset_while_streaming_keeps_gravity_running():
    """Test gravity restarts for the new game after a reset mid-stream."""
    with client.websocket_connect("/ws") as ws:
        send(ws, {"type": "reset", "seed": 11})
        send(ws, {"type": "subscribe", "stream": True})
        assert ws.receive_json()["info"]["events"] == ["gravity"]

        ws.send_json({"type": "reset", "seed": 12})
        start = receive_until(ws, lambda d: d.get("info", {}).get("event") == "reset")
        assert start["data"]["score"] == 0

        for expected_row in (1, 2):
            data = ws.receive_json()
            assert data["type"] == "snapshot"
            assert "gravity" in data["info"]["events"]
            assert top_row(data) == top_row(start) + expected_row

        ws.send_json({"type": "subscribe", "stream": False})
        data = receive_until(ws, lambda d: d["type"] == "subscribe_ack")
        assert data["streaming"] is False
