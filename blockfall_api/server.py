"""FastAPI WebSocket bridge between a local renderer and the game engine.

Each connection drives its own single-player GameState. The client sends
commands; when it subscribes, the server also runs gravity and pushes a
snapshot after every gravity step.
"""

import json
import os
import time
import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from blockfall_core.game import Command, GameState
from blockfall_api.protocol import (
    PROTOCOL_VERSION,
    HelloRequest,
    HelloResponse,
    ResetRequest,
    CommandRequest,
    SubscribeRequest,
    SubscribeAck,
    SnapshotResponse,
    GameOverResponse,
    ErrorResponse,
    ErrorCode,
    parse_message,
    to_dict,
)

HOST = os.getenv("BLOCKFALL_HOST", "127.0.0.1")
PORT = int(os.getenv("BLOCKFALL_PORT", "8000"))
CORS_ORIGINS = os.getenv(
    "BLOCKFALL_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")

# Bounded wait between gravity checks while streaming
GRAVITY_POLL_SECONDS = 0.01

app = FastAPI(title="Blockfall API", version="0.1.0")

# Enable CORS for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GameSession:
    """Manages the game behind one WebSocket connection."""

    def __init__(self, websocket: WebSocket):
        self.state: Optional[GameState] = None
        self.initialized = False
        self.streaming = False
        self.gravity_task: Optional[asyncio.Task] = None
        self.last_gravity = time.monotonic()
        self.game_over_sent = False
        self.websocket = websocket

    def reset(self, seed: Optional[int] = None, bag: bool = False) -> SnapshotResponse:
        """Start a new game.

        Args:
            seed: Random seed (system randomness if None)
            bag: Use the 7-bag randomizer

        Returns:
            Initial snapshot response
        """
        self.state = GameState(seed=seed, bag_randomizer=bag)
        self.initialized = True
        self.game_over_sent = False
        self.last_gravity = time.monotonic()

        return SnapshotResponse(
            data=self.state.snapshot().to_dict(),
            done=False,
            info={"event": "reset", "seed": seed, "bag": bag},
        )

    def apply(self, command_name: str) -> SnapshotResponse:
        """Apply a player command.

        Args:
            command_name: Command enum name

        Returns:
            Step result as snapshot response

        Raises:
            RuntimeError: If game not initialized
            ValueError: If the command is unknown
        """
        if not self.initialized or self.state is None:
            raise RuntimeError("Game not initialized. Send reset first.")

        try:
            command = Command[command_name]
        except KeyError:
            raise ValueError(f"Invalid command: {command_name}")

        result = self.state.apply(command)
        info = dict(result.info)
        info["accepted"] = result.accepted

        return SnapshotResponse(
            data=result.snapshot.to_dict(),
            done=result.done,
            info=info,
        )

    def game_over_message(self) -> Optional[GameOverResponse]:
        """Final score message, produced once per game."""
        if self.state is None or not self.state.done or self.game_over_sent:
            return None
        self.game_over_sent = True
        return GameOverResponse(
            score=self.state.score,
            lines=self.state.lines_total,
            pieces=self.state.pieces_locked,
        )

    def start_streaming(self) -> None:
        """Start server-driven gravity."""
        self.streaming = True
        self.last_gravity = time.monotonic()
        if self.gravity_task is None or self.gravity_task.done():
            self.gravity_task = asyncio.create_task(self.run_gravity())

    def stop_streaming(self) -> None:
        """Stop server-driven gravity."""
        self.streaming = False
        if self.gravity_task and not self.gravity_task.done():
            self.gravity_task.cancel()
        # A cancelled task stays pending until its next await
        self.gravity_task = None

    async def send(self, message) -> None:
        await self.websocket.send_text(json.dumps(to_dict(message)))

    async def run_gravity(self) -> None:
        """Apply due gravity steps and push snapshots until the game ends."""
        try:
            logger.info("[Gravity] Started")

            while self.streaming and self.state is not None and not self.state.done:
                await asyncio.sleep(GRAVITY_POLL_SECONDS)

                now = time.monotonic()
                elapsed_ms = (now - self.last_gravity) * 1000.0
                result = self.state.tick(elapsed_ms)
                if result is None:
                    continue
                self.last_gravity = now

                await self.send(SnapshotResponse(
                    data=result.snapshot.to_dict(),
                    done=result.done,
                    info=result.info,
                ))

                game_over = self.game_over_message()
                if game_over:
                    logger.info(f"[Gravity] Game over: score={game_over.score}")
                    await self.send(game_over)

            logger.info("[Gravity] Ended")

        except asyncio.CancelledError:
            logger.info("[Gravity] Cancelled")
            raise
        except Exception as e:
            logger.error(f"[Gravity] Error: {e}", exc_info=True)
            if self.gravity_task is asyncio.current_task():
                self.streaming = False


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "blockfall-api", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for game communication."""
    await websocket.accept()
    session = GameSession(websocket)
    logger.info("[WS] Client connected")

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = parse_message(json.loads(data))

                if isinstance(message, HelloRequest):
                    if message.version != PROTOCOL_VERSION:
                        await session.send(ErrorResponse(
                            code=ErrorCode.VERSION_MISMATCH,
                            message=f"Unsupported protocol version: {message.version}",
                            details={"supported": PROTOCOL_VERSION},
                        ))
                        continue
                    await session.send(HelloResponse())

                elif isinstance(message, ResetRequest):
                    logger.info(f"[WS] Reset: seed={message.seed}, bag={message.bag}")
                    was_streaming = session.streaming
                    session.stop_streaming()
                    await session.send(session.reset(message.seed, message.bag))
                    if was_streaming:
                        session.start_streaming()

                elif isinstance(message, CommandRequest):
                    if session.state is not None and session.state.done:
                        await session.send(ErrorResponse(
                            code=ErrorCode.GAME_OVER,
                            message="Game over. Send reset to play again.",
                            details={"score": session.state.score},
                        ))
                        continue

                    try:
                        await session.send(session.apply(message.command))
                    except ValueError as e:
                        await session.send(ErrorResponse(
                            code=ErrorCode.INVALID_ACTION,
                            message=str(e),
                        ))
                        continue
                    except RuntimeError as e:
                        await session.send(ErrorResponse(
                            code=ErrorCode.GAME_NOT_INITIALIZED,
                            message=str(e),
                        ))
                        continue

                    game_over = session.game_over_message()
                    if game_over:
                        logger.info(f"[WS] Game over: score={game_over.score}")
                        await session.send(game_over)

                elif isinstance(message, SubscribeRequest):
                    if message.stream and not session.initialized:
                        await session.send(ErrorResponse(
                            code=ErrorCode.GAME_NOT_INITIALIZED,
                            message="Game not initialized. Send reset first.",
                        ))
                        continue

                    if message.stream:
                        session.start_streaming()
                    else:
                        session.stop_streaming()
                    logger.info(f"[WS] Streaming={session.streaming}")
                    await session.send(SubscribeAck(streaming=session.streaming))

            except json.JSONDecodeError as e:
                await session.send(ErrorResponse(
                    code=ErrorCode.INVALID_MESSAGE,
                    message=f"Invalid JSON: {str(e)}",
                ))

            except ValueError as e:
                await session.send(ErrorResponse(
                    code=ErrorCode.INVALID_MESSAGE,
                    message=str(e),
                ))

    except WebSocketDisconnect:
        logger.info("[WS] Client disconnected")
    finally:
        session.stop_streaming()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
