import json
import logging
import os
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .coaches import get_default_registry
from .collaborators import EventOutbox, OutboxOverlay, OutboxSpeech
from .config import CoachConfig
from .session import SessionController

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

HOST = os.getenv("COACH_HOST", "0.0.0.0")
PORT = int(os.getenv("COACH_PORT", "8000"))

coach_config = CoachConfig.from_env()
registry = get_default_registry()

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {
        "message": "Welcome to FormCoach - Live Posture Feedback API",
        "exercises": registry.exercises(),
    }


@app.get("/exercises")
def list_exercises():
    return {
        "exercises": [
            {
                "id": exercise_id,
                "rules": [rule.name for rule in registry.rules_for(exercise_id)],
            }
            for exercise_id in registry.exercises()
        ]
    }


def handle_command(controller: SessionController, command_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a client control command and return the reply to send, if any."""
    command = command_data.get("command")

    if command == "select_exercise":
        exercise = command_data.get("exercise")
        if not isinstance(exercise, str) or not exercise.strip():
            return {"type": "error", "message": "select_exercise requires an 'exercise' id"}
        controller.select_exercise(exercise)
    elif command == "end_session":
        controller.end_session()
    elif command != "status":
        return {"type": "error", "message": f"Unknown command '{command}'"}

    return {"type": "status", **controller.get_status()}


def _decode(data: str) -> Optional[Any]:
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return None


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    logger.info("WebSocket connection accepted.")

    outbox = EventOutbox()
    controller = SessionController(
        speech=OutboxSpeech(outbox),
        overlay=OutboxOverlay(outbox),
        registry=registry,
        config=coach_config,
    )

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            data = message.get("text")
            payload = _decode(data) if data is not None else None
            if not isinstance(payload, dict):
                logger.warning("Received malformed data packet")
                continue

            reply = None
            if "command" in payload:
                reply = handle_command(controller, payload)
            else:
                controller.handle_message(payload)

            for event in outbox.drain():
                await websocket.send_json(event)
            if reply:
                await websocket.send_json(reply)

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        controller.end_session()
        logger.info("Client connection closed")


def main():
    uvicorn.run(app, host=HOST, port=PORT, loop="uvloop")


if __name__ == "__main__":
    main()
