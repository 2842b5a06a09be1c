"""WebSocket endpoint streaming live frames to logged-in viewers."""

from __future__ import annotations

import json

from fastapi import APIRouter, WebSocket

from controllers.auth_controller import COOKIE_NAME

router = APIRouter()

POLICY_VIOLATION = 1008


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket):
	"""Subscribe a viewer to frame broadcasts until it disconnects."""
	coordinator = websocket.app.state.coordinator
	await websocket.accept()
	if not coordinator.sessions.validate(websocket.cookies.get(COOKIE_NAME)):
		await websocket.send_text(json.dumps({"type": "error", "detail": "Unauthorized"}))
		await websocket.close(code=POLICY_VIOLATION)
		return

	handle = coordinator.hub.subscribe(websocket)
	try:
		while True:
			# Viewers only listen; anything they send is drained and ignored.
			message = await websocket.receive()
			if message["type"] == "websocket.disconnect":
				break
	finally:
		coordinator.hub.unsubscribe(handle)
