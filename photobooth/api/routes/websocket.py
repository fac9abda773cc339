import asyncio
import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from photobooth.api.dependencies import get_kiosk
from photobooth.services.kiosk import Kiosk

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_INTERVAL = 1 / 15  # ~15 FPS


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, kiosk: Kiosk = Depends(get_kiosk)):
    await websocket.accept()
    last_snapshot = None
    try:
        while True:
            snapshot = kiosk.snapshot()
            if snapshot != last_snapshot:
                await websocket.send_text(json.dumps({"type": "screen", "data": snapshot}))
                last_snapshot = snapshot

            frame = await kiosk.encode_camera_preview()
            if frame:
                await websocket.send_text(json.dumps({
                    "type": "preview",
                    "data": frame
                }))
            await asyncio.sleep(STREAM_INTERVAL)
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    except Exception:
        logger.exception("WebSocket error")
