"""Tests for the kiosk HTTP and WebSocket routes with a stand-in kiosk."""

import asyncio
import json
import logging

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient
from PIL import Image

from photobooth.api.dependencies import get_kiosk
from photobooth.api.routes.websocket import websocket_endpoint
from photobooth.main import app
from photobooth.models.events import (
    CaptureButtonPressed, ConfigConfirmed, EmailInputChanged, EmailSubmitted, ErrorAcknowledged
)
from photobooth.services.compositor import encode_png


class RecordingKiosk:
    def __init__(self) -> None:
        self.events = []
        self.image = None

    def post(self, event, generation=None) -> None:
        self.events.append(event)

    def snapshot(self) -> dict:
        return {"screen": "config", "generation": 1, "data": {"name": "Test Booth"}}

    async def encode_preview_image(self):
        if self.image is None:
            return None
        return encode_png(self.image)


@pytest.fixture
def kiosk():
    recording = RecordingKiosk()
    app.dependency_overrides[get_kiosk] = lambda: recording
    yield recording
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_get_screen(client: TestClient, kiosk: RecordingKiosk) -> None:
    response = client.get("/api/kiosk/screen")
    assert response.status_code == 200
    assert response.json() == {"screen": "config", "generation": 1, "data": {"name": "Test Booth"}}


def test_routes_queue_events(client: TestClient, kiosk: RecordingKiosk) -> None:
    assert client.post("/api/kiosk/config", json={"camera_index": 1}).status_code == 202
    assert client.post("/api/kiosk/capture").status_code == 202
    assert client.post("/api/kiosk/email/input", json={"text": "a@ok.com"}).status_code == 202
    response = client.post("/api/kiosk/email/submit")
    assert client.post("/api/kiosk/error/acknowledge").status_code == 202

    assert response.json() == {"accepted": True, "event": "EmailSubmitted"}
    assert kiosk.events == [
        ConfigConfirmed(camera_index=1),
        CaptureButtonPressed(),
        EmailInputChanged(text="a@ok.com"),
        EmailSubmitted(),
        ErrorAcknowledged(),
    ]


def test_negative_camera_index_is_rejected(client: TestClient, kiosk: RecordingKiosk) -> None:
    response = client.post("/api/kiosk/config", json={"camera_index": -1})
    assert response.status_code == 422
    assert kiosk.events == []


def test_preview_missing_is_404(client: TestClient, kiosk: RecordingKiosk) -> None:
    assert client.get("/api/kiosk/preview").status_code == 404


def test_preview_is_png(client: TestClient, kiosk: RecordingKiosk) -> None:
    kiosk.image = Image.new("RGBA", (20, 30), "white")
    response = client.get("/api/kiosk/preview")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_routes_unavailable_without_kiosk(client: TestClient) -> None:
    assert client.get("/api/kiosk/screen").status_code == 503


def test_health_before_startup(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "starting", "screen": None}


class FakeWebSocket:
    def __init__(self, fail_with=None, close_after: int = 2) -> None:
        self.sent = []
        self.fail_with = fail_with
        self.close_after = close_after

    async def accept(self) -> None:
        pass

    async def send_text(self, text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(json.loads(text))
        if len(self.sent) >= self.close_after:
            raise WebSocketDisconnect(code=1000)


class StreamingKiosk(RecordingKiosk):
    async def encode_camera_preview(self):
        return "cHJldmlldw=="


def test_stream_sends_screen_then_preview() -> None:
    socket = FakeWebSocket(close_after=2)
    asyncio.run(websocket_endpoint(socket, StreamingKiosk()))
    assert [message["type"] for message in socket.sent] == ["screen", "preview"]
    assert socket.sent[1]["data"] == "cHJldmlldw=="


def test_stream_logs_errors_on_a_closed_socket(caplog) -> None:
    socket = FakeWebSocket(fail_with=RuntimeError("socket already closed"))
    with caplog.at_level(logging.ERROR, logger="photobooth.api.routes.websocket"):
        asyncio.run(websocket_endpoint(socket, StreamingKiosk()))
    assert "WebSocket error" in caplog.text
    assert "socket already closed" in caplog.text
