"""Tests for the camera feed using a fake capture device."""

import base64
import threading

import cv2
import numpy as np
import pytest

from conftest import FakeCapture
from photobooth.config import settings
from photobooth.errors import DeviceError
from photobooth.services.camera import CameraFeed, crop_to_aspect_ratio, round_corners

BLUE = [0, 0, 255, 255]
RED = [255, 0, 0, 255]


def open_feed(capture: FakeCapture, **kwargs) -> CameraFeed:
    feed = CameraFeed(capture.index, capture_factory=lambda index: capture, **kwargs)
    feed.open()
    return feed


def test_open_configures_device(fake_capture: FakeCapture) -> None:
    feed = open_feed(fake_capture)
    assert feed.is_active is True
    assert fake_capture.properties[cv2.CAP_PROP_FRAME_WIDTH] == settings.camera_width
    assert fake_capture.properties[cv2.CAP_PROP_FRAME_HEIGHT] == settings.camera_height


def test_open_failure_raises_device_error() -> None:
    capture = FakeCapture(opened=False)
    feed = CameraFeed(0, capture_factory=lambda index: capture)
    with pytest.raises(DeviceError):
        feed.open()
    assert capture.released is True
    assert feed.is_active is False


def test_capture_before_open_raises() -> None:
    with pytest.raises(DeviceError):
        CameraFeed(0, capture_factory=FakeCapture).capture_frame()


def test_capture_frame_decodes_to_rgba(fake_capture: FakeCapture) -> None:
    frame = open_feed(fake_capture).capture_frame()
    assert frame.shape == (120, 160, 4)
    assert frame[60, 10].tolist() == BLUE
    assert frame[60, 150].tolist() == RED


def test_failed_read_raises_device_error(fake_capture: FakeCapture) -> None:
    feed = open_feed(fake_capture)
    fake_capture.fail_reads = True
    with pytest.raises(DeviceError):
        feed.capture_frame()


def test_still_is_mirrored_only_when_configured(fake_capture: FakeCapture) -> None:
    plain = open_feed(fake_capture).capture_still()
    assert plain[60, 10].tolist() == BLUE

    mirrored = open_feed(FakeCapture(), mirror_output=True).capture_still()
    assert mirrored[60, 10].tolist() == RED


def test_preview_is_cropped_mirrored_and_rounded(fake_capture: FakeCapture) -> None:
    feed = open_feed(fake_capture, aspect_ratio=1.0, border_radius=20)
    frame = feed.preview_frame()

    assert frame.shape == (120, 120, 4)
    assert frame[60, 10].tolist() == RED
    assert frame[60, 110].tolist() == BLUE
    assert frame[0, 0, 3] == 0
    assert frame[60, 60, 3] == 255
    assert feed.latest_frame is frame


def test_encode_preview_produces_png(fake_capture: FakeCapture) -> None:
    feed = open_feed(fake_capture)
    assert feed.encode_preview() is None

    feed.preview_frame()
    raw = base64.b64decode(feed.encode_preview())
    assert raw.startswith(b"\x89PNG\r\n\x1a\n")


def test_release_closes_device(fake_capture: FakeCapture) -> None:
    feed = open_feed(fake_capture)
    feed.preview_frame()
    feed.release()
    assert fake_capture.released is True
    assert feed.is_active is False
    assert feed.latest_frame is None
    with pytest.raises(DeviceError):
        feed.capture_frame()


def test_crop_to_aspect_ratio_keeps_center() -> None:
    frame = np.zeros((100, 400, 4), dtype=np.uint8)
    frame[:, 190:210] = 255
    cropped = crop_to_aspect_ratio(frame, 1.0)
    assert cropped.shape[:2] == (100, 100)
    assert cropped[50, 0, 0] == 0
    assert cropped[50, 50, 0] == 255


def test_round_corners_without_radius_is_noop() -> None:
    frame = np.full((10, 10, 4), 255, dtype=np.uint8)
    assert round_corners(frame, 0) is frame


class BlockingCapture(FakeCapture):
    """Holds the first read open until the test lets it finish."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.proceed = threading.Event()

    def read(self):
        first = self.reads == 0
        result = super().read()
        if first:
            self.entered.set()
            self.proceed.wait(5.0)
        return result


def test_still_capture_waits_for_preview_read_in_flight() -> None:
    capture = BlockingCapture()
    feed = open_feed(capture)

    preview = threading.Thread(target=feed.preview_frame)
    preview.start()
    assert capture.entered.wait(5.0)

    still = threading.Thread(target=feed.capture_still)
    still.start()
    still.join(0.2)
    assert still.is_alive()
    assert capture.reads == 1

    capture.proceed.set()
    preview.join(5.0)
    still.join(5.0)
    assert not still.is_alive()
    assert capture.reads == 2
