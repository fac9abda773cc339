"""Shared pytest fixtures for the photobooth tests."""

import threading

import numpy as np
import pytest

from photobooth.models.booth import BoothConfig


def booth_config_data(frame_count: int = 3, **overrides) -> dict:
    data = {
        "name": "Test Booth",
        "fullscreen": False,
        "template": {
            "width": 300,
            "height": 600,
            "frames": [
                {"x": 20, "y": 20 + i * 190, "width": 260, "height": 170}
                for i in range(frame_count)
            ],
        },
        "emailExampleDomain": "school.edu",
        "emailWhitelistedDomains": [],
        "emailBlacklistedDomains": ["blocked.org"],
        "emailValidationFailedHelp": "Please use your school email address.",
        "emailServerEndpoint": "https://mailer.test/send",
        "emailMaxRecipients": 2,
        "mirrorPreview": True,
        "mirrorOutput": False,
    }
    data.update(overrides)
    return data


def make_frame(width: int = 160, height: int = 120, color=(255, 0, 0, 255)) -> np.ndarray:
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[:, :] = color
    return frame


class FakeCapture:
    """Stands in for cv2.VideoCapture and returns solid BGR frames."""

    def __init__(self, index: int = 0, opened: bool = True, width: int = 160, height: int = 120) -> None:
        self.index = index
        self.opened = opened
        self.width = width
        self.height = height
        self.fail_reads = False
        self.reads = 0
        self.released = False
        self.properties: dict = {}
        self._read_lock = threading.Lock()

    def isOpened(self) -> bool:
        return self.opened

    def set(self, prop, value) -> bool:
        self.properties[prop] = value
        return True

    def read(self):
        with self._read_lock:
            self.reads += 1
        if self.fail_reads:
            return False, None
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        frame[:, : self.width // 2] = (255, 0, 0)  # blue on the left half in BGR
        frame[:, self.width // 2:] = (0, 0, 255)  # red on the right half
        return True, frame

    def release(self) -> None:
        self.released = True
        self.opened = False


@pytest.fixture
def booth_config() -> BoothConfig:
    return BoothConfig.model_validate(booth_config_data())


@pytest.fixture
def single_frame_config() -> BoothConfig:
    return BoothConfig.model_validate(booth_config_data(frame_count=1))


@pytest.fixture
def fake_capture() -> FakeCapture:
    return FakeCapture()
