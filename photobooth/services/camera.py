import base64
import logging
import threading
from functools import lru_cache
from typing import Callable, Optional

import cv2
import numpy as np
from PIL import Image, ImageDraw

from photobooth.config import settings
from photobooth.errors import DeviceError
from photobooth.services.compositor import center_crop_box

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _corner_mask(width: int, height: int, radius: int) -> np.ndarray:
    mask = Image.new("L", (width, height), 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
    return np.asarray(mask)


def round_corners(frame: np.ndarray, radius: int) -> np.ndarray:
    height, width = frame.shape[:2]
    radius = min(radius, width // 2, height // 2)
    if radius <= 0:
        return frame
    rounded = frame.copy()
    rounded[..., 3] = np.minimum(rounded[..., 3], _corner_mask(width, height, radius))
    return rounded


def crop_to_aspect_ratio(frame: np.ndarray, aspect_ratio: float) -> np.ndarray:
    height, width = frame.shape[:2]
    left, top, right, bottom = center_crop_box(width, height, aspect_ratio)
    return frame[top:bottom, left:right]


class CameraFeed:
    """Exclusive owner of one camera device.

    The preview loop and one-shot captures share ``_lock``, so a still capture
    may wait for the preview read in flight.
    """

    def __init__(
            self,
            index: int,
            mirror_preview: bool = True,
            mirror_output: bool = False,
            aspect_ratio: Optional[float] = None,
            border_radius: int = 48,
            capture_factory: Callable = cv2.VideoCapture
    ):
        self.index = index
        self.mirror_preview = mirror_preview
        self.mirror_output = mirror_output
        self.aspect_ratio = aspect_ratio
        self.border_radius = border_radius
        self.camera = None
        self.is_active = False

        self._capture_factory = capture_factory
        self._lock = threading.Lock()
        self._latest_lock = threading.Lock()
        self._latest_frame: Optional[np.ndarray] = None

    def open(self) -> None:
        with self._lock:
            if self.is_active:
                return
            camera = self._capture_factory(self.index)
            if not camera.isOpened():
                camera.release()
                raise DeviceError(f"Could not open camera {self.index}")

            camera.set(cv2.CAP_PROP_FRAME_WIDTH, settings.camera_width)
            camera.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.camera_height)
            camera.set(cv2.CAP_PROP_FPS, settings.camera_fps)

            self.camera = camera
            self.is_active = True
        logger.info("Opened camera %s", self.index)

    def capture_frame(self) -> np.ndarray:
        """Read and decode one frame to an RGBA array. Blocks until the device answers."""
        with self._lock:
            if not self.is_active or self.camera is None:
                raise DeviceError("Camera is not open")
            ret, frame = self.camera.read()

        if not ret or frame is None:
            raise DeviceError("Failed to capture a camera frame")
        try:
            return cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        except cv2.error as e:
            raise DeviceError(f"Failed to decode the camera frame: {e}") from e

    def capture_still(self) -> np.ndarray:
        frame = self.capture_frame()
        if self.mirror_output:
            frame = cv2.flip(frame, 1)
        return frame

    def preview_frame(self) -> np.ndarray:
        frame = self.capture_frame()
        if self.aspect_ratio:
            frame = crop_to_aspect_ratio(frame, self.aspect_ratio)
        if self.mirror_preview:
            frame = cv2.flip(frame, 1)
        frame = round_corners(frame, self.border_radius)

        with self._latest_lock:
            self._latest_frame = frame
        return frame

    @property
    def latest_frame(self) -> Optional[np.ndarray]:
        with self._latest_lock:
            return self._latest_frame

    def encode_preview(self) -> Optional[str]:
        frame = self.latest_frame
        if frame is None:
            return None

        height, width = frame.shape[:2]
        if width > settings.preview_width:
            preview_height = int(height * settings.preview_width / width)
            frame = cv2.resize(frame, (settings.preview_width, preview_height))

        ok, buffer = cv2.imencode('.png', cv2.cvtColor(frame, cv2.COLOR_RGBA2BGRA))
        if not ok:
            return None
        return base64.b64encode(buffer).decode('utf-8')

    def release(self) -> None:
        with self._lock:
            if self.camera is not None:
                self.camera.release()
            self.camera = None
            self.is_active = False
        with self._latest_lock:
            self._latest_frame = None
        logger.info("Released camera %s", self.index)
