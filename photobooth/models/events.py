"""Inputs of the screen flow (events) and the work it asks for (commands)."""
from dataclasses import dataclass, field
from typing import List, Optional, Union

import numpy as np
from PIL import Image

from photobooth.models.delivery import DeliveryResult


@dataclass(frozen=True)
class ConfigConfirmed:
    camera_index: int


@dataclass(frozen=True)
class CaptureButtonPressed:
    pass


@dataclass(frozen=True)
class Tick:
    dt: float


@dataclass(frozen=True)
class FrameCaptured:
    frame: np.ndarray = field(repr=False)


@dataclass(frozen=True)
class DeviceFailed:
    message: str


@dataclass(frozen=True)
class CompositionFinished:
    printable_image: Image.Image = field(repr=False)
    preview_image: Image.Image = field(repr=False)


@dataclass(frozen=True)
class CompositionFailed:
    message: str


@dataclass(frozen=True)
class EmailInputChanged:
    text: str


@dataclass(frozen=True)
class EmailSubmitted:
    pass


@dataclass(frozen=True)
class DeliveryFinished:
    result: DeliveryResult


@dataclass(frozen=True)
class AlertTimedOut:
    pass


@dataclass(frozen=True)
class ErrorAcknowledged:
    pass


Event = Union[
    ConfigConfirmed, CaptureButtonPressed, Tick, FrameCaptured, DeviceFailed,
    CompositionFinished, CompositionFailed, EmailInputChanged, EmailSubmitted,
    DeliveryFinished, AlertTimedOut, ErrorAcknowledged,
]


@dataclass(frozen=True)
class Envelope:
    """An event on the kiosk queue; ``generation`` is set for results of background work."""
    event: Event
    generation: Optional[int] = None


@dataclass(frozen=True)
class OpenCamera:
    camera_index: int


@dataclass(frozen=True)
class CaptureFrame:
    pass


@dataclass(frozen=True)
class ComposeImage:
    frames: List[np.ndarray] = field(repr=False)


@dataclass(frozen=True)
class SendImage:
    image: Image.Image = field(repr=False)
    addresses: List[str]


@dataclass(frozen=True)
class StartAlertTimer:
    timeout: float


Command = Union[OpenCamera, CaptureFrame, ComposeImage, SendImage, StartAlertTimer]
