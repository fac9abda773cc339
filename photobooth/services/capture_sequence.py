import logging
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from photobooth.services.animation import KeyFrame, Timeline, bounce_out, quad_in, quad_in_out, quad_out

logger = logging.getLogger(__name__)

GET_READY_DURATION = 3.0
COUNTER_DURATION = 1.0
SNAP_DURATION = 0.5
FRAME_SIZE_DURATION = 1.0

GET_READY_FONT_SIZE = 60.0
COUNTER_RADIUS = 80.0

GET_READY_SIZE = [
    KeyFrame(0.0, 0.0),
    KeyFrame(0.2, GET_READY_FONT_SIZE, quad_out),
    KeyFrame(0.9, GET_READY_FONT_SIZE),
    KeyFrame(1.0, 0.0, quad_in),
]
COUNTER_SIZE = [
    KeyFrame(0.0, 0.0),
    KeyFrame(0.4, COUNTER_RADIUS, quad_out),
    KeyFrame(0.8, COUNTER_RADIUS),
    KeyFrame(1.0, 0.0, quad_in),
]
# the digit grows and shrinks with its circle
COUNTER_TEXT_SIZE = COUNTER_SIZE
COUNTER_ALPHA = [
    KeyFrame(0.0, 0.0),
    KeyFrame(0.4, 1.0, quad_in_out),
    KeyFrame(1.0, 1.0),
]
SNAP_ALPHA = [
    KeyFrame(0.0, 0.0),
    KeyFrame(0.2, 1.0, quad_in_out),
    KeyFrame(1.0, 0.0, quad_in_out),
]
FRAME_SCALE = [
    KeyFrame(0.0, 0.0),
    KeyFrame(1.0, 1.0, bounce_out),
]


class CaptureSequenceState(str, Enum):
    none = "none"
    get_ready = "get_ready"
    counter = "counter"
    snap = "snap"
    frame_size = "frame_size"


class SequenceSignal(str, Enum):
    capture = "capture"
    finished = "finished"


class CaptureSequenceController:
    """Countdown, flash and reveal for every frame of the template.

    ``tick`` returns ``SequenceSignal.capture`` when the countdown of a shot
    reaches zero and a frame has to be taken, and ``SequenceSignal.finished``
    once the reveal of the last frame is over.
    """

    def __init__(self, frame_count: int, countdown_from: int = 3):
        if frame_count < 1:
            raise ValueError("a capture sequence needs at least one frame")
        self.frame_count = frame_count
        self.countdown_from = max(countdown_from, 1)

        self.state = CaptureSequenceState.none
        self.counter: Optional[int] = None
        self.frames: List[np.ndarray] = []
        self.finished = False

        self.get_ready_timeline = Timeline(GET_READY_DURATION, GET_READY_SIZE)
        self.counter_timeline = Timeline(COUNTER_DURATION, COUNTER_SIZE)
        self.snap_timeline = Timeline(SNAP_DURATION, SNAP_ALPHA)
        self.frame_size_timeline = Timeline(FRAME_SIZE_DURATION, FRAME_SCALE)

    @property
    def is_animating(self) -> bool:
        return any(timeline.is_animating for timeline in self._timelines())

    def press_capture(self) -> bool:
        if self.state != CaptureSequenceState.none or self.finished:
            logger.debug("Capture pressed while a sequence is running, ignoring")
            return False
        self.state = CaptureSequenceState.get_ready
        self.get_ready_timeline.begin()
        return True

    def tick(self, dt: float) -> Optional[SequenceSignal]:
        for timeline in self._timelines():
            timeline.advance(dt)

        if self.state == CaptureSequenceState.get_ready:
            if self.get_ready_timeline.is_completed:
                self._start_counter()

        elif self.state == CaptureSequenceState.counter:
            if self.counter_timeline.is_completed:
                if self.counter > 1:
                    self.counter -= 1
                    self.counter_timeline.begin()
                else:
                    self.counter = None
                    self.state = CaptureSequenceState.snap
                    self.snap_timeline.begin()
                    self.frame_size_timeline.reset()
                    return SequenceSignal.capture

        elif self.state == CaptureSequenceState.snap:
            if self.snap_timeline.is_completed:
                self.state = CaptureSequenceState.frame_size

        elif self.state == CaptureSequenceState.frame_size:
            if self.frame_size_timeline.is_completed and not self.finished:
                if len(self.frames) < self.frame_count:
                    self._start_counter()
                else:
                    self.finished = True
                    return SequenceSignal.finished

        return None

    def frame_captured(self, frame: np.ndarray) -> bool:
        if len(self.frames) >= self.frame_count:
            logger.error(
                "Dropping captured frame: %d of %d template frames already filled",
                len(self.frames), self.frame_count
            )
            return False
        self.frames.append(frame)
        self.frame_size_timeline.begin()
        logger.info("Captured frame %d of %d", len(self.frames), self.frame_count)
        return True

    def animation_values(self) -> Dict[str, float]:
        values = {
            "get_ready_size": 0.0,
            "counter_radius": 0.0,
            "counter_alpha": 0.0,
            "counter_text_size": 0.0,
            "flash_alpha": 0.0,
            "frame_scale": self.frame_size_timeline.value if self.frames else 0.0,
        }
        if self.state == CaptureSequenceState.get_ready:
            values["get_ready_size"] = self.get_ready_timeline.value
        elif self.state == CaptureSequenceState.counter:
            values["counter_radius"] = self.counter_timeline.value
            values["counter_alpha"] = self.counter_timeline.sample(COUNTER_ALPHA)
            values["counter_text_size"] = self.counter_timeline.sample(COUNTER_TEXT_SIZE)
        elif self.state == CaptureSequenceState.snap:
            values["flash_alpha"] = self.snap_timeline.value
        return values

    def _start_counter(self) -> None:
        self.state = CaptureSequenceState.counter
        self.counter = self.countdown_from
        self.counter_timeline.begin()

    def _timelines(self):
        return (
            self.get_ready_timeline,
            self.counter_timeline,
            self.snap_timeline,
            self.frame_size_timeline,
        )
