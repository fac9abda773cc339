from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image

from photobooth.models.booth import BoothConfig
from photobooth.services.animation import Timeline, quad_in_out
from photobooth.services.capture_sequence import CaptureSequenceController
from photobooth.services.email_validator import RecipientForm

GENERATION_PROGRESS_DURATION = 3.0
GENERATION_PROGRESS_TARGET = 0.8
GENERATION_FINISH_DURATION = 0.5


class ScreenKind(str, Enum):
    config = "config"
    camera = "camera"
    generation = "generation"
    email = "email"
    sending = "sending"
    alert = "alert"
    error = "error"


class Screen:
    kind: ScreenKind

    def __init__(self, config: BoothConfig, camera_index: Optional[int] = None):
        self.config = config
        self.camera_index = camera_index

    @property
    def is_animating(self) -> bool:
        return False

    def snapshot(self) -> Dict[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} camera={self.camera_index}>"


class ConfigScreen(Screen):
    kind = ScreenKind.config

    def snapshot(self) -> Dict[str, Any]:
        return {"name": self.config.name, "fullscreen": self.config.fullscreen}


class CameraScreen(Screen):
    kind = ScreenKind.camera

    def __init__(self, config: BoothConfig, camera_index: int, countdown_from: int = 3):
        super().__init__(config, camera_index)
        self.sequence = CaptureSequenceController(len(config.template.frames), countdown_from)

    @property
    def is_animating(self) -> bool:
        return self.sequence.is_animating

    def snapshot(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence.state.value,
            "counter": self.sequence.counter,
            "captured": len(self.sequence.frames),
            "frames": len(self.config.template.frames),
            "animation": self.sequence.animation_values(),
        }


class GenerationPhase(str, Enum):
    generating = "generating"
    finished = "finished"


class GenerationScreen(Screen):
    kind = ScreenKind.generation

    def __init__(self, config: BoothConfig, camera_index: int, raw_frames: List[np.ndarray]):
        super().__init__(config, camera_index)
        self.raw_frames = raw_frames
        self.phase = GenerationPhase.generating
        self.printable_image: Optional[Image.Image] = None
        self.preview_image: Optional[Image.Image] = None
        self.progress = Timeline.tween(
            GENERATION_PROGRESS_DURATION, 0.0, GENERATION_PROGRESS_TARGET, quad_in_out
        )
        self.progress.begin()

    @property
    def is_animating(self) -> bool:
        return self.progress.is_animating

    def finish(self, printable_image: Image.Image, preview_image: Image.Image) -> None:
        self.printable_image = printable_image
        self.preview_image = preview_image
        self.phase = GenerationPhase.finished
        self.progress = Timeline.tween(
            GENERATION_FINISH_DURATION, self.progress.value, 1.0, quad_in_out
        )
        self.progress.begin()

    @property
    def is_done(self) -> bool:
        return self.phase == GenerationPhase.finished and self.progress.is_completed

    def snapshot(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "progress": round(self.progress.value, 3),
            "message": "Processing your photos...",
        }


class EmailScreen(Screen):
    kind = ScreenKind.email

    def __init__(
            self,
            config: BoothConfig,
            camera_index: int,
            preview_image: Image.Image,
            printable_image: Image.Image
    ):
        super().__init__(config, camera_index)
        self.preview_image = preview_image
        self.printable_image = printable_image
        self.form = RecipientForm(config)

    def snapshot(self) -> Dict[str, Any]:
        form = self.form
        return {
            "title": "Enter your emails",
            "addresses": list(form.addresses),
            "current": form.current,
            "validity": form.validity.value if form.validity else None,
            "accepting_input": not form.is_full,
            "max_recipients": form.max_recipients,
            "placeholder": form.placeholder,
            "action": form.action_label,
            "guidance": form.guidance,
        }


class SendingScreen(Screen):
    kind = ScreenKind.sending

    def __init__(self, config: BoothConfig, camera_index: int, image: Image.Image, addresses: List[str]):
        super().__init__(config, camera_index)
        self.image = image
        self.addresses = list(addresses)

    def snapshot(self) -> Dict[str, Any]:
        return {"message": "Emailing your photos to you...", "recipients": len(self.addresses)}


class AlertScreen(Screen):
    kind = ScreenKind.alert

    def __init__(self, config: BoothConfig, camera_index: int, title: str, content: str, timeout: float):
        super().__init__(config, camera_index)
        self.title = title
        self.content = content
        self.timeout = timeout

    def snapshot(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content, "timeout": self.timeout}


class ErrorScreen(Screen):
    kind = ScreenKind.error

    def __init__(self, config: BoothConfig, camera_index: Optional[int], title: str, content: str):
        super().__init__(config, camera_index)
        self.title = title
        self.content = content

    def snapshot(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content, "action": "Press [Space] to close error"}
