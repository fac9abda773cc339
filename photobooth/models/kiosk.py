from typing import Any, Dict

from pydantic import BaseModel, Field

from photobooth.services.screens import ScreenKind


class CameraSelectionRequest(BaseModel):
    camera_index: int = Field(ge=0)


class EmailInputRequest(BaseModel):
    text: str = Field(max_length=320)


class ScreenSnapshot(BaseModel):
    screen: ScreenKind
    generation: int
    data: Dict[str, Any] = {}


class EventAccepted(BaseModel):
    accepted: bool = True
    event: str
