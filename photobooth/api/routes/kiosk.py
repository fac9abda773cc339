import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from photobooth.api.dependencies import get_kiosk
from photobooth.models.events import (
    CaptureButtonPressed, ConfigConfirmed, EmailInputChanged, EmailSubmitted, ErrorAcknowledged, Event
)
from photobooth.models.kiosk import CameraSelectionRequest, EmailInputRequest, EventAccepted, ScreenSnapshot
from photobooth.services.kiosk import Kiosk

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kiosk", tags=["kiosk"])


def _post(kiosk: Kiosk, event: Event) -> EventAccepted:
    kiosk.post(event)
    logger.debug("Queued %s", type(event).__name__)
    return EventAccepted(event=type(event).__name__)


@router.get("/screen", response_model=ScreenSnapshot)
async def get_screen(kiosk: Kiosk = Depends(get_kiosk)):
    return ScreenSnapshot(**kiosk.snapshot())


@router.post("/config", response_model=EventAccepted, status_code=202)
async def confirm_config(request: CameraSelectionRequest, kiosk: Kiosk = Depends(get_kiosk)):
    return _post(kiosk, ConfigConfirmed(camera_index=request.camera_index))


@router.post("/capture", response_model=EventAccepted, status_code=202)
async def press_capture(kiosk: Kiosk = Depends(get_kiosk)):
    return _post(kiosk, CaptureButtonPressed())


@router.post("/email/input", response_model=EventAccepted, status_code=202)
async def change_email_input(request: EmailInputRequest, kiosk: Kiosk = Depends(get_kiosk)):
    return _post(kiosk, EmailInputChanged(text=request.text))


@router.post("/email/submit", response_model=EventAccepted, status_code=202)
async def submit_email(kiosk: Kiosk = Depends(get_kiosk)):
    return _post(kiosk, EmailSubmitted())


@router.post("/error/acknowledge", response_model=EventAccepted, status_code=202)
async def acknowledge_error(kiosk: Kiosk = Depends(get_kiosk)):
    return _post(kiosk, ErrorAcknowledged())


@router.get("/preview")
async def get_preview(kiosk: Kiosk = Depends(get_kiosk)):
    content = await kiosk.encode_preview_image()
    if content is None:
        raise HTTPException(status_code=404, detail="No composed photo on this screen")
    return Response(content=content, media_type="image/png")
