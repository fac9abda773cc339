from typing import Optional

from fastapi import HTTPException

from photobooth.services.kiosk import Kiosk

_kiosk: Optional[Kiosk] = None


def set_kiosk(kiosk: Optional[Kiosk]) -> None:
    global _kiosk
    _kiosk = kiosk


def current_kiosk() -> Optional[Kiosk]:
    if _kiosk is None or not _kiosk.is_running:
        return None
    return _kiosk


def get_kiosk() -> Kiosk:
    kiosk = current_kiosk()
    if kiosk is None:
        raise HTTPException(status_code=503, detail="Photobooth is not running")
    return kiosk
