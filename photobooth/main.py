import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photobooth.api.dependencies import current_kiosk, set_kiosk
from photobooth.api.routes import kiosk, websocket
from photobooth.config import settings
from photobooth.models.booth import load_booth_config
from photobooth.services.kiosk import Kiosk
from photobooth.utils.logger import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(kiosk.router, prefix="/api")
app.include_router(websocket.router)


@app.on_event("startup")
async def startup_event():
    setup_logging(settings.log_level)
    booth_config = load_booth_config(settings.booth_config_path)
    logger.info("Loaded booth config %r with %d template frames",
                booth_config.name, len(booth_config.template.frames))
    booth = Kiosk(booth_config)
    await booth.start()
    set_kiosk(booth)


@app.on_event("shutdown")
async def shutdown_event():
    booth = current_kiosk()
    set_kiosk(None)
    if booth is not None:
        await booth.stop()


@app.get("/health")
async def health_check():
    booth = current_kiosk()
    if booth is None:
        return {"status": "starting", "screen": None}
    return {"status": "healthy", "screen": booth.screen.kind.value}
