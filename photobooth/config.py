from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    app_name: str = "Email Photobooth"
    app_description: str = "A kiosk photobooth that emails the composed photo strip"
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    booth_config_path: str = "assets/config.json"
    template_image_path: Optional[str] = None

    camera_width: int = 1920
    camera_height: int = 1080
    camera_fps: int = 30
    preview_width: int = 640
    preview_border_radius: int = 48
    generated_preview_size: int = 800

    countdown_from: int = 3
    tick_rate: float = 60.0
    alert_timeout: float = 4.0
    delivery_timeout: Optional[float] = None
    worker_count: int = 4

    class Config:
        env_file = ".env"
        env_prefix = "PHOTOBOOTH_"


settings = Settings()
