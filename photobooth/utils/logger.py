import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once for the whole process."""
    root = logging.getLogger()
    if getattr(root, "_photobooth_logging_configured", False):
        root.setLevel(level.upper())
        return

    root.setLevel(level.upper())
    formatter = logging.Formatter(
        "%(asctime)s [%(threadName)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S"
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # httpx logs every request at info level
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    root._photobooth_logging_configured = True
