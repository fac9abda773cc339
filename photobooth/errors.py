class PhotoboothError(Exception):
    """Base class for every error raised by the photobooth."""


class ConfigError(PhotoboothError):
    """The booth configuration file is missing or invalid."""


class DeviceError(PhotoboothError):
    """The camera could not be opened, read or decoded."""


class CompositionError(PhotoboothError):
    """The captured frames could not be composed onto the template."""
