import io
import logging
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from photobooth.errors import CompositionError
from photobooth.models.booth import Template

logger = logging.getLogger(__name__)

FrameSource = Union[np.ndarray, Image.Image]


def center_crop_box(width: int, height: int, aspect_ratio: float) -> Tuple[int, int, int, int]:
    """Largest centered (left, top, right, bottom) box of ``aspect_ratio`` inside width x height."""
    frame_aspect_ratio = width / height
    if aspect_ratio < frame_aspect_ratio:
        # trim off left and right
        new_width = int(height * aspect_ratio)
        left = (width - new_width) // 2
        return left, 0, left + new_width, height
    if aspect_ratio > frame_aspect_ratio:
        # trim off top and bottom
        new_height = int(width / aspect_ratio)
        top = (height - new_height) // 2
        return 0, top, width, top + new_height
    return 0, 0, width, height


def to_image(frame: FrameSource) -> Image.Image:
    if isinstance(frame, Image.Image):
        return frame.convert("RGBA")
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise CompositionError(f"Expected an RGBA frame, got shape {frame.shape}")
    return Image.fromarray(np.ascontiguousarray(frame, dtype=np.uint8), "RGBA")


def load_background(path: Optional[str], template: Template) -> Image.Image:
    if not path:
        return Image.new("RGBA", template.size, "white")
    try:
        with Image.open(path) as img:
            background = img.convert("RGBA")
    except OSError as e:
        raise CompositionError(f"Could not read template image {path}: {e}") from e

    if background.size != template.size:
        logger.warning(
            "Template image %s is %dx%d, resizing to template size %dx%d",
            path, background.width, background.height, *template.size
        )
        background = background.resize(template.size, Image.Resampling.LANCZOS)
    return background


def compose(background: Image.Image, frames: Sequence[FrameSource], template: Template) -> Image.Image:
    """Overlay ``frames`` onto a copy of ``background`` following the template geometry.

    Frame ``i`` is center-cropped to the aspect ratio of template rectangle
    ``i``, resized to the rectangle with a Lanczos filter and alpha-composited
    at its position. ``background`` itself is never modified.
    """
    if len(frames) > len(template.frames):
        raise CompositionError(
            f"{len(frames)} captured frames exceed the {len(template.frames)} frames of the template"
        )

    # convert() hands back a copy even when the mode already matches
    final_img = background.convert("RGBA")
    if final_img.size != template.size:
        final_img = final_img.resize(template.size, Image.Resampling.LANCZOS)

    for frame, template_frame in zip(frames, template.frames):
        img = to_image(frame)
        cropped = img.crop(center_crop_box(img.width, img.height, template_frame.aspect_ratio))
        target_size = (int(template_frame.width), int(template_frame.height))
        resized = cropped.resize(target_size, Image.Resampling.LANCZOS)
        final_img.alpha_composite(resized, (int(template_frame.x), int(template_frame.y)))

    logger.info("Composed %d frames onto a %dx%d template", len(frames), *template.size)
    return final_img


def encode_png(image: Image.Image, optimize: bool = False) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=optimize)
    return buffer.getvalue()


def make_preview(image: Image.Image, max_size: int) -> Image.Image:
    preview = image.copy()
    preview.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    return preview


def compose_printable(
    background_path: Optional[str],
    frames: List[np.ndarray],
    template: Template,
    preview_size: int
) -> Tuple[Image.Image, Image.Image]:
    printable = compose(load_background(background_path, template), frames, template)
    return printable, make_preview(printable, preview_size)
