"""Crop an uploaded screenshot to its text column and boost it for OCR."""
import asyncio
import base64
import binascii
import io
import logging
import re
from typing import BinaryIO, Optional, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from albumboard.config import CONTRAST
from albumboard.core.column_detector import detect_text_column_start
from albumboard.core.errors import CanvasUnavailableError, ImageDecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, BinaryIO]

_DATA_URL_RE = re.compile(r"^data:(.+?);base64,(.*)$", re.DOTALL)


def contrast_factor(contrast: float = CONTRAST) -> float:
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


def contrast_stretch(values, contrast: float = CONTRAST):
    """Apply the standard contrast curve around mid-gray, clamped to [0, 255]."""
    factor = contrast_factor(contrast)
    return np.clip(factor * (np.asarray(values, dtype=np.float64) - 128) + 128, 0, 255)


def grayscale_contrast(pixels: np.ndarray, contrast: float = CONTRAST) -> np.ndarray:
    """Average RGB to gray, stretch contrast, and write it back to all three channels."""
    gray = pixels[..., :3].astype(np.float64).mean(axis=-1)
    adjusted = np.rint(contrast_stretch(gray, contrast)).astype(np.uint8)
    return np.repeat(adjusted[..., np.newaxis], 3, axis=-1)


def decode_image(source: ImageSource) -> Image.Image:
    """Fully decode an image file (JPEG/PNG/WebP) or raise ImageDecodeError."""
    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        image = Image.open(stream)
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError() from e
    return image


def to_rgb_array(image: Image.Image) -> np.ndarray:
    """Render the decoded image into an (h, w, 3) uint8 working buffer."""
    if image.width <= 0 or image.height <= 0:
        raise CanvasUnavailableError()
    try:
        return np.asarray(image.convert("RGB"), dtype=np.uint8)
    except (OSError, ValueError) as e:
        raise CanvasUnavailableError() from e


def encode_png_data_url(pixels: np.ndarray) -> str:
    buf = io.BytesIO()
    Image.fromarray(pixels, "RGB").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def parse_data_url(data_url: str) -> Optional[Tuple[str, bytes]]:
    """Return (mime_type, payload) for a base64 data URL, or None if malformed."""
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        return None
    try:
        return match.group(1), base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        return None


def preprocess_image(source: ImageSource, focus_on_right_column: bool = True) -> str:
    """Return a PNG data URL of the (optionally cropped) grayscale, high-contrast image."""
    image = decode_image(source)
    pixels = to_rgb_array(image)
    height, width = pixels.shape[:2]

    source_x = 0
    if focus_on_right_column:
        source_x = detect_text_column_start(pixels, width, height)
        pixels = pixels[:, source_x:]

    logger.debug(
        "Image processing: original %dx%d, crop x=%d y=0 w=%d h=%d, focus_on_right_column=%s",
        width,
        height,
        source_x,
        width - source_x,
        height,
        focus_on_right_column,
    )
    return encode_png_data_url(grayscale_contrast(pixels))


async def preprocess(source: ImageSource, focus_on_right_column: bool = True) -> str:
    """Async wrapper: decoding and pixel work run in a worker thread."""
    return await asyncio.to_thread(preprocess_image, source, focus_on_right_column)
