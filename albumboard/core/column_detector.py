"""Find where the cover-art grid ends and the text column begins in a list screenshot.

Album-list screenshots (AOTY, RYM and similar) put colorful covers on the left
and plain artist/album names on a dark or neutral background on the right.
We score narrow vertical strips by how many saturated pixels they hold,
averaged over a few horizontal bands so one odd cover doesn't dominate, and
take the rightmost strip that is still noticeably colorful.
"""
import logging

import numpy as np

from albumboard.config import (
    COLUMN_BANDS,
    COLUMN_FALLBACK_FRACTION,
    COLUMN_MAX_FRACTION,
    COLUMN_MIN_BRIGHTNESS,
    COLUMN_MIN_FRACTION,
    COLUMN_MIN_SATURATION,
    COLUMN_STRIP_WIDTH,
    COLUMN_THRESHOLD_RATIO,
)

logger = logging.getLogger(__name__)


def saturation_map(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return (saturation, brightness) per pixel for an (h, w, 3+) uint8 array."""
    rgb = pixels[..., :3].astype(np.float64)
    high = rgb.max(axis=-1)
    low = rgb.min(axis=-1)
    saturation = np.divide(high - low, high, out=np.zeros_like(high), where=high > 0)
    brightness = rgb.mean(axis=-1)
    return saturation, brightness


def colorfulness_curve(
    pixels: np.ndarray,
    width: int,
    height: int,
    *,
    bands: int = COLUMN_BANDS,
    strip_width: int = COLUMN_STRIP_WIDTH,
    min_brightness: float = COLUMN_MIN_BRIGHTNESS,
    min_saturation: float = COLUMN_MIN_SATURATION,
) -> np.ndarray:
    """Colorfulness per strip, averaged over the horizontal bands.

    A strip's score is (fraction of bright, saturated pixels) times (mean
    saturation of those pixels). Pixels past the right edge count as
    empty, so a narrow final strip scores lower.
    """
    band_height = height // bands
    region = pixels[: band_height * bands, :width]
    saturation, brightness = saturation_map(region)
    qualifies = (brightness > min_brightness) & (saturation > min_saturation)
    qualified_sat = np.where(qualifies, saturation, 0.0)

    starts = np.arange(0, width, strip_width)
    # (bands, band_height, width) -> per-band column sums -> per-strip sums
    col_count = qualifies.reshape(bands, band_height, width).sum(axis=1)
    col_sat = qualified_sat.reshape(bands, band_height, width).sum(axis=1)
    strip_count = np.add.reduceat(col_count, starts, axis=1).astype(np.float64)
    strip_sat = np.add.reduceat(col_sat, starts, axis=1)

    # a partial strip at the right edge is still scored over a full strip
    pixel_count = strip_width * band_height
    fraction = strip_count / pixel_count
    mean_sat = strip_sat / np.maximum(strip_count, 1)
    return (fraction * mean_sat).mean(axis=0)


def detect_text_column_start(
    pixels: np.ndarray,
    width: int,
    height: int,
    *,
    threshold_ratio: float = COLUMN_THRESHOLD_RATIO,
    strip_width: int = COLUMN_STRIP_WIDTH,
    bands: int = COLUMN_BANDS,
) -> int:
    """Return the x offset (pixels) where the text column starts. Never raises.

    Results outside [40%, 75%] of the width are treated as noise and replaced
    by a fixed 55%.
    """
    fallback = int(width * COLUMN_FALLBACK_FRACTION)
    if width <= 0 or height < bands:
        logger.info("Image too small for column detection (%dx%d), using fallback", width, height)
        return fallback

    curve = colorfulness_curve(pixels, width, height, bands=bands, strip_width=strip_width)
    threshold = float(curve.max()) * threshold_ratio
    colorful = np.nonzero(curve > threshold)[0]
    last_colorful = int(colorful[-1]) if colorful.size else 0
    text_start = (last_colorful + 1) * strip_width

    if not (width * COLUMN_MIN_FRACTION <= text_start <= width * COLUMN_MAX_FRACTION):
        logger.info("Detection outside expected range (x=%d), using fallback", text_start)
        text_start = fallback

    logger.info(
        "Text column starts at x=%d (%d%% from left)",
        text_start,
        round(text_start / width * 100),
    )
    return text_start
