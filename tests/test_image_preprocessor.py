import asyncio
import base64
import io

import numpy as np
import pytest
from PIL import Image

from albumboard.core.errors import ImageDecodeError
from albumboard.core.image_preprocessor import (
    contrast_factor,
    contrast_stretch,
    grayscale_contrast,
    parse_data_url,
    preprocess,
    preprocess_image,
)


def _png_bytes(pixels: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(pixels, "RGB").save(buf, format="PNG")
    return buf.getvalue()


def _decode(data_url: str) -> np.ndarray:
    mime, payload = parse_data_url(data_url)
    assert mime == "image/png"
    return np.asarray(Image.open(io.BytesIO(payload)).convert("RGB"))


def _screenshot(width=200, height=100, covers_until=120):
    img = np.full((height, width, 3), 15, dtype=np.uint8)
    img[:, :covers_until] = (220, 60, 30)
    img[40:50, covers_until + 10:covers_until + 60] = 240  # "text"
    return img


def test_contrast_output_is_bounded_for_every_input():
    values = np.arange(256)
    out = contrast_stretch(values)
    assert out.min() >= 0
    assert out.max() <= 255


def test_contrast_factor_formula():
    assert contrast_factor(2.0) == pytest.approx((259 * 257) / (255 * 257))
    assert contrast_stretch(128) == pytest.approx(128)


def test_contrast_pushes_away_from_mid_gray():
    assert contrast_stretch(100) < 100
    assert contrast_stretch(160) > 160


def test_grayscale_contrast_equal_channels():
    pixels = np.array([[[255, 0, 0], [10, 20, 30]]], dtype=np.uint8)
    out = grayscale_contrast(pixels)
    assert out.shape == (1, 2, 3)
    assert (out[..., 0] == out[..., 1]).all() and (out[..., 1] == out[..., 2]).all()


def test_preprocess_crops_to_text_column():
    data_url = preprocess_image(_png_bytes(_screenshot()), focus_on_right_column=True)
    out = _decode(data_url)
    assert out.shape == (100, 80, 3)


def test_preprocess_full_frame_when_not_focused():
    out = _decode(preprocess_image(_png_bytes(_screenshot()), focus_on_right_column=False))
    assert out.shape == (100, 200, 3)
    # gray and high contrast: dark background stays dark, text stays bright
    assert out[0, 199, 0] < 15
    assert out[45, 150, 0] > 240


def test_preprocess_async_wrapper():
    data_url = asyncio.run(preprocess(_png_bytes(_screenshot()), False))
    assert data_url.startswith("data:image/png;base64,")


def test_preprocess_accepts_file_object():
    out = _decode(preprocess_image(io.BytesIO(_png_bytes(_screenshot())), False))
    assert out.shape == (100, 200, 3)


def test_undecodable_file_raises_decode_error():
    with pytest.raises(ImageDecodeError):
        preprocess_image(b"definitely not an image")


def test_parse_data_url():
    payload = base64.b64encode(b"\x89PNG").decode()
    assert parse_data_url(f"data:image/png;base64,{payload}") == ("image/png", b"\x89PNG")
    assert parse_data_url("https://example.com/a.png") is None
    assert parse_data_url("data:image/png;base64,@@@") is None
