"""OCR via Tesseract (pytesseract). One worker per recognize call, always terminated."""
import asyncio
import io
import logging
from typing import Callable, Optional, Protocol

from PIL import Image

from albumboard.config import OCR_LANGUAGE
from albumboard.core.errors import OcrFailureError
from albumboard.core.image_preprocessor import parse_data_url
from albumboard.models.candidate import OcrProgress, RawOcrResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[OcrProgress], None]


class OcrWorker(Protocol):
    def recognize(self, image: Image.Image) -> RawOcrResult: ...

    def terminate(self) -> None: ...


class TesseractWorker:
    """Runs Tesseract for a fixed language model."""

    def __init__(self, language: str = OCR_LANGUAGE) -> None:
        import pytesseract

        self._tesseract = pytesseract
        self.language = language
        # Fails fast when the tesseract binary is missing
        self._tesseract.get_tesseract_version()

    def recognize(self, image: Image.Image) -> RawOcrResult:
        data = self._tesseract.image_to_data(
            image, lang=self.language, output_type=self._tesseract.Output.DICT
        )
        return result_from_data(data)

    def terminate(self) -> None:
        # pytesseract spawns one process per call; nothing is held between calls
        self._tesseract = None


def result_from_data(data: dict) -> RawOcrResult:
    """Rebuild line-broken text and mean word confidence from image_to_data output."""
    lines: dict[tuple, list[str]] = {}
    confidences = []
    for i, word in enumerate(data.get("text") or []):
        word = (word or "").strip()
        if not word:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        conf = float(data["conf"][i])
        if conf >= 0:
            confidences.append(conf)
    text = "\n".join(" ".join(words) for words in lines.values())
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return RawOcrResult(text=text, confidence=confidence)


def _load_image(image_data_url: str) -> Image.Image:
    parsed = parse_data_url(image_data_url)
    if parsed is None:
        raise ValueError("not a base64 data URL")
    image = Image.open(io.BytesIO(parsed[1]))
    image.load()
    return image


def _report(on_progress: Optional[ProgressCallback], status: str, progress: float) -> None:
    logger.debug("OCR %s: %.0f%%", status, progress * 100)
    if on_progress is not None:
        on_progress(OcrProgress(status=status, progress=progress))


async def recognize(
    image_data_url: str,
    on_progress: Optional[ProgressCallback] = None,
    *,
    worker_factory: Callable[[], OcrWorker] = TesseractWorker,
) -> RawOcrResult:
    """Recognize text in a data-URL image. Any engine failure becomes OcrFailureError."""
    worker = None
    try:
        _report(on_progress, "initializing api", 0.0)
        worker = await asyncio.to_thread(worker_factory)
        _report(on_progress, "initializing api", 1.0)
        image = _load_image(image_data_url)
        _report(on_progress, "recognizing text", 0.0)
        result = await asyncio.to_thread(worker.recognize, image)
        _report(on_progress, "recognizing text", 1.0)
        return result
    except Exception as e:
        logger.error("OCR processing failed: %s", e)
        raise OcrFailureError() from e
    finally:
        if worker is not None:
            worker.terminate()
