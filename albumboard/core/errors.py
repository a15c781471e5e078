"""Errors raised by the image import pipeline and the Spotify catalog."""


class ImportPipelineError(Exception):
    """A stage of the image import failed; nothing usable came out of that image."""


class ImageDecodeError(ImportPipelineError):
    def __init__(self, message: str = "Failed to load image") -> None:
        super().__init__(message)


class CanvasUnavailableError(ImportPipelineError):
    def __init__(self, message: str = "Failed to get a drawing surface for the image") -> None:
        super().__init__(message)


class OcrFailureError(ImportPipelineError):
    def __init__(
        self,
        message: str = "Failed to extract text from image. Please try a clearer image.",
    ) -> None:
        super().__init__(message)


class SpotifyUnavailableError(Exception):
    """Spotify credentials are not configured."""
