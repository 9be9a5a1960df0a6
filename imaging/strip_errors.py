class StripCreationError(Exception):
    """Raised when the inputs to a strip build are unusable."""


class RasterUnavailableError(RuntimeError):
    """Raised when no drawing surface can be acquired for a render."""
