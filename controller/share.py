import logging
import tempfile
import uuid
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 90
# Pillow's JPEG plugin docs advise against quality above 95
MAX_JPEG_QUALITY = 95


def encode_jpeg(strip: Image.Image, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode a strip for sharing. Transparent corners are flattened."""
    buffer = BytesIO()
    strip.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def write_share_file(
        strip: Image.Image,
        directory: Optional[Path] = None,
        quality: int = DEFAULT_JPEG_QUALITY,
) -> Path:
    """Write `strip` to a uniquely named JPEG that a share mechanism can pick up."""
    directory = directory or Path(tempfile.gettempdir())
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / f"photostrip_{uuid.uuid4()}.jpg"
    path.write_bytes(encode_jpeg(strip, quality))
    logger.info("Wrote share file %s", path)
    return path
