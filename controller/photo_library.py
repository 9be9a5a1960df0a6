import logging
import uuid
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from PIL import Image

from controller.share import DEFAULT_JPEG_QUALITY, encode_jpeg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhotoLibrary:
    root: Path
    quality: int = DEFAULT_JPEG_QUALITY

    def day_dir(self, day: date) -> Path:
        return self.root / day.isoformat()

    def strip_path(self, strip_id: str, day: date) -> Path:
        return self.day_dir(day) / f"strip_{strip_id}.jpg"

    def save(
            self,
            strip: Image.Image,
            *,
            strip_id: Optional[str] = None,
            day: Optional[date] = None,
    ) -> Path:
        path = self.strip_path(strip_id or uuid.uuid4().hex, day or date.today())
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encode_jpeg(strip, self.quality))
        logger.info("Saved strip to %s", path)
        return path
