from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, List, Sequence, Union

from PIL import Image, UnidentifiedImageError

from imaging.bitmap import Bitmap, Orientation

# EXIF tag id for orientation
EXIF_ORIENTATION = 0x0112


class FrameSourceError(Exception):
    pass


class FrameSource(ABC):
    """
    Supplies the ordered frames of one booth session.

    Implementations (files, uploads, fakes) must return frames in capture order.
    """

    @abstractmethod
    def frames(self) -> List[Bitmap]:
        """Return the captured frames, first shot first."""
        pass


def open_frame(source: Union[Path, BinaryIO], name: str = "") -> Bitmap:
    """Open an encoded image and tag it with its EXIF orientation.

    Pixel decoding is deferred to the consumer; only the header is read here.
    """
    label = name or str(source)
    try:
        image = Image.open(source)
    except (OSError, UnidentifiedImageError) as e:
        raise FrameSourceError(f"Failed to load frame: {label}") from e

    orientation = Orientation.from_exif(image.getexif().get(EXIF_ORIENTATION))
    return Bitmap(image=image, orientation=orientation)


class FileFrameSource(FrameSource):
    def __init__(self, paths: Sequence[Path]):
        self._paths = list(paths)

    def frames(self) -> List[Bitmap]:
        frames = []
        for path in self._paths:
            if not path.exists():
                raise FrameSourceError(f"Frame file does not exist: {path}")
            # Read eagerly so the file handle is not held by a lazy image.
            frames.append(open_frame(BytesIO(path.read_bytes()), name=str(path)))
        return frames
