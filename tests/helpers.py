import time
from io import BytesIO
from typing import Callable

from PIL import Image

from imaging.bitmap import Bitmap, Orientation

GRAY = (128, 128, 128)


def wait_for(
        condition: Callable[[], bool],
        timeout: float = 5.0,
        interval: float = 0.05,
):
    """
    Wait until condition() returns True or timeout is reached.

    Raises AssertionError on timeout.
    """
    deadline = time.time() + timeout

    while time.time() < deadline:
        if condition():
            return
        time.sleep(interval)

    raise AssertionError("Condition not met before timeout")


def make_bitmap(size=(220, 220), color=GRAY, orientation=Orientation.UP, scale=1.0) -> Bitmap:
    return Bitmap(image=Image.new("RGB", size, color), scale=scale, orientation=orientation)


def make_gradient_bitmap(size=(64, 48)) -> Bitmap:
    """A frame with real detail, so blurs and curves have something to change."""
    w, h = size
    img = Image.new("RGB", size)
    img.putdata([((x * 255) // w, (y * 255) // h, ((x + y) * 7) % 256) for y in range(h) for x in range(w)])
    return Bitmap(image=img)


def make_truncated_bitmap(size=(220, 220)) -> Bitmap:
    """A frame whose header parses but whose pixel data is cut off."""
    buffer = BytesIO()
    Image.new("RGB", size, GRAY).save(buffer, format="PNG")
    return Bitmap(image=Image.open(BytesIO(buffer.getvalue()[:60])))
