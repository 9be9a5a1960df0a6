from datetime import date

from PIL import Image

from controller.photo_library import PhotoLibrary


def test_library_creates_dated_paths(tmp_path):
    library = PhotoLibrary(root=tmp_path)

    path = library.save(Image.new("RGB", (10, 20), "white"), strip_id="abc123", day=date(2025, 3, 8))

    assert path == tmp_path / "2025-03-08" / "strip_abc123.jpg"
    assert path.exists()
    assert Image.open(path).size == (10, 20)


def test_library_generates_unique_ids(tmp_path):
    library = PhotoLibrary(root=tmp_path)
    strip = Image.new("RGB", (4, 4), "black")

    first = library.save(strip, day=date(2025, 3, 8))
    second = library.save(strip, day=date(2025, 3, 8))

    assert first != second
    assert first.parent == second.parent


def test_library_flattens_transparent_strips(tmp_path):
    library = PhotoLibrary(root=tmp_path)

    path = library.save(Image.new("RGBA", (4, 4), (0, 0, 0, 0)), strip_id="rgba")

    assert Image.open(path).mode == "RGB"
