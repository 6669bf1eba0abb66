# File: tests/test_diff.py
import numpy as np
from PIL import Image

from site_diff.diff import ImageDiffEngine, compare_pixels

from .fakes import RED, WHITE, write_png


def test_identical_images_do_not_differ(tmp_path):
    a = write_png(tmp_path / "a.png", RED)
    b = write_png(tmp_path / "b.png", RED)
    out = tmp_path / "diffs" / "diff_1.png"

    result = ImageDiffEngine().compare(a, b, out)

    assert result.differs is False
    assert not result
    assert result.diff_pixels == 0
    assert out.is_file()
    with Image.open(out) as diff:
        pixels = np.asarray(diff.convert("RGB"))
    # zero-difference artifact: no pure red pixel anywhere
    assert not np.any(np.all(pixels == [255, 0, 0], axis=2))


def test_changed_region_is_counted_and_painted(tmp_path):
    a = write_png(tmp_path / "a.png", WHITE)
    img = Image.new("RGB", (20, 20), WHITE)
    for x in range(5):
        for y in range(4):
            img.putpixel((x, y), (0, 0, 0))
    b = tmp_path / "b.png"
    img.save(b)
    out = tmp_path / "diff.png"

    result = ImageDiffEngine().compare(a, b, out)

    assert result.differs is True
    assert result.diff_pixels == 20
    assert result.diff_path == out
    with Image.open(out) as diff:
        assert diff.getpixel((0, 0))[:3] == (255, 0, 0)
        assert diff.getpixel((19, 19))[:3] != (255, 0, 0)


def test_small_colour_shift_below_threshold(tmp_path):
    a = write_png(tmp_path / "a.png", (200, 200, 200))
    b = write_png(tmp_path / "b.png", (202, 201, 200))
    assert ImageDiffEngine(threshold=0.1).compare(a, b, tmp_path / "d.png").differs is False


def test_dimension_mismatch_always_differs(tmp_path):
    a = write_png(tmp_path / "a.png", RED, size=(20, 20))
    b = write_png(tmp_path / "b.png", RED, size=(20, 21))
    out = tmp_path / "diff.png"

    result = ImageDiffEngine().compare(a, b, out)

    assert result.differs is True
    assert result.diff_path is None
    assert not out.exists()


def test_missing_file_differs(tmp_path):
    a = write_png(tmp_path / "a.png")
    result = ImageDiffEngine().compare(a, tmp_path / "missing.png", tmp_path / "diff.png")
    assert result.differs is True
    assert "missing" in result.reason
    result = ImageDiffEngine().compare(tmp_path / "missing.png", a, tmp_path / "diff.png")
    assert result.differs is True


def test_unreadable_file_differs(tmp_path):
    a = write_png(tmp_path / "a.png")
    junk = tmp_path / "junk.png"
    junk.write_bytes(b"not an image")
    assert ImageDiffEngine().compare(a, junk, tmp_path / "diff.png").differs is True


def test_compare_pixels_blends_alpha_on_white():
    transparent = np.zeros((2, 2, 4), dtype=np.uint8)
    white = np.full((2, 2, 4), 255, dtype=np.uint8)
    diff, count = compare_pixels(transparent, white)
    assert count == 0
    assert diff.shape == (2, 2, 3)
