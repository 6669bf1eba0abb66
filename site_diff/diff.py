# site_diff/diff.py
"""
Pixel comparison of two screenshots.

The colour distance follows pixelmatch: RGBA pixels are blended onto white,
converted to YIQ and compared with a weighted squared distance; a pixel
differs when the distance exceeds ``35215 * threshold**2``. The diff image
paints differing pixels red on a faded greyscale copy of the first image.
Anti-aliasing detection is not performed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

__all__ = ["DiffResult", "ImageDiffEngine", "compare_pixels", "MAX_YIQ_DELTA"]

logger = logging.getLogger("SiteDiff")

MAX_YIQ_DELTA = 35215.0
_DIFF_COLOR = np.array([255, 0, 0], dtype=np.uint8)
_FADE = 0.1


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Verdict of one comparison. ``diff_path`` is None when no artifact was written."""

    differs: bool
    diff_pixels: int = 0
    diff_path: Optional[Path] = None
    reason: str = ""

    def __bool__(self) -> bool:
        return self.differs


def _blend_on_white(rgba: np.ndarray) -> np.ndarray:
    rgba = rgba.astype(np.float64)
    alpha = rgba[..., 3:4] / 255.0
    return 255.0 + (rgba[..., :3] - 255.0) * alpha


def _yiq(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = r * 0.29889531 + g * 0.58662247 + b * 0.11448223
    i = r * 0.59597799 - g * 0.27417610 - b * 0.32180189
    q = r * 0.21147017 - g * 0.52261711 + b * 0.31114694
    return y, i, q


def compare_pixels(rgba_a: np.ndarray, rgba_b: np.ndarray, threshold: float = 0.1) -> Tuple[np.ndarray, int]:
    """
    Compare two ``(h, w, 4)`` uint8 arrays of equal shape.

    Returns the RGB diff image and the number of differing pixels.
    Raises ValueError when the shapes differ.
    """
    if rgba_a.shape != rgba_b.shape:
        raise ValueError(f"image sizes differ: {rgba_a.shape[:2]} vs {rgba_b.shape[:2]}")

    rgb_a = _blend_on_white(rgba_a)
    rgb_b = _blend_on_white(rgba_b)
    y_a, i_a, q_a = _yiq(rgb_a)
    y_b, i_b, q_b = _yiq(rgb_b)
    delta = 0.5053 * (y_a - y_b) ** 2 + 0.299 * (i_a - i_b) ** 2 + 0.1957 * (q_a - q_b) ** 2
    mask = delta > MAX_YIQ_DELTA * threshold * threshold

    faded = np.clip(255.0 + (y_a - 255.0) * _FADE, 0, 255).astype(np.uint8)
    diff = np.repeat(faded[..., None], 3, axis=2)
    diff[mask] = _DIFF_COLOR
    return diff, int(mask.sum())


def _load_rgba(path: Path) -> np.ndarray:
    with Image.open(path) as img:
        return np.asarray(img.convert("RGBA"))


class ImageDiffEngine:
    """File-level wrapper around :func:`compare_pixels` that never raises."""

    def __init__(self, threshold: float = 0.1) -> None:
        self.threshold = threshold

    def compare(self, path_a: Path | str, path_b: Path | str, diff_path: Path | str) -> DiffResult:
        path_a, path_b, diff_path = Path(path_a), Path(path_b), Path(diff_path)
        for p in (path_a, path_b):
            if not p.is_file():
                logger.error("Missing screenshot file: %s", p)
                return DiffResult(True, reason=f"missing screenshot {p}")

        try:
            rgba_a = _load_rgba(path_a)
            rgba_b = _load_rgba(path_b)
        except (OSError, UnidentifiedImageError) as exc:
            logger.error("Failed to read image data: %s", exc)
            return DiffResult(True, reason=f"unreadable screenshot: {exc}")

        if rgba_a.shape != rgba_b.shape:
            logger.error(
                "Screenshot dimensions do not match: %dx%d vs %dx%d",
                rgba_a.shape[1],
                rgba_a.shape[0],
                rgba_b.shape[1],
                rgba_b.shape[0],
            )
            return DiffResult(True, reason="dimensions differ")

        try:
            diff, count = compare_pixels(rgba_a, rgba_b, self.threshold)
            diff_path.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(diff).save(diff_path)
        except Exception as exc:
            logger.error("Error comparing screenshots: %s", exc)
            return DiffResult(True, reason=f"comparison error: {exc}")

        return DiffResult(count > 0, diff_pixels=count, diff_path=diff_path)
