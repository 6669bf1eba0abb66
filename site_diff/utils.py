"""site_diff.utils: small helpers for URL lists and the artifact directories."""

from __future__ import annotations

from pathlib import Path
from typing import Collection, List, Sequence, Union

from site_diff.logger import logger

__all__: Sequence[str] = (
    "remove_duplicates",
    "ensure_dir",
    "clear_images",
    "list_files",
)

_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Remove duplicate URLs, keeping the first occurrence order."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def ensure_dir(path: Union[str, Path]) -> Path:
    """Expand ``~``, create the directory with parents and return it."""
    p = Path(path).expanduser()
    p.mkdir(parents=True, exist_ok=True)
    return p


def clear_images(directory: Union[str, Path]) -> int:
    """Delete image files left in *directory* by an earlier run."""
    p = Path(directory)
    if not p.is_dir():
        return 0
    removed = 0
    for child in p.iterdir():
        if child.is_file() and child.suffix.lower() in _IMAGE_SUFFIXES:
            child.unlink()
            removed += 1
    if removed:
        logger.debug("Removed %d stale images from %s", removed, p)
    return removed


def list_files(directory: Union[str, Path]) -> List[str]:
    """Sorted names of visible files in *directory*; empty when it is missing."""
    p = Path(directory)
    if not p.is_dir():
        return []
    return sorted(f.name for f in p.iterdir() if f.is_file() and not f.name.startswith("."))
