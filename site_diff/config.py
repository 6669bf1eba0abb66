"""
Loading and validation of the SiteDiff run configuration.

The schema is described with Pydantic; files may be YAML or JSON.
Entry URLs are not part of the configuration: they are given per run.
"""
from __future__ import annotations

import errno
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["ComparisonMode", "RunConfig", "load_config", "DEFAULT_LOADING_SELECTORS"]

DEFAULT_LOADING_SELECTORS: List[str] = [".loading", ".spinner", '[role="progressbar"]']


class ComparisonMode(str, Enum):
    """How screenshots of the two sites are paired for diffing."""

    POSITIONAL = "positional"
    KEYED = "keyed"


class RunConfig(BaseModel):
    """Configuration for one regression run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    output_dir: Path = Field(Path("tmp"), description="Run directory for screenshots, diffs and reports.")
    max_depth: int = Field(10, ge=0, description="Deepest link level that is still navigated (root is 0).")
    navigation_timeout: float = Field(30.0, gt=0, description="Timeout for one navigation (seconds).")
    settle_delay: float = Field(1.0, ge=0, description="Fixed wait after the load event (seconds).")
    indicator_timeout: float = Field(5.0, gt=0, description="Max wait for each loading indicator to hide.")
    loading_selectors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_LOADING_SELECTORS),
        description="CSS selectors of loading indicators that must disappear before capture.",
    )
    diff_threshold: float = Field(0.1, ge=0, le=1, description="Perceptual colour threshold of the pixel diff.")
    comparison: ComparisonMode = Field(ComparisonMode.POSITIONAL, description="Screenshot pairing mode.")
    headless: bool = Field(True, description="Run the browser without a window.")
    viewport_width: int = Field(1280, gt=0)
    viewport_height: int = Field(720, gt=0)
    user_agent: str | None = Field(None, description="User-Agent override for both pages.")

    @field_validator("loading_selectors", mode="after")
    def _drop_blank_selectors(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s and s.strip()]


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> RunConfig:
    """
    Read YAML or JSON and return a validated RunConfig.

    With *path* None, ``configs/default.yaml`` is used when it exists and the
    built-in defaults otherwise. An explicit path that does not exist raises
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return RunConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return RunConfig(**data)
