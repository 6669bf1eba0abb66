# File: tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from site_diff.capture import ScreenshotCapture
from site_diff.config import RunConfig
from site_diff.crawler import SITE_A, SITE_B, DualCrawler
from site_diff.engine import ArtifactLayout


@pytest.fixture()
def run_config(tmp_path) -> RunConfig:
    return RunConfig(
        output_dir=tmp_path / "run",
        max_depth=10,
        navigation_timeout=2.0,
        settle_delay=0,
        indicator_timeout=0.5,
    )


@pytest.fixture()
def layout(run_config) -> ArtifactLayout:
    return ArtifactLayout(Path(run_config.output_dir)).prepare()


@pytest.fixture()
def make_crawler(layout):
    def _make(config: RunConfig) -> DualCrawler:
        return DualCrawler(config, ScreenshotCapture(config), {SITE_A: layout.screenshots_a, SITE_B: layout.screenshots_b})

    return _make
