# File: tests/test_cli.py
"""CLI tests with click.testing.CliRunner; the regression run is patched out unless a test needs the real entry checks."""
import asyncio
import json

import pytest
from click.testing import CliRunner

from site_diff.aggregator import RunReport, TestRecord
from site_diff.cli import cli
from site_diff.logger import init_logging


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    # the CLI points the handler at the runner's stdout
    init_logging()


@pytest.fixture()
def calls(monkeypatch):
    """Patch run_regression to record its arguments and return a canned report."""
    seen = []

    async def fake_run(instance_a, instance_b, cfg):
        seen.append((instance_a, instance_b, cfg))
        return RunReport(
            site_a=instance_a,
            site_b=instance_b,
            records=[TestRecord("Screenshot Comparison 1", True), TestRecord("Screenshot Comparison 2", False, "diff")],
        )

    monkeypatch.setattr(cli, "run_regression", fake_run)
    return seen


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteDiff" in result.output


def test_compare_requires_two_urls(calls):
    result = CliRunner().invoke(cli, ["compare", "http://a.test/"])
    assert result.exit_code != 0
    assert calls == []


def test_compare_passes_overrides(calls, tmp_path):
    result = CliRunner().invoke(
        cli,
        [
            "compare", "http://a.test/", "http://b.test/",
            "--max-depth", "2", "--comparison", "keyed", "--headed", "-o", str(tmp_path / "out"),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "2 checks, 1 failed" in result.output
    (instance_a, instance_b, cfg), = calls
    assert (instance_a, instance_b) == ("http://a.test/", "http://b.test/")
    assert cfg.max_depth == 2
    assert cfg.comparison.value == "keyed"
    assert cfg.headless is False
    assert cfg.output_dir == tmp_path / "out"


def test_compare_reads_config_file(calls, tmp_path):
    cfg_file = tmp_path / "run.yaml"
    cfg_file.write_text("max_depth: 4\nsettle_delay: 0\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["compare", "http://a.test/", "http://b.test/", "--config", str(cfg_file)])
    assert result.exit_code == 0, result.output
    assert calls[0][2].max_depth == 4
    assert calls[0][2].settle_delay == 0


def test_strict_exit_code(calls):
    result = CliRunner().invoke(cli, ["compare", "http://a.test/", "http://b.test/", "--strict"])
    assert result.exit_code == 1


def test_invalid_override(calls):
    result = CliRunner().invoke(cli, ["compare", "http://a.test/", "http://b.test/", "--max-depth", "-3"])
    assert result.exit_code == 1
    assert "Invalid option" in result.output
    assert calls == []


def test_run_failure_exits_1(monkeypatch):
    async def broken(instance_a, instance_b, cfg):
        raise RuntimeError("browser launch failed")

    monkeypatch.setattr(cli, "run_regression", broken)
    result = CliRunner().invoke(cli, ["compare", "http://a.test/", "http://b.test/"])
    assert result.exit_code == 1
    assert "browser launch failed" in result.output


def test_run_timeout(monkeypatch):
    async def slow(instance_a, instance_b, cfg):
        await asyncio.sleep(2)

    monkeypatch.setattr(cli, "run_regression", slow)
    result = CliRunner().invoke(cli, ["compare", "http://a.test/", "http://b.test/", "--run-timeout", "0.1"])
    assert result.exit_code == 1
    assert "did not finish" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "run.json"
    cfg_file.write_text(json.dumps({"max_depth": 1, "comparison": "keyed"}), encoding="utf-8")
    result = CliRunner().invoke(cli, ["config", "--config", str(cfg_file)])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["max_depth"] == 1
    assert data["comparison"] == "keyed"


def test_serve_command(monkeypatch, tmp_path):
    seen = {}
    monkeypatch.setattr(cli, "serve", lambda root, host, port: seen.update(root=root, host=host, port=port))
    result = CliRunner().invoke(cli, ["serve", "--dir", str(tmp_path), "-p", "8080"])
    assert result.exit_code == 0
    assert seen == {"root": tmp_path, "host": "0.0.0.0", "port": 8080}


def test_standalone_script_needs_two_urls(monkeypatch):
    import cli as script

    async def fake_run(instance_a, instance_b, cfg):
        return RunReport(site_a=instance_a, site_b=instance_b)

    monkeypatch.setattr(script, "run_regression", fake_run)
    runner = CliRunner()
    assert runner.invoke(script.main, ["http://a.test/"]).exit_code != 0
    result = runner.invoke(script.main, ["http://a.test/", "http://b.test/"])
    assert result.exit_code == 0
    assert "0 checks, 0 failed" in result.output


def test_uncrawlable_entry_url_exits_1():
    # the real run: entry URLs are checked before the browser is launched
    result = CliRunner().invoke(cli, ["compare", "mailto:team@a.test", "http://"])
    assert result.exit_code == 1
    assert "invalid entry URL" in result.output
