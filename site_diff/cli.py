#!/usr/bin/env python3
"""
Command line entry point for SiteDiff.

Commands:
  compare   Crawl two deployments side by side and compare their screenshots
  serve     Serve a run directory for browsing screenshots, diffs and reports
  config    Show the effective run configuration

Global options:
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

compare options:
  --config PATH       YAML/JSON run configuration (configs/default.yaml if present)
  --output-dir DIR    Run directory (overrides output_dir)
  --max-depth INT     Deepest link level to visit (overrides max_depth)
  --comparison MODE   positional | keyed
  --run-timeout SEC   Abort the whole run after SEC seconds
  --strict            Exit with status 1 when any check fails

Example:
  site-diff compare https://prod.example.com https://staging.example.com --max-depth 3
"""
import asyncio
import sys
from pathlib import Path

import click

from site_diff import __version__
from site_diff.config import ComparisonMode, RunConfig, load_config
from site_diff.engine import run_regression
from site_diff.logger import DEFAULT_FORMAT, init_logging
from site_diff.server import serve

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _load(config_path, overrides):
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        # validate the overrides the same way as file values
        try:
            cfg = RunConfig.model_validate({**cfg.model_dump(), **updates})
        except ValueError as e:
            print_error(f'Invalid option: {e}')
    return cfg


config_option = click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON run configuration.'
)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteDiff, version %(version)s')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, log_level, log_file, log_format):
    """Visual and structural regression between two deployments of a site."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)


@cli.command('compare', context_settings=CONTEXT_SETTINGS)
@click.argument('instance_a')
@click.argument('instance_b')
@config_option
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Run directory for screenshots, diffs and reports'
)
@click.option('--max-depth', '-d', 'max_depth', type=int, default=None, help='Deepest link level to visit')
@click.option(
    '--comparison', 'comparison',
    type=click.Choice([m.value for m in ComparisonMode]),
    default=None,
    help='Pair screenshots by capture order or by page'
)
@click.option('--headed', is_flag=True, default=False, help='Show the browser window')
@click.option('--run-timeout', 'run_timeout', type=float, default=None, help='Timeout for the whole run (seconds)')
@click.option('--strict', is_flag=True, help='Exit with status 1 when any check fails')
def compare(instance_a, instance_b, config_path, output_dir, max_depth, comparison, headed, run_timeout, strict):
    """Compare INSTANCE_A against INSTANCE_B."""
    cfg = _load(config_path, {
        'output_dir': output_dir,
        'max_depth': max_depth,
        'comparison': comparison,
        'headless': False if headed else None,
    })
    click.echo(f'Comparing {instance_a} with {instance_b}')
    try:
        if run_timeout:
            report = asyncio.run(
                asyncio.wait_for(cli.run_regression(instance_a, instance_b, cfg), timeout=run_timeout)
            )
        else:
            report = asyncio.run(cli.run_regression(instance_a, instance_b, cfg))
    except asyncio.TimeoutError:
        print_error(f'Run did not finish within {run_timeout} seconds')
    except Exception as e:
        print_error(f'Error: {e}')

    click.echo(f'{len(report.records)} checks, {len(report.failures)} failed')
    click.echo(f'Report: {Path(cfg.output_dir) / "report.xml"}')
    if strict and not report.passed:
        sys.exit(1)


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--dir', 'root',
    default='tmp', show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Run directory to serve'
)
@click.option('--host', default='0.0.0.0', show_default=True, help='Interface to bind')
@click.option('--port', '-p', type=int, default=None, help='Port (default: $PORT or 3003)')
def serve_command(root, host, port):
    """Serve a run directory over HTTP."""
    cli.serve(root, host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@config_option
def show_config(config_path):
    """Show the effective run configuration as JSON."""
    cfg = _load(config_path, {})
    click.echo(cfg.model_dump_json(indent=2))


# expose these names at module level for test monkey-patching
cli.run_regression = run_regression
cli.serve = serve

if __name__ == "__main__":
    cli()
