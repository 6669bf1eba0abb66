# cli.py

"""
Standalone runner for SiteDiff: two deployments in, reports out.

- Takes the entry URL of instance A and of instance B
- Loads configs/default.yaml when present
- Crawls both sites, compares screenshots, writes tmp/report.xml

Example:
    python cli.py https://prod.example.com https://staging.example.com
"""
import asyncio
import sys

import click

from site_diff.config import load_config
from site_diff.engine import run_regression
from site_diff.logger import init_logging


@click.command()
@click.argument('instance_a')
@click.argument('instance_b')
def main(instance_a: str, instance_b: str):
    """
    Compare INSTANCE_A against INSTANCE_B.
    """
    logger = init_logging()
    try:
        config = load_config(None)
    except Exception as e:
        click.echo(f"Failed to load configuration: {e}", err=True)
        sys.exit(1)

    try:
        report = asyncio.run(run_regression(instance_a, instance_b, config))
    except Exception as e:
        logger.error("Error: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"{len(report.records)} checks, {len(report.failures)} failed")


if __name__ == '__main__':
    main()
