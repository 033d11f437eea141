"""Command-line interface for the segwit savings scanner."""

import sys
from typing import Optional
import click
import structlog

from segwit_savings.errors import SegwitSavingsError
from segwit_savings.models.config import ScannerConfig, load_config
from segwit_savings.core.esplora_client import EsploraClient
from segwit_savings.core.scanner import BlockRangeScanner
from segwit_savings.database.airtable import AirtableSink
from segwit_savings.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

USAGE = """
In order to run the segwit savings scanner you must provide:
the block height you want the scan to stop at (--stop-at-block)

Optional: you can also pass the block height at which you want to start the scan (--start-at-block)
If omitted the scan will start with the latest block.

examples:
  'segwit-savings scan --start-at-block=617246 --stop-at-block=612913'
  'segwit-savings scan --stop-at-block=617823'

To obtain the last block height you have data for, sort your Airtable table by block_height.
"""


def _load(ctx) -> ScannerConfig:
    """Load configuration once per invocation, exiting on failure."""
    if ctx.obj.get('config') is None:
        try:
            config = load_config(ctx.obj.get('env_file'))
        except SegwitSavingsError as e:
            click.echo(f"Error loading configuration: {e}", err=True)
            sys.exit(1)

        config.log_level = ctx.obj['log_level']
        setup_logging(config)
        ctx.obj['config'] = config
    return ctx.obj['config']


@click.group()
@click.option('--env-file', '-c', type=click.Path(exists=True),
              help='Path to .env configuration file')
@click.option('--log-level', '-l', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.pass_context
def cli(ctx, env_file: Optional[str], log_level: str):
    """Segwit savings scanner CLI."""
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file
    ctx.obj['log_level'] = log_level


@cli.command()
@click.option('--stop-at-block', type=int, default=None,
              help='Block height at which the scan stops (not processed)')
@click.option('--start-at-block', type=int, default=None,
              help='Block height to start from (default: current tip)')
@click.pass_context
def scan(ctx, stop_at_block: Optional[int], start_at_block: Optional[int]):
    """Scan blocks backward and store segwit savings per block."""
    if stop_at_block is None:
        click.echo(USAGE)
        return

    config = _load(ctx)
    client = EsploraClient.from_config(config)
    sink = AirtableSink.from_config(config)

    try:
        scanner = BlockRangeScanner(client, sink)
        result = scanner.scan(stop_at_block, start_at_block)

        click.echo(f"✅ Scanned {result.blocks_processed} blocks "
                   f"({result.transactions_processed} transactions)")

    except KeyboardInterrupt:
        click.echo("\n🛑 Scan interrupted by user")
        sys.exit(130)
    except (SegwitSavingsError, ValueError) as e:
        logger.error("Scan failed", error=str(e))
        click.echo(f"❌ Scan failed: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()
        sink.close()


@cli.command()
@click.pass_context
def test_connection(ctx):
    """Test connections to the block explorer and Airtable."""
    config = _load(ctx)
    client = EsploraClient.from_config(config)
    sink = AirtableSink.from_config(config)
    ok = True

    try:
        click.echo("🔍 Testing block explorer connection...")
        try:
            height = client.get_tip_height()
            click.echo(f"✅ Block explorer reachable, tip height {height}")
        except SegwitSavingsError as e:
            click.echo(f"❌ Block explorer connection failed: {e}")
            ok = False

        click.echo("🔍 Testing Airtable connection...")
        if sink.check_connection():
            click.echo("✅ Airtable connection successful")
        else:
            click.echo("❌ Airtable connection failed")
            ok = False
    finally:
        client.close()
        sink.close()

    if not ok:
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    from segwit_savings import __version__, __description__

    click.echo(f"Segwit Savings Scanner v{__version__}")
    click.echo(__description__)


if __name__ == '__main__':
    cli()
