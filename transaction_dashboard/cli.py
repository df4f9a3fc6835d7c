# transaction_dashboard/cli.py
import logging

import anyio
import click
import uvicorn
from dotenv import load_dotenv

from transaction_dashboard.config import load_config
from transaction_dashboard.dashboard import DashboardClient, HttpFetcher, render_dashboard
from transaction_dashboard.errors import DashboardError
from transaction_dashboard.seed import initialize_store
from transaction_dashboard.web import create_app


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with TXDASH_* settings'
)
@click.pass_context
def main(ctx, config_path, env_file):
    """
    Serve the transaction reporting API, seed its store from the remote
    feed, or print the dashboard for a month.
    """
    if env_file:
        load_dotenv(env_file)
    try:
        cfg = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    logging.basicConfig(level=str(cfg['log_level']).upper())
    ctx.obj = cfg


@main.command()
@click.option('--host', default=None, help='Host to bind (default from config)')
@click.option('--port', default=None, type=int, help='Port to bind (default from config)')
@click.pass_obj
def serve(cfg, host, port):
    """Run the HTTP API."""
    host = host or cfg['server']['host']
    port = port or cfg['server']['port']
    click.echo(f"Transaction API running at http://{host}:{port} (db: {cfg['db_path']})")
    uvicorn.run(create_app(cfg), host=host, port=int(port), log_level=str(cfg['log_level']).lower())


@main.command()
@click.option('--url', default=None, help='Seed feed URL (default from config)')
@click.pass_obj
def initialize(cfg, url):
    """Replace the stored transactions with the seed feed."""
    try:
        result = initialize_store(
            cfg['db_path'],
            url or cfg['seed_url'],
            timeout=float(cfg['request_timeout']),
        )
    except DashboardError as e:
        raise click.ClickException(f"Failed to initialize database: {e}")
    click.echo(f"{result['message']} Stored {result['count']} transaction(s) in {cfg['db_path']}.")


@main.command()
@click.option('--month', default=None, help='Month name or number (default from config)')
@click.option('--search', default='', help='Text to match in title, description or price')
@click.option('--api-url', default=None, help='Base URL of a running API (default from config)')
@click.pass_obj
def dashboard(cfg, month, search, api_url):
    """Fetch the four dashboard views and print them."""
    fetcher = HttpFetcher(
        api_url or cfg['dashboard']['api_url'],
        timeout=float(cfg['request_timeout']),
    )
    client = DashboardClient(
        fetcher,
        month=month or cfg['dashboard']['month'],
        search=search,
    )
    anyio.run(client.mount)
    click.echo(render_dashboard(client))
