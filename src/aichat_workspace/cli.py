"""CLI entry point for aichat-workspace."""

import logging
import os

import click
import uvicorn


@click.group()
def main():
    """Chat workspace with conversations, projects and a pin board."""
    pass


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option("--webhook-url", default=None, help="Chat webhook endpoint (overrides AICHAT_WEBHOOK_URL).")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging verbosity.",
)
def serve(port: int, host: str, webhook_url: str | None, log_level: str):
    """Start the web interface."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if webhook_url:
        os.environ["AICHAT_WEBHOOK_URL"] = webhook_url
    click.echo(f"Starting aichat-workspace on http://{host}:{port}")
    uvicorn.run("aichat_workspace.server:app", host=host, port=port, reload=False, log_level=log_level)
