"""Click CLI for signing payloads and forwarding events to webhooks."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click
from pydantic import ValidationError

from src.models import parse_event
from src.webhook.config import ForwarderConfig
from src.webhook.errors import WebhookError
from src.webhook.forwarder import FanoutMode, WebhookForwarder
from src.webhook.signing import signature_header, verify_signature


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """WhatsApp webhook forwarder CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--secret", required=True, help="Shared webhook secret.")
def sign(body_file: str, secret: str) -> None:
    """Print the X-Hub-Signature-256 value for a file's bytes."""
    click.echo(signature_header(Path(body_file).read_bytes(), secret))


@cli.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--secret", required=True, help="Shared webhook secret.")
@click.option("--signature", required=True, help="Header value, e.g. sha256=<hex>.")
def verify(body_file: str, secret: str, signature: str) -> None:
    """Check a signature header against a file's bytes."""
    if verify_signature(Path(body_file).read_bytes(), secret, signature):
        click.echo("valid")
        return
    click.echo("invalid", err=True)
    raise SystemExit(1)


@cli.command()
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--url", "urls", multiple=True, help="Webhook URL (repeatable). Overrides WHATSAPP_WEBHOOK.")
@click.option("--secret", default=None, help="Overrides WHATSAPP_WEBHOOK_SECRET.")
@click.option(
    "--fanout",
    type=click.Choice([m.value for m in FanoutMode]),
    default=None,
    help="Overrides WEBHOOK_FANOUT_MODE.",
)
def forward(event_file: str, urls: tuple[str, ...], secret: str | None, fanout: str | None) -> None:
    """Forward a JSON-encoded event to the configured webhooks."""
    try:
        event = parse_event(Path(event_file).read_bytes())
    except ValidationError as exc:
        raise click.ClickException(f"Invalid event: {exc}") from exc

    config = ForwarderConfig.from_env()
    overrides: dict[str, object] = {}
    if urls:
        overrides["webhook_urls"] = urls
    if secret is not None:
        overrides["webhook_secret"] = secret
    if fanout is not None:
        overrides["fanout_mode"] = FanoutMode(fanout)
    if overrides:
        config = config.model_copy(update=overrides)
    if not config.webhook_urls:
        raise click.ClickException("No webhook URL configured")

    forwarder = WebhookForwarder.from_config(config)
    try:
        results = asyncio.run(forwarder.forward(event))
    except WebhookError as exc:
        raise click.ClickException(str(exc)) from exc

    output = [
        {"url": r.endpoint.url, "attempts": r.attempts, "status_code": r.status_code}
        for r in results
    ]
    click.echo(json.dumps(output, indent=2))
