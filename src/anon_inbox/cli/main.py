from __future__ import annotations

import json
from typing import Any, Dict, Optional

import click
import httpx
import uvicorn

from anon_inbox import constants
from anon_inbox.cli.formatters import message_table
from anon_inbox.clients.dashboard import DashboardClient, DashboardError
from anon_inbox.clients.database import init_db
from anon_inbox.models.enums import MessageFilter, MessagePurpose
from anon_inbox.utils.logging import setup_logging
from anon_inbox.utils.pathing import ensure_runtime_directories


def _request(method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
    url = f"{constants.API_BASE}{path}"
    with httpx.Client(timeout=60) as client:
        response = client.request(method, url, json=payload)
    if response.status_code >= 400:
        raise click.ClickException(f"API error {response.status_code}: {response.text}")
    if response.content:
        return response.json()
    return None


def _dashboard(user_id: str) -> DashboardClient:
    return DashboardClient(user_id=user_id)


user_id_option = click.option(
    "--user-id",
    envvar=constants.USER_ID_ENV_VAR,
    required=True,
    help=f"Owner account id (defaults to ${constants.USER_ID_ENV_VAR}).",
)


@click.group(help="Anon Inbox command-line interface.")
def cli() -> None:
    """Root command for Anon Inbox."""
    setup_logging()


@cli.command()
def init() -> None:
    """Initialize local directories and database."""
    ensure_runtime_directories()
    init_db()
    click.echo("Anon Inbox environment initialized.")


@cli.command()
@click.option("--host", default=constants.SERVER_HOST, show_default=True)
@click.option("--port", default=constants.SERVER_PORT, type=int, show_default=True)
@click.option("--reload/--no-reload", default=False, show_default=True)
def serve(host: str, port: int, reload: bool) -> None:
    """Run the inbox API server."""
    uvicorn.run("anon_inbox.api.main:app", host=host, port=port, log_level="info", reload=reload)


@cli.command()
@click.argument("username")
def register(username: str) -> None:
    """Create an account and print its id."""
    result = _request("POST", "/users", {"username": username})
    click.echo(json.dumps(result, indent=2))


@cli.command()
@click.argument("username")
def link(username: str) -> None:
    """Print the shareable submission link for USERNAME."""
    click.echo(DashboardClient.profile_url(username))


@cli.command()
@click.argument("username")
@click.option(
    "--purpose",
    type=click.Choice([p.value for p in MessagePurpose]),
    default=MessagePurpose.FEEDBACK.value,
    show_default=True,
)
@click.option("--message", prompt=True, help="Message body.")
def send(username: str, purpose: str, message: str) -> None:
    """Send an anonymous message to USERNAME."""
    payload = {"targetUsername": username, "content": message, "purpose": purpose}
    result = _request("POST", "/send-message", payload)
    click.echo(result["message"])


@cli.command()
@user_id_option
def status(user_id: str) -> None:
    """Show acceptance state and message counts."""
    dashboard = _dashboard(user_id)
    try:
        accepting = dashboard.fetch_acceptance()
        dashboard.refresh()
    except DashboardError as exc:
        raise click.ClickException(exc.message) from exc
    finally:
        dashboard.close()
    click.echo(f"Accept Messages: {'On' if accepting else 'Off'}")
    click.echo(json.dumps(dashboard.counts(), indent=2))


@cli.command()
@user_id_option
@click.option("--on/--off", "accept", required=True, help="Accept or reject new messages.")
def accept(user_id: str, accept: bool) -> None:
    """Turn anonymous submissions on or off."""
    dashboard = _dashboard(user_id)
    try:
        value = dashboard.set_acceptance(accept)
    except DashboardError as exc:
        raise click.ClickException(exc.message) from exc
    finally:
        dashboard.close()
    click.echo(f"Accept Messages: {'On' if value else 'Off'}")


@cli.command("messages")
@user_id_option
@click.option(
    "--filter",
    "category",
    type=click.Choice([f.value for f in MessageFilter]),
    default=MessageFilter.ALL.value,
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON.")
def messages(user_id: str, category: str, as_json: bool) -> None:
    """List received messages, newest first."""
    dashboard = _dashboard(user_id)
    try:
        dashboard.refresh()
    except DashboardError as exc:
        raise click.ClickException(exc.message) from exc
    finally:
        dashboard.close()
    visible = dashboard.set_filter(category)
    if as_json:
        click.echo(json.dumps([m.model_dump(mode="json") for m in visible], indent=2))
        return
    click.echo(message_table(visible))
    click.echo(f"Total Messages Received: {len(visible)}")


@cli.command()
@user_id_option
@click.argument("message_id")
def delete(user_id: str, message_id: str) -> None:
    """Delete a received message."""
    dashboard = _dashboard(user_id)
    try:
        deleted = dashboard.delete(message_id)
    finally:
        dashboard.close()
    if not deleted:
        level, text = dashboard.notices[-1]
        raise click.ClickException(text)
    click.echo("Message deleted.")


if __name__ == "__main__":
    cli()
