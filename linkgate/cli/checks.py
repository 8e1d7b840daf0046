"""Permission check CLI commands."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from .services import build_services
from ..lib.exceptions import LinkException
from ..lib.logging import get_logger
from ..models.advisory import Advisory, Disallowed
from ..models.link_user import IdentityKind

logger = get_logger(__name__)


def _echo_advisory(advisory: Advisory, output_format: str) -> None:
    if output_format == "json":
        typer.echo(json.dumps(advisory.model_dump(mode="json"), indent=2))
    elif isinstance(advisory, Disallowed):
        typer.echo(f"Disallowed [{advisory.code.value}]: {advisory.reason}")
    else:
        typer.echo("Allowed")


def _exit_for(advisory: Advisory) -> None:
    if isinstance(advisory, Disallowed):
        raise typer.Exit(1)


def check_create_command(
    discord_id: Optional[str] = None,
    microsoft_id: Optional[str] = None,
    email: Optional[str] = None,
    output_format: str = "text",
    data_dir: Optional[Path] = None
) -> None:
    """
    Check whether a Discord or Microsoft identity may create an account.
    """
    if (discord_id is None) == (microsoft_id is None):
        typer.echo("Error: provide exactly one of --discord-id or --microsoft-id", err=True)
        raise typer.Exit(2)
    
    services = build_services(data_dir)
    try:
        if discord_id is not None:
            advisory = asyncio.run(
                services.permission_checks.is_allowed_to_create_account(IdentityKind.DISCORD, discord_id)
            )
        else:
            advisory = asyncio.run(
                services.permission_checks.is_allowed_to_create_account(IdentityKind.MICROSOFT, microsoft_id, email)
            )
    except LinkException as e:
        logger.error("check_create_failed", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    
    _echo_advisory(advisory, output_format)
    _exit_for(advisory)


def check_join_command(discord_id: str, output_format: str = "text", data_dir: Optional[Path] = None) -> None:
    """
    Check whether a linked user may join monitored servers.
    """
    services = build_services(data_dir)
    
    async def run() -> Optional[Advisory]:
        user = await services.database.get_user(discord_id)
        if user is None:
            return None
        return await services.permission_checks.can_user_join_servers(user)
    
    try:
        advisory = asyncio.run(run())
    except LinkException as e:
        logger.error("check_join_failed", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    
    if advisory is None:
        typer.echo(f"Error: no linked user with Discord ID {discord_id}", err=True)
        raise typer.Exit(2)
    
    _echo_advisory(advisory, output_format)
    _exit_for(advisory)


def check_admin_command(discord_id: str, data_dir: Optional[Path] = None) -> None:
    """
    Show the admin status of a linked user.
    """
    services = build_services(data_dir)
    
    async def run():
        user = await services.database.get_user(discord_id)
        if user is None:
            return None
        return await services.permission_checks.can_perform_admin_actions(user, services.capability)
    
    try:
        status = asyncio.run(run())
    except LinkException as e:
        logger.error("check_admin_failed", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    
    if status is None:
        typer.echo(f"Error: no linked user with Discord ID {discord_id}", err=True)
        raise typer.Exit(2)
    
    typer.echo(status.value)
