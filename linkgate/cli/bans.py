"""Ban management CLI commands."""

import asyncio
import json
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer

from .services import build_services
from ..lib.clock import utc_now
from ..lib.exceptions import LinkDisplayableException, LinkException
from ..lib.logging import get_logger
from ..services.ban_logic import is_ban_active

logger = get_logger(__name__)


def ban_command(
    msft_id_hash: str,
    reason: str,
    author: str = "cli",
    expires_in_hours: Optional[float] = None,
    data_dir: Optional[Path] = None
) -> None:
    """
    Ban a hashed Microsoft identity.
    """
    services = build_services(data_dir)
    expires_at = utc_now() + timedelta(hours=expires_in_hours) if expires_in_hours is not None else None
    
    try:
        ban = asyncio.run(services.ban_manager.ban(msft_id_hash, reason, author, expires_at))
    except LinkDisplayableException as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1)
    except LinkException as e:
        logger.error("ban_command_failed", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    
    expiry = ban.expires_at.isoformat() if ban.expires_at else "never"
    typer.echo(f"Ban #{ban.id} issued (expires: {expiry})")


def bans_command(
    msft_id_hash: str,
    active_only: bool = False,
    output_format: str = "text",
    data_dir: Optional[Path] = None
) -> None:
    """
    List bans for a hashed Microsoft identity.
    """
    services = build_services(data_dir)
    
    try:
        if active_only:
            bans = asyncio.run(services.ban_manager.get_active_bans(msft_id_hash))
        else:
            bans = asyncio.run(services.ban_manager.get_bans(msft_id_hash))
    except LinkException as e:
        logger.error("bans_command_failed", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    
    if output_format == "json":
        typer.echo(json.dumps([ban.model_dump(mode="json") for ban in bans], indent=2))
        return
    
    if not bans:
        typer.echo("No bans found.")
        return
    
    now = utc_now()
    for ban in bans:
        state = "active" if is_ban_active(ban, now) else "expired"
        expiry = ban.expires_at.isoformat() if ban.expires_at else "never"
        typer.echo(f"#{ban.id} [{state}] {ban.reason} (by {ban.author or 'unknown'}, expires: {expiry})")
