"""Unlink cooldown CLI command."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from .services import build_services
from ..lib.exceptions import LinkException
from ..lib.logging import get_logger

logger = get_logger(__name__)


def cooldown_command(discord_id: str, clear: bool = False, data_dir: Optional[Path] = None) -> None:
    """
    Show or clear the unlink cooldown of a user.
    """
    services = build_services(data_dir)
    
    async def run() -> bool:
        if clear:
            await services.cooldown.delete_cooldown(discord_id)
        return await services.cooldown.can_unlink(discord_id)
    
    try:
        can_unlink = asyncio.run(run())
    except LinkException as e:
        logger.error("cooldown_command_failed", error=str(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    
    if clear:
        typer.echo(f"Cooldown cleared for {discord_id}")
    typer.echo("Can unlink" if can_unlink else "Unlink cooldown engaged")
