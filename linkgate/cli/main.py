"""Main CLI entry point for linkgate."""

from pathlib import Path
from typing import Optional

import typer

from .bans import ban_command, bans_command
from .checks import check_admin_command, check_create_command, check_join_command
from .cooldown import cooldown_command

app = typer.Typer(
    name="linkgate",
    help="Account-link permission checks, bans and unlink cooldowns"
)

DATA_DIR_OPTION = typer.Option(None, "--data-dir", help="Storage directory (overrides LINKGATE_DATA_DIR)")


@app.command("check-create")
def check_create(
    discord_id: Optional[str] = typer.Option(None, "--discord-id", help="Discord user ID"),
    microsoft_id: Optional[str] = typer.Option(None, "--microsoft-id", help="Raw Microsoft account ID"),
    email: Optional[str] = typer.Option(None, "--email", help="E-mail address of the Microsoft account"),
    output_format: str = typer.Option("text", "--output-format", help="Output format: text or json"),
    data_dir: Optional[Path] = DATA_DIR_OPTION
):
    """Check whether an identity may be used to create an account."""
    check_create_command(
        discord_id=discord_id,
        microsoft_id=microsoft_id,
        email=email,
        output_format=output_format,
        data_dir=data_dir
    )


@app.command("check-join")
def check_join(
    discord_id: str = typer.Argument(..., help="Discord user ID"),
    output_format: str = typer.Option("text", "--output-format", help="Output format: text or json"),
    data_dir: Optional[Path] = DATA_DIR_OPTION
):
    """Check whether a linked user may join monitored servers."""
    check_join_command(discord_id=discord_id, output_format=output_format, data_dir=data_dir)


@app.command("check-admin")
def check_admin(
    discord_id: str = typer.Argument(..., help="Discord user ID"),
    data_dir: Optional[Path] = DATA_DIR_OPTION
):
    """Show whether a linked user may perform admin actions."""
    check_admin_command(discord_id=discord_id, data_dir=data_dir)


@app.command()
def ban(
    msft_id_hash: str = typer.Argument(..., help="SHA-256 hex digest of the Microsoft ID"),
    reason: str = typer.Option(..., "--reason", help="Reason shown to the banned user"),
    author: str = typer.Option("cli", "--author", help="Who issues the ban"),
    expires_in_hours: Optional[float] = typer.Option(
        None,
        "--expires-in-hours",
        help="Ban duration in hours (omit for a ban that never expires)"
    ),
    data_dir: Optional[Path] = DATA_DIR_OPTION
):
    """Ban a hashed Microsoft identity."""
    ban_command(
        msft_id_hash=msft_id_hash,
        reason=reason,
        author=author,
        expires_in_hours=expires_in_hours,
        data_dir=data_dir
    )


@app.command()
def bans(
    msft_id_hash: str = typer.Argument(..., help="SHA-256 hex digest of the Microsoft ID"),
    active_only: bool = typer.Option(False, "--active-only", help="Only list bans that currently apply"),
    output_format: str = typer.Option("text", "--output-format", help="Output format: text or json"),
    data_dir: Optional[Path] = DATA_DIR_OPTION
):
    """List bans for a hashed Microsoft identity."""
    bans_command(msft_id_hash=msft_id_hash, active_only=active_only, output_format=output_format, data_dir=data_dir)


@app.command()
def cooldown(
    discord_id: str = typer.Argument(..., help="Discord user ID"),
    clear: bool = typer.Option(False, "--clear", help="Remove the cooldown"),
    data_dir: Optional[Path] = DATA_DIR_OPTION
):
    """Show or clear the unlink cooldown of a user."""
    cooldown_command(discord_id=discord_id, clear=clear, data_dir=data_dir)


if __name__ == "__main__":
    app()
