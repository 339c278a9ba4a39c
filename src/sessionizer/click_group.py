"""Custom Click group with automatic help display on errors.

This module provides a custom Click Group class that automatically
displays contextual help when syntax errors occur.
"""

import sys
from typing import Any

import click

_USAGE_ERRORS = (
    click.exceptions.UsageError,
    click.exceptions.BadParameter,
    click.exceptions.MissingParameter,
)


class SessionizerGroup(click.Group):
    """Custom Click group that auto-displays help on usage errors."""

    def main(self, *args: Any, **kwargs: Any) -> Any:
        """Override main to auto-display help on errors raised while parsing."""
        try:
            return super().main(*args, **kwargs)
        except _USAGE_ERRORS as e:
            click.echo(f"Error: {e.format_message()}", err=True)

            ctx = e.ctx if getattr(e, "ctx", None) else None
            if ctx:
                click.echo("")
                click.echo(ctx.get_help())
                ctx.exit(e.exit_code)
                return None
            sys.exit(e.exit_code)

    def invoke(self, ctx: click.Context) -> Any:
        """Show the most specific help when a subcommand is misused."""
        try:
            return super().invoke(ctx)
        except _USAGE_ERRORS as e:
            click.echo(f"Error: {e.format_message()}", err=True)

            error_ctx = e.ctx if getattr(e, "ctx", None) else ctx
            click.echo("")
            click.echo(error_ctx.get_help())
            error_ctx.exit(e.exit_code)
            return None

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        """Override to show help when command is not found."""
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            # Let parameter errors reach invoke() with their own message
            if isinstance(e, click.exceptions.MissingParameter | click.exceptions.BadParameter):
                raise
            click.echo(f"Error: {e.format_message()}", err=True)
            click.echo("")
            click.echo(ctx.get_help())
            ctx.exit(1)
            return None, None, []


# Subgroups created with @main.group() also use SessionizerGroup
SessionizerGroup.group_class = SessionizerGroup
