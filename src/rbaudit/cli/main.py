"""Command-line interface for the rating audit.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..config import Config, ConfigError
from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import check_command, info_command, prune_command


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: Optional[str]) -> None:
    """Music / Rekordbox rating audit.

    Finds missing files and rating disagreements between the Music library,
    the Rekordbox collection and embedded ID3 tags.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()

    try:
        ctx.obj = Config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


cli.add_command(info_command)
cli.add_command(check_command)
cli.add_command(prune_command)


if __name__ == "__main__":
    cli()
