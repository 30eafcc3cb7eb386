"""Logging configuration for blogship."""

import click
from loguru import logger


def _echo(message) -> None:
    click.echo(message, err=True, nl=False)


def configure_logging(*, verbose: bool = False) -> None:
    """Configure loguru to write pipeline progress to stderr.

    The sink goes through click so output follows whatever stderr is
    current when a record is emitted.
    """
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(_echo, level=level, format="{level: <7} {message}")
