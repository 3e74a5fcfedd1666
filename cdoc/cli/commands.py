"""CLI command for cdoc.

Provides the Click-based ``cdoc`` command, which loads configuration,
sets up logging and hands the source directory, docs directory and
ignore patterns to the documentation pipeline.
"""

import logging
from typing import Optional

import click

from cdoc import __version__
from cdoc.errors import ConfigurationError
from cdoc.pipeline.processor import process_dir
from cdoc.utils.config import load_config
from cdoc.utils.logging import setup_logging

logger = logging.getLogger(__name__)

MISSING_DIRS_MESSAGE = "You must specify source and target directories"

# Exit status for a run aborted by invalid inputs
CONFIG_ERROR_EXIT = 2


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    options_metavar="[-q] [-i IGNORE ...]",
)
@click.version_option(version=__version__, prog_name="cdoc")
@click.argument("source_dir", required=False, type=click.Path())
@click.argument("docs_dir", required=False, type=click.Path())
@click.option(
    "-i",
    "--ignore",
    "ignore",
    multiple=True,
    metavar="IGNORE",
    help="Ignore IGNORE directory. This option can be specified multiple "
    "times and can include glob patterns.",
)
@click.option("-q", "--quiet", is_flag=True, help="Do not log messages to STDOUT.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML configuration file.",
)
@click.pass_context
def cdoc(
    ctx: click.Context,
    source_dir: Optional[str],
    docs_dir: Optional[str],
    ignore: tuple[str, ...],
    quiet: bool,
    config_path: Optional[str],
) -> None:
    """Generate Markdown documentation from source code comments.

    Walks SOURCE_DIR, extracts the documentation comments of every
    source file and writes one Markdown file per source file
    to the same relative location under DOCS_DIR.
    """
    if source_dir is None or docs_dir is None:
        click.echo(MISSING_DIRS_MESSAGE)
        click.echo()
        click.echo(ctx.get_help())
        ctx.exit(1)

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(CONFIG_ERROR_EXIT)

    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
        console_level="ERROR" if quiet else None,
    )

    try:
        summary = process_dir(
            source_dir, docs_dir, list(ignore), verbose=not quiet, config=config
        )
    except ConfigurationError as e:
        logger.debug("Run aborted: %s", e)
        click.echo(f"Error: {e}", err=True)
        ctx.exit(CONFIG_ERROR_EXIT)

    if not summary.succeeded and not quiet:
        click.echo(
            f"Warning: {summary.failed} of {summary.processed + summary.failed} "
            "entries could not be processed:",
            err=True,
        )
        for path, reason in summary.failures:
            click.echo(f"  {path}: {reason}", err=True)
