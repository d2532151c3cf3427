"""Command line entry point for merge-builder."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from mergebuild.builder import BuildManager
from mergebuild.core import ConfigurationError, MergeBuildError, Settings
from mergebuild.core.constants import DEFAULT_CDN_ROOT
from mergebuild.cli.utils.logging import create_logger


@click.command(name="mergebuild", context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--source",
    "-s",
    "source_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Root of the webapp sources.",
)
@click.option(
    "--output",
    "-o",
    "target_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Root of the build output (default: the source directory).",
)
@click.option(
    "--map-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generated CDN map (default: <output>/cdn.properties).",
)
@click.option(
    "--links-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generated child-link map (default: <output>/cdn-links.properties).",
)
@click.option(
    "--cdn-root",
    default=DEFAULT_CDN_ROOT,
    show_default=True,
    help="URL path of the hashed output root.",
)
@click.option(
    "--extensions",
    "-e",
    multiple=True,
    help="Extra extensions copied as-is, e.g. 'png|gif,ico'. Repeatable.",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write JSON-lines log here.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
def main(
    source_dir: Path,
    target_dir: Optional[Path],
    map_file: Optional[Path],
    links_file: Optional[Path],
    cdn_root: str,
    extensions: tuple[str, ...],
    log_file: Optional[str],
    verbose: bool,
) -> None:
    """Hash, compact and merge web assets into a CDN directory."""
    try:
        settings = Settings(
            source_dir=source_dir,
            target_dir=target_dir,
            cdn_map_file=map_file,
            cdn_links_file=links_file,
            cdn_root=cdn_root,
            extensions=list(extensions),
            log_level="DEBUG" if verbose else "INFO",
            log_file=log_file,
        )
    except ValidationError as e:
        click.secho(f"✗ Invalid settings: {e}", fg="red", err=True)
        sys.exit(1)

    logger = create_logger(verbose=verbose, settings=settings)
    try:
        logger.step(f"Building {settings.source_dir}", 1, 1)
        manager = BuildManager(settings, logger=logger)
        count = manager.execute()
        logger.success(f"Mapped {count} resources in {logger.elapsed_time()}")

    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    except (MergeBuildError, OSError) as e:
        logger.error(f"Build failed: {e}")
        sys.exit(1)
    finally:
        logger.close()


if __name__ == "__main__":
    main()
