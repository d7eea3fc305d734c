"""Command line entry point for creating torrent files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.markup import escape

from maketorrent import __version__
from maketorrent.cli.progress import ProgressObserver, create_hash_progress
from maketorrent.cli.verbosity import VerbosityManager
from maketorrent.config.config import get_config, init_config
from maketorrent.core.creator import TorrentCreator
from maketorrent.core.metainfo import info_hash, write_metainfo
from maketorrent.models import MAX_PIECE_LENGTH_EXPONENT, MIN_PIECE_LENGTH_EXPONENT
from maketorrent.utils.exceptions import MakeTorrentError
from maketorrent.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def _split_urls(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated and comma separated ``--announce`` values."""
    return [url.strip() for value in values for url in value.split(",") if url.strip()]


def _fail(console: Console, message: str) -> NoReturn:
    logger.error(message)
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise click.Abort


@click.command("maketorrent")
@click.argument(
    "target",
    type=click.Path(exists=True, path_type=Path),
    required=False,
    metavar="<target directory or filename>",
)
@click.option(
    "--announce",
    "-a",
    multiple=True,
    metavar="<url>[,<url>,...]",
    help="Announce URLs (repeatable or comma separated). At least one must be specified",
)
@click.option("--comment", "-c", type=str, help="Add a comment to the torrent file")
@click.option(
    "--piece-length",
    "-l",
    type=int,
    help=(
        "Set the piece length to 2^n bytes "
        f"({MIN_PIECE_LENGTH_EXPONENT}..{MAX_PIECE_LENGTH_EXPONENT}, default: 18 = 256 KiB)"
    ),
)
@click.option(
    "--name",
    "-n",
    type=str,
    help="Set the name of the torrent (default: basename of the target)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Path of the torrent file (default: <name>.torrent)",
)
@click.option("--private", "-p", is_flag=True, help="Set the private flag")
@click.option(
    "--workers",
    "-j",
    type=int,
    help="Number of hashing threads (default: CPU count)",
)
@click.option("--yes", "-y", is_flag=True, help="Overwrite an existing output file")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: verbose, -vv: debug, -vvv: trace)",
)
@click.option("--debug", "-d", is_flag=True, help="Debug output (same as -vv)")
@click.option(
    "--show-config",
    is_flag=True,
    help="Print the effective configuration as TOML and exit",
)
@click.version_option(
    __version__,
    "--version",
    "-V",
    prog_name="maketorrent",
    message="%(prog)s v%(version)s",
)
def create_torrent(
    target: Path | None,
    announce: tuple[str, ...],
    comment: str | None,
    piece_length: int | None,
    name: str | None,
    output: Path | None,
    private: bool,
    workers: int | None,
    yes: bool,
    config_file: Path | None,
    verbose: int,
    debug: bool,
    show_config: bool,
) -> None:
    """Create a BitTorrent metainfo file from a file or directory.

    Examples:
        maketorrent -a http://tracker.example.com/announce /path/to/content

        maketorrent -a http://t1/announce,http://t2/announce -l 20 -p movie.mkv

    """
    console = Console()
    verbosity = VerbosityManager.from_flags(verbose, debug)

    if piece_length is not None and not (
        MIN_PIECE_LENGTH_EXPONENT <= piece_length <= MAX_PIECE_LENGTH_EXPONENT
    ):
        _fail(
            console,
            "Invalid piece length! The piece length must be between "
            f"{MIN_PIECE_LENGTH_EXPONENT} (64 KB) and {MAX_PIECE_LENGTH_EXPONENT} (32 MB)",
        )

    overrides: dict[str, Any] = {}
    if verbose or debug:
        overrides["observability"] = {"log_level": verbosity.log_level_name}
    creator_overrides: dict[str, Any] = {}
    if piece_length is not None:
        creator_overrides["piece_length_exponent"] = piece_length
    if workers is not None:
        creator_overrides["hash_workers"] = workers
    if creator_overrides:
        overrides["creator"] = creator_overrides

    try:
        manager = init_config(config_file, overrides)
    except MakeTorrentError as e:
        _fail(console, str(e))

    if show_config:
        click.echo(manager.export())
        return

    config = get_config()
    setup_logging(config.observability)

    if target is None:
        raise click.UsageError("Missing argument '<target directory or filename>'.")
    trackers = _split_urls(announce)
    if not trackers:
        _fail(console, "You need to specify at least one announce URL!")

    torrent_name = name or target.resolve().name
    if output is None:
        output = Path(f"{torrent_name}.torrent")
    elif output.is_dir():
        output = output / f"{torrent_name}.torrent"

    if output.exists() and not yes:
        if not click.confirm("Output file already exists. Overwrite?"):
            raise click.Abort

    logger.info("Creating torrent %s from %s", torrent_name, target)
    try:
        with create_hash_progress(console) as progress:
            creator = TorrentCreator(
                config.creator,
                observer=ProgressObserver(progress),
                logger=get_logger("creator"),
            )
            meta = creator.create(
                target,
                trackers,
                name=torrent_name,
                comment=comment,
                private=private,
            )
        logger.info("Writing .torrent file %s", output)
        write_metainfo(meta, output)
    except MakeTorrentError as e:
        logger.debug("Torrent creation failed", exc_info=verbosity.should_show_stack_trace())
        _fail(console, str(e))

    console.print(f"[green]✓ Torrent created successfully: {escape(str(output))}[/green]")
    console.print(
        f"[dim]{len(meta.files)} file(s), {meta.total_length} bytes, "
        f"{meta.num_pieces} pieces of {meta.piece_length} bytes[/dim]"
    )
    console.print(f"[dim]Info hash: {info_hash(meta).hex()}[/dim]")


def main() -> None:
    """Main CLI entry point."""
    create_torrent()


if __name__ == "__main__":
    main()
