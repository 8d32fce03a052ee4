"""Command-line interface for playlist search."""

import contextlib
import logging
from dataclasses import replace
from typing import List, Optional, Sequence

import click

from . import __version__
from .config import FZF_STRATEGY, PlsConfig, load_config, save_config_template
from .db import VideoStore
from .errors import PlsError
from .formatter import VideoRow, format_help, format_videos, unknown_placeholders
from .ingest import PlaylistFetcher, default_database_path, load_playlist_file, save_playlist
from .models import Video
from .paginator import ListSource, Paginator, browse
from .search import (
    FIELDS,
    STRATEGIES,
    FuzzyMatcher,
    FzfSelector,
    build_candidates,
    find_videos,
    resolve_keys,
)
from .search.fuzzy_matcher import FOLD
from .urls import video_url_id
from .utils import setup_logging

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _reporting_errors():
    """Turn library errors into a one-line message and exit status 1."""
    try:
        yield
    except PlsError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(str(e)) from e


def _open_store(cfg: PlsConfig, database: str) -> VideoStore:
    return VideoStore(replace(cfg.database, path=database), create=False)


def _search(
    cfg: PlsConfig, videos: List[Video], query: str, field: str, strategy: str
) -> List[Video]:
    if strategy == FZF_STRATEGY:
        selector = FzfSelector(cfg.search.fzf_command, cfg.search.fzf_args)
        keys = selector.select(build_candidates(videos, field, cfg.search.separator), query)
        return resolve_keys(keys, videos)

    matcher = FuzzyMatcher(cfg.search)
    return find_videos(videos, query, field, strategy, matcher, cfg.search.separator)


def _print_videos(videos: Sequence[Video], template: str, url: bool) -> None:
    if url:
        for video in videos:
            click.echo(video.url())
        return

    unknown = unknown_placeholders(template, VideoRow)
    if unknown:
        logger.warning(f"Unknown placeholders left as is: {', '.join(unknown)}")
    for line in format_videos(template, videos):
        click.echo(line)


@click.group()
@click.version_option(__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.pass_context
def cli(ctx, config, verbose):
    """Playlist search - save YouTube playlists and search them offline."""
    try:
        pls_config = load_config(config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    log_level = logging.DEBUG if verbose else getattr(logging, pls_config.logging.level.upper())
    setup_logging(
        level=log_level,
        log_file=pls_config.logging.file_path or None,
        max_bytes=pls_config.logging.max_file_size_mb * 1024 * 1024,
        backup_count=pls_config.logging.backup_count,
        console_output=pls_config.logging.console_output,
    )
    ctx.obj = pls_config


@cli.command()
@click.argument("url", required=False)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Database file to write")
@click.option(
    "--from-json",
    type=click.Path(exists=True, dir_okay=False),
    help="Read a saved 'yt-dlp -J --flat-playlist' document instead of downloading",
)
@click.option("--quiet", "-q", is_flag=True, help="Do not print progress to stderr")
@click.pass_obj
def get(cfg: PlsConfig, url, output, from_json, quiet):
    """Save the videos of a playlist or feed URL to a SQLite file."""
    if not url and not from_json:
        raise click.UsageError("need a youtube playlist url or --from-json FILE")

    with _reporting_errors():
        if from_json:
            playlist = load_playlist_file(from_json, cfg.ingest.strict_validation)
        else:
            playlist = PlaylistFetcher(cfg.ingest, quiet=quiet).fetch(url)

        db_path = output or cfg.database.path or default_database_path(
            playlist, cfg.ingest.output_directory
        )
        with VideoStore(replace(cfg.database, path=str(db_path))) as store:
            created = save_playlist(
                playlist, store, show_progress=cfg.ui.show_progress_bar and not quiet
            )

    if not quiet:
        click.echo(
            f"Saved {created} new of {len(playlist.entries)} videos from "
            f"{playlist.title or playlist.playlist_id!r}",
            err=True,
        )
    click.echo(str(db_path))


@cli.command("list")
@click.argument("database", type=click.Path(exists=True, dir_okay=False))
@click.option("--query", "-q", help="Fuzzy search query")
@click.option("--limit", "-n", type=click.IntRange(min=0), help="Number of results")
@click.option("--field", type=click.Choice(FIELDS), help="Text the query is matched against")
@click.option(
    "--strategy",
    "-s",
    type=click.Choice(list(STRATEGIES) + [FZF_STRATEGY]),
    help="Matching strategy",
)
@click.option("--format", "-f", "template", help="Output template, see 'pls formats'")
@click.option("--url", is_flag=True, help="Print video urls")
@click.option("--tui", "-t", is_flag=True, help="Browse the result and print the chosen video")
@click.pass_obj
def list_videos(cfg: PlsConfig, database, query, limit, field, strategy, template, url, tui):
    """List the videos of a database, optionally filtered by a query."""
    template = template or cfg.output.format

    with _reporting_errors():
        with _open_store(cfg, database) as store:
            videos = store.find_all()

        if query is not None:
            videos = _search(
                cfg, videos, query, field or cfg.search.field, strategy or cfg.search.strategy
            )
        if limit is not None:
            videos = videos[:limit]

        if tui:
            paginator = Paginator(ListSource(videos), cfg.output.page_size)
            chosen = browse(paginator, template, len(videos), click.getchar, click.echo, click.clear)
            videos = [chosen] if chosen else []

    _print_videos(videos, template, url)


@cli.command()
@click.argument("database", type=click.Path(exists=True, dir_okay=False))
@click.argument("query")
@click.option("--field", type=click.Choice(FIELDS), help="Text the query is matched against")
@click.option("--strategy", "-s", type=click.Choice(STRATEGIES), help="Matching strategy")
@click.option("--format", "-f", "template", help="Output template, see 'pls formats'")
@click.option("--url", is_flag=True, help="Print the video url")
@click.pass_obj
def pick(cfg: PlsConfig, database, query, field, strategy, template, url):
    """Print the single best match for QUERY."""
    if strategy is None:
        strategy = cfg.search.strategy if cfg.search.strategy in STRATEGIES else FOLD

    with _reporting_errors():
        with _open_store(cfg, database) as store:
            videos = store.find_all()

        candidates = build_candidates(videos, field or cfg.search.field, cfg.search.separator)
        best = FuzzyMatcher(cfg.search).best_match(query, candidates, strategy)
        logger.debug(f"Best match {best.key} scored {best.score:.3f}")

    _print_videos(resolve_keys([best.key], videos), template or cfg.output.format, url)


@cli.command()
@click.argument("database", type=click.Path(exists=True, dir_okay=False))
@click.argument("video_url")
@click.pass_obj
def has(cfg: PlsConfig, database, video_url):
    """Print whether VIDEO_URL is stored in DATABASE."""
    with _reporting_errors():
        video_id = video_url_id(video_url)
        with _open_store(cfg, database) as store:
            found = store.has(video_id)

    click.echo("true" if found else "false")


@cli.command("browse")
@click.argument("database", type=click.Path(exists=True, dir_okay=False))
@click.option("--page-size", type=click.IntRange(min=1), help="Rows per screen")
@click.option("--format", "-f", "template", help="Row template, see 'pls formats'")
@click.option("--url", is_flag=True, help="Print the url of the chosen video")
@click.pass_obj
def browse_videos(cfg: PlsConfig, database, page_size, template, url):
    """Page through DATABASE and print the chosen video."""
    template = template or cfg.output.format

    with _reporting_errors():
        with _open_store(cfg, database) as store:
            paginator = Paginator(store, page_size or cfg.output.page_size)
            chosen: Optional[Video] = browse(
                paginator, template, store.count(), click.getchar, click.echo, click.clear
            )

    if chosen is not None:
        _print_videos([chosen], template, url)


@cli.command()
def formats():
    """List the placeholders usable in output templates."""
    click.echo("Placeholders:")
    for name in format_help():
        click.echo(f"  - {{{name}}}")


@cli.command()
@click.option("--output", "-o", default="pls.yaml", help="Output path for template")
def create_config(output):
    """Create a configuration file template."""
    save_config_template(output)
    click.echo(f"Configuration template written to {output}")


if __name__ == "__main__":
    cli()
