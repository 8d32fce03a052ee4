"""Playlist ingestion: fetch metadata with yt-dlp and persist the entries."""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yt_dlp
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from tqdm import tqdm
from yt_dlp.utils import DownloadError

from .config import IngestConfig
from .db import VideoStore
from .errors import FetchFailed, MalformedInput
from .models import Playlist, decode_playlist
from .urls import validate_playlist_feed_url
from .utils import safe_filename

logger = logging.getLogger(__name__)


class PlaylistFetcher:
    """Download playlist metadata (no media) through yt-dlp."""

    def __init__(self, config: IngestConfig, quiet: bool = False):
        self.config = config
        self.quiet = quiet
        self.wait = wait_exponential(multiplier=1, min=2, max=10)
        self.yt_dlp_opts = self._setup_yt_dlp()

    def _setup_yt_dlp(self) -> Dict[str, Any]:
        """Flat extraction: one info dict for the playlist, entries not resolved."""
        return {
            "quiet": True,
            "no_warnings": self.quiet,
            "extract_flat": "in_playlist",
            "ignore_no_formats_error": True,
            "socket_timeout": self.config.timeout_seconds,
            "logger": logging.getLogger("yt_dlp"),
        }

    def _extract_info(self, url: str) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self.yt_dlp_opts) as ydl:
            info = ydl.extract_info(url, download=False)
            return ydl.sanitize_info(info) if info else {}

    def fetch(self, url: str) -> Playlist:
        """Fetch and decode the playlist at ``url``."""
        validate_playlist_feed_url(url)

        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=self.wait,
            retry=retry_if_exception_type(DownloadError),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.info(
                            f"Retrying {url} (attempt {attempt.retry_state.attempt_number})"
                        )
                    info = self._extract_info(url)
        except DownloadError as e:
            raise FetchFailed(f"could not fetch {url}: {e}") from e

        if not info:
            raise FetchFailed(f"yt-dlp returned no metadata for {url}")
        return check_playlist(Playlist.from_dict(info), self.config.strict_validation)


def load_playlist_file(path: Union[str, Path], strict: bool = False) -> Playlist:
    """Decode a document previously saved with ``yt-dlp -J --flat-playlist``."""
    data = Path(path).read_bytes()
    return check_playlist(decode_playlist(data), strict)


def check_playlist(playlist: Playlist, strict: bool = False) -> Playlist:
    """Report consistency problems and drop repeated video ids.

    In strict mode any problem raises :class:`MalformedInput` instead.
    """
    issues = playlist.validate()
    if issues and strict:
        raise MalformedInput(f"playlist {playlist.playlist_id}: {'; '.join(issues)}")
    for issue in issues:
        logger.warning(f"Playlist {playlist.playlist_id}: {issue}")
    return playlist.deduplicated()


def default_database_path(playlist: Playlist, directory: str = ".") -> Path:
    """``<playlist title>.sqlite`` inside ``directory``."""
    return Path(directory) / f"{safe_filename(playlist.title)}.sqlite"


def save_playlist(playlist: Playlist, store: VideoStore, show_progress: bool = False) -> int:
    """Store every entry in playlist order, returning how many were new."""
    entries = playlist.entries
    if show_progress:
        entries = tqdm(entries, desc=f"Saving {playlist.title or playlist.playlist_id}", unit="video")

    created = 0
    for video in entries:
        if store.create(video):
            created += 1

    logger.info(f"Stored {created} new of {len(playlist.entries)} videos in {store.db_path}")
    return created
