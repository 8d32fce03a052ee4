"""Validation of YouTube playlist, feed and video URLs."""

from urllib.parse import parse_qs, urlparse

from .errors import InvalidUrl

YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com")


def _parse_youtube_url(raw_url: str):
    try:
        parsed = urlparse(raw_url)
    except ValueError as e:
        raise InvalidUrl(f"cannot parse url {raw_url!r}: {e}") from e
    if parsed.scheme != "https":
        raise InvalidUrl("expected https")
    if parsed.hostname not in YOUTUBE_HOSTS:
        raise InvalidUrl("not a youtube url")
    return parsed


def validate_playlist_url(raw_url: str) -> None:
    """Accept ``https://www.youtube.com/playlist?list=<id>``."""
    parsed = _parse_youtube_url(raw_url)
    if parsed.path != "/playlist":
        raise InvalidUrl("not a playlist url")
    if "list" not in parse_qs(parsed.query, keep_blank_values=True):
        raise InvalidUrl("no playlist id in url")


def validate_feed_url(raw_url: str) -> None:
    """Accept ``https://www.youtube.com/feed/...`` (e.g. history, liked)."""
    parsed = _parse_youtube_url(raw_url)
    if not parsed.path.startswith("/feed/"):
        raise InvalidUrl("not a feed url")


def validate_playlist_feed_url(raw_url: str) -> None:
    """Accept either a playlist url or a feed url."""
    try:
        validate_playlist_url(raw_url)
        return
    except InvalidUrl as playlist_error:
        try:
            validate_feed_url(raw_url)
        except InvalidUrl as feed_error:
            raise InvalidUrl(f"{playlist_error}; {feed_error}") from feed_error


def validate_video_url(raw_url: str) -> None:
    """Accept ``https://www.youtube.com/watch?v=<id>``."""
    parsed = _parse_youtube_url(raw_url)
    if parsed.path != "/watch":
        raise InvalidUrl("not a video url")
    if "v" not in parse_qs(parsed.query, keep_blank_values=True):
        raise InvalidUrl("no video id in url")


def video_url_id(raw_url: str) -> str:
    """Return the video id of a watch url."""
    validate_video_url(raw_url)
    return parse_qs(urlparse(raw_url).query, keep_blank_values=True)["v"][0]
