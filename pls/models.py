"""Record model for playlists, videos and channels as reported by yt-dlp."""

import json
import logging
import math
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import MalformedInput

logger = logging.getLogger(__name__)

YOUTUBE_BASE_URL = "https://www.youtube.com"

# Field metadata key marking a record whose fields are promoted into its parent
EMBEDDED = "embedded"


def embedded(default_factory):
    """Declare a dataclass field as an embedded record."""
    return field(default_factory=default_factory, metadata={EMBEDDED: True})


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise MalformedInput(f"{name} must be a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise MalformedInput(f"{name} must be a whole number, got {value!r}")
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise MalformedInput(f"{name} must be a number, got {value!r}")
    if not isinstance(value, int):
        raise MalformedInput(f"{name} must be a number, got {type(value).__name__}")
    if value < 0:
        raise MalformedInput(f"{name} cannot be negative, got {value}")
    return value


def _as_float(value: Any, name: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise MalformedInput(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedInput(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise MalformedInput(f"{name} must be finite, got {value!r}")
    if number < 0:
        raise MalformedInput(f"{name} cannot be negative, got {number}")
    return number


@dataclass(frozen=True)
class Thumbnail:
    """One thumbnail resolution of a video."""

    url: str = ""
    width: int = 0
    height: int = 0

    @property
    def area(self) -> int:
        return self.width * self.height

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Thumbnail":
        return cls(
            url=_as_str(data.get("url")),
            width=_as_int(data.get("width"), "thumbnail width"),
            height=_as_int(data.get("height"), "thumbnail height"),
        )


@dataclass(frozen=True)
class Channel:
    """Uploader of a video or owner of a playlist."""

    # display name, e.g. "Mudan"
    channel_title: str = ""
    # e.g. "UCZTgg6AiQkSHtL5Jj0IO6MQ"
    channel_id: str = ""
    # handle, e.g. "@Mudan"; may be empty
    uploader_id: str = ""

    def url(self) -> str:
        """Return the channel URL, preferring the handle over the channel id."""
        if self.uploader_id:
            return f"{YOUTUBE_BASE_URL}/{self.uploader_id}"
        return f"{YOUTUBE_BASE_URL}/channel/{self.channel_id}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Channel":
        return cls(
            channel_title=_as_str(data.get("channel")),
            channel_id=_as_str(data.get("channel_id")),
            uploader_id=_as_str(data.get("uploader_id")),
        )


@dataclass(frozen=True)
class Video:
    """Metadata of a single playlist entry."""

    channel: Channel = embedded(Channel)
    video_id: str = ""
    title: str = ""
    description: str = ""
    thumbnails: Tuple[Thumbnail, ...] = ()
    view_count: int = 0
    # seconds
    duration: float = 0.0

    def url(self) -> str:
        """Return the canonical watch URL of the video."""
        return f"{YOUTUBE_BASE_URL}/watch?v={self.video_id}"

    def biggest_thumbnail(self) -> Thumbnail:
        """Return the thumbnail with the largest area, first one on ties."""
        biggest = Thumbnail()
        for thumbnail in self.thumbnails:
            if thumbnail.area > biggest.area:
                biggest = thumbnail
        return biggest

    def duration_string(self) -> str:
        """Video length as ``[D:]HH:MM:SS``.

        Days are not zero padded and only shown when non-zero, hours are
        only shown when days or hours are non-zero. Minutes and seconds are
        always two digits, e.g. ``07:27``, ``01:01:01`` or ``1:00:00:00``.
        """
        if not math.isfinite(self.duration) or self.duration < 0:
            return "00:00"
        total = int(self.duration)

        days, remainder = divmod(total, 86400)
        hours, remainder = divmod(remainder, 3600)
        minutes, seconds = divmod(remainder, 60)

        clock = f"{minutes:02}:{seconds:02}"
        if days > 0:
            return f"{days}:{hours:02}:{clock}"
        if hours > 0:
            return f"{hours:02}:{clock}"
        return clock

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the yt-dlp key names."""
        return {
            "id": self.video_id,
            "title": self.title,
            "description": self.description,
            "thumbnails": [asdict(t) for t in self.thumbnails],
            "view_count": self.view_count,
            "duration": self.duration,
            "channel": self.channel.channel_title,
            "channel_id": self.channel.channel_id,
            "uploader_id": self.channel.uploader_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Video":
        """Build a video from one yt-dlp entry."""
        thumbnails = data.get("thumbnails") or []
        if not isinstance(thumbnails, list):
            raise MalformedInput("thumbnails must be a list")

        return cls(
            channel=Channel.from_dict(data),
            video_id=_as_str(data.get("id")),
            title=_as_str(data.get("title")),
            description=_as_str(data.get("description")),
            thumbnails=tuple(Thumbnail.from_dict(t) for t in thumbnails if isinstance(t, dict)),
            view_count=_as_int(data.get("view_count"), "view_count"),
            duration=_as_float(data.get("duration"), "duration"),
        )


class Availability(str, Enum):
    """Playlist visibility."""

    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"

    @classmethod
    def parse(cls, value: Any) -> Optional["Availability"]:
        if not value:
            return None
        try:
            return cls(str(value).lower())
        except ValueError:
            logger.debug(f"Unrecognised playlist availability: {value!r}")
            return None


@dataclass(frozen=True)
class Playlist:
    """A playlist and its entries, as produced by one ingestion call."""

    channel: Channel = embedded(Channel)
    playlist_id: str = ""
    title: str = ""
    availability: Optional[Availability] = None
    description: str = ""
    # declared number of videos, may disagree with len(entries)
    count: int = 0
    # e.g. "20231125"
    modified_date: str = ""
    entries: Tuple[Video, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Playlist":
        """Build a playlist from a yt-dlp info dict."""
        if not isinstance(data, Mapping):
            raise MalformedInput(f"expected a JSON object, got {type(data).__name__}")

        raw_entries = data.get("entries") or []
        if not isinstance(raw_entries, list):
            raise MalformedInput("entries must be a list")

        entries: List[Video] = []
        for position, entry in enumerate(raw_entries, start=1):
            if not isinstance(entry, dict) or not entry.get("id"):
                logger.warning(f"Skipping playlist entry {position}: no video id")
                continue
            try:
                entries.append(Video.from_dict(entry))
            except MalformedInput as e:
                raise MalformedInput(f"entry {position} ({entry.get('id')}): {e}") from e

        return cls(
            channel=Channel.from_dict(data),
            playlist_id=_as_str(data.get("id")),
            title=_as_str(data.get("title")),
            availability=Availability.parse(data.get("availability")),
            description=_as_str(data.get("description")),
            count=_as_int(data.get("playlist_count"), "playlist_count"),
            modified_date=_as_str(data.get("modified_date")),
            entries=tuple(entries),
        )

    def validate(self) -> List[str]:
        """Return the consistency problems of this playlist, if any."""
        issues = []
        if self.count != len(self.entries):
            issues.append(
                f"playlist declares {self.count} videos but contains {len(self.entries)}"
            )

        seen = set()
        duplicates = []
        for video in self.entries:
            if video.video_id in seen and video.video_id not in duplicates:
                duplicates.append(video.video_id)
            seen.add(video.video_id)
        if duplicates:
            issues.append(f"duplicate video ids: {', '.join(duplicates)}")
        return issues

    def deduplicated(self) -> "Playlist":
        """Return a copy keeping only the first entry for each video id."""
        seen = set()
        entries = []
        for video in self.entries:
            if video.video_id in seen:
                continue
            seen.add(video.video_id)
            entries.append(video)
        return replace(self, entries=tuple(entries))


def decode_playlist(data: Union[bytes, str]) -> Playlist:
    """Decode a ``yt-dlp -J`` document."""
    try:
        document = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedInput(f"invalid playlist JSON: {e}") from e
    return Playlist.from_dict(document)
