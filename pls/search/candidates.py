"""Candidate texts derived from videos, and id-keyed video search."""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Video
from .fuzzy_matcher import FOLD, FuzzyMatcher

logger = logging.getLogger(__name__)

FIELD_ALL = "all"
FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_CHANNEL = "channel"

FIELDS = (FIELD_ALL, FIELD_TITLE, FIELD_DESCRIPTION, FIELD_CHANNEL)

DEFAULT_SEPARATOR = " - "


def candidate_text(video: Video, field: str = FIELD_ALL, separator: str = DEFAULT_SEPARATOR) -> str:
    """Text of ``video`` that a query is matched against."""
    if field == FIELD_ALL:
        return f"{video.channel.channel_title}{separator}{video.title}"
    if field == FIELD_TITLE:
        return video.title
    if field == FIELD_DESCRIPTION:
        return video.description
    if field == FIELD_CHANNEL:
        return video.channel.channel_title
    raise ValueError(f"Unknown search field {field!r}, expected one of {', '.join(FIELDS)}")


def single_line(text: str) -> str:
    """Collapse line breaks and tabs so the text fits on one selector line."""
    return re.sub(r"[\t\r\n]+", " ", text).strip()


def build_candidates(
    videos: Sequence[Video], field: str = FIELD_ALL, separator: str = DEFAULT_SEPARATOR
) -> List[Tuple[str, str]]:
    """Pair each video id with its candidate text, preserving input order."""
    return [(video.video_id, candidate_text(video, field, separator)) for video in videos]


def index_by_id(videos: Sequence[Video]) -> Dict[str, Video]:
    """Map video ids to videos; the first occurrence of an id wins."""
    index: Dict[str, Video] = {}
    for video in videos:
        if video.video_id in index:
            logger.warning(f"Video {video.video_id} appears more than once, keeping the first")
            continue
        index[video.video_id] = video
    return index


def resolve_keys(keys: Sequence[str], videos: Sequence[Video]) -> List[Video]:
    """Turn matched video ids back into videos, dropping repeats and unknown ids."""
    index = index_by_id(videos)
    seen = set()
    resolved = []
    for key in keys:
        if key in seen or key not in index:
            continue
        seen.add(key)
        resolved.append(index[key])
    return resolved


def find_videos(
    videos: Sequence[Video],
    query: str,
    field: str = FIELD_ALL,
    strategy: str = FOLD,
    matcher: Optional[FuzzyMatcher] = None,
    separator: str = DEFAULT_SEPARATOR,
) -> List[Video]:
    """Rank ``videos`` against ``query``.

    Candidates are keyed by video id rather than by their text, so two
    videos whose candidate texts are identical both remain retrievable.
    """
    matcher = matcher or FuzzyMatcher()
    candidates = build_candidates(videos, field, separator)
    keys = matcher.rank_keys(query, candidates, strategy)
    return resolve_keys(keys, videos)
