"""
Playlist Search

Save the metadata of YouTube playlists to SQLite files and search,
format and browse them offline.
"""

__version__ = "0.3.0"
__author__ = "pls contributors"

from .config import PlsConfig
from .db import VideoStore
from .models import Channel, Playlist, Thumbnail, Video
from .paginator import Paginator
from .search import FuzzyMatcher

__all__ = [
    "Channel",
    "FuzzyMatcher",
    "Paginator",
    "Playlist",
    "PlsConfig",
    "Thumbnail",
    "Video",
    "VideoStore",
]
