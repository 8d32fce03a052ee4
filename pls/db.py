"""SQLite record store for playlist videos."""

import contextlib
import json
import logging
import sqlite3
import threading
import time
from dataclasses import asdict
from functools import wraps
from pathlib import Path
from typing import Generator, Iterable, List, Optional, Tuple

from .config import DatabaseConfig
from .errors import StoreUnavailable
from .models import Channel, Thumbnail, Video

logger = logging.getLogger(__name__)

# columns a page query may be ordered by; "id" is insertion (playlist) order
ORDERABLE_COLUMNS = ("id", "created_at", "video_id", "title", "channel_title", "view_count", "duration")

VIDEO_COLUMNS = (
    "video_id",
    "title",
    "description",
    "thumbnails",
    "view_count",
    "duration",
    "channel_title",
    "channel_id",
    "uploader_id",
)


def retry_on_database_error(func):
    """Retry transient sqlite errors, then surface them as StoreUnavailable."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        max_retries = self.config.max_retries
        for attempt in range(max_retries):
            try:
                return func(self, *args, **kwargs)
            except sqlite3.OperationalError as e:
                if attempt < max_retries - 1:
                    logger.warning(
                        f"Database error in {func.__name__} (attempt {attempt + 1}/{max_retries}): {e}"
                    )
                    time.sleep(0.1 * (2**attempt))  # Exponential backoff
                    continue
                logger.error(f"Database error in {func.__name__} after {max_retries} attempts: {e}")
                raise StoreUnavailable(f"{func.__name__} failed on {self.db_path}: {e}") from e
            except sqlite3.Error as e:
                logger.error(f"Database error in {func.__name__}: {e}")
                raise StoreUnavailable(f"{func.__name__} failed on {self.db_path}: {e}") from e

    return wrapper


def parse_order_by(order_by: str) -> Tuple[str, str]:
    """Split ``"title DESC"`` into a whitelisted column and direction."""
    parts = order_by.split()
    if not parts or len(parts) > 2:
        raise ValueError(f"Invalid order_by {order_by!r}")
    column = parts[0].lower()
    direction = parts[1].upper() if len(parts) == 2 else "ASC"
    if column not in ORDERABLE_COLUMNS:
        raise ValueError(f"Cannot order by {column!r}, expected one of {', '.join(ORDERABLE_COLUMNS)}")
    if direction not in ("ASC", "DESC"):
        raise ValueError(f"Invalid order direction {direction!r}")
    return column, direction


class VideoStore:
    """Persist videos in a SQLite file and read them back in playlist order."""

    SCHEMA_VERSION = 1

    def __init__(self, config: DatabaseConfig, create: bool = True):
        self.config = config
        self.db_path = Path(config.path)

        if not create and not self.db_path.exists():
            raise StoreUnavailable(f"No such database: {self.db_path}")

        self._connection_pool: List[sqlite3.Connection] = []
        self._pool_lock = threading.Lock()
        self._max_pool_size = config.connection_pool_size
        self._pool_timeout = config.connection_timeout

        self.setup_database()

    def _get_pooled_connection(self) -> sqlite3.Connection:
        """Get a connection from the pool or create a new one."""
        with self._pool_lock:
            if self._connection_pool:
                return self._connection_pool.pop()

        conn = sqlite3.connect(str(self.db_path), timeout=self._pool_timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _return_pooled_connection(self, conn: sqlite3.Connection):
        """Return a connection to the pool or close it if pool is full."""
        with self._pool_lock:
            if len(self._connection_pool) < self._max_pool_size:
                self._connection_pool.append(conn)
                return
        conn.close()

    @contextlib.contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections, committing on success."""
        conn = self._get_pooled_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._return_pooled_connection(conn)

    @retry_on_database_error
    def setup_database(self):
        """Create the schema if the file does not have it yet."""
        with self.get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS videos (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    video_id TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT NOT NULL DEFAULT '',
                    thumbnails TEXT NOT NULL DEFAULT '[]', -- JSON array
                    view_count INTEGER NOT NULL DEFAULT 0,
                    duration REAL NOT NULL DEFAULT 0,
                    channel_title TEXT NOT NULL DEFAULT '',
                    channel_id TEXT NOT NULL DEFAULT '',
                    uploader_id TEXT NOT NULL DEFAULT '',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER PRIMARY KEY,
                    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """
            )
            conn.execute(
                "INSERT OR IGNORE INTO schema_info (version) VALUES (?)", (self.SCHEMA_VERSION,)
            )
        logger.info(f"Database initialized: {self.db_path}")

    @staticmethod
    def _video_params(video: Video) -> tuple:
        return (
            video.video_id,
            video.title,
            video.description,
            json.dumps([asdict(t) for t in video.thumbnails]),
            video.view_count,
            video.duration,
            video.channel.channel_title,
            video.channel.channel_id,
            video.channel.uploader_id,
        )

    @staticmethod
    def _row_to_video(row: sqlite3.Row) -> Video:
        try:
            thumbnails = tuple(Thumbnail.from_dict(t) for t in json.loads(row["thumbnails"]))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable thumbnails of {row['video_id']}: {e}")
            thumbnails = ()

        return Video(
            channel=Channel(
                channel_title=row["channel_title"],
                channel_id=row["channel_id"],
                uploader_id=row["uploader_id"],
            ),
            video_id=row["video_id"],
            title=row["title"],
            description=row["description"],
            thumbnails=thumbnails,
            view_count=row["view_count"],
            duration=row["duration"],
        )

    @retry_on_database_error
    def create(self, video: Video) -> bool:
        """Insert a video; returns False if its id is already stored."""
        placeholders = ", ".join("?" for _ in VIDEO_COLUMNS)
        with self.get_connection() as conn:
            cursor = conn.execute(
                f"INSERT OR IGNORE INTO videos ({', '.join(VIDEO_COLUMNS)}) VALUES ({placeholders})",
                self._video_params(video),
            )
            inserted = cursor.rowcount == 1

        if not inserted:
            logger.debug(f"Video {video.video_id} already stored, skipping")
        return inserted

    def create_many(self, videos: Iterable[Video]) -> int:
        """Insert videos in order, returning how many were new."""
        return sum(1 for video in videos if self.create(video))

    @retry_on_database_error
    def find_all(self) -> List[Video]:
        """All videos in insertion order."""
        with self.get_connection() as conn:
            rows = conn.execute("SELECT * FROM videos ORDER BY id ASC").fetchall()
        return [self._row_to_video(row) for row in rows]

    @retry_on_database_error
    def find(self, order_by: str = "id", limit: int = -1, offset: int = 0) -> List[Video]:
        """Ordered, paginated query. A negative limit means no limit."""
        column, direction = parse_order_by(order_by)
        if offset < 0:
            raise ValueError("offset cannot be negative")

        # id breaks ties so pages never overlap
        with self.get_connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM videos ORDER BY {column} {direction}, id ASC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        return [self._row_to_video(row) for row in rows]

    @retry_on_database_error
    def get(self, video_id: str) -> Optional[Video]:
        with self.get_connection() as conn:
            row = conn.execute("SELECT * FROM videos WHERE video_id = ?", (video_id,)).fetchone()
        return self._row_to_video(row) if row else None

    @retry_on_database_error
    def has(self, video_id: str) -> bool:
        """Check whether a video id is stored."""
        with self.get_connection() as conn:
            row = conn.execute("SELECT 1 FROM videos WHERE video_id = ?", (video_id,)).fetchone()
        return row is not None

    @retry_on_database_error
    def count(self) -> int:
        with self.get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM videos").fetchone()[0]

    def close(self):
        """Close every pooled connection."""
        with self._pool_lock:
            while self._connection_pool:
                self._connection_pool.pop().close()

    def __enter__(self) -> "VideoStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
