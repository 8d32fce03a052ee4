"""Cursor over an ordered, append-only collection served one page at a time."""

import logging
from typing import Callable, List, Optional, Sequence

from .db import parse_order_by
from .errors import StoreUnavailable
from .formatter import VideoRow, pretty_fields
from .models import Video

logger = logging.getLogger(__name__)


class ListSource:
    """In-memory page source over an already ordered list of videos.

    Only insertion order is supported; the list is served as given.
    """

    def __init__(self, videos: Sequence[Video]):
        self._videos = list(videos)

    def find(self, order_by: str = "id", limit: int = -1, offset: int = 0) -> List[Video]:
        column, direction = parse_order_by(order_by)
        if column != "id":
            raise ValueError("ListSource only supports insertion order")
        if offset < 0:
            raise ValueError("offset cannot be negative")

        videos = self._videos if direction == "ASC" else self._videos[::-1]
        if limit < 0:
            return videos[offset:]
        return videos[offset : offset + limit]


class Paginator:
    """Fixed-size window over a page source with a cursor inside the window.

    The source must provide ``find(order_by, limit, offset)``, as
    :class:`pls.db.VideoStore` and :class:`ListSource` do. The paginator
    never bounds ``offset`` from above: paging past the end yields an empty
    page, and callers that know the collection size stop the cursor there.
    """

    def __init__(self, source, page_size: int, order_by: str = "id"):
        if page_size < 1:
            raise ValueError("page_size must be a positive integer")
        self.source = source
        self.page_size = page_size
        self.order_by = order_by
        self.offset = 0
        self.selected_index = 0

    def current_page(self) -> List[Video]:
        """Records of the current window; may be shorter than page_size."""
        try:
            return self.source.find(self.order_by, self.page_size, self.offset)
        except (StoreUnavailable, ValueError):
            raise
        except Exception as e:
            raise StoreUnavailable(f"page query failed: {e}") from e

    def advance(self) -> None:
        """Move the cursor down, scrolling the window at the last row."""
        if self.selected_index < self.page_size - 1:
            self.selected_index += 1
        else:
            self.offset += 1

    def retreat(self) -> None:
        """Move the cursor up, scrolling the window at the first row."""
        if self.selected_index > 0:
            self.selected_index -= 1
        else:
            self.offset = max(0, self.offset - 1)

    @property
    def position(self) -> int:
        """Absolute position of the cursor in the collection."""
        return self.offset + self.selected_index

    def selected(self, page: Optional[List[Video]] = None) -> Optional[Video]:
        """The record under the cursor, or None if the page is too short."""
        page = self.current_page() if page is None else page
        if self.selected_index < len(page):
            return page[self.selected_index]
        return None


KEYS_DOWN = ("j", "n", "\x1b[B")
KEYS_UP = ("k", "p", "\x1b[A")
KEYS_SELECT = ("\r", "\n")
KEYS_QUIT = ("q", "\x1b", "\x03")


def render_page(paginator: Paginator, page: List[Video], template: str) -> List[str]:
    """Lines of one screen, the selected row marked with ``>``."""
    lines = []
    for i, video in enumerate(page):
        row = VideoRow.build(video, paginator.offset + i + 1)
        marker = ">" if i == paginator.selected_index else " "
        lines.append(f"{marker} {pretty_fields(template, row)}")
    return lines


def browse(
    paginator: Paginator,
    template: str,
    total: int,
    getchar: Callable[[], str],
    echo: Callable[[str], None],
    clear: Callable[[], None] = lambda: None,
) -> Optional[Video]:
    """Interactive loop: j/k move, Enter selects, q quits.

    ``total`` is the size of the collection; the cursor is kept inside it.
    Returns the selected video, or None when the user quits.
    """
    if total <= 0:
        return None

    while True:
        page = paginator.current_page()
        clear()
        for line in render_page(paginator, page, template):
            echo(line)
        echo(f"-- {paginator.position + 1}/{total}  j/k move, enter select, q quit --")

        key = getchar()
        if key in KEYS_DOWN:
            if paginator.position + 1 < total:
                paginator.advance()
        elif key in KEYS_UP:
            paginator.retreat()
        elif key in KEYS_SELECT:
            return paginator.selected(page)
        elif key in KEYS_QUIT:
            return None
        else:
            logger.debug(f"Ignoring key {key!r}")
