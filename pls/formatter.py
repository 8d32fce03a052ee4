"""Template formatting of records through ``{FieldName}`` placeholders.

Placeholders name dataclass fields in CamelCase (``channel_title`` becomes
``{ChannelTitle}``). Fields of embedded records (declared with
:func:`pls.models.embedded`) are promoted into their parent, so a
:class:`VideoRow` exposes ``{Title}`` and ``{ChannelTitle}`` side by side.
"""

import dataclasses
import functools
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, get_type_hints

from .errors import InvalidTemplate, NotAStruct
from .models import EMBEDDED, Video, embedded

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "{Index}: {Title}"

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

_SCALAR_TYPES = (str, int, float)


@dataclass(frozen=True)
class FieldDescriptor:
    """One flattened field of a record type."""

    placeholder: str
    # attribute names leading from the outer record to the value
    path: Tuple[str, ...]
    depth: int
    type: Any


def placeholder_name(field_name: str) -> str:
    """``channel_title`` -> ``ChannelTitle``."""
    return "".join(part[:1].upper() + part[1:] for part in field_name.split("_") if part)


@functools.lru_cache(maxsize=None)
def deep_fields(cls: Type[Any]) -> Tuple[FieldDescriptor, ...]:
    """Flatten the fields of a dataclass type, embedded records depth-first."""
    if not dataclasses.is_dataclass(cls):
        raise NotAStruct(f"{cls!r} is not a record type")
    return tuple(_walk(cls, (), 0))


def _walk(cls: Type[Any], prefix: Tuple[str, ...], depth: int) -> List[FieldDescriptor]:
    hints = _type_hints(cls)
    descriptors = []
    for f in dataclasses.fields(cls):
        path = prefix + (f.name,)
        field_type = hints.get(f.name, f.type)
        if f.metadata.get(EMBEDDED) and dataclasses.is_dataclass(field_type):
            descriptors.extend(_walk(field_type, path, depth + 1))
        else:
            descriptors.append(FieldDescriptor(placeholder_name(f.name), path, depth, field_type))
    return descriptors


def _type_hints(cls: Type[Any]) -> Dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError):
        return {}


@functools.lru_cache(maxsize=None)
def _registry(cls: Type[Any]) -> Dict[str, FieldDescriptor]:
    """Map placeholder names to descriptors; the shallowest field wins."""
    registry: Dict[str, FieldDescriptor] = {}
    for descriptor in deep_fields(cls):
        current = registry.get(descriptor.placeholder)
        if current is None or descriptor.depth < current.depth:
            registry[descriptor.placeholder] = descriptor
    return registry


def _resolve(record: Any, path: Tuple[str, ...]) -> Any:
    value = record
    for name in path:
        value = getattr(value, name, None)
        if value is None:
            return None
    return value


def stringify(value: Any) -> Optional[str]:
    """Render a scalar field value, or ``None`` for values that are skipped."""
    if isinstance(value, bool) or not isinstance(value, _SCALAR_TYPES):
        return None
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def field_values(record: Any) -> Dict[str, str]:
    """Return the substitutable placeholder values of a record."""
    if not dataclasses.is_dataclass(record) or isinstance(record, type):
        raise NotAStruct(f"expected a record instance, got {type(record).__name__}")

    values = {}
    for name, descriptor in _registry(type(record)).items():
        rendered = stringify(_resolve(record, descriptor.path))
        if rendered is not None:
            values[name] = rendered
    return values


def unknown_placeholders(template: str, cls: Type[Any]) -> List[str]:
    """List the placeholders of ``template`` that ``cls`` does not provide."""
    known = _registry(cls)
    unknown = []
    for name in PLACEHOLDER_PATTERN.findall(template):
        if name not in known and name not in unknown:
            unknown.append(name)
    return unknown


def pretty_fields(template: str, record: Any, strict: bool = False) -> str:
    """Replace every ``{FieldName}`` in ``template`` with the record's value.

    Unknown placeholders and placeholders of composite or missing fields are
    left as they are, unless ``strict`` is set, in which case unknown
    placeholders raise :class:`InvalidTemplate`.
    """
    values = field_values(record)
    if strict:
        unknown = unknown_placeholders(template, type(record))
        if unknown:
            raise InvalidTemplate(
                f"unknown placeholders: {', '.join('{' + n + '}' for n in unknown)}", unknown
            )

    def _substitute(match):
        return values.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


@dataclass(frozen=True)
class VideoRow:
    """A video as presented in output, with its derived display fields."""

    video: Video = embedded(Video)
    # 1-based position in the printed list
    index: int = 0
    duration_string: str = ""
    url: str = ""
    json: str = ""

    @classmethod
    def build(cls, video: Video, index: int) -> "VideoRow":
        return cls(
            video=video,
            index=index,
            duration_string=video.duration_string(),
            url=video.url(),
            json=video.to_json(),
        )


def video_rows(videos: Sequence[Video]) -> List[VideoRow]:
    return [VideoRow.build(video, i) for i, video in enumerate(videos, start=1)]


def format_videos(template: str, videos: Sequence[Video], strict: bool = False) -> List[str]:
    """Render one line per video."""
    template = template or DEFAULT_FORMAT
    return [pretty_fields(template, row, strict=strict) for row in video_rows(videos)]


def format_help(cls: Type[Any] = VideoRow) -> List[str]:
    """Names of the placeholders that can be substituted for ``cls``."""
    names = []
    for name, descriptor in _registry(cls).items():
        if descriptor.type in _SCALAR_TYPES:
            names.append(name)
    return names
