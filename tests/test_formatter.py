from dataclasses import dataclass

import pytest

from pls.errors import InvalidTemplate, NotAStruct
from pls.formatter import (
    VideoRow,
    deep_fields,
    field_values,
    format_help,
    format_videos,
    placeholder_name,
    pretty_fields,
)
from pls.models import Channel, Video, embedded


@dataclass
class Song:
    index: int
    title: str
    channel_title: str


@dataclass
class Inner:
    name: str = "inner"
    depth: int = 2


@dataclass
class Outer:
    inner: Inner = embedded(Inner)
    name: str = "outer"


def test_placeholder_name():
    assert placeholder_name("channel_title") == "ChannelTitle"
    assert placeholder_name("index") == "Index"
    assert placeholder_name("video_id") == "VideoId"


def test_pretty_fields_substitutes_known_fields():
    song = Song(index=1, title="Foo", channel_title="Bar")
    assert pretty_fields("{Index}: {Title} by {ChannelTitle}", song) == "1: Foo by Bar"


def test_unknown_placeholder_is_left_as_is():
    song = Song(index=1, title="Foo", channel_title="Bar")
    assert pretty_fields("{Title} ({Year})", song) == "Foo ({Year})"


def test_strict_mode_rejects_unknown_placeholders():
    song = Song(index=1, title="Foo", channel_title="Bar")
    with pytest.raises(InvalidTemplate) as excinfo:
        pretty_fields("{Title} {Year} {Genre}", song, strict=True)
    assert excinfo.value.placeholders == ["Year", "Genre"]


def test_template_without_placeholders_is_unchanged():
    song = Song(index=1, title="Foo", channel_title="Bar")
    assert pretty_fields("plain {} text {1}", song) == "plain {} text {1}"


def test_outer_field_wins_over_embedded_field():
    assert pretty_fields("{Name} {Depth}", Outer()) == "outer 2"


def test_substituted_values_are_not_expanded_again():
    song = Song(index=1, title="{ChannelTitle}", channel_title="Bar")
    assert pretty_fields("{Title}/{ChannelTitle}", song) == "{ChannelTitle}/Bar"


def test_non_records_are_rejected():
    with pytest.raises(NotAStruct):
        pretty_fields("{Title}", {"title": "Foo"})
    with pytest.raises(NotAStruct):
        field_values(Song)
    with pytest.raises(NotAStruct):
        deep_fields(dict)


def test_embedded_fields_are_flattened():
    paths = [d.path for d in deep_fields(Video)]
    assert ("channel", "channel_title") in paths
    assert ("title",) in paths


def test_floats_render_without_trailing_zero():
    video = Video(video_id="x", duration=213.0)
    values = field_values(video)
    assert values["Duration"] == "213"
    assert field_values(Video(duration=1.5))["Duration"] == "1.5"


def test_format_videos_numbers_rows_from_one():
    videos = [
        Video(channel=Channel(channel_title="Rick Astley"), video_id="a", title="Never", duration=213),
        Video(channel=Channel(channel_title="PSY"), video_id="b", title="Gangnam"),
    ]
    lines = format_videos("{Index}. {ChannelTitle} - {Title} [{DurationString}] {Url}", videos)

    assert lines == [
        "1. Rick Astley - Never [03:33] https://www.youtube.com/watch?v=a",
        "2. PSY - Gangnam [00:00] https://www.youtube.com/watch?v=b",
    ]


def test_format_videos_default_template():
    assert format_videos("", [Video(title="Foo")]) == ["1: Foo"]


def test_json_placeholder_is_not_substituted_twice():
    video = Video(video_id="a", title="{Index}")
    line = pretty_fields("{Json}", VideoRow.build(video, 7))
    assert '"title": "{Index}"' in line


def test_format_help_lists_scalar_placeholders():
    names = format_help()
    for name in ("Index", "Title", "ChannelTitle", "VideoId", "Url", "DurationString", "Json"):
        assert name in names
    assert "Thumbnails" not in names
    assert "Video" not in names
    assert len(names) == len(set(names))


def test_large_whole_floats_have_no_exponent():
    assert field_values(Video(duration=1000000.0))["Duration"] == "1000000"
    assert field_values(Video(duration=1e21))["Duration"] == "1e+21"
