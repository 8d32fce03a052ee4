import json

import pytest
from fixtures.test_data import sample_playlist

from pls.errors import MalformedInput
from pls.models import Availability, Channel, Playlist, Thumbnail, Video, decode_playlist


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "00:00"),
        (59, "00:59"),
        (447, "07:27"),
        (3661, "01:01:01"),
        (86400, "1:00:00:00"),
        (90061.9, "1:01:01:01"),
    ],
)
def test_duration_string(seconds, expected):
    assert Video(duration=seconds).duration_string() == expected


def test_biggest_thumbnail_by_area():
    video = Video(thumbnails=(Thumbnail("a", 100, 50), Thumbnail("b", 60, 90)))
    assert video.biggest_thumbnail() == Thumbnail("b", 60, 90)


def test_biggest_thumbnail_keeps_first_on_tie():
    video = Video(thumbnails=(Thumbnail("a", 10, 10), Thumbnail("b", 10, 10)))
    assert video.biggest_thumbnail().url == "a"


def test_biggest_thumbnail_without_thumbnails():
    assert Video().biggest_thumbnail() == Thumbnail()


def test_urls():
    assert Video(video_id="abc").url() == "https://www.youtube.com/watch?v=abc"
    assert Channel(channel_id="UC1", uploader_id="@me").url() == "https://www.youtube.com/@me"
    assert Channel(channel_id="UC1").url() == "https://www.youtube.com/channel/UC1"


def test_playlist_from_dict():
    playlist = Playlist.from_dict(sample_playlist())

    assert playlist.playlist_id == "PLx0sYbCqOb8TBPRdmBHs5Iftvv9TPboYG"
    assert playlist.availability is Availability.PUBLIC
    assert playlist.channel.uploader_id == "@Mudan"
    assert [v.video_id for v in playlist.entries] == ["dQw4w9WgXcQ", "kJQP7kiw5Fk", "9bZkp7q19f0"]

    first = playlist.entries[0]
    assert first.channel.channel_title == "Rick Astley"
    assert first.view_count == 1500000000
    assert first.duration == 213.0
    assert len(first.thumbnails) == 2
    assert playlist.entries[2].thumbnails == ()
    assert playlist.validate() == []


def test_entries_without_id_are_skipped():
    data = sample_playlist()
    data["entries"].append({"title": "deleted video"})
    data["entries"].append(None)

    playlist = Playlist.from_dict(data)
    assert len(playlist.entries) == 3


def test_unknown_availability_is_none():
    data = sample_playlist()
    data["availability"] = "needs_auth"
    assert Playlist.from_dict(data).availability is None


@pytest.mark.parametrize(
    "key, value",
    [("view_count", -1), ("view_count", "many"), ("duration", "long"), ("thumbnails", "x")],
)
def test_malformed_entry_names_the_entry(key, value):
    data = sample_playlist()
    data["entries"][1][key] = value

    with pytest.raises(MalformedInput, match="entry 2"):
        Playlist.from_dict(data)


def test_decode_playlist_rejects_bad_documents():
    with pytest.raises(MalformedInput):
        decode_playlist(b"{not json")
    with pytest.raises(MalformedInput):
        decode_playlist(b"\xff\xfe\x00")
    with pytest.raises(MalformedInput):
        decode_playlist("[1, 2, 3]")
    with pytest.raises(MalformedInput):
        decode_playlist(json.dumps({"id": "x", "entries": {"a": 1}}))


def test_decode_playlist_from_bytes():
    playlist = decode_playlist(json.dumps(sample_playlist()).encode("utf-8"))
    assert playlist.title == "Late Night Listening"
    assert "강남스타일" in playlist.entries[2].description


def test_validate_reports_count_and_duplicates():
    data = sample_playlist()
    data["entries"].append(dict(data["entries"][0], title="again"))
    playlist = Playlist.from_dict(data)

    issues = playlist.validate()
    assert any("declares 3 videos but contains 4" in issue for issue in issues)
    assert any("dQw4w9WgXcQ" in issue for issue in issues)


def test_deduplicated_keeps_first_occurrence():
    data = sample_playlist()
    data["entries"].append(dict(data["entries"][0], title="again"))
    playlist = Playlist.from_dict(data).deduplicated()

    assert len(playlist.entries) == 3
    assert playlist.entries[0].title == "Never Gonna Give You Up"


def test_video_json_uses_yt_dlp_keys():
    video = Playlist.from_dict(sample_playlist()).entries[0]
    data = json.loads(video.to_json())

    assert data["id"] == "dQw4w9WgXcQ"
    assert data["channel"] == "Rick Astley"
    assert Video.from_dict(data) == video


@pytest.mark.parametrize("raw", ["1e400", "-1e400", "NaN", "Infinity"])
def test_non_finite_duration_is_malformed(raw):
    document = json.dumps(sample_playlist()).replace('"duration": 213', f'"duration": {raw}')
    with pytest.raises(MalformedInput, match="entry 1"):
        decode_playlist(document)


def test_duration_string_of_non_finite_duration():
    assert Video(duration=float("inf")).duration_string() == "00:00"
    assert Video(duration=float("nan")).duration_string() == "00:00"
