import subprocess

import pytest

from pls.errors import SelectorUnavailable
from pls.models import Channel, Video
from pls.search import candidates
from pls.search.candidates import build_candidates, candidate_text, find_videos, resolve_keys
from pls.search.fuzzy_matcher import STRICT
from pls.search.selector import FzfSelector

VIDEOS = [
    Video(channel=Channel(channel_title="Mudan"), video_id="a", title="Slow Rain", description="ambient"),
    Video(channel=Channel(channel_title="Mudan"), video_id="b", title="Slow Rain", description="live"),
    Video(channel=Channel(channel_title="Other"), video_id="c", title="Sunrise", description="rain\tand\nsun"),
]


def test_candidate_text_fields():
    video = VIDEOS[0]
    assert candidate_text(video) == "Mudan - Slow Rain"
    assert candidate_text(video, "title") == "Slow Rain"
    assert candidate_text(video, "description") == "ambient"
    assert candidate_text(video, "channel") == "Mudan"
    assert candidate_text(video, "all", " / ") == "Mudan / Slow Rain"
    with pytest.raises(ValueError):
        candidate_text(video, "tags")


def test_candidates_are_keyed_by_video_id():
    assert build_candidates(VIDEOS[:2]) == [("a", "Mudan - Slow Rain"), ("b", "Mudan - Slow Rain")]


def test_videos_with_identical_text_are_both_found():
    found = find_videos(VIDEOS, "slow rain")
    assert [v.video_id for v in found] == ["a", "b"]


def test_find_videos_by_field():
    found = find_videos(VIDEOS, "rain", field="description")
    assert [v.video_id for v in found] == ["c"]


def test_find_videos_strict_empty_query():
    assert find_videos(VIDEOS, "", strategy=STRICT) == []


def test_resolve_keys_drops_repeats_and_unknown():
    resolved = resolve_keys(["b", "zz", "b", "a"], VIDEOS)
    assert [v.video_id for v in resolved] == ["b", "a"]


def test_single_line():
    assert candidates.single_line("rain\tand\nsun\r\n") == "rain and sun"


class TestFzfSelector:
    def test_build_args_with_query(self):
        args = FzfSelector().build_args("rain")
        assert args[0] == "fzf"
        assert "--with-nth=2.." in args
        assert "--delimiter=\t" in args
        assert "--bind=load:toggle-all+accept" in args
        assert args[-1] == "--query=rain"

    def test_build_args_without_query(self):
        args = FzfSelector(extra_args=[]).build_args()
        assert args == ["fzf", "--delimiter=\t", "--with-nth=2.."]

    def test_build_input_hides_key_column(self):
        text = FzfSelector.build_input(build_candidates(VIDEOS, "description"))
        assert text.splitlines() == ["a\tambient", "b\tlive", "c\train and sun"]

    def test_select_maps_lines_back_to_keys(self, monkeypatch):
        captured = {}

        def fake_run(args, input, **kwargs):
            captured["args"] = args
            captured["input"] = input
            return subprocess.CompletedProcess(args, 0, stdout="b\tMudan - Slow Rain\na\tMudan - Slow Rain\n")

        monkeypatch.setattr(subprocess, "run", fake_run)
        keys = FzfSelector().select(build_candidates(VIDEOS), "slow")

        assert keys == ["b", "a"]
        assert captured["input"].startswith("a\tMudan - Slow Rain\n")

    @pytest.mark.parametrize("returncode", [1, 130])
    def test_no_selection(self, monkeypatch, returncode):
        monkeypatch.setattr(
            subprocess, "run", lambda args, **kw: subprocess.CompletedProcess(args, returncode, stdout="")
        )
        assert FzfSelector().select(build_candidates(VIDEOS)) == []

    def test_selector_failure(self, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", lambda args, **kw: subprocess.CompletedProcess(args, 2, stdout="")
        )
        with pytest.raises(SelectorUnavailable):
            FzfSelector().select(build_candidates(VIDEOS))

    def test_missing_binary(self, monkeypatch):
        def fake_run(args, **kwargs):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(SelectorUnavailable):
            FzfSelector(command="no-such-fzf").select(build_candidates(VIDEOS))

    def test_empty_candidates_skip_fzf(self, monkeypatch):
        def fake_run(args, **kwargs):
            raise AssertionError("fzf should not run")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert FzfSelector().select([]) == []
