"""Tests for PollSpec and MediaFile validation."""

from __future__ import annotations

import pytest

from x_plugin.errors import ValidationError
from x_plugin.models import MediaFile, PollSpec, SearchMode


class TestPollSpec:
    @pytest.mark.parametrize("count", [1, 5])
    def test_option_count_out_of_range(self, count):
        with pytest.raises(ValidationError) as exc_info:
            PollSpec(options=[f"opt{i}" for i in range(count)], duration_minutes=60)
        assert exc_info.value.field == "options"

    @pytest.mark.parametrize("count", [2, 3, 4])
    def test_option_count_in_range(self, count):
        poll = PollSpec(options=[f"opt{i}" for i in range(count)], duration_minutes=60)
        assert len(poll.options) == count

    @pytest.mark.parametrize("minutes", [4, 10081, 0, -5])
    def test_duration_out_of_range(self, minutes):
        with pytest.raises(ValidationError) as exc_info:
            PollSpec(options=["a", "b"], duration_minutes=minutes)
        assert exc_info.value.field == "duration_minutes"

    @pytest.mark.parametrize("minutes", [5, 10080])
    def test_duration_bounds_inclusive(self, minutes):
        assert PollSpec(options=["a", "b"], duration_minutes=minutes).duration_minutes == minutes

    def test_empty_option(self):
        with pytest.raises(ValidationError):
            PollSpec(options=["a", " "])

    def test_option_too_long(self):
        with pytest.raises(ValidationError):
            PollSpec(options=["a", "x" * 26])

    def test_payload(self):
        poll = PollSpec(options=["yes", "no"], duration_minutes=1440)
        assert poll.to_payload() == {"options": ["yes", "no"], "duration_minutes": 1440}


class TestMediaFile:
    def test_read_from_path(self, tmp_path):
        path = tmp_path / "cat.png"
        path.write_bytes(b"png-bytes")

        filename, content, content_type = MediaFile(path=path, content_type="image/png").read()
        assert (filename, content, content_type) == ("cat.png", b"png-bytes", "image/png")

    def test_read_from_content(self):
        assert MediaFile(content=b"raw").read() == ("media.jpg", b"raw", "image/jpeg")

    def test_read_requires_source(self):
        with pytest.raises(ValidationError):
            MediaFile().read()


def test_search_mode_values():
    assert {m.value for m in SearchMode} == {"top", "latest", "people", "photos", "videos"}
