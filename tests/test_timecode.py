"""Unit tests for timestamp encoding — yt-dlp rejects anything off-grammar."""

import re

import pytest

from clipfetch.timecode import decode, encode, segment_spec

GRAMMAR = re.compile(r"^\d+:\d{2}:\d{2}\.\d{3}$")


class TestEncode:
    def test_zero(self):
        assert encode(0) == "00:00:00.000"

    def test_minutes_and_seconds(self):
        assert encode(65) == "00:01:05.000"
        assert encode(125) == "00:02:05.000"

    def test_sub_second_fraction(self):
        assert encode(1.5) == "00:00:01.500"
        assert encode(0.001) == "00:00:00.001"
        assert encode(12.345) == "00:00:12.345"

    def test_exact_minute_rollover(self):
        assert encode(59.999) == "00:00:59.999"
        assert encode(60) == "00:01:00.000"

    def test_exact_hour_rollover(self):
        assert encode(3599.999) == "00:59:59.999"
        assert encode(3600) == "01:00:00.000"

    def test_rounding_carries_into_next_field(self):
        assert encode(59.9996) == "00:01:00.000"
        assert encode(3599.9999) == "01:00:00.000"

    def test_hours_not_wrapped_at_24(self):
        assert encode(90061.5) == "25:01:01.500"
        assert encode(360000) == "100:00:00.000"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            encode(-0.5)

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError):
            encode(float("nan"))
        with pytest.raises(ValueError):
            encode(float("inf"))

    @pytest.mark.parametrize("seconds", [0, 0.1, 9.87, 61.02, 3723.456, 86399.999, 1e6 + 0.25])
    def test_matches_grammar_and_round_trips(self, seconds):
        text = encode(seconds)
        assert GRAMMAR.match(text)
        assert abs(decode(text) - seconds) <= 0.001


class TestDecode:
    def test_basic(self):
        assert decode("00:01:05.000") == 65.0
        assert decode("25:01:01.500") == 90061.5

    @pytest.mark.parametrize("text", ["1:05", "00:01:05", "00:61:00.000", "00:00:05.5", "", "-00:00:01.000"])
    def test_malformed(self, text):
        with pytest.raises(ValueError, match="Malformed timestamp"):
            decode(text)


class TestSegmentSpec:
    def test_renders_download_section(self):
        assert str(segment_spec(65, 125)) == "*00:01:05.000-00:02:05.000"

    def test_start_sorts_before_end(self):
        spec = segment_spec(59.5, 60.25)
        assert spec.start_formatted < spec.end_formatted
