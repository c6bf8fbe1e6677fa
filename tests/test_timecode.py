"""Unit tests for core.timecode."""

from transcript_editor.core.timecode import short_timecode


class TestShortTimecode:

    def test_zero(self):
        assert short_timecode(0) == "00:00:00"

    def test_truncates_fractions(self):
        assert short_timecode(59.999) == "00:00:59"

    def test_minutes_and_hours(self):
        assert short_timecode(3725.4) == "01:02:05"

    def test_hours_beyond_99(self):
        assert short_timecode(100 * 3600) == "100:00:00"

    def test_negative_clamps_to_zero(self):
        assert short_timecode(-3.0) == "00:00:00"
