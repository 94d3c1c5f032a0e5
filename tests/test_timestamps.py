"""Tests for time code extraction and formatting."""

import pytest

from video_chapters.core.timestamps import extract_timestamps, format_time, parse_timestamp


class TestExtractTimestamps:
    """Test extract_timestamps function."""

    def test_empty_and_missing_text(self):
        """Test that empty or missing text yields no timestamps."""
        assert extract_timestamps("") == []
        assert extract_timestamps(None) == []

    def test_text_without_time_codes(self):
        """Test that text without time codes yields nothing."""
        assert extract_timestamps("No chapters here.\nJust prose, 10 out of 10.") == []

    def test_keeps_text_order(self, sample_description):
        """Test that results follow the text, not chronology."""
        result = extract_timestamps(sample_description)

        assert [ts.time for ts in result] == [300, 0, 60, 3723]
        assert [ts.label for ts in result] == ["Core concepts", "Intro", "Setup", "Wrap-up"]

    def test_minutes_seconds(self):
        """Test that two groups read as M:SS."""
        result = extract_timestamps("12:34 Topic")

        assert len(result) == 1
        assert result[0].time == 12 * 60 + 34
        assert result[0].label == "Topic"

    def test_hours_minutes_seconds(self):
        """Test that three groups read as H:MM:SS."""
        result = extract_timestamps("1:02:03 Deep dive")

        assert result[0].time == 3723

    @pytest.mark.parametrize(
        "line",
        [
            "1:00 - Setup",
            "1:00 – Setup",
            "1:00 — Setup",
            "1:00-Setup",
            "[1:00] Setup",
            "[1:00] - Setup",
            "01:00 Setup",
            "1:00\u00a0Setup",
            "1:00\u00a0-\u00a0Setup",
        ],
    )
    def test_separator_variants(self, line):
        """Test bracket and dash variants of the same chapter."""
        result = extract_timestamps(line)

        assert len(result) == 1
        assert result[0].time == 60
        assert result[0].label == "Setup"

    def test_label_stops_at_line_end(self):
        """Test that labels never include the following line."""
        result = extract_timestamps("0:00 Intro\nnot a chapter\r\n2:00 Next   ")

        assert [(ts.time, ts.label) for ts in result] == [(0, "Intro"), (120, "Next")]

    def test_non_breaking_space_separators(self):
        """Test descriptions pasted with non-breaking spaces after the code."""
        result = extract_timestamps("0:00\u00a0Intro\n1:00\u00a0Setup")

        assert [(ts.time, ts.label) for ts in result] == [(0, "Intro"), (60, "Setup")]

    def test_code_without_label_on_its_line(self):
        """Test that a bare time code does not borrow the next line as its label."""
        result = extract_timestamps("3:00\nSomething else")

        assert result == []

    def test_duplicates_are_kept(self):
        """Test that repeated codes are all returned."""
        result = extract_timestamps("0:30 First\n0:30 Again")

        assert [ts.time for ts in result] == [30, 30]

    def test_code_inside_sentence(self):
        """Test that codes are found anywhere in a line."""
        result = extract_timestamps("Jump to 4:15 for the demo")

        assert result[0].time == 255
        assert result[0].label == "for the demo"


class TestFormatTime:
    """Test format_time function."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0:00"),
            (59, "0:59"),
            (60, "1:00"),
            (605, "10:05"),
            (3600, "1:00:00"),
            (3723, "1:02:03"),
            (90.9, "1:30"),
        ],
    )
    def test_formats(self, seconds, expected):
        assert format_time(seconds) == expected


class TestParseTimestamp:
    """Test parse_timestamp function."""

    def test_seconds(self):
        assert parse_timestamp("123.5") == 123.5
        assert parse_timestamp(42) == 42.0

    def test_minutes_seconds(self):
        assert parse_timestamp("1:23") == 83.0

    def test_hours_minutes_seconds(self):
        assert parse_timestamp(" 1:02:03 ") == 3723.0

    @pytest.mark.parametrize("value", ["abc", "1:2:3:4", "-5", "", "nan", -1])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)
