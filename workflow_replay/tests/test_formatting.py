import unittest
from datetime import datetime, timezone

from workflow_replay.date_utils import elapsed_ms, format_relative_time, format_time, normalize_iso_date
from workflow_replay.formatting import clip, duration_label, first_line, format_duration, format_size, short_id


class FormattingTests(unittest.TestCase):
    def test_format_duration_ranges(self) -> None:
        self.assertEqual(format_duration(0), "0ms")
        self.assertEqual(format_duration(999), "999ms")
        self.assertEqual(format_duration(1500), "1.5s")
        self.assertEqual(format_duration(125_000), "2m 5s")

    def test_duration_label_uses_placeholder_for_missing(self) -> None:
        self.assertEqual(duration_label(None), "-")
        self.assertEqual(duration_label(0), "-")
        self.assertEqual(duration_label(250), "250ms")

    def test_format_size(self) -> None:
        self.assertEqual(format_size(512), "512 B")
        self.assertEqual(format_size(2048), "2.0 KB")
        self.assertEqual(format_size(3 * 1024 * 1024), "3.0 MB")

    def test_previews(self) -> None:
        self.assertEqual(first_line("alpha\nbeta", 3), "alp")
        self.assertEqual(clip("abcdef", 3), "abc...")
        self.assertEqual(clip("abc", 3), "abc")
        self.assertEqual(short_id("0123456789"), "01234567...")


class DateUtilsTests(unittest.TestCase):
    def test_elapsed_ms(self) -> None:
        self.assertEqual(elapsed_ms("2026-02-16T10:00:00Z", "2026-02-16T10:00:01.250Z"), 1250)
        self.assertIsNone(elapsed_ms("2026-02-16T10:00:05Z", "2026-02-16T10:00:00Z"))
        self.assertIsNone(elapsed_ms("", "2026-02-16T10:00:00Z"))

    def test_normalize_epoch_millis(self) -> None:
        self.assertEqual(normalize_iso_date(0), "1970-01-01T00:00:00Z")

    def test_format_time_keeps_unparseable_input(self) -> None:
        self.assertEqual(format_time("2026-02-16T10:04:05Z"), "10:04:05")
        self.assertEqual(format_time("yesterday"), "yesterday")

    def test_format_relative_time(self) -> None:
        now = datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(format_relative_time("2026-02-16T11:59:40Z", now), "Just now")
        self.assertEqual(format_relative_time("2026-02-16T11:15:00Z", now), "45m ago")
        self.assertEqual(format_relative_time("2026-02-16T09:00:00Z", now), "3h ago")
        self.assertEqual(format_relative_time("2026-02-14T12:00:00Z", now), "2d ago")


if __name__ == "__main__":
    unittest.main()
