import json
import tempfile
import unittest
from pathlib import Path

from workflow_replay.projections.raw import RawViewer, export_filename, render_raw_line

LINES = [
    json.dumps({"type": "session", "id": "abc"}),
    "not a document",
    json.dumps({"type": "message", "message": {"role": "assistant", "content": "héllo"}}),
    json.dumps([1, 2]),
]


class RawViewerTests(unittest.TestCase):
    def test_invalid_line_is_rendered_unchanged(self) -> None:
        line = render_raw_line(1, "not a document")
        self.assertEqual(line.kind, "invalid")
        self.assertEqual(line.formatted, "not a document")
        self.assertEqual(line.color, "red")
        self.assertEqual(line.lineNumber, 2)

    def test_valid_line_is_pretty_printed(self) -> None:
        line = render_raw_line(0, LINES[2])
        self.assertEqual(line.kind, "message")
        self.assertIn('\n  "message": {', line.formatted)
        self.assertIn("héllo", line.formatted)

    def test_document_without_type_is_unknown(self) -> None:
        self.assertEqual(render_raw_line(3, LINES[3]).kind, "unknown")

    def test_search_filters_view_only(self) -> None:
        viewer = RawViewer(LINES, "abc")

        viewer.set_search("not")
        self.assertEqual([line.raw for line in viewer.visible_lines()], ["not a document"])

        viewer.set_search("xyz")
        view = viewer.view()
        self.assertEqual(view.visibleCount, 0)
        self.assertEqual(view.totalCount, 4)
        self.assertEqual(view.emptyMessage, "No lines match your search")
        self.assertEqual(viewer.export_text(), "\n".join(LINES))

    def test_copy_hands_over_full_transcript(self) -> None:
        viewer = RawViewer(LINES, "abc")
        viewer.set_search("session")
        copied: list[str] = []

        self.assertTrue(viewer.copy_to_clipboard(copied.append))
        self.assertEqual(copied, ["\n".join(LINES)])
        self.assertTrue(viewer.copied)

    def test_copy_failure_is_reported(self) -> None:
        def broken(_: str) -> None:
            raise OSError("no clipboard")

        viewer = RawViewer(LINES, "abc")
        with self.assertLogs("replay.raw", level="ERROR"):
            self.assertFalse(viewer.copy_to_clipboard(broken))
        self.assertFalse(viewer.copied)

    def test_download_writes_exact_bytes(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        lines = ["{\"type\": \"custom\"}\r", "plain text", ""]
        viewer = RawViewer(lines, "sess-1")
        viewer.set_search("plain")

        target = viewer.download(Path(tmpdir.name) / "out")

        self.assertEqual(target.name, "sess-1-transcript.jsonl")
        self.assertEqual(target.read_bytes(), "\n".join(lines).encode("utf-8"))

    def test_export_filename_defaults(self) -> None:
        self.assertEqual(export_filename(None), "workflow-transcript.jsonl")
        self.assertEqual(export_filename(""), "workflow-transcript.jsonl")
        self.assertEqual(RawViewer([]).export_text(), "")


if __name__ == "__main__":
    unittest.main()
