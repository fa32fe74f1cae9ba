import unittest

from workflow_replay.engine.pairing import pair_events
from workflow_replay.models import EventKind, WorkflowEvent
from workflow_replay.projections.reasoning import ReasoningProjection, ViewMode, extract_key_points


def _thinking(index: int, content: str) -> WorkflowEvent:
    return WorkflowEvent(id=f"evt-{index}", index=index, kind=EventKind.REASONING, content=content)


class KeyPointTests(unittest.TestCase):
    def test_lead_phrase_lines_become_points(self) -> None:
        points = extract_key_points("I need to check the config.\nThis is fine.")
        self.assertEqual(points, ["I need to check the config.", "This is fine."])

    def test_bullets_and_filler_prefixes_are_stripped(self) -> None:
        points = extract_key_points("- Check the tests again\nOkay, so the file is missing: retry")
        self.assertEqual(points, ["Check the tests again", "so the file is missing: retry"])

    def test_points_too_short_after_cleaning_are_dropped(self) -> None:
        self.assertEqual(extract_key_points("Hmm, ok: x"), [])

    def test_duplicates_collapse(self) -> None:
        points = extract_key_points("Let me read the file.\nLet me read the file.")
        self.assertEqual(points, ["Let me read the file."])

    def test_long_points_are_truncated(self) -> None:
        points = extract_key_points("Now " + "x" * 200)
        self.assertEqual(len(points[0]), 100)
        self.assertTrue(points[0].endswith("..."))

    def test_at_most_five_points(self) -> None:
        content = "\n".join(f"Step {n}: do thing number {n}" for n in range(8))
        self.assertEqual(len(extract_key_points(content)), 5)

    def test_sentence_fallback(self) -> None:
        content = "Alpha beta gamma delta. Epsilon zeta eta theta. Iota kappa lambda mu. Nu xi omicron pi."
        self.assertEqual(
            extract_key_points(content),
            ["Alpha beta gamma delta", "Epsilon zeta eta theta", "Iota kappa lambda mu"],
        )

    def test_empty_content_has_no_points(self) -> None:
        self.assertEqual(extract_key_points(""), [])


class ReasoningProjectionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.units = pair_events([
            _thinking(0, "I need to check the config.\nThis is fine."),
            WorkflowEvent(id="evt-1", index=1, kind=EventKind.TEXT, content="I need to answer."),
            _thinking(2, "Let me look at the failing test: test_router"),
        ])
        self.projection = ReasoningProjection(self.units)

    def test_only_reasoning_events_are_listed(self) -> None:
        view = self.projection.view()
        self.assertEqual([card.id for card in view.cards], ["evt-0", "evt-2"])
        self.assertEqual([card.position for card in view.cards], [1, 2])
        self.assertEqual(view.cards[0].points, ["I need to check the config.", "This is fine."])

    def test_expand_all_then_collapse_one(self) -> None:
        self.assertTrue(self.projection.toggle_expand_all())
        self.assertTrue(all(card.expanded for card in self.projection.view().cards))

        self.assertFalse(self.projection.toggle("evt-0"))
        cards = self.projection.view().cards
        self.assertFalse(cards[0].expanded)
        self.assertTrue(cards[1].expanded)
        self.assertEqual(cards[1].content, "Let me look at the failing test: test_router")
        self.assertTrue(self.projection.view().expandAll)

        self.assertFalse(self.projection.toggle_expand_all())
        self.assertFalse(any(card.expanded for card in self.projection.view().cards))

    def test_detailed_mode_preview(self) -> None:
        self.projection.set_mode(ViewMode.DETAILED)
        cards = self.projection.view().cards

        self.assertEqual(cards[0].preview, "I need to check the config.")
        self.assertTrue(cards[0].hasMore)
        self.assertFalse(cards[1].hasMore)
        self.assertEqual(cards[0].points, [])

    def test_search_filters_cards(self) -> None:
        self.projection.set_search("FAILING")
        view = self.projection.view()
        self.assertEqual([card.id for card in view.cards], ["evt-2"])
        self.assertEqual(view.totalCount, 2)

        self.projection.set_search("nothing here")
        self.assertEqual(self.projection.view().emptyMessage, 'No thinking blocks match "nothing here"')

    def test_key_points_are_cached_per_event(self) -> None:
        first = self.projection.key_points("evt-0")
        self.assertIs(self.projection.key_points("evt-0"), first)
        with self.assertRaises(KeyError):
            self.projection.key_points("evt-1")

    def test_no_reasoning_message(self) -> None:
        view = ReasoningProjection([]).view()
        self.assertEqual(view.emptyMessage, "No thinking blocks in this workflow")


if __name__ == "__main__":
    unittest.main()
