import unittest

from pydantic import ValidationError

from workflow_replay.engine.pairing import iter_unit_events, pair_events, paired_units
from workflow_replay.models import EventKind, PairedUnit, SingletonUnit, WorkflowEvent


def _event(index: int, kind: EventKind, content: str = "", **metadata) -> WorkflowEvent:
    return WorkflowEvent(
        id=f"evt-{index}",
        index=index,
        kind=kind,
        content=content,
        metadata=metadata or None,
    )


class PairingTests(unittest.TestCase):
    def test_adjacent_call_and_result_form_one_pair(self) -> None:
        events = [
            _event(0, EventKind.INVOCATION, tool="Bash"),
            _event(1, EventKind.OUTCOME, exitCode=0),
        ]

        units = pair_events(events)

        self.assertEqual(len(units), 1)
        self.assertIsInstance(units[0], PairedUnit)
        self.assertIs(units[0].invocation, events[0])
        self.assertIs(units[0].outcome, events[1])
        self.assertEqual(units[0].id, "evt-0")

    def test_interleaved_calls_leave_orphans(self) -> None:
        events = [
            _event(0, EventKind.INVOCATION, tool="Read"),
            _event(1, EventKind.INVOCATION, tool="Grep"),
            _event(2, EventKind.OUTCOME, exitCode=0),
            _event(3, EventKind.OUTCOME, exitCode=0),
        ]

        units = pair_events(events)

        self.assertEqual([unit.type for unit in units], ["single", "pair", "single"])
        self.assertEqual(units[1].invocation.index, 1)
        self.assertEqual(units[1].outcome.index, 2)

    def test_result_first_and_trailing_call_stay_single(self) -> None:
        events = [
            _event(0, EventKind.OUTCOME),
            _event(1, EventKind.REASONING, "thinking"),
            _event(2, EventKind.INVOCATION),
        ]

        units = pair_events(events)

        self.assertEqual(len(units), 3)
        self.assertTrue(all(isinstance(unit, SingletonUnit) for unit in units))

    def test_index_gap_prevents_pairing(self) -> None:
        events = [
            _event(0, EventKind.INVOCATION),
            _event(2, EventKind.OUTCOME),
        ]

        units = pair_events(events)

        self.assertEqual([unit.type for unit in units], ["single", "single"])

    def test_every_event_appears_exactly_once_in_order(self) -> None:
        kinds = [
            EventKind.TEXT,
            EventKind.INVOCATION,
            EventKind.OUTCOME,
            EventKind.INVOCATION,
            EventKind.REASONING,
            EventKind.OUTCOME,
            EventKind.SYSTEM,
            EventKind.DECISION,
        ]
        events = [_event(index, kind) for index, kind in enumerate(kinds)]

        units = pair_events(events)

        self.assertEqual(list(iter_unit_events(units)), events)
        self.assertEqual(len(paired_units(units)), 1)

    def test_call_separated_from_result_by_reasoning_stays_unpaired(self) -> None:
        events = [
            _event(0, EventKind.INVOCATION, tool="Bash"),
            _event(1, EventKind.REASONING, "waiting"),
            _event(2, EventKind.OUTCOME, exitCode=0),
        ]

        units = pair_events(events)

        self.assertEqual(len(units), 3)
        self.assertTrue(all(isinstance(unit, SingletonUnit) for unit in units))
        self.assertEqual(paired_units(units), [])

    def test_pairing_is_deterministic(self) -> None:
        events = [
            _event(0, EventKind.INVOCATION, tool="Read"),
            _event(1, EventKind.OUTCOME, exitCode=0),
            _event(2, EventKind.INVOCATION, tool="Grep"),
            _event(3, EventKind.INVOCATION, tool="Bash"),
            _event(4, EventKind.OUTCOME, exitCode=1),
            _event(5, EventKind.TEXT, "done"),
        ]

        first = pair_events(events)
        second = pair_events(events)

        self.assertEqual(first, second)
        self.assertEqual([unit.type for unit in first], ["pair", "single", "pair", "single"])

    def test_empty_sequence_yields_no_units(self) -> None:
        self.assertEqual(pair_events([]), [])

    def test_paired_unit_rejects_non_adjacent_events(self) -> None:
        with self.assertRaises(ValidationError):
            PairedUnit(
                invocation=_event(0, EventKind.INVOCATION),
                outcome=_event(3, EventKind.OUTCOME),
            )
        with self.assertRaises(ValidationError):
            PairedUnit(
                invocation=_event(0, EventKind.REASONING),
                outcome=_event(1, EventKind.OUTCOME),
            )

    def test_event_accepts_type_as_kind_alias(self) -> None:
        event = WorkflowEvent.model_validate({"id": "a", "index": 0, "type": "tool_call", "content": "ls"})
        self.assertIs(event.kind, EventKind.INVOCATION)


if __name__ == "__main__":
    unittest.main()
