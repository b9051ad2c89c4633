"""
End-to-end tests for extract_phoneme_timings over in-memory projects.
"""

from __future__ import annotations

import unittest

from phoneme_timing.api import (
    extract_phoneme_timings,
    phonemize_project,
    records_to_json,
    track_engine_factory,
)
from phoneme_timing.phonemizer.base import ERROR_PHONEME, Phoneme
from phoneme_timing.phonemizer.default import DefaultPhonemizer
from phoneme_timing.phonemizer.english import EnglishPhonemizer
from phoneme_timing.project.model import Track

from tests.helpers import FakeSinger, ScriptedEngine, make_part, make_project


class ExtractPhonemeTimingsTests(unittest.TestCase):
    def test_three_notes_give_three_note_indices(self) -> None:
        project = make_project(
            [make_part([(0, 480, 60, "a"), (480, 480, 62, "i"), (960, 480, 64, "u")])]
        )
        records = extract_phoneme_timings(project, FakeSinger(), lambda track: DefaultPhonemizer())
        self.assertEqual(sorted({r.note_index for r in records}), [0, 1, 2])
        self.assertEqual([r.phoneme for r in records], ["a", "i", "u"])
        self.assertEqual([r.time_ms for r in records], [0.0, 500.0, 1000.0])

    def test_extension_note_has_no_index_of_its_own(self) -> None:
        project = make_project(
            [make_part([(0, 480, 60, "a"), (480, 480, 62, "+"), (960, 480, 64, "u")])]
        )
        records = extract_phoneme_timings(project, FakeSinger(), lambda track: DefaultPhonemizer())
        self.assertEqual([r.note_index for r in records], [0, 1])
        self.assertEqual([r.phoneme for r in records], ["a", "u"])
        self.assertEqual(records[1].time_ms, 1000.0)

    def test_failing_group_reported_with_sentinel(self) -> None:
        project = make_project(
            [make_part([(0, 480, 60, "a"), (480, 480, 62, "bad"), (960, 480, 64, "u")])]
        )
        records = extract_phoneme_timings(
            project, FakeSinger(), lambda track: ScriptedEngine(fail_lyrics=["bad"])
        )
        self.assertEqual(
            [(r.note_index, r.phoneme) for r in records],
            [(0, "a"), (1, ERROR_PHONEME), (2, "u")],
        )

    def test_legacy_alias_rewrites_only_mapped_symbols(self) -> None:
        project = make_project([make_part([(0, 480, 60, "a"), (480, 480, 60, "b")])])
        singer = FakeSinger({("a", 60): "- a"})
        records = extract_phoneme_timings(project, singer, lambda track: DefaultPhonemizer())
        self.assertEqual([r.phoneme for r in records], ["- a", "b"])

    def test_parts_keep_project_order_and_restart_indices(self) -> None:
        lead = make_part([(0, 480, 60, "a"), (480, 480, 60, "b")], name="Lead", track_no=0)
        harmony = make_part([(0, 960, 55, "o")], name="Harmony", track_no=1, position=480)
        project = make_project([lead, harmony])
        records = extract_phoneme_timings(project, FakeSinger(), lambda track: DefaultPhonemizer())
        self.assertEqual(
            [(r.part_name, r.note_index, r.phoneme) for r in records],
            [("Lead", 0, "a"), ("Lead", 1, "b"), ("Harmony", 0, "o")],
        )
        self.assertEqual(records[2].time_ms, 500.0)

    def test_setup_failure_only_drops_that_part(self) -> None:
        lead = make_part([(0, 480, 60, "a")], name="Lead", track_no=0)
        broken = make_part([(0, 480, 60, "b")], name="Broken", track_no=1)
        project = make_project([lead, broken])

        def factory(track):
            return ScriptedEngine(fail_setup=track.name == "Track 2")

        records = extract_phoneme_timings(project, FakeSinger(), factory)
        self.assertEqual([(r.part_name, r.phoneme) for r in records], [("Lead", "a")])

    def test_each_part_gets_a_fresh_engine(self) -> None:
        parts = [make_part([(0, 480, 60, "a")], name=f"P{i}") for i in range(3)]
        project = make_project(parts)
        engines = []

        def factory(track):
            engine = ScriptedEngine()
            engines.append(engine)
            return engine

        results = phonemize_project(project, FakeSinger(), factory)
        self.assertEqual(len(results), 3)
        self.assertEqual(len({id(e) for e in engines}), 3)
        for engine in engines:
            self.assertEqual(engine.calls.count("setup"), 1)
            self.assertEqual(engine.calls.count("cleanup"), 1)

    def test_running_twice_is_identical(self) -> None:
        project = make_project(
            [
                make_part(
                    [
                        (0, 480, 60, "a"),
                        (480, 240, 62, "+"),
                        (720, 480, 64, "b"),
                        (1440, 480, 65, "c"),
                    ]
                )
            ]
        )

        def onset(notes):
            return [Phoneme("k", -90), Phoneme(notes[0].lyric, 0)]

        first = extract_phoneme_timings(project, FakeSinger(), lambda t: ScriptedEngine(output=onset))
        second = extract_phoneme_timings(project, FakeSinger(), lambda t: ScriptedEngine(output=onset))
        self.assertEqual(records_to_json(first), records_to_json(second))
        # Source notes are untouched by trimming.
        self.assertEqual(project.parts[0].notes[1].duration, 240)


class TrackEngineFactoryTests(unittest.TestCase):
    def test_uses_track_phonemizer(self) -> None:
        factory = track_engine_factory()
        engine = factory(Track(phonemizer="OpenUtau.Core.DefaultPhonemizer"))
        self.assertIsInstance(engine, DefaultPhonemizer)

    def test_override_wins_over_track(self) -> None:
        factory = track_engine_factory("english", consonant_ms=45.0)
        engine = factory(Track(phonemizer="OpenUtau.Core.DefaultPhonemizer"))
        self.assertIsInstance(engine, EnglishPhonemizer)
        self.assertEqual(engine.consonant_ms, 45.0)

    def test_new_instance_per_call(self) -> None:
        factory = track_engine_factory()
        self.assertIsNot(factory(Track()), factory(Track()))


if __name__ == "__main__":
    unittest.main()
