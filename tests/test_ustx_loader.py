from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from phoneme_timing.errors import ProjectLoadError, ProjectNotFoundError
from phoneme_timing.project import load_project


USTX_TEXT = """\
name: Test Song
ustx_version: '0.6'
resolution: 480
bpm: 120
tempos:
- position: 0
  bpm: 120
- position: 1920
  bpm: 60
tracks:
- singer: Teto
  phonemizer: OpenUtau.Core.DefaultPhonemizer
  track_name: Lead
- phonemizer: OpenUtau.Plugin.Builtin.EnunuOnnxEnglishPhonemizer
voice_parts:
- name: Verse
  track_no: 0
  position: 480
  notes:
  - {position: 480, duration: 480, tone: 62, lyric: b}
  - {position: 0, duration: 480, tone: 60, lyric: a}
  - {position: 960, duration: 240, tone: 64, lyric: '+'}
- name: Harmony
  track_no: 1
  position: 0
  notes:
  - {position: 0, duration: 960, tone: 55, lyric: la}
"""


class UstxLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, text: str, name: str = "song.ustx") -> Path:
        path = self.tmp / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_load_basic_project(self) -> None:
        project = load_project(self._write(USTX_TEXT))
        self.assertEqual(project.name, "Test Song")
        self.assertEqual(project.resolution, 480)
        self.assertEqual([t.bpm for t in project.tempos], [120.0, 60.0])
        self.assertEqual([t.name for t in project.tracks], ["Lead", ""])
        self.assertEqual(project.tracks[0].singer, "Teto")
        self.assertEqual(
            project.tracks[1].phonemizer, "OpenUtau.Plugin.Builtin.EnunuOnnxEnglishPhonemizer"
        )
        self.assertEqual([p.name for p in project.parts], ["Verse", "Harmony"])
        self.assertEqual(project.track_of(project.parts[1]).phonemizer,
                         "OpenUtau.Plugin.Builtin.EnunuOnnxEnglishPhonemizer")

    def test_notes_sorted_and_linked(self) -> None:
        part = load_project(self._write(USTX_TEXT)).parts[0]
        self.assertEqual(part.position, 480)
        self.assertEqual([n.lyric for n in part.notes], ["a", "b", "+"])
        self.assertEqual([n.next for n in part.notes], [1, 2, None])
        self.assertEqual([n.extends for n in part.notes], [None, None, 1])
        self.assertFalse(any(n.overlap_error for n in part.notes))

    def test_time_axis_follows_tempo_map(self) -> None:
        project = load_project(self._write(USTX_TEXT))
        self.assertEqual(project.time_axis.tick_to_ms(2400), 3000.0)

    def test_legacy_bpm_without_tempos(self) -> None:
        text = "name: old\nbpm: 60\ntracks:\n- {}\nvoice_parts: []\n"
        project = load_project(self._write(text))
        self.assertEqual([t.bpm for t in project.tempos], [60.0])
        self.assertEqual(project.time_axis.tick_to_ms(480), 1000.0)

    def test_missing_file(self) -> None:
        with self.assertRaises(ProjectNotFoundError):
            load_project(self.tmp / "missing.ustx")

    def test_invalid_yaml(self) -> None:
        with self.assertRaises(ProjectLoadError):
            load_project(self._write("name: [unclosed\n"))

    def test_non_mapping_document(self) -> None:
        with self.assertRaises(ProjectLoadError):
            load_project(self._write("- just\n- a list\n"))

    def test_part_with_missing_track(self) -> None:
        text = "tracks: []\nvoice_parts:\n- {name: p, track_no: 0, notes: []}\n"
        with self.assertRaisesRegex(ProjectLoadError, "missing track"):
            load_project(self._write(text))

    def test_note_without_duration(self) -> None:
        text = "tracks:\n- {}\nvoice_parts:\n- name: p\n  notes:\n  - {position: 0, lyric: a}\n"
        with self.assertRaises(ProjectLoadError):
            load_project(self._write(text))

    def test_entries_that_are_not_mappings(self) -> None:
        cases = [
            "tracks: [foo]\n",
            "tracks:\n- {}\ntempos: {position: 0, bpm: 120}\n",
            "tracks:\n- {}\ntempos: [120]\n",
            "tracks:\n- {}\nvoice_parts: [verse]\n",
            "tracks:\n- {}\nvoice_parts:\n- name: p\n  notes: [a]\n",
        ]
        for index, text in enumerate(cases):
            with self.subTest(text=text):
                with self.assertRaises(ProjectLoadError):
                    load_project(self._write(text, name=f"bad{index}.ustx"))

    def test_unsupported_suffix(self) -> None:
        with self.assertRaisesRegex(ProjectLoadError, "Unsupported project format"):
            load_project(self._write("whatever", name="song.vsqx"))


if __name__ == "__main__":
    unittest.main()
