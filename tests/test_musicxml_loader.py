from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from phoneme_timing.errors import ProjectLoadError
from phoneme_timing.project import DEFAULT_PHONEMIZER, load_project


def _note(step: str, duration: int, note_type: str, *, lyric: str | None = None, tie: str | None = None) -> str:
    tie_xml = f'<tie type="{tie}"/>' if tie else ""
    notations = f'<notations><tied type="{tie}"/></notations>' if tie else ""
    lyric_xml = (
        f'<lyric number="1"><syllabic>single</syllabic><text>{lyric}</text></lyric>' if lyric else ""
    )
    return (
        f"<note><pitch><step>{step}</step><octave>4</octave></pitch>"
        f"<duration>{duration}</duration>{tie_xml}<voice>1</voice><type>{note_type}</type>"
        f"{notations}{lyric_xml}</note>"
    )


SCORE_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 3.1 Partwise//EN"
  "http://www.musicxml.org/dtds/partwise.dtd">
<score-partwise version="3.1">
  <part-list>
    <score-part id="P1"><part-name>Soprano</part-name></score-part>
  </part-list>
  <part id="P1">
    <measure number="1">
      <attributes>
        <divisions>1</divisions>
        <key><fifths>0</fifths></key>
        <time><beats>4</beats><beat-type>4</beat-type></time>
        <clef><sign>G</sign><line>2</line></clef>
      </attributes>
      <direction placement="above">
        <direction-type>
          <metronome><beat-unit>quarter</beat-unit><per-minute>100</per-minute></metronome>
        </direction-type>
        <sound tempo="100"/>
      </direction>
      {_note("C", 1, "quarter", lyric="la")}
      {_note("D", 2, "half", lyric="lo", tie="start")}
      {_note("D", 1, "quarter", tie="stop")}
    </measure>
    <measure number="2">
      {_note("E", 1, "quarter")}
      {_note("F", 1, "quarter", lyric="li")}
      <note><rest/><duration>2</duration><voice>1</voice><type>half</type></note>
    </measure>
  </part>
</score-partwise>
"""


class MusicXmlLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, text: str, name: str = "score.musicxml") -> Path:
        path = self.tmp / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_part_becomes_track_and_part(self) -> None:
        project = load_project(self._write(SCORE_XML))
        self.assertEqual(len(project.tracks), 1)
        self.assertEqual(project.tracks[0].name, "Soprano")
        self.assertEqual(project.tracks[0].phonemizer, DEFAULT_PHONEMIZER)
        self.assertEqual(project.parts[0].name, "Soprano")
        self.assertEqual(project.parts[0].track_no, 0)
        self.assertEqual(project.resolution, 480)

    def test_tied_note_becomes_extension(self) -> None:
        part = load_project(self._write(SCORE_XML)).parts[0]
        self.assertEqual([n.lyric for n in part.notes], ["la", "lo", "+", "li"])
        self.assertEqual([n.position for n in part.notes], [0, 480, 1440, 2400])
        self.assertEqual([n.duration for n in part.notes], [480, 960, 480, 480])
        self.assertEqual(part.notes[2].extends, 1)
        self.assertEqual(part.notes[0].tone, 60)

    def test_metronome_sets_tempo(self) -> None:
        project = load_project(self._write(SCORE_XML))
        self.assertAlmostEqual(project.time_axis.tick_to_ms(480), 600.0)

    def test_broken_file_raises_load_error(self) -> None:
        with self.assertRaises(ProjectLoadError):
            load_project(self._write("<score-partwise><part", name="broken.xml"))


if __name__ == "__main__":
    unittest.main()
