from __future__ import annotations

import argparse
from dataclasses import replace
import sys
from pathlib import Path
from typing import List, Optional

from phoneme_timing.api import extract_phoneme_timings, track_engine_factory, write_report
from phoneme_timing.config import Settings
from phoneme_timing.errors import PhonemeTimingError
from phoneme_timing.logging_utils import configure_logging, get_logger
from phoneme_timing.project import load_project
from phoneme_timing.singer import resolve_singer

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phoneme-timing",
        description="Export per-phoneme timings (ms) of a singing project as JSON.",
    )
    parser.add_argument("project", help="Project file (.ustx, or MusicXML .xml/.musicxml/.mxl).")
    parser.add_argument("singer_id", help="Singer ID (voicebank folder name or display name).")
    parser.add_argument("output", nargs="?", default=None, help="Output JSON path (default: stdout).")
    parser.add_argument(
        "--phonemizer",
        default=None,
        help="Phonemizer used for every track instead of the one configured in the project.",
    )
    parser.add_argument("--singers-path", default=None, help="Directory of installed singers.")
    parser.add_argument(
        "--consonant-ms",
        type=float,
        default=None,
        help="Consonant length for phonemizers that place consonants (ms).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def run(
    project_path: Path,
    singer_id: str,
    output: Optional[Path],
    settings: Settings,
) -> None:
    project = load_project(project_path)
    singer = resolve_singer(
        singer_id,
        singers_path=settings.singers_path,
        project_path=project_path,
    )
    factory = track_engine_factory(settings.phonemizer, consonant_ms=settings.consonant_ms)
    records = extract_phoneme_timings(project, singer, factory)
    logger.info("Extracted %d phoneme timings from %d parts", len(records), len(project.parts))
    write_report(records, output)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1
    overrides = {}
    if args.singers_path:
        overrides["singers_path"] = Path(args.singers_path).expanduser()
    if args.phonemizer:
        overrides["phonemizer"] = args.phonemizer
    if args.consonant_ms is not None:
        if args.consonant_ms <= 0:
            print("Error: --consonant-ms must be positive.", file=sys.stderr)
            return 1
        overrides["consonant_ms"] = args.consonant_ms
    if overrides:
        settings = replace(settings, **overrides)

    try:
        run(
            Path(args.project),
            args.singer_id,
            Path(args.output) if args.output else None,
            settings,
        )
    except PhonemeTimingError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
