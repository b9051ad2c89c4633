from __future__ import annotations

"""Singer lookup strategies: installed singers, a folder beside the project, display name."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from phoneme_timing.errors import SingerNotFoundError
from phoneme_timing.logging_utils import get_logger
from phoneme_timing.singer.voicebank import Singer, is_voicebank_dir, load_singer, read_singer_name

logger = get_logger(__name__)


def resolve_singer(
    singer_id: str,
    *,
    singers_path: Path,
    project_path: Optional[Path] = None,
) -> Singer:
    """Resolve a singer ID, trying each lookup strategy in order."""
    if not singer_id:
        raise SingerNotFoundError("singer ID is required.")
    for strategy, candidate in _candidates(singer_id, singers_path, project_path):
        if candidate is not None and is_voicebank_dir(candidate):
            logger.info("Resolved singer %r via %s at %s", singer_id, strategy, candidate)
            return load_singer(candidate, singer_id=singer_id)
    raise SingerNotFoundError(f"singer '{singer_id}' not found.")


def list_singers(singers_path: Path) -> List[Dict[str, Any]]:
    """List installed voicebanks directly under ``singers_path``."""
    if not singers_path.is_dir():
        return []
    singers = []
    for item in sorted(singers_path.iterdir()):
        if is_voicebank_dir(item):
            singers.append({"id": item.name, "name": read_singer_name(item), "path": item})
    return singers


def _candidates(singer_id: str, singers_path: Path, project_path: Optional[Path]):
    yield "installed singers", _installed_candidate(singer_id, singers_path)
    if project_path is not None:
        project_dir = Path(project_path).resolve().parent
        yield "project folder", _contained(project_dir, singer_id)
    for info in list_singers(singers_path):
        if info["name"] == singer_id:
            yield "display name", info["path"]


def _installed_candidate(singer_id: str, singers_path: Path) -> Optional[Path]:
    if not singers_path.is_dir():
        return None
    return _contained(singers_path.resolve(), singer_id)


def _contained(root: Path, singer_id: str) -> Optional[Path]:
    candidate = (root / singer_id).resolve()
    if root not in candidate.parents:
        logger.warning("Ignoring singer ID %r: resolves outside %s", singer_id, root)
        return None
    return candidate
