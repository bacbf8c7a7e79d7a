from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from hashlib import sha256
from pathlib import Path
from typing import Iterable


@dataclass(frozen=True)
class SourceCandidate:
    path: Path
    fingerprint: str


def discover_sources(root: Path, include: Iterable[str] = ("*.php",)) -> list[SourceCandidate]:
    root_path = Path(root)
    patterns = tuple(include)
    if root_path.is_file():
        paths = [root_path]
    elif root_path.is_dir():
        paths = [
            entry
            for entry in root_path.rglob("*")
            if entry.is_file() and any(fnmatch(entry.name, pattern) for pattern in patterns)
        ]
    else:
        return []

    candidates: list[SourceCandidate] = []
    for path in sorted(paths, key=lambda p: p.as_posix()):
        candidates.append(SourceCandidate(path=path, fingerprint=_fingerprint_file(path)))
    return candidates


def _fingerprint_file(path: Path) -> str:
    return sha256(_read_bytes(path)).hexdigest()


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError:
        return b""
