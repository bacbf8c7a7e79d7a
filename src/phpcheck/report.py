from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from hashlib import sha256
from pathlib import Path
from typing import Any, Iterable, Literal

from .config import CheckerConfig
from .discovery import SourceCandidate
from .evaluator import Evaluator
from .state import FileValidationState, SourceFile

ResultStatus = Literal["VALID", "INVALID"]
INDEX_NAME = "index.json"
READ_ERROR_KIND = "READ_ERROR"
# The build time and the hash itself never feed the hash.
_UNHASHED_KEYS = frozenset({"index_built_at", "content_hash"})

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    path: str
    fingerprint: str
    status: ResultStatus
    kind: str | None
    message: str | None
    line: int | None

    @classmethod
    def from_state(cls, state: FileValidationState, fingerprint: str) -> ValidationResult:
        state.validate()
        diagnostic = state.diagnostic
        if diagnostic is None:
            return cls(str(state.source.path), fingerprint, "VALID", None, None, None)
        return cls(
            path=str(state.source.path),
            fingerprint=fingerprint,
            status="INVALID",
            kind=diagnostic.kind.name,
            message=diagnostic.message,
            line=diagnostic.line,
        )


def validate_all(
    candidates: Iterable[SourceCandidate],
    config: CheckerConfig | None = None,
) -> list[ValidationResult]:
    evaluator = Evaluator(config)
    results: list[ValidationResult] = []
    for candidate in candidates:
        state = FileValidationState(SourceFile(candidate.path), evaluator)
        try:
            state.validate()
        except OSError as exc:
            LOGGER.warning("Failed to read %s: %s", candidate.path, exc)
            results.append(
                ValidationResult(
                    path=str(candidate.path),
                    fingerprint=candidate.fingerprint,
                    status="INVALID",
                    kind=READ_ERROR_KIND,
                    message=f"Failed to read {candidate.path.name}: {exc}",
                    line=0,
                )
            )
            continue
        results.append(ValidationResult.from_state(state, candidate.fingerprint))
    return results


def build_index_payload(results: Iterable[ValidationResult]) -> dict[str, Any]:
    files: dict[str, dict[str, Any]] = {}
    total_valid = 0
    total_invalid = 0
    kinds: dict[str, int] = {}
    for result in sorted(results, key=lambda item: item.path):
        files[result.path] = {
            "status": result.status,
            "kind": result.kind,
            "message": result.message,
            "line": result.line,
            "fingerprint": result.fingerprint,
        }
        if result.status == "VALID":
            total_valid += 1
        else:
            total_invalid += 1
            kind = result.kind or "UNKNOWN"
            kinds[kind] = kinds.get(kind, 0) + 1

    payload: dict[str, Any] = {
        "index_built_at": _utc_now_iso(),
        "total_files": len(files),
        "total_valid": total_valid,
        "total_invalid": total_invalid,
        "kinds": dict(sorted(kinds.items())),
        "files": files,
    }
    payload["content_hash"] = _compute_index_content_hash(payload)
    return payload


def write_validation_index(results: Iterable[ValidationResult], out_dir: Path) -> Path:
    payload = build_index_payload(results)
    out_root = Path(out_dir)
    out_root.mkdir(parents=True, exist_ok=True)
    dest = out_root / INDEX_NAME
    _atomic_write_json(dest, payload)
    return dest


def _compute_index_content_hash(payload: dict[str, Any]) -> str:
    body = {key: value for key, value in payload.items() if key not in _UNHASHED_KEYS}
    canonical = json.dumps(body, sort_keys=True, separators=(",", ":"))
    return sha256(canonical.encode("utf-8")).hexdigest()


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
    staging = path.with_name(path.name + ".tmp")
    try:
        staging.write_text(text, encoding="utf-8")
        os.replace(staging, path)
    except OSError:
        staging.unlink(missing_ok=True)
        raise


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
