# src/core/batches.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from src.config import settings
from src.core.sim_models import CollectedHash

logger = logging.getLogger(__name__)


class ArtifactSaveError(RuntimeError):
    """Raised when a hash batch cannot be written out."""


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def batch_filename(file_number: int) -> str:
    return (
        f"{settings.BATCH_FILENAME_PREFIX}"
        f"{file_number:0{settings.BATCH_NUMBER_WIDTH}d}.json"
    )


def build_batch_document(
    session_id: str,
    file_number: int,
    hashes: Iterable[CollectedHash],
    timestamp: Optional[datetime] = None,
) -> dict:
    records = [h.to_dict() for h in hashes]
    return {
        "sessionId": session_id,
        "fileNumber": file_number,
        "timestamp": iso_timestamp(timestamp),
        "totalHashes": len(records),
        "hashes": records,
    }


class BatchWriter:
    """Writes batch documents as JSON files into the downloads directory."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else settings.DOWNLOAD_DIR

    def write(self, document: dict) -> Path:
        try:
            path = self.directory / batch_filename(int(document["fileNumber"]))
            text = json.dumps(document, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except (OSError, TypeError, ValueError, KeyError) as exc:
            raise ArtifactSaveError(f"Could not save hash batch: {exc}") from exc
        logger.info("Saved %s hashes to %s", document.get("totalHashes"), path.name)
        return path

    def list_batches(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob(f"{settings.BATCH_FILENAME_PREFIX}*.json"))
