"""Stage bookkeeping for the clean and mart layers.

Each stage directory keeps one JSON sidecar per dataset under ``_meta/``.
A stage is re-run when its sidecar is missing, says it failed, or was
written by an older version of the stage.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CLEAN_VERSION = "clean_v1"
MARTS_VERSION = "marts_v1"

META_DIR = "_meta"


@dataclass
class StageMetadata:
    """Outcome of the last run of a stage for one dataset.

    Attributes:
        dataset: Identifier of the source dataset (see raw.dataset_name).
        source: Path of the file the stage read.
        version: CLEAN_VERSION or MARTS_VERSION at the time of the run.
        last_run: ISO timestamp.
        status: "ok" or "failed".
        row_count: Records processed (0 for failed runs).
        views: Marts on disk for the dataset (gold layer only).
        fact_run: ``last_run`` of the clean stage the marts were computed
            from (gold layer only).
    """

    dataset: str
    source: str
    version: str
    last_run: str
    status: str
    row_count: int = 0
    views: Optional[list[str]] = None
    fact_run: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def sidecar_path(stage_dir: Path, dataset: str) -> Path:
    return stage_dir / META_DIR / f"{dataset}.json"


def write_metadata(stage_dir: Path, metadata: StageMetadata) -> None:
    """Persist ``metadata`` next to the stage outputs, replacing any earlier run."""
    path = sidecar_path(stage_dir, metadata.dataset)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(metadata), indent=2))
    logger.debug("Stage metadata %s: %s", metadata.status, path)


def record_stage(
    stage_dir: Path,
    dataset: str,
    source: str,
    version: str,
    status: str,
    row_count: int = 0,
    views: Optional[list[str]] = None,
    fact_run: Optional[str] = None,
) -> StageMetadata:
    """Stamp a stage run with the current time and write it."""
    metadata = StageMetadata(
        dataset=dataset,
        source=source,
        version=version,
        last_run=datetime.now().isoformat(),
        status=status,
        row_count=row_count,
        views=views,
        fact_run=fact_run,
    )
    write_metadata(stage_dir, metadata)
    return metadata


def read_metadata(stage_dir: Path, dataset: str) -> Optional[StageMetadata]:
    """Last recorded run for ``dataset``; None when absent or unreadable."""
    path = sidecar_path(stage_dir, dataset)
    if not path.exists():
        return None
    try:
        return StageMetadata(**json.loads(path.read_text()))
    except (ValueError, TypeError) as e:
        # corrupt sidecars count as "never ran"
        logger.warning("Ignoring unreadable metadata %s: %s", path, e)
        return None


def should_run_stage(stage_dir: Path, dataset: str, version: str) -> bool:
    """True unless the last run for ``dataset`` succeeded with ``version``."""
    meta = read_metadata(stage_dir, dataset)
    return meta is None or not meta.ok or meta.version != version
