# Copyright (c) Syntropy Systems
"""Run directories for learning results."""
from __future__ import annotations

import csv
import logging
import uuid
from contextlib import suppress
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError
from typing_extensions import Self

from pasta.errors import OutputError
from pasta.models.learn import LearnMeta, ModelFile, RoundRecord

if TYPE_CHECKING:
    from types import TracebackType

    from pasta.learn import Model, RoundResult
    from pasta.models.base import JSONValue
    from pasta.records import RecordSet

logger = logging.getLogger(__name__)


def utcnow() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class OutputRun:
    """A learning run writing into an output directory.

    Layout:
        meta.json         run metadata and summary
        rounds.jsonl      one line per round
        model.json        the learned model
        assignments.csv   cluster assignment per record
    """

    _finished: bool
    _round_idx: int
    _status: str
    _finished_at: str | None
    _summary_data: dict[str, JSONValue] | None

    output_dir: Path
    run_id: str
    input_path: Path
    settings: dict[str, JSONValue]
    started_at: str

    def __init__(
        self,
        output_dir: Path,
        input_path: Path,
        settings: dict[str, JSONValue] | None = None,
    ) -> None:
        self._finished = False
        self._round_idx = 0
        self._status = "running"
        self._finished_at = None
        self._summary_data = None

        self.output_dir = Path(output_dir)
        self.input_path = Path(input_path)
        self.settings = settings or {}
        now = datetime.now(timezone.utc)
        self.run_id = f"{now.strftime('%Y%m%d-%H%M%S')}-{str(uuid.uuid4())[:6]}"
        self.started_at = utcnow()

        self._meta_path = self.output_dir / "meta.json"
        self._rounds_path = self.output_dir / "rounds.jsonl"
        self._model_path = self.output_dir / "model.json"
        self._assignments_path = self.output_dir / "assignments.csv"

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            # A rerun into the same directory starts a fresh round log
            _ = self._rounds_path.write_text("")
            self._write_meta()
        except OSError as e:
            msg = f"Cannot write output directory {self.output_dir}: {e.strerror or e}"
            raise OutputError(msg) from e
        logger.debug("Writing run %s to %s", self.run_id, self.output_dir)

    def _check_open(self, action: str) -> None:
        if self._finished:
            msg = f"Cannot {action} a finished run"
            raise RuntimeError(msg)

    def _write_meta(self) -> None:
        """Write/update metadata file."""
        meta = LearnMeta(
            id=self.run_id,
            input=str(self.input_path),
            settings=self.settings,
            started_at=self.started_at,
            finished_at=self._finished_at if self._finished else None,
            status=self._status if self._finished else "running",
            summary=self._summary_data,
        )
        _ = self._meta_path.write_text(meta.model_dump_json(indent=2))

    def log_round(self, result: RoundResult, best_inertia: float) -> None:
        """Append a round to rounds.jsonl."""
        self._check_open("log to")

        record = RoundRecord(
            _idx=self._round_idx,
            _timestamp=utcnow(),
            round=result.round,
            inertia=result.inertia,
            iterations=result.iterations,
            converged=result.converged,
            best_inertia=best_inertia,
        )
        with self._rounds_path.open("a") as f:
            _ = f.write(record.model_dump_json(by_alias=True) + "\n")
            _ = f.flush()

        self._round_idx += 1

    def save_model(self, model: Model, records: RecordSet) -> None:
        """Write model.json and assignments.csv."""
        self._check_open("save a model to")

        model_file = ModelFile(
            feature_names=model.feature_names,
            clusters=model.clusters,
            centroids=model.centroids.tolist(),
            mean=model.mean.tolist(),
            scale=model.scale.tolist(),
            inertia=model.inertia,
            best_round=model.best_round,
            rounds=model.rounds,
            cluster_sizes=model.cluster_sizes(),
        )
        _ = self._model_path.write_text(model_file.model_dump_json(indent=2))

        with self._assignments_path.open("w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["id", "cluster", "distance"])
            for record_id, label, distance in zip(
                records.ids, model.labels, model.distances
            ):
                writer.writerow([record_id, int(label), f"{float(distance):.6g}"])

    def summary(self, metrics: dict[str, JSONValue]) -> None:
        """Set summary metrics for this run."""
        self._check_open("set summary on")
        self._summary_data = metrics
        self._write_meta()

    def finish(self, status: str = "completed") -> None:
        """Mark this run as finished.

        Args:
            status: Final status ("completed" or "failed")

        """
        if self._finished:
            return

        self._finished = True
        self._finished_at = utcnow()
        self._status = status
        self._write_meta()

    @property
    def finished(self) -> bool:
        """Return whether the run has finished."""
        return self._finished

    def __enter__(self) -> Self:
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit - auto-finish with appropriate status."""
        if not self._finished:
            status = "failed" if exc_type is not None else "completed"
            self.finish(status=status)


def read_rounds(output_dir: Path) -> list[RoundRecord]:
    """Read rounds.jsonl, tolerating a partial final line."""
    rounds: list[RoundRecord] = []
    rounds_path = Path(output_dir) / "rounds.jsonl"

    if not rounds_path.exists():
        return rounds

    with rounds_path.open() as f:
        for raw_line in f:
            line = raw_line.strip()
            if line:
                with suppress(ValidationError):
                    rounds.append(RoundRecord.model_validate_json(line))

    return rounds


def read_meta(output_dir: Path) -> LearnMeta | None:
    """Read run metadata from meta.json."""
    meta_path = Path(output_dir) / "meta.json"
    if not meta_path.exists():
        return None

    return LearnMeta.model_validate_json(meta_path.read_text())


def read_model(output_dir: Path) -> ModelFile | None:
    """Read the learned model from model.json."""
    model_path = Path(output_dir) / "model.json"
    if not model_path.exists():
        return None

    return ModelFile.model_validate_json(model_path.read_text())
