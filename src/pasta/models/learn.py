# Copyright (c) Syntropy Systems
"""Pydantic models for the files in a run directory."""

from __future__ import annotations

from pydantic import Field

from .base import JSONValue, PastaBaseModel


class RoundRecord(PastaBaseModel):
    """One line of rounds.jsonl."""

    idx: int = Field(alias="_idx")
    timestamp: str = Field(alias="_timestamp")
    round: int
    inertia: float
    iterations: int
    converged: bool
    best_inertia: float


class LearnMeta(PastaBaseModel):
    """Run metadata stored in meta.json."""

    id: str
    input: str
    settings: dict[str, JSONValue] = Field(default_factory=dict)
    started_at: str
    finished_at: str | None = None
    status: str
    summary: dict[str, JSONValue] | None = None
    rounds_file: str = "rounds.jsonl"
    model_file: str = "model.json"
    assignments_file: str = "assignments.csv"


class ModelFile(PastaBaseModel):
    """Learned model stored in model.json."""

    feature_names: list[str]
    clusters: int
    centroids: list[list[float]]
    mean: list[float]
    scale: list[float]
    inertia: float
    best_round: int
    rounds: int
    cluster_sizes: list[int]
