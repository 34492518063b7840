# Copyright (c) Syntropy Systems
"""Repeated k-means learning over a record set."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Callable

import numpy as np
from sklearn.cluster import KMeans
from sklearn.metrics import pairwise_distances_argmin
from sklearn.preprocessing import StandardScaler

from pasta.errors import LearnError

if TYPE_CHECKING:
    from pasta.models.base import JSONValue
    from pasta.records import RecordSet

logger = logging.getLogger(__name__)


@dataclass
class LearnSettings:
    """Settings for a learning run."""

    rounds: int = 1000
    clusters: int = 3
    max_iter: int = 100
    tol: float = 1e-4
    seed: int | None = None
    standardize: bool = True

    def validate(self, n_records: int) -> None:
        """Raise LearnError if the settings cannot be used for n_records."""
        if self.rounds < 1:
            msg = f"Rounds must be at least 1, got {self.rounds}"
            raise LearnError(msg)
        if self.clusters < 1:
            msg = f"Clusters must be at least 1, got {self.clusters}"
            raise LearnError(msg)
        if self.clusters > n_records:
            msg = f"Cannot form {self.clusters} clusters from {n_records} records"
            raise LearnError(msg)
        if self.max_iter < 1:
            msg = f"Max iterations must be at least 1, got {self.max_iter}"
            raise LearnError(msg)
        if self.tol < 0:
            msg = f"Tolerance must not be negative, got {self.tol}"
            raise LearnError(msg)

    def to_dict(self) -> dict[str, JSONValue]:
        return dict(asdict(self))


@dataclass
class RoundResult:
    """Outcome of a single round."""

    round: int
    inertia: float
    iterations: int
    converged: bool


@dataclass
class Model:
    """The best clustering found across all rounds.

    Centroids are expressed in the original (unstandardized) feature space;
    distances are measured in the standardized space the rounds ran in.
    """

    feature_names: list[str]
    centroids: np.ndarray
    mean: np.ndarray
    scale: np.ndarray
    labels: np.ndarray
    distances: np.ndarray
    inertia: float
    best_round: int
    rounds: int

    @property
    def clusters(self) -> int:
        return int(self.centroids.shape[0])

    def cluster_sizes(self) -> list[int]:
        counts = np.bincount(self.labels, minlength=self.clusters)
        return [int(c) for c in counts]

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Assign feature rows to their nearest centroid."""
        scaled = (np.atleast_2d(features) - self.mean) / self.scale
        centers = (self.centroids - self.mean) / self.scale
        return pairwise_distances_argmin(scaled, centers)


RoundCallback = Callable[[RoundResult, float], None]

# Upper bound for per-round random states drawn from the run's generator
_MAX_SEED = 2**31 - 1


def _fit_scaler(features: np.ndarray, enabled: bool) -> tuple[np.ndarray, np.ndarray, np.ndarray]:  # noqa: FBT001
    """Z-score features; return the scaled points, mean and scale."""
    scaler = StandardScaler(with_mean=enabled, with_std=enabled)
    points = scaler.fit_transform(features)
    n_features = features.shape[1]
    mean = scaler.mean_ if scaler.mean_ is not None else np.zeros(n_features)
    scale = scaler.scale_ if scaler.scale_ is not None else np.ones(n_features)
    return points, np.asarray(mean, dtype=float), np.asarray(scale, dtype=float)


def learn(
    records: RecordSet,
    settings: LearnSettings,
    on_round: RoundCallback | None = None,
) -> Model:
    """Cluster records, keeping the best of ``settings.rounds`` restarts.

    Each round is a single k-means++ seeded KMeans fit with its own random
    state drawn from the run's generator. The round with the lowest inertia
    wins; ties keep the earlier round.

    Args:
        records: Records to cluster
        settings: Learning settings
        on_round: Called after every round with its result and the best
            inertia seen so far

    Returns:
        The learned model

    """
    settings.validate(len(records))

    points, mean, scale = _fit_scaler(records.features, settings.standardize)
    rng = np.random.default_rng(settings.seed)

    logger.info(
        "Learning %d clusters from %d records over %d rounds",
        settings.clusters, len(records), settings.rounds,
    )

    best: KMeans | None = None
    best_inertia = float("inf")
    best_round = 0

    for round_index in range(settings.rounds):
        kmeans = KMeans(
            n_clusters=settings.clusters,
            init="k-means++",
            n_init=1,
            max_iter=settings.max_iter,
            tol=settings.tol,
            random_state=int(rng.integers(_MAX_SEED)),
        )
        _ = kmeans.fit(points)
        inertia = float(kmeans.inertia_)
        iterations = int(kmeans.n_iter_)

        if inertia < best_inertia:
            best = kmeans
            best_inertia = inertia
            best_round = round_index

        result = RoundResult(
            round=round_index,
            inertia=inertia,
            iterations=iterations,
            converged=iterations < settings.max_iter,
        )
        logger.debug(
            "Round %d: inertia=%.6g iterations=%d converged=%s",
            round_index, inertia, iterations, result.converged,
        )
        if on_round is not None:
            on_round(result, best_inertia)

    if best is None:
        msg = "No round produced a finite inertia"
        raise LearnError(msg)

    labels = best.labels_.astype(int)
    distances = best.transform(points)[np.arange(len(labels)), labels]
    return Model(
        feature_names=list(records.feature_names),
        centroids=best.cluster_centers_ * scale + mean,
        mean=mean,
        scale=scale,
        labels=labels,
        distances=distances,
        inertia=best_inertia,
        best_round=best_round,
        rounds=settings.rounds,
    )
