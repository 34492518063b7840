# Copyright (c) Syntropy Systems
"""Tests for repeated k-means learning."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from pasta.errors import LearnError
from pasta.learn import LearnSettings, RoundResult, learn
from pasta.records import RecordSet, load_records


def _groups(records: RecordSet, labels: np.ndarray) -> set[frozenset[str]]:
    """Return the clustering as a set of record-id groups."""
    groups: dict[int, set[str]] = {}
    for record_id, label in zip(records.ids, labels):
        groups.setdefault(int(label), set()).add(record_id)
    return {frozenset(group) for group in groups.values()}


class TestLearn:
    """Tests for learn()."""

    def test_finds_separated_groups(self, records_csv: Path) -> None:
        """Test that obvious groups end up in their own clusters."""
        records = load_records(records_csv)

        model = learn(records, LearnSettings(rounds=10, clusters=3, seed=1))

        assert _groups(records, model.labels) == {
            frozenset({"a1", "a2", "a3", "a4"}),
            frozenset({"b1", "b2", "b3", "b4"}),
            frozenset({"c1", "c2", "c3", "c4"}),
        }
        assert sorted(model.cluster_sizes()) == [4, 4, 4]
        assert model.rounds == 10

    def test_centroids_in_original_space(self, records_csv: Path) -> None:
        """Test that centroids are reported in unstandardized units."""
        records = load_records(records_csv)

        model = learn(records, LearnSettings(rounds=5, clusters=3, seed=2))

        centroids = sorted(tuple(np.round(c, 3)) for c in model.centroids)
        assert centroids == [(0.2, 0.225), (10.2, 10.225), (20.2, 0.225)]

    def test_same_seed_same_model(self, records_csv: Path) -> None:
        """Test that a fixed seed makes learning reproducible."""
        records = load_records(records_csv)
        settings = LearnSettings(rounds=4, clusters=2, seed=7)

        first = learn(records, settings)
        second = learn(records, settings)

        np.testing.assert_array_equal(first.labels, second.labels)
        np.testing.assert_allclose(first.centroids, second.centroids)
        assert first.inertia == second.inertia
        assert first.best_round == second.best_round

    def test_on_round_called_in_order(self, records_csv: Path) -> None:
        """Test that every round is reported once, in order."""
        records = load_records(records_csv)
        seen: list[tuple[RoundResult, float]] = []

        model = learn(
            records,
            LearnSettings(rounds=6, clusters=3, seed=3),
            on_round=lambda result, best: seen.append((result, best)),
        )

        assert [result.round for result, _ in seen] == list(range(6))
        bests = [best for _, best in seen]
        assert bests == sorted(bests, reverse=True)
        inertias = [result.inertia for result, _ in seen]
        assert model.inertia == min(inertias)
        assert model.best_round == inertias.index(min(inertias))

    def test_one_cluster_per_record(self, records_csv: Path) -> None:
        """Test that k equal to the record count gives zero inertia."""
        records = load_records(records_csv)

        model = learn(records, LearnSettings(rounds=1, clusters=12, seed=0))

        assert model.inertia == pytest.approx(0.0)
        assert sorted(model.cluster_sizes()) == [1] * 12

    @pytest.mark.filterwarnings("ignore::sklearn.exceptions.ConvergenceWarning")
    def test_identical_records(self) -> None:
        """Test that coinciding records do not break seeding."""
        records = RecordSet(
            ids=["x", "y", "z"],
            feature_names=["a"],
            features=np.ones((3, 1)),
        )

        model = learn(records, LearnSettings(rounds=2, clusters=2, seed=0))

        assert model.inertia == pytest.approx(0.0)
        np.testing.assert_allclose(model.centroids, [[1.0], [1.0]])

    def test_iteration_cap_not_converged(self, records_csv: Path) -> None:
        """Test that rounds stopped by max_iter are reported as not converged."""
        records = load_records(records_csv)
        seen: list[RoundResult] = []

        _ = learn(
            records,
            LearnSettings(rounds=3, clusters=3, seed=6, max_iter=1),
            on_round=lambda result, _: seen.append(result),
        )

        assert [r.iterations for r in seen] == [1, 1, 1]
        assert not any(r.converged for r in seen)

    def test_rounds_converge_below_cap(self, records_csv: Path) -> None:
        """Test that well separated groups converge before max_iter."""
        records = load_records(records_csv)
        seen: list[RoundResult] = []

        _ = learn(
            records,
            LearnSettings(rounds=3, clusters=3, seed=6),
            on_round=lambda result, _: seen.append(result),
        )

        assert all(r.converged for r in seen)
        assert all(1 <= r.iterations < 100 for r in seen)

    def test_without_standardization(self, records_csv: Path) -> None:
        """Test that disabling standardization keeps raw distances."""
        records = load_records(records_csv)

        model = learn(
            records,
            LearnSettings(rounds=5, clusters=3, seed=4, standardize=False),
        )

        np.testing.assert_array_equal(model.mean, [0.0, 0.0])
        np.testing.assert_array_equal(model.scale, [1.0, 1.0])
        assert model.inertia == pytest.approx(float((model.distances ** 2).sum()))

    def test_predict_matches_labels(self, records_csv: Path) -> None:
        """Test that predicting the training records reproduces the labels."""
        records = load_records(records_csv)
        model = learn(records, LearnSettings(rounds=3, clusters=3, seed=5))

        np.testing.assert_array_equal(model.predict(records.features), model.labels)


class TestLearnSettings:
    """Tests for settings validation."""

    @pytest.mark.parametrize(
        ("settings", "message"),
        [
            (LearnSettings(rounds=0), "Rounds"),
            (LearnSettings(clusters=0), "Clusters"),
            (LearnSettings(clusters=13), "Cannot form 13 clusters"),
            (LearnSettings(max_iter=0), "Max iterations"),
            (LearnSettings(tol=-1.0), "Tolerance"),
        ],
    )
    def test_invalid_settings(
        self,
        records_csv: Path,
        settings: LearnSettings,
        message: str,
    ) -> None:
        """Test that invalid settings fail before learning starts."""
        records = load_records(records_csv)
        calls: list[RoundResult] = []

        with pytest.raises(LearnError, match=message):
            _ = learn(records, settings, on_round=lambda r, _: calls.append(r))

        assert calls == []

    def test_to_dict(self) -> None:
        """Test that settings serialize to plain values."""
        assert LearnSettings(rounds=5, seed=1).to_dict() == {
            "rounds": 5,
            "clusters": 3,
            "max_iter": 100,
            "tol": 1e-4,
            "seed": 1,
            "standardize": True,
        }
