# Copyright (c) Syntropy Systems
"""Loading CSV record files into feature matrices."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from pasta.errors import RecordError

logger = logging.getLogger(__name__)


@dataclass
class RecordSet:
    """Records read from a CSV file.

    Row ``i`` of ``features`` is the feature vector of ``ids[i]``.
    """

    ids: list[str]
    feature_names: list[str]
    features: np.ndarray

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    def vector(self, record_id: str) -> np.ndarray:
        """Return the feature vector for a record identifier."""
        try:
            index = self.ids.index(record_id)
        except ValueError:
            msg = f"Unknown record '{record_id}'"
            raise KeyError(msg) from None
        return self.features[index]

    def as_mapping(self) -> dict[str, list[float]]:
        """Return a record-id to feature-vector mapping."""
        return {
            record_id: [float(v) for v in row]
            for record_id, row in zip(self.ids, self.features)
        }


def load_records(path: Path, id_column: str | None = None) -> RecordSet:
    """Load a CSV record file.

    The identifier column defaults to the first column; every other column
    must be numeric and complete.

    Raises:
        RecordError: If the file is missing, empty or malformed.

    """
    path = Path(path)
    if not path.is_file():
        msg = f"Input file not found: {path}"
        raise RecordError(msg)

    try:
        header = pd.read_csv(path, nrows=0)
        columns = [str(c) for c in header.columns]
        if id_column is None:
            id_column = columns[0]
        elif id_column not in columns:
            msg = f"Identifier column '{id_column}' not found in {path}"
            raise RecordError(msg)
        # Identifiers stay text so "001" is not read back as 1
        frame = pd.read_csv(path, dtype={id_column: str})
    except pd.errors.EmptyDataError as e:
        msg = f"Input file is empty: {path}"
        raise RecordError(msg) from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        msg = f"Cannot parse {path}: {e}"
        raise RecordError(msg) from e

    if frame.empty:
        msg = f"No records in {path}"
        raise RecordError(msg)

    frame.columns = columns

    feature_names = [c for c in columns if c != id_column]
    if not feature_names:
        msg = f"No feature columns in {path}"
        raise RecordError(msg)

    identifiers = frame[id_column].fillna("").str.strip()
    blank = (identifiers == "").to_numpy()
    if blank.any():
        # Line 1 is the header
        line = int(np.argmax(blank)) + 2
        msg = f"Blank record identifier on line {line} of {path}"
        raise RecordError(msg)

    ids = identifiers.tolist()
    duplicated = identifiers.duplicated()
    if duplicated.any():
        first = ids[int(np.argmax(duplicated.to_numpy()))]
        msg = f"Duplicate record identifier '{first}' in {path}"
        raise RecordError(msg)

    features = frame[feature_names]
    non_numeric = [
        name for name in feature_names
        if not pd.api.types.is_numeric_dtype(features[name])
    ]
    if non_numeric:
        msg = f"Non-numeric feature column(s) in {path}: {', '.join(non_numeric)}"
        raise RecordError(msg)

    missing = features.isna()
    if missing.to_numpy().any():
        row, col = np.argwhere(missing.to_numpy())[0]
        msg = (
            f"Missing value for record '{ids[row]}' "
            f"in column '{feature_names[col]}' of {path}"
        )
        raise RecordError(msg)

    matrix = features.to_numpy(dtype=float)
    logger.info(
        "Loaded %d records with %d features from %s",
        len(ids), len(feature_names), path,
    )
    return RecordSet(ids=ids, feature_names=feature_names, features=matrix)
