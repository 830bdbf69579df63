"""
Train/test splitting utilities for the classifier path.

We rely on scikit-learn's train_test_split over row indices of the
document-term matrix, so the sparse feature rows and the label vector are
split together. Supported options ("split" section of config/data.yaml):
- stratified splitting on the labels
- configurable test_size and random_state
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from sklearn.model_selection import train_test_split


def train_test_split_indices(
    labels: Sequence[Any],
    split_cfg: Optional[Dict[str, Any]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split row positions into train and test sets.

    Parameters
    ----------
    labels : Sequence[Any]
        One label per matrix row; used for stratification when enabled.
    split_cfg : Optional[Dict[str, Any]]
        Split configuration with "test_size", "stratify", "random_state".

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (train_positions, test_positions), each sorted ascending.

    Raises
    ------
    ValueError
        If fewer than two rows are given, or stratified splitting is
        requested but the label distribution is incompatible (e.g., a
        class with a single member).
    """
    split_cfg = split_cfg or {}
    test_size = float(split_cfg.get("test_size", 0.3))
    stratify_enabled = bool(split_cfg.get("stratify", True))
    random_state = int(split_cfg.get("random_state", 42))

    labels_arr = np.asarray(labels)
    if len(labels_arr) < 2:
        raise ValueError("At least two labelled documents are needed to split.")

    positions = np.arange(len(labels_arr))
    train_pos, test_pos = train_test_split(
        positions,
        test_size=test_size,
        random_state=random_state,
        stratify=labels_arr if stratify_enabled else None,
        shuffle=True,
    )

    return np.sort(train_pos), np.sort(test_pos)
