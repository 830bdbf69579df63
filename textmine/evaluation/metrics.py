"""
Evaluation metrics for the document classifier.

This module centralizes the computation of the classification metrics
reported by textmine.training.train_classifier:

- accuracy
- precision
- recall
- F1-score
- confusion matrix
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    precision_recall_fscore_support,
)


ArrayLike = Union[Sequence[Any], np.ndarray]


def compute_classification_metrics(
    y_true: ArrayLike,
    y_pred: ArrayLike,
    average: str = "macro",
    labels: Optional[Sequence[Any]] = None,
    output_confusion_matrix: bool = True,
) -> Dict[str, Any]:
    """
    Compute standard classification metrics for a predicted label set.

    Parameters
    ----------
    y_true : ArrayLike
        Ground-truth labels (any hashable values, e.g. party or topic names).
    y_pred : ArrayLike
        Predicted labels, same shape as y_true.
    average : str
        Averaging mode for precision/recall/F1: "macro" (default),
        "micro", "weighted", or "binary" for two-class problems with a
        0/1 encoding.
    labels : Optional[Sequence[Any]]
        Label order for the confusion matrix. If None, the sorted union of
        y_true and y_pred is used.
    output_confusion_matrix : bool
        If True, also compute and include the confusion matrix.

    Returns
    -------
    Dict[str, Any]
        "accuracy", "precision", "recall", "f1" and, optionally,
        "labels" and "confusion_matrix" (2D list).
    """
    y_true_arr = np.asarray(y_true)
    y_pred_arr = np.asarray(y_pred)

    acc = accuracy_score(y_true_arr, y_pred_arr)
    prec, rec, f1, _ = precision_recall_fscore_support(
        y_true_arr,
        y_pred_arr,
        average=average,
        zero_division=0,
    )

    metrics: Dict[str, Any] = {
        "accuracy": float(acc),
        "precision": float(prec),
        "recall": float(rec),
        "f1": float(f1),
    }

    if output_confusion_matrix:
        if labels is None:
            labels = sorted(set(y_true_arr.tolist()) | set(y_pred_arr.tolist()), key=str)
        cm = confusion_matrix(y_true_arr, y_pred_arr, labels=list(labels))
        metrics["labels"] = [str(label) for label in labels]
        metrics["confusion_matrix"] = cm.tolist()

    return metrics
