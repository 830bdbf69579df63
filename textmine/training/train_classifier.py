"""
Training and evaluation pipeline for the document classifier.

This module:

- loads the configured corpus and runs the feature pipeline
- takes the (sparsity-filtered, if configured) document-term count matrix
  as features, in vocabulary column order
- performs a stratified train/test split over the labelled rows
- trains a random forest and evaluates it (accuracy, precision, recall,
  F1, confusion matrix)
- reports per-term feature importances
- saves metrics, importances and the fitted model under the configured
  experiment directories

This module is designed to be callable both as a library function and
as a standalone script (via `python -m textmine.training.train_classifier`).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import joblib
import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier

from textmine.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    documents_from_frame,
    load_corpus_frame,
    load_data_config,
)
from textmine.data.split import train_test_split_indices
from textmine.evaluation.metrics import compute_classification_metrics
from textmine.features.document_term import DocumentTermMatrix
from textmine.features.pipeline import FeaturePipeline
from textmine.models.ml_models import (
    DEFAULT_ML_CONFIG_PATH,
    build_random_forest,
    feature_importances,
    load_ml_config,
)
from textmine.utils.run_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    load_train_config,
    seed_everything,
)


@dataclass(eq=False)
class ClassifierResult:
    model: RandomForestClassifier
    metrics: Dict[str, Any]
    importances: pd.DataFrame
    train_ids: Sequence[Any]
    test_ids: Sequence[Any]


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def fit_classifier(
    dtm: DocumentTermMatrix,
    labels: Dict[Any, Any],
    ml_cfg: Dict[str, Any],
    split_cfg: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> ClassifierResult:
    """
    Train and evaluate a random forest on a document-term matrix.

    Parameters
    ----------
    dtm : DocumentTermMatrix
        Count features; rows are documents.
    labels : Dict[Any, Any]
        document_id -> label. DTM rows without a label are left out.
    ml_cfg : Dict[str, Any]
        ML configuration (see config/ml.yaml).
    split_cfg : Optional[Dict[str, Any]]
        Split configuration (see the "split" section of config/data.yaml).

    Returns
    -------
    ClassifierResult
        Fitted model, test metrics, per-term importances and split ids.

    Raises
    ------
    ValueError
        If fewer than two labelled rows or fewer than two classes remain.
    """
    logger = logger or logging.getLogger(__name__)

    rows = [i for i, doc_id in enumerate(dtm.document_ids) if labels.get(doc_id) is not None]
    if len(rows) < len(dtm.document_ids):
        logger.info("Skipping %d unlabelled document(s).", len(dtm.document_ids) - len(rows))

    y = np.asarray([labels[dtm.document_ids[i]] for i in rows])
    if len(set(y.tolist())) < 2:
        raise ValueError("The classifier needs at least two distinct labels.")

    X = dtm.counts[rows]
    train_pos, test_pos = train_test_split_indices(y, split_cfg)
    logger.info("Train size: %d, Test size: %d", len(train_pos), len(test_pos))

    model = build_random_forest(ml_cfg)
    model.fit(X[train_pos], y[train_pos])
    logger.info("Random forest trained on %d features.", X.shape[1])

    y_pred = model.predict(X[test_pos])
    average = str((ml_cfg.get("general", {}) or {}).get("average", "macro"))
    metrics = compute_classification_metrics(y_true=y[test_pos], y_pred=y_pred, average=average)
    logger.info(
        "Metrics - acc: %.4f, prec: %.4f, rec: %.4f, f1: %.4f",
        metrics["accuracy"],
        metrics["precision"],
        metrics["recall"],
        metrics["f1"],
    )

    return ClassifierResult(
        model=model,
        metrics=metrics,
        importances=feature_importances(model, dtm.vocabulary),
        train_ids=[dtm.document_ids[rows[i]] for i in train_pos],
        test_ids=[dtm.document_ids[rows[i]] for i in test_pos],
    )


def _save_result(
    result: ClassifierResult,
    train_cfg: Dict[str, Any],
    logger: logging.Logger,
) -> None:
    results_dir = train_cfg["paths"]["results_dir"]
    models_dir = train_cfg["paths"]["models_dir"]
    ensure_dir_exists(results_dir)
    ensure_dir_exists(models_dir)

    metrics_path = os.path.join(results_dir, "metrics_random_forest.json")
    with open(metrics_path, "w", encoding="utf-8") as f:
        json.dump({"model": "random_forest", **result.metrics}, f, indent=2)
    logger.info("Saved metrics JSON to %s", metrics_path)

    importances_path = os.path.join(results_dir, "feature_importances.csv")
    result.importances.to_csv(importances_path, index=False)
    logger.info("Saved feature importances to %s", importances_path)

    save_cfg = train_cfg.get("save", {}) or {}
    if bool(save_cfg.get("save_models", True)):
        model_path = os.path.join(models_dir, "model_random_forest.joblib")
        overwrite = bool(save_cfg.get("overwrite_existing", False))
        if not os.path.exists(model_path) or overwrite:
            joblib.dump(result.model, model_path)
            logger.info("Saved trained model to %s", model_path)
        else:
            logger.info(
                "Model file already exists and overwrite_existing is False: %s",
                model_path,
            )


# ---------------------------------------------------------------------------
# Training + evaluation
# ---------------------------------------------------------------------------


def train_and_evaluate_classifier(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> ClassifierResult:
    """
    End-to-end pipeline: corpus -> features -> random forest -> metrics.

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    ml_config_path : str
        Path to config/ml.yaml.
    train_config_path : str
        Path to config/train.yaml.

    Returns
    -------
    ClassifierResult
        Fitted model, metrics and feature importances.
    """
    data_cfg = load_data_config(data_config_path)
    ml_cfg = load_ml_config(ml_config_path)
    train_cfg = load_train_config(train_config_path)

    seed_everything(int(train_cfg["general"].get("random_state", 42)))
    logger = get_logger(name="train_classifier", config=train_cfg, log_file_suffix="classifier")

    frame = load_corpus_frame(data_cfg["dataset"])
    documents = documents_from_frame(frame)
    logger.info("Loaded corpus with %d documents.", len(documents))

    features = FeaturePipeline.from_config(data_cfg, logger=logger).run(documents)
    dtm = features.classifier_dtm
    logger.info("Classifier features: %d documents x %d terms.", dtm.n_documents, dtm.n_terms)

    labels = {doc.id: doc.label for doc in features.documents}
    result = fit_classifier(
        dtm,
        labels,
        ml_cfg,
        split_cfg=data_cfg.get("split", {}) or {},
        logger=logger,
    )

    top_n = int((data_cfg.get("features", {}) or {}).get("top_n", 10))
    logger.info("Top %d terms by importance:\n%s", top_n, result.importances.head(top_n))

    _save_result(result, train_cfg, logger)
    return result


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    _ = train_and_evaluate_classifier()


if __name__ == "__main__":
    main()
