"""
End-to-end runner for the whole text mining pipeline.

This script runs, in order:

1) feature extraction (document-term matrix, sparsity filter, tf-idf)
2) lexicon-based sentiment scoring
3) random forest classification over the document-term matrix

Usage (from the project root):

    python -m scripts.run_all

or:

    python scripts/run_all.py
"""

from __future__ import annotations

from textmine.features.pipeline import extract_features
from textmine.sentiment.scoring import score_corpus_sentiment
from textmine.training.train_classifier import train_and_evaluate_classifier
from textmine.utils.run_utils import get_logger, load_train_config


def main() -> None:
    train_cfg = load_train_config()
    logger = get_logger(name="run_all", config=train_cfg, log_file_suffix="all")

    logger.info("=" * 80)
    logger.info("Starting full pipeline (features + sentiment + classifier).")

    # ------------------------------------------------------------------
    # 1) Features
    # ------------------------------------------------------------------
    logger.info("=" * 80)
    features = extract_features()
    logger.info(
        "Finished features: %d documents x %d terms.",
        features.dtm.n_documents,
        features.dtm.n_terms,
    )

    # ------------------------------------------------------------------
    # 2) Sentiment
    # ------------------------------------------------------------------
    logger.info("=" * 80)
    scores = score_corpus_sentiment()
    logger.info("Finished sentiment scoring with lexicons: %s", sorted(scores))

    # ------------------------------------------------------------------
    # 3) Classifier
    # ------------------------------------------------------------------
    logger.info("=" * 80)
    result = train_and_evaluate_classifier()
    logger.info("Finished classifier. Metrics: %s", {k: result.metrics[k] for k in ("accuracy", "f1")})

    logger.info("Full pipeline completed.")


if __name__ == "__main__":
    main()
