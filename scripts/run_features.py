"""
Build document-term features for the configured corpus.

This script is a convenience wrapper around
`textmine.features.pipeline.extract_features`, which:

- loads the configured corpus and drops retweets
- tokenizes, cleans and lemmatizes every document
- builds the document-term matrix (and its sparsity-filtered version)
- computes tf-idf weights per configured group
- writes matrices under experiments/artifacts/ and the top tf-idf
  terms per group under experiments/results/

Usage (from project root):

    python -m scripts.run_features
    # or
    python scripts/run_features.py
"""

from __future__ import annotations

import argparse

from textmine.features.pipeline import extract_features
from textmine.utils.run_utils import get_logger, load_train_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build document-term and tf-idf features for the corpus."
    )
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--train-config",
        type=str,
        default="config/train.yaml",
        help="Path to run config YAML (default: config/train.yaml).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    train_cfg = load_train_config(args.train_config)
    logger = get_logger(name="run_features", config=train_cfg, log_file_suffix="features")

    logger.info("=" * 80)
    logger.info("Starting feature extraction.")
    logger.info("Configs: data=%s, train=%s", args.data_config, args.train_config)

    result = extract_features(
        data_config_path=args.data_config,
        train_config_path=args.train_config,
    )

    logger.info(
        "Document-term matrix: %d documents x %d terms.",
        result.dtm.n_documents,
        result.dtm.n_terms,
    )
    if result.filtered_dtm is not None:
        logger.info("After sparsity filter: %d terms.", result.filtered_dtm.n_terms)
    logger.info("Top tf-idf terms:\n%s", result.tfidf.top_terms(n=5).to_string(index=False))
    logger.info("Feature extraction completed.")


if __name__ == "__main__":
    main()
