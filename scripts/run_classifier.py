"""
Train and evaluate the random forest document classifier.

This script is a convenience wrapper around
`textmine.training.train_classifier.train_and_evaluate_classifier`, which:

- loads the configured corpus and builds document-term features
- splits labelled documents into train/test sets
- trains a random forest on the term counts
- writes metrics and per-term importances under experiments/results/
- saves the trained model under experiments/models/

Usage (from project root):

    python -m scripts.run_classifier
    # or
    python scripts/run_classifier.py
"""

from __future__ import annotations

import argparse

from textmine.training.train_classifier import train_and_evaluate_classifier
from textmine.utils.run_utils import get_logger, load_train_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Train the random forest classifier on document-term features."
    )
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--ml-config",
        type=str,
        default="config/ml.yaml",
        help="Path to ML config YAML (default: config/ml.yaml).",
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
    logger = get_logger(name="run_classifier", config=train_cfg, log_file_suffix="classifier")

    logger.info("=" * 80)
    logger.info("Starting classifier training.")
    logger.info(
        "Configs: data=%s, ml=%s, train=%s",
        args.data_config,
        args.ml_config,
        args.train_config,
    )

    result = train_and_evaluate_classifier(
        data_config_path=args.data_config,
        ml_config_path=args.ml_config,
        train_config_path=args.train_config,
    )

    logger.info("Test F1: %.4f", result.metrics["f1"])
    logger.info("Classifier run completed.")


if __name__ == "__main__":
    main()
