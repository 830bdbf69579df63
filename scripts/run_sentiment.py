"""
Score the configured corpus with the configured sentiment lexicons.

This script is a convenience wrapper around
`textmine.sentiment.scoring.score_corpus_sentiment`, which runs the
feature pipeline and joins the lemma counts with every lexicon listed
under "sentiment.lexicons" in config/data.yaml.

Usage (from project root):

    python -m scripts.run_sentiment
    # or
    python scripts/run_sentiment.py
"""

from __future__ import annotations

import argparse

from textmine.sentiment.scoring import score_corpus_sentiment
from textmine.utils.run_utils import get_logger, load_train_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Lexicon-based sentiment scoring of the corpus."
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
    logger = get_logger(name="run_sentiment", config=train_cfg, log_file_suffix="sentiment")

    logger.info("=" * 80)
    logger.info("Starting sentiment scoring.")

    scores = score_corpus_sentiment(
        data_config_path=args.data_config,
        train_config_path=args.train_config,
    )

    for name, df in scores.items():
        logger.info("Lexicon %s column totals:\n%s", name, df.sum(numeric_only=True).to_string())
    logger.info("Sentiment scoring completed.")


if __name__ == "__main__":
    main()
