"""
Shared fixtures: a small labelled tweet corpus and matching config files
written to a temporary directory, so the end-to-end entry points can run
without the real dataset or any downloadable NLTK data.
"""

from __future__ import annotations

import os
from typing import Dict

import pandas as pd
import pytest
import yaml


DEM_TWEETS = [
    "Healthcare for every family is a right #ACA",
    "Protect voting rights and expand healthcare access",
    "Climate action now, clean energy jobs for workers",
    "We must expand healthcare and protect the climate",
    "Voting rights are under attack @senate",
    "Clean energy investment creates union jobs",
    "Healthcare costs are crushing working families",
    "Climate change is real, act now https://example.org/climate",
    "Expand voting access in every state",
    "Union workers deserve clean energy jobs",
]

REP_TWEETS = [
    "Cut taxes and secure the border #tcot",
    "Border security keeps families safe",
    "Lower taxes grow the economy for small business",
    "Secure the border and stop wasteful spending",
    "Small business owners need lower taxes @treasury",
    "Wasteful spending hurts the economy",
    "Border wall funding now https://example.org/border",
    "Tax cuts help small business grow",
    "Stop the spending spree and cut taxes",
    "Economy first: lower taxes, secure border",
]


def _corpus_frame() -> pd.DataFrame:
    rows = []
    for i, text in enumerate(DEM_TWEETS):
        rows.append({"status_id": f"d{i}", "text": text, "party": "dem", "created_at": "2020-01-01"})
    for i, text in enumerate(REP_TWEETS):
        rows.append({"status_id": f"r{i}", "text": text, "party": "rep", "created_at": "2020-01-02"})
    rows.append({"status_id": "rt0", "text": "RT @someone Border security now", "party": "rep", "created_at": "2020-01-02"})
    return pd.DataFrame(rows)


@pytest.fixture
def project_configs(tmp_path) -> Dict[str, str]:
    """
    Write corpus, lexicons and data/ml/train configs under tmp_path.

    Returns a dict with keys "data", "ml", "train" (config paths) and
    "root" (the tmp directory).
    """
    corpus_path = tmp_path / "tweets.csv"
    _corpus_frame().to_csv(corpus_path, index=False)

    afinn_path = tmp_path / "afinn.csv"
    pd.DataFrame(
        {"word": ["safe", "crushing", "attack", "right", "help"], "value": [1, -3, -2, 1, 2]}
    ).to_csv(afinn_path, index=False)

    nrc_path = tmp_path / "nrc.csv"
    pd.DataFrame(
        {
            "word": ["attack", "attack", "safe", "wasteful", "help"],
            "sentiment": ["negative", "fear", "positive", "negative", "positive"],
        }
    ).to_csv(nrc_path, index=False)

    data_cfg = {
        "dataset": {
            "path": str(corpus_path),
            "id_column": "status_id",
            "text_column": "text",
            "label_column": "party",
            "date_column": "created_at",
            "drop_na_text": True,
            "drop_duplicates": False,
        },
        "prefilter": {"exclude_retweets": True, "retweet_marker": "RT"},
        "preprocessing": {
            "tokenize": {"mode": "social", "lowercase": True},
            "stopwords": {"source": "sklearn", "extra": ["amp"]},
            "cleaning": {
                "drop_patterns": ["url", "digits", "hashtag", "mention", "punctuation", "currency"],
                "min_alpha_required": True,
            },
            "lemmatization": {"enabled": False},
        },
        "features": {
            "sparse": 0.99,
            "tf_variant": "proportion",
            "group_by": "label",
            "tfidf_on_filtered": False,
            "top_n": 5,
        },
        "sentiment": {
            "aggregate_by": "label",
            "lexicons": [
                {"name": "afinn", "source": "csv", "path": str(afinn_path), "kind": "score",
                 "term_column": "word", "value_column": "value"},
                {"name": "nrc", "source": "csv", "path": str(nrc_path), "kind": "category",
                 "term_column": "word", "value_column": "sentiment"},
            ],
        },
        "split": {"test_size": 0.3, "stratify": True, "random_state": 42},
    }
    ml_cfg = {
        "general": {"random_state": 0, "use_class_weight_balanced": False, "average": "macro"},
        "ml_models": {"random_forest": {"n_estimators": 25, "n_jobs": 1}},
    }
    train_cfg = {
        "general": {"random_state": 0},
        "paths": {
            "artifacts_dir": str(tmp_path / "artifacts"),
            "results_dir": str(tmp_path / "results"),
            "models_dir": str(tmp_path / "models"),
            "logs_dir": str(tmp_path / "logs"),
        },
        "logging": {"level": "INFO", "to_file": False},
        "save": {"save_models": True, "overwrite_existing": True},
    }

    paths = {}
    for name, cfg in (("data", data_cfg), ("ml", ml_cfg), ("train", train_cfg)):
        path = os.path.join(str(tmp_path), f"{name}.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(cfg, f)
        paths[name] = path
    paths["root"] = str(tmp_path)
    return paths
