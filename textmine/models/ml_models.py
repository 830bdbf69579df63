"""
Random forest classifier over document-term features.

This module provides helpers to:
- load the ML configuration (config/ml.yaml)
- build the RandomForestClassifier used on document-term counts
- read per-term feature importances back from a fitted model, in the
  vocabulary's column order

The training pipeline (split, fit, predict, metrics) is implemented in
textmine/training/train_classifier.py.
"""

from __future__ import annotations

from typing import Any, Dict

import pandas as pd
from sklearn.ensemble import RandomForestClassifier

from textmine.features.document_term import Vocabulary
from textmine.utils.run_utils import load_yaml, require_sections


DEFAULT_ML_CONFIG_PATH = "config/ml.yaml"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_ml_config(config_path: str = DEFAULT_ML_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the ML configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the ML YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with "general" and "ml_models" sections.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    KeyError
        If required sections are missing.
    """
    cfg = load_yaml(config_path)
    require_sections(cfg, ("general", "ml_models"), config_path)
    return cfg


# ---------------------------------------------------------------------------
# Model builder helpers
# ---------------------------------------------------------------------------


def _class_weight_or_none(use_balanced: bool) -> Any:
    return "balanced" if use_balanced else None


def build_random_forest(cfg: Dict[str, Any]) -> RandomForestClassifier:
    general_cfg = cfg.get("general", {}) or {}
    mcfg = (cfg.get("ml_models", {}) or {}).get("random_forest", {}) or {}
    use_balanced = bool(general_cfg.get("use_class_weight_balanced", False))
    return RandomForestClassifier(
        n_estimators=int(mcfg.get("n_estimators", 200)),
        criterion=str(mcfg.get("criterion", "gini")),
        max_depth=mcfg.get("max_depth", None),
        min_samples_split=int(mcfg.get("min_samples_split", 2)),
        min_samples_leaf=int(mcfg.get("min_samples_leaf", 1)),
        max_features=mcfg.get("max_features", "sqrt"),
        n_jobs=int(mcfg.get("n_jobs", 1)),
        random_state=int(general_cfg.get("random_state", 42)),
        class_weight=_class_weight_or_none(use_balanced),
    )


def feature_importances(model: RandomForestClassifier, vocabulary: Vocabulary) -> pd.DataFrame:
    """
    Per-term importances of a fitted forest.

    Returns
    -------
    pd.DataFrame
        Columns ["term", "importance"], sorted by importance descending,
        ties broken by term ascending.

    Raises
    ------
    ValueError
        If the model was fitted on a different number of features.
    """
    importances = model.feature_importances_
    if len(importances) != vocabulary.size:
        raise ValueError(
            f"Model has {len(importances)} features but the vocabulary has {vocabulary.size} terms."
        )
    df = pd.DataFrame({"term": list(vocabulary.terms), "importance": importances})
    return df.sort_values(
        ["importance", "term"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)
