"""
Lexicon-based sentiment scoring over document-term counts.

Scoring joins the long DTM table (document_id, term, count) with a
lexicon, so it works on lemma counts exactly as produced by the feature
pipeline:

- score lexicons: a document's score is the sum of count * valence over
  its matched terms
- category lexicons: a document gets one column per category with its
  matched counts, plus ``net = positive - negative`` when both exist

``score_corpus_sentiment`` is the config-driven entry point used by
scripts/run_sentiment.py.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable

import pandas as pd

from textmine.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    Document,
    documents_from_frame,
    load_corpus_frame,
    load_data_config,
)
from textmine.features.document_term import DocumentTermMatrix
from textmine.features.pipeline import FeaturePipeline
from textmine.sentiment.lexicon import SentimentLexicon, build_lexicon
from textmine.utils.run_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    load_train_config,
)


def score_documents(dtm: DocumentTermMatrix, lexicon: SentimentLexicon) -> pd.DataFrame:
    """
    Score every DTM document against a lexicon.

    Returns
    -------
    pd.DataFrame
        One row per DTM document (in row order), indexed by "document_id".
        Score lexicons give columns "score" and "n_matched"; category
        lexicons give one count column per category, "n_matched", and
        "net" when both "positive" and "negative" exist. Documents with no
        matched term get zeros.
    """
    counts = dtm.to_frame()
    matched = counts.merge(lexicon.table, on="term", how="inner")
    index = pd.Index(list(dtm.document_ids), name="document_id")

    if lexicon.kind == "score":
        matched = matched.assign(weighted=matched["count"] * matched["value"])
        grouped = matched.groupby("document_id", sort=False).agg(
            score=("weighted", "sum"),
            n_matched=("count", "sum"),
        )
        result = grouped.reindex(index).fillna(0.0)
        result["n_matched"] = result["n_matched"].astype(int)
        return result

    categories = lexicon.categories
    if matched.empty:
        wide = pd.DataFrame(0, index=index, columns=categories)
    else:
        wide = matched.pivot_table(
            index="document_id",
            columns="value",
            values="count",
            aggfunc="sum",
            fill_value=0,
        )
        wide = wide.reindex(index=index, columns=categories, fill_value=0).fillna(0)
    wide = wide.astype(int)
    wide.columns.name = None

    lexicon_terms = set(lexicon.table["term"])
    n_matched = (
        counts[counts["term"].isin(lexicon_terms)]
        .groupby("document_id", sort=False)["count"]
        .sum()
    )
    wide["n_matched"] = n_matched.reindex(index).fillna(0).astype(int)
    if "positive" in categories and "negative" in categories:
        wide["net"] = wide["positive"] - wide["negative"]
    return wide


def aggregate_sentiment(
    scores: pd.DataFrame,
    documents: Iterable[Document],
    by: str = "label",
) -> pd.DataFrame:
    """
    Sum per-document sentiment columns by a document field ("label" or "date").

    Documents missing the field are left out.
    """
    if by not in ("label", "date"):
        raise ValueError(f"Can only aggregate by 'label' or 'date', got {by!r}")

    keys = {doc.id: getattr(doc, by) for doc in documents}
    keyed = scores.assign(**{by: [keys.get(i) for i in scores.index]})
    keyed = keyed.dropna(subset=[by])
    return keyed.groupby(by, sort=True).sum(numeric_only=True)


def score_corpus_sentiment(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> Dict[str, pd.DataFrame]:
    """
    Score the configured corpus with every configured lexicon.

    Per-document scores are written to ``<results_dir>/sentiment_<name>.csv``
    and, when ``sentiment.aggregate_by`` is set, aggregated scores to
    ``<results_dir>/sentiment_<name>_by_<field>.csv``.

    Returns
    -------
    Dict[str, pd.DataFrame]
        Per-document scores keyed by lexicon name.
    """
    data_cfg = load_data_config(data_config_path)
    train_cfg = load_train_config(train_config_path)
    logger = get_logger(name="score_sentiment", config=train_cfg, log_file_suffix="sentiment")

    sentiment_cfg = data_cfg.get("sentiment", {}) or {}
    lexicon_cfgs = sentiment_cfg.get("lexicons") or []
    if not lexicon_cfgs:
        raise ValueError(f'No lexicons configured under "sentiment.lexicons" in {data_config_path}')

    documents = documents_from_frame(load_corpus_frame(data_cfg["dataset"]))
    pipeline = FeaturePipeline.from_config(data_cfg, logger=logger)
    features = pipeline.run(documents)

    results_dir = train_cfg["paths"]["results_dir"]
    ensure_dir_exists(results_dir)
    aggregate_by = sentiment_cfg.get("aggregate_by")

    scores_by_lexicon: Dict[str, pd.DataFrame] = {}
    for lexicon_cfg in lexicon_cfgs:
        lexicon = build_lexicon(lexicon_cfg)
        scores = score_documents(features.dtm, lexicon)
        scores_by_lexicon[lexicon.name] = scores

        matched_docs = int((scores["n_matched"] > 0).sum())
        logger.info(
            "Lexicon '%s' (%s): %d of %d documents matched at least one term.",
            lexicon.name,
            lexicon.kind,
            matched_docs,
            len(scores),
        )

        out_path = os.path.join(results_dir, f"sentiment_{lexicon.name}.csv")
        scores.to_csv(out_path)
        logger.info("Saved sentiment scores to %s", out_path)

        if aggregate_by:
            aggregated = aggregate_sentiment(scores, features.documents, by=aggregate_by)
            agg_path = os.path.join(results_dir, f"sentiment_{lexicon.name}_by_{aggregate_by}.csv")
            aggregated.to_csv(agg_path)
            logger.info("Saved sentiment by %s to %s", aggregate_by, agg_path)

    return scores_by_lexicon
