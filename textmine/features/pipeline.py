"""
End-to-end document-term feature pipeline.

Stages, in order:

    pre-filter -> tokenize -> clean -> lemmatize -> document-term matrix
                                                  -> sparsity filter (optional)
                                                  -> tf-idf

The sparsity filter and tf-idf both consume the unfiltered matrix unless
``tfidf_on_filtered`` is set. Every run rebuilds all artifacts from the
input documents; nothing is cached between runs.

``FeaturePipeline.from_config`` wires the stages from config/data.yaml;
the constructor accepts explicit components so tests and notebooks can
inject their own stopwords or lemmatizer.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from textmine.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    Document,
    documents_from_frame,
    load_corpus_frame,
    load_data_config,
)
from textmine.data.prefilter import apply_prefilter
from textmine.features.cleaning import Cleaner, build_cleaner
from textmine.features.document_term import DocumentTermMatrix, build_document_term_matrix
from textmine.features.lemmatizer import Lemmatizer, LemmaToken, build_lemmatizer, lemmatize_tokens
from textmine.features.sparsity import remove_sparse_terms
from textmine.features.tfidf import TfIdfMatrix, compute_tf_idf
from textmine.features.tokenizer import Tokenizer, build_tokenizer
from textmine.utils.run_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    load_train_config,
)


GROUP_BY_FIELDS = ("document", "label", "date")


@dataclass(frozen=True, eq=False)
class FeaturePipelineResult:
    documents: Tuple[Document, ...]
    prefiltered_ids: Tuple[Any, ...]
    dtm: DocumentTermMatrix
    filtered_dtm: Optional[DocumentTermMatrix]
    tfidf: TfIdfMatrix

    @property
    def classifier_dtm(self) -> DocumentTermMatrix:
        """The matrix used for classification: filtered if a filter ran."""
        return self.filtered_dtm if self.filtered_dtm is not None else self.dtm


def group_keys_for(documents: Iterable[Document], group_by: str) -> Optional[Dict[Any, Any]]:
    """
    Map document ids to a tf-idf group key ("document", "label" or "date").

    Returns None for "document", meaning one group per document.

    Raises
    ------
    ValueError
        For an unknown field, or when a document lacks the field.
    """
    group_by = (group_by or "document").lower()
    if group_by not in GROUP_BY_FIELDS:
        raise ValueError(f"Unknown group_by '{group_by}'. Expected one of {GROUP_BY_FIELDS}.")
    if group_by == "document":
        return None

    keys = {}
    for doc in documents:
        value = getattr(doc, group_by)
        if value is None:
            raise ValueError(f"Document {doc.id!r} has no {group_by} to group tf-idf by.")
        keys[doc.id] = value
    return keys


class FeaturePipeline:
    """
    Wire the feature stages together.

    Parameters
    ----------
    tokenizer : Tokenizer
    cleaner : Cleaner
    lemmatizer : Lemmatizer
    prefilter_cfg : Optional[Dict[str, Any]]
        "prefilter" config section; None applies the default retweet filter.
    sparse : Optional[float]
        Sparsity threshold; None skips the filter.
    tf_variant : str
        "proportion" or "raw".
    group_by : str
        tf-idf grouping: "document", "label" or "date".
    tfidf_on_filtered : bool
        Weight the filtered matrix instead of the full one.
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        cleaner: Cleaner,
        lemmatizer: Lemmatizer,
        prefilter_cfg: Optional[Dict[str, Any]] = None,
        sparse: Optional[float] = None,
        tf_variant: str = "proportion",
        group_by: str = "document",
        tfidf_on_filtered: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.tokenizer = tokenizer
        self.cleaner = cleaner
        self.lemmatizer = lemmatizer
        self.prefilter_cfg = prefilter_cfg
        self.sparse = sparse
        self.tf_variant = tf_variant
        self.group_by = group_by
        self.tfidf_on_filtered = tfidf_on_filtered
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        data_cfg: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
    ) -> "FeaturePipeline":
        """
        Build a pipeline from the full data configuration dictionary.
        """
        preprocessing_cfg = data_cfg.get("preprocessing", {}) or {}
        features_cfg = data_cfg.get("features", {}) or {}
        sparse = features_cfg.get("sparse")
        return cls(
            tokenizer=build_tokenizer(preprocessing_cfg.get("tokenize", {})),
            cleaner=build_cleaner(preprocessing_cfg),
            lemmatizer=build_lemmatizer(preprocessing_cfg.get("lemmatization", {})),
            prefilter_cfg=data_cfg.get("prefilter", {}) or {},
            sparse=None if sparse is None else float(sparse),
            tf_variant=str(features_cfg.get("tf_variant", "proportion")),
            group_by=str(features_cfg.get("group_by", "document")),
            tfidf_on_filtered=bool(features_cfg.get("tfidf_on_filtered", False)),
            logger=logger,
        )

    def lemmas(self, document: Document) -> List[LemmaToken]:
        """
        Tokenize, clean and lemmatize one document.
        """
        tokens = self.tokenizer.tokenize(document)
        cleaned = self.cleaner.clean(tokens)
        return list(lemmatize_tokens(cleaned, self.lemmatizer))

    def build_dtm(self, documents: Iterable[Document]) -> DocumentTermMatrix:
        """
        Document-term matrix of already pre-filtered documents.
        """
        return build_document_term_matrix(
            ((doc.id, self.lemmas(doc)) for doc in documents),
            logger=self.logger,
        )

    def run(self, documents: Iterable[Document]) -> FeaturePipelineResult:
        """
        Run every stage over the corpus.

        Raises
        ------
        PipelineError
            Any stage failure; no partial result is returned.
        """
        documents = list(documents)
        self.logger.info("Running feature pipeline over %d documents.", len(documents))

        kept, prefiltered = apply_prefilter(documents, self.prefilter_cfg, logger=self.logger)
        dtm = self.build_dtm(kept)

        filtered = None
        if self.sparse is not None:
            filtered = remove_sparse_terms(dtm, self.sparse, logger=self.logger)

        weighted_input = filtered if (self.tfidf_on_filtered and filtered is not None) else dtm
        tfidf = compute_tf_idf(
            weighted_input,
            group_keys=group_keys_for(kept, self.group_by),
            tf_variant=self.tf_variant,
            logger=self.logger,
        )

        return FeaturePipelineResult(
            documents=tuple(kept),
            prefiltered_ids=tuple(prefiltered),
            dtm=dtm,
            filtered_dtm=filtered,
            tfidf=tfidf,
        )


def extract_features(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> FeaturePipelineResult:
    """
    Config-driven feature extraction run.

    Writes under the configured directories:
    - ``<artifacts_dir>/dtm_*`` (and ``filtered_dtm_*`` when filtered)
    - ``<results_dir>/tfidf_top_terms.csv``
    - ``<results_dir>/excluded_documents.json``

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    train_config_path : str
        Path to config/train.yaml.

    Returns
    -------
    FeaturePipelineResult
        All artifacts of the run.
    """
    data_cfg = load_data_config(data_config_path)
    train_cfg = load_train_config(train_config_path)
    logger = get_logger(name="extract_features", config=train_cfg, log_file_suffix="features")

    documents = documents_from_frame(load_corpus_frame(data_cfg["dataset"]))
    logger.info("Loaded corpus with %d documents.", len(documents))

    result = FeaturePipeline.from_config(data_cfg, logger=logger).run(documents)

    artifacts_dir = train_cfg["paths"]["artifacts_dir"]
    results_dir = train_cfg["paths"]["results_dir"]
    ensure_dir_exists(artifacts_dir)
    ensure_dir_exists(results_dir)

    result.dtm.save(artifacts_dir, prefix="dtm")
    if result.filtered_dtm is not None:
        result.filtered_dtm.save(artifacts_dir, prefix="filtered_dtm")
    logger.info("Saved document-term matrices to %s", artifacts_dir)

    top_n = int((data_cfg.get("features", {}) or {}).get("top_n", 10))
    top_path = os.path.join(results_dir, "tfidf_top_terms.csv")
    result.tfidf.top_terms(n=top_n).to_csv(top_path, index=False)
    logger.info("Saved top %d tf-idf terms per group to %s", top_n, top_path)

    excluded_path = os.path.join(results_dir, "excluded_documents.json")
    with open(excluded_path, "w", encoding="utf-8") as f:
        json.dump(
            {
                "prefilter": [str(i) for i in result.prefiltered_ids],
                "no_tokens": [str(i) for i in result.dtm.excluded_document_ids],
            },
            f,
            indent=2,
        )
    logger.info(
        "Excluded %d document(s) by pre-filter and %d with no tokens.",
        len(result.prefiltered_ids),
        len(result.dtm.excluded_document_ids),
    )
    return result
