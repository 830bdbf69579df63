"""
tf-idf weighting over document-term counts.

The unit playing the role of "document" for idf purposes is a *group*:
by default every document is its own group, but documents can be pooled
by any key (e.g. their label, to compare legislative topics or user
groups). For each (group, term) with a non-zero count:

    tf     = count / total terms in the group   ("proportion", default)
             count                               ("raw")
    idf    = ln(N_groups / groups containing the term)
    tf_idf = tf * idf

Entries exist exactly for non-zero counts. A term used by every group
has idf 0, so its entries carry weight 0.0 while still being present.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
import scipy.sparse as sp

from textmine.features.document_term import DocumentTermMatrix, Vocabulary


TF_VARIANTS = ("proportion", "raw")

FRAME_COLUMNS = ["group", "term", "count", "tf", "idf", "tf_idf"]


@dataclass(frozen=True, eq=False)
class TfIdfMatrix:
    """
    tf-idf weights per (group, term).

    ``counts``, ``tf`` and ``weights`` are CSR matrices sharing the same
    sparsity structure; ``idf`` is indexed by column.
    """

    groups: Tuple[Any, ...]
    vocabulary: Vocabulary
    counts: sp.csr_matrix
    tf: sp.csr_matrix
    idf: np.ndarray
    weights: sp.csr_matrix
    tf_variant: str = "proportion"
    _group_index: Dict[Any, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_group_index", {g: i for i, g in enumerate(self.groups)})

    def row_of(self, group: Any) -> int:
        """
        Row index of a group; raises KeyError for unknown groups.
        """
        if group not in self._group_index:
            raise KeyError(f"Unknown group: {group!r}")
        return self._group_index[group]

    def weight(self, group: Any, term: str) -> float:
        """
        tf-idf of a term in a group; 0.0 when the term is absent.
        """
        row = self.row_of(group)
        if term not in self.vocabulary:
            return 0.0
        return float(self.weights[row, self.vocabulary.index_of(term)])

    def to_frame(self) -> pd.DataFrame:
        """
        All entries as a long table (group, term, count, tf, idf, tf_idf),
        in group order then column order.
        """
        counts = self.counts
        row_idx = np.repeat(np.arange(counts.shape[0]), np.diff(counts.indptr))
        groups = np.empty(len(self.groups), dtype=object)
        for i, g in enumerate(self.groups):
            groups[i] = g
        terms = np.asarray(self.vocabulary.terms, dtype=object)
        return pd.DataFrame(
            {
                "group": groups[row_idx],
                "term": terms[counts.indices],
                "count": counts.data.astype(np.int64),
                "tf": self.tf.data,
                "idf": self.idf[counts.indices],
                "tf_idf": self.weights.data,
            },
            columns=FRAME_COLUMNS,
        )

    def top_terms(self, n: int = 10, group: Any = None) -> pd.DataFrame:
        """
        Top-``n`` terms per group by weight (descending), ties broken by
        term (ascending). Restrict to one group with ``group``.
        """
        if n < 1:
            raise ValueError(f"n must be a positive integer, got {n!r}")
        df = self.to_frame()
        if group is not None:
            self.row_of(group)
            df = df[df["group"] == group]

        df = df.assign(_order=df["group"].map(self._group_index))
        df = df.sort_values(
            ["_order", "tf_idf", "term"],
            ascending=[True, False, True],
            kind="mergesort",
        )
        df = df.groupby("_order", sort=False).head(n)
        return df.drop(columns="_order").reset_index(drop=True)


def group_counts(
    dtm: DocumentTermMatrix,
    group_keys: Optional[Mapping[Any, Any]] = None,
) -> Tuple[Tuple[Any, ...], sp.csr_matrix]:
    """
    Sum DTM rows per group.

    Parameters
    ----------
    dtm : DocumentTermMatrix
        Document counts.
    group_keys : Optional[Mapping[Any, Any]]
        document_id -> group. None means each document is its own group.

    Returns
    -------
    Tuple[Tuple[Any, ...], sp.csr_matrix]
        (groups in order of first appearance, grouped counts)

    Raises
    ------
    KeyError
        If a DTM document has no group key.
    """
    if group_keys is None:
        return dtm.document_ids, dtm.counts

    groups: List[Any] = []
    positions: Dict[Any, int] = {}
    assignment = np.empty(dtm.n_documents, dtype=np.int64)
    for row, doc_id in enumerate(dtm.document_ids):
        if doc_id not in group_keys:
            raise KeyError(f"No group key for document {doc_id!r}")
        key = group_keys[doc_id]
        if key not in positions:
            positions[key] = len(groups)
            groups.append(key)
        assignment[row] = positions[key]

    indicator = sp.csr_matrix(
        (np.ones(dtm.n_documents, dtype=np.int64), (assignment, np.arange(dtm.n_documents))),
        shape=(len(groups), dtm.n_documents),
    )
    grouped = (indicator @ dtm.counts).tocsr()
    grouped.sum_duplicates()
    grouped.eliminate_zeros()
    grouped.sort_indices()
    return tuple(groups), grouped


def compute_tf_idf(
    dtm: DocumentTermMatrix,
    group_keys: Optional[Mapping[Any, Any]] = None,
    tf_variant: str = "proportion",
    logger: Optional[logging.Logger] = None,
) -> TfIdfMatrix:
    """
    Compute tf-idf weights from a (possibly sparsity-filtered) DTM.

    Groups left without any count (possible after sparsity filtering) are
    dropped and do not count towards N_groups.

    Raises
    ------
    ValueError
        If ``tf_variant`` is unknown.
    """
    logger = logger or logging.getLogger(__name__)
    if tf_variant not in TF_VARIANTS:
        raise ValueError(f"Unknown tf variant '{tf_variant}'. Expected one of {TF_VARIANTS}.")

    groups, counts = group_counts(dtm, group_keys)

    totals = np.asarray(counts.sum(axis=1)).ravel()
    non_empty = np.flatnonzero(totals > 0)
    if non_empty.size < len(groups):
        logger.info("Dropping %d group(s) with no terms.", len(groups) - non_empty.size)
        groups = tuple(groups[i] for i in non_empty)
        counts = counts[non_empty].tocsr()
        totals = totals[non_empty]

    n_groups = counts.shape[0]
    containing = np.diff(counts.tocsc().indptr)
    idf = np.zeros(counts.shape[1], dtype=np.float64)
    present = containing > 0
    if n_groups:
        idf[present] = np.log(n_groups / containing[present])

    row_idx = np.repeat(np.arange(n_groups), np.diff(counts.indptr))
    tf_data = counts.data.astype(np.float64)
    if tf_variant == "proportion":
        tf_data = tf_data / totals[row_idx]

    structure = (counts.indices.copy(), counts.indptr.copy())
    tf = sp.csr_matrix((tf_data, *structure), shape=counts.shape)
    weights = sp.csr_matrix((tf_data * idf[counts.indices], *structure), shape=counts.shape)

    logger.info(
        "Computed tf-idf (%s tf) over %d groups and %d terms.",
        tf_variant,
        n_groups,
        counts.shape[1],
    )

    return TfIdfMatrix(
        groups=tuple(groups),
        vocabulary=dtm.vocabulary,
        counts=counts,
        tf=tf,
        idf=idf,
        weights=weights,
        tf_variant=tf_variant,
    )
