"""
Sparse-term removal for document-term matrices.

A term is kept iff the fraction of documents *missing* it is at most
``sparse``, i.e. iff its document coverage is at least ``1 - sparse``.
With ``sparse=0.95`` on 100 documents a term needs to appear in at least
5 of them. ``sparse=1`` keeps every term.
"""

from __future__ import annotations

import logging
import numbers
from typing import Optional

import numpy as np

from textmine.errors import EmptyVocabularyError
from textmine.features.document_term import DocumentTermMatrix, select_columns


def kept_term_mask(dtm: DocumentTermMatrix, sparse: float) -> np.ndarray:
    """
    Boolean mask over columns: True for terms that survive the filter.
    """
    _check_sparse(sparse)
    n_docs = dtm.n_documents
    missing = (n_docs - dtm.document_frequency()) / n_docs
    return missing <= sparse


def remove_sparse_terms(
    dtm: DocumentTermMatrix,
    sparse: float,
    logger: Optional[logging.Logger] = None,
) -> DocumentTermMatrix:
    """
    Drop the columns of terms that are missing from too many documents.

    Parameters
    ----------
    dtm : DocumentTermMatrix
        Input counts.
    sparse : float
        Maximum allowed fraction of documents missing a term, in (0, 1].

    Returns
    -------
    DocumentTermMatrix
        Same rows and counts, restricted to the kept terms.

    Raises
    ------
    ValueError
        If ``sparse`` is outside (0, 1].
    EmptyVocabularyError
        If no term survives.
    """
    logger = logger or logging.getLogger(__name__)

    mask = kept_term_mask(dtm, sparse)
    kept = np.flatnonzero(mask)
    if kept.size == 0:
        raise EmptyVocabularyError(
            f"sparse={sparse} removes all {dtm.n_terms} terms",
            stage="sparsity",
        )

    logger.info(
        "Sparsity filter (sparse=%s) kept %d of %d terms.",
        sparse,
        kept.size,
        dtm.n_terms,
    )
    return select_columns(dtm, kept.tolist())


def _check_sparse(sparse: float) -> None:
    if isinstance(sparse, bool) or not isinstance(sparse, numbers.Real):
        raise ValueError(f"sparse must be a real number in (0, 1], got {sparse!r}")
    if not 0.0 < float(sparse) <= 1.0:
        raise ValueError(f"sparse must be in (0, 1], got {sparse!r}")
