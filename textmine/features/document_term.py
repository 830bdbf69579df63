"""
Vocabulary and document-term matrix construction.

This module turns per-document lemma sequences into:

- a Vocabulary: the distinct lemmas of the corpus, sorted
  lexicographically (Unicode code point order), so column ``i`` of every
  matrix is always ``vocabulary.terms[i]`` regardless of input order
- a DocumentTermMatrix: a scipy CSR matrix of term counts, one row per
  document that kept at least one token, in corpus order

Zero counts are never stored. Documents with no surviving tokens get no
row; their ids are kept in ``excluded_document_ids``.

Counting is done by scikit-learn's CountVectorizer with identity
preprocessing and tokenization, since documents arrive as lemma lists.
Its feature names are sorted, which gives the vocabulary order.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import joblib
import numpy as np
import pandas as pd
import scipy.sparse as sp
from sklearn.feature_extraction.text import CountVectorizer

from textmine.errors import EmptyCorpusError, InvalidDocumentError


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Vocabulary:
    """
    Ordered set of terms; the position of a term is its column index.
    """

    terms: Tuple[str, ...]
    _index: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {t: i for i, t in enumerate(self.terms)})

    @classmethod
    def from_terms(cls, terms: Iterable[str]) -> "Vocabulary":
        """
        Build a vocabulary from any iterable of terms (duplicates allowed).
        """
        return cls(terms=tuple(sorted(set(terms))))

    @property
    def size(self) -> int:
        return len(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __iter__(self) -> Iterator[str]:
        return iter(self.terms)

    def __contains__(self, term: object) -> bool:
        return term in self._index

    def index_of(self, term: str) -> int:
        """
        Column index of a term; raises KeyError for unknown terms.
        """
        return self._index[term]

    def to_json(self) -> Dict[str, Any]:
        return {"terms": list(self.terms)}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Vocabulary":
        return cls(terms=tuple(data["terms"]))


# ---------------------------------------------------------------------------
# Document-term matrix
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class DocumentTermMatrix:
    """
    Sparse document-term count matrix.

    Attributes
    ----------
    document_ids : Tuple[Any, ...]
        Row ids, in corpus order.
    vocabulary : Vocabulary
        Column terms.
    counts : scipy.sparse.csr_matrix
        Integer counts of shape (n_documents, n_terms), canonical form
        (sorted indices, no duplicates, no explicit zeros).
    excluded_document_ids : Tuple[Any, ...]
        Documents dropped because no token survived cleaning.
    """

    document_ids: Tuple[Any, ...]
    vocabulary: Vocabulary
    counts: sp.csr_matrix
    excluded_document_ids: Tuple[Any, ...] = ()
    _row_index: Dict[Any, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_row_index", {d: i for i, d in enumerate(self.document_ids)})

    @property
    def n_documents(self) -> int:
        return len(self.document_ids)

    @property
    def n_terms(self) -> int:
        return self.vocabulary.size

    @property
    def shape(self) -> Tuple[int, int]:
        return self.counts.shape

    def row_of(self, document_id: Any) -> int:
        """
        Row index of a document; raises KeyError for unknown ids.
        """
        if document_id not in self._row_index:
            raise KeyError(f"Unknown document id: {document_id!r}")
        return self._row_index[document_id]

    def count(self, document_id: Any, term: str) -> int:
        """
        Count of ``term`` in a document; 0 for terms outside the vocabulary.
        """
        row = self.row_of(document_id)
        if term not in self.vocabulary:
            return 0
        return int(self.counts[row, self.vocabulary.index_of(term)])

    def document_frequency(self) -> np.ndarray:
        """
        Number of documents containing each term, in column order.
        """
        return np.diff(self.counts.tocsc().indptr).astype(np.int64)

    def entries(self) -> Iterator[Tuple[Any, int, int]]:
        """
        Iterate over stored (document_id, term_index, count) cells, row by row.
        """
        counts = self.counts
        for row, doc_id in enumerate(self.document_ids):
            start, end = counts.indptr[row], counts.indptr[row + 1]
            for col, value in zip(counts.indices[start:end], counts.data[start:end]):
                yield doc_id, int(col), int(value)

    def to_dict(self) -> Dict[Tuple[Any, str], int]:
        """
        Mapping (document_id, term) -> count for all stored cells.
        """
        terms = self.vocabulary.terms
        return {(doc_id, terms[col]): value for doc_id, col, value in self.entries()}

    def to_frame(self) -> pd.DataFrame:
        """
        Long ("tidy") table with columns document_id, term, count.
        """
        rows = [
            (doc_id, self.vocabulary.terms[col], value)
            for doc_id, col, value in self.entries()
        ]
        return pd.DataFrame(rows, columns=["document_id", "term", "count"])

    def save(self, directory: str, prefix: str = "dtm") -> Dict[str, str]:
        """
        Persist counts (npz), vocabulary (JSON) and row ids (joblib).

        Returns the written paths keyed by artifact name.
        """
        os.makedirs(directory, exist_ok=True)
        paths = {
            "counts": os.path.join(directory, f"{prefix}_counts.npz"),
            "vocabulary": os.path.join(directory, f"{prefix}_vocabulary.json"),
            "rows": os.path.join(directory, f"{prefix}_rows.joblib"),
        }
        sp.save_npz(paths["counts"], self.counts)
        with open(paths["vocabulary"], "w", encoding="utf-8") as f:
            json.dump(self.vocabulary.to_json(), f, ensure_ascii=False, indent=2)
        joblib.dump(
            {
                "document_ids": list(self.document_ids),
                "excluded_document_ids": list(self.excluded_document_ids),
            },
            paths["rows"],
        )
        return paths

    @classmethod
    def load(cls, directory: str, prefix: str = "dtm") -> "DocumentTermMatrix":
        counts_path = os.path.join(directory, f"{prefix}_counts.npz")
        if not os.path.exists(counts_path):
            raise FileNotFoundError(f"Document-term matrix not found at: {counts_path}")
        counts = sp.load_npz(counts_path).tocsr()
        with open(os.path.join(directory, f"{prefix}_vocabulary.json"), "r", encoding="utf-8") as f:
            vocabulary = Vocabulary.from_json(json.load(f))
        rows = joblib.load(os.path.join(directory, f"{prefix}_rows.joblib"))
        return cls(
            document_ids=tuple(rows["document_ids"]),
            vocabulary=vocabulary,
            counts=counts,
            excluded_document_ids=tuple(rows["excluded_document_ids"]),
        )


def identity(x):
    return x


def term_texts(terms: Iterable[Any]) -> List[str]:
    """
    Lemma strings of a document; accepts strings or tokens with a ``text`` attribute.
    """
    return [t if isinstance(t, str) else t.text for t in terms]


def _build_count_vectorizer() -> CountVectorizer:
    """
    Count vectorizer over already tokenized, cleaned and lemmatized documents.
    """
    return CountVectorizer(
        preprocessor=identity,  # already cleaned
        tokenizer=identity,  # already tokenized
        token_pattern=None,
        lowercase=False,
        dtype=np.int64,
    )


def build_document_term_matrix(
    documents_terms: Iterable[Tuple[Any, Iterable[Any]]],
    logger: Optional[logging.Logger] = None,
) -> DocumentTermMatrix:
    """
    Build the vocabulary and sparse count matrix.

    Parameters
    ----------
    documents_terms : Iterable[Tuple[Any, Iterable[Any]]]
        ``(document_id, terms)`` pairs in corpus order. Terms are lemma
        strings or LemmaTokens.
    logger : Optional[logging.Logger]
        Logger for the excluded-document report.

    Returns
    -------
    DocumentTermMatrix
        The count matrix over documents with at least one term.

    Raises
    ------
    InvalidDocumentError
        If a document id appears twice.
    EmptyCorpusError
        If no document has any term.
    """
    logger = logger or logging.getLogger(__name__)

    seen = set()
    kept_ids: List[Any] = []
    excluded_ids: List[Any] = []
    kept_terms: List[List[str]] = []

    for document_id, terms in documents_terms:
        if document_id in seen:
            raise InvalidDocumentError(
                "Duplicate document id", stage="document_term", document_id=document_id
            )
        seen.add(document_id)

        texts = term_texts(terms)
        if not texts:
            excluded_ids.append(document_id)
            continue
        kept_ids.append(document_id)
        kept_terms.append(texts)

    if excluded_ids:
        logger.info(
            "Excluded %d document(s) with no tokens left after cleaning.",
            len(excluded_ids),
        )

    if not kept_ids:
        raise EmptyCorpusError(
            f"No tokens survived cleaning in any of {len(excluded_ids)} document(s)",
            stage="document_term",
        )

    vectorizer = _build_count_vectorizer()
    counts = sp.csr_matrix(vectorizer.fit_transform(kept_terms))
    counts.sum_duplicates()
    counts.sort_indices()
    vocabulary = Vocabulary(terms=tuple(vectorizer.get_feature_names_out().tolist()))

    logger.info(
        "Built document-term matrix: %d documents x %d terms, %d non-zero cells.",
        counts.shape[0],
        counts.shape[1],
        counts.nnz,
    )

    return DocumentTermMatrix(
        document_ids=tuple(kept_ids),
        vocabulary=vocabulary,
        counts=counts,
        excluded_document_ids=tuple(excluded_ids),
    )


def select_columns(dtm: DocumentTermMatrix, columns: Sequence[int]) -> DocumentTermMatrix:
    """
    Restrict a DTM to the given column indices (ascending), keeping all rows.
    """
    columns = sorted(columns)
    vocabulary = Vocabulary(terms=tuple(dtm.vocabulary.terms[c] for c in columns))
    counts = dtm.counts[:, columns].tocsr()
    counts.sort_indices()
    return DocumentTermMatrix(
        document_ids=dtm.document_ids,
        vocabulary=vocabulary,
        counts=counts,
        excluded_document_ids=dtm.excluded_document_ids,
    )
