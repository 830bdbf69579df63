"""
Document pre-filtering ahead of tokenization.

Social-media corpora contain retweets that duplicate other users' text.
They are dropped as whole documents here, before the tokenizer sees them,
so the tokenizer and cleaner only ever deal with single tokens.

The retweet predicate is a prefix check: after leading whitespace, the
text starts with the ASCII marker (default "RT") followed by a word
boundary. Case matters and full-width or other Unicode look-alikes of the
marker are not matched.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from textmine.data.datasets import Document, document_text
from textmine.errors import InvalidDocumentError


DEFAULT_RETWEET_MARKER = "RT"


def make_retweet_predicate(marker: str = DEFAULT_RETWEET_MARKER) -> Callable[[Document], bool]:
    """
    Build a predicate returning True for documents that are retweets.

    Parameters
    ----------
    marker : str
        Retweet marker expected at the start of the text.

    Returns
    -------
    Callable[[Document], bool]
        Predicate over Documents. UTF-8 bytes are decoded before matching;
        invalid texts are never retweets, so the tokenizer rejects them.
    """
    pattern = re.compile(r"\s*" + re.escape(marker) + r"(?![A-Za-z0-9_])")

    def is_retweet(document: Document) -> bool:
        try:
            text = document_text(document)
        except InvalidDocumentError:
            return False
        return pattern.match(text) is not None

    return is_retweet


def filter_documents(
    documents: Iterable[Document],
    exclude: Callable[[Document], bool],
) -> Tuple[List[Document], List[Any]]:
    """
    Split documents into the kept ones and the ids of the excluded ones.

    Parameters
    ----------
    documents : Iterable[Document]
        Input documents, in corpus order.
    exclude : Callable[[Document], bool]
        Predicate; documents for which it returns True are excluded.

    Returns
    -------
    Tuple[List[Document], List[Any]]
        (kept documents in corpus order, excluded document ids)
    """
    kept: List[Document] = []
    excluded: List[Any] = []
    for doc in documents:
        if exclude(doc):
            excluded.append(doc.id)
        else:
            kept.append(doc)
    return kept, excluded


def apply_prefilter(
    documents: Iterable[Document],
    prefilter_cfg: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> Tuple[List[Document], List[Any]]:
    """
    Apply the configured pre-filter ("prefilter" section of config/data.yaml).

    Expected keys::

        prefilter:
          exclude_retweets: true
          retweet_marker: "RT"
    """
    logger = logger or logging.getLogger(__name__)
    cfg = prefilter_cfg or {}
    documents = list(documents)

    if not bool(cfg.get("exclude_retweets", True)):
        return documents, []

    predicate = make_retweet_predicate(cfg.get("retweet_marker", DEFAULT_RETWEET_MARKER))
    kept, excluded = filter_documents(documents, predicate)
    logger.info(
        "Pre-filter excluded %d of %d documents as retweets.",
        len(excluded),
        len(documents),
    )
    return kept, excluded
