"""
Lemmatization of cleaned tokens.

The pipeline only needs a function from surface form to lemma. It is
injected as a Lemmatizer so tests (or other languages) can swap it:

- WordNetLemmatizerService: NLTK's WordNet lemmatizer
- DictionaryLemmatizer: lookup in a surface -> lemma mapping, identity
  for unknown words (e.g. a lemma table loaded from CSV)
- IdentityLemmatizer: no-op

Lemmatizers must be deterministic and total over cleaned tokens; a
violation of that contract is reported as LemmatizerFailureError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

import nltk
import pandas as pd
from nltk.stem import WordNetLemmatizer

from textmine.errors import LemmatizerFailureError
from textmine.features.cleaning import CleanedToken


@dataclass(frozen=True)
class LemmaToken:
    document_id: Any
    position: int
    text: str
    surface: str


class Lemmatizer(ABC):
    @abstractmethod
    def lemmatize(self, surface_form: str) -> str:
        """Return the canonical root form of a surface token."""


class IdentityLemmatizer(Lemmatizer):
    def lemmatize(self, surface_form: str) -> str:
        return surface_form


class DictionaryLemmatizer(Lemmatizer):
    """
    Mapping-backed lemmatizer; words missing from the mapping are kept as is.
    """

    def __init__(self, mapping: Mapping[str, str]) -> None:
        self.mapping = dict(mapping)

    def lemmatize(self, surface_form: str) -> str:
        return self.mapping.get(surface_form, surface_form)

    @classmethod
    def from_csv(
        cls,
        path: str,
        token_column: str = "token",
        lemma_column: str = "lemma",
    ) -> "DictionaryLemmatizer":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        return cls(dict(zip(df[token_column], df[lemma_column])))


class WordNetLemmatizerService(Lemmatizer):
    """
    NLTK WordNet lemmatizer with a fixed part of speech.

    The WordNet corpus is downloaded on first use if it is missing.
    """

    def __init__(self, pos: str = "n") -> None:
        self.pos = pos
        self._lemmatizer = WordNetLemmatizer()
        self._ensure_corpus()

    def _ensure_corpus(self) -> None:
        try:
            self._lemmatizer.lemmatize("tests", pos=self.pos)
        except LookupError:
            nltk.download("wordnet", quiet=True)
            nltk.download("omw-1.4", quiet=True)

    def lemmatize(self, surface_form: str) -> str:
        return self._lemmatizer.lemmatize(surface_form, pos=self.pos)


def build_lemmatizer(lemma_cfg: Optional[Dict[str, Any]] = None) -> Lemmatizer:
    """
    Build a Lemmatizer from the "preprocessing.lemmatization" config section.

    Expected keys::

        lemmatization:
          enabled: true
          model: wordnet      # wordnet | dictionary
          pos: n
          dictionary_path: data/lexicons/lemmas.csv
    """
    lemma_cfg = lemma_cfg or {}
    if not bool(lemma_cfg.get("enabled", True)):
        return IdentityLemmatizer()

    model = str(lemma_cfg.get("model", "wordnet")).lower()
    if model == "wordnet":
        return WordNetLemmatizerService(pos=str(lemma_cfg.get("pos", "n")))
    if model == "dictionary":
        path = lemma_cfg.get("dictionary_path")
        if not path:
            raise ValueError("lemmatization.dictionary_path is required for model 'dictionary'.")
        return DictionaryLemmatizer.from_csv(path)
    raise ValueError(f"Unknown lemmatizer model '{model}'. Use wordnet or dictionary.")


def lemmatize_tokens(
    tokens: Iterable[CleanedToken],
    lemmatizer: Lemmatizer,
) -> Iterator[LemmaToken]:
    """
    Map each cleaned token to its lemma.

    Lemmas are memoized for the duration of the call.

    Raises
    ------
    LemmatizerFailureError
        If the lemmatizer raises, or returns something other than a
        non-empty string.
    """
    memo: Dict[str, str] = {}
    for token in tokens:
        lemma = memo.get(token.text)
        if lemma is None:
            try:
                lemma = lemmatizer.lemmatize(token.text)
            except Exception as exc:
                raise LemmatizerFailureError(
                    f"Lemmatizer raised on {token.text!r}: {exc}",
                    stage="lemmatize",
                    document_id=token.document_id,
                ) from exc
            if not isinstance(lemma, str) or not lemma.strip():
                raise LemmatizerFailureError(
                    f"Lemmatizer returned {lemma!r} for {token.text!r}",
                    stage="lemmatize",
                    document_id=token.document_id,
                )
            memo[token.text] = lemma
        yield LemmaToken(
            document_id=token.document_id,
            position=token.position,
            text=lemma,
            surface=token.text,
        )
