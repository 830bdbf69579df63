"""
Sentiment lexicons.

Lexicons are external term tables and only ever used through keyed
lookup. Two kinds are supported:

- "score" lexicons (AFINN-style): term -> numeric valence.
- "category" lexicons (Bing positive/negative, NRC emotions): term ->
  category, possibly several rows per term.

They load from CSV files, from plain mappings, or (Bing) from the NLTK
opinion_lexicon corpus.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

import nltk
import pandas as pd
from nltk.corpus import opinion_lexicon


LEXICON_KINDS = ("score", "category")


@dataclass(frozen=True, eq=False)
class SentimentLexicon:
    """
    A term table with columns "term" and "value".
    """

    name: str
    kind: str
    table: pd.DataFrame

    def __post_init__(self) -> None:
        if self.kind not in LEXICON_KINDS:
            raise ValueError(f"Unknown lexicon kind '{self.kind}'. Expected one of {LEXICON_KINDS}.")
        missing = {"term", "value"} - set(self.table.columns)
        if missing:
            raise ValueError(f"Lexicon '{self.name}' is missing column(s): {sorted(missing)}")

    @property
    def categories(self):
        if self.kind != "category":
            return []
        return sorted(self.table["value"].astype(str).unique())

    def lookup(self, term: str):
        """
        Values for a term: a float (score) or a list of categories; None if absent.
        """
        rows = self.table.loc[self.table["term"] == term, "value"]
        if rows.empty:
            return None
        if self.kind == "score":
            return float(rows.iloc[0])
        return sorted(rows.astype(str).tolist())


def lexicon_from_mapping(
    name: str,
    mapping: Mapping[str, Any],
    kind: str = "score",
) -> SentimentLexicon:
    """
    Build a lexicon from a dict. For category lexicons a value may be a
    single category or an iterable of categories.
    """
    rows = []
    for term, value in mapping.items():
        if kind == "category" and not isinstance(value, str) and isinstance(value, Iterable):
            rows.extend((term, v) for v in value)
        else:
            rows.append((term, value))
    table = pd.DataFrame(rows, columns=["term", "value"])
    return SentimentLexicon(name=name, kind=kind, table=_normalize_table(table, kind))


def load_lexicon(
    path: str,
    name: Optional[str] = None,
    kind: str = "score",
    term_column: str = "word",
    value_column: str = "value",
) -> SentimentLexicon:
    """
    Load a lexicon from a CSV file (e.g. AFINN ``word,value`` or NRC
    ``word,sentiment``).

    Raises
    ------
    FileNotFoundError
        If the CSV file does not exist.
    ValueError
        If the configured columns are missing.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Lexicon file not found: {path}")

    df = pd.read_csv(path)
    missing = [c for c in (term_column, value_column) if c not in df.columns]
    if missing:
        raise ValueError(
            f"Missing column(s) {missing} in lexicon {path}. Available columns: {list(df.columns)}"
        )
    table = df[[term_column, value_column]].rename(
        columns={term_column: "term", value_column: "value"}
    )
    return SentimentLexicon(
        name=name or os.path.splitext(os.path.basename(path))[0],
        kind=kind,
        table=_normalize_table(table, kind),
    )


def load_bing_lexicon() -> SentimentLexicon:
    """
    Bing Liu's opinion lexicon from the NLTK corpus (downloaded on first use).
    """
    try:
        positive = opinion_lexicon.positive()
    except LookupError:
        nltk.download("opinion_lexicon", quiet=True)
        positive = opinion_lexicon.positive()
    negative = opinion_lexicon.negative()

    table = pd.DataFrame(
        [(w, "positive") for w in positive] + [(w, "negative") for w in negative],
        columns=["term", "value"],
    )
    return SentimentLexicon(name="bing", kind="category", table=_normalize_table(table, "category"))


def build_lexicon(lexicon_cfg: Dict[str, Any]) -> SentimentLexicon:
    """
    Build a lexicon from one entry of the "sentiment.lexicons" config list.

    Expected keys::

        - name: afinn
          source: csv          # csv | bing
          path: data/lexicons/afinn.csv
          kind: score
          term_column: word
          value_column: value
    """
    source = str(lexicon_cfg.get("source", "csv")).lower()
    if source == "bing":
        return load_bing_lexicon()
    if source == "csv":
        return load_lexicon(
            path=lexicon_cfg["path"],
            name=lexicon_cfg.get("name"),
            kind=str(lexicon_cfg.get("kind", "score")),
            term_column=lexicon_cfg.get("term_column", "word"),
            value_column=lexicon_cfg.get("value_column", "value"),
        )
    raise ValueError(f"Unknown lexicon source '{source}'. Use csv or bing.")


def _normalize_table(table: pd.DataFrame, kind: str) -> pd.DataFrame:
    table = table.dropna(subset=["term", "value"]).copy()
    table["term"] = table["term"].astype(str)
    if kind == "score":
        table["value"] = pd.to_numeric(table["value"], errors="raise").astype(float)
        table = table.drop_duplicates(subset=["term"], keep="first")
    else:
        table["value"] = table["value"].astype(str)
        table = table.drop_duplicates()
    return table.reset_index(drop=True)
