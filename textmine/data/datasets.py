"""
Corpus loading utilities.

This module is responsible for:
- reading the data configuration from config/data.yaml
- loading the raw corpus CSV (tweets, bill texts, speeches) into a
  pandas DataFrame
- normalizing columns to standard names ("id", "text", "date", "label")
- applying basic cleaning (drop NA text, drop duplicates) as configured
- turning the table into immutable Document records

The resulting Documents are consumed read-only by every later stage of
the pipeline: pre-filtering, tokenization, cleaning, lemmatization and
the document-term feature builders.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from textmine.errors import InvalidDocumentError
from textmine.utils.run_utils import load_yaml, require_sections


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"

STANDARD_COLUMNS = ("id", "text", "date", "label")


@dataclass(frozen=True)
class Document:
    """
    A single corpus document.

    ``id`` is opaque and must be unique within a corpus; ``text`` is the
    raw text exactly as ingested (validated later by the tokenizer).
    """

    id: Any
    text: Any
    date: Any = None
    label: Any = None


def document_text(document: Document) -> str:
    """
    Return the document text as a str, or raise InvalidDocumentError.

    Bytes are accepted only if they decode as UTF-8; strings must be
    encodable as UTF-8 (no lone surrogates). Used by both the pre-filter and
    the tokenizer.
    """
    text = document.text
    if isinstance(text, bytes):
        try:
            return text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidDocumentError(
                f"Text is not valid UTF-8: {exc.reason}",
                stage="tokenize",
                document_id=document.id,
            ) from exc

    if not isinstance(text, str):
        raise InvalidDocumentError(
            f"Text must be a string, got {type(text).__name__}",
            stage="tokenize",
            document_id=document.id,
        )

    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidDocumentError(
            f"Text contains characters that are not valid Unicode: {exc.reason}",
            stage="tokenize",
            document_id=document.id,
        ) from exc

    return text


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "dataset", "prefilter", "preprocessing"
        and "features" sections (plus optional "sentiment" and "split").
    """
    cfg = load_yaml(config_path)
    require_sections(
        cfg, ("dataset", "prefilter", "preprocessing", "features"), config_path
    )
    return cfg


def load_corpus_frame(dataset_cfg: Dict[str, Any]) -> pd.DataFrame:
    """
    Load the corpus CSV described by a "dataset" config section.

    This function:
    - reads the CSV at ``dataset_cfg["path"]``
    - ensures the configured text column exists (and the id / label /
      date columns, when configured)
    - optionally drops NA text rows and duplicate texts
    - renames columns to "id", "text", "date", "label"; when no id column
      is configured, the row number in the file is used as the id

    Parameters
    ----------
    dataset_cfg : Dict[str, Any]
        The "dataset" section of config/data.yaml.

    Returns
    -------
    pd.DataFrame
        DataFrame with at least the columns "id" and "text".

    Raises
    ------
    FileNotFoundError
        If the CSV file cannot be found.
    ValueError
        If required columns are missing or ids are not unique.
    """
    csv_path = dataset_cfg.get("path", "data/raw/corpus.csv")
    text_column = dataset_cfg.get("text_column", "text")
    id_column: Optional[str] = dataset_cfg.get("id_column")
    label_column: Optional[str] = dataset_cfg.get("label_column")
    date_column: Optional[str] = dataset_cfg.get("date_column")

    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Corpus CSV not found at: {csv_path}")

    # Keep ids and text as read; type coercion would hide bad rows.
    df = pd.read_csv(csv_path, dtype={text_column: object})

    configured = [c for c in (text_column, id_column, label_column, date_column) if c]
    missing_cols = [col for col in configured if col not in df.columns]
    if missing_cols:
        raise ValueError(
            f"Missing required column(s) in corpus CSV: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    if id_column is None:
        df = df.reset_index(drop=True)
        df.insert(0, "id", df.index.astype(int))
    elif id_column != "id":
        df = df.rename(columns={id_column: "id"})

    renames = {text_column: "text"}
    if label_column:
        renames[label_column] = "label"
    if date_column:
        renames[date_column] = "date"
    df = df.rename(columns={k: v for k, v in renames.items() if k != v})

    if bool(dataset_cfg.get("drop_na_text", True)):
        df = df.dropna(subset=["text"])

    if bool(dataset_cfg.get("drop_duplicates", False)):
        df = df.drop_duplicates(subset=["text"], keep="first")

    if df["id"].duplicated().any():
        dupes = df.loc[df["id"].duplicated(), "id"].tolist()[:5]
        raise ValueError(f"Document ids must be unique; duplicated ids: {dupes}")

    return df.reset_index(drop=True)


def documents_from_frame(df: pd.DataFrame) -> List[Document]:
    """
    Convert a normalized corpus DataFrame into a list of Documents.

    Missing values in the optional "date" / "label" columns become None.
    """
    records = []
    has_date = "date" in df.columns
    has_label = "label" in df.columns
    for row in df.itertuples(index=False):
        date = getattr(row, "date") if has_date else None
        label = getattr(row, "label") if has_label else None
        records.append(
            Document(
                id=row.id,
                text=row.text,
                date=None if pd.isna(date) else date,
                label=None if pd.isna(label) else label,
            )
        )
    return records


def load_corpus(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> List[Document]:
    """
    Load the configured corpus as a list of Documents.

    Parameters
    ----------
    config_path : str
        Path to the data YAML configuration.

    Returns
    -------
    List[Document]
        Documents in file order.
    """
    cfg = load_data_config(config_path)
    df = load_corpus_frame(cfg["dataset"])
    return documents_from_frame(df)
