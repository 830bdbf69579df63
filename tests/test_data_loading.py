"""
Tests for corpus loading, retweet pre-filtering and train/test splitting.

These tests check that:

- the shipped data configuration file loads and has the expected sections
- a corpus CSV is normalized to id / text / label / date columns
- missing files, missing columns and duplicate ids are reported
- the retweet predicate only matches a leading ASCII "RT" marker, also in
  UTF-8 bytes
- the stratified split keeps both classes on each side
"""

from __future__ import annotations

import os

import numpy as np
import pandas as pd
import pytest

from textmine.data.datasets import (
    Document,
    documents_from_frame,
    load_corpus_frame,
    load_data_config,
)
from textmine.data.prefilter import apply_prefilter, filter_documents, make_retweet_predicate
from textmine.data.split import train_test_split_indices


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "data.yaml")


def _write_csv(tmp_path, rows, name="corpus.csv"):
    path = tmp_path / name
    pd.DataFrame(rows).to_csv(path, index=False)
    return str(path)


# ---------------------------------------------------------------------------
# Config and CSV loading
# ---------------------------------------------------------------------------


def test_shipped_data_config_loads():
    cfg = load_data_config(DATA_CONFIG_PATH)
    for section in ("dataset", "prefilter", "preprocessing", "features"):
        assert section in cfg
    assert 0.0 < float(cfg["features"]["sparse"]) <= 1.0


def test_missing_config_section_raises(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("dataset:\n  path: x.csv\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_data_config(str(path))


def test_load_corpus_frame_normalizes_columns(tmp_path):
    csv_path = _write_csv(
        tmp_path,
        [
            {"status_id": "s1", "body": "first tweet", "party": "dem", "created_at": "2020-01-01"},
            {"status_id": "s2", "body": None, "party": "rep", "created_at": "2020-01-02"},
            {"status_id": "s3", "body": "third tweet", "party": None, "created_at": None},
        ],
    )
    df = load_corpus_frame(
        {
            "path": csv_path,
            "id_column": "status_id",
            "text_column": "body",
            "label_column": "party",
            "date_column": "created_at",
            "drop_na_text": True,
        }
    )
    assert {"id", "text", "label", "date"} <= set(df.columns)
    assert df["id"].tolist() == ["s1", "s3"]

    docs = documents_from_frame(df)
    assert docs[0] == Document(id="s1", text="first tweet", date="2020-01-01", label="dem")
    assert docs[1].label is None
    assert docs[1].date is None


def test_row_number_is_used_when_no_id_column(tmp_path):
    csv_path = _write_csv(tmp_path, [{"text": "a"}, {"text": "b"}])
    df = load_corpus_frame({"path": csv_path, "text_column": "text"})
    assert df["id"].tolist() == [0, 1]


def test_drop_duplicates(tmp_path):
    csv_path = _write_csv(tmp_path, [{"text": "same"}, {"text": "same"}, {"text": "other"}])
    df = load_corpus_frame({"path": csv_path, "text_column": "text", "drop_duplicates": True})
    assert df["text"].tolist() == ["same", "other"]


def test_missing_csv_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_corpus_frame({"path": str(tmp_path / "nope.csv"), "text_column": "text"})


def test_missing_column_raises(tmp_path):
    csv_path = _write_csv(tmp_path, [{"text": "a"}])
    with pytest.raises(ValueError):
        load_corpus_frame({"path": csv_path, "text_column": "text", "label_column": "party"})


def test_duplicate_ids_raise(tmp_path):
    csv_path = _write_csv(tmp_path, [{"id": 1, "text": "a"}, {"id": 1, "text": "b"}])
    with pytest.raises(ValueError):
        load_corpus_frame({"path": csv_path, "id_column": "id", "text_column": "text"})


# ---------------------------------------------------------------------------
# Retweet pre-filter
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, expected",
    [
        ("RT @foo bad BAD http://x.co #tag", True),
        ("   RT @x hello", True),
        ("RT", True),
        ("RT: breaking", True),
        ("RTX is great", False),
        ("rt @foo lowercase", False),
        ("ART exhibition", False),
        ("good good", False),
        ("Not a RT @foo", False),
        ("ＲＴ @foo", False),
    ],
)
def test_retweet_predicate(text, expected):
    is_retweet = make_retweet_predicate()
    assert is_retweet(Document(id=1, text=text)) is expected


def test_retweet_predicate_ignores_non_text():
    is_retweet = make_retweet_predicate()
    assert is_retweet(Document(id=1, text=None)) is False


def test_retweet_given_as_utf8_bytes_is_detected():
    is_retweet = make_retweet_predicate()
    assert is_retweet(Document(id="rt", text=b"RT @foo bad news")) is True
    assert is_retweet(Document(id="ok", text="caf\u00e9 RT".encode("utf-8"))) is False


def test_undecodable_bytes_are_left_for_the_tokenizer():
    is_retweet = make_retweet_predicate()
    assert is_retweet(Document(id="bad", text=b"RT \xff\xfe")) is False


def test_filter_documents_keeps_order():
    docs = [Document(id=i, text=t) for i, t in enumerate(["a", "RT b", "c", "RT d"])]
    kept, excluded = filter_documents(docs, make_retweet_predicate())
    assert [d.id for d in kept] == [0, 2]
    assert excluded == [1, 3]


def test_apply_prefilter_can_be_disabled():
    docs = [Document(id=1, text="RT x"), Document(id=2, text="y")]
    kept, excluded = apply_prefilter(docs, {"exclude_retweets": False})
    assert kept == docs
    assert excluded == []

    kept, excluded = apply_prefilter(docs, {"exclude_retweets": True, "retweet_marker": "RT"})
    assert [d.id for d in kept] == [2]
    assert excluded == [1]


# ---------------------------------------------------------------------------
# Train/test split
# ---------------------------------------------------------------------------


def test_stratified_split_keeps_both_classes():
    labels = ["dem"] * 10 + ["rep"] * 10
    train_pos, test_pos = train_test_split_indices(
        labels, {"test_size": 0.3, "stratify": True, "random_state": 0}
    )
    assert len(train_pos) + len(test_pos) == 20
    assert not set(train_pos.tolist()) & set(test_pos.tolist())
    assert np.all(np.diff(train_pos) > 0)
    labels_arr = np.asarray(labels)
    assert set(labels_arr[test_pos]) == {"dem", "rep"}
    assert set(labels_arr[train_pos]) == {"dem", "rep"}


def test_split_is_reproducible():
    labels = ["a", "b"] * 10
    cfg = {"test_size": 0.25, "random_state": 7}
    first = train_test_split_indices(labels, cfg)
    second = train_test_split_indices(labels, cfg)
    assert first[0].tolist() == second[0].tolist()
    assert first[1].tolist() == second[1].tolist()


def test_split_needs_two_rows():
    with pytest.raises(ValueError):
        train_test_split_indices(["a"], {})
