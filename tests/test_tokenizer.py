"""
Tests for textmine.features.tokenizer.

These tests check that:

- "simple" mode splits on whitespace and punctuation and keeps
  in-word apostrophes
- "social" mode keeps hashtags, mentions and URLs as single tokens
- token streams carry document ids and positions and can be re-iterated
- invalid text is rejected eagerly with InvalidDocumentError
"""

from __future__ import annotations

import pytest

from textmine.data.datasets import Document
from textmine.errors import InvalidDocumentError, PipelineError
from textmine.features.tokenizer import Tokenizer, build_tokenizer


def _texts(stream):
    return [token.text for token in stream]


def test_simple_mode_splits_words_and_keeps_apostrophes():
    tokenizer = Tokenizer(mode="simple")
    stream = tokenizer.tokenize(Document(id=1, text="Hello, World! Don't stop."))
    assert _texts(stream) == ["hello", "world", "don't", "stop"]


def test_simple_mode_splits_hashtags_and_mentions():
    tokenizer = Tokenizer(mode="simple")
    stream = tokenizer.tokenize(Document(id=1, text="#python @guido"))
    assert _texts(stream) == ["python", "guido"]


def test_simple_mode_can_preserve_case():
    tokenizer = Tokenizer(mode="simple", lowercase=False)
    stream = tokenizer.tokenize(Document(id=1, text="Hello World"))
    assert _texts(stream) == ["Hello", "World"]


def test_social_mode_keeps_hashtags_mentions_and_urls():
    tokenizer = Tokenizer(mode="social")
    doc = Document(id="t1", text="Loving #python with @guido see https://python.org now")
    texts = _texts(tokenizer.tokenize(doc))
    assert "#python" in texts
    assert "@guido" in texts
    assert "https://python.org" in texts
    assert texts[0] == "loving"


def test_tokens_carry_document_id_and_positions():
    tokenizer = Tokenizer(mode="simple")
    tokens = list(tokenizer.tokenize(Document(id="doc-9", text="a b c")))
    assert [t.document_id for t in tokens] == ["doc-9"] * 3
    assert [t.position for t in tokens] == [0, 1, 2]


def test_token_stream_is_restartable():
    """
    Iterating a stream twice yields the same tokens.
    """
    tokenizer = Tokenizer(mode="social")
    stream = tokenizer.tokenize(Document(id=1, text="one two #three"))
    assert list(stream) == list(stream)


def test_utf8_bytes_are_decoded():
    tokenizer = Tokenizer(mode="simple")
    stream = tokenizer.tokenize(Document(id=8, text="café crème".encode("utf-8")))
    assert _texts(stream) == ["café", "crème"]


def test_invalid_utf8_bytes_raise_with_document_id():
    tokenizer = Tokenizer(mode="simple")
    with pytest.raises(InvalidDocumentError) as excinfo:
        tokenizer.tokenize(Document(id=7, text=b"\xff\xfe bad"))
    assert excinfo.value.document_id == 7
    assert excinfo.value.stage == "tokenize"
    assert isinstance(excinfo.value, PipelineError)


@pytest.mark.parametrize("bad_text", [None, 3.5, ["not", "text"]])
def test_non_text_raises(bad_text):
    tokenizer = Tokenizer(mode="social")
    with pytest.raises(InvalidDocumentError):
        tokenizer.tokenize(Document(id="x", text=bad_text))


def test_lone_surrogate_raises():
    tokenizer = Tokenizer(mode="simple")
    with pytest.raises(InvalidDocumentError):
        tokenizer.tokenize(Document(id="x", text="abc\ud800def"))


def test_empty_text_yields_no_tokens():
    tokenizer = Tokenizer(mode="simple")
    assert list(tokenizer.tokenize(Document(id=1, text=""))) == []


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        Tokenizer(mode="whitespace")


def test_build_tokenizer_from_config():
    tokenizer = build_tokenizer({"mode": "social", "lowercase": False})
    assert tokenizer.mode == "social"
    assert tokenizer.lowercase is False

    default = build_tokenizer({})
    assert default.mode == "simple"
    assert default.lowercase is True
