"""
Word tokenization of raw documents.

Two modes are supported:

- "simple": word splitting on whitespace and punctuation; apostrophes
  inside a word are kept ("don't" stays one token).
- "social": NLTK's TweetTokenizer, which keeps hashtags, @-mentions and
  URLs as atomic tokens instead of splitting them.

Tokens keep the id of their document and their ordinal position in it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List

from nltk.tokenize import RegexpTokenizer, TweetTokenizer

from textmine.data.datasets import Document, document_text


TOKENIZER_MODES = ("simple", "social")

# Words, with internal apostrophes (straight or typographic) kept.
SIMPLE_WORD_PATTERN = r"\w+(?:['’]\w+)*"


@dataclass(frozen=True)
class Token:
    document_id: Any
    position: int
    text: str


class TokenStream:
    """
    Lazy, restartable sequence of the tokens of one document.

    Each iteration re-runs the tokenizer over the (already validated)
    text, so the stream can be consumed any number of times.
    """

    def __init__(self, document_id: Any, text: str, split: Callable[[str], List[str]]):
        self.document_id = document_id
        self._text = text
        self._split = split

    def __iter__(self) -> Iterator[Token]:
        for position, surface in enumerate(self._split(self._text)):
            yield Token(document_id=self.document_id, position=position, text=surface)

    def __repr__(self) -> str:
        return f"TokenStream(document_id={self.document_id!r})"


class Tokenizer:
    """
    Split Documents into Token streams.

    Parameters
    ----------
    mode : str
        "simple" or "social".
    lowercase : bool
        Lowercase tokens (default True). In "social" mode emoticons keep
        their case, as TweetTokenizer does.
    """

    def __init__(self, mode: str = "simple", lowercase: bool = True) -> None:
        mode = (mode or "simple").lower()
        if mode not in TOKENIZER_MODES:
            raise ValueError(
                f"Unknown tokenizer mode '{mode}'. Expected one of {TOKENIZER_MODES}."
            )
        self.mode = mode
        self.lowercase = lowercase

        if mode == "social":
            tweet_tokenizer = TweetTokenizer(
                preserve_case=not lowercase,
                reduce_len=False,
                strip_handles=False,
            )
            self._split = tweet_tokenizer.tokenize
        else:
            word_tokenizer = RegexpTokenizer(SIMPLE_WORD_PATTERN)
            if lowercase:
                self._split = lambda text: word_tokenizer.tokenize(text.lower())
            else:
                self._split = word_tokenizer.tokenize

    def tokenize(self, document: Document) -> TokenStream:
        """
        Tokenize one document.

        Raises
        ------
        InvalidDocumentError
            If the document text is missing or not valid text.
        """
        text = document_text(document)
        return TokenStream(document.id, text, self._split)


def build_tokenizer(tokenize_cfg: dict) -> Tokenizer:
    """
    Build a Tokenizer from the "preprocessing.tokenize" config section.
    """
    tokenize_cfg = tokenize_cfg or {}
    return Tokenizer(
        mode=str(tokenize_cfg.get("mode", "simple")),
        lowercase=bool(tokenize_cfg.get("lowercase", True)),
    )
