"""
Token cleaning: pattern stripping, stopword removal and token elision.

Cleaning works token by token. Each token's surface form goes through an
ordered list of regex rules (by default: URLs, digits, hashtags, mentions,
punctuation, currency symbols), is trimmed, and is then dropped if it is

- empty,
- a stopword (either as listed, or in its punctuation-stripped form, so
  "don't" in the stopword list also removes the cleaned token "dont"),
- free of letters (when ``min_alpha_required`` is set).

Rule order matters: later rules see the output of earlier ones, e.g.
digits are removed before hashtags so "#tag1" disappears entirely.

Stopwords are passed in explicitly through CleanerConfig; helpers below
load them from NLTK or scikit-learn for the config-driven entry points.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import nltk
from nltk.corpus import stopwords as nltk_stopwords
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS as SKLEARN_EN_STOPWORDS

from textmine.features.tokenizer import Token


# ---------------------------------------------------------------------------
# Cleaning rules
# ---------------------------------------------------------------------------


PUNCTUATION_CHARS = string.punctuation + "‘’‚“”„…–—«»¡¿·•"
CURRENCY_CHARS = "$¢£¤¥€₹₽₩₪₫₺₿"


@dataclass(frozen=True)
class CleaningRule:
    name: str
    pattern: "re.Pattern[str]"
    replacement: str = ""

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


BUILTIN_RULES: Dict[str, Tuple[str, str]] = {
    "url": (r"(?:https?://|www\.)\S+", ""),
    "digits": (r"\d+", ""),
    "hashtag": (r"#\w+", ""),
    "mention": (r"@\w+", ""),
    "punctuation": ("[" + re.escape(PUNCTUATION_CHARS) + "]", ""),
    "currency": ("[" + re.escape(CURRENCY_CHARS) + "]", ""),
    "whitespace": (r"\s+", " "),
}

DEFAULT_RULE_ORDER = ("url", "digits", "hashtag", "mention", "punctuation", "currency")


def build_rule(spec: Any) -> CleaningRule:
    """
    Build a CleaningRule from a config entry.

    An entry is either the name of a built-in rule (see BUILTIN_RULES) or a
    mapping ``{name, pattern, replacement}``.
    """
    if isinstance(spec, str):
        if spec not in BUILTIN_RULES:
            raise ValueError(
                f"Unknown cleaning rule '{spec}'. Built-in rules: {sorted(BUILTIN_RULES)}"
            )
        pattern, replacement = BUILTIN_RULES[spec]
        return CleaningRule(name=spec, pattern=re.compile(pattern), replacement=replacement)

    if isinstance(spec, dict) and "pattern" in spec:
        return CleaningRule(
            name=str(spec.get("name", spec["pattern"])),
            pattern=re.compile(spec["pattern"]),
            replacement=str(spec.get("replacement", "")),
        )

    raise ValueError(f"Invalid cleaning rule specification: {spec!r}")


def build_rules(specs: Optional[Sequence[Any]] = None) -> Tuple[CleaningRule, ...]:
    """
    Build the ordered rule list; None means the default order.
    """
    if specs is None:
        specs = DEFAULT_RULE_ORDER
    return tuple(build_rule(s) for s in specs)


_PUNCTUATION_RULE = build_rule("punctuation")


def strip_punctuation(word: str) -> str:
    return _PUNCTUATION_RULE.apply(word)


# ---------------------------------------------------------------------------
# Stopwords
# ---------------------------------------------------------------------------


def _nltk_stopword_set(language: str) -> Set[str]:
    try:
        return set(nltk_stopwords.words(language))
    except LookupError:
        nltk.download("stopwords", quiet=True)
        return set(nltk_stopwords.words(language))


def load_stopwords(
    source: str = "nltk",
    language: str = "english",
    extra: Optional[Iterable[str]] = None,
) -> FrozenSet[str]:
    """
    Build a stopword set.

    Parameters
    ----------
    source : str
        "nltk" (NLTK stopword corpus, downloaded on first use),
        "sklearn" (scikit-learn's English list) or "none".
    language : str
        Language name for the NLTK corpus, e.g. "english".
    extra : Optional[Iterable[str]]
        Additional corpus-specific stopwords (e.g. "amp", "rt").

    Returns
    -------
    FrozenSet[str]
        The stopword set.
    """
    source = (source or "none").lower()
    if source == "nltk":
        words = _nltk_stopword_set((language or "english").lower())
    elif source == "sklearn":
        words = set(SKLEARN_EN_STOPWORDS)
    elif source == "none":
        words = set()
    else:
        raise ValueError(f"Unknown stopword source '{source}'. Use nltk, sklearn or none.")

    if extra:
        words.update(str(w) for w in extra)
    return frozenset(words)


# ---------------------------------------------------------------------------
# Cleaner
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CleanedToken:
    document_id: Any
    position: int
    text: str


@dataclass(frozen=True)
class CleanerConfig:
    stopwords: FrozenSet[str] = frozenset()
    drop_patterns: Tuple[CleaningRule, ...] = field(default_factory=build_rules)
    min_alpha_required: bool = True


class Cleaner:
    """
    Apply a CleanerConfig to token streams.

    The stopword check uses both the configured stopwords and their
    punctuation-stripped forms, since punctuation removal turns "don't"
    into "dont" before the stopword check runs.
    """

    def __init__(self, config: CleanerConfig) -> None:
        self.config = config
        stripped = {strip_punctuation(w) for w in config.stopwords}
        stripped.discard("")
        self._stopwords = frozenset(config.stopwords) | frozenset(stripped)

    def clean_text(self, text: str) -> Optional[str]:
        """
        Clean one surface form; returns None if the token must be dropped.
        """
        for rule in self.config.drop_patterns:
            text = rule.apply(text)
        text = text.strip()

        if not text:
            return None
        if text in self._stopwords:
            return None
        if self.config.min_alpha_required and not any(ch.isalpha() for ch in text):
            return None
        return text

    def clean(self, tokens: Iterable[Token]) -> Iterator[CleanedToken]:
        """
        Clean a token sequence, keeping the relative order of survivors.
        """
        for token in tokens:
            cleaned = self.clean_text(token.text)
            if cleaned is not None:
                yield CleanedToken(
                    document_id=token.document_id,
                    position=token.position,
                    text=cleaned,
                )


def build_cleaner(preprocessing_cfg: Dict[str, Any]) -> Cleaner:
    """
    Build a Cleaner from the "preprocessing" section of config/data.yaml.

    Expected keys::

        stopwords:
          source: nltk        # nltk | sklearn | none
          language: english
          extra: [amp, rt]
        cleaning:
          drop_patterns: [url, digits, hashtag, mention, punctuation, currency]
          min_alpha_required: true
    """
    preprocessing_cfg = preprocessing_cfg or {}
    sw_cfg = preprocessing_cfg.get("stopwords", {}) or {}
    clean_cfg = preprocessing_cfg.get("cleaning", {}) or {}

    stopword_set = load_stopwords(
        source=sw_cfg.get("source", "nltk"),
        language=sw_cfg.get("language", "english"),
        extra=sw_cfg.get("extra") or [],
    )
    config = CleanerConfig(
        stopwords=stopword_set,
        drop_patterns=build_rules(clean_cfg.get("drop_patterns")),
        min_alpha_required=bool(clean_cfg.get("min_alpha_required", True)),
    )
    return Cleaner(config)


def clean_tokens(tokens: Iterable[Token], config: CleanerConfig) -> List[CleanedToken]:
    """
    Convenience wrapper returning the cleaned tokens as a list.
    """
    return list(Cleaner(config).clean(tokens))
