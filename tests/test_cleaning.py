"""
Tests for textmine.features.cleaning.

Covered behaviour:

- the default rule order (url, digits, hashtag, mention, punctuation,
  currency) and its effect on social-media tokens
- stopword removal, including punctuation-stripped stopword forms
- the min_alpha_required rule
- idempotence and order preservation
- stopword sources and rule construction from config
"""

from __future__ import annotations

import re

import pytest

from textmine.features.cleaning import (
    Cleaner,
    CleanerConfig,
    CleaningRule,
    build_cleaner,
    build_rule,
    build_rules,
    clean_tokens,
    load_stopwords,
    strip_punctuation,
)
from textmine.features.tokenizer import Token


def _tokens(*texts, document_id="d1"):
    return [Token(document_id=document_id, position=i, text=t) for i, t in enumerate(texts)]


def _texts(cleaned):
    return [t.text for t in cleaned]


def test_default_rules_drop_social_noise():
    tokens = _tokens(
        "http://x.co", "#tag", "@foo", "bad", "2020", "$100", "hello!", "don't", "#tag1"
    )
    config = CleanerConfig(stopwords=frozenset({"don't"}))
    assert _texts(clean_tokens(tokens, config)) == ["bad", "hello"]


def test_digits_are_removed_before_hashtags():
    """
    "#tag1" loses its digit first and then matches the hashtag rule.
    """
    cleaner = Cleaner(CleanerConfig())
    assert cleaner.clean_text("#tag1") is None
    assert cleaner.clean_text("abc123") == "abc"


def test_rule_order_changes_the_result():
    punctuation_first = CleanerConfig(drop_patterns=build_rules(["punctuation", "hashtag"]))
    assert Cleaner(punctuation_first).clean_text("#tag") == "tag"

    hashtag_first = CleanerConfig(drop_patterns=build_rules(["hashtag", "punctuation"]))
    assert Cleaner(hashtag_first).clean_text("#tag") is None


def test_stripped_stopword_forms_are_removed():
    cleaner = Cleaner(CleanerConfig(stopwords=frozenset({"don't", "can't"})))
    assert cleaner.clean_text("don't") is None
    assert cleaner.clean_text("dont") is None
    assert cleaner.clean_text("cant") is None
    assert cleaner.clean_text("do") == "do"


def test_stopwords_are_case_sensitive():
    cleaner = Cleaner(CleanerConfig(stopwords=frozenset({"the"})))
    assert cleaner.clean_text("the") is None
    assert cleaner.clean_text("The") == "The"


def test_min_alpha_required():
    strict = Cleaner(CleanerConfig(min_alpha_required=True))
    lenient = Cleaner(CleanerConfig(min_alpha_required=False))
    assert strict.clean_text("😀") is None
    assert lenient.clean_text("😀") == "😀"
    assert strict.clean_text("x😀") == "x😀"


def test_currency_symbols_are_removed():
    cleaner = Cleaner(CleanerConfig())
    assert cleaner.clean_text("€uro") == "uro"
    assert cleaner.clean_text("£") is None


def test_cleaning_is_idempotent():
    tokens = _tokens("Hello!!", "#x", "well-known", "naïve", "don't", "a1b2", "—", "ok")
    config = CleanerConfig(stopwords=frozenset({"ok"}))
    once = clean_tokens(tokens, config)
    again = clean_tokens(
        [Token(document_id=t.document_id, position=t.position, text=t.text) for t in once],
        config,
    )
    assert _texts(once) == _texts(again)


def test_clean_preserves_order_and_positions():
    tokens = _tokens("zeta", "!!!", "alpha", "@x", "beta")
    cleaned = clean_tokens(tokens, CleanerConfig())
    assert _texts(cleaned) == ["zeta", "alpha", "beta"]
    assert [t.position for t in cleaned] == [0, 2, 4]
    assert all(t.document_id == "d1" for t in cleaned)


def test_clean_output_is_never_empty_or_stopword():
    stopwords = frozenset({"a", "an", "the"})
    tokens = _tokens("a", "an", " ", "", "the!", "The", "cat")
    cleaned = clean_tokens(tokens, CleanerConfig(stopwords=stopwords))
    assert all(t.text and t.text not in stopwords for t in cleaned)
    assert _texts(cleaned) == ["The", "cat"]


def test_strip_punctuation():
    assert strip_punctuation("don't!") == "dont"
    assert strip_punctuation("“quoted”") == "quoted"


def test_build_rule_from_mapping_and_name():
    rule = build_rule({"name": "vowels", "pattern": "[aeiou]", "replacement": ""})
    assert isinstance(rule, CleaningRule)
    assert rule.apply("banana") == "bnn"

    url = build_rule("url")
    assert url.pattern.pattern == re.compile(r"(?:https?://|www\.)\S+").pattern


@pytest.mark.parametrize("spec", ["emoji", 42, {"name": "no-pattern"}])
def test_build_rule_rejects_invalid_specs(spec):
    with pytest.raises(ValueError):
        build_rule(spec)


def test_load_stopwords_sources():
    sk = load_stopwords("sklearn", extra=["amp"])
    assert "the" in sk
    assert "amp" in sk

    assert load_stopwords("none") == frozenset()
    assert load_stopwords("none", extra=["rt"]) == frozenset({"rt"})

    with pytest.raises(ValueError):
        load_stopwords("spacy")


def test_build_cleaner_from_preprocessing_config():
    cfg = {
        "stopwords": {"source": "none", "extra": ["amp"]},
        "cleaning": {"drop_patterns": ["url", "punctuation"], "min_alpha_required": False},
    }
    cleaner = build_cleaner(cfg)
    assert [r.name for r in cleaner.config.drop_patterns] == ["url", "punctuation"]
    assert cleaner.clean_text("amp") is None
    assert cleaner.clean_text("2020") == "2020"
    assert cleaner.clean_text("#tag") == "tag"
