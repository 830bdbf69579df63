"""
Tests for config loading, logging helpers and pipeline error types.
"""

from __future__ import annotations

import logging
import os

import pytest

from textmine.errors import (
    EmptyCorpusError,
    EmptyVocabularyError,
    InvalidDocumentError,
    LemmatizerFailureError,
    PipelineError,
)
from textmine.utils.run_utils import get_logger, load_train_config, load_yaml


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def test_shipped_train_config_loads():
    cfg = load_train_config(os.path.join(PROJECT_ROOT, "config", "train.yaml"))
    for key in ("artifacts_dir", "results_dir", "models_dir", "logs_dir"):
        assert key in cfg["paths"]


def test_load_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(str(tmp_path / "missing.yaml"))

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(str(empty))

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(str(listing))


def test_get_logger_writes_log_file(tmp_path):
    config = {
        "paths": {"logs_dir": str(tmp_path / "logs")},
        "logging": {"level": "debug", "to_file": True, "file_prefix": "unit"},
    }
    logger = get_logger("textmine.tests.file_logger", config, log_file_suffix="check")
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    log_path = tmp_path / "logs" / "unit_check.log"
    assert "hello" in log_path.read_text(encoding="utf-8")

    # Already configured loggers are returned unchanged.
    assert get_logger("textmine.tests.file_logger", {}) is logger
    assert len(logger.handlers) == 2


def test_pipeline_error_message_and_hierarchy():
    err = InvalidDocumentError("Text is not valid UTF-8", stage="tokenize", document_id=7)
    assert str(err) == "[tokenize] Text is not valid UTF-8 (document_id=7)"
    assert err.stage == "tokenize"
    assert err.document_id == 7

    assert str(PipelineError("boom")) == "boom"
    for cls in (InvalidDocumentError, EmptyCorpusError, EmptyVocabularyError, LemmatizerFailureError):
        assert issubclass(cls, PipelineError)
