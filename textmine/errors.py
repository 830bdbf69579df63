"""
Exception types raised by the text mining pipeline.

Every error carries the name of the pipeline stage that raised it and,
where one is involved, the id of the offending document. All of them are
fatal for a pipeline run: stages are pure, so re-running on the same input
reproduces the same error.
"""

from __future__ import annotations

from typing import Any, Optional


class PipelineError(Exception):
    """
    Base class for all pipeline errors.

    Parameters
    ----------
    message : str
        Human-readable description of the failure.
    stage : Optional[str]
        Pipeline stage that raised the error, e.g. "tokenize".
    document_id : Any
        Id of the document being processed, if any.
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        document_id: Any = None,
    ) -> None:
        self.message = message
        self.stage = stage
        self.document_id = document_id
        super().__init__(self.__str__())

    def __str__(self) -> str:
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        parts.append(self.message)
        if self.document_id is not None:
            parts.append(f"(document_id={self.document_id!r})")
        return " ".join(parts)


class InvalidDocumentError(PipelineError):
    """Raised when a document's raw text is missing or is not valid text."""


class EmptyCorpusError(PipelineError):
    """Raised when no document yields a single token after cleaning."""


class EmptyVocabularyError(PipelineError):
    """Raised when the sparsity filter removes every term."""


class LemmatizerFailureError(PipelineError):
    """Raised when the lemmatizer raises or returns a non-string / empty lemma."""
