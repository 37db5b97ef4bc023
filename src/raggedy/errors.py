"""Error taxonomy for the retrieval-and-answer pipeline."""

from __future__ import annotations

from dataclasses import dataclass

NO_RELEVANT_DOCUMENTS = "No relevant documents found."


class RaggedyError(Exception):
    """Base class for every fatal pipeline error."""


class IndexingError(RaggedyError):
    """The corpus root is inaccessible or a document could not be read."""


class RetrievalParseError(RaggedyError):
    """The selection response held no parseable JSON array of paths."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class ModelCallError(RaggedyError):
    """The model transport failed (network, auth, rate limit, missing key)."""


class UnknownModelError(RaggedyError):
    """No price table entry matches the model identifier."""

    def __init__(self, model: str) -> None:
        super().__init__(f"No pricing known for model {model!r}")
        self.model = model


@dataclass(frozen=True)
class EmptySelectionNotice:
    """Not an error: the selector found nothing relevant, so no answer call was made."""

    question: str
    message: str = NO_RELEVANT_DOCUMENTS
