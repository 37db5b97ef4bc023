"""Answer generator: one model call over the full text of chosen documents."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from raggedy.agent.provider import GenerationProvider, ModelCallResult
from raggedy.indexer.corpus import Document
from raggedy.indexer.outline import encode_document

logger = logging.getLogger(__name__)

ANSWER_MODES = ("separate", "inline")

ANSWER_SYSTEM_PROMPT = """\
You are a documentation assistant. Answer the user's question based on the \
documents provided.

Guidelines:
* Say what document you found the answer in.
* Give a focused answer. The user can look up more detail if necessary.
* If you cannot find the answer in the documents, say so. You may speculate, \
but be clear that you are doing so.
* Write naturally in prose. Do not overuse markdown headings and bullets.
* Your answer must be in markdown format.
* This is a one-time answer, not a chat, so don't prompt for followup questions."""

PARTIAL_CORPUS_NOTE = (
    "The documents provided were selected from a larger corpus as the most likely "
    "to be relevant. They are a truncated, non-exhaustive view: if the answer is "
    "not in them, say it may exist elsewhere in the documentation."
)

COMPLETE_CORPUS_NOTE = (
    "The documents provided are the complete documentation corpus. If the answer "
    "is not in them, it is not in the documentation."
)


class AnswerGenerator:
    """Answers a question from full document content in a single request.

    Modes:
        separate: each document is its own context part, cacheable per document.
        inline: all documents are concatenated into the user message.
    """

    def __init__(self, provider: GenerationProvider, mode: str = "separate") -> None:
        if mode not in ANSWER_MODES:
            raise ValueError(f"Unknown answer mode {mode!r}. Available: {', '.join(ANSWER_MODES)}")
        self._provider = provider
        self.mode = mode

    def build_system_prompt(self, complete: bool) -> list[str]:
        return [ANSWER_SYSTEM_PROMPT, COMPLETE_CORPUS_NOTE if complete else PARTIAL_CORPUS_NOTE]

    def answer(
        self,
        documents: Sequence[Document],
        question: str,
        complete: bool = False,
    ) -> ModelCallResult:
        """Ask the model to answer from the given documents.

        Args:
            documents: Documents whose full content is sent.
            question: The user's question.
            complete: True when documents is the whole corpus.
        """
        logger.info(
            "Answer: %d document(s), mode=%s, complete=%s",
            len(documents), self.mode, complete,
        )
        blocks = [encode_document(d) for d in documents]
        system = self.build_system_prompt(complete)
        prompt = f"User question: {question}"

        if self.mode == "separate":
            return self._provider.generate(prompt, system=system, documents=blocks)

        body = "\n\n".join(blocks)
        if body:
            prompt = f"{body}\n\n{prompt}"
        return self._provider.generate(prompt, system=system)
