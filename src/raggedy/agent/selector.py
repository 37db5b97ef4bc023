"""Relevance selector: one model call narrows the corpus to a few documents."""

from __future__ import annotations

import json
import logging
import time

from pydantic import TypeAdapter, ValidationError

from raggedy import config
from raggedy.agent.provider import GenerationProvider, ModelCallResult
from raggedy.errors import RetrievalParseError
from raggedy.indexer.corpus import Corpus, Document
from raggedy.indexer.outline import encode_index

logger = logging.getLogger(__name__)

SELECTOR_SYSTEM_PROMPT = """\
You are a retrieval filter for a documentation corpus. You do NOT answer questions.

Below is an index of every available document: its path, its section headings, \
and the first part of its text. Given the user's question, pick the documents \
most likely to contain the answer.

Rules:
* Return at most {max_documents} paths, most relevant first.
* Copy each path exactly as it appears in a <path> element.
* Output ONLY a JSON array of strings, e.g. ["guide/install.md", "faq.md"]. No commentary.
* If nothing in the index is relevant, output [].
* Do not answer the question."""

_DECODER = json.JSONDecoder()

_PATH_LIST = TypeAdapter(list[str])


def parse_selection(raw: str) -> list[str]:
    """Return the first JSON array of strings found anywhere in a model response.

    Every "[" is tried as the start of a JSON value, so bracketed prose and
    bracketed path segments before or inside the real array are skipped.

    Raises:
        RetrievalParseError: no position decodes to a JSON array of strings.
    """
    start = raw.find("[")
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(raw, start)
            return _PATH_LIST.validate_python(value, strict=True)
        except (json.JSONDecodeError, ValidationError):
            start = raw.find("[", start + 1)
    raise RetrievalParseError("No JSON array of paths found in selection response", raw)


class RelevanceSelector:
    """Ranks the corpus by asking the model to pick paths from an outline index."""

    def __init__(
        self,
        provider: GenerationProvider,
        max_documents: int | None = None,
    ) -> None:
        self._provider = provider
        self.max_documents = config.MAX_SELECTED_DOCS if max_documents is None else max_documents
        self.last_call: ModelCallResult | None = None

    def build_system_prompt(self, corpus: Corpus) -> list[str]:
        return [
            SELECTOR_SYSTEM_PROMPT.format(max_documents=self.max_documents),
            encode_index(corpus, root=corpus.root),
        ]

    def select(self, corpus: Corpus, question: str) -> tuple[Document, ...]:
        """Return up to max_documents Documents from the corpus, in the model's order.

        Paths the model invents are dropped, not errors.
        """
        logger.info("Selector: ranking %d document(s)", len(corpus))
        t0 = time.perf_counter()
        result = self._provider.generate(
            f"User question: {question}",
            system=self.build_system_prompt(corpus),
        )
        self.last_call = result

        paths = parse_selection(result.text)[: self.max_documents]
        selected: list[Document] = []
        seen: set[str] = set()
        for path in paths:
            doc = corpus.get(path)
            if doc is None:
                logger.warning("Selector returned unknown path %r, dropping", path)
                continue
            if path in seen:
                continue
            seen.add(path)
            selected.append(doc)

        logger.info(
            "Selector picked %d document(s): %s (%.2fs)",
            len(selected), json.dumps([d.relative_path for d in selected]),
            time.perf_counter() - t0,
        )
        return tuple(selected)
