"""Two-stage strategy: size-based routing, then select-and-answer or answer-all."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from raggedy import config
from raggedy.agent.answer import AnswerGenerator
from raggedy.agent.provider import GeminiProvider, GenerationProvider, ModelCallResult
from raggedy.agent.selector import RelevanceSelector
from raggedy.agent.strategy import QueryResult, strategy_registry
from raggedy.agent.usage import UsageStats
from raggedy.errors import NO_RELEVANT_DOCUMENTS, EmptySelectionNotice
from raggedy.indexer.corpus import Corpus, build_corpus

logger = logging.getLogger(__name__)

ROUTE_FULL = "full"
ROUTE_SELECT = "select"


def route(corpus: Corpus, threshold: int | None = None) -> str:
    """'full' when the whole corpus fits under the threshold (inclusive), else 'select'."""
    if threshold is None:
        threshold = config.FULL_CORPUS_CHARS
    return ROUTE_FULL if corpus.total_chars <= threshold else ROUTE_SELECT


def _usage_metadata(calls: list[ModelCallResult], model: str) -> dict:
    stats = UsageStats()
    for call in calls:
        stats.add(call.usage, call.elapsed, call.cost)
    return stats.to_dict(model)


class TwoStageStrategy:
    """Index → route → (select → answer) or (answer with everything)."""

    name = "two-stage"

    def __init__(
        self,
        corpus: Corpus,
        provider: GenerationProvider,
        selector: RelevanceSelector | None = None,
        answerer: AnswerGenerator | None = None,
        threshold: int | None = None,
    ) -> None:
        self._corpus = corpus
        self._provider = provider
        self._selector = selector or RelevanceSelector(provider)
        self._answerer = answerer or AnswerGenerator(provider)
        self._threshold = config.FULL_CORPUS_CHARS if threshold is None else threshold

    def run(
        self,
        question: str,
        on_progress: Callable[[dict], None] | None = None,
    ) -> QueryResult:
        logger.info("Two-stage run started: %r", question[:120])
        run_t0 = time.perf_counter()
        calls: list[ModelCallResult] = []

        decision = route(self._corpus, self._threshold)
        logger.info(
            "Route: %s (%d chars, threshold %d)",
            decision, self._corpus.total_chars, self._threshold,
        )

        if decision == ROUTE_FULL:
            documents = tuple(self._corpus)
        else:
            documents = self._selector.select(self._corpus, question)
            if self._selector.last_call is not None:
                calls.append(self._selector.last_call)
            if on_progress is not None:
                on_progress({
                    "step": "select",
                    "documents": [d.relative_path for d in documents],
                    "call": self._selector.last_call,
                })
            if not documents:
                logger.info("Selector found nothing relevant; skipping answer call")
                return QueryResult(
                    answer=NO_RELEVANT_DOCUMENTS,
                    calls=calls,
                    metadata={
                        "route": decision,
                        "usage": _usage_metadata(calls, self._provider.model),
                    },
                    strategy_name=self.name,
                    notice=EmptySelectionNotice(question=question),
                )

        result = self._answerer.answer(documents, question, complete=decision == ROUTE_FULL)
        calls.append(result)
        if on_progress is not None:
            on_progress({"step": "answer", "call": result})

        logger.info(
            "Two-stage run complete: %d char answer, %d call(s), %.2fs",
            len(result.text), len(calls), time.perf_counter() - run_t0,
        )
        return QueryResult(
            answer=result.text or "(no answer)",
            documents=[d.relative_path for d in documents],
            calls=calls,
            metadata={
                "route": decision,
                "usage": _usage_metadata(calls, self._provider.model),
            },
            strategy_name=self.name,
        )


# ---------------------------------------------------------------------------
# Strategy registration
# ---------------------------------------------------------------------------


def _create_two_stage_strategy(
    directory: Path | None = None,
    corpus: Corpus | None = None,
    provider: GenerationProvider | None = None,
    api_key: str | None = None,
    model: str | None = None,
    answer_mode: str = "separate",
    **_kwargs,
) -> TwoStageStrategy:
    """Factory for the 'two-stage' strategy: indexes the directory unless a corpus is given."""
    if corpus is None:
        if directory is None:
            raise ValueError("two-stage strategy needs a directory or a corpus")
        corpus = build_corpus(directory)
    if provider is None:
        provider = GeminiProvider(api_key=api_key, model=model)
    return TwoStageStrategy(
        corpus=corpus,
        provider=provider,
        answerer=AnswerGenerator(provider, mode=answer_mode),
    )


def register_two_stage_strategy() -> None:
    strategy_registry.register("two-stage", _create_two_stage_strategy)


register_two_stage_strategy()
