"""Tests for the answer generator."""

from __future__ import annotations

import pytest

from raggedy.agent.answer import (
    ANSWER_SYSTEM_PROMPT,
    COMPLETE_CORPUS_NOTE,
    PARTIAL_CORPUS_NOTE,
    AnswerGenerator,
)
from tests.helpers import _make_mock_provider


class TestAnswerGenerator:
    def test_separate_mode_sends_documents_as_parts(self, small_corpus):
        provider = _make_mock_provider("It is foo.")
        docs = [small_corpus.get("a.md"), small_corpus.get("c.md")]
        result = AnswerGenerator(provider, mode="separate").answer(docs, "what is foo?")
        assert result.text == "It is foo."
        args, kwargs = provider.generate.call_args
        assert args[0] == "User question: what is foo?"
        assert len(kwargs["documents"]) == 2
        assert kwargs["documents"][0].startswith('<document path="a.md">')
        assert "# Title\nfoo" in kwargs["documents"][0]
        assert kwargs["documents"][1].startswith('<document path="c.md">')

    def test_inline_mode_concatenates(self, small_corpus):
        provider = _make_mock_provider("ok")
        docs = [small_corpus.get("a.md"), small_corpus.get("b.adoc")]
        AnswerGenerator(provider, mode="inline").answer(docs, "q?")
        args, kwargs = provider.generate.call_args
        prompt = args[0]
        assert "documents" not in kwargs
        assert prompt.index('<document path="a.md">') < prompt.index('<document path="b.adoc">')
        assert prompt.endswith("User question: q?")

    def test_inline_mode_no_documents(self):
        provider = _make_mock_provider("nothing here")
        AnswerGenerator(provider, mode="inline").answer([], "q?")
        assert provider.generate.call_args.args[0] == "User question: q?"

    def test_partial_corpus_instructions(self, small_corpus):
        provider = _make_mock_provider("ok")
        AnswerGenerator(provider).answer([small_corpus.get("a.md")], "q")
        system = provider.generate.call_args.kwargs["system"]
        assert system == [ANSWER_SYSTEM_PROMPT, PARTIAL_CORPUS_NOTE]
        assert "non-exhaustive" in system[1]

    def test_complete_corpus_instructions(self, small_corpus):
        provider = _make_mock_provider("ok")
        AnswerGenerator(provider).answer(list(small_corpus), "q", complete=True)
        system = provider.generate.call_args.kwargs["system"]
        assert system == [ANSWER_SYSTEM_PROMPT, COMPLETE_CORPUS_NOTE]
        assert "complete" in system[1]

    def test_instructions_flag_speculation(self):
        assert "speculate" in ANSWER_SYSTEM_PROMPT
        assert "markdown" in ANSWER_SYSTEM_PROMPT

    def test_single_call(self, small_corpus):
        provider = _make_mock_provider("ok")
        AnswerGenerator(provider).answer(list(small_corpus), "q")
        assert provider.generate.call_count == 1

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown answer mode"):
            AnswerGenerator(_make_mock_provider(), mode="stream")
