"""Agent strategy: Gemini tool-calling over the corpus instead of a separate selection call."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from google import genai
from google.genai import errors, types

from raggedy import config
from raggedy.agent.provider import ModelCallResult, create_client, extract_usage, thinking_config
from raggedy.agent.strategy import (
    EvidenceStep,
    QueryResult,
    ToolRegistry,
    build_tool_registry,
    strategy_registry,
)
from raggedy.agent.usage import UsageStats, compute_cost, pricing_for
from raggedy.errors import ModelCallError
from raggedy.indexer.corpus import Corpus, build_corpus
from raggedy.indexer.outline import encode_index

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10
SYNTHESIS_PHASE = 8  # iteration index where we force text-only (0-based)

SYSTEM_PROMPT_TEMPLATE = """\
You are a documentation assistant. Answer the user's question based on the \
documentation corpus.

Below is an index of all available documents. Use read_file to access document \
contents when needed, or grep to search across documents. Use glob to list \
documents by path pattern. Paths in tool calls are the <path> values from the index.

{document_index}

Guidelines:
* Say what document you found the answer in.
* Give a focused answer. The user can look up more detail if necessary.
* If you cannot find the answer in the documentation, say so. You may speculate, \
but be clear that you are doing so.
* Write naturally in prose. Do not overuse markdown headings and bullets.
* Your answer must be in markdown format.
* This is a one-time answer, not a chat, so don't prompt for followup questions.

## Budget
You have {max_iterations} iterations. Each iteration is one round of tool calls. \
Call several tools in one turn when the lookups are independent."""


def describe_tool_call(name: str, args: dict) -> str:
    """One-line human description of a tool call, for progress output."""
    if name == "grep":
        line = f'Grep pattern="{args.get("pattern", "")}" glob="{args.get("glob") or "*"}"'
        if args.get("ignore_case"):
            line += " -i"
        return line
    if name == "read_file":
        line = f"Read {args.get('path', '?')}"
        if "start_line" in args:
            line += f" (lines {args['start_line']}-{args.get('end_line', '')})"
        return line
    if name == "glob":
        return f'Glob pattern="{args.get("pattern", "")}"'
    return name


def summarize_tool_result(name: str, result: str) -> str | None:
    """Short result summary, or None when the first line says nothing useful."""
    if result.startswith("Error:") or result.startswith("Unknown tool"):
        return result.splitlines()[0][:120]
    if name == "grep":
        if result.startswith("No matches"):
            return "matches: 0"
        return f"matches: {sum(1 for ln in result.splitlines() if not ln.startswith('...'))}"
    if name == "glob":
        return result.splitlines()[0][:120]
    return None


class AgentLoop:
    """Gemini-powered agent loop with tool calling over an in-memory corpus."""

    name = "agent"

    def __init__(
        self,
        corpus: Corpus,
        api_key: str | None = None,
        model: str | None = None,
        client: genai.Client | None = None,
        tool_registry: ToolRegistry | None = None,
        max_iterations: int = MAX_ITERATIONS,
        synthesis_phase: int = SYNTHESIS_PHASE,
        thinking_budget: int | None = None,
    ) -> None:
        self._corpus = corpus
        self._model = model or config.GEMINI_MODEL
        self._pricing = pricing_for(self._model)
        self._client = client or create_client(api_key)
        self._tool_registry = tool_registry or build_tool_registry(corpus)
        self._max_iterations = max_iterations
        self._synthesis_phase = min(synthesis_phase, max_iterations - 1)
        self._thinking = thinking_config(thinking_budget)

    def _build_system_prompt(self) -> str:
        """Build system prompt with the outline index baked in."""
        return SYSTEM_PROMPT_TEMPLATE.format(
            document_index=encode_index(self._corpus, root=self._corpus.root),
            max_iterations=self._max_iterations,
        )

    def _generate(self, contents: list[types.Content], gen_config: types.GenerateContentConfig):
        try:
            return self._client.models.generate_content(
                model=self._model,
                contents=contents,
                config=gen_config,
            )
        except errors.APIError as e:
            raise ModelCallError(f"Gemini call failed ({e.code}): {e.message}") from e

    def _result(
        self,
        answer: str,
        usage: UsageStats,
        evidence: list[EvidenceStep],
        files_read: list[str],
    ) -> QueryResult:
        call = ModelCallResult(
            text=answer,
            model=self._model,
            usage=usage.usage,
            elapsed=usage.elapsed,
            cost=usage.cost,
        )
        return QueryResult(
            answer=answer,
            documents=files_read,
            calls=[call],
            evidence=evidence,
            metadata={"usage": usage.to_dict(self._model)},
            strategy_name=self.name,
        )

    def run(
        self,
        question: str,
        on_progress: Callable[[dict], None] | None = None,
    ) -> QueryResult:
        """Run the agent loop until a text answer is produced or max iterations reached."""
        logger.info("Agent run started: %r", question[:120])
        run_t0 = time.perf_counter()
        evidence: list[EvidenceStep] = []
        files_read: list[str] = []
        usage = UsageStats()

        system_prompt = self._build_system_prompt()
        logger.debug("System prompt built: %d chars", len(system_prompt))

        tools = [types.Tool(function_declarations=self._tool_registry.get_gemini_declarations())]
        research_config = types.GenerateContentConfig(
            tools=tools,
            system_instruction=system_prompt,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
            thinking_config=self._thinking,
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
            tool_config=types.ToolConfig(
                function_calling_config=types.FunctionCallingConfig(mode="AUTO")
            ),
        )
        synthesis_config = types.GenerateContentConfig(
            tools=tools,
            system_instruction=system_prompt,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
            thinking_config=self._thinking,
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
            tool_config=types.ToolConfig(
                function_calling_config=types.FunctionCallingConfig(mode="NONE")
            ),
        )

        contents: list[types.Content] = [
            types.Content(role="user", parts=[types.Part.from_text(text=question)])
        ]

        for iteration in range(self._max_iterations):
            # Force synthesis phase: no more tool calls allowed
            if iteration >= self._synthesis_phase:
                gen_config = synthesis_config
                if iteration == self._synthesis_phase:
                    logger.info("--- Iteration %d/%d (SYNTHESIS PHASE, tools disabled) ---",
                                iteration + 1, self._max_iterations)
                    contents.append(types.Content(
                        role="user",
                        parts=[types.Part.from_text(
                            text="Stop researching. Write your answer now with what you "
                            "have found. No more tool calls are available."
                        )],
                    ))
            else:
                gen_config = research_config
                logger.info("--- Iteration %d/%d ---", iteration + 1, self._max_iterations)

            t0 = time.perf_counter()
            response = self._generate(contents, gen_config)
            llm_elapsed = time.perf_counter() - t0
            call_usage = extract_usage(response)
            usage.add(call_usage, llm_elapsed, compute_cost(self._pricing, call_usage))

            contents.append(response.candidates[0].content)

            if not response.function_calls:
                answer = response.text or "(no answer)"
                logger.info(
                    "LLM returned final answer: %d chars (LLM %.2fs, total %.2fs)",
                    len(answer), llm_elapsed, time.perf_counter() - run_t0,
                )
                return self._result(answer, usage, evidence, files_read)

            call_names = [c.name for c in response.function_calls]
            logger.info(
                "LLM requested %d tool call(s): %s (LLM %.2fs)",
                len(call_names), ", ".join(call_names), llm_elapsed,
            )

            fn_response_parts: list[types.Part] = []
            for call in response.function_calls:
                args = dict(call.args) if call.args else {}
                result = self._tool_registry.execute(call.name, args)

                if call.name == "read_file" and not result.startswith("Error:"):
                    # Header line is "File: <relative path>..."
                    path = result.split("\n", 1)[0].removeprefix("File: ").split(" (lines ")[0]
                    if path not in files_read:
                        files_read.append(path)

                summary = describe_tool_call(call.name, args)
                evidence.append(EvidenceStep(tool=call.name, args=args, summary=summary))
                if on_progress is not None:
                    on_progress({
                        "step": "tool",
                        "iteration": iteration + 1,
                        "tool": call.name,
                        "args": args,
                        "summary": summary,
                        "result": summarize_tool_result(call.name, result),
                    })

                fn_response_parts.append(
                    types.Part.from_function_response(
                        name=call.name,
                        response={"result": result},
                    )
                )

            contents.append(types.Content(role="user", parts=fn_response_parts))

        logger.warning(
            "Max iterations (%d) reached without final answer (%.2fs)",
            self._max_iterations, time.perf_counter() - run_t0,
        )
        return self._result(
            "Agent reached maximum iterations without producing a final answer.",
            usage, evidence, files_read,
        )


# ---------------------------------------------------------------------------
# Strategy registration
# ---------------------------------------------------------------------------


def _create_agent_strategy(
    directory: Path | None = None,
    corpus: Corpus | None = None,
    api_key: str | None = None,
    model: str | None = None,
    client: genai.Client | None = None,
    **_kwargs,
) -> AgentLoop:
    """Factory for the 'agent' strategy."""
    if corpus is None:
        if directory is None:
            raise ValueError("agent strategy needs a directory or a corpus")
        corpus = build_corpus(directory)
    return AgentLoop(corpus=corpus, api_key=api_key, model=model, client=client)


def register_agent_strategy() -> None:
    strategy_registry.register("agent", _create_agent_strategy)


register_agent_strategy()
