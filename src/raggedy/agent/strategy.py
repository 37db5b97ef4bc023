"""Strategy pattern: unified result type, tool registry, and strategy registry."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from google.genai import types

from raggedy.agent.provider import ModelCallResult
from raggedy.errors import EmptySelectionNotice
from raggedy.indexer.corpus import Corpus
from raggedy.tools.grep import glob_files, grep
from raggedy.tools.read_file import read_file

logger = logging.getLogger(__name__)

MAX_TOOL_RESULT_CHARS = 15000


# ---------------------------------------------------------------------------
# Unified result types
# ---------------------------------------------------------------------------


@dataclass
class EvidenceStep:
    """One tool call in the agent's evidence trail."""

    tool: str
    args: dict
    summary: str


@dataclass
class QueryResult:
    """Unified result from any query strategy."""

    answer: str
    documents: list[str] = field(default_factory=list)
    calls: list[ModelCallResult] = field(default_factory=list)
    evidence: list[EvidenceStep] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    strategy_name: str = ""
    notice: EmptySelectionNotice | None = None


# ---------------------------------------------------------------------------
# QueryStrategy protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class QueryStrategy(Protocol):
    name: str

    def run(
        self,
        question: str,
        on_progress: Callable[[dict], None] | None = None,
    ) -> QueryResult: ...


# ---------------------------------------------------------------------------
# Tool Registry
# ---------------------------------------------------------------------------


@dataclass
class ToolDef:
    """Definition of a tool callable by strategies."""

    fn: Callable[..., str]
    schema: dict
    description: str


class ToolRegistry:
    """Registry of tools available to strategies."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDef] = {}

    def register(self, name: str, fn: Callable[..., str], schema: dict, description: str) -> None:
        self._tools[name] = ToolDef(fn=fn, schema=schema, description=description)

    def execute(self, name: str, args: dict) -> str:
        """Execute a tool by name. Errors become tool output for the model."""
        if name not in self._tools:
            return f"Unknown tool: {name}"

        logger.debug("  tool exec: %s(%s)", name, args)
        t0 = time.perf_counter()

        try:
            result = self._tools[name].fn(**args)
        except (TypeError, ValueError) as e:
            result = f"Error: {e}"
            logger.error("  tool error: %s: %s", name, e)

        if len(result) > MAX_TOOL_RESULT_CHARS:
            logger.debug("  truncating result from %d to %d chars", len(result), MAX_TOOL_RESULT_CHARS)
            result = result[:MAX_TOOL_RESULT_CHARS] + "\n... (truncated)"

        logger.debug("  tool done: %s -> %d chars (%.3fs)", name, len(result), time.perf_counter() - t0)
        return result

    def get_gemini_declarations(self) -> list[types.FunctionDeclaration]:
        return [
            types.FunctionDeclaration(
                name=name,
                description=tool_def.description,
                parameters_json_schema=tool_def.schema,
            )
            for name, tool_def in self._tools.items()
        ]

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())


def build_tool_registry(corpus: Corpus) -> ToolRegistry:
    """Create a ToolRegistry with read_file, grep and glob bound to one corpus."""
    registry = ToolRegistry()

    def _read_file(path: str, start_line: int | None = None, end_line: int | None = None) -> str:
        return read_file(corpus, path, start_line=start_line, end_line=end_line)

    registry.register(
        "read_file",
        _read_file,
        schema={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Document path exactly as shown in the index <path>.",
                },
                "start_line": {
                    "type": "integer",
                    "description": "First line to read (1-based, inclusive). Optional.",
                },
                "end_line": {
                    "type": "integer",
                    "description": "Last line to read (1-based, inclusive). Optional.",
                },
            },
            "required": ["path"],
        },
        description=(
            "Read a document with line numbers. Default cap is 500 lines; "
            "use start_line/end_line for long documents."
        ),
    )

    def _grep(pattern: str, glob: str | None = None, ignore_case: bool = False) -> str:
        return grep(corpus, pattern, glob=glob, ignore_case=ignore_case)

    registry.register(
        "grep",
        _grep,
        schema={
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Regular expression matched against each line.",
                },
                "glob": {
                    "type": "string",
                    "description": "Optional path pattern to restrict the search, e.g. '*.adoc'.",
                },
                "ignore_case": {
                    "type": "boolean",
                    "description": "Case-insensitive match. Default false.",
                },
            },
            "required": ["pattern"],
        },
        description=(
            "Search every document for lines matching a regular expression. "
            "Returns 'path:line: text' for each hit (max 100)."
        ),
    )

    def _glob(pattern: str) -> str:
        return glob_files(corpus, pattern)

    registry.register(
        "glob",
        _glob,
        schema={
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Shell-style path pattern, e.g. 'guide/*' or '*install*'.",
                },
            },
            "required": ["pattern"],
        },
        description="List document paths matching a shell-style pattern.",
    )

    return registry


# ---------------------------------------------------------------------------
# Strategy Registry
# ---------------------------------------------------------------------------


class StrategyRegistry:
    """Registry of query strategies with factory functions."""

    def __init__(self) -> None:
        self._factories: dict[str, Callable[..., QueryStrategy]] = {}

    def register(self, name: str, factory_fn: Callable[..., QueryStrategy]) -> None:
        self._factories[name] = factory_fn

    def create(self, name: str, **kwargs: Any) -> QueryStrategy:
        if name not in self._factories:
            available = ", ".join(sorted(self._factories.keys()))
            raise ValueError(f"Unknown strategy {name!r}. Available: {available}")
        return self._factories[name](**kwargs)

    def list_strategies(self) -> list[str]:
        return sorted(self._factories.keys())


# Module-level singleton
strategy_registry = StrategyRegistry()
