"""CLI: answer a question from a directory of Markdown/AsciiDoc files."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from raggedy import config
from raggedy.agent.strategy import QueryResult, strategy_registry
from raggedy.errors import RaggedyError, RetrievalParseError
from raggedy.render import render_markdown

EXAMPLE = "rgd ~/repos/helix/book/src 'turn off automatic bracket insertion'"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rgd",
        description="LLM-only RAG Q&A based on a directory of text files",
        epilog=f"example: {EXAMPLE}",
    )
    parser.add_argument("directory", help="Directory of .md/.adoc files")
    parser.add_argument("query", nargs="+", help="Question to answer")
    parser.add_argument(
        "-m", "--model",
        default=None,
        help=f"Gemini model (default: {config.GEMINI_MODEL})",
    )
    parser.add_argument(
        "-s", "--strategy",
        default="two-stage",
        choices=strategy_registry.list_strategies(),
        help="two-stage: select documents then answer; agent: tool-calling loop",
    )
    parser.add_argument(
        "--inline",
        action="store_true",
        help="Send selected documents inline in the user message instead of as separate parts",
    )
    parser.add_argument("--raw", action="store_true", help="Print markdown without rendering")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    return parser


def _print_progress(event: dict) -> None:
    if event.get("step") == "tool":
        print(event["summary"])
        if event.get("result"):
            print(f"  {event['result']}")


def format_selection(result: QueryResult) -> str | None:
    """Markdown listing the selected files with the selection call's metadata."""
    if result.metadata.get("route") != "select" or not result.calls:
        return None
    select_call = result.calls[0]
    files = "\n".join(f"- `{p}`" for p in result.documents) or "_none_"
    return f"{select_call.meta}\n\n**Relevant files:**\n\n{files}"


def format_answer(result: QueryResult) -> str:
    if result.notice is not None:
        return result.notice.message
    meta = result.calls[-1].meta if result.calls else ""
    return f"{meta}\n\n{result.answer}" if meta else result.answer


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    question = " ".join(args.query).strip()
    if not question:
        parser.error("query is required")

    directory = Path(args.directory).expanduser().resolve()

    try:
        strategy = strategy_registry.create(
            args.strategy,
            directory=directory,
            model=args.model,
            answer_mode="inline" if args.inline else "separate",
        )
        result = strategy.run(question, on_progress=_print_progress)
    except RetrievalParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            print(f"Raw response:\n{e.raw}", file=sys.stderr)
        return 1
    except RaggedyError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    selection = format_selection(result)
    if selection:
        render_markdown(selection, raw=args.raw)
    render_markdown(format_answer(result), raw=args.raw)
    return 0


if __name__ == "__main__":
    sys.exit(main())
