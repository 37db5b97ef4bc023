"""read_file tool: read a document from the indexed corpus."""

from __future__ import annotations

import logging

from raggedy.indexer.corpus import Corpus

logger = logging.getLogger(__name__)

DEFAULT_LINE_CAP = 500


def format_file_content(
    content: str,
    path: str,
    start_line: int | None = None,
    end_line: int | None = None,
) -> str:
    """Format raw file content with line numbers and optional range slicing.

    Args:
        content: Raw file text.
        path: Display path for the header.
        start_line: Optional first line (1-based, inclusive).
        end_line: Optional last line (1-based, inclusive).

    Returns:
        Formatted string with header, line numbers, and truncation notice.
    """
    lines = content.splitlines()

    total_lines = len(lines)
    truncated = False
    if start_line is not None or end_line is not None:
        s = max(0, (start_line or 1) - 1)
        e = min(total_lines, end_line or total_lines)
        selected = lines[s:e]
        line_offset = s + 1
    else:
        selected = lines[:DEFAULT_LINE_CAP]
        line_offset = 1
        truncated = total_lines > DEFAULT_LINE_CAP

    numbered = [f"{line_offset + i:>6} | {line}" for i, line in enumerate(selected)]

    header = f"File: {path}"
    if start_line or end_line:
        header += f" (lines {line_offset}-{line_offset + len(selected) - 1})"
    header += f"\n{'─' * 60}"

    result = header + "\n" + "\n".join(numbered)

    if truncated:
        result += (
            f"\n... (showing first {DEFAULT_LINE_CAP} of {total_lines} lines."
            " Use start_line/end_line to read more.)"
        )

    return result


def read_file(
    corpus: Corpus,
    path: str,
    start_line: int | None = None,
    end_line: int | None = None,
) -> str:
    """Read a corpus document with line numbers.

    Only documents in the corpus are readable; anything else on disk is not.

    Args:
        corpus: The indexed corpus.
        path: Relative document path.
        start_line: Optional first line to read (1-based, inclusive).
        end_line: Optional last line to read (1-based, inclusive).

    Returns:
        Document content with line numbers, or an error message.
    """
    doc = corpus.get(path.removeprefix("./"))
    if doc is None and corpus.root is not None:
        # Models sometimes echo the absolute <fullPath> back
        root = str(corpus.root.resolve()).rstrip("/") + "/"
        if path.startswith(root):
            doc = corpus.get(path[len(root):])
    if doc is None:
        return f"Error: File '{path}' not found in corpus."

    result = format_file_content(doc.content, doc.relative_path, start_line, end_line)
    logger.debug("read_file: %s (%d chars)", doc.relative_path, len(result))
    return result
