"""grep and glob tools: regex and path-pattern search over the corpus."""

from __future__ import annotations

import logging
import re
from fnmatch import fnmatchcase

from raggedy.indexer.corpus import Corpus

logger = logging.getLogger(__name__)

MAX_MATCHES = 100
MAX_LINE_CHARS = 200


def _path_matches(path: str, pattern: str) -> bool:
    """Shell-style match on the full relative path, or on the file name alone."""
    if fnmatchcase(path, pattern):
        return True
    return "/" not in pattern and fnmatchcase(path.rsplit("/", 1)[-1], pattern)


def glob_files(corpus: Corpus, pattern: str) -> str:
    """List corpus paths matching a shell-style pattern ('*' also crosses '/')."""
    matches = [p for p in corpus.paths if _path_matches(p, pattern)]
    if not matches:
        return f"No documents match '{pattern}'."
    return f"{len(matches)} document(s) match '{pattern}':\n" + "\n".join(matches)


def grep(
    corpus: Corpus,
    pattern: str,
    glob: str | None = None,
    ignore_case: bool = False,
    max_matches: int = MAX_MATCHES,
) -> str:
    """Search document lines for a regular expression.

    Args:
        corpus: The indexed corpus.
        pattern: Python regular expression.
        glob: Optional path pattern restricting which documents are searched.
        ignore_case: Case-insensitive matching.
        max_matches: Stop after this many matching lines.

    Returns:
        'path:line: text' lines, or a no-match message.

    Raises:
        ValueError: the pattern is not a valid regular expression.
    """
    try:
        regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        raise ValueError(f"Invalid regex {pattern!r}: {e}") from e

    hits: list[str] = []
    docs_hit = 0
    for doc in corpus:
        if glob and not _path_matches(doc.relative_path, glob):
            continue
        found = False
        for lineno, line in enumerate(doc.content.splitlines(), 1):
            if regex.search(line):
                found = True
                text = line.strip()
                if len(text) > MAX_LINE_CHARS:
                    text = text[:MAX_LINE_CHARS] + "..."
                hits.append(f"{doc.relative_path}:{lineno}: {text}")
                if len(hits) >= max_matches:
                    break
        docs_hit += found
        if len(hits) >= max_matches:
            hits.append(f"... (stopped after {max_matches} matches)")
            break

    logger.debug("grep %r: %d match(es) in %d document(s)", pattern, len(hits), docs_hit)
    if not hits:
        return f"No matches for '{pattern}'."
    return "\n".join(hits)
