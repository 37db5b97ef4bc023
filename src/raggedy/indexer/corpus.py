"""Build an in-memory corpus of text documents with per-document outlines."""

from __future__ import annotations

import logging
import os
import re
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from raggedy import config
from raggedy.errors import IndexingError

logger = logging.getLogger(__name__)

# Directories never worth walking into
SKIP_DIRS = {
    ".git", ".svn", ".hg", "node_modules", "__pycache__",
    ".venv", "venv", ".tox", ".cache",
}

MARKDOWN_HEADING = re.compile(r"^#+[^\S\n]+.*", re.MULTILINE)
ASCIIDOC_HEADING = re.compile(r"^=+[^\S\n]+.*", re.MULTILINE)

HEADING_PATTERNS: dict[str, re.Pattern[str]] = {
    ".md": MARKDOWN_HEADING,
    ".markdown": MARKDOWN_HEADING,
    ".adoc": ASCIIDOC_HEADING,
    ".asciidoc": ASCIIDOC_HEADING,
}


@dataclass(frozen=True)
class Document:
    """One indexed text file."""

    relative_path: str
    content: str = field(repr=False)
    head: str = field(repr=False)
    headings: tuple[str, ...] = ()


def heading_pattern_for(path: str) -> re.Pattern[str]:
    """Pick the heading regex by file extension (Markdown when unknown)."""
    return HEADING_PATTERNS.get(os.path.splitext(path)[1].lower(), MARKDOWN_HEADING)


def extract_headings(content: str, pattern: re.Pattern[str]) -> tuple[str, ...]:
    return tuple(m.group(0).strip() for m in pattern.finditer(content))


def make_document(relative_path: str, content: str, head_chars: int | None = None) -> Document:
    """Build a Document from already-loaded text."""
    if head_chars is None:
        head_chars = config.HEAD_CHARS
    return Document(
        relative_path=relative_path,
        content=content,
        head=content[:head_chars],
        headings=extract_headings(content, heading_pattern_for(relative_path)),
    )


def _raise_walk_error(err: OSError) -> None:
    raise IndexingError(f"Cannot read directory {err.filename}: {err.strerror}") from err


def list_files(root: Path, extensions: Iterable[str]) -> Iterator[tuple[Path, str]]:
    """Recursively yield (path, content) for regular files matching the extensions.

    Any unreadable directory or file raises IndexingError.
    """
    exts = {e.lower() for e in extensions}
    for dirpath, dirs, filenames in os.walk(root, onerror=_raise_walk_error):
        # Prune skip directories, keep walk order deterministic
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
        for fname in sorted(filenames):
            p = Path(dirpath) / fname
            if p.suffix.lower() not in exts or not p.is_file():
                continue
            try:
                content = p.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise IndexingError(f"Cannot read {p}: {e}") from e
            yield p, content


class Corpus:
    """Documents for one query, keyed by relative path and sorted by it."""

    def __init__(self, documents: Iterable[Document], root: Path | None = None) -> None:
        self.root = root
        self._docs: dict[str, Document] = {}
        for doc in sorted(documents, key=lambda d: d.relative_path):
            if doc.relative_path in self._docs:
                raise IndexingError(f"Duplicate document path: {doc.relative_path}")
            self._docs[doc.relative_path] = doc

    def __len__(self) -> int:
        return len(self._docs)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._docs.values())

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self._docs

    def get(self, relative_path: str) -> Document | None:
        return self._docs.get(relative_path)

    @property
    def documents(self) -> list[Document]:
        return list(self._docs.values())

    @property
    def paths(self) -> list[str]:
        return list(self._docs.keys())

    @property
    def total_chars(self) -> int:
        return sum(len(d.content) for d in self._docs.values())


def build_corpus(
    root: Path,
    extensions: Iterable[str] | None = None,
    head_chars: int | None = None,
) -> Corpus:
    """Index every eligible document under root.

    Fails fast: the first unreadable file aborts the whole index.

    Args:
        root: Directory to walk.
        extensions: File suffixes to include (default: config.DOC_EXTENSIONS).
        head_chars: Preview length per document (default: config.HEAD_CHARS).

    Returns:
        A Corpus with one Document per matching file.
    """
    root = Path(root)
    if not root.exists():
        raise IndexingError(f"Directory not found: {root}")
    if not root.is_dir():
        raise IndexingError(f"Not a directory: {root}")

    exts = tuple(extensions) if extensions is not None else config.DOC_EXTENSIONS
    t0 = time.perf_counter()
    docs = [
        make_document(path.relative_to(root).as_posix(), content, head_chars)
        for path, content in list_files(root, exts)
    ]
    corpus = Corpus(docs, root=root)
    logger.info(
        "Indexed %d document(s), %d chars under %s (%.3fs)",
        len(corpus), corpus.total_chars, root, time.perf_counter() - t0,
    )
    return corpus
