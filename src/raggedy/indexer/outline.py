"""Render documents as tag-delimited blocks for model prompts."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

from raggedy.indexer.corpus import Document

# Matches <document ...> and </document> so document bodies cannot close their own block
_DOCUMENT_TAG = re.compile(r"<(/?document\b)", re.IGNORECASE)


def encode_outline(doc: Document, root: Path | None = None) -> str:
    """Outline block (path, headings, head preview) with all text XML-escaped.

    Args:
        doc: Document to encode.
        root: Corpus root; when given, an absolute <fullPath> is included.
    """
    lines = ["<document>", f"  <path>{escape(doc.relative_path)}</path>"]
    if root is not None:
        full_path = (Path(root) / doc.relative_path).resolve()
        lines.append(f"  <fullPath>{escape(str(full_path))}</fullPath>")
    lines.append(f"  <sections>{escape(chr(10).join(doc.headings))}</sections>")
    lines.append(f"  <head>{escape(doc.head)}</head>")
    lines.append("</document>")
    return "\n".join(lines)


def encode_index(docs: Iterable[Document], root: Path | None = None) -> str:
    body = "\n".join(encode_outline(d, root) for d in docs)
    return f"<document-index>\n{body}\n</document-index>"


def encode_document(doc: Document) -> str:
    """Full-content block for the answer stage.

    Only document delimiters inside the content are neutralised; everything
    else reaches the model verbatim.
    """
    body = _DOCUMENT_TAG.sub(r"&lt;\1", doc.content)
    return f"<document path={quoteattr(doc.relative_path)}>\n{body}\n</document>"
