"""Configuration loaded from environment variables."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _extensions(raw: str) -> tuple[str, ...]:
    """Parse a comma-separated extension list into normalized '.ext' suffixes."""
    exts = []
    for part in raw.split(","):
        part = part.strip().lower()
        if not part:
            continue
        exts.append(part if part.startswith(".") else f".{part}")
    return tuple(exts)


# API keys
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

# Models
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_THINKING_BUDGET: int = int(os.getenv("GEMINI_THINKING_BUDGET", "0"))
GEMINI_TIMEOUT_MS: int | None = int(os.getenv("GEMINI_TIMEOUT_MS", "0")) or None
MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "1024"))

# Corpus
DOC_EXTENSIONS: tuple[str, ...] = _extensions(os.getenv("DOC_EXTENSIONS", ".md,.adoc"))
HEAD_CHARS: int = int(os.getenv("HEAD_CHARS", "800"))

# Retrieval
MAX_SELECTED_DOCS: int = int(os.getenv("MAX_SELECTED_DOCS", "4"))
FULL_CORPUS_CHARS: int = int(os.getenv("FULL_CORPUS_CHARS", "100000"))

# Output
RENDERER: str = os.getenv("RENDERER", "glow")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()

# Server
HOST: str = os.getenv("HOST", "127.0.0.1")
PORT: int = int(os.getenv("PORT", "8000"))
