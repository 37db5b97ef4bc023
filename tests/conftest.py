"""Shared fixtures: a small documentation tree on disk and its corpus."""

import pytest

from raggedy.indexer.corpus import Corpus, build_corpus, make_document


@pytest.fixture
def docs_dir(tmp_path):
    """Documentation directory with Markdown, AsciiDoc and ignored files."""
    root = tmp_path / "docs"
    root.mkdir()
    (root / "guide").mkdir()
    (root / "README.md").write_text(
        "# Project\n\nIntro text.\n\n## Install\n\nRun pip install.\n"
    )
    (root / "guide" / "config.md").write_text(
        "# Configuration\n\nSet auto-pairs = false to disable bracket insertion.\n"
        "\n## Keys\n\nRemap keys in keys.toml.\n"
    )
    (root / "guide" / "themes.adoc").write_text(
        "= Themes\n\nThemes live in runtime/themes.\n\n== Custom themes\n\nInherit from a base.\n"
    )
    (root / "notes.txt").write_text("# Not indexed\n")
    (root / "node_modules").mkdir()
    (root / "node_modules" / "dep.md").write_text("# Vendored\n")
    return root


@pytest.fixture
def corpus(docs_dir) -> Corpus:
    return build_corpus(docs_dir, extensions=(".md", ".adoc"), head_chars=800)


@pytest.fixture
def small_corpus() -> Corpus:
    """In-memory corpus: a.md, b.adoc, c.md."""
    return Corpus([
        make_document("a.md", "# Title\nfoo", head_chars=800),
        make_document("b.adoc", "= Title\nbar", head_chars=800),
        make_document("c.md", "# Other\n\nbaz qux", head_chars=800),
    ])
