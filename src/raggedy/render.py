"""Markdown output: pipe through a terminal renderer when one is available."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

from raggedy import config

logger = logging.getLogger(__name__)


def render_markdown(md: str, raw: bool = False, renderer: str | None = None) -> None:
    """Render markdown to stdout.

    Uses the configured renderer (glow by default) only when stdout is a
    terminal, the renderer is installed, and raw output was not requested.
    """
    renderer = renderer or config.RENDERER
    if not raw and renderer and sys.stdout.isatty() and shutil.which(renderer):
        try:
            subprocess.run([renderer, "-"], input=md, text=True, check=True)
            return
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warning("Renderer %s failed (%s), printing plain text", renderer, e)
    print(md)
