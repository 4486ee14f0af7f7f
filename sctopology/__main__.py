"""Entry point for `python -m sctopology`.

Usage:
    python -m sctopology manifest
    uv run python -m sctopology serve
"""

from __future__ import annotations

from sctopology.cli import cli

cli()
