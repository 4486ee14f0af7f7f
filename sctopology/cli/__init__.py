"""sctopology command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``sctopology`` script).
"""

from sctopology.cli.main import cli

__all__ = ["cli"]
