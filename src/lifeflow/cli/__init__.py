"""Command line interface for lifeflow."""

from lifeflow.cli.main import lifeflow, main

__all__ = ["lifeflow", "main"]
