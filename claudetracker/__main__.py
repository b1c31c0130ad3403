"""Entry point for ``python -m claudetracker``."""

from .presentation.cli import cli

if __name__ == "__main__":
    cli()
