"""Main entry point for Workroom.

This allows the package to be run as:
    python -m workroom
"""

from .cli.main import cli

if __name__ == "__main__":
    cli()
