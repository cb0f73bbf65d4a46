"""Entry point for running quotebar as a module.

This allows the CLI to be invoked with ``python -m quotebar_app``.
"""

from .cli import cli

if __name__ == "__main__":  # pragma: no cover
    cli()
