"""
Entry point for running the Convo Memory CLI as a module.

Usage:
    python -m convo_memory.cli [command] [options]
"""

from .cli import cli

if __name__ == '__main__':
    cli()
