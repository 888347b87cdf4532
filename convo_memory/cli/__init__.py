"""
Convo Memory CLI - command-line interface for inspecting conversations.

Reports context window usage, previews compressed context and exports
conversations saved as JSON.
"""

from .cli import cli

__all__ = ['cli']
