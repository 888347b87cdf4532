"""
Convo Memory - context window management for chat applications backed by
bounded-context language models.

This package contains three main modules:
- context: Token estimation, context status, compression policy and export
- runtime: LangChain-backed summarizer, streaming helpers and chat sessions
- cli: Command-line interface for inspecting saved conversations
"""

__version__ = "0.1.0"

__all__ = ["context", "runtime", "cli"]

import importlib

def __getattr__(name):
    if name in __all__:
        module = importlib.import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__} has no attribute {name}")
