"""Public package surface for kokona.

Exports ``main`` for programmatic CLI invocation.
The editor core lives in ``highlight``, ``search``, ``terminal`` and
``line_index``; ``state.EditorState`` composes them.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
