"""Logging bootstrap for the CLI and scripts."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

DEFAULT_FORMAT = "%(name)s | %(message)s"


def resolve_level(level_name: str | None) -> int:
    name = (level_name or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level_name: str | None = None, force: bool = False) -> None:
    """Configure the root logger once (unless force=True)."""
    if getattr(setup_logging, "_configured", False) and not force:
        return
    root = logging.getLogger()
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
    level = resolve_level(level_name)
    root.setLevel(level)
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    handler.setLevel(level)
    root.addHandler(handler)
    setup_logging._configured = True  # type: ignore[attr-defined]
