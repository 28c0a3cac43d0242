"""pkgmanagers: one vocabulary for every package manager's command line."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version

_LOCAL_VERSION_FALLBACK = "0.0.0+local"


def _resolve_version() -> str:
    """Resolve package version from installed metadata with deterministic fallback."""
    try:
        return _distribution_version("pkgmanagers")
    except PackageNotFoundError:
        return _LOCAL_VERSION_FALLBACK


__version__ = _resolve_version()


def main() -> None:
    """Entry point for `pkgmanagers` CLI (MCP server over stdio)."""
    import logging
    import sys

    from pkgmanagers.server import mcp
    from pkgmanagers.settings import load_settings

    # stdout carries the stdio transport; logs go to stderr.
    logging.basicConfig(
        level=load_settings().log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(transport="stdio")
