"""Helpers shared by the MCP tools."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

from pkgmanagers.models import CommandInput
from pkgmanagers.scanner.detector import DetectOptions

if TYPE_CHECKING:
    from pkgmanagers.server import AppContext


def get_context(ctx: Context) -> AppContext:
    """Extract AppContext from FastMCP's lifespan context.

    Raises TypeError if the lifespan context is not an AppContext instance.
    """
    from pkgmanagers.server import AppContext

    app = ctx.request_context.lifespan_context
    if not isinstance(app, AppContext):
        msg = (
            f"Expected AppContext in lifespan_context, got {type(app).__name__}. "
            "Is the server configured with app_lifespan?"
        )
        raise TypeError(msg)
    return app


def detect_options(app: AppContext, manager: str = "") -> DetectOptions:
    """DetectOptions from settings, optionally pinned to one manager."""
    return DetectOptions(
        require_cli=app.settings.require_cli,
        on_conflict=app.settings.on_conflict,
        manager=manager,
    )


def build_input(
    args: Mapping[str, str] | None,
    flags: Mapping[str, object] | None,
    extra: list[str] | None,
) -> CommandInput:
    return CommandInput.of(args=args, flags=flags, extra=extra)
