"""translate_command tool -- show the exact commands for an operation."""

from __future__ import annotations

from dataclasses import asdict

from mcp.server.fastmcp import Context

from pkgmanagers.errors import PkgManagersError
from pkgmanagers.models import TranslateResult
from pkgmanagers.tools._helpers import build_input, get_context


async def translate_command(
    manager: str,
    operation: str,
    ctx: Context,
    args: dict[str, str] | None = None,
    flags: dict[str, bool | str | int | float] | None = None,
    extra: list[str] | None = None,
) -> dict[str, object]:
    """Translate a generic package operation into manager-specific commands.

    Nothing is executed. Use this to see what run_operation would run.

    Args:
        manager: Manager name as shown by list_managers (e.g. "npm", "gomod").
        operation: Operation name: install, add, remove, list, outdated,
            update, path, and vendor/resolve/audit where supported.
        args: Named arguments, e.g. {"package": "lodash", "version": "4.17.21"}.
        flags: Named flags, e.g. {"dev": true} or {"frozen": true}.
        extra: Raw tokens appended verbatim to every command.

    Returns:
        Result with the list of commands (first command first; chained
        follow-up commands after it).
    """
    try:
        app = get_context(ctx)
        commands = app.translator.build_commands(
            manager, operation, build_input(args, flags, extra)
        )
        return asdict(
            TranslateResult(
                success=True,
                manager=manager,
                operation=operation,
                message=" && ".join(" ".join(command) for command in commands),
                commands=commands,
            )
        )
    except PkgManagersError as exc:
        return asdict(
            TranslateResult(
                success=False,
                manager=manager,
                operation=operation,
                message=str(exc),
            )
        )
    except Exception as exc:
        await ctx.error(f"Unexpected error in translate_command: {exc}")
        return asdict(
            TranslateResult(
                success=False,
                manager=manager,
                operation=operation,
                message=f"Internal error: {type(exc).__name__}",
            )
        )
