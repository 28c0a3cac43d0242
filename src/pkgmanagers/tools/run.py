"""run_operation and package_path tools -- execute package-manager commands."""

from __future__ import annotations

from dataclasses import asdict

from mcp.server.fastmcp import Context

from pkgmanagers.errors import ExtractionError, PkgManagersError
from pkgmanagers.manager.base import Manager
from pkgmanagers.models import Result, RunResult
from pkgmanagers.tools._helpers import build_input, detect_options, get_context


async def run_operation(
    directory: str,
    operation: str,
    ctx: Context,
    manager: str = "",
    args: dict[str, str] | None = None,
    flags: dict[str, bool | str | int | float] | None = None,
    extra: list[str] | None = None,
) -> dict[str, object]:
    """Run a package operation in a project directory.

    The manager is detected from the directory unless given. Commands pass
    the configured policies (e.g. a package blocklist) before they run.
    Chained commands (like `go get` then `go mod tidy`) run in order and
    stop at the first failure.

    Args:
        directory: Project directory to run in.
        operation: install, add, remove, list, outdated, update, vendor,
            resolve, audit (whatever the manager supports).
        manager: Manager name to use instead of detecting one.
        args: Named arguments, e.g. {"package": "lodash"}.
        flags: Named flags, e.g. {"dev": true}.
        extra: Raw tokens appended verbatim to every command.

    Returns:
        Result with the executed command, exit code (and its documented
        meaning when the manager declares one), stdout and stderr.
    """
    resolved = manager
    try:
        app = get_context(ctx)
        bound = app.detector.detect(directory, detect_options(app, manager))
        resolved = bound.name
        await ctx.info(f"Running {operation} with {resolved} in {directory}")
        result = await bound.run_operation(operation, build_input(args, flags, extra))
        return asdict(_run_result(bound, operation, result))
    except PkgManagersError as exc:
        return asdict(
            RunResult(success=False, manager=resolved, operation=operation, message=str(exc))
        )
    except Exception as exc:
        await ctx.error(f"Unexpected error in run_operation: {exc}")
        return asdict(
            RunResult(
                success=False,
                manager=resolved,
                operation=operation,
                message=f"Internal error: {type(exc).__name__}",
            )
        )


async def package_path(
    directory: str,
    package: str,
    ctx: Context,
    manager: str = "",
) -> dict[str, object]:
    """Find where an installed package lives on disk.

    Runs the manager's lookup command and reads the location from its
    output. Some managers compute the path from naming conventions
    (node_modules/<package>).

    Args:
        directory: Project directory.
        package: Package name.
        manager: Manager name to use instead of detecting one.

    Returns:
        Result with ``path`` set on success. If the output could not be
        parsed, the raw stdout/stderr are still included.
    """
    resolved = manager
    try:
        app = get_context(ctx)
        bound = app.detector.detect(directory, detect_options(app, manager))
        resolved = bound.name
        path_result = await bound.path(package)
        return asdict(_run_result(bound, "path", path_result.result, path=path_result.path))
    except ExtractionError as exc:
        if exc.result is None:
            return asdict(
                RunResult(success=False, manager=resolved, operation="path", message=str(exc))
            )
        failed = _run_result(bound, "path", exc.result)
        return asdict(
            RunResult(
                success=False,
                manager=failed.manager,
                operation="path",
                message=str(exc),
                command=failed.command,
                exit_code=failed.exit_code,
                exit_meaning=failed.exit_meaning,
                stdout=failed.stdout,
                stderr=failed.stderr,
                duration=failed.duration,
            )
        )
    except PkgManagersError as exc:
        return asdict(RunResult(success=False, manager=resolved, operation="path", message=str(exc)))
    except Exception as exc:
        await ctx.error(f"Unexpected error in package_path: {exc}")
        return asdict(
            RunResult(
                success=False,
                manager=resolved,
                operation="path",
                message=f"Internal error: {type(exc).__name__}",
            )
        )


def _run_result(
    bound: Manager, operation: str, result: Result, path: str = ""
) -> RunResult:
    command = " ".join(result.command)
    if result.success:
        message = f"`{command}` succeeded"
    else:
        message = f"`{command}` exited with code {result.exit_code}"
    meaning = bound.exit_meaning(operation, result.exit_code) if result.exit_code else ""
    if meaning:
        message += f" ({meaning})"
    return RunResult(
        success=result.success,
        manager=bound.name,
        operation=operation,
        message=message,
        command=list(result.command),
        exit_code=result.exit_code,
        exit_meaning=meaning,
        stdout=result.stdout,
        stderr=result.stderr,
        duration=round(result.duration, 3),
        path=path,
    )
