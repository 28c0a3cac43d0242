"""detect_manager tool -- find which package manager a project uses."""

from __future__ import annotations

from dataclasses import asdict

from mcp.server.fastmcp import Context

from pkgmanagers.errors import CommandNotFoundError, PkgManagersError
from pkgmanagers.models import DetectResult
from pkgmanagers.tools._helpers import detect_options, get_context


async def detect_manager(
    directory: str,
    ctx: Context,
    check_version: bool = False,
) -> dict[str, object]:
    """Detect the package manager of a project directory.

    Looks for lockfiles first (e.g. package-lock.json, Cargo.lock), then
    manifests (package.json, pyproject.toml). Lockfiles of several
    managers in one directory are reported as a conflict unless the
    server is configured to pick one.

    Args:
        directory: Project directory to inspect.
        check_version: Also run the manager's version command.

    Returns:
        Result with the manager name, binary, ecosystem, the files it was
        detected from, and the installed version when requested.
    """
    try:
        app = get_context(ctx)
        detection = app.detector.detect_definition(directory, detect_options(app))
        definition = detection.definition

        version = ""
        if check_version:
            try:
                version = await app.detector.detect_version(definition, directory)
            except CommandNotFoundError:
                await ctx.info(f"{definition.binary} is not installed")

        return asdict(
            DetectResult(
                success=True,
                directory=directory,
                message=f"Detected {definition.name} from {', '.join(detection.files)}",
                manager=definition.name,
                binary=definition.binary,
                ecosystem=definition.ecosystem,
                detected_from=detection.files,
                version=version,
            )
        )
    except PkgManagersError as exc:
        return asdict(DetectResult(success=False, directory=directory, message=str(exc)))
    except Exception as exc:
        await ctx.error(f"Unexpected error in detect_manager: {exc}")
        return asdict(
            DetectResult(
                success=False,
                directory=directory,
                message=f"Internal error: {type(exc).__name__}",
            )
        )
