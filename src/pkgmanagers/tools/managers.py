"""list_managers tool -- show the package managers this server knows."""

from __future__ import annotations

from dataclasses import asdict

from mcp.server.fastmcp import Context

from pkgmanagers.models import Definition, ManagerSummary
from pkgmanagers.tools._helpers import get_context


async def list_managers(ctx: Context, ecosystem: str = "") -> list[dict[str, object]]:
    """List the supported package managers and what each can do.

    Args:
        ecosystem: Only show managers of this ecosystem (e.g. "npm",
            "pypi", "cargo"). Empty for all.

    Returns:
        One entry per manager: name, binary, ecosystem, operations it can
        translate, declared capabilities, and the lockfiles/manifests used
        to detect it.
    """
    try:
        app = get_context(ctx)
        return [
            asdict(_summarize(definition))
            for definition in app.registry.definitions()
            if not ecosystem or definition.ecosystem == ecosystem
        ]
    except Exception as exc:
        await ctx.error(f"Unexpected error in list_managers: {exc}")
        return [{"success": False, "message": f"Internal error: {type(exc).__name__}"}]


def _summarize(definition: Definition) -> ManagerSummary:
    return ManagerSummary(
        name=definition.name,
        binary=definition.binary,
        ecosystem=definition.ecosystem,
        operations=sorted(definition.commands),
        capabilities=list(definition.capabilities),
        lockfiles=list(definition.detection.lockfiles),
        manifests=list(definition.detection.manifests),
    )
