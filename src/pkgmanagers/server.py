"""MCP server that translates and runs package-manager operations."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from pkgmanagers.policy.base import Policy
from pkgmanagers.policy.builtin import PackageBlocklistPolicy
from pkgmanagers.policy.runner import PolicyRunner
from pkgmanagers.runner.base import Runner
from pkgmanagers.runner.subprocess import ExecRunner
from pkgmanagers.scanner.detector import Detector
from pkgmanagers.settings import Settings, load_settings
from pkgmanagers.tools.detect import detect_manager
from pkgmanagers.tools.managers import list_managers
from pkgmanagers.tools.run import package_path, run_operation
from pkgmanagers.tools.translate import translate_command
from pkgmanagers.translator.builder import Translator
from pkgmanagers.translator.registry import DefinitionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations.

    Definitions are loaded once here and never change afterwards.
    """

    settings: Settings
    registry: DefinitionRegistry
    translator: Translator
    runner: Runner
    detector: Detector


def build_context(settings: Settings) -> AppContext:
    """Wire registry, translator, policy-checked runner and detector."""
    registry = DefinitionRegistry.from_builtin(settings.definitions_dir)
    translator = Translator(registry)

    policies: list[Policy] = []
    if settings.blocklist:
        policies.append(PackageBlocklistPolicy(settings.blocklist))
    runner = PolicyRunner(
        ExecRunner(timeout=settings.timeout),
        policies=policies,
        mode=settings.policy_mode,
    )
    logger.info(
        "Loaded %d managers; policy mode %s with %d policies",
        len(registry),
        settings.policy_mode,
        len(policies),
    )
    return AppContext(
        settings=settings,
        registry=registry,
        translator=translator,
        runner=runner,
        detector=Detector(translator, runner),
    )


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """The composition root."""
    yield build_context(load_settings())


mcp = FastMCP(
    "pkgmanagers",
    instructions=(
        "pkgmanagers runs package-manager operations (install, add, remove, list, "
        "outdated, update, path) the same way for npm, pnpm, yarn, bun, cargo, "
        "go modules, pip, uv, poetry, bundler, composer and more.\n\n"
        "### Recommended workflow\n"
        "1. **detect_manager** - find which manager a project uses.\n"
        "2. **translate_command** - preview the exact commands an operation runs. "
        "Nothing is executed.\n"
        "3. **run_operation** - run it. Say 'add package X as a dev dependency' as "
        "operation='add', args={'package': 'X'}, flags={'dev': true}.\n"
        "4. **package_path** - find where an installed package lives.\n\n"
        "Use **list_managers** to see supported managers, their operations and "
        "capabilities. Operations may be refused by configured policies "
        "(e.g. a package blocklist); report the reason to the user."
    ),
    lifespan=app_lifespan,
)

# ─── Read-only tools ──────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(list_managers)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(translate_command)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(detect_manager)

# ─── Destructive tools ────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(run_operation)
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(package_path)
