"""Manager protocol -- one package manager bound to one project directory."""

from __future__ import annotations

from typing import Protocol

from pkgmanagers.models import (
    AddOptions,
    Capability,
    CommandInput,
    InstallOptions,
    PathResult,
    Result,
)


class Manager(Protocol):
    """High-level operations; each builds, checks and runs its commands."""

    @property
    def name(self) -> str: ...

    @property
    def ecosystem(self) -> str: ...

    @property
    def directory(self) -> str: ...

    async def install(self, options: InstallOptions | None = None) -> Result: ...

    async def add(self, package: str, options: AddOptions | None = None) -> Result: ...

    async def remove(self, package: str) -> Result: ...

    async def list(self) -> Result: ...

    async def outdated(self) -> Result: ...

    async def update(self, package: str = "") -> Result: ...

    async def vendor(self) -> Result: ...

    async def resolve(self) -> Result: ...

    async def path(self, package: str) -> PathResult: ...

    async def run_operation(
        self, operation: str, command_input: CommandInput | None = None
    ) -> Result: ...

    def supports(self, capability: Capability | str) -> bool: ...

    def capabilities(self) -> list[Capability]: ...

    def exit_meaning(self, operation: str, exit_code: int) -> str: ...
