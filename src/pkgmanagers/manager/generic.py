"""Definition-driven Manager: translate, check, run, extract."""

from __future__ import annotations

import logging

from pkgmanagers.errors import ExtractionError
from pkgmanagers.extractor.extract import extract_path
from pkgmanagers.models import (
    AddOptions,
    Capability,
    CommandInput,
    Definition,
    FlagValue,
    InstallOptions,
    PathResult,
    PolicyOperation,
    Result,
)
from pkgmanagers.policy.runner import PolicyRunner
from pkgmanagers.runner.base import Runner
from pkgmanagers.translator.base import TranslatorPort

logger = logging.getLogger(__name__)


class GenericManager:
    """Runs a Definition's operations in one directory.

    Every operation builds its whole chain and runs it in order, stopping at
    the first command that exits non-zero; the last executed Result is
    returned. When the runner is a PolicyRunner, each command is checked
    with the full request (packages, args, flags).
    """

    def __init__(
        self,
        definition: Definition,
        directory: str,
        translator: TranslatorPort,
        runner: Runner,
    ) -> None:
        self.definition = definition
        self._directory = directory
        self.translator = translator
        self.runner = runner

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def ecosystem(self) -> str:
        return self.definition.ecosystem

    @property
    def directory(self) -> str:
        return self._directory

    # ─── Operations ───────────────────────────────────────────

    async def install(self, options: InstallOptions | None = None) -> Result:
        options = options or InstallOptions()
        return await self.run_operation(
            "install",
            CommandInput.of(
                flags={
                    "frozen": options.frozen,
                    "clean": options.clean,
                    "production": options.production,
                }
            ),
        )

    async def add(self, package: str, options: AddOptions | None = None) -> Result:
        options = options or AddOptions()
        return await self.run_operation(
            "add",
            CommandInput.of(
                args={"package": package},
                flags={
                    "dev": options.dev,
                    "optional": options.optional,
                    "exact": options.exact,
                    "workspace": options.workspace,
                },
            ),
        )

    async def remove(self, package: str) -> Result:
        return await self.run_operation("remove", CommandInput.of(args={"package": package}))

    async def list(self) -> Result:
        return await self.run_operation("list")

    async def outdated(self) -> Result:
        return await self.run_operation("outdated")

    async def update(self, package: str = "") -> Result:
        args = {"package": package} if package else {}
        return await self.run_operation("update", CommandInput.of(args=args))

    async def vendor(self) -> Result:
        return await self.run_operation("vendor")

    async def resolve(self) -> Result:
        return await self.run_operation("resolve")

    async def path(self, package: str) -> PathResult:
        """Run the path command and extract the package location from stdout.

        Raises:
            ExtractionError: With ``.result`` set to the executed command's
                Result, so its raw output is still available.
        """
        result = await self.run_operation("path", CommandInput.of(args={"package": package}))
        _, rule = self.translator.command_rule(self.name, "path")
        try:
            location = extract_path(result.stdout, rule.extract, package)
        except ExtractionError as exc:
            exc.result = result
            raise
        return PathResult(path=location, result=result)

    async def run_operation(
        self, operation: str, command_input: CommandInput | None = None
    ) -> Result:
        """Build and run any operation the definition declares."""
        command_input = command_input or CommandInput()
        commands = self.translator.build_commands(self.name, operation, command_input)

        result = Result(command=[])
        for command in commands:
            result = await self._run(operation, command, command_input)
            if not result.success:
                meaning = self.exit_meaning(operation, result.exit_code)
                logger.info(
                    "%s %s exited %d%s",
                    self.name,
                    operation,
                    result.exit_code,
                    f" ({meaning})" if meaning else "",
                )
                break
        return result

    # ─── Capabilities ─────────────────────────────────────────

    def supports(self, capability: Capability | str) -> bool:
        return self.definition.supports(capability)

    def capabilities(self) -> list[Capability]:
        """Declared capabilities this package knows about, in declared order."""
        known = {c.value for c in Capability}
        return [Capability(c) for c in self.definition.capabilities if c in known]

    def exit_meaning(self, operation: str, exit_code: int) -> str:
        """Documented meaning of a non-zero exit code, or ""."""
        rule = self.definition.command(operation)
        if rule is None:
            return ""
        return rule.exit_codes.get(exit_code, "")

    async def _run(self, operation: str, command: list[str], command_input: CommandInput) -> Result:
        if isinstance(self.runner, PolicyRunner):
            return await self.runner.run_operation(
                PolicyOperation(
                    command=command,
                    manager=self.name,
                    operation=operation,
                    packages=command_input.packages(),
                    args=dict(command_input.args),
                    flags={
                        name: FlagValue.of(value).value
                        for name, value in command_input.flags.items()
                    },
                    working_dir=self._directory,
                )
            )
        return await self.runner.run(self._directory, command)
