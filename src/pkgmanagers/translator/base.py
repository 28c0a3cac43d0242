"""Port: Command translation."""

from __future__ import annotations

from typing import Protocol

from pkgmanagers.models import CommandInput, CommandRule, Definition


class TranslatorPort(Protocol):
    """Port for turning a generic operation request into argument vectors."""

    def command_rule(self, manager: str, operation: str) -> tuple[Definition, CommandRule]:
        """Resolve the definition and command rule for an operation."""
        ...

    def build_command(
        self, manager: str, operation: str, command_input: CommandInput | None = None
    ) -> list[str]:
        """Build the first command of an operation."""
        ...

    def build_commands(
        self, manager: str, operation: str, command_input: CommandInput | None = None
    ) -> list[list[str]]:
        """Build every command of an operation's chain."""
        ...
