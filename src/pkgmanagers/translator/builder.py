"""Translate a generic operation request into concrete argument vectors.

Nothing here executes anything: a Translator turns (manager, operation,
CommandInput) into token lists using the registry's immutable definitions.

Render order for one command:

1. ``binary``
2. ``base``, or the first ``base_overrides`` entry whose flag is active
3. ``args`` by position (flag-style, fixed-suffix or positional)
4. ``package@version``-style suffix applied to the rendered package token
5. ``default_flags``
6. ``flags`` in declared order, skipping the flag that picked the base
7. caller ``extra`` tokens, verbatim
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pkgmanagers.errors import MissingArgumentError, UnsupportedOperationError
from pkgmanagers.models import CommandInput, CommandRule, Definition, FlagRule
from pkgmanagers.translator.registry import DefinitionRegistry
from pkgmanagers.translator.validate import Validator, validate

logger = logging.getLogger(__name__)

PACKAGE_ARG = "package"
VERSION_ARG = "version"


class Translator:
    """Builds argument vectors from a DefinitionRegistry."""

    def __init__(self, registry: DefinitionRegistry) -> None:
        self.registry = registry

    def command_rule(self, manager: str, operation: str) -> tuple[Definition, CommandRule]:
        """Resolve the definition and its rule for ``operation``.

        Raises:
            UnknownManagerError: If ``manager`` is not registered.
            UnsupportedOperationError: If the manager has no such operation.
        """
        definition = self.registry.get(manager)
        rule = definition.command(operation)
        if rule is None:
            raise UnsupportedOperationError(manager, operation)
        return definition, rule

    def build_command(
        self,
        manager: str,
        operation: str,
        command_input: CommandInput | None = None,
    ) -> list[str]:
        """Build the first (or only) command of an operation."""
        definition, rule = self.command_rule(manager, operation)
        return render_command(
            definition.binary, rule, command_input or CommandInput(), self.registry.validators
        )

    def build_commands(
        self,
        manager: str,
        operation: str,
        command_input: CommandInput | None = None,
    ) -> list[list[str]]:
        """Build an operation's whole chain; element 0 is the first command."""
        definition, rule = self.command_rule(manager, operation)
        return render_chain(
            definition.binary, rule, command_input or CommandInput(), self.registry.validators
        )


def render_chain(
    binary: str,
    rule: CommandRule,
    command_input: CommandInput,
    validators: Mapping[str, Validator] | None = None,
) -> list[list[str]]:
    """Render ``rule`` followed by each of its ``then`` steps, same input for all."""
    commands = [render_command(binary, rule, command_input, validators)]
    for step in rule.then:
        commands.append(render_command(binary, step, command_input, validators))
    return commands


def render_command(
    binary: str,
    rule: CommandRule,
    command_input: CommandInput,
    validators: Mapping[str, Validator] | None = None,
) -> list[str]:
    """Render a single command rule. Pure function of its arguments."""
    tokens = [binary]

    base, override_flag = _select_base(rule, command_input)
    tokens.extend(base)

    package_index = _render_args(tokens, rule, command_input, validators)

    version_rule = rule.arg(VERSION_ARG)
    version = command_input.args.get(VERSION_ARG, "")
    if version_rule is not None and version_rule.suffix and version and package_index is not None:
        tokens[package_index] += version_rule.suffix + version

    tokens.extend(rule.default_flags)

    declared = {name for name, _ in rule.flags}
    for name, flag_rule in rule.flags:
        if name == override_flag:
            continue
        value = command_input.flag(name)
        if value is None or not value.is_active:
            continue
        tokens.extend(expand_flag(flag_rule, command_input))

    overrides = {name for name, _ in rule.base_overrides}
    for name in command_input.flags:
        if name not in declared and name not in overrides:
            logger.debug("Ignoring flag %r: no rule for it in this command", name)

    tokens.extend(command_input.extra)
    return tokens


def expand_flag(flag_rule: FlagRule, command_input: CommandInput) -> list[str]:
    """Expand one flag rule; tokens whose referenced value is missing add nothing."""
    expanded: list[str] = []
    for token in flag_rule.tokens:
        if token.literal and token.field and token.join:
            text = _flag_text(command_input, token.field)
            if text is not None:
                expanded.append(token.literal + token.join + text)
        elif token.literal:
            expanded.append(token.literal)
        elif token.field:
            text = _flag_text(command_input, token.field)
            if text is not None:
                expanded.append(text)
    return expanded


def _select_base(rule: CommandRule, command_input: CommandInput) -> tuple[tuple[str, ...], str]:
    """Return the base tokens and the name of the override flag used ("" if none)."""
    for flag_name, override in rule.base_overrides:
        value = command_input.flag(flag_name)
        if value is not None and value.is_active:
            return override, flag_name
    return rule.base, ""


def _render_args(
    tokens: list[str],
    rule: CommandRule,
    command_input: CommandInput,
    validators: Mapping[str, Validator] | None,
) -> int | None:
    """Append rendered args to ``tokens``; return the package token's index."""
    package_index: int | None = None
    for name, arg in rule.args:
        value = command_input.args.get(name, "")
        if not value:
            if arg.required:
                raise MissingArgumentError(name)
            continue

        if arg.validate:
            validate(arg.validate, value, validators)

        if arg.flag:
            tokens.extend((arg.flag, value))
        elif arg.fixed_suffix:
            tokens.append(value + arg.fixed_suffix)
        elif name == VERSION_ARG and arg.suffix:
            # Applied to the package token once all args are rendered.
            continue
        elif arg.extraction_only:
            continue
        else:
            tokens.append(value)
            if name == PACKAGE_ARG:
                package_index = len(tokens) - 1
    return package_index


def _flag_text(command_input: CommandInput, name: str) -> str | None:
    value = command_input.flag(name)
    return value.text if value is not None else None
