"""Read-only set of manager definitions and validators shared by translators."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from pkgmanagers.definitions.loader import load_builtin_definitions, load_definitions_dir
from pkgmanagers.errors import UnknownManagerError
from pkgmanagers.models import Definition
from pkgmanagers.translator.validate import Validator

logger = logging.getLogger(__name__)


class DefinitionRegistry:
    """Definitions keyed by manager name, plus any custom validators.

    Built once and never mutated; ``with_*`` methods return a new registry.
    Later definitions with the same name replace earlier ones.
    """

    __slots__ = ("_definitions", "_validators")

    def __init__(
        self,
        definitions: Iterable[Definition] = (),
        validators: Mapping[str, Validator] | None = None,
    ) -> None:
        by_name: dict[str, Definition] = {}
        for definition in definitions:
            by_name[definition.name] = definition
        self._definitions: Mapping[str, Definition] = MappingProxyType(by_name)
        self._validators: Mapping[str, Validator] = MappingProxyType(dict(validators or {}))

    @classmethod
    def from_builtin(cls, extra_dir: Path | str = "") -> DefinitionRegistry:
        """Registry of the bundled presets, overridden by ``extra_dir`` files."""
        definitions = load_builtin_definitions()
        if extra_dir:
            definitions.extend(load_definitions_dir(extra_dir))
        registry = cls(definitions)
        logger.info("Registered %d manager definitions", len(registry))
        return registry

    def get(self, name: str) -> Definition:
        """Return the definition for ``name``.

        Raises:
            UnknownManagerError: If nothing is registered under that name.
        """
        try:
            return self._definitions[name]
        except KeyError:
            raise UnknownManagerError(name) from None

    def names(self) -> list[str]:
        return sorted(self._definitions)

    def definitions(self) -> list[Definition]:
        """All definitions, ordered by name."""
        return [self._definitions[name] for name in self.names()]

    @property
    def validators(self) -> Mapping[str, Validator]:
        return self._validators

    def with_validator(self, name: str, validator: Validator) -> DefinitionRegistry:
        return DefinitionRegistry(
            self._definitions.values(), {**self._validators, name: validator}
        )

    def with_definitions(self, definitions: Iterable[Definition]) -> DefinitionRegistry:
        return DefinitionRegistry(
            [*self._definitions.values(), *definitions], self._validators
        )

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._definitions)
