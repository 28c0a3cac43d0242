"""Named validators applied to user values before they reach a command line."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pkgmanagers.errors import InvalidValueError

FALLBACK_VALIDATOR = "package_name"


@dataclass(frozen=True, slots=True)
class Validator:
    """A maximum length (0 = unlimited) and a pattern the whole value must match.

    An empty pattern means the generic package-name pattern.
    """

    pattern: str = ""
    max_length: int = 0

    def compiled(self) -> re.Pattern[str]:
        return re.compile(self.pattern or DEFAULT_VALIDATORS[FALLBACK_VALIDATOR].pattern, re.ASCII)


DEFAULT_VALIDATORS: Mapping[str, Validator] = MappingProxyType(
    {
        "package_name": Validator(r"[@a-zA-Z0-9][\w./-]*", 214),
        "npm_package": Validator(r"(@[a-z0-9~-][a-z0-9._~-]*/)?[a-z0-9~-][a-z0-9._~-]*", 214),
        "gem_name": Validator(r"[a-zA-Z0-9_-]+", 128),
        "cargo_crate": Validator(r"[a-zA-Z][a-zA-Z0-9_-]*", 64),
        "go_module": Validator(r"[a-zA-Z0-9][\w./-]*", 256),
        "maven_artifact": Validator(r"[a-zA-Z0-9._-]+:[a-zA-Z0-9._-]+"),
    }
)


def validate(
    name: str,
    value: str,
    validators: Mapping[str, Validator] | None = None,
) -> None:
    """Check ``value`` against the validator called ``name``.

    Checks run in order: empty value, length, pattern; the first failure is
    reported. ``validators`` entries take precedence over the built-ins. An
    unknown name gets the package_name pattern and no length limit.

    Raises:
        InvalidValueError: With the value and the failing reason.
    """
    if not value:
        raise InvalidValueError(value, "empty name")

    rule = (validators or {}).get(name) or DEFAULT_VALIDATORS.get(name)
    if rule is None:
        rule = Validator(pattern=DEFAULT_VALIDATORS[FALLBACK_VALIDATOR].pattern)

    if rule.max_length and len(value) > rule.max_length:
        raise InvalidValueError(value, f"exceeds maximum length of {rule.max_length}")

    if rule.compiled().fullmatch(value) is None:
        raise InvalidValueError(value, "contains invalid characters")
