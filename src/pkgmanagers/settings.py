"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypeVar

from pkgmanagers.models import ConflictBehavior, PolicyMode

logger = logging.getLogger(__name__)

_E = TypeVar("_E", PolicyMode, ConflictBehavior)

_PREFIX = "PKGMANAGERS_"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_DEFAULT_TIMEOUT = 300.0
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class Settings:
    policy_mode: PolicyMode = PolicyMode.ENFORCE
    timeout: float = _DEFAULT_TIMEOUT
    definitions_dir: str = ""
    blocklist: dict[str, str] = field(default_factory=dict)
    on_conflict: ConflictBehavior = ConflictBehavior.ERROR
    require_cli: bool = False
    log_level: str = "WARNING"


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``PKGMANAGERS_*`` variables.

    Unparseable values are reported with a warning and replaced by the default.
    """
    source = env if env is not None else os.environ

    def get(name: str) -> str:
        return source.get(_PREFIX + name, "").strip()

    return Settings(
        policy_mode=_parse_enum("POLICY_MODE", PolicyMode, get("POLICY_MODE"), PolicyMode.ENFORCE),
        timeout=_parse_timeout(get("TIMEOUT")),
        definitions_dir=get("DEFINITIONS_DIR"),
        blocklist=_parse_blocklist(get("BLOCKLIST")),
        on_conflict=_parse_enum(
            "ON_CONFLICT", ConflictBehavior, get("ON_CONFLICT"), ConflictBehavior.ERROR
        ),
        require_cli=get("REQUIRE_CLI").lower() in _TRUE_VALUES,
        log_level=_parse_log_level(get("LOG_LEVEL")),
    )


def _parse_enum(variable: str, enum_cls: type[_E], raw: str, default: _E) -> _E:
    if not raw:
        return default
    try:
        return enum_cls(raw.lower())
    except ValueError:
        logger.warning(
            "Ignoring %s%s=%r; expected one of %s",
            _PREFIX,
            variable,
            raw,
            ", ".join(member.value for member in enum_cls),
        )
        return default


def _parse_timeout(raw: str) -> float:
    if not raw:
        return _DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %sTIMEOUT=%r; not a number", _PREFIX, raw)
        return _DEFAULT_TIMEOUT
    if value <= 0:
        logger.warning("Ignoring %sTIMEOUT=%r; must be positive", _PREFIX, raw)
        return _DEFAULT_TIMEOUT
    return value


def _parse_blocklist(raw: str) -> dict[str, str]:
    """Parse ``name`` or ``name=reason`` entries separated by commas."""
    blocked: dict[str, str] = {}
    for entry in raw.split(","):
        name, _, reason = entry.partition("=")
        name = name.strip()
        if not name:
            continue
        blocked[name] = reason.strip() or "blocked by configuration"
    return blocked


def _parse_log_level(raw: str) -> str:
    level = raw.upper()
    if level in _LOG_LEVELS:
        return level
    if raw:
        logger.warning("Ignoring %sLOG_LEVEL=%r", _PREFIX, raw)
    return "WARNING"
