"""Load manager definitions from YAML files or built-in presets."""

from __future__ import annotations

import importlib.resources
import logging
from pathlib import Path

import yaml

from pkgmanagers.errors import DefinitionError, PkgManagersError
from pkgmanagers.extractor.rules import parse_extract_rule
from pkgmanagers.models import (
    ArgRule,
    CommandRule,
    Definition,
    Detection,
    FileCheck,
    FlagRule,
    FlagToken,
    VersionDetection,
)

logger = logging.getLogger(__name__)

_PRESETS = "presets"
_SUFFIXES = (".yaml", ".yml")


def load_definition(name_or_path: str) -> Definition:
    """Load a definition by built-in manager name or file path.

    Args:
        name_or_path: Either a built-in manager name (e.g. "npm")
            or a path to a .yaml/.yml file.

    Returns:
        Parsed Definition.

    Raises:
        DefinitionError: If the definition cannot be found or parsed.
    """
    path = Path(name_or_path)
    if path.suffix in _SUFFIXES or path.exists():
        return _load_from_file(path)

    if name_or_path in builtin_names():
        return _load_builtin(name_or_path)

    raise DefinitionError(
        f"Unknown manager definition '{name_or_path}'. "
        f"Built-in definitions: {', '.join(builtin_names())}. "
        "Or provide a path to a .yaml file."
    )


def builtin_names() -> list[str]:
    """Names of the bundled definitions (file stems), sorted."""
    presets = importlib.resources.files("pkgmanagers.definitions") / _PRESETS
    return sorted(
        entry.name.rsplit(".", 1)[0]
        for entry in presets.iterdir()
        if entry.is_file() and entry.name.endswith(_SUFFIXES)
    )


def load_builtin_definitions() -> list[Definition]:
    """Load every bundled definition, in file-name order."""
    return [_load_builtin(name) for name in builtin_names()]


def load_definitions_dir(directory: Path | str) -> list[Definition]:
    """Load every .yaml/.yml definition in ``directory`` (non-recursive)."""
    root = Path(directory)
    if not root.is_dir():
        raise DefinitionError(f"Definitions directory not found: {root}")
    definitions = [
        _load_from_file(path)
        for path in sorted(root.iterdir())
        if path.is_file() and path.suffix in _SUFFIXES
    ]
    logger.info("Loaded %d definitions from %s", len(definitions), root)
    return definitions


def _load_builtin(name: str) -> Definition:
    """Load a built-in definition from package resources."""
    presets = importlib.resources.files("pkgmanagers.definitions") / _PRESETS
    for suffix in _SUFFIXES:
        ref = presets / f"{name}{suffix}"
        if ref.is_file():
            break
    else:
        raise DefinitionError(f"Built-in definition '{name}' not found.")
    try:
        return parse_definition(ref.read_text(encoding="utf-8"), source=f"builtin:{name}")
    except PkgManagersError:
        raise
    except Exception as exc:
        raise DefinitionError(f"Failed to load built-in definition '{name}': {exc}") from exc


def _load_from_file(path: Path) -> Definition:
    """Load a definition from a YAML file on disk."""
    if not path.exists():
        raise DefinitionError(f"Definition file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        return parse_definition(text, source=str(path))
    except PkgManagersError:
        raise
    except Exception as exc:
        raise DefinitionError(f"Failed to parse definition file '{path}': {exc}") from exc


def parse_definition(text: str, source: str = "") -> Definition:
    """Parse YAML text into a Definition.

    Mapping order in the document is preserved for args, flags and
    base_overrides; that order drives command rendering.
    """
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise DefinitionError(f"Invalid definition format in {source}: expected a YAML mapping.")

    name = str(data.get("name", "")).strip()
    binary = str(data.get("binary", "")).strip()
    if not name or not binary:
        raise DefinitionError(f"Invalid definition in {source}: 'name' and 'binary' are required.")

    commands_data = data.get("commands") or {}
    if not isinstance(commands_data, dict):
        raise DefinitionError(f"Invalid definition in {source}: 'commands' must be a mapping.")

    commands = {
        str(operation): _parse_command(entry, f"{source}:{operation}")
        for operation, entry in commands_data.items()
    }

    return Definition(
        name=name,
        binary=binary,
        ecosystem=str(data.get("ecosystem", "")),
        version=str(data.get("version", "")),
        status=str(data.get("status", "")),
        min_tested=str(data.get("min_tested", "")),
        max_tested=str(data.get("max_tested", "")),
        detection=_parse_detection(data.get("detection") or {}, source),
        version_detection=_parse_version_detection(data.get("version_detection") or {}),
        commands=commands,
        capabilities=tuple(str(c) for c in data.get("capabilities") or ()),
    )


def _parse_detection(data: object, source: str) -> Detection:
    if not isinstance(data, dict):
        raise DefinitionError(f"Invalid definition in {source}: 'detection' must be a mapping.")
    checks = tuple(
        FileCheck(
            file=str(entry.get("file", "")),
            exists=bool(entry.get("exists", False)),
            match=str(entry.get("match", "")),
            version=str(entry.get("version", "")),
        )
        for entry in data.get("file_checks") or ()
        if isinstance(entry, dict)
    )
    return Detection(
        lockfiles=_str_tuple(data.get("lockfiles")),
        manifests=_str_tuple(data.get("manifests")),
        priority=int(data.get("priority", 0)),
        file_checks=checks,
    )


def _parse_version_detection(data: dict) -> VersionDetection:
    return VersionDetection(
        command=_str_tuple(data.get("command")),
        pattern=str(data.get("pattern", "")),
    )


def _parse_command(data: object, source: str) -> CommandRule:
    """Parse one command rule, recursing into its ``then`` chain."""
    if not isinstance(data, dict):
        raise DefinitionError(f"Invalid command in {source}: expected a mapping.")

    overrides_data = data.get("base_overrides") or {}
    args_data = data.get("args") or {}
    flags_data = data.get("flags") or {}
    for key, value in (
        ("base_overrides", overrides_data),
        ("args", args_data),
        ("flags", flags_data),
    ):
        if not isinstance(value, dict):
            raise DefinitionError(f"Invalid command in {source}: '{key}' must be a mapping.")

    declared_args = [
        (str(arg_name), _parse_arg(entry, f"{source}.{arg_name}"))
        for arg_name, entry in args_data.items()
    ]
    # Stable sort: equal positions keep their declared order.
    declared_args.sort(key=lambda pair: pair[1].position)

    extract_data = data.get("extract")
    return CommandRule(
        base=_str_tuple(data.get("base")),
        base_overrides=tuple(
            (str(flag_name), _str_tuple(tokens)) for flag_name, tokens in overrides_data.items()
        ),
        args=tuple(declared_args),
        flags=tuple(
            (str(flag_name), _parse_flag(entry, f"{source}.{flag_name}"))
            for flag_name, entry in flags_data.items()
        ),
        default_flags=_str_tuple(data.get("default_flags")),
        exit_codes={
            int(code): str(meaning) for code, meaning in (data.get("exit_codes") or {}).items()
        },
        then=tuple(
            _parse_command(entry, f"{source}.then[{index}]")
            for index, entry in enumerate(data.get("then") or ())
        ),
        extract=parse_extract_rule(extract_data) if extract_data else None,
    )


def _parse_arg(data: object, source: str) -> ArgRule:
    if data is None:
        return ArgRule()
    if not isinstance(data, dict):
        raise DefinitionError(f"Invalid arg in {source}: expected a mapping.")
    return ArgRule(
        position=int(data.get("position", 0)),
        required=bool(data.get("required", False)),
        validate=str(data.get("validate", "")),
        flag=str(data.get("flag", "")),
        suffix=str(data.get("suffix", "")),
        fixed_suffix=str(data.get("fixed_suffix", "")),
        extraction_only=bool(data.get("extraction_only", False)),
    )


def _parse_flag(data: object, source: str) -> FlagRule:
    """Parse a flag expansion list.

    Plain strings are literals; ``{value: name}`` substitutes an input flag;
    ``{literal: "--x", value: name, join: "="}`` renders ``--x=<value>``.
    """
    if isinstance(data, str):
        data = [data]
    if not isinstance(data, list):
        raise DefinitionError(f"Invalid flag in {source}: expected a list.")

    tokens: list[FlagToken] = []
    for entry in data:
        if isinstance(entry, str):
            tokens.append(FlagToken(literal=entry))
        elif isinstance(entry, dict) and (entry.get("value") or entry.get("literal")):
            tokens.append(
                FlagToken(
                    literal=str(entry.get("literal", "")),
                    field=str(entry.get("value", "")),
                    join=str(entry.get("join", "")),
                )
            )
        else:
            raise DefinitionError(f"Invalid flag token in {source}: {entry!r}")
    return FlagRule(tokens=tuple(tokens))


def _str_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)
