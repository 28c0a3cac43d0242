"""Domain models for pkgmanagers. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

# ─── Enumerations ─────────────────────────────────────────────


class Capability(StrEnum):
    INSTALL = "install"
    INSTALL_FROZEN = "install_frozen"
    INSTALL_CLEAN = "install_clean"
    ADD = "add"
    ADD_DEV = "add_dev"
    ADD_OPTIONAL = "add_optional"
    REMOVE = "remove"
    UPDATE = "update"
    LIST = "list"
    OUTDATED = "outdated"
    AUDIT = "audit"
    WORKSPACE = "workspace"
    JSON_OUTPUT = "json_output"
    SBOM_CYCLONEDX = "sbom_cyclonedx"
    SBOM_SPDX = "sbom_spdx"
    PATH = "path"


class ExtractKind(StrEnum):
    RAW = "raw"
    JSON = "json"
    LINE_PREFIX = "line_prefix"
    REGEX = "regex"
    JSON_ARRAY = "json_array"
    TEMPLATE = "template"


class ExecContext(StrEnum):
    PROJECT = "project"
    GLOBAL = "global"
    WORKSPACE = "workspace"


class ConflictBehavior(StrEnum):
    ERROR = "error"
    FIRST = "first"
    NEWEST = "newest"


class PolicyMode(StrEnum):
    ENFORCE = "enforce"
    WARN = "warn"
    DISABLED = "disabled"


# ─── Extract rules ────────────────────────────────────────────
# One dataclass per extraction strategy. The set is closed: the extractor
# matches on these classes and nothing else.


@dataclass(frozen=True, slots=True)
class RawExtract:
    """Return the whole output, trimmed."""

    strip_filename: bool = False
    kind: ExtractKind = field(default=ExtractKind.RAW, init=False)


@dataclass(frozen=True, slots=True)
class JsonFieldExtract:
    """Read one string field from a JSON object."""

    field: str
    strip_filename: bool = False
    kind: ExtractKind = field(default=ExtractKind.JSON, init=False)


@dataclass(frozen=True, slots=True)
class LinePrefixExtract:
    """Take the remainder of the first line starting with ``prefix``."""

    prefix: str
    strip_filename: bool = False
    kind: ExtractKind = field(default=ExtractKind.LINE_PREFIX, init=False)


@dataclass(frozen=True, slots=True)
class RegexExtract:
    """Take the first capture group of ``pattern``."""

    pattern: str
    strip_filename: bool = False
    kind: ExtractKind = field(default=ExtractKind.REGEX, init=False)


@dataclass(frozen=True, slots=True)
class JsonArrayExtract:
    """Find the element of ``array_field`` whose ``match_field`` is the package."""

    array_field: str
    match_field: str
    extract_field: str
    strip_filename: bool = False
    kind: ExtractKind = field(default=ExtractKind.JSON_ARRAY, init=False)


@dataclass(frozen=True, slots=True)
class TemplateExtract:
    """Substitute the package name into ``pattern``; output is ignored."""

    pattern: str
    strip_filename: bool = False
    kind: ExtractKind = field(default=ExtractKind.TEMPLATE, init=False)


ExtractRule = (
    RawExtract
    | JsonFieldExtract
    | LinePrefixExtract
    | RegexExtract
    | JsonArrayExtract
    | TemplateExtract
)


# ─── Definition Models ────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ArgRule:
    """How one logical argument (e.g. "package") is rendered into tokens."""

    position: int = 0
    required: bool = False
    validate: str = ""
    flag: str = ""
    suffix: str = ""
    fixed_suffix: str = ""
    extraction_only: bool = False


@dataclass(frozen=True, slots=True)
class FlagToken:
    """One element of a flag expansion.

    A literal alone is emitted verbatim. A field alone is replaced by the
    named input flag's value. Literal + field + join renders
    ``literal + join + value`` (e.g. ``--group=development``).
    """

    literal: str = ""
    field: str = ""
    join: str = ""


@dataclass(frozen=True, slots=True)
class FlagRule:
    tokens: tuple[FlagToken, ...] = ()


@dataclass(frozen=True, slots=True)
class CommandRule:
    """Rules for one (manager, operation) pair.

    ``base_overrides``, ``args`` and ``flags`` are ordered pairs so that
    rendering never depends on mapping iteration order.
    """

    base: tuple[str, ...] = ()
    base_overrides: tuple[tuple[str, tuple[str, ...]], ...] = ()
    args: tuple[tuple[str, ArgRule], ...] = ()
    flags: tuple[tuple[str, FlagRule], ...] = ()
    default_flags: tuple[str, ...] = ()
    exit_codes: dict[int, str] = field(default_factory=dict)
    then: tuple[CommandRule, ...] = ()
    extract: ExtractRule | None = None

    def arg(self, name: str) -> ArgRule | None:
        for arg_name, rule in self.args:
            if arg_name == name:
                return rule
        return None

    def flag(self, name: str) -> FlagRule | None:
        for flag_name, rule in self.flags:
            if flag_name == name:
                return rule
        return None


@dataclass(frozen=True, slots=True)
class FileCheck:
    file: str
    exists: bool = False
    match: str = ""
    version: str = ""


@dataclass(frozen=True, slots=True)
class Detection:
    """Hints the Detector uses to pick this manager for a directory."""

    lockfiles: tuple[str, ...] = ()
    manifests: tuple[str, ...] = ()
    priority: int = 0
    file_checks: tuple[FileCheck, ...] = ()


@dataclass(frozen=True, slots=True)
class VersionDetection:
    command: tuple[str, ...] = ()
    pattern: str = ""


@dataclass(frozen=True, slots=True)
class Definition:
    """Declarative description of one package manager's command grammar."""

    name: str
    binary: str
    ecosystem: str = ""
    version: str = ""
    status: str = ""
    min_tested: str = ""
    max_tested: str = ""
    detection: Detection = field(default_factory=Detection)
    version_detection: VersionDetection = field(default_factory=VersionDetection)
    commands: dict[str, CommandRule] = field(default_factory=dict)
    capabilities: tuple[str, ...] = ()

    def command(self, operation: str) -> CommandRule | None:
        return self.commands.get(operation)

    def supports(self, capability: Capability | str) -> bool:
        return str(capability) in self.capabilities


# ─── Request Models ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FlagValue:
    """A caller-supplied flag value: bool, string, or another scalar.

    ``is_active`` decides whether the flag participates in a build:
    ``False``, ``""`` and ``None`` are treated as absent.
    """

    value: bool | str | int | float | None = None

    @classmethod
    def of(cls, raw: object) -> FlagValue:
        if isinstance(raw, FlagValue):
            return raw
        if raw is None or isinstance(raw, bool | str | int | float):
            return cls(raw)
        raise TypeError(f"Unsupported flag value type: {type(raw).__name__}")

    @property
    def is_active(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value, bool):
            return self.value
        if isinstance(self.value, str):
            return self.value != ""
        return True

    @property
    def text(self) -> str | None:
        """Text substituted into a flag expansion, or None when there is none."""
        if self.value is None or isinstance(self.value, bool):
            return None
        text = str(self.value)
        return text or None


@dataclass(frozen=True, slots=True)
class CommandInput:
    """A generic operation request: named args, named flags, raw trailing tokens."""

    args: dict[str, str] = field(default_factory=dict)
    flags: dict[str, FlagValue] = field(default_factory=dict)
    extra: list[str] = field(default_factory=list)

    @classmethod
    def of(
        cls,
        args: Mapping[str, str] | None = None,
        flags: Mapping[str, object] | None = None,
        extra: Iterable[str] | None = None,
    ) -> CommandInput:
        return cls(
            args=dict(args or {}),
            flags={name: FlagValue.of(value) for name, value in (flags or {}).items()},
            extra=list(extra or []),
        )

    def flag(self, name: str) -> FlagValue | None:
        value = self.flags.get(name)
        if value is None:
            return None
        return FlagValue.of(value)

    def packages(self) -> list[str]:
        package = self.args.get("package", "")
        return [package] if package else []


@dataclass(frozen=True, slots=True)
class InstallOptions:
    frozen: bool = False
    clean: bool = False
    production: bool = False


@dataclass(frozen=True, slots=True)
class AddOptions:
    dev: bool = False
    optional: bool = False
    exact: bool = False
    workspace: str = ""


# ─── Execution Models ─────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Result:
    """Captured outcome of one executed argument vector."""

    command: list[str]
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration: float = 0.0
    cwd: str = ""
    context: ExecContext = ExecContext.PROJECT

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class PathResult:
    path: str
    result: Result


# ─── Policy Models ────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PolicyOperation:
    """What a policy sees before a command runs."""

    command: list[str]
    manager: str = ""
    operation: str = ""
    packages: list[str] = field(default_factory=list)
    args: dict[str, str] = field(default_factory=dict)
    flags: dict[str, object] = field(default_factory=dict)
    working_dir: str = ""


@dataclass(frozen=True, slots=True)
class PolicyResult:
    allowed: bool
    reason: str = ""
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, object] = field(default_factory=dict)


# ─── Tool Return Models ───────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ManagerSummary:
    name: str
    binary: str
    ecosystem: str
    operations: list[str]
    capabilities: list[str]
    lockfiles: list[str]
    manifests: list[str]


@dataclass(frozen=True, slots=True)
class TranslateResult:
    success: bool
    manager: str
    operation: str
    message: str = ""
    commands: list[list[str]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DetectResult:
    success: bool
    directory: str
    message: str = ""
    manager: str = ""
    binary: str = ""
    ecosystem: str = ""
    detected_from: list[str] = field(default_factory=list)
    version: str = ""


@dataclass(frozen=True, slots=True)
class RunResult:
    success: bool
    manager: str
    operation: str
    message: str
    command: list[str] = field(default_factory=list)
    exit_code: int | None = None
    exit_meaning: str = ""
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    path: str = ""
