"""Exception hierarchy for pkgmanagers.

All exceptions inherit from PkgManagersError (single catch point).
Each failure kind is its own class so callers can tell them apart;
messages are written to be actionable without a stack trace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pkgmanagers.models import Result


class PkgManagersError(Exception):
    """Base exception for all pkgmanagers errors."""


class DefinitionError(PkgManagersError):
    """A manager definition document could not be loaded or parsed."""


# ─── Translation ─────────────────────────────────────────────


class UnknownManagerError(PkgManagersError):
    """No definition is registered under the requested manager name."""

    def __init__(self, manager: str) -> None:
        self.manager = manager
        super().__init__(f"Unknown manager: {manager}")


class UnsupportedOperationError(PkgManagersError):
    """The manager exists but has no rule for the requested operation."""

    def __init__(self, manager: str, operation: str) -> None:
        self.manager = manager
        self.operation = operation
        super().__init__(f"Operation '{operation}' is not supported by {manager}")


class MissingArgumentError(PkgManagersError):
    """A required argument had no corresponding input value."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"Missing required argument: {argument}")


class InvalidValueError(PkgManagersError):
    """A value failed its named validator before being put on a command line."""

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid package name {value!r}: {reason}")


# ─── Extraction ──────────────────────────────────────────────


class ExtractionError(PkgManagersError):
    """Command output could not be parsed per the declared extract rule.

    ``result`` is filled in by callers that executed a command first, so the
    raw output is never lost when parsing fails.
    """

    def __init__(self, kind: str, cause: str) -> None:
        self.kind = kind
        self.cause = cause
        self.result: Result | None = None
        super().__init__(f"{kind} extraction failed: {cause}")


class UnknownExtractTypeError(ExtractionError):
    """A definition declares an extract type this package does not implement."""

    def __init__(self, kind: str) -> None:
        super().__init__(kind, f"unknown extract type: {kind}")


# ─── Execution ───────────────────────────────────────────────


class NoCommandError(PkgManagersError):
    """An empty argument vector was handed to a runner."""

    def __init__(self) -> None:
        super().__init__("No command provided")


class CommandNotFoundError(PkgManagersError):
    """The executable at the head of the argument vector does not exist."""

    def __init__(self, binary: str) -> None:
        self.binary = binary
        super().__init__(f"{binary} not found. Install it or add it to PATH.")


# ─── Detection ───────────────────────────────────────────────


class NoManifestError(PkgManagersError):
    """No lockfile or manifest of any known manager was found."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        super().__init__(f"No package manifest found in {directory}")


class ConflictingLockfilesError(PkgManagersError):
    """Lockfiles of more than one manager sit in the same directory."""

    def __init__(self, directory: str, lockfiles: list[str]) -> None:
        self.directory = directory
        self.lockfiles = lockfiles
        super().__init__(
            f"Multiple lockfiles in {directory}: {', '.join(lockfiles)}. "
            "Remove all but one or specify the manager explicitly."
        )


class CLINotFoundError(PkgManagersError):
    """The manager was detected but its binary is not on PATH."""

    def __init__(self, manager: str, binary: str, files: list[str]) -> None:
        self.manager = manager
        self.binary = binary
        self.files = files
        detected_from = ", ".join(files) if files else "explicit selection"
        super().__init__(
            f"{binary} not found (detected from {detected_from}). "
            f"Install {manager} or add it to PATH."
        )


# ─── Policy ──────────────────────────────────────────────────


class PolicyViolationError(PkgManagersError):
    """A policy denied the operation in enforce mode."""

    def __init__(self, policy: str, reason: str, command: list[str]) -> None:
        self.policy = policy
        self.reason = reason
        self.command = command
        super().__init__(f"Policy '{policy}' denied `{' '.join(command)}`: {reason}")


class PolicyCheckError(PkgManagersError):
    """A policy raised while evaluating an operation."""

    def __init__(self, policy: str, cause: BaseException) -> None:
        self.policy = policy
        self.cause = cause
        super().__init__(f"Policy '{policy}' check failed: {cause}")
