"""Manager detection -- pick a package manager from a directory's files.

Lockfiles are the strongest signal: a lockfile names exactly one manager.
Manifests are shared (package.json serves npm, pnpm, yarn and bun), so a
manifest-only directory goes to the highest-priority definition that
declares it. Names may be glob patterns (``*.csproj``).
"""

from __future__ import annotations

import fnmatch
import logging
import re
import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from pkgmanagers.errors import (
    CLINotFoundError,
    ConflictingLockfilesError,
    NoManifestError,
)
from pkgmanagers.manager.base import Manager
from pkgmanagers.manager.generic import GenericManager
from pkgmanagers.models import ConflictBehavior, Definition
from pkgmanagers.runner.base import Runner
from pkgmanagers.translator.builder import Translator

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True, slots=True)
class DetectOptions:
    require_cli: bool = False
    on_conflict: ConflictBehavior = ConflictBehavior.ERROR
    manager: str = ""


@dataclass(frozen=True, slots=True)
class DetectedManager:
    """The chosen definition and the files that selected it."""

    definition: Definition
    files: list[str] = field(default_factory=list)


# ─── Pure selection ───────────────────────────────────────────


def choose_definition(
    filenames: Iterable[str],
    definitions: Iterable[Definition],
    on_conflict: ConflictBehavior = ConflictBehavior.ERROR,
    mtimes: Mapping[str, float] | None = None,
    directory: str = ".",
) -> DetectedManager:
    """Choose a definition for a directory listing.

    Args:
        filenames: Names of the files in the directory.
        definitions: Candidates; ordered by descending priority here, ties
            keeping the given order.
        on_conflict: What to do when lockfiles of several managers exist.
        mtimes: Modification times by file name, used by ``NEWEST``.
        directory: Only used in error messages.

    Raises:
        ConflictingLockfilesError: Several managers' lockfiles with ``ERROR``.
        NoManifestError: No lockfile or manifest matched.
    """
    names = sorted(set(filenames))
    ranked = sorted(definitions, key=lambda d: d.detection.priority, reverse=True)

    lockfile_matches: list[tuple[Definition, str]] = []
    for definition in ranked:
        for pattern in definition.detection.lockfiles:
            lockfile_matches.extend((definition, name) for name in _match(pattern, names))

    managers = {definition.name for definition, _ in lockfile_matches}
    if len(managers) > 1:
        found = [name for _, name in lockfile_matches]
        if on_conflict == ConflictBehavior.ERROR:
            raise ConflictingLockfilesError(directory, found)
        logger.info(
            "Multiple lockfiles in %s (%s); using %s", directory, ", ".join(found), on_conflict
        )

    if lockfile_matches:
        chosen, lockfile = lockfile_matches[0]
        if on_conflict == ConflictBehavior.NEWEST and mtimes:
            newest = lockfile_matches[0]
            for candidate in lockfile_matches[1:]:
                if mtimes.get(candidate[1], 0.0) > mtimes.get(newest[1], 0.0):
                    newest = candidate
            chosen, lockfile = newest
        return DetectedManager(definition=chosen, files=[lockfile])

    for definition in ranked:
        for pattern in definition.detection.manifests:
            matched = _match(pattern, names)
            if matched:
                return DetectedManager(definition=definition, files=matched[:1])

    raise NoManifestError(directory)


def _match(pattern: str, names: list[str]) -> list[str]:
    if _GLOB_CHARS.intersection(pattern):
        return [name for name in names if fnmatch.fnmatchcase(name, pattern)]
    return [pattern] if pattern in names else []


# ─── Detector ────────────────────────────────────────────────


class Detector:
    """Builds GenericManagers for directories from a Translator's registry."""

    def __init__(self, translator: Translator, runner: Runner) -> None:
        self.translator = translator
        self.runner = runner

    def detect_definition(
        self, directory: str, options: DetectOptions | None = None
    ) -> DetectedManager:
        """Pick the definition for ``directory`` without building a manager.

        An explicit ``options.manager`` skips the directory scan.

        Raises:
            UnknownManagerError: The explicit manager is not registered.
            ConflictingLockfilesError: See choose_definition.
            NoManifestError: Nothing matched, or ``directory`` does not exist.
        """
        options = options or DetectOptions()
        if options.manager:
            return DetectedManager(definition=self.translator.registry.get(options.manager))

        root = Path(directory)
        if not root.is_dir():
            raise NoManifestError(directory)

        entries = [entry for entry in root.iterdir() if entry.is_file()]
        mtimes: dict[str, float] = {}
        if options.on_conflict == ConflictBehavior.NEWEST:
            mtimes = {entry.name: entry.stat().st_mtime for entry in entries}

        detection = choose_definition(
            (entry.name for entry in entries),
            self.translator.registry.definitions(),
            on_conflict=options.on_conflict,
            mtimes=mtimes,
            directory=directory,
        )
        logger.info(
            "Detected %s in %s from %s",
            detection.definition.name,
            directory,
            ", ".join(detection.files),
        )
        return detection

    def detect(self, directory: str, options: DetectOptions | None = None) -> Manager:
        """Detect the manager for ``directory`` and bind it there.

        The binary must be on PATH when ``options.require_cli`` is set or
        the manager was named explicitly.

        Raises:
            CLINotFoundError: The binary is required but not installed.
        """
        options = options or DetectOptions()
        detection = self.detect_definition(directory, options)
        definition = detection.definition

        if (options.require_cli or options.manager) and shutil.which(definition.binary) is None:
            raise CLINotFoundError(definition.name, definition.binary, detection.files)

        return GenericManager(definition, directory, self.translator, self.runner)

    async def detect_version(self, definition: Definition, directory: str = ".") -> str:
        """Installed version of the manager's tool, or "" if it cannot tell.

        With no pattern (or no match) the trimmed output is returned.
        """
        command = definition.version_detection.command
        if not command:
            return ""

        result = await self.runner.run(directory, [definition.binary, *command])
        if not result.success:
            logger.info(
                "%s version check exited %d: %s",
                definition.name,
                result.exit_code,
                result.stderr.strip(),
            )
            return ""

        output = result.stdout
        pattern = definition.version_detection.pattern
        if pattern:
            found = re.search(pattern, output)
            if found is not None and found.groups():
                return found.group(1)
        return output.strip()
