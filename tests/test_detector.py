"""Tests for scanner/detector.py -- picking a package manager for a directory."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from pkgmanagers.definitions.loader import parse_definition
from pkgmanagers.errors import (
    CLINotFoundError,
    ConflictingLockfilesError,
    NoManifestError,
    UnknownManagerError,
)
from pkgmanagers.manager.generic import GenericManager
from pkgmanagers.models import ConflictBehavior, Result
from pkgmanagers.runner.recording import RecordingRunner
from pkgmanagers.scanner.detector import DetectOptions, Detector, choose_definition
from pkgmanagers.translator.builder import Translator
from pkgmanagers.translator.registry import DefinitionRegistry

_WHICH = "pkgmanagers.scanner.detector.shutil.which"


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_text("", encoding="utf-8")


def _detector(registry: DefinitionRegistry, runner: RecordingRunner | None = None) -> Detector:
    return Detector(Translator(registry), runner or RecordingRunner())


# ─── choose_definition ───────────────────────────────────────


class TestChooseDefinition:
    @pytest.mark.parametrize(
        ("files", "manager", "detected_from"),
        [
            (["package.json"], "npm", "package.json"),
            (["package.json", "package-lock.json"], "npm", "package-lock.json"),
            (["package.json", "pnpm-lock.yaml"], "pnpm", "pnpm-lock.yaml"),
            (["package.json", "yarn.lock"], "yarn", "yarn.lock"),
            (["package.json", "bun.lockb"], "bun", "bun.lockb"),
            (["pyproject.toml"], "uv", "pyproject.toml"),
            (["pyproject.toml", "poetry.lock"], "poetry", "poetry.lock"),
            (["requirements.txt"], "pip", "requirements.txt"),
            (["Gemfile", "Gemfile.lock"], "bundler", "Gemfile.lock"),
            (["mygem.gemspec"], "gem", "mygem.gemspec"),
            (["go.mod"], "gomod", "go.mod"),
            (["Cargo.toml", "Cargo.lock", "README.md"], "cargo", "Cargo.lock"),
            (["App.csproj"], "nuget", "App.csproj"),
            (["composer.json"], "composer", "composer.json"),
        ],
    )
    def test_picks_manager(self, registry: DefinitionRegistry, files, manager, detected_from):
        detected = choose_definition(files, registry.definitions())
        assert detected.definition.name == manager
        assert detected.files == [detected_from]

    def test_lockfile_beats_higher_priority_manifest(self, registry: DefinitionRegistry):
        detected = choose_definition(["package.json", "yarn.lock"], registry.definitions())
        assert detected.definition.name == "yarn"

    def test_two_lockfiles_of_one_manager_is_not_a_conflict(self, registry: DefinitionRegistry):
        detected = choose_definition(["bun.lock", "bun.lockb"], registry.definitions())
        assert detected.definition.name == "bun"

    def test_conflict_raises_by_default(self, registry: DefinitionRegistry):
        with pytest.raises(ConflictingLockfilesError) as exc_info:
            choose_definition(
                ["package-lock.json", "yarn.lock"], registry.definitions(), directory="/proj"
            )
        assert exc_info.value.lockfiles == ["package-lock.json", "yarn.lock"]
        assert "/proj" in str(exc_info.value)

    def test_conflict_first_uses_priority(self, registry: DefinitionRegistry):
        detected = choose_definition(
            ["yarn.lock", "package-lock.json"],
            registry.definitions(),
            on_conflict=ConflictBehavior.FIRST,
        )
        assert detected.definition.name == "npm"

    def test_conflict_newest_uses_mtime(self, registry: DefinitionRegistry):
        detected = choose_definition(
            ["package-lock.json", "yarn.lock"],
            registry.definitions(),
            on_conflict=ConflictBehavior.NEWEST,
            mtimes={"package-lock.json": 100.0, "yarn.lock": 200.0},
        )
        assert detected.definition.name == "yarn"
        assert detected.files == ["yarn.lock"]

    def test_nothing_matches(self, registry: DefinitionRegistry):
        with pytest.raises(NoManifestError, match="No package manifest found in /proj"):
            choose_definition(["README.md"], registry.definitions(), directory="/proj")

    def test_equal_priority_keeps_given_order(self):
        first = parse_definition("name: a\nbinary: a\ndetection:\n  manifests: [shared.txt]\n")
        second = parse_definition("name: b\nbinary: b\ndetection:\n  manifests: [shared.txt]\n")
        assert choose_definition(["shared.txt"], [first, second]).definition.name == "a"
        assert choose_definition(["shared.txt"], [second, first]).definition.name == "b"


# ─── Detector on real directories ────────────────────────────


class TestDetectDefinition:
    def test_detects_from_directory(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package.json", "pnpm-lock.yaml")
        detected = _detector(registry).detect_definition(str(tmp_path))
        assert detected.definition.name == "pnpm"
        assert detected.files == ["pnpm-lock.yaml"]

    def test_subdirectories_ignored(self, registry: DefinitionRegistry, tmp_path: Path):
        (tmp_path / "package.json").mkdir()
        with pytest.raises(NoManifestError):
            _detector(registry).detect_definition(str(tmp_path))

    def test_missing_directory(self, registry: DefinitionRegistry, tmp_path: Path):
        with pytest.raises(NoManifestError):
            _detector(registry).detect_definition(str(tmp_path / "absent"))

    def test_newest_reads_mtimes(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json", "yarn.lock")
        os.utime(tmp_path / "package-lock.json", (2_000_000_000, 2_000_000_000))
        os.utime(tmp_path / "yarn.lock", (1_000_000_000, 1_000_000_000))

        detected = _detector(registry).detect_definition(
            str(tmp_path), DetectOptions(on_conflict=ConflictBehavior.NEWEST)
        )

        assert detected.definition.name == "npm"

    def test_explicit_manager_skips_scan(self, registry: DefinitionRegistry, tmp_path: Path):
        detected = _detector(registry).detect_definition(
            str(tmp_path), DetectOptions(manager="cargo")
        )
        assert detected.definition.name == "cargo"
        assert detected.files == []

    def test_explicit_unknown_manager(self, registry: DefinitionRegistry, tmp_path: Path):
        with pytest.raises(UnknownManagerError):
            _detector(registry).detect_definition(str(tmp_path), DetectOptions(manager="nope"))


class TestDetect:
    def test_returns_bound_manager(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "go.mod")
        with patch(_WHICH) as mock_which:
            manager = _detector(registry).detect(str(tmp_path))

        assert isinstance(manager, GenericManager)
        assert manager.name == "gomod"
        assert manager.ecosystem == "golang"
        assert manager.directory == str(tmp_path)
        mock_which.assert_not_called()

    def test_require_cli_missing(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json")
        with patch(_WHICH, return_value=None):
            with pytest.raises(CLINotFoundError, match="detected from package-lock.json"):
                _detector(registry).detect(str(tmp_path), DetectOptions(require_cli=True))

    def test_require_cli_present(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json")
        with patch(_WHICH, return_value="/usr/bin/npm") as mock_which:
            manager = _detector(registry).detect(str(tmp_path), DetectOptions(require_cli=True))
        assert manager.name == "npm"
        mock_which.assert_called_once_with("npm")

    def test_explicit_manager_requires_cli(self, registry: DefinitionRegistry, tmp_path: Path):
        with patch(_WHICH, return_value=None):
            with pytest.raises(CLINotFoundError, match="explicit selection") as exc_info:
                _detector(registry).detect(str(tmp_path), DetectOptions(manager="bundler"))
        assert exc_info.value.binary == "bundle"


# ─── Version detection ───────────────────────────────────────


class TestDetectVersion:
    @pytest.mark.parametrize(
        ("manager", "output", "expected"),
        [
            ("npm", "10.2.4\n", "10.2.4"),
            ("bundler", "Bundler version 2.5.6\n", "2.5.6"),
            ("cargo", "cargo 1.78.0 (54d8815d0 2024-03-26)\n", "1.78.0"),
            ("gomod", "go version go1.22.1 linux/amd64\n", "1.22.1"),
            ("uv", "uv 0.4.18 (7b55e9790 2024-10-01)\n", "0.4.18"),
        ],
    )
    async def test_parses_version(self, registry: DefinitionRegistry, manager, output, expected):
        definition = registry.get(manager)
        runner = RecordingRunner(results=[Result(command=[], stdout=output)])

        version = await _detector(registry, runner).detect_version(definition, "/proj")

        assert version == expected
        assert runner.captured == [[definition.binary, *definition.version_detection.command]]
        assert runner.directories == ["/proj"]

    async def test_nonzero_exit(self, registry: DefinitionRegistry):
        runner = RecordingRunner(results=[Result(command=[], exit_code=127, stderr="boom")])
        version = await _detector(registry, runner).detect_version(registry.get("npm"))
        assert version == ""

    async def test_no_pattern_returns_trimmed_output(self, registry: DefinitionRegistry):
        definition = parse_definition(
            "name: t\nbinary: t\nversion_detection:\n  command: [version]\n"
        )
        runner = RecordingRunner(results=[Result(command=[], stdout="  t 3.1\n")])
        assert await _detector(registry, runner).detect_version(definition) == "t 3.1"

    async def test_unmatched_pattern_returns_trimmed_output(self, registry: DefinitionRegistry):
        runner = RecordingRunner(results=[Result(command=[], stdout="dev-build\n")])
        version = await _detector(registry, runner).detect_version(registry.get("npm"))
        assert version == "dev-build"

    async def test_no_command_runs_nothing(self, registry: DefinitionRegistry):
        runner = RecordingRunner()
        definition = parse_definition("name: t\nbinary: t\n")
        assert await _detector(registry, runner).detect_version(definition) == ""
        assert runner.captured == []
