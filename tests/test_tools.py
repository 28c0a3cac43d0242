"""Tests for the MCP tools (tools/managers.py, translate.py, detect.py, run.py)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from pkgmanagers.errors import CommandNotFoundError
from pkgmanagers.models import ConflictBehavior, Result
from pkgmanagers.policy.builtin import PackageBlocklistPolicy
from pkgmanagers.policy.runner import PolicyRunner
from pkgmanagers.runner.base import Runner
from pkgmanagers.runner.recording import RecordingRunner
from pkgmanagers.scanner.detector import Detector
from pkgmanagers.server import AppContext
from pkgmanagers.settings import Settings
from pkgmanagers.tools.detect import detect_manager
from pkgmanagers.tools.managers import list_managers
from pkgmanagers.tools.run import package_path, run_operation
from pkgmanagers.tools.translate import translate_command
from pkgmanagers.translator.builder import Translator
from pkgmanagers.translator.registry import DefinitionRegistry

_WHICH = "pkgmanagers.scanner.detector.shutil.which"

# --- Helpers ---------------------------------------------------------------


def _app(
    registry: DefinitionRegistry,
    runner: Runner | None = None,
    settings: Settings | None = None,
) -> AppContext:
    translator = Translator(registry)
    runner = runner or RecordingRunner()
    return AppContext(
        settings=settings or Settings(),
        registry=registry,
        translator=translator,
        runner=runner,
        detector=Detector(translator, runner),
    )


def _make_ctx(app: object = None) -> MagicMock:
    ctx = MagicMock()
    ctx.info = AsyncMock()
    ctx.error = AsyncMock()
    ctx.request_context.lifespan_context = app
    return ctx


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_text("", encoding="utf-8")


# --- list_managers ---------------------------------------------------------


class TestListManagers:
    async def test_lists_every_manager(self, registry: DefinitionRegistry):
        result = await list_managers(_make_ctx(_app(registry)))
        assert [entry["name"] for entry in result] == registry.names()

    async def test_summary_fields(self, registry: DefinitionRegistry):
        result = await list_managers(_make_ctx(_app(registry)))
        npm = next(entry for entry in result if entry["name"] == "npm")
        assert npm["binary"] == "npm"
        assert npm["ecosystem"] == "npm"
        assert npm["operations"] == sorted(npm["operations"])
        assert "path" in npm["operations"]
        assert "install_frozen" in npm["capabilities"]
        assert npm["lockfiles"] == ["package-lock.json", "npm-shrinkwrap.json"]
        assert npm["manifests"] == ["package.json"]

    async def test_ecosystem_filter(self, registry: DefinitionRegistry):
        result = await list_managers(_make_ctx(_app(registry)), ecosystem="npm")
        assert {entry["name"] for entry in result} == {"bun", "deno", "npm", "pnpm", "yarn"}

    async def test_unknown_ecosystem_is_empty(self, registry: DefinitionRegistry):
        assert await list_managers(_make_ctx(_app(registry)), ecosystem="cobol") == []

    async def test_missing_app_context(self):
        ctx = _make_ctx("not an app context")
        result = await list_managers(ctx)
        assert result == [{"success": False, "message": "Internal error: TypeError"}]
        ctx.error.assert_awaited_once()


# --- translate_command -----------------------------------------------------


class TestTranslateCommand:
    async def test_single_command(self, registry: DefinitionRegistry):
        result = await translate_command(
            "npm",
            "add",
            _make_ctx(_app(registry)),
            args={"package": "lodash"},
            flags={"dev": True},
        )
        assert result["success"] is True
        assert result["commands"] == [["npm", "install", "lodash", "--save-dev"]]
        assert result["message"] == "npm install lodash --save-dev"

    async def test_chain(self, registry: DefinitionRegistry):
        result = await translate_command(
            "gomod", "add", _make_ctx(_app(registry)), args={"package": "github.com/pkg/errors"}
        )
        assert len(result["commands"]) == 2
        assert result["message"] == "go get github.com/pkg/errors && go mod tidy"

    async def test_nothing_is_executed(self, registry: DefinitionRegistry):
        runner = RecordingRunner()
        await translate_command("npm", "install", _make_ctx(_app(registry, runner)))
        assert runner.captured == []

    async def test_unknown_manager(self, registry: DefinitionRegistry):
        ctx = _make_ctx(_app(registry))
        result = await translate_command("nope", "install", ctx)
        assert result["success"] is False
        assert result["message"] == "Unknown manager: nope"
        assert result["commands"] == []
        ctx.error.assert_not_awaited()

    async def test_invalid_package(self, registry: DefinitionRegistry):
        result = await translate_command(
            "npm", "add", _make_ctx(_app(registry)), args={"package": "lodash; rm -rf /"}
        )
        assert result["success"] is False
        assert "contains invalid characters" in result["message"]

    async def test_unexpected_error(self):
        ctx = _make_ctx(None)
        result = await translate_command("npm", "install", ctx)
        assert result["success"] is False
        assert result["message"] == "Internal error: TypeError"
        ctx.error.assert_awaited_once()


# --- detect_manager --------------------------------------------------------


class TestDetectManager:
    async def test_detects(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package.json", "yarn.lock")
        result = await detect_manager(str(tmp_path), _make_ctx(_app(registry)))

        assert result["success"] is True
        assert result["manager"] == "yarn"
        assert result["binary"] == "yarn"
        assert result["ecosystem"] == "npm"
        assert result["detected_from"] == ["yarn.lock"]
        assert result["version"] == ""
        assert result["message"] == "Detected yarn from yarn.lock"

    async def test_check_version(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "Cargo.toml")
        runner = RecordingRunner(results=[Result(command=[], stdout="cargo 1.78.0 (abc)\n")])
        result = await detect_manager(
            str(tmp_path), _make_ctx(_app(registry, runner)), check_version=True
        )
        assert result["version"] == "1.78.0"
        assert runner.captured == [["cargo", "--version"]]

    async def test_check_version_binary_missing(
        self, registry: DefinitionRegistry, tmp_path: Path
    ):
        _touch(tmp_path, "go.mod")
        runner = RecordingRunner(errors=[CommandNotFoundError("go")])
        ctx = _make_ctx(_app(registry, runner))

        result = await detect_manager(str(tmp_path), ctx, check_version=True)

        assert result["success"] is True
        assert result["manager"] == "gomod"
        assert result["version"] == ""
        ctx.info.assert_awaited_once()

    async def test_conflict(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json", "pnpm-lock.yaml")
        result = await detect_manager(str(tmp_path), _make_ctx(_app(registry)))
        assert result["success"] is False
        assert "Multiple lockfiles" in result["message"]

    async def test_conflict_setting(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json", "pnpm-lock.yaml")
        app = _app(registry, settings=Settings(on_conflict=ConflictBehavior.FIRST))
        result = await detect_manager(str(tmp_path), _make_ctx(app))
        assert result["manager"] == "npm"

    async def test_nothing_found(self, registry: DefinitionRegistry, tmp_path: Path):
        result = await detect_manager(str(tmp_path), _make_ctx(_app(registry)))
        assert result["success"] is False
        assert result["message"].startswith("No package manifest found")


# --- run_operation ---------------------------------------------------------


class TestRunOperation:
    async def test_success(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json")
        runner = RecordingRunner()
        ctx = _make_ctx(_app(registry, runner))

        result = await run_operation(
            str(tmp_path), "add", ctx, args={"package": "lodash"}, flags={"dev": True}
        )

        assert result["success"] is True
        assert result["manager"] == "npm"
        assert result["command"] == ["npm", "install", "lodash", "--save-dev"]
        assert result["message"] == "`npm install lodash --save-dev` succeeded"
        assert runner.directories == [str(tmp_path)]
        ctx.info.assert_awaited_once()

    async def test_nonzero_exit_with_meaning(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json")
        outcome = Result(command=["npm", "outdated", "--json"], exit_code=1, stdout="{}")
        ctx = _make_ctx(_app(registry, RecordingRunner(results=[outcome])))

        result = await run_operation(str(tmp_path), "outdated", ctx)

        assert result["success"] is False
        assert result["exit_code"] == 1
        assert result["exit_meaning"] == "outdated packages found"
        assert result["stdout"] == "{}"
        assert result["message"] == (
            "`npm outdated --json` exited with code 1 (outdated packages found)"
        )

    async def test_explicit_manager(self, registry: DefinitionRegistry, tmp_path: Path):
        runner = RecordingRunner()
        with patch(_WHICH, return_value="/usr/bin/pnpm"):
            result = await run_operation(
                str(tmp_path), "install", _make_ctx(_app(registry, runner)), manager="pnpm"
            )
        assert result["success"] is True
        assert runner.captured == [["pnpm", "install"]]

    async def test_explicit_manager_not_installed(
        self, registry: DefinitionRegistry, tmp_path: Path
    ):
        with patch(_WHICH, return_value=None):
            result = await run_operation(
                str(tmp_path), "install", _make_ctx(_app(registry)), manager="pnpm"
            )
        assert result["success"] is False
        assert result["manager"] == "pnpm"
        assert "pnpm not found" in result["message"]

    async def test_policy_denial(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json")
        inner = RecordingRunner()
        runner = PolicyRunner(inner, [PackageBlocklistPolicy({"left-pad": "unpublished"})])

        result = await run_operation(
            str(tmp_path), "add", _make_ctx(_app(registry, runner)), args={"package": "left-pad"}
        )

        assert result["success"] is False
        assert "unpublished" in result["message"]
        assert inner.captured == []

    async def test_missing_argument(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package-lock.json")
        result = await run_operation(str(tmp_path), "add", _make_ctx(_app(registry)))
        assert result["success"] is False
        assert result["message"] == "Missing required argument: package"

    async def test_no_manifest(self, registry: DefinitionRegistry, tmp_path: Path):
        result = await run_operation(str(tmp_path), "install", _make_ctx(_app(registry)))
        assert result["success"] is False
        assert result["manager"] == ""

    async def test_unexpected_error(self, tmp_path: Path):
        ctx = _make_ctx(None)
        result = await run_operation(str(tmp_path), "install", ctx)
        assert result["message"] == "Internal error: TypeError"
        ctx.error.assert_awaited_once()


# --- package_path ----------------------------------------------------------


class TestPackagePath:
    async def test_path(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "package.json")
        result = await package_path(str(tmp_path), "lodash", _make_ctx(_app(registry)))
        assert result["success"] is True
        assert result["path"] == "node_modules/lodash"
        assert result["operation"] == "path"

    async def test_extraction_failure_returns_raw_output(
        self, registry: DefinitionRegistry, tmp_path: Path
    ):
        _touch(tmp_path, "requirements.txt")
        failed = Result(
            command=["pip", "show", "nope"],
            exit_code=1,
            stderr="WARNING: Package(s) not found: nope",
        )
        ctx = _make_ctx(_app(registry, RecordingRunner(results=[failed])))

        result = await package_path(str(tmp_path), "nope", ctx)

        assert result["success"] is False
        assert result["manager"] == "pip"
        assert result["command"] == ["pip", "show", "nope"]
        assert result["exit_code"] == 1
        assert result["stderr"] == "WARNING: Package(s) not found: nope"
        assert result["message"].startswith("line_prefix extraction failed")
        assert result["path"] == ""

    async def test_invalid_package(self, registry: DefinitionRegistry, tmp_path: Path):
        _touch(tmp_path, "go.mod")
        result = await package_path(str(tmp_path), "$(id)", _make_ctx(_app(registry)))
        assert result["success"] is False
        assert "contains invalid characters" in result["message"]
