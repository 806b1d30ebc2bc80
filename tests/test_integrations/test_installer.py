"""
Tests for layerforge.integrations.installer
=============================================

What's Being Tested:
    - InstallOutcome.raise_for_status()
    - MockPackageInstaller (fake packages, failure injection, call history)
    - NpmInstaller against a fake installer executable: argv, cwd,
      per-call environment, non-zero exits, timeouts, missing executable
    - create_installer() factory

The fake executable is a small Python script, so these tests run real
subprocesses without needing npm.
"""

import json
import os
import sys
import textwrap

import pytest

from layerforge.core.config import InstallerConfig
from layerforge.core.exceptions import ConfigurationError, InstallationError
from layerforge.integrations.installer.base import InstallOutcome
from layerforge.integrations.installer.factory import create_installer
from layerforge.integrations.installer.mock import MockPackageInstaller, split_spec
from layerforge.integrations.installer.npm import NPM_INSTALL_FLAGS, NpmInstaller


FAKE_NPM = textwrap.dedent(
    """
    import json, os, sys, time

    args = sys.argv[1:]
    spec = args[1]
    with open(os.environ["FAKE_NPM_RECORD"], "a") as f:
        f.write(json.dumps({
            "argv": args,
            "cwd": os.getcwd(),
            "home": os.environ.get("HOME"),
            "cache": os.environ.get("NPM_CONFIG_CACHE"),
            "notifier": os.environ.get("npm_config_update_notifier"),
        }) + "\\n")

    if spec.startswith("broken"):
        print("npm ERR! 404 Not Found - GET https://registry.npmjs.org/" + spec)
        sys.exit(1)
    if spec.startswith("slow"):
        time.sleep(30)

    name = spec[: spec.rfind("@")] if spec.rfind("@") > 0 else spec
    pkg = os.path.join(os.getcwd(), "node_modules", name)
    os.makedirs(pkg, exist_ok=True)
    with open(os.path.join(pkg, "package.json"), "w") as f:
        json.dump({"name": name}, f)
    print("added 1 package in 0.1s")
    """
)


@pytest.fixture
def fake_npm(tmp_path):
    """Path of the fake installer script and of its call record."""
    script = tmp_path / "fake_npm.py"
    script.write_text(FAKE_NPM)
    record = tmp_path / "calls.jsonl"
    return script, record


def _npm(fake_npm, timeout: float = 30.0) -> NpmInstaller:
    script, record = fake_npm
    return NpmInstaller(
        command=[sys.executable, str(script)],
        timeout_seconds=timeout,
        base_env={"PATH": os.environ.get("PATH", ""), "FAKE_NPM_RECORD": str(record)},
    )


def _calls(record) -> list[dict]:
    return [json.loads(line) for line in record.read_text().splitlines()]


# =============================================================================
# Tests: InstallOutcome
# =============================================================================
class TestInstallOutcome:
    """Turning outcomes into errors."""

    def test_success_does_not_raise(self) -> None:
        InstallOutcome(spec="a", exit_code=0).raise_for_status()

    def test_non_zero_exit(self) -> None:
        outcome = InstallOutcome(spec="bad@1.0.0", exit_code=1, output="npm ERR! 404")
        with pytest.raises(InstallationError) as exc_info:
            outcome.raise_for_status()
        error = exc_info.value
        assert "bad@1.0.0" in error.message
        assert error.spec == "bad@1.0.0"
        assert error.exit_code == 1
        assert error.details["output_tail"] == "npm ERR! 404"

    def test_reason_used_when_process_did_not_finish(self) -> None:
        outcome = InstallOutcome(spec="x", reason="timed out after 5s")
        assert not outcome.succeeded
        with pytest.raises(InstallationError, match="timed out after 5s"):
            outcome.raise_for_status()


# =============================================================================
# Tests: MockPackageInstaller
# =============================================================================
class TestMockInstaller:
    """The fake installer used by pipeline tests."""

    async def test_writes_fake_package(self, mock_installer, workspace) -> None:
        outcome = await mock_installer.install("lodash@4.17.21", workspace)

        assert outcome.succeeded
        manifest = workspace.layer_dir / "node_modules" / "lodash" / "package.json"
        assert json.loads(manifest.read_text())["version"] == "4.17.21"

    async def test_scoped_package(self, mock_installer, workspace) -> None:
        await mock_installer.install("@types/node", workspace)
        assert (workspace.layer_dir / "node_modules" / "@types" / "node" / "index.js").exists()

    async def test_records_calls_in_order(self, mock_installer, workspace) -> None:
        for spec in ("a", "b", "c"):
            await mock_installer.install(spec, workspace)
        assert mock_installer.installed_specs == ["a", "b", "c"]
        assert mock_installer.call_count == 3

    async def test_failure_injection(self, mock_installer, workspace) -> None:
        mock_installer.fail_on("bad", exit_code=2, output="nope")
        outcome = await mock_installer.install("bad", workspace)

        assert outcome.exit_code == 2
        assert not (workspace.layer_dir / "node_modules" / "bad").exists()

    def test_split_spec(self) -> None:
        assert split_spec("@scope/pkg@1.2.3") == ("@scope/pkg", "1.2.3")
        assert split_spec("@scope/pkg") == ("@scope/pkg", "0.0.0-mock")
        assert split_spec("pkg@") == ("pkg", "0.0.0-mock")


# =============================================================================
# Tests: NpmInstaller
# =============================================================================
class TestNpmInstallerCommand:
    """Command line and environment construction."""

    def test_command_flags(self) -> None:
        argv = NpmInstaller().build_command("lodash@4.17.21")
        assert argv == [
            "npm", "install", "lodash@4.17.21",
            "--save-exact", "--no-package-lock", "--no-audit", "--no-fund", "--omit=dev",
        ]
        assert tuple(argv[3:]) == NPM_INSTALL_FLAGS

    def test_env_overrides_are_scoped_to_workspace(self, workspace) -> None:
        installer = NpmInstaller(base_env={"PATH": "/usr/bin", "HOME": "/root"})
        env = installer.build_env(workspace)

        assert env["HOME"] == str(workspace.layer_dir)
        assert env["NPM_CONFIG_CACHE"] == str(workspace.cache_dir)
        assert env["npm_config_update_notifier"] == "false"
        assert env["PATH"] == "/usr/bin"

    def test_build_env_does_not_touch_process_env(self, workspace, monkeypatch) -> None:
        monkeypatch.delenv("NPM_CONFIG_CACHE", raising=False)
        NpmInstaller().build_env(workspace)
        assert "NPM_CONFIG_CACHE" not in os.environ


class TestNpmInstallerProcess:
    """Running the (fake) installer executable."""

    async def test_successful_install(self, fake_npm, workspace) -> None:
        _, record = fake_npm
        outcome = await _npm(fake_npm).install("lodash@4.17.21", workspace)

        assert outcome.succeeded
        assert "added 1 package" in outcome.output
        assert (workspace.layer_dir / "node_modules" / "lodash" / "package.json").exists()

        call = _calls(record)[0]
        assert call["argv"][:2] == ["install", "lodash@4.17.21"]
        assert "--omit=dev" in call["argv"]
        assert os.path.realpath(call["cwd"]) == os.path.realpath(workspace.layer_dir)
        assert call["home"] == str(workspace.layer_dir)
        assert call["cache"] == str(workspace.cache_dir)
        assert call["notifier"] == "false"

    async def test_non_zero_exit(self, fake_npm, workspace) -> None:
        outcome = await _npm(fake_npm).install("broken-pkg", workspace)

        assert outcome.exit_code == 1
        assert not outcome.succeeded
        assert "404 Not Found" in outcome.output

    async def test_timeout_kills_process(self, fake_npm, workspace) -> None:
        outcome = await _npm(fake_npm, timeout=0.5).install("slow-pkg", workspace)

        assert not outcome.succeeded
        assert outcome.exit_code is None
        assert "timed out" in outcome.reason

    async def test_missing_executable(self, workspace, tmp_path) -> None:
        installer = NpmInstaller(command=str(tmp_path / "no-such-npm"))
        outcome = await installer.install("lodash", workspace)

        assert not outcome.succeeded
        assert outcome.exit_code is None
        assert "could not run" in outcome.reason


# =============================================================================
# Tests: Factory
# =============================================================================
class TestCreateInstaller:
    """create_installer() maps config to implementations."""

    def test_npm(self) -> None:
        installer = create_installer(InstallerConfig(kind="npm", command="/opt/npm"))
        assert isinstance(installer, NpmInstaller)
        assert installer.build_command("x")[0] == "/opt/npm"

    def test_mock(self) -> None:
        assert isinstance(create_installer(InstallerConfig(kind="MOCK")), MockPackageInstaller)

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            create_installer(InstallerConfig(kind="yarn"))
        assert exc_info.value.error_code == "UNKNOWN_INSTALLER"
