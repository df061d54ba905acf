# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import shlex
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nhcal_lib.core.error import BuildError, ToolchainMissingError
from nhcal_lib.toolchain import (
    EicShellInstaller,
    ToolchainComponent,
    eicrecon_component,
    epic_component,
)


def _completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


def _install(component: ToolchainComponent) -> None:
    component.marker_path.parent.mkdir(parents=True, exist_ok=True)
    component.marker_path.write_text("")


@pytest.fixture
def installer(tmp_path):
    shell = tmp_path / "eic" / "eic-shell"
    return EicShellInstaller(shell, "https://example.org/install.sh", threads=4)


def test_epic_component(tmp_path):
    epic = epic_component(tmp_path)

    assert epic.name == "EPIC"
    assert epic.source_dir == tmp_path / "epic"
    assert epic.marker_path == tmp_path / "epic" / "install" / "bin" / "thisepic.sh"
    assert epic.use_ccache
    assert epic.requires is None
    assert epic.repository


def test_eicrecon_component_requires_epic(tmp_path):
    epic = epic_component(tmp_path)
    eicrecon = eicrecon_component(tmp_path, epic)

    assert eicrecon.source_dir == tmp_path / "EICrecon"
    assert eicrecon.marker_path.name == "eicrecon-this.sh"
    assert eicrecon.requires == epic


def test_relocated_drops_repository(tmp_path):
    epic = epic_component(tmp_path)
    copy = epic.relocated(tmp_path / "copy")

    assert copy.source_dir == tmp_path / "copy"
    assert copy.repository is None
    assert copy.marker == epic.marker
    assert epic.source_dir == tmp_path / "epic"


def test_is_installed(installer, tmp_path):
    epic = epic_component(tmp_path)
    assert not installer.isInstalled(epic)

    _install(epic)
    assert installer.isInstalled(epic)


def test_ensure_skips_installed_component(installer, tmp_path):
    epic = epic_component(tmp_path)
    _install(epic)

    with patch("nhcal_lib.toolchain.installer.run_bash") as mock_run:
        installer.ensure(epic)

    mock_run.assert_not_called()


def test_ensure_missing_prerequisite_raises(installer, tmp_path):
    epic = epic_component(tmp_path)
    eicrecon = eicrecon_component(tmp_path, epic)

    with (
        patch("nhcal_lib.toolchain.installer.run_bash") as mock_run,
        pytest.raises(ToolchainMissingError, match="EPIC must be installed before EICrecon"),
    ):
        installer.ensure(eicrecon)

    mock_run.assert_not_called()


def test_ensure_clones_and_builds(installer, tmp_path):
    epic = epic_component(tmp_path)
    commands = []

    def fake_run(command):
        commands.append(command)
        if "cmake" in command:
            _install(epic)
        return _completed()

    with patch("nhcal_lib.toolchain.installer.run_bash", side_effect=fake_run):
        installer.ensure(epic)

    assert len(commands) == 2
    assert commands[0] == (
        f"git clone {shlex.quote(epic.repository)} {shlex.quote(str(epic.source_dir))}"
    )
    assert "cmake --build build -j4 -- install" in commands[1]
    assert installer.isInstalled(epic)


def test_ensure_removes_incomplete_installation(installer, tmp_path):
    epic = epic_component(tmp_path)
    epic.source_dir.mkdir(parents=True)
    (epic.source_dir / "stale").write_text("")

    def fake_run(command):
        if "cmake" in command:
            _install(epic)
        return _completed()

    with patch("nhcal_lib.toolchain.installer.run_bash", side_effect=fake_run):
        installer.ensure(epic)

    assert not (epic.source_dir / "stale").exists()


def test_fetch_without_repository_raises(installer, tmp_path):
    copy = epic_component(tmp_path).relocated(tmp_path / "copy")

    with pytest.raises(BuildError, match="No repository"):
        installer.fetch(copy)


def test_fetch_failure_raises(installer, tmp_path):
    with (
        patch(
            "nhcal_lib.toolchain.installer.run_bash",
            return_value=_completed(128, stderr="fatal: unable to access"),
        ),
        pytest.raises(BuildError, match="unable to access"),
    ):
        installer.fetch(epic_component(tmp_path))


def test_build_failure_raises(installer, tmp_path):
    with (
        patch(
            "nhcal_lib.toolchain.installer.run_bash",
            return_value=_completed(2, stderr="compilation terminated"),
        ),
        pytest.raises(BuildError, match="Failed to build EPIC"),
    ):
        installer.build(epic_component(tmp_path))


def test_build_without_marker_raises(installer, tmp_path):
    with (
        patch("nhcal_lib.toolchain.installer.run_bash", return_value=_completed()),
        pytest.raises(BuildError, match="installation incomplete"),
    ):
        installer.build(epic_component(tmp_path))


def test_translate_build_epic_uses_ccache(installer, tmp_path):
    epic = epic_component(tmp_path)
    command = installer._translateBuild(epic)

    assert command.startswith(f"cat <<'NHCAL_EOF' | {shlex.quote(str(installer.eic_shell))}\n")
    assert command.rstrip().endswith("NHCAL_EOF")
    assert f"cd {shlex.quote(str(epic.source_dir))} || exit 1" in command
    assert "-DCMAKE_CXX_COMPILER_LAUNCHER=ccache" in command
    assert "source" not in command


def test_translate_build_eicrecon_sources_epic(installer, tmp_path):
    epic = epic_component(tmp_path)
    command = installer._translateBuild(eicrecon_component(tmp_path, epic))

    assert f"source {shlex.quote(str(epic.marker_path))}" in command
    assert "ccache" not in command
    assert "cmake -B build -S . -DCMAKE_INSTALL_PREFIX=install || exit 1" in command


def test_ensure_shell_present(installer):
    installer.eic_shell.parent.mkdir(parents=True)
    installer.eic_shell.write_text("")

    with patch("nhcal_lib.toolchain.installer.run_bash") as mock_run:
        installer.ensureShell()

    mock_run.assert_not_called()


def test_ensure_shell_installs(installer):
    def fake_run(command):
        assert "curl -L https://example.org/install.sh | bash" in command
        installer.eic_shell.write_text("")
        return _completed()

    with patch("nhcal_lib.toolchain.installer.run_bash", side_effect=fake_run):
        installer.ensureShell()

    assert installer.eic_shell.is_file()


def test_ensure_shell_failure_raises(installer):
    with (
        patch(
            "nhcal_lib.toolchain.installer.run_bash",
            return_value=_completed(1, stderr="curl: (6) Could not resolve host"),
        ),
        pytest.raises(BuildError, match="Failed to install eic-shell"),
    ):
        installer.ensureShell()


def test_threads_default_to_cpu_count(tmp_path):
    with patch("nhcal_lib.toolchain.installer.os.cpu_count", return_value=16):
        installer = EicShellInstaller(Path(tmp_path / "eic-shell"), "url")

    assert "-j16" in installer._translateBuild(epic_component(tmp_path))
