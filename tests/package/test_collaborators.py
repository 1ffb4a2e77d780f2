"""
Tests for the default collaborator implementations.
"""

import subprocess
from unittest.mock import patch

import pytest

from firefoxkit.core.exceptions import (
    DependencyInstallError,
    InstallerInvocationFailure,
    TemplateRenderError,
)
from firefoxkit.package.collaborators import (
    AptPackageManager,
    JinjaTemplateRenderer,
    NullPackageManager,
    SubprocessInstallerRunner,
    detect_package_manager,
)


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


class TestJinjaTemplateRenderer:
    """Test JinjaTemplateRenderer."""

    def test_builtin_template(self, temp_dir):
        """Test the built-in Windows INI template."""
        destination = temp_dir / "firefox-38.0.ini"
        variables = {
            "install_path": "C:\\Program Files (x86)\\Mozilla Firefox\\38.0_en-US",
            "QuickLaunchShortcut": False,
            "MaintenanceService": True,
        }

        result = JinjaTemplateRenderer().render(
            "windows.ini.j2", variables, "firefoxkit", destination
        )

        assert result == destination
        lines = destination.read_text().splitlines()
        assert lines[0] == "[Install]"
        assert (
            "InstallDirectoryPath=C:\\Program Files (x86)\\Mozilla Firefox\\38.0_en-US"
            in lines
        )
        assert "QuickLaunchShortcut=false" in lines
        assert "MaintenanceService=true" in lines

    def test_custom_scope(self, temp_dir):
        """Test templates are looked up in a custom directory."""
        templates = temp_dir / "templates"
        templates.mkdir()
        (templates / "custom.ini.j2").write_text(
            "[Install]\nInstallDirectoryPath={{ install_path }}\n"
        )
        destination = temp_dir / "out" / "custom.ini"

        JinjaTemplateRenderer().render(
            "custom.ini.j2",
            {"install_path": "D:\\Firefox"},
            str(templates),
            destination,
        )

        assert "InstallDirectoryPath=D:\\Firefox" in destination.read_text()

    def test_missing_scope(self, temp_dir):
        """Test an unknown template directory raises TemplateRenderError."""
        with pytest.raises(TemplateRenderError, match="not found"):
            JinjaTemplateRenderer().render(
                "windows.ini.j2", {}, str(temp_dir / "missing"), temp_dir / "out.ini"
            )

    def test_missing_template(self, temp_dir):
        """Test an unknown template name raises TemplateRenderError."""
        with pytest.raises(TemplateRenderError):
            JinjaTemplateRenderer().render(
                "missing.j2", {}, "firefoxkit", temp_dir / "out.ini"
            )

    def test_undefined_variable(self, temp_dir):
        """Test templates referencing missing variables fail."""
        (temp_dir / "strict.j2").write_text("{{ install_path }}")

        with pytest.raises(TemplateRenderError):
            JinjaTemplateRenderer().render(
                "strict.j2", {}, str(temp_dir), temp_dir / "out.ini"
            )


class TestSubprocessInstallerRunner:
    """Test SubprocessInstallerRunner."""

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_install_command(self, mock_run):
        """Test the installer runs with its options."""
        mock_run.return_value = _completed()

        SubprocessInstallerRunner().run(
            "C:\\cache\\38.0.exe",
            "Mozilla Firefox 38.0 (x86 en-US)",
            "/S /INI=C:\\cache\\firefox-38.0.ini",
            "install",
        )

        command = mock_run.call_args[0][0]
        assert command == '"C:\\cache\\38.0.exe" /S /INI=C:\\cache\\firefox-38.0.ini'

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_remove_command(self, mock_run):
        """Test removal runs the bundled uninstaller silently."""
        mock_run.return_value = _completed()

        SubprocessInstallerRunner().run(
            None,
            "Mozilla Firefox 38.0 (x86 en-US)",
            "",
            "remove",
            install_path="C:\\Program Files (x86)\\Mozilla Firefox\\38.0_en-US",
        )

        command = mock_run.call_args[0][0]
        assert command == (
            '"C:\\Program Files (x86)\\Mozilla Firefox\\38.0_en-US'
            '\\uninstall\\helper.exe" /S'
        )

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_non_zero_exit(self, mock_run):
        """Test a failing installer raises InstallerInvocationFailure."""
        mock_run.return_value = _completed(returncode=1603, stderr="fatal error")

        with pytest.raises(InstallerInvocationFailure) as exc_info:
            SubprocessInstallerRunner().run("setup.exe", "Firefox", "/S", "install")

        assert exc_info.value.returncode == 1603
        assert "fatal error" in str(exc_info.value)

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_os_error(self, mock_run):
        """Test an installer that cannot start raises InstallerInvocationFailure."""
        mock_run.side_effect = OSError("not found")

        with pytest.raises(InstallerInvocationFailure):
            SubprocessInstallerRunner().run("setup.exe", "Firefox", "/S", "install")

    def test_invalid_arguments(self):
        """Test invalid argument combinations."""
        runner = SubprocessInstallerRunner()

        with pytest.raises(ValueError, match="installer is required"):
            runner.run(None, "Firefox", "/S", "install")
        with pytest.raises(ValueError, match="install path is required"):
            runner.run(None, "Firefox", "", "remove")
        with pytest.raises(ValueError, match="Unknown installer action"):
            runner.run("setup.exe", "Firefox", "", "repair")


class TestAptPackageManager:
    """Test AptPackageManager."""

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_all_installed(self, mock_run):
        """Test nothing is installed when dpkg reports every package."""
        mock_run.return_value = _completed(stdout="install ok installed")

        AptPackageManager().ensure_installed(["libasound2", "libxt6"])

        commands = [call[0][0][0] for call in mock_run.call_args_list]
        assert commands == ["dpkg-query", "dpkg-query"]

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_installs_missing(self, mock_run):
        """Test only missing packages are passed to apt-get."""

        def fake_run(cmd, **kwargs):
            if cmd[0] == "dpkg-query":
                installed = cmd[-1] == "libasound2"
                return _completed(
                    returncode=0 if installed else 1,
                    stdout="install ok installed" if installed else "",
                )
            return _completed()

        mock_run.side_effect = fake_run

        AptPackageManager().ensure_installed(["libasound2", "libxt6"])

        apt_call = mock_run.call_args_list[-1]
        assert apt_call[0][0] == ["apt-get", "install", "-y", "libxt6"]
        assert apt_call[1]["env"]["DEBIAN_FRONTEND"] == "noninteractive"

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_apt_failure(self, mock_run):
        """Test apt-get failures raise DependencyInstallError."""

        def fake_run(cmd, **kwargs):
            if cmd[0] == "dpkg-query":
                return _completed(returncode=1)
            return _completed(returncode=100, stderr="E: Unable to locate package")

        mock_run.side_effect = fake_run

        with pytest.raises(DependencyInstallError, match="Unable to locate"):
            AptPackageManager().ensure_installed(["libxt6"])

    @patch("firefoxkit.package.collaborators.subprocess.run")
    def test_dpkg_unavailable(self, mock_run):
        """Test a missing dpkg-query counts as not installed."""
        mock_run.side_effect = OSError("dpkg-query not found")

        assert AptPackageManager().is_installed("libxt6") is False


class TestDetectPackageManager:
    """Test detect_package_manager()."""

    @patch(
        "firefoxkit.package.collaborators.shutil.which",
        return_value="/usr/bin/apt-get",
    )
    def test_apt(self, mock_which):
        """Test apt-get hosts get the apt package manager."""
        assert isinstance(detect_package_manager(), AptPackageManager)

    @patch("firefoxkit.package.collaborators.shutil.which", return_value=None)
    def test_fallback(self, mock_which):
        """Test other hosts get the null package manager."""
        manager = detect_package_manager()

        assert isinstance(manager, NullPackageManager)
        manager.ensure_installed(["libxt6"])
