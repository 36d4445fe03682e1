"""Tests for opening folders in the native file manager."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices

from gui.utils.fs import open_in_file_manager


class TestOpenInFileManager:
    """Test cases for the open_in_file_manager function."""

    def test_nonexistent_path_returns_false(self, tmp_path):
        assert open_in_file_manager(tmp_path / "does_not_exist") is False

    def test_file_path_returns_false(self, tmp_path):
        test_file = tmp_path / "photo.jpg"
        test_file.write_bytes(b"\xff\xd8")

        assert open_in_file_manager(test_file) is False

    @patch.object(QDesktopServices, "openUrl")
    def test_qdesktopservices_success(self, mock_open_url, tmp_path):
        mock_open_url.return_value = True

        assert open_in_file_manager(tmp_path) is True

        url = mock_open_url.call_args[0][0]
        assert isinstance(url, QUrl)
        assert Path(url.toLocalFile()) == tmp_path.resolve()

    @patch.object(QDesktopServices, "openUrl", return_value=False)
    @patch("subprocess.run")
    @patch("platform.system", return_value="Windows")
    def test_windows_fallback_ignores_exit_code(self, mock_system, mock_run, mock_open_url, tmp_path):
        mock_run.return_value = Mock(returncode=1)

        assert open_in_file_manager(tmp_path) is True
        mock_run.assert_called_once_with(["explorer", str(tmp_path.resolve())], check=False, capture_output=True)

    @patch.object(QDesktopServices, "openUrl", return_value=False)
    @patch("subprocess.run")
    @patch("platform.system", return_value="Darwin")
    def test_macos_fallback(self, mock_system, mock_run, mock_open_url, tmp_path):
        mock_run.return_value = Mock(returncode=0)

        assert open_in_file_manager(tmp_path) is True
        mock_run.assert_called_once_with(["open", str(tmp_path.resolve())], check=False, capture_output=True)

    @patch.object(QDesktopServices, "openUrl", return_value=False)
    @patch("subprocess.run")
    @patch("platform.system", return_value="Linux")
    def test_linux_fallback_failure(self, mock_system, mock_run, mock_open_url, tmp_path):
        mock_run.return_value = Mock(returncode=3)

        assert open_in_file_manager(tmp_path) is False

    @patch.object(QDesktopServices, "openUrl", return_value=False)
    @patch("subprocess.run", side_effect=FileNotFoundError("xdg-open"))
    @patch("platform.system", return_value="Linux")
    def test_missing_fallback_command(self, mock_system, mock_run, mock_open_url, tmp_path):
        assert open_in_file_manager(tmp_path) is False

    @patch.object(QDesktopServices, "openUrl", return_value=False)
    @patch("subprocess.run", side_effect=subprocess.SubprocessError("boom"))
    @patch("platform.system", return_value="Linux")
    def test_subprocess_error(self, mock_system, mock_run, mock_open_url, tmp_path):
        assert open_in_file_manager(tmp_path) is False

    @patch.object(QDesktopServices, "openUrl", return_value=False)
    @patch("platform.system", return_value="Haiku")
    def test_unknown_platform(self, mock_system, mock_open_url, tmp_path):
        assert open_in_file_manager(tmp_path) is False
