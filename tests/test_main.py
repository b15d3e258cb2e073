"""
Tests for the launcher helpers: port selection and browser opening.
"""

from unittest.mock import patch

import main
from config import DEFAULT_PORT


class TestPortSelection:
    def test_prefers_default_port(self):
        with patch("main._port_is_free", return_value=True):
            assert main._find_free_port() == DEFAULT_PORT

    def test_falls_back_to_any_free_port(self):
        with patch("main._port_is_free", return_value=False):
            port = main._find_free_port()

        assert port != DEFAULT_PORT
        assert 0 < port < 65536


class TestOpenBrowser:
    def test_uses_default_browser(self):
        with patch("main.webbrowser.open", return_value=True) as mock_open:
            main._open_browser("http://127.0.0.1:8000")

        mock_open.assert_called_once_with("http://127.0.0.1:8000")

    def test_no_browser_is_logged(self):
        with patch("main.webbrowser.open", return_value=False), \
                patch.object(main.logger, "warning") as mock_warning:
            main._open_browser("http://127.0.0.1:8000")

        assert "manually" in mock_warning.call_args.args[0]
