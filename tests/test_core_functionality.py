"""
Test Core Functionality - HTTP helpers, logging setup and the CLI entry point
"""

import logging
import os
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import requests

from cubepipe import main as cli
from cubepipe.coreutils.logging import setup_logging
from cubepipe.coreutils.request import get_json, is_url, new_session


class TestRequestHelpers(unittest.TestCase):
    def test_session_has_retry_adapter(self):
        session = new_session()

        adapter = session.get_adapter("https://example.com")
        self.assertEqual(adapter.max_retries.total, 5)
        self.assertEqual(session.headers["User-Agent"], "cubepipe/1.0")

    def test_is_url(self):
        self.assertTrue(is_url("https://example.com/snap.json"))
        self.assertFalse(is_url("snapshots/snap.json"))

    def test_get_json(self):
        session = MagicMock()
        session.get.return_value.json.return_value = {"ok": True}

        self.assertEqual(get_json(session, "https://example.com/x"), {"ok": True})
        session.get.assert_called_once_with(
            "https://example.com/x", params=None, timeout=30
        )

    def test_get_json_http_error(self):
        session = MagicMock()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503")

        with self.assertRaises(requests.RequestException):
            get_json(session, "https://example.com/x")

    def test_get_json_invalid_body(self):
        session = MagicMock()
        session.get.return_value.json.side_effect = ValueError("not json")

        with self.assertRaises(ValueError):
            get_json(session, "https://example.com/x")


class TestLoggingSetup(unittest.TestCase):
    def test_creates_log_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = os.path.join(tmp, "logs")
            with patch("cubepipe.coreutils.logging.logging.basicConfig") as mock_config:
                setup_logging(logging.DEBUG, log_dir=log_dir)

                self.assertTrue(os.path.isdir(log_dir))
                kwargs = mock_config.call_args.kwargs
                self.assertEqual(kwargs["level"], logging.DEBUG)
                self.assertEqual(len(kwargs["handlers"]), 2)
                for handler in kwargs["handlers"]:
                    handler.close()


class TestMainEntryPoint(unittest.TestCase):
    @patch("cubepipe.main.setup_logging")
    @patch("cubepipe.main.run_pipeline")
    def test_run_command(self, mock_run, mock_setup):
        mock_run.return_value = {
            "metadata": {"terminationReason": "COMPLETE", "extractedRows": 3, "totalRows": 3}
        }

        with patch.object(sys, "argv", ["cubepipe", "run", "--dry-run"]):
            self.assertEqual(cli.main(), 0)
        mock_run.assert_called_once_with(True)

    @patch("cubepipe.main.setup_logging")
    @patch("cubepipe.main.run_pipeline")
    def test_run_failure_returns_error_code(self, mock_run, mock_setup):
        mock_run.side_effect = ValueError("Missing required configuration")

        with patch.object(sys, "argv", ["cubepipe", "run"]):
            self.assertEqual(cli.main(), 1)

    @patch("cubepipe.main.setup_logging")
    @patch("cubepipe.main.run_scheduler")
    def test_schedule_command(self, mock_scheduler, mock_setup):
        with patch.object(sys, "argv", ["cubepipe", "schedule"]):
            self.assertEqual(cli.main(), 0)
        mock_scheduler.assert_called_once_with(False)


if __name__ == "__main__":
    unittest.main()
