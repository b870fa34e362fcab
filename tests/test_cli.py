import io
import logging
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from vpsctl import cli, __version__

@patch('vpsctl.cli.signal.signal')
@patch('vpsctl.cli.init')
class TestCli(unittest.TestCase):
    def test_version(self, _init, _signal):
        with patch('sys.stdout', io.StringIO()) as out:
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--version"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn(__version__, out.getvalue())

    def test_no_arguments_prints_help(self, _init, _signal):
        with patch('sys.stdout', io.StringIO()) as out:
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("compose <command>", out.getvalue())

    def test_dispatches_remaining_arguments(self, _init, _signal):
        fake = MagicMock()
        fake.main.return_value = 0
        with patch.dict(cli.COMMANDS, {"audit": fake}):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["audit", "deploy", "203.0.113.10", "--json-report", "out.json"])

        self.assertEqual(ctx.exception.code, 0)
        fake.main.assert_called_once_with(["deploy", "203.0.113.10", "--json-report", "out.json"])

    def test_exit_code_is_propagated(self, _init, _signal):
        fake = MagicMock()
        fake.main.return_value = 1
        with patch.dict(cli.COMMANDS, {"compose": fake}):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["compose", "up", "myapp"])
        self.assertEqual(ctx.exception.code, 1)

    @patch('vpsctl.cli.logging.basicConfig')
    def test_verbose_enables_debug_logging(self, mock_basic, _init, _signal):
        fake = MagicMock()
        fake.main.return_value = 0
        with patch.dict(cli.COMMANDS, {"git": fake}):
            with self.assertRaises(SystemExit):
                cli.main(["--verbose", "git", "pull", "myapp", "app"])
        self.assertEqual(mock_basic.call_args[1]["level"], logging.DEBUG)
        fake.main.assert_called_once_with(["pull", "myapp", "app"])

if __name__ == '__main__':
    unittest.main()
