"""Tests for external command execution."""

import subprocess
import sys
from unittest.mock import patch

import pytest

from core.command_runner import CommandResult, CommandRunner, expand_placeholders
from core.errors import CommandError


class TestCommandRunner:
    """Tests for CommandRunner"""

    def test_captures_output(self):
        result = CommandRunner().run([sys.executable, '-c', 'print("hello")'])

        assert result.succeeded
        assert result.returncode == 0
        assert result.stdout.strip() == 'hello'

    def test_non_zero_exit_is_returned(self):
        result = CommandRunner().run(
            [sys.executable, '-c', 'import sys; sys.stderr.write("boom"); sys.exit(3)']
        )

        assert not result.succeeded
        assert result.returncode == 3
        assert result.stderr == 'boom'

    def test_runs_in_working_directory(self, tmp_path):
        result = CommandRunner().run([sys.executable, '-c', 'import os; print(os.getcwd())'], cwd=tmp_path)
        assert result.stdout.strip() == str(tmp_path.resolve())

    def test_arguments_are_stringified(self, tmp_path):
        with patch('core.command_runner.subprocess.run') as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout='', stderr='')
            result = CommandRunner(timeout=5).run(['cat', tmp_path / 'file.json'])

        assert mock_run.call_args[0][0] == ['cat', str(tmp_path / 'file.json')]
        assert mock_run.call_args[1]['timeout'] == 5
        assert result.args == ['cat', str(tmp_path / 'file.json')]

    def test_timeout_raises_command_error(self):
        with patch('core.command_runner.subprocess.run') as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd=['slow'], timeout=1, output=b'partial')

            with pytest.raises(CommandError, match='timed out') as exc_info:
                CommandRunner(timeout=1).run(['slow'])

        assert exc_info.value.command == ['slow']
        assert exc_info.value.stdout == 'partial'

    def test_missing_executable_raises_command_error(self):
        with pytest.raises(CommandError, match='could not be started'):
            CommandRunner().run(['definitely-not-an-installed-command-xyz'])

    def test_per_call_timeout_overrides_default(self):
        with patch('core.command_runner.subprocess.run') as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout=None, stderr=None)
            result = CommandRunner(timeout=300).run(['true'], timeout=10)

        assert mock_run.call_args[1]['timeout'] == 10
        assert result == CommandResult(args=['true'], returncode=0, stdout='', stderr='')


class TestExpandPlaceholders:
    """Tests for command template expansion"""

    def test_replaces_known_placeholders(self):
        args = expand_placeholders(
            ['npx', 'cdk', 'synth', '{stack_name}', '--out={output_file}'],
            stack_name='AppStack',
            output_file='/tmp/out.json'
        )
        assert args == ['npx', 'cdk', 'synth', 'AppStack', '--out=/tmp/out.json']

    def test_unknown_placeholders_are_left_alone(self):
        assert expand_placeholders(['{other}'], stack_name='S') == ['{other}']
