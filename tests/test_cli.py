"""CLI tests with click's CliRunner and an in-memory executor"""

import json
import os
import signal
import sys

import pytest
from click.testing import CliRunner

from remote_runner import cli

from .conftest import FakeExecutor, simple_test


@pytest.fixture
def executor(monkeypatch):
    """Replace the HTTP client with a FakeExecutor; returns a holder to configure it."""
    holder = {"client": FakeExecutor(), "args": None}

    def _factory(api_url, api_key):
        holder["args"] = (api_url, api_key)
        return holder["client"]

    monkeypatch.setattr(cli, "RemoteExecutorClient", _factory)
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)
    return holder


@pytest.fixture
def suite_dir(write_definition, tmp_path):
    write_definition("suite/a.lynqa.json", {"url": "u", "tests": [simple_test("one"), simple_test("two")]})
    return tmp_path / "suite"


def _invoke(*args, env=None):
    return CliRunner().invoke(cli.main, list(args), env=env)


def _base_args(directory):
    return ["--api-url", "https://api.test", "--api-key", "k", "--directory", str(directory)]


class TestExitCodes:
    def test_all_tests_succeed(self, executor, suite_dir):
        result = _invoke(*_base_args(suite_dir), "--json")

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["success"] is True
        assert output["message"] == "All tests succeeded"
        assert output["data"]["total_tests"] == 2
        assert executor["args"] == ("https://api.test", "k")
        assert executor["client"].closed

    def test_failed_tests(self, executor, suite_dir):
        executor["client"] = FakeExecutor(scripts={2: ["ERROR"]})

        result = _invoke(*_base_args(suite_dir), "--json")

        assert result.exit_code == cli.EXIT_FAILED
        output = json.loads(result.stdout)
        assert output["success"] is False
        assert output["message"] == "1 test(s) failed: a.lynqa.json#2:two"

    def test_no_definition_files(self, executor, tmp_path):
        result = _invoke(*_base_args(tmp_path), "--json")
        assert result.exit_code == cli.EXIT_FAILED
        assert json.loads(result.stdout)["message"] == f"No *.lynqa.json file found in {tmp_path}"
        assert executor["args"] is None

    def test_missing_directory(self, executor, tmp_path):
        result = _invoke(*_base_args(tmp_path / "missing"))
        assert result.exit_code == cli.EXIT_FAILED

    def test_missing_required_input_is_usage_error(self, executor, suite_dir):
        result = _invoke(
            "--api-url", "https://api.test", "--directory", str(suite_dir),
            env={"INPUT_API-KEY": None, "REMOTE_RUNNER_API_KEY": None},
        )
        assert result.exit_code == 2
        assert "api-key" in result.output

    @pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signal delivery")
    def test_cancelled_batch(self, executor, suite_dir):
        executor["client"] = FakeExecutor(
            default=["RUNNING"],
            on_status=lambda run_id, n: os.kill(os.getpid(), signal.SIGINT),
        )

        result = _invoke(*_base_args(suite_dir), "--json")

        assert result.exit_code == cli.EXIT_CANCELLED
        assert json.loads(result.stdout)["message"] == "Tests stopped by user"
        assert executor["client"].stop_calls == ["run-1"]


class TestInputs:
    def test_ci_inputs_from_environment(self, executor, suite_dir):
        env = {
            "INPUT_API-URL": "https://ci.test",
            "INPUT_API-KEY": "ci-key",
            "INPUT_DIRECTORY": str(suite_dir),
        }
        result = _invoke(env=env)
        assert result.exit_code == 0, result.output
        assert executor["args"] == ("https://ci.test", "ci-key")

    def test_input_option_feeds_placeholders(self, executor, write_definition, tmp_path):
        write_definition("s/a.lynqa.json", {
            "url": "u", "tests": [simple_test("x", "Log in as {{input.user}}")],
        })

        result = _invoke(*_base_args(tmp_path / "s"), "--input", "user=carol")

        assert result.exit_code == 0, result.output
        assert executor["client"].payloads[0]["steps"][0]["action"] == "Log in as carol"

    def test_malformed_input_option(self, executor, suite_dir):
        result = _invoke(*_base_args(suite_dir), "--input", "no-equals-sign")
        assert result.exit_code == 2

    def test_config_file(self, executor, suite_dir, tmp_path):
        config = tmp_path / "runner.yml"
        config.write_text(
            f"api-url: https://from-file.test\napi-key: file-key\ndirectory: {suite_dir}\n",
            encoding="utf-8",
        )
        result = _invoke("--config", str(config))
        assert result.exit_code == 0, result.output
        assert executor["args"] == ("https://from-file.test", "file-key")

    def test_report_file_written(self, executor, suite_dir, tmp_path):
        report_path = tmp_path / "reports" / "run.json"
        result = _invoke(*_base_args(suite_dir), "--report", str(report_path))
        assert result.exit_code == 0, result.output
        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["summary"]["total"] == 2
