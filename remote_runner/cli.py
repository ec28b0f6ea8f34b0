"""CLI entry point for remote-runner.

Usable directly or from a CI job:
    remote-runner --api-url <url> --api-key <key> --directory <dir> [options]
    python -m remote_runner.cli ...

In CI the required values may also come from INPUT_API-URL, INPUT_API-KEY
and INPUT_DIRECTORY.
"""

import json
import logging
import sys
import time
from typing import Optional

import click

from . import __version__
from .config import RunnerConfig
from .definitions.discovery import find_definition_files
from .errors import ConfigError
from .log import setup_logging
from .placeholders import PlaceholderResolver
from .reporting.json_reporter import JsonReporter
from .runner.cancellation import CancellationState
from .runner.orchestrator import BatchOrchestrator
from .runner.poller import RunPoller
from .transport.http_client import RemoteExecutorClient

logger = logging.getLogger("remote_runner")

EXIT_FAILED = 1
EXIT_CANCELLED = 130


def parse_kv_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE pairs; entries without '=' are rejected."""
    result: dict[str, str] = {}
    for p in pairs:
        if "=" not in p:
            raise click.BadParameter(f"expected KEY=VALUE, got {p!r}", param_hint="--input")
        k, v = p.split("=", 1)
        result[k.strip()] = v
    return result


def build_config(
    config_path: Optional[str],
    api_url: Optional[str],
    api_key: Optional[str],
    directory: Optional[str],
    suffix: Optional[str],
    inputs: dict[str, str],
    report_file: Optional[str],
) -> RunnerConfig:
    """Merge config file, CLI options and CI inputs, then validate.

    Raises:
        ConfigError: If the file is invalid or a required value is missing.
    """
    cfg = RunnerConfig.from_file(config_path) if config_path else RunnerConfig()

    if api_url:
        cfg.api_url = api_url
    if api_key:
        cfg.api_key = api_key
    if directory:
        cfg.directory = directory
    if suffix:
        cfg.suffix = suffix
    if report_file:
        cfg.report_file = report_file
    cfg.inputs.update(inputs)

    cfg.fill_from_inputs(cfg.input_source())
    cfg.validate()
    return cfg


@click.command()
@click.version_option(version=__version__)
@click.option("--api-url", envvar="REMOTE_RUNNER_API_URL", help="Base URL of the executor API.")
@click.option("--api-key", envvar="REMOTE_RUNNER_API_KEY", help="API key for the executor.")
@click.option("--directory", "-d", envvar="REMOTE_RUNNER_DIRECTORY", help="Directory scanned for definition files.")
@click.option("--suffix", default=None, help="Definition file suffix (default: .lynqa.json).")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help="YAML config file.")
@click.option("--input", "-i", "inputs", multiple=True, help="Input for {{input.KEY}} placeholders, KEY=VALUE (repeatable).")
@click.option("--report", "report_file", type=click.Path(dir_okay=False), help="Write a JSON report to this file.")
@click.option("--json", "json_output", is_flag=True, help="Print a JSON summary on stdout.")
@click.option("--log-level", default="INFO", envvar="REMOTE_RUNNER_LOG_LEVEL", show_default=True)
@click.option("--log-json", is_flag=True, envvar="REMOTE_RUNNER_LOG_JSON", help="Log as JSON lines.")
def main(
    api_url: Optional[str],
    api_key: Optional[str],
    directory: Optional[str],
    suffix: Optional[str],
    config_path: Optional[str],
    inputs: tuple[str, ...],
    report_file: Optional[str],
    json_output: bool,
    log_level: str,
    log_json: bool,
) -> None:
    """Run every test definition found in a directory on the remote executor."""
    setup_logging(log_level, json_output=log_json)

    try:
        cfg = build_config(
            config_path, api_url, api_key, directory, suffix,
            parse_kv_pairs(inputs), report_file,
        )
    except ConfigError as e:
        raise click.UsageError(str(e))

    try:
        files = find_definition_files(cfg.directory, cfg.suffix)
    except FileNotFoundError as e:
        _fail(str(e), json_output)
        sys.exit(EXIT_FAILED)

    if not files:
        _fail(f"No *{cfg.suffix} file found in {cfg.directory}", json_output)
        sys.exit(EXIT_FAILED)
    logger.info("Found %d files: %s", len(files), ", ".join(str(f) for f in files))

    start_time = time.time()
    state = CancellationState()

    with RemoteExecutorClient(cfg.api_url, cfg.api_key) as client:
        orchestrator = BatchOrchestrator(
            client,
            resolver=PlaceholderResolver(cfg.input_source()),
            state=state,
            poller=RunPoller(
                client,
                interval=cfg.poll_interval,
                timeout=cfg.test_timeout,
                sleep=state.wait,
            ),
        )
        outcome = orchestrator.run_batch(files)

    duration_ms = int((time.time() - start_time) * 1000)
    reporter = JsonReporter()
    report = reporter.generate(outcome, duration_ms=duration_ms)

    report_path = None
    if cfg.report_file:
        try:
            report_path = str(reporter.save(report, cfg.report_file))
            logger.info("Report saved: %s", report_path)
        except OSError as e:
            logger.warning("Failed to save report: %s", e)

    if outcome.success:
        logger.info(outcome.summary())
    else:
        logger.error(outcome.summary())

    if json_output:
        click.echo(json.dumps(reporter.generate_cli_output(report, report_path), ensure_ascii=False))

    if outcome.cancelled:
        sys.exit(EXIT_CANCELLED)
    if not outcome.success:
        sys.exit(EXIT_FAILED)


def _fail(message: str, json_output: bool) -> None:
    logger.error(message)
    if json_output:
        click.echo(json.dumps({
            "success": False,
            "command": "run",
            "data": None,
            "message": message,
        }, ensure_ascii=False))


if __name__ == "__main__":
    main()
