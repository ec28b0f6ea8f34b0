"""Runner configuration and external inputs.

Configuration comes from three places, lowest precedence first:
1. CI-runner inputs exposed as INPUT_<NAME> environment variables
2. An optional YAML file
3. Explicit CLI options
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".lynqa.json"
POLL_INTERVAL = 30.0
TEST_TIMEOUT = 30 * 60.0


def input_env_name(name: str) -> str:
    """Environment variable holding the CI input `name`."""
    return "INPUT_" + name.replace(" ", "_").upper()


def _input_text(value: Any) -> str:
    # A key without a value (`user:` in YAML) is an unset input
    return "" if value is None else str(value)


class InputSource:
    """Read-only view over named external inputs.

    Explicit values win over the INPUT_<NAME> environment variables set by
    the hosting CI runner. Missing inputs read as the empty string.
    """

    def __init__(
        self,
        values: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._values = {k: _input_text(v) for k, v in (values or {}).items()}
        self._environ = os.environ if environ is None else environ

    def get(self, name: str) -> str:
        if name in self._values:
            return self._values[name].strip()
        return self._environ.get(input_env_name(name), "").strip()


@dataclass
class RunnerConfig:
    """Settings for one batch invocation."""
    api_url: str = ""
    api_key: str = ""
    directory: str = ""
    suffix: str = DEFAULT_SUFFIX
    poll_interval: float = POLL_INTERVAL
    test_timeout: float = TEST_TIMEOUT
    report_file: Optional[str] = None
    inputs: dict[str, str] = field(default_factory=dict)

    # Keys from the config file that are not fields above
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RunnerConfig":
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file is missing, unparsable or not a mapping.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must be a mapping: {path}")

        # YAML keys use dashes like the CLI options
        data = {str(k).replace("-", "_"): v for k, v in data.items()}
        known = set(cls.__dataclass_fields__) - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}

        inputs = matched.get("inputs") or {}
        if not isinstance(inputs, dict):
            raise ConfigError(f"'inputs' must be a mapping in {path}")
        matched["inputs"] = {str(k): _input_text(v) for k, v in inputs.items()}
        for key in ("poll_interval", "test_timeout"):
            if key in matched:
                try:
                    matched[key] = float(matched[key])
                except (TypeError, ValueError):
                    raise ConfigError(f"'{key}' must be a number in {path}")

        cfg = cls(**matched)
        cfg.extra = extra
        if extra:
            logger.debug("Ignoring unknown config keys: %s", ", ".join(sorted(extra)))
        return cfg

    def input_source(self, environ: Optional[Mapping[str, str]] = None) -> InputSource:
        return InputSource(self.inputs, environ)

    def fill_from_inputs(self, source: InputSource) -> None:
        """Take api-url, api-key and directory from CI inputs when unset."""
        if not self.api_url:
            self.api_url = source.get("api-url")
        if not self.api_key:
            self.api_key = source.get("api-key")
        if not self.directory:
            self.directory = source.get("directory")

    def validate(self) -> None:
        missing = [
            name for name, value in (
                ("api-url", self.api_url),
                ("api-key", self.api_key),
                ("directory", self.directory),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Input required and not supplied: {', '.join(missing)}")
        if self.poll_interval <= 0:
            raise ConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.test_timeout <= 0:
            raise ConfigError(f"test_timeout must be positive, got {self.test_timeout}")
