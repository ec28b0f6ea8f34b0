"""Exception hierarchy for remote-runner.

Every error raised on purpose by the package derives from RemoteRunnerError,
so the CLI can turn it into a readable message instead of a traceback.
"""

from typing import Optional


class RemoteRunnerError(Exception):
    """Base error."""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(RemoteRunnerError):
    """Missing or invalid configuration value."""

    code = "CONFIG_ERROR"


class DefinitionError(RemoteRunnerError):
    """Test-definition file or entry is unreadable or malformed."""

    code = "DEFINITION_ERROR"

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class ExecutorError(RemoteRunnerError):
    """Remote executor call failed."""

    code = "EXECUTOR_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
