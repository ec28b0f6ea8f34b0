"""Transport module - HTTP communication with the remote executor."""

from .http_client import ExecutorClient, RemoteExecutorClient

__all__ = [
    "ExecutorClient",
    "RemoteExecutorClient",
]
