"""remote-runner - run test definitions on a remote test executor."""

__version__ = "0.1.0"
