"""Setup configuration for remote-runner tool."""

from setuptools import setup, find_packages

setup(
    name="remote-runner",
    version="0.1.0",
    description="Runs test definitions on a remote test executor and reports the outcome",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "remote-runner=remote_runner.cli:main",
        ],
    },
)
