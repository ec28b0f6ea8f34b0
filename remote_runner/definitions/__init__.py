"""Definitions module - test-definition files and run-state models."""

from .schema import (
    DefinitionFile,
    RunStatus,
    RunStatusReport,
    Secret,
    Step,
    StepStatus,
    TestContext,
    TestSpecification,
)
from .parser import build_specification, parse_definition_data, parse_definition_file
from .discovery import find_definition_files

__all__ = [
    "DefinitionFile",
    "RunStatus",
    "RunStatusReport",
    "Secret",
    "Step",
    "StepStatus",
    "TestContext",
    "TestSpecification",
    "build_specification",
    "parse_definition_data",
    "parse_definition_file",
    "find_definition_files",
]
