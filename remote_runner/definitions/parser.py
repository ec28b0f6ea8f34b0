"""JSON test-definition parser.

Reads definition files of the form:

    {
      "url": "https://app.example.com",
      "tests": [
        {"name": "...", "context": {...}, "steps": [{"action": "...", "expectedResult": "..."}]}
      ]
    }
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

from ..errors import DefinitionError
from .schema import DefinitionFile, Secret, Step, TestContext, TestSpecification


def parse_definition_file(file_path: Union[str, Path]) -> DefinitionFile:
    """Read and parse a definition file.

    Args:
        file_path: Path to the JSON definition file.

    Returns:
        DefinitionFile with raw test entries.

    Raises:
        DefinitionError: If the file is unreadable, not JSON, or has no tests list.
    """
    file_path = Path(file_path)

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DefinitionError(f"Error reading {file_path}: {e}", source=str(file_path))

    return parse_definition_data(data, source=str(file_path))


def parse_definition_data(data: Any, source: str = "<inline>") -> DefinitionFile:
    """Parse definition content that has already been decoded from JSON.

    Raises:
        DefinitionError: If the content is not a mapping or has no tests list.
    """
    if not isinstance(data, dict):
        raise DefinitionError(
            f"Definition must be a JSON object, got {type(data).__name__} in {source}",
            source=source,
        )

    tests = data.get("tests")
    if not isinstance(tests, list):
        raise DefinitionError(f"No tests found in {source}", source=source)

    url = data.get("url")
    return DefinitionFile(
        path=source,
        url=url if isinstance(url, str) else "",
        tests=list(tests),
    )


def raw_test_name(entry: Any) -> Optional[str]:
    """Name of a raw test entry, or None when the entry has none."""
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return entry["name"]
    return None


def build_specification(definition: DefinitionFile, index: int) -> TestSpecification:
    """Build the TestSpecification for the test at `index` (0-based).

    Raises:
        DefinitionError: If the entry is not a mapping or its steps are malformed.
    """
    entry = definition.tests[index]
    position = index + 1
    where = f"tests[{index}] ({definition.path})"

    if not isinstance(entry, dict):
        raise DefinitionError(f"Test entry must be an object in {where}", definition.path)

    steps_data = entry.get("steps")
    if not isinstance(steps_data, list):
        raise DefinitionError(f"'steps' must be a list in {where}", definition.path)

    steps = []
    for i, step_data in enumerate(steps_data):
        if not isinstance(step_data, dict):
            raise DefinitionError(f"Step {i} must be an object in {where}", definition.path)
        if "action" not in step_data:
            raise DefinitionError(
                f"Missing required field 'action' in steps[{i}] of {where}",
                definition.path,
            )
        action = step_data["action"]
        expected = step_data.get("expectedResult", "")
        if not isinstance(action, str):
            raise DefinitionError(f"'action' must be a string in steps[{i}] of {where}", definition.path)
        if not isinstance(expected, str):
            raise DefinitionError(
                f"'expectedResult' must be a string in steps[{i}] of {where}",
                definition.path,
            )
        steps.append(Step(action=action, expected_result=expected))

    name = entry.get("name")
    return TestSpecification(
        source=definition.path,
        position=position,
        url=definition.url,
        steps=tuple(steps),
        name=name if isinstance(name, str) else None,
        context=_parse_context(entry.get("context"), where, definition.path),
    )


def _parse_context(data: Any, where: str, source: str) -> Optional[TestContext]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise DefinitionError(f"'context' must be an object in {where}", source)

    secrets_data = data.get("secrets")
    secrets = None
    if secrets_data is not None:
        if not isinstance(secrets_data, list):
            raise DefinitionError(f"'context.secrets' must be a list in {where}", source)
        secrets = []
        for i, s in enumerate(secrets_data):
            if not isinstance(s, dict) or "name" not in s:
                raise DefinitionError(
                    f"Secret {i} must be an object with a 'name' in {where}", source
                )
            secrets.append(Secret(name=str(s["name"]), value=str(s.get("value") or "")))
        secrets = tuple(secrets)

    return TestContext(
        data={k: v for k, v in data.items() if k != "secrets"},
        secrets=secrets,
    )
