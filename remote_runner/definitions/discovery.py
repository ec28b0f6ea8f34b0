"""Recursive discovery of definition files."""

from pathlib import Path
from typing import Union

from ..config import DEFAULT_SUFFIX


def find_definition_files(
    directory: Union[str, Path], suffix: str = DEFAULT_SUFFIX
) -> list[Path]:
    """Find every file under `directory` whose name ends with `suffix`.

    Args:
        directory: Root directory to scan recursively.
        suffix: File name suffix, e.g. ".lynqa.json".

    Returns:
        Matching files sorted by path.

    Raises:
        FileNotFoundError: If `directory` does not exist or is not a directory.
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {root}")

    return sorted(
        p for p in root.rglob("*")
        if p.is_file() and p.name.endswith(suffix)
    )
