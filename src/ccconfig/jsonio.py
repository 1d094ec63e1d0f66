# JSON file primitives shared by every ccconfig module
import json
import logging
from pathlib import Path
from typing import Any

from ccconfig.exceptions import IOFailureError, MalformedInputError

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any:
    """Read JSON file with error handling.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises MalformedInputError for invalid JSON or invalid UTF-8
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"Invalid UTF-8 in {path}: {e}") from e
    except OSError as e:
        raise IOFailureError(f"Failed to read {path}: {e}") from e


def read_json_object(path: Path, what: str = "config file") -> dict[str, Any]:
    """Read a JSON file that must contain an object.

    Args:
        path: File to read (absent file reads as {})
        what: Human-readable name used in error messages

    Raises:
        MalformedInputError: If the JSON is invalid or not an object
        IOFailureError: If the file cannot be read
    """
    data = read_json(path)
    if not isinstance(data, dict):
        raise MalformedInputError(f"{what} is not a JSON object: {path}")
    return data


def write_json(path: Path, data: Any) -> None:
    """Write JSON file with error handling.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Whole-file overwrite, 2-space indentation, trailing newline
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
    except OSError as e:
        raise IOFailureError(f"Failed to write {path}: {e}") from e
    logger.debug(f"Wrote {path}")


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if missing."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailureError(f"Failed to create directory {path}: {e}") from e
    return path


def extract_string_array(data: Any, key: str) -> list[str]:
    """Return the string members of data[key], or [] if it isn't an array."""
    if not isinstance(data, dict):
        return []
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def merge_top_level(target: Any, patch: Any) -> Any:
    """Partially merge patch into target.

    ABOUTME: Only top-level keys present in patch are overwritten
    ABOUTME: Keys absent from patch are left untouched
    ABOUTME: Returns new value (doesn't mutate inputs)

    If either side is not an object, patch replaces target wholesale.

    Examples:
        >>> merge_top_level({"a": 1, "b": 2}, {"b": 9, "c": 3})
        {'a': 1, 'b': 9, 'c': 3}
        >>> merge_top_level([1, 2], {"a": 1})
        {'a': 1}
    """
    if isinstance(target, dict) and isinstance(patch, dict):
        result = dict(target)
        result.update(patch)
        return result
    return patch.copy() if isinstance(patch, (dict, list)) else patch
