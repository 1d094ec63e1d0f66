# Credential placeholder that lets the agent start without an interactive login
import logging
from pathlib import Path

from ccconfig.jsonio import ensure_dir, read_json, write_json
from ccconfig.paths import ClaudePaths, resolve_paths

logger = logging.getLogger(__name__)

PLACEHOLDER_KEY = "primaryApiKey"
PLACEHOLDER_VALUE = "xxx"


def unlock_credentials(paths: ClaudePaths | None = None) -> bool:
    """Ensure ~/.claude/config.json carries a primaryApiKey entry.

    ABOUTME: Creates the file when missing; never overwrites an existing key
    ABOUTME: A non-object file is left untouched

    Returns:
        True if the file was written, False if nothing needed to change
    """
    paths = resolve_paths(paths)
    config_path: Path = paths.credentials_file
    ensure_dir(config_path.parent)

    if not config_path.exists():
        write_json(config_path, {PLACEHOLDER_KEY: PLACEHOLDER_VALUE})
        logger.info(f"Created {config_path} with {PLACEHOLDER_KEY}")
        return True

    data = read_json(config_path)
    if not isinstance(data, dict) or PLACEHOLDER_KEY in data:
        logger.debug(f"{PLACEHOLDER_KEY} already present in {config_path}, no action needed")
        return False

    data[PLACEHOLDER_KEY] = PLACEHOLDER_VALUE
    write_json(config_path, data)
    logger.info(f"Added {PLACEHOLDER_KEY} to {config_path}")
    return True
