# ABOUTME: Backup utilities for the agent's settings files.
# ABOUTME: Timestamped copies with retention cleanup, plus the one-time ~/.claude snapshot.
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

from ccconfig.exceptions import IOFailureError
from ccconfig.jsonio import ensure_dir
from ccconfig.paths import ClaudePaths, resolve_paths

logger = logging.getLogger(__name__)

MAX_BACKUPS_PER_FILE = 5


def create_backup(source_path: Path, backup_dir: Path) -> Path:
    """Create a timestamped backup of a file.

    ABOUTME: Backup format: {stem}_{YYYYMMDD}_{HHMMSS}_{microseconds}.{ext}
    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Creates backup_dir if it doesn't exist

    Args:
        source_path: Path to file to backup
        backup_dir: Directory where backup should be created

    Returns:
        Path to created backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist
        IOFailureError: If backup creation fails

    Examples:
        >>> source = Path("~/.claude/settings.json").expanduser()
        >>> backup_path = create_backup(source, Path("~/.ccconfig/backups").expanduser())
        >>> backup_path.name
        'settings_20260108_143022_517204.json'
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    ensure_dir(backup_dir)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

    # settings.json -> settings, settings.local.json -> settings
    stem = source_path.name.replace(".", "_").split("_")[0] or "config"
    backup_path = backup_dir / f"{stem}_{timestamp}{source_path.suffix}"

    try:
        shutil.copy2(source_path, backup_path)
    except OSError as e:
        raise IOFailureError(f"Failed to back up {source_path}: {e}") from e

    cleanup_old_backups(backup_dir)

    return backup_path


def cleanup_old_backups(backup_dir: Path, max_backups_per_file: int = MAX_BACKUPS_PER_FILE) -> list[Path]:
    """Remove old backup files, keeping only the most recent per source file.

    ABOUTME: Groups backups by prefix (before _timestamp), newest first
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Returns:
        List of paths that were deleted
    """
    deleted_files: list[Path] = []

    if not backup_dir.exists():
        return deleted_files

    backup_pattern = re.compile(r"^(.+?)_(\d{8}_\d{6}(?:_\d{6})?)\.(.+)$")
    backups_by_stem: dict[str, list[tuple[str, Path]]] = {}

    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue

        match = backup_pattern.match(file_path.name)
        if not match:
            continue

        backups_by_stem.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in backups_by_stem.values():
        backups.sort(key=lambda x: x[0], reverse=True)

        for _timestamp, file_path in backups[max_backups_per_file:]:
            try:
                file_path.unlink()
                deleted_files.append(file_path)
                logger.debug(f"Deleted old backup: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup {file_path}: {e}")

    return deleted_files


def backup_claude_dir(paths: ClaudePaths | None = None) -> Path | None:
    """Copy the top-level files of ~/.claude into ~/.ccconfig/claude_backup once.

    ABOUTME: Skipped when ~/.claude is missing or a backup already exists
    ABOUTME: Subdirectories are not copied

    Returns:
        The backup directory if a backup was made, else None
    """
    paths = resolve_paths(paths)
    if not paths.claude_dir.exists():
        logger.debug(f"{paths.claude_dir} does not exist, skipping backup")
        return None

    backup_dir = paths.claude_backup_dir
    if backup_dir.exists():
        logger.debug(f"Claude backup already exists at {backup_dir}, skipping")
        return None

    ensure_dir(backup_dir)
    try:
        for source in paths.claude_dir.iterdir():
            if source.is_file():
                shutil.copy2(source, backup_dir / source.name)
    except OSError as e:
        raise IOFailureError(f"Failed to back up {paths.claude_dir}: {e}") from e

    logger.info(f"Backed up {paths.claude_dir} to {backup_dir}")
    return backup_dir
