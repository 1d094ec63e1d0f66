# ABOUTME: Utility modules for ccconfig
# ABOUTME: Exports backup functions

from ccconfig.utils.backup import backup_claude_dir, cleanup_old_backups, create_backup

__all__ = [
    "backup_claude_dir",
    "cleanup_old_backups",
    "create_backup",
]
