# ABOUTME: Tests for backup utilities.
# ABOUTME: Covers create_backup, cleanup_old_backups and the one-time ~/.claude snapshot.
import re
from pathlib import Path

import pytest

from ccconfig.utils.backup import backup_claude_dir, cleanup_old_backups, create_backup


class TestCreateBackup:
    """Tests for create_backup function."""

    def test_backup_preserves_content(self, tmp_path):
        """Test that backup preserves file content."""
        source = tmp_path / "settings.json"
        original_content = '{"env": {"KEY": "value"}}'
        source.write_text(original_content)

        backup_path = create_backup(source, tmp_path / "backups")

        assert backup_path.read_text() == original_content

    def test_backup_filename_format(self, tmp_path):
        """Test that backup filename follows format: {stem}_{YYYYMMDD}_{HHMMSS}_{micro}.{ext}"""
        source = tmp_path / "settings.local.json"
        source.write_text("{}")

        backup_path = create_backup(source, tmp_path / "backups")

        assert re.match(r"^settings_\d{8}_\d{6}_\d{6}\.json$", backup_path.name)

    def test_back_to_back_backups_kept(self, tmp_path):
        """Test that two backups of the same file in quick succession both survive."""
        source = tmp_path / "settings.json"
        source.write_text('{"v": 1}')
        backup_dir = tmp_path / "backups"

        first = create_backup(source, backup_dir)
        source.write_text('{"v": 2}')
        second = create_backup(source, backup_dir)

        assert first != second
        assert first.read_text() == '{"v": 1}'
        assert second.read_text() == '{"v": 2}'

    def test_creates_backup_dir_if_missing(self, tmp_path):
        """Test that backup directory is created if it doesn't exist."""
        source = tmp_path / "settings.json"
        source.write_text("{}")
        backup_dir = tmp_path / "new_backups" / "nested"

        backup_path = create_backup(source, backup_dir)

        assert backup_dir.exists()
        assert backup_path.parent == backup_dir

    def test_missing_source(self, tmp_path):
        """Test that a missing source raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            create_backup(tmp_path / "missing.json", tmp_path / "backups")


class TestCleanupOldBackups:
    """Tests for cleanup_old_backups function."""

    def _make_backups(self, backup_dir: Path, stem: str, count: int) -> None:
        backup_dir.mkdir(parents=True, exist_ok=True)
        for i in range(count):
            (backup_dir / f"{stem}_20260101_0000{i:02d}.json").write_text("{}")

    def test_keeps_newest_per_stem(self, tmp_path):
        """Test only the newest backups per source file are kept."""
        backup_dir = tmp_path / "backups"
        self._make_backups(backup_dir, "settings", 7)
        self._make_backups(backup_dir, "config", 2)

        deleted = cleanup_old_backups(backup_dir, max_backups_per_file=5)

        assert len(deleted) == 2
        remaining = sorted(p.name for p in backup_dir.glob("settings_*"))
        assert remaining[0] == "settings_20260101_000002.json"
        assert len(list(backup_dir.glob("config_*"))) == 2

    def test_ignores_unrelated_files(self, tmp_path):
        """Test files not matching the backup pattern are left alone."""
        backup_dir = tmp_path / "backups"
        backup_dir.mkdir()
        (backup_dir / "notes.txt").write_text("keep")

        assert cleanup_old_backups(backup_dir, max_backups_per_file=0) == []
        assert (backup_dir / "notes.txt").exists()

    def test_missing_dir(self, tmp_path):
        """Test a missing backup directory is not an error."""
        assert cleanup_old_backups(tmp_path / "nope") == []


class TestBackupClaudeDir:
    """Tests for the one-time ~/.claude backup."""

    def test_copies_top_level_files_once(self, paths):
        """Test top-level files are copied and later calls are skipped."""
        paths.claude_dir.mkdir()
        (paths.claude_dir / "settings.json").write_text('{"a": 1}')
        (paths.claude_dir / "agents").mkdir()
        (paths.claude_dir / "agents" / "x.md").write_text("x")

        backup_dir = backup_claude_dir(paths)

        assert backup_dir == paths.claude_backup_dir
        assert (backup_dir / "settings.json").read_text() == '{"a": 1}'
        assert not (backup_dir / "agents").exists()
        assert backup_claude_dir(paths) is None

    def test_no_claude_dir(self, paths):
        """Test nothing happens when ~/.claude doesn't exist."""
        assert backup_claude_dir(paths) is None
        assert not paths.claude_backup_dir.exists()
