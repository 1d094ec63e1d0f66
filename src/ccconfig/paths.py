# Well-known file locations for ccconfig
from dataclasses import dataclass
from pathlib import Path

from ccconfig.jsonio import ensure_dir

# ABOUTME: Application state lives in ~/.ccconfig, next to the agent's own ~/.claude
APP_CONFIG_DIR = ".ccconfig"
CLAUDE_DIR = ".claude"


@dataclass(frozen=True)
class ClaudePaths:
    """Every file location the engine reads or writes.

    ABOUTME: Derived from a single injected home directory
    ABOUTME: Tests pass tmp_path as home so the real home is never touched
    """
    home: Path

    @classmethod
    def default(cls) -> "ClaudePaths":
        """Paths rooted at the current user's home directory."""
        return cls(home=Path.home())

    @property
    def mcp_json(self) -> Path:
        """User-global registration file (~/.mcp.json)."""
        return self.home / ".mcp.json"

    @property
    def claude_json(self) -> Path:
        """Direct registration file with per-project entries (~/.claude.json)."""
        return self.home / ".claude.json"

    @property
    def claude_dir(self) -> Path:
        return self.home / CLAUDE_DIR

    @property
    def user_settings(self) -> Path:
        """Live settings file (~/.claude/settings.json)."""
        return self.claude_dir / "settings.json"

    @property
    def credentials_file(self) -> Path:
        return self.claude_dir / "config.json"

    @property
    def installed_plugins(self) -> Path:
        return self.claude_dir / "plugins" / "installed_plugins.json"

    @property
    def agents_dir(self) -> Path:
        return self.claude_dir / "agents"

    @property
    def commands_dir(self) -> Path:
        return self.claude_dir / "commands"

    @property
    def skills_dir(self) -> Path:
        return self.claude_dir / "skills"

    @property
    def app_dir(self) -> Path:
        return self.home / APP_CONFIG_DIR

    @property
    def stores_file(self) -> Path:
        """Profile collection file (~/.ccconfig/stores.json)."""
        return self.app_dir / "stores.json"

    @property
    def manifest_file(self) -> Path:
        """Install manifest (~/.ccconfig/security_packs/installed.json)."""
        return self.app_dir / "security_packs" / "installed.json"

    @property
    def backup_dir(self) -> Path:
        return self.app_dir / "backups"

    @property
    def claude_backup_dir(self) -> Path:
        return self.app_dir / "claude_backup"


def project_settings(project: Path) -> Path:
    """Committed project settings file (<project>/.claude/settings.json)."""
    return project / CLAUDE_DIR / "settings.json"


def project_local_settings(project: Path) -> Path:
    """Gitignored project override file (<project>/.claude/settings.local.json)."""
    return project / CLAUDE_DIR / "settings.local.json"


def project_mcp_json(project: Path) -> Path:
    """Project-local registration file (<project>/.mcp.json)."""
    return project / ".mcp.json"


def resolve_paths(paths: ClaudePaths | None) -> ClaudePaths:
    """Return paths, falling back to the default home-rooted layout."""
    return paths if paths is not None else ClaudePaths.default()


def ensure_app_dir(paths: ClaudePaths | None = None) -> Path:
    """Create ~/.ccconfig if it doesn't exist.

    ABOUTME: Returns path to the app directory (guaranteed to exist)
    """
    app_dir = resolve_paths(paths).app_dir
    ensure_dir(app_dir)
    return app_dir
