# ABOUTME: Shared fixtures for ccconfig tests
# ABOUTME: Every fixture roots file locations in tmp_path so the real home is never touched
import json
from pathlib import Path
from typing import Any

import pytest

from ccconfig.paths import ClaudePaths


def write_json_file(path: Path, data: Any) -> Path:
    """Write data as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


def read_json_file(path: Path) -> Any:
    return json.loads(path.read_text())


@pytest.fixture
def paths(tmp_path: Path) -> ClaudePaths:
    """ClaudePaths rooted at a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return ClaudePaths(home=home)


@pytest.fixture
def project(tmp_path: Path, paths: ClaudePaths) -> Path:
    """A project directory registered in ~/.claude.json."""
    project_dir = tmp_path / "work" / "proj"
    project_dir.mkdir(parents=True)
    write_json_file(paths.claude_json, {"projects": {str(project_dir): {}}})
    return project_dir


@pytest.fixture
def install_plugin(tmp_path: Path, paths: ClaudePaths):
    """Factory that installs a fake plugin and records it in installed_plugins.json."""

    def _install(
        name: str,
        mcp: Any = None,
        scope: str = "user",
        project_path: str | None = None,
    ) -> Path:
        install_path = tmp_path / "plugins" / name
        install_path.mkdir(parents=True, exist_ok=True)
        if mcp is not None:
            write_json_file(install_path / ".mcp.json", mcp)

        if paths.installed_plugins.exists():
            data = read_json_file(paths.installed_plugins)
        else:
            data = {"version": 2, "plugins": {}}

        record: dict[str, Any] = {
            "scope": scope,
            "installPath": str(install_path),
            "version": "1.0.0",
            "installedAt": "2025-01-01T00:00:00Z",
        }
        if project_path is not None:
            record["projectPath"] = project_path
        data["plugins"].setdefault(name, []).append(record)
        write_json_file(paths.installed_plugins, data)
        return install_path

    return _install
