# Installed plugin discovery and enablement
import logging
from pathlib import Path
from typing import Any

from ccconfig.exceptions import ConfigError, MalformedInputError
from ccconfig.jsonio import ensure_dir, read_json_object, write_json
from ccconfig.models import PluginInfo, PluginInstall, PluginPackages
from ccconfig.paths import ClaudePaths, project_local_settings, resolve_paths

logger = logging.getLogger(__name__)


def read_installed_plugins(paths: ClaudePaths | None = None) -> list[PluginInstall]:
    """Read every install record from installed_plugins.json.

    ABOUTME: Returns empty list if the descriptor doesn't exist
    ABOUTME: Records are returned in file order, plugin by plugin

    Raises:
        MalformedInputError: If the descriptor is not valid JSON of the expected shape
    """
    paths = resolve_paths(paths)
    data = read_json_object(paths.installed_plugins, "installed_plugins.json")
    plugins = data.get("plugins", {})
    if not isinstance(plugins, dict):
        raise MalformedInputError("'plugins' in installed_plugins.json is not an object")

    installs: list[PluginInstall] = []
    for plugin_name, records in plugins.items():
        if not isinstance(records, list):
            raise MalformedInputError(f"Install records for plugin '{plugin_name}' are not an array")
        for record in records:
            if isinstance(record, dict):
                installs.append(PluginInstall.from_dict(plugin_name, record))
    return installs


def enabled_plugins_settings_path(install: PluginInstall, paths: ClaudePaths) -> Path | None:
    """Settings file whose enabledPlugins map governs this install.

    ABOUTME: local-scope installs read the project-local override file
    ABOUTME: every other scope reads the user-global settings file
    ABOUTME: Returns None for a local install with no recorded project path
    """
    if install.scope == "local":
        if install.project_path is None:
            return None
        return project_local_settings(Path(install.project_path))
    return paths.user_settings


def read_enabled_plugins(settings_path: Path) -> dict[str, bool]:
    """Read the enabledPlugins name -> bool map from a settings file."""
    settings = read_json_object(settings_path, "settings file")
    enabled_plugins = settings.get("enabledPlugins")
    if not isinstance(enabled_plugins, dict):
        return {}
    return {name: value for name, value in enabled_plugins.items() if isinstance(value, bool)}


class PluginEnablement:
    """Resolves whether an install is enabled, reading each settings file once.

    Absence of an explicit entry means enabled. A settings file that can't
    be read is treated as having no entries.
    """

    def __init__(self, paths: ClaudePaths) -> None:
        self._paths = paths
        self._cache: dict[Path, dict[str, bool]] = {}

    def is_enabled(self, install: PluginInstall) -> bool:
        settings_path = enabled_plugins_settings_path(install, self._paths)
        if settings_path is None:
            return True

        if settings_path not in self._cache:
            try:
                self._cache[settings_path] = read_enabled_plugins(settings_path)
            except ConfigError as e:
                logger.warning(f"Ignoring enabledPlugins in {settings_path}: {e}")
                self._cache[settings_path] = {}

        return self._cache[settings_path].get(install.plugin_name, True)


def detect_packages(install_path: str | Path) -> PluginPackages:
    """Detect which kinds of content a plugin ships.

    ABOUTME: agents/, skills/, commands/ directories and a .mcp.json file
    ABOUTME: Missing install path yields an all-False result
    """
    path = Path(install_path)
    if not path.exists():
        logger.debug(f"Plugin install path does not exist: {path}")
        return PluginPackages()

    packages = PluginPackages(
        has_agents=(path / "agents").is_dir(),
        has_skills=(path / "skills").is_dir(),
        has_commands=(path / "commands").is_dir(),
        has_mcp=(path / ".mcp.json").is_file(),
    )
    logger.debug(f"Package detection for {path}: {packages}")
    return packages


def list_plugins(paths: ClaudePaths | None = None) -> list[PluginInfo]:
    """List every install record with its enabled flag and packages."""
    paths = resolve_paths(paths)
    enablement = PluginEnablement(paths)
    return [
        PluginInfo(
            install=install,
            enabled=enablement.is_enabled(install),
            packages=detect_packages(install.install_path),
        )
        for install in read_installed_plugins(paths)
    ]


def set_plugin_enabled(
    plugin_name: str,
    enabled: bool,
    scope: str,
    project_path: str | None = None,
    paths: ClaudePaths | None = None,
) -> Path:
    """Write enabledPlugins[plugin_name] into the scope-appropriate settings file.

    Args:
        plugin_name: Plugin to toggle
        enabled: New state
        scope: Install scope ("local" targets the project-local override file)
        project_path: Project directory, required for local scope
        paths: File locations (defaults to the real home directory)

    Returns:
        Path of the settings file that was written

    Raises:
        MalformedInputError: If local scope has no project path, or the settings
            file / its enabledPlugins key has the wrong shape
    """
    paths = resolve_paths(paths)
    if scope == "local":
        if not project_path:
            raise MalformedInputError("Project path required for local scope")
        settings_path = project_local_settings(Path(project_path))
    else:
        settings_path = paths.user_settings

    ensure_dir(settings_path.parent)
    settings = read_json_object(settings_path, "settings file")
    enabled_plugins: Any = settings.setdefault("enabledPlugins", {})
    if not isinstance(enabled_plugins, dict):
        raise MalformedInputError(f"enabledPlugins is not an object in {settings_path}")

    enabled_plugins[plugin_name] = enabled
    write_json(settings_path, settings)
    logger.info(f"Plugin {plugin_name} {'enabled' if enabled else 'disabled'} in {settings_path}")
    return settings_path
