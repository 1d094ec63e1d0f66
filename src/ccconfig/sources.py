# Source readers: raw server-definition maps from each configuration scope
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from ccconfig.jsonio import read_json, read_json_object
from ccconfig.models import PluginInstall
from ccconfig.paths import ClaudePaths, project_mcp_json, resolve_paths
from ccconfig.plugins import PluginEnablement, detect_packages, read_installed_plugins

logger = logging.getLogger(__name__)

# ABOUTME: Type alias for a name -> registration object map
ServerMap = dict[str, dict[str, Any]]


def _mcp_servers_object(data: Any) -> ServerMap:
    """Extract the mcpServers object, keeping only object-valued entries."""
    if not isinstance(data, dict):
        return {}
    servers = data.get("mcpServers")
    if not isinstance(servers, dict):
        return {}
    return {name: config for name, config in servers.items() if isinstance(config, dict)}


def read_mcp_servers_file(path: Path) -> ServerMap:
    """Read the mcpServers object of any registration file.

    ABOUTME: Returns empty dict if file doesn't exist or has no mcpServers
    ABOUTME: Raises MalformedInputError for invalid JSON
    """
    return _mcp_servers_object(read_json(path))


def read_user_mcpjson_servers(paths: ClaudePaths | None = None) -> ServerMap:
    """User scope, ~/.mcp.json."""
    return read_mcp_servers_file(resolve_paths(paths).mcp_json)


def read_user_direct_servers(paths: ClaudePaths | None = None) -> ServerMap:
    """User scope, top-level mcpServers of ~/.claude.json."""
    return read_mcp_servers_file(resolve_paths(paths).claude_json)


def read_project_servers(cwd: str, paths: ClaudePaths | None = None) -> ServerMap:
    """Project scope, ~/.claude.json projects[cwd].mcpServers."""
    data = read_json(resolve_paths(paths).claude_json)
    projects = data.get("projects") if isinstance(data, dict) else None
    if not isinstance(projects, dict):
        return {}
    return _mcp_servers_object(projects.get(cwd))


def get_registered_project(cwd: str | None, paths: ClaudePaths | None = None) -> Path | None:
    """Return cwd as a Path if ~/.claude.json has a projects entry for it.

    ABOUTME: The projects map is keyed by absolute project path strings
    """
    if not cwd:
        return None
    data = read_json(resolve_paths(paths).claude_json)
    projects = data.get("projects") if isinstance(data, dict) else None
    if isinstance(projects, dict) and cwd in projects:
        return Path(cwd)
    return None


def read_local_servers(cwd: str, paths: ClaudePaths | None = None) -> ServerMap:
    """Local scope, <project>/.mcp.json for a registered project."""
    project = get_registered_project(cwd, paths)
    if project is None:
        return {}
    return read_mcp_servers_file(project_mcp_json(project))


def list_projects(paths: ClaudePaths | None = None) -> dict[str, Any]:
    """Return every projects entry of ~/.claude.json (path -> project config)."""
    data = read_json_object(resolve_paths(paths).claude_json, ".claude.json")
    projects = data.get("projects")
    return dict(projects) if isinstance(projects, dict) else {}


class PluginMcpForm(Enum):
    """Shapes a plugin's .mcp.json can take."""

    OBJECT = "object"  # {"mcpServers": {name: config}}
    ARRAY = "array"  # {"mcpServers": [{"name": ..., ...}]}
    BARE = "bare"  # the whole file is a single server config
    UNKNOWN = "unknown"


def classify_plugin_mcp(data: Any) -> PluginMcpForm:
    if not isinstance(data, dict):
        return PluginMcpForm.UNKNOWN
    if "mcpServers" not in data:
        return PluginMcpForm.BARE
    servers = data["mcpServers"]
    if isinstance(servers, dict):
        return PluginMcpForm.OBJECT
    if isinstance(servers, list):
        return PluginMcpForm.ARRAY
    return PluginMcpForm.UNKNOWN


def normalize_plugin_mcp(plugin_name: str, data: Any) -> ServerMap:
    """Normalize any plugin .mcp.json shape into a name -> config map.

    ABOUTME: Array entries are named by their "name" field, else "<plugin>-<index>"
    ABOUTME: A bare file becomes one server named after the plugin
    ABOUTME: Within one file, the first entry for a name wins
    """
    form = classify_plugin_mcp(data)
    result: ServerMap = {}

    if form is PluginMcpForm.OBJECT:
        result.update(_mcp_servers_object(data))
    elif form is PluginMcpForm.ARRAY:
        for index, item in enumerate(data["mcpServers"]):
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            if not isinstance(name, str):
                name = f"{plugin_name}-{index}"
            result.setdefault(name, item)
    elif form is PluginMcpForm.BARE:
        result[plugin_name] = data

    return result


def should_include_install(install: PluginInstall, cwd: str | None) -> bool:
    """Filter installs by the active project.

    ABOUTME: With no cwd (Global view) every install is included
    ABOUTME: Otherwise user-scope installs plus local installs for this project
    """
    if not cwd:
        return True
    return install.scope == "user" or (install.scope == "local" and install.project_path == cwd)


def read_plugin_servers(
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> list[tuple[str, dict[str, Any], PluginInstall]]:
    """Collect MCP servers contributed by enabled plugins.

    Args:
        cwd: Active project path, or None for the Global view
        paths: File locations (defaults to the real home directory)

    Returns:
        (server name, config, install) triples in discovery order; the same
        name may appear more than once when several plugins declare it

    Raises:
        MalformedInputError: If installed_plugins.json or a plugin .mcp.json is invalid
    """
    paths = resolve_paths(paths)
    enablement = PluginEnablement(paths)
    result: list[tuple[str, dict[str, Any], PluginInstall]] = []

    for install in read_installed_plugins(paths):
        if not should_include_install(install, cwd):
            continue
        if not enablement.is_enabled(install):
            logger.debug(f"Skipping disabled plugin {install.plugin_name} ({install.scope})")
            continue
        if not detect_packages(install.install_path).has_mcp:
            continue

        mcp_path = Path(install.install_path) / ".mcp.json"
        servers = normalize_plugin_mcp(install.plugin_name, read_json(mcp_path))
        for name, config in servers.items():
            result.append((name, config, install))

    return result
