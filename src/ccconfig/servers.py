# Scope merging and three-state enablement for MCP servers
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from ccconfig.exceptions import ConfigError, MalformedInputError, NotFoundError
from ccconfig.jsonio import ensure_dir, extract_string_array, read_json, read_json_object, write_json
from ccconfig.models import EnablementState, OverlayState, ServerDefinition, ServerState
from ccconfig.paths import (
    ClaudePaths,
    project_local_settings,
    project_mcp_json,
    project_settings,
    resolve_paths,
)
from ccconfig.sources import (
    get_registered_project,
    read_local_servers,
    read_plugin_servers,
    read_project_servers,
    read_user_direct_servers,
    read_user_mcpjson_servers,
)

logger = logging.getLogger(__name__)

ENABLED_KEY = "enabledMcpjsonServers"
DISABLED_KEY = "disabledMcpjsonServers"
DISABLED_DIRECT_KEY = "disabledMcpServers"


def merge_scopes(
    user_mcpjson: Iterable[ServerDefinition] = (),
    user_direct: Iterable[ServerDefinition] = (),
    plugin: Iterable[ServerDefinition] = (),
    project: Iterable[ServerDefinition] = (),
    local: Iterable[ServerDefinition] = (),
) -> dict[str, ServerDefinition]:
    """Merge scope layers into one name-keyed map.

    ABOUTME: Ascending precedence user-mcpjson < user-direct < plugin < project < local
    ABOUTME: Plugin servers only fill gaps; they never replace a user entry
    ABOUTME: Returns new dict (doesn't mutate inputs)

    Examples:
        >>> user = [ServerDefinition("a", {"command": "u"}, "mcpjson", "user", "~/.mcp.json", True)]
        >>> local = [ServerDefinition("a", {"command": "l"}, "mcpjson", "local", ".mcp.json", True)]
        >>> merge_scopes(user_mcpjson=user, local=local)["a"].scope
        'local'
    """
    result: dict[str, ServerDefinition] = {}

    for layer in (user_mcpjson, user_direct):
        for server in layer:
            result[server.name] = server

    for server in plugin:
        result.setdefault(server.name, server)

    for layer in (project, local):
        for server in layer:
            result[server.name] = server

    return result


def _read_layer(
    label: str, reader: Callable[[], list[ServerDefinition]]
) -> list[ServerDefinition]:
    """Run one source reader, skipping the scope if its file can't be read."""
    try:
        return reader()
    except ConfigError as e:
        logger.warning(f"Skipping {label} MCP servers: {e}")
        return []


def _user_mcpjson_layer(paths: ClaudePaths) -> list[ServerDefinition]:
    return [
        ServerDefinition(name, config, "mcpjson", "user", str(paths.mcp_json), True)
        for name, config in read_user_mcpjson_servers(paths).items()
    ]


def _user_direct_layer(paths: ClaudePaths) -> list[ServerDefinition]:
    return [
        ServerDefinition(name, config, "direct", "user", str(paths.claude_json), False)
        for name, config in read_user_direct_servers(paths).items()
    ]


def _plugin_layer(cwd: str | None, paths: ClaudePaths) -> list[ServerDefinition]:
    return [
        ServerDefinition(
            name,
            config,
            "plugin",
            f"plugin-{install.scope}",
            f"Plugin: {install.plugin_name} ({install.scope})",
            True,
        )
        for name, config, install in read_plugin_servers(cwd, paths)
    ]


def _project_layer(cwd: str | None, paths: ClaudePaths) -> list[ServerDefinition]:
    if not cwd:
        return []
    return [
        ServerDefinition(name, config, "direct", "project", f"~/.claude.json .projects[{cwd}]", False)
        for name, config in read_project_servers(cwd, paths).items()
    ]


def _local_layer(cwd: str | None, paths: ClaudePaths) -> list[ServerDefinition]:
    project_dir = get_registered_project(cwd, paths)
    if project_dir is None:
        return []
    defined_in = str(project_mcp_json(project_dir))
    return [
        ServerDefinition(name, config, "mcpjson", "local", defined_in, True)
        for name, config in read_local_servers(str(project_dir), paths).items()
    ]


def build_server_map(
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> dict[str, ServerDefinition]:
    """Read every scope fresh from disk and merge them.

    Args:
        cwd: Absolute project path; None for the Global view (no project/local scope)
        paths: File locations (defaults to the real home directory)

    Returns:
        Name-keyed map of the effective server definitions
    """
    paths = resolve_paths(paths)
    return merge_scopes(
        user_mcpjson=_read_layer("user .mcp.json", lambda: _user_mcpjson_layer(paths)),
        user_direct=_read_layer("user .claude.json", lambda: _user_direct_layer(paths)),
        plugin=_read_layer("plugin", lambda: _plugin_layer(cwd, paths)),
        project=_read_layer("project", lambda: _project_layer(cwd, paths)),
        local=_read_layer("local", lambda: _local_layer(cwd, paths)),
    )


def get_global_servers(paths: ClaudePaths | None = None) -> dict[str, ServerDefinition]:
    """User-scope servers only (~/.mcp.json and ~/.claude.json)."""
    paths = resolve_paths(paths)
    return merge_scopes(
        user_mcpjson=_read_layer("user .mcp.json", lambda: _user_mcpjson_layer(paths)),
        user_direct=_read_layer("user .claude.json", lambda: _user_direct_layer(paths)),
    )


def server_exists(server_name: str, paths: ClaudePaths | None = None) -> bool:
    return server_name in get_global_servers(paths)


def resolve_settings_path(
    cwd: str | None,
    prefer_local: bool,
    paths: ClaudePaths | None = None,
) -> Path:
    """Pick the settings file holding the overlay arrays.

    ABOUTME: Only projects registered in ~/.claude.json get project-level files
    ABOUTME: Writes (prefer_local) always target settings.local.json
    ABOUTME: Reads use settings.local.json, then settings.json, if they exist
    ABOUTME: Falls back to the user-global settings file
    """
    paths = resolve_paths(paths)
    project_dir = get_registered_project(cwd, paths)
    if project_dir is not None:
        local_path = project_local_settings(project_dir)
        if prefer_local:
            return local_path
        if local_path.exists():
            return local_path
        project_path = project_settings(project_dir)
        if project_path.exists():
            return project_path
    return paths.user_settings


def read_disabled_direct_servers(
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> list[str]:
    """Read disabledMcpServers from ~/.claude.json.

    ABOUTME: The project entry's array wins over the root array when both exist
    """
    paths = resolve_paths(paths)
    data = read_json(paths.claude_json)
    if not isinstance(data, dict):
        return []

    if cwd:
        projects = data.get("projects")
        project = projects.get(cwd) if isinstance(projects, dict) else None
        if isinstance(project, dict) and isinstance(project.get(DISABLED_DIRECT_KEY), list):
            return extract_string_array(project, DISABLED_DIRECT_KEY)

    return extract_string_array(data, DISABLED_DIRECT_KEY)


def get_overlay_state(cwd: str | None = None, paths: ClaudePaths | None = None) -> OverlayState:
    """Read all overlay arrays that apply to the given project (or Global view)."""
    paths = resolve_paths(paths)
    settings = read_json(resolve_settings_path(cwd, False, paths))
    return OverlayState(
        enabled=extract_string_array(settings, ENABLED_KEY),
        disabled=extract_string_array(settings, DISABLED_KEY),
        disabled_direct=read_disabled_direct_servers(cwd, paths),
    )


def compute_state(server: ServerDefinition, overlays: OverlayState) -> EnablementState:
    """Classify one server as enabled, disabled or runtime-disabled.

    ABOUTME: Direct servers are two-state, driven by disabledMcpServers
    ABOUTME: Other servers in both overlay arrays are runtime-disabled
    ABOUTME: Servers are enabled unless an overlay says otherwise
    """
    if server.source_type == "direct":
        return "disabled" if server.name in overlays.disabled_direct else "enabled"

    in_enabled = server.name in overlays.enabled
    in_disabled = server.name in overlays.disabled
    if in_disabled and in_enabled:
        return "runtime-disabled"
    if in_disabled:
        return "disabled"
    return "enabled"


def list_servers_with_state(
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> list[ServerState]:
    """Merged server view with computed enablement, sorted by name.

    Raises:
        MalformedInputError: If an overlay file is not valid JSON
    """
    paths = resolve_paths(paths)
    servers = build_server_map(cwd, paths)
    overlays = get_overlay_state(cwd, paths)

    result = [
        ServerState(
            server=server,
            state=compute_state(server, overlays),
            in_enabled_array=name in overlays.enabled,
            in_disabled_array=name in overlays.disabled,
        )
        for name, server in servers.items()
    ]
    result.sort(key=lambda s: s.name)
    return result


def _rewrite_overlay(container: dict[str, Any], key: str, name: str, include: bool, path: Path) -> None:
    """Remove name from container[key], then re-add it once if include is set."""
    names = container.setdefault(key, [])
    if not isinstance(names, list):
        raise MalformedInputError(f"{key} is not an array in {path}")
    names[:] = [n for n in names if n != name]
    if include:
        names.append(name)


def toggle_registered_server(
    server_name: str,
    enabled: bool,
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> Path:
    """Enable or disable an mcpjson/plugin server via the overlay arrays.

    ABOUTME: Writes to settings.local.json for registered projects, else user settings
    ABOUTME: Name ends up in exactly one array; repeated calls are idempotent

    Returns:
        Path of the settings file that was written
    """
    paths = resolve_paths(paths)
    settings_path = resolve_settings_path(cwd, True, paths)
    ensure_dir(settings_path.parent)

    settings = read_json_object(settings_path, "settings file")
    _rewrite_overlay(settings, ENABLED_KEY, server_name, enabled, settings_path)
    _rewrite_overlay(settings, DISABLED_KEY, server_name, not enabled, settings_path)

    write_json(settings_path, settings)
    logger.info(
        f"MCP server {server_name} {'enabled' if enabled else 'disabled'} - "
        f"file: {settings_path}, {f'project: {cwd}' if cwd else 'global'}"
    )
    return settings_path


def toggle_direct_server(
    server_name: str,
    enabled: bool,
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> Path:
    """Enable or disable a direct server via disabledMcpServers in ~/.claude.json.

    ABOUTME: With cwd the projects[cwd] entry is written (created if missing)
    ABOUTME: Without cwd the root-level array is written
    """
    paths = resolve_paths(paths)
    data = read_json_object(paths.claude_json, ".claude.json")

    target = data
    if cwd:
        projects = data.setdefault("projects", {})
        if not isinstance(projects, dict):
            raise MalformedInputError(f"projects is not an object in {paths.claude_json}")
        target = projects.setdefault(cwd, {})
        if not isinstance(target, dict):
            raise MalformedInputError(f"project entry for {cwd} is not an object")

    _rewrite_overlay(target, DISABLED_DIRECT_KEY, server_name, not enabled, paths.claude_json)

    write_json(paths.claude_json, data)
    logger.info(
        f"MCP server {server_name} {'enabled' if enabled else 'disabled'} - "
        f"file: {paths.claude_json}, {f'project: {cwd}' if cwd else 'global'}"
    )
    return paths.claude_json


def set_server_enabled(
    server_name: str,
    enabled: bool,
    cwd: str | None = None,
    paths: ClaudePaths | None = None,
) -> Path:
    """Toggle a server, choosing the overlay by its source type in the merged view.

    Raises:
        NotFoundError: If no scope defines the server
    """
    paths = resolve_paths(paths)
    server = build_server_map(cwd, paths).get(server_name)
    if server is None:
        raise NotFoundError(f"MCP server '{server_name}' not found")

    if server.source_type == "direct":
        return toggle_direct_server(server_name, enabled, cwd, paths)
    return toggle_registered_server(server_name, enabled, cwd, paths)
