# Writes to the user-global server-registration file (~/.mcp.json)
import logging
from typing import Any

from ccconfig.exceptions import MalformedInputError, NotFoundError
from ccconfig.jsonio import read_json_object, write_json
from ccconfig.paths import ClaudePaths, resolve_paths

logger = logging.getLogger(__name__)

OVERLAY_KEYS = ("enabledMcpjsonServers", "disabledMcpjsonServers")


def upsert_global_server(
    server_name: str,
    server_config: dict[str, Any],
    paths: ClaudePaths | None = None,
) -> None:
    """Add a server to ~/.mcp.json, overwriting any entry with the same name.

    ABOUTME: Creates the file and the mcpServers object if missing
    ABOUTME: Preserves every other key in the file
    """
    paths = resolve_paths(paths)
    data = read_json_object(paths.mcp_json, ".mcp.json")

    servers = data.setdefault("mcpServers", {})
    if not isinstance(servers, dict):
        raise MalformedInputError(f"mcpServers is not an object in {paths.mcp_json}")

    servers[server_name] = server_config
    write_json(paths.mcp_json, data)
    logger.info(f"Registered MCP server '{server_name}' in {paths.mcp_json}")


def delete_global_server(server_name: str, paths: ClaudePaths | None = None) -> None:
    """Remove a server from ~/.mcp.json and from the user overlay arrays.

    ABOUTME: Drops the mcpServers key entirely once it is empty

    Raises:
        NotFoundError: If the file, its mcpServers object, or the server is absent
    """
    paths = resolve_paths(paths)
    if not paths.mcp_json.exists():
        raise NotFoundError(f"MCP configuration file does not exist: {paths.mcp_json}")

    data = read_json_object(paths.mcp_json, ".mcp.json")
    servers = data.get("mcpServers")
    if not isinstance(servers, dict):
        raise NotFoundError(f"No mcpServers found in {paths.mcp_json}")
    if server_name not in servers:
        raise NotFoundError(f"MCP server '{server_name}' not found")

    del servers[server_name]
    if not servers:
        del data["mcpServers"]

    write_json(paths.mcp_json, data)
    logger.info(f"Removed MCP server '{server_name}' from {paths.mcp_json}")

    remove_from_overlays(server_name, paths)


def remove_from_overlays(server_name: str, paths: ClaudePaths | None = None) -> bool:
    """Remove a name from both overlay arrays of the user settings file.

    Returns:
        True if the settings file was rewritten, False if it doesn't exist
    """
    paths = resolve_paths(paths)
    if not paths.user_settings.exists():
        return False

    settings = read_json_object(paths.user_settings, "settings.json")
    for key in OVERLAY_KEYS:
        names = settings.get(key)
        if isinstance(names, list):
            settings[key] = [n for n in names if n != server_name]

    write_json(paths.user_settings, settings)
    return True
