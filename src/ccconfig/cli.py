# CLI interface for ccconfig
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ccconfig import __version__
from ccconfig.exceptions import (
    AlreadyExistsError,
    ConfigError,
    MalformedInputError,
    NotFoundError,
)
from ccconfig.jsonio import read_json_object
from ccconfig.models import TemplateInstallPayload
from ccconfig.paths import ClaudePaths, ensure_app_dir
from ccconfig.plugins import list_plugins, set_plugin_enabled
from ccconfig.profiles import ProfileStore
from ccconfig.servers import list_servers_with_state, set_server_enabled
from ccconfig.sources import list_projects
from ccconfig.templates import install_template, list_installed_templates, uninstall_template
from ccconfig.utils.backup import backup_claude_dir

# ABOUTME: Exit codes
# 0 = success, 2 = config error (bad input, missing item), 3 = fatal
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

STATE_MARKERS = {
    "enabled": "✓",
    "disabled": "✗",
    "runtime-disabled": "⊘",
}


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _load_settings(args: argparse.Namespace) -> Any:
    """Parse --settings JSON text or --settings-file into a settings payload."""
    if args.settings_file:
        return read_json_object(Path(args.settings_file), "settings file")
    if args.settings is None:
        return {}
    try:
        return json.loads(args.settings)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"--settings is not valid JSON: {e}") from e


def cmd_init(args: argparse.Namespace, paths: ClaudePaths) -> int:
    """Create ~/.ccconfig and take the one-time ~/.claude backup."""
    app_dir = ensure_app_dir(paths)
    print(f"App config directory: {app_dir}")

    backup = backup_claude_dir(paths)
    if backup:
        print(f"Backed up {paths.claude_dir} to {backup}")
    else:
        print("No backup needed")
    return EXIT_SUCCESS


def cmd_mcp(args: argparse.Namespace, paths: ClaudePaths) -> int:
    """Execute mcp subcommands.

    ABOUTME: list shows the merged view with computed state
    ABOUTME: enable/disable write the overlay that governs the server
    """
    if args.mcp_command == "list":
        servers = list_servers_with_state(args.cwd, paths)
        if args.json:
            _print_json([s.to_dict() for s in servers])
            return EXIT_SUCCESS

        print(f"ccconfig mcp list v{__version__}")
        print()
        view = f"project {args.cwd}" if args.cwd else "global"
        print(f"MCP servers ({view}):")
        print()
        for state in servers:
            marker = STATE_MARKERS.get(state.state, "?")
            print(f"  {marker} {state.name}")
            print(f"    state: {state.state}")
            print(f"    source: {state.server.source_type} ({state.server.scope})")
            print(f"    defined in: {state.server.defined_in}")
            print()
        print(f"Total: {len(servers)} server(s)")
        return EXIT_SUCCESS

    if args.mcp_command in ("enable", "disable"):
        enabled = args.mcp_command == "enable"
        written = set_server_enabled(args.name, enabled, args.cwd, paths)
        print(f"Server '{args.name}' {args.mcp_command}d ({written})")
        return EXIT_SUCCESS

    if args.mcp_command == "projects":
        projects = list_projects(paths)
        if args.json:
            _print_json(projects)
        else:
            for project_path in projects:
                print(f"  {project_path}")
            print(f"Total: {len(projects)} project(s)")
        return EXIT_SUCCESS

    return EXIT_CONFIG_ERROR


def cmd_profile(args: argparse.Namespace, paths: ClaudePaths) -> int:
    """Execute profile subcommands."""
    store = ProfileStore(paths)
    command = args.profile_command

    if command == "list":
        profiles = store.list_profiles()
        if args.json:
            _print_json([p.to_dict() for p in profiles])
            return EXIT_SUCCESS
        for profile in profiles:
            marker = "*" if profile.using else " "
            print(f"  {marker} {profile.id}  {profile.title}")
        print(f"Total: {len(profiles)} profile(s)")
        return EXIT_SUCCESS

    if command == "show":
        _print_json(store.get_profile(args.id).to_dict())
        return EXIT_SUCCESS

    if command == "current":
        active = store.get_active_profile()
        if active is None:
            print("No active profile")
        else:
            _print_json(active.to_dict())
        return EXIT_SUCCESS

    if command == "create":
        profile = store.create_profile(args.id, args.title, _load_settings(args))
        status = " (active)" if profile.using else ""
        print(f"Created profile '{profile.title}' ({profile.id}){status}")
        return EXIT_SUCCESS

    if command == "update":
        profile = store.update_profile(args.id, args.title, _load_settings(args))
        print(f"Updated profile '{profile.title}' ({profile.id})")
        return EXIT_SUCCESS

    if command == "delete":
        store.delete_profile(args.id)
        print(f"Deleted profile {args.id}")
        return EXIT_SUCCESS

    if command == "use":
        profile = store.set_active_profile(args.id)
        print(f"Switched to profile '{profile.title}' ({profile.id})")
        return EXIT_SUCCESS

    if command == "reset":
        store.reset_to_original()
        print("All profiles deactivated; env cleared in live settings")
        return EXIT_SUCCESS

    return EXIT_CONFIG_ERROR


def cmd_plugin(args: argparse.Namespace, paths: ClaudePaths) -> int:
    """Execute plugin subcommands."""
    if args.plugin_command == "list":
        plugins = list_plugins(paths)
        if args.json:
            _print_json([p.to_dict() for p in plugins])
            return EXIT_SUCCESS
        for info in plugins:
            marker = "✓" if info.enabled else "✗"
            mcp = " [mcp]" if info.packages.has_mcp else ""
            print(f"  {marker} {info.install.plugin_name} ({info.install.scope}){mcp}")
        print(f"Total: {len(plugins)} install(s)")
        return EXIT_SUCCESS

    enabled = args.plugin_command == "enable"
    written = set_plugin_enabled(args.name, enabled, args.scope, args.project, paths)
    print(f"Plugin '{args.name}' {args.plugin_command}d ({written})")
    return EXIT_SUCCESS


def cmd_template(args: argparse.Namespace, paths: ClaudePaths) -> int:
    """Execute template subcommands."""
    if args.template_command == "list":
        items = list_installed_templates(paths)
        if args.json:
            _print_json([item.to_dict() for item in items])
            return EXIT_SUCCESS
        for item in items:
            print(f"  {item.template_type:8} {item.id}  {item.target_path}")
        print(f"Total: {len(items)} installed template(s)")
        return EXIT_SUCCESS

    if args.template_command == "install":
        payload = TemplateInstallPayload.from_dict(
            read_json_object(Path(args.payload), "install payload")
        )
        item = install_template(payload, paths)
        print(f"Installed {item.template_type} '{item.id}' -> {item.target_path}")
        return EXIT_SUCCESS

    if args.template_command == "uninstall":
        uninstall_template(args.type, args.id, paths)
        print(f"Uninstalled {args.type} '{args.id}'")
        return EXIT_SUCCESS

    return EXIT_CONFIG_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccconfig",
        description="Layered configuration manager for MCP servers, profiles and templates"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"ccconfig v{__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--home",
        type=Path,
        help="Home directory to operate on (default: current user's home)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Create the app directory and back up ~/.claude")

    # mcp commands
    mcp_parser = subparsers.add_parser("mcp", help="Inspect and toggle MCP servers")
    mcp_sub = mcp_parser.add_subparsers(dest="mcp_command", required=True)
    mcp_list = mcp_sub.add_parser("list", help="List merged servers with state")
    mcp_list.add_argument("--cwd", help="Absolute project path (default: global view)")
    mcp_list.add_argument("--json", action="store_true", help="Print JSON")
    for action in ("enable", "disable"):
        toggle = mcp_sub.add_parser(action, help=f"{action.capitalize()} a server")
        toggle.add_argument("name", help="Server name")
        toggle.add_argument("--cwd", help="Absolute project path")
    mcp_projects = mcp_sub.add_parser("projects", help="List projects known to ~/.claude.json")
    mcp_projects.add_argument("--json", action="store_true", help="Print JSON")

    # profile commands
    profile_parser = subparsers.add_parser("profile", help="Manage settings profiles")
    profile_sub = profile_parser.add_subparsers(dest="profile_command", required=True)
    profile_list = profile_sub.add_parser("list", help="List profiles (oldest first)")
    profile_list.add_argument("--json", action="store_true", help="Print JSON")
    profile_sub.add_parser("show", help="Show one profile").add_argument("id")
    profile_sub.add_parser("current", help="Show the active profile")
    for action in ("create", "update"):
        edit = profile_sub.add_parser(action, help=f"{action.capitalize()} a profile")
        edit.add_argument("id", help="Profile id")
        edit.add_argument("title", help="Display name")
        # update requires a settings source
        source = edit.add_mutually_exclusive_group(required=action == "update")
        source.add_argument("--settings", help="Settings payload as JSON text")
        source.add_argument("--settings-file", help="Path to a JSON settings payload")
    profile_sub.add_parser("delete", help="Delete a profile").add_argument("id")
    profile_sub.add_parser("use", help="Activate a profile").add_argument("id")
    profile_sub.add_parser("reset", help="Deactivate all profiles and clear env")

    # plugin commands
    plugin_parser = subparsers.add_parser("plugin", help="Inspect and toggle plugins")
    plugin_sub = plugin_parser.add_subparsers(dest="plugin_command", required=True)
    plugin_list = plugin_sub.add_parser("list", help="List installed plugins")
    plugin_list.add_argument("--json", action="store_true", help="Print JSON")
    for action in ("enable", "disable"):
        toggle = plugin_sub.add_parser(action, help=f"{action.capitalize()} a plugin")
        toggle.add_argument("name", help="Plugin name")
        toggle.add_argument("--scope", default="user", help="Install scope (user, project, local)")
        toggle.add_argument("--project", help="Project path (required for local scope)")

    # template commands
    template_parser = subparsers.add_parser("template", help="Install and uninstall templates")
    template_sub = template_parser.add_subparsers(dest="template_command", required=True)
    template_list = template_sub.add_parser("list", help="List installed templates")
    template_list.add_argument("--json", action="store_true", help="Print JSON")
    template_sub.add_parser("install", help="Install from a JSON payload file").add_argument(
        "payload", help="Path to install payload JSON"
    )
    uninstall = template_sub.add_parser("uninstall", help="Uninstall a template")
    uninstall.add_argument("type", choices=["agent", "command", "skill", "mcp"])
    uninstall.add_argument("id")

    return parser


COMMANDS = {
    "init": cmd_init,
    "mcp": cmd_mcp,
    "profile": cmd_profile,
    "plugin": cmd_plugin,
    "template": cmd_template,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Maps the error taxonomy onto exit codes
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_SUCCESS

    paths = ClaudePaths(home=args.home) if args.home else ClaudePaths.default()

    try:
        return handler(args, paths)
    except (NotFoundError, MalformedInputError, AlreadyExistsError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except ConfigError as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
