# Core data models for ccconfig
from dataclasses import dataclass, field
from typing import Any, Literal

from ccconfig.exceptions import MalformedInputError

SourceType = Literal["mcpjson", "direct", "plugin"]
ServerScope = Literal["user", "project", "local", "plugin-user", "plugin-local"]
EnablementState = Literal["enabled", "disabled", "runtime-disabled"]
TemplateType = Literal["agent", "command", "skill", "mcp"]

TEMPLATE_TYPES: tuple[str, ...] = ("agent", "command", "skill", "mcp")

# ABOUTME: Default hook events for notifications when none are stored yet
DEFAULT_NOTIFICATION_HOOKS = ["Notification"]


@dataclass(frozen=True)
class ServerDefinition:
    """One MCP server registration plus where it came from.

    ABOUTME: config is the opaque registration object, passed through verbatim
    ABOUTME: controllable marks entries whose enablement can be written back
    """
    name: str
    config: dict[str, Any]
    source_type: SourceType
    scope: str
    defined_in: str
    controllable: bool


@dataclass(frozen=True)
class OverlayState:
    """Enable/disable overlay arrays that govern server state.

    ABOUTME: enabled/disabled come from the scope-resolved settings file
    ABOUTME: disabled_direct comes from ~/.claude.json (root or project entry)
    """
    enabled: list[str] = field(default_factory=list)
    disabled: list[str] = field(default_factory=list)
    disabled_direct: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "enabledMcpjsonServers": list(self.enabled),
            "disabledMcpjsonServers": list(self.disabled),
            "disabledMcpServers": list(self.disabled_direct),
        }


@dataclass(frozen=True)
class ServerState:
    """A merged server definition with its computed enablement."""
    server: ServerDefinition
    state: EnablementState
    in_enabled_array: bool
    in_disabled_array: bool

    @property
    def name(self) -> str:
        return self.server.name

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase shape the UI shell consumes."""
        return {
            "name": self.server.name,
            "config": self.server.config,
            "sourceType": self.server.source_type,
            "scope": self.server.scope,
            "definedIn": self.server.defined_in,
            "controllable": self.server.controllable,
            "state": self.state,
            "inEnabledArray": self.in_enabled_array,
            "inDisabledArray": self.in_disabled_array,
        }


@dataclass
class NotificationSettings:
    """Global notification preferences stored alongside profiles."""
    enable: bool = True
    enabled_hooks: list[str] = field(default_factory=lambda: list(DEFAULT_NOTIFICATION_HOOKS))

    def to_dict(self) -> dict[str, Any]:
        return {"enable": self.enable, "enabled_hooks": list(self.enabled_hooks)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationSettings":
        hooks = data.get("enabled_hooks", [])
        return cls(
            enable=bool(data.get("enable", True)),
            enabled_hooks=[h for h in hooks if isinstance(h, str)] if isinstance(hooks, list) else [],
        )


@dataclass
class ConfigProfile:
    """A named settings snapshot that can be made active.

    ABOUTME: settings is an opaque, full or partial settings payload
    ABOUTME: created_at is Unix seconds; title is not required to be unique
    """
    id: str
    title: str
    created_at: int
    settings: Any
    using: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "settings": self.settings,
            "using": self.using,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfigProfile":
        try:
            return cls(
                id=str(data["id"]),
                title=str(data["title"]),
                created_at=int(data["createdAt"]),
                settings=data.get("settings", {}),
                using=bool(data.get("using", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedInputError(f"Invalid profile entry: {e}") from e


@dataclass
class ProfileCollection:
    """Contents of the profile collection file."""
    configs: list[ConfigProfile] = field(default_factory=list)
    distinct_id: str | None = None
    notification: NotificationSettings | None = None

    def find(self, profile_id: str) -> ConfigProfile | None:
        for profile in self.configs:
            if profile.id == profile_id:
                return profile
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"configs": [p.to_dict() for p in self.configs]}
        if self.distinct_id is not None:
            data["distinct_id"] = self.distinct_id
        if self.notification is not None:
            data["notification"] = self.notification.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProfileCollection":
        configs = data.get("configs") or []
        if not isinstance(configs, list):
            raise MalformedInputError("'configs' in profile collection is not an array")
        notification = data.get("notification")
        distinct_id = data.get("distinct_id", data.get("distinctId"))
        return cls(
            configs=[ConfigProfile.from_dict(item) for item in configs if isinstance(item, dict)],
            distinct_id=distinct_id if isinstance(distinct_id, str) else None,
            notification=(
                NotificationSettings.from_dict(notification)
                if isinstance(notification, dict)
                else None
            ),
        )


@dataclass(frozen=True)
class InstalledTemplateItem:
    """One reversible template installation recorded in the manifest.

    ABOUTME: target_path is a filesystem path, or the fixed marker "mcp"
    """
    template_type: str
    id: str
    target_path: str
    installed_at: str

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.template_type,
            "id": self.id,
            "targetPath": self.target_path,
            "installedAt": self.installed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstalledTemplateItem":
        try:
            return cls(
                template_type=str(data["type"]),
                id=str(data["id"]),
                target_path=str(data["targetPath"]),
                installed_at=str(data.get("installedAt", "")),
            )
        except KeyError as e:
            raise MalformedInputError(f"Install manifest item missing field {e}") from e


@dataclass
class InstallManifest:
    """Ledger of installed templates."""
    version: int = 1
    items: list[InstalledTemplateItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "items": [item.to_dict() for item in self.items]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstallManifest":
        items = data.get("items", [])
        if not isinstance(items, list):
            raise MalformedInputError("'items' in install manifest is not an array")
        return cls(
            version=int(data.get("version", 1)),
            items=[InstalledTemplateItem.from_dict(item) for item in items if isinstance(item, dict)],
        )


@dataclass(frozen=True)
class SkillFile:
    relative_path: str
    content: str


@dataclass(frozen=True)
class TemplateInstallPayload:
    """Request to install one template.

    ABOUTME: content is used by agent/command, skill_files by skill,
    ABOUTME: server_name/server_config by mcp
    """
    template_type: str
    id: str
    content: str | None = None
    skill_files: list[SkillFile] | None = None
    server_name: str | None = None
    server_config: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateInstallPayload":
        if "type" not in data or "id" not in data:
            raise MalformedInputError("Install payload requires 'type' and 'id'")
        raw_files = data.get("skillFiles")
        skill_files = None
        if raw_files is not None:
            if not isinstance(raw_files, list):
                raise MalformedInputError("'skillFiles' must be an array")
            skill_files = [
                SkillFile(relative_path=str(f["relativePath"]), content=str(f.get("content", "")))
                for f in raw_files
                if isinstance(f, dict) and "relativePath" in f
            ]
        return cls(
            template_type=str(data["type"]),
            id=str(data["id"]),
            content=data.get("content"),
            skill_files=skill_files,
            server_name=data.get("serverName"),
            server_config=data.get("serverConfig"),
        )


@dataclass(frozen=True)
class PluginInstall:
    """One install record from installed_plugins.json."""
    plugin_name: str
    scope: str
    install_path: str
    version: str = ""
    installed_at: str = ""
    last_updated: str = ""
    git_commit_sha: str = ""
    project_path: str | None = None

    @classmethod
    def from_dict(cls, plugin_name: str, data: dict[str, Any]) -> "PluginInstall":
        if "scope" not in data or "installPath" not in data:
            raise MalformedInputError(
                f"Install record for plugin '{plugin_name}' requires 'scope' and 'installPath'"
            )
        project_path = data.get("projectPath")
        return cls(
            plugin_name=plugin_name,
            scope=str(data["scope"]),
            install_path=str(data["installPath"]),
            version=str(data.get("version", "")),
            installed_at=str(data.get("installedAt", "")),
            last_updated=str(data.get("lastUpdated", "")),
            git_commit_sha=str(data.get("gitCommitSha", "")),
            project_path=project_path if isinstance(project_path, str) else None,
        )


@dataclass(frozen=True)
class PluginPackages:
    has_agents: bool = False
    has_skills: bool = False
    has_commands: bool = False
    has_mcp: bool = False


@dataclass(frozen=True)
class PluginInfo:
    """An install record with its resolved enablement and package contents."""
    install: PluginInstall
    enabled: bool
    packages: PluginPackages

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.install.plugin_name,
            "scope": self.install.scope,
            "version": self.install.version,
            "projectPath": self.install.project_path,
            "enabled": self.enabled,
            "packages": {
                "hasAgents": self.packages.has_agents,
                "hasSkills": self.packages.has_skills,
                "hasCommands": self.packages.has_commands,
                "hasMcp": self.packages.has_mcp,
            },
            "installPath": self.install.install_path,
            "installedAt": self.install.installed_at,
        }
