# ccconfig - layered configuration manager for the agent's MCP servers and profiles
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export error taxonomy, core models and paths
from ccconfig.exceptions import (
    AlreadyExistsError,
    ConfigError,
    IOFailureError,
    MalformedInputError,
    NotFoundError,
)
from ccconfig.models import (
    ConfigProfile,
    InstalledTemplateItem,
    NotificationSettings,
    ServerDefinition,
    ServerState,
    TemplateInstallPayload,
)
from ccconfig.paths import ClaudePaths

# ABOUTME: Export the operations the surrounding shell calls
from ccconfig.profiles import ProfileStore
from ccconfig.servers import list_servers_with_state, set_server_enabled
from ccconfig.templates import install_template, uninstall_template

__all__ = [
    "__version__",
    "AlreadyExistsError",
    "ConfigError",
    "IOFailureError",
    "MalformedInputError",
    "NotFoundError",
    "ClaudePaths",
    "ConfigProfile",
    "InstalledTemplateItem",
    "NotificationSettings",
    "ServerDefinition",
    "ServerState",
    "TemplateInstallPayload",
    "ProfileStore",
    "list_servers_with_state",
    "set_server_enabled",
    "install_template",
    "uninstall_template",
]
