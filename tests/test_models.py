# ABOUTME: Tests for ccconfig data models
# ABOUTME: Covers camelCase serialization and validation of on-disk records
import pytest

from ccconfig.exceptions import MalformedInputError
from ccconfig.models import (
    ConfigProfile,
    InstalledTemplateItem,
    InstallManifest,
    NotificationSettings,
    PluginInstall,
    ProfileCollection,
    ServerDefinition,
    ServerState,
    TemplateInstallPayload,
)


class TestServerState:
    """Tests for ServerState serialization."""

    def test_to_dict_uses_camel_case(self):
        """Test the dict shape consumed by the UI shell."""
        server = ServerDefinition("fs", {"command": "npx"}, "mcpjson", "user", "/h/.mcp.json", True)
        state = ServerState(server, "runtime-disabled", True, True)

        data = state.to_dict()

        assert data["name"] == "fs"
        assert data["sourceType"] == "mcpjson"
        assert data["definedIn"] == "/h/.mcp.json"
        assert data["state"] == "runtime-disabled"
        assert data["inEnabledArray"] is True
        assert data["inDisabledArray"] is True
        assert state.name == "fs"


class TestConfigProfile:
    """Tests for ConfigProfile."""

    def test_from_dict(self):
        """Test parsing a stored profile."""
        profile = ConfigProfile.from_dict(
            {"id": "p1", "title": "Work", "createdAt": 100, "settings": {"env": {}}, "using": True}
        )

        assert profile.id == "p1"
        assert profile.created_at == 100
        assert profile.using is True

    def test_from_dict_missing_field(self):
        """Test that a profile without createdAt is rejected."""
        with pytest.raises(MalformedInputError):
            ConfigProfile.from_dict({"id": "p1", "title": "Work"})

    def test_to_dict(self):
        """Test serializing with the createdAt key."""
        profile = ConfigProfile("p1", "Work", 5, {"a": 1})
        assert profile.to_dict() == {
            "id": "p1",
            "title": "Work",
            "createdAt": 5,
            "settings": {"a": 1},
            "using": False,
        }


class TestProfileCollection:
    """Tests for ProfileCollection."""

    def test_empty(self):
        """Test an empty object parses as an empty collection."""
        collection = ProfileCollection.from_dict({})
        assert collection.configs == []
        assert collection.distinct_id is None
        assert collection.notification is None

    def test_accepts_camel_case_distinct_id(self):
        """Test distinctId is read as well as distinct_id."""
        collection = ProfileCollection.from_dict({"configs": [], "distinctId": "abc"})
        assert collection.distinct_id == "abc"

    def test_to_dict_omits_unset_fields(self):
        """Test distinct_id and notification are only written when set."""
        assert ProfileCollection().to_dict() == {"configs": []}

        collection = ProfileCollection(distinct_id="x", notification=NotificationSettings())
        data = collection.to_dict()
        assert data["distinct_id"] == "x"
        assert data["notification"] == {"enable": True, "enabled_hooks": ["Notification"]}

    def test_configs_not_array(self):
        """Test a non-array configs value is rejected."""
        with pytest.raises(MalformedInputError):
            ProfileCollection.from_dict({"configs": {"id": "p1"}})

    def test_find(self):
        """Test lookup by id."""
        collection = ProfileCollection(configs=[ConfigProfile("a", "A", 1, {})])
        assert collection.find("a").title == "A"
        assert collection.find("b") is None


class TestInstallManifest:
    """Tests for manifest parsing."""

    def test_from_dict(self):
        """Test parsing items with their camelCase keys."""
        manifest = InstallManifest.from_dict({
            "version": 1,
            "items": [
                {"type": "mcp", "id": "fs", "targetPath": "mcp", "installedAt": "2025-01-01T00:00:00Z"}
            ],
        })

        assert manifest.items == [
            InstalledTemplateItem("mcp", "fs", "mcp", "2025-01-01T00:00:00Z")
        ]

    def test_item_missing_target_path(self):
        """Test that an item without targetPath is rejected."""
        with pytest.raises(MalformedInputError):
            InstallManifest.from_dict({"items": [{"type": "agent", "id": "a"}]})


class TestTemplateInstallPayload:
    """Tests for TemplateInstallPayload.from_dict."""

    def test_skill_payload(self):
        """Test skill files are parsed."""
        payload = TemplateInstallPayload.from_dict({
            "type": "skill",
            "id": "demo",
            "skillFiles": [{"relativePath": "SKILL.md", "content": "x"}],
        })

        assert payload.template_type == "skill"
        assert payload.skill_files[0].relative_path == "SKILL.md"
        assert payload.skill_files[0].content == "x"

    def test_mcp_payload(self):
        """Test serverName and serverConfig are parsed."""
        payload = TemplateInstallPayload.from_dict({
            "type": "mcp",
            "id": "fs",
            "serverName": "fs",
            "serverConfig": {"command": "npx"},
        })

        assert payload.server_name == "fs"
        assert payload.server_config == {"command": "npx"}

    def test_missing_type(self):
        """Test a payload without a type is rejected."""
        with pytest.raises(MalformedInputError):
            TemplateInstallPayload.from_dict({"id": "x"})


class TestPluginInstall:
    """Tests for PluginInstall.from_dict."""

    def test_local_install(self):
        """Test a local-scope record keeps its project path."""
        install = PluginInstall.from_dict(
            "helper", {"scope": "local", "installPath": "/p", "projectPath": "/work"}
        )
        assert install.scope == "local"
        assert install.project_path == "/work"

    def test_requires_install_path(self):
        """Test a record without installPath is rejected."""
        with pytest.raises(MalformedInputError):
            PluginInstall.from_dict("helper", {"scope": "user"})
