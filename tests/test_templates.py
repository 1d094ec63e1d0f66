# ABOUTME: Tests for template installation and the install manifest
# ABOUTME: Covers agent/command/skill/mcp installs and their reversal
import pytest

from ccconfig.exceptions import AlreadyExistsError, MalformedInputError, NotFoundError
from ccconfig.models import SkillFile, TemplateInstallPayload
from ccconfig.templates import (
    MCP_TARGET_MARKER,
    install_template,
    list_installed_templates,
    read_manifest,
    uninstall_template,
    validate_relative_path,
    validate_template_id,
)
from conftest import read_json_file, write_json_file


def _skill(template_id: str, *files: tuple[str, str]) -> TemplateInstallPayload:
    return TemplateInstallPayload(
        template_type="skill",
        id=template_id,
        skill_files=[SkillFile(relative_path=p, content=c) for p, c in files],
    )


class TestSkillTemplates:
    """Tests for skill installation."""

    def test_install_uninstall_round_trip(self, paths):
        """Test uninstalling a skill removes its directory and manifest item."""
        install_template(_skill("demo", ("SKILL.md", "x")), paths)
        skill_dir = paths.skills_dir / "demo"
        assert (skill_dir / "SKILL.md").read_text() == "x"

        uninstall_template("skill", "demo", paths)

        assert not skill_dir.exists()
        assert [i for i in list_installed_templates(paths) if i.id == "demo"] == []

    def test_nested_files(self, paths):
        """Test nested relative paths get their directories created."""
        install_template(_skill("demo", ("SKILL.md", "x"), ("scripts/run.sh", "echo")), paths)

        assert (paths.skills_dir / "demo" / "scripts" / "run.sh").read_text() == "echo"

    def test_parent_traversal_rejected(self, paths):
        """Test a .. segment is rejected before anything is written."""
        payload = _skill("demo", ("SKILL.md", "x"), ("../escape.md", "bad"))

        with pytest.raises(MalformedInputError, match="parent dir"):
            install_template(payload, paths)

        assert not (paths.skills_dir / "demo").exists()
        assert not (paths.skills_dir / "escape.md").exists()
        assert read_manifest(paths).items == []

    def test_existing_directory(self, paths):
        """Test installing over an existing skill directory fails."""
        (paths.skills_dir / "demo").mkdir(parents=True)

        with pytest.raises(AlreadyExistsError):
            install_template(_skill("demo", ("SKILL.md", "x")), paths)


@pytest.mark.parametrize("relative_path", ["", "/etc/passwd", "a/../../b", "C:\\evil.md", "..\\up.md"])
def test_validate_relative_path_rejects(relative_path) -> None:
    """Test unsafe skill file paths are rejected."""
    with pytest.raises(MalformedInputError):
        validate_relative_path(relative_path)


@pytest.mark.parametrize("template_id", ["", ".", "..", "../../escaped", "a/b", "..\\up"])
def test_validate_template_id_rejects(template_id) -> None:
    """Test ids that don't name a single directory entry are rejected."""
    with pytest.raises(MalformedInputError):
        validate_template_id(template_id)


def test_agent_id_cannot_escape(paths) -> None:
    """Test an agent id with parent segments writes nothing outside agents/."""
    payload = TemplateInstallPayload(template_type="agent", id="../../escaped", content="x")

    with pytest.raises(MalformedInputError):
        install_template(payload, paths)

    assert not (paths.home / "escaped.md").exists()
    assert not paths.manifest_file.exists()


def test_skill_id_cannot_escape(paths) -> None:
    """Test a skill id with parent segments creates no directory outside skills/."""
    with pytest.raises(MalformedInputError):
        install_template(_skill("../../x", ("SKILL.md", "x")), paths)

    assert not (paths.home / "x").exists()
    assert read_manifest(paths).items == []


def test_validate_relative_path_accepts_nested() -> None:
    """Test ordinary nested paths are accepted."""
    validate_relative_path("docs/usage.md")


class TestFileTemplates:
    """Tests for agent and command installation."""

    def test_install_agent(self, paths):
        """Test an agent is written to agents/<id>.md and recorded."""
        payload = TemplateInstallPayload(template_type="agent", id="reviewer", content="# Reviewer")

        item = install_template(payload, paths)

        target = paths.agents_dir / "reviewer.md"
        assert target.read_text() == "# Reviewer"
        assert item.target_path == str(target)
        manifest = read_json_file(paths.manifest_file)
        assert manifest["version"] == 1
        assert manifest["items"][0]["type"] == "agent"
        assert manifest["items"][0]["targetPath"] == str(target)

    def test_install_command_refuses_overwrite(self, paths):
        """Test an existing command file is never overwritten."""
        paths.commands_dir.mkdir(parents=True)
        (paths.commands_dir / "deploy.md").write_text("mine")
        payload = TemplateInstallPayload(template_type="command", id="deploy", content="theirs")

        with pytest.raises(AlreadyExistsError):
            install_template(payload, paths)

        assert (paths.commands_dir / "deploy.md").read_text() == "mine"
        assert not paths.manifest_file.exists()

    def test_missing_content(self, paths):
        """Test agent payloads require content."""
        with pytest.raises(MalformedInputError):
            install_template(TemplateInstallPayload(template_type="agent", id="a"), paths)

    def test_uninstall_already_deleted_file(self, paths):
        """Test uninstalling succeeds when the file was removed by hand."""
        install_template(TemplateInstallPayload(template_type="command", id="c", content="x"), paths)
        (paths.commands_dir / "c.md").unlink()

        removed = uninstall_template("command", "c", paths)

        assert [i.id for i in removed] == ["c"]
        assert list_installed_templates(paths) == []


class TestMcpTemplates:
    """Tests for mcp installation."""

    def test_install_and_uninstall(self, paths):
        """Test an mcp template registers and later unregisters a global server."""
        write_json_file(paths.user_settings, {"enabledMcpjsonServers": ["fs"]})
        payload = TemplateInstallPayload(
            template_type="mcp",
            id="fs",
            server_name="fs",
            server_config={"command": "npx"},
        )

        item = install_template(payload, paths)

        assert item.target_path == MCP_TARGET_MARKER
        assert read_json_file(paths.mcp_json) == {"mcpServers": {"fs": {"command": "npx"}}}

        uninstall_template("mcp", "fs", paths)

        assert read_json_file(paths.mcp_json) == {}
        assert read_json_file(paths.user_settings)["enabledMcpjsonServers"] == []
        assert list_installed_templates(paths) == []

    def test_missing_server_config(self, paths):
        """Test mcp payloads require serverConfig."""
        payload = TemplateInstallPayload(template_type="mcp", id="fs", server_name="fs")

        with pytest.raises(MalformedInputError):
            install_template(payload, paths)


def test_unknown_type(paths) -> None:
    """Test unsupported template types are rejected."""
    with pytest.raises(MalformedInputError, match="Unsupported"):
        install_template(TemplateInstallPayload(template_type="theme", id="x"), paths)


def test_uninstall_unknown(paths) -> None:
    """Test uninstalling something never installed raises NotFoundError."""
    with pytest.raises(NotFoundError):
        uninstall_template("agent", "ghost", paths)


def test_uninstall_keeps_other_items(paths) -> None:
    """Test only the matching manifest item is removed."""
    install_template(TemplateInstallPayload(template_type="agent", id="a", content="1"), paths)
    install_template(TemplateInstallPayload(template_type="command", id="a", content="2"), paths)

    uninstall_template("agent", "a", paths)

    remaining = list_installed_templates(paths)
    assert [(i.template_type, i.id) for i in remaining] == [("command", "a")]
    assert (paths.commands_dir / "a.md").exists()
