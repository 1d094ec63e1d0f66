# Reversible template installation tracked in an install manifest
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath, PureWindowsPath

from ccconfig.exceptions import (
    AlreadyExistsError,
    IOFailureError,
    MalformedInputError,
    NotFoundError,
)
from ccconfig.jsonio import ensure_dir, read_json_object, write_json
from ccconfig.models import (
    InstalledTemplateItem,
    InstallManifest,
    SkillFile,
    TemplateInstallPayload,
)
from ccconfig.paths import ClaudePaths, resolve_paths
from ccconfig.registry import delete_global_server, upsert_global_server

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1

# ABOUTME: mcp items point at a registration, not a path
MCP_TARGET_MARKER = "mcp"


def read_manifest(paths: ClaudePaths | None = None) -> InstallManifest:
    """Load the install manifest, or an empty one if it doesn't exist."""
    paths = resolve_paths(paths)
    if not paths.manifest_file.exists():
        return InstallManifest(version=MANIFEST_VERSION, items=[])
    data = read_json_object(paths.manifest_file, "install manifest")
    return InstallManifest.from_dict(data)


def write_manifest(manifest: InstallManifest, paths: ClaudePaths | None = None) -> None:
    paths = resolve_paths(paths)
    ensure_dir(paths.manifest_file.parent)
    write_json(paths.manifest_file, manifest.to_dict())


def list_installed_templates(paths: ClaudePaths | None = None) -> list[InstalledTemplateItem]:
    return list(read_manifest(paths).items)


def validate_relative_path(relative_path: str) -> None:
    """Reject skill file paths that could escape the skill directory.

    Raises:
        MalformedInputError: For empty or absolute paths, or any ".." segment
    """
    if not relative_path:
        raise MalformedInputError("Invalid skill file path (empty)")

    for flavour in (PurePosixPath, PureWindowsPath):
        candidate = flavour(relative_path)
        if candidate.is_absolute() or candidate.anchor:
            raise MalformedInputError(f"Invalid skill file path (absolute not allowed): {relative_path}")
        if ".." in candidate.parts:
            raise MalformedInputError(
                f"Invalid skill file path (parent dir not allowed): {relative_path}"
            )


def validate_template_id(template_id: str) -> None:
    """Reject ids that would not name a single entry inside the target directory.

    Raises:
        MalformedInputError: For empty ids, "." or "..", or ids with a path separator
    """
    if not template_id or template_id in (".", ".."):
        raise MalformedInputError(f"Invalid template id: {template_id!r}")
    if "/" in template_id or "\\" in template_id:
        raise MalformedInputError(f"Invalid template id (path separator not allowed): {template_id}")


def _install_file(template_type: str, template_id: str, content: str | None, target_dir: Path) -> Path:
    """Write a single <id>.md file, refusing to overwrite."""
    validate_template_id(template_id)
    if content is None:
        raise MalformedInputError(f"{template_type.capitalize()} install payload missing content")

    ensure_dir(target_dir)
    target = target_dir / f"{template_id}.md"
    if target.exists():
        raise AlreadyExistsError(f"{template_type} file already exists: {target}")

    try:
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise IOFailureError(f"Failed to write {template_type} file {target}: {e}") from e
    return target


def _install_skill(template_id: str, skill_files: list[SkillFile] | None, skills_root: Path) -> Path:
    """Create <skills_root>/<id>/ and write every skill file beneath it."""
    validate_template_id(template_id)
    if skill_files is None:
        raise MalformedInputError("Skill install payload missing skillFiles")
    for skill_file in skill_files:
        validate_relative_path(skill_file.relative_path)

    ensure_dir(skills_root)
    target_dir = skills_root / template_id
    if target_dir.exists():
        raise AlreadyExistsError(f"Skill directory already exists: {target_dir}")
    ensure_dir(target_dir)

    for skill_file in skill_files:
        full_path = target_dir / skill_file.relative_path
        ensure_dir(full_path.parent)
        try:
            full_path.write_text(skill_file.content, encoding="utf-8")
        except OSError as e:
            raise IOFailureError(f"Failed to write skill file {full_path}: {e}") from e

    return target_dir


def install_template(
    payload: TemplateInstallPayload,
    paths: ClaudePaths | None = None,
) -> InstalledTemplateItem:
    """Install one template and record it in the manifest.

    ABOUTME: The filesystem/registry effect happens first; the manifest is
    ABOUTME: appended and persisted only after it succeeds. The two writes are
    ABOUTME: not transactional: a crash in between leaves an untracked artifact.

    Raises:
        AlreadyExistsError: If the agent/command file or skill directory exists
        MalformedInputError: For unknown types, missing fields, unsafe ids or skill paths
        IOFailureError: If a write fails
    """
    paths = resolve_paths(paths)
    manifest = read_manifest(paths)
    now = datetime.now(timezone.utc).isoformat()

    if payload.template_type == "agent":
        target = _install_file("agent", payload.id, payload.content, paths.agents_dir)
        item = InstalledTemplateItem("agent", payload.id, str(target), now)
    elif payload.template_type == "command":
        target = _install_file("command", payload.id, payload.content, paths.commands_dir)
        item = InstalledTemplateItem("command", payload.id, str(target), now)
    elif payload.template_type == "skill":
        target = _install_skill(payload.id, payload.skill_files, paths.skills_dir)
        item = InstalledTemplateItem("skill", payload.id, str(target), now)
    elif payload.template_type == "mcp":
        if not payload.server_name:
            raise MalformedInputError("MCP install payload missing serverName")
        if not isinstance(payload.server_config, dict):
            raise MalformedInputError("MCP install payload missing serverConfig")
        upsert_global_server(payload.server_name, payload.server_config, paths)
        item = InstalledTemplateItem("mcp", payload.server_name, MCP_TARGET_MARKER, now)
    else:
        raise MalformedInputError(f"Unsupported template type: {payload.template_type}")

    manifest.items.append(item)
    write_manifest(manifest, paths)
    logger.info(f"Installed {item.template_type} template '{item.id}' at {item.target_path}")
    return item


def _remove_artifact(item: InstalledTemplateItem, paths: ClaudePaths) -> None:
    target = Path(item.target_path)

    if item.template_type in ("agent", "command"):
        if target.exists():
            try:
                target.unlink()
            except OSError as e:
                raise IOFailureError(f"Failed to remove file {target}: {e}") from e
    elif item.template_type == "skill":
        if target.exists():
            try:
                shutil.rmtree(target)
            except OSError as e:
                raise IOFailureError(f"Failed to remove skill directory {target}: {e}") from e
    elif item.template_type == "mcp":
        delete_global_server(item.id, paths)
    else:
        logger.warning(f"Unknown template type '{item.template_type}', dropping from manifest only")


def uninstall_template(
    template_type: str,
    template_id: str,
    paths: ClaudePaths | None = None,
) -> list[InstalledTemplateItem]:
    """Reverse an installation recorded in the manifest.

    ABOUTME: Removal errors for known types abort before the manifest is rewritten
    ABOUTME: Artifacts already deleted by hand are not an error

    Returns:
        The manifest items that were removed

    Raises:
        NotFoundError: If the manifest has no (template_type, template_id) item,
            or an mcp item's server is no longer registered
        IOFailureError: If a file or directory cannot be removed
    """
    paths = resolve_paths(paths)
    manifest = read_manifest(paths)

    removed: list[InstalledTemplateItem] = []
    remaining: list[InstalledTemplateItem] = []
    for item in manifest.items:
        if item.template_type == template_type and item.id == template_id:
            removed.append(item)
        else:
            remaining.append(item)

    if not removed:
        raise NotFoundError(f"No installed {template_type} template with id '{template_id}'")

    for item in removed:
        _remove_artifact(item, paths)

    manifest.items = remaining
    write_manifest(manifest, paths)
    logger.info(f"Uninstalled {template_type} template '{template_id}'")
    return removed
