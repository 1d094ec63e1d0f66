# Profile store: named settings snapshots with one optional active profile
# ABOUTME: Every operation re-reads ~/.ccconfig/stores.json and writes the whole collection back
# ABOUTME: Activation partially merges profile settings into ~/.claude/settings.json
import logging
import secrets
import string
import time
import uuid
from dataclasses import replace
from typing import Any

from ccconfig.credentials import unlock_credentials
from ccconfig.exceptions import AlreadyExistsError, ConfigError, NotFoundError
from ccconfig.jsonio import ensure_dir, merge_top_level, read_json, read_json_object, write_json
from ccconfig.models import ConfigProfile, NotificationSettings, ProfileCollection
from ccconfig.paths import ClaudePaths, resolve_paths
from ccconfig.utils.backup import create_backup

logger = logging.getLogger(__name__)

ORIGINAL_CONFIG_TITLE = "Original Config"

_ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_profile_id(length: int = 6) -> str:
    """Short random id for generated profiles."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def _now() -> int:
    return int(time.time())


class ProfileStore:
    """CRUD over the profile collection file.

    Args:
        paths: File locations (defaults to the real home directory)
    """

    def __init__(self, paths: ClaudePaths | None = None) -> None:
        self.paths = resolve_paths(paths)

    # ===== Collection file =====

    def _read(self) -> ProfileCollection:
        data = read_json_object(self.paths.stores_file, "stores file")
        return ProfileCollection.from_dict(data)

    def _write(self, collection: ProfileCollection) -> None:
        ensure_dir(self.paths.app_dir)
        write_json(self.paths.stores_file, collection.to_dict())

    # ===== Live settings file =====

    def _apply_to_live_settings(self, patch: Any) -> None:
        """Partially merge patch into the live settings file."""
        live_path = self.paths.user_settings
        ensure_dir(live_path.parent)

        existing = read_json(live_path)
        if live_path.exists():
            create_backup(live_path, self.paths.backup_dir)

        write_json(live_path, merge_top_level(existing, patch))
        logger.info(f"Updated live settings {live_path}")

    def _unlock(self) -> None:
        try:
            unlock_credentials(self.paths)
        except ConfigError as e:
            logger.warning(f"Failed to unlock credentials: {e}")

    # ===== Queries =====

    def list_profiles(self) -> list[ConfigProfile]:
        """Return profiles sorted by createdAt (oldest first).

        ABOUTME: Persists default notification settings if none are stored
        """
        collection = self._read()
        if collection.notification is None:
            collection.notification = NotificationSettings()
            self._write(collection)
            logger.info("Added default notification settings to stores file")

        return sorted(collection.configs, key=lambda p: p.created_at)

    def get_active_profile(self) -> ConfigProfile | None:
        for profile in self.list_profiles():
            if profile.using:
                return profile
        return None

    def get_profile(self, profile_id: str) -> ConfigProfile:
        for profile in self.list_profiles():
            if profile.id == profile_id:
                return profile
        raise NotFoundError(f"Store with id '{profile_id}' not found")

    # ===== Commands =====

    def create_profile(self, profile_id: str, title: str, settings: Any) -> ConfigProfile:
        """Add a profile; the first profile ever created becomes active.

        ABOUTME: Before the first profile is activated, an existing live
        ABOUTME: settings file is captured as an inactive "Original Config"

        Raises:
            AlreadyExistsError: If a profile with this id exists
            MalformedInputError: If the stores file or live settings file is invalid JSON
        """
        collection = self._read()
        if collection.notification is None:
            collection.notification = NotificationSettings()
        if collection.find(profile_id) is not None:
            raise AlreadyExistsError(f"Store with id '{profile_id}' already exists")

        should_be_active = not collection.configs

        if should_be_active and self.paths.user_settings.exists():
            collection.configs.append(
                ConfigProfile(
                    id=generate_profile_id(),
                    title=ORIGINAL_CONFIG_TITLE,
                    created_at=_now(),
                    settings=read_json(self.paths.user_settings),
                    using=False,
                )
            )
            logger.info("Created Original Config store from existing settings file")

        if should_be_active:
            self._apply_to_live_settings(settings)

        profile = ConfigProfile(
            id=profile_id,
            title=title,
            created_at=_now(),
            settings=settings,
            using=should_be_active,
        )
        collection.configs.append(profile)
        self._write(collection)
        logger.info(f"Created store '{title}' ({profile_id})")

        self._unlock()
        return replace(profile)

    def update_profile(self, profile_id: str, title: str, settings: Any) -> ConfigProfile:
        """Overwrite a profile's title and settings.

        ABOUTME: Re-applies settings to the live file if the profile is active

        Raises:
            NotFoundError: If no profile has this id
        """
        collection = self._read()
        profile = collection.find(profile_id)
        if profile is None:
            raise NotFoundError(f"Store with id '{profile_id}' not found")

        profile.title = title
        profile.settings = settings

        if profile.using:
            self._apply_to_live_settings(settings)

        self._write(collection)
        logger.info(f"Updated store '{title}' ({profile_id})")

        self._unlock()
        return replace(profile)

    def delete_profile(self, profile_id: str) -> None:
        """Remove a profile without touching the live settings file."""
        collection = self._read()
        remaining = [p for p in collection.configs if p.id != profile_id]
        if len(remaining) == len(collection.configs):
            raise NotFoundError(f"Store with id '{profile_id}' not found")

        collection.configs = remaining
        self._write(collection)
        logger.info(f"Deleted store {profile_id}")

    def set_active_profile(self, profile_id: str) -> ConfigProfile:
        """Make exactly one profile active and apply its settings to the live file."""
        collection = self._read()
        selected = collection.find(profile_id)
        if selected is None:
            raise NotFoundError(f"Store with id '{profile_id}' not found")

        for profile in collection.configs:
            profile.using = profile is selected

        self._apply_to_live_settings(selected.settings)
        self._write(collection)
        logger.info(f"Switched to store '{selected.title}' ({profile_id})")
        return replace(selected)

    def reset_to_original(self) -> None:
        """Deactivate every profile and clear the live settings file's env."""
        if self.paths.stores_file.exists():
            collection = self._read()
            for profile in collection.configs:
                profile.using = False
            self._write(collection)

        self._apply_to_live_settings({"env": {}})

    # ===== Global preferences =====

    def get_notification_settings(self) -> NotificationSettings | None:
        if not self.paths.stores_file.exists():
            return None
        return self._read().notification

    def update_notification_settings(self, settings: NotificationSettings) -> None:
        collection = self._read()
        collection.notification = settings
        self._write(collection)
        logger.info("Notification settings updated")

    def get_or_create_distinct_id(self) -> str:
        """Stable random identifier, created on first use and reused after."""
        collection = self._read()
        if collection.distinct_id:
            return collection.distinct_id

        if collection.notification is None:
            collection.notification = NotificationSettings()
        collection.distinct_id = str(uuid.uuid4())
        self._write(collection)
        logger.info(f"Created new distinct_id: {collection.distinct_id}")
        return collection.distinct_id
