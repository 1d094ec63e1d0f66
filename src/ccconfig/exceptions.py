"""Exceptions raised by ccconfig operations."""


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class NotFoundError(ConfigError, LookupError):
    """A profile, server or manifest item does not exist."""

    pass


class MalformedInputError(ConfigError, ValueError):
    """A file or payload has the wrong shape (bad JSON, wrong type, unsafe path)."""

    pass


class IOFailureError(ConfigError, OSError):
    """Reading, writing or removing a file failed."""

    pass


class AlreadyExistsError(ConfigError, FileExistsError):
    """An install target or profile id is already present."""

    pass
