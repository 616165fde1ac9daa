"""Exceptions raised by the bucket migrator."""


class MigratorError(Exception):
    """Base exception for the bucket migrator."""
    pass


class ConfigurationError(MigratorError):
    """Raised when the settings are missing or invalid."""
    pass


class AuthorizationError(MigratorError):
    """Raised when the B2 account could not be authorized."""
    pass


class SourceError(MigratorError):
    """Raised when an object could not be read from the source bucket."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Failed to download {key}: {message}")
        self.key = key


class SlotMintError(MigratorError):
    """Raised when B2 refuses to hand out an upload URL."""
    pass


class DestinationError(MigratorError):
    """Structured failure returned by the B2 API."""

    def __init__(self, status: int, code: str = "", message: str = ""):
        super().__init__(f"B2 error {status} ({code}): {message}")
        self.status = status
        self.code = code
        self.message = message
