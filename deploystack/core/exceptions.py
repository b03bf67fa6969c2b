"""Custom exceptions for the DeployStack backend."""


class DeployStackException(Exception):
    """Base exception for all DeployStack errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        """Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationException(DeployStackException):
    """Configuration error."""

    pass


class DatabaseException(DeployStackException):
    """Database operation failed."""

    pass


class DatabaseNotConfiguredError(DatabaseException):
    """Operation needs a database but none is configured yet."""

    def __init__(self, message: str = "Database is not configured", details: dict | None = None) -> None:
        """Initialize with a default message."""
        super().__init__(message, details)



class SettingsEncryptionError(DeployStackException):
    """An encrypted setting value could not be encrypted or decrypted."""

    pass
