"""Database-specific exceptions shared by the control plane and tenant databases."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConfigurationError(DatabaseError):
    """Raised when a connection string is missing or malformed.

    The default connection may legitimately be empty in configuration;
    the error surfaces here, when the data layer first tries to use it.
    """

    pass
