"""Errors reported back to the user by the dispatcher."""


class GalvanizeError(Exception):
    """Base class for every error the dispatcher recovers from."""


class EngineConnectionError(GalvanizeError):
    """Opening or closing a database connection failed."""


class ExecutionError(GalvanizeError):
    """A statement forwarded to the engine failed."""


class DeletionError(GalvanizeError):
    """A database file could not be deleted."""


class InvalidCommand(GalvanizeError):
    """Malformed USE / CREATE DATABASE / DROP command."""


class NoDatabaseSelected(GalvanizeError):
    """A statement was issued while no database is attached."""

    def __init__(self, message="No database selected."):
        super().__init__(message)
