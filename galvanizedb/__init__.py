"""GalvanizeDB: interactive SQLite client with aligned table output."""

__version__ = "0.2.0"
