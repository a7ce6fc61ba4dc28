import logging

from .config import DETACHED_NAME

logger = logging.getLogger(__name__)


class Session:
    """
    The database the client is currently attached to.

    Holds at most one open connection. attach() and detach() close the
    previous connection through the engine before dropping it.
    """

    def __init__(self):
        self.database = None
        self.connection = None

    @property
    def attached(self):
        return self.connection is not None

    @property
    def display_name(self):
        return self.database or DETACHED_NAME

    def attach(self, engine, database, connection):
        """Replaces the current attachment with an already open connection."""
        self.detach(engine)
        self.database = database
        self.connection = connection
        logger.info("Attached %s", database)

    def detach(self, engine):
        """Closes the current connection, if any. Errors from close propagate."""
        if self.connection is None:
            return

        connection, database = self.connection, self.database
        self.database = None
        self.connection = None
        logger.info("Detached %s", database)
        engine.close(connection)
