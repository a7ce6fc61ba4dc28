"""
Routes each line typed at the prompt.

Session commands (USE, CREATE DATABASE, DROP SCHEMA, DROP DATABASE,
SHOW TABLES;, HELP, EXIT) change or inspect the attached database. Every
other line is sent verbatim to the attached database; lines starting with
SELECT come back as a rendered table.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .config import DATABASE_SUFFIX, SHOW_TABLES_SQL
from .errors import (
    EngineConnectionError,
    GalvanizeError,
    InvalidCommand,
    NoDatabaseSelected,
)
from .renderer import render

logger = logging.getLogger(__name__)


class CommandKind(Enum):
    USE = "use"
    CREATE_DATABASE = "create database"
    DROP_SCHEMA = "drop schema"
    DROP_DATABASE = "drop database"
    SHOW_TABLES = "show tables"
    HELP = "help"
    EXIT = "exit"
    SQL = "sql"
    INVALID = "invalid"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    # Normalized database name, raw SQL text, or the usage message when invalid
    argument: str = ""


@dataclass
class Outcome:
    command: Command
    lines: List[str] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    message: Optional[str] = None
    error: Optional[GalvanizeError] = None
    exit: bool = False
    # (command, description) rows of the usage text
    help: List[Tuple[str, str]] = field(default_factory=list)


HELP_ENTRIES = [
    ("USE NAME", "Attach NAME.db, creating it if it does not exist"),
    ("CREATE DATABASE NAME", "Create and attach NAME.db"),
    ("DROP SCHEMA NAME", "Detach the current database (the file is kept)"),
    ("DROP DATABASE NAME", "Detach and delete NAME.db"),
    ("SHOW TABLES;", "List tables of the attached database"),
    ("", ""),
    ("SELECT ...", "Run a query and show the rows as a table"),
    ("any other SQL", "Run a statement on the attached database"),
    ("", ""),
    ("HELP, ?", "Show this help"),
    ("EXIT", "Close the database and quit"),
]

# (kind, leading keywords, usage) for the commands that take a database name
_DATABASE_COMMANDS = [
    (CommandKind.USE, ("USE",), "USE NAME"),
    (CommandKind.CREATE_DATABASE, ("CREATE", "DATABASE"), "CREATE DATABASE NAME"),
    (CommandKind.DROP_SCHEMA, ("DROP", "SCHEMA"), "DROP SCHEMA NAME"),
    (CommandKind.DROP_DATABASE, ("DROP", "DATABASE"), "DROP DATABASE NAME"),
]


def normalize_database_name(token):
    """'foo;' -> 'foo.db'. Raises InvalidCommand for unusable names."""
    name = token[:-1] if token.endswith(";") else token
    if not name or ";" in name:
        raise InvalidCommand(f"Invalid database name: {token!r}")
    if not name.endswith(DATABASE_SUFFIX):
        name += DATABASE_SUFFIX
    return name


def classify(line):
    """Classifies one input line into a Command."""
    text = line.strip()
    tokens = text.split()
    keywords = [token.upper().rstrip(";") for token in tokens]

    for kind, leading, usage in _DATABASE_COMMANDS:
        if tuple(keywords[: len(leading)]) != leading:
            continue
        if len(tokens) != len(leading) + 1:
            return Command(CommandKind.INVALID, f"Usage: {usage}")
        try:
            return Command(kind, normalize_database_name(tokens[-1]))
        except InvalidCommand as e:
            return Command(CommandKind.INVALID, str(e))

    upper = text.upper()
    if upper.endswith(";") and upper[:-1].split() == ["SHOW", "TABLES"]:
        return Command(CommandKind.SHOW_TABLES)
    if upper in ("HELP", "?"):
        return Command(CommandKind.HELP)
    if upper in ("EXIT", "QUIT"):
        return Command(CommandKind.EXIT)
    return Command(CommandKind.SQL, text)


def is_query(statement):
    return statement.strip().lower().startswith("select")


class Dispatcher:
    """Executes Commands against a Session using the given engine and filesystem."""

    def __init__(self, engine, filesystem):
        self.engine = engine
        self.filesystem = filesystem
        self._handlers = {
            CommandKind.USE: self._cmd_use,
            CommandKind.CREATE_DATABASE: self._cmd_use,
            CommandKind.DROP_SCHEMA: self._cmd_drop_schema,
            CommandKind.DROP_DATABASE: self._cmd_drop_database,
            CommandKind.SHOW_TABLES: self._cmd_show_tables,
            CommandKind.HELP: self._cmd_help,
            CommandKind.EXIT: self._cmd_exit,
            CommandKind.SQL: self._cmd_sql,
            CommandKind.INVALID: self._cmd_invalid,
        }

    def dispatch(self, line, session):
        """Runs one line to completion. Errors end up in Outcome.error."""
        command = classify(line)
        logger.debug("%r classified as %s", line, command.kind.name)

        outcome = Outcome(command)
        try:
            self._handlers[command.kind](command, session, outcome)
        except GalvanizeError as e:
            logger.warning("%s: %s", type(e).__name__, e)
            outcome.error = e
        return outcome

    def shutdown(self, session):
        """Close path shared by EXIT, Ctrl-C and end of input."""
        return self.dispatch("exit", session)

    # --- Commands ---

    def _cmd_use(self, command, session, outcome):
        """USE and CREATE DATABASE: open (or create) and attach."""
        name = command.argument
        if command.kind is CommandKind.USE and not self.filesystem.exists(name):
            outcome.notices.append(
                f"Database '{name}' does not exist, a new file will be created."
            )

        session.detach(self.engine)
        connection = self.engine.open_or_create(name)
        session.attach(self.engine, name, connection)
        outcome.message = f"Using database '{name}'."

    def _cmd_drop_schema(self, command, session, outcome):
        """Detaches whatever is attached; the file stays on disk."""
        if not session.attached:
            return
        name = session.database
        session.detach(self.engine)
        outcome.message = f"Database '{name}' detached."

    def _cmd_drop_database(self, command, session, outcome):
        """Detaches, then deletes the file even if closing the connection failed."""
        name = command.argument
        close_error = None
        try:
            session.detach(self.engine)
        except EngineConnectionError as e:
            logger.warning("Closing %s failed: %s", session.display_name, e)
            close_error = e

        self.filesystem.delete(name)
        outcome.message = f"Database '{name}' dropped."
        if close_error is not None:
            raise close_error

    def _cmd_show_tables(self, command, session, outcome):
        self._run(SHOW_TABLES_SQL, session, outcome)

    def _cmd_help(self, command, session, outcome):
        outcome.help = list(HELP_ENTRIES)

    def _cmd_exit(self, command, session, outcome):
        outcome.exit = True
        session.detach(self.engine)

    def _cmd_sql(self, command, session, outcome):
        # Blank input with nothing attached is ignored
        if not command.argument and not session.attached:
            return
        self._run(command.argument, session, outcome)

    def _cmd_invalid(self, command, session, outcome):
        raise InvalidCommand(command.argument)

    def _run(self, statement, session, outcome):
        """Sends statement to the attached database and records the result."""
        if not session.attached:
            raise NoDatabaseSelected()

        if is_query(statement):
            result = self.engine.execute(session.connection, statement, fetch=True)
            outcome.lines = render(result)
            return

        result = self.engine.execute(session.connection, statement)
        outcome.message = "Query executed successfully."
        if result.rowcount >= 0:
            outcome.message += f" ({result.rowcount} rows affected)"
