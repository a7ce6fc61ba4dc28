"""
Interactive GalvanizeDB client with completion, syntax highlighting and
aligned table output.

Usage:
    galvanizedb [database]
    galvanizedb  # starts with no database attached; use USE NAME
"""

import logging
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.filters import has_completions
from prompt_toolkit.history import FileHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.lexers import PygmentsLexer
from pygments.lexers.sql import SqlLexer
from rich.console import Console
from rich.table import Table

from . import config
from .dispatcher import CommandKind, Dispatcher, classify
from .engine import LocalFilesystem, SqliteEngine
from .log import setup_logging
from .session import Session

logger = logging.getLogger(__name__)

console = Console()


def create_key_bindings():
    """
    Key bindings:
    - Up/Down: move inside multiline text (or the completion menu if open)
    - Shift+Left/Right: walk the history
    - Enter: submit session commands and SQL ending in ;, else new line
    - Ctrl+O or Alt+Enter: force submit
    """
    kb = KeyBindings()

    @kb.add(Keys.Up, filter=~has_completions)
    def _(event):
        """Up: previous line of the statement being typed."""
        event.app.current_buffer.cursor_up(count=1)

    @kb.add(Keys.Down, filter=~has_completions)
    def _(event):
        """Down: next line of the statement being typed."""
        event.app.current_buffer.cursor_down(count=1)

    @kb.add(Keys.ShiftLeft)
    def _(event):
        """Shift+Left: previous history entry."""
        event.app.current_buffer.history_backward(count=1)

    @kb.add(Keys.ShiftRight)
    def _(event):
        """Shift+Right: next history entry."""
        event.app.current_buffer.history_forward(count=1)

    @kb.add(Keys.Enter, filter=~has_completions)
    def _(event):
        """Enter: submit if the text is complete, else start a new line."""
        buff = event.app.current_buffer
        if submits_on_enter(buff.text):
            buff.validate_and_handle()
        else:
            buff.insert_text("\n")

    @kb.add(Keys.Escape, Keys.Enter)  # Alt+Enter
    def _(event):
        """Alt+Enter: submit whatever has been typed."""
        event.app.current_buffer.validate_and_handle()

    @kb.add("c-o")
    def _(event):
        """Ctrl+O: submit whatever has been typed."""
        event.app.current_buffer.validate_and_handle()

    return kb


def submits_on_enter(text):
    """True when Enter should send text instead of starting a new line."""
    text = text.strip()
    if not text or text.endswith(";"):
        return True
    # USE foo, HELP, EXIT and malformed session commands need no terminator
    return classify(text).kind is not CommandKind.SQL


class GalvanizeCompleter(Completer):
    """Completes SQL keywords, session commands and tables of the attached database."""

    keywords = [
        "SELECT", "FROM", "WHERE", "INSERT", "INTO", "VALUES", "UPDATE",
        "SET", "DELETE", "CREATE", "TABLE", "INDEX", "VIEW", "DROP", "ALTER",
        "JOIN", "LEFT", "INNER", "OUTER", "ON", "GROUP", "BY", "ORDER",
        "HAVING", "LIMIT", "OFFSET", "UNION", "AND", "OR", "NOT", "IN",
        "LIKE", "BETWEEN", "IS", "NULL", "AS", "DISTINCT", "ASC", "DESC",
        "PRIMARY", "KEY", "INTEGER", "TEXT", "REAL", "COUNT", "SUM", "AVG",
        "MIN", "MAX",
    ]
    commands = [
        "USE", "CREATE DATABASE", "DROP SCHEMA", "DROP DATABASE",
        "SHOW TABLES;", "HELP", "EXIT",
    ]

    def __init__(self, session, engine):
        self.session = session
        self.engine = engine

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        text_upper = text.upper()
        word = document.get_word_before_cursor()

        # Multi-word session commands, only at the start of the line
        typed = text.lstrip()
        if typed and "\n" not in typed:
            for cmd in self.commands:
                if " " in cmd and cmd.startswith(typed.upper()):
                    yield Completion(cmd, start_position=-len(typed))

        # Tables after FROM/JOIN/INTO/UPDATE/TABLE
        trigger_words = ["FROM", "JOIN", "INTO", "UPDATE", "TABLE"]
        if any(tw in text_upper for tw in trigger_words):
            for table in self._get_tables():
                if table.upper().startswith(word.upper()):
                    yield Completion(table, start_position=-len(word))

        for kw in self.keywords + [c for c in self.commands if " " not in c]:
            if kw.startswith(word.upper()):
                yield Completion(kw, start_position=-len(word))

    def _get_tables(self):
        if not self.session.attached:
            return []
        return self.engine.table_names(self.session.connection)


class GalvanizeCLI:
    """Read-dispatch-print loop around a Session."""

    def __init__(self, prompt_session=None, engine=None, filesystem=None):
        self.engine = engine or SqliteEngine()
        self.session = Session()
        self.dispatcher = Dispatcher(self.engine, filesystem or LocalFilesystem())

        self.prompt_session = prompt_session or PromptSession(
            lexer=PygmentsLexer(SqlLexer),
            completer=GalvanizeCompleter(self.session, self.engine),
            history=FileHistory(str(config.HISTORY_FILE)),
            auto_suggest=AutoSuggestFromHistory(),
            enable_history_search=True,
            key_bindings=create_key_bindings(),
            multiline=True,
        )

    @property
    def prompt(self):
        return config.PROMPT_TEMPLATE.format(name=self.session.display_name)

    def run(self, database=None):
        """Main loop. Returns the process exit code."""
        console.clear()
        console.print("[bold green]GalvanizeDB[/]")
        console.print("Type [bold]HELP[/] for the available commands\n")

        try:
            if database:
                self.handle(f"USE {database}")
            self._loop()
        except KeyboardInterrupt:
            # Ctrl-C while a statement is running
            console.print()

        if self.session.attached:
            self._print_outcome(self.dispatcher.shutdown(self.session))
        console.print("[dim]Bye![/]")
        return 0

    def _loop(self):
        """Reads and handles lines until EXIT, Ctrl-C or end of input."""
        while True:
            try:
                text = self.prompt_session.prompt(self.prompt).strip()
            except (KeyboardInterrupt, EOFError):
                console.print()
                return
            except OSError as e:
                logger.error("Cannot read input: %s", e)
                return

            if not text:
                continue

            if self.handle(text).exit:
                return

    def handle(self, text):
        """Dispatches one line and prints what came back."""
        outcome = self.dispatcher.dispatch(text, self.session)
        self._print_outcome(outcome)
        return outcome

    def _print_outcome(self, outcome):
        for notice in outcome.notices:
            console.print(notice, style="yellow", markup=False, highlight=False)

        if outcome.help:
            self._print_help(outcome.help)

        for line in outcome.lines:
            console.print(line, markup=False, highlight=False, soft_wrap=True)

        if outcome.message:
            console.print(outcome.message, style="green", markup=False)
        if outcome.error is not None:
            console.print(f"Error: {outcome.error}", style="red", markup=False)

    def _print_help(self, entries):
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style="cyan")
        table.add_column()

        for cmd, desc in entries:
            table.add_row(cmd, desc)

        console.print("\n[bold]Available commands:[/]\n")
        console.print(table)
        console.print(
            "\n[dim]Tip: SQL statements end with ; and may span several lines[/]"
        )
        console.print("[dim]Tip: Tab completes, Shift+Left/Right walks the history[/]\n")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    database = argv[0] if argv else None
    try:
        cli = GalvanizeCLI()
        return cli.run(database)
    except Exception as e:
        logger.debug("Fatal error", exc_info=True)
        console.print(f"Fatal error: {e}", style="red", markup=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
