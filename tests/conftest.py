import pytest

from galvanizedb.dispatcher import Dispatcher
from galvanizedb.engine import LocalFilesystem, SqliteEngine
from galvanizedb.errors import DeletionError, EngineConnectionError
from galvanizedb.resultset import ResultSet, RowOutcome
from galvanizedb.session import Session


class FakeConnection:
    def __init__(self, name):
        self.name = name
        self.closed = False


class RecordingEngine:
    """Engine double that records every call."""

    def __init__(self, result=None, fail_open=False, fail_close=False):
        self.calls = []
        self.result = result
        self.fail_open = fail_open
        self.fail_close = fail_close

    def open_or_create(self, file_name):
        self.calls.append(("open", file_name))
        if self.fail_open:
            raise EngineConnectionError(f"Cannot open {file_name}")
        return FakeConnection(file_name)

    def execute(self, conn, statement, fetch=False):
        self.calls.append(("execute", conn.name, statement, fetch))
        if self.result is not None:
            return self.result
        return ResultSet([], []) if fetch else RowOutcome(0)

    def close(self, conn):
        self.calls.append(("close", conn.name))
        if self.fail_close:
            raise EngineConnectionError(f"Cannot close {conn.name}")
        conn.closed = True

    def table_names(self, conn):
        return []


class RecordingFilesystem:
    def __init__(self, existing=(), fail_delete=False):
        self.existing = set(existing)
        self.deleted = []
        self.fail_delete = fail_delete

    def exists(self, file_name):
        return file_name in self.existing

    def delete(self, file_name):
        self.deleted.append(file_name)
        if self.fail_delete:
            raise DeletionError(f"Cannot delete {file_name}")
        self.existing.discard(file_name)


@pytest.fixture
def session():
    return Session()


@pytest.fixture
def engine():
    return RecordingEngine()


@pytest.fixture
def filesystem():
    return RecordingFilesystem()


@pytest.fixture
def dispatcher(engine, filesystem):
    return Dispatcher(engine, filesystem)


@pytest.fixture
def sqlite_dispatcher(tmp_path, monkeypatch):
    """Dispatcher on the real sqlite engine, working inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    return Dispatcher(SqliteEngine(), LocalFilesystem())
