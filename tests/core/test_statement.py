import pytest

from sqlbridge.adapters import SqliteAdapter
from sqlbridge.config import AdapterConfig
from sqlbridge.exceptions import IntegrityError, InvalidStateError
from sqlbridge.statement import BindType, infer_bind_type


@pytest.fixture
def adapter():
    adapter = SqliteAdapter(AdapterConfig(name="default", driver="sqlite", server=":memory:"))
    adapter.open()
    adapter.query("CREATE TABLE user (id INTEGER PRIMARY KEY, name TEXT, score REAL, avatar BLOB)")
    adapter.query("INSERT INTO user (name, score) VALUES ('bob', 1.5), ('alice', 2.5)")
    yield adapter
    adapter.close()


def test_auto_bind_inference():
    assert infer_bind_type(5) is BindType.DOUBLE
    assert infer_bind_type(None) is BindType.NULL
    assert infer_bind_type("x") is BindType.STRING
    assert infer_bind_type(True) is BindType.BOOL
    assert infer_bind_type(b"x") is BindType.BLOB


def test_bind_value_records_inferred_types(adapter):
    statement = adapter.prepare_query("SELECT * FROM user WHERE id = ? AND name = ?")
    statement.bind_value("id", 5)
    statement.bind_value("name", None)
    assert statement.get_bind_types() == {"id": BindType.DOUBLE, "name": BindType.NULL}
    assert statement.get_parameters() == {"id": 5, "name": None}
    statement.bind_value("name", "x")
    assert statement.get_bind_types()["name"] is BindType.STRING


def test_null_bind_type_forces_none(adapter):
    statement = adapter.prepare_query("SELECT ?")
    statement.bind_value("value", "ignored", BindType.NULL)
    assert statement.get_parameters() == {"value": None}


def test_explicit_bind_types_coerce(adapter):
    statement = adapter.prepare_query("SELECT ?, ?, ?")
    statement.bind_value("a", "12", BindType.INTEGER)
    statement.bind_value("b", 3, BindType.STRING)
    statement.bind_value("c", "bytes", BindType.BLOB)
    assert statement.get_parameters() == {"a": 12, "b": "3", "c": b"bytes"}
    with pytest.raises(IntegrityError):
        statement.bind_value("d", "not a number", BindType.INTEGER)


def test_placeholder_count_mismatch_raises(adapter):
    statement = adapter.prepare_query("SELECT * FROM user WHERE id = ? AND name = ?")
    statement.bind_value("id", 1)
    with pytest.raises(IntegrityError):
        statement.execute()


def test_execute_and_rebind(adapter):
    statement = adapter.prepare_query("SELECT name FROM user WHERE score > ?")
    statement.bind_value("score", 2)
    assert statement.execute().fetch_all() == [{"name": "alice"}]
    statement.clear_binds()
    statement.bind_value("score", 0)
    assert len(statement.execute().fetch_all()) == 2


def test_native_failure_is_recorded(adapter):
    statement = adapter.prepare_query("INSERT INTO missing_table VALUES (?)")
    statement.bind_value("v", 1)
    assert statement.execute() is None
    assert "missing_table" in statement.get_error_message()
    assert statement.get_last_exception().driver == "sqlite"
    assert adapter.get_error_message() == statement.get_error_message()


def test_closed_statement_is_not_reusable(adapter):
    statement = adapter.prepare_query("SELECT 1")
    statement.close()
    statement.close()
    assert statement.closed
    with pytest.raises(InvalidStateError):
        statement.execute()
    with pytest.raises(InvalidStateError):
        statement.bind_value("a", 1)


def test_preparing_again_closes_previous_statement(adapter):
    first = adapter.prepare_query("SELECT 1")
    second = adapter.prepare_query("SELECT 2")
    assert first.closed
    assert not second.closed


def test_context_manager_closes(adapter):
    with adapter.prepare_query("SELECT 1") as statement:
        assert statement.execute().fetch_row() == (1,)
    assert statement.closed
