import pytest

from sqlbridge.adapters import MsSqlPdoAdapter
from sqlbridge.config import AdapterConfig


@pytest.fixture
def driver(fake_driver, monkeypatch):
    monkeypatch.setattr("sqlbridge.adapters.mssql_pdo._load_driver", lambda: fake_driver)
    return fake_driver


@pytest.fixture
def adapter(driver):
    config = AdapterConfig.from_mapping(
        "reporting",
        {
            "driver": "pdo.sqlsrv",
            "server": "sql.local",
            "username": "sa",
            "password": "Secret1!",
            "dbName": "reports",
            "options": {"port": 1434, "encrypted": "yes", "connectTimeout": 10, "pooled": True,
                        "odbc_driver": "ODBC Driver 17 for SQL Server"},
        },
    )
    return MsSqlPdoAdapter(config)


def test_connection_string(adapter, driver):
    adapter.open()
    connection = driver.connection
    assert connection.args == (
        "DRIVER={ODBC Driver 17 for SQL Server};SERVER=sql.local,1434;DATABASE=reports;"
        "UID=sa;PWD=Secret1!;Encrypt=yes;TrustServerCertificate=yes;",
    )
    assert connection.kwargs == {"autocommit": True, "timeout": 10}
    assert driver.pooling is True


def test_named_parameters_become_qmarks(adapter, driver):
    select = adapter.get_builder_factory().select("id").from_("dbo.users").where("name", "bob").limit(10, 20)
    statement = adapter.prepare_query(select)
    assert statement.sql == (
        "SELECT [id] FROM [dbo].[users] WHERE [name] = :where1 "
        "ORDER BY (SELECT NULL) OFFSET 20 ROWS FETCH NEXT 10 ROWS ONLY"
    )
    statement.execute()
    assert driver.connection.executed[-1][:2] == (
        "SELECT [id] FROM [dbo].[users] WHERE [name] = ? "
        "ORDER BY (SELECT NULL) OFFSET 20 ROWS FETCH NEXT 10 ROWS ONLY",
        ["bob"],
    )


def test_sqlstate_comes_first_in_odbc_errors(adapter, driver):
    adapter.open()
    driver.connection.error_args = ("42S02", "[42S02] Invalid object name 'ghosts'.")
    driver.connection.fail_on.add("ghosts")
    assert adapter.query("SELECT * FROM ghosts") is None
    assert adapter.get_sql_state() == "42S02"
    assert "Invalid object name" in adapter.get_error_message()


def test_last_insert_id(adapter, driver):
    adapter.open()
    driver.connection.respond("@@IDENTITY", [""], [(12,)])
    driver.connection.respond("sys.sequences", ["current_value"], [(99,)])
    assert adapter.last_insert_id() == 12
    assert adapter.last_insert_id("order_seq") == 99
    assert driver.connection.statements[-1] == "SELECT current_value FROM sys.sequences WHERE name = N'order_seq'"


def test_column_names_and_change_db(adapter, driver):
    adapter.open()
    driver.connection.respond("sp_columns", ["TABLE_NAME", "COLUMN_NAME"], [("users", "id"), ("users", "name")])
    assert adapter.get_column_names("dbo.users") == ["id", "name"]
    assert driver.connection.statements[-1] == "EXEC sp_columns @table_name = N'users'"
    assert adapter.change_db("archive") is True
    assert driver.connection.statements[-1] == "USE [archive]"


def test_native_transactions(adapter, driver):
    adapter.begin_transaction()
    assert driver.connection.autocommit is False
    adapter.commit()
    assert driver.connection.autocommit is True
    assert driver.connection.commits == 1
