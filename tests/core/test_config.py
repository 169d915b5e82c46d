import pytest

from sqlbridge.config import AdapterConfig, AdapterOptions, normalize_driver
from sqlbridge.exceptions import ConfigurationError


def test_driver_aliases():
    assert normalize_driver("PDO.MySQL") == "mysql-pdo"
    assert normalize_driver("postgresql") == "pgsql"
    assert normalize_driver("sqlsrv") == "mssql-pdo"
    assert normalize_driver("myapp.db:CustomAdapter") == "myapp.db:CustomAdapter"
    with pytest.raises(ConfigurationError):
        normalize_driver("oracle")
    with pytest.raises(ConfigurationError):
        normalize_driver("")


def test_from_mapping_requires_driver_and_server():
    with pytest.raises(ConfigurationError):
        AdapterConfig.from_mapping("db", {"server": "localhost"})
    with pytest.raises(ConfigurationError):
        AdapterConfig.from_mapping("db", {"driver": "mysqli"})


def test_sqlite_accepts_db_name_as_file():
    config = AdapterConfig.from_mapping("local", {"driver": "sqlite3", "dbName": ":memory:"})
    assert config.driver == "sqlite"
    assert config.db_name == ":memory:"


def test_options_parsing_and_unknown_keys():
    options = AdapterOptions.from_mapping(
        {"port": "3306", "persistent": "on", "sslMode": "REQUIRED", "timeout": 3, "init": {"a": 1}, "compress": True}
    )
    assert options.port == 3306
    assert options.pooled is True
    assert options.ssl_mode == "REQUIRED"
    assert options.connect_timeout == 3
    assert dict(options.init) == {"a": 1, "compress": True}


@pytest.mark.parametrize("options", [{"port": "abc"}, {"pooled": "maybe"}, {"port": -1}, {"init": "x"}])
def test_invalid_options_raise(options):
    with pytest.raises(ConfigurationError):
        AdapterOptions.from_mapping(options)


def test_from_dsn_and_redaction():
    config = AdapterConfig.from_dsn("mysqli://app:s3cret@db:3307/shop?connect_timeout=5&password=x", name="main")
    assert config.server == "db"
    assert config.options.port == 3307
    assert config.options.connect_timeout == 5
    assert config.redacted_dsn() == "mysqli://app:***@db:3307/shop?connect_timeout=5&password=%2A%2A%2A"
    assert "s3cret" not in repr(config)
    assert config.redacted()["password"] == "***"


def test_mapping_with_dsn_and_default_flag():
    config = AdapterConfig.from_mapping("reports", {"dsn": "pgsql://u:p@pg/reports", "default": "yes"})
    assert config.driver == "pgsql"
    assert config.default is True
    assert config.descriptive_label() == "reports (pgsql://u:***@pg/reports)"


def test_from_env(monkeypatch):
    monkeypatch.setenv("SQLBRIDGE_DSN", "sqlite:///:memory:")
    config = AdapterConfig.from_env("SQLBRIDGE_DSN")
    assert config.source == "SQLBRIDGE_DSN"
    assert config.server == ":memory:"
    assert config.redacted_dsn() == "sqlite:///:memory:"
    monkeypatch.delenv("SQLBRIDGE_DSN")
    with pytest.raises(ConfigurationError):
        AdapterConfig.from_env("SQLBRIDGE_DSN")
