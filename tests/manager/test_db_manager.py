import threading

import pytest

from sqlbridge.adapters import AdapterBase, MySqliAdapter, SqliteAdapter
from sqlbridge.config import AdapterConfig
from sqlbridge.exceptions import ConfigurationError, InvalidStateError
from sqlbridge.manager import DbManager, OverridePolicy


class CustomAdapter(SqliteAdapter):
    driver_name = "custom"


SQLITE = {"driver": "sqlite", "server": ":memory:"}


def test_first_registered_adapter_is_default():
    manager = DbManager()
    manager.register("main", SQLITE)
    manager.register("reports", {"driver": "mysqli", "server": "db.local"})
    assert isinstance(manager.get_default_adapter(), SqliteAdapter)
    assert isinstance(manager.get_adapter("reports"), MySqliAdapter)
    assert manager.get_adapter("missing") is None
    assert manager.adapter_names() == ["main", "reports"]


def test_default_flag_and_set_default():
    manager = DbManager()
    manager.register("main", SQLITE)
    manager.register("reports", dict(SQLITE, default=True))
    assert manager.default_name == "reports"
    manager.set_default("main")
    assert manager.get_default_adapter() is manager.get_adapter("main")
    with pytest.raises(ConfigurationError):
        manager.set_default("missing")


def test_deny_policy_rejects_duplicates():
    manager = DbManager()
    manager.register("main", SQLITE)
    with pytest.raises(ConfigurationError):
        manager.register("main", SQLITE)


def test_ignore_policy_keeps_existing():
    manager = DbManager(override="ignore")
    manager.register("main", SQLITE)
    first = manager.get_adapter("main")
    assert manager.register("main", SQLITE) is False
    assert manager.get_adapter("main") is first


def test_allow_policy_replaces_and_closes_previous():
    manager = DbManager(override=OverridePolicy.ALLOW)
    manager.register("main", SQLITE)
    first = manager.get_adapter("main")
    first.open()
    assert manager.register("main", SQLITE) is True
    assert not first.is_opened()
    assert manager.get_adapter("main") is not first


def test_unknown_policy():
    with pytest.raises(ConfigurationError):
        DbManager(override="sometimes")


def test_configure_validates_every_entry_first():
    manager = DbManager()
    with pytest.raises(ConfigurationError):
        manager.configure({"adapters": {"ok": SQLITE, "broken": {"driver": "mysqli"}}})
    assert len(manager) == 0


def test_from_settings():
    manager = DbManager.from_settings(
        {
            "override": "ALLOW",
            "default": "b",
            "adapters": {"a": SQLITE, "b": {"dsn": "sqlite:///:memory:"}},
        }
    )
    assert manager.override is OverridePolicy.ALLOW
    assert manager.default_name == "b"
    assert "a" in manager


def test_register_accepts_config_objects_and_import_paths():
    manager = DbManager()
    manager.register("custom", AdapterConfig(name="ignored", driver=f"{__name__}:CustomAdapter", server=":memory:"))
    adapter = manager.get_adapter("custom")
    assert isinstance(adapter, CustomAdapter)
    assert adapter.get_name() == "custom"
    with pytest.raises(ConfigurationError):
        manager.register("bad", {"driver": f"{__name__}:SQLITE", "server": ":memory:"})
    with pytest.raises(ConfigurationError):
        manager.register("bad", {"driver": "no.such.module:Adapter", "server": "x"})


def test_remove_adapter():
    manager = DbManager()
    manager.register("main", SQLITE)
    manager.register("other", SQLITE)
    other = manager.get_adapter("other")
    other.open()
    assert manager.remove_adapter("other") is True
    assert not other.is_opened()
    assert manager.remove_adapter("other") is False
    with pytest.raises(InvalidStateError):
        manager.remove_adapter("main")
    assert manager.remove_adapter("main", force=True) is True
    assert manager.get_default_adapter() is None


def test_close_all():
    manager = DbManager()
    manager.register("a", SQLITE)
    manager.register("b", SQLITE)
    for name in ("a", "b"):
        manager.get_adapter(name).open()
    manager.close_all()
    assert not any(adapter.is_opened() for adapter in manager.get_adapters().values())


def test_concurrent_registration_is_consistent():
    manager = DbManager(override="IGNORE")
    results = []

    def worker(index):
        results.append(manager.register(f"db{index % 5}", SQLITE))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert sorted(manager.adapter_names()) == [f"db{i}" for i in range(5)]
    assert results.count(True) == 5
    assert all(isinstance(adapter, AdapterBase) for adapter in manager.get_adapters().values())


def test_configure_resolves_custom_classes_before_registering():
    manager = DbManager()
    with pytest.raises(ConfigurationError):
        manager.configure({"adapters": {"a": SQLITE, "b": {"driver": "no_such_module_xyz:Adapter"}}})
    assert manager.adapter_names() == []


def test_configure_checks_duplicates_and_default_before_registering():
    manager = DbManager()
    manager.register("main", SQLITE)
    with pytest.raises(ConfigurationError):
        manager.configure({"adapters": {"extra": SQLITE, "main": SQLITE}})
    assert manager.adapter_names() == ["main"]
    with pytest.raises(ConfigurationError):
        manager.configure({"default": "missing", "adapters": {"extra": SQLITE}})
    assert manager.adapter_names() == ["main"]
