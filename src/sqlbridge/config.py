"""
Adapter configuration: named entries built from mappings, DSNs or the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from .exceptions import ConfigurationError
from .security.dsns import DSNConfig, parse_dsn
from .security.redaction import redact_value

DRIVERS = ("mysql", "mysqli", "mysql-pdo", "pgsql", "pgsql-pdo", "mssql-pdo", "sqlite")

DRIVER_ALIASES = {
    "pdo.mysql": "mysql-pdo",
    "pdo_mysql": "mysql-pdo",
    "pdo.pgsql": "pgsql-pdo",
    "pdo_pgsql": "pgsql-pdo",
    "pdo.mssql": "mssql-pdo",
    "pdo.sqlsrv": "mssql-pdo",
    "mssql": "mssql-pdo",
    "sqlsrv": "mssql-pdo",
    "postgres": "pgsql",
    "postgresql": "pgsql",
    "sqlite3": "sqlite",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def normalize_driver(driver: str) -> str:
    """
    Resolve aliases; ``package.module:ClassName`` paths are returned as-is.
    """

    if not driver or not str(driver).strip():
        raise ConfigurationError("Driver name can't be empty.")
    driver = str(driver).strip()
    if ":" in driver:
        return driver
    key = driver.lower()
    key = DRIVER_ALIASES.get(key, key)
    if key not in DRIVERS:
        raise ConfigurationError(f"Unknown driver '{driver}'. Known drivers: {', '.join(DRIVERS)}.")
    return key


def _parse_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_int(value: Any, *, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid integer value for '{key}': {value!r}")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid integer value for '{key}': {value!r}", previous=exc) from exc
    if parsed < 0:
        raise ConfigurationError(f"'{key}' must be >= 0, got {parsed}.")
    return parsed


# accepted spellings -> field name
_OPTION_KEYS = {
    "port": "port",
    "socket": "socket",
    "sslmode": "ssl_mode",
    "ssl_mode": "ssl_mode",
    "sslca": "ssl_ca",
    "ssl_ca": "ssl_ca",
    "sslrootcert": "ssl_ca",
    "sslcert": "ssl_cert",
    "ssl_cert": "ssl_cert",
    "sslkey": "ssl_key",
    "ssl_key": "ssl_key",
    "connecttimeout": "connect_timeout",
    "connect_timeout": "connect_timeout",
    "timeout": "connect_timeout",
    "pooled": "pooled",
    "persistent": "pooled",
    "encrypted": "encrypted",
    "charset": "charset",
    "init": "init",
}


@dataclass(frozen=True)
class AdapterOptions:
    """
    Per-driver connection options. ``init`` holds extra keyword arguments
    handed to the native ``connect()`` call unchanged.
    """

    port: int | None = None
    socket: str | None = None
    ssl_mode: str | None = None
    ssl_ca: str | None = None
    ssl_cert: str | None = None
    ssl_key: str | None = None
    connect_timeout: int | None = None
    pooled: bool = False
    encrypted: bool = False
    charset: str | None = None
    init: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "AdapterOptions":
        if options is None:
            return cls()
        if isinstance(options, AdapterOptions):
            return options
        if not isinstance(options, Mapping):
            raise ConfigurationError("Adapter options must be a mapping.")
        values: dict[str, Any] = {}
        init: dict[str, Any] = {}
        for raw_key, value in options.items():
            key = _OPTION_KEYS.get(str(raw_key).lower())
            if key is None:
                # unknown keys are forwarded to the native driver
                init[str(raw_key)] = value
                continue
            if value is None:
                continue
            if key in ("port", "connect_timeout"):
                values[key] = _parse_int(value, key=raw_key)
            elif key in ("pooled", "encrypted"):
                values[key] = _parse_bool(value, key=raw_key)
            elif key == "init":
                if not isinstance(value, Mapping):
                    raise ConfigurationError("Option 'init' must be a mapping.")
                init.update(value)
            else:
                values[key] = str(value)
        return cls(init=init, **values)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class AdapterConfig:
    """
    One named adapter entry, fixed once the adapter is constructed.
    """

    name: str
    driver: str
    server: str | None = None
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    db_name: str | None = None
    options: AdapterOptions = field(default_factory=AdapterOptions)
    default: bool = False
    dsn: DSNConfig | None = field(default=None, repr=False, compare=False)
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Adapter name can't be empty.")
        object.__setattr__(self, "driver", normalize_driver(self.driver))
        if self.driver == "sqlite":
            if not (self.server or self.db_name):
                raise ConfigurationError(
                    f"Adapter '{self.name}' needs a database file name (server or db_name)."
                )
        elif not self.server:
            raise ConfigurationError(f"Server name is missing for adapter '{self.name}'.")
        if not isinstance(self.options, AdapterOptions):
            object.__setattr__(self, "options", AdapterOptions.from_mapping(self.options))

    @classmethod
    def from_mapping(cls, name: str, definition: Mapping[str, Any]) -> "AdapterConfig":
        """
        Build from a definition such as ``{"driver": "mysqli", "server": "db",
        "username": ..., "password": ..., "dbName": ..., "options": {...}}``.
        A ``dsn`` key may replace the connection fields.
        """

        if not isinstance(definition, Mapping):
            raise ConfigurationError(f"Definition of adapter '{name}' must be a mapping.")
        if definition.get("dsn"):
            overrides = {k: v for k, v in definition.items() if k != "dsn"}
            return cls.from_dsn(definition["dsn"], name=name, **_normalize_keys(overrides))
        driver = definition.get("driver")
        if driver is None:
            raise ConfigurationError(f"Driver name is missing for adapter '{name}'.")
        values = _normalize_keys(definition)
        return cls(
            name=name,
            driver=driver,
            server=values.get("server"),
            username=values.get("username"),
            password=values.get("password"),
            db_name=values.get("db_name"),
            options=AdapterOptions.from_mapping(values.get("options")),
            default=_parse_bool(values.get("default", False), key="default"),
            source=values.get("source"),
        )

    @classmethod
    def from_dsn(cls, dsn: str, name: str = "default", **overrides: Any) -> "AdapterConfig":
        """
        ``mysqli://user:pw@host:3306/db?connect_timeout=5``; query arguments
        become options. ``sqlite:///relative.db`` and ``sqlite:////abs.db``
        name the database file.
        """

        try:
            parsed = parse_dsn(dsn)
        except ValueError as exc:
            raise ConfigurationError(str(exc), previous=exc) from exc
        option_values: dict[str, Any] = dict(parsed.query)
        if parsed.port:
            option_values["port"] = parsed.port
        option_values.update(overrides.pop("options", None) or {})

        driver = normalize_driver(overrides.pop("driver", parsed.driver))
        if driver == "sqlite":
            server = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
            db_name = None
        else:
            server = parsed.host
            db_name = parsed.database

        values = {
            "server": server,
            "username": parsed.username,
            "password": parsed.password,
            "db_name": db_name,
            "default": False,
            "source": None,
        }
        values.update(overrides)
        values["default"] = _parse_bool(values["default"], key="default")
        return cls(
            name=name,
            driver=driver,
            options=AdapterOptions.from_mapping(option_values),
            dsn=parsed,
            **values,
        )

    @classmethod
    def from_env(cls, env_var: str, name: str | None = None, **overrides: Any) -> "AdapterConfig":
        value = os.getenv(env_var)
        if not value:
            raise ConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, name=name or "default", source=env_var, **overrides)

    def with_name(self, name: str) -> "AdapterConfig":
        return replace(self, name=name)

    def redacted_dsn(self) -> str:
        if self.dsn is not None:
            return self.dsn.redacted()
        netloc = ""
        if self.username:
            netloc = self.username + (":***" if self.password else "") + "@"
        host = self.server or ""
        if self.options.port:
            host += f":{self.options.port}"
        path = f"/{self.db_name}" if self.db_name else ""
        return f"{self.driver}://{netloc}{host}{path}"

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.name} from {self.source} ({redacted})"
        return f"{self.name} ({redacted})"

    def redacted(self) -> dict[str, Any]:
        """Configuration as a dict safe for logs."""
        return {
            "name": self.name,
            "driver": self.driver,
            "server": self.server,
            "username": self.username,
            "password": "***" if self.password else None,
            "db_name": self.db_name,
            "options": redact_value(self.options.as_dict()),
        }


def _normalize_keys(definition: Mapping[str, Any]) -> dict[str, Any]:
    aliases = {"dbName": "db_name", "dbname": "db_name", "database": "db_name", "host": "server", "user": "username"}
    return {aliases.get(key, key): value for key, value in definition.items()}
