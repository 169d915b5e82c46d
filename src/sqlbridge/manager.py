"""
Named adapter registry with default-adapter resolution.
"""

from __future__ import annotations

from enum import Enum
from threading import RLock
from typing import Any, Mapping

from .adapters import AdapterBase, adapter_class_for
from .config import AdapterConfig
from .exceptions import ConfigurationError, InvalidStateError
from .utils import get_logger


class OverridePolicy(str, Enum):
    """
    What ``register()`` does when the name is already taken.

    ``DENY`` raises ``ConfigurationError``; ``IGNORE`` keeps the existing
    adapter and reports ``False``; ``ALLOW`` closes and replaces it.
    """

    DENY = "DENY"
    IGNORE = "IGNORE"
    ALLOW = "ALLOW"

    @classmethod
    def parse(cls, value: "OverridePolicy | str") -> "OverridePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown override policy {value!r}; expected one of {', '.join(p.value for p in cls)}.",
                previous=exc,
            ) from exc


class DbManager:
    """
    Holds one adapter per name. The manager may be shared between threads;
    the adapters it hands out may not.
    """

    def __init__(self, override: OverridePolicy | str = OverridePolicy.DENY, slow_query_ms: int | None = None) -> None:
        self.override = OverridePolicy.parse(override)
        self.slow_query_ms = slow_query_ms
        self._adapters: dict[str, AdapterBase] = {}
        self._default_name: str | None = None
        self._lock = RLock()
        self.logger = get_logger("manager")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "DbManager":
        manager = cls(override=settings.get("override", OverridePolicy.DENY))
        manager.configure(settings)
        return manager

    def configure(self, settings: Mapping[str, Any]) -> None:
        """
        Apply ``{"override": ..., "default": name, "adapters": {name: {...}}}``.
        Every entry is validated before any adapter is registered.
        """

        if "override" in settings:
            self.override = OverridePolicy.parse(settings["override"])
        adapters = settings.get("adapters") or {}
        if not isinstance(adapters, Mapping):
            raise ConfigurationError("'adapters' must be a mapping of name to adapter definition.")
        configs = [AdapterConfig.from_mapping(name, definition) for name, definition in adapters.items()]
        for config in configs:
            adapter_class_for(config.driver)
        default = settings.get("default")
        with self._lock:
            if self.override is OverridePolicy.DENY:
                taken = [config.name for config in configs if config.name in self._adapters]
                if taken:
                    raise ConfigurationError(f"Adapter(s) already registered: {', '.join(taken)}.")
            if default and default not in self._adapters and all(config.name != default for config in configs):
                raise ConfigurationError(f"Adapter '{default}' is not registered.")
            for config in configs:
                self.register(config.name, config)
            if default:
                self.set_default(default)

    def register(self, name: str, config: AdapterConfig | Mapping[str, Any]) -> bool:
        if not name:
            raise ConfigurationError("Adapter name can't be empty.")
        if isinstance(config, AdapterConfig):
            config = config if config.name == name else config.with_name(name)
        else:
            config = AdapterConfig.from_mapping(name, config)
        adapter_class = adapter_class_for(config.driver)

        with self._lock:
            previous = self._adapters.get(name)
            if previous is not None:
                if self.override is OverridePolicy.DENY:
                    raise ConfigurationError(f"Adapter '{name}' is already registered.")
                if self.override is OverridePolicy.IGNORE:
                    self.logger.debug("Adapter '%s' already registered; keeping the existing one.", name)
                    return False
                self.logger.info("Replacing adapter '%s'.", name)
                previous.close()
            self._adapters[name] = adapter_class(config, slow_query_ms=self.slow_query_ms)
            if self._default_name is None or config.default:
                self._default_name = name
            self.logger.debug("Registered adapter %s", config.descriptive_label())
            return True

    def get_adapter(self, name: str) -> AdapterBase | None:
        with self._lock:
            return self._adapters.get(name)

    def get_adapters(self) -> dict[str, AdapterBase]:
        with self._lock:
            return dict(self._adapters)

    def adapter_names(self) -> list[str]:
        with self._lock:
            return list(self._adapters)

    def get_default_adapter(self) -> AdapterBase | None:
        with self._lock:
            if self._default_name is None:
                return None
            return self._adapters.get(self._default_name)

    @property
    def default_name(self) -> str | None:
        return self._default_name

    def set_default(self, name: str) -> None:
        with self._lock:
            if name not in self._adapters:
                raise ConfigurationError(f"Adapter '{name}' is not registered.")
            self._default_name = name

    def remove_adapter(self, name: str, force: bool = False) -> bool:
        with self._lock:
            adapter = self._adapters.get(name)
            if adapter is None:
                return False
            if name == self._default_name:
                if not force:
                    raise InvalidStateError(f"Adapter '{name}' is the default adapter; pass force=True to remove it.")
                remaining = [key for key in self._adapters if key != name]
                self._default_name = remaining[0] if remaining else None
            del self._adapters[name]
        adapter.close()
        return True

    def close_all(self) -> None:
        with self._lock:
            adapters = list(self._adapters.values())
        for adapter in adapters:
            adapter.close()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._adapters

    def __len__(self) -> int:
        with self._lock:
            return len(self._adapters)
