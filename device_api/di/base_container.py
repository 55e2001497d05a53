# Standard library imports
from typing import Any, Callable, Dict, Hashable, Optional

# Local application imports
from ..core.config import Settings, get_settings


class BaseContainer:
    """
    Minimal registry of singletons and factories keyed by type or name.

    Singletons are returned as-is; factories build a fresh instance on every
    get(). Asking for an unregistered key raises ValueError.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings: Settings = settings if settings is not None else get_settings()
        self._singletons: Dict[Hashable, Any] = {}
        self._factories: Dict[Hashable, Callable[[], Any]] = {}

    def register_singleton(self, key: Hashable, instance: Any) -> None:
        self._singletons[key] = instance
        self._factories.pop(key, None)

    def register_factory(self, key: Hashable, factory: Callable[[], Any]) -> None:
        self._factories[key] = factory
        self._singletons.pop(key, None)

    def get(self, key: Hashable) -> Any:
        if key in self._singletons:
            return self._singletons[key]
        if key in self._factories:
            return self._factories[key]()
        name = getattr(key, "__name__", key)
        raise ValueError(f"No registration found for {name}")

    def has(self, key: Hashable) -> bool:
        return key in self._singletons or key in self._factories
