"""Backend discovery via Python entry points."""

from importlib.metadata import entry_points
from typing import Any

from storage_core.config import Config
from storage_core.exceptions import ConfigError
from storage_core.observability import configure_logging
from storage_core.protocols import StorageBackend
from storage_core.storage import Storage

BACKEND_GROUP = "storage_core.backends"


def discover_backends() -> dict[str, Any]:
    """Discover all registered storage backends.

    Returns:
        Dictionary mapping backend names to their classes
    """
    eps = entry_points(group=BACKEND_GROUP)
    return {ep.name: ep.load() for ep in eps}


def get_backend(name: str) -> Any:
    """Get a backend class by name.

    Args:
        name: The backend name (e.g., "local", "sqlite")

    Returns:
        The backend class

    Raises:
        ConfigError: If the backend is not found
    """
    backends = discover_backends()
    if name not in backends:
        available = ", ".join(sorted(backends.keys())) or "(none)"
        raise ConfigError(f"Backend '{name}' not found. Available: {available}")
    return backends[name]


def create_backend(name: str, **kwargs: Any) -> StorageBackend:
    """Create a StorageBackend instance.

    Args:
        name: The backend name (e.g., "local", "memory", "sqlite")
        **kwargs: Backend-specific configuration

    Returns:
        A StorageBackend implementation
    """
    cls = get_backend(name)
    return cls(**kwargs)


def create_storage(config: Config, setup_logging: bool = True) -> Storage:
    """Build a Storage facade from configuration.

    Args:
        config: Loaded configuration
        setup_logging: Whether to configure the storage_core logger tree

    Returns:
        A Storage bound to the configured backend
    """
    if setup_logging:
        configure_logging(config.logging.level, config.logging.format)
    backend = create_backend(config.backend.backend, **config.backend.backend_kwargs())
    return Storage(backend, name=config.name or config.backend.backend)
