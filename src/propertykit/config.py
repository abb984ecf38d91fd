"""Runtime configuration for propertykit."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from propertykit.exceptions import PropertyKitConfigError

#: Backend names accepted by :attr:`PropertyKitConfig.backend`.
BACKENDS: frozenset[str] = frozenset({"memory", "sqlite"})

#: Database file used by the sqlite backend when none is configured.
DEFAULT_DB_PATH = Path("propertykit.db")


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class PropertyKitConfig:
    """Store configuration.

    Parameters
    ----------
    suite_name : str or None
        Namespace the store reads and writes. ``None`` (or a blank string)
        selects the standard suite.
    backend : str
        ``"memory"`` for the process-local store, ``"sqlite"`` for a
        persistent database file.
    db_path : Path
        Database file used when ``backend`` is ``"sqlite"``.
    log_decode_failures : bool
        Log (at DEBUG level) stored values that fail to decode. Decode
        failures are never raised either way.
    """

    suite_name: str | None = None
    backend: str = "memory"
    db_path: Path = DEFAULT_DB_PATH
    log_decode_failures: bool = True

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise PropertyKitConfigError(
                f"Unknown backend {self.backend!r}; expected one of {sorted(BACKENDS)}"
            )
        if not isinstance(self.db_path, Path):
            object.__setattr__(self, "db_path", Path(self.db_path))

    @classmethod
    def from_env(cls, **overrides: Any) -> PropertyKitConfig:
        """Create configuration from environment variables.

        Reads ``PROPERTYKIT_SUITE``, ``PROPERTYKIT_BACKEND``,
        ``PROPERTYKIT_DB_PATH`` and ``PROPERTYKIT_LOG_DECODE_FAILURES``.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        PropertyKitConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PROPERTYKIT_SUITE": "suite_name",
            "PROPERTYKIT_BACKEND": "backend",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        db_path_env = env.get("PROPERTYKIT_DB_PATH")
        if db_path_env is not None and "db_path" not in overrides:
            config_kwargs["db_path"] = Path(db_path_env)

        if "log_decode_failures" not in overrides:
            config_kwargs["log_decode_failures"] = _env_bool(
                env.get("PROPERTYKIT_LOG_DECODE_FAILURES"),
                True,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
