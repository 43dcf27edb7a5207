"""
Configuration loader for the Sailor client.

Reads resource declarations, connection settings, fallback origin and
logging options from a YAML file, then applies SAILOR_* environment
overrides. A `.env` file is loaded into the environment first when
present.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv

from ..core.connector import Connector
from ..core.exceptions import InvalidResourceError, SailorConfigError
from ..core.logging import configure_logging
from ..core.models import (
    DEFAULT_MOUNT_PATH,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SOCKET_TIMEOUT,
    ENV_SAILOR_ACCESS_KEY,
    ENV_SAILOR_APP,
    ENV_SAILOR_FALLBACK_BASE_URL,
    ENV_SAILOR_NS,
    ENV_SAILOR_SECRET_KEY,
    ENV_SAILOR_SOCKET_TIMEOUT,
    ENV_SAILOR_URL,
    ConnectionContext,
    FetchStrategy,
    ResourceDeclaration,
    ResourceKind,
    parse_socket_timeout,
)
from ..runner.engine import SyncEngine
from ..sources.codec import Decoder


logger = logging.getLogger(__name__)


# Environment variable -> connection field
CONNECTION_ENV_OVERRIDES = {
    ENV_SAILOR_URL: "address",
    ENV_SAILOR_NS: "namespace",
    ENV_SAILOR_APP: "app",
    ENV_SAILOR_ACCESS_KEY: "access_key",
    ENV_SAILOR_SECRET_KEY: "secret_key",
    ENV_SAILOR_SOCKET_TIMEOUT: "socket_timeout",
}

STRATEGY_ALIASES = {
    "mounted_path": FetchStrategy.MOUNTED_PATH,
    "mounted": FetchStrategy.MOUNTED_PATH,
    "volume": FetchStrategy.MOUNTED_PATH,
    "remote_pull": FetchStrategy.REMOTE_PULL,
    "remote": FetchStrategy.REMOTE_PULL,
    "pull": FetchStrategy.REMOTE_PULL,
}


class SailorConfig:
    """
    Configuration for a Sailor engine.

    Example config file:

        connection:
          address: http://sailor.internal:7766
          namespace: payments
          app: ledger
        fallback:
          base_url: https://fallback.example.com/sailor
        logging:
          enabled: true
          level: INFO
          structured: false
        resources:
          - kind: config
            strategy: mounted_path
            path: /etc/sailor
          - kind: misc
            name: banner
            strategy: remote_pull
            poll_interval: 30
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        env_file: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
            env_file: Path to a .env file (defaults to ./.env when it exists)
        """
        self._load_env_file(env_file)
        self.config_path = Path(config_path) if config_path else None
        self.config = self._load_config() if self.config_path else self._default_config()
        self._apply_env_overrides()

    @staticmethod
    def _load_env_file(env_file: Optional[Union[str, Path]]) -> None:
        path = Path(env_file) if env_file else Path.cwd() / ".env"
        if path.exists():
            logger.debug(f"Loading environment from: {path}")
            load_dotenv(path, override=False)
        elif env_file:
            raise FileNotFoundError(f"Env file not found: {path}")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if config is not None and not isinstance(config, dict):
            raise SailorConfigError(f"Config file must contain a mapping: {self.config_path}")
        return config or {}

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration: mounted config and secrets."""
        return {
            "connection": {
                "socket_timeout": DEFAULT_SOCKET_TIMEOUT,
            },
            "fallback": {},
            "logging": {
                "enabled": False,
                "level": "INFO",
                "structured": False,
            },
            "resources": [
                {"kind": "config", "strategy": "mounted_path", "path": DEFAULT_MOUNT_PATH},
                {"kind": "secret", "strategy": "mounted_path", "path": DEFAULT_MOUNT_PATH},
            ],
        }

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        connection = self.config.get("connection") or {}
        for env_var, field_name in CONNECTION_ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                connection[field_name] = value
        self.config["connection"] = connection

        fallback_base_url = os.environ.get(ENV_SAILOR_FALLBACK_BASE_URL)
        if fallback_base_url:
            fallback = self.config.get("fallback") or {}
            fallback["base_url"] = fallback_base_url
            self.config["fallback"] = fallback

    def get_connection_config(self) -> Dict[str, Any]:
        return self.config.get("connection") or {}

    def get_fallback_config(self) -> Dict[str, Any]:
        return self.config.get("fallback") or {}

    def get_logging_config(self) -> Dict[str, Any]:
        return self.config.get("logging") or {}

    def get_resource_configs(self) -> List[Dict[str, Any]]:
        return self.config.get("resources") or []

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def connection(self) -> ConnectionContext:
        """
        Build and validate the connection context.

        Raises:
            MissingConnectionFieldError: For the first missing field
        """
        conn = self.get_connection_config()
        timeout = conn.get("socket_timeout")
        context = ConnectionContext(
            address=str(conn.get("address") or ""),
            namespace=str(conn.get("namespace") or ""),
            app=str(conn.get("app") or ""),
            access_key=str(conn.get("access_key") or ""),
            secret_key=str(conn.get("secret_key") or ""),
            socket_timeout=parse_socket_timeout(timeout),
        )
        context.validate()
        return context

    def resources(self) -> List[ResourceDeclaration]:
        """Parse the declared resources."""
        return [parse_resource(entry) for entry in self.get_resource_configs()]

    def fallback_base_url(self) -> Optional[str]:
        return self.get_fallback_config().get("base_url") or None

    def build_engine(
        self,
        connector: Optional[Connector] = None,
        config_decoder: Optional[Decoder] = None,
        secret_decoder: Optional[Decoder] = None,
    ) -> SyncEngine:
        """
        Create a SyncEngine from this configuration.

        Configures package logging first when `logging.enabled` is set.
        """
        log_config = self.get_logging_config()
        if log_config.get("enabled"):
            level = logging.getLevelName(str(log_config.get("level", "INFO")).upper())
            configure_logging(
                level=level if isinstance(level, int) else logging.INFO,
                structured=bool(log_config.get("structured", False)),
            )

        return SyncEngine(
            resources=self.resources(),
            connection=self.connection(),
            connector=connector,
            config_decoder=config_decoder,
            secret_decoder=secret_decoder,
            # empty string: fallback disabled regardless of the environment
            fallback_base_url=self.fallback_base_url() or "",
        )


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def parse_resource(entry: Dict[str, Any]) -> ResourceDeclaration:
    """
    Build a ResourceDeclaration from one `resources` entry.

    Raises:
        InvalidResourceError: For an unknown kind or strategy
    """
    if not isinstance(entry, dict):
        raise InvalidResourceError(f"resource entry must be a mapping, got {entry!r}")

    try:
        kind = ResourceKind(str(entry.get("kind", "")).lower())
    except ValueError:
        raise InvalidResourceError(f"unknown resource kind: {entry.get('kind')!r}")

    strategy_name = str(entry.get("strategy", "mounted_path")).lower()
    strategy = STRATEGY_ALIASES.get(strategy_name)
    if strategy is None:
        raise InvalidResourceError(f"unknown fetch strategy: {strategy_name!r}")

    declaration = ResourceDeclaration(
        kind=kind,
        name=str(entry.get("name") or ""),
        path=str(entry.get("path") or DEFAULT_MOUNT_PATH),
        strategy=strategy,
        poll_interval=float(entry.get("poll_interval") or DEFAULT_POLL_INTERVAL),
        once=_as_bool(entry.get("once"), False),
        fallback_enabled=_as_bool(entry.get("fallback_enabled"), True),
    )
    declaration.validate()
    return declaration
