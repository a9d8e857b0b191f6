"""
Configuration loader for the contribution archiver.

Settings come from built-in defaults, an optional YAML file and the
environment, in increasing order of precedence. Only this module reads the
environment; the rest of the package receives a SyncSettings value.
"""

import copy
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ..connectors.codingame import DEFAULT_BASE_URL
from ..core.exceptions import ConfigError


logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "auth": {
        "cookie": None,
        "user_id": None,
    },
    "api": {
        "base_url": DEFAULT_BASE_URL,
        "timeout": 30,
        "rate_limit_delay": 0.0,
        "user_agent": None,
    },
    "storage": {
        "data_dir": "data",
        "pretty_print": True,
    },
    "sync": {
        "extra_handles": [],
        "test_handles": [],
    },
}

# environment variable -> (section, key)
ENV_OVERRIDES = {
    "CG_COOKIE": ("auth", "cookie"),
    "CG_USER_ID": ("auth", "user_id"),
    "CG_BASE_URL": ("api", "base_url"),
    "DATA_DIR": ("storage", "data_dir"),
    "EXTRA_HANDLES": ("sync", "extra_handles"),
    "TEST_HANDLES": ("sync", "test_handles"),
}


def parse_handle_list(value: Any) -> List[str]:
    """
    Normalize a handle list.

    Accepts a comma-separated string or a list; entries are trimmed and
    empty ones dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = value
    return [str(item).strip() for item in items if str(item).strip()]


@dataclass(frozen=True)
class SyncSettings:
    """
    Validated settings for one archiver run.

    Attributes:
        session_cookie: Opaque session token sent with every API call
        user_id: Numeric id of the user
        data_dir: Root of the snapshot archive
        extra_handles: Handles to resolve even if not listed
        test_handles: If non-empty, only these handles are processed
        base_url: Services API root
        timeout: HTTP timeout in seconds
        rate_limit_delay: Minimum seconds between requests
        user_agent: Optional User-Agent override
        pretty_print: Whether snapshots are indented
    """
    session_cookie: str
    user_id: int
    data_dir: Path
    extra_handles: Tuple[str, ...] = ()
    test_handles: Tuple[str, ...] = ()
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 30
    rate_limit_delay: float = 0.0
    user_agent: Optional[str] = None
    pretty_print: bool = True


class ArchiveConfig:
    """
    Configuration for the archiver.

    Loads an optional YAML file over the defaults and applies environment
    overrides.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
            environ: Environment mapping (defaults to os.environ)

        Raises:
            ConfigError: if the config file is missing or invalid
        """
        self.config_path = Path(config_path) if config_path else None
        self.environ = os.environ if environ is None else environ
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        if self.config_path:
            self._merge(self._load_config())
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise ConfigError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Config file must contain a mapping: {self.config_path}")
        return config

    def _merge(self, overrides: Dict[str, Any]) -> None:
        for section, values in overrides.items():
            if isinstance(values, dict) and isinstance(self.config.get(section), dict):
                self.config[section].update(values)
            else:
                self.config[section] = values

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                self.config.setdefault(section, {})[key] = value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dotted key (e.g. from the CLI)."""
        section, _, name = key.partition(".")
        self.config.setdefault(section, {})[name] = value

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

    def build_settings(self) -> SyncSettings:
        """
        Validate the configuration and freeze it into SyncSettings.

        Raises:
            ConfigError: if the cookie or user id is missing or invalid
        """
        cookie = self.get("auth.cookie")
        if not cookie:
            raise ConfigError("CG_COOKIE is not set.")

        raw_user_id = self.get("auth.user_id")
        if raw_user_id is None or raw_user_id == "":
            raise ConfigError("CG_USER_ID is not set.")
        try:
            user_id = int(str(raw_user_id).strip())
        except ValueError:
            raise ConfigError(f"CG_USER_ID must be a number, got {raw_user_id!r}.")

        try:
            timeout = int(self.get("api.timeout", 30))
            rate_limit_delay = float(self.get("api.rate_limit_delay", 0.0))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid api settings: {e}") from e

        return SyncSettings(
            session_cookie=str(cookie),
            user_id=user_id,
            data_dir=Path(self.get("storage.data_dir", "data")),
            extra_handles=tuple(parse_handle_list(self.get("sync.extra_handles"))),
            test_handles=tuple(parse_handle_list(self.get("sync.test_handles"))),
            base_url=self.get("api.base_url", DEFAULT_BASE_URL),
            timeout=timeout,
            rate_limit_delay=rate_limit_delay,
            user_agent=self.get("api.user_agent"),
            pretty_print=bool(self.get("storage.pretty_print", True)),
        )
