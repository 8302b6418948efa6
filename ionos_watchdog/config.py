"""
IONOS Cloud Watchdog Configuration

Centralized configuration: API endpoints, timeouts and the YAML config file.

Priority: config file < environment variables < command-line flags
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# =============================================================================
# Endpoints
# =============================================================================

DEFAULT_API_URL = "https://api.ionos.com/cloudapi/v6"
DEFAULT_DBAAS_URL = "https://api.ionos.com/databases"
STATUS_FEED_URL = "https://status.ionos.cloud/history.atom"

# Per-call HTTP / Kubernetes API timeout in seconds
REQUEST_TIMEOUT = 10


# =============================================================================
# Config File
# =============================================================================

CONFIG_DIR_NAME = ".ionos-cloud-watchdog"
CONFIG_FILE_NAME = "config.yaml"

DEFAULT_KUBECONFIG = str(Path.home() / ".kube" / "config")

# Environment variable -> IonosSettings attribute
ENV_VARS = {
    "IONOS_TOKEN": "token",
    "IONOS_USERNAME": "username",
    "IONOS_PASSWORD": "password",
    "IONOS_API_URL": "api_url",
}


@dataclass
class IonosSettings:
    """
    IONOS Cloud credentials.

    Attributes:
        token: API token (takes precedence over username/password)
        username: Account username
        password: Account password
        api_url: Alternative API host, e.g. https://api.ionos.com
    """
    token: str = ""
    username: str = ""
    password: str = ""
    api_url: str = ""

    @property
    def has_credentials(self) -> bool:
        return bool(self.token) or bool(self.username and self.password)


@dataclass
class WatchdogConfig:
    """Settings persisted in ~/.ionos-cloud-watchdog/config.yaml."""
    ionos: IonosSettings = field(default_factory=IonosSettings)
    kubeconfig: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "WatchdogConfig":
        data = data or {}
        ionos = data.get("ionos") or {}
        if not isinstance(ionos, dict):
            raise ConfigurationError("invalid config file: 'ionos' must be a mapping")

        return cls(
            ionos=IonosSettings(
                token=str(ionos.get("token") or ""),
                username=str(ionos.get("username") or ""),
                password=str(ionos.get("password") or ""),
                api_url=str(ionos.get("api_url") or ""),
            ),
            kubeconfig=str(data.get("kubeconfig") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting empty values."""
        ionos = {
            key: value
            for key, value in (
                ("token", self.ionos.token),
                ("username", self.ionos.username),
                ("password", self.ionos.password),
                ("api_url", self.ionos.api_url),
            )
            if value
        }
        data: Dict[str, Any] = {"ionos": ionos}
        if self.kubeconfig:
            data["kubeconfig"] = self.kubeconfig
        return data

    def apply_environment(self) -> None:
        """Override file values with any IONOS_* environment variables that are set."""
        for env_name, attr in ENV_VARS.items():
            value = os.environ.get(env_name)
            if value:
                setattr(self.ionos, attr, value)


def get_config_dir() -> Path:
    """Directory holding the watchdog config file."""
    return Path.home() / CONFIG_DIR_NAME


def get_config_path() -> Path:
    """Default config file location."""
    return get_config_dir() / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> WatchdogConfig:
    """
    Load configuration from YAML.

    Args:
        path: Config file path (default: ~/.ionos-cloud-watchdog/config.yaml)

    Returns:
        WatchdogConfig (empty if the file does not exist)

    Raises:
        ConfigurationError: if the file cannot be read or parsed
    """
    config_path = Path(path) if path else get_config_path()

    if not config_path.exists():
        logger.debug(f"No config file at {config_path}")
        return WatchdogConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"failed to read config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"failed to parse config file: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError("failed to parse config file: expected a mapping")

    logger.debug(f"Loaded config from {config_path}")
    return WatchdogConfig.from_dict(data)


def save_config(cfg: WatchdogConfig, path: Optional[Path] = None) -> Path:
    """
    Write configuration to YAML with owner-only permissions.

    Returns:
        Path the config was written to
    """
    config_path = Path(path) if path else get_config_path()

    try:
        config_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(cfg.to_dict(), f, default_flow_style=False, sort_keys=False)
        os.chmod(config_path, 0o600)
    except OSError as e:
        raise ConfigurationError(f"failed to write config file: {e}") from e

    logger.info(f"Saved config to {config_path}")
    return config_path


def resolve_config(
    path: Optional[Path] = None,
    kubeconfig: Optional[str] = None,
) -> WatchdogConfig:
    """
    Build the effective configuration: file, then environment, then flags.

    Args:
        path: Config file path override
        kubeconfig: --kubeconfig flag value
    """
    cfg = load_config(path)
    cfg.apply_environment()
    if kubeconfig:
        cfg.kubeconfig = kubeconfig
    return cfg
