"""CLI configuration loading."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from ..models.signature import default_metadata_path

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OCP_RECLAIM_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".ocp-reclaim" / "config.yaml"

# environment variable -> config field
ENV_OVERRIDES = {
    "OS_CLOUD": "cloud",
    "OCP_RECLAIM_INSTALL_DIR": "install_dir",
    "OCP_RECLAIM_LOG_LEVEL": "log_level",
    "OCP_RECLAIM_AUDIT_DIR": "audit_dir",
}


@dataclass
class Config:
    """Runtime configuration.

    Values come from the YAML config file, then environment variables, then
    CLI options (applied by the caller), later sources winning.

    Attributes:
        cloud: clouds.yaml profile name (OS_CLOUD)
        install_dir: Installer workspace holding metadata.json
        log_level: Default log level
        audit_dir: Directory for audit logs (default: ~/.ocp-reclaim/audit-logs)
        router_max_attempts: Delete attempts per router
        router_retry_delay: Seconds between router delete attempts
        instance_delete_timeout: Seconds to wait for each instance deletion
        cluster_name: Cluster name used in floating IP descriptions
        base_domain: Base domain used in floating IP descriptions
    """

    cloud: Optional[str] = None
    install_dir: str = "openshift-install"
    log_level: str = "WARNING"
    audit_dir: Optional[str] = None
    router_max_attempts: int = 3
    router_retry_delay: float = 2.0
    instance_delete_timeout: int = 600
    cluster_name: str = "openshift-cluster"
    base_domain: str = "example.com"

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Config:
        """Load configuration from file and environment.

        Args:
            config_path: Explicit config file (default: $OCP_RECLAIM_CONFIG or
                ~/.ocp-reclaim/config.yaml). A missing default file is fine; a
                missing explicit file is an error.

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If an explicit config file does not exist
            ValueError: If the config file is not a YAML mapping
        """
        explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
        path = Path(explicit).expanduser() if explicit else DEFAULT_CONFIG_PATH

        values: dict = {}
        if path.exists():
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            values.update(data)
            logger.debug(f"Loaded config from {path}")
        elif explicit:
            raise FileNotFoundError(f"Config file not found: {path}")

        for env_var, field_name in ENV_OVERRIDES.items():
            env_value = os.environ.get(env_var)
            if env_value:
                values[field_name] = env_value

        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

        config = cls(**{k: v for k, v in values.items() if k in known})
        config.router_max_attempts = int(config.router_max_attempts)
        config.router_retry_delay = float(config.router_retry_delay)
        config.instance_delete_timeout = int(config.instance_delete_timeout)
        return config

    @property
    def metadata_path(self) -> Path:
        return default_metadata_path(self.install_dir)
