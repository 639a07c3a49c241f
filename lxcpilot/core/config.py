"""lxcpilot runtime configuration and settings."""
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from lxcpilot.core.errors import ConfigurationError

DEFAULT_TEMPLATES_LOOKUP = [
    "/usr/share/lxc/templates",
    "/usr/lib/lxc/templates",
]


@dataclass
class LxcPilotConfig:
    """Runtime configuration for lxcpilot operations.

    Attributes:
        containers_path: Root folder where container configs are stored (default: /var/lib/lxc)
        templates_lookup: Candidate template directories, tried in order
        template_prefix: Prefix for temporary template names staged by create
        rootfs_key: Config key naming the container root filesystem
        use_sudo: Run privileged commands through sudo (default: True)
        ip_attempts: Attempts made to discover the container IP (default: 10)
        ip_retry_delay: Seconds between IP discovery attempts (default: 3)
        transition_timeout: Seconds lxc-wait waits for a state change (default: 30)
        start_log_file: lxc-start log destination; also enables DEBUG start logging
        log_file: lxcpilot log file used by the CLI when --log-file is not given
    """

    containers_path: str = "/var/lib/lxc"
    templates_lookup: List[str] = field(default_factory=lambda: list(DEFAULT_TEMPLATES_LOOKUP))
    template_prefix: str = "lxcpilot-tmp"
    rootfs_key: str = "lxc.rootfs"
    use_sudo: bool = True

    # Address discovery
    ip_attempts: int = 10
    ip_retry_delay: float = 3.0

    transition_timeout: int = 30
    start_log_file: Optional[str] = None
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, base: Optional["LxcPilotConfig"] = None) -> "LxcPilotConfig":
        """Create config from environment variables.

        Environment variables:
            LXCPILOT_CONTAINERS_PATH: Containers root directory
            LXCPILOT_TEMPLATES_PATH: Template directories, separated by ':'
            LXCPILOT_USE_SUDO: '0' to run privileged commands directly
            LXCPILOT_IP_ATTEMPTS: IP discovery attempts
            LXCPILOT_IP_RETRY_DELAY: Seconds between IP discovery attempts
            LXCPILOT_TRANSITION_TIMEOUT: lxc-wait timeout in seconds
            LXC_START_LOG_FILE: Log file for lxc-start
            LXCPILOT_LOG_FILE: lxcpilot log file for CLI runs

        Args:
            base: Values to fall back on for unset variables (defaults otherwise)

        Returns:
            LxcPilotConfig instance with values from environment or base
        """
        base = base or cls()

        templates = os.getenv("LXCPILOT_TEMPLATES_PATH")
        use_sudo = os.getenv("LXCPILOT_USE_SUDO")

        return cls(
            containers_path=os.getenv("LXCPILOT_CONTAINERS_PATH", base.containers_path),
            templates_lookup=(
                [p for p in templates.split(":") if p] if templates else list(base.templates_lookup)
            ),
            template_prefix=base.template_prefix,
            rootfs_key=base.rootfs_key,
            use_sudo=base.use_sudo if use_sudo is None else use_sudo not in ("0", "false", "no"),
            ip_attempts=int(os.getenv("LXCPILOT_IP_ATTEMPTS", base.ip_attempts)),
            ip_retry_delay=float(os.getenv("LXCPILOT_IP_RETRY_DELAY", base.ip_retry_delay)),
            transition_timeout=int(
                os.getenv("LXCPILOT_TRANSITION_TIMEOUT", base.transition_timeout)
            ),
            start_log_file=os.getenv("LXC_START_LOG_FILE") or base.start_log_file,
            log_file=os.getenv("LXCPILOT_LOG_FILE") or base.log_file,
        )

    @classmethod
    def from_file(cls, path: str) -> "LxcPilotConfig":
        """Load config from a YAML file, then apply environment overrides.

        Unknown keys are rejected so typos surface early.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            raw: Dict[str, Any] = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings in {config_path}: {', '.join(unknown)}"
            )

        return cls.from_env(base=cls(**raw))


# Global config instance (can be overridden)
_config: Optional[LxcPilotConfig] = None


def get_config() -> LxcPilotConfig:
    """Get the global lxcpilot configuration.

    Reads the YAML file named by LXCPILOT_CONFIG when set, otherwise the
    environment alone.

    Returns:
        LxcPilotConfig instance (created on first use)
    """
    global _config
    if _config is None:
        config_file = os.getenv("LXCPILOT_CONFIG")
        if config_file:
            _config = LxcPilotConfig.from_file(config_file)
        else:
            _config = LxcPilotConfig.from_env()
    return _config


def set_config(config: Optional[LxcPilotConfig]):
    """Set the global lxcpilot configuration.

    Args:
        config: LxcPilotConfig instance to use globally (None resets it)
    """
    global _config
    _config = config
