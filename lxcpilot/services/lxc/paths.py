"""Filesystem locations of LXC containers and templates."""
import re
from pathlib import Path
from typing import List, Optional, Sequence

from lxcpilot.core.config import DEFAULT_TEMPLATES_LOOKUP
from lxcpilot.core.errors import ConfigurationError, RootfsNotConfigured, TemplatesPathNotFound
from lxcpilot.core.logger import get_logger

logger = get_logger(__name__)


class PathResolver:
    """Derives container paths from the containers root and config files."""

    def __init__(
        self,
        containers_path: str = "/var/lib/lxc",
        templates_lookup: Optional[Sequence[str]] = None,
        rootfs_key: str = "lxc.rootfs",
    ):
        self.containers_path = Path(containers_path)
        self.templates_lookup: List[str] = list(
            templates_lookup if templates_lookup is not None else DEFAULT_TEMPLATES_LOOKUP
        )
        self.rootfs_key = rootfs_key
        self._rootfs_pattern = re.compile(
            rf"^{re.escape(rootfs_key)}\s*=\s*(.+)$", re.MULTILINE
        )
        self._templates_path: Optional[Path] = None

    def base_path(self, name: str) -> Path:
        """Directory holding the container's config and rootfs."""
        return self.containers_path / name

    def config_path(self, name: str) -> Path:
        return self.base_path(name) / "config"

    def rootfs_path(self, name: str) -> Path:
        """Read the rootfs location from the container config.

        The config is re-read on every call.

        Raises:
            ConfigurationError: If the config file cannot be read
            RootfsNotConfigured: If no rootfs line is present
        """
        config_path = self.config_path(name)
        try:
            content = config_path.read_text()
        except OSError as e:
            raise ConfigurationError(f"Unable to read container config {config_path}: {e}") from e

        match = self._rootfs_pattern.search(content)
        if not match:
            raise RootfsNotConfigured(config_path, self.rootfs_key)

        return Path(match.group(1).strip())

    def templates_path(self) -> Path:
        """Return the first existing template directory.

        Probed once per resolver; later calls return the cached result.

        Raises:
            TemplatesPathNotFound: If no candidate directory exists
        """
        if self._templates_path is not None:
            return self._templates_path

        for candidate in self.templates_lookup:
            if Path(candidate).is_dir():
                logger.debug(f"Using lxc templates path {candidate}")
                self._templates_path = Path(candidate)
                return self._templates_path

        raise TemplatesPathNotFound(self.templates_lookup)
