"""LXC container lifecycle driver (create, share, start, halt, destroy)."""
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from lxcpilot.core.config import LxcPilotConfig, get_config
from lxcpilot.core.errors import (
    ContainerNotFound,
    ExecuteError,
    SharedFolderCreateFailed,
)
from lxcpilot.core.logger import get_logger
from lxcpilot.core.retry import retry_call
from lxcpilot.models.container import (
    Customization,
    CustomizationList,
    LifecycleState,
    SharedFolder,
)
from .address import IpAddrStrategy
from .cli import LxcCli
from .executor import ProcessExecutor
from .paths import PathResolver

logger = get_logger(__name__)

FolderSpec = Union[SharedFolder, Mapping[str, str]]


class LxcDriver:
    """Drives the lifecycle of a single LXC container.

    This is the only entry point callers need. Filesystem facts come from
    the PathResolver, every state change goes through the LxcCli.

    Not thread safe: use one driver per container from one thread.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        cli: Optional[LxcCli] = None,
        executor: Optional[ProcessExecutor] = None,
        paths: Optional[PathResolver] = None,
        config: Optional[LxcPilotConfig] = None,
    ):
        self.config = config or get_config()
        self.executor = executor or ProcessExecutor(use_sudo=self.config.use_sudo)
        self.cli = cli or LxcCli(
            name,
            executor=self.executor,
            transition_timeout=self.config.transition_timeout,
        )
        self.paths = paths or PathResolver(
            containers_path=self.config.containers_path,
            templates_lookup=self.config.templates_lookup,
            rootfs_key=self.config.rootfs_key,
        )
        if name is not None:
            self.cli.name = name
        self.container_name = self.cli.name
        self.customizations = CustomizationList()

    def validate(self):
        """Ensure the configured container exists.

        Raises:
            ContainerNotFound: If a name is set and lxc-ls does not list it
        """
        if self.container_name and self.container_name not in self.cli.list():
            raise ContainerNotFound(self.container_name)

    def base_path(self) -> Path:
        return self.paths.base_path(self.container_name)

    def rootfs_path(self) -> Path:
        return self.paths.rootfs_path(self.container_name)

    def create(
        self,
        name: str,
        template_path: str,
        template_options: Optional[Dict[str, str]] = None,
    ):
        """Create a new container named ``name`` from a template script.

        The template is staged into the lxc templates directory for the
        duration of lxc-create and removed afterwards, even on failure.
        """
        self.container_name = name
        self.cli.name = name

        with self._import_template(template_path) as template_name:
            logger.debug("Creating container...")
            self.cli.create(template_name, template_options or {})

    @contextmanager
    def _import_template(self, path: str) -> Iterator[str]:
        template_name = f"{self.config.template_prefix}-{self.container_name}"
        tmp_template_path = self.paths.templates_path() / f"lxc-{template_name}"

        succeeded = False
        try:
            logger.debug("Copying LXC template into place")
            self.executor.run(["cp", str(path), str(tmp_template_path)], privileged=True)
            yield template_name
            succeeded = True
        finally:
            logger.debug(f"Removing staged template {tmp_template_path}")
            result = self.executor.run(
                ["rm", "-f", str(tmp_template_path)], privileged=True, check=False
            )
            # A cleanup failure must not hide the error that got us here
            if not result.ok:
                if succeeded:
                    raise ExecuteError(
                        result.command, result.exit_code, result.stdout, result.stderr
                    )
                logger.warning(
                    f"Failed to remove staged template {tmp_template_path}: "
                    f"{result.stderr.strip()}"
                )

    def share_folders(self, folders: Iterable[FolderSpec]):
        """Register bind mounts for host folders, applied on the next start.

        Missing guest directories are created inside the rootfs.

        Raises:
            SharedFolderCreateFailed: If a guest directory cannot be created
        """
        for folder in folders:
            folder = SharedFolder.coerce(folder)
            guestpath = self.rootfs_path() / folder.guestpath.lstrip("/")

            if not guestpath.is_dir():
                logger.debug(f"Guest path doesn't exist, creating: {guestpath}")
                try:
                    self.executor.run(["mkdir", "-p", str(guestpath)], privileged=True)
                except (PermissionError, ExecuteError) as e:
                    raise SharedFolderCreateFailed(str(guestpath)) from e

            self.customizations.add_bind_mount(folder.hostpath, str(guestpath))

    def start(self, customizations: Optional[Iterable[Customization]] = None):
        """Start the container and wait until it is running.

        Caller customizations come first, followed by every shared folder
        registered so far. Accumulated entries are kept, so a second start
        applies them again.

        LXC_START_LOG_FILE is read on every call and takes precedence over
        the configured start_log_file.
        """
        logger.info("Starting container...")

        log_file = os.getenv("LXC_START_LOG_FILE") or self.config.start_log_file
        extra: Optional[List[str]] = None
        if log_file:
            extra = ["-o", log_file, "-l", "DEBUG"]

        merged = [Customization(*item) for item in (customizations or [])]
        merged.extend(self.customizations)

        self.cli.transition_to(
            LifecycleState.RUNNING,
            lambda cli: cli.start(merged, extra),
        )

    def halt(self):
        """Shut the container down gracefully and wait until it is stopped."""
        logger.info("Shutting down container...")

        # TODO: issue lxc-stop once a shutdown timeout is reached
        self.cli.transition_to(LifecycleState.STOPPED, lambda cli: cli.shutdown())

    def destroy(self):
        self.cli.destroy()

    def state(self) -> Optional[LifecycleState]:
        """Current container state, or None when no container is set."""
        if self.container_name:
            return self.cli.state()
        return None

    def assigned_ip(self) -> str:
        """Return the container's IPv4 address, waiting for DHCP if needed.

        Raises:
            ExecuteError: If no address shows up within the allowed attempts
        """
        strategy = IpAddrStrategy(self.cli)

        ip = retry_call(
            strategy.resolve,
            max_attempts=self.config.ip_attempts,
            delay=self.config.ip_retry_delay,
            exceptions=(ExecuteError,),
            retry_if=lambda value: value is None,
            name="assigned_ip",
        )
        if ip is None:
            raise ExecuteError(
                ["lxc-attach", *strategy.command],
                message=f"No IP address assigned to container {self.container_name}",
            )
        return ip

    def compress_rootfs(self) -> str:
        """Archive the rootfs into a gzip tarball owned by the current user.

        Returns:
            Path of the tarball, inside a fresh temporary directory

        The temporary directory is removed again if archiving fails.
        """
        rootfs_path = self.rootfs_path()
        tmp_dir = tempfile.mkdtemp()
        target_path = os.path.join(tmp_dir, "rootfs.tar.gz")

        logger.info(f"Compressing '{rootfs_path}' rootfs to {target_path}")
        try:
            self._archive_rootfs(rootfs_path, target_path)
        except (ExecuteError, OSError):
            logger.debug(f"Removing {tmp_dir} after failed archive")
            self.executor.run(["rm", "-rf", tmp_dir], privileged=True, check=False)
            raise

        return target_path

    def _archive_rootfs(self, rootfs_path: Path, target_path: str):
        self.executor.run(
            ["rm", "-f", str(self.base_path() / "rootfs.tar.gz")],
            privileged=True,
        )
        self.executor.run(
            [
                "tar", "--numeric-owner", "-czf", target_path,
                "-C", str(rootfs_path.parent), rootfs_path.name,
            ],
            privileged=True,
        )

        logger.info("Changing rootfs tarball owner")
        self.executor.run(
            ["chown", f"{os.getuid()}:{os.getgid()}", target_path],
            privileged=True,
        )

