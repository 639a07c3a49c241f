"""Thin wrapper around the lxc-* command line tools."""
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from lxcpilot.core.errors import ContainerNameMissing, StateTransitionError
from lxcpilot.core.logger import get_logger
from lxcpilot.models.container import Customization, LifecycleState
from .executor import ProcessExecutor

logger = get_logger(__name__)

STATE_PATTERN = re.compile(r"^state:[^A-Z]+([A-Z]+)\s*$", re.MULTILINE)
VERSION_PATTERN = re.compile(r"^lxc version:\s+(\S+)", re.MULTILINE)


class LxcCli:
    """Translates lifecycle intents into lxc-* invocations for one container.

    Every lxc-* command is run privileged through the executor.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        executor: Optional[ProcessExecutor] = None,
        transition_timeout: int = 30,
    ):
        self.name = name
        self.executor = executor or ProcessExecutor()
        self.transition_timeout = transition_timeout

    def run(self, command: str, *args: str) -> str:
        """Run ``lxc-<command>`` with args and return its stdout."""
        result = self.executor.run([f"lxc-{command}", *args], privileged=True)
        return result.stdout

    def _require_name(self, operation: str) -> str:
        if not self.name:
            raise ContainerNameMissing(operation)
        return self.name

    def list(self) -> Set[str]:
        """Return the names of all containers known to lxc."""
        return set(self.run("ls").split())

    def version(self) -> str:
        """Return the installed lxc version."""
        output = self.run("version")
        match = VERSION_PATTERN.search(output)
        return match.group(1) if match else output.strip()

    def state(self) -> LifecycleState:
        """Query the container state from lxc-info.

        Returns:
            NOT_CREATED if the container is not listed, the parsed state
            otherwise, UNKNOWN when lxc-info output carries no state line.
        """
        name = self._require_name("info")
        if name not in self.list():
            return LifecycleState.NOT_CREATED

        output = self.run("info", "--name", name)
        match = STATE_PATTERN.search(output)
        if not match:
            logger.debug(f"No state in lxc-info output for {name}: {output!r}")
            return LifecycleState.UNKNOWN
        return LifecycleState.parse(match.group(1))

    def create(self, template: str, template_options: Optional[Dict[str, str]] = None):
        """Create the container from an installed template.

        Args:
            template: Template name (without the lxc- prefix)
            template_options: Options forwarded to the template script
        """
        name = self._require_name("create")

        extra: List[str] = []
        for key, value in (template_options or {}).items():
            extra.extend([str(key), str(value)])
        if extra:
            extra.insert(0, "--")

        logger.info(f"Creating container {name} from template {template}")
        self.run("create", "--template", template, "--name", name, *extra)

    def start(
        self,
        customizations: Iterable[Customization] = (),
        extra_options: Optional[Sequence[str]] = None,
    ):
        """Start the container in the background.

        Args:
            customizations: key/value pairs passed as ``-s key=value``
            extra_options: Additional lxc-start flags (e.g. logging)
        """
        name = self._require_name("start")

        options: List[str] = list(extra_options or [])
        for item in customizations:
            options.extend(["-s", Customization(*item).as_option()])

        self.run("start", "-d", "--name", name, *options)

    def shutdown(self):
        """Ask the container to shut down gracefully."""
        self.run("shutdown", "--name", self._require_name("shutdown"))

    def destroy(self):
        """Remove the container and its root filesystem."""
        name = self._require_name("destroy")
        logger.info(f"Destroying container {name}")
        self.run("destroy", "--name", name)

    def attach(self, *cmd: str, namespaces: Optional[str] = None) -> str:
        """Run a command inside the container and return its stdout.

        Args:
            cmd: Program and arguments to run in the container
            namespaces: Namespaces to enter (e.g. 'NETWORK'); all when omitted
        """
        name = self._require_name("attach")

        args = ["--name", name]
        if namespaces:
            args.extend(["--namespaces", namespaces.upper()])
        args.append("--")
        args.extend(cmd)

        return self.run("attach", *args)

    def transition_to(
        self,
        target: LifecycleState,
        action: Callable[["LxcCli"], None],
    ) -> LifecycleState:
        """Run ``action`` and wait for the container to reach ``target``.

        Raises:
            StateTransitionError: If the state after lxc-wait is not target
        """
        name = self._require_name("wait")

        action(self)
        self.run(
            "wait",
            "--name", name,
            "--state", target.lxc_name,
            "--timeout", str(self.transition_timeout),
        )

        current = self.state()
        if current != target:
            raise StateTransitionError(name, target, current)

        logger.debug(f"Container {name} is {current.value}")
        return current
